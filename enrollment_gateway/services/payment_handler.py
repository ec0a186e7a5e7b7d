"""Enrollment payment handler - validates, prices, charges or invoices, records and notifies"""

import hashlib
import logging
from datetime import date, datetime, timezone
from typing import Any, Callable

from enrollment_gateway.config import settings
from enrollment_gateway.domain.enrollment import (
    PAYABLE_STATUSES,
    already_paid_message,
    capture_transition,
    ensure_payable,
    invoice_transition,
)
from enrollment_gateway.domain.exceptions import (
    ConflictError,
    GatewayDeclinedError,
    NotFoundError,
    NotificationError,
    ReconciliationRequiredError,
    StoreError,
)
from enrollment_gateway.domain.models import (
    ChargeResult,
    PaymentMethod,
    PaymentOutcome,
    PaymentRequest,
    PricingQuote,
    TierCatalog,
)
from enrollment_gateway.domain.pricing import quote as price_quote
from enrollment_gateway.domain.validation import is_honeypot_filled, unwrap_payload, validate_payment_request
from enrollment_gateway.infrastructure.clients.payment_gateway import StripePaymentGateway
from enrollment_gateway.infrastructure.database.repositories import EnrollmentStore
from enrollment_gateway.infrastructure.observability.logging import log_reconciliation_required
from enrollment_gateway.infrastructure.observability.metrics import (
    gateway_decline_counter,
    notification_failure_counter,
    reconciliation_required_counter,
    record_enrollment,
)
from enrollment_gateway.services.notifications import INVOICE_REQUEST, PAYMENT_CONFIRMATION, EnrollmentNotifier

PAYMENT_SUCCESS_MESSAGE = "Payment successful! Check your email for enrollment confirmation."
INVOICE_SUCCESS_MESSAGE = "Invoice sent! Check your inbox (it should arrive within a few minutes)."


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def capture_idempotency_key(program_id: str, request: PaymentRequest, amount_cents: int) -> str:
    """Same applicant, card token and amount always map to the same gateway charge"""
    raw = f"{program_id}:{request.applicant}:{request.payment_method_id}:{amount_cents}"
    return "enroll-" + hashlib.sha256(raw.encode("utf-8")).hexdigest()[:40]


def charge_description(program_name: str, request: PaymentRequest) -> str:
    parts = [f"{program_name} - {request.tier.name} tier"]
    if request.additional_seats > 0:
        parts.append(f"{request.additional_seats} additional seats")
    if request.support_hours > 0:
        parts.append(f"{request.support_hours} support hours")
    return " + ".join(parts)


class EnrollmentPaymentHandler:
    """
    Processes one payment or invoice submission start to finish.

    Flow:
    1. Honeypot check (silently accept spam)
    2. Validate fields and compute the quote
    3. Load the application and reject if already paid
    4. Capture the card (credit-card) or skip straight to recording (invoice)
    5. Conditionally write application + enrollment in one transaction
    6. Send the confirmation email; failures here are logged, not returned
    """

    def __init__(
        self,
        store: EnrollmentStore,
        gateway: StripePaymentGateway,
        notifier: EnrollmentNotifier,
        catalog: TierCatalog,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.gateway = gateway
        self.notifier = notifier
        self.catalog = catalog
        self.clock = clock

    def submit(self, body: Any, request_id: str = "unknown") -> PaymentOutcome:
        """
        Handle a raw request body.

        Raises:
            ValidationError, NotFoundError, ConflictError: Before any mutating call
            GatewayDeclinedError: Charge not completed; nothing written
            ReconciliationRequiredError: Charge captured but not recorded
            StoreError: State store unavailable
        """
        payload = unwrap_payload(body)

        if is_honeypot_filled(payload):
            applicant = str(payload.get("applicant") or "unknown").strip().lower()
            logging.info(f"Spam detected from {applicant} - honeypot field filled", extra={"request_id": request_id})
            return PaymentOutcome(message=PAYMENT_SUCCESS_MESSAGE, enrolled=True, applicant=applicant)

        request = validate_payment_request(payload, self.catalog)
        quote = price_quote(
            request.tier,
            request.additional_seats,
            request.support_hours,
            self.catalog.support_hourly_rate_cents or 0,
        )
        logging.info(
            f"Processing {request.payment_method.value} for {request.applicant}: "
            f"tier {request.tier.key}, {request.additional_seats} seats, "
            f"{request.support_hours} support hours, total {quote.total_cents} cents",
            extra={"request_id": request_id},
        )

        application = self.store.get_application(request.applicant)
        if application is None:
            raise NotFoundError("Application not found. Please apply first.")
        ensure_payable(application, settings.support_email)

        if request.payment_method is PaymentMethod.CREDIT_CARD:
            return self._capture(request, quote, request_id)
        return self._request_invoice(request, quote, request_id)

    def _capture(self, request: PaymentRequest, quote: PricingQuote, request_id: str) -> PaymentOutcome:
        try:
            charge = self.gateway.charge(
                amount_cents=quote.total_cents,
                payment_token=request.payment_method_id,
                metadata={
                    "applicant": request.applicant,
                    "program": settings.program_id,
                    "tier": request.tier.key,
                    "additionalSeats": str(request.additional_seats),
                    "addonSupportHours": str(request.support_hours),
                    "company": request.company,
                },
                description=charge_description(settings.program_name, request),
                idempotency_key=capture_idempotency_key(settings.program_id, request, quote.total_cents),
            )
        except GatewayDeclinedError:
            gateway_decline_counter.labels(status="error").inc()
            record_enrollment(PaymentMethod.CREDIT_CARD.value, "declined")
            raise

        if not charge.succeeded:
            gateway_decline_counter.labels(status=charge.status).inc()
            record_enrollment(PaymentMethod.CREDIT_CARD.value, "declined")
            raise GatewayDeclinedError(
                "Payment could not be completed.",
                status=charge.status,
                requires_action=charge.status == "requires_action",
            )

        now = self.clock()
        transition = capture_transition(request, quote, charge.reference, now, settings.base_seats)
        try:
            written = self.store.apply_transition(request.applicant, transition, PAYABLE_STATUSES)
            current = None if written else self.store.get_application(request.applicant)
        except StoreError as e:
            raise self._reconciliation(request, charge, request_id, f"store write failed: {e.__cause__ or e}") from e

        if not written:
            if current is not None and current.payment_reference == charge.reference:
                # Duplicate submission of the same charge already recorded it
                raise ConflictError(already_paid_message(current, settings.support_email))
            raise self._reconciliation(request, charge, request_id, "application was paid concurrently")

        record_enrollment(PaymentMethod.CREDIT_CARD.value, "enrolled", quote.total_cents)
        self._notify(PAYMENT_CONFIRMATION, self.notifier.send_payment_confirmation, request, quote, now.date(), request_id)

        return PaymentOutcome(
            message=PAYMENT_SUCCESS_MESSAGE,
            enrolled=True,
            payment_reference=charge.reference,
            applicant=request.applicant,
            payment_method=PaymentMethod.CREDIT_CARD.value,
            outcome="enrolled",
            total_cents=quote.total_cents,
        )

    def _request_invoice(self, request: PaymentRequest, quote: PricingQuote, request_id: str) -> PaymentOutcome:
        now = self.clock()
        transition = invoice_transition(request, quote, now, settings.base_seats)
        if not self.store.apply_transition(request.applicant, transition, PAYABLE_STATUSES):
            current = self.store.get_application(request.applicant)
            if current is None:
                raise NotFoundError("Application not found. Please apply first.")
            raise ConflictError(already_paid_message(current, settings.support_email))

        record_enrollment(PaymentMethod.INVOICE.value, "pending", quote.total_cents)
        self._notify(INVOICE_REQUEST, self.notifier.send_invoice_request, request, quote, now.date(), request_id)

        return PaymentOutcome(
            message=INVOICE_SUCCESS_MESSAGE,
            enrolled=False,
            pending_payment=True,
            applicant=request.applicant,
            payment_method=PaymentMethod.INVOICE.value,
            outcome="pending",
            total_cents=quote.total_cents,
        )

    def _notify(
        self,
        kind: str,
        send: Callable[[PaymentRequest, PricingQuote, date], str],
        request: PaymentRequest,
        quote: PricingQuote,
        today: date,
        request_id: str,
    ) -> None:
        """Send the email; the enrollment is already committed so failures are only reported"""
        try:
            send(request, quote, today)
        except NotificationError as e:
            notification_failure_counter.labels(kind=kind).inc()
            logging.error(
                f"Notification failed after enrollment was recorded: {e}",
                extra={"request_id": request_id, "applicant": request.applicant, "kind": kind},
            )

    def _reconciliation(
        self,
        request: PaymentRequest,
        charge: ChargeResult,
        request_id: str,
        reason: str,
    ) -> ReconciliationRequiredError:
        reconciliation_required_counter.inc()
        log_reconciliation_required(request_id, request.applicant, charge.reference, reason)
        return ReconciliationRequiredError(
            "Your payment was received but your enrollment could not be recorded. "
            f"Contact {settings.support_email} with payment reference {charge.reference}.",
            payment_reference=charge.reference,
            applicant=request.applicant,
        )

"""Enrollment state machine

Application payment status moves unset -> pending (invoice requested) or
unset/pending -> paid (card captured). paid is terminal.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict

from enrollment_gateway.domain.exceptions import ConflictError
from enrollment_gateway.domain.models import (
    Application,
    EnrollmentPaymentStatus,
    EnrollmentRecord,
    PaymentMethod,
    PaymentRequest,
    PaymentStatus,
    PricingQuote,
)

PAYABLE_STATUSES = (PaymentStatus.UNSET, PaymentStatus.PENDING)


@dataclass
class Transition:
    """Store writes for one accepted request"""

    application_attributes: Dict[str, Any]
    enrollment: EnrollmentRecord


def format_us_date(value: datetime) -> str:
    return f"{value.month}/{value.day}/{value.year}"


def already_paid_message(application: Application, support_email: str) -> str:
    who = application.company or "this application"
    enrolled_on = format_us_date(application.paid_at) if application.paid_at else "an earlier date"
    return (
        f"Payment already completed for {who} ({application.email}). "
        f"You enrolled on {enrolled_on}. "
        f"Contact {support_email} if you need assistance."
    )


def ensure_payable(application: Application, support_email: str) -> None:
    """
    Reject any submission for an application that is already paid.

    Raises:
        ConflictError: With the prior enrollment date and support contact
    """
    if application.payment_status not in PAYABLE_STATUSES:
        raise ConflictError(already_paid_message(application, support_email))


def _contact_attributes(request: PaymentRequest, quote: PricingQuote) -> Dict[str, Any]:
    return {
        "payment_method": request.payment_method.value,
        "payment_amount_cents": quote.total_cents,
        "final_fee_cents": quote.tier_base_cents,
        "tier": request.tier.key,
        "additional_seats": request.additional_seats,
        "support_hours": request.support_hours,
        "company": request.company,
        "job_title": request.job_title,
        "phone": request.phone,
        "country": request.country,
    }


def _enrollment(
    request: PaymentRequest,
    quote: PricingQuote,
    now: datetime,
    base_seats: int,
    payment_status: EnrollmentPaymentStatus,
    amount_paid_cents: int,
    payment_plan: str | None,
    payment_reference: str | None,
) -> EnrollmentRecord:
    return EnrollmentRecord(
        email=request.applicant,
        name=request.name,
        company=request.company,
        job_title=request.job_title,
        phone=request.phone,
        country=request.country,
        tier=request.tier.key,
        payment_status=payment_status,
        payment_method=request.payment_method,
        amount_paid_cents=amount_paid_cents,
        total_amount_cents=quote.total_cents,
        base_seats=base_seats,
        additional_seats=request.additional_seats,
        support_hours=request.support_hours,
        enrolled_at=now,
        payment_plan=payment_plan,
        payment_reference=payment_reference,
    )


def capture_transition(
    request: PaymentRequest,
    quote: PricingQuote,
    payment_reference: str,
    now: datetime,
    base_seats: int = 10,
) -> Transition:
    """Application -> paid, enrollment complete with the full amount paid"""
    attributes = _contact_attributes(request, quote)
    attributes.update(
        payment_status=PaymentStatus.PAID.value,
        payment_method=PaymentMethod.CREDIT_CARD.value,
        payment_reference=payment_reference,
        paid_at=now,
        enrolled=True,
    )
    return Transition(
        application_attributes=attributes,
        enrollment=_enrollment(
            request,
            quote,
            now,
            base_seats,
            payment_status=EnrollmentPaymentStatus.COMPLETE,
            amount_paid_cents=quote.total_cents,
            payment_plan="full",
            payment_reference=payment_reference,
        ),
    )


def invoice_transition(
    request: PaymentRequest,
    quote: PricingQuote,
    now: datetime,
    base_seats: int = 10,
) -> Transition:
    """Application -> pending, enrollment pending with nothing paid yet"""
    attributes = _contact_attributes(request, quote)
    attributes.update(
        payment_status=PaymentStatus.PENDING.value,
        payment_method=PaymentMethod.INVOICE.value,
        invoice_requested_at=now,
        enrolled=False,
    )
    return Transition(
        application_attributes=attributes,
        enrollment=_enrollment(
            request,
            quote,
            now,
            base_seats,
            payment_status=EnrollmentPaymentStatus.PENDING,
            amount_paid_cents=0,
            payment_plan=None,
            payment_reference=None,
        ),
    )

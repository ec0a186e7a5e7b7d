"""Unit tests for the payment handler flow with fake collaborators"""

import pytest
from datetime import datetime, timezone
from unittest.mock import MagicMock
from enrollment_gateway.domain.exceptions import (
    ConflictError,
    GatewayDeclinedError,
    NotFoundError,
    NotificationError,
    ReconciliationRequiredError,
    StoreError,
    ValidationError,
)
from enrollment_gateway.domain.models import Application, ChargeResult, PaymentStatus
from enrollment_gateway.infrastructure.clients.payment_gateway import StripePaymentGateway
from enrollment_gateway.infrastructure.database.repositories import EnrollmentStore
from enrollment_gateway.services.notifications import EnrollmentNotifier
from enrollment_gateway.services.payment_handler import (
    PAYMENT_SUCCESS_MESSAGE,
    EnrollmentPaymentHandler,
    capture_idempotency_key,
    charge_description,
)

NOW = datetime(2026, 2, 3, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def store() -> MagicMock:
    store = MagicMock(spec=EnrollmentStore)
    store.get_application.return_value = Application(email="costa@trollhair.com", name="Costa Michailidis")
    store.apply_transition.return_value = True
    return store


@pytest.fixture
def gateway() -> MagicMock:
    gateway = MagicMock(spec=StripePaymentGateway)
    gateway.charge.return_value = ChargeResult(status="succeeded", reference="pi_new")
    return gateway


@pytest.fixture
def notifier() -> MagicMock:
    return MagicMock(spec=EnrollmentNotifier)


@pytest.fixture
def handler(store, gateway, notifier, fee_catalog) -> EnrollmentPaymentHandler:
    return EnrollmentPaymentHandler(store, gateway, notifier, fee_catalog, clock=lambda: NOW)


def test_idempotency_key_is_stable(payment_request):
    first = capture_idempotency_key("ai-accelerator", payment_request, 2_025_000)
    assert first == capture_idempotency_key("ai-accelerator", payment_request, 2_025_000)
    assert first != capture_idempotency_key("ai-accelerator", payment_request, 1_350_000)
    assert first.startswith("enroll-")


def test_charge_description(payment_request):
    assert charge_description("2026 AI Accelerator", payment_request) == (
        "2026 AI Accelerator - $13,500 tier + 5 additional seats"
    )


def test_capture_success(handler, store, gateway, notifier, payment_payload):
    """Test charge, conditional write and confirmation in order"""
    outcome = handler.submit(payment_payload)

    assert outcome.to_body() == {
        "success": True,
        "message": PAYMENT_SUCCESS_MESSAGE,
        "enrolled": True,
        "paymentId": "pi_new",
    }
    assert gateway.charge.call_args.kwargs["amount_cents"] == 2_025_000
    email, transition, expected = store.apply_transition.call_args.args
    assert email == "costa@trollhair.com"
    assert transition.application_attributes["payment_reference"] == "pi_new"
    assert set(expected) == {PaymentStatus.UNSET, PaymentStatus.PENDING}
    notifier.send_payment_confirmation.assert_called_once()
    assert notifier.send_payment_confirmation.call_args.args[2] == NOW.date()


def test_validation_happens_before_any_lookup(handler, store, gateway, payment_payload):
    payment_payload["payment"]["tier"] = "$10,000"

    with pytest.raises(ValidationError):
        handler.submit(payment_payload)

    store.get_application.assert_not_called()
    gateway.charge.assert_not_called()


def test_missing_application(handler, store, gateway, payment_payload):
    store.get_application.return_value = None

    with pytest.raises(NotFoundError):
        handler.submit(payment_payload)

    gateway.charge.assert_not_called()


def test_honeypot_short_circuits(handler, store, gateway, notifier, payment_payload):
    payment_payload["payment"]["mobile"] = "555-0100"

    outcome = handler.submit(payment_payload)

    assert outcome.enrolled is True
    assert "paymentId" not in outcome.to_body()
    store.get_application.assert_not_called()
    gateway.charge.assert_not_called()
    notifier.send_payment_confirmation.assert_not_called()


def test_incomplete_charge_writes_nothing(handler, store, gateway, payment_payload):
    gateway.charge.return_value = ChargeResult(status="requires_action", reference="pi_3ds")

    with pytest.raises(GatewayDeclinedError) as exc_info:
        handler.submit(payment_payload)

    assert exc_info.value.requires_action is True
    assert exc_info.value.to_body()["status"] == "requires_action"
    store.apply_transition.assert_not_called()


def test_declined_charge_propagates(handler, store, gateway, payment_payload):
    gateway.charge.side_effect = GatewayDeclinedError("Payment declined: Your card was declined.")

    with pytest.raises(GatewayDeclinedError):
        handler.submit(payment_payload)

    store.apply_transition.assert_not_called()


def test_store_failure_after_capture_requires_reconciliation(handler, store, notifier, payment_payload):
    store.apply_transition.side_effect = StoreError("Enrollment state write failed")

    with pytest.raises(ReconciliationRequiredError) as exc_info:
        handler.submit(payment_payload)

    assert exc_info.value.payment_reference == "pi_new"
    assert exc_info.value.to_body()["paymentId"] == "pi_new"
    assert exc_info.value.status_code == 500
    notifier.send_payment_confirmation.assert_not_called()


def test_lost_race_with_same_charge_is_conflict(handler, store, payment_payload):
    """Test a duplicate submission that Stripe deduplicated to the same intent"""
    store.apply_transition.return_value = False
    store.get_application.side_effect = [
        Application(email="costa@trollhair.com", name="Costa Michailidis"),
        Application(
            email="costa@trollhair.com",
            name="Costa Michailidis",
            payment_status=PaymentStatus.PAID,
            payment_reference="pi_new",
            paid_at=NOW,
        ),
    ]

    with pytest.raises(ConflictError):
        handler.submit(payment_payload)


def test_lost_race_with_other_charge_requires_reconciliation(handler, store, payment_payload):
    store.apply_transition.return_value = False
    store.get_application.side_effect = [
        Application(email="costa@trollhair.com", name="Costa Michailidis"),
        Application(
            email="costa@trollhair.com",
            name="Costa Michailidis",
            payment_status=PaymentStatus.PAID,
            payment_reference="pi_other",
            paid_at=NOW,
        ),
    ]

    with pytest.raises(ReconciliationRequiredError):
        handler.submit(payment_payload)


def test_notification_failure_does_not_fail_enrollment(handler, notifier, payment_payload):
    notifier.send_payment_confirmation.side_effect = NotificationError("smtp down")

    outcome = handler.submit(payment_payload)

    assert outcome.enrolled is True
    assert outcome.payment_reference == "pi_new"


def test_invoice_request(handler, store, gateway, notifier, invoice_payload):
    outcome = handler.submit(invoice_payload)

    assert outcome.to_body()["pendingPayment"] is True
    assert outcome.enrolled is False
    assert outcome.total_cents == 2_520_000
    gateway.charge.assert_not_called()
    notifier.send_invoice_request.assert_called_once()


def test_invoice_lost_race_is_conflict(handler, store, notifier, invoice_payload):
    store.apply_transition.return_value = False
    store.get_application.side_effect = [
        Application(email="costa@trollhair.com", name="Costa Michailidis"),
        Application(
            email="costa@trollhair.com",
            name="Costa Michailidis",
            payment_status=PaymentStatus.PAID,
            paid_at=NOW,
        ),
    ]

    with pytest.raises(ConflictError):
        handler.submit(invoice_payload)

    notifier.send_invoice_request.assert_not_called()


def test_paid_application_rejected_before_charge(handler, store, gateway, payment_payload):
    store.get_application.return_value = Application(
        email="costa@trollhair.com",
        name="Costa Michailidis",
        payment_status=PaymentStatus.PAID,
        paid_at=NOW,
    )

    with pytest.raises(ConflictError):
        handler.submit(payment_payload)

    gateway.charge.assert_not_called()

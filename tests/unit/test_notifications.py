"""Unit tests for confirmation and invoice emails"""

import pytest
from datetime import date
from unittest.mock import MagicMock
from enrollment_gateway.config import settings
from enrollment_gateway.domain.exceptions import NotificationError
from enrollment_gateway.domain.models import InvoiceStatus, PaymentMethod
from enrollment_gateway.domain.pricing import quote
from enrollment_gateway.infrastructure.clients.mail import MailClient
from enrollment_gateway.infrastructure.database.repositories import EnrollmentStore
from enrollment_gateway.infrastructure.documents.invoice_pdf import InvoiceRenderer
from enrollment_gateway.infrastructure.documents.templates import TemplateStore
from enrollment_gateway.services.notifications import (
    EnrollmentNotifier,
    build_message,
    invoice_filename,
    template_values,
)


@pytest.fixture
def store() -> MagicMock:
    store = MagicMock(spec=EnrollmentStore)
    store.increment_counter.return_value = 5000
    return store


@pytest.fixture
def mail_client() -> MagicMock:
    return MagicMock(spec=MailClient)


@pytest.fixture
def notifier(store, mail_client, fee_catalog) -> EnrollmentNotifier:
    return EnrollmentNotifier(
        store=store,
        renderer=InvoiceRenderer(),
        templates=TemplateStore(),
        mail_client=mail_client,
        catalog=fee_catalog,
    )


def sent_message(mail_client: MagicMock):
    mail_client.send.assert_called_once()
    return mail_client.send.call_args.args[0]


def test_invoice_filename():
    assert invoice_filename("ACC-5000", InvoiceStatus.PAID) == "Invoice-ACC-5000-PAID.pdf"
    assert invoice_filename("ACC-5001", InvoiceStatus.DUE) == "Invoice-ACC-5001.pdf"


def test_template_values(payment_request):
    """Test precomputed values for scenario A"""
    values = template_values(payment_request, quote(payment_request.tier, 5), "payment-confirmation")

    assert values["totalAmount"] == "$20,250"
    assert values["totalSeats"] == 15
    assert values["tier"] == "$13,500"
    assert "edition=payment-confirmation" in values["tracking"]
    assert values["emailSettings"].endswith("email=costa%40trollhair.com")


def test_build_message_headers_and_attachment():
    message = build_message(
        to="costa@trollhair.com",
        subject="Hello",
        html="<p>Hi</p>",
        text="Hi",
        attachment=b"%PDF-1.4 test",
        filename="Invoice-ACC-5000-PAID.pdf",
        cc="accounting@example.com",
    )

    assert message["To"] == "costa@trollhair.com"
    assert message["Cc"] == "accounting@example.com"
    assert message["Reply-To"] == settings.mail_from
    assert message["List-Unsubscribe"].startswith("<")
    attachments = list(message.iter_attachments())
    assert len(attachments) == 1
    assert attachments[0].get_filename() == "Invoice-ACC-5000-PAID.pdf"
    assert attachments[0].get_content_type() == "application/pdf"
    assert attachments[0].get_content() == b"%PDF-1.4 test"


def test_payment_confirmation(notifier, store, mail_client, payment_request):
    """Test PAID invoice numbered from the counter and attached"""
    invoice_number = notifier.send_payment_confirmation(payment_request, quote(payment_request.tier, 5), date(2026, 2, 3))

    assert invoice_number == "ACC-5000"
    store.increment_counter.assert_called_once_with(settings.invoice_counter_key)

    message = sent_message(mail_client)
    assert message["Subject"] == f"🎉 Welcome To The {settings.program_name}!"
    assert message["Cc"] is None
    attachment = next(message.iter_attachments())
    assert attachment.get_filename() == "Invoice-ACC-5000-PAID.pdf"
    assert attachment.get_content().startswith(b"%PDF")

    text = message.get_body(preferencelist=("plain",)).get_content()
    assert "Costa Michailidis" in text
    assert "$20,250" in text
    assert "{{" not in text


def test_invoice_request_copies_accounting(notifier, mail_client, payment_request):
    payment_request.payment_method = PaymentMethod.INVOICE
    payment_request.tier = notifier.catalog.get("$21,000")
    payment_request.additional_seats = 2

    invoice_number = notifier.send_invoice_request(payment_request, quote(payment_request.tier, 2), date(2026, 2, 3))

    message = sent_message(mail_client)
    assert message["Subject"] == f"📄 Invoice Request for {settings.program_name}"
    assert message["Cc"] == settings.accounting_email
    assert next(message.iter_attachments()).get_filename() == f"Invoice-{invoice_number}.pdf"
    html = message.get_body(preferencelist=("html",)).get_content()
    assert "$25,200" in html


def test_applicant_fields_escaped_in_html_only(notifier, mail_client, payment_request):
    payment_request.company = "<script>alert(1)</script> & Co"

    notifier.send_payment_confirmation(payment_request, quote(payment_request.tier, 5), date(2026, 2, 3))

    message = sent_message(mail_client)
    html = message.get_body(preferencelist=("html",)).get_content()
    text = message.get_body(preferencelist=("plain",)).get_content()
    assert "&lt;script&gt;alert(1)&lt;/script&gt; &amp; Co" in html
    assert "<script>" not in html
    assert "<script>alert(1)</script> & Co" in text


def test_mail_failure_raises_notification_error(notifier, mail_client, payment_request):
    mail_client.send.side_effect = OSError("connection refused")

    with pytest.raises(NotificationError) as exc_info:
        notifier.send_payment_confirmation(payment_request, quote(payment_request.tier, 5), date(2026, 2, 3))

    assert isinstance(exc_info.value.__cause__, OSError)

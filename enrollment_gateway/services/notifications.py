"""Confirmation emails with an attached invoice PDF"""

import logging
from datetime import date
from email.message import EmailMessage
from email.utils import parseaddr
from urllib.parse import quote as url_quote, urlencode

from enrollment_gateway.config import settings
from enrollment_gateway.domain.exceptions import NotificationError
from enrollment_gateway.domain.invoicing import build_invoice_document, format_invoice_number
from enrollment_gateway.domain.models import InvoiceStatus, PaymentRequest, PricingQuote, TierCatalog
from enrollment_gateway.infrastructure.clients.mail import MailClient
from enrollment_gateway.infrastructure.database.repositories import EnrollmentStore
from enrollment_gateway.infrastructure.documents.invoice_pdf import InvoiceRenderer
from enrollment_gateway.infrastructure.documents.templates import TemplateStore, escape_values, render_template
from enrollment_gateway.utils.money import format_usd

PAYMENT_CONFIRMATION = "payment-confirmation"
INVOICE_REQUEST = "invoice-request"


class EnrollmentNotifier:
    """Builds and sends the "payment confirmed" and "invoice requested" emails"""

    def __init__(
        self,
        store: EnrollmentStore,
        renderer: InvoiceRenderer,
        templates: TemplateStore,
        mail_client: MailClient,
        catalog: TierCatalog,
    ):
        self.store = store
        self.renderer = renderer
        self.templates = templates
        self.mail_client = mail_client
        self.catalog = catalog

    def send_payment_confirmation(self, request: PaymentRequest, quote: PricingQuote, today: date) -> str:
        """Email the applicant a PAID invoice. Returns the invoice number."""
        return self._send(
            edition=PAYMENT_CONFIRMATION,
            status=InvoiceStatus.PAID,
            subject=f"🎉 Welcome To The {settings.program_name}!",
            request=request,
            quote=quote,
            today=today,
            cc=None,
        )

    def send_invoice_request(self, request: PaymentRequest, quote: PricingQuote, today: date) -> str:
        """Email the applicant a DUE UPON RECEIPT invoice, copying accounting"""
        return self._send(
            edition=INVOICE_REQUEST,
            status=InvoiceStatus.DUE,
            subject=f"📄 Invoice Request for {settings.program_name}",
            request=request,
            quote=quote,
            today=today,
            cc=settings.accounting_email,
        )

    def _send(
        self,
        edition: str,
        status: InvoiceStatus,
        subject: str,
        request: PaymentRequest,
        quote: PricingQuote,
        today: date,
        cc: str | None,
    ) -> str:
        try:
            number = self.store.increment_counter(settings.invoice_counter_key)
            invoice_number = format_invoice_number(settings.invoice_prefix, number)

            document = build_invoice_document(
                request,
                quote,
                self.catalog,
                status=status,
                invoice_number=invoice_number,
                issued_on=today,
                program_name=settings.program_name,
                base_seats=settings.base_seats,
            )
            logging.info(f"Generating {status.value} invoice {invoice_number} for {request.applicant}")
            pdf = self.renderer.render(document)

            values = template_values(request, quote, edition)
            html = render_template(self.templates.load(f"{edition}.html"), escape_values(values))
            text = render_template(self.templates.load(f"{edition}.txt"), values)

            message = build_message(
                to=request.applicant,
                subject=subject,
                html=html,
                text=text,
                attachment=pdf,
                filename=invoice_filename(invoice_number, status),
                cc=cc,
            )
            self.mail_client.send(message)
        except NotificationError:
            raise
        except Exception as e:
            raise NotificationError(f"{edition} email to {request.applicant} failed: {e}") from e

        logging.info(f"{edition} email with invoice {invoice_number} sent to {request.applicant}")
        return invoice_number


def unsubscribe_link(email: str) -> str:
    return f"{settings.unsubscribe_url}?email={url_quote(email)}"


def template_values(request: PaymentRequest, quote: PricingQuote, edition: str) -> dict:
    """Placeholder values shared by the HTML and plaintext templates"""
    return {
        "name": request.name,
        "email": request.applicant,
        "programName": settings.program_name,
        "tier": request.tier.name,
        "additionalSeats": request.additional_seats,
        "totalSeats": settings.base_seats + request.additional_seats,
        "supportHours": request.support_hours,
        "totalAmount": format_usd(quote.total_cents),
        "company": request.company,
        "phone": request.phone,
        "jobTitle": request.job_title,
        "tracking": urlencode({"email": request.applicant, "list": settings.mailing_list, "edition": edition}),
        "emailSettings": unsubscribe_link(request.applicant),
    }


def invoice_filename(invoice_number: str, status: InvoiceStatus) -> str:
    suffix = "-PAID" if status is InvoiceStatus.PAID else ""
    return f"Invoice-{invoice_number}{suffix}.pdf"


def build_message(
    to: str,
    subject: str,
    html: str,
    text: str,
    attachment: bytes,
    filename: str,
    cc: str | None = None,
) -> EmailMessage:
    """Multipart message: text and HTML alternatives plus the PDF attachment"""
    sender = settings.mail_from
    message = EmailMessage()
    message["From"] = sender
    message["To"] = to
    if cc:
        message["Cc"] = cc
    # Copy of every confirmation goes to the team inbox
    message["Bcc"] = parseaddr(sender)[1]
    message["Reply-To"] = sender
    message["Subject"] = subject
    message["List-Unsubscribe"] = f"<{unsubscribe_link(to)}>"
    message["List-Unsubscribe-Post"] = "List-Unsubscribe=One-Click"

    message.set_content(text)
    message.add_alternative(html, subtype="html")
    message.add_attachment(attachment, maintype="application", subtype="pdf", filename=filename)
    return message

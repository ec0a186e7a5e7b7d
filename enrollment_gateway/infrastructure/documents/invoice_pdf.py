"""
Invoice PDF renderer
Draws a two-page LETTER invoice: charges and payment instructions, then what the tier includes
"""
import io
from typing import List

from reportlab.lib import colors
from reportlab.lib.pagesizes import LETTER
from reportlab.pdfgen import canvas

from enrollment_gateway.config import settings
from enrollment_gateway.domain.models import InvoiceDocument, InvoiceStatus
from enrollment_gateway.utils.money import format_usd

NAVY = colors.HexColor('#1d2731')
GOLD = colors.HexColor('#fdc844')
GREEN = colors.HexColor('#2ecc71')
RED = colors.HexColor('#e74c3c')
TEXT = colors.HexColor('#333333')
MUTED = colors.HexColor('#666666')
FAINT = colors.HexColor('#999999')
RULE = colors.HexColor('#cccccc')

LEFT = 50
RIGHT = 562


class InvoiceRenderer:
    """Render an InvoiceDocument to PDF bytes; output depends only on its inputs"""

    def __init__(
        self,
        seller_name: str | None = None,
        seller_address_lines: List[str] | None = None,
        seller_phone: str | None = None,
        accounting_email: str | None = None,
        bank_name: str | None = None,
        routing_number: str | None = None,
        account_number: str | None = None,
    ):
        self.seller_name = seller_name or settings.seller_name
        self.seller_address_lines = seller_address_lines or settings.seller_address_lines
        self.seller_phone = seller_phone or settings.seller_phone
        self.accounting_email = accounting_email or settings.accounting_email
        self.bank_name = bank_name or settings.remit_bank_name
        self.routing_number = routing_number or settings.remit_routing_number
        self.account_number = account_number or settings.remit_account_number
        self.page_width, self.page_height = LETTER

    def render(self, document: InvoiceDocument) -> bytes:
        """
        Render the invoice.

        Args:
            document: Invoice fields, number and status

        Returns:
            PDF file content
        """
        buffer = io.BytesIO()
        c = canvas.Canvas(buffer, pagesize=LETTER, invariant=1)
        c.setTitle(f"Invoice {document.invoice_number}")
        c.setAuthor(self.seller_name)

        self._draw_charges_page(c, document)
        c.showPage()
        self._draw_inclusions_page(c, document)
        c.showPage()

        c.save()
        return buffer.getvalue()

    def _y(self, top: float) -> float:
        """Convert a distance from the top edge to a reportlab y coordinate"""
        return self.page_height - top

    def _rule(self, c, x1, x2, top, color, width):
        c.setStrokeColor(color)
        c.setLineWidth(width)
        c.line(x1, self._y(top), x2, self._y(top))

    def _draw_charges_page(self, c, document: InvoiceDocument):
        # Header with status badge
        c.setFont("Helvetica-Bold", 24)
        c.setFillColor(NAVY)
        c.drawRightString(RIGHT, self._y(50), "INVOICE")

        c.setFont("Helvetica-Bold", 14)
        c.setFillColor(GREEN if document.status is InvoiceStatus.PAID else RED)
        c.drawRightString(RIGHT, self._y(72), document.status.value)

        # Seller block
        c.setFont("Helvetica-Bold", 16)
        c.setFillColor(NAVY)
        c.drawString(LEFT, self._y(90), self.seller_name)

        c.setFont("Helvetica", 10)
        c.setFillColor(MUTED)
        top = 110
        for line in [*self.seller_address_lines, self.seller_phone, self.accounting_email]:
            c.drawString(LEFT, self._y(top), line)
            top += 13

        # Invoice details
        c.drawRightString(RIGHT, self._y(110), f"Invoice Number: {document.invoice_number}")
        c.drawRightString(RIGHT, self._y(123), f"Date: {document.issued_on.strftime('%B')} {document.issued_on.day}, {document.issued_on.year}")
        c.drawRightString(RIGHT, self._y(136), "Due: Upon Receipt")

        self._rule(c, LEFT, RIGHT, 175, GOLD, 2)

        # Bill to
        c.setFont("Helvetica-Bold", 12)
        c.setFillColor(NAVY)
        c.drawString(LEFT, self._y(200), "BILL TO:")
        c.setFont("Helvetica", 11)
        c.setFillColor(TEXT)
        top = 218
        for line in document.bill_to:
            c.drawString(LEFT, self._y(top), line)
            top += 15

        # Line items
        c.setFont("Helvetica-Bold", 11)
        c.setFillColor(NAVY)
        c.drawString(LEFT, self._y(340), "DESCRIPTION")
        c.drawString(350, self._y(340), "QTY")
        c.drawString(420, self._y(340), "RATE")
        c.drawRightString(RIGHT, self._y(340), "AMOUNT")
        self._rule(c, LEFT, RIGHT, 350, RULE, 1)

        top = 370
        for item in document.line_items:
            discount = item.amount_cents < 0
            c.setFont("Helvetica", 10)
            c.setFillColor(GREEN if discount else TEXT)
            c.drawString(LEFT, self._y(top), item.description)
            c.setFillColor(TEXT)
            c.drawString(350, self._y(top), str(item.quantity))
            c.setFillColor(GREEN if discount else TEXT)
            c.drawString(420, self._y(top), format_usd(item.rate_cents))
            c.drawRightString(RIGHT, self._y(top), format_usd(item.amount_cents))
            if item.note:
                c.setFont("Helvetica", 9)
                c.setFillColor(MUTED)
                c.drawString(LEFT, self._y(top + 12), item.note)
            top += 40

        self._rule(c, 350, RIGHT, top, RULE, 1)
        top += 20

        c.setFont("Helvetica-Bold", 12)
        c.setFillColor(NAVY)
        total_label = "TOTAL PAID:" if document.status is InvoiceStatus.PAID else "TOTAL DUE:"
        c.drawString(350, self._y(top), total_label)
        c.setFont("Helvetica-Bold", 14)
        c.drawRightString(RIGHT, self._y(top), format_usd(document.total_cents))
        top += 45

        self._draw_payment_instructions(c, document, top)

    def _draw_payment_instructions(self, c, document: InvoiceDocument, top: float):
        if document.status is InvoiceStatus.PAID:
            c.setFont("Helvetica", 10)
            c.setFillColor(MUTED)
            c.drawString(LEFT, self._y(top), "Paid in full by credit card. No further payment is required.")
            return

        c.setFont("Helvetica-Bold", 11)
        c.setFillColor(NAVY)
        c.drawString(LEFT, self._y(top), "PAYMENT INSTRUCTIONS")
        top += 20

        c.setFont("Helvetica", 10)
        c.setFillColor(MUTED)
        c.drawString(LEFT, self._y(top), "Payment Due: Upon Receipt")
        top += 20

        c.setFillColor(NAVY)
        c.drawString(LEFT, self._y(top), "ACH or Wire Transfer (Preferred):")
        top += 15

        c.setFont("Helvetica", 9)
        c.setFillColor(MUTED)
        for line in [
            f"Bank: {self.bank_name}",
            f"Routing Number: {self.routing_number}",
            f"Account Number: {self.account_number}",
            f"Account Name: {self.seller_name}",
        ]:
            c.drawString(60, self._y(top), line)
            top += 13
        c.setFont("Helvetica", 8)
        c.setFillColor(FAINT)
        c.drawString(60, self._y(top), "ACH is free | Wire transfers may incur fees paid by sender")
        top += 23

        c.setFont("Helvetica", 10)
        c.setFillColor(NAVY)
        c.drawString(LEFT, self._y(top), "Check Payment:")
        top += 15
        c.setFont("Helvetica", 9)
        c.setFillColor(MUTED)
        c.drawString(60, self._y(top), f"Make checks payable to: {self.seller_name}")
        c.drawString(60, self._y(top + 13), f"Mail to: {', '.join(self.seller_address_lines)}")

    def _draw_inclusions_page(self, c, document: InvoiceDocument):
        c.setFont("Helvetica-Bold", 18)
        c.setFillColor(NAVY)
        c.drawString(LEFT, self._y(60), "WHAT'S INCLUDED IN YOUR TIER")

        c.setFont("Helvetica-Bold", 12)
        c.setFillColor(GOLD)
        c.drawString(LEFT, self._y(85), f"{document.tier_name} Tier")
        self._rule(c, LEFT, RIGHT, 100, GOLD, 2)

        top = 125
        c.setFont("Helvetica", 9)
        c.setFillColor(TEXT)
        for feature in document.included_features:
            c.drawString(60, self._y(top), f"• {feature}")
            top += 18

        # Tier perks are bolded
        c.setFont("Helvetica-Bold", 9)
        c.setFillColor(NAVY)
        for perk in document.perks:
            c.drawString(60, self._y(top), f"• {perk}")
            top += 18

        c.setFont("Helvetica", 9)
        c.setFillColor(TEXT)
        teammates = document.base_seats - 1
        c.drawString(60, self._y(top), f"• {document.base_seats} seats included (you + {teammates} teammates)")

        # Footer
        c.setFont("Helvetica", 9)
        c.setFillColor(FAINT)
        c.drawCentredString(self.page_width / 2, self._y(715), f"Thank you for enrolling in the {document.program_name}!")
        c.drawCentredString(
            self.page_width / 2,
            self._y(730),
            f"Questions? Contact {self.accounting_email} or call {self.seller_phone}",
        )

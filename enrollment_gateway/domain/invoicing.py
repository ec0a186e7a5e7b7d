"""Invoice document assembly from a priced request"""

from datetime import date
from typing import List

from enrollment_gateway.domain.catalog import INCLUDED_FEATURES
from enrollment_gateway.domain.models import (
    InvoiceDocument,
    InvoiceLineItem,
    InvoiceStatus,
    PaymentRequest,
    PricingQuote,
    TierCatalog,
)
from enrollment_gateway.utils.money import format_usd


def format_invoice_number(prefix: str, number: int) -> str:
    return f"{prefix}-{number}"


def build_line_items(
    request: PaymentRequest,
    quote: PricingQuote,
    catalog: TierCatalog,
    program_name: str,
) -> List[InvoiceLineItem]:
    """
    Line items that sum to quote.total_cents.

    When the catalog has a list price above the tier price, the program is
    billed at list price followed by a scholarship discount line.
    """
    items = []
    list_price = catalog.list_price_cents
    if list_price and list_price > quote.tier_base_cents:
        discount = list_price - quote.tier_base_cents
        percent = round(discount * 100 / list_price)
        items.append(InvoiceLineItem(f"{program_name} Program", "Full Price", 1, list_price, list_price))
        items.append(
            InvoiceLineItem(f"Scholarship Discount ({percent}%)", "Congratulations!", 1, -discount, -discount)
        )
    else:
        items.append(
            InvoiceLineItem(
                f"{program_name} Program",
                f"{request.tier.name} tier",
                1,
                quote.tier_base_cents,
                quote.tier_base_cents,
            )
        )

    if request.additional_seats > 0:
        items.append(
            InvoiceLineItem(
                "Additional Seats",
                "(10% of tier price per seat)",
                request.additional_seats,
                quote.seat_price_cents,
                quote.seat_surcharge_cents,
            )
        )

    if request.support_hours > 0:
        hourly_rate = quote.support_surcharge_cents // request.support_hours
        items.append(
            InvoiceLineItem(
                "Addon Technical Support/Coaching",
                f"({format_usd(hourly_rate)} per hour)",
                request.support_hours,
                hourly_rate,
                quote.support_surcharge_cents,
            )
        )

    return items


def build_invoice_document(
    request: PaymentRequest,
    quote: PricingQuote,
    catalog: TierCatalog,
    status: InvoiceStatus,
    invoice_number: str,
    issued_on: date,
    program_name: str,
    base_seats: int = 10,
) -> InvoiceDocument:
    return InvoiceDocument(
        invoice_number=invoice_number,
        status=status,
        issued_on=issued_on,
        program_name=program_name,
        tier_name=request.tier.name,
        bill_to=[
            request.name,
            request.job_title,
            request.company,
            request.applicant,
            request.phone,
            request.country,
        ],
        line_items=build_line_items(request, quote, catalog, program_name),
        total_cents=quote.total_cents,
        included_features=list(INCLUDED_FEATURES),
        perks=list(request.tier.perks),
        base_seats=base_seats,
    )

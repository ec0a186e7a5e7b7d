"""Pricing for a tier plus add-on seats and support hours"""

from enrollment_gateway.domain.exceptions import ValidationError
from enrollment_gateway.domain.models import PricingQuote, Tier

SEAT_SURCHARGE_RATE = 0.10
MAX_ADDITIONAL_SEATS = 40
MAX_SUPPORT_HOURS = 100


def seat_price_cents(tier_base_cents: int) -> int:
    """Price of one additional seat: 10% of the tier base price"""
    return round(tier_base_cents * SEAT_SURCHARGE_RATE)


def quote(
    tier: Tier,
    additional_seats: int = 0,
    support_hours: int = 0,
    hourly_rate_cents: int = 0,
) -> PricingQuote:
    """
    Compute the amount owed for a tier selection.

    total = base + round(base * 0.10) * seats + hourly_rate * hours

    Example:
        $13,500 tier + 5 seats → 1,350,000 + 135,000 * 5 = 2,025,000 cents

    Raises:
        ValidationError: seats outside [0, 40] or hours outside [0, 100]
    """
    if not 0 <= additional_seats <= MAX_ADDITIONAL_SEATS:
        raise ValidationError(
            "additionalSeats", f"Additional seats must be between 0 and {MAX_ADDITIONAL_SEATS}."
        )
    if not 0 <= support_hours <= MAX_SUPPORT_HOURS:
        raise ValidationError(
            "addonSupportHours", f"Addon support hours must be between 0 and {MAX_SUPPORT_HOURS}."
        )

    base = tier.base_price_cents
    per_seat = seat_price_cents(base)
    seat_surcharge = per_seat * additional_seats
    support_surcharge = hourly_rate_cents * support_hours

    return PricingQuote(
        tier_base_cents=base,
        seat_price_cents=per_seat,
        seat_surcharge_cents=seat_surcharge,
        support_surcharge_cents=support_surcharge,
        total_cents=base + seat_surcharge + support_surcharge,
    )

"""Tier catalogs offered for the program

Two editions exist: four fixed dollar tiers keyed by their formatted fee, and
two named tiers with scholarship framing. Which one is live is configuration.
"""

from typing import Optional

from enrollment_gateway.domain.models import Tier, TierCatalog

VIP_PERKS = (
    "Personal concierge available anytime",
    "10 hours of 1-on-1 technical support",
    "Podcast and in-person speaking opportunities",
    "1 full day of on-site AI training or implementation at your HQ",
)

INCLUDED_FEATURES = [
    "12-month AI Training + Implementation program (January - December 2026)",
    "AI strategy workshops for business owners only",
    "100+ training sessions (live online + on-demand recordings)",
    "About 2 hours per week time commitment for you and participating employees",
    "Setup & Basic Training, Work-Specific Training, Custom AI Tools, and more...",
    "Self-serve support library + 24 hour email customer support + office hours",
]

FEE_TIERS = (
    Tier(key="$6,000", name="$6,000", base_price_cents=600_000),
    Tier(key="$13,500", name="$13,500", base_price_cents=1_350_000),
    Tier(key="$21,000", name="$21,000", base_price_cents=2_100_000),
    Tier(key="$30,000", name="$30,000", base_price_cents=3_000_000, perks=VIP_PERKS),
)

NAMED_TIERS = (
    Tier(key="scholarship", name="Foundational", base_price_cents=600_000),
    Tier(key="vip", name="VIP", base_price_cents=3_000_000, perks=VIP_PERKS),
)


def load_catalog(variant: str, support_hourly_rate_cents: Optional[int]) -> TierCatalog:
    """
    Build the tier catalog for a configured variant.

    Args:
        variant: "fee" (formatted dollar keys) or "named" (scholarship/vip)
        support_hourly_rate_cents: Price per support hour, None to disable the add-on

    Raises:
        ValueError: Unknown variant
    """
    if variant == "fee":
        return TierCatalog(
            name="fee",
            tiers=FEE_TIERS,
            support_hourly_rate_cents=support_hourly_rate_cents,
        )
    if variant == "named":
        return TierCatalog(
            name="named",
            tiers=NAMED_TIERS,
            support_hourly_rate_cents=support_hourly_rate_cents,
            list_price_cents=3_000_000,
        )
    raise ValueError(f"Unknown tier catalog: {variant}")

"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import List, Optional


class PaymentMethod(str, Enum):
    CREDIT_CARD = "credit-card"
    INVOICE = "invoice"


class PaymentStatus(str, Enum):
    """Application payment status: unset -> pending -> paid"""

    UNSET = "unset"
    PENDING = "pending"
    PAID = "paid"


class EnrollmentPaymentStatus(str, Enum):
    COMPLETE = "complete"
    PENDING = "pending"


class InvoiceStatus(str, Enum):
    PAID = "PAID"
    DUE = "DUE UPON RECEIPT"


@dataclass(frozen=True)
class Tier:
    """Fixed-price program package"""

    key: str  # Identifier the applicant submits, e.g. "$13,500" or "vip"
    name: str
    base_price_cents: int
    perks: tuple[str, ...] = ()


@dataclass(frozen=True)
class TierCatalog:
    """Tiers and add-ons offered for one program edition"""

    name: str
    tiers: tuple[Tier, ...]
    support_hourly_rate_cents: Optional[int]  # None when support hours are not sold
    list_price_cents: Optional[int] = None  # Shown as full price on invoices

    def get(self, key: str) -> Optional[Tier]:
        for tier in self.tiers:
            if tier.key == key:
                return tier
        return None

    @property
    def keys(self) -> List[str]:
        return [tier.key for tier in self.tiers]


@dataclass(frozen=True)
class PricingQuote:
    """Amount owed for a tier plus add-ons, in cents"""

    tier_base_cents: int
    seat_price_cents: int
    seat_surcharge_cents: int
    support_surcharge_cents: int
    total_cents: int


@dataclass
class PaymentRequest:
    """Normalized, fully-populated payment or invoice request"""

    applicant: str
    name: str
    tier: Tier
    payment_method: PaymentMethod
    company: str
    job_title: str
    phone: str
    country: str
    additional_seats: int = 0
    support_hours: int = 0
    payment_method_id: Optional[str] = None


@dataclass
class Application:
    """Prior application submitted by the applicant"""

    email: str
    name: str
    payment_status: PaymentStatus = PaymentStatus.UNSET
    company: Optional[str] = None
    job_title: Optional[str] = None
    phone: Optional[str] = None
    country: Optional[str] = None
    tier: Optional[str] = None
    payment_method: Optional[str] = None
    payment_amount_cents: Optional[int] = None
    payment_reference: Optional[str] = None
    invoice_requested_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    enrolled: bool = False


@dataclass
class EnrollmentRecord:
    """Student record created when a payment or invoice request is accepted"""

    email: str
    name: str
    company: str
    job_title: str
    phone: str
    country: str
    tier: str
    payment_status: EnrollmentPaymentStatus
    payment_method: PaymentMethod
    amount_paid_cents: int
    total_amount_cents: int
    base_seats: int
    additional_seats: int
    support_hours: int
    enrolled_at: datetime
    payment_plan: Optional[str] = None
    payment_reference: Optional[str] = None
    account_owner: bool = True

    @property
    def total_seats(self) -> int:
        return self.base_seats + self.additional_seats


@dataclass
class ChargeResult:
    """Outcome of a payment gateway charge"""

    status: str
    reference: str

    @property
    def succeeded(self) -> bool:
        return self.status == "succeeded"


@dataclass
class InvoiceLineItem:
    description: str
    note: str
    quantity: int
    rate_cents: int
    amount_cents: int


@dataclass
class InvoiceDocument:
    """Everything the invoice renderer needs; rendering is a pure function of it"""

    invoice_number: str
    status: InvoiceStatus
    issued_on: date
    program_name: str
    tier_name: str
    bill_to: List[str]
    line_items: List[InvoiceLineItem]
    total_cents: int
    included_features: List[str] = field(default_factory=list)
    perks: List[str] = field(default_factory=list)
    base_seats: int = 10


@dataclass
class PaymentOutcome:
    """Successful response for an accepted (or silently discarded) submission"""

    message: str
    enrolled: bool
    payment_reference: Optional[str] = None
    pending_payment: bool = False
    # For logging only, never returned to the caller
    applicant: str = "unknown"
    payment_method: str = "none"
    outcome: str = "discarded"
    total_cents: int = 0

    def to_body(self) -> dict:
        body = {"success": True, "message": self.message, "enrolled": self.enrolled}
        if self.payment_reference is not None:
            body["paymentId"] = self.payment_reference
        if self.pending_payment:
            body["pendingPayment"] = True
        return body

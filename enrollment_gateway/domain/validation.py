"""Payment request validation

Fields are checked in a fixed order and the first failure wins, so the error
returned for a payload with several problems is always the same one.
"""

from typing import Any, Dict, Mapping

from enrollment_gateway.domain.exceptions import ValidationError
from enrollment_gateway.domain.models import PaymentMethod, PaymentRequest, TierCatalog
from enrollment_gateway.domain.pricing import MAX_ADDITIONAL_SEATS, MAX_SUPPORT_HOURS

HONEYPOT_FIELD = "mobile"


def unwrap_payload(body: Any) -> Dict[str, Any]:
    """Accept either a flat payment object or a {"payment": {...}} wrapper"""
    if not isinstance(body, Mapping):
        raise ValidationError("body", "Request body must be a JSON object.")
    inner = body.get("payment")
    if isinstance(inner, Mapping):
        return dict(inner)
    return dict(body)


def is_honeypot_filled(payload: Mapping[str, Any]) -> bool:
    """Hidden form field that humans never fill in"""
    value = payload.get(HONEYPOT_FIELD)
    if value is None:
        return False
    return str(value).strip() != ""


def _text(payload: Mapping[str, Any], key: str) -> str | None:
    value = payload.get(key)
    if value is None or isinstance(value, (dict, list)):
        return None
    text = str(value).strip()
    return text or None


def _required(payload: Mapping[str, Any], key: str, label: str) -> str:
    value = _text(payload, key)
    if value is None:
        raise ValidationError(key, f"{label} is required.")
    return value


def parse_count(value: Any, field: str, upper: int, message: str) -> int:
    """
    Parse an optional add-on count.

    Absent or blank means 0. Integers, integral floats and digit strings are
    accepted; anything else, or a value outside [0, upper], is rejected.
    """
    if value is None:
        return 0
    if isinstance(value, bool):
        raise ValidationError(field, message)

    if isinstance(value, int):
        count = value
    elif isinstance(value, float):
        if not value.is_integer():
            raise ValidationError(field, message)
        count = int(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return 0
        try:
            count = int(text)
        except ValueError:
            raise ValidationError(field, message)
    else:
        raise ValidationError(field, message)

    if count < 0 or count > upper:
        raise ValidationError(field, message)
    return count


def validate_payment_request(payload: Mapping[str, Any], catalog: TierCatalog) -> PaymentRequest:
    """
    Validate a raw payment payload and return a normalized request.

    Check order:
    1. applicant  2. name  3. tier (or legacy finalFee)  4. paymentMethod
    5. company  6. jobTitle  7. phone  8. country
    9. additionalSeats  10. addonSupportHours  11. paymentMethodId (credit-card only)

    Raises:
        ValidationError: First failing field
    """
    applicant = _required(payload, "applicant", "Applicant email").lower()
    name = _required(payload, "name", "Name")

    tier_key = _text(payload, "tier") or _text(payload, "finalFee")
    if tier_key is None:
        raise ValidationError("tier", "Tier is required.")
    tier = catalog.get(tier_key)
    if tier is None:
        choices = ", ".join(f'"{key}"' for key in catalog.keys)
        raise ValidationError("tier", f"Invalid tier. Must be one of {choices}.")

    method_value = _required(payload, "paymentMethod", "Payment method")
    try:
        payment_method = PaymentMethod(method_value)
    except ValueError:
        raise ValidationError("paymentMethod", 'Payment method must be "credit-card" or "invoice".')

    company = _required(payload, "company", "Company")
    job_title = _required(payload, "jobTitle", "Job title")
    phone = _required(payload, "phone", "Phone")
    country = _required(payload, "country", "Country")

    seats = parse_count(
        payload.get("additionalSeats"),
        "additionalSeats",
        MAX_ADDITIONAL_SEATS,
        f"Additional seats must be between 0 and {MAX_ADDITIONAL_SEATS}.",
    )
    support_hours = parse_count(
        payload.get("addonSupportHours"),
        "addonSupportHours",
        MAX_SUPPORT_HOURS,
        f"Addon support hours must be between 0 and {MAX_SUPPORT_HOURS}.",
    )
    if support_hours and catalog.support_hourly_rate_cents is None:
        raise ValidationError("addonSupportHours", "Addon support hours are not available for this program.")

    payment_method_id = None
    if payment_method is PaymentMethod.CREDIT_CARD:
        payment_method_id = _text(payload, "paymentMethodId")
        if payment_method_id is None:
            raise ValidationError("paymentMethodId", "Payment method ID is required for credit card payments.")

    return PaymentRequest(
        applicant=applicant,
        name=name,
        tier=tier,
        payment_method=payment_method,
        company=company,
        job_title=job_title,
        phone=phone,
        country=country,
        additional_seats=seats,
        support_hours=support_hours,
        payment_method_id=payment_method_id,
    )

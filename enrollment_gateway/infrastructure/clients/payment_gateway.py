"""Stripe payment gateway client for capturing enrollment payments"""

import logging
from typing import Dict

import stripe

from enrollment_gateway.config import settings
from enrollment_gateway.domain.exceptions import GatewayDeclinedError
from enrollment_gateway.domain.models import ChargeResult


class StripePaymentGateway:
    """Client for charging a card through Stripe PaymentIntents"""

    def __init__(self, api_key: str | None = None, currency: str | None = None):
        self.api_key = api_key or settings.stripe_secret_key
        self.currency = currency or settings.currency

    def charge(
        self,
        amount_cents: int,
        payment_token: str,
        metadata: Dict[str, str],
        description: str,
        idempotency_key: str,
        currency: str | None = None,
    ) -> ChargeResult:
        """
        Create and confirm a PaymentIntent in one call.

        Called exactly once per request. The idempotency key makes a duplicate
        submission of the same charge return the original PaymentIntent instead
        of charging again.

        Returns:
            ChargeResult with the PaymentIntent status; callers must treat any
            status other than "succeeded" as not paid

        Raises:
            GatewayDeclinedError: Card declined, invalid payment details or Stripe failure
        """
        try:
            intent = stripe.PaymentIntent.create(
                api_key=self.api_key,
                idempotency_key=idempotency_key,
                amount=amount_cents,
                currency=currency or self.currency,
                payment_method=payment_token,
                confirm=True,
                automatic_payment_methods={"enabled": True, "allow_redirects": "never"},
                description=description,
                metadata=metadata,
            )
        except stripe.CardError as e:
            raise GatewayDeclinedError(f"Payment declined: {e.user_message or e}", details=str(e)) from e
        except stripe.InvalidRequestError as e:
            raise GatewayDeclinedError("Invalid payment information.", details=str(e)) from e
        except stripe.StripeError as e:
            logging.error(f"Stripe error: {e}")
            raise GatewayDeclinedError("Payment processing failed.", details=str(e)) from e

        logging.info(f"Stripe payment status: {intent.status}", extra={"payment_reference": intent.id})
        return ChargeResult(status=intent.status, reference=intent.id)

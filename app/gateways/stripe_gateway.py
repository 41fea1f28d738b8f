"""Stripe payment gateway adapter."""

import json
import logging

import stripe

from app.config import settings
from app.gateways.base import CheckoutResult, GatewayType, PaymentGateway

logger = logging.getLogger(__name__)


class StripeGateway(PaymentGateway):
    """Stripe Checkout implementation."""

    @property
    def secret_key(self) -> str | None:
        return settings.stripe_secret_key

    @property
    def webhook_secret(self) -> str | None:
        return settings.stripe_webhook_secret

    @property
    def gateway_type(self) -> GatewayType:
        return GatewayType.STRIPE

    async def create_checkout_session(
        self,
        amount: int,
        currency: str,
        description: str,
        success_url: str,
        cancel_url: str,
        customer_email: str | None = None,
        metadata: dict[str, str] | None = None,
    ) -> CheckoutResult:
        """Create a one-off Stripe Checkout session."""
        if not self.secret_key:
            return CheckoutResult(
                success=False,
                error_message="Stripe not configured",
            )

        try:
            stripe.api_key = self.secret_key

            session = stripe.checkout.Session.create(
                payment_method_types=["card"],
                line_items=[
                    {
                        "price_data": {
                            "currency": currency.lower(),
                            "product_data": {"name": description},
                            "unit_amount": amount,
                        },
                        "quantity": 1,
                    }
                ],
                mode="payment",
                success_url=success_url,
                cancel_url=cancel_url,
                customer_email=customer_email,
                metadata=metadata or {},
            )

            return CheckoutResult(success=True, session_id=session.id, url=session.url)

        except stripe.StripeError as e:
            logger.error("Stripe checkout session failed: %s", e)
            return CheckoutResult(
                success=False,
                error_message=str(e),
            )

    def verify_webhook(
        self,
        payload: bytes,
        signature: str,
    ) -> dict | None:
        """Verify Stripe webhook signature and return the raw event body."""
        if not self.webhook_secret:
            return None

        try:
            stripe.Webhook.construct_event(
                payload,
                signature,
                self.webhook_secret,
            )
        except (ValueError, stripe.SignatureVerificationError) as e:
            logger.warning("Stripe webhook rejected: %s", e)
            return None

        return json.loads(payload)

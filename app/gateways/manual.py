"""Manual payment gateway adapter for development and staging."""

import uuid

from app.gateways.base import CheckoutResult, GatewayType, PaymentGateway


class ManualGateway(PaymentGateway):
    """Gateway that never talks to a processor.

    Checkout returns the success URL directly; settlement has to be applied by
    an operator or a test through the internal payment event.
    """

    @property
    def gateway_type(self) -> GatewayType:
        return GatewayType.MANUAL

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
        """Create manual checkout (always succeeds)."""
        session_id = f"manual_{uuid.uuid4().hex}"
        return CheckoutResult(
            success=True,
            session_id=session_id,
            url=f"{success_url}?session_id={session_id}",
        )

    def verify_webhook(
        self,
        payload: bytes,
        signature: str,
    ) -> dict | None:
        """Manual gateway doesn't have webhooks."""
        return None

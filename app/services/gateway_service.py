"""Payment gateway selection.

Routes checkout and webhook verification to the configured adapter.
No business logic here - only gateway coordination.
"""

from app.config import settings
from app.gateways.base import GatewayType, PaymentGateway
from app.gateways.manual import ManualGateway
from app.gateways.stripe_gateway import StripeGateway


class GatewayService:
    """Caches one adapter instance per gateway type."""

    def __init__(self):
        self._gateways: dict[GatewayType, PaymentGateway] = {}

    def get_gateway(self, gateway_type: str | GatewayType | None = None) -> PaymentGateway:
        """Return the adapter for ``gateway_type`` (configured default if None)."""
        if gateway_type is None:
            gateway_type = settings.payment_gateway
        if isinstance(gateway_type, str):
            try:
                gateway_type = GatewayType(gateway_type)
            except ValueError:
                gateway_type = GatewayType.MANUAL

        if gateway_type not in self._gateways:
            if gateway_type == GatewayType.STRIPE:
                self._gateways[gateway_type] = StripeGateway()
            else:
                self._gateways[gateway_type] = ManualGateway()

        return self._gateways[gateway_type]

    def stripe_webhook_configured(self) -> bool:
        return bool(settings.stripe_webhook_secret)


gateway_service = GatewayService()


def get_payment_gateway() -> PaymentGateway:
    """FastAPI dependency; tests override it with a fake adapter."""
    return gateway_service.get_gateway()

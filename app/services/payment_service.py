"""Payment settlement bridge.

Starts hosted checkout for a payable booking and turns processor completion
events into the PAID transition. Settlement is idempotent: the status write is
conditional on the booking still being payable, so replayed or duplicated
events change nothing.
"""

import logging
from datetime import datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.exceptions import (
    InvalidTransition,
    NotFoundError,
    UpstreamFailure,
    ValidationError,
)
from app.core.permissions import BookingAction, Capabilities, authorize_booking_action
from app.domain.booking_state import PAYABLE_STATUSES, BookingStatus
from app.gateways.base import PaymentGateway
from app.models.payment import Payment
from app.models.user import Client, User
from app.repositories.booking_repository import BookingRepository
from app.schemas.payment import PaymentEvent
from app.services.booking_service import refresh_booking
from app.services.user_service import touch_last_active
from app.utils.datetime_utils import to_minor_units

logger = logging.getLogger(__name__)

BOOKING_PAYMENT = "booking_payment"
CHECKOUT_COMPLETED = "checkout.session.completed"


def checkout_urls(origin: str | None) -> tuple[str, str]:
    """Success and cancel redirects: web origin if known, app deep link otherwise."""
    if origin:
        base = origin.rstrip("/")
        return f"{base}/booking-payment-success", f"{base}/booking-payment-cancelled"
    scheme = settings.app_url_scheme
    return (
        f"{scheme}://booking-payment/success",
        f"{scheme}://booking-payment/cancelled",
    )


class PaymentService:
    """Checkout and settlement for bookings."""

    async def create_checkout_session(
        self,
        db: AsyncSession,
        caps: Capabilities,
        user: User,
        booking_id: int,
        gateway: PaymentGateway,
        now: datetime,
        origin: str | None = None,
    ) -> str:
        """Open a hosted checkout page for the client's payable booking.

        Args:
            db: Database session
            caps: Acting user's capabilities
            user: Acting user (email prefilled, uid echoed in metadata)
            booking_id: Booking to pay for
            gateway: Payment gateway adapter
            now: Current instant
            origin: Web origin of the caller, if any

        Returns:
            str: Checkout URL

        Raises:
            NotFoundError: Unknown booking
            AuthorizationError: Caller is not the booking's client
            InvalidTransition: Booking is not awaiting payment
            UpstreamFailure: Gateway refused or is unreachable
        """
        repo = BookingRepository(db)
        booking = await repo.get(booking_id)
        if not booking:
            raise NotFoundError("Booking", str(booking_id))

        authorize_booking_action(caps, booking, BookingAction.PAY)

        await refresh_booking(repo, booking, now)
        if BookingStatus(booking.status) not in PAYABLE_STATUSES:
            raise InvalidTransition(
                current_status=booking.status,
                detail="Booking is not awaiting payment",
            )
        if booking.price is None:
            raise ValidationError("Booking has no price")

        success_url, cancel_url = checkout_urls(origin)
        result = await gateway.create_checkout_session(
            amount=to_minor_units(booking.price),
            currency=settings.payment_currency,
            description=f"Pet care booking #{booking.id}",
            success_url=success_url,
            cancel_url=cancel_url,
            customer_email=user.email,
            metadata={
                "userId": user.external_uid,
                "bookingId": str(booking.id),
                "type": BOOKING_PAYMENT,
            },
        )
        if not result.success or not result.url:
            logger.error(
                "Checkout for booking %s failed: %s", booking.id, result.error_message
            )
            raise UpstreamFailure(
                "stripe", result.error_message or "Could not create checkout session"
            )

        await touch_last_active(db, caps.user_id, now)
        logger.info("Checkout session %s opened for booking %s", result.session_id, booking.id)
        return result.url

    async def settle_booking(self, db: AsyncSession, booking_id: int, now: datetime) -> bool:
        """Move a payable booking to PAID.

        Returns:
            bool: True if this call wrote PAID; False for unknown, already
            settled or otherwise ineligible bookings
        """
        repo = BookingRepository(db)
        booking = await repo.get(booking_id)
        if not booking:
            logger.warning("Settlement for unknown booking %s ignored", booking_id)
            return False

        # A payment can arrive before any reader noticed the stay ended.
        await refresh_booking(repo, booking, now)

        if BookingStatus(booking.status) not in PAYABLE_STATUSES:
            logger.warning(
                "Settlement for booking %s refused in status %s", booking_id, booking.status
            )
            return False

        if not await repo.update_status(booking, PAYABLE_STATUSES, BookingStatus.PAID, now):
            await repo.reload_status(booking)
            logger.warning(
                "Settlement for booking %s lost a race; now %s", booking_id, booking.status
            )
            return False

        logger.info("Booking %s settled", booking_id)
        return True

    async def apply_payment_event(
        self, db: AsyncSession, event: PaymentEvent, now: datetime
    ) -> bool:
        """Settle from a processor-neutral ``{bookingId, paymentStatus}`` notice."""
        if event.payment_status != "paid":
            logger.info(
                "Payment event for booking %s with status %s ignored",
                event.booking_id,
                event.payment_status,
            )
            return False
        return await self.settle_booking(db, event.booking_id, now)

    async def handle_stripe_event(
        self, db: AsyncSession, event: dict[str, Any], now: datetime
    ) -> bool:
        """Process a verified Stripe event.

        Only completed, paid booking checkouts do anything: the payment is
        recorded once per session id and the booking is settled. Every other
        event is acknowledged and ignored.
        """
        event_type = event.get("type")
        if event_type != CHECKOUT_COMPLETED:
            logger.info("Stripe event %s ignored", event_type)
            return False

        session = event.get("data", {}).get("object", {})
        metadata = session.get("metadata") or {}
        if metadata.get("type") != BOOKING_PAYMENT:
            logger.info("Checkout session %s is not a booking payment", session.get("id"))
            return False
        if session.get("payment_status") != "paid":
            logger.info(
                "Checkout session %s completed unpaid (%s)",
                session.get("id"),
                session.get("payment_status"),
            )
            return False

        try:
            booking_id = int(metadata.get("bookingId"))
        except (TypeError, ValueError):
            logger.warning("Checkout session %s has no usable bookingId", session.get("id"))
            return False

        await self._record_payment(db, session, booking_id, now)
        return await self.apply_payment_event(
            db, PaymentEvent(booking_id=booking_id, payment_status="paid"), now
        )

    async def _record_payment(
        self, db: AsyncSession, session: dict[str, Any], booking_id: int, now: datetime
    ) -> Payment | None:
        session_id = session.get("id")
        if not session_id:
            return None

        booking = await BookingRepository(db).get(booking_id)
        if not booking:
            return None

        user_id = (
            await db.execute(select(Client.user_id).where(Client.id == booking.client_id))
        ).scalar_one()

        amount = session.get("amount_total")
        if amount is None and booking.price is not None:
            amount = to_minor_units(booking.price)

        payment = Payment(
            user_id=user_id,
            booking_id=booking.id,
            stripe_session_id=session_id,
            amount=amount or 0,
            status="completed",
            type=BOOKING_PAYMENT,
            created_at=now,
        )
        # Duplicate deliveries race here; the unique session id decides.
        try:
            async with db.begin_nested():
                db.add(payment)
                await db.flush()
        except IntegrityError:
            logger.info("Checkout session %s already recorded", session_id)
            return None
        return payment


payment_service = PaymentService()

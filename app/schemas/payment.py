"""Payment-related Pydantic schemas."""

from typing import Literal

from pydantic import Field

from app.schemas.booking import CamelModel


class CheckoutSessionCreate(CamelModel):
    """Schema for starting a booking payment."""

    booking_id: int


class CheckoutSessionResponse(CamelModel):
    """Hosted checkout page to redirect the payer to."""

    url: str


class PaymentEvent(CamelModel):
    """Settlement notice in the processor-neutral shape.

    Anything other than ``paid`` is acknowledged and ignored.
    """

    booking_id: int
    payment_status: Literal["paid", "unpaid", "no_payment_required"] = Field(
        "paid", description="Processor-reported payment status"
    )


class WebhookAck(CamelModel):
    received: bool = True

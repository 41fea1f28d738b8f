"""Database models."""

from app.models.advertisement import Advertisement, AdvertisementStatus
from app.models.booking import Booking, BookingPet
from app.models.payment import Payment
from app.models.pet import Pet, PetImage, Species
from app.models.review import Report, Review
from app.models.user import Admin, Client, ServiceProvider, User

__all__ = [
    # User
    "User",
    "Client",
    "ServiceProvider",
    "Admin",
    # Pet
    "Species",
    "Pet",
    "PetImage",
    # Advertisement
    "Advertisement",
    "AdvertisementStatus",
    # Booking
    "Booking",
    "BookingPet",
    # Payment
    "Payment",
    # Feedback
    "Review",
    "Report",
]

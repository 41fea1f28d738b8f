"""Pet database models."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from app.database import Base

if TYPE_CHECKING:
    from app.models.user import Client


class Species(Base):
    """Species catalog entry (dog, cat, ...)."""

    __tablename__ = "species"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)


class Pet(Base):
    """A client's pet."""

    __tablename__ = "pets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    client_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True
    )
    species_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("species.id"))
    custom_species_name: Mapped[str | None] = mapped_column(String(100))

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    age: Mapped[int | None] = mapped_column(Integer)
    description: Mapped[str | None] = mapped_column(Text)
    chronic_diseases: Mapped[list] = mapped_column(JSON, default=list)
    is_healthy: Mapped[bool | None] = mapped_column(Boolean)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    # Relationships
    client: Mapped["Client"] = relationship("Client", back_populates="pets")
    species: Mapped["Species | None"] = relationship("Species")
    images: Mapped[list["PetImage"]] = relationship(
        "PetImage", back_populates="pet", order_by="PetImage.order", cascade="all, delete-orphan"
    )

    @property
    def species_name(self) -> str | None:
        """Custom species name wins over the catalog one."""
        if self.custom_species_name:
            return self.custom_species_name
        return self.species.name if self.species else None

    @property
    def key_image(self) -> str | None:
        """First image by display order."""
        return self.images[0].image_url if self.images else None


class PetImage(Base):
    """Stored image URL for a pet."""

    __tablename__ = "pet_images"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    pet_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("pets.id", ondelete="CASCADE"), nullable=False, index=True
    )
    image_url: Mapped[str] = mapped_column(Text, nullable=False)
    order: Mapped[int] = mapped_column(Integer, default=0)

    pet: Mapped["Pet"] = relationship("Pet", back_populates="images")

"""User and role membership models.

A user's roles are not stored as a column: being a client, a service
provider or an admin means owning a row in the matching side table.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from app.database import Base

if TYPE_CHECKING:
    from app.models.advertisement import Advertisement
    from app.models.pet import Pet


class User(Base):
    """User account mirrored from the identity provider."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    external_uid: Mapped[str] = mapped_column(String(128), unique=True, nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)

    # Profile
    first_name: Mapped[str | None] = mapped_column(String(100))
    last_name: Mapped[str | None] = mapped_column(String(100))
    phone_number: Mapped[str | None] = mapped_column(String(20))
    profile_picture_url: Mapped[str | None] = mapped_column(Text)

    # Status
    is_verified: Mapped[bool] = mapped_column(Boolean, default=False)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    last_active: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # Relationships
    clients: Mapped[list["Client"]] = relationship("Client", back_populates="user")
    service_providers: Mapped[list["ServiceProvider"]] = relationship(
        "ServiceProvider", back_populates="user"
    )
    admin: Mapped["Admin | None"] = relationship("Admin", back_populates="user", uselist=False)


class Client(Base):
    """Pet owner role."""

    __tablename__ = "clients"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    user: Mapped["User"] = relationship("User", back_populates="clients")
    pets: Mapped[list["Pet"]] = relationship("Pet", back_populates="client")


class ServiceProvider(Base):
    """Walker, sitter or groomer role. Deactivated providers keep their bookings."""

    __tablename__ = "service_providers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    user: Mapped["User"] = relationship("User", back_populates="service_providers")
    advertisements: Mapped[list["Advertisement"]] = relationship(
        "Advertisement", back_populates="provider"
    )


class Admin(Base):
    """Administrator role."""

    __tablename__ = "admins"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False
    )

    user: Mapped["User"] = relationship("User", back_populates="admin")

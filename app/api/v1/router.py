"""Main API router that includes all endpoint routers."""

from fastapi import APIRouter

from app.api.v1 import bookings, payments, reviews, service_providers, users, webhooks

api_router = APIRouter()

# Users
api_router.include_router(users.router, prefix="/users", tags=["Users"])

# Service providers
api_router.include_router(
    service_providers.router, prefix="/service-provider", tags=["Service Providers"]
)

# Bookings
api_router.include_router(bookings.router, prefix="/bookings", tags=["Bookings"])

# Payments
api_router.include_router(payments.router, prefix="/payments", tags=["Payments"])

# Reviews
api_router.include_router(reviews.router, prefix="/reviews", tags=["Reviews"])

# Webhooks
api_router.include_router(webhooks.router, prefix="/webhooks", tags=["Webhooks"])

from fastapi import APIRouter
from safetrip.api.routes import alerts, destinations, health, notifications, subscription

# Create API router
api_router = APIRouter()

# Include all route modules
api_router.include_router(destinations.router)
api_router.include_router(alerts.router)
api_router.include_router(notifications.router)
api_router.include_router(subscription.router)
api_router.include_router(health.router)

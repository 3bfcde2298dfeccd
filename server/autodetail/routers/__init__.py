"""FastAPI routers package."""

from .auth import router as auth_router
from .booking import router as booking_router
from .catalog import addon_router
from .catalog import router as catalog_router
from .coupon import router as coupon_router
from .gallery import router as gallery_router
from .google_reviews import router as google_reviews_router
from .health import router as health_router
from .metrics import router as metrics_router
from .payment import router as payment_router
from .quote import router as quote_router
from .review import router as review_router

__all__ = [
    "addon_router",
    "auth_router",
    "booking_router",
    "catalog_router",
    "coupon_router",
    "gallery_router",
    "google_reviews_router",
    "health_router",
    "metrics_router",
    "payment_router",
    "quote_router",
    "review_router",
]

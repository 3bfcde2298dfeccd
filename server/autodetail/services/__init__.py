"""Service layer package."""

from .auth_service import AuthService
from .booking_service import BookingService
from .catalog_service import CatalogService
from .coupon_service import CouponService
from .gallery_service import GalleryService
from .google_reviews_service import GoogleReviewsService
from .notification_service import NotificationService
from .payment_service import PaymentService
from .quote_service import QuoteService
from .review_service import ReviewService

__all__ = [
    "AuthService",
    "BookingService",
    "CatalogService",
    "CouponService",
    "GalleryService",
    "GoogleReviewsService",
    "NotificationService",
    "PaymentService",
    "QuoteService",
    "ReviewService",
]

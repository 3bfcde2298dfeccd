"""Models module exporting all database models."""

from .admin import AdminUser, RefreshToken
from .booking import Booking, BookingAddon, BookingStatus, VehicleType
from .catalog import Addon, Package, Service
from .coupon import Coupon, DiscountType
from .gallery import GalleryPhoto
from .quote import Quote, QuoteStatus
from .review import GoogleReviewsCache, Review
from .setting import SiteSetting

__all__ = [
    # Catalog
    "Service",
    "Package",
    "Addon",

    # Bookings
    "Booking",
    "BookingAddon",
    "BookingStatus",
    "VehicleType",

    # Marketing
    "Coupon",
    "DiscountType",
    "Quote",
    "QuoteStatus",
    "Review",
    "GoogleReviewsCache",
    "GalleryPhoto",

    # Admin
    "AdminUser",
    "RefreshToken",
    "SiteSetting",
]

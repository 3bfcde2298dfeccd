"""Thin async HTTP clients for the third-party APIs the site depends on."""

from .base import IntegrationError
from .brevo import BrevoClient
from .google_places import GooglePlacesClient
from .square import SquareClient
from .telnyx import TelnyxClient

__all__ = [
    "IntegrationError",
    "BrevoClient",
    "GooglePlacesClient",
    "SquareClient",
    "TelnyxClient",
]

"""Background workers for the booking API."""

from .refresh_token_cleanup_worker import RefreshTokenCleanupWorker

__all__ = ["RefreshTokenCleanupWorker"]

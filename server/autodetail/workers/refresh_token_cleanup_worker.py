"""Background worker that purges dead refresh tokens."""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import delete, or_
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..core.database import async_session_factory
from ..models.admin import RefreshToken
from .base import BaseWorker

logger = logging.getLogger(__name__)


async def purge_refresh_tokens(db: AsyncSession, now: Optional[datetime] = None) -> int:
    """Delete expired or revoked refresh tokens. Returns how many were removed."""
    now = now or datetime.now(timezone.utc)
    result = await db.execute(
        delete(RefreshToken).where(
            or_(RefreshToken.expires_at <= now, RefreshToken.is_revoked.is_(True))
        )
    )
    await db.commit()
    return result.rowcount or 0


class RefreshTokenCleanupWorker(BaseWorker):
    """Keeps ``refresh_tokens`` down to live sessions."""

    def __init__(
        self,
        interval_seconds: int = 3600,
        session_factory: async_sessionmaker = async_session_factory,
    ):
        super().__init__(name="RefreshTokenCleanup", interval_seconds=interval_seconds)
        self.session_factory = session_factory

    async def process(self) -> None:
        async with self.session_factory() as db:
            try:
                removed = await purge_refresh_tokens(db)
            except Exception:
                await db.rollback()
                raise

        if removed:
            logger.info(
                f"Purged {removed} refresh tokens",
                extra={"removed_count": removed, "worker": self.name}
            )

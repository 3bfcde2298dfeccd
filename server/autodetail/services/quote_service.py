"""Quote requests from the contact form."""

import logging
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import NotFoundError, ValidationError
from ..core.observability import metrics_collector
from ..models.quote import Quote, QuoteStatus
from ..schemas.quote import CreateQuoteRequest
from .notification_service import NEW_QUOTE, NotificationService

logger = logging.getLogger(__name__)

VALID_QUOTE_STATUSES = {status.value for status in QuoteStatus}


class QuoteService:
    """Service for quote-related operations."""

    def __init__(self, db: AsyncSession, notifications: Optional[NotificationService] = None):
        self.db = db
        self.notifications = notifications

    async def create_quote(self, request: CreateQuoteRequest) -> Quote:
        quote = Quote(
            name=request.name.strip(),
            email=str(request.email),
            phone=request.phone,
            vehicle_type=request.vehicle_type.value if request.vehicle_type else None,
            service_type=request.service_type,
            preferred_date=request.preferred_date,
            message=request.message,
            status=QuoteStatus.NEW.value,
        )
        self.db.add(quote)
        await self.db.commit()
        await self.db.refresh(quote)

        metrics_collector.record_quote_received()
        logger.info("Quote request received", extra={"quote_id": quote.id})

        if self.notifications is not None:
            await self.notifications.send(NEW_QUOTE, {
                "quote_id": quote.id,
                "name": quote.name,
                "email": quote.email,
                "phone": quote.phone,
                "vehicle_type": quote.vehicle_type,
                "service_type": quote.service_type,
                "preferred_date": quote.preferred_date.isoformat() if quote.preferred_date else None,
                "message": quote.message,
            })

        return quote

    async def list_quotes(self) -> list[Quote]:
        result = await self.db.execute(select(Quote).order_by(Quote.created_at.desc(), Quote.id.desc()))
        return list(result.scalars().all())

    async def _get(self, quote_id: int) -> Quote:
        quote = await self.db.get(Quote, quote_id)
        if quote is None:
            raise NotFoundError("quote", str(quote_id))
        return quote

    async def update_status(self, quote_id: int, status: str) -> Quote:
        if status not in VALID_QUOTE_STATUSES:
            raise ValidationError("Invalid status")

        quote = await self._get(quote_id)
        quote.status = status
        await self.db.commit()
        await self.db.refresh(quote)

        logger.info("Quote status updated", extra={"quote_id": quote_id, "status": status})
        return quote

    async def delete_quote(self, quote_id: int) -> dict[str, Any]:
        quote = await self._get(quote_id)
        deleted = {"id": quote.id, "label": quote.name}
        await self.db.delete(quote)
        await self.db.commit()

        logger.info("Quote deleted", extra={"quote_id": quote_id})
        return deleted

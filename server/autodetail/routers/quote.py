"""Quote request router."""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import DatabaseSession, Notifications, RequiredAdmin
from ..core.exceptions import ProblemDetailsException, internal_error
from ..core.rate_limit import general_limit, submission_limit
from ..schemas.common import DeletedRecord, DeleteResponse
from ..schemas.quote import CreateQuoteRequest, Quote, UpdateQuoteStatusRequest
from ..services.notification_service import NotificationService
from ..services.quote_service import QuoteService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/quotes", tags=["quotes"], dependencies=[Depends(general_limit)])


@router.post("", response_model=Quote, status_code=201, dependencies=[Depends(submission_limit)])
async def request_quote(
    request: CreateQuoteRequest,
    db: AsyncSession = DatabaseSession,
    notifications: NotificationService = Notifications,
) -> JSONResponse:
    try:
        quote = await QuoteService(db, notifications).create_quote(request)
        return JSONResponse(status_code=201, content=Quote.model_validate(quote).to_json())

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise internal_error(logger, "submit quote request", e) from e


@router.get("", response_model=list[Quote])
async def list_quotes(
    db: AsyncSession = DatabaseSession,
    admin: dict = RequiredAdmin,
) -> JSONResponse:
    try:
        quotes = await QuoteService(db).list_quotes()
        return JSONResponse(content=[Quote.model_validate(q).to_json() for q in quotes])

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise internal_error(logger, "fetch quotes", e) from e


@router.patch("/{quote_id}/status", response_model=Quote)
async def update_quote_status(
    quote_id: int,
    request: UpdateQuoteStatusRequest,
    db: AsyncSession = DatabaseSession,
    admin: dict = RequiredAdmin,
) -> JSONResponse:
    try:
        quote = await QuoteService(db).update_status(quote_id, request.status)
        return JSONResponse(content=Quote.model_validate(quote).to_json())

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise internal_error(logger, "update quote", e, quote_id=quote_id) from e


@router.delete("/{quote_id}", response_model=DeleteResponse)
async def delete_quote(
    quote_id: int,
    db: AsyncSession = DatabaseSession,
    admin: dict = RequiredAdmin,
) -> JSONResponse:
    try:
        deleted = await QuoteService(db).delete_quote(quote_id)
        return JSONResponse(content=DeleteResponse(deleted=DeletedRecord(**deleted)).to_json())

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise internal_error(logger, "delete quote", e, quote_id=quote_id) from e

"""Coupon router: admin management plus public validate/apply."""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import DatabaseSession, RequiredAdmin
from ..core.exceptions import ProblemDetailsException, internal_error
from ..core.rate_limit import general_limit
from ..schemas.common import DeletedRecord, DeleteResponse
from ..schemas.coupon import (
    ApplyCouponRequest,
    ApplyCouponResponse,
    Coupon,
    CreateCouponRequest,
    ValidateCouponRequest,
    ValidateCouponResponse,
)
from ..services.coupon_service import CouponService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/coupons", tags=["coupons"], dependencies=[Depends(general_limit)])


@router.get("", response_model=list[Coupon])
async def list_coupons(
    db: AsyncSession = DatabaseSession,
    admin: dict = RequiredAdmin,
) -> JSONResponse:
    try:
        coupons = await CouponService(db).list_coupons()
        return JSONResponse(content=[Coupon.model_validate(c).to_json() for c in coupons])

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise internal_error(logger, "fetch coupons", e) from e


@router.post("", response_model=Coupon, status_code=201)
async def create_coupon(
    request: CreateCouponRequest,
    db: AsyncSession = DatabaseSession,
    admin: dict = RequiredAdmin,
) -> JSONResponse:
    try:
        coupon = await CouponService(db).create_coupon(request)
        return JSONResponse(status_code=201, content=Coupon.model_validate(coupon).to_json())

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise internal_error(logger, "create coupon", e) from e


@router.patch("/{coupon_id}/toggle", response_model=Coupon)
async def toggle_coupon(
    coupon_id: int,
    db: AsyncSession = DatabaseSession,
    admin: dict = RequiredAdmin,
) -> JSONResponse:
    try:
        coupon = await CouponService(db).toggle_coupon(coupon_id)
        return JSONResponse(content=Coupon.model_validate(coupon).to_json())

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise internal_error(logger, "toggle coupon", e, coupon_id=coupon_id) from e


@router.delete("/{coupon_id}", response_model=DeleteResponse)
async def delete_coupon(
    coupon_id: int,
    db: AsyncSession = DatabaseSession,
    admin: dict = RequiredAdmin,
) -> JSONResponse:
    try:
        deleted = await CouponService(db).delete_coupon(coupon_id)
        return JSONResponse(content=DeleteResponse(deleted=DeletedRecord(**deleted)).to_json())

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise internal_error(logger, "delete coupon", e, coupon_id=coupon_id) from e


@router.post("/validate", response_model=ValidateCouponResponse)
async def validate_coupon(
    request: ValidateCouponRequest,
    db: AsyncSession = DatabaseSession,
) -> JSONResponse:
    """Preview the discount a code grants on a subtotal. Nothing is changed."""
    try:
        result = await CouponService(db).validate_coupon(request.code, request.subtotal)
        return JSONResponse(content=ValidateCouponResponse(**result).to_json())

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise internal_error(logger, "validate coupon", e) from e


@router.post("/apply", response_model=ApplyCouponResponse)
async def apply_coupon(
    request: ApplyCouponRequest,
    db: AsyncSession = DatabaseSession,
) -> JSONResponse:
    """Discount an unpaid booking from its payment page."""
    try:
        result = await CouponService(db).apply_coupon(request.code, request.booking_id)
        return JSONResponse(content=ApplyCouponResponse(**result).to_json())

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise internal_error(logger, "apply coupon", e, booking_id=request.booking_id) from e

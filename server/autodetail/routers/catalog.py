"""Catalog routers: services and legacy packages under /api/packages, add-ons under /api/addons."""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import DatabaseSession, RequiredAdmin
from ..core.exceptions import ProblemDetailsException, internal_error
from ..core.rate_limit import general_limit
from ..schemas.catalog import (
    Addon,
    CreateAddonRequest,
    CreateServiceRequest,
    Package,
    Service,
    UpdateAddonRequest,
    UpdateServiceRequest,
)
from ..schemas.common import DeletedRecord, DeleteResponse
from ..services.catalog_service import CatalogService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/packages", tags=["catalog"], dependencies=[Depends(general_limit)])
addon_router = APIRouter(prefix="/api/addons", tags=["catalog"], dependencies=[Depends(general_limit)])


@router.get("", response_model=list[Package])
async def list_packages(db: AsyncSession = DatabaseSession) -> JSONResponse:
    """Active legacy packages."""
    try:
        packages = await CatalogService(db).list_packages()
        return JSONResponse(content=[Package.model_validate(p).to_json() for p in packages])

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise internal_error(logger, "fetch packages", e) from e


@router.get("/services", response_model=list[Service])
async def list_services(db: AsyncSession = DatabaseSession) -> JSONResponse:
    """Active services in display order."""
    try:
        services = await CatalogService(db).list_services()
        return JSONResponse(content=[Service.model_validate(s).to_json() for s in services])

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise internal_error(logger, "fetch services", e) from e


@router.get("/services/{service_id}", response_model=Service)
async def get_service(service_id: int, db: AsyncSession = DatabaseSession) -> JSONResponse:
    try:
        service = await CatalogService(db).get_service(service_id)
        return JSONResponse(content=Service.model_validate(service).to_json())

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise internal_error(logger, "fetch service", e, service_id=service_id) from e


@router.post("/services", response_model=Service, status_code=201)
async def create_service(
    request: CreateServiceRequest,
    db: AsyncSession = DatabaseSession,
    admin: dict = RequiredAdmin,
) -> JSONResponse:
    try:
        service = await CatalogService(db).create_service(request)
        return JSONResponse(status_code=201, content=Service.model_validate(service).to_json())

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise internal_error(logger, "create service", e) from e


@router.put("/services/{service_id}", response_model=Service)
async def update_service(
    service_id: int,
    request: UpdateServiceRequest,
    db: AsyncSession = DatabaseSession,
    admin: dict = RequiredAdmin,
) -> JSONResponse:
    try:
        service = await CatalogService(db).update_service(service_id, request)
        return JSONResponse(content=Service.model_validate(service).to_json())

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise internal_error(logger, "update service", e, service_id=service_id) from e


@router.delete("/services/{service_id}", response_model=DeleteResponse)
async def delete_service(
    service_id: int,
    db: AsyncSession = DatabaseSession,
    admin: dict = RequiredAdmin,
) -> JSONResponse:
    try:
        deleted = await CatalogService(db).delete_service(service_id)
        return JSONResponse(content=DeleteResponse(deleted=DeletedRecord(**deleted)).to_json())

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise internal_error(logger, "delete service", e, service_id=service_id) from e


@addon_router.get("", response_model=list[Addon])
async def list_addons(db: AsyncSession = DatabaseSession) -> JSONResponse:
    """Active add-ons in display order."""
    try:
        addons = await CatalogService(db).list_addons()
        return JSONResponse(content=[Addon.model_validate(a).to_json() for a in addons])

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise internal_error(logger, "fetch add-ons", e) from e


@addon_router.post("", response_model=Addon, status_code=201)
async def create_addon(
    request: CreateAddonRequest,
    db: AsyncSession = DatabaseSession,
    admin: dict = RequiredAdmin,
) -> JSONResponse:
    try:
        addon = await CatalogService(db).create_addon(request)
        return JSONResponse(status_code=201, content=Addon.model_validate(addon).to_json())

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise internal_error(logger, "create add-on", e) from e


@addon_router.put("/{addon_id}", response_model=Addon)
async def update_addon(
    addon_id: int,
    request: UpdateAddonRequest,
    db: AsyncSession = DatabaseSession,
    admin: dict = RequiredAdmin,
) -> JSONResponse:
    try:
        addon = await CatalogService(db).update_addon(addon_id, request)
        return JSONResponse(content=Addon.model_validate(addon).to_json())

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise internal_error(logger, "update add-on", e, addon_id=addon_id) from e


@addon_router.delete("/{addon_id}", response_model=DeleteResponse)
async def delete_addon(
    addon_id: int,
    db: AsyncSession = DatabaseSession,
    admin: dict = RequiredAdmin,
) -> JSONResponse:
    try:
        deleted = await CatalogService(db).delete_addon(addon_id)
        return JSONResponse(content=DeleteResponse(deleted=DeletedRecord(**deleted)).to_json())

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise internal_error(logger, "delete add-on", e, addon_id=addon_id) from e

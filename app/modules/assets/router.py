import uuid
from datetime import datetime
from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.config import settings
from app.core.db import get_session
from app.core.errors import PayloadTooLargeError, validation_error_from
from app.core.paging import Page, DEFAULT_LIMIT
from app.core.security import get_principal, require_scopes, Principal
from app.modules.assets.schemas import AssetCreate, AssetUpdate, AssetFilter, AssetOut, DeleteResult
from app.modules.assets.service import AssetService
from app.platform.ports.object_storage import ObjectStoragePort
from app.platform.provider_registry import get_object_storage

router = APIRouter()

def svc(
    session: AsyncSession = Depends(get_session),
    storage: ObjectStoragePort = Depends(get_object_storage),
) -> AssetService:
    return AssetService(session, storage)

def asset_filter(
    asset_group_id: uuid.UUID | None = Query(None, alias="assetGroupId"),
    search: str | None = Query(None),
    mime_type: str | None = Query(None, alias="mimeType"),
    min_size: int | None = Query(None, alias="minSize"),
    max_size: int | None = Query(None, alias="maxSize"),
    created_after: datetime | None = Query(None, alias="createdAfter"),
    created_before: datetime | None = Query(None, alias="createdBefore"),
    has_group: bool | None = Query(None, alias="hasGroup"),
    sort_by: str | None = Query(None, alias="sortBy"),
    sort_order: str | None = Query(None, alias="sortOrder"),
    date_filter: str | None = Query(None, alias="dateFilter"),
    page: int = Query(1),
    limit: int = Query(DEFAULT_LIMIT),
) -> AssetFilter:
    """Collect the listing query string into an AssetFilter; bad values are 400s, not 422s."""
    try:
        return AssetFilter(
            asset_group_id=asset_group_id,
            search=search,
            mime_type=mime_type,
            min_size=min_size,
            max_size=max_size,
            created_after=created_after,
            created_before=created_before,
            has_group=has_group,
            sort_by=sort_by or None,
            sort_order=sort_order or None,
            date_filter=date_filter or None,
            page=page,
            limit=limit,
        )
    except PydanticValidationError as e:
        raise validation_error_from(e)

@router.post("/upload", response_model=AssetOut, status_code=201, dependencies=[Depends(require_scopes("assets:write"))])
async def upload_asset(
    file: UploadFile | None = File(None),
    name: str = Form(...),
    asset_group_id: uuid.UUID | None = Form(None, alias="assetGroupId"),
    principal: Principal = Depends(get_principal),
    service: AssetService = Depends(svc),
):
    if file is not None and file.size is not None and file.size > settings.MAX_UPLOAD_BYTES:
        raise PayloadTooLargeError(f"File too large (>{settings.MAX_UPLOAD_BYTES // (1024 * 1024)}MB)")
    try:
        payload = AssetCreate(name=name, asset_group_id=asset_group_id)
    except PydanticValidationError as e:
        raise validation_error_from(e)
    return await service.create(principal.user_id, payload, file)

@router.get("", response_model=Page[AssetOut], dependencies=[Depends(require_scopes("assets:read"))])
async def list_assets(
    f: AssetFilter = Depends(asset_filter),
    principal: Principal = Depends(get_principal),
    service: AssetService = Depends(svc),
):
    return await service.list(principal.user_id, f)

@router.get("/{asset_id}", response_model=AssetOut, dependencies=[Depends(require_scopes("assets:read"))])
async def get_asset(
    asset_id: uuid.UUID,
    principal: Principal = Depends(get_principal),
    service: AssetService = Depends(svc),
):
    return await service.get(principal.user_id, asset_id)

@router.patch("/{asset_id}", response_model=AssetOut, dependencies=[Depends(require_scopes("assets:write"))])
async def update_asset(
    asset_id: uuid.UUID,
    payload: AssetUpdate,
    principal: Principal = Depends(get_principal),
    service: AssetService = Depends(svc),
):
    return await service.update(principal.user_id, asset_id, payload)

@router.delete("/{asset_id}", response_model=DeleteResult, dependencies=[Depends(require_scopes("assets:write"))])
async def delete_asset(
    asset_id: uuid.UUID,
    principal: Principal = Depends(get_principal),
    service: AssetService = Depends(svc),
):
    return await service.delete(principal.user_id, asset_id)

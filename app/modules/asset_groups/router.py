import uuid
from datetime import datetime
from fastapi import APIRouter, Depends, Query
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.db import get_session
from app.core.errors import validation_error_from
from app.core.paging import Page, DEFAULT_LIMIT
from app.core.security import get_principal, require_scopes, Principal
from app.modules.assets.router import asset_filter
from app.modules.assets.schemas import AssetFilter, AssetOut, DeleteResult
from app.modules.asset_groups.schemas import (
    AssetGroupCreate, AssetGroupUpdate, AssetGroupFilter, AssetGroupOut,
    AttachAssets, AttachResult, ReconcileResult,
)
from app.modules.asset_groups.service import AssetGroupService
from app.platform.ports.object_storage import ObjectStoragePort
from app.platform.provider_registry import get_object_storage

router = APIRouter()

def svc(
    session: AsyncSession = Depends(get_session),
    storage: ObjectStoragePort = Depends(get_object_storage),
) -> AssetGroupService:
    return AssetGroupService(session, storage)

def group_filter(
    search: str | None = Query(None),
    created_after: datetime | None = Query(None, alias="createdAfter"),
    created_before: datetime | None = Query(None, alias="createdBefore"),
    min_assets: int | None = Query(None, alias="minAssets"),
    max_assets: int | None = Query(None, alias="maxAssets"),
    min_size: int | None = Query(None, alias="minSize"),
    max_size: int | None = Query(None, alias="maxSize"),
    has_assets: bool | None = Query(None, alias="hasAssets"),
    sort_by: str | None = Query(None, alias="sortBy"),
    sort_order: str | None = Query(None, alias="sortOrder"),
    date_filter: str | None = Query(None, alias="dateFilter"),
    page: int = Query(1),
    limit: int = Query(DEFAULT_LIMIT),
) -> AssetGroupFilter:
    try:
        return AssetGroupFilter(
            search=search,
            created_after=created_after,
            created_before=created_before,
            min_assets=min_assets,
            max_assets=max_assets,
            min_size=min_size,
            max_size=max_size,
            has_assets=has_assets,
            sort_by=sort_by or None,
            sort_order=sort_order or None,
            date_filter=date_filter or None,
            page=page,
            limit=limit,
        )
    except PydanticValidationError as e:
        raise validation_error_from(e)

@router.post("", response_model=AssetGroupOut, status_code=201, dependencies=[Depends(require_scopes("assets:write"))])
async def create_asset_group(
    payload: AssetGroupCreate,
    principal: Principal = Depends(get_principal),
    service: AssetGroupService = Depends(svc),
):
    return await service.create(principal.user_id, payload)

@router.get("", response_model=Page[AssetGroupOut], dependencies=[Depends(require_scopes("assets:read"))])
async def list_asset_groups(
    f: AssetGroupFilter = Depends(group_filter),
    principal: Principal = Depends(get_principal),
    service: AssetGroupService = Depends(svc),
):
    return await service.list(principal.user_id, f)

@router.post("/reconcile", response_model=ReconcileResult, dependencies=[Depends(require_scopes("assets:write"))])
async def reconcile_asset_groups(principal: Principal = Depends(get_principal), service: AssetGroupService = Depends(svc)):
    return await service.reconcile(principal.user_id)

@router.get("/{group_id}", response_model=AssetGroupOut, dependencies=[Depends(require_scopes("assets:read"))])
async def get_asset_group(
    group_id: uuid.UUID,
    principal: Principal = Depends(get_principal),
    service: AssetGroupService = Depends(svc),
):
    return await service.get(principal.user_id, group_id)

@router.get("/{group_id}/assets", response_model=Page[AssetOut], dependencies=[Depends(require_scopes("assets:read"))])
async def list_assets_in_group(
    group_id: uuid.UUID,
    f: AssetFilter = Depends(asset_filter),
    principal: Principal = Depends(get_principal),
    service: AssetGroupService = Depends(svc),
):
    return await service.list_assets(principal.user_id, group_id, f)

@router.patch("/{group_id}", response_model=AssetGroupOut, dependencies=[Depends(require_scopes("assets:write"))])
async def update_asset_group(
    group_id: uuid.UUID,
    payload: AssetGroupUpdate,
    principal: Principal = Depends(get_principal),
    service: AssetGroupService = Depends(svc),
):
    return await service.update(principal.user_id, group_id, payload)

@router.delete("/{group_id}", response_model=DeleteResult, dependencies=[Depends(require_scopes("assets:write"))])
async def delete_asset_group(
    group_id: uuid.UUID,
    principal: Principal = Depends(get_principal),
    service: AssetGroupService = Depends(svc),
):
    return await service.delete(principal.user_id, group_id)

@router.post("/{group_id}/attach-assets", response_model=AttachResult, dependencies=[Depends(require_scopes("assets:write"))])
async def attach_assets_to_group(
    group_id: uuid.UUID,
    payload: AttachAssets,
    principal: Principal = Depends(get_principal),
    service: AssetGroupService = Depends(svc),
):
    return await service.attach_assets(principal.user_id, group_id, payload.asset_ids)

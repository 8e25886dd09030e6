import uuid
from datetime import datetime
from fastapi import APIRouter, Depends, Query
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.db import get_session
from app.core.errors import validation_error_from
from app.core.paging import Page, DEFAULT_LIMIT
from app.core.security import get_principal, require_scopes, Principal
from app.modules.assets.schemas import DeleteResult
from app.modules.families.schemas import FamilyCreate, FamilyUpdate, FamilyFilter, FamilyOut
from app.modules.families.service import FamilyService

router = APIRouter()

def svc(session: AsyncSession = Depends(get_session)) -> FamilyService:
    return FamilyService(session)

def family_filter(
    search: str | None = Query(None),
    created_after: datetime | None = Query(None, alias="createdAfter"),
    created_before: datetime | None = Query(None, alias="createdBefore"),
    sort_by: str | None = Query(None, alias="sortBy"),
    sort_order: str | None = Query(None, alias="sortOrder"),
    date_filter: str | None = Query(None, alias="dateFilter"),
    page: int = Query(1),
    limit: int = Query(DEFAULT_LIMIT),
) -> FamilyFilter:
    # unset sort params keep the model defaults (name, ascending)
    params = {
        "search": search,
        "created_after": created_after,
        "created_before": created_before,
        "date_filter": date_filter or None,
        "page": page,
        "limit": limit,
    }
    if sort_by:
        params["sort_by"] = sort_by
    if sort_order:
        params["sort_order"] = sort_order
    try:
        return FamilyFilter(**params)
    except PydanticValidationError as e:
        raise validation_error_from(e)

@router.post("", response_model=FamilyOut, status_code=201, dependencies=[Depends(require_scopes("families:write"))])
async def create_family(
    payload: FamilyCreate,
    principal: Principal = Depends(get_principal),
    service: FamilyService = Depends(svc),
):
    return await service.create(principal.user_id, payload)

@router.get("", response_model=Page[FamilyOut], dependencies=[Depends(require_scopes("families:read"))])
async def list_families(
    f: FamilyFilter = Depends(family_filter),
    principal: Principal = Depends(get_principal),
    service: FamilyService = Depends(svc),
):
    return await service.list(principal.user_id, f)

@router.get("/{family_id}", response_model=FamilyOut, dependencies=[Depends(require_scopes("families:read"))])
async def get_family(
    family_id: uuid.UUID,
    principal: Principal = Depends(get_principal),
    service: FamilyService = Depends(svc),
):
    return await service.get(principal.user_id, family_id)

@router.patch("/{family_id}", response_model=FamilyOut, dependencies=[Depends(require_scopes("families:write"))])
async def update_family(
    family_id: uuid.UUID,
    payload: FamilyUpdate,
    principal: Principal = Depends(get_principal),
    service: FamilyService = Depends(svc),
):
    return await service.update(principal.user_id, family_id, payload)

@router.delete("/{family_id}", response_model=DeleteResult, dependencies=[Depends(require_scopes("families:write"))])
async def delete_family(
    family_id: uuid.UUID,
    principal: Principal = Depends(get_principal),
    service: FamilyService = Depends(svc),
):
    return await service.delete(principal.user_id, family_id)

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.config import settings
from app.core.db import get_session
from app.core.paging import Page
from app.core.security import get_principal, require_scopes, Principal
from app.modules.notifications.schemas import NotificationOut, NotificationStats, CleanupResult, EntityType, ActionType
from app.modules.notifications.service import NotificationService

router = APIRouter()

def svc(s: AsyncSession = Depends(get_session)) -> NotificationService:
    return NotificationService(s)

@router.get("", response_model=Page[NotificationOut], dependencies=[Depends(require_scopes("notifications:read"))])
async def list_notifications(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1),
    entity_type: EntityType | None = Query(None, alias="entityType"),
    action: ActionType | None = Query(None),
    principal: Principal = Depends(get_principal),
    service: NotificationService = Depends(svc),
):
    return await service.get_notifications(
        principal.user_id, page, limit,
        entity_type.value if entity_type else None,
        action.value if action else None,
    )

@router.get("/stats", response_model=NotificationStats, dependencies=[Depends(require_scopes("notifications:read"))])
async def notification_stats(principal: Principal = Depends(get_principal), service: NotificationService = Depends(svc)):
    return await service.stats(principal.user_id)

@router.delete("/cleanup", response_model=CleanupResult, dependencies=[Depends(require_scopes("notifications:write"))])
async def cleanup_notifications(principal: Principal = Depends(get_principal), service: NotificationService = Depends(svc)):
    deleted = await service.delete_old_notifications(principal.user_id, settings.NOTIFICATION_RETENTION_DAYS)
    return {"message": f"Successfully deleted {deleted} old notifications", "deleted_count": deleted}

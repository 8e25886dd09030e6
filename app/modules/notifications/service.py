import logging
import uuid
from datetime import datetime, timedelta, timezone
from sqlalchemy import select, delete, func
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.paging import normalize_page, paginate
from app.modules.notifications.models import Notification
from app.modules.notifications.schemas import EntityType, ActionType

log = logging.getLogger(__name__)

_DISPLAY_NAMES = {
    EntityType.PRODUCT: "Product",
    EntityType.ATTRIBUTE: "Attribute",
    EntityType.ATTRIBUTE_GROUP: "Attribute Group",
    EntityType.CATEGORY: "Category",
    EntityType.FAMILY: "Family",
    EntityType.ASSET: "Asset",
    EntityType.ASSET_GROUP: "Asset Group",
    EntityType.PRODUCT_VARIANT: "Product Variant",
    EntityType.PRODUCT_ATTRIBUTE: "Product Attribute",
}

_BULK_VERBS = {
    ActionType.BULK_CREATED: "created",
    ActionType.BULK_UPDATED: "updated",
    ActionType.BULK_DELETED: "deleted",
}

def entity_display_name(entity_type: EntityType | str) -> str:
    try:
        return _DISPLAY_NAMES[EntityType(entity_type)]
    except ValueError:
        return "Item"

def generate_message(entity_type: EntityType | str, action: ActionType | str, entity_name: str | None, metadata: dict | None = None) -> str:
    display = entity_display_name(entity_type)
    metadata = metadata or {}
    try:
        action = ActionType(action)
    except ValueError:
        return f'{display} "{entity_name}" was {action}'

    if action in _BULK_VERBS:
        count = metadata.get("count") or "Multiple"
        noun = display.lower() + ("" if count == 1 else "s")
        verb = "was" if count == 1 else "were"
        return f"{count} {noun} {verb} {_BULK_VERBS[action]}"
    if action in (ActionType.LINKED, ActionType.UNLINKED):
        details = metadata.get("details")
        suffix = f" {details}" if details else ""
        return f'{display} "{entity_name}" was {action.value}{suffix}'
    return f'{display} "{entity_name}" was {action.value}'

class NotificationService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_notification(
        self,
        user_id: uuid.UUID,
        entity_type: EntityType,
        action: ActionType,
        entity_name: str | None,
        entity_id: uuid.UUID | None = None,
        metadata: dict | None = None,
    ) -> Notification | None:
        """Append an audit record. Best-effort: failures are logged, never raised."""
        try:
            message = generate_message(entity_type, action, entity_name, metadata)
            obj = Notification(
                user_id=user_id,
                entity_type=EntityType(entity_type).value,
                entity_id=entity_id,
                action=ActionType(action).value,
                entity_name=entity_name,
                message=message,
                meta=metadata or {},
            )
            self.session.add(obj)
            await self.session.commit()
            log.info("Notification created for user %s: %s", user_id, message)
            return obj
        except Exception:
            log.exception("Failed to create notification for user %s", user_id)
            await self.session.rollback()
            return None

    async def log_created(self, user_id: uuid.UUID, entity_type: EntityType, name: str, entity_id: uuid.UUID | None = None):
        return await self.create_notification(user_id, entity_type, ActionType.CREATED, name, entity_id)

    async def log_updated(self, user_id: uuid.UUID, entity_type: EntityType, name: str, entity_id: uuid.UUID | None = None, old_values: dict | None = None, new_values: dict | None = None):
        metadata = {"oldValues": old_values, "newValues": new_values} if (old_values or new_values) else None
        return await self.create_notification(user_id, entity_type, ActionType.UPDATED, name, entity_id, metadata)

    async def log_deleted(self, user_id: uuid.UUID, entity_type: EntityType, name: str):
        return await self.create_notification(user_id, entity_type, ActionType.DELETED, name)

    async def log_bulk(self, user_id: uuid.UUID, entity_type: EntityType, action: ActionType, count: int, label: str):
        return await self.create_notification(user_id, entity_type, action, label, None, {"count": count})

    async def log_link(self, user_id: uuid.UUID, entity_type: EntityType, name: str, details: str | None = None, *, unlink: bool = False):
        action = ActionType.UNLINKED if unlink else ActionType.LINKED
        return await self.create_notification(user_id, entity_type, action, name, None, {"details": details} if details else None)

    async def get_notifications(self, user_id: uuid.UUID, page: int = 1, limit: int = 20, entity_type: str | None = None, action: str | None = None) -> dict:
        page, limit, offset = normalize_page(page, limit)
        cond = [Notification.user_id == user_id]
        if entity_type:
            cond.append(Notification.entity_type == entity_type)
        if action:
            cond.append(Notification.action == action)

        q = select(Notification).where(*cond).order_by(Notification.created_at.desc(), Notification.id).offset(offset).limit(limit)
        rows = (await self.session.execute(q)).scalars().all()
        total = (await self.session.execute(select(func.count()).select_from(Notification).where(*cond))).scalar_one()
        return paginate(list(rows), total, page, limit)

    async def delete_old_notifications(self, user_id: uuid.UUID, days_to_keep: int = 30) -> int:
        cutoff = datetime.now(timezone.utc) - timedelta(days=days_to_keep)
        res = await self.session.execute(
            delete(Notification)
            .where(Notification.user_id == user_id, Notification.created_at < cutoff)
            .execution_options(synchronize_session=False)
        )
        await self.session.commit()
        log.info("Deleted %s old notifications for user %s", res.rowcount, user_id)
        return res.rowcount or 0

    async def stats(self, user_id: uuid.UUID) -> dict:
        owned = Notification.user_id == user_id
        by_type = await self.session.execute(
            select(Notification.entity_type, func.count()).where(owned).group_by(Notification.entity_type)
        )
        by_action = await self.session.execute(
            select(Notification.action, func.count()).where(owned).group_by(Notification.action)
        )
        since = datetime.now(timezone.utc) - timedelta(days=1)
        recent = await self.session.execute(
            select(func.count()).select_from(Notification).where(owned, Notification.created_at > since)
        )
        by_entity_type = {k: v for k, v in by_type.all()}
        return {
            "total_notifications": sum(by_entity_type.values()),
            "by_entity_type": by_entity_type,
            "by_action": {k: v for k, v in by_action.all()},
            "recent_activity": recent.scalar_one(),
        }

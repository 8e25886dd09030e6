import logging
import uuid
from typing import Sequence
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.errors import NotFoundError, ConflictError
from app.core.paging import paginate
from app.modules.assets.aggregator import GroupSizeAggregator
from app.modules.assets.models import AssetGroup
from app.modules.assets.repository import AssetRepository, AssetGroupRepository
from app.modules.assets.schemas import AssetFilter
from app.modules.assets.service import AssetService
from app.modules.assets.sizes import format_file_size
from app.modules.asset_groups.repository import AssetGroupListing
from app.modules.asset_groups.schemas import AssetGroupCreate, AssetGroupUpdate, AssetGroupFilter, AssetGroupOut
from app.modules.notifications.schemas import EntityType
from app.modules.notifications.service import NotificationService
from app.platform.ports.object_storage import ObjectStoragePort

log = logging.getLogger(__name__)

def to_out(group: AssetGroup, asset_count: int) -> AssetGroupOut:
    return AssetGroupOut(
        id=group.id,
        user_id=group.user_id,
        name=group.name,
        total_size=group.total_size,
        formatted_size=format_file_size(group.total_size),
        asset_count=asset_count,
        created_at=group.created_at,
        updated_at=group.updated_at,
    )

class AssetGroupService:
    def __init__(self, session: AsyncSession, storage: ObjectStoragePort):
        self.session = session
        self.storage = storage
        self.repo = AssetGroupRepository(session)
        self.assets = AssetRepository(session)
        self.listing = AssetGroupListing(session)
        self.aggregator = GroupSizeAggregator(session)
        self.notifications = NotificationService(session)

    async def create(self, user_id: uuid.UUID, payload: AssetGroupCreate) -> AssetGroupOut:
        if await self.repo.get_by_name(user_id, payload.name):
            raise ConflictError("Asset group with this name already exists")
        try:
            group = await self.repo.create(user_id, name=payload.name, total_size=0)
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise ConflictError("Asset group with this name already exists") from e

        await self.notifications.log_created(user_id, EntityType.ASSET_GROUP, group.name, group.id)
        await self.session.refresh(group)
        return to_out(group, 0)

    async def list(self, user_id: uuid.UUID, f: AssetGroupFilter) -> dict:
        rows, total, page, limit = await self.listing.page(user_id, f)
        return paginate([to_out(group, count) for group, count in rows], total, page, limit)

    async def get(self, user_id: uuid.UUID, group_id: uuid.UUID) -> AssetGroupOut:
        group = await self._require_group(user_id, group_id)
        return to_out(group, await self.listing.asset_count(group.id))

    async def list_assets(self, user_id: uuid.UUID, group_id: uuid.UUID, f: AssetFilter) -> dict:
        await self._require_group(user_id, group_id)
        scoped = f.model_copy(update={"asset_group_id": group_id, "has_group": None})
        return await AssetService(self.session, self.storage).list(user_id, scoped)

    async def update(self, user_id: uuid.UUID, group_id: uuid.UUID, payload: AssetGroupUpdate) -> AssetGroupOut:
        group = await self._require_group(user_id, group_id)
        old_name = group.name
        if payload.name and payload.name != group.name:
            if await self.repo.get_by_name(user_id, payload.name, exclude_id=group.id):
                raise ConflictError("Asset group with this name already exists")
            try:
                group.name = payload.name
                await self.session.commit()
            except IntegrityError as e:
                await self.session.rollback()
                raise ConflictError("Asset group with this name already exists") from e
            await self.notifications.log_updated(
                user_id, EntityType.ASSET_GROUP, payload.name, group.id,
                old_values={"name": old_name}, new_values={"name": payload.name},
            )
            await self.session.refresh(group)
        return to_out(group, await self.listing.asset_count(group.id))

    async def delete(self, user_id: uuid.UUID, group_id: uuid.UUID) -> dict:
        """Members are detached rather than deleted; the group row goes last."""
        group = await self._require_group(user_id, group_id)
        name = group.name
        detached = await self.assets.detach_group(user_id, group.id)
        await self.repo.delete(group)
        await self.session.commit()
        log.info("Asset group %s deleted, %s assets detached", group_id, detached)

        await self.notifications.log_deleted(user_id, EntityType.ASSET_GROUP, name)
        return {"message": "Asset group deleted successfully"}

    async def attach_assets(self, user_id: uuid.UUID, group_id: uuid.UUID, asset_ids: Sequence[uuid.UUID]) -> dict:
        group = await self._require_group(user_id, group_id)
        name = group.name
        ids = list(dict.fromkeys(asset_ids))
        previous = await self.assets.group_ids_of(user_id, ids)
        moved = await self.assets.move_to_group(user_id, ids, group.id)
        await self.session.commit()

        await self.aggregator.refresh(group.id, *sorted(previous - {group.id}, key=str))
        if moved:
            await self.notifications.log_link(
                user_id, EntityType.ASSET_GROUP, name,
                f"with {moved} asset{'s' if moved != 1 else ''}",
            )
        return {"message": f"{moved} assets attached to group {name}", "attached_count": moved}

    async def reconcile(self, user_id: uuid.UUID) -> dict:
        totals = await self.aggregator.reconcile(user_id)
        return {"message": f"Recomputed total size for {len(totals)} asset groups", "groups": len(totals)}

    async def _require_group(self, user_id: uuid.UUID, group_id: uuid.UUID) -> AssetGroup:
        group = await self.repo.get(user_id, group_id)
        if group is None:
            raise NotFoundError("Asset group not found")
        return group

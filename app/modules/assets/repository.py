import uuid
from typing import Sequence
from sqlalchemy import select, update, func
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.paging import normalize_page
from app.modules.assets.models import Asset, AssetGroup
from app.modules.assets.query import build_asset_conditions, resolve_asset_order
from app.modules.assets.schemas import AssetFilter

class AssetRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, user_id: uuid.UUID, **data) -> Asset:
        obj = Asset(user_id=user_id, **data)
        self.session.add(obj)
        await self.session.flush()
        return obj

    async def get(self, user_id: uuid.UUID, asset_id: uuid.UUID) -> Asset | None:
        q = select(Asset).where(
            Asset.id == asset_id,
            Asset.user_id == user_id,
        )
        res = await self.session.execute(q)
        return res.scalar_one_or_none()

    async def get_by_name(self, user_id: uuid.UUID, name: str, *, exclude_id: uuid.UUID | None = None) -> Asset | None:
        cond = [Asset.user_id == user_id, Asset.name == name]
        if exclude_id is not None:
            cond.append(Asset.id != exclude_id)
        res = await self.session.execute(select(Asset).where(*cond))
        return res.scalars().first()

    async def page(self, user_id: uuid.UUID, f: AssetFilter) -> tuple[Sequence[Asset], int, int, int]:
        """One page of the user's assets plus the unwindowed total. Returns (rows, total, page, limit)."""
        page, limit, offset = normalize_page(f.page, f.limit)
        cond = build_asset_conditions(user_id, f)
        q = select(Asset).where(*cond).order_by(*resolve_asset_order(f)).offset(offset).limit(limit)
        rows = (await self.session.execute(q)).scalars().all()
        total = (await self.session.execute(select(func.count()).select_from(Asset).where(*cond))).scalar_one()
        return rows, total, page, limit

    async def update_fields(self, asset: Asset, **data) -> Asset:
        for k, v in data.items():
            setattr(asset, k, v)
        await self.session.flush()
        return asset

    async def delete(self, asset: Asset) -> None:
        await self.session.delete(asset)
        await self.session.flush()

    async def group_ids_of(self, user_id: uuid.UUID, asset_ids: list[uuid.UUID]) -> set[uuid.UUID]:
        q = select(Asset.asset_group_id).where(
            Asset.user_id == user_id,
            Asset.id.in_(asset_ids),
            Asset.asset_group_id.is_not(None),
        ).distinct()
        res = await self.session.execute(q)
        return set(res.scalars().all())

    async def move_to_group(self, user_id: uuid.UUID, asset_ids: list[uuid.UUID], group_id: uuid.UUID | None) -> int:
        res = await self.session.execute(
            update(Asset)
            .where(Asset.user_id == user_id, Asset.id.in_(asset_ids))
            .values(asset_group_id=group_id)
            .execution_options(synchronize_session=False)
        )
        return res.rowcount or 0

    async def detach_group(self, user_id: uuid.UUID, group_id: uuid.UUID) -> int:
        res = await self.session.execute(
            update(Asset)
            .where(Asset.user_id == user_id, Asset.asset_group_id == group_id)
            .values(asset_group_id=None)
            .execution_options(synchronize_session=False)
        )
        return res.rowcount or 0

    async def sum_sizes(self, group_id: uuid.UUID) -> int:
        q = select(func.coalesce(func.sum(Asset.size), 0)).where(Asset.asset_group_id == group_id)
        return int((await self.session.execute(q)).scalar_one())

class AssetGroupRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, user_id: uuid.UUID, **data) -> AssetGroup:
        obj = AssetGroup(user_id=user_id, **data)
        self.session.add(obj)
        await self.session.flush()
        return obj

    async def get(self, user_id: uuid.UUID, group_id: uuid.UUID) -> AssetGroup | None:
        q = select(AssetGroup).where(
            AssetGroup.id == group_id,
            AssetGroup.user_id == user_id,
        )
        res = await self.session.execute(q)
        return res.scalar_one_or_none()

    async def get_by_name(self, user_id: uuid.UUID, name: str, *, exclude_id: uuid.UUID | None = None) -> AssetGroup | None:
        cond = [AssetGroup.user_id == user_id, AssetGroup.name == name]
        if exclude_id is not None:
            cond.append(AssetGroup.id != exclude_id)
        res = await self.session.execute(select(AssetGroup).where(*cond))
        return res.scalars().first()

    async def ids(self, user_id: uuid.UUID | None = None) -> Sequence[uuid.UUID]:
        q = select(AssetGroup.id)
        if user_id is not None:
            q = q.where(AssetGroup.user_id == user_id)
        res = await self.session.execute(q)
        return res.scalars().all()

    async def set_total_size(self, group_id: uuid.UUID, total: int) -> AssetGroup | None:
        # through the identity map so already-loaded instances see the new total
        group = await self.session.get(AssetGroup, group_id)
        if group is None:
            return None
        group.total_size = total
        await self.session.flush()
        return group

    async def delete(self, group: AssetGroup) -> None:
        await self.session.delete(group)
        await self.session.flush()

    async def get_many(self, user_id: uuid.UUID, group_ids: set[uuid.UUID]) -> dict[uuid.UUID, AssetGroup]:
        if not group_ids:
            return {}
        q = select(AssetGroup).where(AssetGroup.user_id == user_id, AssetGroup.id.in_(group_ids))
        res = await self.session.execute(q)
        return {g.id: g for g in res.scalars().all()}

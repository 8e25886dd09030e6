import uuid
from typing import Sequence
from sqlalchemy import ColumnElement, Row, select, func
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.paging import normalize_page
from app.core.sorting import resolve_order
from app.modules.assets.models import Asset, AssetGroup
from app.modules.asset_groups.schemas import AssetGroupFilter, AssetGroupSortField

SORT_COLUMNS = {
    AssetGroupSortField.NAME: AssetGroup.name,
    AssetGroupSortField.CREATED_AT: AssetGroup.created_at,
    AssetGroupSortField.UPDATED_AT: AssetGroup.updated_at,
}

def member_count():
    return (
        select(func.count(Asset.id))
        .where(Asset.asset_group_id == AssetGroup.id)
        .correlate(AssetGroup)
        .scalar_subquery()
    )

def build_group_conditions(user_id: uuid.UUID, f: AssetGroupFilter) -> list[ColumnElement[bool]]:
    cond: list[ColumnElement[bool]] = [AssetGroup.user_id == user_id]
    if f.search:
        cond.append(AssetGroup.name.icontains(f.search, autoescape=True))
    if f.created_after is not None:
        cond.append(AssetGroup.created_at >= f.created_after)
    if f.created_before is not None:
        cond.append(AssetGroup.created_at <= f.created_before)
    if f.min_size is not None:
        cond.append(AssetGroup.total_size >= f.min_size)
    if f.max_size is not None:
        cond.append(AssetGroup.total_size <= f.max_size)

    if f.min_assets is not None or f.max_assets is not None or f.has_assets is not None:
        members = member_count()
        if f.min_assets is not None:
            cond.append(members >= f.min_assets)
        if f.max_assets is not None:
            cond.append(members <= f.max_assets)
        if f.has_assets is True:
            cond.append(members > 0)
        elif f.has_assets is False:
            cond.append(members == 0)
    return cond

class AssetGroupListing:
    """Read side of asset groups: rows come back paired with their member count."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def page(self, user_id: uuid.UUID, f: AssetGroupFilter) -> tuple[Sequence[Row], int, int, int]:
        page, limit, offset = normalize_page(f.page, f.limit)
        cond = build_group_conditions(user_id, f)
        order = resolve_order(
            SORT_COLUMNS, AssetGroup.created_at,
            sort_by=f.sort_by, sort_order=f.sort_order, date_filter=f.date_filter,
        )
        q = (
            select(AssetGroup, member_count().label("asset_count"))
            .where(*cond)
            .order_by(order, AssetGroup.id.asc())
            .offset(offset)
            .limit(limit)
        )
        rows = (await self.session.execute(q)).all()
        total = (await self.session.execute(select(func.count()).select_from(AssetGroup).where(*cond))).scalar_one()
        return rows, total, page, limit

    async def asset_count(self, group_id: uuid.UUID) -> int:
        q = select(func.count(Asset.id)).where(Asset.asset_group_id == group_id)
        return (await self.session.execute(q)).scalar_one()

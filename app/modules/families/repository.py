import uuid
from typing import Sequence
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.paging import normalize_page
from app.core.sorting import resolve_order
from app.modules.families.models import Family
from app.modules.families.schemas import FamilyFilter, FamilySortField

SORT_COLUMNS = {
    FamilySortField.NAME: Family.name,
    FamilySortField.CREATED_AT: Family.created_at,
    FamilySortField.UPDATED_AT: Family.updated_at,
}

class FamilyRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, user_id: uuid.UUID, **data) -> Family:
        obj = Family(user_id=user_id, **data)
        self.session.add(obj)
        await self.session.flush()
        return obj

    async def get(self, user_id: uuid.UUID, family_id: uuid.UUID) -> Family | None:
        q = select(Family).where(Family.id == family_id, Family.user_id == user_id)
        res = await self.session.execute(q)
        return res.scalar_one_or_none()

    async def get_by_name(self, user_id: uuid.UUID, name: str, *, exclude_id: uuid.UUID | None = None) -> Family | None:
        cond = [Family.user_id == user_id, Family.name == name]
        if exclude_id is not None:
            cond.append(Family.id != exclude_id)
        res = await self.session.execute(select(Family).where(*cond))
        return res.scalars().first()

    async def page(self, user_id: uuid.UUID, f: FamilyFilter) -> tuple[Sequence[Family], int, int, int]:
        page, limit, offset = normalize_page(f.page, f.limit)
        cond = [Family.user_id == user_id]
        if f.search:
            cond.append(Family.name.icontains(f.search, autoescape=True))
        if f.created_after is not None:
            cond.append(Family.created_at >= f.created_after)
        if f.created_before is not None:
            cond.append(Family.created_at <= f.created_before)

        order = resolve_order(
            SORT_COLUMNS, Family.created_at,
            sort_by=f.sort_by, sort_order=f.sort_order, date_filter=f.date_filter,
        )
        q = select(Family).where(*cond).order_by(order, Family.id.asc()).offset(offset).limit(limit)
        rows = (await self.session.execute(q)).scalars().all()
        total = (await self.session.execute(select(func.count()).select_from(Family).where(*cond))).scalar_one()
        return rows, total, page, limit

    async def delete(self, family: Family) -> None:
        await self.session.delete(family)
        await self.session.flush()

import uuid
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.errors import NotFoundError, ConflictError
from app.core.paging import paginate
from app.modules.families.models import Family
from app.modules.families.repository import FamilyRepository
from app.modules.families.schemas import FamilyCreate, FamilyUpdate, FamilyFilter
from app.modules.notifications.schemas import EntityType
from app.modules.notifications.service import NotificationService

class FamilyService:
    def __init__(self, session: AsyncSession):
        self.repo = FamilyRepository(session)
        self.notifications = NotificationService(session)
        self.session = session

    async def create(self, user_id: uuid.UUID, payload: FamilyCreate) -> Family:
        if await self.repo.get_by_name(user_id, payload.name):
            raise ConflictError("Family with this name already exists")
        try:
            obj = await self.repo.create(user_id, name=payload.name)
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise ConflictError("Family with this name already exists") from e
        await self.notifications.log_created(user_id, EntityType.FAMILY, payload.name, obj.id)
        await self.session.refresh(obj)
        return obj

    async def get(self, user_id: uuid.UUID, family_id: uuid.UUID) -> Family:
        obj = await self.repo.get(user_id, family_id)
        if obj is None:
            raise NotFoundError(f"Family with ID {family_id} not found")
        return obj

    async def list(self, user_id: uuid.UUID, f: FamilyFilter) -> dict:
        rows, total, page, limit = await self.repo.page(user_id, f)
        return paginate(list(rows), total, page, limit)

    async def update(self, user_id: uuid.UUID, family_id: uuid.UUID, payload: FamilyUpdate) -> Family:
        obj = await self.get(user_id, family_id)
        if not payload.name or payload.name == obj.name:
            return obj
        if await self.repo.get_by_name(user_id, payload.name, exclude_id=obj.id):
            raise ConflictError("Family with this name already exists")
        old_name = obj.name
        try:
            obj.name = payload.name
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise ConflictError("Family with this name already exists") from e
        await self.notifications.log_updated(
            user_id, EntityType.FAMILY, payload.name, family_id,
            old_values={"name": old_name}, new_values={"name": payload.name},
        )
        await self.session.refresh(obj)
        return obj

    async def delete(self, user_id: uuid.UUID, family_id: uuid.UUID) -> dict:
        obj = await self.get(user_id, family_id)
        name = obj.name
        await self.repo.delete(obj)
        await self.session.commit()
        await self.notifications.log_deleted(user_id, EntityType.FAMILY, name)
        return {"message": f"Family with ID {family_id} has been deleted"}

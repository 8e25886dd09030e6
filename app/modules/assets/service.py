import logging
import uuid
from typing import Protocol
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.config import settings
from app.core.errors import ValidationError, NotFoundError, ConflictError, DownstreamError
from app.core.paging import paginate
from app.modules.assets.aggregator import GroupSizeAggregator
from app.modules.assets.models import Asset, AssetGroup
from app.modules.assets.repository import AssetRepository, AssetGroupRepository
from app.modules.assets.schemas import AssetCreate, AssetUpdate, AssetFilter, AssetOut, AssetGroupSummary
from app.modules.assets.sizes import format_file_size
from app.modules.notifications.schemas import EntityType
from app.modules.notifications.service import NotificationService
from app.platform.ports.object_storage import ObjectStoragePort, StoredObject, asset_upload_options, check_upload

log = logging.getLogger(__name__)

class IncomingFile(Protocol):
    filename: str | None
    content_type: str | None

    async def read(self) -> bytes: ...

class AssetService:
    def __init__(self, session: AsyncSession, storage: ObjectStoragePort):
        self.session = session
        self.storage = storage
        self.repo = AssetRepository(session)
        self.groups = AssetGroupRepository(session)
        self.aggregator = GroupSizeAggregator(session)
        self.notifications = NotificationService(session)
        self.upload_options = asset_upload_options(settings.CLOUDINARY_FOLDER, settings.MAX_UPLOAD_BYTES)

    async def create(self, user_id: uuid.UUID | None, payload: AssetCreate, file: IncomingFile | None) -> AssetOut:
        """Upload the file, persist the asset, then refresh its group's total.

        Nothing is written to the database unless the upload succeeded, and
        nothing is uploaded for a request that would be rejected anyway.
        """
        if file is None:
            raise ValidationError("File is required")
        if not user_id:
            raise ValidationError("User ID is required")

        data = await file.read()
        check_upload(file.filename, len(data), self.upload_options)
        if await self.repo.get_by_name(user_id, payload.name):
            raise ConflictError("Asset with this name already exists")
        if payload.asset_group_id is not None:
            await self._require_group(user_id, payload.asset_group_id)

        stored = await self._upload(data, file)
        try:
            asset = await self.repo.create(
                user_id,
                name=payload.name,
                file_name=stored.stored_name or file.filename or "file",
                file_path=stored.provider_id,
                mime_type=file.content_type or "application/octet-stream",
                size=stored.byte_size,
                asset_group_id=payload.asset_group_id,
            )
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            await self._discard_remote(stored.provider_id)
            raise ConflictError("Asset with this name already exists") from e
        except SQLAlchemyError as e:
            await self.session.rollback()
            await self._discard_remote(stored.provider_id)
            log.exception("Failed to persist uploaded asset %s", payload.name)
            raise DownstreamError("Failed to save asset") from e

        asset_id, group_id = asset.id, asset.asset_group_id
        log.info("Asset %s uploaded for user %s (%s bytes)", asset_id, user_id, asset.size)
        await self.aggregator.refresh(group_id)
        await self.notifications.log_created(user_id, EntityType.ASSET, payload.name, asset_id)
        await self.session.refresh(asset)
        return await self._present(asset, url=stored.secure_url)

    async def list(self, user_id: uuid.UUID, f: AssetFilter) -> dict:
        rows, total, page, limit = await self.repo.page(user_id, f)
        groups = await self.groups.get_many(user_id, {r.asset_group_id for r in rows if r.asset_group_id})
        data = [self._to_out(r, groups.get(r.asset_group_id)) for r in rows]
        return paginate(data, total, page, limit)

    async def get(self, user_id: uuid.UUID, asset_id: uuid.UUID) -> AssetOut:
        asset = await self._require_asset(user_id, asset_id)
        return await self._present(asset)

    async def update(self, user_id: uuid.UUID, asset_id: uuid.UUID, payload: AssetUpdate) -> AssetOut:
        asset = await self._require_asset(user_id, asset_id)
        changes = payload.model_dump(exclude_unset=True)
        if changes.get("name") is None:
            changes.pop("name", None)

        old_group = asset.asset_group_id
        new_group = changes.get("asset_group_id", old_group)
        old_values = {k: getattr(asset, k) for k in changes}

        if "name" in changes and changes["name"] != asset.name:
            if await self.repo.get_by_name(user_id, changes["name"], exclude_id=asset.id):
                raise ConflictError("Asset with this name already exists")
        if new_group is not None and new_group != old_group:
            await self._require_group(user_id, new_group)

        try:
            await self.repo.update_fields(asset, **changes)
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise ConflictError("Asset with this name already exists") from e

        name = asset.name
        if new_group != old_group:
            await self.aggregator.refresh(old_group, new_group)
        await self.notifications.log_updated(
            user_id, EntityType.ASSET, name, asset_id,
            old_values=_jsonable(old_values), new_values=_jsonable(changes),
        )
        await self.session.refresh(asset)
        return await self._present(asset)

    async def delete(self, user_id: uuid.UUID, asset_id: uuid.UUID) -> dict:
        asset = await self._require_asset(user_id, asset_id)
        group_id, name = asset.asset_group_id, asset.name

        await self._discard_remote(asset.file_path)
        await self.repo.delete(asset)
        await self.session.commit()

        await self.aggregator.refresh(group_id)
        await self.notifications.log_deleted(user_id, EntityType.ASSET, name)
        return {"message": "Asset deleted successfully"}

    async def _require_asset(self, user_id: uuid.UUID, asset_id: uuid.UUID) -> Asset:
        asset = await self.repo.get(user_id, asset_id)
        if asset is None:
            raise NotFoundError(f"Asset with ID {asset_id} not found")
        return asset

    async def _require_group(self, user_id: uuid.UUID, group_id: uuid.UUID) -> AssetGroup:
        group = await self.groups.get(user_id, group_id)
        if group is None:
            raise NotFoundError(f"Asset group with ID {group_id} not found")
        return group

    async def _upload(self, data: bytes, file: IncomingFile) -> StoredObject:
        try:
            return await run_in_threadpool(
                self.storage.upload,
                data,
                filename=file.filename or "file",
                content_type=file.content_type or "application/octet-stream",
                options=self.upload_options,
            )
        except DownstreamError:
            raise
        except Exception as e:
            log.exception("Object storage upload failed for %s", file.filename)
            raise DownstreamError(f"Failed to upload file: {e}") from e

    async def _discard_remote(self, provider_id: str) -> None:
        try:
            await run_in_threadpool(self.storage.delete, provider_id)
        except Exception:
            log.warning("Failed to delete stored object %s", provider_id, exc_info=True)

    async def _present(self, asset: Asset, url: str | None = None) -> AssetOut:
        group = None
        if asset.asset_group_id is not None:
            group = await self.session.get(AssetGroup, asset.asset_group_id)
        return self._to_out(asset, group, url)

    def _to_out(self, asset: Asset, group: AssetGroup | None, url: str | None = None) -> AssetOut:
        return AssetOut(
            id=asset.id,
            user_id=asset.user_id,
            name=asset.name,
            file_name=asset.file_name,
            file_path=asset.file_path,
            mime_type=asset.mime_type,
            size=asset.size,
            asset_group_id=asset.asset_group_id,
            asset_group=AssetGroupSummary.model_validate(group) if group is not None else None,
            created_at=asset.created_at,
            updated_at=asset.updated_at,
            url=url or self.storage.resolve_url(asset.file_path),
            thumbnail_url=self.storage.thumbnail_url(asset.file_path),
            formatted_size=format_file_size(asset.size),
        )

def _jsonable(values: dict) -> dict:
    return {k: str(v) if isinstance(v, uuid.UUID) else v for k, v in values.items()}

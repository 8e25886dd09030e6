import uuid
from datetime import datetime
from enum import Enum
from pydantic import BaseModel, Field, model_validator
from app.core.schemas import APIModel
from app.core.serialization import ByteCount, UtcDateTime
from app.core.sorting import SortOrder, DateFilter

class AssetGroupSortField(str, Enum):
    NAME = "name"
    CREATED_AT = "createdAt"
    UPDATED_AT = "updatedAt"

class AssetGroupFilter(BaseModel):
    search: str | None = None
    created_after: UtcDateTime | None = None
    created_before: UtcDateTime | None = None
    min_assets: int | None = Field(default=None, ge=0)
    max_assets: int | None = Field(default=None, ge=0)
    min_size: int | None = Field(default=None, ge=0)
    max_size: int | None = Field(default=None, ge=0)
    has_assets: bool | None = None
    sort_by: AssetGroupSortField | None = None
    sort_order: SortOrder | None = None
    date_filter: DateFilter | None = None
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1)

    @model_validator(mode="after")
    def _check_ranges(self):
        if self.min_assets is not None and self.max_assets is not None and self.min_assets > self.max_assets:
            raise ValueError("minAssets must not exceed maxAssets")
        if self.min_size is not None and self.max_size is not None and self.min_size > self.max_size:
            raise ValueError("minSize must not exceed maxSize")
        if self.created_after and self.created_before and self.created_after > self.created_before:
            raise ValueError("createdAfter must not be later than createdBefore")
        if self.search is not None:
            self.search = self.search.strip() or None
        return self

class AssetGroupCreate(APIModel):
    name: str = Field(..., min_length=1, max_length=255)

class AssetGroupUpdate(APIModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)

class AttachAssets(APIModel):
    asset_ids: list[uuid.UUID] = Field(..., min_length=1)

class AssetGroupOut(APIModel):
    id: uuid.UUID
    user_id: uuid.UUID
    name: str
    total_size: ByteCount
    formatted_size: str
    asset_count: int
    created_at: datetime
    updated_at: datetime

class AttachResult(APIModel):
    message: str
    attached_count: int

class ReconcileResult(APIModel):
    message: str
    groups: int

import uuid
from datetime import datetime
from enum import Enum
from pydantic import BaseModel, Field, model_validator
from app.core.schemas import APIModel
from app.core.serialization import ByteCount, UtcDateTime
from app.core.sorting import SortOrder, DateFilter

class AssetSortField(str, Enum):
    NAME = "name"
    FILE_NAME = "fileName"
    SIZE = "size"
    CREATED_AT = "createdAt"
    UPDATED_AT = "updatedAt"

class AssetFilter(BaseModel):
    """Every recognised filter for an asset listing; the owner is passed separately."""

    asset_group_id: uuid.UUID | None = None
    search: str | None = None
    mime_type: str | None = None
    min_size: int | None = Field(default=None, ge=0)
    max_size: int | None = Field(default=None, ge=0)
    created_after: UtcDateTime | None = None
    created_before: UtcDateTime | None = None
    has_group: bool | None = None
    sort_by: AssetSortField | None = None
    sort_order: SortOrder | None = None
    date_filter: DateFilter | None = None
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1)

    @model_validator(mode="after")
    def _check_ranges(self):
        if self.min_size is not None and self.max_size is not None and self.min_size > self.max_size:
            raise ValueError("minSize must not exceed maxSize")
        if self.created_after and self.created_before and self.created_after > self.created_before:
            raise ValueError("createdAfter must not be later than createdBefore")
        if self.search is not None:
            self.search = self.search.strip() or None
        if self.mime_type is not None:
            self.mime_type = self.mime_type.strip() or None
        return self

class AssetCreate(APIModel):
    name: str = Field(..., min_length=1, max_length=255)
    asset_group_id: uuid.UUID | None = None

class AssetUpdate(APIModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    asset_group_id: uuid.UUID | None = None

class AssetGroupSummary(APIModel):
    id: uuid.UUID
    name: str
    total_size: ByteCount

class AssetOut(APIModel):
    id: uuid.UUID
    user_id: uuid.UUID
    name: str
    file_name: str
    file_path: str
    mime_type: str
    size: ByteCount
    asset_group_id: uuid.UUID | None
    asset_group: AssetGroupSummary | None = None
    created_at: datetime
    updated_at: datetime
    url: str | None = None
    thumbnail_url: str | None = None
    formatted_size: str

class DeleteResult(APIModel):
    message: str

import uuid
from datetime import datetime
from enum import Enum
from pydantic import BaseModel, Field, model_validator
from app.core.schemas import APIModel
from app.core.serialization import UtcDateTime
from app.core.sorting import SortOrder, DateFilter

class FamilySortField(str, Enum):
    NAME = "name"
    CREATED_AT = "createdAt"
    UPDATED_AT = "updatedAt"

class FamilyFilter(BaseModel):
    search: str | None = None
    created_after: UtcDateTime | None = None
    created_before: UtcDateTime | None = None
    sort_by: FamilySortField | None = FamilySortField.NAME
    sort_order: SortOrder | None = SortOrder.ASC
    date_filter: DateFilter | None = None
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1)

    @model_validator(mode="after")
    def _check_ranges(self):
        if self.created_after and self.created_before and self.created_after > self.created_before:
            raise ValueError("createdAfter must not be later than createdBefore")
        if self.search is not None:
            self.search = self.search.strip() or None
        return self

class FamilyCreate(APIModel):
    name: str = Field(..., min_length=1, max_length=255)

class FamilyUpdate(APIModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)

class FamilyOut(APIModel):
    id: uuid.UUID
    user_id: uuid.UUID
    name: str
    created_at: datetime
    updated_at: datetime

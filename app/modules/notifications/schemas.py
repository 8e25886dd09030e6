import uuid
from datetime import datetime
from enum import Enum
from pydantic import Field
from app.core.schemas import APIModel

class EntityType(str, Enum):
    PRODUCT = "product"
    ATTRIBUTE = "attribute"
    ATTRIBUTE_GROUP = "attributeGroup"
    CATEGORY = "category"
    FAMILY = "family"
    ASSET = "asset"
    ASSET_GROUP = "assetGroup"
    PRODUCT_VARIANT = "productVariant"
    PRODUCT_ATTRIBUTE = "productAttribute"

class ActionType(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"
    BULK_CREATED = "bulk_created"
    BULK_UPDATED = "bulk_updated"
    BULK_DELETED = "bulk_deleted"
    LINKED = "linked"
    UNLINKED = "unlinked"

class NotificationOut(APIModel):
    id: uuid.UUID
    entity_type: str
    entity_id: uuid.UUID | None = None
    action: str
    entity_name: str | None = None
    message: str
    metadata: dict | None = Field(default=None, validation_alias="meta")
    created_at: datetime

class NotificationStats(APIModel):
    total_notifications: int
    by_entity_type: dict[str, int]
    by_action: dict[str, int]
    recent_activity: int

class CleanupResult(APIModel):
    message: str
    deleted_count: int

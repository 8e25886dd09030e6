import uuid
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Text, JSON, Index
from app.core.base import Base, OwnedMixin

class Notification(Base, OwnedMixin):
    # append-only audit record; rows are only removed by the retention sweep
    entity_type: Mapped[str] = mapped_column(String(32))
    entity_id: Mapped[uuid.UUID | None] = mapped_column(nullable=True)
    action: Mapped[str] = mapped_column(String(16))
    entity_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    message: Mapped[str] = mapped_column(Text)
    meta: Mapped[dict | None] = mapped_column("metadata", JSON, nullable=True)

    __table_args__ = (
        Index("notification_user_created_idx", "user_id", "created_at"),
        Index("notification_entity_action_idx", "entity_type", "action"),
    )

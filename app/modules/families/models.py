from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, UniqueConstraint
from app.core.base import Base, TimestampedOwnedMixin

class Family(Base, TimestampedOwnedMixin):
    name: Mapped[str] = mapped_column(String(255))

    __table_args__ = (UniqueConstraint("name", "user_id", name="family_name_user_key"),)

import uuid
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, BigInteger, ForeignKey, UniqueConstraint
from app.core.base import Base, TimestampedOwnedMixin

class AssetGroup(Base, TimestampedOwnedMixin):
    name: Mapped[str] = mapped_column(String(255))
    # cached SUM(asset.size) of members; recomputed by GroupSizeAggregator, never adjusted in place
    total_size: Mapped[int] = mapped_column(BigInteger, default=0, server_default="0")

    __table_args__ = (UniqueConstraint("name", "user_id", name="assetgroup_name_user_key"),)

class Asset(Base, TimestampedOwnedMixin):
    name: Mapped[str] = mapped_column(String(255))
    file_name: Mapped[str] = mapped_column(String(512))
    # storage provider object id (cloudinary public_id, s3 key, local key); URLs are derived from it
    file_path: Mapped[str] = mapped_column(String(1024))
    mime_type: Mapped[str] = mapped_column(String(255))
    size: Mapped[int] = mapped_column(BigInteger)
    asset_group_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("assetgroup.id", ondelete="SET NULL"), nullable=True, index=True
    )

    __table_args__ = (UniqueConstraint("name", "user_id", name="asset_name_user_key"),)

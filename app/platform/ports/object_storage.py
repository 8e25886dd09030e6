import uuid
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable
from app.core.errors import ValidationError

@dataclass(frozen=True)
class UploadOptions:
    folder: str = "assets"
    resource_type: str = "auto"  # image | video | raw | auto
    max_file_size: int | None = None  # bytes
    allowed_formats: tuple[str, ...] | None = None
    tags: tuple[str, ...] = ()

@dataclass(frozen=True)
class StoredObject:
    secure_url: str
    stored_name: str
    byte_size: int
    provider_id: str
    extra: dict = field(default_factory=dict)

def asset_upload_options(folder: str = "pixelpim/assets", max_file_size: int = 50 * 1024 * 1024) -> UploadOptions:
    return UploadOptions(folder=folder, resource_type="auto", max_file_size=max_file_size, tags=("asset", "pixelpim"))

def check_upload(filename: str | None, size: int, options: UploadOptions) -> None:
    if options.max_file_size and size > options.max_file_size:
        raise ValidationError(f"File size exceeds limit of {options.max_file_size} bytes")
    if options.allowed_formats:
        ext = filename.rsplit(".", 1)[-1].lower() if filename and "." in filename else ""
        if ext not in options.allowed_formats:
            raise ValidationError(f"Invalid file format. Allowed formats: {', '.join(options.allowed_formats)}")

@runtime_checkable
class ObjectStoragePort(Protocol):
    def upload(self, data: bytes, *, filename: str, content_type: str, options: UploadOptions) -> StoredObject: ...
    def delete(self, provider_id: str) -> None: ...
    def resolve_url(self, provider_id: str) -> str: ...
    def thumbnail_url(self, provider_id: str) -> str | None: ...

def object_key(folder: str, filename: str | None) -> str:
    """Fresh key per upload; identical bytes uploaded twice must not share an object."""
    ext = filename.rsplit(".", 1)[1].lower() if filename and "." in filename else ""
    return f"{folder.strip('/')}/{uuid.uuid4().hex}{('.' + ext) if ext else ''}"

import io
import logging
import cloudinary
import cloudinary.uploader
from cloudinary.utils import cloudinary_url
from app.core.config import settings
from app.core.errors import DownstreamError
from app.platform.ports.object_storage import ObjectStoragePort, StoredObject, UploadOptions

log = logging.getLogger("storage.cloudinary")

class CloudinaryStorage(ObjectStoragePort):
    def __init__(self, cloud_name: str | None = None, api_key: str | None = None, api_secret: str | None = None):
        self.cloud_name = cloud_name or settings.CLOUDINARY_CLOUD_NAME
        self.api_key = api_key or settings.CLOUDINARY_API_KEY
        self.api_secret = api_secret or settings.CLOUDINARY_API_SECRET
        self.configured = False
        try:
            self._configure()
        except DownstreamError as e:
            # not fatal at boot; every call retries and fails with the same error
            log.error("Failed to configure Cloudinary: %s", e.message)

    def _configure(self) -> None:
        if self.configured:
            return
        if not (self.cloud_name and self.api_key and self.api_secret):
            log.error(
                "Cloudinary environment: CLOUDINARY_CLOUD_NAME=%s CLOUDINARY_API_KEY=%s CLOUDINARY_API_SECRET=%s",
                bool(self.cloud_name), bool(self.api_key), bool(self.api_secret),
            )
            raise DownstreamError(
                "Cloudinary configuration missing. Set CLOUDINARY_CLOUD_NAME, CLOUDINARY_API_KEY and CLOUDINARY_API_SECRET."
            )
        cloudinary.config(
            cloud_name=self.cloud_name,
            api_key=self.api_key,
            api_secret=self.api_secret,
            secure=True,
        )
        self.configured = True
        log.info("Cloudinary configured for cloud %s", self.cloud_name)

    def upload(self, data: bytes, *, filename: str, content_type: str, options: UploadOptions) -> StoredObject:
        self._configure()
        params = {
            "resource_type": options.resource_type,
            "folder": options.folder,
            "tags": list(options.tags) or None,
            "allowed_formats": list(options.allowed_formats) if options.allowed_formats else None,
            "use_filename": True,
            "unique_filename": True,
            "filename_override": filename,
        }
        params = {k: v for k, v in params.items() if v is not None}
        try:
            result = cloudinary.uploader.upload(io.BytesIO(data), **params)
        except Exception as e:
            raise DownstreamError(f"Upload failed: {e}") from e
        if not result:
            raise DownstreamError("Upload failed: no result returned")
        return StoredObject(
            secure_url=result["secure_url"],
            stored_name=result.get("original_filename") or filename,
            byte_size=int(result.get("bytes", len(data))),
            provider_id=result["public_id"],
            extra={
                "format": result.get("format"),
                "resource_type": result.get("resource_type"),
                "created_at": result.get("created_at"),
            },
        )

    def delete(self, provider_id: str) -> None:
        self._configure()
        # the resource type is not persisted; try the likely ones in order
        for resource_type in ("image", "raw", "video"):
            result = cloudinary.uploader.destroy(provider_id, resource_type=resource_type)
            if (result or {}).get("result") == "ok":
                return
        log.warning("Cloudinary object %s not found for deletion", provider_id)

    def resolve_url(self, provider_id: str) -> str:
        self._configure()
        url, _ = cloudinary_url(provider_id, secure=True, crop="limit", quality="auto", fetch_format="auto")
        return url

    def thumbnail_url(self, provider_id: str) -> str | None:
        self._configure()
        url, _ = cloudinary_url(provider_id, secure=True, width=300, height=300, crop="fill", quality="auto", fetch_format="auto")
        return url

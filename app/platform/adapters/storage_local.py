import os
from urllib.parse import quote
from app.platform.ports.object_storage import ObjectStoragePort, StoredObject, UploadOptions, object_key
from app.core.config import settings

class LocalFilesystemStorage(ObjectStoragePort):
    def __init__(self, root: str | None = None):
        self.root = os.path.abspath(root or settings.LOCAL_STORAGE_ROOT)
        os.makedirs(self.root, exist_ok=True)

    def _path(self, key: str) -> str:
        safe = key.strip("/").replace("..", "")
        return os.path.join(self.root, safe)

    def upload(self, data: bytes, *, filename: str, content_type: str, options: UploadOptions) -> StoredObject:
        key = object_key(options.folder, filename)
        path = self._path(key)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "wb") as f:
            f.write(data)
        return StoredObject(secure_url=self.resolve_url(key), stored_name=filename, byte_size=len(data), provider_id=key)

    def resolve_url(self, provider_id: str) -> str:
        # For local dev, expose a static-like path; in real setups, serve via nginx or an API proxy.
        return f"file://{quote(self._path(provider_id))}"

    def thumbnail_url(self, provider_id: str) -> str | None:
        return None

    def delete(self, provider_id: str) -> None:
        path = self._path(provider_id)
        if os.path.exists(path):
            os.remove(path)

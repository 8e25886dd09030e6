from app.core.config import settings
from app.platform.ports.object_storage import ObjectStoragePort
from app.platform.adapters.storage_cloudinary import CloudinaryStorage
from app.platform.adapters.storage_local import LocalFilesystemStorage
from app.platform.adapters.storage_s3 import S3Storage
from app.platform.ports.mailer import MailerPort
from app.platform.adapters.mailer_noop import NoopMailer
from app.platform.adapters.mailer_http import HttpMailer

class ProviderRegistry:
    _object_storage: ObjectStoragePort | None = None
    _mailer: MailerPort | None = None

    @classmethod
    def object_storage(cls) -> ObjectStoragePort:
        if cls._object_storage is None:
            if settings.OBJECT_STORAGE_PROVIDER == "s3":
                cls._object_storage = S3Storage()
            elif settings.OBJECT_STORAGE_PROVIDER == "local":
                cls._object_storage = LocalFilesystemStorage(settings.LOCAL_STORAGE_ROOT)
            else:
                cls._object_storage = CloudinaryStorage()
        return cls._object_storage

    @classmethod
    def mailer(cls) -> MailerPort:
        if cls._mailer is None:
            prov = (settings.MAILER_PROVIDER or "noop").lower()
            if prov == "http":
                cls._mailer = HttpMailer()
            else:
                cls._mailer = NoopMailer()
        return cls._mailer

registry = ProviderRegistry()

def get_object_storage() -> ObjectStoragePort:
    return registry.object_storage()

def get_mailer() -> MailerPort:
    return registry.mailer()

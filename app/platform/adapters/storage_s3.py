import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError
from app.core.config import settings
from app.core.errors import DownstreamError
from app.platform.ports.object_storage import ObjectStoragePort, StoredObject, UploadOptions, object_key

class S3Storage(ObjectStoragePort):
    def __init__(self):
        session = boto3.session.Session(
            aws_access_key_id=settings.S3_ACCESS_KEY,
            aws_secret_access_key=settings.S3_SECRET_KEY,
            region_name=settings.S3_REGION,
        )
        self.s3 = session.client(
            "s3",
            endpoint_url=settings.S3_ENDPOINT_URL,
            config=Config(signature_version="s3v4"),
        )
        self.bucket = settings.S3_BUCKET

    def upload(self, data: bytes, *, filename: str, content_type: str, options: UploadOptions) -> StoredObject:
        key = object_key(options.folder, filename)
        try:
            self.s3.put_object(Bucket=self.bucket, Key=key, Body=data, ContentType=content_type)
        except (BotoCoreError, ClientError) as e:
            raise DownstreamError(f"Upload failed: {e}") from e
        return StoredObject(secure_url=self.resolve_url(key), stored_name=filename, byte_size=len(data), provider_id=key)

    def delete(self, provider_id: str) -> None:
        self.s3.delete_object(Bucket=self.bucket, Key=provider_id)

    def resolve_url(self, provider_id: str, expires_seconds: int = 900) -> str:
        return self.s3.generate_presigned_url(
            "get_object",
            Params={"Bucket": self.bucket, "Key": provider_id},
            ExpiresIn=expires_seconds,
        )

    def thumbnail_url(self, provider_id: str) -> str | None:
        return None

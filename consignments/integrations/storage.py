"""Object storage for uploaded documents and asset photos.

Two backends share one interface: ``local`` writes under ``UPLOAD_DIR`` and is
served from ``MEDIA_BASE_URL``; ``s3`` writes to a single S3 bucket with the
logical bucket name as the key prefix.
"""

import logging
from pathlib import Path

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from flask import current_app

logger = logging.getLogger(__name__)


class StorageError(RuntimeError):
    pass


class LocalStorage:
    def __init__(self, root, base_url):
        self.root = Path(root)
        self.base_url = base_url.rstrip("/")

    def _path_for(self, bucket, key):
        normalised = key.lstrip("/")
        if not normalised or ".." in Path(normalised).parts:
            raise StorageError(f"Invalid storage key: {key!r}")
        return self.root / bucket / normalised

    def save(self, bucket, key, stream, content_type=None):
        path = self._path_for(bucket, key)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "wb") as handle:
            handle.write(stream.read())
        return self.public_url(bucket, key)

    def remove(self, bucket, key):
        path = self._path_for(bucket, key)
        if path.exists():
            path.unlink()
            return True
        return False

    def exists(self, bucket, key):
        return self._path_for(bucket, key).exists()

    def public_url(self, bucket, key):
        return f"{self.base_url}/{bucket}/{key.lstrip('/')}"


class S3Storage:
    def __init__(self, bucket_name, region=None, endpoint_url=None, client=None):
        if not bucket_name:
            raise StorageError("S3 bucket is not configured")
        self.bucket_name = bucket_name
        self.region = region
        self.endpoint_url = endpoint_url.rstrip("/") if endpoint_url else None
        self.client = client or boto3.client("s3", region_name=region, endpoint_url=endpoint_url)

    @staticmethod
    def _object_key(bucket, key):
        return f"{bucket}/{key.lstrip('/')}"

    def save(self, bucket, key, stream, content_type=None):
        extra = {"ContentType": content_type} if content_type else {}
        try:
            self.client.put_object(Bucket=self.bucket_name, Key=self._object_key(bucket, key), Body=stream.read(), **extra)
        except (BotoCoreError, ClientError) as exc:
            logger.error("S3 upload of %s to %s failed: %s", key, self.bucket_name, exc)
            raise StorageError(f"Failed to upload {key}: {exc}") from exc
        return self.public_url(bucket, key)

    def remove(self, bucket, key):
        try:
            self.client.delete_object(Bucket=self.bucket_name, Key=self._object_key(bucket, key))
        except (BotoCoreError, ClientError) as exc:
            logger.error("S3 delete of %s from %s failed: %s", key, self.bucket_name, exc)
            raise StorageError(f"Failed to delete {key}: {exc}") from exc
        return True

    def exists(self, bucket, key):
        try:
            self.client.head_object(Bucket=self.bucket_name, Key=self._object_key(bucket, key))
        except ClientError:
            return False
        return True

    def public_url(self, bucket, key):
        object_key = self._object_key(bucket, key)
        if self.endpoint_url:
            return f"{self.endpoint_url}/{self.bucket_name}/{object_key}"
        if self.region:
            return f"https://{self.bucket_name}.s3.{self.region}.amazonaws.com/{object_key}"
        return f"https://{self.bucket_name}.s3.amazonaws.com/{object_key}"


def build_storage(config):
    backend = (config.get("MEDIA_BACKEND") or "local").lower()
    logger.info("Using %s media backend", backend)
    if backend == "s3":
        return S3Storage(
            config.get("S3_BUCKET"),
            region=config.get("S3_REGION"),
            endpoint_url=config.get("S3_ENDPOINT_URL"),
        )
    if backend != "local":
        raise StorageError(f"Unknown media backend: {backend}")
    return LocalStorage(config["UPLOAD_DIR"], config.get("MEDIA_BASE_URL") or "/static/uploads")


def get_storage():
    storage = current_app.extensions.get("storage")
    if storage is None:
        storage = build_storage(current_app.config)
        current_app.extensions["storage"] = storage
    return storage

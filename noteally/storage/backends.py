"""Stockage des PDF: dossier local (dev/tests) ou bucket S3 (prod)."""
import logging
import os
import time
from urllib.parse import quote

import boto3
from werkzeug.security import safe_join

log = logging.getLogger(__name__)


def build_note_key(user_id, filename: str, now_ms: int = None) -> str:
    # notes/<user>/<timestamp ms>_<fichier>
    ts = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"notes/{user_id}/{ts}_{filename}"


class LocalStorage:
    def __init__(self, root: str, public_base_url: str):
        self.root = root
        self.public_base_url = public_base_url.rstrip("/")

    def path_for(self, key: str) -> str:
        path = safe_join(self.root, key)
        if path is None:
            raise ValueError(f"invalid storage key: {key!r}")
        return path

    def save(self, key: str, data: bytes, content_type: str = "application/pdf") -> str:
        path = self.path_for(key)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "wb") as fh:
            fh.write(data)
        log.info("blob_saved", extra={"backend": "local", "key": key, "bytes": len(data)})
        return f"{self.public_base_url}/files/{quote(key)}"

    def delete(self, key: str) -> None:
        path = self.path_for(key)
        if os.path.exists(path):
            os.remove(path)
        log.info("blob_deleted", extra={"backend": "local", "key": key})


class S3Storage:
    def __init__(self, bucket: str, region: str, client=None):
        if not bucket:
            raise ValueError("AWS_S3_BUCKET is required for the s3 storage backend")
        self.bucket = bucket
        self.region = region
        self.client = client or boto3.client("s3", region_name=region)

    def save(self, key: str, data: bytes, content_type: str = "application/pdf") -> str:
        self.client.put_object(Bucket=self.bucket, Key=key, Body=data, ContentType=content_type)
        log.info("blob_saved", extra={"backend": "s3", "key": key, "bytes": len(data)})
        # bucket en lecture publique (politique côté AWS)
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{quote(key)}"

    def delete(self, key: str) -> None:
        self.client.delete_object(Bucket=self.bucket, Key=key)
        log.info("blob_deleted", extra={"backend": "s3", "key": key})


def build_storage(config):
    backend = (config.get("STORAGE_BACKEND") or "local").lower()
    if backend == "s3":
        return S3Storage(config.get("AWS_S3_BUCKET", ""), config.get("AWS_REGION", "eu-west-3"))
    if backend == "local":
        return LocalStorage(config["STORAGE_LOCAL_DIR"], config["STORAGE_PUBLIC_BASE_URL"])
    raise ValueError(f"unknown STORAGE_BACKEND: {backend}")

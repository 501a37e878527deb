from __future__ import annotations

from functools import lru_cache
from typing import Optional

from google.cloud import storage
from config.settings import settings


@lru_cache(maxsize=1)
def get_gcs_client() -> storage.Client:
    if settings.FIRESTORE_PROJECT_ID:
        return storage.Client(project=settings.FIRESTORE_PROJECT_ID)
    return storage.Client()


def upload_bytes(
    bucket_name: str,
    blob_name: str,
    content: bytes,
    content_type: str = "application/octet-stream",
    client: Optional[storage.Client] = None,
) -> str:
    client = client or get_gcs_client()
    bucket = client.bucket(bucket_name)
    blob = bucket.blob(blob_name)
    blob.upload_from_string(content, content_type=content_type)
    # Bucket is expected to grant public read; public_url is the https form.
    return blob.public_url

from __future__ import annotations

import base64
import logging
import mimetypes
from typing import Optional

from config.settings import settings
from models.schema import BLOB_PAYMENT_SCREENSHOTS, BLOB_SETTINGS
from storage.gateway import FirestoreGateway, GatewayError
from utils.timeutil import epoch_millis

log = logging.getLogger("primoboost.registration.uploads")


def _ext(filename: str, content_type: str) -> str:
    if filename and "." in filename:
        return filename.rsplit(".", 1)[-1].lower()
    guessed = mimetypes.guess_extension(content_type or "") or ".bin"
    return guessed.lstrip(".")


def payment_screenshot_path(reference_id: str, filename: str, content_type: str = "") -> str:
    return f"{BLOB_PAYMENT_SCREENSHOTS}/{reference_id}-{epoch_millis()}.{_ext(filename, content_type)}"


def qr_code_path(filename: str, content_type: str = "") -> str:
    return f"{BLOB_SETTINGS}/qr-code-{epoch_millis()}.{_ext(filename, content_type)}"


def data_url(content: bytes, content_type: str) -> str:
    return f"data:{content_type or 'application/octet-stream'};base64,{base64.b64encode(content).decode('ascii')}"


class UploadService:
    def __init__(self, gateway: Optional[FirestoreGateway] = None, bucket: Optional[str] = None):
        self.gateway = gateway or FirestoreGateway()
        self.bucket = bucket or settings.GCS_SUBMISSIONS_BUCKET

    def upload_payment_screenshot(self, content: bytes, filename: str, content_type: str, reference_id: str) -> str:
        """Public URL of the stored screenshot, or an inline data: URL when storage is down."""
        path = payment_screenshot_path(reference_id, filename, content_type)
        try:
            return self.gateway.put_blob(self.bucket, path, content, content_type=content_type)
        except GatewayError as e:
            log.warning(
                "screenshot_stored_inline",
                extra={"extra": {"path": path, "bytes": len(content), "error_type": type(e).__name__}},
            )
            return data_url(content, content_type)

    def upload_qr_code(self, content: bytes, filename: str, content_type: str) -> str:
        # Failures propagate; no inline fallback for the QR code.
        return self.gateway.put_blob(self.bucket, qr_code_path(filename, content_type), content, content_type=content_type)

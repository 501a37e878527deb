import pytest

from registration.uploads import UploadService, payment_screenshot_path
from storage.gateway import ConnectivityError


def test_screenshot_path_shape():
    path = payment_screenshot_path("PJ-2026-12345", "shot.PNG")
    assert path.startswith("payment-screenshots/PJ-2026-12345-")
    assert path.endswith(".png")


def test_screenshot_stored_in_bucket(gateway):
    url = UploadService(gateway, bucket="subs").upload_payment_screenshot(b"img", "a.png", "image/png", "PJ-2026-12345")
    assert url.startswith("https://storage.googleapis.com/subs/payment-screenshots/PJ-2026-12345-")
    assert list(gateway.blobs.values()) == [b"img"]


def test_screenshot_falls_back_to_data_url(gateway):
    gateway.down = True
    url = UploadService(gateway, bucket="subs").upload_payment_screenshot(b"img", "a.png", "image/png", "PJ-2026-12345")
    assert url == "data:image/png;base64,aW1n"


def test_qr_code_failure_surfaces(gateway):
    gateway.down = True
    with pytest.raises(ConnectivityError):
        UploadService(gateway, bucket="subs").upload_qr_code(b"qr", "qr.png", "image/png")

from __future__ import annotations

import hmac
import logging

from fastapi import Depends, HTTPException, Request

from config.settings import settings

log = logging.getLogger("primoboost.admin_auth")

PASSCODE_HEADER = "x-admin-passcode"


def verify_admin_request(request: Request) -> dict:
    expected = settings.ADMIN_PASSCODE
    if not expected:
        # Fail closed: admin routes stay shut until a passcode is configured
        raise HTTPException(status_code=500, detail="admin_passcode_not_configured")

    supplied = request.headers.get(PASSCODE_HEADER, "").strip()
    if not supplied:
        raise HTTPException(status_code=401, detail="missing_admin_passcode")
    if not hmac.compare_digest(supplied.encode("utf-8"), expected.encode("utf-8")):
        log.warning("admin_passcode_rejected", extra={"extra": {"path": request.url.path}})
        raise HTTPException(status_code=403, detail="invalid_admin_passcode")

    return {"role": "admin", "performed_by": request.headers.get("x-admin-name", "").strip() or "Admin"}


AdminClaims = Depends(verify_admin_request)

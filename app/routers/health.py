from __future__ import annotations

import time
from typing import Any, Dict

from fastapi import APIRouter, Depends

from app.deps import get_cache, get_gateway
from config.settings import settings
from storage.gateway import FirestoreGateway
from storage.local_cache import LocalCache

router = APIRouter()


@router.get("/health")
def health(gateway: FirestoreGateway = Depends(get_gateway), cache: LocalCache = Depends(get_cache)):
    fs = gateway.ping()

    payload: Dict[str, Any] = {
        # Degraded gateway is still "ok": reads fall back to the local cache.
        "ok": True,
        "service": "primoboost-api",
        "environment": settings.ENVIRONMENT,
        "gateway_ok": bool(fs.get("ok", False)),
        "gateway": fs,
        "local_cache_path": str(cache.path),
        "local_cache_present": cache.path.exists(),
        "time_unix": time.time(),
    }
    return payload

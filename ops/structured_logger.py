from __future__ import annotations

import json
import logging
import os
import sys
import time
from typing import Any, Dict

from utils.request_context import get_request_id

_ENVELOPE = ("severity", "message", "logger", "time_unix", "request_id")


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "severity": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "time_unix": time.time(),
            "request_id": get_request_id(),
            "environment": os.getenv("ENVIRONMENT") or "",
        }
        if hasattr(record, "extra") and isinstance(record.extra, dict):
            for key, value in record.extra.items():
                # Envelope fields win; a clashing payload key is kept under extra_<key>.
                if key in _ENVELOPE and payload.get(key) not in ("", None, value):
                    payload[f"extra_{key}"] = value
                else:
                    payload[key] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    root.setLevel(level.upper())
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter())

    # google client libraries are chatty at INFO (retries, channel setup)
    logging.getLogger("google").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    root.handlers[:] = [handler]

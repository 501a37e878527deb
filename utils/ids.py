from __future__ import annotations

import re
import secrets
import uuid
from datetime import datetime, timezone

from config.settings import settings

REFERENCE_ID_SUFFIXES = 100_000
REFERENCE_ID_RE = re.compile(r"^[A-Z]+-\d{4}-\d{5}$")


def new_id() -> str:
    return str(uuid.uuid4())


def generate_reference_id(now: datetime | None = None, prefix: str | None = None) -> str:
    # Human-facing submission id: PJ-YYYY-NNNNN. Uniqueness is probabilistic;
    # callers that care check for collisions themselves.
    now = now or datetime.now(timezone.utc)
    prefix = prefix or settings.REFERENCE_ID_PREFIX
    suffix = secrets.randbelow(REFERENCE_ID_SUFFIXES)
    return f"{prefix}-{now.year:04d}-{suffix:05d}"


def slugify_key(label: str) -> str:
    """Lookup key for a service type label: 'Mock Interview' -> 'mock_interview'."""
    s = (label or "").strip().lower()
    s = re.sub(r"\s+", "_", s)
    return re.sub(r"[^a-z0-9_]", "", s)

from __future__ import annotations

from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def iso(ts: datetime) -> str:
    # Fixed-width UTC ISO-8601 so stored timestamps sort lexicographically.
    return ts.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def utc_now_iso() -> str:
    return iso(utc_now())


def epoch_millis(ts: datetime | None = None) -> int:
    return int((ts or utc_now()).timestamp() * 1000)

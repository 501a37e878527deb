from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from app.deps import get_lifecycle, get_settings_resolver
from models.registration import ADMIN_STATUS_CHOICES, STATUS_LABELS, SubmissionFilters, SubmissionStatus
from registration.lifecycle import SubmissionLifecycle, dashboard_stats
from registration.messages import render_messages
from registration.settings_resolver import SettingsResolver
from security.admin_auth import AdminClaims

router = APIRouter()
log = logging.getLogger("primoboost.routers.submissions")


class StatusUpdateRequest(BaseModel):
    status: SubmissionStatus
    notes: Optional[str] = Field(default=None, max_length=2000)


class TimelineEntryRequest(BaseModel):
    action: str = Field(..., min_length=1, max_length=200)
    notes: Optional[str] = Field(default=None, max_length=2000)


@router.get("/statuses")
def statuses(claims: dict = AdminClaims):
    return {
        "ok": True,
        "statuses": [{"value": s.value, "label": STATUS_LABELS[s]} for s in SubmissionStatus],
        "adminChoices": [s.value for s in ADMIN_STATUS_CHOICES],
    }


@router.get("/submissions")
def list_submissions(
    status: Optional[SubmissionStatus] = None,
    service_type: Optional[str] = Query(default=None, alias="serviceType"),
    search: Optional[str] = None,
    date_from: Optional[str] = Query(default=None, alias="dateFrom"),
    date_to: Optional[str] = Query(default=None, alias="dateTo"),
    claims: dict = AdminClaims,
    lifecycle: SubmissionLifecycle = Depends(get_lifecycle),
):
    filters = SubmissionFilters(
        status=status, service_type=service_type, search=search, date_from=date_from, date_to=date_to
    )
    items = lifecycle.list(filters)
    # Dashboard counters cover everything, not just the filtered view.
    everything = items if filters == SubmissionFilters() else lifecycle.list()
    return {"ok": True, "items": [s.to_cache() for s in items], "stats": dashboard_stats(everything)}


@router.get("/submissions/{key}")
def get_submission(key: str, claims: dict = AdminClaims, lifecycle: SubmissionLifecycle = Depends(get_lifecycle)):
    sub = lifecycle.get(key)
    if sub is None:
        raise HTTPException(status_code=404, detail="submission_not_found")
    return {"ok": True, "submission": sub.to_cache()}


@router.post("/submissions/{key}/status")
def update_status(
    key: str,
    body: StatusUpdateRequest,
    claims: dict = AdminClaims,
    lifecycle: SubmissionLifecycle = Depends(get_lifecycle),
):
    sub = lifecycle.update_status(key, body.status, notes=body.notes, performed_by=claims.get("performed_by"))
    log.info(
        "admin_status_updated",
        extra={"extra": {"event": "admin_status_updated", "reference_id": sub.reference_id, "status": sub.status.value}},
    )
    return {"ok": True, "submission": sub.to_cache()}


@router.post("/submissions/{key}/timeline")
def add_timeline_entry(
    key: str,
    body: TimelineEntryRequest,
    claims: dict = AdminClaims,
    lifecycle: SubmissionLifecycle = Depends(get_lifecycle),
):
    sub = lifecycle.add_timeline_entry(key, body.action, notes=body.notes, performed_by=claims.get("performed_by"))
    return {"ok": True, "submission": sub.to_cache()}


@router.get("/submissions/{key}/messages")
def submission_messages(
    key: str,
    claims: dict = AdminClaims,
    lifecycle: SubmissionLifecycle = Depends(get_lifecycle),
    resolver: SettingsResolver = Depends(get_settings_resolver),
):
    sub = lifecycle.get(key)
    if sub is None:
        raise HTTPException(status_code=404, detail="submission_not_found")
    return {"ok": True, "referenceId": sub.reference_id, "messages": render_messages(resolver.resolve(), sub)}

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from pydantic import ValidationError

from config.settings import settings
from models.registration import (
    RegistrationFormData,
    SubmissionFilters,
    SubmissionStatus,
    TimelineEntry,
    UserSubmission,
)
from models.schema import CACHE_SUBMISSIONS
from registration.demo_data import DemoSubmissionStore
from repos.submission_repo import SubmissionRepository
from storage.gateway import GatewayError
from storage.local_cache import LocalCache
from utils.ids import REFERENCE_ID_RE, generate_reference_id, new_id
from utils.timeutil import iso, utc_now

log = logging.getLogger("primoboost.registration.lifecycle")

ACTION_FORM_SUBMITTED = "Form Submitted"
ACTION_SCREENSHOT_UPLOADED = "Payment Screenshot Uploaded"


def status_action(status: SubmissionStatus) -> str:
    return f"Status changed to {status.label}"


class UpdateFailed(Exception):
    """A mutation that had to go to the gateway did not take effect."""


class SubmissionNotFound(UpdateFailed):
    pass


class Tier(str, Enum):
    LOCAL = "local"
    DEMO = "demo"
    GATEWAY = "gateway"


@dataclass
class Located:
    tier: Tier
    record: UserSubmission


class SubmissionLifecycle:
    """
    Creation, listing and status transitions for registrations.

    Records can live in three places, searched in this order: the local
    fallback cache (created while the gateway was down, or edited demo rows),
    the in-process demo set, and the gateway. Any status may follow any other;
    sequencing is left to the admin UI.
    """

    def __init__(
        self,
        repo: Optional[SubmissionRepository] = None,
        cache: Optional[LocalCache] = None,
        demo: Optional[DemoSubmissionStore] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.repo = repo or SubmissionRepository()
        self.cache = cache or LocalCache()
        self.demo = demo or DemoSubmissionStore()
        self.clock = clock

    # -------- Local cache list --------
    @staticmethod
    def _parse_local(raw: Any) -> List[UserSubmission]:
        if not isinstance(raw, list):
            return []
        out: List[UserSubmission] = []
        for item in raw:
            try:
                out.append(UserSubmission.model_validate(item))
            except ValidationError as e:
                log.warning("local_submission_invalid", extra={"extra": {"errors": e.error_count()}})
        return out

    def _load_local(self) -> List[UserSubmission]:
        return self._parse_local(self.cache.get_json(CACHE_SUBMISSIONS))

    def _mutate_local(self, change: Callable[[List[UserSubmission]], List[UserSubmission]]) -> None:
        """Read-modify-write of the local list as one cache transaction."""
        self.cache.update_json(CACHE_SUBMISSIONS, lambda raw: [s.to_cache() for s in change(self._parse_local(raw))])

    # -------- Reference ids --------
    def reserve_reference_id(self) -> str:
        """A reference id not seen locally or (when reachable) in the gateway."""
        taken = {s.reference_id for s in self._load_local()} | {s.reference_id for s in self.demo.all()}
        check_gateway = True
        ref = ""
        for attempt in range(1, max(1, settings.REFERENCE_ID_MAX_ATTEMPTS) + 1):
            ref = generate_reference_id(self.clock())
            if ref in taken:
                continue
            if check_gateway:
                try:
                    if self.repo.reference_exists(ref):
                        continue
                except GatewayError as e:
                    # Can't see the gateway; the local check is all we have.
                    log.warning("reference_check_skipped", extra={"extra": {"error_type": type(e).__name__}})
                    check_gateway = False
            return ref
        log.warning("reference_id_collisions_exhausted", extra={"extra": {"reference_id": ref, "attempts": attempt}})
        return ref

    # -------- Operations --------
    def create(
        self, form: RegistrationFormData, screenshot_url: str, reference_id: Optional[str] = None
    ) -> UserSubmission:
        now = iso(self.clock())
        submission = UserSubmission(
            id=new_id(),
            reference_id=reference_id or self.reserve_reference_id(),
            full_name=form.full_name,
            phone=form.phone,
            email=str(form.email),
            college_batch=form.college_batch,
            target_company_exam=form.target_company_exam,
            service_type=form.service_type,
            preferred_date=form.preferred_date,
            payment_screenshot_url=screenshot_url,
            status=SubmissionStatus.PENDING_VERIFICATION,
            timeline=[
                TimelineEntry(id=new_id(), action=ACTION_FORM_SUBMITTED, timestamp=now),
                TimelineEntry(id=new_id(), action=ACTION_SCREENSHOT_UPLOADED, timestamp=now),
            ],
            created_at=now,
            updated_at=now,
        )

        try:
            saved = self.repo.insert(submission)
        except GatewayError as e:
            # Stays local-only; nothing re-syncs it later.
            self._mutate_local(lambda subs: [submission, *subs])
            log.warning(
                "submission_saved_locally",
                extra={"extra": {"reference_id": submission.reference_id, "error_type": type(e).__name__, "error_message": str(e)}},
            )
            return submission

        log.info("submission_created", extra={"extra": {"reference_id": saved.reference_id, "id": saved.id}})
        return saved

    def list(self, filters: Optional[SubmissionFilters] = None) -> List[UserSubmission]:
        filters = filters or SubmissionFilters()
        local = self._load_local()
        merged = list(local)

        try:
            remote = self.repo.list(filters)
        except (GatewayError, ValidationError) as e:
            log.warning(
                "submissions_gateway_unavailable",
                extra={"extra": {"error_type": type(e).__name__, "error_message": str(e), "local_count": len(local)}},
            )
            remote = []

        if remote:
            remote_refs = {s.reference_id for s in remote}
            merged = [s for s in local if s.reference_id not in remote_refs] + remote

        if not merged:
            merged = self.demo.all()

        return [s for s in merged if filters.matches(s)]

    def locate(self, key: str) -> Optional[Located]:
        """Find by id or reference id. Gateway errors propagate."""
        for sub in self._load_local():
            if sub.matches_key(key):
                return Located(Tier.LOCAL, sub)
        demo = self.demo.find(key)
        if demo is not None:
            return Located(Tier.DEMO, demo)
        remote = self.repo.get(key)
        if remote is None and REFERENCE_ID_RE.match(key):
            remote = self.repo.find_by_reference(key)
        if remote is not None:
            return Located(Tier.GATEWAY, remote)
        return None

    def get(self, key: str) -> Optional[UserSubmission]:
        located = self.locate(key)
        return located.record if located else None

    def update_status(
        self,
        key: str,
        status: SubmissionStatus | str,
        notes: Optional[str] = None,
        performed_by: Optional[str] = None,
    ) -> UserSubmission:
        status = SubmissionStatus(status)
        entry = TimelineEntry(
            id=new_id(),
            action=status_action(status),
            timestamp=iso(self.clock()),
            notes=notes,
            performed_by=performed_by,
        )
        return self._append(key, entry, status=status, notes=notes)

    def add_timeline_entry(
        self, key: str, action: str, notes: Optional[str] = None, performed_by: Optional[str] = None
    ) -> UserSubmission:
        entry = TimelineEntry(
            id=new_id(), action=action, timestamp=iso(self.clock()), notes=notes, performed_by=performed_by
        )
        return self._append(key, entry)

    def _append(
        self,
        key: str,
        entry: TimelineEntry,
        status: Optional[SubmissionStatus] = None,
        notes: Optional[str] = None,
    ) -> UserSubmission:
        try:
            located = self.locate(key)
        except GatewayError as e:
            log.error("submission_update_failed", extra={"extra": {"key": key, "stage": "fetch", "error_type": type(e).__name__}})
            raise UpdateFailed("Failed to update submission") from e
        if located is None:
            raise SubmissionNotFound(f"Submission not found: {key}")

        current = located.record
        changes: Dict[str, Any] = {"timeline": [*current.timeline, entry], "updated_at": entry.timestamp}
        if status is not None:
            changes["status"] = status
            changes["admin_notes"] = notes or current.admin_notes
        updated = current.model_copy(update=changes)

        if located.tier is Tier.LOCAL:
            self._mutate_local(lambda subs: [updated if s.id == current.id else s for s in subs])
        elif located.tier is Tier.DEMO:
            self._mutate_local(lambda subs: [*subs, updated])
            self.demo.replace(updated)
        else:
            patch: Dict[str, Any] = {
                "timeline": [e.model_dump(mode="json") for e in updated.timeline],
                "updated_at": updated.updated_at,
            }
            if status is not None:
                patch["status"] = status.value
                patch["admin_notes"] = updated.admin_notes
            try:
                updated = self.repo.update(current.id, patch)
            except GatewayError as e:
                log.error(
                    "submission_update_failed",
                    extra={"extra": {"key": key, "stage": "update", "error_type": type(e).__name__, "error_message": str(e)}},
                )
                raise UpdateFailed("Failed to update submission") from e

        log.info(
            "submission_timeline_appended",
            extra={"extra": {"reference_id": updated.reference_id, "tier": located.tier.value, "action": entry.action}},
        )
        return updated


def dashboard_stats(subs: List[UserSubmission]) -> Dict[str, int]:
    return {
        "total": len(subs),
        "pending": sum(1 for s in subs if s.status == SubmissionStatus.PENDING_VERIFICATION),
        "verified": sum(1 for s in subs if s.status == SubmissionStatus.PAYMENT_VERIFIED),
        "completed": sum(1 for s in subs if s.status == SubmissionStatus.COMPLETED),
    }

from __future__ import annotations

from typing import Any, Dict, List, Optional

from models.registration import SubmissionFilters, UserSubmission
from models.schema import COL_USER_SUBMISSIONS
from storage.gateway import Filter, FirestoreGateway, RowNotFound


def row_to_submission(row: Dict[str, Any]) -> UserSubmission:
    return UserSubmission.model_validate(row)


def filters_to_query(filters: Optional[SubmissionFilters]) -> List[Filter]:
    """
    Push down what the document store can evaluate. Case-insensitive substring
    search has no Firestore equivalent and is left to SubmissionFilters.matches.
    """
    if not filters:
        return []
    out: List[Filter] = []
    if filters.status:
        out.append(("status", "==", filters.status.value))
    if filters.service_type:
        out.append(("service_type", "==", filters.service_type))
    if filters.date_from:
        out.append(("preferred_date", ">=", filters.date_from))
    if filters.date_to:
        out.append(("preferred_date", "<=", filters.date_to))
    return out


class SubmissionRepository:
    def __init__(self, gateway: Optional[FirestoreGateway] = None):
        self.gateway = gateway or FirestoreGateway()

    def list(self, filters: Optional[SubmissionFilters] = None) -> List[UserSubmission]:
        rows = self.gateway.query(COL_USER_SUBMISSIONS, filters=filters_to_query(filters))
        subs = [row_to_submission(r) for r in rows]
        # Sorted here: ordering server-side next to a range filter needs a composite index.
        subs.sort(key=lambda s: s.created_at, reverse=True)
        return subs

    def get(self, submission_id: str) -> Optional[UserSubmission]:
        try:
            return row_to_submission(self.gateway.get(COL_USER_SUBMISSIONS, submission_id))
        except RowNotFound:
            return None

    def find_by_reference(self, reference_id: str) -> Optional[UserSubmission]:
        rows = self.gateway.query(COL_USER_SUBMISSIONS, filters=[("reference_id", "==", reference_id)], limit=1)
        return row_to_submission(rows[0]) if rows else None

    def reference_exists(self, reference_id: str) -> bool:
        return self.find_by_reference(reference_id) is not None

    def insert(self, submission: UserSubmission) -> UserSubmission:
        return row_to_submission(self.gateway.insert(COL_USER_SUBMISSIONS, submission.to_row(), row_id=submission.id))

    def update(self, submission_id: str, patch: Dict[str, Any]) -> UserSubmission:
        return row_to_submission(self.gateway.update(COL_USER_SUBMISSIONS, submission_id, patch))

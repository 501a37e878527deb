from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from models.registration import UserSubmission

_SCREENSHOT = "https://placehold.co/400x600/0a1628/00d9b8?text=Payment+Screenshot"


def _tl(*entries: Tuple[str, str, Optional[str]]) -> List[Dict[str, Any]]:
    out = []
    for i, (action, ts, notes) in enumerate(entries, start=1):
        e: Dict[str, Any] = {"id": str(i), "action": action, "timestamp": ts}
        if i > 2:
            e["performedBy"] = "Admin"
        if notes:
            e["notes"] = notes
        out.append(e)
    return out


def _seed(n: int, name: str, phone: str, email: str, batch: str, target: str, service: str,
          date: str, status: str, timeline: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {
        "id": f"demo-{n}",
        "referenceId": f"PJ-2026-{n:05d}",
        "fullName": name,
        "phone": phone,
        "email": email,
        "collegeBatch": batch,
        "targetCompanyExam": target,
        "serviceType": service,
        "preferredDate": date,
        "paymentScreenshotUrl": _SCREENSHOT,
        "status": status,
        "timeline": timeline,
        "createdAt": timeline[0]["timestamp"],
        "updatedAt": timeline[-1]["timestamp"],
    }


DEMO_SUBMISSION_SEEDS: List[Dict[str, Any]] = [
    _seed(1, "Rahul Sharma", "+919876543210", "rahul.sharma@email.com", "VIT Vellore, 2025 Batch",
          "Accenture", "exam_slot", "2026-01-15", "pending_verification", _tl(
              ("Form Submitted", "2026-01-07T10:30:00Z", None),
              ("Payment Screenshot Uploaded", "2026-01-07T10:32:00Z", None),
          )),
    _seed(2, "Priya Patel", "+919988776655", "priya.patel@email.com", "SRM Chennai, 2025 Batch",
          "TCS NQT", "full_placement_support", "2026-01-20", "payment_verified", _tl(
              ("Form Submitted", "2026-01-05T14:00:00Z", None),
              ("Payment Screenshot Uploaded", "2026-01-05T14:05:00Z", None),
              ("Status changed to Payment Verified", "2026-01-05T16:00:00Z", None),
          )),
    _seed(3, "Amit Kumar", "+919123456789", "amit.kumar@email.com", "BITS Pilani, 2024 Batch",
          "Infosys", "interview_support", "2026-01-12", "assigned_support", _tl(
              ("Form Submitted", "2026-01-03T09:00:00Z", None),
              ("Payment Screenshot Uploaded", "2026-01-03T09:10:00Z", None),
              ("Status changed to Payment Verified", "2026-01-03T11:00:00Z", None),
              ("Status changed to Assigned Support", "2026-01-04T10:00:00Z", "Assigned to Mentor Ravi"),
          )),
    _seed(4, "Sneha Reddy", "+918877665544", "sneha.reddy@email.com", "JNTU Hyderabad, 2025 Batch",
          "Wipro", "communication_mentorship", "2026-01-25", "slot_confirmed", _tl(
              ("Form Submitted", "2026-01-02T11:00:00Z", None),
              ("Payment Screenshot Uploaded", "2026-01-02T11:15:00Z", None),
              ("Status changed to Payment Verified", "2026-01-02T14:00:00Z", None),
              ("Status changed to Slot Confirmed", "2026-01-03T09:00:00Z", "Slot confirmed for Jan 25"),
          )),
    _seed(5, "Vikram Singh", "+917766554433", "vikram.singh@email.com", "NIT Trichy, 2024 Batch",
          "Cognizant", "exam_slot", "2026-01-10", "completed", _tl(
              ("Form Submitted", "2025-12-28T10:00:00Z", None),
              ("Payment Screenshot Uploaded", "2025-12-28T10:10:00Z", None),
              ("Status changed to Payment Verified", "2025-12-28T12:00:00Z", None),
              ("Status changed to Slot Confirmed", "2025-12-29T09:00:00Z", None),
              ("Status changed to Completed", "2026-01-06T18:00:00Z", "Exam completed successfully"),
          )),
]


class DemoSubmissionStore:
    """
    Illustrative submissions shown when nothing else exists yet.

    Each instance starts from a fresh copy of the seeds; edits live for the
    lifetime of the instance only.
    """

    def __init__(self, seeds: Optional[List[Dict[str, Any]]] = None):
        self._items: List[UserSubmission] = [
            UserSubmission.model_validate(s) for s in (seeds if seeds is not None else DEMO_SUBMISSION_SEEDS)
        ]

    def all(self) -> List[UserSubmission]:
        return [s.model_copy(deep=True) for s in self._items]

    def find(self, key: str) -> Optional[UserSubmission]:
        for s in self._items:
            if s.matches_key(key):
                return s.model_copy(deep=True)
        return None

    def replace(self, updated: UserSubmission) -> None:
        for i, s in enumerate(self._items):
            if s.id == updated.id:
                self._items[i] = updated.model_copy(deep=True)
                return

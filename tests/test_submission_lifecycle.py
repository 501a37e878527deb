import re
import threading

import pytest

from models.registration import RegistrationFormData, SubmissionFilters, SubmissionStatus
from models.schema import CACHE_SUBMISSIONS, COL_USER_SUBMISSIONS
from registration.demo_data import DemoSubmissionStore
from registration.lifecycle import (
    SubmissionLifecycle,
    SubmissionNotFound,
    Tier,
    UpdateFailed,
    dashboard_stats,
)
from repos.submission_repo import SubmissionRepository


def _form(**over):
    data = {
        "fullName": "Asha Rao",
        "phone": "+919000000000",
        "email": "asha@example.com",
        "collegeBatch": "MIT 2025",
        "targetCompanyExam": "TCS",
        "serviceType": "exam_slot",
        "preferredDate": "2026-03-01",
    }
    data.update(over)
    return RegistrationFormData.model_validate(data)


@pytest.fixture
def lifecycle(gateway, cache, clock):
    return SubmissionLifecycle(
        repo=SubmissionRepository(gateway), cache=cache, demo=DemoSubmissionStore(), clock=clock
    )


def test_empty_everywhere_lists_demo_rows(lifecycle):
    subs = lifecycle.list()
    assert len(subs) == 5
    assert all(re.match(r"^PJ-2026-0000[1-5]$", s.reference_id) for s in subs)


def test_create_initial_state(lifecycle, gateway):
    sub = lifecycle.create(_form(), "https://example.com/shot.png")
    assert sub.status == SubmissionStatus.PENDING_VERIFICATION
    assert [e.action for e in sub.timeline] == ["Form Submitted", "Payment Screenshot Uploaded"]
    assert re.match(r"^PJ-2026-\d{5}$", sub.reference_id)
    assert len(gateway.tables[COL_USER_SUBMISSIONS]) == 1


def test_create_during_outage_is_listed(lifecycle, gateway, cache):
    gateway.down = True
    sub = lifecycle.create(_form(), "data:image/png;base64,AAAA")
    assert cache.get_json(CACHE_SUBMISSIONS)[0]["referenceId"] == sub.reference_id

    listed = lifecycle.list()
    assert [s.reference_id for s in listed] == [sub.reference_id]
    assert lifecycle.get(sub.reference_id).full_name == "Asha Rao"
    assert lifecycle.get(sub.id).reference_id == sub.reference_id


def test_local_and_remote_merge_without_duplicates(lifecycle, gateway):
    gateway.down = True
    local = lifecycle.create(_form(fullName="Local Only"), "")
    gateway.down = False
    remote = lifecycle.create(_form(fullName="Remote One"), "")
    refs = [s.reference_id for s in lifecycle.list()]
    assert sorted(refs) == sorted([local.reference_id, remote.reference_id])


def test_list_filters_apply_to_merged_set(lifecycle):
    got = lifecycle.list(SubmissionFilters(search="priya"))
    assert [s.full_name for s in got] == ["Priya Patel"]
    got = lifecycle.list(SubmissionFilters(status=SubmissionStatus.COMPLETED))
    assert [s.reference_id for s in got] == ["PJ-2026-00005"]
    got = lifecycle.list(SubmissionFilters(date_from="2026-01-15", date_to="2026-01-20"))
    assert {s.reference_id for s in got} == {"PJ-2026-00001", "PJ-2026-00002"}


def test_update_status_on_local_record(lifecycle, gateway):
    gateway.down = True
    sub = lifecycle.create(_form(), "")
    before = list(sub.timeline)

    updated = lifecycle.update_status(sub.reference_id, "payment_verified", notes="UTR ok", performed_by="Admin")
    assert updated.status == SubmissionStatus.PAYMENT_VERIFIED
    assert updated.timeline[: len(before)] == before
    assert len(updated.timeline) == len(before) + 1
    last = updated.timeline[-1]
    assert last.action == "Status changed to Payment Verified"
    assert last.notes == "UTR ok"
    assert last.performed_by == "Admin"
    assert updated.updated_at == last.timestamp
    assert lifecycle.get(sub.id).status == SubmissionStatus.PAYMENT_VERIFIED


def test_update_status_on_gateway_record(lifecycle, gateway):
    sub = lifecycle.create(_form(), "")
    updated = lifecycle.update_status(sub.id, SubmissionStatus.SLOT_CONFIRMED)
    assert updated.status == SubmissionStatus.SLOT_CONFIRMED
    assert len(updated.timeline) == 3
    row = gateway.tables[COL_USER_SUBMISSIONS][sub.id]
    assert row["status"] == "slot_confirmed"
    assert len(row["timeline"]) == 3


def test_update_status_on_demo_record_persists_locally(lifecycle, cache):
    updated = lifecycle.update_status("demo-1", "payment_verified")
    assert len(updated.timeline) == 3
    assert lifecycle.locate("PJ-2026-00001").tier is Tier.LOCAL
    assert lifecycle.get("demo-1").status == SubmissionStatus.PAYMENT_VERIFIED
    assert cache.get_json(CACHE_SUBMISSIONS)[0]["id"] == "demo-1"


def test_any_status_may_follow_any_other(lifecycle):
    lifecycle.update_status("demo-5", "pending_verification")
    sub = lifecycle.update_status("demo-5", "refund")
    assert sub.status == SubmissionStatus.REFUND


def test_unknown_submission(lifecycle):
    with pytest.raises(SubmissionNotFound):
        lifecycle.update_status("PJ-1999-00000", "completed")


def test_gateway_failure_on_lookup_is_update_failed(lifecycle, gateway):
    gateway.down = True
    with pytest.raises(UpdateFailed):
        lifecycle.update_status("missing-id", "completed")


def test_add_timeline_entry_keeps_status(lifecycle):
    sub = lifecycle.add_timeline_entry("demo-2", "Called candidate", notes="No answer", performed_by="Ravi")
    assert sub.status == SubmissionStatus.PAYMENT_VERIFIED
    assert sub.timeline[-1].action == "Called candidate"


def test_reference_id_avoids_known_refs(lifecycle, gateway, monkeypatch):
    issued = iter(["PJ-2026-00001", "PJ-2026-42424"])
    monkeypatch.setattr("registration.lifecycle.generate_reference_id", lambda now: next(issued))
    assert lifecycle.reserve_reference_id() == "PJ-2026-42424"


def test_dashboard_stats():
    stats = dashboard_stats(DemoSubmissionStore().all())
    assert stats == {"total": 5, "pending": 1, "verified": 1, "completed": 1}


def test_completed_entry_names_the_label(lifecycle):
    before = lifecycle.get("demo-4").timeline
    sub = lifecycle.update_status("demo-4", "completed")
    assert sub.timeline[:-1] == before
    assert "Completed" in sub.timeline[-1].action


def test_concurrent_creates_during_outage_are_all_kept(lifecycle, gateway, cache):
    gateway.down = True
    created, errors = [], []

    def worker(n):
        for i in range(10):
            try:
                created.append(lifecycle.create(_form(fullName=f"Student {n}-{i}"), "").id)
            except Exception as e:
                errors.append(e)

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert {s["id"] for s in cache.get_json(CACHE_SUBMISSIONS)} == set(created)
    assert len(created) == 80


def test_gateway_record_found_by_reference_id(lifecycle):
    sub = lifecycle.create(_form(), "")
    assert lifecycle.locate(sub.reference_id).tier is Tier.GATEWAY
    updated = lifecycle.update_status(sub.reference_id, "payment_verified")
    assert updated.id == sub.id
    assert updated.status == SubmissionStatus.PAYMENT_VERIFIED

import pytest

from models.defaults import default_admin_settings
from registration import settings_editor as ed


@pytest.fixture
def snap():
    return default_admin_settings("2026-01-01T00:00:00.000000Z")


def test_add_service_type_prices_it_for_every_company(snap):
    out = ed.add_service_type(snap, "Mock Interview")
    added = out.service_types[-1]
    assert added.key == "mock_interview"
    assert all(c.prices["mock_interview"] == 0 for c in out.companies)
    # input untouched
    assert len(snap.service_types) == 4


def test_service_key_collision_gets_suffix(snap):
    out = ed.add_service_type(snap, "Exam Slot")
    out = ed.add_service_type(out, "exam slot")
    keys = [s.key for s in out.service_types]
    assert keys.count("exam_slot") == 1
    assert "exam_slot_2" in keys and "exam_slot_3" in keys


def test_unslugable_label_gets_fallback_key():
    assert ed.unique_service_key("???", []) == "service"
    assert ed.unique_service_key("???", ["service"]) == "service_2"


def test_renaming_service_keeps_key(snap):
    out = ed.update_service_type(snap, "1", label="Exam Booking")
    assert out.service_types[0].key == "exam_slot"
    assert out.service_types[0].label == "Exam Booking"


def test_delete_service_type_strips_prices(snap):
    out = ed.delete_service_type(snap, "1")
    assert "exam_slot" not in [s.key for s in out.service_types]
    assert all("exam_slot" not in c.prices for c in out.companies)


def test_empty_service_name_rejected(snap):
    with pytest.raises(ed.SettingsEditError):
        ed.add_service_type(snap, "   ")


def test_toggle_service_type(snap):
    out = ed.toggle_service_type(snap, "2")
    assert out.service_types[1].enabled is False
    assert [s.key for s in out.enabled_service_types()] == ["exam_slot", "full_placement_support", "communication_mentorship"]


def test_add_company_defaults_missing_prices_to_zero(snap):
    out = ed.add_company(snap, "Zoho", {"exam_slot": 1200})
    zoho = out.companies[-1]
    assert zoho.prices["exam_slot"] == 1200
    assert zoho.prices["interview_support"] == 0


def test_set_company_prices_merges(snap):
    out = ed.set_company_prices(snap, "1", {"exam_slot": 999})
    acc = out.companies[0]
    assert acc.prices["exam_slot"] == 999
    assert acc.prices["interview_support"] == snap.companies[0].prices["interview_support"]


def test_negative_price_rejected(snap):
    with pytest.raises(ed.SettingsEditError):
        ed.set_company_prices(snap, "1", {"exam_slot": -1})


def test_unknown_company(snap):
    with pytest.raises(ed.SettingsEditError):
        ed.delete_company(snap, "nope")


def test_form_field_orders_stay_dense(snap):
    out = ed.add_form_field(snap, "LinkedIn", field_type="text")
    out = ed.delete_form_field(out, "3")
    out = ed.move_form_field(out, "1", "down")
    orders = [f.order for f in out.sorted_form_fields()]
    assert orders == list(range(1, len(orders) + 1))
    assert [f.id for f in out.sorted_form_fields()][:2] == ["2", "1"]


def test_move_past_edge_is_noop(snap):
    out = ed.move_form_field(snap, "1", "up")
    assert [f.id for f in out.sorted_form_fields()] == [f.id for f in snap.sorted_form_fields()]


def test_options_dropped_for_non_select(snap):
    out = ed.update_form_field(snap, "6", type="text")
    field = next(f for f in out.form_fields if f.id == "6")
    assert field.options is None

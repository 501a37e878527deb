from urllib.parse import unquote

from models.defaults import default_admin_settings
from models.registration import SubmissionStatus
from registration.demo_data import DemoSubmissionStore
from registration.messages import (
    confirmation_link,
    render_messages,
    render_template,
    templates_for_status,
    whatsapp_link,
)


def _sub(key="demo-2"):
    return DemoSubmissionStore().find(key)


def test_render_template_fills_known_and_keeps_unknown():
    out = render_template("Hi {{fullName}}, ref {{ referenceId }} {{nope}}", {"fullName": "Priya", "referenceId": "PJ-2026-00002"})
    assert out == "Hi Priya, ref PJ-2026-00002 {{nope}}"


def test_whatsapp_link_strips_phone_formatting():
    link = whatsapp_link("+91 98765-43210", "hello world")
    assert link == "https://wa.me/919876543210?text=hello%20world"


def test_templates_for_status():
    snap = default_admin_settings()
    names = [t.name for t in templates_for_status(snap, SubmissionStatus.SLOT_CONFIRMED)]
    assert names == ["Slot Confirmed"]
    assert templates_for_status(snap, SubmissionStatus.DROPPED) == []


def test_render_messages_uses_service_label_and_marks_suggestion():
    snap = default_admin_settings()
    msgs = render_messages(snap, _sub())
    verified = next(m for m in msgs if m["name"] == "Payment Verified")
    assert verified["suggested"] is True
    assert "Service: Full Placement Support" in verified["text"]
    assert "Reference ID: PJ-2026-00002" in verified["text"]
    assert verified["whatsappLink"].startswith("https://wa.me/919988776655?text=")
    assert sum(m["suggested"] for m in msgs) == 1


def test_confirmation_link_goes_to_business_number():
    snap = default_admin_settings()
    link = confirmation_link(_sub("demo-1"), snap)
    assert link.startswith("https://wa.me/919876543210?text=")
    text = unquote(link.split("text=", 1)[1])
    assert "Reference ID: PJ-2026-00001" in text
    assert "Service: Exam Slot" in text


def test_suggestion_follows_trigger_status():
    snap = default_admin_settings()
    msgs = render_messages(snap, _sub("demo-5"))
    assert not any(m["suggested"] for m in msgs)

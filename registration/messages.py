from __future__ import annotations

import re
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from config.settings import settings
from models.registration import (
    AdminSettings,
    MessageTemplate,
    SubmissionStatus,
    UserSubmission,
)

_PLACEHOLDER_RE = re.compile(r"\{\{\s*(\w+)\s*\}\}")


def _digits(phone: str) -> str:
    return re.sub(r"\D", "", phone or "")


def whatsapp_link(phone: str, text: str) -> str:
    return f"https://wa.me/{_digits(phone)}?text={quote(text, safe='')}"


def template_context(sub: UserSubmission, snapshot: Optional[AdminSettings] = None) -> Dict[str, str]:
    ctx = {k: ("" if v is None else str(v)) for k, v in sub.model_dump(mode="json", by_alias=True).items() if not isinstance(v, list)}
    ctx["serviceType"] = snapshot.service_label(sub.service_type) if snapshot else sub.service_type
    ctx["status"] = sub.status.label
    return ctx


def render_template(template: str, context: Dict[str, Any]) -> str:
    # Unknown placeholders are left as-is so a typo is visible in the preview.
    def _sub(m: re.Match) -> str:
        key = m.group(1)
        return str(context[key]) if key in context else m.group(0)

    return _PLACEHOLDER_RE.sub(_sub, template)


def templates_for_status(snapshot: AdminSettings, status: SubmissionStatus) -> List[MessageTemplate]:
    return [t for t in snapshot.message_templates if t.trigger_status == status]


def render_messages(snapshot: AdminSettings, sub: UserSubmission) -> List[Dict[str, Any]]:
    """Every template rendered for one submission, with a ready-to-open WhatsApp link."""
    ctx = template_context(sub, snapshot)
    suggested = {t.id for t in templates_for_status(snapshot, sub.status)}
    out = []
    for t in snapshot.message_templates:
        text = render_template(t.template, ctx)
        out.append(
            {
                "templateId": t.id,
                "name": t.name,
                "triggerStatus": t.trigger_status.value if t.trigger_status else None,
                "suggested": t.id in suggested,
                "text": text,
                "whatsappLink": whatsapp_link(sub.phone, text),
            }
        )
    return out


def confirmation_message(sub: UserSubmission, snapshot: AdminSettings) -> str:
    # What the registrant sends to the business number after paying.
    return (
        f"Hi, I have completed my payment for {settings.BRAND_NAME} services.\n\n"
        f"Reference ID: {sub.reference_id}\n"
        f"Name: {sub.full_name}\n"
        f"Service: {snapshot.service_label(sub.service_type)}\n"
        f"Target: {sub.target_company_exam}\n\n"
        f"Please verify my payment."
    )


def confirmation_link(sub: UserSubmission, snapshot: AdminSettings) -> str:
    return whatsapp_link(snapshot.whatsapp_number, confirmation_message(sub, snapshot))

# Built-in settings floor: what the registration form runs on before an admin
# has saved anything anywhere.
from __future__ import annotations

from typing import List

from config.settings import settings
from models.registration import (
    SERVICE_TYPE_LABELS,
    AdminSettings,
    CompanyPricing,
    FormFieldConfig,
    MessageTemplate,
    ServiceTypeConfig,
    SubmissionStatus,
)
from utils.timeutil import utc_now_iso

DEFAULT_SERVICE_PRICES = {
    "exam_slot": 999,
    "interview_support": 1999,
    "full_placement_support": 4999,
    "communication_mentorship": 1499,
}

_COMPANY_PRICES = [
    ("Accenture", (2000, 5000, 8000, 3000)),
    ("TCS", (1500, 4000, 7000, 2500)),
    ("Infosys", (1800, 4500, 7500, 2800)),
    ("Wipro", (1500, 4000, 6500, 2500)),
    ("Cognizant", (1800, 4500, 7500, 2800)),
    ("Capgemini", (2000, 5000, 8000, 3000)),
]

_SERVICE_KEYS = ("exam_slot", "interview_support", "full_placement_support", "communication_mentorship")


def default_service_types() -> List[ServiceTypeConfig]:
    return [
        ServiceTypeConfig(id=str(i), key=key, label=SERVICE_TYPE_LABELS[key], enabled=True)
        for i, key in enumerate(_SERVICE_KEYS, start=1)
    ]


def default_companies() -> List[CompanyPricing]:
    return [
        CompanyPricing(id=str(i), company_name=name, prices=dict(zip(_SERVICE_KEYS, prices)), enabled=True)
        for i, (name, prices) in enumerate(_COMPANY_PRICES, start=1)
    ]


def default_form_fields() -> List[FormFieldConfig]:
    rows = [
        ("fullName", "Full Name", "text", "Enter your full name"),
        ("phone", "Phone Number (WhatsApp)", "tel", "+91 XXXXXXXXXX"),
        ("email", "Email", "email", "your@email.com"),
        ("collegeBatch", "College / Batch", "text", "e.g., ABC College, 2024 Batch"),
        ("targetCompanyExam", "Target Company / Exam", "text", "e.g., Accenture, TCS NQT"),
        ("serviceType", "Service Type", "select", None),
        ("preferredDate", "Preferred Exam Date / Timeline", "date", None),
    ]
    return [
        FormFieldConfig(
            id=str(i),
            name=name,
            label=label,
            type=ftype,
            required=True,
            placeholder=placeholder,
            options=list(SERVICE_TYPE_LABELS) if ftype == "select" else None,
            enabled=True,
            order=i,
        )
        for i, (name, label, ftype, placeholder) in enumerate(rows, start=1)
    ]


def default_message_templates() -> List[MessageTemplate]:
    return [
        MessageTemplate(
            id="1",
            name="Payment Verified",
            template=(
                "Hi {{fullName}}, your payment is verified! ✅\n\n"
                "Service: {{serviceType}}\nTarget: {{targetCompanyExam}}\nReference ID: {{referenceId}}\n\n"
                "Our team will contact you before {{preferredDate}}."
            ),
            trigger_status=SubmissionStatus.PAYMENT_VERIFIED,
        ),
        MessageTemplate(
            id="2",
            name="Slot Confirmed",
            template=(
                "Hi {{fullName}}, your exam slot has been confirmed! \U0001F3AF\n\n"
                "Company: {{targetCompanyExam}}\nDate: {{preferredDate}}\nReference ID: {{referenceId}}\n\n"
                "All the best!"
            ),
            trigger_status=SubmissionStatus.SLOT_CONFIRMED,
        ),
        MessageTemplate(
            id="3",
            name="Support Assigned",
            template=(
                "Hi {{fullName}}, a support executive has been assigned to you! \U0001F468‍\U0001F4BC\n\n"
                "Service: {{serviceType}}\nReference ID: {{referenceId}}\n\n"
                "They will reach out to you shortly."
            ),
            trigger_status=SubmissionStatus.ASSIGNED_SUPPORT,
        ),
    ]


def default_admin_settings(updated_at: str | None = None) -> AdminSettings:
    return AdminSettings(
        id="1",
        upi_id=settings.DEFAULT_UPI_ID,
        qr_code_url=settings.DEFAULT_QR_CODE_URL,
        whatsapp_number=settings.DEFAULT_WHATSAPP_NUMBER,
        service_types=default_service_types(),
        companies=default_companies(),
        form_fields=default_form_fields(),
        message_templates=default_message_templates(),
        updated_at=updated_at or utc_now_iso(),
    )

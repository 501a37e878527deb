from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """snake_case in Python and storage rows, camelCase in the cache and over HTTP."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_cache(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def to_row(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude={"id"})


class SubmissionStatus(str, Enum):
    PENDING_VERIFICATION = "pending_verification"
    PAYMENT_VERIFIED = "payment_verified"
    ASSIGNED_SUPPORT = "assigned_support"
    SLOT_CONFIRMED = "slot_confirmed"
    INTERVIEW_SCHEDULED = "interview_scheduled"
    COMPLETED = "completed"
    DROPPED = "dropped"
    REFUND = "refund"

    @property
    def label(self) -> str:
        return STATUS_LABELS[self]


STATUS_LABELS: Dict[SubmissionStatus, str] = {
    SubmissionStatus.PENDING_VERIFICATION: "Pending Verification",
    SubmissionStatus.PAYMENT_VERIFIED: "Payment Verified",
    SubmissionStatus.ASSIGNED_SUPPORT: "Assigned Support",
    SubmissionStatus.SLOT_CONFIRMED: "Slot Confirmed",
    SubmissionStatus.INTERVIEW_SCHEDULED: "Interview Scheduled",
    SubmissionStatus.COMPLETED: "Completed",
    SubmissionStatus.DROPPED: "Dropped",
    SubmissionStatus.REFUND: "Refund",
}

# What the admin dashboard offers from pending_verification. Not enforced.
ADMIN_STATUS_CHOICES: List[SubmissionStatus] = [s for s in SubmissionStatus if s is not SubmissionStatus.PENDING_VERIFICATION]

SERVICE_TYPE_LABELS: Dict[str, str] = {
    "exam_slot": "Exam Slot",
    "interview_support": "Interview Support",
    "full_placement_support": "Full Placement Support",
    "communication_mentorship": "Communication / Mentorship",
}


# -------- Settings snapshot --------

class ServiceTypeConfig(CamelModel):
    id: str
    key: str
    label: str
    enabled: bool = True


class CompanyPricing(CamelModel):
    id: str
    company_name: str
    prices: Dict[str, int] = Field(default_factory=dict)
    enabled: bool = True

    def price_for(self, service_key: str) -> int:
        # missing entries are priced at 0, never an error
        return int(self.prices.get(service_key, 0) or 0)


FieldType = Literal["text", "email", "tel", "select", "date", "textarea"]


class FormFieldConfig(CamelModel):
    id: str
    name: str
    label: str
    type: FieldType = "text"
    required: bool = False
    placeholder: Optional[str] = None
    options: Optional[List[str]] = None
    enabled: bool = True
    order: int = 0

    @model_validator(mode="after")
    def _options_only_for_select(self) -> "FormFieldConfig":
        if self.type != "select" and self.options is not None:
            self.options = None
        return self


class MessageTemplate(CamelModel):
    id: str
    name: str
    template: str
    trigger_status: Optional[SubmissionStatus] = None


class AdminSettings(CamelModel):
    id: str = "1"
    upi_id: str
    qr_code_url: str
    whatsapp_number: str
    service_types: List[ServiceTypeConfig]
    companies: List[CompanyPricing]
    form_fields: List[FormFieldConfig]
    message_templates: List[MessageTemplate]
    updated_at: str

    def enabled_service_types(self) -> List[ServiceTypeConfig]:
        return [s for s in self.service_types if s.enabled]

    def enabled_companies(self) -> List[CompanyPricing]:
        return [c for c in self.companies if c.enabled]

    def sorted_form_fields(self, enabled_only: bool = False) -> List[FormFieldConfig]:
        fields = [f for f in self.form_fields if f.enabled or not enabled_only]
        return sorted(fields, key=lambda f: f.order)

    def service_label(self, key: str) -> str:
        for s in self.service_types:
            if s.key == key:
                return s.label
        return SERVICE_TYPE_LABELS.get(key, key)

    def price_for(self, company_name: str, service_key: str) -> int:
        for c in self.enabled_companies():
            if c.company_name == company_name:
                return c.price_for(service_key)
        return 0


class SettingsPatch(CamelModel):
    """Fields an admin may overwrite. Absent fields keep their current value."""

    upi_id: Optional[str] = None
    qr_code_url: Optional[str] = None
    whatsapp_number: Optional[str] = None
    service_types: Optional[List[ServiceTypeConfig]] = None
    companies: Optional[List[CompanyPricing]] = None
    form_fields: Optional[List[FormFieldConfig]] = None
    message_templates: Optional[List[MessageTemplate]] = None

    def apply(self, current: AdminSettings, updated_at: str) -> AdminSettings:
        merged = current.model_copy(deep=True)
        for name in type(self).model_fields:
            value = getattr(self, name)
            if value is not None:
                setattr(merged, name, value)
        merged.id = current.id or "1"
        merged.updated_at = updated_at
        return merged


# -------- Submissions --------

class TimelineEntry(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    action: str
    timestamp: str
    notes: Optional[str] = None
    performed_by: Optional[str] = None


class RegistrationFormData(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)

    full_name: str = Field(..., min_length=2)
    phone: str = Field(..., min_length=10)
    email: EmailStr
    college_batch: str = Field(..., min_length=2)
    target_company_exam: str = Field(..., min_length=1)
    service_type: str = Field(..., min_length=1)
    preferred_date: str = Field(..., min_length=1)


class UserSubmission(CamelModel):
    id: str
    reference_id: str
    full_name: str
    phone: str
    email: str
    college_batch: str
    target_company_exam: str
    service_type: str
    preferred_date: str
    payment_screenshot_url: str = ""
    status: SubmissionStatus = SubmissionStatus.PENDING_VERIFICATION
    timeline: List[TimelineEntry] = Field(default_factory=list)
    admin_notes: Optional[str] = None
    assigned_to: Optional[str] = None
    created_at: str
    updated_at: str

    @field_validator("timeline", mode="before")
    @classmethod
    def _timeline_never_null(cls, v: Any) -> Any:
        return v or []

    def matches_key(self, key: str) -> bool:
        # id and referenceId are interchangeable for lookups
        return key in (self.id, self.reference_id)


class SubmissionFilters(CamelModel):
    status: Optional[SubmissionStatus] = None
    service_type: Optional[str] = None
    search: Optional[str] = None
    date_from: Optional[str] = None
    date_to: Optional[str] = None

    def matches(self, sub: UserSubmission) -> bool:
        if self.status and sub.status != self.status:
            return False
        if self.service_type and sub.service_type != self.service_type:
            return False
        if self.search:
            q = self.search.lower()
            haystack = (sub.full_name.lower(), sub.reference_id.lower(), sub.target_company_exam.lower())
            if not any(q in h for h in haystack):
                return False
        if self.date_from and sub.preferred_date < self.date_from:
            return False
        if self.date_to and sub.preferred_date > self.date_to:
            return False
        return True

"""
Admin edits on a settings snapshot.

Every function takes an AdminSettings and returns a new one; persisting the
result is SettingsResolver's job. Referential rules live here:
  - a service type's key is fixed at creation and unique within the snapshot
  - deleting a service type strips its key from every company's prices
  - form field `order` is always a dense 1..N sequence
"""
from __future__ import annotations

from typing import Dict, List, Optional

from models.registration import (
    AdminSettings,
    CompanyPricing,
    FieldType,
    FormFieldConfig,
    ServiceTypeConfig,
)
from utils.ids import new_id, slugify_key


class SettingsEditError(ValueError):
    pass


def _copy(snapshot: AdminSettings) -> AdminSettings:
    return snapshot.model_copy(deep=True)


def unique_service_key(label: str, existing: List[str]) -> str:
    base = slugify_key(label) or "service"
    if base not in existing:
        return base
    n = 2
    while f"{base}_{n}" in existing:
        n += 1
    return f"{base}_{n}"


# -------- Service types --------
def add_service_type(snapshot: AdminSettings, label: str, enabled: bool = True) -> AdminSettings:
    label = (label or "").strip()
    if not label:
        raise SettingsEditError("service_name_required")
    out = _copy(snapshot)
    key = unique_service_key(label, [s.key for s in out.service_types])
    out.service_types.append(ServiceTypeConfig(id=new_id(), key=key, label=label, enabled=enabled))
    for c in out.companies:
        c.prices.setdefault(key, 0)
    return out


def _find_service(snapshot: AdminSettings, service_id: str) -> ServiceTypeConfig:
    for s in snapshot.service_types:
        if s.id == service_id:
            return s
    raise SettingsEditError("service_type_not_found")


def update_service_type(
    snapshot: AdminSettings, service_id: str, label: Optional[str] = None, enabled: Optional[bool] = None
) -> AdminSettings:
    out = _copy(snapshot)
    svc = _find_service(out, service_id)
    if label is not None:
        if not label.strip():
            raise SettingsEditError("service_name_required")
        svc.label = label.strip()
    if enabled is not None:
        svc.enabled = enabled
    return out


def toggle_service_type(snapshot: AdminSettings, service_id: str) -> AdminSettings:
    svc = _find_service(snapshot, service_id)
    return update_service_type(snapshot, service_id, enabled=not svc.enabled)


def delete_service_type(snapshot: AdminSettings, service_id: str) -> AdminSettings:
    out = _copy(snapshot)
    svc = _find_service(out, service_id)
    out.service_types = [s for s in out.service_types if s.id != service_id]
    for c in out.companies:
        c.prices.pop(svc.key, None)
    return out


# -------- Companies --------
def _find_company(snapshot: AdminSettings, company_id: str) -> CompanyPricing:
    for c in snapshot.companies:
        if c.id == company_id:
            return c
    raise SettingsEditError("company_not_found")


def add_company(
    snapshot: AdminSettings, company_name: str, prices: Optional[Dict[str, int]] = None, enabled: bool = True
) -> AdminSettings:
    name = (company_name or "").strip()
    if not name:
        raise SettingsEditError("company_name_required")
    out = _copy(snapshot)
    merged = {s.key: 0 for s in out.service_types}
    merged.update({k: int(v) for k, v in (prices or {}).items()})
    out.companies.append(CompanyPricing(id=new_id(), company_name=name, prices=merged, enabled=enabled))
    return out


def update_company(
    snapshot: AdminSettings,
    company_id: str,
    company_name: Optional[str] = None,
    enabled: Optional[bool] = None,
) -> AdminSettings:
    out = _copy(snapshot)
    company = _find_company(out, company_id)
    if company_name is not None:
        if not company_name.strip():
            raise SettingsEditError("company_name_required")
        company.company_name = company_name.strip()
    if enabled is not None:
        company.enabled = enabled
    return out


def set_company_prices(snapshot: AdminSettings, company_id: str, prices: Dict[str, int]) -> AdminSettings:
    # deep-merge: keys not mentioned keep their price
    out = _copy(snapshot)
    company = _find_company(out, company_id)
    for key, amount in prices.items():
        if amount < 0:
            raise SettingsEditError("price_must_be_non_negative")
        company.prices[key] = int(amount)
    return out


def toggle_company(snapshot: AdminSettings, company_id: str) -> AdminSettings:
    company = _find_company(snapshot, company_id)
    return update_company(snapshot, company_id, enabled=not company.enabled)


def delete_company(snapshot: AdminSettings, company_id: str) -> AdminSettings:
    out = _copy(snapshot)
    _find_company(out, company_id)
    out.companies = [c for c in out.companies if c.id != company_id]
    return out


# -------- Form fields --------
def _renumber(fields: List[FormFieldConfig]) -> List[FormFieldConfig]:
    for i, f in enumerate(fields, start=1):
        f.order = i
    return fields


def add_form_field(
    snapshot: AdminSettings,
    label: str,
    field_type: FieldType = "text",
    required: bool = False,
    placeholder: Optional[str] = None,
    options: Optional[List[str]] = None,
    name: Optional[str] = None,
) -> AdminSettings:
    out = _copy(snapshot)
    fields = out.sorted_form_fields()
    fid = new_id()
    fields.append(
        FormFieldConfig(
            id=fid,
            name=name or f"field_{fid[:8]}",
            label=(label or "").strip() or "New Field",
            type=field_type,
            required=required,
            placeholder=placeholder,
            options=[o.strip() for o in options if o.strip()] if options else None,
            enabled=True,
            order=len(fields) + 1,
        )
    )
    out.form_fields = _renumber(fields)
    return out


def update_form_field(snapshot: AdminSettings, field_id: str, **changes) -> AdminSettings:
    out = _copy(snapshot)
    for i, f in enumerate(out.form_fields):
        if f.id == field_id:
            data = f.model_dump()
            data.update({k: v for k, v in changes.items() if k not in ("id", "order")})
            out.form_fields[i] = FormFieldConfig.model_validate(data)
            return out
    raise SettingsEditError("form_field_not_found")


def toggle_form_field(snapshot: AdminSettings, field_id: str) -> AdminSettings:
    for f in snapshot.form_fields:
        if f.id == field_id:
            return update_form_field(snapshot, field_id, enabled=not f.enabled)
    raise SettingsEditError("form_field_not_found")


def delete_form_field(snapshot: AdminSettings, field_id: str) -> AdminSettings:
    out = _copy(snapshot)
    fields = out.sorted_form_fields()
    if not any(f.id == field_id for f in fields):
        raise SettingsEditError("form_field_not_found")
    out.form_fields = _renumber([f for f in fields if f.id != field_id])
    return out


def move_form_field(snapshot: AdminSettings, field_id: str, direction: str) -> AdminSettings:
    if direction not in ("up", "down"):
        raise SettingsEditError("direction_must_be_up_or_down")
    out = _copy(snapshot)
    fields = out.sorted_form_fields()
    idx = next((i for i, f in enumerate(fields) if f.id == field_id), None)
    if idx is None:
        raise SettingsEditError("form_field_not_found")
    target = idx - 1 if direction == "up" else idx + 1
    if 0 <= target < len(fields):
        fields[idx], fields[target] = fields[target], fields[idx]
    out.form_fields = _renumber(fields)
    return out

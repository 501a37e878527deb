from __future__ import annotations

import logging
from typing import Dict, List, Literal, Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from pydantic import BaseModel, Field

from app.deps import get_settings_resolver, get_uploads
from models.registration import FieldType, SettingsPatch
from registration import settings_editor as editor
from registration.settings_resolver import SettingsResolver
from registration.uploads import UploadService
from security.admin_auth import AdminClaims

router = APIRouter()
log = logging.getLogger("primoboost.routers.admin_settings")


class ServiceTypeRequest(BaseModel):
    label: str = Field(..., min_length=1, max_length=80)
    enabled: bool = True


class ServiceTypePatch(BaseModel):
    label: Optional[str] = Field(default=None, max_length=80)
    enabled: Optional[bool] = None


class CompanyRequest(BaseModel):
    companyName: str = Field(..., min_length=1, max_length=120)
    prices: Dict[str, int] = Field(default_factory=dict)
    enabled: bool = True


class CompanyPatch(BaseModel):
    companyName: Optional[str] = Field(default=None, max_length=120)
    enabled: Optional[bool] = None


class PricesRequest(BaseModel):
    prices: Dict[str, int]


class FormFieldRequest(BaseModel):
    label: str = Field(..., min_length=1, max_length=120)
    type: FieldType = "text"
    required: bool = False
    placeholder: Optional[str] = None
    options: Optional[List[str]] = None
    name: Optional[str] = None


class FormFieldPatch(BaseModel):
    label: Optional[str] = None
    type: Optional[FieldType] = None
    required: Optional[bool] = None
    placeholder: Optional[str] = None
    options: Optional[List[str]] = None
    enabled: Optional[bool] = None


class MoveRequest(BaseModel):
    direction: Literal["up", "down"]


def _saved(resolver: SettingsResolver, snapshot) -> dict:
    return {"ok": True, "settings": resolver.replace(snapshot).to_cache()}


@router.get("/settings")
def get_settings(claims: dict = AdminClaims, resolver: SettingsResolver = Depends(get_settings_resolver)):
    return {"ok": True, "settings": resolver.resolve().to_cache()}


@router.patch("/settings")
def patch_settings(body: SettingsPatch, claims: dict = AdminClaims, resolver: SettingsResolver = Depends(get_settings_resolver)):
    return {"ok": True, "settings": resolver.update(body).to_cache()}


@router.post("/settings/qr-code")
def upload_qr_code(
    file: UploadFile = File(...),
    claims: dict = AdminClaims,
    resolver: SettingsResolver = Depends(get_settings_resolver),
    uploads: UploadService = Depends(get_uploads),
):
    content = file.file.read()
    if not content:
        raise HTTPException(status_code=422, detail="file_required")
    url = uploads.upload_qr_code(content, filename=file.filename or "", content_type=file.content_type or "image/png")
    log.info("qr_code_uploaded", extra={"extra": {"event": "qr_code_uploaded", "bytes": len(content)}})
    return {"ok": True, "qrCodeUrl": url, "settings": resolver.update(SettingsPatch(qr_code_url=url)).to_cache()}


# -------- Service types --------
@router.post("/settings/service-types", status_code=201)
def add_service_type(body: ServiceTypeRequest, claims: dict = AdminClaims, resolver: SettingsResolver = Depends(get_settings_resolver)):
    return _saved(resolver, editor.add_service_type(resolver.resolve(), body.label, enabled=body.enabled))


@router.patch("/settings/service-types/{service_id}")
def patch_service_type(
    service_id: str, body: ServiceTypePatch, claims: dict = AdminClaims, resolver: SettingsResolver = Depends(get_settings_resolver)
):
    return _saved(resolver, editor.update_service_type(resolver.resolve(), service_id, label=body.label, enabled=body.enabled))


@router.delete("/settings/service-types/{service_id}")
def delete_service_type(service_id: str, claims: dict = AdminClaims, resolver: SettingsResolver = Depends(get_settings_resolver)):
    return _saved(resolver, editor.delete_service_type(resolver.resolve(), service_id))


# -------- Companies --------
@router.post("/settings/companies", status_code=201)
def add_company(body: CompanyRequest, claims: dict = AdminClaims, resolver: SettingsResolver = Depends(get_settings_resolver)):
    return _saved(resolver, editor.add_company(resolver.resolve(), body.companyName, prices=body.prices, enabled=body.enabled))


@router.patch("/settings/companies/{company_id}")
def patch_company(
    company_id: str, body: CompanyPatch, claims: dict = AdminClaims, resolver: SettingsResolver = Depends(get_settings_resolver)
):
    return _saved(
        resolver, editor.update_company(resolver.resolve(), company_id, company_name=body.companyName, enabled=body.enabled)
    )


@router.put("/settings/companies/{company_id}/prices")
def put_company_prices(
    company_id: str, body: PricesRequest, claims: dict = AdminClaims, resolver: SettingsResolver = Depends(get_settings_resolver)
):
    return _saved(resolver, editor.set_company_prices(resolver.resolve(), company_id, body.prices))


@router.delete("/settings/companies/{company_id}")
def delete_company(company_id: str, claims: dict = AdminClaims, resolver: SettingsResolver = Depends(get_settings_resolver)):
    return _saved(resolver, editor.delete_company(resolver.resolve(), company_id))


# -------- Form fields --------
@router.post("/settings/form-fields", status_code=201)
def add_form_field(body: FormFieldRequest, claims: dict = AdminClaims, resolver: SettingsResolver = Depends(get_settings_resolver)):
    snapshot = editor.add_form_field(
        resolver.resolve(),
        body.label,
        field_type=body.type,
        required=body.required,
        placeholder=body.placeholder,
        options=body.options,
        name=body.name,
    )
    return _saved(resolver, snapshot)


@router.patch("/settings/form-fields/{field_id}")
def patch_form_field(
    field_id: str, body: FormFieldPatch, claims: dict = AdminClaims, resolver: SettingsResolver = Depends(get_settings_resolver)
):
    changes = body.model_dump(exclude_none=True)
    return _saved(resolver, editor.update_form_field(resolver.resolve(), field_id, **changes))


@router.post("/settings/form-fields/{field_id}/move")
def move_form_field(
    field_id: str, body: MoveRequest, claims: dict = AdminClaims, resolver: SettingsResolver = Depends(get_settings_resolver)
):
    return _saved(resolver, editor.move_form_field(resolver.resolve(), field_id, body.direction))


@router.delete("/settings/form-fields/{field_id}")
def delete_form_field(field_id: str, claims: dict = AdminClaims, resolver: SettingsResolver = Depends(get_settings_resolver)):
    return _saved(resolver, editor.delete_form_field(resolver.resolve(), field_id))

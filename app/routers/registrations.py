from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from pydantic import ValidationError

from app.deps import get_lifecycle, get_settings_resolver, get_uploads
from models.registration import RegistrationFormData
from registration.lifecycle import SubmissionLifecycle
from registration.messages import confirmation_link
from registration.settings_resolver import SettingsResolver
from registration.uploads import UploadService

router = APIRouter()


@router.post("/registrations", status_code=201)
def register(
    full_name: str = Form("", alias="fullName"),
    phone: str = Form(""),
    email: str = Form(""),
    college_batch: str = Form("", alias="collegeBatch"),
    target_company_exam: str = Form("", alias="targetCompanyExam"),
    service_type: str = Form("exam_slot", alias="serviceType"),
    preferred_date: str = Form("", alias="preferredDate"),
    screenshot: UploadFile = File(...),
    lifecycle: SubmissionLifecycle = Depends(get_lifecycle),
    resolver: SettingsResolver = Depends(get_settings_resolver),
    uploads: UploadService = Depends(get_uploads),
):
    try:
        form = RegistrationFormData(
            full_name=full_name,
            phone=phone,
            email=email,
            college_batch=college_batch,
            target_company_exam=target_company_exam,
            service_type=service_type,
            preferred_date=preferred_date,
        )
    except ValidationError as e:
        detail = [{"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]} for err in e.errors()]
        raise HTTPException(status_code=422, detail=detail)

    content = screenshot.file.read()
    if not content:
        raise HTTPException(status_code=422, detail="screenshot_required")

    reference_id = lifecycle.reserve_reference_id()
    url = uploads.upload_payment_screenshot(
        content,
        filename=screenshot.filename or "",
        content_type=screenshot.content_type or "application/octet-stream",
        reference_id=reference_id,
    )
    submission = lifecycle.create(form, url, reference_id=reference_id)
    snapshot = resolver.resolve()

    return {
        "ok": True,
        "submission": submission.to_cache(),
        "price": snapshot.price_for(form.target_company_exam, form.service_type),
        "upiId": snapshot.upi_id,
        "whatsappLink": confirmation_link(submission, snapshot),
    }

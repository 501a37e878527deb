from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from app.deps import get_settings_resolver
from registration.settings_resolver import SettingsResolver

router = APIRouter()


@router.get("/settings")
def public_settings(resolver: SettingsResolver = Depends(get_settings_resolver)):
    snapshot = resolver.resolve()
    return {
        "ok": True,
        "upiId": snapshot.upi_id,
        "qrCodeUrl": snapshot.qr_code_url,
        "whatsappNumber": snapshot.whatsapp_number,
        "serviceTypes": [s.to_cache() for s in snapshot.enabled_service_types()],
        "companies": [c.to_cache() for c in snapshot.enabled_companies()],
        "formFields": [f.to_cache() for f in snapshot.sorted_form_fields(enabled_only=True)],
    }


@router.get("/settings/price")
def price_lookup(
    company: str = Query(..., min_length=1),
    service: str = Query(..., min_length=1),
    resolver: SettingsResolver = Depends(get_settings_resolver),
):
    snapshot = resolver.resolve()
    return {"ok": True, "company": company, "serviceType": service, "price": snapshot.price_for(company, service)}

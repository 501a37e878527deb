from __future__ import annotations

from typing import Any, Dict, Optional

from models.defaults import (
    default_companies,
    default_form_fields,
    default_message_templates,
    default_service_types,
)
from models.registration import AdminSettings
from models.schema import COL_ADMIN_SETTINGS, DOC_ADMIN_SETTINGS
from storage.gateway import FirestoreGateway, RelationNotFound, RowNotFound
from utils.timeutil import utc_now_iso


def row_to_settings(row: Dict[str, Any]) -> AdminSettings:
    # Older rows may predate some columns; the built-in lists fill the gaps.
    data = dict(row)
    data["id"] = str(data.get("id") or DOC_ADMIN_SETTINGS)
    data["service_types"] = data.get("service_types") or [s.model_dump(mode="json") for s in default_service_types()]
    data["companies"] = data.get("companies") or [c.model_dump(mode="json") for c in default_companies()]
    data["form_fields"] = data.get("form_fields") or [f.model_dump(mode="json") for f in default_form_fields()]
    data["message_templates"] = data.get("message_templates") or [m.model_dump(mode="json") for m in default_message_templates()]
    data["updated_at"] = data.get("updated_at") or utc_now_iso()
    return AdminSettings.model_validate(data)


class SettingsRepository:
    def __init__(self, gateway: Optional[FirestoreGateway] = None):
        self.gateway = gateway or FirestoreGateway()

    def get(self) -> Optional[AdminSettings]:
        """None when the row or the collection does not exist; other failures propagate."""
        try:
            row = self.gateway.get(COL_ADMIN_SETTINGS, DOC_ADMIN_SETTINGS)
        except (RowNotFound, RelationNotFound):
            return None
        return row_to_settings(row)

    def upsert(self, snapshot: AdminSettings) -> AdminSettings:
        row = self.gateway.upsert(COL_ADMIN_SETTINGS, DOC_ADMIN_SETTINGS, snapshot.to_row())
        return row_to_settings(row)

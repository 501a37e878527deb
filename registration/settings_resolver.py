from __future__ import annotations

import logging
from typing import Optional

from pydantic import ValidationError

from models.defaults import default_admin_settings
from models.registration import AdminSettings, SettingsPatch
from models.schema import CACHE_ADMIN_SETTINGS
from repos.settings_repo import SettingsRepository
from storage.gateway import GatewayError
from storage.local_cache import LocalCache
from utils.timeutil import utc_now_iso

log = logging.getLogger("primoboost.registration.settings")


class SettingsResolver:
    """
    Produces the one AdminSettings snapshot the registration and admin pages run on.

    Priority: local cache (authoritative once populated) -> gateway row -> built-in
    defaults. Neither resolve() nor update() raises on gateway trouble; settings
    drive public pricing, so a stale local copy beats an error page.
    """

    def __init__(self, repo: Optional[SettingsRepository] = None, cache: Optional[LocalCache] = None):
        self.repo = repo or SettingsRepository()
        self.cache = cache or LocalCache()

    def _from_cache(self) -> Optional[AdminSettings]:
        raw = self.cache.get_json(CACHE_ADMIN_SETTINGS)
        if raw is None:
            return None
        try:
            return AdminSettings.model_validate(raw)
        except ValidationError as e:
            log.warning("settings_cache_invalid", extra={"extra": {"errors": e.error_count()}})
            return None

    def _from_gateway(self) -> Optional[AdminSettings]:
        try:
            return self.repo.get()
        except (GatewayError, ValidationError) as e:
            log.warning(
                "settings_gateway_unavailable",
                extra={"extra": {"error_type": type(e).__name__, "error_message": str(e)}},
            )
            return None

    def resolve(self) -> AdminSettings:
        cached = self._from_cache()
        if cached is not None:
            return cached
        remote = self._from_gateway()
        if remote is not None:
            return remote
        return default_admin_settings()

    def update(self, patch: SettingsPatch) -> AdminSettings:
        current = self.resolve()
        merged = patch.apply(current, updated_at=utc_now_iso())

        # Local write first; it is the effective state if the upsert fails.
        self.cache.set_json(CACHE_ADMIN_SETTINGS, merged.to_cache())

        try:
            saved = self.repo.upsert(merged)
        except (GatewayError, ValidationError) as e:
            log.warning(
                "settings_gateway_upsert_failed",
                extra={"extra": {"error_type": type(e).__name__, "error_message": str(e)}},
            )
            return merged
        log.info("settings_saved", extra={"extra": {"updated_at": saved.updated_at}})
        return saved

    def replace(self, snapshot: AdminSettings) -> AdminSettings:
        """Persist a snapshot produced by the settings editor."""
        return self.update(
            SettingsPatch(
                upi_id=snapshot.upi_id,
                qr_code_url=snapshot.qr_code_url,
                whatsapp_number=snapshot.whatsapp_number,
                service_types=snapshot.service_types,
                companies=snapshot.companies,
                form_fields=snapshot.form_fields,
                message_templates=snapshot.message_templates,
            )
        )

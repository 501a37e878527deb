from models.defaults import default_admin_settings
from models.registration import SettingsPatch
from models.schema import CACHE_ADMIN_SETTINGS, COL_ADMIN_SETTINGS, DOC_ADMIN_SETTINGS
from registration.settings_resolver import SettingsResolver
from repos.settings_repo import SettingsRepository


def _resolver(gateway, cache):
    return SettingsResolver(repo=SettingsRepository(gateway), cache=cache)


def _without_timestamp(snapshot):
    return snapshot.model_dump(exclude={"updated_at"})


def test_defaults_when_cache_and_gateway_empty(gateway, cache):
    got = _resolver(gateway, cache).resolve()
    assert got is not None
    assert _without_timestamp(got) == _without_timestamp(default_admin_settings())


def test_defaults_when_gateway_down(gateway, cache):
    gateway.down = True
    got = _resolver(gateway, cache).resolve()
    assert got.upi_id == "primojobs@upi"
    assert len(got.companies) == 6


def test_defaults_when_relation_missing(gateway, cache):
    gateway.missing_relations.add(COL_ADMIN_SETTINGS)
    assert _resolver(gateway, cache).resolve().service_types[0].key == "exam_slot"


def test_gateway_row_is_mapped(gateway, cache):
    gateway.tables[COL_ADMIN_SETTINGS] = {
        DOC_ADMIN_SETTINGS: {
            "upi_id": "shop@okaxis",
            "qr_code_url": "https://example.com/qr.png",
            "whatsapp_number": "+911234567890",
            "companies": [{"id": "c1", "company_name": "Zoho", "prices": {"exam_slot": 700}, "enabled": True}],
            "updated_at": "2026-02-01T00:00:00.000000Z",
        }
    }
    got = _resolver(gateway, cache).resolve()
    assert got.upi_id == "shop@okaxis"
    assert got.companies[0].company_name == "Zoho"
    # columns absent from the row fall back to the built-in lists
    assert [s.key for s in got.service_types][:1] == ["exam_slot"]
    assert len(got.form_fields) == 7


def test_cache_is_authoritative(gateway, cache):
    cached = default_admin_settings().model_copy(update={"upi_id": "cached@upi"})
    cache.set_json(CACHE_ADMIN_SETTINGS, cached.to_cache())
    gateway.tables[COL_ADMIN_SETTINGS] = {DOC_ADMIN_SETTINGS: {"upi_id": "remote@upi"}}
    assert _resolver(gateway, cache).resolve().upi_id == "cached@upi"
    assert gateway.calls == []


def test_invalid_cache_falls_through(gateway, cache):
    cache.set(CACHE_ADMIN_SETTINGS, "{oops")
    assert _resolver(gateway, cache).resolve().upi_id == "primojobs@upi"
    cache.set_json(CACHE_ADMIN_SETTINGS, {"upiId": 5})
    assert _resolver(gateway, cache).resolve().upi_id == "primojobs@upi"


def test_update_survives_gateway_failure(gateway, cache):
    gateway.down = True
    resolver = _resolver(gateway, cache)
    returned = resolver.update(SettingsPatch(upi_id="x"))
    assert returned.upi_id == "x"
    assert _resolver(gateway, cache).resolve().upi_id == "x"


def test_update_writes_through_to_gateway(gateway, cache):
    resolver = _resolver(gateway, cache)
    saved = resolver.update(SettingsPatch(whatsapp_number="+910000000000"))
    row = gateway.tables[COL_ADMIN_SETTINGS][DOC_ADMIN_SETTINGS]
    assert row["whatsapp_number"] == "+910000000000"
    assert saved.whatsapp_number == "+910000000000"
    assert cache.get_json(CACHE_ADMIN_SETTINGS)["whatsappNumber"] == "+910000000000"


def test_patch_keeps_absent_fields(gateway, cache):
    resolver = _resolver(gateway, cache)
    before = resolver.resolve()
    after = resolver.update(SettingsPatch(upi_id="new@upi"))
    assert after.upi_id == "new@upi"
    assert after.qr_code_url == before.qr_code_url
    assert after.companies == before.companies
    assert after.id == "1"

import pytest

from services.errors import TenantError
from services.tenant import TenantService, ensure_company, resolve_tenant


def test_resolve_unknown_tenant_raises(db):
    with pytest.raises(TenantError) as exc:
        resolve_tenant(db, "nao-existe")
    assert exc.value.code == "tenant_not_found"


def test_ensure_company_is_idempotent(db):
    first = ensure_company(db, "loja-a", "Loja A")
    second = ensure_company(db, "loja-a", "Outro Nome")
    assert first.company_id == second.company_id
    assert resolve_tenant(db, "loja-a").name == "Loja A"


def test_ensure_company_creates_settings(db, tenant):
    settings = TenantService.get_settings(db, tenant.company_id)
    assert settings is not None
    assert settings.name == "Loja Teste"


def test_save_settings_updates_known_fields_only(db, tenant):
    settings = TenantService.save_settings(db, tenant.company_id, phone="11999990000", unknown="x")
    assert settings.phone == "11999990000"
    assert not hasattr(settings, "unknown")


def test_save_settings_requires_name(db, tenant):
    with pytest.raises(TenantError):
        TenantService.save_settings(db, tenant.company_id, name="")

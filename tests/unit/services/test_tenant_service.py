"""Tests for TenantService and tenant locale settings."""

import pytest

from catalog_core.exceptions import ErrorCode, NotFoundError, ValidationError
from catalog_core.schemas.locale_schema import LocaleDescriptor, LocaleSettings
from catalog_core.schemas.tenant_schema import TenantCreate
from catalog_core.services import TenantService
from tests.fixtures.factories import TenantFactory


@pytest.fixture
def service(db_session):
    return TenantService(session=db_session)


class TestTenantLifecycle:
    def test_create_and_get(self, service):
        created = service.create_tenant(TenantCreate(tenant_id="acme", name="Acme Bienes Raíces"))

        fetched = service.get_tenant("acme")

        assert fetched.id == created.id
        assert fetched.slug == "acme-bienes-raices"

    def test_duplicate_tenant(self, service, tenant):
        with pytest.raises(ValidationError) as exc_info:
            service.create_tenant(TenantCreate(tenant_id="tenant-a", name="Again"))
        assert exc_info.value.error_code == ErrorCode.DUPLICATE

    def test_unknown_tenant(self, service, db_session):
        with pytest.raises(NotFoundError):
            service.get_tenant("ghost")

    def test_require_tenant(self, service, tenant):
        assert service.require_tenant("tenant-a") == "tenant-a"
        with pytest.raises(ValidationError):
            service.require_tenant(None)

    def test_list_tenants(self, service, tenant, other_tenant):
        assert {t.tenant_id for t in service.list_tenants()} == {"tenant-a", "tenant-b"}

    def test_blank_tenant_id_is_rejected(self):
        with pytest.raises(ValidationError):
            TenantCreate(tenant_id="   ", name="Blank")


class TestLocaleSettings:
    def test_defaults_when_unconfigured(self, service, tenant):
        settings = service.get_locale_settings("tenant-a")

        assert settings.base_locale == "es"
        assert settings.enabled_codes() == ["es", "en", "fr", "pt"]

    def test_update_round_trip(self, service, tenant):
        settings = LocaleSettings(
            base_locale="en",
            fallback_locale="es",
            locales=[
                LocaleDescriptor(code="en", label="English"),
                LocaleDescriptor(code="es", label="Spanish"),
                LocaleDescriptor(code="pt", label="Portuguese", active=False),
            ],
        )

        service.update_locale_settings("tenant-a", settings)
        loaded = service.get_locale_settings("tenant-a")

        assert loaded.base_locale == "en"
        assert loaded.fallback_locale == "es"
        assert loaded.enabled_codes() == ["en", "es"]
        assert [locale.code for locale in loaded.overlay_locales()] == ["es"]

    def test_invalid_stored_settings(self, service, db_session):
        TenantFactory(tenant_id="broken", config={"locales": {"base_locale": "de", "locales": [{"code": "es", "label": "Spanish"}]}})

        with pytest.raises(ValidationError) as exc_info:
            service.get_locale_settings("broken")
        assert exc_info.value.context["field"] == "base_locale"

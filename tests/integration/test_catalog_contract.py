"""
End-to-end catalog scenarios.

Seeded global catalogs are read and edited by two tenants through the full
stack: editor, resolver, local transport, JSON handlers, service and stores.
"""

import pytest

from catalog_core.api import CatalogApiHandlers
from catalog_core.catalog.seed import DEFAULT_GLOBAL_ITEMS, seed_global_items
from catalog_core.editor import CatalogEditor
from catalog_core.enums import CatalogKind, ItemOrigin
from catalog_core.exceptions import ForbiddenError
from catalog_core.resolver import CatalogCache, CatalogResolver
from catalog_core.services import CatalogService
from catalog_core.transport import LocalCatalogTransport
from catalog_core.translation import overlay

pytestmark = pytest.mark.integration


@pytest.fixture
def seeded(db_session, tenant, other_tenant):
    return seed_global_items(db_session)


@pytest.fixture
def transport(db_session):
    return LocalCatalogTransport(CatalogApiHandlers(service_factory=lambda: CatalogService(session=db_session)))


@pytest.fixture
def resolver_a(transport, seeded):
    return CatalogResolver(transport, cache=CatalogCache(), tenant_id="tenant-a")


@pytest.fixture
def resolver_b(transport, seeded):
    return CatalogResolver(transport, cache=CatalogCache(), tenant_id="tenant-b")


class TestSeeding:
    def test_seed_is_idempotent(self, db_session, seeded):
        expected = sum(len(items) for items in DEFAULT_GLOBAL_ITEMS.values())

        assert seeded == expected
        assert seed_global_items(db_session) == 0

    def test_seeded_items_are_global(self, resolver_a):
        catalogs = resolver_a.fetch_all()

        contact_types = catalogs[CatalogKind.CONTACT_TYPE]
        assert [i.code for i in contact_types] == ["cliente", "propietario", "desarrollador"]
        assert all(i.origin == ItemOrigin.GLOBAL for i in contact_types)
        assert resolver_a.get_default(CatalogKind.CONTACT_TYPE).code == "cliente"


class TestTenantScopedActivation:
    def test_wifi_toggle_only_affects_one_tenant(self, resolver_a, resolver_b):
        editor_a = CatalogEditor(resolver_a, CatalogKind.AMENITY)
        editor_b = CatalogEditor(resolver_b, CatalogKind.AMENITY)
        editor_a.load()
        editor_b.load()

        wifi = resolver_a.get_by_code(CatalogKind.AMENITY, "wifi")
        assert editor_a.toggle(wifi.id).active is False
        editor_b.load()

        assert "wifi" not in [i.code for i in editor_a.visible_items()]
        assert editor_a.inactive_count() == 1
        assert "wifi" in [i.code for i in editor_b.visible_items()]
        assert editor_b.inactive_count() == 0

    def test_reactivation(self, resolver_a):
        resolver_a.toggle(CatalogKind.AMENITY, "wifi", False)
        resolver_a.toggle(CatalogKind.AMENITY, "wifi", True)

        assert resolver_a.get_by_code(CatalogKind.AMENITY, "wifi").active is True


class TestOwnership:
    def test_global_item_cannot_be_deleted(self, resolver_a):
        resolver_a.fetch_all()
        client = resolver_a.get_by_code(CatalogKind.CONTACT_TYPE, "cliente")

        with pytest.raises(ForbiddenError):
            resolver_a.delete(client.id)

        resolver_a.fetch_all()
        assert resolver_a.get_by_code(CatalogKind.CONTACT_TYPE, "cliente") is not None

    def test_tenant_items_are_private(self, resolver_a, resolver_b):
        editor = CatalogEditor(resolver_a, CatalogKind.AMENITY)
        editor.load()
        editor.start_create()
        editor.set_field("name", "Área Social")
        editor.set_field("category", "Áreas comunes")

        created = editor.save()
        resolver_b.fetch_separate(CatalogKind.AMENITY)

        assert created.code == "area_social"
        assert created.origin == ItemOrigin.TENANT
        assert created.active is False
        assert resolver_b.get_by_code(CatalogKind.AMENITY, "area_social") is None

    def test_same_code_in_two_tenants(self, resolver_a, resolver_b):
        resolver_a.create(CatalogKind.CONTACT_TYPE, {"name": "Socio"})
        resolver_b.create(CatalogKind.CONTACT_TYPE, {"name": "Socio"})

        assert resolver_a.get_by_code(CatalogKind.CONTACT_TYPE, "socio").tenant_id == "tenant-a"
        assert resolver_b.get_by_code(CatalogKind.CONTACT_TYPE, "socio").tenant_id == "tenant-b"


class TestTranslations:
    def test_seeded_translations_resolve_per_locale(self, resolver_a):
        resolver_a.fetch_separate(CatalogKind.PROPERTY_TYPE)
        house = resolver_a.get_by_code(CatalogKind.PROPERTY_TYPE, "casa")
        settings = resolver_a.locale_settings()

        assert overlay.resolve(house, "name", "en", settings) == "House"
        assert overlay.resolve(house, "name", "fr", settings) == "Casa"
        assert overlay.resolve_slug(house, "en", settings) == "house"
        assert overlay.resolve_slug(house, "es", settings) == "casa"

    def test_tenant_fallback_locale(self, transport, resolver_a):
        transport.request(
            "PUT",
            "/tenants/tenant-a/idiomas",
            json={"idiomas": [{"code": "es", "label": "Spanish"}, {"code": "en", "label": "English"},
                              {"code": "fr", "label": "French"}], "base": "es", "fallback": "en"},
        )
        resolver_a.fetch_separate(CatalogKind.AMENITY)
        pool = resolver_a.get_by_code(CatalogKind.AMENITY, "piscina")

        assert overlay.resolve(pool, "name", "fr", resolver_a.locale_settings()) == "Pool"

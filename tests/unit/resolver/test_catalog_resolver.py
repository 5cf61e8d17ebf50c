"""
Tests for CatalogResolver.

Contract tests run against the real handlers through the local transport;
stale-response and failure handling use a scripted fake transport.
"""

from typing import Callable, Dict, List, Optional

import pytest

from catalog_core.api import CatalogApiHandlers
from catalog_core.context.tenant_context import tenant_context
from catalog_core.enums import CatalogKind
from catalog_core.exceptions import (
    ErrorCode,
    ForbiddenError,
    NotFoundError,
    TransportError,
    ValidationError,
)
from catalog_core.resolver import CatalogCache, CatalogResolver
from catalog_core.schemas.catalog_schema import CatalogItemRead
from catalog_core.schemas.locale_schema import LocaleSettings
from catalog_core.services import CatalogService
from catalog_core.transport import CatalogTransport, LocalCatalogTransport
from tests.fixtures.factories import AmenityFactory, CatalogItemFactory

CONTACT = CatalogKind.CONTACT_TYPE
AMENITY = CatalogKind.AMENITY


def _item(code: str, tenant_id: Optional[str] = None, **fields) -> CatalogItemRead:
    return CatalogItemRead(id=f"id-{code}", tenant_id=tenant_id, code=code, name=code.title(), kind=CONTACT, **fields)


class ScriptedTransport(CatalogTransport):
    """Answers fetches from per-tenant data; ``on_fetch`` runs mid-request."""

    def __init__(self, data: Dict[str, List[CatalogItemRead]]):
        super().__init__()
        self.data = data
        self.calls: List[str] = []
        self.on_fetch: Optional[Callable[[str], None]] = None
        self.fail_with: Optional[Exception] = None

    def _send(self, method, path, params=None, json=None):
        raise AssertionError("ScriptedTransport does not send requests")

    def fetch_catalogs(self, tenant_id, include_inactive=True):
        self.calls.append(tenant_id)
        snapshot = list(self.data.get(tenant_id, []))
        if self.on_fetch is not None:
            hook, self.on_fetch = self.on_fetch, None
            hook(tenant_id)
        if self.fail_with is not None:
            raise self.fail_with
        return {CONTACT: snapshot}

    def fetch_locales(self, tenant_id):
        raise TransportError("locales unavailable")

    def delete_catalog_item(self, tenant_id, item_id):
        raise NotFoundError("CatalogItem not found")


@pytest.fixture
def cache():
    return CatalogCache()


@pytest.fixture
def local_resolver(db_session, cache):
    handlers = CatalogApiHandlers(service_factory=lambda: CatalogService(session=db_session))
    return CatalogResolver(LocalCatalogTransport(handlers), cache=cache, tenant_id="tenant-a")


@pytest.fixture
def seeded(db_session, tenant, other_tenant):
    return {
        "client": CatalogItemFactory(code="client", name="Cliente", order=0),
        "owner": CatalogItemFactory(code="owner", name="Propietario", order=1),
        "investor": CatalogItemFactory(tenant_id="tenant-a", code="investor", name="Inversionista", order=2),
        "pool": AmenityFactory(code="pool", name="Piscina", order=0),
    }


class TestReads:
    def test_fetch_all_and_cached_lookups(self, local_resolver, seeded):
        local_resolver.fetch_all()

        assert [i.code for i in local_resolver.items(CONTACT)] == ["client", "owner", "investor"]
        assert local_resolver.get_by_code(CONTACT, "owner").name == "Propietario"
        assert local_resolver.get_by_id(seeded["investor"].id).code == "investor"
        assert local_resolver.get_by_code(CONTACT, "missing") is None

    def test_inactive_items_are_cached_but_hidden(self, local_resolver, seeded):
        local_resolver.fetch_all()
        local_resolver.toggle(CONTACT, "owner", False)

        assert [i.code for i in local_resolver.items(CONTACT)] == ["client", "investor"]
        assert len(local_resolver.items(CONTACT, include_inactive=True)) == 3
        assert local_resolver.inactive_count(CONTACT) == 1

    def test_get_default(self, local_resolver, seeded, db_session):
        local_resolver.fetch_all()
        assert local_resolver.get_default(CONTACT).code == "client"

        local_resolver.create(CONTACT, {"name": "Prospecto", "is_default": True})
        assert local_resolver.get_default(CONTACT).code == "prospecto"

    def test_tenant_default_wins_over_global_default(self, local_resolver, db_session, tenant):
        CatalogItemFactory(code="client", name="Cliente", order=0, is_default=True)
        CatalogItemFactory(code="owner", name="Propietario", order=1)
        local_resolver.fetch_all()
        assert local_resolver.get_default(CONTACT).code == "client"

        local_resolver.create(CONTACT, {"name": "Prospecto", "is_default": True})

        flagged = [i.code for i in local_resolver.items(CONTACT) if i.is_default]
        assert flagged == ["client", "prospecto"]
        assert local_resolver.get_default(CONTACT).code == "prospecto"

    def test_get_default_prefers_flag_over_order(self, cache):
        items = [_item("client"), _item("owner", is_default=True), _item("investor", tenant_id="tenant-a")]
        resolver = CatalogResolver(ScriptedTransport({"tenant-a": items}), cache=cache, tenant_id="tenant-a")
        resolver.fetch_all()

        assert resolver.get_default(CONTACT).code == "owner"

    def test_get_default_of_empty_kind(self, local_resolver, seeded):
        assert local_resolver.get_default(CatalogKind.DOCUMENT_TYPE) is None

    def test_fetch_separate(self, local_resolver, seeded):
        items = local_resolver.fetch_separate("amenidades")

        assert [i.code for i in items] == ["pool"]
        assert local_resolver.get_by_id(seeded["pool"].id).code == "pool"

    def test_fetch_separate_rejects_unified_kind(self, local_resolver, seeded):
        with pytest.raises(ValidationError):
            local_resolver.fetch_separate(CONTACT)

    def test_separate_counts(self, local_resolver, seeded):
        assert local_resolver.separate_counts()[AMENITY] == 1

    def test_tenant_from_context(self, db_session, cache, seeded):
        handlers = CatalogApiHandlers(service_factory=lambda: CatalogService(session=db_session))
        resolver = CatalogResolver(LocalCatalogTransport(handlers), cache=cache)

        assert resolver.fetch_all() == {}
        with tenant_context("tenant-b"):
            assert resolver.tenant_id == "tenant-b"
            resolver.fetch_all()
            assert "investor" not in [i.code for i in resolver.items(CONTACT)]

    def test_locale_settings(self, local_resolver, seeded):
        settings = local_resolver.locale_settings()

        assert settings.base_locale == "es"
        assert local_resolver.cache.get("tenant-a").locales == settings


class TestMutations:
    def test_create_refetches(self, local_resolver, seeded):
        local_resolver.fetch_all()

        item = local_resolver.create(CONTACT, {"name": "Área Social"})

        assert item.code == "area_social"
        assert local_resolver.get_by_code(CONTACT, "area_social") is not None

    def test_create_separate_refreshes_kind_and_counts(self, local_resolver, seeded):
        local_resolver.fetch_separate(AMENITY)

        local_resolver.create(AMENITY, {"name": "WiFi", "category": "Servicios"})

        assert local_resolver.get_by_code(AMENITY, "wifi").active is False
        assert local_resolver.cache.get("tenant-a").counts[AMENITY] == 2

    def test_create_rejects_cached_duplicate_without_request(self, local_resolver, seeded):
        local_resolver.fetch_all()

        with pytest.raises(ValidationError) as exc_info:
            local_resolver.create(CONTACT, {"name": "Client"})
        assert exc_info.value.error_code == ErrorCode.DUPLICATE

    def test_create_requires_name(self, local_resolver, seeded):
        with pytest.raises(ValidationError) as exc_info:
            local_resolver.create(CONTACT, {"name": "  "})
        assert exc_info.value.error_code == ErrorCode.MISSING_REQUIRED

    def test_mutation_requires_tenant(self, db_session, cache):
        resolver = CatalogResolver(LocalCatalogTransport(), cache=cache)

        with pytest.raises(ValidationError):
            resolver.toggle(CONTACT, "client", False)

    def test_update_own_item(self, local_resolver, seeded):
        local_resolver.fetch_all()

        local_resolver.update(seeded["investor"].id, {"name": "Inversor"})

        assert local_resolver.get_by_code(CONTACT, "investor").name == "Inversor"

    def test_update_global_is_forbidden_locally(self, local_resolver, seeded):
        local_resolver.fetch_all()

        with pytest.raises(ForbiddenError):
            local_resolver.update(seeded["client"].id, {"name": "Mine"})

    def test_delete_global_is_forbidden(self, local_resolver, seeded):
        local_resolver.fetch_all()

        with pytest.raises(ForbiddenError):
            local_resolver.delete(seeded["client"].id)
        assert local_resolver.get_by_code(CONTACT, "client") is not None

    def test_delete_unknown_item_resyncs(self, local_resolver, seeded):
        with pytest.raises(NotFoundError):
            local_resolver.delete("missing-id")

        assert local_resolver.get_by_code(CONTACT, "client") is not None

    def test_delete_own_item(self, local_resolver, seeded):
        local_resolver.fetch_all()

        local_resolver.delete(seeded["investor"].id)

        assert local_resolver.get_by_code(CONTACT, "investor") is None

    def test_toggle_is_tenant_scoped(self, db_session, seeded):
        handlers = CatalogApiHandlers(service_factory=lambda: CatalogService(session=db_session))
        transport = LocalCatalogTransport(handlers)
        resolver_a = CatalogResolver(transport, cache=CatalogCache(), tenant_id="tenant-a")
        resolver_b = CatalogResolver(transport, cache=CatalogCache(), tenant_id="tenant-b")

        resolver_a.toggle(AMENITY, "pool", False)
        resolver_b.fetch_separate(AMENITY)

        assert resolver_a.get_by_code(AMENITY, "pool").active is False
        assert resolver_b.get_by_code(AMENITY, "pool").active is True

    def test_server_error_sets_error(self, local_resolver, seeded):
        with pytest.raises(NotFoundError):
            local_resolver.toggle(CONTACT, "nothing", True)

        assert "not found" in local_resolver.error


class TestStaleResponses:
    def test_response_superseded_by_newer_fetch_is_not_cached(self, cache):
        transport = ScriptedTransport({"tenant-a": [_item("old")]})
        resolver = CatalogResolver(transport, cache=cache, tenant_id="tenant-a")

        def newer_fetch(tenant_id):
            transport.data["tenant-a"] = [_item("new")]
            resolver.fetch_all()

        transport.on_fetch = newer_fetch
        result = resolver.fetch_all()

        assert [i.code for i in result[CONTACT]] == ["old"]
        assert [i.code for i in resolver.items(CONTACT)] == ["new"]

    def test_response_for_previous_tenant_is_discarded(self, cache):
        transport = ScriptedTransport({"tenant-a": [_item("a_only")], "tenant-b": [_item("b_only")]})
        resolver = CatalogResolver(transport, cache=cache, tenant_id="tenant-a")
        transport.on_fetch = lambda tenant_id: resolver.set_tenant("tenant-b")

        resolver.fetch_all()

        assert cache.get("tenant-a") is None
        assert [i.code for i in resolver.items(CONTACT)] == ["b_only"]
        assert transport.calls == ["tenant-a", "tenant-b"]


class TestFailures:
    def test_failed_fetch_keeps_previous_cache(self, cache):
        transport = ScriptedTransport({"tenant-a": [_item("client")]})
        resolver = CatalogResolver(transport, cache=cache, tenant_id="tenant-a")
        resolver.fetch_all()

        transport.fail_with = TransportError("Catalog API request failed")
        with pytest.raises(TransportError):
            resolver.fetch_all()

        assert [i.code for i in resolver.items(CONTACT)] == ["client"]
        assert resolver.error == "Catalog API request failed"

    def test_successful_fetch_clears_error(self, cache):
        transport = ScriptedTransport({"tenant-a": [_item("client")]})
        resolver = CatalogResolver(transport, cache=cache, tenant_id="tenant-a")
        transport.fail_with = TransportError("down")
        with pytest.raises(TransportError):
            resolver.fetch_all()

        transport.fail_with = None
        resolver.fetch_all()

        assert resolver.error is None
        assert resolver.loading is False

    def test_locales_fall_back_to_defaults(self, cache):
        resolver = CatalogResolver(ScriptedTransport({}), cache=cache, tenant_id="tenant-a")

        settings = resolver.locale_settings()

        assert settings == LocaleSettings.default()

    def test_not_found_mutation_triggers_resync(self, cache):
        transport = ScriptedTransport({"tenant-a": [_item("mine", tenant_id="tenant-a")]})
        resolver = CatalogResolver(transport, cache=cache, tenant_id="tenant-a")
        resolver.fetch_all()
        transport.data["tenant-a"] = []

        with pytest.raises(NotFoundError):
            resolver.delete("id-mine")

        assert resolver.items(CONTACT) == []
        assert transport.calls == ["tenant-a", "tenant-a"]

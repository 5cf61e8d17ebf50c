"""Tests for the in-process transport against the real handlers."""

import pytest

from catalog_core.api import CatalogApiHandlers
from catalog_core.enums import CatalogKind
from catalog_core.exceptions import ForbiddenError, NotFoundError
from catalog_core.schemas.catalog_schema import CatalogItemRead, DomainItemRead
from catalog_core.services import CatalogService
from catalog_core.transport import LocalCatalogTransport
from tests.fixtures.factories import AmenityFactory, CatalogItemFactory


@pytest.fixture
def transport(db_session):
    return LocalCatalogTransport(CatalogApiHandlers(service_factory=lambda: CatalogService(session=db_session)))


class TestLocalTransport:
    def test_fetch_catalogs_returns_schemas(self, transport, tenant):
        CatalogItemFactory(code="client", name="Cliente")

        catalogs = transport.fetch_catalogs("tenant-a")

        item = catalogs[CatalogKind.CONTACT_TYPE][0]
        assert isinstance(item, CatalogItemRead)
        assert item.is_global

    def test_include_inactive_by_default(self, transport, tenant):
        AmenityFactory(code="pool", active=False)

        assert [i.code for i in transport.fetch_separate("tenant-a", "amenity")] == ["pool"]
        assert transport.fetch_separate("tenant-a", "amenity", include_inactive=False) == []

    def test_create_separate_round_trip(self, transport, tenant):
        item = transport.create_separate("tenant-a", "property_type", {"name": "Casa de Playa", "slug": "casa-playa"})

        assert isinstance(item, DomainItemRead)
        assert item.code == "casa_de_playa"
        assert item.domain_fields["slug"] == "casa-playa"

    def test_errors_cross_the_boundary_typed(self, transport, tenant):
        global_item = CatalogItemFactory(code="client")

        with pytest.raises(ForbiddenError):
            transport.delete_catalog_item("tenant-a", global_item.id)
        with pytest.raises(NotFoundError):
            transport.toggle_catalog_item("tenant-a", "contact_type", "missing", False)

    def test_locales(self, transport, tenant):
        assert transport.fetch_locales("tenant-a").base_locale == "es"

"""
Catalog resolver: the tenant-facing read and mutation contract.

The resolver fetches the merged (global + tenant) catalogs through a
``CatalogTransport``, keeps them in the process-wide ``CatalogCache`` and
serves point lookups from that cache. Mutations are validated locally against
the cached view, sent through the transport and always followed by a refetch;
nothing is applied to the cache optimistically.

Fetches are guarded against stale responses: each one captures the tenant and
a per-channel generation number, and a response that arrives after the tenant
changed or after a newer fetch was issued is not written to the cache.
"""

import threading
from functools import partial
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from ..catalog.kind_registry import KindMetadata, get_kind_metadata, separate_kinds
from ..context.tenant_context import TenantContext
from ..enums import CatalogKind
from ..exceptions import (
    BaseError,
    ErrorCode,
    NotFoundError,
    ValidationError,
    duplicate,
    not_found,
    permission_denied,
    validation_failed,
)
from ..schemas.catalog_schema import BaseItemRead, CatalogMap, DomainItemRead
from ..schemas.locale_schema import LocaleSettings
from ..transport.base import CatalogTransport
from ..utils.logger import get_logger
from ..utils.text_utils import clean_text, derive_code
from .catalog_cache import CatalogCache, CatalogState, get_catalog_cache

KindLike = Union[str, CatalogKind]

_CATALOGS = "catalogs"
_COUNTS = "counts"
_LOCALES = "locales"


class CatalogResolver:
    """
    Per-session view of one tenant's catalogs.

    The tenant is the one passed to the constructor or ``set_tenant``; without
    one, the thread's ``TenantContext`` is used.
    """

    def __init__(
        self,
        transport: CatalogTransport,
        cache: Optional[CatalogCache] = None,
        tenant_id: Optional[str] = None,
    ):
        self.transport = transport
        self.cache = cache if cache is not None else get_catalog_cache()
        self.logger = get_logger()
        self.error: Optional[str] = None
        self.loading = False
        self._tenant_id = tenant_id
        self._generations: Dict[str, int] = {}
        self._lock = threading.Lock()

    # ==================== TENANT ====================

    @property
    def tenant_id(self) -> Optional[str]:
        return self._tenant_id or TenantContext.get_current_tenant_id()

    def set_tenant(self, tenant_id: Optional[str]) -> CatalogMap:
        """Switch tenant, invalidate in-flight fetches and load the new tenant's catalogs."""
        with self._lock:
            self._tenant_id = tenant_id
            for channel in self._generations:
                self._generations[channel] += 1
            self.error = None
        return self.fetch_all()

    def _require_tenant(self) -> str:
        tenant_id = self.tenant_id
        if not tenant_id:
            raise ValidationError(
                "A tenant is required for catalog mutations",
                field="tenant_id",
                error_code=ErrorCode.MISSING_REQUIRED,
            )
        return tenant_id

    # ==================== STALE GUARD ====================

    def _begin(self, channel: str) -> Tuple[Optional[str], int]:
        with self._lock:
            generation = self._generations.get(channel, 0) + 1
            self._generations[channel] = generation
            self.loading = True
            return self.tenant_id, generation

    def _is_current(self, channel: str, tenant_id: Optional[str], generation: int) -> bool:
        with self._lock:
            current = (
                self._generations.get(channel) == generation and self.tenant_id == tenant_id
            )
            if current:
                self.loading = False
            return current

    def _fetch(self, channel: str, tenant_id: str, call: Callable[[], Any], store: Callable[[Any], None]):
        """Run one guarded fetch; cache the result only if it is still current."""
        active_tenant, generation = self._begin(channel)
        try:
            result = call()
        except BaseError as e:
            if self._is_current(channel, active_tenant, generation):
                self.error = e.message
            self.logger.warning(
                f"Catalog fetch failed, keeping cached data: {e.message}",
                extra={"channel": channel, "tenant_id": tenant_id, "error_code": e.error_code.value},
            )
            raise

        if self._is_current(channel, active_tenant, generation):
            store(result)
            self.error = None
        else:
            self.logger.debug(
                "Discarding stale catalog response",
                extra={"channel": channel, "tenant_id": tenant_id, "generation": generation},
            )
        return result

    # ==================== FETCHES ====================

    def fetch_all(self, tenant_id: Optional[str] = None) -> CatalogMap:
        """
        Fetch every unified kind (inactive included) and replace the cached catalogs.

        Returns an empty mapping when no tenant is in scope.

        Raises:
            TransportError: Network or server failure (previous cache kept)
            NotFoundError: Unknown tenant
        """
        tenant_id = tenant_id or self.tenant_id
        if not tenant_id:
            return {}
        return self._fetch(
            _CATALOGS,
            tenant_id,
            lambda: self.transport.fetch_catalogs(tenant_id, include_inactive=True),
            lambda catalogs: self.cache.update(tenant_id, catalogs=catalogs),
        )

    def fetch_separate(self, kind: KindLike) -> List[DomainItemRead]:
        """Fetch one separate-store kind (inactive included) into the cache."""
        meta = self._separate_meta(kind)
        tenant_id = self.tenant_id
        if not tenant_id:
            return []

        return self._fetch(
            f"separate:{meta.kind.value}",
            tenant_id,
            lambda: self.transport.fetch_separate(tenant_id, meta.kind, include_inactive=True),
            partial(self.cache.update_separate, tenant_id, meta.kind),
        )

    def separate_counts(self) -> Dict[CatalogKind, int]:
        """Item counts of the separate kinds shown with a badge."""
        tenant_id = self.tenant_id
        if not tenant_id:
            return {}
        return self._fetch(
            _COUNTS,
            tenant_id,
            lambda: self.transport.fetch_separate_counts(tenant_id),
            lambda counts: self.cache.update(tenant_id, counts=counts),
        )

    def locale_settings(self) -> LocaleSettings:
        """Tenant locale list; defaults are used when it cannot be loaded."""
        tenant_id = self.tenant_id
        state = self.cache.get(tenant_id)
        if state is not None and state.locales is not None:
            return state.locales
        if not tenant_id:
            return LocaleSettings.default()
        try:
            return self._fetch(
                _LOCALES,
                tenant_id,
                lambda: self.transport.fetch_locales(tenant_id),
                lambda settings: self.cache.update(tenant_id, locales=settings),
            )
        except BaseError as e:
            self.logger.warning(
                f"Using default locales for tenant {tenant_id}: {e.message}",
                extra={"tenant_id": tenant_id},
            )
            return LocaleSettings.default()

    # ==================== CACHE READS ====================

    def _state(self) -> Optional[CatalogState]:
        return self.cache.get(self.tenant_id)

    def _cached(self, kind: CatalogKind) -> List[BaseItemRead]:
        state = self._state()
        if state is None:
            return []
        source = state.separate if get_kind_metadata(kind).is_separate else state.catalogs
        return list(source.get(kind, []))

    def _all_cached(self) -> Iterable[Tuple[CatalogKind, BaseItemRead]]:
        state = self._state()
        if state is None:
            return
        for source in (state.catalogs, state.separate):
            for kind, items in source.items():
                for item in items:
                    yield kind, item

    def items(self, kind: KindLike, include_inactive: bool = False) -> List[BaseItemRead]:
        """Cached items of a kind in stored order; active only unless asked otherwise."""
        items = self._cached(get_kind_metadata(kind).kind)
        if include_inactive:
            return items
        return [item for item in items if item.active]

    def inactive_count(self, kind: KindLike) -> int:
        return sum(1 for item in self._cached(get_kind_metadata(kind).kind) if not item.active)

    def get_by_code(self, kind: KindLike, code: str) -> Optional[BaseItemRead]:
        for item in self._cached(get_kind_metadata(kind).kind):
            if item.code == code:
                return item
        return None

    def get_by_id(self, item_id: str) -> Optional[BaseItemRead]:
        located = self._locate(item_id)
        return located[1] if located else None

    def _locate(self, item_id: str) -> Optional[Tuple[CatalogKind, BaseItemRead]]:
        for kind, item in self._all_cached():
            if item.id == str(item_id):
                return kind, item
        return None

    def get_default(self, kind: KindLike) -> Optional[BaseItemRead]:
        """
        The tenant's flagged default, else a flagged global, else the first
        item in stored order.

        A flagged tenant item takes precedence over a flagged global item.
        """
        items = self._cached(get_kind_metadata(kind).kind)
        flagged = [item for item in items if item.is_default]
        for item in flagged:
            if not item.is_global:
                return item
        if flagged:
            return flagged[0]
        return items[0] if items else None

    # ==================== MUTATIONS ====================

    def create(self, kind: KindLike, data: Mapping[str, Any]) -> BaseItemRead:
        """
        Create a tenant-owned item and refetch.

        Raises:
            ValidationError: No tenant, blank name or code already visible for the kind
        """
        tenant_id = self._require_tenant()
        meta = get_kind_metadata(kind)

        payload = dict(data)
        name = clean_text(payload.get("name"))
        if not name:
            raise ValidationError(
                "Name is required", field="name", error_code=ErrorCode.MISSING_REQUIRED, kind=meta.kind.value
            )
        code = derive_code(payload.get("code") or name)
        if not code:
            raise validation_failed("code", name, "no code can be derived from the name")
        if self.get_by_code(meta.kind, code) is not None:
            raise duplicate("CatalogItem", kind=meta.kind.value, code=code)
        payload.update(name=name, code=code)

        if meta.is_separate:
            call = partial(self.transport.create_separate, tenant_id, meta.kind, payload)
        else:
            call = partial(self.transport.create_catalog_item, tenant_id, meta.kind, payload)
        return self._mutate(tenant_id, meta, call)

    def update(self, item_id: str, data: Mapping[str, Any]) -> BaseItemRead:
        """
        Update a tenant-owned item and refetch.

        Raises:
            NotFoundError: Item not in the cached visible set (a resync is triggered)
            ForbiddenError: Item is global
            ValidationError: Blank name or code collision
        """
        tenant_id = self._require_tenant()
        kind, item = self._visible_item(tenant_id, item_id)
        meta = get_kind_metadata(kind)
        if item.is_global:
            raise permission_denied("update", "global catalog item", item_id=item.id, kind=kind.value)

        payload = dict(data)
        if "name" in payload:
            payload["name"] = clean_text(payload["name"])
            if not payload["name"]:
                raise ValidationError(
                    "Name is required", field="name", error_code=ErrorCode.MISSING_REQUIRED, kind=kind.value
                )
        if payload.get("code"):
            payload["code"] = derive_code(payload["code"])
            other = self.get_by_code(kind, payload["code"])
            if other is not None and other.id != item.id:
                raise duplicate("CatalogItem", kind=kind.value, code=payload["code"])

        if meta.is_separate:
            call = partial(self.transport.update_separate, tenant_id, kind, item.id, payload)
        else:
            call = partial(self.transport.update_catalog_item, tenant_id, item.id, payload)
        return self._mutate(tenant_id, meta, call)

    def delete(self, item_id: str) -> None:
        """
        Hard-delete a tenant-owned item and refetch.

        Raises:
            NotFoundError: Item not in the cached visible set (a resync is triggered)
            ForbiddenError: Item is global
        """
        tenant_id = self._require_tenant()
        kind, item = self._visible_item(tenant_id, item_id)
        meta = get_kind_metadata(kind)
        if item.is_global:
            raise permission_denied("delete", "global catalog item", item_id=item.id, kind=kind.value)

        if meta.is_separate:
            call = partial(self.transport.delete_separate, tenant_id, kind, item.id)
        else:
            call = partial(self.transport.delete_catalog_item, tenant_id, item.id)
        self._mutate(tenant_id, meta, call)

    def toggle(self, kind: KindLike, code: str, active: bool) -> BaseItemRead:
        """
        Activate or deactivate an item for the current tenant only.

        Global items get a tenant override; tenant items are updated in place.
        """
        tenant_id = self._require_tenant()
        meta = get_kind_metadata(kind)
        if meta.is_separate:
            call = partial(self.transport.toggle_separate, tenant_id, meta.kind, code, active)
        else:
            call = partial(self.transport.toggle_catalog_item, tenant_id, meta.kind, code, active)
        return self._mutate(tenant_id, meta, call)

    # ==================== MUTATION HELPERS ====================

    def _separate_meta(self, kind: KindLike) -> KindMetadata:
        meta = get_kind_metadata(kind)
        if not meta.is_separate:
            raise ValidationError(
                f"Kind '{meta.kind.value}' is not stored in a separate table",
                field="kind",
                error_code=ErrorCode.CONSTRAINT_VIOLATION,
                kind=meta.kind.value,
            )
        return meta

    def _visible_item(self, tenant_id: str, item_id: str) -> Tuple[CatalogKind, BaseItemRead]:
        located = self._locate(item_id)
        if located is None:
            self._resync(tenant_id)
            raise not_found("CatalogItem", item_id=item_id, tenant_id=tenant_id)
        return located

    def _mutate(self, tenant_id: str, meta: KindMetadata, call: Callable[[], Any]):
        try:
            result = call()
        except NotFoundError as e:
            # Resync first: a successful refetch clears ``error``
            self._resync(tenant_id, meta.kind)
            self.error = e.message
            raise
        except BaseError as e:
            self.error = e.message
            raise

        self.error = None
        self._refresh(meta)
        return result

    def _refresh(self, meta: KindMetadata) -> None:
        """Refetch what a mutation of ``meta.kind`` may have changed."""
        try:
            if meta.is_separate:
                self.fetch_separate(meta.kind)
                if meta.kind in separate_kinds(counted_only=True):
                    self.separate_counts()
            else:
                self.fetch_all()
        except BaseError as e:
            # The mutation itself succeeded; the stale view is corrected on the next fetch
            self.logger.warning(
                f"Refetch after mutation failed: {e.message}", extra={"kind": meta.kind.value}
            )

    def _resync(self, tenant_id: str, kind: Optional[CatalogKind] = None) -> None:
        """Refetch the unified catalogs and every separate kind already cached."""
        state = self.cache.get(tenant_id)
        kinds = set(state.separate) if state is not None else set()
        if kind is not None and get_kind_metadata(kind).is_separate:
            kinds.add(kind)
        try:
            self.fetch_all(tenant_id)
            for separate_kind in sorted(kinds, key=lambda k: k.value):
                self.fetch_separate(separate_kind)
        except BaseError as e:
            self.logger.warning(f"Catalog resync failed: {e.message}", extra={"tenant_id": tenant_id})

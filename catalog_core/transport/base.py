"""
Client side of the catalog JSON contract.

``CatalogTransport`` builds the paths and payloads of every endpoint and turns
responses back into schemas or typed errors. Subclasses only implement
``_send``: over HTTP (``HttpCatalogTransport``) or in-process against the
handlers (``LocalCatalogTransport``).
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union
from urllib.parse import quote

from pydantic import ValidationError as PydanticValidationError

from ..catalog.kind_registry import parse_kind
from ..constants import ResponseKey
from ..enums import CatalogKind
from ..exceptions import BaseError, ErrorCode, TransportError, error_from_response
from ..schemas.catalog_schema import CatalogItemRead, CatalogMap, DomainItemRead
from ..schemas.locale_schema import LocaleSettings
from ..utils.json_utils import to_jsonable
from ..utils.logger import get_logger

KindLike = Union[str, CatalogKind]


def _segment(value: Any) -> str:
    return quote(str(value), safe="")


def _kind_segment(kind: KindLike) -> str:
    return _segment(parse_kind(kind).value)


class CatalogTransport(ABC):
    """Typed client for the catalog endpoints."""

    def __init__(self):
        self.logger = get_logger()

    @abstractmethod
    def _send(
        self,
        method: str,
        path: str,
        params: Optional[Mapping[str, str]] = None,
        json: Optional[Any] = None,
    ) -> Tuple[int, Any]:
        """Perform one request; return the status code and decoded JSON body."""

    def request(
        self,
        method: str,
        path: str,
        params: Optional[Mapping[str, str]] = None,
        json: Optional[Any] = None,
    ) -> Any:
        """Send a request and raise the typed error for any error status."""
        status, body = self._send(method, path, params=params, json=json)
        if status >= 400:
            raise error_from_response(status, body)
        return body

    @staticmethod
    def _params(include_inactive: bool) -> Dict[str, str]:
        return {ResponseKey.ACTIVE.value: "false"} if include_inactive else {}

    @staticmethod
    def _parse(schema, payload: Any, what: str):
        try:
            return schema.model_validate(payload)
        except PydanticValidationError as e:
            raise TransportError(
                f"Malformed {what} in catalog response",
                error_code=ErrorCode.EXTERNAL_API_ERROR,
                cause=e,
            ) from e

    def _body_key(self, body: Any, key: ResponseKey) -> Any:
        if not isinstance(body, dict) or key.value not in body:
            raise TransportError(
                f"Catalog response is missing '{key.value}'",
                error_code=ErrorCode.EXTERNAL_API_ERROR,
            )
        return body[key.value]

    # ==================== UNIFIED KINDS ====================

    def fetch_catalogs(self, tenant_id: str, include_inactive: bool = True) -> CatalogMap:
        body = self.request(
            "GET", f"/tenants/{_segment(tenant_id)}/catalogos", params=self._params(include_inactive)
        )
        catalogs: CatalogMap = {}
        for raw_kind, items in (self._body_key(body, ResponseKey.CATALOGS) or {}).items():
            try:
                kind = parse_kind(raw_kind)
            except BaseError:
                self.logger.warning("Skipping unknown catalog kind in response", extra={"kind": raw_kind})
                continue
            catalogs[kind] = [self._parse(CatalogItemRead, item, "catalog item") for item in items or []]
        return catalogs

    def create_catalog_item(
        self, tenant_id: str, kind: KindLike, data: Mapping[str, Any]
    ) -> CatalogItemRead:
        payload = {**to_jsonable(dict(data)), ResponseKey.KIND.value: parse_kind(kind).value}
        body = self.request("POST", f"/tenants/{_segment(tenant_id)}/catalogos", json=payload)
        return self._parse(CatalogItemRead, self._body_key(body, ResponseKey.CATALOG), "catalog item")

    def update_catalog_item(
        self, tenant_id: str, item_id: str, data: Mapping[str, Any]
    ) -> CatalogItemRead:
        body = self.request(
            "PUT",
            f"/tenants/{_segment(tenant_id)}/catalogos/{_segment(item_id)}",
            json=to_jsonable(dict(data)),
        )
        return self._parse(CatalogItemRead, self._body_key(body, ResponseKey.CATALOG), "catalog item")

    def delete_catalog_item(self, tenant_id: str, item_id: str) -> None:
        self.request("DELETE", f"/tenants/{_segment(tenant_id)}/catalogos/{_segment(item_id)}")

    def toggle_catalog_item(
        self, tenant_id: str, kind: KindLike, code: str, active: bool
    ) -> CatalogItemRead:
        body = self.request(
            "POST",
            f"/tenants/{_segment(tenant_id)}/catalogos/{_kind_segment(kind)}/toggle/{_segment(code)}",
            json={ResponseKey.ACTIVE.value: bool(active)},
        )
        return self._parse(CatalogItemRead, self._body_key(body, ResponseKey.CATALOG), "catalog item")

    # ==================== SEPARATE KINDS ====================

    def _separate_path(self, tenant_id: str, *segments: str) -> str:
        return "/".join([f"/tenants/{_segment(tenant_id)}/catalogos-separados", *segments])

    def fetch_separate(
        self, tenant_id: str, kind: KindLike, include_inactive: bool = True
    ) -> List[DomainItemRead]:
        body = self.request(
            "GET",
            self._separate_path(tenant_id, _kind_segment(kind)),
            params=self._params(include_inactive),
        )
        items = self._body_key(body, ResponseKey.ITEMS) or []
        return [self._parse(DomainItemRead, item, "domain item") for item in items]

    def create_separate(
        self, tenant_id: str, kind: KindLike, data: Mapping[str, Any]
    ) -> DomainItemRead:
        body = self.request(
            "POST", self._separate_path(tenant_id, _kind_segment(kind)), json=to_jsonable(dict(data))
        )
        return self._parse(DomainItemRead, body, "domain item")

    def update_separate(
        self, tenant_id: str, kind: KindLike, item_id: str, data: Mapping[str, Any]
    ) -> DomainItemRead:
        body = self.request(
            "PUT",
            self._separate_path(tenant_id, _kind_segment(kind), _segment(item_id)),
            json=to_jsonable(dict(data)),
        )
        return self._parse(DomainItemRead, body, "domain item")

    def delete_separate(self, tenant_id: str, kind: KindLike, item_id: str) -> None:
        self.request("DELETE", self._separate_path(tenant_id, _kind_segment(kind), _segment(item_id)))

    def toggle_separate(
        self, tenant_id: str, kind: KindLike, code: str, active: bool
    ) -> DomainItemRead:
        body = self.request(
            "POST",
            self._separate_path(tenant_id, _kind_segment(kind), "toggle", _segment(code)),
            json={ResponseKey.ACTIVE.value: bool(active)},
        )
        return self._parse(DomainItemRead, body, "domain item")

    def fetch_separate_counts(self, tenant_id: str) -> Dict[CatalogKind, int]:
        body = self.request("GET", self._separate_path(tenant_id, "conteos"))
        counts: Dict[CatalogKind, int] = {}
        for raw_kind, value in (self._body_key(body, ResponseKey.COUNTS) or {}).items():
            try:
                counts[parse_kind(raw_kind)] = int(value or 0)
            except BaseError:
                self.logger.warning("Skipping unknown catalog kind in counts", extra={"kind": raw_kind})
        return counts

    # ==================== LOCALES ====================

    def fetch_locales(self, tenant_id: str) -> LocaleSettings:
        body = self.request("GET", f"/tenants/{_segment(tenant_id)}/idiomas")
        payload = {"locales": self._body_key(body, ResponseKey.LOCALES)}
        if body.get("base"):
            payload["base_locale"] = body["base"]
        if body.get("fallback"):
            payload["fallback_locale"] = body["fallback"]
        return self._parse(LocaleSettings, payload, "locale settings")

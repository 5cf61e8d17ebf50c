"""
Framework-neutral handlers for the catalog JSON contract.

``CatalogApiHandlers.route`` takes a method, a path relative to the API base
URL, query parameters and a decoded JSON body, and returns an ``ApiResponse``.
A web framework (or ``LocalCatalogTransport``) only has to forward requests
to it. Errors come back as ``BaseError.to_dict()`` with the error's status.
"""

import re
from typing import Any, Callable, Dict, List, Mapping, Optional, Pattern, Tuple
from urllib.parse import parse_qsl, unquote, urlsplit

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

from ..catalog.kind_registry import require_kind
from ..constants import ResponseKey
from ..context.tenant_context import tenant_context
from ..enums import StorageStrategy
from ..exceptions import BaseError, ErrorCode, NotFoundError, ServiceError, ValidationError
from ..schemas.catalog_schema import (
    ActivationToggle,
    CatalogItemCreate,
    CatalogItemUpdate,
    DomainItemCreate,
    DomainItemUpdate,
)
from ..schemas.locale_schema import LocaleSettings
from ..services.catalog_service import CatalogService
from ..utils.logger import get_logger

logger = get_logger()

_TENANT = r"^/tenants/(?P<tenant_id>[^/]+)"
_SEPARATE = _TENANT + r"/catalogos-separados"


class ApiResponse(BaseModel):
    status_code: int
    body: Optional[Any] = None

    model_config = ConfigDict(arbitrary_types_allowed=True)

    @property
    def ok(self) -> bool:
        return self.status_code < 400


def include_inactive(query: Mapping[str, Any]) -> bool:
    """``?activo=false`` means "include inactive items" rather than "only inactive"."""
    value = query.get(ResponseKey.ACTIVE.value)
    if value is None:
        return False
    return str(value).strip().lower() in ("false", "0", "no")


def _parse_body(schema: type, body: Optional[Mapping[str, Any]]):
    try:
        return schema.model_validate(body or {})
    except PydanticValidationError as e:
        errors = e.errors(include_url=False, include_context=False)
        field = ".".join(str(part) for part in errors[0]["loc"]) if errors else None
        raise ValidationError(
            f"Invalid request body: {errors[0]['msg'] if errors else str(e)}",
            field=field,
            error_code=ErrorCode.INVALID_FORMAT,
            validation_errors=[
                {"loc": [str(p) for p in err["loc"]], "msg": err["msg"]} for err in errors
            ],
        ) from e


def _dump(item: BaseModel) -> Dict[str, Any]:
    return item.model_dump(mode="json")


class CatalogApiHandlers:
    """
    Route table and handlers for the catalog endpoints.

    Each request runs on its own service (and session) from ``service_factory``
    and inside the tenant context of the path's tenant.
    """

    def __init__(self, service_factory: Callable[[], CatalogService] = CatalogService):
        self.service_factory = service_factory
        self.routes: List[Tuple[str, Pattern[str], Callable[..., ApiResponse]]] = [
            ("GET", re.compile(_TENANT + r"/catalogos$"), self.list_catalogs),
            ("POST", re.compile(_TENANT + r"/catalogos$"), self.create_catalog_item),
            (
                "POST",
                re.compile(_TENANT + r"/catalogos/(?P<kind>[^/]+)/toggle/(?P<code>[^/]+)$"),
                self.toggle_catalog_item,
            ),
            ("PUT", re.compile(_TENANT + r"/catalogos/(?P<item_id>[^/]+)$"), self.update_catalog_item),
            (
                "DELETE",
                re.compile(_TENANT + r"/catalogos/(?P<item_id>[^/]+)$"),
                self.delete_catalog_item,
            ),
            # conteos must win over the {kind} pattern below
            ("GET", re.compile(_SEPARATE + r"/conteos$"), self.separate_counts),
            ("GET", re.compile(_SEPARATE + r"/(?P<kind>[^/]+)$"), self.list_separate),
            ("POST", re.compile(_SEPARATE + r"/(?P<kind>[^/]+)$"), self.create_separate),
            (
                "POST",
                re.compile(_SEPARATE + r"/(?P<kind>[^/]+)/toggle/(?P<code>[^/]+)$"),
                self.toggle_separate,
            ),
            (
                "PUT",
                re.compile(_SEPARATE + r"/(?P<kind>[^/]+)/(?P<item_id>[^/]+)$"),
                self.update_separate,
            ),
            (
                "DELETE",
                re.compile(_SEPARATE + r"/(?P<kind>[^/]+)/(?P<item_id>[^/]+)$"),
                self.delete_separate,
            ),
            ("GET", re.compile(_TENANT + r"/idiomas$"), self.get_locales),
            ("PUT", re.compile(_TENANT + r"/idiomas$"), self.update_locales),
        ]

    # ==================== DISPATCH ====================

    def route(
        self,
        method: str,
        path: str,
        query: Optional[Mapping[str, Any]] = None,
        body: Optional[Any] = None,
    ) -> ApiResponse:
        """Dispatch one request; never raises for errors of the catalog contract."""
        parts = urlsplit(path)
        params: Dict[str, Any] = dict(parse_qsl(parts.query))
        params.update(query or {})
        method = method.upper()

        try:
            handler, path_args = self._match(method, parts.path.rstrip("/") or "/")
            with tenant_context(path_args["tenant_id"]):
                return handler(query=params, body=body, **path_args)
        except BaseError as e:
            return ApiResponse(status_code=e.status_code, body=e.to_dict())
        except Exception as e:
            logger.exception(
                f"Unhandled error for {method} {parts.path}",
                extra={"http_method": method, "path": parts.path},
            )
            error = ServiceError(
                "Internal server error",
                error_code=ErrorCode.INTERNAL_ERROR,
                operation=f"{method} {parts.path}",
                cause=e,
            )
            return ApiResponse(status_code=error.status_code, body=error.to_dict())

    def _match(self, method: str, path: str) -> Tuple[Callable[..., ApiResponse], Dict[str, str]]:
        path_known = False
        for route_method, pattern, handler in self.routes:
            match = pattern.match(path)
            if match is None:
                continue
            path_known = True
            if route_method == method:
                return handler, {k: unquote(v) for k, v in match.groupdict().items()}
        raise NotFoundError(
            f"No route for {method} {path}",
            error_code=ErrorCode.NOT_FOUND,
            http_method=method,
            path=path,
            path_known=path_known,
        )

    # ==================== UNIFIED KINDS ====================

    def list_catalogs(self, tenant_id: str, query, body) -> ApiResponse:
        with self.service_factory() as service:
            catalogs = service.list_catalogs(tenant_id, include_inactive=include_inactive(query))
            payload = {
                kind.value: [_dump(item) for item in items] for kind, items in catalogs.items()
            }
        return ApiResponse(status_code=200, body={ResponseKey.CATALOGS.value: payload})

    def create_catalog_item(self, tenant_id: str, query, body) -> ApiResponse:
        data = _parse_body(CatalogItemCreate, body)
        require_kind(data.kind, StorageStrategy.UNIFIED)
        with self.service_factory() as service:
            item = service.create_item(tenant_id, data.kind, data.changes())
        return ApiResponse(status_code=201, body={ResponseKey.CATALOG.value: _dump(item)})

    def update_catalog_item(self, tenant_id: str, item_id: str, query, body) -> ApiResponse:
        data = _parse_body(CatalogItemUpdate, body)
        with self.service_factory() as service:
            kind = service.unified_kind_of(tenant_id, item_id)
            item = service.update_item(tenant_id, kind, item_id, data.changes())
        return ApiResponse(status_code=200, body={ResponseKey.CATALOG.value: _dump(item)})

    def delete_catalog_item(self, tenant_id: str, item_id: str, query, body) -> ApiResponse:
        with self.service_factory() as service:
            kind = service.unified_kind_of(tenant_id, item_id)
            service.delete_item(tenant_id, kind, item_id)
        return ApiResponse(status_code=204)

    def toggle_catalog_item(self, tenant_id: str, kind: str, code: str, query, body) -> ApiResponse:
        parsed_kind = require_kind(kind, StorageStrategy.UNIFIED)
        toggle = _parse_body(ActivationToggle, body)
        with self.service_factory() as service:
            item = service.toggle_item(tenant_id, parsed_kind, code, toggle.active)
        return ApiResponse(status_code=200, body={ResponseKey.CATALOG.value: _dump(item)})

    # ==================== SEPARATE KINDS ====================

    def list_separate(self, tenant_id: str, kind: str, query, body) -> ApiResponse:
        parsed_kind = require_kind(kind, StorageStrategy.SEPARATE)
        with self.service_factory() as service:
            items = service.list_items(
                tenant_id, parsed_kind, include_inactive=include_inactive(query)
            )
            payload = [_dump(item) for item in items]
        return ApiResponse(status_code=200, body={ResponseKey.ITEMS.value: payload})

    def create_separate(self, tenant_id: str, kind: str, query, body) -> ApiResponse:
        parsed_kind = require_kind(kind, StorageStrategy.SEPARATE)
        data = _parse_body(DomainItemCreate, body)
        with self.service_factory() as service:
            item = service.create_item(tenant_id, parsed_kind, data.changes())
        return ApiResponse(status_code=201, body=_dump(item))

    def update_separate(self, tenant_id: str, kind: str, item_id: str, query, body) -> ApiResponse:
        parsed_kind = require_kind(kind, StorageStrategy.SEPARATE)
        data = _parse_body(DomainItemUpdate, body)
        with self.service_factory() as service:
            item = service.update_item(tenant_id, parsed_kind, item_id, data.changes())
        return ApiResponse(status_code=200, body=_dump(item))

    def delete_separate(self, tenant_id: str, kind: str, item_id: str, query, body) -> ApiResponse:
        parsed_kind = require_kind(kind, StorageStrategy.SEPARATE)
        with self.service_factory() as service:
            service.delete_item(tenant_id, parsed_kind, item_id)
        return ApiResponse(status_code=204)

    def toggle_separate(self, tenant_id: str, kind: str, code: str, query, body) -> ApiResponse:
        parsed_kind = require_kind(kind, StorageStrategy.SEPARATE)
        toggle = _parse_body(ActivationToggle, body)
        with self.service_factory() as service:
            item = service.toggle_item(tenant_id, parsed_kind, code, toggle.active)
        return ApiResponse(status_code=200, body=_dump(item))

    def separate_counts(self, tenant_id: str, query, body) -> ApiResponse:
        with self.service_factory() as service:
            counts = service.separate_counts(tenant_id)
        return ApiResponse(
            status_code=200,
            body={ResponseKey.COUNTS.value: {kind.value: n for kind, n in counts.items()}},
        )

    # ==================== LOCALES ====================

    def get_locales(self, tenant_id: str, query, body) -> ApiResponse:
        with self.service_factory() as service:
            settings = service.locale_settings(tenant_id)
        return ApiResponse(status_code=200, body=self._locales_body(settings))

    def update_locales(self, tenant_id: str, query, body) -> ApiResponse:
        payload = dict(body or {})
        wire_names = {
            "locales": (ResponseKey.LOCALES.value, "locales"),
            "base_locale": ("base", "base_locale"),
            "fallback_locale": ("fallback", "fallback_locale"),
        }
        fields = {}
        for field, names in wire_names.items():
            for name in names:
                if payload.get(name) is not None:
                    fields[field] = payload[name]
                    break
        settings = _parse_body(LocaleSettings, fields)
        with self.service_factory() as service:
            saved = service.tenants.update_locale_settings(tenant_id, settings)
        return ApiResponse(status_code=200, body=self._locales_body(saved))

    @staticmethod
    def _locales_body(settings: LocaleSettings) -> Dict[str, Any]:
        return {
            ResponseKey.LOCALES.value: [locale.model_dump(mode="json") for locale in settings.locales],
            "base": settings.base_locale,
            "fallback": settings.fallback_locale,
        }

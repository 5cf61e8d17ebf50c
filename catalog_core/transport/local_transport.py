"""In-process transport that calls the JSON handlers directly."""

from typing import Any, Mapping, Optional, Tuple

from ..api.handlers import CatalogApiHandlers
from ..utils.json_utils import to_jsonable
from .base import CatalogTransport


class LocalCatalogTransport(CatalogTransport):
    """
    Sends requests straight to ``CatalogApiHandlers.route``.

    Bodies are converted to plain JSON values in both directions so the
    resolver sees exactly what it would receive over HTTP.
    """

    def __init__(self, handlers: Optional[CatalogApiHandlers] = None):
        super().__init__()
        self.handlers = handlers or CatalogApiHandlers()

    def _send(
        self,
        method: str,
        path: str,
        params: Optional[Mapping[str, str]] = None,
        json: Optional[Any] = None,
    ) -> Tuple[int, Any]:
        response = self.handlers.route(
            method,
            path,
            query=dict(params or {}),
            body=to_jsonable(json) if json is not None else None,
        )
        return response.status_code, to_jsonable(response.body)

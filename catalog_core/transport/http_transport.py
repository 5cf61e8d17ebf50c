"""
HTTP transport for the catalog JSON contract, built on requests.
"""

from typing import Any, Mapping, Optional, Tuple

import requests

from ..config import get_config
from ..exceptions import ErrorCode, TransportError
from .base import CatalogTransport


class HttpCatalogTransport(CatalogTransport):
    """
    Talks to a remote catalog API.

    The base URL, timeout and TLS verification default to ``get_config().api``;
    the base URL is injected at deploy time through ``CATALOG_API_URL``.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[int] = None,
        verify_ssl: Optional[bool] = None,
        session: Optional[requests.Session] = None,
        headers: Optional[Mapping[str, str]] = None,
    ):
        super().__init__()
        api_config = get_config().api
        self.base_url = (base_url or api_config.base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else api_config.timeout
        self.verify_ssl = api_config.verify_ssl if verify_ssl is None else verify_ssl
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})
        if headers:
            self.session.headers.update(headers)

    def _send(
        self,
        method: str,
        path: str,
        params: Optional[Mapping[str, str]] = None,
        json: Optional[Any] = None,
    ) -> Tuple[int, Any]:
        url = f"{self.base_url}{path}"
        self.logger.debug(f"{method} {url}", extra={"http_method": method, "url": url})

        try:
            response = self.session.request(
                method,
                url,
                params=dict(params) if params else None,
                json=json,
                timeout=self.timeout,
                verify=self.verify_ssl,
            )
        except requests.Timeout as e:
            raise TransportError(
                f"Catalog API timed out after {self.timeout}s",
                error_code=ErrorCode.TIMEOUT_ERROR,
                status_code=504,
                cause=e,
                url=url,
            ) from e
        except requests.RequestException as e:
            raise TransportError(
                f"Catalog API request failed: {e}",
                cause=e,
                url=url,
            ) from e

        return response.status_code, self._decode(response)

    def _decode(self, response: requests.Response) -> Any:
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            if response.status_code >= 400:
                # Proxies and gateways answer with HTML; keep the text as the message
                return {"error": {"message": response.text[:500] or response.reason}}
            raise TransportError(
                "Catalog API returned a non-JSON body",
                error_code=ErrorCode.EXTERNAL_API_ERROR,
                cause=e,
                url=response.url,
                remote_status=response.status_code,
            ) from e

    def close(self) -> None:
        self.session.close()

"""
Client for the coworking REST backend.

Attaches the session's bearer token to every call, maps 401/403 to the
session-level errors the screens react to, and records request metrics.
Nothing is retried: a failed call surfaces to the caller immediately.
"""

from __future__ import annotations

import json
import mimetypes
import re
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple
from urllib.parse import urljoin

import requests
import structlog

from cowork_booking.config import API_URL, REQUEST_TIMEOUT
from cowork_booking.errors import (
    AccessForbiddenError,
    ApiError,
    MalformedResponseError,
    SessionExpiredError,
    TransportError,
)
from cowork_booking.metrics import api_latency, api_requests
from cowork_booking.session import SessionContext

logger = structlog.get_logger(__name__)

_ID_SEGMENT = re.compile(r"/\d+(?=/|$)")


def endpoint_label(path: str) -> str:
    """
    Collapse numeric path segments so metric labels stay bounded.

    Example:
        >>> endpoint_label("/api/factures/12/pdf")
        'api/factures/{id}/pdf'
    """
    return _ID_SEGMENT.sub("/{id}", "/" + path.strip("/")).lstrip("/")


def error_message(res: requests.Response) -> str:
    """Best-effort human message from an error response."""
    try:
        body = res.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    if isinstance(body, str) and body:
        return body
    return res.text or res.reason or "Unknown error"


class ApiClient:
    """
    Thin wrapper over `requests.Session` bound to one SessionContext.

    Args:
        session: Session providing the bearer token; cleared on 401.
        base_url: Backend root URL.
        timeout: Per-request timeout in seconds.
        http: Optional pre-built `requests.Session` (tests inject a mock).
    """

    def __init__(
        self,
        session: SessionContext,
        base_url: str = API_URL,
        timeout: float = REQUEST_TIMEOUT,
        http: Optional[requests.Session] = None,
    ):
        self.session = session
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self.timeout = timeout
        self.http = http or requests.Session()

    def url_for(self, path: str) -> str:
        return urljoin(self.base_url, path.lstrip("/"))

    def _auth_headers(self) -> Dict[str, str]:
        token = self.session.token
        return {"Authorization": f"Bearer {token}"} if token else {}

    def request(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        """
        Send a request and map error statuses to cowork_booking errors.

        Raises:
            SessionExpiredError: On 401, after clearing the session.
            AccessForbiddenError: On 403.
            ApiError: On any other status >= 400.
            TransportError: If no response was received.
        """
        url = self.url_for(path)
        endpoint = endpoint_label(path)
        headers = {**self._auth_headers(), **kwargs.pop("headers", {})}

        logger.debug("api_request", method=method, endpoint=endpoint)

        start_time = time.time()
        try:
            res = self.http.request(method, url, headers=headers, timeout=self.timeout, **kwargs)
        except requests.RequestException as err:
            api_requests.labels(endpoint=endpoint, method=method, status_code="error").inc()
            logger.warning("api_request_failed", method=method, endpoint=endpoint, error=str(err))
            raise TransportError(f"{method} {path} failed: {err}") from err
        latency = time.time() - start_time

        api_requests.labels(
            endpoint=endpoint, method=method, status_code=str(res.status_code)
        ).inc()
        api_latency.labels(endpoint=endpoint).observe(latency)

        if res.status_code == 401:
            logger.warning("api_unauthorized", method=method, endpoint=endpoint)
            self.session.clear()
            raise SessionExpiredError(401, error_message(res))

        if res.status_code == 403:
            logger.warning("api_forbidden", method=method, endpoint=endpoint)
            raise AccessForbiddenError(403, error_message(res))

        if res.status_code >= 400:
            message = error_message(res)
            logger.warning(
                "api_error", method=method, endpoint=endpoint, status=res.status_code, message=message
            )
            raise ApiError(res.status_code, message)

        return res

    @staticmethod
    def _json(res: requests.Response) -> Any:
        if res.status_code == 204 or not res.content:
            return None
        try:
            return res.json()
        except ValueError as err:
            logger.error("api_invalid_json", status=res.status_code, error=str(err))
            raise MalformedResponseError(f"Response body is not valid JSON: {err}") from err

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self._json(self.request("GET", path, params=params))

    def post(self, path: str, body: Any = None) -> Any:
        return self._json(self.request("POST", path, json=body))

    def put(self, path: str, body: Any = None) -> Any:
        return self._json(self.request("PUT", path, json=body))

    def patch(self, path: str, body: Any = None) -> Any:
        return self._json(self.request("PATCH", path, json=body))

    def delete(self, path: str) -> None:
        self.request("DELETE", path)

    def send_multipart(
        self,
        method: str,
        path: str,
        data: Any,
        files: Sequence[Tuple[str, Path]] = (),
        extra_fields: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Send multipart form data: a JSON-encoded `data` part plus binary parts.

        Args:
            method: POST or PUT.
            path: API path.
            data: Metadata object, serialized to JSON under the `data` field.
                None sends the binary parts only.
            files: (field name, file path) pairs; a field may repeat (e.g. gallery).
            extra_fields: Additional JSON-encoded text fields (e.g. imagesToDelete).
        """
        parts: List[Tuple[str, Tuple[Optional[str], Any, str]]] = []
        if data is not None:
            parts.append(("data", (None, json.dumps(data), "application/json")))
        for name, value in (extra_fields or {}).items():
            parts.append((name, (None, json.dumps(value), "application/json")))
        for field_name, file_path in files:
            content_type = mimetypes.guess_type(file_path.name)[0] or "application/octet-stream"
            parts.append((field_name, (file_path.name, file_path.read_bytes(), content_type)))

        return self._json(self.request(method, path, files=parts))

    def download(self, path: str) -> bytes:
        """Fetch a binary resource (e.g. an invoice PDF) with the bearer token attached."""
        return self.request("GET", path).content

"""HTTP client for the Vector API.

This is the only module that performs network I/O.  Every resource command
goes through :class:`ApiClient`, which attaches auth headers, executes one
request and turns the response into either decoded JSON or a
:class:`~vector_cli.errors.VectorError`.  Nothing is retried or cached.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Mapping

import httpx

from vector_common import DEFAULT_BASE_URL

from vector_cli import __version__
from vector_cli.errors import ConfigError, NetworkError, OtherError, error_from_response

log = logging.getLogger(__name__)

USER_AGENT = f"vector-cli/{__version__}"
DEFAULT_UPLOAD_NAME = "file.sql"
DEFAULT_TIMEOUT = 30.0


def _valid_header_value(value: str) -> bool:
    return all(ch == "\t" or 0x20 <= ord(ch) <= 0x7E for ch in value)


def _drop_none(params: Mapping[str, Any] | None) -> dict[str, Any] | None:
    if params is None:
        return None
    return {k: v for k, v in params.items() if v is not None}


class ApiClient:
    """Authenticated JSON client bound to one base URL."""

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ):
        self.base_url = (base_url or DEFAULT_BASE_URL).rstrip("/")
        self._token = token
        try:
            self._http = httpx.Client(
                headers={"User-Agent": USER_AGENT},
                timeout=timeout,
                transport=transport,
            )
        except (ValueError, OSError) as exc:
            raise ConfigError(f"Failed to initialize HTTP client: {exc}") from exc

    def __enter__(self) -> ApiClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        self._http.close()

    def set_token(self, token: str) -> None:
        """Replace the bearer token used for subsequent requests."""
        self._token = token

    # ------------------------------------------------------------------
    # Request plumbing
    # ------------------------------------------------------------------

    def _headers(self, *, json_body: bool = True) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if json_body:
            headers["Content-Type"] = "application/json"
        if self._token is not None:
            value = f"Bearer {self._token}"
            if not _valid_header_value(value):
                raise ConfigError("API token contains characters not allowed in an HTTP header")
            headers["Authorization"] = value
        return headers

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def _send(
        self,
        method: str,
        path: str,
        *,
        query: Mapping[str, Any] | None = None,
        body: Any = None,
        files: Mapping[str, Any] | None = None,
    ) -> Any:
        url = self._url(path)
        headers = self._headers(json_body=files is None)
        content = None if body is None else json.dumps(body).encode()

        log.debug("%s %s", method, url)
        try:
            response = self._http.request(
                method,
                url,
                params=_drop_none(query),
                headers=headers,
                content=content,
                files=files,
            )
        except httpx.RequestError as exc:
            raise NetworkError(str(exc) or exc.__class__.__name__) from exc

        log.debug("%s %s -> %d", method, url, response.status_code)
        return self._handle_response(response)

    @staticmethod
    def _handle_response(response: httpx.Response) -> Any:
        text = response.text
        if response.is_success:
            try:
                return json.loads(text)
            except json.JSONDecodeError as exc:
                raise OtherError(f"JSON parse error: {exc}") from exc
        raise error_from_response(response.status_code, text)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def get(self, path: str, query: Mapping[str, Any] | None = None) -> Any:
        """GET ``path``; ``None``-valued query entries are omitted."""
        return self._send("GET", path, query=query)

    def post(self, path: str, body: Any = None) -> Any:
        """POST ``body`` as JSON, or an empty request when ``body`` is None."""
        return self._send("POST", path, body=body)

    def put(self, path: str, body: Any = None) -> Any:
        """PUT ``body`` as JSON, or an empty request when ``body`` is None."""
        return self._send("PUT", path, body=body)

    def delete(self, path: str) -> Any:
        return self._send("DELETE", path)

    def post_file(
        self,
        path: str,
        file_path: Path,
        query: Mapping[str, Any] | None = None,
    ) -> Any:
        """Upload ``file_path`` as the multipart part ``file``.

        The caller is responsible for any size limit; this method streams
        whatever it is given.
        """
        file_path = Path(file_path)
        file_name = file_path.name or DEFAULT_UPLOAD_NAME
        try:
            fh = open(file_path, "rb")
        except OSError as exc:
            raise OtherError(f"Failed to open file: {exc}") from exc

        with fh:
            files = {"file": (file_name, fh, "application/octet-stream")}
            return self._send("POST", path, query=query, files=files)


def compact(**fields: Any) -> dict[str, Any]:
    """Build a request body, leaving out fields that were not supplied."""
    return {k: v for k, v in fields.items() if v is not None}

"""
Internal HTTP client for the couchdoc SDK.

This module provides the low-level request executor: one HTTP exchange
with CouchDB per call, with the outcome classified into the SDK error
types. It is internal to the SDK and should not be used directly by users.

Users should use CouchClient instead, which provides document operations.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import MutableMapping
from typing import Any

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .document import Doc
from .errors import (
    ConnectionError,
    DecodingError,
    EncodingError,
    RequestError,
    ResponseReadError,
    ServerError,
)

logger = logging.getLogger(__name__)

# RFC 7230 token
_METHOD_RE = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+$")


class HttpClient:
    """Internal HTTP client for CouchDB.

    Owns a single httpx.AsyncClient bound to the server base URL. The
    underlying client is safe to share between concurrent tasks; every
    call gets its own request/response lifecycle.

    This is an internal class - users should use CouchClient instead.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:5984/",
        *,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the HTTP client.

        Args:
            base_url: CouchDB server URL
            timeout: Transport timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self._base_url = base_url
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def base_url(self) -> str:
        return self._base_url

    async def connect(self) -> None:
        """Create the underlying HTTP client."""
        if self._client is not None:
            return

        try:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                transport=self._transport,
            )
        except httpx.InvalidURL as e:
            raise RequestError(f"Invalid server URL: {e}", url=self._base_url) from e
        logger.debug(f"HTTP client ready for CouchDB at {self._base_url}")

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
            logger.debug("HTTP client closed")

    async def __aenter__(self) -> HttpClient:
        await self.connect()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    def _ensure_connected(self) -> httpx.AsyncClient:
        """Ensure we're connected and return the httpx client."""
        if self._client is None:
            raise RuntimeError("Not connected. Call connect() first.")
        return self._client

    async def request(
        self,
        method: str,
        path: str,
        body: Any = None,
        out: Any = None,
    ) -> Any:
        """Perform one HTTP exchange with CouchDB.

        Args:
            method: HTTP method
            path: Resource path relative to the server URL
            body: Optional request payload (Doc, mapping or pydantic model)
            out: Optional output holder. A pydantic model class is validated
                and the new instance returned; a Doc or a mapping is filled
                in place and returned.

        Returns:
            The filled holder, or None when no holder is given

        Raises:
            EncodingError: If the body cannot be serialized
            RequestError: If the request cannot be built
            ConnectionError: If the server cannot be reached
            ResponseReadError: If the response body cannot be read
            ServerError: If the status code is not 2xx
            DecodingError: If the response body cannot be parsed
        """
        client = self._ensure_connected()

        content: bytes | None = None
        if body is not None:
            content = _encode(body)

        logger.debug(
            f"[couchdb request] {method} {path} "
            f"{content.decode('utf-8') if content else ''}"
        )

        if not _METHOD_RE.match(method or ""):
            raise RequestError(f"Invalid HTTP method: {method!r}", method=method, url=path)

        headers = {"Accept": "application/json"}
        if content is not None:
            headers["Content-Type"] = "application/json"

        try:
            request = client.build_request(method, path, content=content, headers=headers)
        except (httpx.InvalidURL, ValueError, TypeError) as e:
            raise RequestError(f"Invalid request: {e}", method=method, url=path) from e

        try:
            response = await client.send(request, stream=True)
        except httpx.UnsupportedProtocol as e:
            raise RequestError(
                f"Invalid request: {e}", method=method, url=str(request.url)
            ) from e
        except httpx.TransportError as e:
            raise ConnectionError(
                f"Failed to reach CouchDB: {e}", address=self._base_url
            ) from e

        try:
            raw = await response.aread()
        except (httpx.HTTPError, httpx.StreamError) as e:
            raise ResponseReadError(
                f"Failed to read CouchDB response: {e}",
                status_code=response.status_code,
            ) from e
        finally:
            await response.aclose()

        logger.debug(f"[couchdb response] {response.status_code} {raw.decode('utf-8', errors='replace')}")

        if not response.is_success:
            raise ServerError(response.status_code, raw)

        if out is None:
            return None

        try:
            data = json.loads(raw)
        except ValueError as e:
            raise DecodingError(f"Invalid JSON in CouchDB response: {e}", body=raw) from e

        return _load_into(out, data, raw)


def _encode(body: Any) -> bytes:
    """Serialize a request payload to JSON bytes."""
    try:
        if isinstance(body, Doc):
            data = body.to_json()
        elif isinstance(body, BaseModel):
            data = body.model_dump(mode="json", by_alias=True)
        else:
            data = body
        return json.dumps(data, allow_nan=False).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise EncodingError(f"Cannot serialize request body: {e}") from e


def _load_into(out: Any, data: Any, raw: bytes) -> Any:
    """Load decoded JSON into an output holder."""
    if isinstance(out, type) and issubclass(out, BaseModel):
        try:
            return out.model_validate(data)
        except PydanticValidationError as e:
            raise DecodingError(f"Unexpected CouchDB response: {e}", body=raw) from e

    if isinstance(out, (Doc, MutableMapping)):
        if not isinstance(data, dict):
            raise DecodingError("Expected a JSON object in CouchDB response", body=raw)
        if isinstance(out, Doc):
            try:
                out.load_json(data)
            except (TypeError, ValueError, KeyError) as e:
                raise DecodingError(f"Unexpected CouchDB response: {e}", body=raw) from e
        else:
            out.clear()
            out.update(data)
        return out

    raise DecodingError(f"Cannot decode a response into {type(out).__name__}", body=raw)

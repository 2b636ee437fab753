"""
HTTP Client for Docker Unix Socket
Pure Python implementation using http.client and socket

Every request opens a fresh connection, performs one exchange in a worker
thread and closes it. Failures are raised as engine errors:
transport problems are retryable, non-2xx statuses go through the status
classifier, undecodable success bodies are bugs.
"""

import asyncio
import http.client
import json
import logging
import socket
from typing import Any, Callable, Dict, List, Optional, Tuple
from urllib.parse import quote

from ..engine.exceptions import BugError, EngineError, RetryableError, UserActionableError
from .context import ConnectionTarget
from .exceptions import ACCEPTED_NO_CHANGE, PERMISSION_HINT, classify_status

logger = logging.getLogger(__name__)

# Error bodies are kept for the error message, but never read unbounded
MAX_ERROR_BODY = 64 * 1024

Classifier = Callable[[int, str], EngineError]


class UnixHTTPConnection(http.client.HTTPConnection):
    """HTTP connection over Unix socket"""

    def __init__(self, socket_path: str, timeout: float = 60):
        super().__init__('localhost', timeout=timeout)
        self.socket_path = socket_path

    def connect(self):
        """Connect to Unix socket"""
        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        try:
            sock.settimeout(self.timeout)
            sock.connect(self.socket_path)
        except BaseException:
            sock.close()
            raise
        self.sock = sock


def encode_params(params: Optional[Dict[str, Any]]) -> str:
    """
    Encode query parameters in insertion order

    Booleans become ``true``/``false``, lists and dicts are JSON encoded with
    sorted keys, None values are skipped.
    """
    if not params:
        return ''
    query_parts = []
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, bool):
            value = 'true' if value else 'false'
        elif isinstance(value, (list, dict)):
            value = json.dumps(value, sort_keys=True, separators=(',', ':'))
        query_parts.append(f"{key}={quote(str(value), safe='')}")
    return '&'.join(query_parts)


class DockerHTTPClient:
    """HTTP client for Docker daemon"""

    def __init__(self, socket_path: str, timeout: float = 60,
                 max_concurrency: int = 0, api_version: Optional[str] = None,
                 classifier: Classifier = classify_status):
        """
        Initialize Docker HTTP client

        Args:
            socket_path: Docker socket path
            timeout: Socket timeout in seconds for each exchange
            max_concurrency: Maximum requests in flight (0 = unlimited)
            api_version: API version prefix, e.g. ``1.43`` (default: unversioned)
            classifier: Maps non-2xx status and body to an engine error
        """
        if max_concurrency < 0:
            raise ValueError(f"max_concurrency must not be negative: {max_concurrency}")
        self.socket_path = socket_path
        self.timeout = timeout
        self.max_concurrency = max_concurrency
        self.api_version = api_version.lstrip('v') if api_version else None
        self.classifier = classifier
        self._semaphore: Optional[asyncio.Semaphore] = None
        self._semaphore_loop: Optional[asyncio.AbstractEventLoop] = None

    @classmethod
    def from_target(cls, target: ConnectionTarget, **kwargs) -> 'DockerHTTPClient':
        return cls(target.socket_path, **kwargs)

    def __repr__(self):
        return f"<DockerHTTPClient: unix://{self.socket_path}>"

    def build_url(self, path: str, params: Optional[Dict[str, Any]] = None) -> str:
        """Build request URL with API version prefix and query params"""
        if self.api_version:
            path = f"/v{self.api_version}{path}"
        try:
            query = encode_params(params)
        except (TypeError, ValueError) as e:
            raise BugError(f"Failed to build request for {path}", cause=e) from e
        return f"{path}?{query}" if query else path

    # ------------------------------------------------------------------ exchange

    def _exchange(self, method: str, url: str, body: Optional[bytes],
                  accept: frozenset = frozenset()) -> Tuple[int, bytes]:
        """
        Perform one blocking HTTP exchange

        Returns:
            Tuple of (status, body) for successful responses

        Raises:
            EngineError: classified failure
        """
        headers = {'Host': 'localhost'}
        if body is not None:
            headers['Content-Type'] = 'application/json'
            headers['Content-Length'] = str(len(body))

        conn = UnixHTTPConnection(self.socket_path, timeout=self.timeout)
        try:
            try:
                conn.request(method, url, body=body, headers=headers)
                response = conn.getresponse()
            except PermissionError as e:
                raise UserActionableError(
                    f"Permission denied on Docker socket {self.socket_path}",
                    hint=PERMISSION_HINT,
                    cause=e,
                ) from e
            except (OSError, http.client.HTTPException) as e:
                raise RetryableError(
                    f"Cannot connect to Docker daemon at unix://{self.socket_path}: {e}",
                    cause=e,
                ) from e

            status = response.status
            success = 200 <= status < 300 or status in accept
            try:
                data = response.read() if success else response.read(MAX_ERROR_BODY)
            except (OSError, http.client.HTTPException) as e:
                raise RetryableError("Failed to read response body", cause=e) from e

            logger.debug(f"{method} {url} -> {status}")
            if not success:
                error = self.classifier(status, data.decode('utf-8', errors='replace'))
                logger.warning(f"{method} {url} failed: {error.message}")
                raise error
            return status, data
        finally:
            conn.close()

    async def _request(self, method: str, path: str,
                       params: Optional[Dict[str, Any]] = None,
                       data: Any = None,
                       accept: frozenset = frozenset()) -> bytes:
        url = self.build_url(path, params)
        body = None
        if data is not None:
            try:
                body = json.dumps(data).encode('utf-8')
            except (TypeError, ValueError) as e:
                raise BugError(f"Failed to encode request body for {path}", cause=e) from e

        if not self.max_concurrency:
            _, raw = await asyncio.to_thread(self._exchange, method, url, body, accept)
            return raw

        async with self._limiter():
            _, raw = await asyncio.to_thread(self._exchange, method, url, body, accept)
        return raw

    def _limiter(self) -> asyncio.Semaphore:
        """Concurrency semaphore of the running event loop"""
        # A semaphore is bound to one loop; the client may outlive asyncio.run()
        loop = asyncio.get_running_loop()
        if self._semaphore is None or self._semaphore_loop is not loop:
            self._semaphore = asyncio.Semaphore(self.max_concurrency)
            self._semaphore_loop = loop
        return self._semaphore

    @staticmethod
    def _decode(path: str, raw: bytes, expect: Optional[type]) -> Any:
        """Decode a successful JSON body, checking the top-level shape"""
        if not raw.strip():
            value = None
        else:
            try:
                value = json.loads(raw.decode('utf-8'))
            except (UnicodeDecodeError, ValueError) as e:
                raise BugError(f"Failed to parse response from {path}", cause=e) from e
        if expect is not None and not isinstance(value, expect):
            raise BugError(
                f"Unexpected response from {path}: expected {expect.__name__}, "
                f"got {type(value).__name__}"
            )
        return value

    # ------------------------------------------------------------------- verbs

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None,
                  expect: Optional[type] = None) -> Any:
        """
        Make GET request

        Args:
            path: API path
            params: URL query parameters
            expect: Required top-level JSON type (list or dict)

        Returns:
            Decoded JSON response
        """
        raw = await self._request('GET', path, params=params)
        return self._decode(path, raw, expect)

    async def get_text(self, path: str, params: Optional[Dict[str, Any]] = None) -> str:
        """Make GET request returning the plain text body"""
        raw = await self._request('GET', path, params=params)
        try:
            return raw.decode('utf-8')
        except UnicodeDecodeError as e:
            raise BugError(f"Failed to decode response from {path}", cause=e) from e

    async def post(self, path: str, body: Any = None,
                   params: Optional[Dict[str, Any]] = None,
                   expect: Optional[type] = None) -> Any:
        """Make POST request with an optional JSON body, returning decoded JSON"""
        raw = await self._request('POST', path, params=params, data=body)
        return self._decode(path, raw, expect)

    async def post_no_response(self, path: str,
                               params: Optional[Dict[str, Any]] = None) -> None:
        """
        Make POST request whose response body is irrelevant

        Statuses the daemon uses for "accepted, nothing to change" count as
        success.
        """
        await self._request('POST', path, params=params, accept=ACCEPTED_NO_CHANGE)

    async def post_stream(self, path: str,
                          params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """
        Make POST request answered with newline-delimited JSON messages

        The body is read to completion before returning.

        Returns:
            Decoded progress messages
        """
        raw = await self._request('POST', path, params=params)
        messages = []
        for line in raw.splitlines():
            if not line.strip():
                continue
            messages.append(self._decode(path, line, dict))
        return messages

    async def delete(self, path: str, params: Optional[Dict[str, Any]] = None) -> None:
        """Make DELETE request"""
        await self._request('DELETE', path, params=params)

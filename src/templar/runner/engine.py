"""
Templar Request Runner

Executes structured requests over a pooled aiohttp session. Each call performs
exactly one round trip: no retries, no redirect following, and no cookies kept
between calls. Response bodies are captured as sent by the server, without
content decoding, so they always match the Content-Encoding header.
"""

import asyncio
import logging
import socket
import time
from typing import Any, List, Optional

import aiohttp
from aiohttp import ClientSession, ClientTimeout, DummyCookieJar, TCPConnector

from ..core.config import RunnerConfig, get_config
from ..core.exceptions import (
    MalformedRequestError,
    NetworkError,
    NetworkErrorKind,
    TemplarException,
)
from ..core.logging import get_logger, log_structured
from ..core.models import Header, HTTPRequest, HTTPResponse

logger = get_logger(__name__)


def translate_client_error(
    error: Exception, request: HTTPRequest, timeout: float
) -> TemplarException:
    """
    Map an aiohttp/asyncio failure onto the project's error taxonomy.

    Args:
        error: Exception raised while sending ``request``
        request: Request being executed
        timeout: Timeout in seconds that applied to the call

    Returns:
        MalformedRequestError for unusable URLs, NetworkError otherwise
    """
    details = {"method": request.method, "url": request.url}

    # InvalidURL is both a ClientError and a ValueError
    if isinstance(error, (aiohttp.InvalidURL, ValueError)):
        return MalformedRequestError(f"Invalid URL {request.url!r}: {error}")

    if isinstance(error, (aiohttp.ClientSSLError, aiohttp.ServerFingerprintMismatch)):
        return NetworkError(
            NetworkErrorKind.TLS_ERROR, f"TLS failure: {error}", details
        )

    if isinstance(error, asyncio.TimeoutError):
        return NetworkError(
            NetworkErrorKind.TIMEOUT, f"Request timed out after {timeout:g}s", details
        )

    if isinstance(error, aiohttp.ClientConnectorDNSError) or (
        isinstance(error, aiohttp.ClientConnectorError)
        and isinstance(error.os_error, socket.gaierror)
    ):
        return NetworkError(
            NetworkErrorKind.DNS_FAILURE, f"Could not resolve host: {error}", details
        )

    if isinstance(error, aiohttp.ClientConnectorError):
        return NetworkError(
            NetworkErrorKind.CONNECTION_FAILED, f"Connection failed: {error}", details
        )

    return NetworkError(
        NetworkErrorKind.PROTOCOL_ERROR,
        f"Request failed: {error or type(error).__name__}",
        details,
    )


class RequestRunner:
    """
    Executes HTTPRequests and returns HTTPResponses.

    The underlying connection pool is created on first use and reused by every
    call; it is safe to run several ``execute`` coroutines concurrently on the
    same event loop.
    """

    def __init__(self, config: Optional[RunnerConfig] = None):
        """
        Initialize the runner.

        Args:
            config: Runner configuration (uses the global configuration if None)
        """
        self.config = config or get_config().runner
        self._session: Optional[ClientSession] = None
        self._lock = asyncio.Lock()

    async def __aenter__(self) -> "RequestRunner":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def _get_session(self) -> ClientSession:
        async with self._lock:
            if self._session is None or self._session.closed:
                connector = TCPConnector(
                    limit=self.config.max_connections,
                    limit_per_host=self.config.max_connections_per_host,
                    keepalive_timeout=self.config.keepalive_timeout,
                    ssl=self.config.verify_ssl,
                )
                self._session = ClientSession(
                    connector=connector,
                    cookie_jar=DummyCookieJar(),
                    auto_decompress=False,
                    connector_owner=True,
                )
                logger.debug(
                    f"Connection pool created: max={self.config.max_connections}, "
                    f"per_host={self.config.max_connections_per_host}"
                )
            return self._session

    async def close(self) -> None:
        """Close the connection pool."""
        if self._session is not None:
            await self._session.close()
            self._session = None
            logger.debug("Connection pool closed")

    @property
    def closed(self) -> bool:
        return self._session is None or self._session.closed

    async def execute(
        self,
        request: HTTPRequest,
        timeout: Optional[float] = None,
        cancel: Optional[asyncio.Event] = None,
    ) -> HTTPResponse:
        """
        Send a request and capture the response.

        Args:
            request: HTTPRequest to send
            timeout: Total timeout in seconds (configured default if None)
            cancel: Event that aborts the in-flight call when set

        Returns:
            HTTPResponse received

        Raises:
            NetworkError: If the round trip fails, times out or is cancelled
            MalformedRequestError: If the URL cannot be used
            ValueError: If timeout is not greater than zero
        """
        seconds = timeout if timeout is not None else self.config.timeout
        if seconds <= 0:
            raise ValueError(f"Invalid timeout: {seconds}. Must be greater than zero")

        if cancel is None:
            return await self._send(request, seconds)

        if cancel.is_set():
            raise self._cancelled(request)

        send_task = asyncio.ensure_future(self._send(request, seconds))
        cancel_task = asyncio.ensure_future(cancel.wait())
        try:
            done, _ = await asyncio.wait(
                {send_task, cancel_task}, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            cancel_task.cancel()
            if not send_task.done():
                send_task.cancel()

        if send_task in done:
            return send_task.result()

        try:
            await send_task
        except asyncio.CancelledError:
            pass
        except TemplarException:
            # The call failed on its own while being cancelled
            pass
        raise self._cancelled(request)

    def _cancelled(self, request: HTTPRequest) -> NetworkError:
        logger.info(f"Request cancelled: {request.method} {request.url}")
        return NetworkError(
            NetworkErrorKind.CANCELLED,
            "Request cancelled",
            {"method": request.method, "url": request.url},
        )

    async def _send(self, request: HTTPRequest, timeout: float) -> HTTPResponse:
        session = await self._get_session()
        log_structured(
            logger,
            logging.INFO,
            "Executing request",
            method=request.method,
            url=request.url,
            headers=len(request.headers),
        )

        started = time.monotonic()
        try:
            async with session.request(
                method=request.method,
                url=request.url,
                headers=list(request.headers),
                data=request.body,
                allow_redirects=False,
                timeout=ClientTimeout(total=timeout),
            ) as response:
                body = await response.read()
                headers: List[Header] = [
                    (key.decode("latin-1"), value.decode("latin-1"))
                    for key, value in response.raw_headers
                ]
                version = response.version
                reason = response.reason or ""
                status = response.status
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            error = translate_client_error(e, request, timeout)
            logger.warning(f"{request.method} {request.url} failed: {error}")
            raise error from e

        elapsed_ms = int((time.monotonic() - started) * 1000)
        log_structured(
            logger,
            logging.INFO,
            "Response received",
            status=status,
            elapsed_ms=elapsed_ms,
            size=len(body),
        )

        return HTTPResponse(
            version=f"HTTP/{version.major}.{version.minor}" if version else "HTTP/1.1",
            status_code=status,
            reason=reason,
            headers=headers,
            body=body or None,
            elapsed_ms=elapsed_ms,
        )

"""HTTP client wrapper with a bounded, linearly spaced retry policy."""
from __future__ import annotations

import asyncio
import logging
import ssl
from typing import Any, Awaitable, Callable, TypeVar

import aiohttp
import certifi

from .config import GeneralConfig
from .errors import ApiError, NetworkError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class HttpRetrier:
    """Runs provider requests with up to ``max_retries`` attempts.

    The pause after failed attempt ``n`` is ``retry_delay_base * n`` seconds,
    so the spacing grows linearly, not exponentially. Every error is retried
    the same way.
    """

    def __init__(self, config: GeneralConfig) -> None:
        self.max_retries = max(1, config.max_retries)
        self.retry_delay_base = config.retry_delay_base
        self.timeout = config.request_timeout

    async def retry(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Await ``operation()`` until it succeeds or attempts run out.

        Returns the first successful result; re-raises the last error.
        """
        attempt = 1
        while True:
            try:
                return await operation()
            except Exception as e:
                logger.warning(
                    "Attempt %d/%d failed: %s", attempt, self.max_retries, e
                )
                if attempt >= self.max_retries:
                    raise
            await asyncio.sleep(self.retry_delay_base * attempt)
            attempt += 1

    async def get_json(
        self,
        url: str,
        *,
        params: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
        label: str = "HTTP",
    ) -> Any:
        """GET ``url`` and decode the JSON body, retrying on any failure.

        Raises:
            ApiError: non-2xx status or a body that is not JSON.
            NetworkError: connection failure or timeout.
        """

        async def _request() -> Any:
            ssl_context = ssl.create_default_context(cafile=certifi.where())
            connector = aiohttp.TCPConnector(ssl=ssl_context)
            timeout = aiohttp.ClientTimeout(total=self.timeout)

            try:
                async with aiohttp.ClientSession(
                    connector=connector, timeout=timeout
                ) as session:
                    async with session.get(
                        url, params=params, headers=headers
                    ) as response:
                        if not 200 <= response.status < 300:
                            raise ApiError(
                                f"{label} API error: HTTP {response.status}",
                                status=response.status,
                            )
                        try:
                            return await response.json(content_type=None)
                        except (aiohttp.ContentTypeError, ValueError) as e:
                            raise ApiError(
                                f"{label} returned a malformed payload: {e}",
                                status=response.status,
                            ) from e
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                raise NetworkError(f"{label} request failed: {e}") from e

        logger.debug("GET %s params=%s", url, _redact(params))
        return await self.retry(_request)


def _redact(params: dict[str, str] | None) -> dict[str, str] | None:
    """Hide credentials in debug output."""
    if not params:
        return params
    return {
        k: ("***" if k in ("apikey", "token") else v) for k, v in params.items()
    }

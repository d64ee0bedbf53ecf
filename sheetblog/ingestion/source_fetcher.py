"""
CSV Source Fetcher
==================

Retrieves raw CSV text from a post source under a timeout.

Remote sources are fetched with aiohttp; local sources (a path or a
``file://`` URL) are read from disk. Every failure is raised as a
``SourceError`` subclass so the pipeline can fall back to the next source.
Concurrent fetches of the same URL share one in-flight request.
"""

import asyncio
import ssl
import time
from contextlib import asynccontextmanager
from typing import Dict, Optional

import aiohttp
import certifi

from ..config.settings import get_settings
from ..utils.exceptions import (
    ErrorCode,
    SourceEmptyError,
    SourceError,
    SourceHTTPError,
    SourceNetworkError,
    SourceTimeoutError,
    ValidationError,
)
from ..utils.logging import get_logger_for_component
from ..utils.validators import SourceValidator


class SourceFetcher:
    """Timeout-bounded CSV fetcher with per-URL request coalescing."""

    def __init__(self, timeout_ms: Optional[int] = None, user_agent: Optional[str] = None):
        """Initialize source fetcher.

        Args:
            timeout_ms: Request timeout in milliseconds (default from config)
            user_agent: User-Agent header value (default from config)
        """
        if timeout_ms is None or user_agent is None:
            settings = get_settings()
            if timeout_ms is None:
                timeout_ms = settings.sources.request_timeout_ms
            if user_agent is None:
                user_agent = f"{settings.app_name}/{settings.version}"

        self.timeout_ms = timeout_ms
        self.user_agent = user_agent
        self.logger = get_logger_for_component("source_fetcher")

        self.ssl_context = ssl.create_default_context(cafile=certifi.where())
        self._in_flight: Dict[str, asyncio.Task] = {}

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000

    @asynccontextmanager
    async def get_session(self):
        """Get configured aiohttp session."""
        connector = aiohttp.TCPConnector(ssl=self.ssl_context)
        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
        headers = {
            "User-Agent": self.user_agent,
            "Accept": "text/csv, text/plain, */*",
            "Cache-Control": "no-cache",
            "Pragma": "no-cache",
        }

        async with aiohttp.ClientSession(
            connector=connector, timeout=timeout, headers=headers
        ) as session:
            yield session

    async def fetch_source(self, url: str) -> str:
        """Fetch CSV text from a source, joining an in-flight fetch of the same URL.

        Args:
            url: Remote URL, ``file://`` URL or filesystem path

        Returns:
            Non-empty CSV text

        Raises:
            SourceError: On timeout, network failure, non-2xx status or empty body
        """
        task = self._in_flight.get(url)
        if task is None:
            task = asyncio.ensure_future(self._fetch(url))
            self._in_flight[url] = task
            task.add_done_callback(lambda done, key=url: self._release(key, done))
        else:
            self.logger.debug(f"Joining in-flight fetch for {url}")

        # shield: one cancelled waiter must not abort the shared request
        return await asyncio.shield(task)

    def _release(self, url: str, task: asyncio.Task) -> None:
        if self._in_flight.get(url) is task:
            del self._in_flight[url]

    @property
    def in_flight_count(self) -> int:
        return len(self._in_flight)

    async def _fetch(self, url: str) -> str:
        try:
            location = SourceValidator.validate_source_url(url)
        except ValidationError as e:
            raise SourceError(
                f"Invalid source URL: {url}",
                source_url=url,
                error_code=ErrorCode.SOURCE_INVALID_URL,
                recoverable=False,
            ) from e

        start_time = time.monotonic()

        if SourceValidator.is_remote(location):
            text = await self._fetch_remote(location)
        else:
            text = await self._read_local(location)

        if not text or not text.strip():
            raise SourceEmptyError("Empty CSV response", source_url=url)

        self.logger.info(
            f"Fetched {len(text)} chars from {location} "
            f"in {time.monotonic() - start_time:.2f}s"
        )
        return text

    async def _fetch_remote(self, url: str) -> str:
        self.logger.debug(f"Fetching remote source: {url}")
        try:
            async with self.get_session() as session:
                async with session.get(url) as response:
                    if not 200 <= response.status < 300:
                        raise SourceHTTPError(
                            f"HTTP error! status: {response.status}",
                            status=response.status,
                            source_url=url,
                        )
                    return await response.text()

        except SourceError:
            raise
        except asyncio.TimeoutError as e:
            raise SourceTimeoutError(
                f"Request timed out after {self.timeout_ms}ms", source_url=url
            ) from e
        except aiohttp.ClientError as e:
            raise SourceNetworkError(f"Fetch error: {e}", source_url=url) from e
        except UnicodeDecodeError as e:
            raise SourceNetworkError(f"Undecodable response body: {e}", source_url=url) from e

    async def _read_local(self, url: str) -> str:
        path = SourceValidator.local_path(url)
        self.logger.debug(f"Reading local source: {path}")
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(path.read_text, encoding="utf-8"),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            raise SourceTimeoutError(
                f"Reading {path} timed out after {self.timeout_ms}ms", source_url=url
            ) from e
        except (OSError, UnicodeDecodeError) as e:
            raise SourceNetworkError(f"Cannot read local source {path}: {e}", source_url=url) from e

"""
Retry support for source repositories.

The Manager never retries. Callers that want transient failures retried wrap
their source in RetryingSource, which applies exponential backoff with jitter
to transport/storage errors. Not-found results are never retried.
"""

from __future__ import annotations

import asyncio
import logging
import random

from pakman.core.errors import NotFoundError, RepositoryError
from pakman.models.pak import Manifest, Spec, SpecIndex
from pakman.repositories.base import SourceRepository

logger = logging.getLogger(__name__)


class ExponentialBackoff:
    """Implements exponential backoff with jitter for retry logic."""

    def __init__(self, base_delay: float = 1.0, max_delay: float = 60.0, max_retries: int = 3):
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.max_retries = max_retries

    def calculate_delay(self, attempt: int) -> float:
        """Calculate delay with exponential backoff and jitter."""
        delay = min(self.base_delay * (2**attempt), self.max_delay)
        # Add jitter (±25%)
        jitter = delay * 0.25 * (random.random() * 2 - 1)
        return max(0, delay + jitter)

    def should_retry(self, attempt: int) -> bool:
        """Check if should retry based on attempt count."""
        return attempt < self.max_retries


class RetryingSource:
    """Source decorator retrying RepositoryError with exponential backoff."""

    def __init__(self, source: SourceRepository, backoff: ExponentialBackoff | None = None):
        self.source = source
        self.backoff = backoff or ExponentialBackoff()

    def __repr__(self) -> str:
        return f"RetryingSource({self.source!r}, max_retries={self.backoff.max_retries})"

    async def _call(self, name: str, *args):
        attempt = 0
        while True:
            try:
                return await getattr(self.source, name)(*args)
            except NotFoundError:
                raise
            except RepositoryError as e:
                if not self.backoff.should_retry(attempt):
                    logger.debug(f"{name}{args} failed after {attempt + 1} attempts")
                    raise
                delay = self.backoff.calculate_delay(attempt)
                logger.warning(f"{name}{args} failed ({e}), retry {attempt + 1} after {delay:.1f}s")
                await asyncio.sleep(delay)
                attempt += 1

    async def get_spec(self, pak_id: str) -> Spec | None:
        return await self._call("get_spec", pak_id)

    async def list(self) -> SpecIndex:
        return await self._call("list")

    async def get_manifest(self, pak_id: str, version: str) -> Manifest | None:
        return await self._call("get_manifest", pak_id, version)

    async def get_file(self, pak_id: str, version: str, file: str) -> bytes:
        return await self._call("get_file", pak_id, version, file)

    async def aclose(self) -> None:
        close = getattr(self.source, "aclose", None)
        if close is not None:
            await close()

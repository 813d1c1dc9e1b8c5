"""
Caching source decorator.

Keeps a single snapshot of a source's index for a time-to-live. Manifests
and files are not cached.
"""

from __future__ import annotations

import copy
import logging
import time
from collections.abc import Callable

from pakman.models.pak import Manifest, Spec, SpecIndex
from pakman.repositories.base import SourceRepository

logger = logging.getLogger(__name__)


class CachingSource:
    """
    Wraps a source and serves list()/get_spec() from a cached index.

    On each read the snapshot is dropped if it is older than ttl seconds;
    without a snapshot the index is fetched and stored. A failed fetch leaves
    the cache empty, so the next call fetches again.
    """

    def __init__(
        self,
        source: SourceRepository,
        ttl: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.source = source
        self.ttl = ttl
        self.clock = clock
        self._index: SpecIndex | None = None
        self._fetched_at = 0.0

    def __repr__(self) -> str:
        return f"CachingSource({self.source!r}, ttl={self.ttl})"

    def invalidate(self) -> None:
        """Drop the cached index."""
        self._index = None

    def _check_expired(self) -> None:
        if self._index is None:
            return

        if self.clock() - self._fetched_at > self.ttl:
            logger.debug(f"Index cache expired for {self.source!r}")
            self._index = None

    async def _get_index(self) -> SpecIndex:
        self._check_expired()

        if self._index is not None:
            return self._index

        index = await self.source.list()
        self._index = index
        self._fetched_at = self.clock()
        return index

    async def list(self) -> SpecIndex:
        return copy.deepcopy(await self._get_index())

    async def get_spec(self, pak_id: str) -> Spec | None:
        spec = (await self._get_index()).get(pak_id)
        return copy.deepcopy(spec) if spec is not None else None

    async def get_manifest(self, pak_id: str, version: str) -> Manifest | None:
        # resolve the current version from the cached index
        if not version:
            spec = await self.get_spec(pak_id)
            if spec is None or not spec.current_version:
                return None
            version = spec.current_version

        return await self.source.get_manifest(pak_id, version)

    async def get_file(self, pak_id: str, version: str, file: str) -> bytes:
        return await self.source.get_file(pak_id, version, file)

    async def aclose(self) -> None:
        close = getattr(self.source, "aclose", None)
        if close is not None:
            await close()

"""Repository backends for pak sources and local stores."""

from pakman.repositories.base import SourceRepository, WritableRepository
from pakman.repositories.cache import CachingSource
from pakman.repositories.fs import FSRepository
from pakman.repositories.http import HTTPRepository
from pakman.repositories.memory import MemoryRepository


def is_remote_url(path: str) -> bool:
    return path.startswith("http://") or path.startswith("https://")


def get_source(remote_path: str, cache_ttl: float = 60.0, timeout: float = 30.0) -> SourceRepository:
    """
    Factory function to create a source repository for a path or URL.

    HTTP(S) URLs get an HTTPRepository behind an index cache; anything else is
    treated as a directory.
    """
    if is_remote_url(remote_path):
        return CachingSource(HTTPRepository(remote_path, timeout=timeout), ttl=cache_ttl)
    return FSRepository(remote_path)


__all__ = [
    "SourceRepository",
    "WritableRepository",
    "CachingSource",
    "FSRepository",
    "HTTPRepository",
    "MemoryRepository",
    "get_source",
]

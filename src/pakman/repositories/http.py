"""
HTTP Repository — read-only pak source served over HTTP(S).

Layout relative to base_url:
    index.yml                       # pak id -> spec
    <id>/<version>/manifest.yml
    <id>/<version>/<file>

For example, with base_url https://example.com/paks the manifest of version
"1.0.0" of pak "widget" is https://example.com/paks/widget/1.0.0/manifest.yml.

The index is fetched on every call; wrap the repository in CachingSource to
reuse it for a TTL.
"""

from __future__ import annotations

import logging
from urllib.parse import quote

import httpx

from pakman.codec.yaml_io import read_manifest, read_spec_index
from pakman.core.errors import PakFileNotFoundError, RepositoryError
from pakman.models.pak import Manifest, Spec, SpecIndex

logger = logging.getLogger(__name__)

INDEX_PATH = "index.yml"
MANIFEST_PATH = "manifest.yml"


class HTTPRepository:
    """
    Source repository backed by an httpx.AsyncClient.

    If no client is given, one is created and owned by the repository; close
    it with aclose() or by using the repository as an async context manager.
    """

    def __init__(
        self,
        base_url: str,
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ):
        self.base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout, connect=60.0),
            follow_redirects=True,
        )

    def __repr__(self) -> str:
        return f"HTTPRepository({self.base_url!r})"

    async def __aenter__(self) -> "HTTPRepository":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    # ──────────────────────────────────────────────
    # HTTP Layer
    # ──────────────────────────────────────────────

    def _url(self, *parts: str) -> str:
        return "/".join([self.base_url, *(quote(p) for p in parts)])

    async def _request(self, url: str) -> httpx.Response:
        """GET url; returns the response for 2xx and 404, raises otherwise."""
        try:
            resp = await self.client.get(url)
        except httpx.HTTPError as e:
            raise RepositoryError(f"failed to get remote file {url}: {e}") from e

        if resp.status_code == 404:
            return resp

        if resp.status_code >= 400:
            raise RepositoryError(
                f"failed to get remote file {url}: {resp.status_code} {resp.reason_phrase}"
            )

        logger.debug(f"GET {url} -> {resp.status_code} ({len(resp.content)} bytes)")
        return resp

    # ──────────────────────────────────────────────
    # Source
    # ──────────────────────────────────────────────

    async def _get_index(self) -> SpecIndex:
        url = self._url(INDEX_PATH)
        resp = await self._request(url)
        if resp.status_code == 404:
            raise RepositoryError(f"failed to get index file {url}: 404 Not Found")
        return read_spec_index(resp.content)

    async def get_spec(self, pak_id: str) -> Spec | None:
        return (await self._get_index()).get(pak_id)

    async def list(self) -> SpecIndex:
        return await self._get_index()

    async def get_manifest(self, pak_id: str, version: str) -> Manifest | None:
        if not version:
            spec = await self.get_spec(pak_id)
            if spec is None or not spec.current_version:
                return None
            version = spec.current_version

        resp = await self._request(self._url(pak_id, version, MANIFEST_PATH))
        if resp.status_code == 404:
            return None

        manifest = read_manifest(resp.content)
        if manifest.version != version:
            return None
        return manifest

    async def get_file(self, pak_id: str, version: str, file: str) -> bytes:
        # file names may contain sub directories
        url = self._url(pak_id, version, *file.split("/"))
        resp = await self._request(url)
        if resp.status_code == 404:
            raise PakFileNotFoundError(pak_id, version, file)
        return resp.content

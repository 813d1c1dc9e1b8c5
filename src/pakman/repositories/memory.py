"""
In-memory repository.

Implements both the source and the local store capabilities on plain dicts.
Used by the tests and by callers embedding pakman without a file system.
"""

from __future__ import annotations

import copy

from pakman.core.errors import PakFileNotFoundError
from pakman.models.pak import InstallSpec, Manifest, Spec, SpecIndex


class MemoryRepository:
    """
    Dict-backed repository.

    Source side:
        index:     pak id -> Spec
        manifests: InstallSpec(id, version) -> Manifest
        files:     (id, version, file) -> bytes

    Local side:
        installed: pak id -> Manifest (files are kept in files as well)
    """

    def __init__(self):
        self.index: SpecIndex = {}
        self.manifests: dict[InstallSpec, Manifest] = {}
        self.files: dict[tuple[str, str, str], bytes] = {}
        self.installed: dict[str, Manifest] = {}

    def add(self, spec: Spec, manifest: Manifest, contents: dict[str, bytes] | None = None) -> None:
        """Publish one version of a pak (spec entry, manifest and file contents)."""
        self.index[spec.id] = spec
        self.manifests[InstallSpec(manifest.id, manifest.version)] = manifest
        for name in manifest.files:
            data = (contents or {}).get(name, f"{manifest.id}@{manifest.version}:{name}".encode())
            self.files[(manifest.id, manifest.version, name)] = data

    # ──────────────────────────────────────────────
    # Source
    # ──────────────────────────────────────────────

    async def get_spec(self, pak_id: str) -> Spec | None:
        spec = self.index.get(pak_id)
        return copy.deepcopy(spec) if spec is not None else None

    async def list(self) -> SpecIndex:
        return copy.deepcopy(self.index)

    async def get_manifest(self, pak_id: str, version: str) -> Manifest | None:
        if not version:
            spec = self.index.get(pak_id)
            if spec is None:
                return None
            version = spec.current_version

        manifest = self.manifests.get(InstallSpec(pak_id, version))
        if manifest is None or manifest.version != version:
            return None
        return copy.deepcopy(manifest)

    async def get_file(self, pak_id: str, version: str, file: str) -> bytes:
        try:
            return self.files[(pak_id, version, file)]
        except KeyError:
            raise PakFileNotFoundError(pak_id, version, file) from None

    # ──────────────────────────────────────────────
    # Local store
    # ──────────────────────────────────────────────

    async def get_installed_manifest(self, pak_id: str) -> Manifest | None:
        manifest = self.installed.get(pak_id)
        return copy.deepcopy(manifest) if manifest is not None else None

    async def list_installed(self) -> list[Manifest]:
        return [copy.deepcopy(self.installed[k]) for k in sorted(self.installed)]

    async def write(self, pak_id: str, version: str, file: str, data: bytes) -> None:
        self.files[(pak_id, version, file)] = bytes(data)

    async def write_manifest(self, manifest: Manifest) -> None:
        self.installed[manifest.id] = copy.deepcopy(manifest)

    async def delete(self, pak_id: str) -> None:
        manifest = self.installed.pop(pak_id, None)
        if manifest is None:
            return

        for name in manifest.files:
            self.files.pop((pak_id, manifest.version, name), None)

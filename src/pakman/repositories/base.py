"""
Repository Protocols — capability interfaces for pak storage backends.

A source only needs the read capabilities; a local store only the write
ones. Adapters implement whichever set they support.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from pakman.models.pak import Manifest, Spec, SpecIndex


# ──────────────────────────────────────────────
# Source capabilities
# ──────────────────────────────────────────────


@runtime_checkable
class SpecGetter(Protocol):
    async def get_spec(self, pak_id: str) -> Spec | None:
        """Get the catalog entry for pak_id, or None if unknown."""
        ...

    async def list(self) -> SpecIndex:
        """Return every spec in the repository."""
        ...


@runtime_checkable
class ManifestGetter(Protocol):
    async def get_manifest(self, pak_id: str, version: str) -> Manifest | None:
        """
        Get the manifest for pak_id at version.

        An empty version means the latest version. Returns None if there is
        no such manifest, including when the stored manifest declares a
        different version than the one requested.
        """
        ...


@runtime_checkable
class FileGetter(Protocol):
    async def get_file(self, pak_id: str, version: str, file: str) -> bytes:
        """
        Get the content of one pak file.

        Raises PakFileNotFoundError if the file is absent and RepositoryError
        if it cannot be retrieved.
        """
        ...


@runtime_checkable
class SourceRepository(SpecGetter, ManifestGetter, FileGetter, Protocol):
    """Repository paks are installed from."""


# ──────────────────────────────────────────────
# Local store capabilities
# ──────────────────────────────────────────────


@runtime_checkable
class InstalledManifestGetter(Protocol):
    async def get_installed_manifest(self, pak_id: str) -> Manifest | None:
        """Get the installed manifest for pak_id, or None if not installed."""
        ...


@runtime_checkable
class InstalledLister(Protocol):
    async def list_installed(self) -> list[Manifest]:
        ...


@runtime_checkable
class FileWriter(Protocol):
    async def write(self, pak_id: str, version: str, file: str, data: bytes) -> None:
        """Store file content at (pak_id, version, file), replacing any existing."""
        ...


@runtime_checkable
class ManifestWriter(Protocol):
    async def write_manifest(self, manifest: Manifest) -> None:
        ...


@runtime_checkable
class Deleter(Protocol):
    async def delete(self, pak_id: str) -> None:
        """
        Remove the installed manifest and every file it lists.

        Does nothing if pak_id is not installed.
        """
        ...


@runtime_checkable
class WritableRepository(
    InstalledManifestGetter, InstalledLister, FileWriter, ManifestWriter, Deleter, Protocol
):
    """Repository paks are installed into."""

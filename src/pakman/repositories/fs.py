"""
File System Repository — paks stored in a directory tree.

Usable as a local store and as a source.

Local store layout:
    base_dir/
    └── <id>/
        ├── manifest          # installed manifest (YAML)
        └── <file>...         # files listed by the manifest

Source layout:
    base_dir/
    ├── index.yml             # pak id -> spec
    └── <id>/
        └── <version>/
            ├── manifest.yml
            └── <file>...
"""

from __future__ import annotations

import errno
import logging
from pathlib import Path

import aiofiles
import aiofiles.os

from pakman.codec.yaml_io import read_manifest, read_spec_index, write_manifest
from pakman.core.errors import PakFileNotFoundError, PakFormatError, RepositoryError
from pakman.models.pak import Manifest, Spec, SpecIndex

logger = logging.getLogger(__name__)

INDEX_PATH = "index.yml"
MANIFEST_PATH = "manifest"
REMOTE_MANIFEST_PATH = "manifest.yml"


class FSRepository:
    """Writable file system repository rooted at base_dir."""

    def __init__(self, base_dir: Path | str):
        self.base_dir = Path(base_dir)

    def __repr__(self) -> str:
        return f"FSRepository({str(self.base_dir)!r})"

    # ──────────────────────────────────────────────
    # Paths
    # ──────────────────────────────────────────────

    def _pak_dir(self, pak_id: str) -> Path:
        return self._within(self.base_dir, pak_id)

    def _manifest_path(self, pak_id: str) -> Path:
        return self._pak_dir(pak_id) / MANIFEST_PATH

    def _file_path(self, pak_id: str, file: str) -> Path:
        return self._within(self._pak_dir(pak_id), file)

    def _remote_dir(self, pak_id: str, version: str) -> Path:
        return self._within(self._pak_dir(pak_id), version)

    @staticmethod
    def _within(root: Path, name: str) -> Path:
        """Join name onto root, refusing names that escape root."""
        path = root / name
        resolved_root = root.resolve()
        resolved = path.resolve()
        if not name or resolved == resolved_root or resolved_root not in resolved.parents:
            raise RepositoryError(f"invalid path {name!r} under {root}")
        return path

    async def _read_bytes(self, path: Path) -> bytes:
        async with aiofiles.open(path, "rb") as f:
            return await f.read()

    async def _write_bytes(self, path: Path, data: bytes) -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise RepositoryError(f"failed to create directory {str(path.parent)!r}: {e}") from e

        try:
            async with aiofiles.open(path, "wb") as f:
                await f.write(data)
        except OSError as e:
            raise RepositoryError(f"failed to write file {str(path)!r}: {e}") from e

    # ──────────────────────────────────────────────
    # Local store
    # ──────────────────────────────────────────────

    async def get_installed_manifest(self, pak_id: str) -> Manifest | None:
        path = self._manifest_path(pak_id)
        try:
            content = await self._read_bytes(path)
        except FileNotFoundError:
            return None
        except OSError as e:
            raise RepositoryError(f"failed to read manifest {str(path)!r}: {e}") from e

        return read_manifest(content)

    async def list_installed(self) -> list[Manifest]:
        """Return every installed manifest, sorted by id."""
        if not self.base_dir.is_dir():
            return []

        installed = []
        try:
            candidates = sorted(self.base_dir.rglob(MANIFEST_PATH))
        except OSError as e:
            raise RepositoryError(f"failed to walk repository: {e}") from e

        for path in candidates:
            if not path.is_file():
                continue

            try:
                manifest = read_manifest(await self._read_bytes(path))
            except PakFormatError as e:
                logger.debug(f"Ignoring invalid manifest {path}: {e}")
                continue
            except OSError as e:
                raise RepositoryError(f"failed to read manifest {str(path)!r}: {e}") from e

            # only manifests in their own pak directory count
            try:
                if path != self._manifest_path(manifest.id):
                    continue
            except RepositoryError:
                continue

            installed.append(manifest)

        return sorted(installed, key=lambda m: m.id)

    async def write(self, pak_id: str, version: str, file: str, data: bytes) -> None:
        """Write file to <base_dir>/<id>/<file>."""
        await self._write_bytes(self._file_path(pak_id, file), data)

    async def write_manifest(self, manifest: Manifest) -> None:
        """Write manifest to <base_dir>/<id>/manifest."""
        content = write_manifest(manifest).encode("utf-8")
        await self._write_bytes(self._manifest_path(manifest.id), content)

    async def delete(self, pak_id: str) -> None:
        """
        Remove the manifest and the files it lists.

        Directories left empty by the removal are pruned, up to and including
        the pak directory. Other files in the pak directory are kept.
        """
        manifest = await self.get_installed_manifest(pak_id)
        if manifest is None:
            return

        pak_dir = self._pak_dir(pak_id)
        parents = set()
        for name in manifest.files:
            path = self._file_path(pak_id, name)
            try:
                await aiofiles.os.remove(path)
            except FileNotFoundError:
                logger.debug(f"File already removed: {path}")
            except OSError as e:
                raise RepositoryError(f"failed to remove file {str(path)!r}: {e}") from e
            parents.add(path.parent)

        try:
            await aiofiles.os.remove(self._manifest_path(pak_id))
        except OSError as e:
            raise RepositoryError(f"failed to remove manifest: {e}") from e

        # deepest first so nested directories empty out before their parents
        parents.add(pak_dir)
        for directory in sorted(parents, key=lambda p: len(p.parts), reverse=True):
            while directory != self.base_dir and pak_dir in (directory, *directory.parents):
                if not await self._remove_if_empty(directory):
                    break
                directory = directory.parent

    async def _remove_if_empty(self, directory: Path) -> bool:
        try:
            await aiofiles.os.rmdir(directory)
        except OSError as e:
            if e.errno not in (errno.ENOTEMPTY, errno.EEXIST, errno.ENOENT):
                logger.debug(f"Could not remove directory {directory}: {e}")
            return e.errno == errno.ENOENT
        return True

    # ──────────────────────────────────────────────
    # Source
    # ──────────────────────────────────────────────

    async def _get_index(self) -> SpecIndex:
        path = self.base_dir / INDEX_PATH
        try:
            content = await self._read_bytes(path)
        except OSError as e:
            raise RepositoryError(f"failed to get index file: {e}") from e

        return read_spec_index(content)

    async def get_spec(self, pak_id: str) -> Spec | None:
        return (await self._get_index()).get(pak_id)

    async def list(self) -> SpecIndex:
        return await self._get_index()

    async def get_manifest(self, pak_id: str, version: str) -> Manifest | None:
        """Read <base_dir>/<id>/<version>/manifest.yml; an empty version means the current one."""
        if not version:
            spec = await self.get_spec(pak_id)
            if spec is None or not spec.current_version:
                return None
            version = spec.current_version

        path = self._remote_dir(pak_id, version) / REMOTE_MANIFEST_PATH
        try:
            content = await self._read_bytes(path)
        except FileNotFoundError:
            return None
        except OSError as e:
            raise RepositoryError(f"failed to get manifest file: {e}") from e

        manifest = read_manifest(content)
        if manifest.version != version:
            logger.debug(
                f"Manifest {path} declares version {manifest.version!r}, expected {version!r}"
            )
            return None
        return manifest

    async def get_file(self, pak_id: str, version: str, file: str) -> bytes:
        path = self._within(self._remote_dir(pak_id, version), file)
        try:
            return await self._read_bytes(path)
        except (FileNotFoundError, IsADirectoryError):
            raise PakFileNotFoundError(pak_id, version, file) from None
        except OSError as e:
            raise RepositoryError(f"failed to get file: {e}") from e

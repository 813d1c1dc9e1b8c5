"""
Pak Manager — install, upgrade and uninstall orchestration.

Moves paks from a source repository into a local store:
- Version resolution against the source catalog
- No-op reinstall when the requested version is already installed
- Replace-on-change (old version removed before new files are written)
- Upgrade candidate detection

Batches are processed sequentially; the first failure aborts the batch.
There is no rollback: if a replace fails after the old version was removed,
the pak is left uninstalled and running install again recovers it.
"""

from __future__ import annotations

import logging

from pakman.core.errors import (
    InstallError,
    InvalidInstallSpecError,
    ManifestNotFoundError,
    OperationError,
    SpecNotFoundError,
    UninstallError,
    UpgradeError,
)
from pakman.models.pak import InstallSpec, Manifest, SpecIndex, UpgradableSpec
from pakman.repositories.base import SourceRepository, WritableRepository

default_logger = logging.getLogger(__name__)


class Manager:
    """
    Orchestrates pak installation from a source into a local store.

    Attributes:
        local: Store paks are installed into.
        remote: Source paks are installed from.
        logger: Logger for progress messages.
    """

    def __init__(
        self,
        local: WritableRepository,
        remote: SourceRepository,
        logger: logging.Logger | None = None,
    ):
        if local is None:
            raise ValueError("local repository is required")
        if remote is None:
            raise ValueError("remote repository is required")

        self.local = local
        self.remote = remote
        self.logger = logger or default_logger

    # ──────────────────────────────────────────────
    # Install
    # ──────────────────────────────────────────────

    async def install(self, *specs: InstallSpec) -> None:
        """
        Install the given paks.

        A pak that is already installed is replaced by the requested version,
        unless that version is already the installed one, in which case
        nothing changes.
        """
        for spec in specs:
            self.logger.info(f"Installing {spec}")
            try:
                await self._install(spec, upgrade=False)
            except Exception as e:
                raise InstallError(f"installing pak {spec}", spec.id, spec.version) from e

    async def _install(self, spec: InstallSpec, upgrade: bool) -> None:
        if not spec.id:
            raise InvalidInstallSpecError()

        pak_id = spec.id
        version = spec.version

        # check if pak already installed
        try:
            existing = await self.local.get_installed_manifest(pak_id)
        except Exception as e:
            raise OperationError("getting local pak manifest", pak_id) from e

        if not version:
            try:
                catalog_spec = await self.remote.get_spec(pak_id)
            except Exception as e:
                raise OperationError("getting spec", pak_id) from e

            if catalog_spec is None:
                raise SpecNotFoundError(pak_id)
            version = catalog_spec.current_version

        if existing is not None and existing.version == version:
            self.logger.debug(f"pak {pak_id}@{version} already installed")
            return

        if upgrade and existing is not None:
            self.logger.info(f"Upgrading {pak_id} from {existing.version} to {version}")
        elif upgrade:
            self.logger.info(f"Installing {pak_id}@{version} (not previously installed)")

        try:
            manifest = await self.remote.get_manifest(pak_id, version)
        except Exception as e:
            raise OperationError("getting remote pak manifest", pak_id, version) from e

        if manifest is None:
            raise ManifestNotFoundError(pak_id, version)

        if existing is not None:
            try:
                await self._uninstall(pak_id)
            except Exception as e:
                raise OperationError("uninstalling existing version", pak_id, existing.version) from e

        for file in manifest.files:
            await self._download_file(pak_id, version, file)

        try:
            await self.local.write_manifest(manifest)
        except Exception as e:
            raise OperationError("writing local pak manifest", pak_id, version) from e

    async def _download_file(self, pak_id: str, version: str, file: str) -> None:
        try:
            data = await self.remote.get_file(pak_id, version, file)
        except Exception as e:
            raise OperationError(f"downloading file {file!r}", pak_id, version, file) from e

        try:
            await self.local.write(pak_id, version, file, data)
        except Exception as e:
            raise OperationError(f"writing local pak file {file!r}", pak_id, version, file) from e

        self.logger.debug(f"Wrote {pak_id}@{version}/{file} ({len(data)} bytes)")

    # ──────────────────────────────────────────────
    # Uninstall
    # ──────────────────────────────────────────────

    async def uninstall(self, *pak_ids: str) -> None:
        """Uninstall the given paks. Paks that are not installed are skipped."""
        for pak_id in pak_ids:
            self.logger.info(f"Uninstalling {pak_id}")
            try:
                await self._uninstall(pak_id)
            except Exception as e:
                raise UninstallError(f"uninstalling pak {pak_id}", pak_id) from e

    async def _uninstall(self, pak_id: str) -> None:
        try:
            await self.local.delete(pak_id)
        except Exception as e:
            raise OperationError("deleting local pak", pak_id) from e

    # ──────────────────────────────────────────────
    # Upgrade
    # ──────────────────────────────────────────────

    async def upgrade(self, *specs: InstallSpec) -> None:
        """
        Upgrade the given paks to the version in each spec.

        With no specs, every installed pak is upgraded to the latest version.
        """
        if not specs:
            installed = await self.list_installed()
            specs = tuple(InstallSpec(m.id) for m in installed)

        for spec in specs:
            try:
                await self._install(spec, upgrade=True)
            except Exception as e:
                raise UpgradeError(f"upgrading pak {spec}", spec.id, spec.version) from e

    async def upgradable(self) -> list[UpgradableSpec]:
        """Return the installed paks whose source version differs from the installed one."""
        installed = await self.list_installed()

        upgradable = []
        for pak in installed:
            try:
                spec = await self.remote.get_spec(pak.id)
            except Exception as e:
                raise OperationError("getting latest version", pak.id, pak.version) from e

            if spec is None:
                self.logger.warning(f"Installed pak {pak.id} is not in the remote repository")
                continue

            if spec.current_version != pak.version:
                upgradable.append(
                    UpgradableSpec(
                        id=pak.id,
                        name=pak.name or spec.name,
                        description=spec.description,
                        current_version=pak.version,
                        updated=pak.date,
                        latest_version=spec.current_version,
                        last_updated=spec.updated,
                    )
                )

        return upgradable

    # ──────────────────────────────────────────────
    # Listing
    # ──────────────────────────────────────────────

    async def list(self) -> SpecIndex:
        """List all paks in the remote repository."""
        try:
            return await self.remote.list()
        except Exception as e:
            raise OperationError("listing remote paks") from e

    async def list_installed(self) -> list[Manifest]:
        """List all paks installed in the local repository."""
        try:
            return await self.local.list_installed()
        except Exception as e:
            raise OperationError("listing local paks") from e

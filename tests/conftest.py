"""Shared fixtures: an in-memory source with a few published paks."""

from datetime import datetime, timedelta, timezone

import pytest

from pakman.core.manager import Manager
from pakman.models.pak import Manifest, Spec
from pakman.repositories.memory import MemoryRepository

UTC = timezone.utc
RELEASED = datetime(2024, 3, 1, 12, 0, 0, tzinfo=UTC)


def publish(repo: MemoryRepository, pak_id: str, version: str, files: list[str], current: bool = True):
    """Add a version of a pak to a memory source, optionally making it current."""
    spec = repo.index.get(pak_id) or Spec(id=pak_id, name=pak_id.title(), description=f"The {pak_id} pak")
    if version not in spec.versions:
        spec.versions.append(version)
    if current:
        spec.current_version = version
        spec.updated = RELEASED + timedelta(days=len(spec.versions))
    manifest = Manifest(id=pak_id, name=spec.name, version=version, date=spec.updated, files=files)
    repo.add(spec, manifest)
    return manifest


class CountingSource:
    """Source wrapper recording every call made to it."""

    def __init__(self, source):
        self.source = source
        self.calls: list[tuple] = []

    async def get_spec(self, pak_id):
        self.calls.append(("get_spec", pak_id))
        return await self.source.get_spec(pak_id)

    async def list(self):
        self.calls.append(("list",))
        return await self.source.list()

    async def get_manifest(self, pak_id, version):
        self.calls.append(("get_manifest", pak_id, version))
        return await self.source.get_manifest(pak_id, version)

    async def get_file(self, pak_id, version, file):
        self.calls.append(("get_file", pak_id, version, file))
        return await self.source.get_file(pak_id, version, file)


@pytest.fixture
def source():
    repo = MemoryRepository()
    publish(repo, "widget", "1.0", ["bin/widget", "README", "old.txt"])
    publish(repo, "widget", "2.0", ["bin/widget", "README", "new.txt"])
    publish(repo, "gadget", "0.1", ["gadget.cfg"])
    return repo


@pytest.fixture
def local():
    return MemoryRepository()


@pytest.fixture
def counting(source):
    return CountingSource(source)


@pytest.fixture
def manager(local, counting):
    return Manager(local=local, remote=counting)

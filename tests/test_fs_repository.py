"""Tests for the file system repository, as a source and as a local store."""

from datetime import datetime, timezone

import pytest

from pakman.codec.yaml_io import write_manifest, write_spec_index
from pakman.core.errors import PakFileNotFoundError, RepositoryError
from pakman.core.manager import Manager
from pakman.models.pak import InstallSpec, Manifest, Spec
from pakman.repositories.fs import FSRepository

from conftest import RELEASED


def write_source(root, pak_id, version, files, declared_version=None):
    """Lay out one published version under root."""
    version_dir = root / pak_id / version
    for name in files:
        path = version_dir / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(f"{pak_id}@{version}:{name}".encode())
    manifest = Manifest(
        id=pak_id,
        name=pak_id.title(),
        version=declared_version or version,
        date=RELEASED,
        files=files,
    )
    version_dir.mkdir(parents=True, exist_ok=True)
    (version_dir / "manifest.yml").write_text(write_manifest(manifest))


@pytest.fixture
def source_dir(tmp_path):
    root = tmp_path / "source"
    root.mkdir()
    write_source(root, "widget", "1.9", ["bin/widget", "README"])
    write_source(root, "widget", "1.10", ["bin/widget", "share/doc/widget.txt"])
    write_source(root, "gadget", "0.1", ["gadget.cfg"], declared_version="0.2")
    index = {
        "widget": Spec(
            id="widget",
            name="Widget",
            current_version="1.10",
            updated=RELEASED,
            versions=["1.9", "1.10"],
        ),
        "gadget": Spec(id="gadget", name="Gadget", current_version="0.1", versions=["0.1"]),
    }
    (root / "index.yml").write_text(write_spec_index(index))
    return root


@pytest.fixture
def fs_source(source_dir):
    return FSRepository(source_dir)


@pytest.fixture
def fs_local(tmp_path):
    return FSRepository(tmp_path / "local")


# ═══════════════════════════════════════════
# Source
# ═══════════════════════════════════════════


class TestSource:
    @pytest.mark.asyncio
    async def test_list(self, fs_source):
        index = await fs_source.list()
        assert set(index) == {"widget", "gadget"}
        assert index["widget"].versions == ["1.9", "1.10"]

    @pytest.mark.asyncio
    async def test_get_spec(self, fs_source):
        assert (await fs_source.get_spec("widget")).current_version == "1.10"
        assert await fs_source.get_spec("missing") is None

    @pytest.mark.asyncio
    async def test_missing_index(self, tmp_path):
        with pytest.raises(RepositoryError):
            await FSRepository(tmp_path).list()

    @pytest.mark.asyncio
    async def test_get_manifest(self, fs_source):
        manifest = await fs_source.get_manifest("widget", "1.9")
        assert manifest.version == "1.9"
        assert manifest.files == ["bin/widget", "README"]

    @pytest.mark.asyncio
    async def test_empty_version_means_current(self, fs_source):
        manifest = await fs_source.get_manifest("widget", "")
        assert manifest.version == "1.10"

    @pytest.mark.asyncio
    async def test_unknown_version(self, fs_source):
        assert await fs_source.get_manifest("widget", "3.0") is None
        assert await fs_source.get_manifest("missing", "") is None

    @pytest.mark.asyncio
    async def test_version_mismatch_is_absent(self, fs_source):
        assert await fs_source.get_manifest("gadget", "0.1") is None

    @pytest.mark.asyncio
    async def test_get_file(self, fs_source):
        data = await fs_source.get_file("widget", "1.10", "share/doc/widget.txt")
        assert data == b"widget@1.10:share/doc/widget.txt"

    @pytest.mark.asyncio
    async def test_missing_file(self, fs_source):
        with pytest.raises(PakFileNotFoundError):
            await fs_source.get_file("widget", "1.10", "README")

    @pytest.mark.asyncio
    async def test_path_traversal_refused(self, fs_source):
        with pytest.raises(RepositoryError):
            await fs_source.get_file("widget", "1.10", "../../index.yml")


# ═══════════════════════════════════════════
# Local store
# ═══════════════════════════════════════════


class TestLocalStore:
    @pytest.mark.asyncio
    async def test_write_and_read_manifest(self, fs_local):
        manifest = Manifest(id="widget", version="1.10", date=RELEASED, files=["a"])
        await fs_local.write_manifest(manifest)

        assert (fs_local.base_dir / "widget" / "manifest").is_file()
        assert await fs_local.get_installed_manifest("widget") == manifest

    @pytest.mark.asyncio
    async def test_naive_date_reads_back(self, fs_local):
        await fs_local.write_manifest(
            Manifest(id="widget", version="1.0", date=datetime(2024, 3, 1, 12), files=["a"])
        )

        installed = await fs_local.list_installed()
        assert [(m.id, m.date) for m in installed] == [
            ("widget", datetime(2024, 3, 1, 12, tzinfo=timezone.utc))
        ]
        await fs_local.delete("widget")
        assert await fs_local.get_installed_manifest("widget") is None

    @pytest.mark.asyncio
    async def test_not_installed(self, fs_local):
        assert await fs_local.get_installed_manifest("widget") is None
        assert await fs_local.list_installed() == []

    @pytest.mark.asyncio
    async def test_write_creates_directories(self, fs_local):
        await fs_local.write("widget", "1.0", "bin/deep/widget", b"data")
        assert (fs_local.base_dir / "widget" / "bin" / "deep" / "widget").read_bytes() == b"data"

    @pytest.mark.asyncio
    async def test_write_refuses_escaping_names(self, fs_local):
        with pytest.raises(RepositoryError):
            await fs_local.write("widget", "1.0", "../outside", b"data")
        with pytest.raises(RepositoryError):
            await fs_local.write("..", "1.0", "outside", b"data")

    @pytest.mark.asyncio
    async def test_list_installed_sorted(self, fs_local):
        for pak_id in ("zeta", "alpha"):
            await fs_local.write_manifest(Manifest(id=pak_id, version="1"))
        assert [m.id for m in await fs_local.list_installed()] == ["alpha", "zeta"]

    @pytest.mark.asyncio
    async def test_list_installed_skips_stray_files(self, fs_local):
        await fs_local.write_manifest(Manifest(id="widget", version="1", files=["docs/manifest"]))
        # a pak file that happens to be named "manifest"
        await fs_local.write("widget", "1", "docs/manifest", b"not yaml: [")
        # a manifest whose id does not match its directory
        misplaced = fs_local.base_dir / "other" / "manifest"
        misplaced.parent.mkdir(parents=True)
        misplaced.write_text(write_manifest(Manifest(id="widget", version="2")))

        installed = await fs_local.list_installed()
        assert [(m.id, m.version) for m in installed] == [("widget", "1")]

    @pytest.mark.asyncio
    async def test_delete_removes_only_listed_files(self, fs_local):
        await fs_local.write("widget", "1", "bin/widget", b"x")
        await fs_local.write("widget", "1", "share/doc/readme", b"x")
        await fs_local.write("widget", "1", "user.conf", b"kept")
        await fs_local.write_manifest(
            Manifest(id="widget", version="1", files=["bin/widget", "share/doc/readme"])
        )

        await fs_local.delete("widget")

        pak_dir = fs_local.base_dir / "widget"
        assert not (pak_dir / "manifest").exists()
        assert not (pak_dir / "bin").exists()
        assert not (pak_dir / "share").exists()
        assert (pak_dir / "user.conf").read_bytes() == b"kept"
        assert await fs_local.get_installed_manifest("widget") is None

    @pytest.mark.asyncio
    async def test_delete_prunes_pak_directory(self, fs_local):
        await fs_local.write("widget", "1", "bin/widget", b"x")
        await fs_local.write_manifest(Manifest(id="widget", version="1", files=["bin/widget"]))

        await fs_local.delete("widget")

        assert not (fs_local.base_dir / "widget").exists()
        assert fs_local.base_dir.is_dir()

    @pytest.mark.asyncio
    async def test_delete_tolerates_missing_files(self, fs_local):
        await fs_local.write_manifest(Manifest(id="widget", version="1", files=["gone"]))
        await fs_local.delete("widget")
        assert await fs_local.get_installed_manifest("widget") is None

    @pytest.mark.asyncio
    async def test_delete_not_installed(self, fs_local):
        await fs_local.delete("widget")


# ═══════════════════════════════════════════
# Manager over directories
# ═══════════════════════════════════════════


class TestManagerOverFS:
    @pytest.mark.asyncio
    async def test_install_and_upgrade(self, fs_local, fs_source):
        manager = Manager(local=fs_local, remote=fs_source)
        pak_dir = fs_local.base_dir / "widget"

        await manager.install(InstallSpec("widget", "1.9"))
        assert (pak_dir / "README").read_bytes() == b"widget@1.9:README"

        upgradable = await manager.upgradable()
        assert [(u.id, u.current_version, u.latest_version) for u in upgradable] == [
            ("widget", "1.9", "1.10")
        ]

        await manager.upgrade()
        assert not (pak_dir / "README").exists()
        assert (pak_dir / "share" / "doc" / "widget.txt").is_file()
        assert (await fs_local.get_installed_manifest("widget")).version == "1.10"

    @pytest.mark.asyncio
    async def test_uninstall(self, fs_local, fs_source):
        manager = Manager(local=fs_local, remote=fs_source)
        await manager.install(InstallSpec("widget"))
        await manager.uninstall("widget")
        assert not (fs_local.base_dir / "widget").exists()

"""
Pak Data Model — catalog specs and installed manifests.

Defines the value types exchanged between the Manager and the repositories:
catalog entries (Spec), per-version file listings (Manifest) and install
requests (InstallSpec).
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone


TIME_FORMAT = "%Y-%m-%d %H:%M:%S %z"


def parse_time(value) -> datetime | None:
    """Parse a pak timestamp ('2006-01-02 15:04:05 -0700')."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    return datetime.strptime(str(value).strip(), TIME_FORMAT)


def format_time(value: datetime | None) -> str | None:
    """Format a timestamp in the pak file format. Naive values are taken as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.strftime(TIME_FORMAT)


@dataclass
class Spec:
    """
    Catalog entry for a pak.

    current_version is the version the source considers latest; it is
    expected to appear in versions.
    """

    id: str
    name: str = ""
    description: str = ""
    current_version: str = ""
    updated: datetime | None = None
    versions: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Serialize to a YAML-compatible dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "currentVersion": self.current_version,
            "updated": format_time(self.updated),
            "versions": list(self.versions),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Spec":
        """Deserialize from dictionary."""
        return cls(
            id=str(data["id"]),
            name=data.get("name") or "",
            description=data.get("description") or "",
            current_version=str(data.get("currentVersion") or ""),
            updated=parse_time(data.get("updated")),
            versions=[str(v) for v in data.get("versions") or []],
        )


# pak id -> Spec
SpecIndex = dict[str, Spec]


@dataclass
class UpgradableSpec(Spec):
    """
    An installed pak with a newer version available.

    current_version and updated describe the installed pak; latest_version
    and last_updated come from the source.
    """

    latest_version: str = ""
    last_updated: datetime | None = None

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["latestVersion"] = self.latest_version
        data["lastUpdated"] = format_time(self.last_updated)
        return data


@dataclass
class Manifest:
    """File listing for one version of a pak."""

    id: str
    name: str = ""
    version: str = ""
    date: datetime | None = None
    files: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Serialize to a YAML-compatible dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "version": self.version,
            "date": format_time(self.date),
            "files": list(self.files),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Manifest":
        """Deserialize from dictionary."""
        return cls(
            id=str(data["id"]),
            name=data.get("name") or "",
            version=str(data.get("version") or ""),
            date=parse_time(data.get("date")),
            files=[str(f) for f in data.get("files") or []],
        )


@dataclass(frozen=True)
class InstallSpec:
    """Request to install a pak. An empty version means the latest one."""

    id: str
    version: str = ""

    @classmethod
    def parse(cls, value: str) -> "InstallSpec":
        """Parse 'id' or 'id@version'."""
        pak_id, _, version = value.partition("@")
        return cls(id=pak_id, version=version)

    def __str__(self) -> str:
        return f"{self.id}@{self.version}" if self.version else self.id

"""
Pak error taxonomy.

Not-found conditions are kept apart from transport/storage failures so that
callers can tell "unknown package" from "network failure" even after the
Manager has wrapped the error with operation context.
"""

from __future__ import annotations


class PakError(Exception):
    """Base class for all pakman errors."""


class InvalidInstallSpecError(PakError):
    """Install request is malformed (e.g. empty id)."""

    def __init__(self, message: str = "invalid install spec"):
        super().__init__(message)


class NotFoundError(PakError):
    """A catalog entry, manifest or file does not exist."""


class SpecNotFoundError(NotFoundError):
    def __init__(self, pak_id: str):
        self.pak_id = pak_id
        super().__init__(f"pak {pak_id!r} not found")


class ManifestNotFoundError(NotFoundError):
    def __init__(self, pak_id: str, version: str):
        self.pak_id = pak_id
        self.version = version
        super().__init__(f"manifest not found for version {version}")


class PakFileNotFoundError(NotFoundError):
    def __init__(self, pak_id: str, version: str, file: str):
        self.pak_id = pak_id
        self.version = version
        self.file = file
        super().__init__(f"file {file!r} not found for {pak_id}@{version}")


class RepositoryError(PakError):
    """Transport or storage failure inside a repository adapter."""


class PakFormatError(PakError):
    """A pak document (index, manifest) could not be decoded."""


class OperationError(PakError):
    """
    Failure of a Manager step, carrying the operation context.

    The underlying error is attached as __cause__ (raise ... from err) and
    included in the message.
    """

    def __init__(
        self,
        message: str,
        pak_id: str | None = None,
        version: str | None = None,
        file: str | None = None,
    ):
        self.message = message
        self.pak_id = pak_id
        self.version = version
        self.file = file
        super().__init__(message)

    def __str__(self) -> str:
        if self.__cause__ is not None:
            return f"{self.message}: {self.__cause__}"
        return self.message

    @property
    def not_found(self) -> bool:
        """True if the failure was ultimately a not-found condition."""
        return find_cause(self, NotFoundError) is not None


class InstallError(OperationError):
    pass


class UninstallError(OperationError):
    pass


class UpgradeError(OperationError):
    pass


def find_cause(exc: BaseException | None, kind: type[BaseException]) -> BaseException | None:
    """Return the first exception of type kind in exc's __cause__ chain."""
    seen = set()
    while exc is not None and id(exc) not in seen:
        if isinstance(exc, kind):
            return exc
        seen.add(id(exc))
        exc = exc.__cause__
    return None

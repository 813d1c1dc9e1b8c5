"""
pakman - package manager for versioned file bundles ("paks").

Installs, upgrades and uninstalls paks from a source repository (a directory
or an HTTP server) into a local store, keeping a manifest of the files each
installed pak owns.
"""

__version__ = "1.0.0"


def __getattr__(name: str):
    """Lazy import for heavy dependencies."""
    if name == "Manager":
        from pakman.core.manager import Manager

        return Manager
    if name in ("InstallSpec", "Manifest", "Spec", "UpgradableSpec"):
        from pakman.models import pak

        return getattr(pak, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ["Manager", "InstallSpec", "Manifest", "Spec", "UpgradableSpec", "__version__"]

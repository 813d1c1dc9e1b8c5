"""Deterministic ordering and search over a spec index."""

from pakman.models.pak import Spec, SpecIndex


def _sort_key(pak_id: str) -> tuple[str, str]:
    # case-insensitive first, byte order breaks ties ("Apple" < "apple")
    return (pak_id.lower(), pak_id)


def sorted_ids(index: SpecIndex) -> list[str]:
    """Return the index keys sorted case-insensitively."""
    return sorted(index, key=_sort_key)


def sorted_specs(index: SpecIndex) -> list[Spec]:
    return [index[k] for k in sorted_ids(index)]


def search(index: SpecIndex, query: str) -> list[Spec]:
    """Return the specs whose id contains query, ignoring case, in sorted order."""
    needle = query.lower()
    return [index[k] for k in sorted_ids(index) if needle in k.lower()]

"""
YAML encoding for pak documents.

Index and manifest files are plain YAML. Scalars are kept as strings
(version "1.10" must not become the float 1.1), so a loader without the
implicit int/float/bool/timestamp resolvers is used.
"""

import yaml

from pakman.core.errors import PakFormatError
from pakman.models.pak import Manifest, Spec, SpecIndex


class _PakLoader(yaml.SafeLoader):
    """SafeLoader that only resolves null implicitly."""


_PakLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag == "tag:yaml.org,2002:null"]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def _read(content: bytes | str):
    try:
        return yaml.load(content, Loader=_PakLoader)
    except yaml.YAMLError as e:
        raise PakFormatError(f"failed to decode yaml: {e}") from e


def _expect_mapping(data, what: str) -> dict:
    if not isinstance(data, dict):
        raise PakFormatError(f"failed to decode {what}: expected a mapping")
    return data


def read_manifest(content: bytes | str) -> Manifest:
    """Decode a manifest document."""
    data = _expect_mapping(_read(content), "manifest")
    try:
        return Manifest.from_dict(data)
    except (KeyError, ValueError) as e:
        raise PakFormatError(f"failed to decode manifest: {e}") from e


def read_spec_index(content: bytes | str) -> SpecIndex:
    """
    Decode an index document: a mapping of pak id to spec.

    An empty document is an empty index. A spec without an id takes the id
    of its key.
    """
    data = _read(content)
    if data is None:
        return {}
    data = _expect_mapping(data, "index")

    index: SpecIndex = {}
    for key, value in data.items():
        entry = dict(_expect_mapping(value, f"index entry {key!r}"))
        entry.setdefault("id", key)
        try:
            index[str(key)] = Spec.from_dict(entry)
        except (KeyError, ValueError) as e:
            raise PakFormatError(f"failed to decode index entry {key!r}: {e}") from e
    return index


def write_manifest(manifest: Manifest) -> str:
    """Encode a manifest document."""
    return yaml.safe_dump(manifest.to_dict(), default_flow_style=False, sort_keys=False)


def write_spec_index(index: SpecIndex) -> str:
    """Encode an index document."""
    data = {pak_id: spec.to_dict() for pak_id, spec in index.items()}
    return yaml.safe_dump(data, default_flow_style=False, sort_keys=False)

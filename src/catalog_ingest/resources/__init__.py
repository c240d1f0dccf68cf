"""Packaged data files."""

from __future__ import annotations

from importlib import resources

DEFAULT_MAPPING_RESOURCE = "default_mapping.yaml"


def default_mapping_yaml() -> str:
    """Return the mapping installed for newly set up integrations."""

    return resources.files(__name__).joinpath(DEFAULT_MAPPING_RESOURCE).read_text("utf-8")

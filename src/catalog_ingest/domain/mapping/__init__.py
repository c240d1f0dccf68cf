"""Declarative mapping of provider payloads onto catalog entities."""

from __future__ import annotations

from .engine import MappingEngine
from .loader import parse_mapping_configuration
from .query import QueryEvaluator, is_always_true
from .rules import (
    REMOTE_FILE_SCHEME,
    ExpressionMapping,
    MappingConfiguration,
    PropertyMapping,
    RemoteFileMapping,
    ResourceRule,
)

__all__ = [
    "REMOTE_FILE_SCHEME",
    "ExpressionMapping",
    "MappingConfiguration",
    "MappingEngine",
    "PropertyMapping",
    "QueryEvaluator",
    "RemoteFileMapping",
    "ResourceRule",
    "is_always_true",
    "parse_mapping_configuration",
]

"""Validated mapping-rule structures.

A mapping configuration is an ordered list of resource rules. Each rule binds a
resource kind and an optional selector to the expressions that build one
canonical entity. Property mappings are a tagged union: an expression evaluated
against the payload, or a remote file whose content becomes the value.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Final

REMOTE_FILE_SCHEME: Final[str] = "file://"
ALWAYS_TRUE: Final[str] = "true"


@dataclass(slots=True, frozen=True)
class ExpressionMapping:
    expression: str


@dataclass(slots=True, frozen=True)
class RemoteFileMapping:
    path: str

    @property
    def raw(self) -> str:
        return f"{REMOTE_FILE_SCHEME}{self.path}"


type PropertyMapping = ExpressionMapping | RemoteFileMapping


def property_mapping(value: str) -> PropertyMapping:
    """Classify a configured property value by its prefix."""

    if value.startswith(REMOTE_FILE_SCHEME):
        return RemoteFileMapping(path=value.removeprefix(REMOTE_FILE_SCHEME))
    return ExpressionMapping(expression=value)


@dataclass(slots=True, frozen=True)
class ResourceRule:
    kind: str
    identifier: str | None = None
    title: str | None = None
    blueprint: str | None = None
    selector_query: str | None = None
    properties: tuple[tuple[str, PropertyMapping], ...] = field(default_factory=tuple)
    relations: tuple[tuple[str, str], ...] = field(default_factory=tuple)

    def applies_to(self, kind: str) -> bool:
        return self.kind == kind


@dataclass(slots=True, frozen=True)
class MappingConfiguration:
    resources: tuple[ResourceRule, ...] = field(default_factory=tuple)

    def rules_for(self, kind: str) -> tuple[ResourceRule, ...]:
        return tuple(rule for rule in self.resources if rule.applies_to(kind))

    @property
    def kinds(self) -> frozenset[str]:
        return frozenset(rule.kind for rule in self.resources)

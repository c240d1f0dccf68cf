"""Parse-and-validate step turning mapping YAML into ``MappingConfiguration``."""

from __future__ import annotations

from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from catalog_ingest.domain.errors import MappingConfigurationError

from .rules import MappingConfiguration, ResourceRule, property_mapping


def _expression_text(value: Any) -> Any:
    # YAML turns unquoted `true` or `42` into scalars; the expression is their text
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int | float):
        return str(value)
    return value


class _MappingModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class _Selector(_MappingModel):
    query: str | None = None

    @field_validator("query", mode="before")
    @classmethod
    def _coerce_query(cls, value: Any) -> Any:
        return _expression_text(value)


class _EntityMappings(_MappingModel):
    identifier: str | None = None
    title: str | None = None
    blueprint: str | None = None
    properties: dict[str, str] = Field(default_factory=dict)
    relations: dict[str, str] = Field(default_factory=dict)

    @field_validator("identifier", "title", "blueprint", mode="before")
    @classmethod
    def _coerce_scalar(cls, value: Any) -> Any:
        return _expression_text(value)

    @field_validator("properties", "relations", mode="before")
    @classmethod
    def _coerce_entries(cls, value: Any) -> Any:
        if value is None:
            return {}
        if isinstance(value, dict):
            return {key: _expression_text(entry) for key, entry in value.items()}
        return value


class _Entity(_MappingModel):
    mappings: _EntityMappings


class _Port(_MappingModel):
    entity: _Entity


class _Resource(_MappingModel):
    kind: str = Field(min_length=1)
    selector: _Selector | None = None
    port: _Port

    def to_rule(self) -> ResourceRule:
        mappings = self.port.entity.mappings
        return ResourceRule(
            kind=self.kind,
            identifier=mappings.identifier,
            title=mappings.title,
            blueprint=mappings.blueprint,
            selector_query=self.selector.query if self.selector else None,
            properties=tuple(
                (name, property_mapping(value)) for name, value in mappings.properties.items()
            ),
            relations=tuple(mappings.relations.items()),
        )


class _Document(_MappingModel):
    resources: list[_Resource]


def parse_mapping_configuration(text: str) -> MappingConfiguration:
    """Parse a mapping YAML document, rejecting malformed rules up front."""

    try:
        document = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise MappingConfigurationError(f"Invalid mapping configuration: {exc}") from exc

    if not isinstance(document, dict) or not isinstance(document.get("resources"), list):
        raise MappingConfigurationError("Invalid mapping configuration: missing resources array")

    try:
        parsed = _Document.model_validate(document)
    except ValidationError as exc:
        raise MappingConfigurationError(f"Invalid mapping configuration: {exc}") from exc

    return MappingConfiguration(
        resources=tuple(resource.to_rule() for resource in parsed.resources)
    )

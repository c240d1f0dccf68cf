"""Apply mapping rules to provider payloads."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from catalog_ingest.domain.errors import ExpressionError
from catalog_ingest.domain.model import CanonicalEntity

from .loader import parse_mapping_configuration
from .query import QueryEvaluator, is_always_true
from .rules import MappingConfiguration, RemoteFileMapping

if TYPE_CHECKING:
    from catalog_ingest.domain.model import JSONValue
    from catalog_ingest.domain.ports.content import RemoteContentResolver

    from .rules import ResourceRule

log = getLogger(__name__)


class MappingEngine:
    """Turns one payload into zero or more canonical entities.

    Only rules of the requested kind are considered. A rule whose selector
    errors counts as not matching, and a rule whose field mapping errors is
    dropped; neither affects sibling rules.
    """

    def __init__(
        self,
        *,
        evaluator: QueryEvaluator | None = None,
        content_resolver: RemoteContentResolver | None = None,
    ) -> None:
        self._evaluator = evaluator or QueryEvaluator()
        self._content_resolver = content_resolver

    async def transform(
        self,
        payload: JSONValue,
        kind: str,
        config: MappingConfiguration | str,
        installation_id: str | None = None,
    ) -> list[CanonicalEntity]:
        configuration = (
            parse_mapping_configuration(config) if isinstance(config, str) else config
        )
        results: list[CanonicalEntity] = []

        for rule in configuration.rules_for(kind):
            if not self._selects(rule, payload):
                continue
            try:
                entity = await self._map_rule(rule, payload, installation_id)
            except Exception:
                log.exception("Mapping failed for kind %s", rule.kind)
                continue
            results.append(entity)

        return results

    def _selects(self, rule: ResourceRule, payload: JSONValue) -> bool:
        query = rule.selector_query
        if query is None or is_always_true(query):
            return True
        try:
            return self._evaluator.matches(query, payload)
        except ExpressionError as exc:
            log.warning("Selector query failed for kind %s: %s", rule.kind, exc)
            return False

    async def _map_rule(
        self,
        rule: ResourceRule,
        payload: JSONValue,
        installation_id: str | None,
    ) -> CanonicalEntity:
        evaluate = self._evaluator.evaluate
        blueprint = (
            _identity_text(rule.blueprint, evaluate(rule.blueprint, payload))
            if rule.blueprint
            else rule.kind
        )
        identifier = (
            _identity_text(rule.identifier, evaluate(rule.identifier, payload))
            if rule.identifier
            else ""
        )
        title = _identity_text(rule.title, evaluate(rule.title, payload)) if rule.title else ""

        properties: dict[str, JSONValue] = {}
        for name, mapping in rule.properties:
            if isinstance(mapping, RemoteFileMapping):
                properties[name] = await self._fetch_content(mapping.path, payload, installation_id)
            else:
                properties[name] = evaluate(mapping.expression, payload)

        relations: dict[str, JSONValue] = {
            name: evaluate(expression, payload) for name, expression in rule.relations
        }

        return CanonicalEntity(
            identifier=identifier,
            title=title,
            blueprint_id=blueprint,
            properties=properties,
            relations=relations,
        )

    async def _fetch_content(
        self,
        path: str,
        payload: JSONValue,
        installation_id: str | None,
    ) -> str | None:
        if self._content_resolver is None:
            log.warning("Cannot fetch file://%s: no remote content resolver configured", path)
            return None
        return await self._content_resolver.fetch(path, payload, installation_id)


def _identity_text(expression: str, value: JSONValue) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int | float):
        return str(value)
    raise ExpressionError(
        f"Expression {expression!r} must yield a scalar, got {type(value).__name__}",
        expression=expression,
    )

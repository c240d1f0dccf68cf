from __future__ import annotations

import asyncio

import pytest

from catalog_ingest.domain.errors import MappingConfigurationError
from catalog_ingest.domain.mapping import MappingEngine, parse_mapping_configuration
from catalog_ingest.resources import default_mapping_yaml
from tests.helpers.ingest import StaticContentResolver

PAYLOAD = {"repository": {"name": "svc-demo", "language": "TS"}}
README_PROPERTIES = "          properties:\n            readme: file://README.md\n"


def _mapping(selector: str | None, *, properties: str = "") -> str:
    selector_block = f"    selector:\n      query: '{selector}'\n" if selector is not None else ""
    return (
        "resources:\n"
        "  - kind: repository\n"
        f"{selector_block}"
        "    port:\n"
        "      entity:\n"
        "        mappings:\n"
        "          identifier: .repository.name\n"
        "          title: .repository.name\n"
        "          blueprint: '\"service\"'\n"
        f"{properties}"
    )


def _transform(engine: MappingEngine, payload: object, kind: str, config: str, **kwargs: object):
    return asyncio.run(engine.transform(payload, kind, config, **kwargs))  # type: ignore[arg-type]


def test_true_selector_maps_one_entity() -> None:
    entities = _transform(MappingEngine(), PAYLOAD, "repository", _mapping("true"))

    assert len(entities) == 1
    entity = entities[0]
    assert entity.identifier == "svc-demo"
    assert entity.title == "svc-demo"
    assert entity.blueprint_id == "service"


def test_non_matching_selector_yields_nothing() -> None:
    config = _mapping('.repository.name | startswith("service")')

    assert _transform(MappingEngine(), PAYLOAD, "repository", config) == []


def test_missing_selector_matches() -> None:
    entities = _transform(MappingEngine(), PAYLOAD, "repository", _mapping(None))

    assert [entity.identifier for entity in entities] == ["svc-demo"]


def test_remote_file_without_installation_is_none() -> None:
    config = _mapping("true", properties=README_PROPERTIES)
    resolver = StaticContentResolver({"README.md": "# Demo"})

    entities = _transform(MappingEngine(content_resolver=resolver), PAYLOAD, "repository", config)

    assert entities[0].properties == {"readme": None}


def test_remote_file_is_resolved_with_installation() -> None:
    config = _mapping("true", properties=README_PROPERTIES)
    resolver = StaticContentResolver({"README.md": "# Demo"})

    entities = _transform(
        MappingEngine(content_resolver=resolver),
        PAYLOAD,
        "repository",
        config,
        installation_id="42",
    )

    assert entities[0].properties == {"readme": "# Demo"}
    assert resolver.requests == [("README.md", "42")]


def test_remote_file_without_resolver_is_none() -> None:
    config = _mapping("true", properties=README_PROPERTIES)

    entities = _transform(MappingEngine(), PAYLOAD, "repository", config, installation_id="42")

    assert entities[0].properties == {"readme": None}


def test_literal_true_selector_equals_evaluated_truthy_selector() -> None:
    engine = MappingEngine()

    fast = _transform(engine, PAYLOAD, "repository", _mapping("true"))
    evaluated = _transform(engine, PAYLOAD, "repository", _mapping(".repository.name != null"))

    assert fast == evaluated


def test_only_rules_of_requested_kind_apply() -> None:
    assert _transform(MappingEngine(), PAYLOAD, "pull-request", _mapping("true")) == []


def test_blueprint_defaults_to_kind() -> None:
    config = """
resources:
  - kind: repository
    port:
      entity:
        mappings:
          identifier: .name
          title: .name
"""
    entities = _transform(MappingEngine(), {"name": "api"}, "repository", config)

    assert entities[0].blueprint_id == "repository"


def test_failing_rule_does_not_affect_siblings() -> None:
    config = """
resources:
  - kind: repository
    selector:
      query: .name.first
    port:
      entity:
        mappings:
          identifier: .name
  - kind: repository
    port:
      entity:
        mappings:
          identifier: .owner.login
          title: .name
  - kind: repository
    port:
      entity:
        mappings:
          identifier: .name
          title: .name
          blueprint: '"service"'
          properties:
            topics: .topics
          relations:
            owner: .owner.login
"""
    payload = {"name": "api", "owner": "not-an-object", "topics": ["go"]}

    entities = _transform(MappingEngine(), payload, "repository", config)

    assert len(entities) == 1
    assert entities[0].identifier == "api"
    assert entities[0].properties == {"topics": ["go"]}


def test_container_identity_drops_rule() -> None:
    config = """
resources:
  - kind: repository
    port:
      entity:
        mappings:
          identifier: .topics
          title: .name
"""
    payload = {"name": "api", "topics": ["a", "b"]}

    assert _transform(MappingEngine(), payload, "repository", config) == []


def test_numeric_identity_is_stringified() -> None:
    config = """
resources:
  - kind: issue
    port:
      entity:
        mappings:
          identifier: .id
          title: .title
"""
    entities = _transform(MappingEngine(), {"id": 1001, "title": "Bug"}, "issue", config)

    assert entities[0].identifier == "1001"


def test_malformed_text_config_raises() -> None:
    with pytest.raises(MappingConfigurationError):
        _transform(MappingEngine(), PAYLOAD, "repository", "resources: 3")


def test_transform_is_idempotent() -> None:
    engine = MappingEngine()
    config = parse_mapping_configuration(default_mapping_yaml())
    payload = {
        "id": 5,
        "number": 12,
        "title": "Add feature",
        "state": "open",
        "user": {"login": "ana"},
        "assignees": [{"login": "bo"}],
        "head": {"repo": {"name": "api"}},
    }

    first = _transform(engine, payload, "pull-request", config)
    second = _transform(engine, payload, "pull-request", config)

    assert first == second
    assert first[0].identifier == "api5"
    assert first[0].properties["assignees"] == ["bo"]
    assert first[0].properties["reviewers"] == []
    assert first[0].relations == {"service": "api"}


def test_default_pull_request_mapping_reads_webhook_envelope() -> None:
    envelope = {
        "action": "opened",
        "pull_request": {
            "id": 5,
            "number": 12,
            "title": "Add feature",
            "head": {"repo": {"name": "api"}},
        },
        "repository": {"name": "api"},
    }

    entities = _transform(MappingEngine(), envelope, "pull-request", default_mapping_yaml())

    assert [(entity.identifier, entity.title) for entity in entities] == [("api5", "Add feature")]

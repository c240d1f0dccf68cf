from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest

from catalog_ingest.adapters.sqlalchemy import create_database_engine, shutdown, startup

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlalchemy.engine import Engine


REPOSITORY_MAPPING = """\
resources:
  - kind: repository
    selector:
      query: 'true'
    port:
      entity:
        mappings:
          identifier: .name
          title: .name
          blueprint: '"service"'
          properties:
            url: .html_url
            language: .language
"""

ISSUE_MAPPING = """\
  - kind: issue
    port:
      entity:
        mappings:
          identifier: .repository_url + "#" + (.number|tostring)
          title: .title
          blueprint: '"githubIssue"'
          properties:
            state: .state
"""


@pytest.fixture
def repository_mapping() -> str:
    return REPOSITORY_MAPPING


@pytest.fixture
def repository_and_issue_mapping() -> str:
    return REPOSITORY_MAPPING + ISSUE_MAPPING


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_database_engine("sqlite+pysqlite:///:memory:")
    startup(engine=engine, force=True)
    try:
        yield engine
    finally:
        shutdown()

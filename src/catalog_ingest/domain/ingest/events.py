"""Classification of provider webhook events into resource kinds."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from catalog_ingest.domain.model import JSONValue

PING_EVENT: Final[str] = "ping"

EVENT_KINDS: Final[dict[str, str]] = {
    # repositories
    "push": "repository",
    "repository": "repository",
    "create": "repository",
    # pull requests
    "pull_request": "pull-request",
    "pull_request_review": "pull-request",
    "pull_request_review_comment": "pull-request",
    # issues
    "issues": "issue",
    "issue_comment": "issue",
    # workflows
    "workflow_run": "workflow-run",
    "workflow_job": "workflow-job",
    "workflow_dispatch": "workflow",
    # deployments
    "deployment": "deployment",
    "deployment_status": "deployment",
    # security
    "dependabot_alert": "dependabot-alert",
    "code_scanning_alert": "code-scanning",
    "secret_scanning_alert": "code-scanning",
    # teams and users
    "team": "team",
    "team_add": "team",
    "membership": "team",
    "member": "user",
    "release": "releases",
    "branch_protection_rule": "branches",
}

PULL_REQUEST_EVENTS: Final[frozenset[str]] = frozenset(
    event for event, kind in EVENT_KINDS.items() if kind == "pull-request"
)


def classify_event(event_type: str) -> str | None:
    """Return the resource kind of ``event_type``, or ``None`` when unsupported."""

    return EVENT_KINDS.get(event_type)


def select_payload(event_type: str, envelope: JSONValue) -> JSONValue:
    """Pick the part of a webhook body the mapping engine sees.

    Pull-request events keep the whole envelope; other events carrying a
    ``repository`` object are reduced to it.
    """

    if event_type in PULL_REQUEST_EVENTS:
        return envelope
    if isinstance(envelope, dict):
        repository = envelope.get("repository")
        if isinstance(repository, dict):
            return repository
    return envelope


def installation_id_of(envelope: JSONValue) -> str | None:
    if not isinstance(envelope, dict):
        return None
    installation = envelope.get("installation")
    if not isinstance(installation, dict):
        return None
    value = installation.get("id")
    if value is None or isinstance(value, bool):
        return None
    return str(value)

"""Port for resolving remote file content referenced by mappings."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from catalog_ingest.domain.model import JSONValue


@runtime_checkable
class RemoteContentResolver(Protocol):
    """Fetch one file's decoded content; ``None`` when unavailable. Never raises."""

    async def fetch(
        self,
        path: str,
        payload: JSONValue,
        installation_id: str | None,
    ) -> str | None: ...

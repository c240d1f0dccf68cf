"""HTTP surface of the ingestion service."""

from __future__ import annotations

from .server import create_app

__all__ = ["create_app"]

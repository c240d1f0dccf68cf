"""Error taxonomy of the ingestion pipeline.

The finer the unit of work an error belongs to (one rule, one entity, one
collection of one repository), the closer to it the error is caught.
"""

from __future__ import annotations


class IngestError(RuntimeError):
    """Base class for ingestion pipeline failures."""


class MappingConfigurationError(IngestError, ValueError):
    """Raised when a mapping configuration document is malformed.

    Fatal to the transform call that received it.
    """


class ExpressionError(IngestError, ValueError):
    """Raised when a mapping expression cannot be compiled or evaluated."""

    def __init__(self, message: str, *, expression: str) -> None:
        super().__init__(message)
        self.expression = expression


class EntityValidationError(IngestError, ValueError):
    """Raised when a mapped entity lacks one of its identity fields."""


class RemoteFetchError(IngestError):
    """Raised when the provider API cannot deliver a requested resource."""


class SinkError(IngestError):
    """Raised when the entity sink fails to persist one entity."""


class SignatureError(IngestError):
    """Raised when a webhook delivery fails authenticity verification."""

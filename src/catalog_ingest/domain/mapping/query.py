"""Evaluate JQ expressions against JSON payloads."""

from __future__ import annotations

from functools import lru_cache
from typing import TYPE_CHECKING

import jq

from catalog_ingest.domain.errors import ExpressionError

from .rules import ALWAYS_TRUE

if TYPE_CHECKING:
    from catalog_ingest.domain.model.types import JSONValue


@lru_cache(maxsize=512)
def _compile(expression: str) -> jq._Program:  # pyright: ignore[reportPrivateUsage]
    return jq.compile(expression)


def is_always_true(expression: str) -> bool:
    """Return whether ``expression`` is the bare ``true`` fast path."""

    return expression.strip() == ALWAYS_TRUE


class QueryEvaluator:
    """Evaluates one JQ expression against one JSON value.

    The result is ``None`` when the program emits nothing, the single output
    when it emits one value, and the list of outputs otherwise. Missing object
    keys evaluate to ``None``; type errors such as indexing a string raise
    ``ExpressionError``.
    """

    def evaluate(self, expression: str, value: JSONValue) -> JSONValue:
        try:
            program = _compile(expression)
        except ValueError as exc:
            raise ExpressionError(
                f"Invalid expression {expression!r}: {exc}", expression=expression
            ) from exc

        try:
            outputs: list[JSONValue] = program.input_value(value).all()
        except (ValueError, TypeError) as exc:
            raise ExpressionError(
                f"Evaluation of {expression!r} failed: {exc}", expression=expression
            ) from exc

        if not outputs:
            return None
        if len(outputs) == 1:
            return outputs[0]
        return outputs

    def matches(self, expression: str, value: JSONValue) -> bool:
        """Evaluate a selector; empty and falsy results do not match."""

        if is_always_true(expression):
            return True
        return bool(self.evaluate(expression, value))

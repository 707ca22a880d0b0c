"""Translate caller input into a SearchQuery."""

from __future__ import annotations

import math
from collections.abc import Iterable

from . import FieldKind, IndexSchema, NumericFilter, SearchQuery
from .errors import InvalidQueryError

# Bound value callers pass to mean "not supplied".
UNSET = -1.0


def _is_set(bound: float | None) -> bool:
    return bound is not None and bound != UNSET


class QueryBuilder:
    """Builds queries against one index schema.

    The raw query string is handed to the engine untouched: no escaping or
    sanitizing happens here, so untrusted input must be validated upstream.
    """

    def __init__(self, schema: IndexSchema, numeric_field: str = "price") -> None:
        spec = schema.get(numeric_field)
        if spec is None or spec.kind is not FieldKind.NUMERIC:
            raise InvalidQueryError(f"{numeric_field!r} is not a NUMERIC field of the schema")
        self._schema = schema
        self._numeric_field = numeric_field

    def build(
        self,
        raw: str,
        min_price: float | None = None,
        max_price: float | None = None,
        return_fields: Iterable[str] = (),
        limit: int | None = None,
        offset: int | None = None,
    ) -> SearchQuery:
        """Build a SearchQuery.

        A numeric filter is attached only when both bounds are set. A single
        bound means no filter at all, not a half-open range.

        Raises:
            InvalidQueryError: a bound is NaN, min_price > max_price, a return
                field is not indexed, or limit/offset is negative.
        """
        fields = tuple(dict.fromkeys(return_fields))
        unknown = [name for name in fields if self._schema.get(name) is None]
        if unknown:
            raise InvalidQueryError(f"Return fields not in the index schema: {', '.join(unknown)}")

        for bound in (min_price, max_price):
            if bound is not None and math.isnan(bound):
                raise InvalidQueryError("Price bounds must be numbers, got NaN")

        numeric_filter = None
        if _is_set(min_price) and _is_set(max_price):
            if min_price > max_price:
                raise InvalidQueryError(
                    f"Minimum {min_price} is greater than maximum {max_price}"
                )
            numeric_filter = NumericFilter(self._numeric_field, float(min_price), float(max_price))

        if limit is not None and limit < 0:
            raise InvalidQueryError("limit must be >= 0")
        if offset is not None and offset < 0:
            raise InvalidQueryError("offset must be >= 0")

        return SearchQuery(
            raw_query=raw,
            numeric_filter=numeric_filter,
            return_fields=fields,
            limit=limit,
            offset=offset,
        )

"""Errors raised by schema validation, index lifecycle and query execution."""

from __future__ import annotations


class SchemaError(Exception):
    """Invalid index schema. Fatal at startup."""

    kind = "schema_error"


class DuplicateFieldError(SchemaError):
    kind = "duplicate_field"

    def __init__(self, field_name: str) -> None:
        super().__init__(f"Field {field_name!r} is declared more than once")
        self.field_name = field_name


class EmptySchemaError(SchemaError):
    kind = "empty_schema"

    def __init__(self) -> None:
        super().__init__("An index schema needs at least one field")


class IndexManagementError(Exception):
    """Index drop or create failed."""

    kind = "index_error"


class IndexBackendFailure(IndexManagementError):
    kind = "backend_failure"

    def __init__(self, index_name: str, operation: str, cause: Exception) -> None:
        super().__init__(f"Failed to {operation} index {index_name!r}: {cause}")
        self.index_name = index_name
        self.operation = operation
        self.cause = cause


class SearchError(Exception):
    """A single query failed. Recoverable per request."""

    kind = "search_error"

    def __init__(self, index_name: str, message: str) -> None:
        super().__init__(message)
        self.index_name = index_name


class IndexNotFound(SearchError):
    kind = "index_not_found"

    def __init__(self, index_name: str) -> None:
        super().__init__(index_name, f"Index {index_name!r} does not exist")


class SearchBackendFailure(SearchError):
    """Connection, timeout or protocol failure. Safe for the caller to retry."""

    kind = "backend_failure"


class MalformedQuery(SearchError):
    """The engine rejected the query. Never retry."""

    kind = "malformed_query"


class InvalidQueryError(ValueError):
    """QueryBuilder input that cannot form a valid SearchQuery."""

"""Schema validation and the static article index definition."""

from __future__ import annotations

from . import FieldKind, FieldSpec, IndexDefinition, IndexSchema
from .errors import DuplicateFieldError, EmptySchemaError

ARTICLE_INDEX_NAME = "article-idx"
ARTICLE_KEY_PREFIX = "Article:"

ARTICLE_SCHEMA = IndexSchema(
    fields=(
        FieldSpec("title", FieldKind.TEXT, sortable=True, weight=1.0),
        FieldSpec("price", FieldKind.NUMERIC, sortable=True),
    )
)

# Fields projected by the "search articles" operation.
ARTICLE_RETURN_FIELDS = ("title", "price")


def validate_schema(schema: IndexSchema) -> None:
    if not schema.fields:
        raise EmptySchemaError()
    seen: set[str] = set()
    for spec in schema.fields:
        if spec.name in seen:
            raise DuplicateFieldError(spec.name)
        seen.add(spec.name)


def article_index(name: str = ARTICLE_INDEX_NAME) -> IndexDefinition:
    return IndexDefinition(name=name, key_prefix=ARTICLE_KEY_PREFIX, schema=ARTICLE_SCHEMA)

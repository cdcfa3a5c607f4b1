"""Document model — Field mappings stored in and returned by a search store.

A document is a flat mapping of field names to either a string or a list of
strings.  Two reserved fields are written by the adapter alongside the
caller's fields and stripped again before documents are returned:

  - ``@type``: the legacy type tag the document was created under
  - ``@created``: nanosecond creation stamp used for insertion ordering
"""

from __future__ import annotations

from typing import Any

from pydantic import TypeAdapter, ValidationError

from searchstore.adapters.base.exceptions import InvalidArgument

FieldValue = str | list[str]
Document = dict[str, FieldValue]

TYPE_FIELD = "@type"
CREATED_FIELD = "@created"
RESERVED_FIELDS = frozenset({TYPE_FIELD, CREATED_FIELD})

_document_adapter: TypeAdapter[Document] = TypeAdapter(Document)


def validate_body(body: Any) -> Document:
    """Validate a caller-supplied document body.

    Args:
        body: Mapping of field names to string or list-of-string values.

    Returns:
        The validated document.

    Raises:
        InvalidArgument: If a value is not a string or list of strings, or a
            reserved field name is used.
    """
    try:
        document = _document_adapter.validate_python(body)
    except ValidationError as e:
        raise InvalidArgument(f"Invalid document body: {e}") from e

    reserved = RESERVED_FIELDS.intersection(document)
    if reserved:
        raise InvalidArgument(f"Reserved field names are not allowed: {sorted(reserved)}")
    return document


def strip_reserved(source: dict[str, Any]) -> Document:
    """Return ``source`` without the adapter's bookkeeping fields."""
    return {key: value for key, value in source.items() if key not in RESERVED_FIELDS}

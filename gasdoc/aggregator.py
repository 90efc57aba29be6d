"""Output mapping: apply the transform registered for a document type."""

from typing import Any

from .registry import REGISTRY, SchemaRegistry
from .schemas import DocumentType, ExtractionRecord


def project(
    record: ExtractionRecord,
    document_type: DocumentType,
    registry: SchemaRegistry = REGISTRY,
) -> dict[str, Any]:
    """
    Map a validated record to the caller-facing output for its type.

    The transform is chosen from the document type alone, never from the
    record's content. Pure: the same record always gives the same output.

    Raises:
        UnregisteredTypeError: If the type has no schema entry.
        IncompleteAggregationError: If a sum-combine input is missing.
        ValueError: If the record was extracted for a different type.
    """
    entry = registry.lookup(document_type)
    if record.document_type != entry.document_type:
        raise ValueError(
            f"Record of type {record.document_type.value} cannot be projected "
            f"as {entry.document_type.value}"
        )
    return entry.transform.apply(record, entry)

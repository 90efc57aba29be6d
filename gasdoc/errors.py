"""
Exception hierarchy for the classification and extraction pipeline.

Errors fall into three groups:
- transient: the structured extractor could not be reached
- permanent for a document: extracted content does not fit the contract
- programming errors: a document type with no schema or transform
"""

from typing import Any, Optional


class GasDocError(Exception):
    """Base class for all pipeline errors."""


class ExtractorUnavailableError(GasDocError):
    """The structured extractor failed with a network, timeout or server error.

    Callers may retry the whole pipeline for the document.
    """


class SchemaValidationError(GasDocError):
    """Extracted content does not match the declared field contract."""

    def __init__(self, field_name: str, expected: str, observed: Any = None):
        self.field_name = field_name
        self.expected = expected
        self.observed = observed
        if observed is None:
            message = f"Missing required field '{field_name}' (expected {expected})"
        else:
            message = (
                f"Field '{field_name}': expected {expected}, "
                f"got {type(observed).__name__} {observed!r}"
            )
        super().__init__(message)


class DocumentTypeError(GasDocError):
    """A document type cannot be routed to a schema."""


class UnregisteredTypeError(DocumentTypeError):
    """The registry has no entry for the requested document type."""


class UnsupportedTypeError(DocumentTypeError):
    """Extraction was requested for a type that cannot be extracted."""


class UnclassifiableDocumentError(UnsupportedTypeError):
    """Classification yielded `unknown`, so the document cannot be processed."""

    def __init__(self, classification: Optional[Any] = None):
        self.classification = classification
        super().__init__("DocumentType=unknown cannot be processed")


class IncompleteAggregationError(GasDocError):
    """A sum-combine input is missing after validation passed.

    Indicates a mismatch between a registry contract and its transform.
    """

    def __init__(self, output_field: str, missing_field: str):
        self.output_field = output_field
        self.missing_field = missing_field
        super().__init__(
            f"Cannot compute '{output_field}': input '{missing_field}' is missing"
        )

"""
Extraction dispatcher: document type -> schema entry -> extractor -> validated record.

The dispatcher never classifies. Callers decide the type first and must
handle `unknown` before dispatching.
"""

from typing import Optional

from .errors import UnsupportedTypeError
from .registry import REGISTRY, SchemaRegistry
from .schemas import DocumentType, ExtractionRecord
from .validation import build_record


class ExtractionDispatcher:
    """
    Routes a document to the extraction contract of its type.

    Usage:
        dispatcher = ExtractionDispatcher(MockExtractor())
        record = dispatcher.extract(pdf_bytes, DocumentType.FIELD_PURCHASE_INVOICE)
    """

    def __init__(self, extractor, registry: SchemaRegistry = REGISTRY):
        """
        Args:
            extractor: Object with extract_structured(content, directive, entry, timeout=None).
            registry: Schema registry to resolve entries from.
        """
        self.extractor = extractor
        self.registry = registry

    def extract(
        self,
        content,
        document_type: DocumentType,
        timeout: Optional[float] = None,
    ) -> ExtractionRecord:
        """
        Extract and validate a record for a known document type.

        Raises:
            UnsupportedTypeError: If document_type is `unknown`.
            UnregisteredTypeError: If the registry has no entry for the type.
            SchemaValidationError: If a header field is missing or mistyped.
            ExtractorUnavailableError: If the extractor cannot be reached.
        """
        if document_type == DocumentType.UNKNOWN:
            raise UnsupportedTypeError("Cannot extract a document of type unknown; classify it first")

        entry = self.registry.lookup(document_type)
        raw = self.extractor.extract_structured(
            content, entry.extraction_directive, entry, timeout=timeout
        )
        return build_record(entry, raw)

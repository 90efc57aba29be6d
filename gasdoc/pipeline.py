"""
Document Processing Pipeline.

Orchestrates the full flow: classify → extract → project.
This is the main entry point for processing documents.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Any, Optional

from .aggregator import project
from .classifier import DocumentClassifier
from .dispatcher import ExtractionDispatcher
from .errors import UnclassifiableDocumentError
from .extractor import MockExtractor, OpenAIExtractor
from .registry import REGISTRY, SchemaRegistry
from .schemas import ClassificationResult, DocumentType, ExtractionRecord, ProcessingResult


class DocumentPipeline:
    """
    Complete document processing pipeline.

    Combines classification, extraction and output mapping into a single interface.
    Holds no per-document state, so one instance can serve many threads.

    Usage:
        pipeline = DocumentPipeline(use_mock_extractor=True)
        output = pipeline.process(pdf_bytes)
        output = pipeline.process(pdf_bytes, DocumentType.JDA_PLATFORM_SUMMARY)
    """

    def __init__(
        self,
        extractor=None,
        classifier: Optional[DocumentClassifier] = None,
        registry: SchemaRegistry = REGISTRY,
        use_mock_extractor: bool = False,
    ):
        """
        Initialize the pipeline.

        Args:
            extractor: Structured extractor (or None to create an OpenAIExtractor on first use)
            classifier: Classifier (or None for the rule classifier over the
                extractor's signals)
            registry: Schema registry used for extraction and projection
            use_mock_extractor: If True, use mock extractor (for testing)
        """
        if extractor:
            self.extractor = extractor
        elif use_mock_extractor:
            self.extractor = MockExtractor()
        else:
            self.extractor = None  # Will be created on first use

        self._classifier = classifier
        self.registry = registry

    def _ensure_extractor(self) -> None:
        """Create extractor if not initialized."""
        if self.extractor is None:
            self.extractor = OpenAIExtractor()

    def _ensure_classifier(self) -> None:
        """Create a classifier that reads signals through the extractor."""
        if self._classifier is None:
            self._ensure_extractor()
            self._classifier = DocumentClassifier(signal_source=self.extractor)

    @property
    def classifier(self) -> DocumentClassifier:
        self._ensure_classifier()
        return self._classifier

    def classify(self, content, timeout: Optional[float] = None) -> ClassificationResult:
        """Classify a document without extraction."""
        return self.classifier.classify(content, timeout=timeout)

    def extract(
        self,
        content,
        document_type: DocumentType,
        timeout: Optional[float] = None,
    ) -> ExtractionRecord:
        """Extract a validated record for a known document type."""
        self._ensure_extractor()
        dispatcher = ExtractionDispatcher(self.extractor, self.registry)
        return dispatcher.extract(content, document_type, timeout=timeout)

    def project(self, record: ExtractionRecord, document_type: DocumentType) -> dict[str, Any]:
        """Map a validated record to its public output."""
        return project(record, document_type, self.registry)

    def run(
        self,
        content,
        document_type: Optional[DocumentType] = None,
        timeout: Optional[float] = None,
    ) -> ProcessingResult:
        """
        Process a document and keep every intermediate result.

        Steps:
        1. Classify the document (skipped when document_type is given)
        2. Extract structured data using the type's contract
        3. Project the record to the public output

        Raises:
            UnclassifiableDocumentError: If classification yields `unknown`.
        """
        classification = None
        if document_type is None:
            classification = self.classify(content, timeout=timeout)
            if classification.document_type == DocumentType.UNKNOWN:
                raise UnclassifiableDocumentError(classification)
            document_type = classification.document_type

        record = self.extract(content, document_type, timeout=timeout)
        return ProcessingResult(
            classification=classification,
            document_type=document_type,
            extraction=record,
            output=self.project(record, document_type),
        )

    def process(
        self,
        content,
        document_type: Optional[DocumentType] = None,
        timeout: Optional[float] = None,
    ) -> dict[str, Any]:
        """
        Process a document through the full pipeline.

        Args:
            content: Document bytes (PDF or text) or text
            document_type: Known type; classified first when omitted
            timeout: Per-call timeout for the structured extractor, in seconds

        Returns:
            The output record for the document type
        """
        return self.run(content, document_type, timeout=timeout).output

    def process_batch(
        self,
        contents: list,
        max_workers: int = 4,
        timeout: Optional[float] = None,
    ) -> list[dict[str, Any]]:
        """
        Process independent documents concurrently.

        Outputs are returned in input order. The first failing document's
        error is raised.
        """
        self._ensure_classifier()
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            return list(pool.map(lambda content: self.process(content, timeout=timeout), contents))

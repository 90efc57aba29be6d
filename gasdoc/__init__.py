# Gas billing document pipeline
# Rule-based classification, schema-routed LLM extraction and output mapping

from .schemas import ClassificationResult, DocumentType, ExtractionRecord, ProcessingResult
from .registry import REGISTRY, SchemaRegistry
from .classifier import DocumentClassifier
from .dispatcher import ExtractionDispatcher
from .aggregator import project
from .extractor import MockExtractor, OpenAIExtractor
from .pipeline import DocumentPipeline
from .errors import (
    ExtractorUnavailableError,
    GasDocError,
    IncompleteAggregationError,
    SchemaValidationError,
    UnclassifiableDocumentError,
    UnregisteredTypeError,
    UnsupportedTypeError,
)

__all__ = [
    "ClassificationResult",
    "DocumentType",
    "ExtractionRecord",
    "ProcessingResult",
    "REGISTRY",
    "SchemaRegistry",
    "DocumentClassifier",
    "ExtractionDispatcher",
    "project",
    "MockExtractor",
    "OpenAIExtractor",
    "DocumentPipeline",
    "ExtractorUnavailableError",
    "GasDocError",
    "IncompleteAggregationError",
    "SchemaValidationError",
    "UnclassifiableDocumentError",
    "UnregisteredTypeError",
    "UnsupportedTypeError",
]

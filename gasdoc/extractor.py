"""
Structured extractors: the external capability behind classification and extraction.

An extractor does two things:
- detect_signals(content) returns the evidence bundle the classifier reasons over
- extract_structured(content, directive, entry) returns a raw field mapping for
  one document type, which the dispatcher then validates

OpenAIExtractor backs both with OpenAI structured outputs. MockExtractor
returns canned payloads and is used for tests and offline demos.
"""

import base64
import copy
import functools
import logging
import os
from typing import Any, Optional, Protocol, Union

import openai
from dotenv import load_dotenv
from openai import OpenAI
from pydantic import BaseModel, Field, create_model

from .contracts import FieldKind, FieldSpec, SchemaEntry
from .directives import SIGNAL_DIRECTIVE
from .errors import ExtractorUnavailableError, SchemaValidationError
from .schemas import DocumentSignals, DocumentType
from .signals import TextSignalDetector, decode_content

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_TIMEOUT_SECONDS = 60.0

Content = Union[bytes, bytearray, str]

_TRANSIENT_ERRORS = (
    openai.APITimeoutError,
    openai.APIConnectionError,
    openai.RateLimitError,
    openai.InternalServerError,
)


class StructuredExtractor(Protocol):
    """What the classifier and dispatcher need from an extraction backend."""

    def detect_signals(self, content: Content, timeout: Optional[float] = None) -> DocumentSignals:
        ...

    def extract_structured(
        self,
        content: Content,
        directive: str,
        entry: SchemaEntry,
        timeout: Optional[float] = None,
    ) -> dict[str, Any]:
        ...


# ============================================================================
# Response models
# ============================================================================

_PY_TYPES = {FieldKind.STRING: str, FieldKind.NUMBER: float}


def _field_definitions(contract: tuple[FieldSpec, ...]) -> dict[str, Any]:
    # Every field is nullable so that a missing value comes back as null and
    # is reported by our own validation with the field's name.
    return {
        spec.name: (Optional[_PY_TYPES[spec.kind]], Field(None, description=spec.description))
        for spec in contract
    }


@functools.lru_cache(maxsize=None)
def response_model_for(entry: SchemaEntry) -> type[BaseModel]:
    """Pydantic model describing the JSON the LLM must return for an entry."""
    name = "".join(part.title() for part in entry.document_type.value.split("_"))
    fields = _field_definitions(entry.field_contract)
    if entry.is_multi_row:
        row_fields = _field_definitions(entry.row_contract)
        row_fields[entry.row_confidence_key] = (
            Optional[float], Field(None, description="Confidence score 0-100 for this row")
        )
        row_model = create_model(f"{name}Row", **row_fields)
        fields[entry.rows_key] = (list[row_model], Field(..., description=entry.rows_description))
    fields[entry.confidence_key] = (
        float, Field(..., description="Overall extraction confidence score 0-100")
    )

    return create_model(name, **fields)


def _user_content(content: Content, instruction: str) -> Union[str, list[dict[str, Any]]]:
    """Message content: PDFs travel as a base64 file part, anything else as text."""
    if isinstance(content, (bytes, bytearray)) and bytes(content[:5]) == b"%PDF-":
        encoded = base64.b64encode(bytes(content)).decode("ascii")
        return [
            {"type": "text", "text": instruction},
            {"type": "file", "file": {
                "filename": "document.pdf",
                "file_data": f"data:application/pdf;base64,{encoded}",
            }},
        ]
    return f"{instruction}\n\n{decode_content(content)}"


# ============================================================================
# OpenAI
# ============================================================================

class OpenAIExtractor:
    """
    Extracts signals and structured records using OpenAI structured outputs.

    Usage:
        extractor = OpenAIExtractor()
        signals = extractor.detect_signals(pdf_bytes)
        raw = extractor.extract_structured(pdf_bytes, entry.extraction_directive, entry)
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        """
        Initialize the extractor.

        Args:
            api_key: OpenAI API key. If not provided, reads from OPENAI_API_KEY env var.
            model: OpenAI model. Defaults to GASDOC_MODEL env var, then gpt-4o-mini.
            timeout: Default per-request timeout in seconds. Defaults to
                GASDOC_TIMEOUT_SECONDS env var, then 60.
        """
        self.api_key = api_key or os.getenv("OPENAI_API_KEY")
        if not self.api_key:
            raise ValueError(
                "OpenAI API key required. Set OPENAI_API_KEY environment variable "
                "or pass api_key parameter."
            )

        self.model = model or os.getenv("GASDOC_MODEL", DEFAULT_MODEL)
        self.timeout = timeout or float(os.getenv("GASDOC_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS))
        # Retry policy belongs to the caller
        self.client = OpenAI(api_key=self.api_key, max_retries=0)

    def _parse(self, system_prompt: str, user_content, response_format, timeout: Optional[float]):
        try:
            response = self.client.chat.completions.parse(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_content},
                ],
                response_format=response_format,
                timeout=timeout or self.timeout,
            )
        except _TRANSIENT_ERRORS as e:
            logger.warning("Structured extractor unavailable: %s", e)
            raise ExtractorUnavailableError(str(e)) from e

        message = response.choices[0].message
        if message.parsed is None:
            raise SchemaValidationError("<record>", response_format.__name__, message.refusal or "")
        return message.parsed

    def detect_signals(self, content: Content, timeout: Optional[float] = None) -> DocumentSignals:
        logger.debug("Detecting signals with %s", self.model)
        return self._parse(
            SIGNAL_DIRECTIVE,
            _user_content(content, "Report the signals found in this document."),
            DocumentSignals,
            timeout,
        )

    def extract_structured(
        self,
        content: Content,
        directive: str,
        entry: SchemaEntry,
        timeout: Optional[float] = None,
    ) -> dict[str, Any]:
        logger.debug("Extracting %s with %s", entry.document_type.value, self.model)
        parsed = self._parse(
            directive,
            _user_content(content, "Extract data from this document."),
            response_model_for(entry),
            timeout,
        )
        return parsed.model_dump()


# ============================================================================
# Mock
# ============================================================================

class MockExtractor:
    """
    Mock extractor for testing without API calls.

    Signals come from TextSignalDetector; extraction returns a predefined
    raw payload per document type.
    """

    MOCK_RESPONSES = {
        DocumentType.SUPPLY_MULTI_PLATFORM: {
            "statement_number": "OPERATOR'S STATEMENT NUMBER 41",
            "moge_quantity_mmbtu": "3,552,567",
            "pttepi_quantity_mmbtu": "1,642,899",
            "overall_payment_due_usd": "51,243,920.25",
            "invoices": [
                {"invoice_number": "1631100234", "quantity": 14952366.0,
                 "amount_before_vat": 2268499702.92, "confidence_score": 95},
            ],
            "overall_confidence_score": 92,
        },
        DocumentType.SINGLE_PLATFORM_STATEMENT: {
            "statements": [
                {"statement_number": "Statement No. 08-18/2025", "total_sale_volume": 9580877.0,
                 "total_amount_thb": 2587457630.82, "confidence_score": 96},
            ],
            "overall_confidence_score": 96,
        },
        DocumentType.FIELD_PURCHASE_INVOICE: {
            "field_name": "C5",
            "vendor": "Chevron Thailand Exploration and Production, Ltd.",
            "invoice_number": "INV-C5-0825",
            "period_label": "Aug-25",
            "heat_quantity_mmbtu": "1,203,441.50",
            "amountUSD": "9,862,110.37",
            "amount_thb": None,
            "overall_confidence_score": 88,
        },
        DocumentType.MULTI_VENDOR_PLATFORM_INVOICE: {
            "platform": "B8/32",
            "period_label": "Aug-2025",
            "heat_quantity_mmbtu": "2,004,118.00",
            "vendor_invoices": [
                {"vendor": "Alpha Offshore Co., Ltd.", "invoice_number": "A-1001", "amount_excl_vat": "1,250,000.00"},
                {"vendor": "Beta Marine Services Co., Ltd.", "invoice_number": "B-2001", "amount_excl_vat": "830,400.50"},
                {"vendor": "Gamma Engineering Ltd.", "invoice_number": "G-3001", "amount_excl_vat": "415,000.00"},
            ],
            "overall_confidence_score": 85,
        },
        DocumentType.JDA_PLATFORM_SUMMARY: {
            "periodLabel": "Aug-25",
            "platforms": [
                {"platform": "JDA A-18", "mmbtu": "9,197,256.21", "amountUSD": "52,417,002.59",
                 "mmscf": "10,411.79", "confidenceScore": 95},
                {"platform": "JDA B-17", "mmbtu": "1,868,601.00", "amountUSD": "11,917,002.88",
                 "mmscf": "1,931.70", "confidenceScore": 95},
            ],
            "overallConfidenceScore": 95,
        },
        DocumentType.YETAGUN_SUPPLY_SUMMARY: {
            "sub_total_mmbtu": "903,820.26",
            "overall_payment_due_usd": "8,914,559.99",
            "overall_confidence_score": 90,
        },
        DocumentType.ZAWTIKA_SELLER_SPLIT: {
            "moge_quantity_mmbtu": 2100000,
            "pttepi_quantity_mmbtu": 1400000,
            "moge_payment_usd": 12600000.10,
            "pttepi_payment_usd": 8400000.20,
            "overall_confidence_score": 90,
        },
    }

    def __init__(self, responses: Optional[dict[DocumentType, dict[str, Any]]] = None):
        self.responses = responses if responses is not None else self.MOCK_RESPONSES
        self.detector = TextSignalDetector()

    def detect_signals(self, content: Content, timeout: Optional[float] = None) -> DocumentSignals:
        return self.detector.detect_signals(content, timeout=timeout)

    def extract_structured(
        self,
        content: Content,
        directive: str,
        entry: SchemaEntry,
        timeout: Optional[float] = None,
    ) -> dict[str, Any]:
        """Return a copy of the canned payload for the entry's type."""
        return copy.deepcopy(self.responses.get(entry.document_type, {}))

"""
Pydantic models shared across the pipeline.

Covers the document type tags, the signal bundle the classifier reasons
over, the classification result, and the validated extraction record.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class DocumentType(str, Enum):
    """The document types we classify and extract."""
    SUPPLY_MULTI_PLATFORM = "supply_multi_platform"
    SINGLE_PLATFORM_STATEMENT = "single_platform_statement"
    MULTI_VENDOR_PLATFORM_INVOICE = "multi_vendor_platform_invoice"
    FIELD_PURCHASE_INVOICE = "field_purchase_invoice"
    JDA_PLATFORM_SUMMARY = "jda_platform_summary"
    YETAGUN_SUPPLY_SUMMARY = "yetagun_supply_summary"
    ZAWTIKA_SELLER_SPLIT = "zawtika_seller_split"
    UNKNOWN = "unknown"


class Language(str, Enum):
    THAI = "thai"
    ENGLISH = "english"
    MIXED = "mixed"


# ============================================================================
# Classification
# ============================================================================

class DocumentSignals(BaseModel):
    """Textual and structural evidence gathered from one document."""
    platforms: list[str] = Field(
        default_factory=list,
        description="Platform/field codes found, in order of first appearance "
                    "(G1, G2, G12, Arthit, C5, G4/48, B8/32, Benchamas, Pailin, JDA A-18)",
    )
    has_statement_of_account: bool = Field(False, description="'Statement of Account' page title found")
    has_operator_statement: bool = Field(False, description="'Operator's Statement' title found")
    has_statement_number: bool = Field(False, description="Statement number like 'Statement No. 08-18/2025' found")
    has_total_sale_volume: bool = Field(False, description="'Total Sale Volume' found")
    has_ctep_sale_volume: bool = Field(False, description="'CTEP Sale Volume' found")
    has_heat_quantity_section: bool = Field(False, description="Heat quantity section (ปริมาณความร้อน) found")
    has_accounting_data: bool = Field(False, description="Accounting totals (จำนวนเงินรวม, invoice register, GL account) found")
    has_vendor_invoice_table: bool = Field(False, description="Table with Vendor and Invoice No. columns found")
    has_invoice_term: bool = Field(False, description="Thai invoice term ใบแจ้งหนี้ found")
    vendor_names: list[str] = Field(default_factory=list, description="Distinct company names found")
    language: Language = Language.ENGLISH
    key_terms_found: list[str] = Field(default_factory=list, description="Identifying terms found, in order")

    def signal_count(self) -> int:
        """Number of distinct signals present (platforms count individually)."""
        flags = [
            self.has_statement_of_account,
            self.has_operator_statement,
            self.has_statement_number,
            self.has_total_sale_volume,
            self.has_ctep_sale_volume,
            self.has_heat_quantity_section,
            self.has_accounting_data,
            self.has_vendor_invoice_table,
            self.has_invoice_term,
        ]
        return len(self.platforms) + sum(flags) + (1 if self.vendor_names else 0)


class DetectedFeatures(BaseModel):
    """Evidence reported back to callers alongside the chosen type."""
    platforms: list[str] = Field(default_factory=list)
    structural_flags: dict[str, bool] = Field(default_factory=dict)
    language: Language = Language.ENGLISH
    key_terms_found: list[str] = Field(default_factory=list)


class ClassificationResult(BaseModel):
    """Result from the document classifier."""
    document_type: DocumentType
    confidence: float = Field(..., ge=0.0, le=100.0, description="Confidence score 0-100")
    reasoning: str = ""
    detected_features: DetectedFeatures = Field(default_factory=DetectedFeatures)
    matched_rule: Optional[str] = Field(None, description="Name of the rule that decided the type")


# ============================================================================
# Extraction
# ============================================================================

class ExtractionRecord(BaseModel):
    """A validated extraction for one document.

    `fields` holds header-level values; `rows` holds one mapping per item
    for multi-row types (statements, invoices, platform rows).
    """
    document_type: DocumentType
    fields: dict[str, Any] = Field(default_factory=dict)
    rows: list[dict[str, Any]] = Field(default_factory=list)
    row_confidences: list[float] = Field(default_factory=list)
    overall_confidence: float = Field(0.0, ge=0.0, le=100.0)
    rejected_rows: list[str] = Field(default_factory=list, description="One message per dropped row")


class ProcessingResult(BaseModel):
    """Complete result from processing a document."""
    classification: Optional[ClassificationResult] = None
    document_type: DocumentType
    extraction: ExtractionRecord
    output: dict[str, Any]

"""
Schema registry: document type -> field contract, directive and transform.

The registry is built once at import time and is read-only afterwards, so
it can be shared between threads without locking.
"""

from types import MappingProxyType
from typing import Iterable, Mapping

from .contracts import FieldKind, FieldSpec, SchemaEntry
from .directives import DIRECTIVES
from .errors import UnregisteredTypeError
from .schemas import DocumentType
from .transforms import Identity, Projection, Rename, SumCombine

STRING = FieldKind.STRING
NUMBER = FieldKind.NUMBER


# ============================================================================
# Entries
# ============================================================================

SUPPLY_MULTI_PLATFORM = SchemaEntry(
    document_type=DocumentType.SUPPLY_MULTI_PLATFORM,
    field_contract=(
        FieldSpec("statement_number", STRING, False, "Operator's statement number, e.g. OPERATOR'S STATEMENT NUMBER 41"),
        FieldSpec("moge_quantity_mmbtu", NUMBER, False, "MOGE's quantity of gas in MMBTU", default=0),
        FieldSpec("pttepi_quantity_mmbtu", NUMBER, False, "PTTEPI's quantity of gas in MMBTU", default=0),
        FieldSpec("overall_payment_due_usd", NUMBER, False, "Overall payment due by PTT to the sellers in USD"),
    ),
    row_contract=(
        FieldSpec("invoice_number", STRING, True, "Invoice or statement number, e.g. 1631100234"),
        FieldSpec("quantity", NUMBER, True, "Total Sale Volume in MMBTU (not CTEP Sale Volume)"),
        FieldSpec("amount_before_vat", NUMBER, True, "Amount before VAT in THB"),
    ),
    rows_key="invoices",
    rows_description="One entry per platform invoice or operator's statement",
    extraction_directive=DIRECTIVES[DocumentType.SUPPLY_MULTI_PLATFORM],
    transform=Projection(rules=(
        Rename("statement_number", "statement_number"),
        SumCombine("occurred_quantities_mmbtu", ("moge_quantity_mmbtu", "pttepi_quantity_mmbtu")),
        Rename("overall_payment", "overall_payment_due_usd"),
    )),
)

SINGLE_PLATFORM_STATEMENT = SchemaEntry(
    document_type=DocumentType.SINGLE_PLATFORM_STATEMENT,
    field_contract=(),
    row_contract=(
        FieldSpec("statement_number", STRING, True, "Statement number, e.g. Statement No. 08-18/2025"),
        FieldSpec("total_sale_volume", NUMBER, True, "Total Sale Volume in MMBTU (not CTEP Sale Volume)"),
        FieldSpec("total_amount_thb", NUMBER, True, "THB amount for the total sale volume"),
    ),
    rows_key="statements",
    rows_description="One entry per Statement of Account",
    extraction_directive=DIRECTIVES[DocumentType.SINGLE_PLATFORM_STATEMENT],
    transform=Identity(),
)

FIELD_PURCHASE_INVOICE = SchemaEntry(
    document_type=DocumentType.FIELD_PURCHASE_INVOICE,
    field_contract=(
        FieldSpec("field_name", STRING, True, "Gas field, C5 or G4/48"),
        FieldSpec("vendor", STRING, False, "Selling company, e.g. Chevron Thailand, Mitsui"),
        FieldSpec("invoice_number", STRING, False, "Invoice number from the invoice register"),
        FieldSpec("period_label", STRING, False, "Billing period as written"),
        FieldSpec("heat_quantity_mmbtu", NUMBER, True, "Heat quantity (ปริมาณความร้อน) in MMBTU"),
        FieldSpec("amountUSD", NUMBER, True, "Purchase amount in USD"),
        FieldSpec("amount_thb", NUMBER, False, "Total amount (จำนวนเงินรวม) in THB"),
    ),
    extraction_directive=DIRECTIVES[DocumentType.FIELD_PURCHASE_INVOICE],
    transform=Projection(rules=(
        Rename("field", "field_name"),
        Rename("vendor", "vendor"),
        Rename("invoice_number", "invoice_number"),
        Rename("period", "period_label"),
        Rename("heat_quantity_mmbtu", "heat_quantity_mmbtu"),
        Rename("amount_usd", "amountUSD"),
        Rename("amount_thb", "amount_thb"),
    )),
)

MULTI_VENDOR_PLATFORM_INVOICE = SchemaEntry(
    document_type=DocumentType.MULTI_VENDOR_PLATFORM_INVOICE,
    field_contract=(
        FieldSpec("platform", STRING, True, "Platform, e.g. B8/32, Benchamas, Pailin"),
        FieldSpec("period_label", STRING, False, "Billing period, e.g. Aug-2025"),
        FieldSpec("heat_quantity_mmbtu", NUMBER, False, "Aggregate heat quantity for the period in MMBTU"),
    ),
    row_contract=(
        FieldSpec("vendor", STRING, True, "Vendor company name"),
        FieldSpec("invoice_number", STRING, False, "Vendor invoice number"),
        FieldSpec("amount_excl_vat", NUMBER, True, "Invoice amount excluding VAT"),
    ),
    rows_key="vendor_invoices",
    rows_description="One entry per vendor invoice in the invoice table",
    extraction_directive=DIRECTIVES[DocumentType.MULTI_VENDOR_PLATFORM_INVOICE],
    transform=Projection(rules=(
        Rename("platform", "platform"),
        Rename("period", "period_label"),
        Rename("heat_quantity_mmbtu", "heat_quantity_mmbtu"),
    )),
)

JDA_PLATFORM_SUMMARY = SchemaEntry(
    document_type=DocumentType.JDA_PLATFORM_SUMMARY,
    field_contract=(
        FieldSpec("periodLabel", STRING, False, "Period label if clearly present, e.g. Aug-25"),
    ),
    row_contract=(
        FieldSpec("platform", STRING, True, "Platform name as written, e.g. JDA A-18"),
        FieldSpec("mmbtu", NUMBER, True, "Energy quantity in MMBTU"),
        FieldSpec("amountUSD", NUMBER, True, "Amount in USD"),
        FieldSpec("mmscf", NUMBER, False, "Gas quantity in MMSCF"),
    ),
    rows_key="platforms",
    rows_description="One entry per JDA platform row",
    confidence_key="overallConfidenceScore",
    row_confidence_key="confidenceScore",
    extraction_directive=DIRECTIVES[DocumentType.JDA_PLATFORM_SUMMARY],
    transform=Identity(),
)

YETAGUN_SUPPLY_SUMMARY = SchemaEntry(
    document_type=DocumentType.YETAGUN_SUPPLY_SUMMARY,
    field_contract=(
        FieldSpec("sub_total_mmbtu", NUMBER, False, "SUB-TOTAL quantity paid at contract price, MMBTU", default=0),
        FieldSpec("overall_payment_due_usd", NUMBER, False, "Overall payment due by PTT to the sellers in USD", default=0),
    ),
    extraction_directive=DIRECTIVES[DocumentType.YETAGUN_SUPPLY_SUMMARY],
    transform=Projection(rules=(
        Rename("occurred_quantities_mmbtu", "sub_total_mmbtu"),
        Rename("overall_payment", "overall_payment_due_usd"),
    )),
)

ZAWTIKA_SELLER_SPLIT = SchemaEntry(
    document_type=DocumentType.ZAWTIKA_SELLER_SPLIT,
    field_contract=(
        FieldSpec("moge_quantity_mmbtu", NUMBER, True, "MOGE's quantity of gas in MMBTU"),
        FieldSpec("pttepi_quantity_mmbtu", NUMBER, True, "PTTEPI's quantity of gas in MMBTU"),
        FieldSpec("moge_payment_usd", NUMBER, True, "Payment due to MOGE in USD"),
        FieldSpec("pttepi_payment_usd", NUMBER, True, "Payment due to PTTEPI in USD"),
    ),
    extraction_directive=DIRECTIVES[DocumentType.ZAWTIKA_SELLER_SPLIT],
    transform=Projection(rules=(
        SumCombine("occurred_quantities_mmbtu", ("moge_quantity_mmbtu", "pttepi_quantity_mmbtu")),
        SumCombine("overall_payment", ("moge_payment_usd", "pttepi_payment_usd")),
    )),
)


# ============================================================================
# Registry
# ============================================================================

class SchemaRegistry:
    """Read-only mapping of document types to schema entries.

    Usage:
        entry = REGISTRY.lookup(DocumentType.FIELD_PURCHASE_INVOICE)
        entry.field_contract  # fields the extractor must produce
    """

    def __init__(self, entries: Iterable[SchemaEntry]):
        table = {}
        for entry in entries:
            if entry.document_type == DocumentType.UNKNOWN:
                raise ValueError("The unknown document type cannot have a schema entry")
            if entry.document_type in table:
                raise ValueError(f"Duplicate schema entry for {entry.document_type.value}")
            if entry.is_multi_row and not entry.rows_key:
                raise ValueError(f"Multi-row entry {entry.document_type.value} needs a rows_key")
            table[entry.document_type] = entry
        self._entries: Mapping[DocumentType, SchemaEntry] = MappingProxyType(table)

    def lookup(self, document_type: DocumentType) -> SchemaEntry:
        """Get the schema entry for a document type.

        Raises:
            UnregisteredTypeError: For `unknown` or a type with no entry.
        """
        try:
            return self._entries[DocumentType(document_type)]
        except (KeyError, ValueError):
            raise UnregisteredTypeError(
                f"No schema registered for document type {document_type!r}"
            ) from None

    def list_types(self) -> list[DocumentType]:
        """Registered document types, in declaration order."""
        return list(self._entries)

    def __contains__(self, document_type: object) -> bool:
        return document_type in self._entries


REGISTRY = SchemaRegistry([
    SUPPLY_MULTI_PLATFORM,
    SINGLE_PLATFORM_STATEMENT,
    FIELD_PURCHASE_INVOICE,
    MULTI_VENDOR_PLATFORM_INVOICE,
    JDA_PLATFORM_SUMMARY,
    YETAGUN_SUPPLY_SUMMARY,
    ZAWTIKA_SELLER_SPLIT,
])


def lookup(document_type: DocumentType) -> SchemaEntry:
    """Get the schema entry for a document type from the default registry."""
    return REGISTRY.lookup(document_type)


def list_types() -> list[DocumentType]:
    """Document types in the default registry."""
    return REGISTRY.list_types()

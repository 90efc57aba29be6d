"""
Validation of raw extractor output against a field contract.

Numbers often come back as formatted text ("52,417,002.59", "$1,200.00",
"(3,000.00)"), so numeric fields are normalized here before the record
is handed to the transforms.
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Union

from .contracts import FieldKind, FieldSpec, SchemaEntry
from .errors import SchemaValidationError
from .schemas import ExtractionRecord

# Records with no usable rows never report more confidence than this
EMPTY_ROWS_CONFIDENCE_CAP = 20.0

_LABELS = re.compile(r"US\$|USD|THB|MMBTU|MMSCF|[$฿]", re.IGNORECASE)
# Commas are only accepted as thousands separators: 1,234,567.89
_NUMBER = re.compile(r"^[+-]?(?:(?:\d{1,3}(?:,\d{3})+|\d+)(?:\.\d*)?|\.\d+)$")


def parse_number(value: Any) -> Union[int, float]:
    """
    Interpret an extracted value as a number.

    Accepts ints, floats and formatted numeric text. Currency symbols and
    unit labels are stripped, commas are accepted only in thousands
    positions, the decimal point is kept, and a value wrapped in
    parentheses is negative.

    Raises:
        ValueError: If the value is not numeric (booleans included).
    """
    if isinstance(value, bool):
        raise ValueError(f"boolean is not a number: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            raise ValueError(f"non-finite number: {value!r}")
        return value
    if not isinstance(value, str):
        raise ValueError(f"not a number: {value!r}")

    text = value.strip()
    negative = text.startswith("(") and text.endswith(")")
    if negative:
        text = text[1:-1]
    text = _LABELS.sub("", text).strip()
    if not _NUMBER.match(text):
        raise ValueError(f"not a number: {value!r}")
    text = text.replace(",", "")

    try:
        number = Decimal(text)
    except InvalidOperation:
        raise ValueError(f"not a number: {value!r}") from None
    if negative:
        number = -number
    if "." in text:
        return float(number)
    return int(number)


def _is_absent(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def validate_value(spec: FieldSpec, value: Any) -> Any:
    """Validate and normalize one field value against its spec."""
    if _is_absent(value):
        if spec.required:
            raise SchemaValidationError(spec.name, spec.kind.value)
        return spec.default

    if spec.kind == FieldKind.NUMBER:
        try:
            return parse_number(value)
        except ValueError:
            raise SchemaValidationError(spec.name, spec.kind.value, value) from None

    if not isinstance(value, str):
        raise SchemaValidationError(spec.name, spec.kind.value, value)
    return value.strip()


def validate_fields(contract: tuple[FieldSpec, ...], raw: dict[str, Any]) -> dict[str, Any]:
    """Validate a mapping against a contract, in contract order.

    Keys not in the contract are dropped.
    """
    return {spec.name: validate_value(spec, raw.get(spec.name)) for spec in contract}


def parse_confidence(name: str, value: Any, fallback: float = 0.0) -> float:
    """Parse a 0-100 confidence score, clamping out-of-range values."""
    if _is_absent(value):
        return fallback
    try:
        score = float(parse_number(value))
    except ValueError:
        raise SchemaValidationError(name, "number", value) from None
    return min(100.0, max(0.0, score))


def build_record(entry: SchemaEntry, raw: dict[str, Any]) -> ExtractionRecord:
    """
    Turn raw extractor output into a validated ExtractionRecord.

    Header fields must all validate. For multi-row types each row is
    validated on its own: a row that fails is dropped and noted in
    `rejected_rows`, and a record left with no rows has its overall
    confidence capped at EMPTY_ROWS_CONFIDENCE_CAP.

    Raises:
        SchemaValidationError: If a header field is missing or mistyped.
    """
    if not isinstance(raw, dict):
        raise SchemaValidationError("<record>", "object", raw)

    fields = validate_fields(entry.field_contract, raw)
    overall = parse_confidence(entry.confidence_key, raw.get(entry.confidence_key))

    rows: list[dict[str, Any]] = []
    row_confidences: list[float] = []
    rejected: list[str] = []

    if entry.is_multi_row:
        raw_rows = raw.get(entry.rows_key) or []
        if not isinstance(raw_rows, list):
            raise SchemaValidationError(entry.rows_key, "array", raw_rows)

        for index, raw_row in enumerate(raw_rows):
            row, confidence, problem = _validate_row(entry, raw_row, overall)
            if problem is not None:
                rejected.append(f"{entry.rows_key}[{index}]: {problem}")
                continue
            rows.append(row)
            row_confidences.append(confidence)

        if not rows:
            overall = min(overall, EMPTY_ROWS_CONFIDENCE_CAP)

    return ExtractionRecord(
        document_type=entry.document_type,
        fields=fields,
        rows=rows,
        row_confidences=row_confidences,
        overall_confidence=overall,
        rejected_rows=rejected,
    )


def _validate_row(
    entry: SchemaEntry, raw_row: Any, overall: float
) -> tuple[Optional[dict[str, Any]], float, Optional[str]]:
    if not isinstance(raw_row, dict):
        return None, 0.0, f"expected object, got {type(raw_row).__name__}"
    try:
        row = validate_fields(entry.row_contract, raw_row)
        confidence = parse_confidence(
            entry.row_confidence_key, raw_row.get(entry.row_confidence_key), fallback=overall
        )
    except SchemaValidationError as e:
        return None, 0.0, str(e)
    return row, confidence, None

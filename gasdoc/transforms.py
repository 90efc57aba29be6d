"""
Post-processing transforms: validated ExtractionRecord -> public output.

Three shapes exist in this domain:
- identity: the extracted shape already is the public contract
- pass-through rename: a field is published under a different name
- sum-combine: several extracted quantities are published as one total

Rename and SumCombine rules are grouped into a Projection. All transforms
are frozen and pure; the same record always yields the same output.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Optional, Union

from .contracts import SchemaEntry
from .errors import IncompleteAggregationError
from .schemas import ExtractionRecord


def _to_decimal(value: Union[int, float]) -> Decimal:
    # repr() gives the shortest string that round-trips, so 0.1 stays 0.1
    return Decimal(repr(value))


def _from_decimal(value: Decimal) -> Union[int, float]:
    if value == value.to_integral_value():
        return int(value)
    return float(value)


def _emit_rows(record: ExtractionRecord, entry: SchemaEntry, renames: dict[str, str]) -> list[dict]:
    rows = []
    for row, confidence in zip(record.rows, record.row_confidences):
        out = {renames.get(name, name): value for name, value in row.items()}
        out[entry.row_confidence_key] = confidence
        rows.append(out)
    return rows


@dataclass(frozen=True)
class Rename:
    """Publish `source` verbatim under `output`."""
    output: str
    source: str

    def compute(self, record: ExtractionRecord, entry: SchemaEntry) -> Any:
        return record.fields.get(self.source)


@dataclass(frozen=True)
class SumCombine:
    """Publish the exact sum of `inputs` under `output`."""
    output: str
    inputs: tuple[str, ...]

    def compute(self, record: ExtractionRecord, entry: SchemaEntry) -> Union[int, float]:
        total = Decimal(0)
        for name in self.inputs:
            value = record.fields.get(name)
            if value is None:
                spec = entry.field(name)
                if spec is None or not spec.has_default:
                    raise IncompleteAggregationError(self.output, name)
                value = 0
            total += _to_decimal(value)
        return _from_decimal(total)


@dataclass(frozen=True)
class Identity:
    """Return the record as-is: header fields, rows and confidence."""

    def apply(self, record: ExtractionRecord, entry: SchemaEntry) -> dict[str, Any]:
        output: dict[str, Any] = dict(record.fields)
        if entry.is_multi_row:
            output[entry.rows_key] = _emit_rows(record, entry, {})
        output[entry.confidence_key] = record.overall_confidence
        return output


@dataclass(frozen=True)
class Projection:
    """Build the output from an ordered list of Rename/SumCombine rules."""
    rules: tuple[Union[Rename, SumCombine], ...]
    rows_output_key: Optional[str] = None
    row_renames: dict[str, str] = field(default_factory=dict, hash=False)
    include_confidence: bool = True

    def apply(self, record: ExtractionRecord, entry: SchemaEntry) -> dict[str, Any]:
        output: dict[str, Any] = {}
        for rule in self.rules:
            output[rule.output] = rule.compute(record, entry)
        if entry.is_multi_row:
            key = self.rows_output_key or entry.rows_key
            output[key] = _emit_rows(record, entry, self.row_renames)
        if self.include_confidence:
            output[entry.confidence_key] = record.overall_confidence
        return output


Transform = Union[Identity, Projection]

"""
Field contracts and schema entries.

A SchemaEntry binds one document type to the fields an extraction must
produce, the directive handed to the structured extractor, and the
transform that turns a validated record into the public output.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union

from .schemas import DocumentType


class FieldKind(str, Enum):
    """Semantic type of an extracted field."""
    STRING = "string"
    NUMBER = "number"


Scalar = Union[int, float, str]


@dataclass(frozen=True)
class FieldSpec:
    """One field in a contract."""
    name: str
    kind: FieldKind
    required: bool = True
    description: str = ""
    # Only meaningful for optional fields: absence resolves to this value
    default: Optional[Scalar] = None

    @property
    def has_default(self) -> bool:
        return self.default is not None


@dataclass(frozen=True)
class SchemaEntry:
    """Registry entry for one document type."""
    document_type: DocumentType
    field_contract: tuple[FieldSpec, ...]
    extraction_directive: str
    transform: Any
    row_contract: Optional[tuple[FieldSpec, ...]] = None
    rows_key: Optional[str] = None
    rows_description: str = ""
    confidence_key: str = "overall_confidence_score"
    row_confidence_key: str = "confidence_score"

    @property
    def is_multi_row(self) -> bool:
        return self.row_contract is not None

    def field(self, name: str) -> Optional[FieldSpec]:
        """Find a header or row field spec by name."""
        for spec in self.field_contract + (self.row_contract or ()):
            if spec.name == name:
                return spec
        return None

"""
Per-run records: real fields observed by the automation, proposed mappings
and comparison reports. Nothing here is persisted by the engine.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class RealFieldRecord:
    """Field observed by the form automation"""
    label: str
    type: str = "text"
    required: bool = False
    completed: bool = False
    assigned_value: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label,
            "type": self.type,
            "required": self.required,
            "completed": self.completed,
            "assignedValue": self.assigned_value,
        }


@dataclass(frozen=True)
class FieldRef:
    """Reference to a canonical field by category key and field name"""
    category: str
    field_name: str

    def to_dict(self) -> Dict[str, str]:
        return {"category": self.category, "fieldName": self.field_name}


@dataclass
class FieldMapping:
    """Proposed correspondence between a real field and a canonical field"""
    real_field: RealFieldRecord
    canonical_ref: Optional[FieldRef] = None
    confidence: float = 0.0
    rationale: Optional[str] = None

    @property
    def is_mapped(self) -> bool:
        return self.canonical_ref is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "realField": self.real_field.to_dict(),
            "canonicalRef": self.canonical_ref.to_dict() if self.canonical_ref else None,
            "confidence": self.confidence,
            "rationale": self.rationale,
        }


@dataclass
class ComparisonStats:
    total_fundamentals: int = 0
    found: int = 0
    missing: int = 0
    coverage_percent: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "totalFundamentals": self.total_fundamentals,
            "found": self.found,
            "missing": self.missing,
            "coveragePercent": self.coverage_percent,
        }


@dataclass
class CategoryStats:
    total: int = 0
    found: int = 0
    missing: int = 0
    percent: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {"total": self.total, "found": self.found, "missing": self.missing, "percent": self.percent}


@dataclass
class MissingField:
    category: str
    field_name: str
    description: str
    reference_number: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "fieldName": self.field_name,
            "description": self.description,
            "referenceNumber": self.reference_number,
        }


@dataclass
class FoundField:
    category: str
    field_name: str
    matched_label: str
    completed: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "fieldName": self.field_name,
            "matchedLabel": self.matched_label,
            "completed": self.completed,
        }


@dataclass
class ComparisonReport:
    """Coverage of the fundamental fields in one execution record"""
    stats: ComparisonStats = field(default_factory=ComparisonStats)
    by_category: Dict[str, CategoryStats] = field(default_factory=dict)
    missing_fields: List[MissingField] = field(default_factory=list)
    found_fields: List[FoundField] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stats": self.stats.to_dict(),
            "byCategory": {key: s.to_dict() for key, s in self.by_category.items()},
            "missingFields": [m.to_dict() for m in self.missing_fields],
            "foundFields": [f.to_dict() for f in self.found_fields],
        }

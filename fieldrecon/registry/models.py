"""
Canonical registry data model.

The registry is a JSON document of categories, each holding the canonical
fields the grant application form is expected to contain. Dataclasses keep
Python naming; to_dict()/from_dict() convert to and from the camelCase wire
form and preserve category and field insertion order.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

from ..matching.normalize import normalize
from ..records import FieldRef


@dataclass
class CanonicalField:
    """A field the target form is expected to contain"""
    type: str = "text"
    obligatory: bool = False
    description: str = ""
    active: bool = True
    is_fundamental: bool = False
    value: Optional[str] = None
    reference_number: Optional[str] = None
    learned_label_variants: List[str] = field(default_factory=list)

    @property
    def is_active_fundamental(self) -> bool:
        return self.active and self.is_fundamental

    def has_label_variant(self, label: str) -> bool:
        target = normalize(label)
        return any(normalize(v) == target for v in self.learned_label_variants)

    def add_label_variant(self, label: str) -> bool:
        """
        Append label unless a variant with the same normal form exists.

        Returns True when the variant list changed.
        """
        if not normalize(label) or self.has_label_variant(label):
            return False
        self.learned_label_variants.append(label)
        return True

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if self.value is not None:
            data["value"] = self.value
        data.update({
            "type": self.type,
            "obligatory": self.obligatory,
            "description": self.description,
            "active": self.active,
            "isFundamental": self.is_fundamental,
        })
        if self.reference_number is not None:
            data["referenceNumber"] = self.reference_number
        data["learnedLabelVariants"] = list(self.learned_label_variants)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CanonicalField":
        canonical = cls(
            type=str(data.get("type") or "text"),
            obligatory=bool(data.get("obligatory", False)),
            description=str(data.get("description") or ""),
            active=bool(data.get("active", True)),
            is_fundamental=bool(data.get("isFundamental", False)),
            value=data.get("value"),
            reference_number=data.get("referenceNumber"),
        )
        # Editors may have introduced duplicates; keep the first of each normal form
        for variant in data.get("learnedLabelVariants") or []:
            if isinstance(variant, str):
                canonical.add_label_variant(variant)
        return canonical


@dataclass
class CanonicalCategory:
    """Group of canonical fields (e.g. legal representative, project data)"""
    name: str
    description: str = ""
    active: bool = True
    fields: Dict[str, CanonicalField] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "active": self.active,
            "fields": {key: f.to_dict() for key, f in self.fields.items()},
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CanonicalCategory":
        fields = data.get("fields") or {}
        if not isinstance(fields, dict):
            raise ValueError("category 'fields' must be an object")
        return cls(
            name=str(data.get("name") or ""),
            description=str(data.get("description") or ""),
            active=bool(data.get("active", True)),
            fields={key: CanonicalField.from_dict(value) for key, value in fields.items()},
        )


@dataclass
class RegistryMetadata:
    version: str = "1.0"
    last_modified: str = ""
    last_modified_by: str = ""
    total_fundamental_field_count: int = 0
    description: str = ""
    source: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "lastModified": self.last_modified,
            "lastModifiedBy": self.last_modified_by,
            "totalFundamentalFieldCount": self.total_fundamental_field_count,
            "description": self.description,
            "source": self.source,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RegistryMetadata":
        return cls(
            version=str(data.get("version") or "1.0"),
            last_modified=str(data.get("lastModified") or ""),
            last_modified_by=str(data.get("lastModifiedBy") or ""),
            total_fundamental_field_count=int(data.get("totalFundamentalFieldCount") or 0),
            description=str(data.get("description") or ""),
            source=str(data.get("source") or ""),
        )


@dataclass
class FundamentalFieldEntry:
    """Flattened view of an active+fundamental field, used in prompts and fallbacks"""
    category: str
    field_name: str
    description: str
    reference_number: Optional[str] = None
    label_variants: Tuple[str, ...] = ()

    @property
    def ref(self) -> FieldRef:
        return FieldRef(self.category, self.field_name)


@dataclass
class CanonicalRegistry:
    metadata: RegistryMetadata = field(default_factory=RegistryMetadata)
    categories: Dict[str, CanonicalCategory] = field(default_factory=dict)

    def get_field(self, category: str, field_name: str) -> Optional[CanonicalField]:
        cat = self.categories.get(category)
        if cat is None:
            return None
        return cat.fields.get(field_name)

    def resolve(self, ref: FieldRef) -> Optional[CanonicalField]:
        return self.get_field(ref.category, ref.field_name)

    def iter_fundamental_fields(self) -> Iterator[Tuple[str, str, CanonicalField]]:
        """Yield (category, field_name, field) for active+fundamental fields of active categories."""
        for category_key, category in self.categories.items():
            if not category.active:
                continue
            for field_name, canonical in category.fields.items():
                if canonical.is_active_fundamental:
                    yield category_key, field_name, canonical

    def fundamental_catalog(self) -> List[FundamentalFieldEntry]:
        return [
            FundamentalFieldEntry(
                category=category_key,
                field_name=field_name,
                description=canonical.description,
                reference_number=canonical.reference_number,
                label_variants=tuple(canonical.learned_label_variants),
            )
            for category_key, field_name, canonical in self.iter_fundamental_fields()
        ]

    def is_fundamental_ref(self, category: Any, field_name: Any) -> bool:
        if not isinstance(category, str) or not isinstance(field_name, str):
            return False
        cat = self.categories.get(category)
        if cat is None or not cat.active:
            return False
        canonical = cat.fields.get(field_name)
        return canonical is not None and canonical.is_active_fundamental

    def count_fundamental_fields(self) -> int:
        return sum(1 for _ in self.iter_fundamental_fields())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "metadata": self.metadata.to_dict(),
            "categories": {key: c.to_dict() for key, c in self.categories.items()},
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CanonicalRegistry":
        if not isinstance(data, dict):
            raise ValueError("registry document must be a JSON object")
        categories = data.get("categories") or {}
        if not isinstance(categories, dict):
            raise ValueError("registry 'categories' must be an object")
        return cls(
            metadata=RegistryMetadata.from_dict(data.get("metadata") or {}),
            categories={key: CanonicalCategory.from_dict(value) for key, value in categories.items()},
        )

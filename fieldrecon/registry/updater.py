#!/usr/bin/env python3
"""
Apply AI-confirmed field mappings to the canonical registry.

Confidence gates:
    > 0.5  register the real label as a learned variant of the mapped field
    > 0.8  also offer type/obligatory corrections (policy decides)
    < 0.3  unmapped labels may become new fundamental fields (policy decides)
"""

import logging
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from typing import Dict, Iterable, Optional

from ..errors import ValidationError
from ..matching.normalize import symbolic_name
from ..records import FieldMapping, FieldRef, RealFieldRecord
from .models import CanonicalCategory, CanonicalField, CanonicalRegistry
from .policy import DecisionPolicy

logger = logging.getLogger(__name__)

VARIANT_CONFIDENCE = 0.5
CORRECTION_CONFIDENCE = 0.8
NEW_FIELD_CONFIDENCE = 0.3
MAX_RENAME_ATTEMPTS = 3


@dataclass
class UpdateCounts:
    variants_added: int = 0
    corrections_applied: int = 0
    fields_created: int = 0
    fields_skipped: int = 0

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


def derive_field_name(label: str) -> str:
    """Symbolic field name for a label; raises ValidationError when it would be empty."""
    name = symbolic_name(label)
    if not name:
        raise ValidationError(f"Label {label!r} does not produce a symbolic field name")
    return name


class RegistryUpdater:
    """
    Mutates a CanonicalRegistry in place from a list of FieldMapping.

    Usage:
        updater = RegistryUpdater(registry, AutomaticPolicy())
        counts = updater.apply(mappings)
        updater.finalize()
        save_registry(registry, path)
    """

    def __init__(
        self,
        registry: CanonicalRegistry,
        policy: DecisionPolicy,
        default_category: str = "projectData",
        default_category_name: str = "Project information",
        default_category_description: str = "Project-specific data for the application",
        variant_confidence: float = VARIANT_CONFIDENCE,
        correction_confidence: float = CORRECTION_CONFIDENCE,
        new_field_confidence: float = NEW_FIELD_CONFIDENCE,
    ):
        self.registry = registry
        self.policy = policy
        self.default_category = default_category
        self.default_category_name = default_category_name
        self.default_category_description = default_category_description
        self.variant_confidence = variant_confidence
        self.correction_confidence = correction_confidence
        self.new_field_confidence = new_field_confidence
        self.counts = UpdateCounts()

    def apply(self, mappings: Iterable[FieldMapping]) -> UpdateCounts:
        for mapping in mappings:
            self.apply_mapping(mapping)
        logger.info(
            f"Registry updates: {self.counts.variants_added} variants, "
            f"{self.counts.corrections_applied} corrections, {self.counts.fields_created} new fields"
        )
        return self.counts

    def apply_mapping(self, mapping: FieldMapping) -> None:
        real = mapping.real_field

        if mapping.canonical_ref is not None:
            if mapping.confidence <= self.variant_confidence:
                return
            canonical = self.registry.resolve(mapping.canonical_ref)
            if canonical is None:
                logger.warning(f"Mapped field {mapping.canonical_ref} no longer exists, skipping '{real.label}'")
                return

            if canonical.add_label_variant(real.label):
                self.counts.variants_added += 1
                logger.debug(f"Learned variant '{real.label}' for {mapping.canonical_ref.field_name}")

            if mapping.confidence > self.correction_confidence:
                self._correct_metadata(mapping.canonical_ref, canonical, real, mapping.confidence)

        elif mapping.confidence < self.new_field_confidence:
            self._offer_new_field(real)

    def _correct_metadata(self, ref: FieldRef, canonical: CanonicalField, real: RealFieldRecord, confidence: float) -> None:
        if canonical.type != real.type and self.policy.should_apply_correction(
            ref.field_name, "type", canonical.type, real.type, confidence
        ):
            logger.info(f"Type of {ref.field_name}: {canonical.type} -> {real.type}")
            canonical.type = real.type
            self.counts.corrections_applied += 1

        if canonical.obligatory != real.required and self.policy.should_apply_correction(
            ref.field_name, "obligatory", canonical.obligatory, real.required, confidence
        ):
            logger.info(f"Obligatory flag of {ref.field_name}: {canonical.obligatory} -> {real.required}")
            canonical.obligatory = real.required
            self.counts.corrections_applied += 1

    def _resolve_field_name(self, real: RealFieldRecord) -> Optional[str]:
        # The label plus at most MAX_RENAME_ATTEMPTS answers from the policy
        candidate = real.label
        for attempt in range(MAX_RENAME_ATTEMPTS + 1):
            try:
                return derive_field_name(candidate)
            except ValidationError as e:
                logger.warning(f"{e}")
                if attempt == MAX_RENAME_ATTEMPTS:
                    return None
                candidate = self.policy.rename_field(real)
                if candidate is None:
                    return None
        return None

    def _target_category(self, requested: str) -> CanonicalCategory:
        key = requested or self.default_category
        if key not in self.registry.categories:
            if requested:
                logger.warning(f"Category '{requested}' does not exist, using '{self.default_category}'")
            key = self.default_category
        if key not in self.registry.categories:
            self.registry.categories[key] = CanonicalCategory(
                name=self.default_category_name,
                description=self.default_category_description,
                active=True,
            )
            logger.info(f"Created category '{key}'")
        return self.registry.categories[key]

    def _offer_new_field(self, real: RealFieldRecord) -> None:
        requested = self.policy.should_create_field(real, list(self.registry.categories.keys()))
        if requested is None:
            return

        name = self._resolve_field_name(real)
        if name is None:
            self.counts.fields_skipped += 1
            logger.info(f"Skipped new field for '{real.label}'")
            return

        category = self._target_category(requested)
        existing = category.fields.get(name)
        if existing is not None:
            if existing.add_label_variant(real.label):
                self.counts.variants_added += 1
            logger.info(f"Field {name} already exists, registered '{real.label}' as a variant")
            return

        category.fields[name] = CanonicalField(
            value=real.assigned_value or "",
            type=real.type,
            obligatory=real.required,
            description=real.label,
            active=True,
            is_fundamental=True,
            learned_label_variants=[real.label],
        )
        self.counts.fields_created += 1
        logger.info(f"Created fundamental field {name} for '{real.label}'")

    def finalize(self, actor: Optional[str] = None) -> None:
        """Recompute registry metadata after all mappings are applied."""
        metadata = self.registry.metadata
        metadata.total_fundamental_field_count = self.registry.count_fundamental_fields()
        metadata.last_modified = datetime.now(timezone.utc).isoformat()
        metadata.last_modified_by = actor or self.policy.actor

"""
Matching tiers for canonical fields.

1. exact_resolve: a learned label variant equals a real label after normalization
2. fuzzy_resolve: token similarity against the field's name and description

Tie-break for fuzzy matching: candidates are scanned in the order given (for
real fields, the extraction order) and only a strictly greater score replaces
the current best, so the earliest candidate with the maximal score wins.
"""

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..records import FieldMapping, RealFieldRecord
from .normalize import normalize, similarity

logger = logging.getLogger(__name__)

FUZZY_THRESHOLD = 0.6
FALLBACK_MIN_SCORE = 0.3


def build_label_index(real_fields: Iterable[RealFieldRecord]) -> Dict[str, RealFieldRecord]:
    """Map normalized label -> real field. The first field with a given normal form is kept."""
    index: Dict[str, RealFieldRecord] = {}
    for real in real_fields:
        key = normalize(real.label)
        if key and key not in index:
            index[key] = real
    return index


def exact_resolve(
    label_variants: Sequence[str],
    label_index: Dict[str, RealFieldRecord],
) -> Optional[Tuple[str, RealFieldRecord]]:
    """
    Probe the label index with every learned variant, in registry order.

    Returns (variant, real_field) for the first hit, or None.
    """
    for variant in label_variants:
        real = label_index.get(normalize(variant))
        if real is not None:
            return variant, real
    return None


def fuzzy_score(label: str, field_name: str, description: str) -> float:
    return max(similarity(label, field_name), similarity(label, description))


def fuzzy_resolve(
    field_name: str,
    description: str,
    real_fields: Sequence[RealFieldRecord],
    threshold: float = FUZZY_THRESHOLD,
) -> Optional[Tuple[RealFieldRecord, float]]:
    """
    Best real field for a canonical field by similarity to its name or description.

    Accepted iff the best score is >= threshold.
    """
    best: Optional[RealFieldRecord] = None
    best_score = 0.0

    for real in real_fields:
        score = fuzzy_score(real.label, field_name, description)
        if best is None or score > best_score:
            best = real
            best_score = score

    if best is None or best_score < threshold:
        return None
    return best, best_score


def best_canonical_match(real_field: RealFieldRecord, catalog: List, min_score: float = FALLBACK_MIN_SCORE) -> FieldMapping:
    """
    Reverse fuzzy lookup used when an AI answer cannot be parsed.

    Scores the real label against each catalog entry's name, description and
    learned variants. The first entry (registry order) with the strictly
    greatest score wins; scores <= min_score leave the field unmapped.
    """
    best_mapping = FieldMapping(real_field=real_field, confidence=0.0)

    for entry in catalog:
        scores = [
            similarity(real_field.label, entry.field_name),
            similarity(real_field.label, entry.description),
        ]
        scores.extend(similarity(real_field.label, v) for v in entry.label_variants)
        score = max(scores)

        if score > best_mapping.confidence and score > min_score:
            best_mapping = FieldMapping(
                real_field=real_field,
                canonical_ref=entry.ref,
                confidence=score,
                rationale="Text similarity",
            )

    return best_mapping

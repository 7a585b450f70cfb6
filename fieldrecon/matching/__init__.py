"""
Label matching: normalization, similarity and the non-AI resolvers.

The comparison orchestrator lives in fieldrecon.matching.comparator.
"""

from .normalize import normalize, similarity, symbolic_name
from .resolvers import (
    FUZZY_THRESHOLD,
    FALLBACK_MIN_SCORE,
    build_label_index,
    exact_resolve,
    fuzzy_resolve,
    fuzzy_score,
    best_canonical_match,
)

__all__ = [
    'normalize',
    'similarity',
    'symbolic_name',
    'FUZZY_THRESHOLD',
    'FALLBACK_MIN_SCORE',
    'build_label_index',
    'exact_resolve',
    'fuzzy_resolve',
    'fuzzy_score',
    'best_canonical_match',
]

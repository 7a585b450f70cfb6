#!/usr/bin/env python3
"""
Fundamental field comparison (read-only, no AI).

Checks which active+fundamental registry fields appear in an execution record
and aggregates coverage globally and per category.
"""

import logging
import math
from typing import Any, List, Optional

from ..extraction import extract_real_fields
from ..records import (
    CategoryStats,
    ComparisonReport,
    FoundField,
    MissingField,
    RealFieldRecord,
)
from ..registry.models import CanonicalRegistry
from .resolvers import FUZZY_THRESHOLD, build_label_index, exact_resolve, fuzzy_resolve

logger = logging.getLogger(__name__)


def coverage_percent(found: int, total: int) -> int:
    """found/total as a whole percentage, rounded half up; 0 when total is 0."""
    if total <= 0:
        return 0
    return int(math.floor(found * 100 / total + 0.5))


def compare_fundamental_fields(
    registry: CanonicalRegistry,
    execution_record: Any,
    threshold: float = FUZZY_THRESHOLD,
    real_fields: Optional[List[RealFieldRecord]] = None,
) -> ComparisonReport:
    """
    Build the coverage report of an execution record.

    Args:
        registry: Canonical registry (not modified)
        execution_record: Raw execution record as produced by the automation
        threshold: Minimum fuzzy similarity (inclusive) to count a field as found
        real_fields: Already extracted fields; extracted from execution_record when omitted

    Returns:
        ComparisonReport in registry order
    """
    if real_fields is None:
        real_fields = extract_real_fields(execution_record)
    label_index = build_label_index(real_fields)

    report = ComparisonReport()
    stats = report.stats

    for category_key, category in registry.categories.items():
        if not category.active:
            continue

        cat_stats = report.by_category.setdefault(category_key, CategoryStats())

        for field_name, canonical in category.fields.items():
            if not canonical.is_active_fundamental:
                continue

            stats.total_fundamentals += 1
            cat_stats.total += 1

            matched_label = None
            completed = False

            exact = exact_resolve(canonical.learned_label_variants, label_index)
            if exact is not None:
                matched_label, real = exact
                completed = real.completed
            else:
                fuzzy = fuzzy_resolve(field_name, canonical.description, real_fields, threshold)
                if fuzzy is not None:
                    real, score = fuzzy
                    matched_label = real.label
                    completed = real.completed
                    logger.debug(f"Fuzzy match {category_key}.{field_name} <- '{real.label}' ({score:.2f})")

            if matched_label is not None:
                stats.found += 1
                cat_stats.found += 1
                report.found_fields.append(FoundField(
                    category=category_key,
                    field_name=field_name,
                    matched_label=matched_label,
                    completed=completed,
                ))
            else:
                stats.missing += 1
                cat_stats.missing += 1
                report.missing_fields.append(MissingField(
                    category=category_key,
                    field_name=field_name,
                    description=canonical.description,
                    reference_number=canonical.reference_number,
                ))

        cat_stats.percent = coverage_percent(cat_stats.found, cat_stats.total)

    stats.coverage_percent = coverage_percent(stats.found, stats.total_fundamentals)

    logger.info(
        f"Fundamental coverage: {stats.found}/{stats.total_fundamentals} "
        f"({stats.coverage_percent}%), {len(real_fields)} real fields"
    )
    return report

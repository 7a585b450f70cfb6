#!/usr/bin/env python3
"""
Label extraction from execution records.

An execution record is produced by the form automation:

    {"completedSteps": [
        {"stepTitle": "...", "fieldDetails": [
            {"label": "...", "type": "text", "required": true,
             "completed": true, "assignedValue": "..."}]}]}
"""

import logging
from typing import Any, Dict, List

from .records import RealFieldRecord

logger = logging.getLogger(__name__)


def extract_real_fields(execution_record: Any) -> List[RealFieldRecord]:
    """
    Deduplicate field observations across all steps.

    The first observation of each (trimmed) label wins and discovery order is
    preserved. Entries without a label are skipped.
    """
    unique: Dict[str, RealFieldRecord] = {}

    if not isinstance(execution_record, dict):
        return []

    for step in execution_record.get("completedSteps") or []:
        if not isinstance(step, dict):
            continue
        for detail in step.get("fieldDetails") or []:
            if not isinstance(detail, dict):
                continue
            label = detail.get("label")
            if not isinstance(label, str):
                continue
            label = label.strip()
            if not label or label in unique:
                continue
            assigned = detail.get("assignedValue")
            unique[label] = RealFieldRecord(
                label=label,
                type=str(detail.get("type") or "text"),
                required=bool(detail.get("required") or False),
                completed=bool(detail.get("completed") or False),
                assigned_value=None if assigned is None else str(assigned),
            )

    logger.debug(f"Extracted {len(unique)} unique fields from execution record")
    return list(unique.values())

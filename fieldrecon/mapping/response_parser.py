import json
import logging
import re
from typing import Any, List, Optional

from ..errors import ResponseParseError
from ..records import FieldMapping, FieldRef, RealFieldRecord
from ..registry.models import CanonicalRegistry

logger = logging.getLogger(__name__)

_JSON_ARRAY = re.compile(r"\[[\s\S]*\]")


def _to_confidence(value: Any) -> float:
    try:
        confidence = float(value)
    except (TypeError, ValueError):
        return 0.0
    if confidence != confidence:  # NaN
        return 0.0
    return min(max(confidence, 0.0), 1.0)


def _to_index(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not number.is_integer():
        return None
    return int(number)


def extract_json_array(text: str) -> List[Any]:
    """
    Pull the JSON array out of a completion answer.

    Tolerates markdown fences and prose around the array.
    """
    if not text or not text.strip():
        raise ResponseParseError("Empty response")

    answer = text
    if '```' in answer:
        answer = re.sub(r'```\w*\n?', '', answer)

    match = _JSON_ARRAY.search(answer)
    if not match:
        raise ResponseParseError("No JSON array found in response")

    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise ResponseParseError(f"Invalid JSON in response: {e}") from e

    if not isinstance(data, list):
        raise ResponseParseError("Response JSON is not an array")
    return data


def parse_mapping_response(
    text: str,
    batch: List[RealFieldRecord],
    registry: CanonicalRegistry,
) -> List[FieldMapping]:
    """
    Turn a completion answer into mappings for the records of one batch.

    Indexes are 1-based on the wire. Items pointing outside the batch are
    ignored; references to unknown, inactive or non-fundamental fields are
    dropped and the item is kept as an unmapped mapping.

    Raises:
        ResponseParseError: the answer holds no usable JSON array
    """
    items = extract_json_array(text)
    mappings: List[FieldMapping] = []

    for item in items:
        if not isinstance(item, dict):
            continue
        index = _to_index(item.get("index"))
        if index is None or not 1 <= index <= len(batch):
            logger.debug(f"Ignoring mapping item with index {item.get('index')!r}")
            continue

        real = batch[index - 1]
        field_name = item.get("canonicalFieldName")
        category = item.get("category")
        ref = None
        if isinstance(field_name, str) and isinstance(category, str) and field_name and category:
            if registry.is_fundamental_ref(category, field_name):
                ref = FieldRef(category=category, field_name=field_name)
            else:
                logger.debug(f"Model proposed unknown field {category}.{field_name} for '{real.label}'")

        rationale = item.get("rationale")
        mappings.append(FieldMapping(
            real_field=real,
            canonical_ref=ref,
            confidence=_to_confidence(item.get("confidence")),
            rationale=None if rationale is None else str(rationale),
        ))

    return mappings

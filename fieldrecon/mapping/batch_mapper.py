#!/usr/bin/env python3
"""
AI-assisted field mapping.

Real fields are sent to the completion service in fixed-size batches, one
batch at a time. Each batch degrades on its own:

    service call raises      -> unmapped mappings with confidence 0
    answer cannot be parsed  -> reverse fuzzy match (best_canonical_match)
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from ..errors import ResponseParseError
from ..matching.resolvers import FALLBACK_MIN_SCORE, best_canonical_match
from ..records import FieldMapping, RealFieldRecord
from ..registry.models import CanonicalRegistry
from .prompts import SYSTEM_PROMPT, build_mapping_prompt
from .response_parser import parse_mapping_response

logger = logging.getLogger(__name__)

BATCH_SIZE = 20

STATUS_OK = "ok"
STATUS_PARSE_FALLBACK = "parse_fallback"
STATUS_SERVICE_ERROR = "service_error"

UsageRecorder = Callable[[int, int], Any]


@dataclass
class BatchOutcome:
    batch_number: int
    size: int
    status: str = STATUS_OK
    reason: Optional[str] = None

    @property
    def degraded(self) -> bool:
        return self.status != STATUS_OK

    def to_dict(self) -> Dict[str, Any]:
        return {
            "batchNumber": self.batch_number,
            "size": self.size,
            "status": self.status,
            "reason": self.reason,
        }


@dataclass
class BatchMappingResult:
    mappings: List[FieldMapping] = field(default_factory=list)
    batches: List[BatchOutcome] = field(default_factory=list)

    @property
    def degraded_batches(self) -> List[BatchOutcome]:
        return [b for b in self.batches if b.degraded]


def chunk_fields(real_fields: List[RealFieldRecord], batch_size: int = BATCH_SIZE) -> List[List[RealFieldRecord]]:
    """Split into ceil(n / batch_size) batches; only the last one may be smaller."""
    if batch_size < 1:
        raise ValueError("batch_size must be at least 1")
    return [real_fields[i:i + batch_size] for i in range(0, len(real_fields), batch_size)]


def _record_usage(record_usage: Optional[UsageRecorder], completion: Any) -> None:
    if record_usage is None:
        return
    usage = getattr(completion, "usage", None)
    try:
        record_usage(
            int(getattr(usage, "input_tokens", 0) or 0),
            int(getattr(usage, "output_tokens", 0) or 0),
        )
    except Exception as e:
        # Accounting is not critical for the mapping itself
        logger.warning(f"⚠️ Could not record AI usage: {e}")


async def map_fields_with_llm(
    real_fields: List[RealFieldRecord],
    registry: CanonicalRegistry,
    classifier: Any,
    record_usage: Optional[UsageRecorder] = None,
    batch_size: int = BATCH_SIZE,
    temperature: float = 0.2,
    fallback_min_score: float = FALLBACK_MIN_SCORE,
) -> BatchMappingResult:
    """
    Map real fields to fundamental fields with the completion service.

    Args:
        real_fields: Extracted real fields, in discovery order
        registry: Canonical registry (read only here)
        classifier: Object with async classify(system_prompt, user_prompt, temperature)
        record_usage: Optional callable(input_tokens, output_tokens)
        batch_size: Fields per request
        temperature: Sampling temperature for the completion service
        fallback_min_score: Minimum similarity for the parse-failure fallback

    Returns:
        BatchMappingResult with all mappings and one BatchOutcome per batch
    """
    catalog = registry.fundamental_catalog()
    batches = chunk_fields(real_fields, batch_size)
    result = BatchMappingResult()

    logger.info(f"🤖 AI mapping of {len(real_fields)} fields in {len(batches)} batches")

    for number, batch in enumerate(batches, 1):
        outcome = BatchOutcome(batch_number=number, size=len(batch))
        logger.info(f"   Processing batch {number}/{len(batches)}...")

        prompt = build_mapping_prompt(batch, catalog)
        try:
            completion = await classifier.classify(SYSTEM_PROMPT, prompt, temperature)
        except Exception as e:
            logger.error(f"   ⚠️ Error mapping batch {number}: {e}")
            outcome.status = STATUS_SERVICE_ERROR
            outcome.reason = str(e) or type(e).__name__
            result.mappings.extend(FieldMapping(real_field=real, confidence=0.0) for real in batch)
            result.batches.append(outcome)
            continue

        _record_usage(record_usage, completion)

        try:
            mappings = parse_mapping_response(getattr(completion, "text", "") or "", batch, registry)
        except ResponseParseError as e:
            logger.error(f"   ⚠️ Error parsing AI response for batch {number}: {e}")
            outcome.status = STATUS_PARSE_FALLBACK
            outcome.reason = str(e)
            mappings = [best_canonical_match(real, catalog, fallback_min_score) for real in batch]

        result.mappings.extend(mappings)
        result.batches.append(outcome)

    logger.info(f"✅ Mapping completed: {len(result.mappings)} fields processed")
    return result

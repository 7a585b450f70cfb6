#!/usr/bin/env python3
"""
Reconcile-and-learn update run.

    idle -> registry_loaded -> fields_extracted -> ai_mapped
         -> updates_applied -> persisted            (or failed)

Only registry load and persist errors end the run; batch and field level
problems are degraded in place and reported in the UpdateSummary.

Usage:
    from fieldrecon import reconcile_and_learn, setup_classifier

    summary = await reconcile_and_learn(
        execution_record,
        "data/fundamental_fields.json",
        mode="automatic",
        classifier=setup_classifier(),
    )
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .config import Config, config
from .errors import PersistenceError, RegistryLoadError
from .extraction import extract_real_fields
from .mapping.batch_mapper import BatchOutcome, UsageRecorder, map_fields_with_llm
from .registry.models import CanonicalRegistry
from .registry.policy import DecisionPolicy, create_policy
from .registry.store import load_registry, save_registry
from .registry.updater import RegistryUpdater

logger = logging.getLogger(__name__)


class RunState(str, Enum):
    IDLE = "idle"
    REGISTRY_LOADED = "registry_loaded"
    FIELDS_EXTRACTED = "fields_extracted"
    AI_MAPPED = "ai_mapped"
    UPDATES_APPLIED = "updates_applied"
    PERSISTED = "persisted"
    FAILED = "failed"


@dataclass
class UpdateSummary:
    """Outcome of an update run, filled in even when the run fails"""
    state: RunState = RunState.IDLE
    real_field_count: int = 0
    mapping_count: int = 0
    variants_added: int = 0
    corrections_applied: int = 0
    fields_created: int = 0
    fields_skipped: int = 0
    degraded_batches: List[BatchOutcome] = field(default_factory=list)
    total_fundamental_field_count: int = 0
    registry_path: Optional[str] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.state == RunState.PERSISTED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "realFieldCount": self.real_field_count,
            "mappingCount": self.mapping_count,
            "variantsAdded": self.variants_added,
            "correctionsApplied": self.corrections_applied,
            "fieldsCreated": self.fields_created,
            "fieldsSkipped": self.fields_skipped,
            "degradedBatches": [b.to_dict() for b in self.degraded_batches],
            "totalFundamentalFieldCount": self.total_fundamental_field_count,
            "registryPath": self.registry_path,
            "error": self.error,
        }


def _resolve_policy(mode: Union[str, DecisionPolicy, None]) -> DecisionPolicy:
    if isinstance(mode, DecisionPolicy):
        return mode
    return create_policy(mode or "automatic")


async def reconcile_and_learn(
    execution_record: Any,
    registry: Union[CanonicalRegistry, str, Path],
    mode: Union[str, DecisionPolicy, None] = "automatic",
    classifier: Any = None,
    record_usage: Optional[UsageRecorder] = None,
    registry_path: Optional[Union[str, Path]] = None,
    settings: Optional[Config] = None,
) -> UpdateSummary:
    """
    Map the fields of an execution record with AI and learn them into the registry.

    Args:
        execution_record: Raw execution record (dict) from the form automation
        registry: Loaded CanonicalRegistry, or the path of the registry file
        mode: "automatic", "interactive" or a DecisionPolicy instance
        classifier: Completion client with async classify(); built from env when omitted
        record_usage: Optional callable(input_tokens, output_tokens) for cost accounting
        registry_path: Where to persist; defaults to the loaded path or config.registry_path
        settings: Config override (thresholds, batch size, default category)

    Returns:
        UpdateSummary

    Raises:
        RegistryLoadError: registry missing or invalid (nothing is mutated)
        PersistenceError: registry could not be written (in-memory state is kept)
    """
    settings = settings or config
    summary = UpdateSummary()
    policy = _resolve_policy(mode)

    try:
        if isinstance(registry, CanonicalRegistry):
            target_path = Path(registry_path) if registry_path is not None else settings.registry_path
        else:
            target_path = Path(registry_path) if registry_path is not None else Path(registry)
            registry = load_registry(registry)
    except RegistryLoadError as e:
        summary.state = RunState.FAILED
        summary.error = str(e)
        e.summary = summary
        logger.error(f"❌ {e}")
        raise
    summary.registry_path = str(target_path)
    summary.state = RunState.REGISTRY_LOADED

    real_fields = extract_real_fields(execution_record)
    summary.real_field_count = len(real_fields)
    summary.state = RunState.FIELDS_EXTRACTED
    logger.info(f"✅ Extracted {len(real_fields)} unique fields")

    if classifier is None:
        from .llm_factory import setup_classifier
        classifier = setup_classifier()

    mapping_result = await map_fields_with_llm(
        real_fields,
        registry,
        classifier,
        record_usage=record_usage,
        batch_size=settings.batch_size,
        temperature=settings.temperature,
        fallback_min_score=settings.fallback_min_score,
    )
    summary.mapping_count = len(mapping_result.mappings)
    summary.degraded_batches = mapping_result.degraded_batches
    summary.state = RunState.AI_MAPPED

    updater = RegistryUpdater(
        registry,
        policy,
        default_category=settings.default_category,
        default_category_name=settings.default_category_name,
        default_category_description=settings.default_category_description,
        variant_confidence=settings.variant_confidence,
        correction_confidence=settings.correction_confidence,
        new_field_confidence=settings.new_field_confidence,
    )
    counts = updater.apply(mapping_result.mappings)
    updater.finalize()
    summary.variants_added = counts.variants_added
    summary.corrections_applied = counts.corrections_applied
    summary.fields_created = counts.fields_created
    summary.fields_skipped = counts.fields_skipped
    summary.total_fundamental_field_count = registry.metadata.total_fundamental_field_count
    summary.state = RunState.UPDATES_APPLIED

    try:
        save_registry(registry, target_path)
    except PersistenceError as e:
        summary.state = RunState.FAILED
        summary.error = str(e)
        e.summary = summary
        logger.error(f"❌ {e}")
        raise
    summary.state = RunState.PERSISTED

    logger.info(
        f"✅ Update completed: {summary.variants_added} variants, {summary.corrections_applied} corrections, "
        f"{summary.fields_created} new fields, {len(summary.degraded_batches)} degraded batches"
    )
    return summary

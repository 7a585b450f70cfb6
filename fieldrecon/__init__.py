"""
fieldrecon: reconciles the field labels seen by a form automation run with a
canonical registry of fundamental fields.

Usage:
    # Coverage report (no AI)
    from fieldrecon import load_registry, compare_fundamental_fields
    report = compare_fundamental_fields(load_registry(path), execution_record)

    # Learning run (AI mapping + registry update)
    from fieldrecon import reconcile_and_learn, setup_classifier
    summary = await reconcile_and_learn(execution_record, path, classifier=setup_classifier())
"""
from .config import Config, config
from .errors import (
    ReconciliationError,
    RegistryLoadError,
    PersistenceError,
    ServiceCallError,
    ResponseParseError,
    ValidationError,
)
from .records import RealFieldRecord, FieldRef, FieldMapping, ComparisonReport
from .matching import normalize, similarity
from .extraction import extract_real_fields
from .registry import (
    CanonicalRegistry,
    load_registry,
    save_registry,
    AutomaticPolicy,
    InteractivePolicy,
    RegistryUpdater,
)
from .matching.comparator import compare_fundamental_fields
from .mapping import map_fields_with_llm
from .llm_config import LLMConfig
from .llm_factory import setup_classifier, create_classifier
from .usage import UsageTracker
from .reconcile import reconcile_and_learn, UpdateSummary, RunState

__all__ = [
    "Config",
    "config",
    "ReconciliationError",
    "RegistryLoadError",
    "PersistenceError",
    "ServiceCallError",
    "ResponseParseError",
    "ValidationError",
    "RealFieldRecord",
    "FieldRef",
    "FieldMapping",
    "ComparisonReport",
    "normalize",
    "similarity",
    "extract_real_fields",
    "CanonicalRegistry",
    "load_registry",
    "save_registry",
    "AutomaticPolicy",
    "InteractivePolicy",
    "RegistryUpdater",
    "compare_fundamental_fields",
    "map_fields_with_llm",
    "LLMConfig",
    "setup_classifier",
    "create_classifier",
    "UsageTracker",
    "reconcile_and_learn",
    "UpdateSummary",
    "RunState",
]

__version__ = "1.0.0"

"""
Canonical field registry: model, persistence, decision policies and updater.
"""

from .models import (
    CanonicalField,
    CanonicalCategory,
    CanonicalRegistry,
    RegistryMetadata,
    FundamentalFieldEntry,
)
from .store import load_registry, save_registry, atomic_write_json
from .policy import DecisionPolicy, AutomaticPolicy, InteractivePolicy, create_policy
from .updater import RegistryUpdater, UpdateCounts, derive_field_name

__all__ = [
    'CanonicalField',
    'CanonicalCategory',
    'CanonicalRegistry',
    'RegistryMetadata',
    'FundamentalFieldEntry',
    'load_registry',
    'save_registry',
    'atomic_write_json',
    'DecisionPolicy',
    'AutomaticPolicy',
    'InteractivePolicy',
    'create_policy',
    'RegistryUpdater',
    'UpdateCounts',
    'derive_field_name',
]

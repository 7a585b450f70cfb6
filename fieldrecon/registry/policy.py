"""
Decision policies for registry updates.

A policy decides the questions an update run cannot answer on its own:
whether to correct a canonical field's metadata, whether (and where) to
create a new field for an unmapped label, and what to do with a label that
yields no usable symbolic name.

    AutomaticPolicy   - apply corrections, never create fields (unless configured)
    InteractivePolicy - ask an operator through injected confirm/ask callables
"""

import logging
from typing import Any, Callable, List, Optional

from ..records import RealFieldRecord

logger = logging.getLogger(__name__)

YES_ANSWERS = ("y", "yes", "s", "si", "sí")


class DecisionPolicy:
    """Base policy: accept nothing."""

    actor = "system"

    def should_apply_correction(
        self,
        field_name: str,
        attribute: str,
        current: Any,
        observed: Any,
        confidence: float,
    ) -> bool:
        return False

    def should_create_field(self, real_field: RealFieldRecord, categories: List[str]) -> Optional[str]:
        """
        Category key for a new field, "" for the default category, None to skip.
        """
        return None

    def rename_field(self, real_field: RealFieldRecord) -> Optional[str]:
        """Replacement name when the label gives an empty symbolic name; None skips the field."""
        return None


class AutomaticPolicy(DecisionPolicy):
    """Unattended runs: high-confidence corrections are always applied."""

    actor = "system"

    def __init__(self, create_category: Optional[str] = None):
        self.create_category = create_category

    def should_apply_correction(self, field_name, attribute, current, observed, confidence) -> bool:
        return True

    def should_create_field(self, real_field, categories) -> Optional[str]:
        return self.create_category


def _default_ask(question: str) -> str:
    return input(question)


class InteractivePolicy(DecisionPolicy):
    """
    Operator-confirmed runs.

    Args:
        confirm: question -> bool. Defaults to a y/n prompt built on ask.
        ask: question -> free-text answer. Defaults to input().
    """

    actor = "operator"

    def __init__(
        self,
        confirm: Optional[Callable[[str], bool]] = None,
        ask: Optional[Callable[[str], str]] = None,
    ):
        self.ask = ask or _default_ask
        self.confirm = confirm or self._confirm_with_ask

    def _confirm_with_ask(self, question: str) -> bool:
        answer = self.ask(f"{question} (y/n): ")
        return (answer or "").strip().lower() in YES_ANSWERS

    def should_apply_correction(self, field_name, attribute, current, observed, confidence) -> bool:
        return bool(self.confirm(
            f"Update {attribute} of '{field_name}' from {current!r} to {observed!r}? "
            f"(confidence {confidence:.2f})"
        ))

    def should_create_field(self, real_field, categories) -> Optional[str]:
        if not self.confirm(
            f"Unmapped field found: '{real_field.label}' (type: {real_field.type}). "
            f"Add it as a new fundamental field?"
        ):
            return None
        answer = self.ask(f"Which category? ({'/'.join(categories)}): ")
        return (answer or "").strip()

    def rename_field(self, real_field) -> Optional[str]:
        answer = self.ask(
            f"Label '{real_field.label}' does not produce a valid field name. "
            f"Enter a field name (empty to skip): "
        )
        answer = (answer or "").strip()
        return answer or None


def create_policy(mode: str = "automatic", **kwargs) -> DecisionPolicy:
    """Build a policy from a mode name ("automatic" or "interactive")."""
    mode = (mode or "automatic").lower()
    if mode == "interactive":
        return InteractivePolicy(**kwargs)
    if mode == "automatic":
        return AutomaticPolicy(**kwargs)
    raise ValueError(f"Unknown update mode: {mode}. Use 'automatic' or 'interactive'.")

"""
Label normalization and token similarity.

Used by every matching tier, so both functions are total: they accept any
input and never raise.
"""

import re
import unicodedata
from typing import Any

_NON_ALNUM = re.compile(r"[^a-z0-9\s]")
_WHITESPACE = re.compile(r"\s+")
_SYMBOL_SEPARATORS = re.compile(r"[^A-Z0-9]+")


def normalize(text: Any) -> str:
    """
    Canonical comparison form of a label.

    Lower-case, strip diacritics, replace punctuation with spaces and
    collapse whitespace: "  Título   del Proyecto: " -> "titulo del proyecto".
    """
    if not isinstance(text, str):
        text = "" if text is None else str(text)
    decomposed = unicodedata.normalize("NFD", text.lower())
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    stripped = _NON_ALNUM.sub(" ", stripped)
    return _WHITESPACE.sub(" ", stripped).strip()


def similarity(a: Any, b: Any) -> float:
    """Jaccard similarity of the normalized token sets of a and b, in [0, 1]."""
    norm_a = normalize(a)
    norm_b = normalize(b)

    if norm_a and norm_a == norm_b:
        return 1.0

    tokens_a = set(norm_a.split())
    tokens_b = set(norm_b.split())
    union = tokens_a | tokens_b
    if not union:
        return 0.0
    return len(tokens_a & tokens_b) / len(union)


def symbolic_name(label: Any) -> str:
    """
    Registry key for a label: "Correo electrónico (contacto)" -> "CORREO_ELECTRONICO_CONTACTO".

    May return an empty string when the label has no letters or digits.

    Accented letters keep their base letter ("Título" -> "TITULO"). Registries
    whose keys were built by turning accented letters into separators
    ("T_TULO") will not match these names, so such keys should be migrated
    before learning runs create fields next to them.
    """
    if not isinstance(label, str):
        label = "" if label is None else str(label)
    decomposed = unicodedata.normalize("NFD", label.upper())
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return _SYMBOL_SEPARATORS.sub("_", stripped).strip("_")

from typing import List

from ..records import RealFieldRecord
from ..registry.models import FundamentalFieldEntry

SYSTEM_PROMPT = (
    "You are an expert in government grant application forms. Your task is to map the labels "
    "of fields found in a live form to the canonical fundamental fields of the application. "
    "Analyze the semantic meaning of each label; labels are usually in Spanish."
)


def build_mapping_prompt(batch: List[RealFieldRecord], catalog: List[FundamentalFieldEntry]) -> str:
    """User prompt listing one batch of real fields and the full fundamental catalog."""
    real_lines = "\n".join(
        f'{idx}. "{real.label}" (type: {real.type}, required: {str(real.required).lower()})'
        for idx, real in enumerate(batch, 1)
    )
    catalog_lines = "\n".join(
        f"{idx}. [{entry.category}] {entry.field_name} - {entry.description}"
        + (f" (Ref: {entry.reference_number})" if entry.reference_number else "")
        for idx, entry in enumerate(catalog, 1)
    )

    return f"""Analyze the following field labels found in an application form and map each one to the fundamental field that represents the same concept.

**REAL FIELDS FOUND:**
{real_lines}

**AVAILABLE FUNDAMENTAL FIELDS:**
{catalog_lines}

**INSTRUCTIONS:**
- For each real field, identify the fundamental field that represents the same concept
- Consider synonyms and wording variations (e.g. "Nombre Proyecto" = "Título del Proyecto")
- If a real field does NOT correspond to any fundamental field, leave the mapping empty (null)
- Assign a confidence level between 0 and 1 to each mapping

**RESPONSE FORMAT (JSON):**
[
  {{
    "index": 1,
    "label": "Datos Generales Proyecto Nombre Proyecto",
    "canonicalFieldName": "PROJECT_TITLE",
    "category": "projectData",
    "confidence": 0.95,
    "rationale": "Clearly the title of the project"
  }},
  {{
    "index": 2,
    "label": "Campo desconocido",
    "canonicalFieldName": null,
    "category": null,
    "confidence": 0.0,
    "rationale": "Does not correspond to any fundamental field"
  }}
]

Answer ONLY with the JSON, no additional text:"""

"""
AI batch mapping of real field labels to canonical fields.
"""

from .batch_mapper import (
    BATCH_SIZE,
    BatchOutcome,
    BatchMappingResult,
    chunk_fields,
    map_fields_with_llm,
)
from .prompts import SYSTEM_PROMPT, build_mapping_prompt
from .response_parser import extract_json_array, parse_mapping_response

__all__ = [
    'BATCH_SIZE',
    'BatchOutcome',
    'BatchMappingResult',
    'chunk_fields',
    'map_fields_with_llm',
    'SYSTEM_PROMPT',
    'build_mapping_prompt',
    'extract_json_array',
    'parse_mapping_response',
]

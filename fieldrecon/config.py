#!/usr/bin/env python3
from dataclasses import dataclass
import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

@dataclass
class Config:
    """Application configuration"""
    registry_path: Path = Path(os.getenv("FIELDRECON_REGISTRY_PATH", "./data/fundamental_fields.json"))
    usage_file: Path = Path(os.getenv("FIELDRECON_USAGE_FILE", "./data/ai_consumption.json"))
    log_level: str = os.getenv("FIELDRECON_LOG_LEVEL", "INFO").upper()

    # AI batch mapping
    batch_size: int = int(os.getenv("FIELDRECON_BATCH_SIZE", "20"))
    temperature: float = float(os.getenv("FIELDRECON_TEMPERATURE", "0.2"))

    # Matching thresholds
    fuzzy_threshold: float = float(os.getenv("FIELDRECON_FUZZY_THRESHOLD", "0.6"))
    fallback_min_score: float = float(os.getenv("FIELDRECON_FALLBACK_MIN_SCORE", "0.3"))

    # Registry updates
    variant_confidence: float = float(os.getenv("FIELDRECON_VARIANT_CONFIDENCE", "0.5"))
    correction_confidence: float = float(os.getenv("FIELDRECON_CORRECTION_CONFIDENCE", "0.8"))
    new_field_confidence: float = float(os.getenv("FIELDRECON_NEW_FIELD_CONFIDENCE", "0.3"))
    default_category: str = os.getenv("FIELDRECON_DEFAULT_CATEGORY", "projectData")
    default_category_name: str = os.getenv("FIELDRECON_DEFAULT_CATEGORY_NAME", "Project information")
    default_category_description: str = os.getenv(
        "FIELDRECON_DEFAULT_CATEGORY_DESCRIPTION", "Project-specific data for the application"
    )

config = Config()

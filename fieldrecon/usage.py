"""
AI Usage Tracking

Keeps running counters of completion-service consumption in a JSON file so
cost can be accounted outside the engine.

Usage:
    from fieldrecon.usage import UsageTracker

    tracker = UsageTracker("data/ai_consumption.json")
    await map_fields_with_llm(fields, registry, classifier, record_usage=tracker.record_usage)
    print(tracker.summary())
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Union

from .registry.store import atomic_write_json

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _empty_consumption() -> Dict[str, Any]:
    now = _now()
    return {
        "nlpApi": {
            "requests": 0,
            "totalInputTokens": 0,
            "totalOutputTokens": 0,
            "lastUpdated": now,
        },
        "topicDetection": {
            "uses": 0,
            "lastUpdated": now,
        },
    }


class UsageTracker:
    """
    File-backed consumption counters.

    Each recorded completion counts as one NLP API request (with its tokens)
    and one topic detection use, since field mapping is a classification task.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self.consumption = self._load()

    def _load(self) -> Dict[str, Any]:
        data = _empty_consumption()
        if not self.path.exists():
            return data
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                stored = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Cannot read usage file {self.path}, starting from zero: {e}")
            return data
        if isinstance(stored, dict):
            for section, values in stored.items():
                if isinstance(values, dict):
                    data.setdefault(section, {}).update(values)
        return data

    def record_usage(self, input_tokens: int = 0, output_tokens: int = 0) -> None:
        now = _now()
        nlp = self.consumption["nlpApi"]
        nlp["requests"] = int(nlp.get("requests", 0)) + 1
        nlp["totalInputTokens"] = int(nlp.get("totalInputTokens", 0)) + int(input_tokens or 0)
        nlp["totalOutputTokens"] = int(nlp.get("totalOutputTokens", 0)) + int(output_tokens or 0)
        nlp["lastUpdated"] = now

        topics = self.consumption["topicDetection"]
        topics["uses"] = int(topics.get("uses", 0)) + 1
        topics["lastUpdated"] = now

        atomic_write_json(self.path, self.consumption)

    def summary(self) -> Dict[str, Any]:
        nlp = self.consumption["nlpApi"]
        return {
            "requests": nlp.get("requests", 0),
            "input_tokens": nlp.get("totalInputTokens", 0),
            "output_tokens": nlp.get("totalOutputTokens", 0),
            "topic_detection_uses": self.consumption["topicDetection"].get("uses", 0),
            "last_updated": nlp.get("lastUpdated", ""),
        }

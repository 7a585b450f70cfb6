#!/usr/bin/env python3
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Union

from ..errors import PersistenceError, RegistryLoadError
from .models import CanonicalRegistry

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def atomic_write_json(path: PathLike, data: Any) -> Path:
    """
    Write JSON next to the target and rename it into place.

    Readers see either the previous document or the new one, never a
    partial write. The temp file is removed if anything fails.
    """
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=str(target.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
            f.write("\n")
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, target)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except OSError:
            pass
        raise
    return target


def load_registry(path: PathLike) -> CanonicalRegistry:
    """Load the canonical registry, raising RegistryLoadError when missing or invalid."""
    p = Path(path)
    try:
        with open(p, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise RegistryLoadError(f"Registry file not found: {p}") from e
    except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
        raise RegistryLoadError(f"Cannot read registry {p}: {e}") from e

    try:
        registry = CanonicalRegistry.from_dict(data)
    except (TypeError, ValueError) as e:
        raise RegistryLoadError(f"Invalid registry structure in {p}: {e}") from e

    logger.info(
        f"Loaded registry {p} ({len(registry.categories)} categories, "
        f"{registry.count_fundamental_fields()} fundamental fields)"
    )
    return registry


def save_registry(registry: CanonicalRegistry, path: PathLike) -> Path:
    """Persist the whole registry atomically, raising PersistenceError on failure."""
    try:
        target = atomic_write_json(path, registry.to_dict())
    except (OSError, TypeError, ValueError) as e:
        raise PersistenceError(f"Cannot write registry {path}: {e}") from e
    logger.info(f"Registry saved to {target}")
    return target

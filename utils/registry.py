# ┏━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━┓
# ┃ utils/registry.py: survey metadata + normative tables (JSON / YAML)  ┃
# ┗━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━┛
from __future__ import annotations
from pathlib import Path
from typing import Dict, Any, List, Optional
import json
import logging
import os

import yaml

logger = logging.getLogger(__name__)

ROOT = Path(__file__).resolve().parent.parent


def surveys_dir() -> Path:
    return Path(os.getenv("STAI_SURVEYS_DIR") or ROOT / "surveys")


def norms_dir() -> Path:
    return Path(os.getenv("STAI_NORMS_DIR") or ROOT / "norms")


def _load_json(p: Path) -> Dict[str, Any]:
    with p.open("r", encoding="utf-8") as f:
        return json.load(f)


def _load_yaml(p: Path) -> Dict[str, Any]:
    with p.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _load_any(p: Path) -> Dict[str, Any]:
    return _load_json(p) if p.suffix.lower() == ".json" else _load_yaml(p)


def _candidates(folder: Path, key: str) -> List[Path]:
    return [folder / f"{key}.json", folder / f"{key}.yaml", folder / f"{key}.yml"]


def _infer_meta(doc: Dict[str, Any], fallback_key: str) -> Dict[str, Any]:
    return {
        "key": doc.get("key", fallback_key),
        "title": doc.get("title", fallback_key),
        "input_type": doc.get("input_type", "radio"),
    }


def list_surveys() -> List[Dict[str, Any]]:
    """
    Survey metas under surveys/ (JSON first, then .yaml/.yml).
    Unreadable files are logged and skipped.
    """
    folder = surveys_dir()
    if not folder.exists():
        logger.warning("%s does not exist; no surveys available", folder)
        return []

    files = sorted(folder.glob("*.json")) + sorted(folder.glob("*.yaml")) + sorted(folder.glob("*.yml"))
    metas: List[Dict[str, Any]] = []
    for p in files:
        try:
            metas.append(_infer_meta(_load_any(p) or {}, p.stem))
        except (OSError, ValueError, yaml.YAMLError) as e:
            logger.warning("Could not read survey meta %s: %s", p.name, e)

    if not metas:
        logger.warning("No readable survey files (.json/.yaml/.yml) in %s", folder)
    return metas


def _load_first(folder: Path, key: str, what: str) -> Dict[str, Any]:
    for p in _candidates(folder, key):
        if p.exists():
            try:
                return _load_any(p)
            except (OSError, ValueError, yaml.YAMLError):
                logger.error("Failed to load %s file %s", what, p.name)
                raise

    logger.error("No %s file for key=%s in %s (.json|.yaml|.yml)", what, key, folder)
    raise FileNotFoundError(f"No {what} file for key={key}")


def load_survey(key: str) -> Dict[str, Any]:
    """
    Full survey document for key.
    Priority: surveys/{key}.json → {key}.yaml → {key}.yml
    """
    return _load_first(surveys_dir(), key, "survey")


def load_norms(key: str, folder: Optional[Path] = None) -> Dict[str, Any]:
    """Raw normative table document: norms/{key}.yaml (same priority as surveys)."""
    return _load_first(folder or norms_dir(), key, "norms")

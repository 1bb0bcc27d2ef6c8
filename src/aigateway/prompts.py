"""Task prompt construction.

Rules:
- One prompt pair (system + user) per task, in Arabic (default) or English.
- Template text lives in src/prompts/tasks.yaml; this module only picks the
  locale and slices the relevant part of the payload.
- The user message is a JSON document: {instruction, schema, input}.
  voice_to_report also carries the caller's report template.
- Missing payload fields fall back to empty values. Only an unknown task
  yields None.
"""
from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import yaml

from .errors import ConfigError
from .types import PromptPair
from .logging_util import get_logger

logger = get_logger(__name__)

_TEMPLATES_PATH = Path(__file__).resolve().parents[1] / "prompts" / "tasks.yaml"

@lru_cache(maxsize=1)
def load_templates(path: Path = _TEMPLATES_PATH) -> Dict[str, Dict[str, Any]]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to load prompt templates: {path} ({e})")
    if not isinstance(data, dict):
        raise ConfigError(f"Prompt templates must be a mapping: {path}")
    return data

def resolve_lang(payload: Any, meta: Any) -> str:
    meta = meta if isinstance(meta, dict) else {}
    payload = payload if isinstance(payload, dict) else {}
    lang = str(meta.get("lang") or payload.get("lang") or "ar").lower()
    return "en" if lang.startswith("en") else "ar"

def _as_text(v: Any) -> str:
    if v is None:
        return ""
    return str(v)

def _panorama_input(payload: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "findings": payload.get("findings") or payload.get("items") or [],
        "summary": payload.get("summary") or {},
    }

def _ceph_input(payload: Dict[str, Any]) -> Any:
    return payload.get("ceph") or payload.get("measurements") or payload or {}

def _voice_input(payload: Dict[str, Any]) -> str:
    return _as_text(payload.get("transcript") or payload.get("text"))

def _ask_input(payload: Dict[str, Any]) -> str:
    return _as_text(payload.get("question") or payload.get("q"))

_INPUTS: Dict[str, Callable[[Dict[str, Any]], Any]] = {
    "panorama_json_to_report": _panorama_input,
    "ceph_treatment_planner": _ceph_input,
    "voice_to_report": _voice_input,
    "ask_radiology": _ask_input,
}

TASKS = tuple(_INPUTS)

def build_prompts(task: str, payload: Any, meta: Any = None) -> Optional[PromptPair]:
    slicer = _INPUTS.get(task)
    if slicer is None:
        return None

    tpl = load_templates().get(task) or {}
    lang = resolve_lang(payload, meta)
    payload = payload if isinstance(payload, dict) else {}

    user: Dict[str, Any] = {"instruction": (tpl.get("instruction") or {}).get(lang, "")}
    if task == "voice_to_report":
        user["template"] = _as_text(payload.get("template"))
    user["schema"] = tpl.get("schema") or {}
    user["input"] = slicer(payload)

    logger.debug("built prompts task=%s lang=%s", task, lang)
    return PromptPair(
        system=(tpl.get("system") or {}).get(lang, ""),
        user=json.dumps(user, ensure_ascii=False, default=str),
    )

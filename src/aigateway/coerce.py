"""Output coercion.

Models are told to answer with JSON only, but often wrap it in prose or code
fences. Recovery is best-effort:
- parse the whole trimmed text
- otherwise parse the greedy {...} region
- otherwise give up; the caller keeps the raw text instead

This file implements:
- coerce_json_object_text(text) -> (parsed_json_or_none, error_or_none)
- extract_json(text) -> parsed_json_or_none
- strict_loads(text): JSON parse that rejects NaN and Infinity
"""
from __future__ import annotations

import json
import re
from typing import Any, Dict, Optional, Tuple

def _reject_constant(name: str):
    raise ValueError(f"non-standard JSON constant: {name}")

def strict_loads(s: str) -> Any:
    """json.loads without NaN / Infinity, which JSON.parse on the client rejects."""
    return json.loads(s, parse_constant=_reject_constant)

_OBJECT_RE = re.compile(r"\{.*\}", flags=re.DOTALL)

def _extract_first_json_object(text: str) -> Optional[str]:
    m = _OBJECT_RE.search(text)
    if not m:
        return None
    return m.group(0)

def coerce_json_object_text(text: Any) -> Tuple[Optional[Dict[str, Any]], Optional[str]]:
    if text is None:
        return None, "empty response"

    s = str(text).strip()
    if not s:
        return None, "empty response"

    try:
        obj = strict_loads(s)
        if isinstance(obj, dict):
            return obj, None
    except ValueError:
        pass

    extracted = _extract_first_json_object(s)
    if not extracted:
        return None, "no JSON object found in text"

    try:
        obj = strict_loads(extracted)
    except ValueError as e:
        return None, f"json parse failed after extraction: {e}"
    if isinstance(obj, dict):
        return obj, None
    return None, "extracted JSON is not an object"

def extract_json(text: Any) -> Optional[Dict[str, Any]]:
    obj, _ = coerce_json_object_text(text)
    return obj

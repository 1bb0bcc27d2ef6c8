"""Shared types and lightweight data containers.

Everything here is request-scoped except RateBucket, which lives as long as
the warm function instance.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

@dataclass
class GatewayRequest:
    task: str
    payload: Dict[str, Any] = field(default_factory=dict)
    meta: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_body(cls, body: Dict[str, Any]) -> "GatewayRequest":
        payload = body.get("payload") or {}
        meta = body.get("meta") or {}
        return cls(
            task=str(body.get("task") or "").strip(),
            payload=payload if isinstance(payload, dict) else {},
            meta=meta if isinstance(meta, dict) else {},
        )

@dataclass(frozen=True)
class PromptPair:
    system: str
    user: str

@dataclass
class UpstreamResult:
    raw: str
    usage: Optional[Dict[str, Any]] = None

@dataclass
class FinalResult:
    parsed: Dict[str, Any]
    raw: str
    model: str
    usage: Optional[Dict[str, Any]] = None

@dataclass
class RateBucket:
    window_start: float
    count: int = 0

"""Gateway configuration.

Layers (later wins):
1) built-in defaults below
2) src/configs/gateway.yaml (or the file named by AIGATEWAY_CONFIG)
3) environment variables (provider selector, models, base URLs, timeout)

API keys are NOT part of the config object. They are read from the
environment at call time so a missing key fails only the request that needs it.

gateway.yaml supports:
- timeout_ms: 25000
- max_body_chars: 250000
- default_temperature: 0.2
- raw_result_max_chars: 50000
- rate_limit: {window_ms: 60000, max_requests: 40}
- providers:
    openrouter: {base_url: ..., api_key_env: OPENROUTER_API_KEY}
    openai: {base_url: ..., api_key_env: OPENAI_API_KEY}
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from .logging_util import get_logger

logger = get_logger(__name__)

DEFAULT_MODEL = "google/gemma-3-12b-it:free"
DEFAULT_FALLBACK_MODEL = "google/gemma-3-4b-it:free"

@dataclass
class ProviderSettings:
    base_url: str
    api_key_env: str

    @property
    def endpoint(self) -> str:
        return f"{self.base_url.rstrip('/')}/chat/completions"

def _default_providers() -> Dict[str, ProviderSettings]:
    return {
        "openrouter": ProviderSettings("https://openrouter.ai/api/v1", "OPENROUTER_API_KEY"),
        "openai": ProviderSettings("https://api.openai.com/v1", "OPENAI_API_KEY"),
    }

@dataclass
class GatewayConfig:
    provider: str = "openrouter"
    model: str = DEFAULT_MODEL
    fallback_model: str = DEFAULT_FALLBACK_MODEL
    timeout_ms: int = 25_000
    max_body_chars: int = 250_000
    default_temperature: float = 0.2
    raw_result_max_chars: int = 50_000
    rate_window_ms: int = 60_000
    rate_max_requests: int = 40
    providers: Dict[str, ProviderSettings] = field(default_factory=_default_providers)

def _to_int(v: Any, default: int) -> int:
    if v is None:
        return default
    try:
        return int(v)
    except (TypeError, ValueError):
        return default

def _to_float(v: Any, default: float) -> float:
    if v is None:
        return default
    try:
        return float(v)
    except (TypeError, ValueError):
        return default

def _env(environ: Mapping[str, str], key: str) -> str:
    return (environ.get(key) or "").strip()

def _load_yaml(path: Path) -> Dict:
    if not path.exists():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.error("Failed to load YAML: %s (%s)", path, e)
        return {}
    if not isinstance(data, dict):
        logger.error("Ignoring YAML config that is not a mapping: %s", path)
        return {}
    return data

def config_path(project_root: Path, environ: Mapping[str, str]) -> Path:
    override = _env(environ, "AIGATEWAY_CONFIG")
    if override:
        return Path(override)
    return project_root / "src" / "configs" / "gateway.yaml"

def load_config(project_root: Optional[Path] = None, environ: Optional[Mapping[str, str]] = None) -> GatewayConfig:
    # <root>/src/aigateway/config.py -> parents[2] == <root>
    project_root = project_root or Path(__file__).resolve().parents[2]
    environ = os.environ if environ is None else environ

    cfg = GatewayConfig()
    data = _load_yaml(config_path(project_root, environ))

    cfg.timeout_ms = _to_int(data.get("timeout_ms"), cfg.timeout_ms)
    cfg.max_body_chars = _to_int(data.get("max_body_chars"), cfg.max_body_chars)
    cfg.default_temperature = _to_float(data.get("default_temperature"), cfg.default_temperature)
    cfg.raw_result_max_chars = _to_int(data.get("raw_result_max_chars"), cfg.raw_result_max_chars)

    rate = data.get("rate_limit") or {}
    if isinstance(rate, dict):
        cfg.rate_window_ms = _to_int(rate.get("window_ms"), cfg.rate_window_ms)
        cfg.rate_max_requests = _to_int(rate.get("max_requests"), cfg.rate_max_requests)

    providers = data.get("providers") or {}
    if isinstance(providers, dict):
        for name, p in providers.items():
            if not isinstance(p, dict):
                continue
            current = cfg.providers.get(name)
            base_url = str(p.get("base_url") or (current.base_url if current else "")).strip()
            api_key_env = str(p.get("api_key_env") or (current.api_key_env if current else "")).strip()
            if base_url and api_key_env:
                cfg.providers[name] = ProviderSettings(base_url, api_key_env)

    cfg.provider = (_env(environ, "AI_PROVIDER") or cfg.provider).lower()
    cfg.model = _env(environ, "MODEL_TEXT") or cfg.model
    cfg.fallback_model = _env(environ, "MODEL_TEXT_FALLBACK") or cfg.fallback_model
    cfg.timeout_ms = _to_int(_env(environ, "AI_TIMEOUT_MS") or None, cfg.timeout_ms)

    for name, env_key in (("openrouter", "OPENROUTER_BASE_URL"), ("openai", "OPENAI_BASE_URL")):
        base_url = _env(environ, env_key)
        if base_url and name in cfg.providers:
            cfg.providers[name].base_url = base_url

    logger.debug(
        "Loaded config provider=%s model=%s fallback=%s timeout_ms=%d",
        cfg.provider, cfg.model, cfg.fallback_model, cfg.timeout_ms,
    )
    return cfg

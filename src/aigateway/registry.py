"""Provider registry.

Design:
- Exactly two backends are supported: openrouter and openai.
- Both speak the OpenAI chat.completions wire format; they differ only in
  endpoint, API key variable and (for OpenRouter) optional attribution headers.
- The provider is chosen by config (AI_PROVIDER), once per Gateway instance.
"""
from __future__ import annotations

import os
from typing import Dict, Mapping, Optional

from .adapters import ChatProvider, OpenAIStyleProvider
from .config import GatewayConfig
from .errors import UnknownProviderError

SUPPORTED_PROVIDERS = ("openrouter", "openai")

def _openrouter_headers(environ: Mapping[str, str]) -> Dict[str, str]:
    headers: Dict[str, str] = {}
    referer = (environ.get("OPENROUTER_HTTP_REFERER") or "").strip()
    title = (environ.get("OPENROUTER_X_TITLE") or "").strip()
    if referer:
        headers["HTTP-Referer"] = referer
    if title:
        headers["X-Title"] = title
    return headers

def build_provider(name: str, config: GatewayConfig, environ: Optional[Mapping[str, str]] = None) -> ChatProvider:
    environ = os.environ if environ is None else environ
    name = (name or "").strip().lower()
    settings = config.providers.get(name)
    if name not in SUPPORTED_PROVIDERS or settings is None:
        raise UnknownProviderError(f"Unknown AI_PROVIDER: {name or '<empty>'}")

    extra = _openrouter_headers(environ) if name == "openrouter" else {}
    return OpenAIStyleProvider(
        name=name,
        endpoint=settings.endpoint,
        api_key_env=settings.api_key_env,
        timeout_ms=config.timeout_ms,
        extra_headers=extra,
    )

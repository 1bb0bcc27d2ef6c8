"""Gateway: request orchestrator.

Pipeline for one HTTP event:
  OPTIONS -> 204 preflight
  method -> rate limit -> body size -> JSON body -> task prompts
  -> primary model -> (on failure) fallback model once -> 200 / 502
"""
from __future__ import annotations

import time
from typing import Any, Dict, Optional

from .adapters import ChatProvider
from .coerce import coerce_json_object_text, strict_loads
from .config import GatewayConfig, load_config
from .errors import GatewayError
from .events import body_of, client_id, cors_headers, error, headers_of, method_of, respond
from .prompts import build_prompts
from .rate_limit import InMemoryRateLimiter, RateLimiter
from .registry import build_provider
from .types import FinalResult, GatewayRequest, PromptPair
from .logging_util import get_logger, log_step

logger = get_logger(__name__)

class Gateway:
    def __init__(
        self,
        config: Optional[GatewayConfig] = None,
        rate_limiter: Optional[RateLimiter] = None,
        provider: Optional[ChatProvider] = None,
    ):
        self.config = config if config is not None else load_config()
        if rate_limiter is None:
            rate_limiter = InMemoryRateLimiter(
                window_ms=self.config.rate_window_ms,
                max_requests=self.config.rate_max_requests,
            )
        self.rate_limiter = rate_limiter
        self._provider = provider

    @property
    def provider(self) -> ChatProvider:
        # Built on first use so an unknown AI_PROVIDER fails requests, not the cold start.
        if self._provider is None:
            self._provider = build_provider(self.config.provider, self.config)
        return self._provider

    def handle(self, event: Any) -> Dict[str, Any]:
        if not isinstance(event, dict):
            event = {}
        req_headers = headers_of(event)
        headers = cors_headers(req_headers.get("origin"))
        t0 = time.time()
        try:
            return self._handle(event, req_headers, headers)
        except Exception as e:
            logger.exception("Gateway.handle failed: %s", e)
            return error(500, headers, "Internal error", str(e))
        finally:
            logger.info("request done in %d ms", int((time.time() - t0) * 1000))

    def _handle(self, event: Dict[str, Any], req_headers: Dict[str, str], headers: Dict[str, str]) -> Dict[str, Any]:
        method = method_of(event)
        if method == "OPTIONS":
            return respond(204, headers)
        if method != "POST":
            return error(405, headers, "Method Not Allowed")

        log_step(logger, "1", "rate limit")
        ip = client_id(req_headers)
        if not self.rate_limiter.allow(ip):
            logger.warning("rate limit exceeded for %s", ip)
            return error(429, headers, "Rate limit exceeded")

        log_step(logger, "2", "size check and parse body")
        raw_body = body_of(event, max_chars=self.config.max_body_chars)
        if len(raw_body) > self.config.max_body_chars:
            return error(413, headers, "Payload too large")

        try:
            body = strict_loads(raw_body)
        except ValueError:
            return error(400, headers, "Invalid JSON")
        if not isinstance(body, dict):
            return error(400, headers, "Invalid JSON")

        req = GatewayRequest.from_body(body)

        log_step(logger, "3", "build prompts task=%s", req.task)
        prompts = build_prompts(req.task, req.payload, req.meta)
        if prompts is None:
            return error(400, headers, "Unknown task")

        temperature = self._temperature(req.payload)

        log_step(logger, "4", "call provider=%s", self.config.provider)
        try:
            result = self.complete(prompts, temperature)
        except GatewayError as e:
            logger.error("upstream failed after fallback: %s", e)
            return error(502, headers, "AI upstream error", str(e))

        return respond(200, headers, {
            "ok": True,
            "task": req.task,
            "provider": self.config.provider,
            "model_used": result.model,
            "result": result.parsed,
            "usage": result.usage,
        })

    def _temperature(self, payload: Dict[str, Any]) -> float:
        t = payload.get("temperature")
        if isinstance(t, (int, float)) and not isinstance(t, bool):
            return float(t)
        return self.config.default_temperature

    def complete(self, prompts: PromptPair, temperature: float) -> FinalResult:
        """Primary model first; on any gateway failure, exactly one fallback attempt."""
        try:
            return self._run(self.config.model, prompts, temperature)
        except GatewayError as e:
            logger.warning(
                "primary model %s failed (%s); retrying with %s",
                self.config.model, e, self.config.fallback_model,
            )
        return self._run(self.config.fallback_model, prompts, temperature)

    def _run(self, model: str, prompts: PromptPair, temperature: float) -> FinalResult:
        t_call = time.time()
        out = self.provider.complete(model, prompts.system, prompts.user, temperature)
        logger.info("model %s answered in %d ms", model, int((time.time() - t_call) * 1000))

        parsed, parse_error = coerce_json_object_text(out.raw)
        if parsed is None:
            logger.warning("model %s output not JSON (%s); returning raw text", model, parse_error)
            parsed = {"raw": out.raw[: self.config.raw_result_max_chars]}
        return FinalResult(parsed=parsed, raw=out.raw, model=model, usage=out.usage)

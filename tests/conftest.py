import json
import time
from typing import List
from unittest.mock import Mock

import pytest

from src.aigateway.adapters import ChatProvider
from src.aigateway.config import GatewayConfig
from src.aigateway.types import UpstreamResult

ENV_KEYS = (
    "AI_PROVIDER", "MODEL_TEXT", "MODEL_TEXT_FALLBACK", "AI_TIMEOUT_MS", "AIGATEWAY_CONFIG",
    "OPENROUTER_API_KEY", "OPENROUTER_BASE_URL", "OPENROUTER_HTTP_REFERER", "OPENROUTER_X_TITLE",
    "OPENAI_API_KEY", "OPENAI_BASE_URL",
)

@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for k in ENV_KEYS:
        monkeypatch.delenv(k, raising=False)

@pytest.fixture
def config():
    return GatewayConfig(provider="openrouter", model="primary-model", fallback_model="fallback-model")

class FakeClock:
    def __init__(self, t: float = 0.0):
        self.t = t

    def __call__(self) -> float:
        return self.t

    def advance(self, ms: float):
        self.t += ms

@pytest.fixture
def clock():
    return FakeClock()

class FakeProvider(ChatProvider):
    name = "fake"

    def __init__(self, outcomes: List):
        self.outcomes = list(outcomes)
        self.calls = []

    def complete(self, model, system_prompt, user_prompt, temperature):
        self.calls.append({"model": model, "system": system_prompt, "user": user_prompt, "temperature": temperature})
        out = self.outcomes.pop(0)
        if isinstance(out, Exception):
            raise out
        if isinstance(out, UpstreamResult):
            return out
        return UpstreamResult(raw=out)

def mock_response(status_code=200, data=None, text=None):
    r = Mock()
    r.status_code = status_code
    r.encoding = "utf-8"
    if text is None:
        text = json.dumps(data)
    r.iter_content.return_value = [text.encode("utf-8")] if text else []
    return r

def trickle(payload: bytes, delay: float):
    def _iter(chunk_size):
        for i in range(len(payload)):
            time.sleep(delay)
            yield payload[i:i + 1]
    return _iter

def completion(content, usage=None):
    data = {"choices": [{"message": {"role": "assistant", "content": content}}]}
    if usage is not None:
        data["usage"] = usage
    return mock_response(200, data)

def post_event(body, headers=None, method="POST"):
    return {
        "httpMethod": method,
        "headers": headers or {"x-nf-client-connection-ip": "10.0.0.1", "origin": "https://app.example"},
        "body": body if isinstance(body, str) else json.dumps(body, ensure_ascii=False),
    }

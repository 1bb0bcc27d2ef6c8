"""OpenAI-style chat.completions provider (OpenAI and OpenRouter).

The timeout is a hard deadline for the whole call: the body is streamed and a
timer closes the response when the deadline passes, so a slow trickle of
bytes cannot keep the call alive.
"""
from __future__ import annotations

import os
import threading
import time
from typing import Any, Dict, Optional

import requests

from ..coerce import strict_loads
from ..errors import ConfigError, UpstreamError, UpstreamTimeout
from ..logging_util import get_logger
from ..types import UpstreamResult
from .base import ChatProvider

logger = get_logger(__name__)

_CHUNK_SIZE = 1024

def _sanitize_api_key(raw: str) -> str:
    k = (raw or "").strip()
    k = k.strip(' "\'`')
    k = k.strip("“”‘’")
    return k

def _read_api_key(key: str) -> str:
    v = _sanitize_api_key(os.getenv(key) or "")
    if not v:
        raise ConfigError(f"Server missing {key}")
    return v

def _safe_json(text: str) -> Any:
    try:
        return strict_loads(text)
    except ValueError:
        return None

def _error_message(data: Any, text: str) -> str:
    if isinstance(data, dict):
        err = data.get("error")
        if isinstance(err, dict) and err.get("message"):
            return str(err["message"])
        if isinstance(err, str) and err.strip():
            return err
        if data.get("message"):
            return str(data["message"])
    text = (text or "").strip()
    if text:
        return text[:800]
    return "Upstream error"

def _extract_content(data: Any) -> str:
    if not isinstance(data, dict):
        return ""
    choices = data.get("choices") or []
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return ""
    msg = choices[0].get("message") or {}
    if not isinstance(msg, dict):
        return ""
    return str(msg.get("content") or "")

class OpenAIStyleProvider(ChatProvider):
    def __init__(
        self,
        name: str,
        endpoint: str,
        api_key_env: str,
        timeout_ms: int = 25_000,
        extra_headers: Optional[Dict[str, str]] = None,
    ):
        self.name = name
        self.endpoint = endpoint
        self.api_key_env = api_key_env
        self.timeout_ms = timeout_ms
        self.extra_headers = dict(extra_headers or {})

    def _timeout(self, e: Optional[Exception] = None) -> UpstreamTimeout:
        detail = f": {e}" if e else ""
        return UpstreamTimeout(f"{self.name} timed out after {self.timeout_ms} ms{detail}")

    def _read_body(self, r: requests.Response, deadline: float) -> str:
        expired = threading.Event()

        def _abort():
            expired.set()
            r.close()

        timer = threading.Timer(max(deadline - time.monotonic(), 0), _abort)
        timer.daemon = True
        timer.start()

        chunks = []
        try:
            for chunk in r.iter_content(chunk_size=_CHUNK_SIZE):
                if expired.is_set() or time.monotonic() > deadline:
                    raise self._timeout()
                chunks.append(chunk)
        except requests.Timeout as e:
            raise self._timeout(e)
        except (requests.RequestException, OSError, ValueError) as e:
            # closing the response mid-read surfaces as a read error
            if expired.is_set():
                raise self._timeout(e)
            raise UpstreamError(f"request failed: {e}")
        finally:
            timer.cancel()
            r.close()

        if expired.is_set():
            raise self._timeout()
        return b"".join(chunks).decode(r.encoding or "utf-8", errors="replace")

    def complete(self, model: str, system_prompt: str, user_prompt: str, temperature: float) -> UpstreamResult:
        api_key = _read_api_key(self.api_key_env)

        headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }
        headers.update(self.extra_headers)

        payload: Dict[str, Any] = {
            "model": model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": temperature,
        }

        deadline = time.monotonic() + self.timeout_ms / 1000
        try:
            r = requests.post(self.endpoint, headers=headers, json=payload, timeout=self.timeout_ms / 1000, stream=True)
        except requests.Timeout as e:
            raise self._timeout(e)
        except requests.RequestException as e:
            raise UpstreamError(f"request failed: {e}")

        text = self._read_body(r, deadline)
        data = _safe_json(text)
        if not (200 <= r.status_code < 300):
            raise UpstreamError(f"http {r.status_code}: {_error_message(data, text)}", status=r.status_code)

        usage = data.get("usage") if isinstance(data, dict) else None
        return UpstreamResult(raw=_extract_content(data), usage=usage if isinstance(usage, dict) else None)

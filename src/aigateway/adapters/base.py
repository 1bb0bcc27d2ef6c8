"""Chat provider interface."""
from __future__ import annotations

from ..types import UpstreamResult

class ChatProvider:
    name: str = ""

    def complete(self, model: str, system_prompt: str, user_prompt: str, temperature: float) -> UpstreamResult:
        raise NotImplementedError

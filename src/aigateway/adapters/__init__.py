from .base import ChatProvider
from .openai_style import OpenAIStyleProvider

__all__ = ["ChatProvider", "OpenAIStyleProvider"]

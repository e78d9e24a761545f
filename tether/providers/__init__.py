"""Model endpoint providers."""

from .base import BaseProvider, ProviderConfig, ToolConfig
from .gemini import GeminiProvider
from .response import ModelReply

__all__ = [
    "BaseProvider",
    "ProviderConfig",
    "ToolConfig",
    "GeminiProvider",
    "ModelReply",
]

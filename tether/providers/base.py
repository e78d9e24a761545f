"""Model endpoint interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from ..conversation import Conversation
    from ..tools.schema import FunctionDeclaration
    from .response import ModelReply


@dataclass
class ProviderConfig:
    """Configuration for a model endpoint."""
    api_key: str
    model: str = "gemini-2.0-flash-001"
    base_url: Optional[str] = None
    api_version: str = "v1alpha"
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    timeout: float = 60.0


@dataclass(frozen=True)
class ToolConfig:
    """Tool settings for one generate() call.

    With ``force_call`` set, the reply must consist only of calls to
    functions named in ``allowed_names``.
    """
    force_call: bool
    allowed_names: tuple[str, ...]
    declarations: tuple["FunctionDeclaration", ...]


class BaseProvider(ABC):
    """Abstract base class for model endpoints."""

    def __init__(self, config: ProviderConfig):
        self.config = config
        self.name = self.__class__.__name__

    @abstractmethod
    def generate(
        self,
        conversation: "Conversation",
        tool_config: Optional[ToolConfig] = None,
    ) -> "ModelReply":
        """Send the conversation and return the model's reply.

        Args:
            conversation: Ordered turns so far.
            tool_config: Optional tool declarations and calling mode.

        Raises:
            ModelRequestError: If the endpoint call fails.
        """

    def close(self) -> None:
        """Release any held connections."""

"""Replies from the model endpoint."""

from dataclasses import dataclass
from typing import Optional

from ..conversation import ProposedCall


@dataclass(frozen=True)
class ModelReply:
    """Immutable container for one generate() result.

    ``text`` is None when the model produced no text parts at all.
    """

    text: Optional[str] = None
    proposed_calls: tuple[ProposedCall, ...] = ()
    input_tokens: int = 0
    output_tokens: int = 0
    model: str = ""

    @property
    def has_calls(self) -> bool:
        return bool(self.proposed_calls)

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens

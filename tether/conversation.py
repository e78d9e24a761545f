"""Append-only conversation log sent to the model endpoint.

Every step of a query returns a new Conversation with one more turn, so
earlier turns can never be edited or dropped.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator, Union


class Role(str, Enum):
    USER = "user"
    MODEL = "model"


@dataclass(frozen=True)
class ProposedCall:
    """A model-emitted request to invoke one declared function."""

    name: str
    args: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class TextPart:
    text: str

    def to_dict(self) -> dict:
        return {"text": self.text}


@dataclass(frozen=True)
class FunctionCallPart:
    name: str
    args: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_call(cls, call: ProposedCall) -> "FunctionCallPart":
        return cls(name=call.name, args=dict(call.args))

    def to_dict(self) -> dict:
        return {"functionCall": {"name": self.name, "args": dict(self.args)}}


@dataclass(frozen=True)
class FunctionResponsePart:
    name: str
    response: dict[str, Any]

    def to_dict(self) -> dict:
        return {"functionResponse": {"name": self.name, "response": dict(self.response)}}


Part = Union[TextPart, FunctionCallPart, FunctionResponsePart]


@dataclass(frozen=True)
class ConversationTurn:
    role: Role
    parts: tuple[Part, ...]

    @classmethod
    def user_text(cls, text: str) -> "ConversationTurn":
        return cls(role=Role.USER, parts=(TextPart(text),))

    def to_dict(self) -> dict:
        return {
            "role": self.role.value,
            "parts": [part.to_dict() for part in self.parts],
        }


@dataclass(frozen=True)
class Conversation:
    """Immutable ordered sequence of turns."""

    turns: tuple[ConversationTurn, ...] = ()

    @classmethod
    def start(cls, query: str) -> "Conversation":
        """Open a conversation with a single user text turn."""
        return cls((ConversationTurn.user_text(query),))

    def append(self, turn: ConversationTurn) -> "Conversation":
        return Conversation(self.turns + (turn,))

    def to_payload(self) -> list[dict]:
        """Serialize as the ``contents`` list of a generateContent request."""
        return [turn.to_dict() for turn in self.turns]

    def __len__(self) -> int:
        return len(self.turns)

    def __iter__(self) -> Iterator[ConversationTurn]:
        return iter(self.turns)

    def __getitem__(self, index: int) -> ConversationTurn:
        return self.turns[index]

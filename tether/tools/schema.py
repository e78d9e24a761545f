"""Translate tool-server input schemas into model function declarations.

Tool servers describe their parameters with JSON Schema. The model's
function-calling interface accepts a much smaller vocabulary, so each
parameter is first parsed into a closed set of kinds and then projected
onto the model's scalar types. Anything outside string/number/boolean
falls back to STRING.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union


class SchemaKind(str, Enum):
    """Scalar kinds understood by the model endpoint."""

    STRING = "STRING"
    NUMBER = "NUMBER"
    BOOLEAN = "BOOLEAN"
    OBJECT = "OBJECT"


@dataclass(frozen=True)
class StringParam:
    description: Optional[str] = None


@dataclass(frozen=True)
class NumberParam:
    description: Optional[str] = None


@dataclass(frozen=True)
class BooleanParam:
    description: Optional[str] = None


@dataclass(frozen=True)
class UnknownParam:
    """A parameter whose declared type the model cannot express.

    Keeps the original declaration around for logging; translation
    always treats it as a string.
    """

    declared_type: Any = None
    description: Optional[str] = None


ParamSchema = Union[StringParam, NumberParam, BooleanParam, UnknownParam]

_PARAM_TYPES = {
    "string": StringParam,
    "number": NumberParam,
    "boolean": BooleanParam,
}


@dataclass(frozen=True)
class ToolDescriptor:
    """A tool as advertised by the tool server's listing."""

    name: str
    description: Optional[str] = None
    parameters: dict[str, ParamSchema] = field(default_factory=dict)
    required: tuple[str, ...] = ()


@dataclass(frozen=True)
class FunctionDeclaration:
    """Model-facing projection of a ToolDescriptor."""

    name: str
    description: Optional[str]
    properties: dict[str, dict]
    required: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        """Serialize in the shape the generateContent API expects."""
        decl: dict[str, Any] = {"name": self.name}
        if self.description is not None:
            decl["description"] = self.description
        decl["parameters"] = {
            "type": SchemaKind.OBJECT.value,
            "properties": {k: dict(v) for k, v in self.properties.items()},
            "required": list(self.required),
        }
        return decl


def parse_param(raw: Any) -> ParamSchema:
    """Parse one JSON Schema property into the closed parameter union."""
    if not isinstance(raw, dict):
        return UnknownParam(declared_type=raw)

    declared = raw.get("type")
    description = raw.get("description")
    if description is not None and not isinstance(description, str):
        description = str(description)

    param_cls = _PARAM_TYPES.get(declared) if isinstance(declared, str) else None
    if param_cls is None:
        return UnknownParam(declared_type=declared, description=description)
    return param_cls(description=description)


def descriptor_from_listing(raw: dict) -> ToolDescriptor:
    """Build a ToolDescriptor from one entry of a ``tools/list`` result."""
    input_schema = raw.get("inputSchema") or {}

    parameters: dict[str, ParamSchema] = {}
    props = input_schema.get("properties")
    if isinstance(props, dict):
        for name, prop in props.items():
            parameters[name] = parse_param(prop)

    required = input_schema.get("required")
    if not isinstance(required, list):
        required = []

    return ToolDescriptor(
        name=raw.get("name", ""),
        description=raw.get("description"),
        parameters=parameters,
        required=tuple(str(r) for r in required),
    )


def param_kind(param: ParamSchema) -> SchemaKind:
    """Return the model scalar kind for a parsed parameter."""
    if isinstance(param, NumberParam):
        return SchemaKind.NUMBER
    if isinstance(param, BooleanParam):
        return SchemaKind.BOOLEAN
    return SchemaKind.STRING


def _param_to_schema(param: ParamSchema) -> dict:
    kind = param_kind(param)
    if isinstance(param, UnknownParam):
        return {"type": kind.value, "description": param.description or ""}

    schema = {"type": kind.value}
    if param.description is not None:
        schema["description"] = param.description
    return schema


def translate(descriptor: ToolDescriptor) -> FunctionDeclaration:
    """Project a ToolDescriptor onto the model's declaration format.

    Pure and deterministic. Required names are carried over without
    checking them against the properties.

    Args:
        descriptor: The tool as listed by the tool server.

    Returns:
        A FunctionDeclaration with the same name and description.
    """
    properties = {
        name: _param_to_schema(param)
        for name, param in descriptor.parameters.items()
    }
    return FunctionDeclaration(
        name=descriptor.name,
        description=descriptor.description,
        properties=properties,
        required=tuple(descriptor.required),
    )

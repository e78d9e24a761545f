"""Tool schemas and the per-connection tool registry."""

from .schema import (
    BooleanParam,
    FunctionDeclaration,
    NumberParam,
    SchemaKind,
    StringParam,
    ToolDescriptor,
    UnknownParam,
    descriptor_from_listing,
    parse_param,
    translate,
)
from .registry import ToolRegistryCache

__all__ = [
    "BooleanParam",
    "FunctionDeclaration",
    "NumberParam",
    "SchemaKind",
    "StringParam",
    "ToolDescriptor",
    "UnknownParam",
    "descriptor_from_listing",
    "parse_param",
    "translate",
    "ToolRegistryCache",
]

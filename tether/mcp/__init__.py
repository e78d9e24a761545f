"""Client side of the MCP tool-server protocol, built on the mcp SDK."""

from .client import (
    ContentSegment,
    ServerInfo,
    ToolResult,
    ToolServerClient,
    descriptor_from_tool,
    result_from_call,
)
from .launch import resolve_launch_command

__all__ = [
    "ContentSegment",
    "ServerInfo",
    "ToolResult",
    "ToolServerClient",
    "descriptor_from_tool",
    "result_from_call",
    "resolve_launch_command",
]

"""Terminal UI components."""

from .theme import PALETTE, console, render_header
from .output import (
    render_error,
    render_outcome,
    render_response,
    render_tool_call,
    render_tools,
    render_usage,
)

__all__ = [
    "PALETTE",
    "console",
    "render_header",
    "render_error",
    "render_outcome",
    "render_response",
    "render_tool_call",
    "render_tools",
    "render_usage",
]

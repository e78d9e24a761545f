"""Output rendering for the query loop.

Every line goes through a 6-char gutter: a short label on the first line
and a continuation pipe after that.
"""

import json
from typing import Optional

from rich.console import Console
from rich.syntax import Syntax
from rich.text import Text

from .theme import PALETTE, console as default_console


def _gutter(label: str, accent: str) -> Text:
    t = Text()
    t.append(f"{label:<4}", style=f"bold {accent}")
    t.append("| ", style=f"dim {PALETTE.text_muted}")
    return t


def _print_block(label: str, accent: str, text: str, style: str, console: Console) -> None:
    for i, line in enumerate(text.split("\n")):
        row = _gutter(label if i == 0 else "", accent)
        row.append(line, style=style)
        console.print(row)


def render_response(text: str, console: Optional[Console] = None) -> None:
    """Render the model's final answer."""
    _print_block("gem", PALETTE.accent, text, PALETTE.text_bright, console or default_console)


def render_error(text: str, console: Optional[Console] = None) -> None:
    """Render an error message."""
    _print_block("err", PALETTE.error, text, PALETTE.error, console or default_console)


def render_tools(names: list[str], console: Optional[Console] = None) -> None:
    """Render the list of tools loaded from the server."""
    con = console or default_console
    line = _gutter("mcp", PALETTE.header)
    line.append("Connected to server with tools: ", style=PALETTE.text)
    line.append(str(names), style=f"bold {PALETTE.text_bright}")
    con.print(line)


def render_tool_call(name: str, args: dict, console: Optional[Console] = None) -> None:
    """Render a dispatched tool call with JSON-highlighted arguments."""
    con = console or default_console
    line = _gutter("call", PALETTE.tool)
    line.append(f"Calling tool: {name}", style=PALETTE.text)
    con.print(line)

    if args:
        syn = Syntax(
            json.dumps(args, indent=2, ensure_ascii=False, default=str),
            "json",
            theme="monokai",
            background_color="default",
        )
        con.print(syn)


def render_outcome(name: str, ok: bool, detail: str = "", console: Optional[Console] = None) -> None:
    """Render a one-line summary of a tool call outcome."""
    con = console or default_console
    accent = PALETTE.success if ok else PALETTE.error
    line = _gutter("ok" if ok else "fail", accent)
    line.append(name, style=f"bold {PALETTE.text}")
    if detail:
        first = detail.split("\n", 1)[0]
        line.append(f"  {first[:120]}", style=f"dim {PALETTE.text}")
    con.print(line)


def _fmt(n: int) -> str:
    if n >= 1_000_000:
        return f"{n / 1_000_000:.1f}M"
    if n >= 1000:
        return f"{n / 1000:.1f}k"
    return str(n)


def render_usage(input_tokens: int, output_tokens: int, console: Optional[Console] = None) -> None:
    """Render token usage for one query."""
    con = console or default_console
    line = _gutter("tok", PALETTE.text_dim)
    line.append(f"{_fmt(input_tokens)} in / {_fmt(output_tokens)} out", style=f"dim {PALETTE.text}")
    con.print(line)

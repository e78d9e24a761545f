"""Work out how to launch a tool server script."""

import sys
from pathlib import Path
from typing import Optional

from ..errors import ToolConnectionError

PYTHON_SUFFIXES = (".py",)
NODE_SUFFIXES = (".js", ".ts")


def default_python_command() -> str:
    return "python" if sys.platform == "win32" else "python3"


def resolve_launch_command(
    target: str,
    python_command: Optional[str] = None,
    node_command: Optional[str] = None,
) -> tuple[str, list[str]]:
    """Return (command, args) that runs the server script at ``target``.

    Raises:
        ToolConnectionError: If the script type is not supported.
    """
    suffix = Path(target).suffix.lower()
    if suffix in PYTHON_SUFFIXES:
        return python_command or default_python_command(), [target]
    if suffix in NODE_SUFFIXES:
        return node_command or "node", [target]
    raise ToolConnectionError("Server script must be a .js or .py or .ts file")

"""Tool server used by the stdio tests.

Exposes ``controlLight`` and ``breakLight``, which always fails.
"""

from typing import Annotated

from mcp.server.fastmcp import FastMCP
from pydantic import Field

mcp = FastMCP("lights")


@mcp.tool()
def controlLight(
    brightness: Annotated[float, Field(
        description="Light level from 0 to 100. Zero is off and 100 is full brightness.",
    )],
    colorTemperature: Annotated[str, Field(
        description="Color temperature of the light fixture which can be `daylight`, `cool`, or `warm`.",
    )],
) -> str:
    """Set the brightness and color temperature of a room light."""
    return f"Light set to {brightness:g}% ({colorTemperature})"


@mcp.tool()
def breakLight() -> str:
    """Report a hardware fault."""
    raise RuntimeError("bulb offline")


if __name__ == "__main__":
    mcp.run()

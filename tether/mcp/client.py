"""Synchronous facade over the MCP SDK's stdio client.

The SDK is asyncio-based. The rest of Tether is blocking, so the client
runs one event loop on a background thread. A single long-lived task
owns the ``stdio_client`` and ``ClientSession`` contexts for the whole
connection, and each call is submitted to that loop and waited on.
"""

import asyncio
import concurrent.futures
import logging
import threading
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Awaitable, Callable, Optional, TypeVar

from mcp import ClientSession, StdioServerParameters, types
from mcp.client.stdio import stdio_client
from mcp.shared.exceptions import McpError

from .. import __version__
from ..errors import (
    CallExecutionError,
    ToolConnectionError,
    TransportClosedError,
    TransportTimeoutError,
)
from ..tools.schema import ToolDescriptor, descriptor_from_listing

_log = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class ServerInfo:
    name: str = ""
    version: str = ""
    protocol_version: str = ""


@dataclass(frozen=True)
class ContentSegment:
    """One typed content block of a tool result."""

    type: str
    text: str = ""
    data: dict = field(default_factory=dict)


@dataclass(frozen=True)
class ToolResult:
    """Result of a tool call."""

    content: tuple[ContentSegment, ...] = ()
    is_error: bool = False
    raw_text: Optional[str] = None

    def text(self) -> str:
        """Join every text segment with newlines.

        Servers that return ``content`` as a bare string get it back as-is.
        """
        if self.raw_text is not None:
            return self.raw_text
        return "\n".join(c.text for c in self.content if c.type == "text")

    @classmethod
    def from_raw(cls, raw: Any) -> "ToolResult":
        """Build from a ``{"content": [...], "isError": bool}`` mapping."""
        if not isinstance(raw, dict):
            return cls()

        is_error = bool(raw.get("isError", False))
        content = raw.get("content")
        if isinstance(content, str):
            return cls(is_error=is_error, raw_text=content)

        segments = []
        for item in content or []:
            if not isinstance(item, dict):
                continue
            kind = item.get("type", "text")
            segments.append(ContentSegment(
                type=kind,
                text=item.get("text", "") if kind == "text" else "",
                data=item,
            ))
        return cls(content=tuple(segments), is_error=is_error)


def descriptor_from_tool(tool: types.Tool) -> ToolDescriptor:
    """Convert an SDK Tool into a ToolDescriptor."""
    return descriptor_from_listing({
        "name": tool.name,
        "description": tool.description,
        "inputSchema": tool.inputSchema,
    })


def result_from_call(name: str, result: types.CallToolResult) -> ToolResult:
    """Convert an SDK CallToolResult, raising if the server flagged an error.

    Raises:
        CallExecutionError: If ``isError`` is set on the result.
    """
    segments = tuple(
        ContentSegment(
            type=item.type,
            text=getattr(item, "text", "") if item.type == "text" else "",
            data=item.model_dump(mode="json", exclude_none=True),
        )
        for item in result.content
    )
    converted = ToolResult(content=segments, is_error=bool(result.isError))
    if converted.is_error:
        raise CallExecutionError(converted.text() or f"Tool {name} reported an error")
    return converted


class ToolServerClient:
    """Blocking client for one MCP server launched over stdio.

    Usage::

        client = ToolServerClient("python3", ["server.py"])
        client.connect()
        tools = client.list_tools()
        result = client.call_tool("controlLight", {"brightness": 20})
        client.close()
    """

    def __init__(
        self,
        command: str,
        args: Optional[list[str]] = None,
        env: Optional[dict[str, str]] = None,
        timeout: float = 30.0,
        client_name: str = "tether",
        client_version: str = __version__,
    ):
        self.params = StdioServerParameters(command=command, args=list(args or []), env=env or None)
        self.timeout = timeout
        self.client_info = types.Implementation(name=client_name, version=client_version)
        self.server_info: Optional[ServerInfo] = None

        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[threading.Thread] = None
        self._main: Optional[concurrent.futures.Future] = None
        self._session: Optional[ClientSession] = None
        self._ready = threading.Event()
        self._stop: Optional[asyncio.Event] = None
        self._startup_error: Optional[BaseException] = None
        self._closed = False

    @property
    def connected(self) -> bool:
        return self._session is not None and not self._closed

    def connect(self) -> ServerInfo:
        """Launch the server and perform the initialize handshake.

        Raises:
            ToolConnectionError: If the process cannot be started or the
                handshake fails or times out.
        """
        self._loop = asyncio.new_event_loop()
        self._stop = asyncio.Event()
        self._thread = threading.Thread(target=self._run_loop, name="tether-mcp", daemon=True)
        self._thread.start()
        self._main = asyncio.run_coroutine_threadsafe(self._serve(), self._loop)

        if not self._ready.wait(self.timeout):
            self.close()
            raise ToolConnectionError(
                f"Tool server did not finish initializing within {self.timeout}s"
            )
        if self._startup_error is not None or self._session is None:
            error = self._startup_error
            self.close()
            raise ToolConnectionError(f"Failed to connect to tool server: {error}") from error

        _log.debug("Connected to %s %s", self.server_info.name, self.server_info.version)
        return self.server_info

    def _run_loop(self) -> None:
        asyncio.set_event_loop(self._loop)
        self._loop.run_forever()

    async def _serve(self) -> None:
        try:
            async with stdio_client(self.params) as (read, write):
                async with ClientSession(
                    read,
                    write,
                    read_timeout_seconds=timedelta(seconds=self.timeout),
                    client_info=self.client_info,
                ) as session:
                    init = await session.initialize()
                    self.server_info = ServerInfo(
                        name=init.serverInfo.name,
                        version=init.serverInfo.version,
                        protocol_version=str(init.protocolVersion),
                    )
                    self._session = session
                    self._ready.set()
                    await self._stop.wait()
        except Exception as e:
            if self._ready.is_set():
                _log.warning("Tool server connection ended: %s", e)
            else:
                self._startup_error = e
        finally:
            self._session = None
            self._ready.set()

    def _submit(self, call: Callable[[ClientSession], Awaitable[T]]) -> T:
        session = self._session
        if self._closed or session is None or self._loop is None:
            raise TransportClosedError("tool server is not connected")

        future = asyncio.run_coroutine_threadsafe(call(session), self._loop)
        try:
            return future.result(timeout=self.timeout)
        except concurrent.futures.TimeoutError:
            future.cancel()
            raise TransportTimeoutError(
                f"no reply from tool server within {self.timeout}s"
            ) from None

    def list_tools(self) -> list[ToolDescriptor]:
        """Fetch every tool the server advertises, following pagination.

        Raises:
            ToolConnectionError: If any listing request fails.
        """
        descriptors: list[ToolDescriptor] = []
        cursor = None
        while True:
            try:
                if cursor:
                    page = self._submit(lambda s, c=cursor: s.list_tools(c))
                else:
                    page = self._submit(lambda s: s.list_tools())
            except Exception as e:
                raise ToolConnectionError(f"Failed to list tools: {e}") from e

            descriptors.extend(descriptor_from_tool(tool) for tool in page.tools)
            cursor = page.nextCursor
            if not cursor:
                return descriptors

    def call_tool(self, name: str, arguments: Optional[dict[str, Any]] = None) -> ToolResult:
        """Invoke a tool by name.

        Raises:
            CallExecutionError: If the server returns an error, flags the
                result with ``isError``, or the connection fails.
        """
        try:
            result = self._submit(lambda s: s.call_tool(name, arguments or {}))
        except McpError as e:
            raise CallExecutionError(e.error.message, code=e.error.code) from e
        except Exception as e:
            raise CallExecutionError(str(e)) from e
        return result_from_call(name, result)

    def close(self) -> None:
        """Shut down the session, the server process, and the loop thread."""
        if self._closed:
            return
        self._closed = True
        if self._loop is None:
            return

        if self._stop is not None:
            self._loop.call_soon_threadsafe(self._stop.set)
        if self._main is not None:
            try:
                self._main.result(timeout=10)
            except concurrent.futures.TimeoutError:
                _log.warning("Tool server did not shut down in time")
                self._main.cancel()

        self._loop.call_soon_threadsafe(self._loop.stop)
        if self._thread is not None:
            self._thread.join(timeout=5)
            if self._thread.is_alive():
                return
        self._loop.close()

"""A single connected session: tool server, tool registry, model endpoint."""

import logging
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

from .config import ConfigManager
from .conversation import ProposedCall
from .mcp.launch import resolve_launch_command
from .mcp.client import ServerInfo, ToolServerClient
from .orchestrator import CallOrchestrator, CallOutcome, QueryResult
from .providers.base import BaseProvider
from .providers.gemini import GeminiProvider
from .tools.registry import ToolRegistryCache

_log = logging.getLogger(__name__)


class Session:
    """Holds the long-lived resources for one tool-server connection.

    Build it with :meth:`open`, which guarantees both the tool process
    and the HTTP client are released on exit.
    """

    def __init__(
        self,
        executor: ToolServerClient,
        endpoint: BaseProvider,
        registry: ToolRegistryCache,
        server_info: Optional[ServerInfo] = None,
        on_call: Optional[Callable[[ProposedCall], None]] = None,
        on_outcome: Optional[Callable[[CallOutcome], None]] = None,
    ):
        self.executor = executor
        self.endpoint = endpoint
        self.registry = registry
        self.server_info = server_info or ServerInfo()
        self.orchestrator = CallOrchestrator(
            endpoint, executor, registry, on_call=on_call, on_outcome=on_outcome,
        )

    @property
    def tool_names(self) -> list[str]:
        return list(self.registry.allowed_names())

    def process(self, query: str) -> str:
        """Answer one query."""
        return self.orchestrator.process(query)

    def run(self, query: str) -> QueryResult:
        return self.orchestrator.run(query)

    @classmethod
    @contextmanager
    def open(
        cls,
        target: str,
        config: ConfigManager,
        model: Optional[str] = None,
        on_call: Optional[Callable[[ProposedCall], None]] = None,
        on_outcome: Optional[Callable[[CallOutcome], None]] = None,
    ) -> Iterator["Session"]:
        """Launch the tool server at ``target`` and yield a ready session.

        Raises:
            ConfigError: If the model endpoint is not configured.
            ToolConnectionError: If the server cannot be launched,
                initialized, or listed.
        """
        provider_config = config.get_provider_config(model=model)
        server_config = config.get_server_config()

        command, args = resolve_launch_command(
            target,
            python_command=server_config.python_command,
            node_command=server_config.node_command,
        )
        _log.info("Launching tool server: %s %s", command, args)

        executor = ToolServerClient(
            command,
            args,
            env=server_config.env or None,
            timeout=server_config.timeout,
            client_name=config.get_client_name(),
            client_version=config.get_client_version(),
        )
        endpoint: Optional[BaseProvider] = None
        try:
            server_info = executor.connect()
            registry = ToolRegistryCache.load(executor)
            endpoint = GeminiProvider(provider_config)
            yield cls(
                executor, endpoint, registry,
                server_info=server_info, on_call=on_call, on_outcome=on_outcome,
            )
        finally:
            if endpoint is not None:
                endpoint.close()
            executor.close()

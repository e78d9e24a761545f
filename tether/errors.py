"""Error taxonomy for Tether.

Connection and configuration failures end the session. Call failures are
recovered by the orchestrator and fed back to the model. Model request
failures end a single query.
"""

from typing import Optional


class TetherError(Exception):
    """Base class for all Tether errors."""


class ConfigError(TetherError):
    """Configuration is missing or unusable."""


class ToolConnectionError(TetherError, ConnectionError):
    """The tool process could not be started, initialized, or listed."""


class CallExecutionError(TetherError):
    """A single tool invocation failed."""

    def __init__(self, message: str, code: Optional[int] = None):
        self.code = code
        self.message = message
        super().__init__(message if code is None else f"[{code}] {message}")


class ModelRequestError(TetherError):
    """The model endpoint rejected or failed a request."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class TransportClosedError(TetherError):
    """The tool server connection is closed or was never opened."""


class TransportTimeoutError(TetherError):
    """No message arrived from the tool process in time."""

"""Tether - answer questions with tools from a local tool server."""

__version__ = "0.1.0"

from .cli import cli
from .config import ConfigManager
from .orchestrator import CallOrchestrator, CallOutcome
from .session import Session
from .tools import ToolRegistryCache, translate

__all__ = [
    "cli",
    "ConfigManager",
    "CallOrchestrator",
    "CallOutcome",
    "Session",
    "ToolRegistryCache",
    "translate",
]

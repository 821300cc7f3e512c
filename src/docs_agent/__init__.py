"""Document assistant core package."""

from .config import AgentConfig, AgentSettings
from .types import DocumentContext, ToolResult

__all__ = ["AgentConfig", "AgentSettings", "DocumentContext", "ToolResult"]

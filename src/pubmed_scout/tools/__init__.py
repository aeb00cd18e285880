"""Tool-call surface over the PubMed client."""

from pubmed_scout.tools.server import (
    TextContent,
    ToolArgumentError,
    ToolError,
    ToolResponse,
    ToolServer,
    ToolSpec,
    UnknownToolError,
)

__all__ = [
    "TextContent",
    "ToolArgumentError",
    "ToolError",
    "ToolResponse",
    "ToolServer",
    "ToolSpec",
    "UnknownToolError",
]

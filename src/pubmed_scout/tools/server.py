"""
Tool server: named tool calls in, text payloads out.

Two tools are exposed:
  - search            - free-text PubMed search
  - getLatestArticles - recent open access articles on a topic

`call_tool()` is the transport-neutral entry point.  `dispatch()` wraps it
in a JSON request/response envelope for line-oriented transports.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Literal

from pydantic import BaseModel, ValidationError

from pubmed_scout.data_sources.base_client import DataSourceError
from pubmed_scout.data_sources.pubmed import PubMedClient
from pubmed_scout.models.model_pubmed import SearchOutcome
from pubmed_scout.models.model_tools import (
    LatestArticlesArguments,
    SearchArguments,
    ToolArguments,
)
from pubmed_scout.tools.formatting import format_error, format_search_result

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ToolError(Exception):
    """Base exception for tool-call failures."""

    code = "ERR"


class UnknownToolError(ToolError):
    """Raised when a call names a tool the server does not expose."""

    code = "UNKNOWN_TOOL"

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown tool: {name}")


class ToolArgumentError(ToolError):
    """Raised when tool arguments fail validation."""

    code = "INVALID_ARGUMENTS"

    def __init__(self, tool: str, error: ValidationError):
        self.tool = tool
        self.errors = [
            f"{'.'.join(str(p) for p in e['loc'])}: {e['msg']}" for e in error.errors()
        ]
        super().__init__(f"Invalid arguments: {', '.join(self.errors)}")


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class TextContent(BaseModel):
    type: Literal["text"] = "text"
    text: str


class ToolResponse(BaseModel):
    """Payload returned for a tool call."""

    content: list[TextContent]
    is_error: bool = False

    @classmethod
    def text(cls, text: str, is_error: bool = False) -> ToolResponse:
        return cls(content=[TextContent(text=text)], is_error=is_error)


class ToolSpec(BaseModel):
    """Name, description and JSON schema of one tool."""

    name: str
    description: str
    input_schema: dict[str, Any]


# ---------------------------------------------------------------------------
# Server
# ---------------------------------------------------------------------------


class ToolServer:
    """Routes named tool calls to a PubMedClient and renders the outcome."""

    TOOLS: dict[str, tuple[str, type[ToolArguments]]] = {
        "search": ("Search PubMed for research articles", SearchArguments),
        "getLatestArticles": ("Get recent articles on a topic", LatestArticlesArguments),
    }

    def __init__(self, client: PubMedClient | None = None):
        self.client = client or PubMedClient()

    async def close(self) -> None:
        await self.client.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        await self.close()

    @classmethod
    def list_tools(cls) -> list[ToolSpec]:
        return [
            ToolSpec(
                name=name,
                description=description,
                input_schema=model.model_json_schema(by_alias=True),
            )
            for name, (description, model) in cls.TOOLS.items()
        ]

    def parse_arguments(self, name: str, arguments: dict[str, Any] | None):
        """Validate raw arguments for `name`; raise ToolError on failure."""
        if name not in self.TOOLS:
            raise UnknownToolError(name)
        _, model = self.TOOLS[name]
        try:
            return model.model_validate(arguments or {})
        except ValidationError as e:
            raise ToolArgumentError(name, e) from e

    async def call_tool(
        self, name: str, arguments: dict[str, Any] | None = None
    ) -> ToolResponse:
        """Run tool `name` and return its text payload.

        Unknown tools and invalid arguments raise.  PubMed failures are
        rendered as an error payload.
        """
        args = self.parse_arguments(name, arguments)
        logger.info("Tool call %s args=%s", name, args.model_dump())

        try:
            if isinstance(args, SearchArguments):
                outcome = await self.client.search(
                    args.query,
                    max_results=args.max_results,
                    filter_open_access=args.filter_open_access,
                    sort=args.sort,
                )
            else:
                outcome = await self.client.get_latest_articles(
                    args.topic, days=args.days, max_results=args.max_results
                )
        except DataSourceError as e:
            logger.error("Tool call %s failed: %s", name, e)
            outcome = SearchOutcome.failure(str(e))

        if not outcome.ok:
            return ToolResponse.text(format_error(outcome.error or "unknown"), True)
        return ToolResponse.text(format_search_result(outcome.data))

    async def handle_request(self, request: dict[str, Any]) -> ToolResponse:
        """Handle a `{"method": <tool name>, "params": {...}}` request."""
        return await self.call_tool(request.get("method", ""), request.get("params"))

    async def dispatch(self, raw: str) -> dict[str, Any]:
        """Handle one JSON-encoded request and return the response envelope.

        Requests look like `{"id": 1, "method": "search", "params": {...}}`;
        the method `list_tools` returns the tool specs.  Every request gets
        an envelope back, including ones that fail unexpectedly.
        """
        try:
            request = json.loads(raw)
        except json.JSONDecodeError as e:
            return _err(None, f"bad json: {e}", "BAD_JSON")
        if not isinstance(request, dict):
            return _err(None, "request must be a JSON object", "BAD_JSON")

        request_id = request.get("id")
        if request.get("method") == "list_tools":
            tools = [t.model_dump() for t in self.list_tools()]
            return _ok(request_id, {"tools": tools})

        try:
            response = await self.handle_request(request)
        except ToolError as e:
            return _err(request_id, str(e), e.code)
        except Exception as e:
            # one failed request must not end a line-oriented session
            logger.exception("Request id=%s failed", request_id)
            return _err(request_id, f"Internal error: {e}", "INTERNAL")
        return _ok(request_id, response.model_dump())


def _ok(request_id: Any, result: dict[str, Any]) -> dict[str, Any]:
    return {"id": request_id, "ok": True, "result": result}


def _err(request_id: Any, message: str, code: str) -> dict[str, Any]:
    return {"id": request_id, "ok": False, "error": message, "code": code}

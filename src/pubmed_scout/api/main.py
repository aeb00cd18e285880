"""FastAPI application exposing the PubMed tools over HTTP."""

from contextlib import asynccontextmanager
from typing import Any

from fastapi import Body, FastAPI, HTTPException, Request

from pubmed_scout import __version__
from pubmed_scout.config import get_settings
from pubmed_scout.data_sources.base_client import ClientConfig
from pubmed_scout.data_sources.pubmed import PubMedClient
from pubmed_scout.tools.server import (
    ToolArgumentError,
    ToolResponse,
    ToolServer,
    ToolSpec,
    UnknownToolError,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    client = PubMedClient(ClientConfig.from_settings(get_settings()))
    app.state.tool_server = ToolServer(client)
    yield
    await app.state.tool_server.close()


app = FastAPI(
    title="pubmed-scout API",
    description="Rate-limited PubMed search exposed as tool calls",
    version=__version__,
    lifespan=lifespan,
)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy", "version": __version__}


@app.get("/tools")
async def list_tools() -> list[ToolSpec]:
    return ToolServer.list_tools()


@app.post("/tools/{name}")
async def call_tool(
    name: str, request: Request, arguments: dict[str, Any] = Body(default={})
) -> ToolResponse:
    """Run a tool; PubMed failures come back as `is_error` payloads."""
    server: ToolServer = request.app.state.tool_server
    try:
        return await server.call_tool(name, arguments)
    except UnknownToolError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ToolArgumentError as e:
        raise HTTPException(status_code=422, detail=e.errors)

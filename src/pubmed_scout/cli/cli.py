"""Command-line interface for pubmed-scout."""

import asyncio
import json
import logging
import sys

import click

from pubmed_scout.config import get_settings
from pubmed_scout.constants import DEFAULT_LATEST_DAYS, DEFAULT_MAX_RESULTS
from pubmed_scout.data_sources.base_client import ClientConfig
from pubmed_scout.data_sources.pubmed import PubMedClient
from pubmed_scout.tools.server import ToolError, ToolResponse, ToolServer


def _make_server() -> ToolServer:
    settings = get_settings()
    return ToolServer(PubMedClient(ClientConfig.from_settings(settings)))


async def _call(name: str, arguments: dict) -> ToolResponse:
    async with _make_server() as server:
        return await server.call_tool(name, arguments)


def _run_tool(name: str, arguments: dict) -> None:
    try:
        response = asyncio.run(_call(name, arguments))
    except ToolError as e:
        raise click.UsageError(str(e))
    for item in response.content:
        click.echo(item.text)
    if response.is_error:
        sys.exit(1)


async def _serve(stream) -> None:
    async with _make_server() as server:
        for line in stream:
            if not line.strip():
                continue
            envelope = await server.dispatch(line)
            click.echo(json.dumps(envelope))


@click.group()
@click.version_option(package_name="pubmed-scout")
@click.option("-v", "--verbose", is_flag=True, help="Log at DEBUG level")
def main(verbose: bool):
    """pubmed-scout: rate-limited PubMed search tools."""
    level = "DEBUG" if verbose else get_settings().log_level
    # Logs go to stderr; stdout carries tool output.
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


@main.command()
@click.argument("query")
@click.option(
    "-n",
    "--max-results",
    default=DEFAULT_MAX_RESULTS,
    show_default=True,
    help="Maximum number of articles to return",
)
@click.option(
    "--open-access/--all",
    default=True,
    show_default=True,
    help="Restrict results to open access articles",
)
@click.option(
    "--sort",
    type=click.Choice(["relevance", "date"]),
    default="relevance",
    show_default=True,
)
def search(query: str, max_results: int, open_access: bool, sort: str):
    """Search PubMed for QUERY."""
    arguments = {
        "query": query,
        "maxResults": max_results,
        "filterOpenAccess": open_access,
        "sort": sort,
    }
    _run_tool("search", arguments)


@main.command()
@click.argument("topic")
@click.option(
    "-d",
    "--days",
    default=DEFAULT_LATEST_DAYS,
    show_default=True,
    help="How many days back to look",
)
@click.option(
    "-n",
    "--max-results",
    default=DEFAULT_MAX_RESULTS,
    show_default=True,
    help="Maximum number of articles to return",
)
def latest(topic: str, days: int, max_results: int):
    """Get recent open access articles on TOPIC."""
    arguments = {"topic": topic, "days": days, "maxResults": max_results}
    _run_tool("getLatestArticles", arguments)


@main.command()
def tools():
    """Print the available tools and their argument schemas as JSON."""
    specs = [t.model_dump() for t in ToolServer.list_tools()]
    click.echo(json.dumps(specs, indent=2))


@main.command()
def serve():
    """Serve tool calls over stdio, one JSON request per line."""
    click.echo("pubmed-scout serving on stdio", err=True)
    asyncio.run(_serve(click.get_text_stream("stdin")))


if __name__ == "__main__":
    main()

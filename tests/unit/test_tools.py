"""Unit tests for the tool server and text formatting."""

import json
from unittest.mock import AsyncMock, patch

import pytest

from pubmed_scout.data_sources.base_client import TransportError
from pubmed_scout.models import Article, SearchOutcome, SearchResult
from pubmed_scout.tools import ToolArgumentError, ToolServer, UnknownToolError
from pubmed_scout.tools.formatting import format_article, format_search_result


@pytest.fixture
def server(pubmed_client):
    return ToolServer(pubmed_client)


class TestFormatting:
    def test_article_block(self, esummary_response):
        article = Article.from_summary(
            "38472913", esummary_response["result"]["38472913"]
        )

        assert format_article(article) == (
            "Title: Metformin and longevity: a review.\n"
            "Authors: Smith J, Doe A\n"
            "Journal: Nat Rev Endocrinol\n"
            "Date: 2024 Mar 15\n"
            "URL: https://pubmed.ncbi.nlm.nih.gov/38472913/\n"
            "---\n"
        )

    def test_abstract_included_when_present(self):
        article = Article.from_summary("1", {"abstract": "Short abstract."})
        assert "Abstract: Short abstract.\n---" in format_article(article)

    def test_empty_result(self):
        assert format_search_result(SearchResult()) == "No results found"

    def test_header_counts_articles(self):
        articles = [Article.from_summary(p, {}) for p in ("1", "2")]
        text = format_search_result(SearchResult(articles=articles, total=40))

        assert text.startswith("Found 2 articles:\n\n")
        assert text.count("---") == 2


class TestListTools:
    def test_both_tools_listed(self):
        names = [t.name for t in ToolServer.list_tools()]
        assert names == ["search", "getLatestArticles"]

    def test_schema_uses_wire_names(self):
        search = ToolServer.list_tools()[0]
        props = search.input_schema["properties"]

        assert set(props) == {"query", "maxResults", "filterOpenAccess", "sort"}
        assert search.input_schema["required"] == ["query"]


class TestCallTool:
    async def test_search_renders_articles(
        self, server, pubmed_client, esearch_response, esummary_response
    ):
        with patch.object(
            pubmed_client,
            "_rest_get",
            new=AsyncMock(side_effect=[esearch_response, esummary_response]),
        ):
            response = await server.call_tool("search", {"query": "metformin"})

        assert not response.is_error
        text = response.content[0].text
        assert text.startswith("Found 2 articles:")
        assert "Title: AMPK signalling in ageing." in text

    async def test_search_no_results(self, server, pubmed_client):
        with patch.object(
            pubmed_client,
            "_rest_get",
            new=AsyncMock(return_value={"esearchresult": {"idlist": []}}),
        ):
            response = await server.call_tool("search", {"query": "zzzz"})

        assert response.content[0].text == "No results found"
        assert not response.is_error

    async def test_search_stage_failure_rendered_as_error(self, server, pubmed_client):
        error = TransportError("pubmed", "HTTP 500: oops", status_code=500)

        with patch.object(pubmed_client, "_rest_get", new=AsyncMock(side_effect=error)):
            response = await server.call_tool("search", {"query": "x"})

        assert response.is_error
        assert response.content[0].text.startswith("Error searching PubMed: ")
        assert "HTTP 500" in response.content[0].text

    async def test_detail_stage_failure_rendered_as_error(
        self, server, pubmed_client, esearch_response
    ):
        error = TransportError("pubmed", "HTTP 502: bad gateway", status_code=502)

        with patch.object(
            pubmed_client,
            "_rest_get",
            new=AsyncMock(side_effect=[esearch_response, error]),
        ):
            response = await server.call_tool("search", {"query": "x"})

        assert response.is_error
        assert "HTTP 502" in response.content[0].text

    async def test_search_arguments_forwarded(self, server, pubmed_client):
        with patch.object(
            pubmed_client,
            "search",
            new=AsyncMock(return_value=SearchOutcome.success(SearchResult())),
        ) as mock_search:
            await server.call_tool(
                "search",
                {"query": "asthma", "maxResults": 2, "filterOpenAccess": False},
            )

        mock_search.assert_called_once_with(
            "asthma", max_results=2, filter_open_access=False, sort="relevance"
        )

    async def test_latest_articles(self, server, pubmed_client):
        mock_get = AsyncMock(return_value={"esearchresult": {"idlist": []}})

        with patch.object(pubmed_client, "_rest_get", new=mock_get):
            response = await server.call_tool(
                "getLatestArticles", {"topic": "CRISPR", "days": 7}
            )

        assert response.content[0].text == "No results found"
        params = mock_get.call_args.args[1]
        assert params["term"].startswith("(CRISPR AND ")
        assert params["sort"] == "date"

    async def test_unknown_tool(self, server):
        with pytest.raises(UnknownToolError, match="Unknown tool: fetch"):
            await server.call_tool("fetch", {})

    async def test_invalid_arguments(self, server):
        with pytest.raises(ToolArgumentError) as exc_info:
            await server.call_tool("search", {"query": "x", "maxResults": 0})

        assert "maxResults" in str(exc_info.value)
        assert str(exc_info.value).startswith("Invalid arguments: ")

    async def test_handle_request(self, server, pubmed_client):
        with patch.object(
            pubmed_client,
            "_rest_get",
            new=AsyncMock(return_value={"esearchresult": {"idlist": []}}),
        ):
            response = await server.handle_request(
                {"method": "search", "params": {"query": "x"}}
            )

        assert response.content[0].text == "No results found"


class TestDispatch:
    async def test_list_tools(self, server):
        envelope = await server.dispatch(json.dumps({"id": 1, "method": "list_tools"}))

        assert envelope["ok"] is True
        assert envelope["id"] == 1
        assert [t["name"] for t in envelope["result"]["tools"]] == [
            "search",
            "getLatestArticles",
        ]

    async def test_tool_call(self, server, pubmed_client):
        request = {"id": "a", "method": "search", "params": {"query": "x"}}

        with patch.object(
            pubmed_client,
            "_rest_get",
            new=AsyncMock(return_value={"esearchresult": {"idlist": []}}),
        ):
            envelope = await server.dispatch(json.dumps(request))

        assert envelope == {
            "id": "a",
            "ok": True,
            "result": {
                "content": [{"type": "text", "text": "No results found"}],
                "is_error": False,
            },
        }

    async def test_bad_json(self, server):
        envelope = await server.dispatch("{not json")

        assert envelope["ok"] is False
        assert envelope["code"] == "BAD_JSON"

    async def test_unknown_method(self, server):
        envelope = await server.dispatch(json.dumps({"id": 2, "method": "nope"}))

        assert envelope == {
            "id": 2,
            "ok": False,
            "error": "Unknown tool: nope",
            "code": "UNKNOWN_TOOL",
        }

    async def test_invalid_arguments(self, server):
        envelope = await server.dispatch(
            json.dumps({"id": 3, "method": "getLatestArticles", "params": {}})
        )

        assert envelope["code"] == "INVALID_ARGUMENTS"
        assert "topic" in envelope["error"]

    async def test_malformed_record_still_answers(self, server, pubmed_client):
        search = {"esearchresult": {"count": "1", "idlist": ["1"]}}
        summary = {"result": {"1": {"title": "T", "authors": ["Smith J"]}}}
        request = {"id": 1, "method": "search", "params": {"query": "x"}}

        with patch.object(
            pubmed_client, "_rest_get", new=AsyncMock(side_effect=[search, summary])
        ):
            envelope = await server.dispatch(json.dumps(request))

        assert envelope["ok"] is True
        assert "Title: T" in envelope["result"]["content"][0]["text"]

    async def test_unexpected_error_becomes_internal_envelope(
        self, server, pubmed_client
    ):
        request = {"id": 4, "method": "search", "params": {"query": "x"}}

        with patch.object(
            pubmed_client, "search", new=AsyncMock(side_effect=RuntimeError("boom"))
        ):
            envelope = await server.dispatch(json.dumps(request))

        assert envelope == {
            "id": 4,
            "ok": False,
            "error": "Internal error: boom",
            "code": "INTERNAL",
        }

"""
PubMed API client.

Three methods:
  1. search              - Find PMIDs matching a query, then summarise them
  2. fetch_details       - Fetch article summaries for given PMIDs
  3. get_latest_articles - search restricted to a recent publication window
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Any

from pydantic import ValidationError

from pubmed_scout.constants import (
    DATE_FILTER_UPPER_BOUND,
    DEFAULT_LATEST_DAYS,
    DEFAULT_MAX_RESULTS,
    OPEN_ACCESS_FILTER,
    PUBMED_SEARCH_URL,
    PUBMED_SUMMARY_URL,
    SORT_DATE,
    SORT_RELEVANCE,
)
from pubmed_scout.data_sources.base_client import (
    BaseClient,
    DataSourceError,
    MalformedResponseError,
    RequestContext,
)
from pubmed_scout.models.model_pubmed import Article, SearchOutcome, SearchResult

logger = logging.getLogger(__name__)


def build_search_term(query: str, filter_open_access: bool) -> str:
    """Wrap `query` in the open access filter when requested."""
    if filter_open_access:
        return f"({query}) AND {OPEN_ACCESS_FILTER}"
    return query


def get_date_filter(days: int, today: date | None = None) -> str:
    """Return a PubMed query fragment for articles published in the last `days`."""
    if days < 0:
        raise ValueError(f"days must be non-negative, got {days}")
    # publication dates are matched against the UTC calendar day
    since = (today or datetime.now(timezone.utc).date()) - timedelta(days=days)
    return (
        f'"{since.isoformat()}"[Date - Publication] : '
        f'"{DATE_FILTER_UPPER_BOUND}"[Date - Publication]'
    )


class PubMedClient(BaseClient):
    """Client for querying the NCBI E-utilities esearch and esummary endpoints."""

    SEARCH_URL = PUBMED_SEARCH_URL
    SUMMARY_URL = PUBMED_SUMMARY_URL

    @property
    def _source_name(self) -> str:
        return "pubmed"

    def _identity(self) -> dict[str, str]:
        return {"tool": self.config.tool, "email": self.config.email}

    async def search(
        self,
        query: str,
        max_results: int = DEFAULT_MAX_RESULTS,
        filter_open_access: bool = True,
        sort: str = SORT_RELEVANCE,
    ) -> SearchOutcome:
        """Search PubMed and return the matching article summaries.

        Failures of the search call itself are returned as a failed outcome.
        Failures while fetching details propagate.
        """
        term = build_search_term(query, filter_open_access)
        params: dict[str, Any] = {
            "db": "pubmed",
            "term": term,
            "retmax": max_results,
            "sort": sort,
            "retmode": "json",
            **self._identity(),
        }
        context = RequestContext(
            source=self._source_name, method="search", params={"term": term}
        )

        try:
            data = await self._rest_get(self.SEARCH_URL, params, context=context)
            esearch = data["esearchresult"]
            pmids = [str(pmid) for pmid in esearch["idlist"]]
        except DataSourceError as e:
            logger.error("PubMed search failed for term=%r: %s", term, e)
            return SearchOutcome.failure(str(e))
        except (KeyError, TypeError) as e:
            error = MalformedResponseError(
                self._source_name, f"Unexpected esearch response, missing {e}"
            )
            logger.error("PubMed search failed for term=%r: %s", term, error)
            return SearchOutcome.failure(str(error))

        if not pmids:
            logger.info("No PubMed results for term=%r", term)
            return SearchOutcome.success(SearchResult(articles=[], total=0))

        articles = await self.fetch_details(pmids)
        return SearchOutcome.success(
            SearchResult(articles=articles, total=_parse_count(esearch, len(articles)))
        )

    async def fetch_details(self, pmids: list[str]) -> list[Article]:
        """Fetch article summaries for the given PMIDs, in the order given.

        PMIDs missing from the response, or whose entry cannot be read, are
        skipped.
        """
        if not pmids:
            return []

        params: dict[str, Any] = {
            "db": "pubmed",
            "id": ",".join(pmids),
            "retmode": "json",
            **self._identity(),
        }
        context = RequestContext(
            source=self._source_name, method="fetch_details", params={"ids": pmids}
        )

        try:
            data = await self._rest_get(self.SUMMARY_URL, params, context=context)
        except DataSourceError as e:
            logger.error("PubMed esummary failed for ids=%s: %s", pmids, e)
            raise

        result = data.get("result") if isinstance(data, dict) else None
        if not isinstance(result, dict):
            logger.error("PubMed esummary returned no result for ids=%s", pmids)
            raise MalformedResponseError(
                self._source_name, "Unexpected esummary response, missing 'result'"
            )

        articles: list[Article] = []
        missing: list[str] = []
        for pmid in pmids:
            entry = result.get(pmid)
            # esummary reports unknown ids as {"uid": ..., "error": ...}
            if not isinstance(entry, dict) or "error" in entry:
                missing.append(pmid)
                continue
            try:
                articles.append(Article.from_summary(pmid, entry))
            except (AttributeError, TypeError, ValidationError) as e:
                logger.warning(
                    "PubMed esummary skipped malformed entry id=%s: %s", pmid, e
                )

        if missing:
            logger.warning("PubMed esummary had no entry for ids=%s", missing)
        return articles

    async def get_latest_articles(
        self,
        topic: str,
        days: int = DEFAULT_LATEST_DAYS,
        max_results: int = DEFAULT_MAX_RESULTS,
        today: date | None = None,
    ) -> SearchOutcome:
        """Search for open access articles on `topic` published in the last `days`."""
        query = f"{topic} AND {get_date_filter(days, today)}"
        return await self.search(
            query,
            max_results=max_results,
            filter_open_access=True,
            sort=SORT_DATE,
        )


def _parse_count(esearch: dict[str, Any], fallback: int) -> int:
    try:
        return int(esearch["count"])
    except (KeyError, TypeError, ValueError):
        return fallback

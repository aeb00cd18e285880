"""
Pydantic models for PubMed data.

These are the data contracts between the PubMed client and the tool surface.
Callers receive these models - they never see raw API responses.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from pubmed_scout.constants import NO_DATE, NO_JOURNAL, NO_TITLE, PUBMED_ARTICLE_URL


class Article(BaseModel):
    """A single PubMed article summary."""

    model_config = ConfigDict(frozen=True)

    pmid: str  # PubMed identifier (e.g. "38472913")
    title: str = NO_TITLE
    authors: list[str] = []
    journal: str = NO_JOURNAL  # esummary "source", an ISO abbreviation
    publication_date: str = NO_DATE  # free text, e.g. "2024 Mar 15"
    abstract: str | None = None
    url: str

    @classmethod
    def from_summary(cls, pmid: str, entry: dict) -> Article:
        """Build an Article from one esummary `result[<pmid>]` entry."""
        return cls(
            pmid=pmid,
            title=entry.get("title") or NO_TITLE,
            authors=[
                a["name"]
                for a in entry.get("authors") or []
                if isinstance(a, dict) and a.get("name")
            ],
            journal=entry.get("source") or NO_JOURNAL,
            publication_date=entry.get("pubdate") or NO_DATE,
            abstract=entry.get("abstract") or None,
            url=PUBMED_ARTICLE_URL.format(pmid=pmid),
        )


class SearchResult(BaseModel):
    """One page of articles plus the total number of matches on the server."""

    articles: list[Article] = []
    total: int = 0


class SearchOutcome(BaseModel):
    """
    Tagged result of a search: either ok with data, or failed with a reason.

    The presentation layer decides whether a failure is rendered as text
    or raised.
    """

    ok: bool
    data: SearchResult | None = None
    error: str | None = None

    @classmethod
    def success(cls, data: SearchResult) -> SearchOutcome:
        return cls(ok=True, data=data)

    @classmethod
    def failure(cls, reason: str) -> SearchOutcome:
        return cls(ok=False, error=reason)

    @property
    def is_empty(self) -> bool:
        return self.ok and self.data is not None and not self.data.articles

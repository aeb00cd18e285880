"""Data models for pubmed-scout."""

from pubmed_scout.models.model_pubmed import Article, SearchOutcome, SearchResult
from pubmed_scout.models.model_tools import LatestArticlesArguments, SearchArguments

__all__ = [
    "Article",
    "SearchOutcome",
    "SearchResult",
    "SearchArguments",
    "LatestArticlesArguments",
]

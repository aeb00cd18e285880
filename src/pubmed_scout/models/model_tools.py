"""Argument models for the tool-call surface."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from pubmed_scout.constants import (
    DEFAULT_LATEST_DAYS,
    DEFAULT_MAX_RESULTS,
    SORT_DATE,
    SORT_RELEVANCE,
)


class ToolArguments(BaseModel):
    """Base for tool arguments: camelCase on the wire, snake_case in Python.

    Unknown keys are dropped.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class SearchArguments(ToolArguments):
    """Arguments for the `search` tool."""

    query: str = Field(min_length=1, description="PubMed search query")
    max_results: int = Field(
        DEFAULT_MAX_RESULTS,
        ge=1,
        alias="maxResults",
        description="Maximum number of articles to return",
    )
    filter_open_access: bool = Field(
        True,
        alias="filterOpenAccess",
        description="Restrict results to open access articles",
    )
    sort: Literal["relevance", "date"] = Field(
        SORT_RELEVANCE, description=f"Sort order ({SORT_RELEVANCE} or {SORT_DATE})"
    )


class LatestArticlesArguments(ToolArguments):
    """Arguments for the `getLatestArticles` tool."""

    topic: str = Field(min_length=1, description="Topic to search for")
    days: int = Field(
        DEFAULT_LATEST_DAYS, ge=0, description="How many days back to look"
    )
    max_results: int = Field(
        DEFAULT_MAX_RESULTS,
        ge=1,
        alias="maxResults",
        description="Maximum number of articles to return",
    )

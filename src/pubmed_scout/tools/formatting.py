"""Plain-text rendering of search results."""

from pubmed_scout.models.model_pubmed import Article, SearchResult

NO_RESULTS = "No results found"


def format_article(article: Article) -> str:
    lines = [
        f"Title: {article.title}",
        f"Authors: {', '.join(article.authors)}",
        f"Journal: {article.journal}",
        f"Date: {article.publication_date}",
        f"URL: {article.url}",
    ]
    if article.abstract:
        lines.append(f"Abstract: {article.abstract}")
    lines.append("---")
    return "\n".join(lines) + "\n"


def format_search_result(result: SearchResult) -> str:
    """Render a result as the text block returned to tool callers."""
    if not result.articles:
        return NO_RESULTS
    body = "\n".join(format_article(a) for a in result.articles)
    return f"Found {len(result.articles)} articles:\n\n{body}"


def format_error(reason: str) -> str:
    return f"Error searching PubMed: {reason}"

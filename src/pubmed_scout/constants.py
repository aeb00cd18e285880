"""Project-wide constants."""

# -- Base client defaults ---------------------------------------------------
DEFAULT_TIMEOUT: float = 30.0
# NCBI allows three requests per second without an API key.
RATE_LIMIT_DELAY_MS: int = 334

# -- PubMed / NCBI ----------------------------------------------------------
NCBI_BASE_URL: str = "https://eutils.ncbi.nlm.nih.gov/entrez/eutils"
PUBMED_SEARCH_URL: str = f"{NCBI_BASE_URL}/esearch.fcgi"
PUBMED_SUMMARY_URL: str = f"{NCBI_BASE_URL}/esummary.fcgi"
PUBMED_ARTICLE_URL: str = "https://pubmed.ncbi.nlm.nih.gov/{pmid}/"

DEFAULT_TOOL: str = "pubmed-api"
DEFAULT_EMAIL: str = "default@example.com"

OPEN_ACCESS_FILTER: str = '("open access"[Filter])'
DATE_FILTER_UPPER_BOUND: str = "3000"

DEFAULT_MAX_RESULTS: int = 10
DEFAULT_LATEST_DAYS: int = 30
SORT_RELEVANCE: str = "relevance"
SORT_DATE: str = "date"

# -- Article placeholders ---------------------------------------------------
NO_TITLE: str = "No title"
NO_DATE: str = "No date"
NO_JOURNAL: str = "No journal"

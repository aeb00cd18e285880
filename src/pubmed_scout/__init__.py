"""pubmed-scout: rate-limited PubMed search exposed as tool calls."""

__version__ = "1.0.0"

"""Shared fixtures for integration tests (live NCBI E-utilities)."""

import os

import pytest

from pubmed_scout.data_sources.pubmed import PubMedClient


@pytest.fixture
async def live_pubmed_client():
    """Create and tear down a PubMedClient that talks to the real API.

    Set PUBMED_SCOUT_INTEGRATION=1 to run these tests; they need network
    access and count against the NCBI rate limit.
    """
    if os.getenv("PUBMED_SCOUT_INTEGRATION") != "1":
        pytest.skip("PUBMED_SCOUT_INTEGRATION not set - skipping live PubMed test")
    c = PubMedClient()
    yield c
    await c.close()

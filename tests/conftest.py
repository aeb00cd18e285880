"""Pytest configuration and fixtures."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from pubmed_scout.data_sources.base_client import RateGate, RateLimitConfig
from pubmed_scout.data_sources.pubmed import PubMedClient


class FakeClock:
    """Monotonic clock whose sleeps advance time instantly."""

    def __init__(self, start: float = 100.0):
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds
        await asyncio.sleep(0)


def _make_response(status: int = 200, json_body=None, text: str = "") -> AsyncMock:
    """Mock aiohttp response as returned by `await session.get(...)`."""
    resp = AsyncMock()
    resp.status = status
    resp.json = AsyncMock(return_value=json_body)
    resp.text = AsyncMock(return_value=text)
    return resp


@pytest.fixture
def make_response():
    """Factory for mock aiohttp responses."""
    return _make_response


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def rate_gate(fake_clock) -> RateGate:
    """Rate gate with the default interval, driven by a fake clock."""
    return RateGate(RateLimitConfig(), clock=fake_clock, sleep=fake_clock.sleep)


@pytest.fixture
async def pubmed_client(rate_gate):
    """Create and tear down a PubMedClient that never sleeps for real."""
    c = PubMedClient(rate_gate=rate_gate)
    yield c
    await c.close()


@pytest.fixture
def esearch_response() -> dict:
    """esearch JSON for two hits out of 57 total."""
    return {
        "header": {"type": "esearch", "version": "0.3"},
        "esearchresult": {
            "count": "57",
            "retmax": "2",
            "retstart": "0",
            "idlist": ["38472913", "38112233"],
        },
    }


@pytest.fixture
def esummary_response() -> dict:
    """esummary JSON matching `esearch_response`."""
    return {
        "header": {"type": "esummary", "version": "0.3"},
        "result": {
            "uids": ["38472913", "38112233"],
            "38472913": {
                "uid": "38472913",
                "title": "Metformin and longevity: a review.",
                "authors": [
                    {"name": "Smith J", "authtype": "Author"},
                    {"name": "Doe A", "authtype": "Author"},
                ],
                "source": "Nat Rev Endocrinol",
                "pubdate": "2024 Mar 15",
            },
            "38112233": {
                "uid": "38112233",
                "title": "AMPK signalling in ageing.",
                "authors": [{"name": "Lee K", "authtype": "Author"}],
                "source": "Cell Metab",
                "pubdate": "2023 Dec",
                "abstract": "AMPK is a central energy sensor.",
            },
        },
    }

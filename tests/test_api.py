"""API tests: endpoints run against a stubbed orchestrator."""

import httpx
import pytest

import main
from models import HotelRecord

RECORD = HotelRecord(
    url="https://www.marriott.com/en-us/hotels/deljw-jw-marriott-hotel-new-delhi-aerocity/overview/",
    name="JW Marriott Hotel New Delhi Aerocity",
    address="Asset Area 4, Hospitality District, Delhi, 110037 India",
    phone="+91 11 4521 2121",
    latitude=28.5529,
    longitude=77.1196,
)


class StubOrchestrator:
    def __init__(self, records=None, error=None):
        self.records = records or []
        self.error = error
        self.sources = []

    async def run(self, source):
        self.sources.append(source)
        if self.error:
            raise self.error
        return self.records


@pytest.fixture
def stub(monkeypatch):
    orchestrator = StubOrchestrator(records=[RECORD])
    calls = []

    def build(source, headless=True):
        calls.append(headless)
        return orchestrator

    monkeypatch.setattr(main, "build_orchestrator", build)
    orchestrator.headless_calls = calls
    return orchestrator


@pytest.fixture
async def client():
    transport = httpx.ASGITransport(app=main.app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as c:
        yield c


async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["version"] == main.VERSION


async def test_crawl_returns_records(client, stub):
    response = await client.post("/api/v1/hotels/crawl", json={"url": "https://hotels.example.com/delhi/"})

    assert response.status_code == 200
    body = response.json()
    assert body["source"] == "static_listing"
    assert body["listing_url"] == "https://hotels.example.com/delhi/"
    assert body["total"] == 1
    assert body["records"][0]["address"] == RECORD.address
    assert body["records"][0]["email"] is None


async def test_search_builds_source_from_request(client, stub):
    payload = {"city": "New Delhi", "country": "IN", "check_in": "2025-09-29", "check_out": "2025-09-30", "headless": False}

    response = await client.post("/api/v1/hotels/search", json=payload)

    assert response.status_code == 200
    source = stub.sources[0]
    assert (source.city, source.country) == ("New Delhi", "IN")
    assert (source.check_in, source.check_out) == ("2025-09-29", "2025-09-30")
    assert source.readiness is not None
    assert stub.headless_calls == [False]
    assert response.json()["source"] == "marriott_search"


async def test_search_requires_dates(client, stub):
    response = await client.post("/api/v1/hotels/search", json={"city": "Delhi", "country": "IN"})

    assert response.status_code == 422
    assert stub.sources == []


async def test_unexpected_failure_is_500(client, monkeypatch):
    monkeypatch.setattr(main, "build_orchestrator", lambda source, headless=True: StubOrchestrator(error=RuntimeError("boom")))

    response = await client.post("/api/v1/hotels/crawl", json={"url": "https://hotels.example.com/delhi/"})

    assert response.status_code == 500
    assert response.json()["detail"] == "boom"

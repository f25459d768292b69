"""End-to-end runs of ExtractionOrchestrator over faked transports."""

import logging

from fakes import FakeTransport, SleepRecorder, detail_page
from services.fetcher import RetryableFetcher
from services.link_discovery import build_overview_url
from services.orchestrator import ExtractionOrchestrator
from services.sources import MarriottSearchSource, StaticListingSource

SITE = "https://hotels.example.com"
LISTING_URL = f"{SITE}/en-us/hotels/delhi/"


def _orchestrator(transport, policy, identities, sleeps, pacing=None):
    fetcher = RetryableFetcher(transport, policy=policy, identities=identities, sleep=sleeps)
    return ExtractionOrchestrator(fetcher, pacing_delay=1.5, max_candidate_index=10, sleep=pacing or SleepRecorder())


def _static_site(count, missing=()):
    links = "".join(f'<a href="/en-us/hotels/h{i}/overview/">Hotel {i}</a>' for i in range(count))
    pages = {LISTING_URL: f"<html><body>{links}</body></html>"}
    for i in range(count):
        if i not in missing:
            pages[f"{SITE}/en-us/hotels/h{i}/overview/"] = detail_page(name=f"Hotel {i}", address=f"{i} Main Road, Delhi")
    return pages


# --- Static listing ---


async def test_failed_candidate_skipped_and_cap_applied(policy, identities, sleeps, caplog):
    caplog.set_level(logging.INFO)
    transport = FakeTransport(_static_site(15, missing={7}))
    pacing = SleepRecorder()

    records = await _orchestrator(transport, policy, identities, sleeps, pacing).run(StaticListingSource(LISTING_URL))

    # positions 0..10 are handled; position 7 fails after every attempt
    assert len(records) == 10
    assert [r.name for r in records] == [f"Hotel {i}" for i in range(11) if i != 7]
    assert records[0].address == "0 Main Road, Delhi"
    assert records[0].phone == "+91 11 2345 6789"
    assert "Failed to fetch candidate 7" in caplog.text
    assert "Processing cap reached at candidate 10" in caplog.text

    fetched = transport.urls()
    for i in range(11, 15):
        assert f"{SITE}/en-us/hotels/h{i}/overview/" not in fetched
    assert fetched.count(f"{SITE}/en-us/hotels/h7/overview/") == 3
    assert pacing.delays == [1.5] * 10
    assert transport.closed


async def test_short_listing_processes_every_candidate(policy, identities, sleeps):
    transport = FakeTransport(_static_site(3))
    pacing = SleepRecorder()

    records = await _orchestrator(transport, policy, identities, sleeps, pacing).run(StaticListingSource(LISTING_URL))

    assert [r.url for r in records] == [f"{SITE}/en-us/hotels/h{i}/overview/" for i in range(3)]
    assert pacing.delays == [1.5, 1.5]


async def test_crashing_candidate_does_not_discard_other_records(policy, identities, sleeps, caplog):
    pages = _static_site(3)
    pages[f"{SITE}/en-us/hotels/h1/overview/"] = RuntimeError("browser context crashed")
    transport = FakeTransport(pages)

    records = await _orchestrator(transport, policy, identities, sleeps).run(StaticListingSource(LISTING_URL))

    assert [r.name for r in records] == ["Hotel 0", "Hotel 2"]
    assert transport.urls().count(f"{SITE}/en-us/hotels/h1/overview/") == 3
    assert "Failed to fetch candidate 1" in caplog.text


async def test_fetcher_raising_is_contained_to_its_candidate(policy, identities, sleeps):
    class ExplodingFetcher(RetryableFetcher):
        async def fetch(self, url, readiness=None):
            if url.endswith("/h0/overview/"):
                raise RuntimeError("fetcher bug")
            return await super().fetch(url, readiness=readiness)

    transport = FakeTransport(_static_site(2))
    fetcher = ExplodingFetcher(transport, policy=policy, identities=identities, sleep=sleeps)
    orchestrator = ExtractionOrchestrator(fetcher, pacing_delay=0, sleep=SleepRecorder())

    records = await orchestrator.run(StaticListingSource(LISTING_URL))

    assert [r.name for r in records] == ["Hotel 1"]
    assert transport.closed


async def test_malformed_listing_href_keeps_valid_candidates(policy, identities, sleeps):
    pages = _static_site(1)
    pages[LISTING_URL] = (
        '<html><body>'
        '<a href="http://[broken/hotels/x/overview/">Broken</a>'
        '<a href="/en-us/hotels/h0/overview/">Hotel 0</a>'
        '</body></html>'
    )
    transport = FakeTransport(pages)

    records = await _orchestrator(transport, policy, identities, sleeps).run(StaticListingSource(LISTING_URL))

    assert [r.name for r in records] == ["Hotel 0"]


async def test_listing_failure_returns_no_records(policy, identities, sleeps, caplog):
    transport = FakeTransport()

    records = await _orchestrator(transport, policy, identities, sleeps).run(StaticListingSource(LISTING_URL))

    assert records == []
    assert transport.urls() == [LISTING_URL] * 3
    assert "Could not fetch listing page" in caplog.text
    assert transport.closed


async def test_listing_without_detail_links(policy, identities, sleeps):
    transport = FakeTransport({LISTING_URL: "<html><body><a href='/about/'>About</a></body></html>"})

    records = await _orchestrator(transport, policy, identities, sleeps).run(StaticListingSource(LISTING_URL))

    assert records == []
    assert transport.urls() == [LISTING_URL]


async def test_unexpected_error_still_closes_transport(policy, identities, sleeps, caplog):
    class BrokenSource(StaticListingSource):
        def detail_targets(self, document):
            raise RuntimeError("listing layout changed")

    transport = FakeTransport(_static_site(2))

    records = await _orchestrator(transport, policy, identities, sleeps).run(BrokenSource(LISTING_URL))

    assert records == []
    assert transport.closed
    assert "listing layout changed" in caplog.text


# --- Search results ---


SEARCH_CARDS = """
<html><body>
<div class="property-card" data-property='{"lat":28.5529,"long":77.1196,"marshacode":"DELJW"}'>
  <button class="title-container">JW Marriott Hotel New Delhi Aerocity</button>
</div>
<div class="property-card" data-property='{"lat":28.55,"long":77.12,"marshacode":"DELAL"}'>
  <button class="title-container">Aloft New Delhi Aerocity</button>
</div>
</body></html>
"""

GEO_ON_PAGE = """
<p>Central reservations: +1 212 555 0100</p>
<script type="application/ld+json">{"geo": {"latitude": 1.0, "longitude": 2.0}}</script>
"""


def _search_source():
    return MarriottSearchSource("Delhi", "IN", "2025-09-29", "2025-09-30", base_url=SITE)


async def test_search_records_combine_card_and_detail_page(policy, identities, sleeps):
    source = _search_source()
    jw_url = build_overview_url("DELJW", "JW Marriott Hotel New Delhi Aerocity", base_url=SITE)
    aloft_url = build_overview_url("DELAL", "Aloft New Delhi Aerocity", base_url=SITE)
    transport = FakeTransport({
        source.listing_url: SEARCH_CARDS,
        jw_url: detail_page(
            name="Getting Here",
            address="Asset Area 4, Hospitality District, Delhi, 110037 India",
            phone="+91 11 4521 2121",
            extra=GEO_ON_PAGE,
        ),
        aloft_url: detail_page(name="Getting Here", address="Asset 5B, Aerocity, Delhi"),
    })

    records = await _orchestrator(transport, policy, identities, sleeps).run(source)

    assert len(records) == 2
    jw = records[0]
    assert jw.url == jw_url
    assert jw.name == "JW Marriott Hotel New Delhi Aerocity"
    assert jw.address == "Asset Area 4, Hospitality District, Delhi, 110037 India"
    assert jw.phone == "+91 11 4521 2121"
    assert (jw.latitude, jw.longitude) == (28.5529, 77.1196)
    assert records[1].name == "Aloft New Delhi Aerocity"


async def test_readiness_wait_only_applies_to_listing(policy, identities, sleeps):
    source = _search_source()
    transport = FakeTransport({source.listing_url: SEARCH_CARDS})

    await _orchestrator(transport, policy, identities, sleeps).run(source)

    assert transport.calls[0]["url"] == source.listing_url
    assert transport.calls[0]["readiness"] == source.readiness
    assert all(call["readiness"] is None for call in transport.calls[1:])

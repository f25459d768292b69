"""
Hotel Records Scraper API

A FastAPI service that collects hotel records (name, address, phone, email,
coordinates) from hotel listing pages.
"""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException

from config import (
    LOG_LEVEL,
    BROWSER_HEADLESS,
    BROWSER_TIMEOUT_SECONDS,
    FETCH_MAX_ATTEMPTS,
)
from models import (
    HotelSearchRequest,
    ListingCrawlRequest,
    ScrapeResponse,
    HealthResponse,
)
from services import (
    ExtractionOrchestrator,
    RetryableFetcher,
    HttpTransport,
    PlaywrightService,
    HotelSource,
    MarriottSearchSource,
    StaticListingSource,
    default_retry_policy,
)

# Configure logging
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    logger.info("Starting Hotel Records Scraper API...")
    yield
    logger.info("Shutting down Hotel Records Scraper API...")


app = FastAPI(
    title="Hotel Records Scraper API",
    description="""
    Collects structured hotel records from hotel listing pages.

    ## Usage
    - **Search scrape** (JavaScript-rendered search results): POST /api/v1/hotels/search
    - **Listing crawl** (static listing page): POST /api/v1/hotels/crawl

    Each run fetches the listing, discovers detail pages and extracts every
    record it can; hotels whose pages cannot be fetched are skipped.
    """,
    version=VERSION,
    lifespan=lifespan
)


def build_orchestrator(source: HotelSource, headless: bool = BROWSER_HEADLESS) -> ExtractionOrchestrator:
    """Browser-backed fetcher for rendered sources, plain HTTP otherwise"""
    if source.readiness is not None:
        fetcher = RetryableFetcher(
            PlaywrightService(headless=headless),
            policy=default_retry_policy(request_timeout=BROWSER_TIMEOUT_SECONDS),
        )
    else:
        fetcher = RetryableFetcher(HttpTransport())
    return ExtractionOrchestrator(fetcher)


async def _scrape(source: HotelSource, headless: bool = BROWSER_HEADLESS) -> ScrapeResponse:
    start_time = time.time()
    try:
        records = await build_orchestrator(source, headless=headless).run(source)
    except Exception as e:
        logger.error(f"Scrape failed: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    return ScrapeResponse(
        source=source.name,
        listing_url=source.listing_url,
        total=len(records),
        records=records,
        processing_time_seconds=round(time.time() - start_time, 1),
    )


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """Check API health and configuration status"""
    return HealthResponse(
        status="healthy",
        version=VERSION,
        browser_headless=BROWSER_HEADLESS,
        max_attempts=FETCH_MAX_ATTEMPTS,
    )


@app.post("/api/v1/hotels/search", response_model=ScrapeResponse, tags=["Scrape"])
async def search_hotels(request: HotelSearchRequest):
    """
    Scrape hotels from the search results for a city and stay dates.

    The results page is rendered in a headless browser; each hotel card is
    turned into its overview page URL and that page is scraped for address,
    phone, email and coordinates.
    """
    source = MarriottSearchSource(
        city=request.city,
        country=request.country,
        check_in=request.check_in,
        check_out=request.check_out,
    )
    return await _scrape(source, headless=request.headless)


@app.post("/api/v1/hotels/crawl", response_model=ScrapeResponse, tags=["Scrape"])
async def crawl_listing(request: ListingCrawlRequest):
    """Scrape the hotel detail pages linked from a static listing page"""
    return await _scrape(StaticListingSource(request.url))


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)

"""Services for the Hotel Records Scraper"""

from .errors import FetchError, FetchTimeout, TransportError
from .document import RenderedDocument
from .fetcher import RetryableFetcher, IdentityPool, default_retry_policy
from .http_transport import HttpTransport
from .playwright_service import PlaywrightService, wait_until_ready
from .link_discovery import LinkDiscoverer, build_overview_url, build_search_url, slugify_hotel_name
from .field_extractor import FieldExtractor, StrategyOutcome, OutcomeKind
from .sources import HotelSource, StaticListingSource, MarriottSearchSource, DetailTarget
from .orchestrator import ExtractionOrchestrator

__all__ = [
    "FetchError",
    "FetchTimeout",
    "TransportError",
    "RenderedDocument",
    "RetryableFetcher",
    "IdentityPool",
    "default_retry_policy",
    "HttpTransport",
    "PlaywrightService",
    "wait_until_ready",
    "LinkDiscoverer",
    "build_overview_url",
    "build_search_url",
    "slugify_hotel_name",
    "FieldExtractor",
    "StrategyOutcome",
    "OutcomeKind",
    "HotelSource",
    "StaticListingSource",
    "MarriottSearchSource",
    "DetailTarget",
    "ExtractionOrchestrator",
]

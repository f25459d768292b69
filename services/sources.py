"""Hotel sources: where the listing lives and how it maps to detail pages"""

from typing import Any, Dict, List, NamedTuple, Optional

from config import MARRIOTT_BASE_URL, READINESS_POLL_SECONDS, READINESS_TIMEOUT_SECONDS
from models import HotelRecord, ListingCandidate, ReadinessWait
from .document import RenderedDocument
from .field_extractor import FieldExtractor, PHONE_LINK_FIRST, PHONE_TEXT_FIRST
from .link_discovery import LinkDiscoverer, build_overview_url, build_search_url


class DetailTarget(NamedTuple):
    url: str
    candidate: Optional[ListingCandidate] = None


class HotelSource:
    """Base class for a listing page plus the rules to read its hotels"""

    name: str = ""
    readiness: Optional[ReadinessWait] = None

    def __init__(self, discoverer: Optional[LinkDiscoverer] = None, extractor: Optional[FieldExtractor] = None):
        self.discoverer = discoverer or LinkDiscoverer()
        self.extractor = extractor or FieldExtractor()

    @property
    def listing_url(self) -> str:
        raise NotImplementedError

    def detail_targets(self, document: RenderedDocument) -> List[DetailTarget]:
        raise NotImplementedError

    def build_record(self, target: DetailTarget, fields: Dict[str, Any]) -> HotelRecord:
        """
        Assemble the record for one detail page.

        Listing-card data, when present, is structured and wins for name and
        coordinates; the detail page fills everything else.
        """
        merged = dict(fields)
        candidate = target.candidate
        if candidate is not None:
            merged["name"] = candidate.name
            if candidate.latitude is not None:
                merged["latitude"] = candidate.latitude
            if candidate.longitude is not None:
                merged["longitude"] = candidate.longitude
        return HotelRecord(url=target.url, **merged)


class StaticListingSource(HotelSource):
    """A server-rendered listing page whose anchors link to detail pages"""

    name = "static_listing"

    def __init__(
        self,
        listing_url: str,
        discoverer: Optional[LinkDiscoverer] = None,
        extractor: Optional[FieldExtractor] = None,
    ):
        super().__init__(discoverer, extractor or FieldExtractor(phone_strategies=PHONE_TEXT_FIRST))
        self._listing_url = listing_url

    @property
    def listing_url(self) -> str:
        return self._listing_url

    def detail_targets(self, document: RenderedDocument) -> List[DetailTarget]:
        return [DetailTarget(url) for url in self.discoverer.discover_links(document, self.listing_url)]


class MarriottSearchSource(HotelSource):
    """Marriott search results for a city and stay dates, rendered client-side"""

    name = "marriott_search"

    LOADING_SELECTOR = ".loading-spinner"

    def __init__(
        self,
        city: str,
        country: str,
        check_in: str,
        check_out: str,
        base_url: str = MARRIOTT_BASE_URL,
        readiness: Optional[ReadinessWait] = None,
        discoverer: Optional[LinkDiscoverer] = None,
        extractor: Optional[FieldExtractor] = None,
    ):
        super().__init__(discoverer, extractor or FieldExtractor(phone_strategies=PHONE_LINK_FIRST))
        self.city = city
        self.country = country
        self.check_in = check_in
        self.check_out = check_out
        self.base_url = base_url
        self.readiness = readiness or ReadinessWait(
            loading_selector=self.LOADING_SELECTOR,
            content_selector=LinkDiscoverer.CARD_SELECTOR,
            poll_interval=READINESS_POLL_SECONDS,
            timeout=READINESS_TIMEOUT_SECONDS,
        )

    @property
    def listing_url(self) -> str:
        return build_search_url(self.city, self.country, self.check_in, self.check_out, base_url=self.base_url)

    def detail_targets(self, document: RenderedDocument) -> List[DetailTarget]:
        return [
            DetailTarget(build_overview_url(c.property_code, c.name, base_url=self.base_url), c)
            for c in self.discoverer.discover_candidates(document)
        ]

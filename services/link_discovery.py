"""Find hotel detail pages on listing and search pages"""

import json
import logging
import re
from typing import Optional, List, Sequence
from urllib.parse import urljoin, urlparse, urlencode

from config import MARRIOTT_BASE_URL
from models import ListingCandidate
from .document import RenderedDocument

logger = logging.getLogger(__name__)

SEARCH_PATH = "/search/findHotels.mi"
OVERVIEW_URL_TEMPLATE = "{base}/en-us/hotels/{code}-{slug}/overview/"

# Fragments of hrefs that may lead to hotel pages
DEFAULT_LINK_KEYWORDS = ('/hotels/', '/hotel/', '/search/', '/locations/')

# Detail pages end in an overview segment
DETAIL_PATH_RE = re.compile(r'/overview/?$', re.IGNORECASE)


def slugify_hotel_name(name: str) -> str:
    """'JW Marriott Hotel New Delhi Aerocity' -> 'jw-marriott-hotel-new-delhi-aerocity'"""
    slug = name.lower().strip()
    slug = re.sub(r'[^\w\s-]', '', slug, flags=re.ASCII)
    slug = re.sub(r'\s+', '-', slug)
    return re.sub(r'-+', '-', slug)


def build_overview_url(property_code: str, name: str, base_url: str = MARRIOTT_BASE_URL) -> str:
    """Detail page URL for a hotel from its property code and display name"""
    return OVERVIEW_URL_TEMPLATE.format(
        base=base_url.rstrip('/'),
        code=property_code,
        slug=slugify_hotel_name(name),
    )


def build_search_url(
    city: str,
    country: str,
    check_in: str,
    check_out: str,
    base_url: str = MARRIOTT_BASE_URL,
) -> str:
    """Search results URL for a city and stay dates"""
    params = {
        "destinationAddress.mainText": city,
        "destinationAddress.country": country,
        "destinationAddress.city": city,
        "fromDate": check_in,
        "toDate": check_out,
        "deviceType": "desktop-web",
        "view": "list",
    }
    return f"{base_url.rstrip('/')}{SEARCH_PATH}?{urlencode(params)}"


def _to_float(value) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


class LinkDiscoverer:
    """Turns a listing document into the detail pages worth visiting"""

    CARD_SELECTOR = "div.property-card"
    CARD_NAME_SELECTOR = "button.title-container"
    CARD_DATA_ATTRIBUTE = "data-property"

    def __init__(self, keywords: Sequence[str] = DEFAULT_LINK_KEYWORDS):
        self.keywords = tuple(k.lower() for k in keywords)

    def discover_links(self, document: RenderedDocument, base_url: str) -> List[str]:
        """
        Collect detail-page URLs from a static listing page.

        Anchors are kept when their href contains one of the keywords and the
        resolved URL ends in an overview segment. Order of first appearance is
        preserved and each URL appears once.
        """
        links: List[str] = []
        seen = set()

        for anchor in document.soup.find_all('a', href=True):
            href = anchor.get('href', '').strip()
            if not href or href.startswith('#') or href.startswith('javascript:'):
                continue
            if not any(keyword in href.lower() for keyword in self.keywords):
                continue

            try:
                full_url = urljoin(base_url, href)
                path = urlparse(full_url).path
            except ValueError as e:
                logger.debug(f"Skipping malformed href {href!r}: {e}")
                continue
            if not DETAIL_PATH_RE.search(path):
                continue
            if full_url in seen:
                continue

            seen.add(full_url)
            links.append(full_url)

        logger.info(f"Discovered {len(links)} detail links on {base_url}")
        return links

    def discover_candidates(self, document: RenderedDocument) -> List[ListingCandidate]:
        """Read hotel cards (name, property code, coordinates) from a rendered search page"""
        candidates: List[ListingCandidate] = []

        for idx, card in enumerate(document.soup.select(self.CARD_SELECTOR), start=1):
            title = card.select_one(self.CARD_NAME_SELECTOR)
            name = title.get_text(strip=True) if title else None

            lat = lon = code = None
            raw = card.get(self.CARD_DATA_ATTRIBUTE)
            if raw:
                try:
                    prop = json.loads(raw)
                    if isinstance(prop, dict):
                        lat = _to_float(prop.get("lat"))
                        lon = _to_float(prop.get("long"))
                        code = prop.get("marshacode")
                    else:
                        logger.warning(f"Unexpected {self.CARD_DATA_ATTRIBUTE} payload for card {idx}")
                except json.JSONDecodeError as e:
                    logger.warning(f"Failed to parse {self.CARD_DATA_ATTRIBUTE} JSON for card {idx}: {e}")

            if not name or not code:
                logger.debug(f"Skipping card {idx}: name={name!r}, code={code!r}")
                continue

            candidates.append(ListingCandidate(
                index=idx,
                name=name,
                property_code=str(code),
                latitude=lat,
                longitude=lon,
            ))

        logger.info(f"Discovered {len(candidates)} hotel cards on {document.url}")
        return candidates

"""
Field extraction from hotel detail pages.

Every field has an ordered chain of strategies. A strategy is a plain
function taking a RenderedDocument and returning a StrategyOutcome; the
first FOUND outcome in the chain wins. MALFORMED (e.g. broken JSON in a
linked-data block) is logged and the chain moves on, so a bad source never
fails the whole extraction. A field no strategy finds is None.
"""

import json
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from .document import RenderedDocument

logger = logging.getLogger(__name__)

# Container holding the name and address paragraphs
ADDRESS_CONTAINER_SELECTOR = '.getting-here__left-body'

TEL_LINK_SELECTORS = [
    '.getting-here__left-anchor a[href^="tel:"]',
    'a[href^="tel:"]',
]

EMAIL_SELECTORS = [
    '[itemprop="email"]',
    '.email',
    '.contact-email',
    '[data-testid="email"]',
    'a[href^="mailto:"]',
]

# +<country code> followed by grouped digits, e.g. "+91 11 2345 6789"
INTERNATIONAL_PHONE_RE = re.compile(r'\+\d{1,3}(?:[\s.-]?\(?\d{1,5}\)?){2,6}')

# Text matches with fewer digits ("+1 2 3") are not phone numbers
MIN_PHONE_DIGITS = 7

EMAIL_RE = re.compile(r'[a-zA-Z0-9._%+\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,}')


class OutcomeKind(str, Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    MALFORMED = "malformed"


@dataclass(frozen=True)
class StrategyOutcome:
    kind: OutcomeKind
    value: Any = None
    reason: Optional[str] = None

    @classmethod
    def found(cls, value: Any) -> "StrategyOutcome":
        return cls(OutcomeKind.FOUND, value=value)

    @classmethod
    def not_found(cls) -> "StrategyOutcome":
        return cls(OutcomeKind.NOT_FOUND)

    @classmethod
    def malformed(cls, reason: str) -> "StrategyOutcome":
        return cls(OutcomeKind.MALFORMED, reason=reason)


Strategy = Callable[[RenderedDocument], StrategyOutcome]


def _to_float(value: Any) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _coordinate_outcome(value: Any, source: str) -> StrategyOutcome:
    number = _to_float(value)
    if number is None:
        return StrategyOutcome.malformed(f"non-numeric value {value!r} in {source}")
    return StrategyOutcome.found(number)


# ---------------------------------------------------------------------------
# Name / address
# ---------------------------------------------------------------------------

def container_paragraph(position: int, selector: str = ADDRESS_CONTAINER_SELECTOR) -> Strategy:
    """Text of the n-th <p> inside the known address container"""
    def strategy(document: RenderedDocument) -> StrategyOutcome:
        container = document.soup.select_one(selector)
        if container is None:
            return StrategyOutcome.not_found()
        paragraphs = container.find_all('p')
        if len(paragraphs) <= position:
            return StrategyOutcome.not_found()
        text = paragraphs[position].get_text(strip=True)
        return StrategyOutcome.found(text) if text else StrategyOutcome.not_found()
    strategy.__name__ = f"container_paragraph_{position}"
    return strategy


# ---------------------------------------------------------------------------
# Phone
# ---------------------------------------------------------------------------

def phone_from_text(document: RenderedDocument) -> StrategyOutcome:
    for match in INTERNATIONAL_PHONE_RE.finditer(document.visible_text):
        number = match.group(0).strip()
        if sum(ch.isdigit() for ch in number) >= MIN_PHONE_DIGITS:
            return StrategyOutcome.found(number)
    return StrategyOutcome.not_found()


def phone_from_tel_link(document: RenderedDocument) -> StrategyOutcome:
    for selector in TEL_LINK_SELECTORS:
        anchor = document.soup.select_one(selector)
        if anchor is None:
            continue
        text = anchor.get_text(strip=True)
        if not text:
            text = anchor.get('href', '')[len('tel:'):].strip()
        if text:
            return StrategyOutcome.found(text)
    return StrategyOutcome.not_found()


PHONE_TEXT_FIRST: List[Strategy] = [phone_from_text, phone_from_tel_link]
PHONE_LINK_FIRST: List[Strategy] = [phone_from_tel_link, phone_from_text]


# ---------------------------------------------------------------------------
# Email
# ---------------------------------------------------------------------------

def email_from_selector(selector: str) -> Strategy:
    def strategy(document: RenderedDocument) -> StrategyOutcome:
        for element in document.soup.select(selector):
            href = element.get('href', '') if element.name == 'a' else ''
            if href.lower().startswith('mailto:'):
                candidate = href[len('mailto:'):].split('?')[0]
            else:
                candidate = element.get('content') or element.get_text(' ', strip=True)
            match = EMAIL_RE.search(candidate or '')
            if match:
                return StrategyOutcome.found(match.group(0))
        return StrategyOutcome.not_found()
    strategy.__name__ = f"email_from_selector[{selector}]"
    return strategy


def email_from_text(document: RenderedDocument) -> StrategyOutcome:
    match = EMAIL_RE.search(document.visible_text)
    return StrategyOutcome.found(match.group(0)) if match else StrategyOutcome.not_found()


EMAIL_STRATEGIES: List[Strategy] = [email_from_selector(s) for s in EMAIL_SELECTORS] + [email_from_text]


# ---------------------------------------------------------------------------
# Geocoordinates
# ---------------------------------------------------------------------------

def _find_geo_value(data: Any, key: str) -> Any:
    """First geo[key] found anywhere in a linked-data structure (incl. @graph)"""
    if isinstance(data, dict):
        geo = data.get('geo')
        if isinstance(geo, dict) and geo.get(key) not in (None, ''):
            return geo[key]
        for value in data.values():
            if isinstance(value, (dict, list)):
                found = _find_geo_value(value, key)
                if found is not None:
                    return found
    elif isinstance(data, list):
        for item in data:
            found = _find_geo_value(item, key)
            if found is not None:
                return found
    return None


def coordinate_from_linked_data(key: str) -> Strategy:
    def strategy(document: RenderedDocument) -> StrategyOutcome:
        broken = 0
        for script in document.soup.find_all('script', type='application/ld+json'):
            raw = script.string or script.get_text()
            try:
                data = json.loads(raw)
            except json.JSONDecodeError as e:
                broken += 1
                logger.debug(f"Skipping malformed ld+json block on {document.url}: {e}")
                continue
            value = _find_geo_value(data, key)
            if value is not None:
                return _coordinate_outcome(value, "ld+json geo")
        if broken:
            return StrategyOutcome.malformed(f"{broken} malformed ld+json block(s)")
        return StrategyOutcome.not_found()
    strategy.__name__ = f"linked_data_{key}"
    return strategy


def coordinate_from_data_attribute(key: str) -> Strategy:
    attribute = f"data-{key}"

    def strategy(document: RenderedDocument) -> StrategyOutcome:
        element = document.soup.find(attrs={attribute: True})
        if element is None:
            return StrategyOutcome.not_found()
        return _coordinate_outcome(element.get(attribute), attribute)
    strategy.__name__ = f"data_attribute_{key}"
    return strategy


def coordinate_from_meta(key: str) -> Strategy:
    names = (key, f"place:location:{key}", f"geo.{key}", f"og:{key}")

    def strategy(document: RenderedDocument) -> StrategyOutcome:
        for name in names:
            tag = document.soup.find('meta', attrs={'name': name}) or document.soup.find('meta', attrs={'property': name})
            if tag is not None and tag.get('content'):
                return _coordinate_outcome(tag['content'], f"meta {name}")
        return StrategyOutcome.not_found()
    strategy.__name__ = f"meta_{key}"
    return strategy


def coordinate_strategies(key: str) -> List[Strategy]:
    return [
        coordinate_from_linked_data(key),
        coordinate_from_data_attribute(key),
        coordinate_from_meta(key),
    ]


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

def first_found(field: str, strategies: Iterable[Strategy], document: RenderedDocument) -> Optional[Any]:
    """Apply strategies in order and return the first found value, or None"""
    for strategy in strategies:
        outcome = strategy(document)
        name = getattr(strategy, '__name__', repr(strategy))
        if outcome.kind is OutcomeKind.FOUND:
            logger.debug(f"{field}: found by {name} on {document.url}")
            return outcome.value
        if outcome.kind is OutcomeKind.MALFORMED:
            logger.debug(f"{field}: {name} skipped malformed data on {document.url} ({outcome.reason})")
    logger.debug(f"{field}: not found on {document.url}")
    return None


class FieldExtractor:
    """Extracts hotel fields from one detail document"""

    FIELDS = ("name", "address", "phone", "email", "latitude", "longitude")

    def __init__(
        self,
        phone_strategies: Optional[Sequence[Strategy]] = None,
        container_selector: str = ADDRESS_CONTAINER_SELECTOR,
    ):
        self.chains: Dict[str, List[Strategy]] = {
            "name": [container_paragraph(0, container_selector)],
            "address": [container_paragraph(1, container_selector)],
            "phone": list(phone_strategies or PHONE_TEXT_FIRST),
            "email": list(EMAIL_STRATEGIES),
            "latitude": coordinate_strategies("latitude"),
            "longitude": coordinate_strategies("longitude"),
        }

    def extract_field(self, field: str, document: RenderedDocument) -> Optional[Any]:
        return first_found(field, self.chains[field], document)

    def extract(self, document: RenderedDocument) -> Dict[str, Any]:
        """
        Extract every field; missing ones are None.

        Raises:
            ValueError if document is None
        """
        if document is None:
            raise ValueError("Cannot extract fields from a missing document")
        return {field: self.extract_field(field, document) for field in self.FIELDS}

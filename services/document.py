"""Parsed page handed from the fetcher to discovery and extraction"""

import re
from typing import Optional

from bs4 import BeautifulSoup

# Elements whose text never shows on the rendered page
INVISIBLE_TAGS = ['script', 'style', 'noscript', 'template']


class RenderedDocument:
    """Markup tree for one fetched URL"""

    def __init__(self, url: str, html: str):
        self.url = url
        self.html = html
        self.soup = BeautifulSoup(html, 'lxml')
        self._visible_text: Optional[str] = None

    @property
    def visible_text(self) -> str:
        """Text a visitor would see, whitespace collapsed"""
        if self._visible_text is None:
            # Separate tree so the ld+json scripts stay in self.soup
            soup = BeautifulSoup(self.html, 'lxml')
            for element in soup(INVISIBLE_TAGS):
                element.decompose()
            text = soup.get_text(separator=' ', strip=True)
            self._visible_text = re.sub(r'\s+', ' ', text)
        return self._visible_text

    def __repr__(self) -> str:
        return f"RenderedDocument(url={self.url!r}, bytes={len(self.html)})"

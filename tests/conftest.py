"""
Shared fixtures: an in-memory site served through real BeautifulSoup documents.
"""
from __future__ import annotations

import threading
from collections import Counter
from typing import Dict, List, Optional, Set

import pytest

from image_counter.errors import FetchError
from image_counter.fetch import Document, parse_html


def page(images: int = 0, links: Optional[List[str]] = None) -> str:
    """Build a small HTML page with ``images`` <img> tags and the given links."""
    imgs = "".join(f'<img src="/img{i}.png">' for i in range(images))
    anchors = "".join(f'<a href="{href}">link</a>' for href in links or [])
    return f"<html><body>{imgs}{anchors}</body></html>"


class SiteFetcher:
    """Serves pages from a dict and records every fetch."""

    def __init__(self, pages: Dict[str, str], broken: Optional[Set[str]] = None) -> None:
        self.pages = pages
        self.broken = broken or set()
        self.calls: List[str] = []
        self._lock = threading.Lock()

    def fetch(self, identifier: str) -> Document:
        with self._lock:
            self.calls.append(identifier)
        if identifier in self.broken:
            raise RuntimeError("parser exploded")
        if identifier not in self.pages:
            raise FetchError(identifier, "HTTP 404")
        return parse_html(identifier, self.pages[identifier], identifier)

    @property
    def fetch_counts(self) -> Counter:
        return Counter(self.calls)


@pytest.fixture
def scenario_site() -> SiteFetcher:
    """Root with 2 images linking to A (1 image) and B (no images, links back to root)."""
    return SiteFetcher({
        "http://site/": page(2, ["http://site/a", "http://site/b"]),
        "http://site/a": page(1),
        "http://site/b": page(0, ["http://site/"]),
    })

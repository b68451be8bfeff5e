"""
Element extraction and link resolution for parsed documents.
"""
from __future__ import annotations

from typing import List
from urllib.parse import urldefrag, urljoin, urlparse

from bs4.element import Tag

from image_counter.errors import ResolutionError
from image_counter.fetch import Document

FOLLOWABLE_SCHEMES: frozenset[str] = frozenset(("http", "https", "file"))


class DocumentInspector:
    """Finds image and link references in a document and resolves links."""

    def image_references(self, document: Document) -> List[Tag]:
        """Return every ``<img>`` element in the document."""
        return document.soup.find_all("img")

    def link_references(self, document: Document) -> List[str]:
        """Return ``href`` values of ``<a>`` tags in document order, empty ones dropped."""
        hrefs = (a.get("href", "") for a in document.soup.find_all("a", href=True))
        return [href.strip() for href in hrefs if href and href.strip()]

    def resolve_link(self, document: Document, href: str) -> str:
        """
        Resolve ``href`` against the document base into an absolute identifier.

        - Joins relative references against the document base URL
        - Drops fragments (#...)
        - Rejects anything that is not http, https or file
        """
        try:
            joined, _ = urldefrag(urljoin(document.base_url, href))
            scheme = urlparse(joined).scheme.lower()
        except ValueError as e:
            raise ResolutionError(document.identifier, f"Cannot resolve link '{href}': {e}") from e

        if scheme not in FOLLOWABLE_SCHEMES:
            raise ResolutionError(document.identifier, f"Cannot follow link '{href}' (scheme '{scheme or 'none'}')")
        return joined

"""
Resource fetching: turn an identifier into a parsed document.

Remote pages are fetched with ``requests`` and parsed with BeautifulSoup.
Local folders are presented as a synthetic page whose ``<img>`` elements are
the image files in the folder and whose links are its sub-folders and HTML
files.
"""
from __future__ import annotations

import html
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional
from urllib.parse import quote, urljoin, urlparse
from urllib.request import url2pathname

import requests
from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup

from image_counter.config import DEFAULT_TIMEOUT_S, DEFAULT_USER_AGENT
from image_counter.errors import ConfigError, FetchError, ParseError

# Local files counted as images (frozen set for O(1) lookup)
IMAGE_EXTENSIONS: frozenset[str] = frozenset((
    ".jpg", ".jpeg", ".png", ".gif", ".bmp", ".webp",
    ".svg", ".tif", ".tiff", ".ico",
))

HTML_EXTENSIONS: frozenset[str] = frozenset((".html", ".htm", ".xhtml"))

HTML_CONTENT_TYPES: tuple[str, ...] = ("text/html", "application/xhtml+xml")

REMOTE_SCHEMES: frozenset[str] = frozenset(("http", "https"))


@dataclass(slots=True)
class Document:
    """A fetched and parsed resource."""
    identifier: str
    base_url: str
    soup: BeautifulSoup


def to_identifier(root: str) -> str:
    """
    Turn a user-supplied root (URL or local path) into a resource identifier.

    URLs are returned unchanged. Local paths become absolute ``file://`` URIs,
    with a trailing slash for directories so relative links resolve inside them.
    """
    if not root or not root.strip():
        raise ConfigError("A root folder or URL is required")
    root = root.strip()

    scheme = urlparse(root).scheme.lower()
    if scheme in REMOTE_SCHEMES or scheme == "file":
        return root

    path = Path(root).expanduser().resolve()
    uri = path.as_uri()
    if path.is_dir() and not uri.endswith("/"):
        uri += "/"
    return uri


def parse_html(identifier: str, markup: str, base_url: str) -> Document:
    """Parse HTML markup, honouring a ``<base href>`` for link resolution."""
    try:
        soup = BeautifulSoup(markup, "lxml")
    except ParserRejectedMarkup as e:
        raise ParseError(identifier, f"Malformed HTML: {e}") from e

    base_tag = soup.find("base", href=True)
    if base_tag and base_tag["href"].strip():
        base_url = urljoin(base_url, base_tag["href"].strip())

    return Document(identifier=identifier, base_url=base_url, soup=soup)


def render_folder(directory: Path) -> str:
    """Render a folder listing as HTML: images as ``<img>``, the rest as links."""
    images: List[str] = []
    links: List[str] = []

    for entry in sorted(directory.iterdir(), key=lambda p: p.name):
        if entry.name.startswith("."):
            continue
        href = html.escape(quote(entry.name), quote=True)
        suffix = entry.suffix.lower()
        if entry.is_dir():
            links.append(f'<a href="{href}/">{html.escape(entry.name)}</a>')
        elif suffix in IMAGE_EXTENSIONS:
            images.append(f'<img src="{href}">')
        elif suffix in HTML_EXTENSIONS:
            links.append(f'<a href="{href}">{html.escape(entry.name)}</a>')

    return "<html><body>\n" + "\n".join(images + links) + "\n</body></html>"


class ResourceFetcher:
    """Fetches remote pages over HTTP and local folders from the filesystem."""

    def __init__(
        self,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        user_agent: str = DEFAULT_USER_AGENT,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.timeout_s = timeout_s
        self.session = session or requests.Session()
        self.session.headers["User-Agent"] = user_agent

    def fetch(self, identifier: str) -> Document:
        """Return the parsed document for ``identifier``."""
        scheme = urlparse(identifier).scheme.lower()
        if scheme in REMOTE_SCHEMES:
            return self._fetch_remote(identifier)
        if scheme == "file":
            return self._fetch_local(identifier)
        raise FetchError(identifier, f"Unsupported scheme '{scheme or 'none'}'")

    def _fetch_remote(self, identifier: str) -> Document:
        try:
            resp = self.session.get(identifier, timeout=self.timeout_s, allow_redirects=True)
        except requests.RequestException as e:
            raise FetchError(identifier, str(e)) from e

        if resp.status_code >= 400:
            raise FetchError(identifier, f"HTTP {resp.status_code}")

        content_type = (resp.headers.get("content-type") or "").lower()
        if not any(t in content_type for t in HTML_CONTENT_TYPES):
            raise ParseError(identifier, f"Unsupported content type '{content_type or 'unknown'}'")

        return parse_html(identifier, resp.text, resp.url or identifier)

    def _fetch_local(self, identifier: str) -> Document:
        path = Path(url2pathname(urlparse(identifier).path))
        try:
            if path.is_dir():
                base_url = identifier if identifier.endswith("/") else identifier + "/"
                return parse_html(identifier, render_folder(path), base_url)
            if not path.exists():
                raise FetchError(identifier, f"No such file or directory: {path}")
            if path.suffix.lower() not in HTML_EXTENSIONS:
                raise ParseError(identifier, f"Not a folder or HTML file: {path.name}")
            markup = path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            raise FetchError(identifier, str(e)) from e

        return parse_html(identifier, markup, identifier)

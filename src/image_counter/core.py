"""
Core counting logic and data structures.
"""
from __future__ import annotations

import logging
import threading
from collections import defaultdict
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

from image_counter.config import CountConfig
from image_counter.errors import ResolutionError, ResourceError
from image_counter.fetch import Document, ResourceFetcher
from image_counter.inspector import DocumentInspector
from image_counter.visited import VisitedSet

logger = logging.getLogger("image_counter")


@dataclass(slots=True)
class ResourceVisit:
    """Outcome of processing a single resource: a count or a failure reason."""
    identifier: str
    depth: int
    images: int = 0
    links: List[str] = field(default_factory=list)
    unresolved: int = 0
    error: Optional[str] = None
    error_type: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.error is not None


@dataclass(slots=True)
class CountStats:
    """Statistics collected during one count for summary output."""
    resources_visited: int = 0
    resources_failed: int = 0
    duplicates_skipped: int = 0
    depth_cutoffs: int = 0
    links_unresolved: int = 0
    total_images: int = 0
    error_counts: Dict[str, int] = field(default_factory=lambda: defaultdict(int))

    def record_visit(self, visit: ResourceVisit) -> None:
        """Record the outcome of one fetched resource."""
        self.resources_visited += 1
        self.total_images += visit.images
        self.links_unresolved += visit.unresolved
        if visit.failed:
            self.resources_failed += 1
            self.error_counts[visit.error_type or "Exception"] += 1

    def to_dict(self) -> Dict[str, object]:
        return {
            "resources_visited": self.resources_visited,
            "resources_failed": self.resources_failed,
            "duplicates_skipped": self.duplicates_skipped,
            "depth_cutoffs": self.depth_cutoffs,
            "links_unresolved": self.links_unresolved,
            "total_images": self.total_images,
            "error_counts": dict(sorted(self.error_counts.items())),
        }


@dataclass(slots=True)
class _Frame:
    """A resource on the traversal stack whose links are still being enumerated."""
    visit: ResourceVisit
    document: Optional[Document] = None
    hrefs: Iterator[str] = field(default_factory=lambda: iter(()))
    count: int = 0


class ImageCounter:
    """
    Counts the images reachable from a root resource by following its links.

    Each resource is fetched at most once per ``count()`` call. Branches deeper
    than ``config.max_depth`` contribute nothing and are never fetched. A
    resource that fails to fetch or parse contributes zero and does not affect
    its siblings or ancestors.

    The traversal is depth-first over an explicit stack, so link chains of any
    depth are followed. With ``config.workers > 1`` the links of each opened
    resource are fetched ahead on a thread pool, while admission and counting
    stay depth-first on the calling thread. Totals, ownership of each resource
    and diagnostic order are the same as with one worker.
    """

    def __init__(
        self,
        config: CountConfig,
        fetcher: Optional[ResourceFetcher] = None,
        inspector: Optional[DocumentInspector] = None,
    ) -> None:
        self.config = config.validate()
        self.fetcher = fetcher or ResourceFetcher(
            timeout_s=config.timeout_s,
            user_agent=config.user_agent,
        )
        self.inspector = inspector or DocumentInspector()
        self.stats = CountStats()
        self.visited = VisitedSet()
        self._prefetched: Dict[str, Future] = {}

    def count(self, root: Optional[str] = None) -> int:
        """
        Count all images reachable from ``root`` (default: ``config.root``).

        Never raises for per-resource failures. ``self.stats`` and
        ``self.visited`` describe this call once it returns.
        """
        root = root or self.config.root
        self.stats = CountStats()
        self.visited = VisitedSet()
        self._prefetched = {}

        if self.config.concurrent:
            with ThreadPoolExecutor(
                max_workers=self.config.workers,
                thread_name_prefix="image-counter",
            ) as pool:
                total = self._count(root, pool)
            self._prefetched = {}
        else:
            total = self._count(root)

        self._print(f"{total} total image(s) are reachable from {root}")
        return total

    def _print(self, message: str, *, exc_info: bool = False) -> None:
        """Emit a diagnostic if diagnostics are enabled."""
        if self.config.diagnostics_enabled:
            logger.info(message, exc_info=exc_info)

    def _admit(self, identifier: str, depth: int) -> bool:
        """Apply the depth gate, then claim ``identifier`` in the visited set."""
        if depth > self.config.max_depth:
            self._print(f"[Depth{depth}]: Exceeded max depth of {self.config.max_depth}")
            self.stats.depth_cutoffs += 1
            return False

        if not self.visited.add_if_absent(identifier):
            self._print(f"[Depth{depth}]: Already processed {identifier}")
            self.stats.duplicates_skipped += 1
            return False

        return True

    def _count(self, root: str, pool: Optional[ThreadPoolExecutor] = None) -> int:
        """
        Depth-first count of ``root`` and everything below it.

        A frame is popped once all of its links have been enumerated; its
        count (own images plus everything below it) is then added to its
        parent's.
        """
        if not self._admit(root, 1):
            return 0

        stack: List[_Frame] = [self._open(root, 1, pool)]
        total = 0
        while stack:
            frame = stack[-1]
            link = self._next_link(frame)
            if link is not None:
                depth = frame.visit.depth + 1
                if self._admit(link, depth):
                    stack.append(self._open(link, depth, pool))
                continue

            stack.pop()
            self.stats.record_visit(frame.visit)
            self._print(
                f"[Depth{frame.visit.depth}]: found {frame.count} images for {frame.visit.identifier} "
                f"in thread {threading.current_thread().name}"
            )
            if stack:
                stack[-1].count += frame.count
            else:
                total = frame.count

        return total

    def _open(self, identifier: str, depth: int, pool: Optional[ThreadPoolExecutor]) -> _Frame:
        """
        Fetch one resource and count its images.

        Every failure is turned into a failed visit with zero images and no
        links to enumerate.
        """
        visit = ResourceVisit(identifier=identifier, depth=depth)
        frame = _Frame(visit=visit)
        try:
            document = self._fetch(identifier)
            images = len(self.inspector.image_references(document))
            hrefs = self.inspector.link_references(document)
        except ResourceError as e:
            self._print(f"For '{identifier}': {e.reason}")
            visit.error = e.reason
            visit.error_type = type(e).__name__
            return frame
        except Exception as e:
            self._print(f"For '{identifier}': {e}", exc_info=True)
            visit.error = str(e) or type(e).__name__
            visit.error_type = type(e).__name__
            return frame

        visit.images = frame.count = images
        frame.document = document
        frame.hrefs = iter(hrefs)
        if pool is not None:
            self._prefetch(pool, document, hrefs, depth + 1)
        return frame

    def _next_link(self, frame: _Frame) -> Optional[str]:
        """Resolve the frame's next link; None once its links are exhausted."""
        for href in frame.hrefs:
            try:
                link = self.inspector.resolve_link(frame.document, href)
            except ResolutionError as e:
                self._print(f"For '{frame.visit.identifier}': {e.reason}")
                frame.visit.unresolved += 1
                continue
            except Exception as e:
                self._print(f"For '{frame.visit.identifier}': {e}", exc_info=True)
                frame.visit.unresolved += 1
                continue
            frame.visit.links.append(link)
            return link
        return None

    def _fetch(self, identifier: str) -> Document:
        future = self._prefetched.pop(identifier, None)
        if future is not None:
            return future.result()
        return self.fetcher.fetch(identifier)

    def _prefetch(self, pool: ThreadPoolExecutor, document: Document, hrefs: List[str], depth: int) -> None:
        """Start fetching the links of ``document`` that may be admitted at ``depth``."""
        if depth > self.config.max_depth:
            return
        for href in hrefs:
            try:
                link = self.inspector.resolve_link(document, href)
            except Exception:
                # reported when the link is enumerated
                continue
            if link in self.visited or link in self._prefetched:
                continue
            self._prefetched[link] = pool.submit(self.fetcher.fetch, link)


def count_images(
    config: CountConfig,
    fetcher: Optional[ResourceFetcher] = None,
    inspector: Optional[DocumentInspector] = None,
) -> Tuple[int, CountStats]:
    """
    Count all images reachable from ``config.root``.

    Args:
        config: Settings for this invocation; validated before counting.
        fetcher: Resource fetcher (default: HTTP and local filesystem).
        inspector: Document inspector (default: BeautifulSoup based).

    Returns:
        Tuple of (total image count, count statistics).
    """
    counter = ImageCounter(config, fetcher=fetcher, inspector=inspector)
    total = counter.count()
    return total, counter.stats

"""
Set of resource identifiers already claimed by a traversal.
"""
from __future__ import annotations

import threading
from typing import Iterator, List, Set


class VisitedSet:
    """
    Append-only set of identifiers shared by every branch of one traversal.

    The check and the insert in ``add_if_absent`` happen under a single lock,
    so concurrent branches never both claim the same identifier.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._seen: Set[str] = set()

    def add_if_absent(self, identifier: str) -> bool:
        """Return True iff this call inserted ``identifier``."""
        with self._lock:
            if identifier in self._seen:
                return False
            self._seen.add(identifier)
            return True

    def __contains__(self, identifier: object) -> bool:
        with self._lock:
            return identifier in self._seen

    def __len__(self) -> int:
        with self._lock:
            return len(self._seen)

    def __iter__(self) -> Iterator[str]:
        with self._lock:
            snapshot: List[str] = sorted(self._seen)
        return iter(snapshot)

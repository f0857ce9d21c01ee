"""Process-wide index of marker methods grouped by feature."""

from __future__ import annotations

import threading
from typing import Dict, Iterable, List

from .models import TestDataMethod


class FeatureIndex:
    """Append-only mapping of feature name to extracted methods.

    Safe for concurrent ``append`` calls; every record appended is retained,
    with no deduplication.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._by_feature: Dict[str, List[TestDataMethod]] = {}

    def append(self, feature: str, records: Iterable[TestDataMethod]) -> None:
        if not feature:
            raise ValueError("feature name must be a non-empty string")
        batch = list(records)
        if not batch:
            return
        with self._lock:
            self._by_feature.setdefault(feature, []).extend(batch)

    def snapshot(self) -> Dict[str, List[TestDataMethod]]:
        """Return a copy of the current contents."""
        with self._lock:
            return {feature: list(items) for feature, items in self._by_feature.items()}

    def total(self) -> int:
        with self._lock:
            return sum(len(items) for items in self._by_feature.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._by_feature)


__all__ = ["FeatureIndex"]

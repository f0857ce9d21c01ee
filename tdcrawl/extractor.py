"""Turns fetched Java sources into feature-grouped marker method records."""

from __future__ import annotations

from typing import Dict, List, Optional

from .aggregator import FeatureIndex
from .analyzers.java import JavaAnnotation, JavaMethod, JavaSourceParser
from .bitbucket import BitbucketClient
from .errors import ParseFailure
from .logging import get_logger
from .models import TestDataMethod

UNKNOWN_FEATURE = "unknown"

logger = get_logger("extractor")


def feature_from_path(path: str, sentinel: str = "test") -> str:
    """Return the path segment just before the last ``sentinel`` segment.

    ``src/.../checkout/test/PayFlowTest.java`` maps to ``checkout``. Paths
    without such a segment, or with an empty segment before it, map to
    ``unknown``.
    """
    parts = path.split("/")
    for index in range(len(parts) - 1, 0, -1):
        if parts[index] == sentinel:
            return parts[index - 1] or UNKNOWN_FEATURE
    return UNKNOWN_FEATURE


def is_marker(annotation_name: str, marker: str) -> bool:
    """Match the marker by simple name or by a qualified name ending in it."""
    return annotation_name == marker or annotation_name.endswith(f".{marker}")


def extract_annotation_attrs(annotation: JavaAnnotation) -> Dict[str, str]:
    """Return the annotation's attributes as raw source text, in source order."""
    if annotation.pairs:
        return {name: value for name, value in annotation.pairs}
    if annotation.value is not None:
        return {"value": annotation.value}
    return {}


class SourceExtractor:
    """Fetches, filters and parses one file, appending its marker methods to the index.

    Every gate before extraction is a silent skip: unavailable content, no
    marker text, unparseable source and packages outside the namespace simply
    produce no records.
    """

    def __init__(
        self,
        client: BitbucketClient,
        index: FeatureIndex,
        *,
        parser: Optional[JavaSourceParser] = None,
        marker: str = "TestData",
        namespace: str = "com.bofa.mda.handsets",
        sentinel: str = "test",
        extension: str = ".java",
    ) -> None:
        self.client = client
        self.index = index
        self.parser = parser or JavaSourceParser()
        self.marker = marker
        self.namespace = namespace
        self.sentinel = sentinel
        self.extension = extension

    def process_file(self, repo_slug: str, path: str) -> List[TestDataMethod]:
        raw = self.client.get_raw(repo_slug, path)
        if not raw:
            logger.debug("Skipping %s:%s (no content)", repo_slug, path)
            return []
        # Literal pre-filter; a marker used only by its qualified name is missed.
        if f"@{self.marker}" not in raw:
            return []

        try:
            unit = self.parser.parse(raw)
        except ParseFailure as exc:
            logger.debug("Skipping %s:%s (%s)", repo_slug, path, exc)
            return []

        package = unit.package or ""
        if self.namespace not in package or self.sentinel not in package:
            logger.debug("Skipping %s:%s (package '%s')", repo_slug, path, package)
            return []

        class_name = unit.primary_type or self._leaf_stem(path)
        feature = feature_from_path(path, self.sentinel)

        records: List[TestDataMethod] = []
        for method in unit.methods:
            annotation = self._marker_annotation(method)
            if annotation is None:
                continue
            records.append(
                TestDataMethod(
                    repo=repo_slug,
                    feature=feature,
                    class_name=class_name,
                    method_name=method.name,
                    annotation_attrs=extract_annotation_attrs(annotation),
                    path=path,
                )
            )

        if records:
            self.index.append(feature, records)
            logger.debug("%s:%s -> %d methods under '%s'", repo_slug, path, len(records), feature)
        return records

    def _marker_annotation(self, method: JavaMethod) -> Optional[JavaAnnotation]:
        for annotation in method.annotations:
            if is_marker(annotation.name, self.marker):
                return annotation
        return None

    def _leaf_stem(self, path: str) -> str:
        leaf = path.rsplit("/", 1)[-1]
        if self.extension and leaf.endswith(self.extension):
            return leaf[: -len(self.extension)]
        return leaf


__all__ = [
    "SourceExtractor",
    "UNKNOWN_FEATURE",
    "extract_annotation_attrs",
    "feature_from_path",
    "is_marker",
]

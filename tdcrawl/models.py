"""Core data models shared across tdcrawl components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional


class EntryKind(str, Enum):
    """Entry types reported by the Bitbucket browse endpoint."""

    DIRECTORY = "DIRECTORY"
    FILE = "FILE"


@dataclass(frozen=True)
class Repository:
    """A repository selected for crawling."""

    slug: str
    name: str


@dataclass(frozen=True)
class DirectoryEntry:
    """One child returned while browsing a directory."""

    path: str
    kind: EntryKind
    name: str


@dataclass(frozen=True)
class TestDataMethod:
    """A method carrying the marker annotation, grouped by feature in reports."""

    __test__ = False  # keep pytest from collecting this as a test class

    repo: str
    feature: str
    class_name: str
    method_name: str
    annotation_attrs: Mapping[str, str]
    path: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "repo": self.repo,
            "feature": self.feature,
            "className": self.class_name,
            "methodName": self.method_name,
            "attrs": dict(self.annotation_attrs),
            "path": self.path,
        }


@dataclass
class Page:
    """A decoded page of results plus its pagination cursor."""

    items: List[Dict[str, Any]] = field(default_factory=list)
    is_last_page: bool = True
    next_start: Optional[int] = None


__all__ = ["DirectoryEntry", "EntryKind", "Page", "Repository", "TestDataMethod"]

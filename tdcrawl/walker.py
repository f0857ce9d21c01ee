"""Depth-first traversal of repository directory trees via the browse API."""

from __future__ import annotations

from typing import Any, Dict, Iterator, List, Optional

from .bitbucket import BitbucketClient
from .logging import get_logger
from .models import DirectoryEntry, EntryKind

logger = get_logger("walker")


class TreeWalker:
    """Finds marked directories and the source files beneath them.

    Both walks paginate every browse call until exhausted; each level of the
    recursion keeps its own page cursor. Only the output list is shared.
    """

    def __init__(
        self,
        client: BitbucketClient,
        *,
        sentinel: str = "test",
        extension: str = ".java",
    ) -> None:
        self.client = client
        self.sentinel = sentinel
        self.extension = extension

    def find_marked_directories(self, repo_slug: str, root: str) -> List[str]:
        """Return every directory under ``root`` whose leaf name is the sentinel."""
        marked: List[str] = []
        self._walk_for_marked(repo_slug, root.strip("/"), marked)
        logger.debug("%s: %d '%s' directories under %s", repo_slug, len(marked), self.sentinel, root)
        return marked

    def list_source_files(self, repo_slug: str, directory: str) -> List[str]:
        """Return every file under ``directory`` whose path ends with the source extension."""
        files: List[str] = []
        self._walk_for_files(repo_slug, directory.strip("/"), files)
        return files

    def iter_children(self, repo_slug: str, path: str) -> Iterator[DirectoryEntry]:
        """Yield the children of ``path`` across all browse pages."""
        start: Optional[int] = None
        while True:
            page = self.client.fetch_page(
                self.client.browse_url(repo_slug, path, start), container="children"
            )
            for item in page.items:
                entry = _entry_from_item(item, path)
                if entry is not None:
                    yield entry
            if page.is_last_page or page.next_start is None:
                return
            start = page.next_start

    def _walk_for_marked(self, repo_slug: str, path: str, out: List[str]) -> None:
        for entry in self.iter_children(repo_slug, path):
            if entry.kind is not EntryKind.DIRECTORY:
                continue
            if entry.name == self.sentinel:
                out.append(entry.path)
            # Marked directories may nest, so keep descending either way.
            self._walk_for_marked(repo_slug, entry.path, out)

    def _walk_for_files(self, repo_slug: str, path: str, out: List[str]) -> None:
        for entry in self.iter_children(repo_slug, path):
            if entry.kind is EntryKind.DIRECTORY:
                self._walk_for_files(repo_slug, entry.path, out)
            elif entry.path.endswith(self.extension):
                out.append(entry.path)


def _entry_from_item(item: Dict[str, Any], parent: str) -> Optional[DirectoryEntry]:
    try:
        kind = EntryKind(item.get("type"))
    except ValueError:
        return None

    path_info = item.get("path")
    if not isinstance(path_info, dict):
        return None
    components = path_info.get("components")
    child_path = path_info.get("toString")
    if not isinstance(child_path, str) or not child_path:
        if isinstance(components, list) and components:
            child_path = "/".join(str(part) for part in components)
        else:
            return None
    child_path = child_path.strip("/")

    if _is_relative(child_path, parent):
        child_path = f"{parent}/{child_path}"

    name = path_info.get("name")
    if not isinstance(name, str) or not name:
        if isinstance(components, list) and components:
            name = str(components[-1])
        else:
            name = child_path.rsplit("/", 1)[-1]
    return DirectoryEntry(path=child_path, kind=kind, name=name)


def _is_relative(child_path: str, parent: str) -> bool:
    """Tell a path relative to ``parent`` from a full path below it.

    A full child path always has one more segment than its parent, so a
    shorter path (such as ``test`` under ``test``) is relative even when it
    happens to match the parent.
    """
    if not parent:
        return False
    if child_path.count("/") <= parent.count("/"):
        return True
    return not child_path.startswith(f"{parent}/")


__all__ = ["TreeWalker"]

"""Repository discovery across paged listing responses."""

from __future__ import annotations

from typing import Dict, List

from .bitbucket import BitbucketClient
from .logging import get_logger
from .models import Repository

logger = get_logger("discovery")


class RepositoryDiscoverer:
    """Lists the project's repositories whose name starts with a prefix."""

    def __init__(self, client: BitbucketClient) -> None:
        self.client = client

    def list_repositories(self, name_prefix: str) -> List[Repository]:
        """Return unique matching repositories in server order.

        The server-side ``name`` filter is a fuzzy match, so every page is
        filtered again with a case-sensitive prefix check.
        """
        found: Dict[str, Repository] = {}
        start = 0
        pages = 0
        while True:
            page = self.client.fetch_page(self.client.repos_url(name_prefix, start))
            pages += 1
            for item in page.items:
                name = item.get("name")
                slug = item.get("slug")
                if not isinstance(name, str) or not isinstance(slug, str):
                    continue
                if name.startswith(name_prefix) and slug not in found:
                    found[slug] = Repository(slug=slug, name=name)
            if page.is_last_page or page.next_start is None:
                break
            start = page.next_start

        logger.info(
            "Discovered %d repositories matching '%s' (%d pages)",
            len(found),
            name_prefix,
            pages,
        )
        return list(found.values())


__all__ = ["RepositoryDiscoverer"]

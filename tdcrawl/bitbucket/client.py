"""Minimal Bitbucket Server REST client used by the crawler."""

from __future__ import annotations

import json
from http.client import HTTPException
from typing import Any, Dict, List, Optional
from urllib.error import HTTPError, URLError
from urllib.parse import quote, urlencode
from urllib.request import Request, urlopen

from ..errors import RequestFailure
from ..logging import get_logger
from ..models import Page

API_PREFIX = "/rest/api/latest"

logger = get_logger("bitbucket")


class BitbucketClient:
    """Issues authenticated requests against one Bitbucket Server project.

    The client holds only read-only settings, so a single instance is shared
    by every worker thread.
    """

    def __init__(
        self,
        host: str,
        token: str,
        *,
        project_key: str,
        branch: str,
        page_limit: int = 100,
        request_timeout: float = 30.0,
    ) -> None:
        self.host = host.rstrip("/")
        self.token = token
        self.project_key = project_key
        self.branch = branch
        self.page_limit = page_limit
        self.request_timeout = request_timeout

    # URL builders

    def repos_url(self, name_filter: str, start: int = 0) -> str:
        query = urlencode(
            {
                "projectKey": self.project_key,
                "name": name_filter,
                "limit": self.page_limit,
                "start": start,
            }
        )
        return f"{self.host}{API_PREFIX}/repos?{query}"

    def browse_url(self, repo_slug: str, path: str, start: Optional[int] = None) -> str:
        params: Dict[str, Any] = {"at": self.branch}
        if start is not None:
            params["start"] = start
        return f"{self._repo_base(repo_slug)}/browse/{_quote_path(path)}?{urlencode(params)}"

    def raw_url(self, repo_slug: str, path: str) -> str:
        query = urlencode({"at": self.branch})
        return f"{self._repo_base(repo_slug)}/raw/{_quote_path(path)}?{query}"

    def _repo_base(self, repo_slug: str) -> str:
        return (
            f"{self.host}{API_PREFIX}/projects/{quote(self.project_key, safe='')}"
            f"/repos/{quote(repo_slug, safe='')}"
        )

    # Requests

    def fetch_page(self, url: str, container: Optional[str] = None) -> Page:
        """Fetch one page of a paged resource.

        ``container`` names the key holding the paged block (``children`` for
        browse responses); when omitted the pagination fields are read from the
        top level. Missing pagination fields end the pagination.
        """
        payload = self.get_json(url)
        block: Any = payload.get(container) if container else payload
        if not isinstance(block, dict):
            logger.debug("No paged block %r in response for %s", container, url)
            return Page()

        values = block.get("values")
        items: List[Dict[str, Any]] = (
            [item for item in values if isinstance(item, dict)] if isinstance(values, list) else []
        )
        is_last = block.get("isLastPage")
        next_start = block.get("nextPageStart")
        if not isinstance(is_last, bool) or is_last:
            return Page(items=items, is_last_page=True)
        if isinstance(next_start, bool) or not isinstance(next_start, int):
            logger.debug("Missing nextPageStart for %s; ending pagination", url)
            return Page(items=items, is_last_page=True)
        return Page(items=items, is_last_page=False, next_start=next_start)

    def get_json(self, url: str) -> Dict[str, Any]:
        """GET ``url`` and decode the JSON object body, raising RequestFailure otherwise."""
        status, raw = self._send(url, accept="application/json")
        if status is None or not 200 <= status < 300:
            raise RequestFailure(url, status, raw.decode("utf-8", errors="replace"))
        try:
            payload = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise RequestFailure(url, status, "response body is not valid JSON") from exc
        if not isinstance(payload, dict):
            return {}
        return payload

    def get_raw(self, repo_slug: str, path: str) -> Optional[str]:
        """Return the file's text at the configured branch, or None when unavailable."""
        url = self.raw_url(repo_slug, path)
        try:
            status, raw = self._send(url)
        except RequestFailure as exc:
            logger.debug("Raw fetch failed for %s: %s", url, exc)
            return None
        if status != 200:
            logger.debug("Raw fetch returned HTTP %s for %s", status, url)
            return None
        return raw.decode("utf-8", errors="replace")

    def _send(self, url: str, *, accept: Optional[str] = None) -> tuple[Optional[int], bytes]:
        headers = {"Authorization": f"Bearer {self.token}"}
        if accept:
            headers["Accept"] = accept
        request = Request(url, headers=headers, method="GET")
        try:
            with urlopen(request, timeout=self.request_timeout) as response:  # type: ignore[arg-type]
                return response.status, response.read()
        except HTTPError as exc:
            body = exc.read() if hasattr(exc, "read") else b""
            return exc.code, body or b""
        except URLError as exc:
            raise RequestFailure(url, None, str(exc.reason)) from exc
        except TimeoutError as exc:
            raise RequestFailure(url, None, "request timed out") from exc
        except (OSError, HTTPException) as exc:
            # Dropped connections and truncated bodies surface from read().
            raise RequestFailure(url, None, str(exc) or type(exc).__name__) from exc


def _quote_path(path: str) -> str:
    return quote(path.strip("/"), safe="/")


__all__ = ["API_PREFIX", "BitbucketClient"]

"""Exception types raised across the crawl pipeline."""

from __future__ import annotations

from typing import Optional


class TdcrawlError(RuntimeError):
    """Base class for tdcrawl failures."""


class RequestFailure(TdcrawlError):
    """Raised when a Bitbucket request fails or returns a non-success status."""

    def __init__(self, url: str, status: Optional[int], body: str = "") -> None:
        self.url = url
        self.status = status
        self.body = body
        label = f"HTTP {status}" if status is not None else "Request failed"
        detail = body.strip()
        message = f"{label} for {url}"
        if detail:
            message = f"{message} => {detail[:500]}"
        super().__init__(message)


class ParseFailure(TdcrawlError):
    """Raised when source text cannot be parsed into a declaration tree."""


class ConfigError(TdcrawlError):
    """Raised when the crawler configuration is missing or invalid."""


__all__ = ["ConfigError", "ParseFailure", "RequestFailure", "TdcrawlError"]

from __future__ import annotations

import pytest

from tdcrawl.bitbucket import BitbucketClient
from tdcrawl.config import CrawlerConfig
from tests._fixtures.bitbucket_server import HOST, PROJECT, TOKEN, FakeBitbucket


@pytest.fixture
def bitbucket(monkeypatch) -> FakeBitbucket:
    """Provide a fake Bitbucket server wired into the client's urlopen."""
    server = FakeBitbucket(page_size=2)
    monkeypatch.setattr("tdcrawl.bitbucket.client.urlopen", server.urlopen)
    return server


@pytest.fixture
def client() -> BitbucketClient:
    return BitbucketClient(
        HOST,
        TOKEN,
        project_key=PROJECT,
        branch="develop",
        page_limit=2,
        request_timeout=5.0,
    )


@pytest.fixture
def crawler_config() -> CrawlerConfig:
    return CrawlerConfig(
        host=HOST,
        token=TOKEN,
        project_key=PROJECT,
        branch="develop",
        page_limit=2,
        threads=4,
        request_timeout=5.0,
    )

"""Tests for tdcrawl.discovery."""

from __future__ import annotations

import pytest

from tdcrawl.discovery import RepositoryDiscoverer
from tdcrawl.errors import RequestFailure
from tdcrawl.models import Repository


def test_prefix_filter_spans_page_boundaries(bitbucket, client) -> None:
    for slug in (
        "automation_checkout",
        "other_project",
        "automation_login",
        "Automation_upper",
        "legacy_automation_x",
        "automation_profile",
        "automation",
    ):
        bitbucket.add_repo(slug, {})

    repos = RepositoryDiscoverer(client).list_repositories("automation_")

    assert repos == [
        Repository(slug="automation_checkout", name="automation_checkout"),
        Repository(slug="automation_login", name="automation_login"),
        Repository(slug="automation_profile", name="automation_profile"),
    ]
    listing_calls = [url for url in bitbucket.requests if "/rest/api/latest/repos?" in url]
    assert len(listing_calls) == 4
    assert listing_calls[-1].endswith("start=6")


def test_filter_uses_name_not_slug(bitbucket, client) -> None:
    bitbucket.add_repo("mobile-demo", {}, name="automation_demo")
    bitbucket.add_repo("automation_slug_only", {}, name="Slug Only")

    repos = RepositoryDiscoverer(client).list_repositories("automation_")

    assert repos == [Repository(slug="mobile-demo", name="automation_demo")]


def test_no_matches_returns_empty_list(bitbucket, client) -> None:
    bitbucket.add_repo("other_project", {})

    assert RepositoryDiscoverer(client).list_repositories("automation_") == []


def test_empty_project_returns_empty_list(bitbucket, client) -> None:
    assert RepositoryDiscoverer(client).list_repositories("automation_") == []


def test_listing_failure_propagates(bitbucket, client) -> None:
    bitbucket.listing_status = 500

    with pytest.raises(RequestFailure) as excinfo:
        RepositoryDiscoverer(client).list_repositories("automation_")

    assert excinfo.value.status == 500

"""Bitbucket Server REST access."""

from .client import API_PREFIX, BitbucketClient

__all__ = ["API_PREFIX", "BitbucketClient"]

"""Collect @TestData methods from Bitbucket repositories, grouped by feature."""

__version__ = "0.1.0"

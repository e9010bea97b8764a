"""
Data fetching package.

This package handles remote reads against the Hacker News API:
- Top stories listing
- Individual items (stories, comments, jobs, polls)
"""

from hncache.data.fetcher import EntityFetcher

__all__ = [
    "EntityFetcher",
]

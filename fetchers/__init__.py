"""Fetchers package for retrieving YouTrack knowledge base content via the REST API."""

from .api_fetcher import ApiFetcher
from .paginator import fetch_paginated

__all__ = [
    'ApiFetcher',
    'fetch_paginated'
]

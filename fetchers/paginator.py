"""Offset pagination over YouTrack list endpoints ($skip / $top)."""

import logging
from typing import Any, Dict, List, Optional

from logger import DETAIL

DEFAULT_PAGE_SIZE = 100
DEFAULT_MAX_PAGES = 1000


def fetch_paginated(
    client,
    endpoint: str,
    fields: str,
    page_size: int = DEFAULT_PAGE_SIZE,
    max_pages: int = DEFAULT_MAX_PAGES,
    logger: Optional[logging.Logger] = None,
    label: str = "records"
) -> List[Dict[str, Any]]:
    """
    Collect every record of a paginated list endpoint.

    Polls ``endpoint`` with ``$skip``/``$top`` starting at offset 0. Stops on an
    absent or empty page, on a page shorter than ``page_size``, or after
    ``max_pages`` requests (a server that never shortens its pages would
    otherwise be polled forever).

    Args:
        client: YouTrackClient (anything with ``get(endpoint, params)``)
        endpoint: List endpoint relative to the API root (e.g., "/articles")
        fields: YouTrack field selection string
        page_size: Records requested per call
        max_pages: Upper bound on requests issued
        logger: Logger instance
        label: Noun used in progress messages

    Returns:
        Records in server order
    """
    logger = logger or logging.getLogger('youtrack_kb_exporter.paginator')

    if page_size < 1:
        raise ValueError("page_size must be a positive integer")

    records: List[Dict[str, Any]] = []
    skip = 0
    pages_fetched = 0

    while True:
        if pages_fetched >= max_pages:
            logger.warning(
                f"  Stopped loading {label} after {max_pages} pages "
                f"({len(records)} loaded); the server kept returning full pages"
            )
            break

        params = {'fields': fields, '$skip': skip, '$top': page_size}
        page = client.get(endpoint, params=params)
        pages_fetched += 1

        if not isinstance(page, list) or not page:
            break

        records.extend(page)
        skip += len(page)
        logger.log(DETAIL, f"  Loaded: {len(records)} {label}...")

        if len(page) < page_size:
            break

    return records


__all__ = ['fetch_paginated', 'DEFAULT_PAGE_SIZE', 'DEFAULT_MAX_PAGES']

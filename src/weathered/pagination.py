"""Cursor helpers for caller-driven observation paging."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from datetime import datetime
from typing import TYPE_CHECKING
from urllib.parse import parse_qs, urlsplit

from .exceptions import InvalidQueryError
from .models import ErrorResponse, ObservationResponse

if TYPE_CHECKING:
    from .client import Client


def extract_cursor(next_url: str | None) -> str | None:
    """Return the ``cursor`` query parameter of a next-page URL, or None.

    An empty ``cursor=`` counts as no next page and also returns None.
    """
    if not next_url:
        return None
    values = parse_qs(urlsplit(next_url).query).get("cursor")
    if not values:
        return None
    return values[0]


def next_cursor(response: ObservationResponse) -> str | None:
    if response.pagination is None:
        return None
    return extract_cursor(response.pagination.next)


def iter_observation_pages(
    client: Client,
    station_id: str,
    *,
    start: str | datetime | None = None,
    end: str | datetime | None = None,
    limit: int | None = None,
    max_pages: int | None = None,
    logger: logging.Logger | None = None,
) -> Iterator[ObservationResponse | ErrorResponse]:
    """Yield observation pages one request at a time, as the caller advances.

    Stops after an ErrorResponse (which is yielded), an empty page, a missing
    or repeated cursor, or ``max_pages`` pages.
    """
    if max_pages is not None and max_pages <= 0:
        raise InvalidQueryError("max_pages must be > 0 when set.")
    log = logger or client.logger

    cursor: str | None = None
    seen_cursors: set[str] = set()
    pages_fetched = 0
    while True:
        page = client.get_station_observations(
            station_id, start=start, end=end, limit=limit, cursor=cursor
        )
        pages_fetched += 1
        yield page

        if isinstance(page, ErrorResponse):
            log.warning(
                "Observation paging for %s stopped on HTTP %d after %d page(s).",
                station_id,
                page.status,
                pages_fetched,
                extra={
                    "station_id": station_id,
                    "status": page.status,
                    "pages_fetched": pages_fetched,
                },
            )
            return
        if not page.features:
            log.info("Observation paging for %s reached an empty page.", station_id)
            return
        if max_pages is not None and pages_fetched >= max_pages:
            log.info("Observation paging for %s hit max_pages=%d.", station_id, max_pages)
            return

        cursor = next_cursor(page)
        if cursor is None:
            return
        if cursor in seen_cursors:
            log.warning(
                "Observation paging for %s: repeated cursor detected, stopping.", station_id
            )
            return
        seen_cursors.add(cursor)

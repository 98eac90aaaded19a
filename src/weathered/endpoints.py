"""URL and query-parameter builders for api.weather.gov endpoints."""

from __future__ import annotations

from datetime import datetime
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict, StrictInt

from .exceptions import InvalidQueryError


class ObservationFilters(BaseModel):
    """Optional observation query filters.

    ``start``/``end`` strings are sent exactly as given; ``datetime`` values are
    rendered with ``isoformat()``. Ordering of ``start``/``end`` is left to the
    server.
    """

    model_config = ConfigDict(frozen=True)

    start: str | datetime | None = None
    end: str | datetime | None = None
    limit: StrictInt | None = None
    cursor: str | None = None

    def to_params(self) -> dict[str, str]:
        """Query parameters for the present filters only."""
        params: dict[str, str] = {}
        if self.start is not None:
            params["start"] = _render_timestamp(self.start)
        if self.end is not None:
            params["end"] = _render_timestamp(self.end)
        if self.limit is not None:
            if self.limit <= 0:
                raise InvalidQueryError(f"limit must be a positive integer, got {self.limit!r}.")
            params["limit"] = str(self.limit)
        if self.cursor is not None:
            params["cursor"] = self.cursor
        return params


def _render_timestamp(value: str | datetime) -> str:
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def _escape_station_id(station_id: str) -> str:
    if not isinstance(station_id, str) or not station_id.strip():
        raise InvalidQueryError("station_id must be a non-empty string.")
    return quote(station_id, safe="")


def station_path(station_id: str) -> str:
    return f"/stations/{_escape_station_id(station_id)}"


def station_observations_path(station_id: str) -> str:
    return f"{station_path(station_id)}/observations"


def latest_observation_path(station_id: str) -> str:
    return f"{station_observations_path(station_id)}/latest"


def point_key(latitude: float, longitude: float) -> str:
    """Canonical ``lat,lon`` string, validated and rounded to four decimals."""
    if not (-90 <= latitude <= 90):
        raise InvalidQueryError(f"Invalid latitude {latitude}; expected between -90 and 90.")
    if not (-180 <= longitude <= 180):
        raise InvalidQueryError(f"Invalid longitude {longitude}; expected between -180 and 180.")
    return f"{latitude:.4f},{longitude:.4f}"


def point_path(latitude: float, longitude: float) -> str:
    return f"/points/{point_key(latitude, longitude)}"


def build_url(base_url: str, path: str) -> str:
    """Join the configured API root and an endpoint path."""
    if not path.startswith("/"):
        path = f"/{path}"
    return f"{base_url.rstrip('/')}{path}"

"""api.weather.gov client facade."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, cast

import httpx
from pydantic import BaseModel, ValidationError

from .cache import MISSING, Cache
from .endpoints import (
    ObservationFilters,
    build_url,
    latest_observation_path,
    point_key,
    point_path,
    station_observations_path,
    station_path,
)
from .exceptions import InvalidQueryError, TransportError
from .models import (
    ErrorResponse,
    Observation,
    ObservationResponse,
    PointResponse,
    StationResponse,
)
from .options import ClientOptions
from .responses import ModelT, decode_json_body, is_success, normalize_response

ACCEPT_HEADER = "application/geo+json"


class Client:
    """Single-shot request/response client for api.weather.gov.

    Expected API failures (unknown station, rejected query) come back as
    ``ErrorResponse`` values. Transport failures raise ``TransportError`` and a
    success body that is not JSON raises ``ResponseDecodeError``. There are no
    retries, and pages are never followed automatically.

    The cache is per-client unless one is passed in. An ``http_client`` passed in
    is left open by ``close()``.
    """

    def __init__(
        self,
        options: ClientOptions | None = None,
        *,
        http_client: httpx.Client | None = None,
        cache: Cache[BaseModel] | None = None,
        logger: logging.Logger | None = None,
        **overrides: Any,
    ) -> None:
        base_options = options or ClientOptions()
        self._options = base_options.merged(**overrides) if overrides else base_options
        self._owns_http_client = http_client is None
        self._http = http_client if http_client is not None else httpx.Client()
        self._cache: Cache[BaseModel] = cache if cache is not None else Cache()
        self.logger = logger or logging.getLogger(__name__)

    def __enter__(self) -> Client:
        return self

    def __exit__(self, exc_type: Any, exc: Any, exc_tb: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_http_client:
            self._http.close()

    @property
    def cache(self) -> Cache[BaseModel]:
        return self._cache

    def get_options(self) -> ClientOptions:
        return self._options

    def set_options(self, **partial: Any) -> None:
        """Replace the given option fields, keeping the rest."""
        self._options = self._options.merged(**partial)

    def get_station_by_station_id(self, station_id: str) -> StationResponse | ErrorResponse:
        """Fetch station metadata, e.g. ``get_station_by_station_id("KSEA")``."""
        return self._memoized(
            key=f"station:{station_id}",
            path=station_path(station_id),
            model=StationResponse,
            context="station lookup",
        )

    def get_station_observations(
        self,
        station_id: str,
        *,
        start: str | datetime | None = None,
        end: str | datetime | None = None,
        limit: int | None = None,
        cursor: str | None = None,
    ) -> ObservationResponse | ErrorResponse:
        """Fetch one page of observations for a station.

        To get the next page, pass ``pagination.extract_cursor(result.pagination.next)``
        back as ``cursor``.
        """
        path = station_observations_path(station_id)
        try:
            filters = ObservationFilters(start=start, end=end, limit=limit, cursor=cursor)
        except ValidationError as exc:
            raise InvalidQueryError(f"Invalid observation filters: {exc}") from exc
        return self._request(
            path,
            ObservationResponse,
            params=filters.to_params(),
            context="observations fetch",
        )

    def get_latest_station_observation(
        self,
        station_id: str,
        *,
        require_qc: bool | None = None,
    ) -> Observation | ErrorResponse:
        path = latest_observation_path(station_id)
        params = None if require_qc is None else {"require_qc": str(require_qc).lower()}
        return self._request(path, Observation, params=params, context="latest observation")

    def get_point(self, latitude: float, longitude: float) -> PointResponse | ErrorResponse:
        """Resolve a lat/lon to its forecast grid and observation stations."""
        return self._memoized(
            key=f"point:{point_key(latitude, longitude)}",
            path=point_path(latitude, longitude),
            model=PointResponse,
            context="points lookup",
        )

    def _memoized(
        self,
        *,
        key: str,
        path: str,
        model: type[ModelT],
        context: str,
    ) -> ModelT | ErrorResponse:
        # Keys are scoped to the API root.
        key = f"{self._options.base_url}|{key}"
        use_cache = self._options.use_cache
        if use_cache:
            cached = self._cache.get(key)
            if cached is not MISSING:
                self.logger.debug("Cache hit for %s", key)
                return cast(ModelT, cached)

        result = self._request(path, model, context=context)
        # Errors are never cached.
        if use_cache and not isinstance(result, ErrorResponse):
            self._cache.set(key, result)
        return result

    def _request(
        self,
        path: str,
        model: type[ModelT],
        *,
        params: dict[str, str] | None = None,
        context: str,
    ) -> ModelT | ErrorResponse:
        options = self._options
        url = build_url(options.base_url, path)
        self.logger.debug(
            "weather.gov %s: GET %s params=%s",
            context,
            url,
            params or {},
            extra={"context": context, "url": url},
        )
        try:
            response = self._http.get(
                url,
                params=params or None,
                headers={"Accept": ACCEPT_HEADER, "User-Agent": options.user_agent},
                timeout=options.timeout_seconds,
            )
        except httpx.HTTPError as exc:
            # Catches all transport/protocol errors: TimeoutException,
            # NetworkError, DecodingError, TooManyRedirects, etc.
            raise TransportError(
                f"weather.gov {context} request failed at {url}: {type(exc).__name__}: {exc}",
                url=url,
            ) from exc

        if is_success(response.status_code):
            body = decode_json_body(response, url=url)
        else:
            try:
                body = response.json()
            except ValueError:
                body = None

        result = normalize_response(response.status_code, body, model, url=url)
        if isinstance(result, ErrorResponse):
            self.logger.warning(
                "weather.gov %s returned %d %s: %s",
                context,
                result.status,
                result.title,
                result.detail,
                extra={"context": context, "url": url, "status": result.status},
            )
        return result

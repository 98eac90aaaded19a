"""Typed client for the api.weather.gov public weather API."""

from .cache import MISSING, Cache
from .client import Client
from .endpoints import ObservationFilters
from .exceptions import (
    ConfigError,
    InvalidQueryError,
    ResponseDecodeError,
    TransportError,
    WeatheredError,
)
from .models import (
    ErrorResponse,
    Observation,
    ObservationResponse,
    Pagination,
    PointResponse,
    StationResponse,
    is_error,
)
from .options import DEFAULT_USER_AGENT, ClientOptions
from .pagination import extract_cursor, iter_observation_pages, next_cursor

__all__ = [
    "MISSING",
    "DEFAULT_USER_AGENT",
    "Cache",
    "Client",
    "ClientOptions",
    "ConfigError",
    "ErrorResponse",
    "InvalidQueryError",
    "Observation",
    "ObservationFilters",
    "ObservationResponse",
    "Pagination",
    "PointResponse",
    "ResponseDecodeError",
    "StationResponse",
    "TransportError",
    "WeatheredError",
    "extract_cursor",
    "is_error",
    "iter_observation_pages",
    "next_cursor",
]

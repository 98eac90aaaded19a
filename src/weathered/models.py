"""Typed wire models for api.weather.gov station, point and observation payloads.

Attributes are snake_case with the upstream camelCase keys as aliases. Unknown
fields are kept and the fields a payload omitted stay unset, so ``to_wire()``
gives back the upstream body.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, TypeGuard

from pydantic import (
    BaseModel,
    ConfigDict,
    PrivateAttr,
    ValidatorFunctionWrapHandler,
    field_serializer,
    model_validator,
)
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base for pass-through decoded payloads."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    def to_wire(self) -> dict[str, Any]:
        """JSON-ready dict with upstream keys and only the fields that were set."""
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)


class QuantitativeValue(WireModel):
    """Measurement with WMO unit code, e.g. ``{"unitCode": "wmoUnit:degC", "value": 8.3}``."""

    unit_code: str | None = None
    value: float | None = None
    max_value: float | None = None
    min_value: float | None = None
    quality_control: str | None = None


class ErrorResponse(WireModel):
    """Problem-details body returned for any non-2xx status."""

    status: int
    title: str
    detail: str
    type: str | None = None
    instance: str | None = None
    correlation_id: str | None = None


class StationProperties(WireModel):
    station_identifier: str
    name: str | None = None
    time_zone: str | None = None
    elevation: QuantitativeValue | None = None
    forecast: str | None = None
    county: str | None = None
    fire_weather_zone: str | None = None


class StationResponse(WireModel):
    id: str
    type: str | None = None
    geometry: dict[str, Any] | None = None
    properties: StationProperties


class PointProperties(WireModel):
    grid_id: str | None = None
    grid_x: int | None = None
    grid_y: int | None = None
    forecast: str | None = None
    forecast_hourly: str | None = None
    forecast_grid_data: str | None = None
    observation_stations: str | None = None
    time_zone: str | None = None
    radar_station: str | None = None
    relative_location: dict[str, Any] | None = None


class PointResponse(WireModel):
    id: str
    type: str | None = None
    geometry: dict[str, Any] | None = None
    properties: PointProperties


class ObservationProperties(WireModel):
    timestamp: datetime
    station: str | None = None
    text_description: str | None = None
    raw_message: str | None = None
    icon: str | None = None
    elevation: QuantitativeValue | None = None
    temperature: QuantitativeValue | None = None
    dewpoint: QuantitativeValue | None = None
    wind_direction: QuantitativeValue | None = None
    wind_speed: QuantitativeValue | None = None
    wind_gust: QuantitativeValue | None = None
    barometric_pressure: QuantitativeValue | None = None
    sea_level_pressure: QuantitativeValue | None = None
    visibility: QuantitativeValue | None = None
    max_temperature_last24_hours: QuantitativeValue | None = None
    min_temperature_last24_hours: QuantitativeValue | None = None
    precipitation_last_hour: QuantitativeValue | None = None
    precipitation_last3_hours: QuantitativeValue | None = None
    precipitation_last6_hours: QuantitativeValue | None = None
    relative_humidity: QuantitativeValue | None = None
    wind_chill: QuantitativeValue | None = None
    heat_index: QuantitativeValue | None = None
    cloud_layers: list[dict[str, Any]] | None = None
    present_weather: list[dict[str, Any]] | None = None

    _raw_timestamp: str | None = PrivateAttr(default=None)

    @model_validator(mode="wrap")
    @classmethod
    def _keep_raw_timestamp(
        cls, data: Any, handler: ValidatorFunctionWrapHandler
    ) -> ObservationProperties:
        model = handler(data)
        if isinstance(data, dict) and isinstance(data.get("timestamp"), str):
            model._raw_timestamp = data["timestamp"]
        return model

    @property
    def raw_timestamp(self) -> str:
        """Timestamp exactly as the server sent it, e.g. ``2026-10-18T20:53:00+00:00``."""
        if self._raw_timestamp is not None:
            return self._raw_timestamp
        return self.timestamp.isoformat()

    @field_serializer("timestamp", when_used="json")
    def _serialize_timestamp(self, value: datetime) -> str:
        return self.raw_timestamp


class Observation(WireModel):
    """GeoJSON feature for a single station observation."""

    id: str | None = None
    type: str | None = None
    geometry: dict[str, Any] | None = None
    properties: ObservationProperties


class Pagination(WireModel):
    next: str | None = None


class ObservationResponse(WireModel):
    """Observation feature collection; ``features`` keeps server order."""

    type: str | None = None
    features: list[Observation]
    pagination: Pagination | None = None


def is_error(result: object) -> TypeGuard[ErrorResponse]:
    """True when a client call returned an API error value instead of a payload."""
    return isinstance(result, ErrorResponse)

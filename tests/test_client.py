"""Client tests against an in-memory api.weather.gov transport."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from weathered.cache import MISSING
from weathered.client import Client
from weathered.exceptions import InvalidQueryError, ResponseDecodeError, TransportError
from weathered.models import (
    ErrorResponse,
    Observation,
    ObservationResponse,
    PointResponse,
    StationResponse,
)
from weathered.pagination import extract_cursor

Handler = Callable[[httpx.Request], httpx.Response]

STATION_PAYLOAD: dict[str, Any] = {
    "id": "https://api.weather.gov/stations/KSEA",
    "type": "Feature",
    "geometry": {"type": "Point", "coordinates": [-122.31442, 47.44467]},
    "properties": {
        "@id": "https://api.weather.gov/stations/KSEA",
        "elevation": {"unitCode": "wmoUnit:m", "value": 130.0464},
        "stationIdentifier": "KSEA",
        "name": "Seattle, Seattle-Tacoma International Airport",
        "timeZone": "America/Los_Angeles",
        "forecast": "https://api.weather.gov/zones/forecast/WAZ558",
        "county": "https://api.weather.gov/zones/county/WAC033",
        "fireWeatherZone": "https://api.weather.gov/zones/fire/WAZ654",
    },
}

NOT_FOUND_PAYLOAD: dict[str, Any] = {
    "correlationId": "6a1f0c",
    "title": "Not Found",
    "type": "https://api.weather.gov/problems/NotFound",
    "status": 404,
    "detail": "Observation station 'INVALID_STATION' not found",
    "instance": "https://api.weather.gov/requests/6a1f0c",
}


def _observation(timestamp: str, temperature: float | None = 10.0) -> dict[str, Any]:
    return {
        "id": f"https://api.weather.gov/stations/KSEA/observations/{timestamp}",
        "type": "Feature",
        "geometry": {"type": "Point", "coordinates": [-122.31, 47.45]},
        "properties": {
            "station": "https://api.weather.gov/stations/KSEA",
            "timestamp": timestamp,
            "textDescription": "Cloudy",
            "rawMessage": "KSEA 172053Z 18008KT 10SM OVC045 10/06 A3002",
            "temperature": {
                "unitCode": "wmoUnit:degC",
                "value": temperature,
                "qualityControl": "V",
            },
            "windSpeed": {"unitCode": "wmoUnit:km_h-1", "value": 14.8, "qualityControl": "V"},
            "cloudLayers": [{"base": {"unitCode": "wmoUnit:m", "value": 1370}, "amount": "OVC"}],
        },
    }


def _observations_payload(
    timestamps: list[str], next_url: str | None = None
) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "type": "FeatureCollection",
        "features": [_observation(ts) for ts in timestamps],
    }
    if next_url is not None:
        payload["pagination"] = {"next": next_url}
    return payload


def _client(handler: Handler, **overrides: Any) -> Client:
    http_client = httpx.Client(transport=httpx.MockTransport(handler))
    logger = logging.getLogger("test.weathered.client")
    return Client(http_client=http_client, logger=logger, **overrides)


def _recording(
    responses: list[httpx.Response],
) -> tuple[Handler, list[httpx.Request]]:
    requests: list[httpx.Request] = []

    def _handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return responses[len(requests) - 1]

    return _handler, requests


def test_fetches_station_details_by_station_id() -> None:
    handler, requests = _recording([httpx.Response(200, json=STATION_PAYLOAD)])
    client = _client(handler)

    response = client.get_station_by_station_id("KSEA")

    assert isinstance(response, StationResponse)
    assert response.id == "https://api.weather.gov/stations/KSEA"
    assert response.properties.station_identifier == "KSEA"
    assert response.properties.name
    assert response.properties.time_zone == "America/Los_Angeles"
    assert response.properties.elevation is not None
    assert response.properties.elevation.value == 130.0464
    assert str(requests[0].url) == "https://api.weather.gov/stations/KSEA"
    assert requests[0].method == "GET"


def test_returns_404_error_value_for_invalid_station(caplog: pytest.LogCaptureFixture) -> None:
    handler, _ = _recording([httpx.Response(404, json=NOT_FOUND_PAYLOAD)])
    client = _client(handler)
    caplog.set_level(logging.WARNING)

    response = client.get_station_by_station_id("INVALID_STATION")

    assert isinstance(response, ErrorResponse)
    assert response.status == 404
    assert response.title == "Not Found"
    assert response.detail
    warnings = [r for r in caplog.records if "returned 404" in r.getMessage()]
    assert len(warnings) == 1
    assert warnings[0].url == "https://api.weather.gov/stations/INVALID_STATION"
    assert warnings[0].status == 404
    assert warnings[0].context == "station lookup"


def test_sends_user_agent_and_accept_headers() -> None:
    handler, requests = _recording(
        [httpx.Response(200, json=STATION_PAYLOAD), httpx.Response(200, json=STATION_PAYLOAD)]
    )
    client = _client(handler, use_cache=False)

    client.get_station_by_station_id("KSEA")
    client.set_options(user_agent="secret agent")
    client.get_station_by_station_id("KSEA")

    assert requests[0].headers["User-Agent"] == "weathered package"
    assert requests[0].headers["Accept"] == "application/geo+json"
    assert requests[1].headers["User-Agent"] == "secret agent"


def test_custom_base_url_is_used() -> None:
    handler, requests = _recording([httpx.Response(200, json=STATION_PAYLOAD)])
    client = _client(handler, base_url="https://nws.example.test/api/")

    client.get_station_by_station_id("KSEA")

    assert str(requests[0].url) == "https://nws.example.test/api/stations/KSEA"


def test_station_lookup_is_memoized() -> None:
    handler, requests = _recording([httpx.Response(200, json=STATION_PAYLOAD)])
    client = _client(handler)

    first = client.get_station_by_station_id("KSEA")
    second = client.get_station_by_station_id("KSEA")

    assert first is second
    assert len(requests) == 1
    assert client.cache.get("https://api.weather.gov|station:KSEA") is first


def test_base_url_change_bypasses_entries_from_previous_root() -> None:
    mirror_payload = {
        **STATION_PAYLOAD,
        "id": "https://mirror.example.test/stations/KSEA",
        "properties": {**STATION_PAYLOAD["properties"], "name": "Mirror KSEA"},
    }
    handler, requests = _recording(
        [httpx.Response(200, json=STATION_PAYLOAD), httpx.Response(200, json=mirror_payload)]
    )
    client = _client(handler)

    first = client.get_station_by_station_id("KSEA")
    client.set_options(base_url="https://mirror.example.test")
    second = client.get_station_by_station_id("KSEA")

    assert [str(r.url) for r in requests] == [
        "https://api.weather.gov/stations/KSEA",
        "https://mirror.example.test/stations/KSEA",
    ]
    assert isinstance(second, StationResponse)
    assert second.properties.name == "Mirror KSEA"

    client.set_options(base_url="https://api.weather.gov")
    assert client.get_station_by_station_id("KSEA") is first
    assert len(requests) == 2


def test_station_lookup_skips_cache_when_disabled() -> None:
    handler, requests = _recording(
        [httpx.Response(200, json=STATION_PAYLOAD), httpx.Response(200, json=STATION_PAYLOAD)]
    )
    client = _client(handler, use_cache=False)

    client.get_station_by_station_id("KSEA")
    client.get_station_by_station_id("KSEA")

    assert len(requests) == 2
    assert client.cache.get("https://api.weather.gov|station:KSEA") is MISSING


def test_error_responses_are_not_cached() -> None:
    handler, requests = _recording(
        [httpx.Response(404, json=NOT_FOUND_PAYLOAD), httpx.Response(200, json=STATION_PAYLOAD)]
    )
    client = _client(handler)

    first = client.get_station_by_station_id("KSEA")
    second = client.get_station_by_station_id("KSEA")

    assert isinstance(first, ErrorResponse)
    assert isinstance(second, StationResponse)
    assert len(requests) == 2


def test_server_error_with_non_json_body_is_error_value() -> None:
    handler, _ = _recording([httpx.Response(502, text="<html>Bad Gateway</html>")])
    client = _client(handler)

    response = client.get_station_by_station_id("KSEA")

    assert isinstance(response, ErrorResponse)
    assert response.status == 502
    assert response.title == "Bad Gateway"
    assert response.detail == "Request failed with status 502."


def test_success_with_non_json_body_raises() -> None:
    handler, _ = _recording([httpx.Response(200, text="not json")])
    client = _client(handler)

    with pytest.raises(ResponseDecodeError) as exc_info:
        client.get_station_by_station_id("KSEA")
    assert exc_info.value.url == "https://api.weather.gov/stations/KSEA"


def test_transport_failure_raises_transport_error() -> None:
    def _handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("Name or service not known", request=request)

    client = _client(_handler)

    with pytest.raises(TransportError, match="ConnectError") as exc_info:
        client.get_station_by_station_id("KSEA")
    assert isinstance(exc_info.value.__cause__, httpx.ConnectError)
    assert exc_info.value.url == "https://api.weather.gov/stations/KSEA"


def test_timeout_is_not_retried() -> None:
    calls = 0

    def _handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        raise httpx.ReadTimeout("timed out", request=request)

    client = _client(_handler)

    with pytest.raises(TransportError):
        client.get_station_observations("KSEA")
    assert calls == 1


def test_can_query_observations_in_server_order() -> None:
    timestamps = [
        "2026-10-18T20:53:00+00:00",
        "2026-10-18T19:53:00+00:00",
        "2026-10-18T18:53:00+00:00",
    ]
    handler, requests = _recording([httpx.Response(200, json=_observations_payload(timestamps))])
    client = _client(handler)

    response = client.get_station_observations("KSEA")

    assert isinstance(response, ObservationResponse)
    assert len(response.features) == 3
    assert [f.properties.timestamp.isoformat() for f in response.features] == timestamps
    assert response.pagination is None
    assert requests[0].url.params.multi_items() == []
    assert requests[0].url.path == "/stations/KSEA/observations"


def test_observation_date_range_is_sent_verbatim() -> None:
    handler, requests = _recording(
        [httpx.Response(200, json=_observations_payload(["2026-10-17T12:53:00+00:00"]))]
    )
    client = _client(handler)
    start = "2026-10-17T07:00:00.000Z"
    end = "2026-10-18T06:59:59.999Z"

    response = client.get_station_observations("KSEA", start=start, end=end)

    assert isinstance(response, ObservationResponse)
    params = requests[0].url.params
    assert params["start"] == start
    assert params["end"] == end
    assert "limit" not in params
    assert "cursor" not in params


def test_can_query_observations_with_pagination() -> None:
    next_url = (
        "https://api.weather.gov/stations/KSEA/observations?limit=5&cursor=MTc2MDgxNzk4MA%3D%3D"
    )
    first_page = _observations_payload(
        [f"2026-10-18T{hour:02d}:53:00+00:00" for hour in (20, 19, 18, 17, 16)],
        next_url=next_url,
    )
    second_page = _observations_payload(
        [f"2026-10-18T{hour:02d}:53:00+00:00" for hour in (15, 14, 13, 12, 11)],
        next_url="https://api.weather.gov/stations/KSEA/observations?limit=5&cursor=second",
    )
    handler, requests = _recording(
        [httpx.Response(200, json=first_page), httpx.Response(200, json=second_page)]
    )
    client = _client(handler)

    response = client.get_station_observations("KSEA", limit=5)
    assert isinstance(response, ObservationResponse)
    assert len(response.features) == 5
    assert response.pagination is not None
    cursor = extract_cursor(response.pagination.next)
    assert cursor == "MTc2MDgxNzk4MA=="

    next_response = client.get_station_observations("KSEA", limit=5, cursor=cursor)
    assert isinstance(next_response, ObservationResponse)
    assert len(next_response.features) == 5
    first_ids = {f.id for f in response.features}
    second_ids = {f.id for f in next_response.features}
    assert first_ids.isdisjoint(second_ids)

    assert requests[0].url.params["limit"] == "5"
    assert "cursor" not in requests[0].url.params
    assert requests[1].url.params["cursor"] == "MTc2MDgxNzk4MA=="


def test_observation_error_value_for_bad_query() -> None:
    body = {
        "title": "Invalid Parameter",
        "type": "https://api.weather.gov/problems/InvalidParameter",
        "status": 400,
        "detail": "Parameter \"start\" is invalid",
    }
    handler, _ = _recording([httpx.Response(400, json=body)])
    client = _client(handler)

    response = client.get_station_observations("KSEA", start="yesterday")

    assert isinstance(response, ErrorResponse)
    assert response.status == 400
    assert response.title == "Invalid Parameter"


@pytest.mark.parametrize("limit", [0, -3, "many", True, False, "5", 5.0])
def test_invalid_limit_raises_before_request(limit: Any) -> None:
    handler, requests = _recording([])
    client = _client(handler)

    with pytest.raises(InvalidQueryError):
        client.get_station_observations("KSEA", limit=limit)
    assert requests == []


def test_blank_station_id_raises_before_request() -> None:
    handler, requests = _recording([])
    client = _client(handler)

    with pytest.raises(InvalidQueryError):
        client.get_station_by_station_id("")
    assert requests == []


def test_station_id_is_escaped_in_path() -> None:
    handler, requests = _recording([httpx.Response(404, json=NOT_FOUND_PAYLOAD)])
    client = _client(handler)

    client.get_station_by_station_id("BAD/ID")

    assert requests[0].url.raw_path == b"/stations/BAD%2FID"


def test_latest_observation_with_require_qc() -> None:
    handler, requests = _recording(
        [httpx.Response(200, json=_observation("2026-10-18T20:53:00+00:00", temperature=None))]
    )
    client = _client(handler)

    response = client.get_latest_station_observation("KSEA", require_qc=True)

    assert isinstance(response, Observation)
    assert response.properties.temperature is not None
    assert response.properties.temperature.value is None
    assert response.properties.text_description == "Cloudy"
    assert requests[0].url.path == "/stations/KSEA/observations/latest"
    assert requests[0].url.params["require_qc"] == "true"


def test_get_point_is_memoized_by_rounded_coordinates() -> None:
    point_payload = {
        "id": "https://api.weather.gov/points/47.4447,-122.3136",
        "type": "Feature",
        "properties": {
            "gridId": "SEW",
            "gridX": 124,
            "gridY": 61,
            "forecast": "https://api.weather.gov/gridpoints/SEW/124,61/forecast",
            "observationStations": "https://api.weather.gov/gridpoints/SEW/124,61/stations",
            "timeZone": "America/Los_Angeles",
        },
    }
    handler, requests = _recording([httpx.Response(200, json=point_payload)])
    client = _client(handler)

    first = client.get_point(47.44469, -122.31361)
    second = client.get_point(47.44470, -122.31360)

    assert isinstance(first, PointResponse)
    assert first is second
    assert first.properties.grid_id == "SEW"
    assert first.properties.grid_x == 124
    assert len(requests) == 1
    assert requests[0].url.path == "/points/47.4447,-122.3136"


def test_get_point_rejects_invalid_coordinates() -> None:
    handler, requests = _recording([])
    client = _client(handler)

    with pytest.raises(InvalidQueryError, match="latitude"):
        client.get_point(95.0, 0.0)
    assert requests == []


def test_shared_cache_is_used_across_clients() -> None:
    handler, requests = _recording([httpx.Response(200, json=STATION_PAYLOAD)])
    first = _client(handler)
    second = Client(
        http_client=httpx.Client(transport=httpx.MockTransport(handler)),
        cache=first.cache,
    )

    first.get_station_by_station_id("KSEA")
    second.get_station_by_station_id("KSEA")

    assert len(requests) == 1


def test_close_leaves_injected_http_client_open() -> None:
    http_client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(200)))
    with Client(http_client=http_client):
        pass
    assert not http_client.is_closed
    http_client.close()


def test_close_closes_owned_http_client() -> None:
    client = Client()
    client.close()
    assert client._http.is_closed

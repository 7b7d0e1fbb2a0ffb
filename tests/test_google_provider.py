import asyncio

import httpx
import pytest

from multiroute.models.domain import (
    GeoPoint,
    RouteRestriction,
    RouteService,
    TimeRequirement,
    TimeType,
    Waypoint,
)
from multiroute.services.routing import polyline
from multiroute.services.routing.errors import HttpError, ProtocolError, SemanticError, TransportError
from multiroute.services.routing.providers.google import GoogleDirectionsProvider, avoid_parameter

START = (40.0, -73.0)
END = (40.2, -73.3)


def _waypoints(*pairs: tuple[float, float]) -> list[Waypoint]:
    return [Waypoint(order=idx, location=GeoPoint(lat, lon)) for idx, (lat, lon) in enumerate(pairs, start=1)]


def _directions_body() -> dict:
    return {
        "status": "OK",
        "routes": [
            {
                "copyrights": "Map data ©2024 Google",
                "warnings": ["This route has tolls."],
                "fare": {"currency": "USD", "value": 5, "text": "$5.00"},
                "legs": [
                    {
                        "distance": {"text": "32 km", "value": 32000},
                        "duration": {"text": "25 mins", "value": 1500},
                        "start_location": {"lat": START[0], "lng": START[1]},
                        "end_location": {"lat": END[0], "lng": END[1]},
                        "steps": [
                            {"polyline": {"points": polyline.encode([START, (40.1, -73.1)])}},
                            {"polyline": {"points": polyline.encode([(40.1, -73.1), (40.15, -73.2), END])}},
                        ],
                    }
                ],
            }
        ],
    }


def _provider(handler) -> GoogleDirectionsProvider:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return GoogleDirectionsProvider(
        api_key="test-key",
        base_url="https://maps.example.com/maps/api/directions",
        timeout=5.0,
        client=client,
    )


def test_fetch_routes_parses_successful_response():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json=_directions_body())

    routes = asyncio.run(_provider(handler).fetch_routes(_waypoints(START, END)))

    assert len(routes) == 1
    route = routes[0]
    assert route.provider is RouteService.GOOGLE
    assert route.path[0].latitude == pytest.approx(START[0], abs=1e-5)
    assert route.path[0].longitude == pytest.approx(START[1], abs=1e-5)
    assert route.path[-1].latitude == pytest.approx(END[0], abs=1e-5)
    assert route.path[-1].longitude == pytest.approx(END[1], abs=1e-5)
    assert route.headline == "25 min (32.0 km)"
    assert route.details == "Fare: $5.00\nWarning! This route has tolls.\nCopyrights: Map data ©2024 Google"
    assert route.bounds is not None
    assert all(route.bounds.contains(point) for point in route.path)

    request = requests[0]
    assert request.url.path == "/maps/api/directions/json"
    assert request.url.params["origin"] == "40.0,-73.0"
    assert request.url.params["destination"] == "40.2,-73.3"
    assert request.url.params["key"] == "test-key"
    assert "waypoints" not in request.url.params


def test_path_collapses_repeated_points_between_steps():
    provider = _provider(lambda request: httpx.Response(200, json=_directions_body()))

    path = provider.parse_response(_directions_body())[0].path

    assert len(path) == 4
    assert all(first != second for first, second in zip(path, path[1:]))


def test_zero_results_raise_semantic_error():
    provider = _provider(lambda request: httpx.Response(200, json={"status": "ZERO_RESULTS"}))

    with pytest.raises(SemanticError) as excinfo:
        asyncio.run(provider.fetch_routes(_waypoints(START, END)))

    assert "ZERO_RESULTS" in str(excinfo.value)
    assert excinfo.value.provider is RouteService.GOOGLE


def test_error_message_is_appended():
    provider = _provider(lambda request: httpx.Response(200, json={}))
    body = {"status": "REQUEST_DENIED", "error_message": "The provided API key is invalid."}

    with pytest.raises(SemanticError, match="REQUEST_DENIED': The provided API key is invalid."):
        provider.parse_response(body)


def test_http_failure_raises_http_error():
    provider = _provider(lambda request: httpx.Response(500, text="oops"))

    with pytest.raises(HttpError) as excinfo:
        asyncio.run(provider.fetch_routes(_waypoints(START, END)))

    assert excinfo.value.status_code == 500
    assert "HTTP 500 Internal Server Error" in excinfo.value.message
    assert isinstance(excinfo.value, TransportError)


def test_network_failure_raises_transport_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(TransportError, match="connection refused"):
        asyncio.run(_provider(handler).fetch_routes(_waypoints(START, END)))


def test_malformed_documents_raise_protocol_error():
    provider = _provider(lambda request: httpx.Response(200, text="<html>not json</html>"))

    with pytest.raises(ProtocolError):
        asyncio.run(provider.fetch_routes(_waypoints(START, END)))

    with pytest.raises(ProtocolError, match="no 'status'"):
        provider.parse_response({"routes": []})

    with pytest.raises(ProtocolError):
        provider.parse_response({"status": "OK", "routes": [{"legs": [{"steps": []}]}]})


def test_build_params_for_intermediate_waypoints_and_restrictions():
    provider = _provider(lambda request: httpx.Response(200, json={}))
    waypoints = _waypoints(START, (40.1, -73.1), (40.15, -73.2), END)
    restrictions = RouteRestriction.AVOID_FERRIES | RouteRestriction.AVOID_TOLLS | RouteRestriction.AVOID_DIRT

    params = provider.build_params(waypoints, restrictions, TimeRequirement(1700000000, TimeType.ARRIVAL))

    assert params["waypoints"] == "40.1,-73.1|40.15,-73.2"
    assert params["avoid"] == "ferries|tolls"
    assert params["arrival_time"] == "1700000000"
    assert "departure_time" not in params
    assert params["mode"] == "driving"
    assert params["alternatives"] == "true"


def test_avoid_parameter():
    assert avoid_parameter(RouteRestriction.NONE) == ""
    assert avoid_parameter(RouteRestriction.AVOID_HIGHWAYS) == "highways"


def test_fetch_routes_requires_two_waypoints():
    provider = _provider(lambda request: httpx.Response(200, json={}))

    with pytest.raises(ValueError):
        asyncio.run(provider.fetch_routes(_waypoints(START)))

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
from multiroute.services.routing.errors import ProtocolError, SemanticError, TransportError
from multiroute.services.routing.providers.tomtom import (
    HTTP_ERROR_DESCRIPTIONS,
    TomTomRoutingProvider,
    describe_http_error,
    format_time,
)

BASE_URL = "https://api.example.com/routing/1/calculateRoute"


def _waypoints(*pairs: tuple[float, float]) -> list[Waypoint]:
    return [Waypoint(order=idx, location=GeoPoint(lat, lon)) for idx, (lat, lon) in enumerate(pairs, start=1)]


def _provider(handler) -> TomTomRoutingProvider:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return TomTomRoutingProvider(api_key="tt-key", base_url=BASE_URL, timeout=5.0, max_alternatives=1, client=client)


def _route_body() -> dict:
    points = [
        {"latitude": 52.50931, "longitude": 13.42936},
        {"latitude": 52.50274, "longitude": 13.43872},
        {"latitude": 52.49521, "longitude": 13.44711},
    ]
    return {
        "formatVersion": "0.0.12",
        "copyright": "Copyright 2024 TomTom. All rights reserved. This material is proprietary.",
        "routes": [
            {
                "summary": {
                    "lengthInMeters": 12345,
                    "travelTimeInSeconds": 5100,
                    "noTrafficTravelTimeInSeconds": 4800,
                    "historicTrafficTravelTimeInSeconds": 5000,
                    "liveTrafficIncidentsTravelTimeInSeconds": 5100,
                },
                "legs": [
                    {
                        "summary": {"lengthInMeters": 12345, "travelTimeInSeconds": 5100},
                        "points": points,
                    }
                ],
                "sections": [
                    {"startPointIndex": 0, "endPointIndex": 2, "sectionType": "TRAVEL_MODE", "travelMode": "car"},
                    {"startPointIndex": 1, "endPointIndex": 2, "sectionType": "TOLL_ROAD"},
                ],
            }
        ],
    }


def test_fetch_routes_parses_summary_and_sections():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json=_route_body())

    routes = asyncio.run(_provider(handler).fetch_routes(_waypoints((52.50931, 13.42936), (52.49521, 13.44711))))

    assert len(routes) == 1
    route = routes[0]
    assert route.provider is RouteService.TOMTOM
    assert route.headline == "1 h 25 min (12.3 km)"
    assert route.details.splitlines() == [
        "Travel time without traffic = 1 h 20 min",
        "With historical traffic data = 1 h 23 min",
        "With live traffic data = 1 h 25 min",
        "This route has tolls!",
        "Copyright 2024 TomTom",
    ]
    assert len(route.path) == 3
    assert route.legs[0].duration_secs == 5100
    assert route.bounds is not None

    request = requests[0]
    assert request.url.path == "/routing/1/calculateRoute/52.50931,13.42936:52.49521,13.44711/json"
    assert request.url.params.get_list("sectionType") == ["ferry", "tollRoad", "travelMode"]
    assert request.url.params["maxAlternatives"] == "1"
    assert request.url.params["computeTravelTimeFor"] == "all"
    assert request.url.params["key"] == "tt-key"


def test_ferry_sections_are_reported():
    body = _route_body()
    body["routes"][0]["sections"].append({"sectionType": "FERRY"})
    provider = _provider(lambda request: httpx.Response(200, json=body))

    details = provider.parse_response(body)[0].details

    assert "This route has tolls!" in details
    assert "This route has ferries!" in details


def test_http_403_with_json_body_contains_description_and_table_text():
    provider = _provider(
        lambda request: httpx.Response(403, json={"error": {"description": "quota exceeded"}})
    )

    with pytest.raises(TransportError) as excinfo:
        asyncio.run(provider.fetch_routes(_waypoints((52.5, 13.4), (52.4, 13.5))))

    message = str(excinfo.value)
    assert "quota exceeded" in message
    assert HTTP_ERROR_DESCRIPTIONS[403] in message
    assert excinfo.value.provider is RouteService.TOMTOM


def test_describe_http_error_reads_xml_description():
    content = (
        b'<?xml version="1.0" encoding="UTF-8"?>'
        b'<calculateRouteResponse><error description="Engine error while executing route request"/>'
        b"</calculateRouteResponse>"
    )
    response = httpx.Response(400, content=content, headers={"content-type": "text/xml; charset=utf-8"})

    text = describe_http_error(response)

    assert text.startswith("Bad Request\nHTTP 400 - Bad request")
    assert text.endswith("\n\nEngine error while executing route request")


def test_describe_http_error_without_xml_error_node():
    response = httpx.Response(
        400,
        content=b"<calculateRouteResponse></calculateRouteResponse>",
        headers={"content-type": "application/xml"},
    )

    assert "could not find '/calculateRouteResponse/error/@description'" in describe_http_error(response)


def test_describe_http_error_with_broken_bodies():
    broken_xml = httpx.Response(500, content=b"<calculateRouteResponse>", headers={"content-type": "text/xml"})
    broken_json = httpx.Response(500, content=b"{}", headers={"content-type": "application/json"})

    assert "Secondary failure in XML parsing" in describe_http_error(broken_xml)
    assert "Secondary failure in JSON parsing" in describe_http_error(broken_json)


def test_describe_http_error_with_unknown_code_and_content_type():
    response = httpx.Response(418, text="short and stout")

    text = describe_http_error(response)

    assert "HTTP 418 - UNEXPECTED" in text
    assert "content type in the HTTP response is unexpected: text/plain" in text


def test_error_object_raises_semantic_error():
    provider = _provider(lambda request: httpx.Response(200, json={}))

    with pytest.raises(SemanticError, match="returned error: Computed route is too long"):
        provider.parse_response({"error": {"description": "Computed route is too long"}})


def test_malformed_route_raises_protocol_error():
    provider = _provider(lambda request: httpx.Response(200, json={}))

    with pytest.raises(ProtocolError):
        provider.parse_response({"routes": [{"summary": {}, "legs": [{"points": []}]}]})


def test_build_params_for_time_and_restrictions():
    provider = _provider(lambda request: httpx.Response(200, json={}))

    params = provider.build_params(
        RouteRestriction.AVOID_DIRT | RouteRestriction.AVOID_HIGHWAYS,
        TimeRequirement(86400, TimeType.ARRIVAL),
    )

    assert ("arriveAt", "1970-01-02T00:00:00") in params
    assert [value for key, value in params if key == "avoid"] == ["unpavedRoads", "motorways"]
    assert params[-1] == ("key", "tt-key")


def test_format_time_uses_utc():
    assert format_time(0) == "1970-01-01T00:00:00"
    assert format_time(1700000000) == "2023-11-14T22:13:20"


def test_build_url_joins_waypoints():
    provider = _provider(lambda request: httpx.Response(200, json={}))

    url = provider.build_url(_waypoints((1.0, 2.0), (3.0, 4.0), (5.0, 6.0)))

    assert url == f"{BASE_URL}/1.0,2.0:3.0,4.0:5.0,6.0/json"

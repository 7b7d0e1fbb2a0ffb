import pytest

from multiroute.models.domain import GeoPoint
from multiroute.services.routing import polyline
from multiroute.services.routing.errors import DecodeError, ProtocolError

REFERENCE = "_p~iF~ps|U_ulLnnqC_mqNvxq`@"
REFERENCE_POINTS = [(38.5, -120.2), (40.7, -120.95), (43.252, -126.453)]


def test_decode_first_reference_pair():
    assert polyline.decode("_p~iF~ps|U") == [GeoPoint(38.5, -120.2)]


def test_decode_accumulates_deltas_from_previous_point():
    points = polyline.decode(REFERENCE)

    assert len(points) == 3
    for point, (lat, lon) in zip(points, REFERENCE_POINTS):
        assert point.latitude == pytest.approx(lat, abs=1e-5)
        assert point.longitude == pytest.approx(lon, abs=1e-5)


def test_decode_empty_string():
    assert polyline.decode("") == []


def test_encode_reference_points():
    assert polyline.encode(REFERENCE_POINTS) == REFERENCE
    assert polyline.encode([GeoPoint(lat, lon) for lat, lon in REFERENCE_POINTS]) == REFERENCE


def test_decode_rejects_unterminated_value():
    with pytest.raises(DecodeError, match="middle of a value"):
        polyline.decode("_p~iF~ps|")


def test_decode_rejects_odd_value_count():
    with pytest.raises(DecodeError, match="odd count"):
        polyline.decode("_p~iF")


def test_decode_rejects_invalid_character():
    with pytest.raises(DecodeError, match="Invalid character"):
        polyline.decode("_p~iF ~ps|U")


def test_decode_rejects_out_of_range_values():
    encoded = polyline.encode([(10.0, 181.0)])

    with pytest.raises(DecodeError):
        polyline.decode(encoded)


def test_decode_error_is_a_protocol_error():
    with pytest.raises(ProtocolError):
        polyline.decode("?")


@pytest.mark.parametrize(
    "pairs",
    [
        [(0.0, 0.0)],
        [(-33.86882, 151.20929)],
        [(90.0, 180.0), (-90.0, -180.0)],
        [(-90.0, -180.0), (90.0, 180.0), (0.0, 0.0)],
        [(0.0, 0.0), (45.12345, -170.54321), (-12.00001, 99.99999)],
        [(-1.5, -2.25), (-1.50001, -2.25001), (-1.50002, -2.25002)],
        [(51.5, -0.12), (51.5, -0.12), (48.85661, 2.35222)],
    ],
    ids=["origin", "single", "extremes", "extremes-back", "long-deltas", "tiny-negative-steps", "repeat"],
)
def test_encode_then_decode_returns_the_points(pairs):
    points = polyline.decode(polyline.encode(pairs))

    assert [point.as_pair() for point in points] == [
        (pytest.approx(lat, abs=1e-9), pytest.approx(lon, abs=1e-9)) for lat, lon in pairs
    ]


def test_decode_steps_across_the_antimeridian():
    points = polyline.decode(polyline.encode([(10.0, 179.9), (10.0, -179.9), (10.1, 179.95)]))

    assert [point.longitude for point in points] == pytest.approx([179.9, -179.9, 179.95])


def test_decode_rejects_values_beyond_any_delta():
    with pytest.raises(DecodeError, match=r"outside \[-360, 360\]"):
        polyline.decode(polyline.encode([(0.0, 400.0)]))

import httpx
import pytest

from rentals.core.geolocation import IpGeolocator, parse_coordinate
from rentals.core.models import Coordinate


def _locator(handler):
    return IpGeolocator("https://geo.example/json/", transport=httpx.MockTransport(handler))


def test_locate_reads_latitude_and_longitude():
    locator = _locator(lambda request: httpx.Response(200, json={"latitude": -1.2921, "longitude": 36.8219}))

    assert locator.locate() == Coordinate(-1.2921, 36.8219)


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(403, json={"error": True}),
        httpx.Response(200, text="not json"),
        httpx.Response(200, json={"latitude": None, "longitude": 1}),
        httpx.Response(200, json=["nope"]),
    ],
)
def test_locate_failures_mean_no_location(response):
    assert _locator(lambda request: response).locate() is None


def test_network_error_means_no_location():
    def handler(request):
        raise httpx.ConnectError("unreachable", request=request)

    assert _locator(handler).locate() is None


def test_parse_coordinate():
    assert parse_coordinate("-1.29, 36.82") == Coordinate(-1.29, 36.82)
    assert parse_coordinate("") is None
    with pytest.raises(ValueError):
        parse_coordinate("1,2,3")
    with pytest.raises(ValueError):
        parse_coordinate("91,0")

import asyncio

from barberbook.utils.geolocation import (
    NOT_SUPPORTED_MESSAGE,
    GeolocationError,
    GeoPosition,
    get_current_position,
    query_position_source,
)


def _source(result=None, error=None):
    async def source():
        if error:
            raise GeolocationError(error)
        return result
    return source


def test_missing_source_reports_not_supported():
    position = asyncio.run(get_current_position(None))
    assert position.error == NOT_SUPPORTED_MESSAGE
    assert position.latitude is None
    assert position.longitude is None
    assert not position.known


def test_equator_and_meridian_are_a_known_position():
    position = asyncio.run(get_current_position(_source((0.0, 0.0))))
    assert position.known
    assert position == GeoPosition(latitude=0.0, longitude=0.0)


def test_source_failure_leaves_coordinates_unset():
    position = asyncio.run(get_current_position(_source(error="User denied Geolocation")))
    assert position.error == "User denied Geolocation"
    assert position.latitude is None
    assert not position.known


def test_out_of_range_coordinates_are_an_error():
    position = asyncio.run(get_current_position(_source((95.0, 10.0))))
    assert not position.known
    assert "Latitude" in position.error


def test_query_source_needs_both_coordinates():
    assert query_position_source(None, None) is None

    position = asyncio.run(get_current_position(query_position_source(-33.9, None)))
    assert not position.known
    assert position.error

    position = asyncio.run(get_current_position(query_position_source(-33.9, 151.2)))
    assert (position.latitude, position.longitude) == (-33.9, 151.2)

from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Tuple

from fastapi import Query

from barberbook.logger import get_logger

logger = get_logger(__name__)

NOT_SUPPORTED_MESSAGE = "Geolocation is not supported by your browser"
UNAVAILABLE_MESSAGE = "Unable to get your location. Showing barbers without distance."

# A one-shot position query: resolves to (latitude, longitude) or raises GeolocationError
PositionSource = Callable[[], Awaitable[Tuple[float, float]]]


class GeolocationError(Exception):
    pass


@dataclass(frozen=True)
class GeoPosition:
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    error: Optional[str] = None

    @property
    def known(self) -> bool:
        # None, not 0.0, marks an unknown position
        return self.latitude is not None and self.longitude is not None


def _validate(latitude: float, longitude: float) -> None:
    if not -90 <= latitude <= 90:
        raise GeolocationError("Latitude must be between -90 and 90")
    if not -180 <= longitude <= 180:
        raise GeolocationError("Longitude must be between -180 and 180")


async def get_current_position(source: Optional[PositionSource]) -> GeoPosition:
    """Request the device position once.

    Never raises: failures come back as a GeoPosition with an error message
    and no coordinates, so callers can fall back to a distance-unknown mode.
    """
    if source is None:
        return GeoPosition(error=NOT_SUPPORTED_MESSAGE)

    try:
        latitude, longitude = await source()
        _validate(latitude, longitude)
    except GeolocationError as e:
        logger.warning(f"Geolocation failed: {str(e)}")
        return GeoPosition(error=str(e) or UNAVAILABLE_MESSAGE)

    return GeoPosition(latitude=latitude, longitude=longitude)


def query_position_source(lat: Optional[float], lng: Optional[float]) -> Optional[PositionSource]:
    """Build a position source from coordinates the client device sent along"""
    if lat is None and lng is None:
        return None

    async def source() -> Tuple[float, float]:
        if lat is None or lng is None:
            raise GeolocationError("Both lat and lng are required to use your location")
        return lat, lng

    return source


async def get_client_position(
    lat: Optional[float] = Query(None, description="Latitude reported by the client device"),
    lng: Optional[float] = Query(None, description="Longitude reported by the client device"),
) -> GeoPosition:
    return await get_current_position(query_position_source(lat, lng))

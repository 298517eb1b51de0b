"""
Geographic proximity filtering without a geospatial index.

A radius around a point is approximated by a latitude/longitude rectangle,
using a constant number of kilometres per degree. The rectangle widens in
real distance towards the poles; that error is accepted for catalogue search.
"""

from dataclasses import dataclass
from typing import Optional
import logging

logger = logging.getLogger(__name__)

LATITUDE = "location.latitude"
LONGITUDE = "location.longitude"

KM_PER_DEGREE = 111.0


@dataclass(frozen=True)
class GeoBox:
    """Latitude/longitude rectangle, bounds inclusive"""
    min_latitude: float
    max_latitude: float
    min_longitude: float
    max_longitude: float


def bounding_box(
    latitude: Optional[float],
    longitude: Optional[float],
    radius_km: Optional[float],
    km_per_degree: float = KM_PER_DEGREE
) -> Optional[GeoBox]:
    """
    Rectangle covering radius_km around (latitude, longitude).

    Returns None, meaning no geographic constraint, unless all three values
    are present. A negative radius is treated the same way.
    """
    if latitude is None or longitude is None or radius_km is None:
        return None
    if radius_km < 0:
        logger.warning(f"Ignoring negative search radius: {radius_km}")
        return None

    radius_degrees = radius_km / km_per_degree
    return GeoBox(
        min_latitude=latitude - radius_degrees,
        max_latitude=latitude + radius_degrees,
        min_longitude=longitude - radius_degrees,
        max_longitude=longitude + radius_degrees,
    )

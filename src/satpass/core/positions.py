"""Current sub-satellite points for a set of element sets."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

import numpy as np

from satpass.core.frames import ecef_to_geodetic, eci_to_ecef, gmst
from satpass.core.propagation import propagate_batch
from satpass.core.tle import TLE
from satpass.utils.constants import DEFAULT_POSITIONS_LIMIT, EARTH_RADIUS_KM as RE

logger = logging.getLogger(__name__)


@dataclass
class SubSatellitePoint:
    """Where a satellite is over the Earth at one instant.

    Attributes:
        norad_id: NORAD catalog number.
        name: Satellite name, empty when unknown.
        latitude_deg: Geodetic latitude of the sub-satellite point.
        longitude_deg: Longitude of the sub-satellite point, in [-180, 180].
        altitude_km: Radius minus the equatorial radius.
        speed_km_s: Inertial speed.
        epoch: Epoch of the element set used.
    """

    norad_id: int
    name: str
    latitude_deg: float
    longitude_deg: float
    altitude_km: float
    speed_km_s: float
    epoch: datetime

    def to_dict(self) -> dict:
        return {
            "norad_id": self.norad_id,
            "name": self.name,
            "lat": self.latitude_deg,
            "lon": self.longitude_deg,
            "alt_km": self.altitude_km,
            "speed_km_s": self.speed_km_s,
            "epoch": self.epoch.isoformat(),
        }


def satellite_positions(
    tles: list[TLE],
    time: datetime | None = None,
    limit: int = DEFAULT_POSITIONS_LIMIT,
) -> list[SubSatellitePoint]:
    """Sub-satellite points of up to ``limit`` element sets at ``time``.

    Element sets that fail to propagate are left out of the result.

    Args:
        tles: Element sets, reported in order.
        time: UTC instant. Defaults to now.
        limit: Maximum number of element sets to consider.

    Returns:
        One SubSatellitePoint per successfully propagated element set.
    """
    if time is None:
        time = datetime.now(timezone.utc)

    selected = tles[:limit]
    states, valid = propagate_batch(selected, time)
    theta = gmst(time)

    points: list[SubSatellitePoint] = []
    for tle, state, ok in zip(selected, states, valid):
        if not ok:
            logger.debug("Skipping NORAD %d: propagation failed at %s", tle.norad_id, time)
            continue

        pos = state[0:3]
        lat, lon = ecef_to_geodetic(eci_to_ecef(pos, theta))
        points.append(
            SubSatellitePoint(
                norad_id=tle.norad_id,
                name=tle.name,
                latitude_deg=lat,
                longitude_deg=lon,
                altitude_km=float(np.linalg.norm(pos)) - RE,
                speed_km_s=float(np.linalg.norm(state[3:6])),
                epoch=tle.epoch,
            )
        )

    logger.debug("Computed %d/%d sub-satellite points", len(points), len(selected))
    return points

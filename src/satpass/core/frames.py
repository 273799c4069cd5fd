"""Reference frame transforms: inertial, Earth-fixed, topocentric, geodetic.

Every function here is pure and works on plain floats and numpy arrays, so
they are safe to call from concurrent prediction runs.

Sidereal time uses the linear GMST expression anchored at J2000.0, with no
precession or nutation. That is accurate enough for visibility prediction,
not for precise geodesy.
"""
from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import NamedTuple

import numpy as np
from numpy.typing import ArrayLike, NDArray

from satpass.utils.constants import (
    EARTH_ECCENTRICITY_SQ as E2,
    EARTH_POLAR_RADIUS_KM as RB,
    EARTH_RADIUS_KM as RE,
    GMST_AT_J2000_DEG,
    GMST_RATE_DEG_PER_DAY,
    J2000_EPOCH,
)


class LookAngles(NamedTuple):
    """Topocentric view of a target from a ground location."""

    elevation_deg: float
    azimuth_deg: float
    range_km: float


def gmst(t: datetime) -> float:
    """Greenwich mean sidereal time in radians, in [0, 2*pi).

    Args:
        t: UTC instant. Naive datetimes are taken as UTC.
    """
    if t.tzinfo is None:
        t = t.replace(tzinfo=timezone.utc)
    days = (t - J2000_EPOCH).total_seconds() / 86400.0
    gmst_deg = (GMST_AT_J2000_DEG + GMST_RATE_DEG_PER_DAY * days) % 360.0
    return math.radians(gmst_deg)


def eci_to_ecef(r_eci: ArrayLike, gmst_rad: float) -> NDArray[np.float64]:
    """Rotate an inertial vector into the Earth-fixed frame.

    The rotation is about the polar axis by minus the sidereal angle.
    """
    x, y, z = np.asarray(r_eci, dtype=np.float64)
    cos_t = math.cos(gmst_rad)
    sin_t = math.sin(gmst_rad)
    return np.array([
        cos_t * x + sin_t * y,
        -sin_t * x + cos_t * y,
        z,
    ])


def geodetic_to_ecef(lat_deg: float, lon_deg: float, alt_km: float = 0.0) -> NDArray[np.float64]:
    """Earth-fixed position of a point on (or above) the WGS-84 ellipsoid."""
    lat = math.radians(lat_deg)
    lon = math.radians(lon_deg)
    sin_lat = math.sin(lat)
    cos_lat = math.cos(lat)

    # Prime vertical radius of curvature
    n = RE / math.sqrt(1.0 - E2 * sin_lat * sin_lat)

    return np.array([
        (n + alt_km) * cos_lat * math.cos(lon),
        (n + alt_km) * cos_lat * math.sin(lon),
        (n * (1.0 - E2) + alt_km) * sin_lat,
    ])


def enu_matrix(lat_deg: float, lon_deg: float) -> NDArray[np.float64]:
    """Rows are the local East, North and Up unit vectors in Earth-fixed axes."""
    lat = math.radians(lat_deg)
    lon = math.radians(lon_deg)
    sin_lat, cos_lat = math.sin(lat), math.cos(lat)
    sin_lon, cos_lon = math.sin(lon), math.cos(lon)
    return np.array([
        [-sin_lon, cos_lon, 0.0],
        [-sin_lat * cos_lon, -sin_lat * sin_lon, cos_lat],
        [cos_lat * cos_lon, cos_lat * sin_lon, sin_lat],
    ])


def ecef_to_enu(r_ecef: ArrayLike, lat_deg: float, lon_deg: float) -> NDArray[np.float64]:
    """Project a target's Earth-fixed position into a station's ENU frame.

    The station sits at the given geodetic coordinates with zero altitude.
    """
    station = geodetic_to_ecef(lat_deg, lon_deg)
    rel = np.asarray(r_ecef, dtype=np.float64) - station
    return enu_matrix(lat_deg, lon_deg) @ rel


def enu_to_look_angles(enu: ArrayLike) -> LookAngles:
    """Elevation, azimuth (clockwise from north, [0, 360)) and range.

    A zero-length vector is not handled.
    """
    east, north, up = np.asarray(enu, dtype=np.float64)
    rng = math.sqrt(east * east + north * north + up * up)
    el = math.degrees(math.asin(up / rng))
    az = math.degrees(math.atan2(east, north)) % 360.0
    return LookAngles(el, az, rng)


def look_angles(r_ecef: ArrayLike, lat_deg: float, lon_deg: float) -> LookAngles:
    """Look angles from a ground location to an Earth-fixed target."""
    return enu_to_look_angles(ecef_to_enu(r_ecef, lat_deg, lon_deg))


def ecef_to_geodetic(r_ecef: ArrayLike) -> tuple[float, float]:
    """Geodetic latitude and longitude in degrees of an Earth-fixed point.

    Closed-form Bowring approximation using the reduced-latitude auxiliary
    angle; no iteration.
    """
    x, y, z = np.asarray(r_ecef, dtype=np.float64)
    ep2 = (RE * RE - RB * RB) / (RB * RB)
    p = math.hypot(x, y)
    theta = math.atan2(RE * z, RB * p)
    sin_th = math.sin(theta)
    cos_th = math.cos(theta)
    lat = math.atan2(z + ep2 * RB * sin_th ** 3, p - E2 * RE * cos_th ** 3)
    lon = math.atan2(y, x)
    return math.degrees(lat), math.degrees(lon)

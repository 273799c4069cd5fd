from __future__ import annotations

"""Physical constants and default prediction parameters.

Distances in km, angles in degrees unless otherwise noted.
"""

from datetime import datetime, timezone

# --- Earth parameters (WGS-84) ---
EARTH_RADIUS_KM: float = 6378.137
"""Equatorial radius (semi-major axis) of Earth in km."""

EARTH_FLATTENING: float = 1.0 / 298.257223563
"""WGS-84 flattening."""

EARTH_ECCENTRICITY_SQ: float = EARTH_FLATTENING * (2.0 - EARTH_FLATTENING)
"""First eccentricity squared of the WGS-84 ellipsoid."""

EARTH_POLAR_RADIUS_KM: float = EARTH_RADIUS_KM * (1.0 - EARTH_FLATTENING)
"""Polar radius (semi-minor axis) of Earth in km."""

# --- Sidereal time ---
J2000_EPOCH: datetime = datetime(2000, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
"""J2000.0 reference epoch."""

GMST_AT_J2000_DEG: float = 280.46061837
"""Greenwich mean sidereal angle at J2000.0 in degrees."""

GMST_RATE_DEG_PER_DAY: float = 360.98564736629
"""Sidereal rotation in degrees per solar day."""

# --- Default pass prediction parameters ---
DEFAULT_DURATION_MINUTES: float = 120.0
"""Default scan length for pass prediction in minutes."""

DEFAULT_STEP_SECONDS: float = 15.0
"""Default sampling step for pass prediction in seconds."""

DEFAULT_MIN_ELEVATION_DEG: float = 10.0
"""Default minimum elevation for a satellite to count as visible."""

DEFAULT_POSITIONS_LIMIT: int = 500
"""Default maximum number of satellites reported by satellite_positions."""

# --- Data sources ---
CELESTRAK_GP_URL: str = "https://celestrak.org/NORAD/elements/gp.php"
"""CelesTrak general perturbations query endpoint."""

DEFAULT_CELESTRAK_GROUP: str = "active"
"""CelesTrak group fetched when none is given."""

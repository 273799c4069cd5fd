"""Orbital propagation via SGP4."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import numpy as np
from numpy.typing import NDArray
from sgp4.api import SatrecArray, jday

from satpass.core.tle import TLE

logger = logging.getLogger(__name__)


class PropagationError(ValueError):
    """Raised when SGP4 reports a non-zero error code."""


@dataclass
class StateVector:
    """Position and velocity in TEME frame.

    Attributes:
        position_km: [x, y, z] position in km.
        velocity_km_s: [vx, vy, vz] velocity in km/s.
        epoch: Time of this state vector.
    """

    position_km: NDArray[np.float64]  # shape (3,)
    velocity_km_s: NDArray[np.float64]  # shape (3,)
    epoch: datetime


def _as_utc(t: datetime) -> datetime:
    if t.tzinfo is None:
        return t.replace(tzinfo=timezone.utc)
    return t.astimezone(timezone.utc)


def minutes_since_epoch(tle: TLE, t: datetime) -> float:
    """Minutes elapsed from the element set's epoch to ``t`` (naive means UTC)."""
    return (_as_utc(t) - tle.epoch).total_seconds() / 60.0


def propagate_minutes(tle: TLE, minutes: float) -> StateVector:
    """Propagate a TLE a number of minutes past its epoch.

    Args:
        tle: A parsed TLE object.
        minutes: Minutes since the TLE epoch, negative for earlier times.

    Returns:
        The inertial state at that offset.

    Raises:
        PropagationError: If SGP4 propagation fails (error code != 0).
    """
    error_code, pos, vel = tle.satrec.sgp4_tsince(minutes)

    if error_code != 0:
        logger.warning(
            "SGP4 propagation failed for NORAD %d at %+.3f min: error code %d",
            tle.norad_id, minutes, error_code,
        )
        raise PropagationError(
            f"SGP4 propagation failed for NORAD {tle.norad_id} "
            f"at {minutes:+.3f} min: error code {error_code}"
        )

    return StateVector(
        position_km=np.array(pos, dtype=np.float64),
        velocity_km_s=np.array(vel, dtype=np.float64),
        epoch=tle.epoch + timedelta(minutes=minutes),
    )


def propagate(tle: TLE, times: list[datetime]) -> list[StateVector]:
    """Propagate a single TLE to multiple times using SGP4.

    Args:
        tle: A parsed TLE object.
        times: List of UTC datetimes to propagate to.

    Returns:
        List of StateVector objects, one per requested time.

    Raises:
        PropagationError: If SGP4 propagation fails at any time.
    """
    result = []
    for t in times:
        state = propagate_minutes(tle, minutes_since_epoch(tle, t))
        state.epoch = t
        result.append(state)

    logger.debug("Propagated NORAD %d to %d times", tle.norad_id, len(times))
    return result


def propagate_batch(tles: list[TLE], time: datetime) -> tuple[NDArray[np.float64], NDArray[np.bool_]]:
    """Propagate many TLEs to a single time using vectorized SGP4.

    Uses SatrecArray for C-level batch propagation (fast path for large catalogs).

    Args:
        tles: List of TLE objects to propagate.
        time: Single UTC datetime to propagate all objects to.

    Returns:
        Tuple of:
            - positions_velocities: Array of shape (n, 6) with [x,y,z,vx,vy,vz] in km, km/s
            - valid_mask: Boolean array of shape (n,) indicating which propagations succeeded
    """
    if not tles:
        return np.empty((0, 6), dtype=np.float64), np.empty(0, dtype=np.bool_)

    satrec_array = SatrecArray([tle.satrec for tle in tles])

    time = _as_utc(time)
    jd, fr = jday(time.year, time.month, time.day, time.hour, time.minute,
                  time.second + time.microsecond / 1e6)

    # SatrecArray requires arrays, not scalars
    jd_array = np.array([jd], dtype=np.float64)
    fr_array = np.array([fr], dtype=np.float64)

    # Output shape: errors (n,1), positions (n,1,3), velocities (n,1,3)
    errors, positions, velocities = satrec_array.sgp4(jd_array, fr_array)

    valid_mask = (errors[:, 0] == 0)

    n = len(tles)
    result = np.empty((n, 6), dtype=np.float64)
    result[:, 0:3] = positions[:, 0, :]  # Remove time dimension
    result[:, 3:6] = velocities[:, 0, :]

    logger.debug("Batch propagated %d TLEs (%d valid)", n, int(valid_mask.sum()))
    return result, valid_mask

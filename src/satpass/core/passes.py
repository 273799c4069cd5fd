"""Visibility pass prediction over a ground location.

The predictor samples the orbit at a fixed step and runs a two-state
detector over the elevation of each sample. Window boundaries land on
sample instants, so they carry up to one step of error; there is no
interpolation to the true horizon crossing.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterator

from satpass.core.frames import eci_to_ecef, gmst, look_angles
from satpass.core.propagation import StateVector, minutes_since_epoch, propagate_minutes
from satpass.core.tle import TLE
from satpass.utils.constants import (
    DEFAULT_DURATION_MINUTES,
    DEFAULT_MIN_ELEVATION_DEG,
    DEFAULT_STEP_SECONDS,
)

logger = logging.getLogger(__name__)

Propagator = Callable[[TLE, float], StateVector]


@dataclass(frozen=True)
class GroundLocation:
    """Geodetic position of an observer on the WGS-84 ellipsoid (altitude 0).

    Attributes:
        latitude_deg: Degrees north, in [-90, 90].
        longitude_deg: Degrees east, in [-180, 180].
    """

    latitude_deg: float
    longitude_deg: float

    def __post_init__(self) -> None:
        if not -90.0 <= self.latitude_deg <= 90.0:
            raise ValueError(f"latitude_deg out of range [-90, 90]: {self.latitude_deg}")
        if not -180.0 <= self.longitude_deg <= 180.0:
            raise ValueError(f"longitude_deg out of range [-180, 180]: {self.longitude_deg}")


@dataclass(frozen=True)
class PassWindow:
    """A contiguous interval with the satellite at or above the threshold.

    Attributes:
        start: First sample at or above the threshold.
        end: First sample below it, or the scan end for a truncated pass.
        max_elevation_deg: Highest sampled elevation within the window.
    """

    start: datetime
    end: datetime
    max_elevation_deg: float

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def to_dict(self) -> dict:
        return {
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "max_elevation_deg": self.max_elevation_deg,
        }


@dataclass(frozen=True)
class InView:
    """Detector state while the satellite is above the threshold."""

    started_at: datetime
    running_max_elevation: float


class PassTracker:
    """Two-state visibility detector fed one sample at a time.

    The state is ``None`` while out of view and an :class:`InView` while in
    view. An elevation equal to the threshold counts as visible.
    """

    def __init__(self, min_elevation_deg: float) -> None:
        self.min_elevation_deg = min_elevation_deg
        self.state: InView | None = None

    def observe(self, t: datetime, elevation_deg: float) -> PassWindow | None:
        """Feed one sample; return the window it closes, if any."""
        state = self.state

        if elevation_deg >= self.min_elevation_deg:
            if state is None:
                self.state = InView(started_at=t, running_max_elevation=elevation_deg)
            elif elevation_deg > state.running_max_elevation:
                self.state = InView(state.started_at, elevation_deg)
            return None

        if state is None:
            return None

        self.state = None
        return PassWindow(
            start=state.started_at,
            end=t,
            max_elevation_deg=state.running_max_elevation,
        )

    def close(self, end: datetime) -> PassWindow | None:
        """Close a pass still open at the end of the scan."""
        state = self.state
        if state is None:
            return None

        self.state = None
        return PassWindow(
            start=state.started_at,
            end=end,
            max_elevation_deg=state.running_max_elevation,
        )


def elevation_at(
    tle: TLE,
    location: GroundLocation,
    t: datetime,
    propagator: Propagator = propagate_minutes,
) -> float:
    """Elevation in degrees of the satellite seen from ``location`` at ``t``.

    Raises:
        PropagationError: If the propagator fails.
    """
    state = propagator(tle, minutes_since_epoch(tle, t))
    r_ecef = eci_to_ecef(state.position_km, gmst(t))
    return look_angles(r_ecef, location.latitude_deg, location.longitude_deg).elevation_deg


def _scan(
    tle: TLE,
    location: GroundLocation,
    start: datetime,
    end: datetime,
    step: timedelta,
    tracker: PassTracker,
    propagator: Propagator,
) -> Iterator[PassWindow]:
    samples = 0
    t = start
    while t <= end:
        window = tracker.observe(t, elevation_at(tle, location, t, propagator))
        if window is not None:
            yield window
        samples += 1
        t = start + samples * step

    window = tracker.close(end)
    if window is not None:
        yield window

    logger.debug("Scanned %d samples for NORAD %d", samples, tle.norad_id)


def iter_passes(
    tle: TLE,
    location: GroundLocation,
    start: datetime,
    duration_minutes: float = DEFAULT_DURATION_MINUTES,
    step_seconds: float = DEFAULT_STEP_SECONDS,
    min_elevation_deg: float = DEFAULT_MIN_ELEVATION_DEG,
    propagator: Propagator = propagate_minutes,
) -> Iterator[PassWindow]:
    """Scan ``[start, start + duration_minutes]`` and yield windows as they close.

    Samples are taken at ``start``, ``start + step``, ... up to and including
    the scan end. A pass still in progress at the last sample is yielded
    with ``end`` equal to the scan end. Arguments are checked when this is
    called; sampling starts when the returned iterator is first advanced,
    and a caller may stop consuming it between windows.

    Args:
        tle: Element set to propagate.
        location: Observer position.
        start: UTC start of the scan. Naive datetimes are taken as UTC.
        duration_minutes: Scan length in minutes, > 0.
        step_seconds: Sampling step in seconds, at least one microsecond.
        min_elevation_deg: Visibility threshold in degrees.
        propagator: ``(tle, minutes_since_epoch) -> StateVector``.

    Returns:
        Iterator of PassWindow objects in chronological order.

    Raises:
        ValueError: If duration_minutes or step_seconds is not positive.
        PropagationError: While iterating, if any sample fails to propagate.
    """
    if duration_minutes <= 0:
        raise ValueError(f"duration_minutes must be positive, got {duration_minutes}")
    # timedelta rounds to whole microseconds, so a tiny step would become zero
    step = timedelta(seconds=step_seconds)
    if step <= timedelta(0):
        raise ValueError(
            f"step_seconds must be positive and at least one microsecond, got {step_seconds}"
        )

    if start.tzinfo is None:
        start = start.replace(tzinfo=timezone.utc)
    end = start + timedelta(minutes=duration_minutes)

    logger.debug(
        "Predicting passes for NORAD %d at (%.4f, %.4f) from %s, %.1f min, %.1f s step",
        tle.norad_id, location.latitude_deg, location.longitude_deg,
        start.isoformat(), duration_minutes, step_seconds,
    )
    return _scan(tle, location, start, end, step, PassTracker(min_elevation_deg), propagator)


def predict_passes(
    tle: TLE,
    location: GroundLocation,
    start: datetime,
    duration_minutes: float = DEFAULT_DURATION_MINUTES,
    step_seconds: float = DEFAULT_STEP_SECONDS,
    min_elevation_deg: float = DEFAULT_MIN_ELEVATION_DEG,
    propagator: Propagator = propagate_minutes,
) -> list[PassWindow]:
    """Predict visibility windows of a satellite over a ground location.

    See :func:`iter_passes` for the sampling rules.

    Returns:
        Windows in chronological order, possibly empty.

    Raises:
        ValueError: If duration_minutes or step_seconds is not positive.
        PropagationError: If any sample fails to propagate.
    """
    windows = list(iter_passes(
        tle, location, start,
        duration_minutes=duration_minutes,
        step_seconds=step_seconds,
        min_elevation_deg=min_elevation_deg,
        propagator=propagator,
    ))
    logger.info("Predicted %d passes for NORAD %d", len(windows), tle.norad_id)
    return windows

"""
satpass — Satellite visibility pass prediction for Python.

Parses two-line element sets, moves SGP4 states between inertial,
Earth-fixed and topocentric frames, and predicts the windows during which
a satellite stands above a minimum elevation from a ground location.
"""

from __future__ import annotations

__version__ = "0.1.0-dev"

from satpass.core.tle import TLE, TLEParseError, NullReporter, parse_tle, load_tle_file, find_tle
from satpass.core.propagation import propagate, propagate_minutes, propagate_batch, PropagationError, StateVector
from satpass.core.passes import GroundLocation, PassWindow, PassTracker, predict_passes, iter_passes
from satpass.core.positions import SubSatellitePoint, satellite_positions
from satpass.data.celestrak import CelesTrakClient

__all__ = [
    "__version__",
    "TLE",
    "TLEParseError",
    "NullReporter",
    "parse_tle",
    "load_tle_file",
    "find_tle",
    "propagate",
    "propagate_minutes",
    "propagate_batch",
    "PropagationError",
    "StateVector",
    "GroundLocation",
    "PassWindow",
    "PassTracker",
    "predict_passes",
    "iter_passes",
    "SubSatellitePoint",
    "satellite_positions",
    "CelesTrakClient",
]

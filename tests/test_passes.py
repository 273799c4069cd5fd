"""Tests for visibility pass prediction."""
from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone

import numpy as np
import pytest

from satpass.core.frames import geodetic_to_ecef, gmst
from satpass.core.passes import (
    GroundLocation,
    InView,
    PassTracker,
    PassWindow,
    elevation_at,
    iter_passes,
    predict_passes,
)
from satpass.core.propagation import PropagationError, StateVector
from satpass.core.tle import TLE

ISS_LINE1 = "1 25544U 98067A   08264.51782528 -.00002182  00000-0 -11606-4 0  2927"
ISS_LINE2 = "2 25544  51.6416 247.4627 0006703 130.5360 325.0288 15.72125391563537"

NEW_YORK = GroundLocation(40.7128, -74.0060)
T0 = datetime(2024, 2, 14, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def iss_tle() -> TLE:
    return TLE.from_lines(ISS_LINE1, ISS_LINE2, "ISS (ZARYA)")


def _ecef_to_eci(r_ecef, theta: float):
    x, y, z = r_ecef
    return np.array([
        math.cos(theta) * x - math.sin(theta) * y,
        math.sin(theta) * x + math.cos(theta) * y,
        z,
    ])


def scripted_propagator(start: datetime, visible, location: GroundLocation = NEW_YORK):
    """Propagator that puts the satellite overhead or at the antipode.

    ``visible(seconds_since_start)`` decides which, and every call is
    recorded in ``calls``.
    """
    overhead = geodetic_to_ecef(location.latitude_deg, location.longitude_deg, alt_km=500.0)
    calls: list[float] = []

    def propagator(tle: TLE, minutes: float) -> StateVector:
        t = tle.epoch + timedelta(minutes=minutes)
        calls.append(minutes)
        seconds = round((t - start).total_seconds(), 3)
        r_ecef = overhead if visible(seconds) else -overhead
        return StateVector(
            position_km=_ecef_to_eci(r_ecef, gmst(t)),
            velocity_km_s=np.zeros(3),
            epoch=t,
        )

    propagator.calls = calls
    return propagator


class TestGroundLocation:
    def test_valid_bounds(self) -> None:
        GroundLocation(90.0, 180.0)
        GroundLocation(-90.0, -180.0)

    @pytest.mark.parametrize("lat, lon", [(90.1, 0.0), (-91.0, 0.0), (0.0, 180.5), (0.0, -200.0)])
    def test_out_of_range_raises(self, lat: float, lon: float) -> None:
        with pytest.raises(ValueError, match="out of range"):
            GroundLocation(lat, lon)


class TestPassTracker:
    def test_threshold_is_inclusive(self) -> None:
        tracker = PassTracker(10.0)
        assert tracker.observe(T0, 10.0) is None
        assert tracker.state == InView(started_at=T0, running_max_elevation=10.0)

    def test_below_threshold_stays_out(self) -> None:
        tracker = PassTracker(10.0)
        assert tracker.observe(T0, 9.999) is None
        assert tracker.state is None

    def test_window_closes_on_first_sample_below(self) -> None:
        tracker = PassTracker(10.0)
        t = [T0 + timedelta(seconds=15 * i) for i in range(5)]
        assert tracker.observe(t[0], 5.0) is None
        assert tracker.observe(t[1], 12.0) is None
        assert tracker.observe(t[2], 35.5) is None
        assert tracker.observe(t[3], 20.0) is None
        window = tracker.observe(t[4], 3.0)
        assert window == PassWindow(start=t[1], end=t[4], max_elevation_deg=35.5)
        assert tracker.state is None

    def test_close_open_pass(self) -> None:
        tracker = PassTracker(0.0)
        tracker.observe(T0, 1.0)
        end = T0 + timedelta(minutes=5)
        assert tracker.close(end) == PassWindow(start=T0, end=end, max_elevation_deg=1.0)
        assert tracker.close(end) is None

    def test_close_when_out_of_view(self) -> None:
        assert PassTracker(10.0).close(T0) is None

    def test_negative_threshold(self) -> None:
        tracker = PassTracker(-5.0)
        tracker.observe(T0, -5.0)
        assert tracker.state is not None


class TestPassWindow:
    def test_duration_and_dict(self) -> None:
        w = PassWindow(start=T0, end=T0 + timedelta(minutes=6), max_elevation_deg=42.0)
        assert w.duration == timedelta(minutes=6)
        assert w.to_dict() == {
            "start": "2024-02-14T12:00:00+00:00",
            "end": "2024-02-14T12:06:00+00:00",
            "max_elevation_deg": 42.0,
        }


class TestScan:
    def test_samples_are_inclusive_of_end(self, iss_tle: TLE) -> None:
        prop = scripted_propagator(T0, lambda s: False)
        predict_passes(iss_tle, NEW_YORK, T0, duration_minutes=2, step_seconds=15, propagator=prop)
        assert len(prop.calls) == 9  # 0, 15, ..., 120 s

    def test_never_visible(self, iss_tle: TLE) -> None:
        prop = scripted_propagator(T0, lambda s: False)
        assert predict_passes(iss_tle, NEW_YORK, T0, 10, 15, 10.0, propagator=prop) == []

    def test_always_visible_closes_at_scan_end(self, iss_tle: TLE) -> None:
        prop = scripted_propagator(T0, lambda s: True)
        windows = predict_passes(iss_tle, NEW_YORK, T0, 10, 15, 10.0, propagator=prop)
        assert len(windows) == 1
        assert windows[0].start == T0
        assert windows[0].end == T0 + timedelta(minutes=10)
        assert windows[0].max_elevation_deg == pytest.approx(90.0, abs=1e-4)

    def test_end_closed_even_when_not_on_step_grid(self, iss_tle: TLE) -> None:
        prop = scripted_propagator(T0, lambda s: True)
        windows = predict_passes(iss_tle, NEW_YORK, T0, 1, 25, 10.0, propagator=prop)
        assert windows[0].end == T0 + timedelta(minutes=1)
        assert len(prop.calls) == 3  # 0, 25, 50 s

    def test_window_bounds_snap_to_samples(self, iss_tle: TLE) -> None:
        prop = scripted_propagator(T0, lambda s: 60 <= s <= 120)
        windows = predict_passes(iss_tle, NEW_YORK, T0, 5, 15, 10.0, propagator=prop)
        assert windows == [
            PassWindow(
                start=T0 + timedelta(seconds=60),
                end=T0 + timedelta(seconds=135),
                max_elevation_deg=windows[0].max_elevation_deg,
            )
        ]

    def test_multiple_windows_ordered(self, iss_tle: TLE) -> None:
        prop = scripted_propagator(T0, lambda s: 30 <= s < 90 or 150 <= s < 200 or s >= 280)
        windows = predict_passes(iss_tle, NEW_YORK, T0, 5, 10, 10.0, propagator=prop)
        assert [(w.start - T0).total_seconds() for w in windows] == [30, 150, 280]
        assert [(w.end - T0).total_seconds() for w in windows] == [90, 200, 300]

    def test_alternating_samples(self, iss_tle: TLE) -> None:
        prop = scripted_propagator(T0, lambda s: int(s // 15) % 2 == 0)
        windows = predict_passes(iss_tle, NEW_YORK, T0, 2, 15, 10.0, propagator=prop)
        # samples 0..8: in view at even indices, the last one truncated at the end
        assert len(windows) == 5
        assert windows[-1].start == windows[-1].end == T0 + timedelta(minutes=2)

    def test_propagation_failure_aborts_run(self, iss_tle: TLE) -> None:
        calls = []

        def failing(tle: TLE, minutes: float) -> StateVector:
            calls.append(minutes)
            if len(calls) == 3:
                raise PropagationError("SGP4 propagation failed: error code 1")
            return scripted_propagator(T0, lambda s: True)(tle, minutes)

        with pytest.raises(PropagationError, match="error code 1"):
            predict_passes(iss_tle, NEW_YORK, T0, 10, 15, 10.0, propagator=failing)
        assert len(calls) == 3

    @pytest.mark.parametrize("duration, step", [(0, 15), (-10, 15), (10, 0), (10, -1), (10, 1e-7)])
    def test_preconditions_checked_before_sampling(self, iss_tle: TLE, duration, step) -> None:
        prop = scripted_propagator(T0, lambda s: True)
        with pytest.raises(ValueError, match="must be positive"):
            predict_passes(iss_tle, NEW_YORK, T0, duration, step, 10.0, propagator=prop)
        assert prop.calls == []

    def test_iter_passes_is_lazy(self, iss_tle: TLE) -> None:
        prop = scripted_propagator(T0, lambda s: 0 <= s < 30 or s >= 500)
        gen = iter_passes(iss_tle, NEW_YORK, T0, 10, 15, 10.0, propagator=prop)
        assert prop.calls == []
        first = next(gen)
        assert first.end == T0 + timedelta(seconds=30)
        assert len(prop.calls) == 3
        gen.close()

    def test_iter_passes_validates_when_called(self, iss_tle: TLE) -> None:
        prop = scripted_propagator(T0, lambda s: True)
        with pytest.raises(ValueError, match="duration_minutes must be positive"):
            iter_passes(iss_tle, NEW_YORK, T0, -1, 15, 10.0, propagator=prop)
        with pytest.raises(ValueError, match="step_seconds must be positive"):
            iter_passes(iss_tle, NEW_YORK, T0, 10, 0, 10.0, propagator=prop)
        assert prop.calls == []

    def test_naive_start_is_utc(self, iss_tle: TLE) -> None:
        prop = scripted_propagator(T0, lambda s: True)
        windows = predict_passes(iss_tle, NEW_YORK, T0.replace(tzinfo=None), 1, 15, 10.0, propagator=prop)
        assert windows[0].start == T0


class TestRealOrbit:
    def test_elevation_at_epoch_in_range(self, iss_tle: TLE) -> None:
        el = elevation_at(iss_tle, NEW_YORK, iss_tle.epoch)
        assert -90.0 <= el <= 90.0

    def test_two_hour_scan_over_new_york(self, iss_tle: TLE) -> None:
        windows = predict_passes(
            iss_tle, NEW_YORK, iss_tle.epoch,
            duration_minutes=120, step_seconds=15, min_elevation_deg=10.0,
        )
        assert len(windows) <= 120 * 60 // 15 + 1
        for w in windows:
            assert w.start < w.end
            assert 10.0 <= w.max_elevation_deg <= 90.0

    def test_day_scan_windows_ordered_and_disjoint(self, iss_tle: TLE) -> None:
        start = iss_tle.epoch
        end = start + timedelta(days=1)
        windows = predict_passes(
            iss_tle, NEW_YORK, start,
            duration_minutes=24 * 60, step_seconds=30, min_elevation_deg=10.0,
        )
        # a 51.6 degree orbit clears 10 degrees over New York several times a day
        assert len(windows) >= 1
        for prev, cur in zip(windows, windows[1:]):
            assert prev.end <= cur.start
            assert prev.start < cur.start
        for w in windows:
            assert start <= w.start < w.end <= end
            assert w.duration < timedelta(minutes=20)

    def test_lower_threshold_finds_at_least_as_many_samples(self, iss_tle: TLE) -> None:
        kwargs = dict(duration_minutes=12 * 60, step_seconds=60)
        high = predict_passes(iss_tle, NEW_YORK, iss_tle.epoch, min_elevation_deg=30.0, **kwargs)
        low = predict_passes(iss_tle, NEW_YORK, iss_tle.epoch, min_elevation_deg=0.0, **kwargs)
        total = lambda ws: sum((w.duration for w in ws), timedelta())
        assert total(low) >= total(high)

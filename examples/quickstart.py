"""satpass Quickstart — parse a TLE and list passes over New York."""

from datetime import timedelta

from satpass import GroundLocation, parse_tle, predict_passes
from satpass.utils.log import init_logging

init_logging()

# ISS (ZARYA) TLE
tle_text = """
ISS (ZARYA)
1 25544U 98067A   08264.51782528 -.00002182  00000-0 -11606-4 0  2927
2 25544  51.6416 247.4627 0006703 130.5360 325.0288 15.72125391563537
""".strip()

iss = parse_tle(tle_text)[0]
new_york = GroundLocation(40.7128, -74.0060)

print(f"Satellite: {iss.name}")
print(f"NORAD ID:  {iss.norad_id}")
print(f"Epoch:     {iss.epoch}")

windows = predict_passes(iss, new_york, iss.epoch, duration_minutes=24 * 60)
for i, w in enumerate(windows, 1):
    minutes = w.duration / timedelta(minutes=1)
    print(f"Pass {i}: {w.start:%Y-%m-%d %H:%M:%S} -> {w.end:%H:%M:%S} "
          f"({minutes:.1f} min, max el {w.max_elevation_deg:.1f}°)")

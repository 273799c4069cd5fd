"""satpass Live — fetch CelesTrak stations and predict the next passes.

Requires network access.
"""

from datetime import datetime, timezone

from satpass import CelesTrakClient, GroundLocation, find_tle, predict_passes, satellite_positions
from satpass.utils.log import init_logging

init_logging()

client = CelesTrakClient()
tles = client.fetch_tles("stations")

for point in satellite_positions(tles, limit=5):
    print(f"{point.norad_id:>6} {point.name:<24} lat={point.latitude_deg:7.2f} "
          f"lon={point.longitude_deg:8.2f} alt={point.altitude_km:7.1f} km")

iss = find_tle(tles, 25544)
if iss is not None:
    now = datetime.now(timezone.utc)
    for w in predict_passes(iss, GroundLocation(40.7128, -74.0060), now):
        print(w.to_dict())

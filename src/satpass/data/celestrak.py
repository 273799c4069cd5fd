"""CelesTrak element-set client.

Downloads general perturbations element sets in TLE format by group and
optionally caches the raw text on disk.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

import requests

from satpass.core.tle import TLE, parse_tle
from satpass.utils.constants import CELESTRAK_GP_URL, DEFAULT_CELESTRAK_GROUP

logger = logging.getLogger(__name__)


@dataclass
class CelesTrakClient:
    """Client for the CelesTrak GP query endpoint.

    No account is needed.

    Attributes:
        base_url: GP query URL.
        timeout: Request timeout in seconds.
    """

    base_url: str = CELESTRAK_GP_URL
    timeout: float = 60.0
    _session: requests.Session = field(default_factory=requests.Session, repr=False)

    def _get(self, group: str) -> requests.Response:
        logger.info("Fetching TLE group %r from %s", group, self.base_url)
        response = self._session.get(
            self.base_url,
            params={"GROUP": group, "FORMAT": "tle"},
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response

    def fetch_text(self, group: str = DEFAULT_CELESTRAK_GROUP) -> str:
        """Download a group's element sets as raw TLE text.

        Args:
            group: CelesTrak group name, e.g. ``"active"`` or ``"stations"``.

        Returns:
            Response body.

        Raises:
            requests.HTTPError: If the request fails.
        """
        return self._get(group).text

    def fetch_tles(self, group: str = DEFAULT_CELESTRAK_GROUP) -> list[TLE]:
        """Download and parse a group's element sets.

        Raises:
            requests.HTTPError: If the request fails.
            TLEParseError: If a record in the response cannot be decoded.
        """
        text = self.fetch_text(group)
        if not text.strip():
            return []
        return parse_tle(text)

    def fetch_to_cache(
        self, cache_dir: str | Path, group: str = DEFAULT_CELESTRAK_GROUP
    ) -> Path:
        """Download a group and write the body unchanged to a timestamped file.

        The file is named ``celestrak-<group>-YYYYmmdd-HHMMSS.tle`` and the
        directory is created if needed.

        Returns:
            Path of the written file.

        Raises:
            requests.HTTPError: If the request fails.
        """
        body = self._get(group).content

        cache_dir = Path(cache_dir)
        cache_dir.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
        path = cache_dir / f"celestrak-{group}-{stamp}.tle"
        path.write_bytes(body)

        logger.info("Cached TLE group %r at %s", group, path)
        return path

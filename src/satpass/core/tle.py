"""TLE (Two-Line Element) parsing.

This module decodes element sets with the sgp4 library and scans raw text
for name / line 1 / line 2 record groups.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Iterable, Protocol

from sgp4.api import Satrec, WGS72

logger = logging.getLogger(__name__)

TLE_LINE_LENGTH = 69
DIGITS = "0123456789"


class TLEParseError(ValueError):
    """Raised when an element set's field content cannot be decoded."""


class Reporter(Protocol):
    """Receives warnings about records skipped during parsing."""

    def warning(self, msg: str, *args: object) -> None: ...


class NullReporter:
    """Reporter that discards everything."""

    def warning(self, msg: str, *args: object) -> None:
        pass


def tle_checksum(line: str) -> int:
    """Modulo-10 checksum over the first 68 columns of a TLE line.

    Digits count their value, minus signs count 1, everything else 0.
    """
    total = 0
    for ch in line[:TLE_LINE_LENGTH - 1]:
        if ch in DIGITS:
            total += int(ch)
        elif ch == "-":
            total += 1
    return total % 10


def _check_line(line: str, marker: str, number: int) -> None:
    if len(line) != TLE_LINE_LENGTH or not line.startswith(marker):
        logger.error("Invalid TLE line %d: %r", number, line)
        raise TLEParseError(f"Invalid TLE line {number}: {line!r}")
    if line[-1] not in DIGITS or int(line[-1]) != tle_checksum(line):
        logger.error("Checksum mismatch on TLE line %d: %r", number, line)
        raise TLEParseError(f"Checksum mismatch on TLE line {number}: {line!r}")


@dataclass(frozen=True)
class TLE:
    """A parsed Two-Line Element set.

    Attributes:
        name: Satellite name (line 0), empty when absent.
        line1: Raw TLE line 1.
        line2: Raw TLE line 2.
        norad_id: NORAD catalog number.
        epoch: Epoch as a UTC datetime.
        inclination_deg: Orbital inclination in degrees.
        raan_deg: Right ascension of ascending node in degrees.
        eccentricity: Orbital eccentricity (dimensionless).
        arg_perigee_deg: Argument of perigee in degrees.
        mean_anomaly_deg: Mean anomaly in degrees.
        mean_motion_rev_per_day: Mean motion in revolutions per day.
        bstar: BSTAR drag term.
        satrec: Underlying sgp4 Satrec object for propagation.
    """

    name: str
    line1: str
    line2: str
    norad_id: int
    epoch: datetime
    inclination_deg: float
    raan_deg: float
    eccentricity: float
    arg_perigee_deg: float
    mean_anomaly_deg: float
    mean_motion_rev_per_day: float
    bstar: float
    satrec: Satrec = field(repr=False, compare=False)

    @classmethod
    def from_lines(cls, line1: str, line2: str, name: str = "") -> TLE:
        """Decode a TLE from two lines and an optional name.

        Args:
            line1: TLE line 1 (69 characters).
            line2: TLE line 2 (69 characters).
            name: Optional satellite name (line 0).

        Returns:
            A parsed TLE object.

        Raises:
            TLEParseError: If a line has the wrong length or marker, fails
                its checksum, or the field content cannot be decoded.
        """
        line1 = line1.strip()
        line2 = line2.strip()

        _check_line(line1, "1", 1)
        _check_line(line2, "2", 2)

        try:
            norad_id = int(line1[2:7])
            year = int(line1[18:20])
            day_of_year = float(line1[20:32])
        except ValueError as exc:
            logger.error("Malformed TLE line 1 fields: %r", line1)
            raise TLEParseError(f"Malformed TLE line 1 fields: {line1!r}") from exc

        if line2[2:7].strip() != line1[2:7].strip():
            logger.error("Catalog numbers differ between lines: %r / %r", line1, line2)
            raise TLEParseError(
                f"Catalog numbers differ between lines: {line1[2:7]!r} != {line2[2:7]!r}"
            )

        try:
            sat = Satrec.twoline2rv(line1, line2, WGS72)
        except ValueError as exc:
            logger.error("sgp4 rejected TLE for NORAD %d: %s", norad_id, exc)
            raise TLEParseError(f"sgp4 rejected TLE for NORAD {norad_id}: {exc}") from exc

        year = year + 2000 if year < 57 else year + 1900
        epoch = datetime(year, 1, 1, tzinfo=timezone.utc) + timedelta(
            days=day_of_year - 1
        )

        logger.debug("Parsed TLE for NORAD %d (epoch %s)", norad_id, epoch.isoformat())

        return cls(
            name=name.strip(),
            line1=line1,
            line2=line2,
            norad_id=norad_id,
            epoch=epoch,
            inclination_deg=math.degrees(sat.inclo),
            raan_deg=math.degrees(sat.nodeo),
            eccentricity=sat.ecco,
            arg_perigee_deg=math.degrees(sat.argpo),
            mean_anomaly_deg=math.degrees(sat.mo),
            mean_motion_rev_per_day=sat.no_kozai * 1440 / (2 * math.pi),
            bstar=sat.bstar,
            satrec=sat,
        )

    def __str__(self) -> str:
        header = f"{self.name}\n" if self.name else ""
        return f"{header}{self.line1}\n{self.line2}"


def _is_marker_line(line: str) -> bool:
    return line.startswith("1") or line.startswith("2")


def parse_tle(text: str, reporter: Reporter | None = None) -> list[TLE]:
    """Parse every TLE record found in text.

    A record starts at a line beginning with ``1``; the following line must
    begin with ``2``. The line before the ``1`` line is taken as the name
    when it carries neither marker. A ``1`` line without a ``2`` line after
    it is reported and skipped. A well-paired record the decoder rejects
    aborts the whole parse.

    Args:
        text: Raw TLE text. Blank lines are ignored.
        reporter: Receives a warning for each skipped record. Defaults to
            this module's logger.

    Returns:
        Parsed TLE objects in input order.

    Raises:
        TLEParseError: If any paired record fails to decode.
    """
    if reporter is None:
        reporter = logger

    lines = [l.rstrip() for l in text.splitlines() if l.strip()]
    tles: list[TLE] = []
    i = 0

    while i < len(lines):
        if not lines[i].startswith("1"):
            i += 1  # name lines and stray content
            continue

        name = ""
        if i >= 1 and not _is_marker_line(lines[i - 1]):
            name = lines[i - 1]

        if i + 1 >= len(lines) or not lines[i + 1].startswith("2"):
            reporter.warning("Skipping invalid TLE pair at line %d: missing line 2", i + 1)
            i += 1
            continue

        tles.append(TLE.from_lines(lines[i], lines[i + 1], name=name))
        i += 2

    logger.info("Parsed %d TLEs from text", len(tles))
    return tles


def load_tle_file(path: str | Path, reporter: Reporter | None = None) -> list[TLE]:
    """Read a TLE file and parse it with :func:`parse_tle`."""
    text = Path(path).read_text(encoding="utf-8")
    logger.debug("Loaded %d bytes of TLE text from %s", len(text), path)
    return parse_tle(text, reporter=reporter)


def find_tle(tles: Iterable[TLE], norad_id: int) -> TLE | None:
    """Return the first element set with the given catalog number, if any."""
    return next((tle for tle in tles if tle.norad_id == norad_id), None)

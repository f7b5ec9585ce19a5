#!/usr/bin/env python3
# NMEA0183 Logger - marine sentence logger and voyage analyzer
# Copyright (C) 2024 NMEA0183 Logger Contributors
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.

"""
Voyage analysis of a logged NMEA0183 file.

Reconstructs track, distance, time span, speed, wind, engine hours and
2-hourly position samples from raw log text. Sentences used:

    RMC  - track, SOG, time span, weather samples (status A only)
    GGA  - first track point when no RMC fix precedes it
    VTG  - SOG
    MWV  - true wind speed / angle
    MWD  - true wind speed
    RPM  - engine hours

Malformed lines are skipped one by one; analysis never aborts on bad data.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Tuple

import pynmea2

try:
    from .. import config
    from ..parsers.sentence import sentence_type_of
    from ..parsers.nmea_handler import (
        format_timestamp,
        parse_datetime,
        parse_float,
        parse_int,
        parse_lat_lon,
        split_log_line,
        strip_checksum,
    )
except ImportError:
    import config
    from parsers.sentence import sentence_type_of
    from parsers.nmea_handler import (
        format_timestamp,
        parse_datetime,
        parse_float,
        parse_int,
        parse_lat_lon,
        split_log_line,
        strip_checksum,
    )

from .helpers import (
    bucket_mean_positions,
    calculate_track_distance,
    downsample_indices,
    max_or_none,
    mean_or_none,
    min_or_none,
    round_half_up,
)
from .structures import NavigationSummary, TrackPoint, WeatherSample, SECONDS_PER_HOUR

logger = logging.getLogger(__name__)

ACTIVE = 'A'
WIND_REFERENCE_TRUE = 'T'


@dataclass
class _Accumulator:
    """Raw samples collected in one pass over the file."""
    track: List[TrackPoint] = field(default_factory=list)
    fix_positions: List[Tuple[float, float]] = field(default_factory=list)
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    sog: List[float] = field(default_factory=list)
    tws: List[float] = field(default_factory=list)
    twa: List[float] = field(default_factory=list)
    rpm: List[Tuple[Optional[datetime], float]] = field(default_factory=list)
    fix_hours: List[int] = field(default_factory=list)
    fix_lats: List[float] = field(default_factory=list)
    fix_lons: List[float] = field(default_factory=list)

    def add_time(self, ts):
        if self.start is None or ts < self.start:
            self.start = ts
        if self.end is None or ts > self.end:
            self.end = ts


def _status_ok(value) -> bool:
    """Status field is active or absent."""
    return strip_checksum(value) in (ACTIVE, '')


def _wind_speed_knots(speed, unit):
    if unit == 'M':
        return speed * config.MS_TO_KNOTS
    if unit == 'K':
        return speed * config.KMH_TO_KNOTS
    return speed


def _handle_rmc(msg, log_ts, acc):
    if len(msg.data) < 9 or msg.status != ACTIVE:
        return
    pos = parse_lat_lon(msg.lat, msg.lat_dir, msg.lon, msg.lon_dir)
    sog = parse_float(msg.spd_over_grnd)
    # pynmea2's datestamp uses the strptime century pivot, the raw field is kept
    ts = parse_datetime(msg.timestamp, msg.data[8]) or log_ts

    if ts is not None:
        acc.add_time(ts)

    if pos is not None:
        lat, lon = pos
        acc.track.append(TrackPoint(
            lat=lat,
            lon=lon,
            time=format_timestamp(ts) if ts is not None else None,
            sog=sog,
        ))
        acc.fix_positions.append(pos)
        if ts is not None:
            acc.fix_hours.append(ts.hour)
            acc.fix_lats.append(lat)
            acc.fix_lons.append(lon)

    if sog is not None and sog >= 0:
        acc.sog.append(sog)


def _handle_vtg(msg, log_ts, acc):
    if len(msg.data) < 5:
        return
    sog = parse_float(msg.spd_over_grnd_kts)
    if sog is not None and 0 <= sog < config.MAX_VTG_SOG_KN:
        acc.sog.append(sog)


def _handle_gga(msg, log_ts, acc):
    if len(msg.data) < 9 or acc.track:
        return
    quality = parse_int(msg.gps_qual)
    if quality is None or quality <= 0:
        return
    pos = parse_lat_lon(msg.lat, msg.lat_dir, msg.lon, msg.lon_dir)
    if pos is not None:
        acc.track.append(TrackPoint(
            lat=pos[0],
            lon=pos[1],
            time=format_timestamp(log_ts) if log_ts is not None else None,
            sog=None,
        ))


def _handle_mwv(msg, log_ts, acc):
    if len(msg.data) < 4:
        return
    angle = parse_float(msg.wind_angle)
    speed = parse_float(msg.wind_speed)

    if speed is None or not _status_ok(msg.status) or msg.reference != WIND_REFERENCE_TRUE:
        return
    knots = _wind_speed_knots(speed, msg.wind_speed_units)
    if 0 <= knots < config.MAX_WIND_SPEED_KN:
        acc.tws.append(knots)
    if angle is not None:
        acc.twa.append(angle)


def _handle_mwd(msg, log_ts, acc):
    if len(msg.data) < 5:
        return
    knots = parse_float(msg.wind_speed_knots)
    if knots is not None and 0 <= knots < config.MAX_WIND_SPEED_KN:
        acc.tws.append(knots)


def _handle_rpm(msg, log_ts, acc):
    if len(msg.data) < 3:
        return
    rpm = parse_float(msg.speed)
    if rpm is not None and _status_ok(msg.status):
        acc.rpm.append((log_ts, abs(rpm)))


SENTENCE_HANDLERS = {
    'RMC': _handle_rmc,
    'VTG': _handle_vtg,
    'GGA': _handle_gga,
    'MWV': _handle_mwv,
    'MWD': _handle_mwd,
    'RPM': _handle_rpm,
}


def calculate_engine_hours(samples):
    """
    Sums running time between consecutive RPM samples.

    A gap counts when both samples carry a timestamp, the earlier sample
    shows the engine running (rpm > ENGINE_RUNNING_RPM) and the gap is
    strictly between 0 and MAX_ENGINE_GAP_HOURS.

    Args:
        samples: list of (timestamp or None, abs rpm)

    Returns:
        float: engine hours
    """
    hours = 0.0
    for (prev_ts, prev_rpm), (ts, _) in zip(samples, samples[1:]):
        if prev_ts is None or ts is None or prev_rpm <= config.ENGINE_RUNNING_RPM:
            continue
        gap = (ts - prev_ts).total_seconds() / SECONDS_PER_HOUR
        if 0 < gap < config.MAX_ENGINE_GAP_HOURS:
            hours += gap
    return hours


def parse_sentence(sentence):
    """
    Parses a logged sentence with pynmea2.

    Checksums are not verified on analysis: the '*hh' suffix is removed
    before parsing.

    Raises:
        pynmea2.ParseError: unparseable or unknown sentence
    """
    body = sentence[1:].split(config.CHECKSUM_DELIMITER, 1)[0]
    return pynmea2.parse(body, check=False)


def _collect(lines):
    acc = _Accumulator()
    for line in lines:
        if not line.strip():
            continue
        try:
            log_ts, sentence = split_log_line(line)
            if not sentence or sentence[0] not in config.SENTENCE_START_CHARS:
                continue
            header = sentence.split(config.FIELD_DELIMITER, 1)[0]
            handler = SENTENCE_HANDLERS.get(sentence_type_of(header))
            if handler is not None:
                handler(parse_sentence(sentence), log_ts, acc)
        except pynmea2.ParseError as e:
            logger.debug(f"Skipping unparseable line {line.strip()!r}: {e}")
            continue
        except Exception as e:
            logger.debug(f"Skipping malformed line {line.strip()!r}: {e}")
            continue
    return acc


def analyze(file_contents: str, max_display_points: int = config.MAX_DISPLAY_POINTS) -> NavigationSummary:
    """
    Builds a NavigationSummary from raw log text.

    Args:
        file_contents: full text of a log file
        max_display_points: track length above which the returned track is thinned

    Returns:
        NavigationSummary
    """
    acc = _collect(file_contents.splitlines())
    digits = config.SUMMARY_DECIMALS

    total_distance = calculate_track_distance(acc.fix_positions)

    track = acc.track
    if len(track) > max_display_points:
        track = [track[i] for i in downsample_indices(len(track), max_display_points)]

    duration = None
    if acc.start is not None and acc.end is not None:
        duration = (acc.end - acc.start).total_seconds() / SECONDS_PER_HOUR

    engine_hours = calculate_engine_hours(acc.rpm) if acc.rpm else None

    weather = [
        WeatherSample(hour=hour, lat=lat, lon=lon)
        for hour, lat, lon in bucket_mean_positions(acc.fix_hours, acc.fix_lats, acc.fix_lons)
    ]

    return NavigationSummary(
        track=track,
        total_distance_nm=round_half_up(total_distance, digits),
        start_time=format_timestamp(acc.start) if acc.start is not None else None,
        end_time=format_timestamp(acc.end) if acc.end is not None else None,
        duration_hours=round_half_up(duration, digits),
        sog_avg_kn=round_half_up(mean_or_none(acc.sog), digits),
        sog_max_kn=round_half_up(max_or_none(acc.sog), digits),
        tws_avg_kn=round_half_up(mean_or_none(acc.tws), digits),
        tws_max_kn=round_half_up(max_or_none(acc.tws), digits),
        twa_avg_deg=round_half_up(mean_or_none(acc.twa)),
        twa_min_deg=round_half_up(min_or_none(acc.twa)),
        twa_max_deg=round_half_up(max_or_none(acc.twa)),
        engine_hours=round_half_up(engine_hours, digits),
        track_points=len(acc.track),
        sog_samples=len(acc.sog),
        tws_samples=len(acc.tws),
        twa_samples=len(acc.twa),
        rpm_samples=len(acc.rpm),
        weather_intervals=weather,
    )


def analyze_file(file_path, **kwargs) -> NavigationSummary:
    """Reads a log file and analyzes it. Undecodable bytes are replaced."""
    with open(file_path, 'r', encoding=config.LOG_FILE_ENCODING, errors='replace') as f:
        return analyze(f.read(), **kwargs)

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
NMEA field handler - conversion of individual sentence fields.

All helpers return None for missing or malformed input instead of raising,
so a single bad line never interrupts a log analysis.
"""
import logging
import math
import re
from datetime import datetime, time, timezone
from typing import Optional, Tuple

from pynmea2.nmea_utils import dm_to_sd, timestamp

try:
    from .. import config
except ImportError:
    import config

logger = logging.getLogger(__name__)

# Leading timestamp written by the logger: "2024-05-01T12:00:00.000Z <sentence>"
LOG_TIMESTAMP_RE = re.compile(r'^(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(?:\.\d+)?Z)\s+(.*)$')


def strip_checksum(field):
    """Returns field without the trailing '*hh' checksum."""
    if not field:
        return ''
    return field.split(config.CHECKSUM_DELIMITER, 1)[0]


def parse_float(value) -> Optional[float]:
    """Parses a numeric field, None for empty, invalid or non-finite values."""
    if value is None:
        return None
    if isinstance(value, str):
        value = strip_checksum(value)
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def parse_int(value) -> Optional[int]:
    """Parses an integer field (e.g. GGA fix quality)."""
    if isinstance(value, int):
        return value
    try:
        return int(strip_checksum(value))
    except (TypeError, ValueError):
        return None


def _dm_to_degrees(text) -> float:
    # Whole minutes without a decimal point ("4916") are accepted as well
    if text.isdigit() and len(text) >= 3:
        text += '.0'
    return dm_to_sd(text)


def parse_lat_lon(lat_str, lat_dir, lon_str, lon_dir) -> Optional[Tuple[float, float]]:
    """
    Converts NMEA ddmm.mmmm / dddmm.mmmm coordinates to signed decimal degrees.

    Args:
        lat_str: latitude field, e.g. "4916.45" or "4916"
        lat_dir: 'N' or 'S'
        lon_str: longitude field, e.g. "12311.12"
        lon_dir: 'E' or 'W'

    Returns:
        tuple: (lat, lon) or None if missing, out of range or exactly (0, 0)
    """
    if not lat_str or not lon_str or not lat_dir or not lon_dir:
        return None
    try:
        lat = _dm_to_degrees(lat_str)
        lon = _dm_to_degrees(lon_str)
    except (ValueError, AttributeError):
        return None

    if lat_dir == 'S':
        lat = -lat
    if lon_dir == 'W':
        lon = -lon

    if not (math.isfinite(lat) and math.isfinite(lon)):
        return None
    if (lat == 0 and lon == 0) or abs(lat) > 90 or abs(lon) > 180:
        return None
    return lat, lon


def parse_time_of_day(value) -> Optional[time]:
    """hhmmss[.ss] text -> datetime.time, None if invalid."""
    if not value:
        return None
    try:
        return timestamp(value)
    except (TypeError, ValueError):
        return None


def parse_datetime(time_of_day, date_str) -> Optional[datetime]:
    """
    Combines an RMC time of day and raw date (ddmmyy) field into a UTC datetime.

    `time_of_day` is either the datetime.time pynmea2 gives for RMC
    `timestamp` or the raw hhmmss[.ss] text. Two-digit years below
    NMEA_CENTURY_PIVOT are 20xx, the rest 19xx. Fractional seconds are
    ignored. Returns None if either part is missing or does not form a
    valid calendar date.
    """
    if isinstance(time_of_day, str):
        time_of_day = parse_time_of_day(time_of_day)
    if not isinstance(time_of_day, time):
        return None
    if not isinstance(date_str, str) or len(date_str) < 6:
        return None
    try:
        year = int(date_str[4:6])
        year = 2000 + year if year < config.NMEA_CENTURY_PIVOT else 1900 + year
        return datetime(
            year, int(date_str[2:4]), int(date_str[0:2]),
            time_of_day.hour, time_of_day.minute, time_of_day.second,
            tzinfo=timezone.utc,
        )
    except ValueError:
        return None


def parse_log_timestamp(token) -> Optional[datetime]:
    """Parses the ISO-8601 'Z' timestamp written in front of logged sentences."""
    for fmt in ('%Y-%m-%dT%H:%M:%S.%fZ', '%Y-%m-%dT%H:%M:%SZ'):
        try:
            return datetime.strptime(token, fmt).replace(tzinfo=timezone.utc)
        except ValueError:
            continue
    return None


def split_log_line(line) -> Tuple[Optional[datetime], str]:
    """
    Separates an optional leading log timestamp from the sentence.

    Returns:
        tuple: (timestamp or None, sentence text)
    """
    text = line.strip()
    match = LOG_TIMESTAMP_RE.match(text)
    if not match:
        return None, text
    return parse_log_timestamp(match.group(1)), match.group(2)


def format_timestamp(dt: datetime) -> str:
    """Formats a datetime as ISO-8601 UTC with milliseconds: 2024-05-01T12:00:00.000Z"""
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)
    return dt.strftime('%Y-%m-%dT%H:%M:%S.') + f"{dt.microsecond // 1000:03d}Z"

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

"""Input format parsers: NMEA0183 sentences and AIS payloads."""

from .sentence import (
    SentenceHeader,
    UNRECOGNIZED,
    tokenize,
    sentence_type_of,
)
from .ais import (
    decode_mmsi,
    extract_mmsi,
)
from .nmea_handler import (
    strip_checksum,
    parse_float,
    parse_int,
    parse_lat_lon,
    parse_time_of_day,
    parse_datetime,
    parse_log_timestamp,
    split_log_line,
    format_timestamp,
)

__all__ = [
    # Tokenizer
    'SentenceHeader',
    'UNRECOGNIZED',
    'tokenize',
    'sentence_type_of',
    # AIS
    'decode_mmsi',
    'extract_mmsi',
    # Field helpers
    'strip_checksum',
    'parse_float',
    'parse_int',
    'parse_lat_lon',
    'parse_time_of_day',
    'parse_datetime',
    'parse_log_timestamp',
    'split_log_line',
    'format_timestamp',
]

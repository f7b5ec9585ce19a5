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

"""Tests for NMEA field conversion helpers."""
import os
import sys

import pytest

# Add parent directory to path for imports
PARENT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PARENT_DIR not in sys.path:
    sys.path.insert(0, PARENT_DIR)

from datetime import datetime, time, timezone
from decimal import Decimal

import pynmea2

from parsers.nmea_handler import (
    format_timestamp,
    parse_datetime,
    parse_float,
    parse_int,
    parse_lat_lon,
    parse_log_timestamp,
    parse_time_of_day,
    split_log_line,
    strip_checksum,
)
from nmea_fixtures import rmc


FLOAT_TOLERANCE = 1e-9


@pytest.mark.parametrize("value,expected", [
    ('A*1F', 'A'), ('N', 'N'), ('', ''), (None, ''), ('*00', ''),
])
def test_strip_checksum(value, expected):
    assert strip_checksum(value) == expected


@pytest.mark.parametrize("value,expected", [
    ('5.5', 5.5), ('12.0*3C', 12.0), ('-3', -3.0), ('', None), (None, None),
    ('abc', None), ('nan', None), ('inf', None),
])
def test_parse_float(value, expected):
    assert parse_float(value) == expected


def test_parse_int():
    assert parse_int('1') == 1
    assert parse_int('2*4A') == 2
    assert parse_int('') is None
    assert parse_int(None) is None


def test_parse_lat_lon_signs():
    lat, lon = parse_lat_lon('4807.038', 'S', '01131.000', 'W')
    assert abs(lat - -48.1173) < 1e-6
    assert abs(lon - -11.516666666) < 1e-6


def test_parse_lat_lon_matches_pynmea2():
    sentence = rmc(lat=54.3216, lon=10.1234)
    msg = pynmea2.parse(sentence)
    lat, lon = parse_lat_lon(msg.lat, msg.lat_dir, msg.lon, msg.lon_dir)
    assert abs(lat - msg.latitude) < FLOAT_TOLERANCE
    assert abs(lon - msg.longitude) < FLOAT_TOLERANCE


@pytest.mark.parametrize("fields", [
    ('', 'N', '01131.000', 'E'),
    ('4807.038', '', '01131.000', 'E'),
    ('0000.000', 'N', '00000.000', 'E'),
    ('9500.000', 'N', '01131.000', 'E'),
    ('4807.038', 'N', '18500.000', 'E'),
    ('abc', 'N', '01131.000', 'E'),
])
def test_parse_lat_lon_rejects_invalid(fields):
    assert parse_lat_lon(*fields) is None


def test_parse_datetime():
    assert parse_datetime('123519', '230394') == datetime(1994, 3, 23, 12, 35, 19, tzinfo=timezone.utc)
    assert parse_datetime('120000.50', '010524') == datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize("time_str,date_str", [
    ('', '010524'), ('120000', ''), ('1200', '010524'), ('120000', '320524'), ('250000', '010524'),
])
def test_parse_datetime_invalid(time_str, date_str):
    assert parse_datetime(time_str, date_str) is None


def test_parse_datetime_from_time_of_day():
    msg = pynmea2.parse(rmc(time='083000', date='020624'))
    assert isinstance(msg.timestamp, time)
    assert parse_datetime(msg.timestamp, '020624') == datetime(2024, 6, 2, 8, 30, 0, tzinfo=timezone.utc)
    assert parse_datetime(None, '020624') is None


def test_parse_time_of_day():
    assert parse_time_of_day('123519.25').replace(tzinfo=None) == time(12, 35, 19, 250000)
    assert parse_time_of_day('') is None
    assert parse_time_of_day('1299') is None


def test_parse_numeric_values_from_pynmea2():
    assert parse_float(Decimal('7.5')) == 7.5
    assert parse_float(3) == 3.0
    assert parse_int(2) == 2


def test_parse_lat_lon_whole_minutes():
    lat, lon = parse_lat_lon('4916', 'N', '12311', 'W')
    assert abs(lat - (49 + 16 / 60)) < FLOAT_TOLERANCE
    assert abs(lon + (123 + 11 / 60)) < FLOAT_TOLERANCE


def test_parse_log_timestamp():
    assert parse_log_timestamp('2024-05-01T12:00:00.250Z') == datetime(2024, 5, 1, 12, 0, 0, 250000, tzinfo=timezone.utc)
    assert parse_log_timestamp('2024-05-01T12:00:00Z') == datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)
    assert parse_log_timestamp('yesterday') is None


def test_split_log_line_with_timestamp():
    ts, text = split_log_line('2024-05-01T12:00:00.000Z $GPRMC,1,2\n')
    assert ts == datetime(2024, 5, 1, 12, tzinfo=timezone.utc)
    assert text == '$GPRMC,1,2'


def test_split_log_line_without_timestamp():
    assert split_log_line('  $GPRMC,1,2  ') == (None, '$GPRMC,1,2')


def test_format_timestamp():
    dt = datetime(2024, 5, 1, 12, 0, 5, 123456, tzinfo=timezone.utc)
    assert format_timestamp(dt) == '2024-05-01T12:00:05.123Z'
    assert parse_log_timestamp(format_timestamp(dt)) == datetime(2024, 5, 1, 12, 0, 5, 123000, tzinfo=timezone.utc)

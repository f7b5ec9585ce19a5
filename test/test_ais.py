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

"""Tests for AIS MMSI decoding."""
import os
import sys

import pytest

# Add parent directory to path for imports
PARENT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PARENT_DIR not in sys.path:
    sys.path.insert(0, PARENT_DIR)

from parsers.ais import decode_mmsi, extract_mmsi, unarmor_char
from parsers.sentence import tokenize
from nmea_fixtures import AIS_REFERENCE_MMSI, AIS_REFERENCE_SENTENCE, ais_payload, vdm


@pytest.mark.parametrize("char,value", [
    ('0', 0), ('9', 9), ('@', 16), ('W', 39), ('`', 40), ('w', 63),
])
def test_unarmor_char(char, value):
    assert unarmor_char(char) == value


def test_extract_mmsi_reference_sentence():
    assert extract_mmsi(AIS_REFERENCE_SENTENCE) == str(AIS_REFERENCE_MMSI)


def test_extract_mmsi_accepts_header():
    assert extract_mmsi(tokenize(AIS_REFERENCE_SENTENCE)) == str(AIS_REFERENCE_MMSI)


@pytest.mark.parametrize("mmsi", [1, 211234560, 244670316, 999999999, 2 ** 30 - 1])
def test_extract_mmsi_built_payloads(mmsi):
    assert extract_mmsi(vdm(mmsi)) == str(mmsi)


def test_decode_mmsi_only_first_fragment():
    payload = ais_payload(211234560)
    assert decode_mmsi(payload, '1') == 211234560
    assert decode_mmsi(payload, 1) == 211234560
    assert decode_mmsi(payload, '2') is None
    assert decode_mmsi(payload, '') is None
    assert decode_mmsi(payload, None) is None


def test_decode_mmsi_short_payload():
    assert decode_mmsi('15NG6V', '1') is None
    assert decode_mmsi('', '1') is None
    assert decode_mmsi(None, '1') is None


def test_decode_mmsi_zero_is_none():
    assert decode_mmsi(ais_payload(0), '1') is None


def test_extract_mmsi_too_few_fields():
    assert extract_mmsi('!AIVDM,1,1,,A*00') is None


def test_extract_mmsi_second_fragment():
    assert extract_mmsi(vdm(211234560, fragment='2', count='2')) is None


def test_extract_mmsi_agrees_with_pyais():
    pyais = pytest.importorskip('pyais')
    decoded = pyais.decode(AIS_REFERENCE_SENTENCE).asdict()
    assert decoded['mmsi'] == AIS_REFERENCE_MMSI
    assert extract_mmsi(AIS_REFERENCE_SENTENCE) == str(decoded['mmsi'])


def test_extract_mmsi_pyais_encoded_sentence():
    encode = pytest.importorskip('pyais.encode')
    sentences = encode.encode_dict(
        {'type': 1, 'mmsi': 235009802, 'lat': 51.5, 'lon': -0.1, 'speed': 7.5},
        talker_id='AI',
    )
    assert extract_mmsi(sentences[0]) == '235009802'

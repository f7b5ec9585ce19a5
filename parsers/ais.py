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
AIS payload decoding - just enough to identify the transmitting vessel.

VDM/VDO layout::

    !AIVDM,fragCount,fragNum,seqId,channel,payload,fill*checksum

The payload is 6-bit ASCII armored; the MMSI sits in bits 8..37 of every
message type, so only the first 7 characters (42 bits) are needed.
"""
import logging
from typing import Optional

try:
    from .. import config
except ImportError:
    import config

from .sentence import SentenceHeader, tokenize

logger = logging.getLogger(__name__)

AIS_FRAGMENT_NUMBER_FIELD = 2
AIS_PAYLOAD_FIELD = 5
SIXBIT_MASK = 0x3F


def unarmor_char(char: str) -> int:
    """Maps an armored payload character to its 6-bit value."""
    value = ord(char) - 48
    if value > 40:
        value -= 8
    return value & SIXBIT_MASK


def decode_mmsi(payload, fragment_number) -> Optional[int]:
    """
    Decodes the MMSI from an armored AIS payload.

    Args:
        payload: armored payload field
        fragment_number: fragment number field (str or int); only fragment 1
            carries the message header

    Returns:
        int MMSI, or None if the fragment is not the first one, the payload
        is too short, or the decoded MMSI is 0. Never raises.
    """
    try:
        if int(str(fragment_number).strip()) != 1:
            return None
    except (TypeError, ValueError):
        return None
    if not isinstance(payload, str) or len(payload) < config.AIS_PREFIX_CHARS:
        return None

    prefix = payload[:config.AIS_PREFIX_CHARS]
    bit_count = len(prefix) * 6
    if bit_count < config.AIS_MMSI_LAST_BIT:
        return None

    bits = 0
    for char in prefix:
        bits = (bits << 6) | unarmor_char(char)

    mmsi_width = config.AIS_MMSI_LAST_BIT - config.AIS_MMSI_FIRST_BIT
    mmsi = (bits >> (bit_count - config.AIS_MMSI_LAST_BIT)) & ((1 << mmsi_width) - 1)
    return mmsi if mmsi > 0 else None


def extract_mmsi(sentence) -> Optional[str]:
    """
    Extracts the MMSI from a full VDM/VDO sentence (raw text or SentenceHeader).

    Returns:
        str MMSI (used as throttle key) or None when it cannot be decoded
    """
    header = sentence if isinstance(sentence, SentenceHeader) else tokenize(sentence)
    if not header.has_fields(config.AIS_MIN_FIELDS):
        return None
    mmsi = decode_mmsi(header.field(AIS_PAYLOAD_FIELD), header.field(AIS_FRAGMENT_NUMBER_FIELD))
    if mmsi is None:
        logger.debug(f"Undecodable AIS payload: {header.fields[:AIS_PAYLOAD_FIELD + 1]}")
        return None
    return str(mmsi)

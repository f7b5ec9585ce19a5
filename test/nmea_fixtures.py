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
Sentence builders and fake clocks shared by the tests.

RMC/GGA are rendered by pynmea2 so fixtures carry valid checksums; other
sentence types go through the same checksum routine.
"""
from datetime import datetime, timedelta, timezone

import pynmea2

# Reference AIS sentence, type 1 position report from MMSI 367380120
AIS_REFERENCE_SENTENCE = '!AIVDM,1,1,,B,15NG6V0P01G?cFhE`R2IU?wn28R>,0*05'
AIS_REFERENCE_MMSI = 367380120


def to_dm(value, degree_digits):
    """Decimal degrees -> NMEA ddmm.mmmm string (sign dropped)."""
    value = abs(value)
    degrees = int(value)
    minutes = (value - degrees) * 60
    return f"{degrees:0{degree_digits}d}{minutes:07.4f}"


def nmea(body, start='$'):
    """Wraps a sentence body ('GPXXX,...') with start char and checksum."""
    return f"{start}{body}*{pynmea2.NMEASentence.checksum(body):02X}"


def rmc(lat=10.0, lon=20.0, time='120000', date='010524', status='A', sog='5.0', talker='GP'):
    msg = pynmea2.RMC(talker, 'RMC', (
        time, status,
        to_dm(lat, 2), 'N' if lat >= 0 else 'S',
        to_dm(lon, 3), 'E' if lon >= 0 else 'W',
        sog, '90.0', date, '', '',
    ))
    return str(msg)


def gga(lat=10.0, lon=20.0, time='120000', quality='1', talker='GP'):
    msg = pynmea2.GGA(talker, 'GGA', (
        time,
        to_dm(lat, 2), 'N' if lat >= 0 else 'S',
        to_dm(lon, 3), 'E' if lon >= 0 else 'W',
        quality, '08', '0.9', '10.0', 'M', '40.0', 'M', '', '',
    ))
    return str(msg)


def gll(lat=10.0, lon=20.0, time='120000'):
    return nmea(f"GPGLL,{to_dm(lat, 2)},N,{to_dm(lon, 3)},E,{time},A,A")


def vtg(sog_kn=5.0):
    return nmea(f"GPVTG,90.0,T,,M,{sog_kn},N,{sog_kn * 1.852:.1f},K,A")


def mwv(angle=45.0, reference='T', speed=10.0, unit='N', status='A'):
    return nmea(f"WIMWV,{angle},{reference},{speed},{unit},{status}")


def mwd(speed_kn=12.0):
    return nmea(f"WIMWD,270.0,T,268.0,M,{speed_kn},N,{speed_kn * 0.514444:.1f},M")


def rpm(value=1500, status='A'):
    return nmea(f"ERRPM,E,1,{value},10.0,{status}")


def _armor(value):
    return chr(value + 48 if value < 40 else value + 56)


def ais_payload(mmsi, message_type=1):
    """Minimal 168-bit armored payload carrying message type and MMSI."""
    bits = f"{message_type:06b}" + '00' + f"{mmsi:030b}"
    bits = bits.ljust(168, '0')
    return ''.join(_armor(int(bits[i:i + 6], 2)) for i in range(0, len(bits), 6))


def vdm(mmsi, channel='A', fragment='1', count='1', talker='AIVDM'):
    return nmea(f"{talker},{count},{fragment},,{channel},{ais_payload(mmsi)},0", start='!')


def vdo(mmsi=123456789):
    return vdm(mmsi, talker='AIVDO')


def log_line(ts, sentence):
    """Logged line with the writer's timestamp prefix."""
    return f"{ts.strftime('%Y-%m-%dT%H:%M:%S')}.000Z {sentence}"


class FakeClock:
    """Monotonic clock replacement, advanced manually."""

    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class FakeUtcNow:
    """Wall clock replacement returning a settable aware datetime."""

    def __init__(self, start=None):
        self.now = start or datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)

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
Localization strings for NMEA0183 Logger.
English dictionary for operator-facing messages.
"""

# Error messages
ERRORS = {
    'write_failed': "Log error: cannot write {path}: {error}",
    'open_failed': "Log error: cannot open log file in {path}: {error}",
    'close_failed': "Log error: cannot close {path}: {error}",
    'invalid_filename': "Invalid",
    'not_found': "Not found",
    'file_not_found': "File not found: {file_path}",
    'port_busy': "NMEA logger: port {port} busy, trying {next_port}",
    'no_free_port': "NMEA logger: no free port in {first}-{last}",
    'api_error': "NMEA logger API error: {error}",
    'api_unavailable': "NMEA logger: public API unavailable, logging continues: {error}",
    'invalid_option': "Invalid option {name}: {value!r}",
    'invalid_source': "Invalid TCP source {source!r}, expected HOST:PORT",
}

# Plugin status line
STATUS = {
    'listening': "Listening...",
    'started': "Started. Public API on port {port}",
    'stopped': "Stopped",
}

# Configuration schema titles
SCHEMA = {
    'title': "NMEA0183 Logger",
    'description': "Public API on separate port (default {port}).",
    'log_directory': "Log Directory",
    'log_directory_help': "Leave empty for default.",
    'api_port': "Public API Port",
    'api_port_help': "Default: {port}",
    'include_timestamp': "Include ISO Timestamp",
    'throttle_header': "── Throttle & Dedup ──────",
    'ais_throttle': "AIS Throttle (VDM)",
    'ais_throttle_help': "Max 1 message per MMSI per X seconds. 0 = disabled. Recommended: 30",
    'gps_dedup': "GPS Dedup: skip GGA/GLL when RMC available",
    'gps_dedup_help': "RMC contains position + SOG + COG + time. GGA and GLL are redundant.",
    'vdo_heartbeat': "VDO Heartbeat (sec)",
    'vdo_heartbeat_help': "When GPS dedup is on: log 1 VDO per X sec as AIS transmit check. 0 = skip all VDO. Default: 180",
    'file_header': "── File Management ───────",
    'max_file_size': "Max File Size (MB)",
    'max_file_size_help': "Start a new part file when this size is reached. 0 = unlimited. Recommended: 50",
    'filter_header': "── Sentence Filter ───────",
    'log_all': "Log ALL (override)",
    'log_unknown': "Log Unknown Types",
    'group_header': "── {group} ──",
}

# Labels for the track plot
LABELS = {
    'track_title': "Track",
    'sog_label': "SOG (kn)",
    'weather_sample': "2 h sample",
    'summary': "{distance:.1f} nm | {duration} h | avg {sog} kn",
}

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
Configuration file for NMEA0183 Logger.
Contains all constants and default settings for logging and analysis.

Note: Runtime options supplied by the host (log directory, throttle seconds,
per-sentence flags, ...) are parsed in core/options.py. This module contains
only defaults and constants.
"""
import os

# ============================================================
# Defaults for runtime options
# ============================================================
DEFAULT_LOG_DIR = os.path.join(os.path.expanduser('~'), '.nmea0183-logger', 'logs')
DEFAULT_API_PORT = 3033
DEFAULT_INCLUDE_TIMESTAMP = True
DEFAULT_AIS_THROTTLE_SEC = 30      # Max 1 VDM per MMSI per N seconds, 0 = disabled
DEFAULT_GPS_DEDUP = True           # Skip GGA/GLL once RMC is available
DEFAULT_VDO_HEARTBEAT_SEC = 180    # Keep 1 VDO per N seconds when dedup is on, 0 = skip all
DEFAULT_MAX_FILE_SIZE_MB = 50      # Start a new part file at this size, 0 = unlimited
DEFAULT_LOG_ALL = False
DEFAULT_LOG_UNKNOWN = True

BYTES_PER_MB = 1000 * 1000

# ============================================================
# Log files
# ============================================================
LOG_FILE_PREFIX = 'nmea0183_'
LOG_FILE_SUFFIX = '.log'
LOG_PART_SEPARATOR = '_part'
LOG_FILE_PATTERN = r'^nmea0183_(\d{4}-\d{2}-\d{2})(?:_part(\d+))?\.log$'
LOG_FILE_ENCODING = 'utf-8'

# ============================================================
# Throttle state maintenance
# ============================================================
THROTTLE_MAX_AGE_FACTOR = 10        # Purge MMSI entries older than N x throttle interval
THROTTLE_MIN_MAX_AGE_SEC = 300      # ... but never younger than 5 minutes
THROTTLE_SWEEP_BASE_SEC = 30        # Base interval for the sweep when throttling is disabled

# ============================================================
# Background tasks
# ============================================================
STATUS_INTERVAL_SEC = 10.0
CLEANUP_INTERVAL_SEC = 60.0
STATUS_TOP_CODES = 8                # Sentence codes shown in the status line

# ============================================================
# Public API
# ============================================================
API_HOST = '0.0.0.0'
API_PORT_ATTEMPTS = 10              # Ports tried after the configured one is busy

# ============================================================
# Sentence tokenizer
# ============================================================
MIN_SENTENCE_LENGTH = 6
SENTENCE_START_CHARS = ('$', '!')
FIELD_DELIMITER = ','
CHECKSUM_DELIMITER = '*'
UNKNOWN_SENTENCE = 'UNKNOWN'

# ============================================================
# AIS payload decoding
# ============================================================
AIS_MIN_FIELDS = 7
AIS_PREFIX_CHARS = 7               # 7 chars x 6 bits = 42 bits, enough for MMSI
AIS_MMSI_FIRST_BIT = 8
AIS_MMSI_LAST_BIT = 38             # exclusive

# ============================================================
# Log analysis
# ============================================================
EARTH_RADIUS_NM = 3440.065
MAX_LEG_DISTANCE_NM = 10.0         # Larger jumps are treated as gaps/noise
MAX_DISPLAY_POINTS = 2000          # Track is downsampled above this
MAX_VTG_SOG_KN = 100.0
MAX_WIND_SPEED_KN = 200.0
MS_TO_KNOTS = 1.94384
KMH_TO_KNOTS = 0.539957
ENGINE_RUNNING_RPM = 100           # Minimum RPM counted as engine running
MAX_ENGINE_GAP_HOURS = 1.0         # Larger gaps are data outages, not running time
WEATHER_BUCKET_HOURS = 2
WEATHER_POSITION_DECIMALS = 4
SUMMARY_DECIMALS = 2
NMEA_CENTURY_PIVOT = 80            # Two-digit years below this are 20xx

# ============================================================
# Sentence types
# ============================================================
SENTENCE_TYPES = {
    'GGA': 'GPS Fix', 'GLL': 'Geo Position', 'RMC': 'Rec Min Nav', 'RMB': 'Rec Min Nav WPT',
    'VTG': 'Track/Speed', 'GSA': 'GPS DOP', 'GSV': 'Satellites', 'ZDA': 'Time/Date', 'GNS': 'GNSS Fix',
    'HDG': 'Heading Dev Var', 'HDM': 'Heading Mag', 'HDT': 'Heading True',
    'MWV': 'Wind Speed/Angle', 'MWD': 'Wind Dir/Speed', 'VWR': 'Relative Wind',
    'DBT': 'Depth Transducer', 'DBS': 'Depth Surface', 'DBK': 'Depth Keel', 'DPT': 'Depth',
    'VHW': 'Water Speed', 'APB': 'Autopilot B', 'BOD': 'Bearing Orig-Dest',
    'BWC': 'Bearing Dist WPT', 'BWR': 'Bearing Dist Rhumb', 'RTE': 'Routes', 'WPL': 'Waypoint',
    'XTE': 'Cross Track', 'XDR': 'Transducer', 'RSA': 'Rudder Angle', 'RPM': 'Revolutions',
    'MTW': 'Water Temp', 'MTA': 'Air Temp', 'MMB': 'Barometer', 'MDA': 'Meteo Composite',
    'VDM': 'AIS Message', 'VDO': 'AIS Own-Vessel', 'TXT': 'Text', 'TTM': 'Tracked Target',
    'TLL': 'Target Lat/Lon',
}

# Groups drive the layout of the configuration schema
SENTENCE_GROUPS = [
    ('Navigation', ['GGA', 'GLL', 'RMC', 'RMB', 'VTG', 'GSA', 'GSV', 'ZDA', 'GNS']),
    ('Compass', ['HDG', 'HDM', 'HDT']),
    ('Wind', ['MWV', 'MWD', 'VWR']),
    ('Depth', ['DBT', 'DBS', 'DBK', 'DPT']),
    ('Speed', ['VHW']),
    ('WPT / Route / AP', ['APB', 'BOD', 'BWC', 'BWR', 'RTE', 'WPL', 'XTE', 'XDR', 'RSA', 'RPM']),
    ('Environment', ['MTW', 'MTA', 'MMB', 'MDA']),
    ('AIS', ['VDM', 'VDO']),
    ('Misc', ['TXT', 'TTM', 'TLL']),
]

# Event name used on the host sentence bus
SENTENCE_EVENT = 'nmea0183'

# ============================================================
# Track visualization
# ============================================================
TRACK_COLORMAP = 'viridis'
TRACK_LINE_WIDTH = 2
TRACK_DPI = 150

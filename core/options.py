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
Runtime options supplied by the host, and the schema describing them.

Options arrive as a flat dict (or JSON file) whose keys are the schema
property names::

    {
        "log_directory": "/var/log/nmea",
        "ais_throttle_sec": 30,
        "gps_dedup": true,
        "max_file_size_mb": 50,
        "log_GSV": false,
        ...
    }

Per-sentence flags default to enabled, matching the schema defaults.
"""
import json
import logging
from dataclasses import dataclass, field
from typing import FrozenSet

try:
    from .. import config
    from ..locales.strings import ERRORS, SCHEMA
except ImportError:
    import config
    from locales.strings import ERRORS, SCHEMA

logger = logging.getLogger(__name__)

TYPE_FLAG_PREFIX = 'log_'
_NON_TYPE_FLAGS = frozenset(('log_directory', 'log_all', 'log_unknown'))


def _as_number(name, value, default):
    if value is None or value == '':
        return default
    if isinstance(value, bool):
        raise ValueError(ERRORS['invalid_option'].format(name=name, value=value))
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValueError(ERRORS['invalid_option'].format(name=name, value=value))


def _as_bool(value, default):
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in ('1', 'true', 'yes', 'on')
    return bool(value)


@dataclass(frozen=True)
class LoggerOptions:
    log_directory: str = ''
    api_port: int = config.DEFAULT_API_PORT
    include_timestamp: bool = config.DEFAULT_INCLUDE_TIMESTAMP
    ais_throttle_sec: float = config.DEFAULT_AIS_THROTTLE_SEC
    gps_dedup: bool = config.DEFAULT_GPS_DEDUP
    vdo_heartbeat_sec: float = config.DEFAULT_VDO_HEARTBEAT_SEC
    max_file_size_mb: float = config.DEFAULT_MAX_FILE_SIZE_MB
    log_all: bool = config.DEFAULT_LOG_ALL
    log_unknown: bool = config.DEFAULT_LOG_UNKNOWN
    enabled_types: FrozenSet[str] = field(default_factory=lambda: frozenset(config.SENTENCE_TYPES))

    @property
    def max_bytes(self) -> int:
        if self.max_file_size_mb <= 0:
            return 0
        return int(self.max_file_size_mb * config.BYTES_PER_MB)

    @property
    def resolved_log_directory(self) -> str:
        return self.log_directory or config.DEFAULT_LOG_DIR

    def is_type_enabled(self, sentence_type: str) -> bool:
        return sentence_type in self.enabled_types

    @classmethod
    def from_dict(cls, data=None):
        """
        Builds options from a host configuration dict.

        Raises:
            ValueError: if a numeric option is not a number
        """
        data = data or {}

        enabled = set()
        for sentence_type in config.SENTENCE_TYPES:
            if _as_bool(data.get(f"{TYPE_FLAG_PREFIX}{sentence_type}"), True):
                enabled.add(sentence_type)
        # Flags may also enable types missing from the known table
        for key, value in data.items():
            if key.startswith(TYPE_FLAG_PREFIX) and key not in _NON_TYPE_FLAGS:
                if _as_bool(value, False):
                    enabled.add(key[len(TYPE_FLAG_PREFIX):])

        port = _as_number('api_port', data.get('api_port'), config.DEFAULT_API_PORT)
        return cls(
            log_directory=str(data.get('log_directory') or '').strip(),
            api_port=int(port),
            include_timestamp=_as_bool(data.get('include_timestamp'), config.DEFAULT_INCLUDE_TIMESTAMP),
            ais_throttle_sec=_as_number('ais_throttle_sec', data.get('ais_throttle_sec'),
                                        config.DEFAULT_AIS_THROTTLE_SEC),
            gps_dedup=_as_bool(data.get('gps_dedup'), config.DEFAULT_GPS_DEDUP),
            vdo_heartbeat_sec=_as_number('vdo_heartbeat_sec', data.get('vdo_heartbeat_sec'),
                                         config.DEFAULT_VDO_HEARTBEAT_SEC),
            max_file_size_mb=_as_number('max_file_size_mb', data.get('max_file_size_mb'),
                                        config.DEFAULT_MAX_FILE_SIZE_MB),
            log_all=_as_bool(data.get('log_all'), config.DEFAULT_LOG_ALL),
            log_unknown=_as_bool(data.get('log_unknown'), config.DEFAULT_LOG_UNKNOWN),
            enabled_types=frozenset(enabled),
        )

    @classmethod
    def from_json_file(cls, path):
        with open(path, 'r', encoding='utf-8') as f:
            return cls.from_dict(json.load(f))


def options_schema():
    """
    JSON-schema-like description of the options for the host configuration UI.

    Header entries (keys starting with '_h') are display-only separators.
    """
    def header(title):
        return {'type': 'string', 'title': title, 'description': ' ', 'default': ' '}

    def type_flag(sentence_type):
        return {
            'type': 'boolean',
            'title': f"{sentence_type} – {config.SENTENCE_TYPES.get(sentence_type, sentence_type)}",
            'default': True,
        }

    properties = {
        'log_directory': {
            'type': 'string', 'title': SCHEMA['log_directory'],
            'description': SCHEMA['log_directory_help'], 'default': '',
        },
        'api_port': {
            'type': 'number', 'title': SCHEMA['api_port'],
            'description': SCHEMA['api_port_help'].format(port=config.DEFAULT_API_PORT),
            'default': config.DEFAULT_API_PORT,
        },
        'include_timestamp': {
            'type': 'boolean', 'title': SCHEMA['include_timestamp'],
            'default': config.DEFAULT_INCLUDE_TIMESTAMP,
        },
        '_ht': header(SCHEMA['throttle_header']),
        'ais_throttle_sec': {
            'type': 'number', 'title': SCHEMA['ais_throttle'],
            'description': SCHEMA['ais_throttle_help'], 'default': config.DEFAULT_AIS_THROTTLE_SEC,
        },
        'gps_dedup': {
            'type': 'boolean', 'title': SCHEMA['gps_dedup'],
            'description': SCHEMA['gps_dedup_help'], 'default': config.DEFAULT_GPS_DEDUP,
        },
        'vdo_heartbeat_sec': {
            'type': 'number', 'title': SCHEMA['vdo_heartbeat'],
            'description': SCHEMA['vdo_heartbeat_help'], 'default': config.DEFAULT_VDO_HEARTBEAT_SEC,
        },
        '_hf': header(SCHEMA['file_header']),
        'max_file_size_mb': {
            'type': 'number', 'title': SCHEMA['max_file_size'],
            'description': SCHEMA['max_file_size_help'], 'default': config.DEFAULT_MAX_FILE_SIZE_MB,
        },
        '_hs': header(SCHEMA['filter_header']),
        'log_all': {'type': 'boolean', 'title': SCHEMA['log_all'], 'default': config.DEFAULT_LOG_ALL},
        'log_unknown': {'type': 'boolean', 'title': SCHEMA['log_unknown'], 'default': config.DEFAULT_LOG_UNKNOWN},
    }

    for index, (group, types) in enumerate(config.SENTENCE_GROUPS, start=1):
        properties[f"_h{index}"] = header(SCHEMA['group_header'].format(group=group))
        for sentence_type in types:
            properties[f"{TYPE_FLAG_PREFIX}{sentence_type}"] = type_flag(sentence_type)

    return {
        'type': 'object',
        'title': SCHEMA['title'],
        'description': SCHEMA['description'].format(port=config.DEFAULT_API_PORT),
        'properties': properties,
    }

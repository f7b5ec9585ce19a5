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

"""Shared pytest fixtures."""
import os
import sys

import pytest

# Add parent directory to path for imports
PARENT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PARENT_DIR not in sys.path:
    sys.path.insert(0, PARENT_DIR)

from core.options import LoggerOptions
from nmea_fixtures import FakeClock, FakeUtcNow


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def utc_now():
    return FakeUtcNow()


@pytest.fixture
def log_dir(tmp_path):
    return str(tmp_path / 'logs')


@pytest.fixture
def make_options(log_dir):
    """Builds LoggerOptions from host-style keys, logging into log_dir."""
    def build(**overrides):
        data = {'log_directory': log_dir}
        data.update(overrides)
        return LoggerOptions.from_dict(data)
    return build

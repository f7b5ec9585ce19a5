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

"""Exceptions raised by the log query interface."""


class LogQueryError(Exception):
    """Base class for client-visible query failures."""
    status = 500


class InvalidLogNameError(LogQueryError):
    """File name does not match the log file naming pattern."""
    status = 400


class LogNotFoundError(LogQueryError):
    """Valid log file name, but no such file in the log directory."""
    status = 404

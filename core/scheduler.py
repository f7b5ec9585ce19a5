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

"""Periodic background work on the asyncio event loop."""
import asyncio
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class PeriodicTask:
    """
    Runs `callback` every `interval` seconds as a one-shot timer that re-arms
    itself after each run.

    The callback runs on the loop thread, between sentence callbacks, and
    must return quickly. Exceptions are logged and do not stop the task.
    start() and stop() are idempotent.
    """

    def __init__(self, name: str, interval: float, callback: Callable[[], object]):
        if interval <= 0:
            raise ValueError(f"Interval must be positive, got {interval}")
        self.name = name
        self.interval = interval
        self.callback = callback
        self.runs = 0
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._handle: Optional[asyncio.TimerHandle] = None

    @property
    def running(self) -> bool:
        return self._handle is not None

    def start(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        if self._handle is not None:
            return
        self._loop = loop or asyncio.get_running_loop()
        self._schedule()
        logger.debug(f"Task {self.name} started, every {self.interval}s")

    def _schedule(self):
        self._handle = self._loop.call_later(self.interval, self._run)

    def _run(self):
        if self._handle is None:
            return
        try:
            self.callback()
        except Exception as e:
            logger.error(f"Task {self.name} failed: {e}")
        self.runs += 1
        if self._handle is not None:
            self._schedule()

    def stop(self):
        handle, self._handle = self._handle, None
        if handle is not None:
            handle.cancel()
            logger.debug(f"Task {self.name} stopped")

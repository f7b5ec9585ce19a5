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
Throttle and dedup decisions for incoming sentences.

Three rules, evaluated by sentence type:

1. VDM   - at most one message per MMSI per ``ais_throttle_sec``.
2. GGA / GLL - dropped for the rest of the run once an active RMC fix has
   been seen (``gps_dedup``). RMC carries position, SOG, COG and time, so the
   other two are redundant.
3. VDO   - with dedup on and a fix seen, kept once per
   ``vdo_heartbeat_sec`` as a check that the own AIS transponder is alive
   (0 = drop all).

Everything else is always kept. Undecodable AIS payloads are kept as well:
a sentence is never dropped because it could not be evaluated.
"""
import logging
import time
from typing import Callable, Dict, Optional

try:
    from .. import config
    from ..parsers.ais import extract_mmsi
    from ..parsers.sentence import SentenceHeader, tokenize
except ImportError:
    import config
    from parsers.ais import extract_mmsi
    from parsers.sentence import SentenceHeader, tokenize

logger = logging.getLogger(__name__)

RMC_STATUS_FIELD = 2
RMC_STATUS_ACTIVE = 'A'
DEDUP_TYPES = frozenset(('GGA', 'GLL'))


class ThrottleGovernor:
    """
    Owns all throttle state for one logging run.

    Args:
        ais_throttle_sec: VDM interval per MMSI in seconds, <= 0 disables
        gps_dedup: enable GGA/GLL suppression and the VDO heartbeat
        vdo_heartbeat_sec: VDO interval in seconds, 0 drops every VDO
        clock: time source in seconds (monotonic by default)
    """

    def __init__(self, ais_throttle_sec=config.DEFAULT_AIS_THROTTLE_SEC,
                 gps_dedup=config.DEFAULT_GPS_DEDUP,
                 vdo_heartbeat_sec=config.DEFAULT_VDO_HEARTBEAT_SEC,
                 clock: Callable[[], float] = time.monotonic):
        self.ais_throttle_sec = ais_throttle_sec or 0
        self.gps_dedup = bool(gps_dedup)
        self.vdo_heartbeat_sec = vdo_heartbeat_sec if vdo_heartbeat_sec is not None else config.DEFAULT_VDO_HEARTBEAT_SEC
        self._clock = clock

        self._vessels: Dict[str, float] = {}
        self._vdo_last_seen: Optional[float] = None
        self._has_fix = False
        self.throttled_count = 0
        self.dedup_count = 0

    @classmethod
    def from_options(cls, options, clock: Callable[[], float] = time.monotonic):
        return cls(
            ais_throttle_sec=options.ais_throttle_sec,
            gps_dedup=options.gps_dedup,
            vdo_heartbeat_sec=options.vdo_heartbeat_sec,
            clock=clock,
        )

    @property
    def has_fix(self) -> bool:
        return self._has_fix

    @property
    def tracked_vessels(self) -> int:
        return len(self._vessels)

    def last_seen(self, mmsi) -> Optional[float]:
        return self._vessels.get(str(mmsi))

    def decide(self, sentence, sentence_type: str) -> bool:
        """
        Decides whether a sentence is kept.

        Args:
            sentence: raw sentence or its SentenceHeader
            sentence_type: type code, e.g. 'VDM', 'RMC'

        Returns:
            bool: True to keep, False to drop
        """
        if sentence_type == 'VDM':
            return self._decide_vdm(sentence)

        if not self.gps_dedup:
            return True

        if sentence_type == 'RMC':
            if not self._has_fix and self._is_active_fix(sentence):
                self._has_fix = True
                logger.info("Active RMC fix seen, suppressing GGA/GLL from now on")
            return True

        if sentence_type in DEDUP_TYPES and self._has_fix:
            self.dedup_count += 1
            return False

        if sentence_type == 'VDO' and self._has_fix:
            return self._decide_vdo()

        return True

    def _decide_vdm(self, sentence) -> bool:
        if self.ais_throttle_sec <= 0:
            return True
        mmsi = extract_mmsi(sentence)
        if mmsi is None:
            return True

        now = self._clock()
        last = self._vessels.get(mmsi)
        if last is not None and now - last < self.ais_throttle_sec:
            self.throttled_count += 1
            logger.debug(f"VDM throttled for MMSI {mmsi}")
            return False
        self._vessels[mmsi] = now
        return True

    def _decide_vdo(self) -> bool:
        if self.vdo_heartbeat_sec <= 0:
            self.dedup_count += 1
            return False

        now = self._clock()
        if self._vdo_last_seen is not None and now - self._vdo_last_seen < self.vdo_heartbeat_sec:
            self.dedup_count += 1
            return False
        self._vdo_last_seen = now
        return True

    @staticmethod
    def _is_active_fix(sentence) -> bool:
        header = sentence if isinstance(sentence, SentenceHeader) else tokenize(sentence)
        status = header.field(RMC_STATUS_FIELD)
        return status == RMC_STATUS_ACTIVE

    @property
    def max_age_sec(self) -> float:
        """Age after which an MMSI entry is purged by sweep()."""
        base = self.ais_throttle_sec if self.ais_throttle_sec > 0 else config.THROTTLE_SWEEP_BASE_SEC
        return max(base * config.THROTTLE_MAX_AGE_FACTOR, config.THROTTLE_MIN_MAX_AGE_SEC)

    def sweep(self) -> int:
        """
        Removes MMSI entries not accepted for longer than max_age_sec.

        Returns:
            int: number of purged entries
        """
        now = self._clock()
        max_age = self.max_age_sec
        stale = [mmsi for mmsi, seen in self._vessels.items() if now - seen > max_age]
        for mmsi in stale:
            del self._vessels[mmsi]
        if stale:
            logger.debug(f"Purged {len(stale)} stale MMSI entries, {len(self._vessels)} tracked")
        return len(stale)

    def reset(self):
        """Clears all state (used when the logger is stopped)."""
        self._vessels.clear()
        self._vdo_last_seen = None
        self._has_fix = False
        self.throttled_count = 0
        self.dedup_count = 0

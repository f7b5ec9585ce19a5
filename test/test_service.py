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

"""Tests for the periodic tasks, the sentence bus and the logger lifecycle."""
import os
import sys

import pytest

# Add parent directory to path for imports
PARENT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PARENT_DIR not in sys.path:
    sys.path.insert(0, PARENT_DIR)

import asyncio

from core.event_bus import EventBus
from core.scheduler import PeriodicTask
from core.service import LoggerService, format_status
import config
from nmea_fixtures import gll, rmc, vdm


# ============================================================
# PeriodicTask
# ============================================================

def test_periodic_task_runs_until_stopped():
    calls = []

    async def scenario():
        task = PeriodicTask('tick', 0.01, lambda: calls.append(1))
        task.start()
        task.start()
        await asyncio.sleep(0.065)
        task.stop()
        task.stop()
        seen = len(calls)
        await asyncio.sleep(0.03)
        return task, seen

    task, seen = asyncio.run(scenario())
    assert seen >= 2
    assert len(calls) == seen
    assert task.runs == seen
    assert not task.running


def test_periodic_task_survives_callback_errors():
    def failing():
        raise RuntimeError("boom")

    async def scenario():
        task = PeriodicTask('failing', 0.01, failing)
        task.start()
        await asyncio.sleep(0.045)
        task.stop()
        return task.runs

    assert asyncio.run(scenario()) >= 2


@pytest.mark.parametrize("interval", [0, -1])
def test_periodic_task_rejects_bad_interval(interval):
    with pytest.raises(ValueError):
        PeriodicTask('bad', interval, lambda: None)


# ============================================================
# EventBus
# ============================================================

def test_event_bus_subscribe_publish_unsubscribe():
    bus = EventBus()
    received = []
    unsubscribe = bus.subscribe('nmea0183', received.append)
    bus.publish('nmea0183', 'a')
    bus.publish('other', 'b')
    unsubscribe()
    bus.publish('nmea0183', 'c')
    assert received == ['a']
    assert bus.subscriber_count('nmea0183') == 0


def test_event_bus_isolates_failing_subscribers():
    bus = EventBus()
    received = []

    def failing(_):
        raise RuntimeError("boom")

    bus.subscribe('nmea0183', failing)
    bus.subscribe('nmea0183', received.append)
    bus.publish('nmea0183', 'a')
    assert received == ['a']


# ============================================================
# Status line
# ============================================================

def test_status_listening_before_first_sentence():
    assert format_status(3033, None, 0, 0, 0, 0, []) == 'Listening...'


def test_status_line_format():
    line = format_status(3033, '2024-05-01', 2, 12_345_678, 4, 7, [('GPRMC', 120), ('AIVDM', 80)])
    assert line == 'API :3033 | 2024-05-01 p2 12.3MB | thr:4 | dup:7 | GPRMC:120 AIVDM:80'


def test_status_line_without_counters_or_port():
    line = format_status(None, '2024-05-01', 0, 0, 0, 0, [('GPRMC', 1)])
    assert line == 'API :? | 2024-05-01 0.0MB | GPRMC:1'


# ============================================================
# LoggerService
# ============================================================

def test_service_logs_sentences_from_bus(make_options, utc_now, clock):
    statuses = []

    async def scenario():
        service = LoggerService(make_options(), status_sink=statuses.append, now=utc_now, clock=clock)
        service.start()
        assert service.bus.subscriber_count(config.SENTENCE_EVENT) == 1

        service.bus.publish(config.SENTENCE_EVENT, rmc())
        service.bus.publish(config.SENTENCE_EVENT, gll())
        service.bus.publish(config.SENTENCE_EVENT, vdm(211234560))
        service.bus.publish(config.SENTENCE_EVENT, vdm(211234560))
        service.api_port = 3033
        line = service.status_line()
        stats = service.store.writer_stats()
        path = service.writer.current_path

        service.stop()
        service.stop()
        return service, line, stats, path

    service, line, stats, path = asyncio.run(scenario())

    assert line == 'API :3033 | 2024-05-01 0.0MB | thr:1 | dup:1 | AIVDM:2 GPRMC:1 GPGLL:1'
    assert stats['sentence_stats'] == {'GPRMC': 1, 'GPGLL': 1, 'AIVDM': 2}
    assert stats['tracked_mmsis'] == 1
    with open(path) as f:
        assert len(f.read().splitlines()) == 2

    assert not service.running
    assert service.bus.subscriber_count(config.SENTENCE_EVENT) == 0
    assert not service.writer.is_open


def test_service_status_task_reports(make_options, utc_now, monkeypatch):
    monkeypatch.setattr(config, 'STATUS_INTERVAL_SEC', 0.01)
    statuses = []

    async def scenario():
        service = LoggerService(make_options(), status_sink=statuses.append, now=utc_now)
        service.start()
        await asyncio.sleep(0.035)
        service.stop()

    asyncio.run(scenario())
    assert statuses[0] == 'Listening...'


def test_service_reports_write_errors_to_status_sink(make_options, tmp_path, utc_now):
    blocker = tmp_path / 'blocker'
    blocker.write_text('file')
    statuses = []

    service = LoggerService(make_options(), status_sink=statuses.append, now=utc_now)
    service.writer.log_dir = str(blocker / 'logs')
    service.handle_sentence(rmc())
    assert statuses and statuses[0].startswith('Log error')

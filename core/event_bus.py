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

"""In-process sentence bus standing in for the host's event channel."""
import logging
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)


class EventBus:
    def __init__(self):
        self._subscribers: Dict[str, List[Callable]] = {}

    def subscribe(self, event_type: str, handler: Callable[[Any], Any]) -> Callable[[], None]:
        """Registers a handler and returns a callable that removes it again."""
        self._subscribers.setdefault(event_type, []).append(handler)
        logger.debug(f"Subscribed to {event_type}: {getattr(handler, '__name__', handler)}")

        def unsubscribe():
            self.unsubscribe(event_type, handler)
        return unsubscribe

    def unsubscribe(self, event_type: str, handler: Callable):
        handlers = self._subscribers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def subscriber_count(self, event_type: str) -> int:
        return len(self._subscribers.get(event_type, []))

    def publish(self, event_type: str, data: Any = None):
        for handler in list(self._subscribers.get(event_type, [])):
            try:
                handler(data)
            except Exception as e:
                logger.error(f"Error handling event {event_type}: {e}")

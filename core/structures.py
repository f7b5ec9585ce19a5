#!/usr/bin/env python3
# NMEA0183 Logger - marine sentence logger and voyage analyzer
# Copyright (C) 2024 NMEA0183 Logger Contributors
#
# Shared data-structure definitions used across the logging and analysis
# pipeline.

"""
Core data structures used in the NMEA0183 Logger pipeline.

TrackPoint
----------
One position taken from an active RMC fix (or, for the first point only, a
GGA fix)::

    lat, lon   - signed decimal degrees
    time       - ISO-8601 UTC string or None
    sog        - speed over ground in knots or None

WeatherSample
-------------
Mean position of all timestamped fixes falling in one 2-hour UTC bucket.

NavigationSummary
-----------------
Produced by ``core.analyzer.analyze`` and consumed by the query interface,
the HTTP adapter and the track plot. Averages and extremes are None when no
sample contributed; counts and the cumulative distance are always present.
"""
from dataclasses import dataclass, field, asdict
from typing import List, Optional


@dataclass(frozen=True)
class TrackPoint:
    lat: float
    lon: float
    time: Optional[str] = None
    sog: Optional[float] = None


@dataclass(frozen=True)
class WeatherSample:
    hour: int
    lat: float
    lon: float


@dataclass
class NavigationSummary:
    track: List[TrackPoint] = field(default_factory=list)
    total_distance_nm: float = 0.0
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    duration_hours: Optional[float] = None
    sog_avg_kn: Optional[float] = None
    sog_max_kn: Optional[float] = None
    tws_avg_kn: Optional[float] = None
    tws_max_kn: Optional[float] = None
    twa_avg_deg: Optional[int] = None
    twa_min_deg: Optional[int] = None
    twa_max_deg: Optional[int] = None
    engine_hours: Optional[float] = None
    track_points: int = 0
    sog_samples: int = 0
    tws_samples: int = 0
    twa_samples: int = 0
    rpm_samples: int = 0
    weather_intervals: List[WeatherSample] = field(default_factory=list)

    def to_dict(self):
        """Plain JSON-serialisable dict (snake_case keys)."""
        return asdict(self)


# Unit conversion constants
SECONDS_PER_HOUR = 3600.0

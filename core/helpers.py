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
Helper functions for log analysis.
Geodesy, statistics and display downsampling used by core/analyzer.py.
"""
import logging
import math

import numpy as np

try:
    from .. import config
except ImportError:
    import config

logger = logging.getLogger(__name__)


def round_half_up(value, decimals=0):
    """
    Round halves towards +infinity (0.125 -> 0.13, 2.5 -> 3, -2.5 -> -2).

    Python's round() rounds halves to even, so it is not used for summary
    values.
    """
    if value is None:
        return None
    factor = 10 ** decimals
    rounded = math.floor(value * factor + 0.5) / factor
    return int(rounded) if decimals == 0 else rounded


def haversine_nm(lat1, lon1, lat2, lon2, radius_nm=None):
    """
    Great-circle distance in nautical miles.

    Accepts scalars or numpy arrays (element-wise).
    """
    if radius_nm is None:
        radius_nm = config.EARTH_RADIUS_NM
    lat1, lon1, lat2, lon2 = map(np.radians, (lat1, lon1, lat2, lon2))
    dlat = lat2 - lat1
    dlon = lon2 - lon1
    a = np.sin(dlat / 2) ** 2 + np.cos(lat1) * np.cos(lat2) * np.sin(dlon / 2) ** 2
    return 2 * radius_nm * np.arcsin(np.sqrt(np.clip(a, 0.0, 1.0)))


def calculate_leg_distances(positions):
    """
    Distances between consecutive positions.

    Args:
        positions: list of (lat, lon) tuples

    Returns:
        np.ndarray of len(positions) - 1 distances in nautical miles
    """
    if len(positions) < 2:
        return np.empty(0)
    coords = np.asarray(positions, dtype=float)
    return haversine_nm(coords[:-1, 0], coords[:-1, 1], coords[1:, 0], coords[1:, 1])


def calculate_track_distance(positions, max_leg_nm=None):
    """
    Cumulative track distance ignoring legs of max_leg_nm or more.

    Legs at or above the limit are GPS jumps or recording gaps; they add
    nothing to the distance.
    """
    if max_leg_nm is None:
        max_leg_nm = config.MAX_LEG_DISTANCE_NM
    legs = calculate_leg_distances(positions)
    if legs.size == 0:
        return 0.0
    return float(legs[legs < max_leg_nm].sum())


def mean_or_none(values):
    if not values:
        return None
    return float(np.mean(values))


def max_or_none(values):
    if not values:
        return None
    return float(np.max(values))


def min_or_none(values):
    if not values:
        return None
    return float(np.min(values))


def downsample_indices(count, max_points=None):
    """
    Indices kept when thinning a track for display.

    Every step-th index with step = ceil(count / max_points), plus the last
    index so the track always ends at the latest position.
    """
    if max_points is None:
        max_points = config.MAX_DISPLAY_POINTS
    if count <= max_points:
        return np.arange(count)
    step = math.ceil(count / max_points)
    indices = np.arange(0, count, step)
    if indices[-1] != count - 1:
        indices = np.append(indices, count - 1)
    return indices


def bucket_mean_positions(hours, lats, lons, bucket_hours=None, decimals=None):
    """
    Mean position per hour-of-day bucket.

    Args:
        hours: UTC hour (0..23) of each fix
        lats, lons: fix positions
        bucket_hours: bucket width in hours (default 2: 0, 2, ..., 22)
        decimals: rounding of the mean position

    Returns:
        list of (bucket_hour, lat, lon) ordered by hour
    """
    if bucket_hours is None:
        bucket_hours = config.WEATHER_BUCKET_HOURS
    if decimals is None:
        decimals = config.WEATHER_POSITION_DECIMALS
    if len(hours) == 0:
        return []

    buckets = (np.asarray(hours, dtype=int) // bucket_hours) * bucket_hours
    lats = np.asarray(lats, dtype=float)
    lons = np.asarray(lons, dtype=float)

    samples = []
    for bucket in np.unique(buckets):
        mask = buckets == bucket
        samples.append((
            int(bucket),
            round_half_up(float(lats[mask].mean()), decimals),
            round_half_up(float(lons[mask].mean()), decimals),
        ))
    return samples

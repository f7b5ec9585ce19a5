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
Track visualization module.

Renders the (display-downsampled) track of a NavigationSummary coloured by
speed over ground, with the 2-hourly weather sample positions on top.
"""
import logging
import os

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
from matplotlib.collections import LineCollection
import numpy as np

try:
    from .. import config
    from ..locales.strings import LABELS
except ImportError:
    import config
    from locales.strings import LABELS

logger = logging.getLogger(__name__)


def _track_arrays(track):
    lats = np.array([p.lat for p in track], dtype=float)
    lons = np.array([p.lon for p in track], dtype=float)
    sogs = np.array([p.sog if p.sog is not None else np.nan for p in track], dtype=float)
    return lats, lons, sogs


def _summary_text(summary):
    duration = summary.duration_hours if summary.duration_hours is not None else '-'
    sog = summary.sog_avg_kn if summary.sog_avg_kn is not None else '-'
    return LABELS['summary'].format(distance=summary.total_distance_nm, duration=duration, sog=sog)


def plot_track(summary, output_file, title=None):
    """
    Build track map for a NavigationSummary.

    Args:
        summary: NavigationSummary
        output_file: PNG path
        title: chart title (default: generic track title)

    Returns:
        str: path to saved file or None if the summary has no track
    """
    if not summary.track:
        return None

    lats, lons, sogs = _track_arrays(summary.track)

    fig, ax = plt.subplots(figsize=(8, 8))
    try:
        if len(lats) > 1 and not np.all(np.isnan(sogs)):
            points = np.column_stack([lons, lats]).reshape(-1, 1, 2)
            segments = np.concatenate([points[:-1], points[1:]], axis=1)
            seg_sog = np.nan_to_num(sogs[:-1], nan=0.0)
            lc = LineCollection(segments, cmap=config.TRACK_COLORMAP, linewidths=config.TRACK_LINE_WIDTH)
            lc.set_array(seg_sog)
            ax.add_collection(lc)
            fig.colorbar(lc, ax=ax, label=LABELS['sog_label'], shrink=0.7)
        else:
            ax.plot(lons, lats, '-', linewidth=config.TRACK_LINE_WIDTH, color='blue')

        ax.plot(lons[-1], lats[-1], 'o', color='red', markersize=6)

        if summary.weather_intervals:
            w_lats = [w.lat for w in summary.weather_intervals]
            w_lons = [w.lon for w in summary.weather_intervals]
            ax.scatter(w_lons, w_lats, marker='x', color='black', label=LABELS['weather_sample'], zorder=3)
            for sample in summary.weather_intervals:
                ax.annotate(f"{sample.hour:02d}h", (sample.lon, sample.lat),
                            textcoords='offset points', xytext=(4, 4), fontsize=8)
            ax.legend(loc='lower right')

        ax.autoscale_view()
        ax.set_aspect('equal', adjustable='datalim')
        ax.set_title(title or LABELS['track_title'])
        ax.set_xlabel(_summary_text(summary))
        ax.grid(True, alpha=0.3)

        directory = os.path.dirname(os.path.abspath(output_file))
        os.makedirs(directory, exist_ok=True)
        fig.savefig(output_file, dpi=config.TRACK_DPI, bbox_inches='tight')
    finally:
        plt.close(fig)

    logger.info(f"Track chart saved to {output_file}")
    return output_file

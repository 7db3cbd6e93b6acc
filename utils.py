"""Display helpers for match event analytics.

Aggregates are kept at full precision; everything here rounds or rescales for
presentation only and never feeds back into the engine.
"""
import math
from numbers import Real

import numpy as np

from constants import RATE_DISPLAY_PRECISION, XG_DISPLAY_PRECISION


# ── Number Formatting ───────────────────────────────────────────────────

def _as_finite(value):
    """Return *value* as a float, or None for missing/non-numeric input."""
    if value is None or isinstance(value, bool) or not isinstance(value, Real):
        return None
    number = float(value)
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _decimals(precision, fallback):
    try:
        return max(0, int(precision))
    except (TypeError, ValueError):
        return fallback


def format_rate(value, precision=RATE_DISPLAY_PRECISION, na="N/A") -> str:
    """Format a 0-100 rate such as completion or success as ``66.7%``."""
    number = _as_finite(value)
    if number is None:
        return na
    decimals = _decimals(precision, RATE_DISPLAY_PRECISION)
    return f"{number:.{decimals}f}%"


def format_xg(value, precision=XG_DISPLAY_PRECISION, na="N/A") -> str:
    """Format an xG/xA total or average, e.g. ``0.35``."""
    number = _as_finite(value)
    if number is None:
        return na
    decimals = _decimals(precision, XG_DISPLAY_PRECISION)
    return f"{number:.{decimals}f}"


def fmt_minute(minute) -> str:
    """Format a match minute as *M'*; empty for unknown minutes."""
    if minute is None or isinstance(minute, bool):
        return ""
    return f"{int(minute)}'"


# ── Summary Tables ──────────────────────────────────────────────────────

def summary_rows(summary, precision=RATE_DISPLAY_PRECISION):
    """Flatten a MatchSummary into (label, display value) pairs for a stats panel."""
    shots, passes, defensive = summary.shots, summary.passes, summary.defensive
    return [
        ("Events", str(summary.total_events)),
        ("Shots", str(shots.total)),
        ("Goals", str(shots.goals)),
        ("Total xG", format_xg(shots.total_xg)),
        ("Avg xG", format_xg(shots.avg_xg)),
        ("Passes", str(passes.total)),
        ("Completion", format_rate(passes.completion_rate, precision)),
        ("Total xA", format_xg(passes.total_xa)),
        ("Defensive Actions", str(defensive.total)),
        ("Defensive Success", format_rate(defensive.success_rate, precision)),
    ]


# ── Heatmap Scaling ─────────────────────────────────────────────────────

def normalize_density(density) -> np.ndarray:
    """Scale a density array into [0, 1] by its maximum; all zeros stay zero."""
    arr = np.asarray(density, dtype=float)
    peak = float(arr.max()) if arr.size else 0.0
    if peak <= 0:
        return np.zeros_like(arr)
    return arr / peak

"""Heuristic expected-value estimates applied while events are being tagged.

These are distance-to-goal heuristics, not fitted models. They fill xG and xA
for freshly tagged events when the tagger has no better figure.
"""

from __future__ import annotations

import math

from constants import (
    GOAL_X,
    GOAL_Y,
    XA_CAP,
    XA_DISTANCE_SCALE,
    XG_BODY_PART_FACTORS,
    XG_DISTANCE_SCALE,
    XG_GOAL_FLOOR,
)
from match_analytics.schema import Outcome


def distance_to_goal(x: float, y: float) -> float:
    """Euclidean distance in percentage units to the centre of the goal mouth."""
    return math.hypot(GOAL_X - x, GOAL_Y - y)


def estimate_xg(x: float, y: float, body_part: str = "foot", outcome: Outcome | str | None = None) -> float:
    """Distance-decayed xG in [0, 1], discounted for headers and other body parts.

    Scored shots never fall below ``XG_GOAL_FLOOR`` so a converted long-range
    effort still registers as a chance.
    """
    base = max(0.0, 1.0 - distance_to_goal(x, y) / XG_DISTANCE_SCALE)
    base *= XG_BODY_PART_FACTORS.get(str(body_part or "").lower(), 1.0)
    if outcome is not None and Outcome.parse(outcome) is Outcome.GOAL:
        base = max(base, XG_GOAL_FLOOR)
    return min(1.0, max(0.0, base))


def estimate_xa(end_x: float, end_y: float, completed: bool = True) -> float:
    """xA from where the pass arrives; incomplete passes create nothing."""
    if not completed:
        return 0.0
    base = max(0.0, 1.0 - distance_to_goal(end_x, end_y) / XA_DISTANCE_SCALE)
    return min(XA_CAP, base)

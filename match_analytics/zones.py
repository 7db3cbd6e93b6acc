"""Zone contract and classification helpers for tagged events."""

from __future__ import annotations

from constants import BUILD_UP_MAX_X, COORD_MAX, COORD_MIN, PROGRESSION_MAX_X
from match_analytics.schema import MatchEvent, Phase, Zone


def assert_zone_contract() -> None:
    """Validate that the thirds boundaries partition the pitch in order."""
    if not (COORD_MIN < BUILD_UP_MAX_X < PROGRESSION_MAX_X < COORD_MAX):
        raise ValueError(
            f"Invalid zone boundaries: expected {COORD_MIN} < BUILD_UP_MAX_X={BUILD_UP_MAX_X} "
            f"< PROGRESSION_MAX_X={PROGRESSION_MAX_X} < {COORD_MAX}."
        )


def classify_zone(x: float) -> Zone:
    """Return the third of the pitch that contains *x*.

    Intervals are half-open, so a point on a boundary belongs to the zone
    further up the pitch.
    """
    if x < BUILD_UP_MAX_X:
        return Zone.BUILD_UP
    if x < PROGRESSION_MAX_X:
        return Zone.PROGRESSION
    return Zone.FINISHING


def classify_event(event: MatchEvent) -> MatchEvent:
    """Return *event* with its zone derived from the origin x coordinate."""
    zone = classify_zone(event.x)
    if event.zone is zone:
        return event
    return event.with_zone(zone)


def parse_phase(raw: object) -> Phase:
    """Phases are tagged, not derived; only membership is checked."""
    return Phase.parse(raw)


assert_zone_contract()

"""Live match summary recomputed from the full event list."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Iterable

import pandas as pd

from match_analytics.schema import EVENT_CONTRACT, DefensiveAction, EventType, MatchEvent, Outcome, Phase, Zone, events_frame


@dataclass(frozen=True)
class ShotStats:
    total: int = 0
    goals: int = 0
    saved: int = 0
    missed: int = 0
    total_xg: float = 0.0
    avg_xg: float = 0.0


@dataclass(frozen=True)
class PassStats:
    total: int = 0
    completed: int = 0
    incomplete: int = 0
    completion_rate: float = 0.0
    total_xa: float = 0.0
    avg_xa: float = 0.0


@dataclass(frozen=True)
class DefensiveStats:
    total: int = 0
    successful: int = 0
    failed: int = 0
    success_rate: float = 0.0
    tackles: int = 0
    interceptions: int = 0
    blocks: int = 0
    clearances: int = 0


@dataclass(frozen=True)
class MatchSummary:
    """Aggregates at full precision; rounding is left to display code."""

    total_events: int = 0
    shots: ShotStats = field(default_factory=ShotStats)
    passes: PassStats = field(default_factory=PassStats)
    defensive: DefensiveStats = field(default_factory=DefensiveStats)
    phases: dict[Phase, int] = field(default_factory=lambda: {phase: 0 for phase in Phase})
    zones: dict[Zone, int] = field(default_factory=lambda: {zone: 0 for zone in Zone})

    def as_dict(self) -> dict[str, object]:
        return {
            "total_events": self.total_events,
            "shots": asdict(self.shots),
            "passes": asdict(self.passes),
            "defensive": asdict(self.defensive),
            "phases": {phase.value: count for phase, count in self.phases.items()},
            "zones": {zone.value: count for zone, count in self.zones.items()},
        }


def _mean(total: float, count: int) -> float:
    return total / count if count > 0 else 0.0


def _rate(part: int, whole: int) -> float:
    return part / whole * 100.0 if whole > 0 else 0.0


def _label_counts(series: pd.Series, labels) -> dict:
    counts = series.dropna().value_counts()
    return {label: int(counts.get(label.value, 0)) for label in labels}


def _shot_stats(shots: pd.DataFrame) -> ShotStats:
    total = len(shots)
    outcomes = shots["outcome"].value_counts()
    total_xg = float(shots["xg"].fillna(0.0).sum())
    return ShotStats(
        total=total,
        goals=int(outcomes.get(Outcome.GOAL.value, 0)),
        saved=int(outcomes.get(Outcome.SAVED.value, 0)),
        missed=int(outcomes.get(Outcome.MISS.value, 0)),
        total_xg=total_xg,
        avg_xg=_mean(total_xg, total),
    )


def _pass_stats(passes: pd.DataFrame) -> PassStats:
    total = len(passes)
    completed = int(passes["completed"].fillna(False).astype(bool).sum())
    total_xa = float(passes["xa"].fillna(0.0).sum())
    return PassStats(
        total=total,
        completed=completed,
        incomplete=total - completed,
        completion_rate=_rate(completed, total),
        total_xa=total_xa,
        avg_xa=_mean(total_xa, total),
    )


def _defensive_stats(defensive: pd.DataFrame) -> DefensiveStats:
    total = len(defensive)
    successful = int(defensive["success"].fillna(False).astype(bool).sum())
    # Unrecognized action types fall into none of the buckets but stay in total
    actions = defensive["action_type"].value_counts()
    return DefensiveStats(
        total=total,
        successful=successful,
        failed=total - successful,
        success_rate=_rate(successful, total),
        tackles=int(actions.get(DefensiveAction.TACKLE.value, 0)),
        interceptions=int(actions.get(DefensiveAction.INTERCEPTION.value, 0)),
        blocks=int(actions.get(DefensiveAction.BLOCK.value, 0)),
        clearances=int(actions.get(DefensiveAction.CLEARANCE.value, 0)),
    )


def aggregate(events: Iterable[MatchEvent]) -> MatchSummary:
    """Summarize shots, passes, defensive actions, phases and zones."""
    frame = events_frame(events)
    if frame.empty:
        return MatchSummary()

    partitions = {str(key): grp for key, grp in frame.groupby("type", sort=False)}
    empty = EVENT_CONTRACT.empty()
    return MatchSummary(
        total_events=len(frame),
        shots=_shot_stats(partitions.get(EventType.SHOT.value, empty)),
        passes=_pass_stats(partitions.get(EventType.PASS.value, empty)),
        defensive=_defensive_stats(partitions.get(EventType.DEFENSIVE.value, empty)),
        phases=_label_counts(frame["phase"], Phase),
        zones=_label_counts(frame["zone"], Zone),
    )

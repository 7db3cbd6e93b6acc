from __future__ import annotations

import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterable, Mapping

import pandas as pd


def is_missing(raw: object) -> bool:
    if raw is None or raw is pd.NA:
        return True
    if isinstance(raw, float) and math.isnan(raw):
        return True
    return isinstance(raw, str) and not raw.strip()


class _Label(str, Enum):
    """Closed label set that parses leniently and serializes to its value."""

    def serialize(self) -> str:
        return self.value

    @classmethod
    def parse(cls, raw: object):
        if isinstance(raw, cls):
            return raw
        if is_missing(raw):
            raise ValueError(f"{cls.__name__} is missing")

        token = str(raw).strip()
        if token.startswith(f"{cls.__name__}."):
            token = token.split(".", 1)[1]

        member = cls.__members__.get(token)
        if member is not None:
            return member

        lowered = token.lower()
        try:
            return cls(lowered)
        except ValueError as exc:
            raise ValueError(f"unknown {cls.__name__}: {raw}") from exc


class EventType(_Label):
    SHOT = "shot"
    PASS = "pass"
    DEFENSIVE = "defensive"


class Outcome(_Label):
    GOAL = "goal"
    SAVED = "saved"
    MISS = "miss"


class DefensiveAction(_Label):
    TACKLE = "tackle"
    INTERCEPTION = "interception"
    BLOCK = "block"
    CLEARANCE = "clearance"


class Phase(_Label):
    IN_POSSESSION = "in_possession"
    OUT_POSSESSION = "out_possession"
    ATTACKING_TRANSITION = "attacking_transition"
    DEFENSIVE_TRANSITION = "defensive_transition"


class Zone(_Label):
    BUILD_UP = "build_up"
    PROGRESSION = "progression"
    FINISHING = "finishing"


KNOWN_ACTION_TYPES = frozenset(action.value for action in DefensiveAction)


@dataclass(frozen=True)
class MatchEvent:
    """One tagged event. Built by the validator, never by hand."""

    type: EventType
    x: float
    y: float
    end_x: float | None = None
    end_y: float | None = None
    outcome: Outcome | None = None
    body_part: str | None = None
    assist_type: str | None = None
    xg: float | None = None
    completed: bool | None = None
    xa: float | None = None
    receiver_id: str | None = None
    receiver_name: str | None = None
    action_type: str | None = None
    success: bool | None = None
    player_id: str | None = None
    player_name: str | None = None
    team_id: str | None = None
    team_name: str | None = None
    minute: int | None = None
    timestamp: str | None = None
    phase: Phase | None = None
    zone: Zone | None = None

    @property
    def has_end(self) -> bool:
        return self.end_x is not None and self.end_y is not None

    def with_zone(self, zone: Zone) -> "MatchEvent":
        return replace(self, zone=zone)

    def to_record(self) -> dict[str, object]:
        """camelCase record for external collaborators; unset fields are omitted."""
        record = {
            "type": self.type.serialize(),
            "x": self.x,
            "y": self.y,
            "endX": self.end_x,
            "endY": self.end_y,
            "outcome": self.outcome.serialize() if self.outcome else None,
            "bodyPart": self.body_part,
            "assistType": self.assist_type,
            "xG": self.xg,
            "completed": self.completed,
            "xA": self.xa,
            "receiverId": self.receiver_id,
            "receiverName": self.receiver_name,
            "actionType": self.action_type,
            "success": self.success,
            "playerId": self.player_id,
            "playerName": self.player_name,
            "teamId": self.team_id,
            "teamName": self.team_name,
            "minute": self.minute,
            "timestamp": self.timestamp,
            "phase": self.phase.serialize() if self.phase else None,
            "zone": self.zone.serialize() if self.zone else None,
        }
        return {key: value for key, value in record.items() if value is not None}


@dataclass(frozen=True)
class TableContract:
    name: str
    columns: Mapping[str, str]

    def empty(self) -> pd.DataFrame:
        return pd.DataFrame({col: pd.Series(dtype=dtype) for col, dtype in self.columns.items()})


EVENT_CONTRACT = TableContract(
    name="event",
    columns={
        "seq": "int64",
        "type": "string",
        "x": "float64",
        "y": "float64",
        "end_x": "float64",
        "end_y": "float64",
        "outcome": "string",
        "body_part": "string",
        "assist_type": "string",
        "xg": "float64",
        "completed": "boolean",
        "xa": "float64",
        "receiver_id": "string",
        "receiver_name": "string",
        "action_type": "string",
        "success": "boolean",
        "player_id": "string",
        "player_name": "string",
        "team_id": "string",
        "team_name": "string",
        "minute": "Int64",
        "timestamp": "string",
        "phase": "string",
        "zone": "string",
    },
)


def _event_row(seq: int, event: MatchEvent) -> dict[str, object]:
    return {
        "seq": seq,
        "type": event.type.serialize(),
        "x": event.x,
        "y": event.y,
        "end_x": event.end_x,
        "end_y": event.end_y,
        "outcome": event.outcome.serialize() if event.outcome else None,
        "body_part": event.body_part,
        "assist_type": event.assist_type,
        "xg": event.xg,
        "completed": event.completed,
        "xa": event.xa,
        "receiver_id": event.receiver_id,
        "receiver_name": event.receiver_name,
        "action_type": event.action_type,
        "success": event.success,
        "player_id": event.player_id,
        "player_name": event.player_name,
        "team_id": event.team_id,
        "team_name": event.team_name,
        "minute": event.minute,
        "timestamp": event.timestamp,
        "phase": event.phase.serialize() if event.phase else None,
        "zone": event.zone.serialize() if event.zone else None,
    }


def events_frame(events: Iterable[MatchEvent]) -> pd.DataFrame:
    """Tabulate validated events in tagging order under EVENT_CONTRACT dtypes."""
    rows = [_event_row(seq, event) for seq, event in enumerate(events)]
    if not rows:
        return EVENT_CONTRACT.empty()
    return pd.DataFrame({
        col: pd.Series([row[col] for row in rows], dtype=dtype)
        for col, dtype in EVENT_CONTRACT.columns.items()
    })

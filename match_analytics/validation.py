"""Validation of raw tagged events into canonical ``MatchEvent`` objects.

Validation never raises for shape problems. Every violated field is collected
into a ``ValidationFailure`` so batch imports can report all problems at once.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Mapping

from constants import (
    COORD_MAX,
    COORD_MIN,
    DEFAULT_ACTION_TYPE,
    DEFAULT_ASSIST_TYPE,
    DEFAULT_BODY_PART,
    DEFAULT_COMPLETED,
    DEFAULT_OUTCOME,
    DEFAULT_SUCCESS,
)
from match_analytics.schema import KNOWN_ACTION_TYPES, EventType, MatchEvent, Outcome, Zone, is_missing
from match_analytics.zones import classify_zone, parse_phase

logger = logging.getLogger(__name__)

# Canonical camelCase field -> accepted spellings, first match wins
FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "type": ("type", "eventType", "event_type"),
    "x": ("x", "startX", "start_x"),
    "y": ("y", "startY", "start_y"),
    "endX": ("endX", "end_x"),
    "endY": ("endY", "end_y"),
    "outcome": ("outcome",),
    "bodyPart": ("bodyPart", "body_part"),
    "assistType": ("assistType", "assist_type"),
    "xG": ("xG", "xg"),
    "completed": ("completed",),
    "xA": ("xA", "xa"),
    "receiverId": ("receiverId", "receiver_id"),
    "receiverName": ("receiverName", "receiver_name"),
    "actionType": ("actionType", "action_type"),
    "success": ("success",),
    "playerId": ("playerId", "player_id"),
    "playerName": ("playerName", "player_name"),
    "teamId": ("teamId", "team_id"),
    "teamName": ("teamName", "team_name"),
    "minute": ("minute",),
    "timestamp": ("timestamp",),
    "phase": ("phase",),
    "zone": ("zone",),
}


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str
    value: object = None

    def describe(self) -> str:
        return f"{self.field}: {self.message}"


@dataclass(frozen=True)
class ValidationFailure:
    """Typed rejection listing every violated field of one raw event."""

    errors: tuple[FieldError, ...]
    row: int | None = None

    @property
    def fields(self) -> list[str]:
        return [error.field for error in self.errors]

    def describe(self) -> str:
        prefix = f"Row {self.row}: " if self.row is not None else ""
        return prefix + "; ".join(error.describe() for error in self.errors)


@dataclass(frozen=True)
class ValidationReport:
    events: tuple[MatchEvent, ...]
    failures: tuple[ValidationFailure, ...]

    @property
    def ok(self) -> bool:
        return not self.failures


def _get_field(raw: Mapping, field: str) -> object:
    for name in FIELD_ALIASES[field]:
        if name in raw and not is_missing(raw[name]):
            return raw[name]
    return None


def _parse_float(value: object) -> float:
    if isinstance(value, bool):
        raise ValueError("expected a number, got a boolean")
    try:
        number = float(str(value).strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError("not numeric") from exc
    if math.isnan(number):
        raise ValueError("is NaN")
    return number


def _parse_bool(value: object) -> bool:
    if isinstance(value, bool):
        return value
    token = str(value).strip().lower()
    if token == "true":
        return True
    if token == "false":
        return False
    raise ValueError("expected true or false")


def _parse_minute(value: object) -> int:
    if isinstance(value, bool):
        raise ValueError("expected a whole minute, got a boolean")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError("expected a whole minute")
        minute = int(value)
    else:
        try:
            minute = int(str(value).strip())
        except ValueError as exc:
            raise ValueError("expected a whole minute") from exc
    if minute < 0:
        raise ValueError("must be >= 0")
    return minute


def _parse_identifier(value: object) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def _parse_timestamp(value: object) -> str:
    token = str(value).strip()
    try:
        datetime.fromisoformat(token)
    except ValueError as exc:
        raise ValueError("not an ISO-8601 timestamp") from exc
    return token


class _Collector:
    """Reads fields off one raw event while accumulating errors."""

    def __init__(self, raw: Mapping):
        self.raw = raw
        self.errors: list[FieldError] = []

    def read(self, field: str, parser, default=None):
        value = _get_field(self.raw, field)
        if value is None:
            return default
        try:
            return parser(value)
        except ValueError as exc:
            self.errors.append(FieldError(field, str(exc), value))
            return default

    def coordinate(self, field: str, *, required: bool) -> float | None:
        value = _get_field(self.raw, field)
        if value is None:
            if required:
                self.errors.append(FieldError(field, "is required"))
            return None
        try:
            number = _parse_float(value)
        except ValueError as exc:
            self.errors.append(FieldError(field, str(exc), value))
            return None
        if not COORD_MIN <= number <= COORD_MAX:
            self.errors.append(FieldError(field, f"must lie in [{COORD_MIN:g}, {COORD_MAX:g}]", value))
            return None
        return number

    def expected_value(self, field: str) -> float:
        value = _get_field(self.raw, field)
        if value is None:
            return 0.0
        try:
            number = _parse_float(value)
        except ValueError as exc:
            self.errors.append(FieldError(field, str(exc), value))
            return 0.0
        if not math.isfinite(number) or number < 0:
            self.errors.append(FieldError(field, "must be a finite value >= 0", value))
            return 0.0
        return number

    def text(self, field: str, default: str | None = None) -> str | None:
        value = _get_field(self.raw, field)
        return default if value is None else str(value).strip()


def validate_event(raw: Mapping | MatchEvent, *, row: int | None = None) -> MatchEvent | ValidationFailure:
    """Validate one raw event and attach its zone, or describe why it was rejected."""
    if isinstance(raw, MatchEvent):
        raw = raw.to_record()
    if not isinstance(raw, Mapping):
        return ValidationFailure((FieldError("event", "expected a mapping of fields", raw),), row=row)

    fields = _Collector(raw)
    event_type = fields.read("type", EventType.parse)
    if event_type is None and _get_field(raw, "type") is None:
        fields.errors.append(FieldError("type", "is required"))

    x = fields.coordinate("x", required=True)
    y = fields.coordinate("y", required=True)

    variant: dict[str, object] = {}
    if event_type is EventType.SHOT:
        variant["outcome"] = fields.read("outcome", Outcome.parse, Outcome.parse(DEFAULT_OUTCOME))
        variant["body_part"] = fields.text("bodyPart", DEFAULT_BODY_PART)
        variant["assist_type"] = fields.text("assistType", DEFAULT_ASSIST_TYPE)
        variant["xg"] = fields.expected_value("xG")
    elif event_type is EventType.PASS:
        end_x = fields.coordinate("endX", required=False)
        end_y = fields.coordinate("endY", required=False)
        has_end_x = _get_field(raw, "endX") is not None
        has_end_y = _get_field(raw, "endY") is not None
        if has_end_x != has_end_y:
            missing = "endY" if has_end_x else "endX"
            fields.errors.append(FieldError(missing, "endX and endY must be given together"))
        variant["end_x"] = end_x
        variant["end_y"] = end_y
        variant["completed"] = fields.read("completed", _parse_bool, DEFAULT_COMPLETED)
        variant["xa"] = fields.expected_value("xA")
        variant["receiver_id"] = fields.read("receiverId", _parse_identifier)
        variant["receiver_name"] = fields.text("receiverName")
    elif event_type is EventType.DEFENSIVE:
        action_type = fields.text("actionType", DEFAULT_ACTION_TYPE).lower()
        if action_type not in KNOWN_ACTION_TYPES:
            logger.debug("Keeping unrecognized defensive action type %r", action_type)
        variant["action_type"] = action_type
        variant["success"] = fields.read("success", _parse_bool, DEFAULT_SUCCESS)

    context = {
        "player_id": fields.read("playerId", _parse_identifier),
        "player_name": fields.text("playerName"),
        "team_id": fields.read("teamId", _parse_identifier),
        "team_name": fields.text("teamName"),
        "minute": fields.read("minute", _parse_minute),
        "timestamp": fields.read("timestamp", _parse_timestamp),
        "phase": fields.read("phase", parse_phase),
    }
    tagged_zone = fields.read("zone", Zone.parse)

    if fields.errors:
        return ValidationFailure(tuple(fields.errors), row=row)

    zone = classify_zone(x)
    if tagged_zone is not None and tagged_zone is not zone:
        logger.debug("Tagged zone %s disagrees with x=%s; using %s", tagged_zone.value, x, zone.value)

    return MatchEvent(type=event_type, x=x, y=y, zone=zone, **variant, **context)


def validate_events(raws: Iterable[Mapping | MatchEvent], *, start_row: int = 1) -> ValidationReport:
    """Validate a batch, keeping accepted events in input order."""
    events: list[MatchEvent] = []
    failures: list[ValidationFailure] = []
    for offset, raw in enumerate(raws):
        result = validate_event(raw, row=start_row + offset)
        if isinstance(result, ValidationFailure):
            failures.append(result)
        else:
            events.append(result)
    return ValidationReport(events=tuple(events), failures=tuple(failures))

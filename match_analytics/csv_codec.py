"""CSV interchange for tagged match events.

The export layout is a fixed 21-column header optionally preceded by ``#``
metadata lines. Import goes back through ``validate_event`` so CSV rows and
freshly tagged events are held to the same rules.
"""

from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass, field
from typing import Iterable, Sequence

import pandas as pd

from constants import (
    CSV_COMMENT_PREFIX,
    CSV_COORD_PRECISION,
    CSV_EXPECTED_PRECISION,
    CSV_HEADER,
    CSV_RECEIVER_HEADER,
)
from match_analytics.schema import MatchEvent
from match_analytics.validation import ValidationFailure, validate_event

logger = logging.getLogger(__name__)

ROW_ERROR_PARSE = "parse"
ROW_ERROR_VALIDATION = "validation"
ROW_WARNING_DROPPED = "dropped"

# A row is only rejected when one of these fails; anything else is dropped
CORE_FIELDS = frozenset({"type", "x", "y"})
END_FIELDS = ("endX", "endY")

# Lower-cased header -> raw field name understood by the validator
HEADER_FIELDS = {
    "event type": "type",
    "x position": "x",
    "y position": "y",
    "end x": "endX",
    "end y": "endY",
    "outcome": "outcome",
    "body part": "bodyPart",
    "assist type": "assistType",
    "action type": "actionType",
    "success": "success",
    "completed": "completed",
    "xg": "xG",
    "xa": "xA",
    "timestamp": "timestamp",
    "player id": "playerId",
    "player name": "playerName",
    "team id": "teamId",
    "team name": "teamName",
    "minute": "minute",
    "phase": "phase",
    "zone": "zone",
    "receiver id": "receiverId",
    "receiver name": "receiverName",
}
REQUIRED_HEADERS = ("event type", "x position", "y position")


class CSVImportError(ValueError):
    """Raised when a file yields no usable events at all."""

    def __init__(self, message: str, errors: Sequence["RowError"] = ()):
        super().__init__(message)
        self.errors = tuple(errors)


@dataclass(frozen=True)
class RowError:
    row: int
    kind: str
    message: str

    def describe(self) -> str:
        return f"Row {self.row}: {self.message}"


@dataclass(frozen=True)
class MatchInfo:
    home_team: str | None = None
    away_team: str | None = None
    date: str | None = None


@dataclass(frozen=True)
class CSVImport:
    events: tuple[MatchEvent, ...]
    errors: tuple[RowError, ...] = ()
    warnings: tuple[RowError, ...] = ()
    metadata: dict[str, str] = field(default_factory=dict)

    @property
    def skipped(self) -> int:
        return len(self.errors)


# ── Encoding ────────────────────────────────────────────────────────────

def _fmt_number(value: float | None, precision: int) -> str:
    return "" if value is None else f"{value:.{precision}f}"


def _fmt_bool(value: bool | None) -> str:
    return "" if value is None else ("true" if value else "false")


def _fmt_text(value: object) -> str:
    if value is None:
        return ""
    return value.serialize() if hasattr(value, "serialize") else str(value)


def _event_cells(event: MatchEvent, include_receiver: bool) -> list[str]:
    cells = [
        event.type.serialize(),
        _fmt_number(event.x, CSV_COORD_PRECISION),
        _fmt_number(event.y, CSV_COORD_PRECISION),
        _fmt_number(event.end_x, CSV_COORD_PRECISION),
        _fmt_number(event.end_y, CSV_COORD_PRECISION),
        _fmt_text(event.outcome),
        _fmt_text(event.body_part),
        _fmt_text(event.assist_type),
        _fmt_text(event.action_type),
        _fmt_bool(event.success),
        _fmt_bool(event.completed),
        _fmt_number(event.xg, CSV_EXPECTED_PRECISION),
        _fmt_number(event.xa, CSV_EXPECTED_PRECISION),
        _fmt_text(event.timestamp),
        _fmt_text(event.player_id),
        _fmt_text(event.player_name),
        _fmt_text(event.team_id),
        _fmt_text(event.team_name),
        _fmt_text(event.minute),
        _fmt_text(event.phase),
        _fmt_text(event.zone),
    ]
    if include_receiver:
        cells += [_fmt_text(event.receiver_id), _fmt_text(event.receiver_name)]
    return cells


def _comment(label: str, value: str) -> str:
    flat = " ".join(str(value).splitlines())
    return f"{CSV_COMMENT_PREFIX} {label}: {flat}\n"


def encode_events(
    events: Iterable[MatchEvent],
    match_info: MatchInfo | None = None,
    *,
    include_receiver: bool | None = None,
    exported_at: str | None = None,
) -> str:
    """Serialize events to CSV text in tagging order.

    Receiver columns are appended after the fixed header only when requested,
    or, by default, when at least one event names a receiver.
    """
    events = list(events)
    if include_receiver is None:
        include_receiver = any(event.receiver_id or event.receiver_name for event in events)
    columns = list(CSV_HEADER) + (list(CSV_RECEIVER_HEADER) if include_receiver else [])

    preamble = ""
    if match_info is not None:
        preamble += _comment("Match", f"{match_info.home_team or 'Home'} vs {match_info.away_team or 'Away'}")
        if match_info.date:
            preamble += _comment("Date", match_info.date)
    if exported_at:
        preamble += _comment("Exported", exported_at)

    table = pd.DataFrame([_event_cells(event, include_receiver) for event in events], columns=columns, dtype=object)
    return preamble + table.to_csv(index=False, lineterminator="\n", quoting=csv.QUOTE_MINIMAL)


# ── Decoding ────────────────────────────────────────────────────────────

def _ends_quoted(line: str, in_quotes: bool) -> bool:
    """Return whether a quoted field is still open at the end of *line*.

    As with ``csv.reader``, a quote only opens a field when it is the field's
    first character; quotes inside an unquoted cell are literal.
    """
    at_field_start = not in_quotes
    i = 0
    while i < len(line):
        char = line[i]
        if in_quotes:
            if char == '"':
                if line[i + 1:i + 2] == '"':
                    i += 1
                else:
                    in_quotes = False
        elif char == '"' and at_field_start:
            in_quotes = True
        at_field_start = not in_quotes and char == ","
        i += 1
    return in_quotes


def _next_record(lines: Sequence[str], pos: int) -> tuple[int, int, str | None] | None:
    """Find the first CSV record at or after line index *pos*.

    Returns (first line index, index past its last line, record text), or None
    when only comments and blank lines remain. Those are recognised only at a
    record boundary, so a quoted field may contain a line starting with ``#``.
    Carriage returns inside a quoted field are kept. The text is None when the
    record is still inside quotes at end of input.
    """
    while pos < len(lines) and (not lines[pos].strip() or lines[pos].startswith(CSV_COMMENT_PREFIX)):
        pos += 1
    if pos == len(lines):
        return None
    pending: list[str] = []
    in_quotes = False
    for stop in range(pos, len(lines)):
        in_quotes = _ends_quoted(lines[stop], in_quotes)
        if not in_quotes:
            pending.append(lines[stop].rstrip("\r"))
            return pos, stop + 1, "\n".join(pending)
        pending.append(lines[stop])
    return pos, len(lines), None


def _comment_metadata(text: str) -> dict[str, str]:
    metadata: dict[str, str] = {}
    for line in text.split("\n"):
        line = line.rstrip("\r")
        if not line.startswith(CSV_COMMENT_PREFIX):
            if line.strip():
                break
            continue
        key, sep, value = line[len(CSV_COMMENT_PREFIX):].partition(":")
        if sep and key.strip():
            metadata[key.strip()] = value.strip()
    return metadata


def _split_record(record: str) -> list[str]:
    rows = list(csv.reader(io.StringIO(record, newline=""), strict=True))
    if len(rows) != 1:
        raise csv.Error(f"expected one record, found {len(rows)}")
    return [cell.strip() for cell in rows[0]]


def _is_header(cells: Sequence[str]) -> bool:
    return CSV_HEADER[0].lower() in (cell.lower() for cell in cells)


def _canonical_columns(width: int) -> list[str]:
    if width == len(CSV_HEADER) + len(CSV_RECEIVER_HEADER):
        return [h.lower() for h in CSV_HEADER + CSV_RECEIVER_HEADER]
    return [h.lower() for h in CSV_HEADER]


def _salvage(raw: dict[str, str], failure: ValidationFailure) -> tuple[MatchEvent | ValidationFailure, list[str]]:
    """Drop the optional fields named in *failure* and validate once more."""
    notes: list[str] = []
    for error in failure.errors:
        # end coordinates only make sense as a pair
        for name in END_FIELDS if error.field in END_FIELDS else (error.field,):
            raw.pop(name, None)
        notes.append(f"{error.describe()} (field dropped)")
    return validate_event(raw, row=failure.row), notes


def decode_events(text: str) -> CSVImport:
    """Parse CSV text into validated events, collecting per-row problems.

    Rows that cannot be parsed, or whose type or position is unusable, are
    dropped and reported in ``CSVImport.errors``. Other invalid fields are
    removed from the row and reported in ``CSVImport.warnings``. A file with no
    valid rows raises ``CSVImportError``.
    """
    text = text.lstrip("\ufeff")
    events: list[MatchEvent] = []
    errors: list[RowError] = []
    warnings: list[RowError] = []
    columns: list[str] | None = None
    lines = text.split("\n")
    pos = 0

    while True:
        found = _next_record(lines, pos)
        if found is None:
            break
        start, pos, record = found
        row_no = start + 1
        try:
            if record is None:
                raise csv.Error("unterminated quoted field")
            cells = _split_record(record)
        except csv.Error as exc:
            errors.append(RowError(row_no, ROW_ERROR_PARSE, f"malformed quoting: {exc}"))
            # a broken record only costs its first line
            pos = start + 1
            continue

        if columns is None:
            if _is_header(cells):
                columns = [cell.lower() for cell in cells]
                missing = [h for h in REQUIRED_HEADERS if h not in columns]
                if missing:
                    raise CSVImportError(f"CSV header is missing required columns: {missing}", errors)
                continue
            columns = _canonical_columns(len(cells))

        if len(cells) > len(columns):
            errors.append(RowError(row_no, ROW_ERROR_PARSE, f"expected {len(columns)} columns, found {len(cells)}"))
            continue

        # short rows leave their trailing columns empty
        raw = {HEADER_FIELDS[name]: value for name, value in zip(columns, cells) if name in HEADER_FIELDS and value}
        result = validate_event(raw, row=row_no)
        if isinstance(result, ValidationFailure) and not CORE_FIELDS.intersection(result.fields):
            result, notes = _salvage(raw, result)
            warnings.extend(RowError(row_no, ROW_WARNING_DROPPED, note) for note in notes)
        if isinstance(result, ValidationFailure):
            errors.append(RowError(row_no, ROW_ERROR_VALIDATION, "; ".join(e.describe() for e in result.errors)))
            continue
        events.append(result)

    for error in errors:
        logger.warning("Skipping CSV row %s: %s", error.row, error.message)
    for warning in warnings:
        logger.warning("CSV row %s: %s", warning.row, warning.message)

    if not events:
        raise CSVImportError("No valid events found in CSV", errors)
    return CSVImport(
        events=tuple(events),
        errors=tuple(errors),
        warnings=tuple(warnings),
        metadata=_comment_metadata(text),
    )


def validate_csv(text: str) -> list[str]:
    """Human-readable problems with *text*; empty when every row imports cleanly."""
    try:
        result = decode_events(text)
    except CSVImportError as exc:
        return [error.describe() for error in exc.errors] + [str(exc)]
    problems = sorted(result.errors + result.warnings, key=lambda problem: problem.row)
    return [problem.describe() for problem in problems]

"""In-memory tagging session with bounded undo/redo history."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterable, Mapping

from constants import HEATMAP_GRID_SIZE, HISTORY_LIMIT, MIN_PASS_THRESHOLD, PASS_END_WEIGHT
from match_analytics.csv_codec import CSVImport, MatchInfo, decode_events, encode_events
from match_analytics.expected import estimate_xa, estimate_xg
from match_analytics.heatmap import DensityGrid, build_grid
from match_analytics.pass_network import PassNetwork, build_network
from match_analytics.schema import EventType, MatchEvent, Zone
from match_analytics.stats import MatchSummary, aggregate
from match_analytics.validation import ValidationFailure, ValidationReport, validate_event

logger = logging.getLogger(__name__)

_EXPECTED_KEYS = {
    EventType.SHOT: ("xG", "xg"),
    EventType.PASS: ("xA", "xa"),
}


def _has_expected_value(raw: Mapping, event_type: EventType) -> bool:
    return any(raw.get(key) not in (None, "") for key in _EXPECTED_KEYS.get(event_type, ()))


def with_estimates(event: MatchEvent) -> MatchEvent:
    """Fill xG/xA from the distance heuristics."""
    if event.type is EventType.SHOT:
        return replace(event, xg=estimate_xg(event.x, event.y, event.body_part or "foot", event.outcome))
    if event.type is EventType.PASS and event.has_end:
        return replace(event, xa=estimate_xa(event.end_x, event.end_y, bool(event.completed)))
    return event


class TaggingSession:
    """Owns the event list for one tagging session.

    Every change stores an immutable snapshot, so undo and redo are plain index
    moves. Only the newest ``history_limit`` snapshots are kept. Derived views
    are recomputed from the current snapshot on each call.
    """

    def __init__(
        self,
        events: Iterable[MatchEvent] = (),
        *,
        history_limit: int = HISTORY_LIMIT,
        estimate_missing: bool = False,
    ):
        if history_limit < 1:
            raise ValueError(f"history_limit must be >= 1, got {history_limit}")
        self.history_limit = history_limit
        self.estimate_missing = estimate_missing
        self._history: list[tuple[MatchEvent, ...]] = [tuple(events)]
        self._index = 0

    @property
    def events(self) -> tuple[MatchEvent, ...]:
        return self._history[self._index]

    def __len__(self) -> int:
        return len(self.events)

    @property
    def can_undo(self) -> bool:
        return self._index > 0

    @property
    def can_redo(self) -> bool:
        return self._index < len(self._history) - 1

    def _commit(self, events: tuple[MatchEvent, ...]) -> None:
        self._history = self._history[: self._index + 1]
        self._history.append(events)
        if len(self._history) > self.history_limit:
            del self._history[0]
        self._index = len(self._history) - 1

    def _prepare(self, raw: Mapping | MatchEvent) -> MatchEvent | ValidationFailure:
        result = validate_event(raw)
        if isinstance(result, ValidationFailure) or not self.estimate_missing:
            return result
        source = raw.to_record() if isinstance(raw, MatchEvent) else raw
        if _has_expected_value(source, result.type):
            return result
        return with_estimates(result)

    def record(self, raw: Mapping | MatchEvent) -> MatchEvent | ValidationFailure:
        """Validate and append one event; rejected events leave the session untouched."""
        result = self._prepare(raw)
        if isinstance(result, ValidationFailure):
            logger.debug("Rejected event: %s", result.describe())
            return result
        self._commit(self.events + (result,))
        return result

    def extend(self, raws: Iterable[Mapping | MatchEvent]) -> ValidationReport:
        """Append every valid event as a single undo step."""
        accepted: list[MatchEvent] = []
        failures: list[ValidationFailure] = []
        for row, raw in enumerate(raws, start=1):
            result = self._prepare(raw)
            if isinstance(result, ValidationFailure):
                failures.append(replace(result, row=row))
            else:
                accepted.append(result)
        if accepted:
            self._commit(self.events + tuple(accepted))
        return ValidationReport(events=tuple(accepted), failures=tuple(failures))

    def undo(self) -> bool:
        if not self.can_undo:
            return False
        self._index -= 1
        return True

    def redo(self) -> bool:
        if not self.can_redo:
            return False
        self._index += 1
        return True

    def clear(self) -> None:
        if self.events:
            self._commit(())

    def summary(self) -> MatchSummary:
        return aggregate(self.events)

    def heatmap(
        self,
        grid_size: float = HEATMAP_GRID_SIZE,
        zone_filter: Zone | str | None = None,
        *,
        pass_end_weight: float = PASS_END_WEIGHT,
    ) -> DensityGrid:
        return build_grid(self.events, grid_size, zone_filter, pass_end_weight=pass_end_weight)

    def pass_network(self, min_pass_threshold: int = MIN_PASS_THRESHOLD) -> PassNetwork:
        return build_network(self.events, min_pass_threshold)

    def export_csv(self, match_info: MatchInfo | None = None, *, exported_at: str | None = None) -> str:
        return encode_events(self.events, match_info, exported_at=exported_at)

    def load_csv(self, text: str) -> CSVImport:
        """Replace the session contents with an import, as one undo step."""
        result = decode_events(text)
        self._commit(result.events)
        logger.info("Loaded %s events from CSV (%s rows skipped)", len(result.events), result.skipped)
        return result

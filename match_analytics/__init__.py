"""Match event analytics package."""

from match_analytics.csv_codec import CSVImport, CSVImportError, MatchInfo, RowError, decode_events, encode_events, validate_csv
from match_analytics.heatmap import DensityGrid, HeatmapCell, build_grid
from match_analytics.pass_network import PassConnection, PassNetwork, PlayerNode, build_network, infer_receivers, summarize_network
from match_analytics.schema import DefensiveAction, EventType, MatchEvent, Outcome, Phase, Zone
from match_analytics.session import TaggingSession
from match_analytics.stats import MatchSummary, aggregate
from match_analytics.validation import FieldError, ValidationFailure, ValidationReport, validate_event, validate_events
from match_analytics.zones import classify_zone

__all__ = [
    "EventType",
    "Outcome",
    "DefensiveAction",
    "Phase",
    "Zone",
    "MatchEvent",
    "FieldError",
    "ValidationFailure",
    "ValidationReport",
    "validate_event",
    "validate_events",
    "classify_zone",
    "MatchSummary",
    "aggregate",
    "HeatmapCell",
    "DensityGrid",
    "build_grid",
    "PassConnection",
    "PlayerNode",
    "PassNetwork",
    "build_network",
    "infer_receivers",
    "summarize_network",
    "MatchInfo",
    "CSVImport",
    "CSVImportError",
    "RowError",
    "encode_events",
    "decode_events",
    "validate_csv",
    "TaggingSession",
]

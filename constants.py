"""Shared constants for match event analytics.

Single source of truth for pitch geometry, zone boundaries, the CSV interchange
layout, and tagging defaults.
"""

# ── Pitch (percentage coordinates) ──────────────────────────────────────
COORD_MIN = 0.0
COORD_MAX = 100.0

# Goal mouth centre in tagging coordinates (attacking left to right)
GOAL_X = 100.0
GOAL_Y = 50.0

# ── Zones (thirds of pitch length, half-open on the right) ──────────────
BUILD_UP_MAX_X = 33.33
PROGRESSION_MAX_X = 66.66

# ── Heatmap ─────────────────────────────────────────────────────────────
PITCH_CANVAS_WIDTH = 800    # Logical units, independent of any screen
PITCH_CANVAS_HEIGHT = 520
HEATMAP_GRID_SIZE = 20
EVENT_WEIGHT = 1.0
PASS_END_WEIGHT = 0.5       # Pass destinations count as presence, not action

# ── Pass network ────────────────────────────────────────────────────────
MIN_PASS_THRESHOLD = 3
KEY_PASS_MIN_X = 70.0       # Receiver mean position that marks a key pass

# ── Expected values ─────────────────────────────────────────────────────
XG_DISTANCE_SCALE = 100.0
XG_BODY_PART_FACTORS = {"head": 0.7, "other": 0.5}
XG_GOAL_FLOOR = 0.3
XA_DISTANCE_SCALE = 80.0
XA_CAP = 0.8

# ── Validation defaults ─────────────────────────────────────────────────
DEFAULT_OUTCOME = "miss"
DEFAULT_BODY_PART = "foot"
DEFAULT_ASSIST_TYPE = "open_play"
DEFAULT_ACTION_TYPE = "tackle"
DEFAULT_COMPLETED = True
DEFAULT_SUCCESS = True

# ── CSV interchange ─────────────────────────────────────────────────────
CSV_HEADER = (
    "Event Type",
    "X Position",
    "Y Position",
    "End X",
    "End Y",
    "Outcome",
    "Body Part",
    "Assist Type",
    "Action Type",
    "Success",
    "Completed",
    "xG",
    "xA",
    "Timestamp",
    "Player ID",
    "Player Name",
    "Team ID",
    "Team Name",
    "Minute",
    "Phase",
    "Zone",
)
CSV_RECEIVER_HEADER = ("Receiver ID", "Receiver Name")
CSV_COORD_PRECISION = 2
CSV_EXPECTED_PRECISION = 3
CSV_COMMENT_PREFIX = "#"

# ── Session ─────────────────────────────────────────────────────────────
HISTORY_LIMIT = 50

# ── Display ─────────────────────────────────────────────────────────────
RATE_DISPLAY_PRECISION = 1
XG_DISPLAY_PRECISION = 2

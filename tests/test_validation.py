import math
import unittest

from match_analytics.schema import EventType, MatchEvent, Outcome, Phase, Zone
from match_analytics.validation import ValidationFailure, validate_event, validate_events


class ValidateEventTests(unittest.TestCase):
    def test_shot_defaults_are_applied(self):
        event = validate_event({"type": "shot", "x": 80, "y": 45})
        self.assertIsInstance(event, MatchEvent)
        self.assertIs(event.type, EventType.SHOT)
        self.assertIs(event.outcome, Outcome.MISS)
        self.assertEqual(event.xg, 0.0)
        self.assertEqual(event.body_part, "foot")
        self.assertEqual(event.assist_type, "open_play")
        self.assertIs(event.zone, Zone.FINISHING)

    def test_pass_defaults_to_completed_with_zero_xa(self):
        event = validate_event({"type": "pass", "x": "20", "y": "30", "endX": "40", "endY": "35"})
        self.assertIsInstance(event, MatchEvent)
        self.assertTrue(event.completed)
        self.assertEqual(event.xa, 0.0)
        self.assertEqual((event.end_x, event.end_y), (40.0, 35.0))

    def test_recorder_start_coordinates_are_accepted_for_passes(self):
        event = validate_event({"type": "pass", "startX": 10, "startY": 12, "endX": 30, "endY": 40, "completed": False})
        self.assertEqual((event.x, event.y), (10.0, 12.0))
        self.assertFalse(event.completed)

    def test_every_violated_field_is_reported(self):
        result = validate_event({"type": "shot", "x": "wide", "y": 120, "xG": -0.2, "phase": "pressing", "minute": -3})
        self.assertIsInstance(result, ValidationFailure)
        self.assertEqual(set(result.fields), {"x", "y", "xG", "phase", "minute"})

    def test_missing_and_unknown_type_are_rejected(self):
        missing = validate_event({"x": 10, "y": 10})
        unknown = validate_event({"type": "dribble", "x": 10, "y": 10})
        self.assertEqual(missing.fields, ["type"])
        self.assertEqual(unknown.fields, ["type"])

    def test_nan_coordinates_are_rejected(self):
        result = validate_event({"type": "defensive", "x": math.nan, "y": "nan"})
        self.assertIsInstance(result, ValidationFailure)
        # NaN x reads as missing, string "nan" parses to NaN
        self.assertEqual(result.fields, ["x", "y"])

    def test_pass_needs_both_end_coordinates(self):
        result = validate_event({"type": "pass", "x": 10, "y": 10, "endX": 40})
        self.assertIsInstance(result, ValidationFailure)
        self.assertEqual(result.fields, ["endY"])

    def test_end_coordinates_are_dropped_for_non_passes(self):
        event = validate_event({"type": "shot", "x": 90, "y": 50, "endX": 100, "endY": 50})
        self.assertIsNone(event.end_x)
        self.assertIsNone(event.end_y)

    def test_boundary_coordinates_are_valid(self):
        event = validate_event({"type": "defensive", "x": 0, "y": 100})
        self.assertIsInstance(event, MatchEvent)
        self.assertIs(event.zone, Zone.BUILD_UP)

    def test_tagged_zone_is_replaced_by_classified_zone(self):
        event = validate_event({"type": "shot", "x": 50, "y": 50, "zone": "finishing"})
        self.assertIs(event.zone, Zone.PROGRESSION)

    def test_phase_is_checked_not_derived(self):
        event = validate_event({"type": "defensive", "x": 80, "y": 30, "phase": "OUT_POSSESSION"})
        self.assertIs(event.phase, Phase.OUT_POSSESSION)
        self.assertIsNone(validate_event({"type": "defensive", "x": 80, "y": 30}).phase)

    def test_unknown_action_type_is_tolerated(self):
        event = validate_event({"type": "defensive", "x": 30, "y": 30, "actionType": "Press"})
        self.assertEqual(event.action_type, "press")
        self.assertTrue(event.success)

    def test_boolean_strings_are_case_insensitive(self):
        event = validate_event({"type": "defensive", "x": 30, "y": 30, "success": "FALSE"})
        self.assertFalse(event.success)
        bad = validate_event({"type": "defensive", "x": 30, "y": 30, "success": "maybe"})
        self.assertEqual(bad.fields, ["success"])

    def test_context_fields_are_normalized(self):
        event = validate_event({
            "type": "pass", "x": 50, "y": 50, "playerId": 7, "teamId": 2.0,
            "minute": "15", "timestamp": "2024-05-01T19:45:00Z", "playerName": " Rice ",
        })
        self.assertEqual(event.player_id, "7")
        self.assertEqual(event.team_id, "2")
        self.assertEqual(event.minute, 15)
        self.assertEqual(event.player_name, "Rice")
        self.assertEqual(event.timestamp, "2024-05-01T19:45:00Z")

    def test_bad_timestamp_is_rejected(self):
        result = validate_event({"type": "shot", "x": 70, "y": 50, "timestamp": "yesterday"})
        self.assertEqual(result.fields, ["timestamp"])

    def test_non_mapping_input_is_a_failure_not_an_exception(self):
        result = validate_event(["shot", 10, 10])
        self.assertIsInstance(result, ValidationFailure)
        self.assertEqual(result.fields, ["event"])

    def test_revalidating_an_event_is_stable(self):
        event = validate_event({"type": "pass", "x": 33.33, "y": 50, "endX": 70, "endY": 20, "xA": 0.12, "receiverId": "9"})
        self.assertEqual(validate_event(event), event)


class ValidateEventsTests(unittest.TestCase):
    def test_batch_keeps_order_and_row_numbers(self):
        report = validate_events([
            {"type": "shot", "x": 70, "y": 50},
            {"type": "shot", "x": 170, "y": 50},
            {"type": "pass", "x": 10, "y": 50},
            {"type": "corner", "x": 100, "y": 0},
        ])
        self.assertFalse(report.ok)
        self.assertEqual([e.type for e in report.events], [EventType.SHOT, EventType.PASS])
        self.assertEqual([f.row for f in report.failures], [2, 4])
        self.assertTrue(report.failures[0].describe().startswith("Row 2: x:"))

    def test_empty_batch_is_ok(self):
        report = validate_events([])
        self.assertTrue(report.ok)
        self.assertEqual(report.events, ())


if __name__ == "__main__":
    unittest.main()

import unittest

from match_analytics.csv_codec import CSVImportError, MatchInfo
from match_analytics.schema import EventType, Zone
from match_analytics.session import TaggingSession, with_estimates
from match_analytics.validation import ValidationFailure, validate_event


def _shot(x=90, y=50, **extra):
    return {"type": "shot", "x": x, "y": y, **extra}


class RecordingTests(unittest.TestCase):
    def test_record_appends_valid_events(self):
        session = TaggingSession()
        event = session.record(_shot())
        self.assertEqual(session.events, (event,))
        self.assertEqual(len(session), 1)
        self.assertIs(event.zone, Zone.FINISHING)

    def test_rejected_event_leaves_session_untouched(self):
        session = TaggingSession()
        result = session.record(_shot(x=140))
        self.assertIsInstance(result, ValidationFailure)
        self.assertEqual(session.events, ())
        self.assertFalse(session.can_undo)

    def test_extend_is_one_undo_step(self):
        session = TaggingSession()
        report = session.extend([_shot(), {"type": "pass", "x": 20, "y": 20}, _shot(x="left")])
        self.assertEqual(len(report.events), 2)
        self.assertEqual([f.row for f in report.failures], [3])
        self.assertEqual(len(session), 2)
        self.assertTrue(session.undo())
        self.assertEqual(session.events, ())

    def test_extend_with_nothing_valid_adds_no_history(self):
        session = TaggingSession()
        session.extend([_shot(x=-1)])
        self.assertFalse(session.can_undo)


class HistoryTests(unittest.TestCase):
    def test_undo_and_redo_move_between_snapshots(self):
        session = TaggingSession()
        first = session.record(_shot(x=80))
        second = session.record(_shot(x=85))

        self.assertTrue(session.undo())
        self.assertEqual(session.events, (first,))
        self.assertTrue(session.redo())
        self.assertEqual(session.events, (first, second))
        self.assertFalse(session.redo())

    def test_new_record_discards_redo_states(self):
        session = TaggingSession()
        session.record(_shot(x=80))
        session.record(_shot(x=85))
        session.undo()
        session.record(_shot(x=70))
        self.assertFalse(session.can_redo)
        self.assertEqual([e.x for e in session.events], [80.0, 70.0])

    def test_history_is_bounded(self):
        session = TaggingSession(history_limit=3)
        for x in (60, 70, 80, 90):
            session.record(_shot(x=x))

        self.assertTrue(session.undo())
        self.assertTrue(session.undo())
        self.assertFalse(session.undo())
        self.assertEqual([e.x for e in session.events], [60.0, 70.0])

    def test_clear_can_be_undone(self):
        session = TaggingSession()
        session.record(_shot())
        session.clear()
        self.assertEqual(session.events, ())
        session.undo()
        self.assertEqual(len(session), 1)

    def test_history_limit_must_be_positive(self):
        with self.assertRaises(ValueError):
            TaggingSession(history_limit=0)

    def test_undo_on_fresh_session_is_a_no_op(self):
        session = TaggingSession()
        self.assertFalse(session.undo())
        self.assertFalse(session.redo())


class EstimateTests(unittest.TestCase):
    def test_missing_expected_values_are_estimated(self):
        session = TaggingSession(estimate_missing=True)
        shot = session.record(_shot(x=90, y=50))
        pass_ = session.record({"type": "pass", "x": 40, "y": 50, "endX": 60, "endY": 50})
        self.assertAlmostEqual(shot.xg, 0.9)
        self.assertAlmostEqual(pass_.xa, 0.5)

    def test_supplied_expected_values_are_kept(self):
        session = TaggingSession(estimate_missing=True)
        shot = session.record(_shot(xG=0.05))
        self.assertEqual(shot.xg, 0.05)

    def test_estimates_are_off_by_default(self):
        shot = TaggingSession().record(_shot())
        self.assertEqual(shot.xg, 0.0)

    def test_with_estimates_leaves_defensive_actions_alone(self):
        event = validate_event({"type": "defensive", "x": 20, "y": 20})
        self.assertIs(with_estimates(event), event)


class ViewTests(unittest.TestCase):
    def _session(self):
        session = TaggingSession()
        session.extend([
            _shot(x=88, outcome="goal", xG=0.4),
            {"type": "pass", "x": 30, "y": 40, "endX": 50, "endY": 40, "playerId": "A", "receiverId": "B"},
            {"type": "pass", "x": 30, "y": 40, "endX": 50, "endY": 40, "playerId": "A", "receiverId": "B"},
            {"type": "defensive", "x": 15, "y": 60, "actionType": "clearance"},
        ])
        return session

    def test_views_follow_current_snapshot(self):
        session = self._session()
        self.assertEqual(session.summary().shots.goals, 1)
        self.assertEqual(session.heatmap().total_weight, 5.0)
        self.assertEqual(len(session.pass_network(min_pass_threshold=2).edges), 1)

        session.undo()
        self.assertEqual(session.summary().total_events, 0)
        self.assertEqual(session.heatmap().total_weight, 0.0)

    def test_zone_filtered_heatmap(self):
        grid = self._session().heatmap(zone_filter=Zone.BUILD_UP)
        # two passes with halved destinations plus the clearance
        self.assertEqual(grid.total_weight, 4.0)

    def test_export_then_load_restores_events(self):
        source = self._session()
        text = source.export_csv(MatchInfo("Home", "Away"))

        target = TaggingSession()
        result = target.load_csv(text)
        self.assertEqual(target.events, source.events)
        self.assertEqual(result.metadata["Match"], "Home vs Away")
        self.assertEqual(target.summary(), source.summary())

    def test_load_csv_is_undoable_and_failures_propagate(self):
        session = self._session()
        before = session.events
        with self.assertRaises(CSVImportError):
            session.load_csv("Event Type,X Position,Y Position\n")
        self.assertEqual(session.events, before)

        session.load_csv("Event Type,X Position,Y Position\npass,10,10\n")
        self.assertEqual([e.type for e in session.events], [EventType.PASS])
        session.undo()
        self.assertEqual(session.events, before)


if __name__ == "__main__":
    unittest.main()

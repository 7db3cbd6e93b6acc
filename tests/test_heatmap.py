import numpy as np
import pytest

from match_analytics.heatmap import DensityGrid, HeatmapCell, build_grid, grid_index, grid_shape
from match_analytics.schema import Zone
from match_analytics.validation import validate_events


def _events(raws):
    report = validate_events(raws)
    assert report.ok
    return list(report.events)


def test_grid_shape_covers_canvas():
    assert grid_shape(20) == (26, 40)
    assert grid_shape(30) == (18, 27)
    with pytest.raises(ValueError):
        grid_shape(0)


def test_pass_origin_and_destination_weights():
    events = _events([{"type": "pass", "x": 10, "y": 10, "endX": 90, "endY": 90}])
    grid = build_grid(events, 20)

    assert grid_index(10, 10, 20) == (4, 2)
    assert grid_index(90, 90, 20) == (36, 23)
    assert grid.density_at(4, 2) == 1.0
    assert grid.density_at(36, 23) == 0.5
    assert grid.total_weight == 1.5
    assert grid.cells() == [HeatmapCell(4, 2, 1.0), HeatmapCell(36, 23, 0.5)]


def test_pass_without_end_only_counts_origin():
    grid = build_grid(_events([{"type": "pass", "x": 50, "y": 50}]), 20)
    assert grid.as_dict() == {(20, 13): 1.0}


def test_shots_and_defensive_actions_ignore_end_weighting():
    events = _events([
        {"type": "shot", "x": 50, "y": 50},
        {"type": "defensive", "x": 50, "y": 50},
    ])
    assert build_grid(events, 20).as_dict() == {(20, 13): 2.0}


def test_far_edge_folds_into_last_cell():
    grid = build_grid(_events([{"type": "shot", "x": 100, "y": 100}]), 20)
    assert grid.as_dict() == {(39, 25): 1.0}


def test_zone_filter_uses_event_zone():
    events = _events([
        {"type": "pass", "x": 20, "y": 50, "endX": 80, "endY": 50},
        {"type": "shot", "x": 85, "y": 50},
        {"type": "defensive", "x": 50, "y": 50},
    ])
    build_up = build_grid(events, 20, Zone.BUILD_UP)
    finishing = build_grid(events, 20, "finishing")

    # the pass starts in build-up, so its destination comes along with it
    assert build_up.total_weight == 1.5
    assert finishing.total_weight == 1.0
    assert finishing.zone_filter is Zone.FINISHING


def test_custom_pass_end_weight():
    events = _events([{"type": "pass", "x": 10, "y": 10, "endX": 90, "endY": 90}])
    grid = build_grid(events, 20, pass_end_weight=0.25)
    assert grid.density_at(36, 23) == 0.25
    with pytest.raises(ValueError):
        build_grid(events, 20, pass_end_weight=-1)


def test_empty_events_give_empty_grid():
    grid = build_grid([], 20)
    assert grid.shape == (26, 40)
    assert grid.cells() == []
    assert grid.max_density == 0.0
    assert grid.to_frame().empty


def test_repeated_builds_are_bit_identical():
    events = _events([
        {"type": "pass", "x": 12.5, "y": 33.3, "endX": 47.1, "endY": 60.2},
        {"type": "shot", "x": 91.0, "y": 48.2},
        {"type": "pass", "x": 12.6, "y": 33.1, "endX": 47.0, "endY": 60.0},
    ])
    first = build_grid(events, 20)
    second = build_grid(events, 20)
    assert first == second
    assert first.density.tobytes() == second.density.tobytes()


def test_density_is_read_only():
    grid = build_grid(_events([{"type": "shot", "x": 50, "y": 50}]), 20)
    with pytest.raises(ValueError):
        grid.density[0, 0] = 5.0


def test_frame_lists_cells_in_key_order():
    events = _events([
        {"type": "shot", "x": 90, "y": 10},
        {"type": "shot", "x": 10, "y": 90},
        {"type": "shot", "x": 10, "y": 10},
    ])
    frame = build_grid(events, 20).to_frame()
    assert list(zip(frame["GridX"], frame["GridY"])) == [(4, 2), (4, 23), (36, 2)]
    assert np.allclose(frame["Density"], 1.0)


def test_grid_equality_requires_same_parameters():
    density = np.zeros((26, 40))
    assert DensityGrid(density, 20) != DensityGrid(density, 20, Zone.BUILD_UP)

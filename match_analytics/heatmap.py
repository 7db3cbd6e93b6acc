"""Spatial density grids over the logical 800x520 pitch canvas."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable

import numpy as np
import pandas as pd

from constants import COORD_MAX, EVENT_WEIGHT, HEATMAP_GRID_SIZE, PASS_END_WEIGHT, PITCH_CANVAS_HEIGHT, PITCH_CANVAS_WIDTH
from match_analytics.schema import EventType, MatchEvent, Zone


@dataclass(frozen=True)
class HeatmapCell:
    grid_x: int
    grid_y: int
    density: float


def grid_shape(grid_size: float) -> tuple[int, int]:
    """Return (rows, cols) needed to cover the canvas with square cells."""
    if grid_size <= 0:
        raise ValueError(f"grid_size must be positive, got {grid_size}")
    return math.ceil(PITCH_CANVAS_HEIGHT / grid_size), math.ceil(PITCH_CANVAS_WIDTH / grid_size)


def grid_index(x: float, y: float, grid_size: float) -> tuple[int, int]:
    """Return (grid_x, grid_y) for a percentage coordinate.

    The far touchline/goal line (coordinate 100) folds into the last cell.
    """
    rows, cols = grid_shape(grid_size)
    gx = math.floor((x / COORD_MAX) * (PITCH_CANVAS_WIDTH / grid_size))
    gy = math.floor((y / COORD_MAX) * (PITCH_CANVAS_HEIGHT / grid_size))
    return min(gx, cols - 1), min(gy, rows - 1)


class DensityGrid:
    """Read-only weighted counts, indexed ``density[grid_y, grid_x]``."""

    def __init__(self, density: np.ndarray, grid_size: float, zone_filter: Zone | None = None):
        self._density = np.array(density, dtype=float, copy=True)
        self._density.setflags(write=False)
        self.grid_size = grid_size
        self.zone_filter = zone_filter

    @property
    def density(self) -> np.ndarray:
        return self._density

    @property
    def shape(self) -> tuple[int, int]:
        return self._density.shape

    @property
    def max_density(self) -> float:
        return float(self._density.max()) if self._density.size else 0.0

    @property
    def total_weight(self) -> float:
        return float(self._density.sum())

    def density_at(self, grid_x: int, grid_y: int) -> float:
        rows, cols = self.shape
        if not (0 <= grid_x < cols and 0 <= grid_y < rows):
            return 0.0
        return float(self._density[grid_y, grid_x])

    def cells(self) -> list[HeatmapCell]:
        """Non-empty cells ordered by (grid_x, grid_y)."""
        gy, gx = np.nonzero(self._density)
        order = np.lexsort((gy, gx))
        return [
            HeatmapCell(grid_x=int(gx[i]), grid_y=int(gy[i]), density=float(self._density[gy[i], gx[i]]))
            for i in order
        ]

    def as_dict(self) -> dict[tuple[int, int], float]:
        return {(cell.grid_x, cell.grid_y): cell.density for cell in self.cells()}

    def to_frame(self) -> pd.DataFrame:
        cells = self.cells()
        return pd.DataFrame({
            "GridX": pd.Series([c.grid_x for c in cells], dtype="int64"),
            "GridY": pd.Series([c.grid_y for c in cells], dtype="int64"),
            "Density": pd.Series([c.density for c in cells], dtype="float64"),
        })

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DensityGrid):
            return NotImplemented
        return (
            self.grid_size == other.grid_size
            and self.zone_filter == other.zone_filter
            and np.array_equal(self._density, other._density)
        )

    def __repr__(self) -> str:
        return f"DensityGrid(shape={self.shape}, grid_size={self.grid_size}, cells={int(np.count_nonzero(self._density))})"


def build_grid(
    events: Iterable[MatchEvent],
    grid_size: float = HEATMAP_GRID_SIZE,
    zone_filter: Zone | str | None = None,
    *,
    pass_end_weight: float = PASS_END_WEIGHT,
) -> DensityGrid:
    """Bin event origins (weight 1.0) and pass destinations into a density grid.

    Values are raw weighted counts so grids from different subsets stay
    comparable; scaling to the maximum is a display concern.
    """
    rows, cols = grid_shape(grid_size)
    if pass_end_weight < 0:
        raise ValueError(f"pass_end_weight must be >= 0, got {pass_end_weight}")
    zone = Zone.parse(zone_filter) if zone_filter is not None else None

    xs: list[float] = []
    ys: list[float] = []
    weights: list[float] = []
    for event in events:
        if zone is not None and event.zone is not zone:
            continue
        xs.append(event.x)
        ys.append(event.y)
        weights.append(EVENT_WEIGHT)
        if event.type is EventType.PASS and event.has_end:
            xs.append(event.end_x)
            ys.append(event.end_y)
            weights.append(pass_end_weight)

    density = np.zeros((rows, cols), dtype=float)
    if xs:
        x_arr = np.asarray(xs, dtype=float)
        y_arr = np.asarray(ys, dtype=float)
        gx = np.floor((x_arr / COORD_MAX) * (PITCH_CANVAS_WIDTH / grid_size)).astype(int)
        gy = np.floor((y_arr / COORD_MAX) * (PITCH_CANVAS_HEIGHT / grid_size)).astype(int)
        gx = np.clip(gx, 0, cols - 1)
        gy = np.clip(gy, 0, rows - 1)
        # add.at accumulates repeated indices in input order
        np.add.at(density, (gy, gx), np.asarray(weights, dtype=float))
    return DensityGrid(density, grid_size=grid_size, zone_filter=zone)

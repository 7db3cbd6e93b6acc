"""Directed pass networks built from tagged pass events."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable, Sequence

import pandas as pd

from constants import KEY_PASS_MIN_X, MIN_PASS_THRESHOLD
from match_analytics.schema import EventType, MatchEvent

EDGE_COLUMNS = ["From", "To", "Count", "Success", "SuccessRate"]
NODE_COLUMNS = ["Player", "Name", "Touches", "PassesAttempted", "PassesCompleted", "X", "Y"]


@dataclass(frozen=True)
class PassConnection:
    from_player: str
    to_player: str
    count: int
    success: int

    @property
    def success_rate(self) -> float:
        return self.success / self.count


@dataclass(frozen=True)
class PlayerNode:
    id: str
    name: str | None
    touches: int
    passes_attempted: int
    passes_completed: int
    x: float
    y: float

    @property
    def completion_rate(self) -> float:
        return self.passes_completed / self.passes_attempted if self.passes_attempted else 0.0


@dataclass(frozen=True)
class PassNetwork:
    nodes: tuple[PlayerNode, ...]
    edges: tuple[PassConnection, ...]
    min_pass_threshold: int

    def node(self, player_id: str) -> PlayerNode | None:
        return next((node for node in self.nodes if node.id == player_id), None)

    def edge(self, from_player: str, to_player: str) -> PassConnection | None:
        return next(
            (edge for edge in self.edges if edge.from_player == from_player and edge.to_player == to_player),
            None,
        )

    def edges_frame(self) -> pd.DataFrame:
        if not self.edges:
            return pd.DataFrame(columns=EDGE_COLUMNS)
        return pd.DataFrame(
            [[e.from_player, e.to_player, e.count, e.success, e.success_rate] for e in self.edges],
            columns=EDGE_COLUMNS,
        )

    def nodes_frame(self) -> pd.DataFrame:
        if not self.nodes:
            return pd.DataFrame(columns=NODE_COLUMNS)
        return pd.DataFrame(
            [[n.id, n.name, n.touches, n.passes_attempted, n.passes_completed, n.x, n.y] for n in self.nodes],
            columns=NODE_COLUMNS,
        )


@dataclass(frozen=True)
class NetworkSummary:
    total_passes: int
    successful_passes: int
    pass_accuracy: float
    key_passes: int


def _pass_table(events: Iterable[MatchEvent]) -> pd.DataFrame:
    rows = [
        {
            "From": event.player_id,
            "FromName": event.player_name,
            "To": event.receiver_id,
            "ToName": event.receiver_name,
            "Completed": bool(event.completed),
            "X": event.x,
            "Y": event.y,
            "EndX": event.end_x if event.has_end else event.x,
            "EndY": event.end_y if event.has_end else event.y,
        }
        for event in events
        if event.type is EventType.PASS and (event.player_id or event.receiver_id)
    ]
    return pd.DataFrame(rows, columns=["From", "FromName", "To", "ToName", "Completed", "X", "Y", "EndX", "EndY"])


def _build_edges(passes: pd.DataFrame, min_pass_threshold: int) -> tuple[PassConnection, ...]:
    linked = passes.dropna(subset=["From", "To"])
    if linked.empty:
        return ()
    grouped = linked.groupby(["From", "To"], sort=False).agg(
        Count=("Completed", "size"),
        Success=("Completed", "sum"),
    )
    grouped = grouped[grouped["Count"] >= min_pass_threshold]
    return tuple(
        PassConnection(from_player=str(src), to_player=str(dst), count=int(row.Count), success=int(row.Success))
        for (src, dst), row in grouped.iterrows()
    )


def _build_nodes(passes: pd.DataFrame) -> tuple[PlayerNode, ...]:
    if passes.empty:
        return ()
    made = passes.dropna(subset=["From"])
    made = pd.DataFrame({
        "Player": made["From"],
        "Name": made["FromName"],
        "X": made["X"],
        "Y": made["Y"],
        "Attempted": 1,
        "Completed": made["Completed"].astype(int),
    })
    received = passes.dropna(subset=["To"])
    received = pd.DataFrame({
        "Player": received["To"],
        "Name": received["ToName"],
        "X": received["EndX"],
        "Y": received["EndY"],
        "Attempted": 0,
        "Completed": 0,
    })
    # Interleave on the original row order so first appearance decides node order
    involvement = pd.concat([made, received]).sort_index(kind="stable")
    involvement["Pass"] = involvement.index
    summary = involvement.groupby("Player", sort=False).agg(
        Name=("Name", "first"),
        Touches=("Pass", "nunique"),
        Attempted=("Attempted", "sum"),
        Completed=("Completed", "sum"),
        X=("X", "mean"),
        Y=("Y", "mean"),
    )
    return tuple(
        PlayerNode(
            id=str(player),
            name=None if pd.isna(row.Name) else str(row.Name),
            touches=int(row.Touches),
            passes_attempted=int(row.Attempted),
            passes_completed=int(row.Completed),
            x=float(row.X),
            y=float(row.Y),
        )
        for player, row in summary.iterrows()
    )


def build_network(events: Iterable[MatchEvent], min_pass_threshold: int = MIN_PASS_THRESHOLD) -> PassNetwork:
    """Aggregate passes into directed player-pair edges plus per-player nodes.

    Edges below *min_pass_threshold* are left out. Node counts always use every
    pass, so thresholding never hides a player's involvement.
    """
    if min_pass_threshold < 0:
        raise ValueError(f"min_pass_threshold must be >= 0, got {min_pass_threshold}")
    passes = _pass_table(events)
    return PassNetwork(
        nodes=_build_nodes(passes),
        edges=_build_edges(passes, min_pass_threshold),
        min_pass_threshold=min_pass_threshold,
    )


def infer_receivers(events: Sequence[MatchEvent]) -> list[MatchEvent]:
    """Fill missing receivers on completed passes from the next tagged player.

    The next event carrying a player id is taken as the reception when it is a
    different player on the same team (or team ids are absent on both sides).
    """
    out = list(events)
    for idx, event in enumerate(out):
        if event.type is not EventType.PASS or event.receiver_id or not event.completed or not event.player_id:
            continue
        follower = next((nxt for nxt in out[idx + 1:] if nxt.player_id), None)
        if follower is None or follower.player_id == event.player_id:
            continue
        if event.team_id != follower.team_id:
            continue
        out[idx] = replace(event, receiver_id=follower.player_id, receiver_name=follower.player_name)
    return out


def summarize_network(network: PassNetwork, *, key_pass_min_x: float = KEY_PASS_MIN_X) -> NetworkSummary:
    """Totals over the displayed edges; key passes end with a forward-positioned receiver."""
    total = sum(edge.count for edge in network.edges)
    successful = sum(edge.success for edge in network.edges)
    forward = {node.id for node in network.nodes if node.x > key_pass_min_x}
    key_passes = sum(edge.count for edge in network.edges if edge.to_player in forward)
    return NetworkSummary(
        total_passes=total,
        successful_passes=successful,
        pass_accuracy=successful / total * 100.0 if total else 0.0,
        key_passes=key_passes,
    )

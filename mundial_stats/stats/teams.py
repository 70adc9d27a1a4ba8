"""
Team Standings

Rolls match-detail rows into per-team totals, per-match averages and
point-share percentages, plus the per-team detail views (map performance,
roster and kill distribution).

Usage:
    from mundial_stats.stats.teams import calculate_team_stats, top_teams
    standings = calculate_team_stats(bundle, FilterSpec(map="Bermuda"))
    podium = top_teams(standings, "booyahs")
"""

from collections import defaultdict
from typing import Sequence

import pandas as pd

from mundial_stats.config import AVERAGE_DECIMALS, TOP_N_TEAMS
from mundial_stats.models import DataBundle, TeamStats
from mundial_stats.stats.filters import FilterSpec, apply_filter
from mundial_stats.utils import format_average, round_half_up

TEAM_METRICS = frozenset({
    "matches", "booyahs", "placement_points", "kills", "points",
    "avg_kills", "avg_points", "avg_placement_points",
    "percent_placement", "percent_kills",
})

MAP_COLUMNS = ["map", "points", "kills", "booyahs", "matches", "avg_points"]
ROSTER_COLUMNS = ["player", "kills", "matches", "kd", "share"]


def _finalize(name: str, image: str | None, totals: dict) -> TeamStats:
    """Derive averages (when matches > 0) and shares (when points > 0)."""
    matches = totals["matches"]
    points = totals["points"]

    avg_kills = avg_points = avg_placement = 0.0
    if matches > 0:
        avg_kills = round_half_up(totals["kills"] / matches, AVERAGE_DECIMALS)
        avg_points = round_half_up(points / matches, AVERAGE_DECIMALS)
        avg_placement = round_half_up(totals["placement_points"] / matches, AVERAGE_DECIMALS)

    percent_placement = percent_kills = 0
    if points > 0:
        percent_placement = int(round_half_up(totals["placement_points"] / points * 100))
        percent_kills = int(round_half_up(totals["kills"] / points * 100))

    return TeamStats(
        name=name,
        image=image,
        matches=matches,
        booyahs=totals["booyahs"],
        placement_points=totals["placement_points"],
        kills=totals["kills"],
        points=points,
        avg_kills=avg_kills,
        avg_points=avg_points,
        avg_placement_points=avg_placement,
        percent_placement=percent_placement,
        percent_kills=percent_kills,
    )


def calculate_team_stats(bundle: DataBundle, spec: FilterSpec | None = None) -> list[TeamStats]:
    """
    Compute standings for every team in the (filtered) match details.

    Args:
        bundle: Data snapshot
        spec: Optional filter over team, map, round and confrontation

    Returns:
        TeamStats list sorted by total points, descending; equal totals keep
        first-appearance order
    """
    details = apply_filter(bundle.details, spec)

    # Exact-name lookup; a later reference row overrides an earlier one
    images = {t.name: t.image for t in bundle.teams_reference if t.image}

    totals: dict[str, dict] = {}
    for row in details:
        name = row.team
        if not name or not name.strip():
            continue
        team = totals.setdefault(name, defaultdict(int))
        team["matches"] += row.matches
        team["booyahs"] += row.booyahs
        team["placement_points"] += row.placement_points
        team["kills"] += row.kills
        team["points"] += row.points

    stats = [_finalize(name, images.get(name), team) for name, team in totals.items()]
    return sorted(stats, key=lambda s: s.points, reverse=True)


def sort_team_stats(stats: Sequence[TeamStats], keys: Sequence[str]) -> list[TeamStats]:
    """
    Sort standings by a chain of metrics, all descending.

    Raises:
        ValueError: If a key is not a TeamStats metric
    """
    unknown = [k for k in keys if k not in TEAM_METRICS]
    if unknown:
        raise ValueError(
            f"Invalid team metric(s): {', '.join(unknown)}. "
            f"Allowed values: {', '.join(sorted(TEAM_METRICS))}"
        )
    return sorted(stats, key=lambda s: tuple(getattr(s, k) for k in keys), reverse=True)


def top_teams(stats: Sequence[TeamStats], metric: str, n: int = TOP_N_TEAMS) -> list[TeamStats]:
    """Podium for one metric, total points breaking ties."""
    return sort_team_stats(stats, (metric, "points"))[:n]


def map_performance(bundle: DataBundle, team: str) -> pd.DataFrame:
    """
    Points, kills, booyahs and matches per map for one team.

    Returns:
        DataFrame with MAP_COLUMNS, sorted by points descending
    """
    per_map: dict[str, dict] = {}
    for row in bundle.details:
        if row.team != team or not row.map:
            continue
        entry = per_map.setdefault(row.map, {"map": row.map, "points": 0, "kills": 0, "booyahs": 0, "matches": 0})
        entry["points"] += row.points
        entry["kills"] += row.kills
        entry["booyahs"] += row.booyahs
        entry["matches"] += row.matches

    rows = sorted(per_map.values(), key=lambda e: e["points"], reverse=True)
    for entry in rows:
        entry["avg_points"] = (
            round_half_up(entry["points"] / entry["matches"], 1) if entry["matches"] > 0 else 0.0
        )
    return pd.DataFrame(rows, columns=MAP_COLUMNS)


def team_roster(bundle: DataBundle, team: str) -> tuple[pd.DataFrame, pd.DataFrame]:
    """
    Player roster and kill contribution for one team.

    Returns:
        Tuple of (roster, kill_distribution):
        - roster: player, kills, matches, kd ("0.00" format) and share
          (percent of the team's roster kills, 1 decimal), by kills descending
        - kill_distribution: player, kills for players with at least one kill
    """
    per_player: dict[str, dict] = {}
    for row in bundle.players:
        if row.team != team:
            continue
        entry = per_player.setdefault(row.player, {"player": row.player, "kills": 0, "matches": 0})
        entry["kills"] += row.kills
        entry["matches"] += row.matches

    rows = sorted(per_player.values(), key=lambda e: e["kills"], reverse=True)
    total_kills = sum(e["kills"] for e in rows)
    for entry in rows:
        entry["kd"] = format_average(entry["kills"], entry["matches"])
        entry["share"] = round_half_up(entry["kills"] / total_kills * 100, 1) if total_kills > 0 else 0.0

    roster = pd.DataFrame(rows, columns=ROSTER_COLUMNS)
    distribution = pd.DataFrame(
        [(e["player"], e["kills"]) for e in rows if e["kills"] > 0],
        columns=["player", "kills"],
    )
    return roster, distribution

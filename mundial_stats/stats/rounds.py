"""
Round Evolution

Per-round time series: records are grouped by round label, metrics summed,
and rounds ordered by the number embedded in the label ("RD2" < "RD10"),
falling back to lexical order when there are no digits or numbers tie.
"""

from typing import Iterable, Mapping

import pandas as pd

from mundial_stats.models import DataBundle
from mundial_stats.utils import round_sort_key


def sort_rounds(labels: Iterable[str]) -> list[str]:
    """Order round labels numerically, e.g. RD1, RD2, RD10."""
    return sorted(labels, key=round_sort_key)


def round_evolution(
    records: Iterable,
    metrics: Mapping[str, str] | None = None,
    count_as: str | None = None,
) -> pd.DataFrame:
    """
    Sum metrics per round.

    Args:
        records: Records with a ``round`` attribute; blank rounds are skipped
        metrics: Output column -> numeric record attribute to sum
        count_as: Optional output column holding the row count per round

    Returns:
        DataFrame with a ``round`` column followed by the metric columns,
        one row per round in round order
    """
    metrics = dict(metrics or {})
    columns = ["round", *metrics]
    if count_as:
        columns.append(count_as)

    totals: dict[str, dict] = {}
    for record in records:
        label = record.round
        if not label:
            continue
        entry = totals.get(label)
        if entry is None:
            entry = {column: 0 for column in columns}
            entry["round"] = label
            totals[label] = entry
        for column, attr in metrics.items():
            entry[column] += getattr(record, attr)
        if count_as:
            entry[count_as] += 1

    ordered = sorted(totals.values(), key=lambda e: round_sort_key(e["round"]))
    return pd.DataFrame(ordered, columns=columns)


def team_evolution(bundle: DataBundle, team: str) -> pd.DataFrame:
    """Points and kills per round for one team."""
    rows = [d for d in bundle.details if d.team == team]
    return round_evolution(rows, {"points": "points", "kills": "kills"})


def player_kills_by_round(bundle: DataBundle, player: str) -> pd.DataFrame:
    """Kill-feed eliminations per round for one player."""
    rows = [k for k in bundle.kill_feed if k.killer == player]
    return round_evolution(rows, count_as="kills")

"""
Player Statistics

Player ranking, character/pet/item usage frequency, most-used loadouts and
the combined player profile.

Usage:
    from mundial_stats.stats.players import player_ranking, usage_frequency
    ranking = player_ranking(bundle, FilterSpec(team="Alpha"))
    usage = usage_frequency(bundle.characters)
"""

from dataclasses import asdict, dataclass, field

import pandas as pd

from mundial_stats.config import AVERAGE_DECIMALS, TOP_N_USAGE
from mundial_stats.models import DataBundle, Loadout, keep_none
from mundial_stats.stats.filters import FilterSpec, apply_filter
from mundial_stats.stats.rounds import player_kills_by_round
from mundial_stats.stats.tables import frequency_table, image_index, lookup_image, modal_value
from mundial_stats.utils import format_average

RANKING_COLUMNS = ["player", "team", "kills", "matches", "avg"]

# Loadout slot -> bundle dimension table holding its artwork
LOADOUT_DIMENSIONS = {
    "hab1": "hab1",
    "hab2": "hab2",
    "hab3": "hab3",
    "hab4": "hab4",
    "pet": "pets",
    "item": "items",
}


@dataclass(frozen=True, eq=False)
class UsageStats:
    """Top-N frequency tables (name, count) for a set of loadouts."""
    active: pd.DataFrame
    passive: pd.DataFrame
    pets: pd.DataFrame
    items: pd.DataFrame


@dataclass(frozen=True)
class LoadoutSlot:
    name: str | None = None
    image: str | None = None


@dataclass(frozen=True, eq=False)
class PlayerProfile:
    """Everything the single-player report shows."""
    name: str
    kills: int
    matches: int
    avg: str
    loadout: dict[str, LoadoutSlot]
    usage: UsageStats
    weapons: pd.DataFrame
    safes: pd.DataFrame
    maps: pd.DataFrame
    victims: pd.DataFrame
    kills_by_round: pd.DataFrame = field(default_factory=pd.DataFrame)


def player_ranking(bundle: DataBundle, spec: FilterSpec | None = None) -> pd.DataFrame:
    """
    Rank players by total kills over the (filtered) player stat rows.

    Args:
        bundle: Data snapshot
        spec: Optional filter over team, players, map and round

    Returns:
        DataFrame with RANKING_COLUMNS. ``team`` is the first team seen for
        the player; ``avg`` is kills per match as a two-decimal string
        ("0.00" when the player has no matches).
    """
    rows = apply_filter(bundle.players, spec)
    if not rows:
        return pd.DataFrame(columns=RANKING_COLUMNS)

    df = pd.DataFrame(
        [(r.player, r.team, r.kills, r.matches) for r in rows],
        columns=["player", "team", "kills", "matches"],
    )
    ranking = (
        df.groupby("player", sort=False)
        .agg(team=("team", "first"), kills=("kills", "sum"), matches=("matches", "sum"))
        .reset_index()
    )
    ranking["avg"] = [
        format_average(k, m, AVERAGE_DECIMALS) for k, m in zip(ranking["kills"], ranking["matches"])
    ]
    ranking = ranking.sort_values("kills", ascending=False, kind="stable").reset_index(drop=True)
    return ranking[RANKING_COLUMNS]


def player_totals(bundle: DataBundle, player: str) -> tuple[int, int, str]:
    """(kills, matches, avg) for one player across every stat row."""
    kills = matches = 0
    for row in bundle.players:
        if row.player == player:
            kills += row.kills
            matches += row.matches
    return kills, matches, format_average(kills, matches, AVERAGE_DECIMALS)


def usage_frequency(loadouts, top_n: int = TOP_N_USAGE) -> UsageStats:
    """
    Most used active abilities, passive abilities, pets and items.

    Slot 1 is counted on its own; slots 2-4 are pooled into one passive
    table. Each table is sorted by count descending (ties keep
    first-encountered order) and cut to top_n.
    """
    loadouts = tuple(loadouts)
    return UsageStats(
        active=frequency_table((c.active for c in loadouts), top_n),
        passive=frequency_table((p for c in loadouts for p in c.passives), top_n),
        pets=frequency_table((c.pet for c in loadouts), top_n),
        items=frequency_table((c.item for c in loadouts), top_n),
    )


def most_used_loadout(
    bundle: DataBundle,
    player: str,
    active_ability: str | None = None,
) -> dict[str, LoadoutSlot]:
    """
    Modal value per loadout slot across one player's loadout history.

    Args:
        bundle: Data snapshot
        player: Player name (exact match)
        active_ability: Drill-down; only loadouts with this active ability count

    Returns:
        Slot name (hab1..hab4, pet, item) -> LoadoutSlot with image resolved
        from the matching dimension table; empty slots have name None
    """
    history = [c for c in bundle.characters if c.player == player]
    if active_ability:
        history = [c for c in history if c.active == active_ability]

    loadout = {}
    for slot, table in LOADOUT_DIMENSIONS.items():
        name = modal_value(getattr(c, slot) for c in history)
        image = lookup_image(image_index(getattr(bundle, table)), name)
        loadout[slot] = LoadoutSlot(name=name, image=image)
    return loadout


def character_usage(bundle: DataBundle, spec: FilterSpec | None = None, top_n: int = TOP_N_USAGE) -> UsageStats:
    """Usage frequency over the loadouts that pass spec."""
    return usage_frequency(apply_filter(bundle.characters, spec), top_n)


def decorate_loadouts(bundle: DataBundle, loadouts) -> pd.DataFrame:
    """
    Loadout rows with artwork attached for the character gallery.

    Adds ``<slot>_img`` for each ability/pet/item slot (case-insensitive
    lookup) and ``team_img`` (exact team-name lookup).
    """
    indexes = {slot: image_index(getattr(bundle, table)) for slot, table in LOADOUT_DIMENSIONS.items()}
    team_images: dict[str, str] = {}
    for team in bundle.teams_reference:
        # First reference row with an image wins
        if team.image and team.name not in team_images:
            team_images[team.name] = team.image

    rows = []
    for loadout in loadouts:
        row = asdict(loadout)
        for slot, index in indexes.items():
            row[f"{slot}_img"] = lookup_image(index, getattr(loadout, slot))
        row["team_img"] = team_images.get(loadout.team)
        rows.append(row)

    columns = list(asdict(Loadout(player="")).keys())
    image_columns = [f"{slot}_img" for slot in LOADOUT_DIMENSIONS] + ["team_img"]
    df = pd.DataFrame(rows, columns=columns + image_columns)
    return keep_none(df, image_columns)


def player_profile(bundle: DataBundle, player: str, active_ability: str | None = None) -> PlayerProfile:
    """
    Build the single-player report.

    Args:
        bundle: Data snapshot
        player: Player name (exact match)
        active_ability: Optional drill-down for the most-used loadout

    Returns:
        PlayerProfile with totals, loadout, usage and kill-feed breakdowns
    """
    kills, matches, avg = player_totals(bundle, player)
    history = [c for c in bundle.characters if c.player == player]
    eliminations = [k for k in bundle.kill_feed if k.killer == player]

    return PlayerProfile(
        name=player,
        kills=kills,
        matches=matches,
        avg=avg,
        loadout=most_used_loadout(bundle, player, active_ability),
        usage=usage_frequency(history),
        weapons=frequency_table(k.weapon for k in eliminations),
        safes=frequency_table(k.safe for k in eliminations),
        maps=frequency_table(k.map for k in eliminations),
        victims=frequency_table(k.victim for k in eliminations),
        kills_by_round=player_kills_by_round(bundle, player),
    )

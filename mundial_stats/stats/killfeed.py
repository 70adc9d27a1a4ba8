"""
Kill-Feed Analytics

Weapon, safe-zone and player frequency tables over the filtered kill feed.
In ``kills`` mode the player table ranks killers and the player filter
targets killers; in ``deaths`` mode both switch to victims.
"""

from dataclasses import dataclass

import pandas as pd

from mundial_stats.config import DEATHS_MODE, KILLS_MODE
from mundial_stats.models import DataBundle, KillEvent
from mundial_stats.stats.filters import FilterSpec, apply_filter
from mundial_stats.stats.tables import image_index, lookup_image, share_table


@dataclass(frozen=True, eq=False)
class KillFeedStats:
    """
    Frequency tables (name, count, percent, image) for one kill-feed view.

    ``percent`` is each count's share of ``total``, the number of filtered
    events.
    """
    mode: str
    total: int
    weapons: pd.DataFrame
    safes: pd.DataFrame
    players: pd.DataFrame


def subject(event: KillEvent, mode: str) -> str:
    """The player a kill event is counted for in the given mode."""
    return event.victim if mode == DEATHS_MODE else event.killer


def kill_feed_stats(
    bundle: DataBundle,
    spec: FilterSpec | None = None,
    mode: str = KILLS_MODE,
) -> KillFeedStats:
    """
    Aggregate the filtered kill feed.

    Args:
        bundle: Data snapshot
        spec: Optional filter (weapon, safe, map, round, confrontation, players)
        mode: KILLS_MODE or DEATHS_MODE

    Returns:
        KillFeedStats; weapon and safe rows carry their dimension artwork
    """
    events = apply_filter(bundle.kill_feed, spec, mode)
    total = len(events)

    return KillFeedStats(
        mode=mode,
        total=total,
        weapons=share_table((e.weapon for e in events), total, image_index(bundle.weapons)),
        safes=share_table((e.safe for e in events), total, image_index(bundle.safes)),
        players=share_table((subject(e, mode) for e in events), total),
    )


def weapon_image(bundle: DataBundle, name: str | None) -> str | None:
    """Artwork for a weapon, matched ignoring case and surrounding spaces."""
    return lookup_image(image_index(bundle.weapons), name)


def safe_image(bundle: DataBundle, name: str | None) -> str | None:
    """Artwork for a safe zone, matched ignoring case and surrounding spaces."""
    return lookup_image(image_index(bundle.safes), name)

"""
Canonical records for the Mundial stats engine.

The parser yields untyped ``dict`` rows; the normalizer projects each one
into one of the frozen records below. Everything downstream of the
normalizer works on these records only.

Each fact record declares which attribute answers which filter field
(``FILTER_FIELDS``) and which attribute the player filter targets
(``PLAYER_FIELDS``, keyed by view mode).
"""

from dataclasses import asdict, dataclass, field, fields
from datetime import datetime
from typing import ClassVar

import pandas as pd

from mundial_stats.config import DEATHS_MODE, KILLS_MODE


@dataclass(frozen=True)
class MatchDetail:
    """One team-map-round result."""
    team: str
    map: str = ""
    round: str = ""
    confrontation: str = ""
    points: int = 0
    placement_points: int = 0
    placement: int = 0
    kills: int = 0
    booyahs: int = 0
    matches: int = 0

    FILTER_FIELDS: ClassVar[dict] = {
        "team": "team", "map": "map", "round": "round", "confrontation": "confrontation",
    }
    PLAYER_FIELDS: ClassVar[dict] = {}


@dataclass(frozen=True)
class KillEvent:
    """One elimination from the kill feed."""
    killer: str
    victim: str = ""
    weapon: str = ""
    safe: str = ""
    map: str = ""
    round: str = ""
    confrontation: str = ""
    time: str = ""

    FILTER_FIELDS: ClassVar[dict] = {
        "weapon": "weapon", "safe": "safe", "map": "map",
        "round": "round", "confrontation": "confrontation",
    }
    PLAYER_FIELDS: ClassVar[dict] = {KILLS_MODE: "killer", DEATHS_MODE: "victim"}


@dataclass(frozen=True)
class PlayerStat:
    """One player-match line."""
    player: str
    team: str = ""
    matches: int = 0
    kills: int = 0
    map: str = ""
    round: str = ""

    FILTER_FIELDS: ClassVar[dict] = {"team": "team", "map": "map", "round": "round"}
    PLAYER_FIELDS: ClassVar[dict] = {KILLS_MODE: "player", DEATHS_MODE: "player"}


@dataclass(frozen=True)
class Loadout:
    """One player-match loadout: an active ability, three passives, pet and item."""
    player: str
    team: str = ""
    hab1: str = ""
    hab2: str = ""
    hab3: str = ""
    hab4: str = ""
    pet: str = ""
    item: str = ""
    round: str = ""
    map: str = ""
    confrontation: str = ""
    matches: int = 0

    FILTER_FIELDS: ClassVar[dict] = {
        "team": "team", "map": "map", "round": "round", "confrontation": "confrontation",
    }
    PLAYER_FIELDS: ClassVar[dict] = {KILLS_MODE: "player", DEATHS_MODE: "player"}

    @property
    def active(self) -> str:
        return self.hab1

    @property
    def passives(self) -> tuple[str, str, str]:
        return (self.hab2, self.hab3, self.hab4)


@dataclass(frozen=True)
class Dimension:
    """Reference entity: a canonical name and its artwork."""
    name: str
    image: str | None = None


@dataclass(frozen=True)
class TeamStats:
    name: str
    image: str | None = None
    matches: int = 0
    booyahs: int = 0
    placement_points: int = 0
    kills: int = 0
    points: int = 0
    avg_kills: float = 0.0
    avg_points: float = 0.0
    avg_placement_points: float = 0.0
    percent_placement: int = 0
    percent_kills: int = 0


def keep_none(df: pd.DataFrame, columns) -> pd.DataFrame:
    """
    Store missing values in optional columns as None, not NaN.

    Columns are forced to object dtype; a missing value reads back as None.
    """
    for column in columns:
        values = [None if pd.isna(v) else v for v in df[column]]
        df[column] = pd.Series(values, index=df.index, dtype=object)
    return df


# Table name -> record type, in bundle order
BUNDLE_TABLES = {
    "players": PlayerStat,
    "kill_feed": KillEvent,
    "details": MatchDetail,
    "characters": Loadout,
    "teams_reference": Dimension,
    "weapons": Dimension,
    "safes": Dimension,
    "hab1": Dimension,
    "hab2": Dimension,
    "hab3": Dimension,
    "hab4": Dimension,
    "pets": Dimension,
    "items": Dimension,
}


@dataclass(frozen=True)
class DataBundle:
    """
    One complete snapshot of every normalized table.

    A refresh builds a new bundle and swaps it in whole; a bundle is never
    updated in place.
    """
    players: tuple[PlayerStat, ...] = ()
    kill_feed: tuple[KillEvent, ...] = ()
    details: tuple[MatchDetail, ...] = ()
    characters: tuple[Loadout, ...] = ()
    teams_reference: tuple[Dimension, ...] = ()
    weapons: tuple[Dimension, ...] = ()
    safes: tuple[Dimension, ...] = ()
    hab1: tuple[Dimension, ...] = ()
    hab2: tuple[Dimension, ...] = ()
    hab3: tuple[Dimension, ...] = ()
    hab4: tuple[Dimension, ...] = ()
    pets: tuple[Dimension, ...] = ()
    items: tuple[Dimension, ...] = ()
    loading: bool = False
    last_updated: datetime | None = field(default=None)

    @classmethod
    def empty(cls, loading: bool = False) -> "DataBundle":
        """Bundle with every table empty and no timestamp."""
        return cls(loading=loading, last_updated=None)

    @property
    def is_empty(self) -> bool:
        return not any(getattr(self, name) for name in BUNDLE_TABLES)

    def row_counts(self) -> dict[str, int]:
        return {name: len(getattr(self, name)) for name in BUNDLE_TABLES}

    def frame(self, table: str) -> pd.DataFrame:
        """
        Return one table as a DataFrame, columns in record field order.

        Raises:
            ValueError: If table is not a bundle table
        """
        if table not in BUNDLE_TABLES:
            raise ValueError(
                f"Unknown table: '{table}'. "
                f"Allowed values: {', '.join(BUNDLE_TABLES)}"
            )
        record_fields = fields(BUNDLE_TABLES[table])
        columns = [f.name for f in record_fields]
        optional = [f.name for f in record_fields if f.default is None]
        df = pd.DataFrame([asdict(r) for r in getattr(self, table)], columns=columns)
        return keep_none(df, optional)

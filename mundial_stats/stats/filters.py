"""
Filter Predicate Evaluator

A FilterSpec is a declarative multi-field filter: each scalar field is either
the wildcard ``ALL`` or an exact value, and ``players`` is either empty
(everyone) or a set of accepted names. A row passes when every active field
matches (logical AND).

Each record type declares which of its attributes answer which filter field;
filter fields a record type does not carry are ignored for it. For kill
events the player set targets the killer or the victim depending on mode.
"""

from dataclasses import dataclass, field, replace
from typing import Callable, Iterable

from mundial_stats.config import ALL, KILLS_MODE
from mundial_stats.utils import validate_mode

SCALAR_FIELDS = ("team", "weapon", "safe", "map", "round", "confrontation")
FILTER_FIELDS = SCALAR_FIELDS + ("players",)


@dataclass(frozen=True)
class FilterSpec:
    team: str = ALL
    players: frozenset[str] = field(default_factory=frozenset)
    weapon: str = ALL
    safe: str = ALL
    map: str = ALL
    round: str = ALL
    confrontation: str = ALL

    def __post_init__(self):
        # A bare name is one player, not a set of characters
        if isinstance(self.players, str):
            object.__setattr__(self, "players", frozenset({self.players}))
        elif not isinstance(self.players, frozenset):
            object.__setattr__(self, "players", frozenset(self.players))

    @property
    def is_active(self) -> bool:
        return bool(self.players) or any(getattr(self, f) != ALL for f in SCALAR_FIELDS)


def build_predicate(spec: FilterSpec | None, record_type: type, mode: str = KILLS_MODE) -> Callable[[object], bool]:
    """
    Compile a filter into a predicate for one record type.

    Args:
        spec: Filter to apply (None matches everything)
        record_type: Record class exposing FILTER_FIELDS / PLAYER_FIELDS
        mode: KILLS_MODE or DEATHS_MODE, selects the player attribute

    Returns:
        Stateless callable record -> bool

    Raises:
        ValueError: If mode is unknown
    """
    validate_mode(mode)
    if spec is None:
        return lambda record: True

    checks = []
    for filter_field, attr in record_type.FILTER_FIELDS.items():
        value = getattr(spec, filter_field)
        if value != ALL:
            checks.append((attr, value))

    player_attr = record_type.PLAYER_FIELDS.get(mode) if spec.players else None
    players = spec.players

    def predicate(record) -> bool:
        for attr, value in checks:
            if getattr(record, attr) != value:
                return False
        if player_attr is not None and getattr(record, player_attr) not in players:
            return False
        return True

    return predicate


def apply_filter(records: Iterable, spec: FilterSpec | None = None, mode: str = KILLS_MODE) -> tuple:
    """Return the records that satisfy spec, source order preserved."""
    records = tuple(records)
    if not records or spec is None:
        validate_mode(mode)
        return records
    predicate = build_predicate(spec, type(records[0]), mode)
    return tuple(r for r in records if predicate(r))


def toggle(spec: FilterSpec, filter_field: str, value: str) -> FilterSpec:
    """
    Drill-down: select value for a field, or clear it if already selected.

    For ``players`` the name is added to or removed from the set.

    Raises:
        ValueError: If filter_field is not a filter field
    """
    if filter_field == "players":
        players = spec.players - {value} if value in spec.players else spec.players | {value}
        return replace(spec, players=frozenset(players))
    if filter_field not in SCALAR_FIELDS:
        raise ValueError(
            f"Invalid filter field: '{filter_field}'. "
            f"Allowed values: {', '.join(FILTER_FIELDS)}"
        )
    current = getattr(spec, filter_field)
    return replace(spec, **{filter_field: ALL if current == value else value})


def filter_options(records: Iterable, record_type: type | None = None) -> dict[str, list[str]]:
    """
    Distinct non-blank values per filter field, sorted, for a filter bar.

    For kill events the players list covers both killers and victims.
    Fields the record type does not carry map to [].
    """
    records = tuple(records)
    options: dict[str, list[str]] = {name: [] for name in FILTER_FIELDS}
    if not records and record_type is None:
        return options
    record_type = record_type or type(records[0])

    for filter_field, attr in record_type.FILTER_FIELDS.items():
        options[filter_field] = sorted({getattr(r, attr) for r in records} - {""})

    player_attrs = set(record_type.PLAYER_FIELDS.values())
    names = set()
    for attr in player_attrs:
        names.update(getattr(r, attr) for r in records)
    options["players"] = sorted(names - {""})
    return options

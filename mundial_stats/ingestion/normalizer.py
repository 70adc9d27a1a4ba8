"""
Schema Normalizer

Projects parsed row dicts into canonical records. Each dataset is described
by an ``EntitySchema``: for every canonical field, an ordered tuple of
acceptable source headers. The first header that is present with a
non-empty value wins.

Rows whose identity fields all resolve to "" are dropped as noise; numeric
fields go through ``parse_or_zero``; empty optional fields become None.

Usage:
    from mundial_stats.ingestion.normalizer import normalize, DETAILS_SCHEMA
    details = normalize(rows, DETAILS_SCHEMA)
"""

from dataclasses import dataclass, field

from mundial_stats.models import Dimension, KillEvent, Loadout, MatchDetail, PlayerStat
from mundial_stats.utils import parse_or_zero, setup_logging

# --- Module Logger ---
logger = setup_logging(__name__)


def variants(*names: str) -> tuple[str, ...]:
    """
    Expand header names into their accepted spellings, order preserved.

    Each name is followed by its upper-case form and, when it ends in a
    number glued to letters ("Hab1"), the spaced form ("Hab 1").
    """
    out: list[str] = []
    for name in names:
        spaced = name
        if name[-1:].isdigit() and not name[:-1].endswith(" "):
            stem = name.rstrip("0123456789")
            if stem:
                spaced = f"{stem} {name[len(stem):]}"
        for candidate in (name, name.upper(), spaced, spaced.upper()):
            if candidate not in out:
                out.append(candidate)
    return tuple(out)


# --- Shared Alias Tables ---
NAME_ALIASES = (
    'Nome', 'Name', 'Personagem', 'Pet', 'Item', 'Arma', 'Safe', 'Habilidade',
    'NOME', 'NAME', 'PERSONAGEM', 'PET', 'ITEM', 'ARMA', 'SAFE', 'HABILIDADE',
)

IMAGE_ALIASES = (
    'IMG', 'Img', 'img', 'Imagem', 'URL', 'Url', 'url', 'Link',
    'IMAGEM', 'IMAGE', 'LINK',
)

TEAM_ALIASES = ('TIME', 'Time', 'Equipe', 'EQUIPE')
PLAYER_ALIASES = ('PLAYER', 'Player', 'Jogador', 'JOGADOR')
MAP_ALIASES = ('MAPA', 'Mapa')
ROUND_ALIASES = ('RD', 'Rd', 'Rodada', 'RODADA')
CONFRONTATION_ALIASES = ('CONFRONTO', 'Confronto')
MATCHES_ALIASES = ('S', 'Partida', 'Quedas', 'PARTIDA', 'QUEDAS')


@dataclass(frozen=True)
class EntitySchema:
    """
    Declarative mapping from source headers to one record type.

    Attributes:
        record_type: Record class built from the resolved values
        fields: Canonical field -> ordered header aliases
        required: Identity fields; a row is kept if any resolves non-empty
        numeric: Fields parsed with parse_or_zero
        optional: Fields where "" becomes None
    """
    record_type: type
    fields: dict[str, tuple[str, ...]]
    required: tuple[str, ...]
    numeric: frozenset[str] = field(default_factory=frozenset)
    optional: frozenset[str] = field(default_factory=frozenset)


DETAILS_SCHEMA = EntitySchema(
    record_type=MatchDetail,
    fields={
        "team": TEAM_ALIASES,
        "map": MAP_ALIASES,
        "round": ROUND_ALIASES,
        "confrontation": CONFRONTATION_ALIASES,
        "points": ('PTS', 'Pts'),
        "placement_points": ('PTSC', 'PTS/C', 'Ptsc'),
        "placement": ('POS', 'Pos'),
        "kills": ('ABTS', 'Abts', 'Abates', 'ABATES'),
        "booyahs": ('B', 'Booyah', 'BOOYAH'),
        "matches": MATCHES_ALIASES,
    },
    required=("team",),
    numeric=frozenset({"points", "placement_points", "placement", "kills", "booyahs", "matches"}),
)

KILL_FEED_SCHEMA = EntitySchema(
    record_type=KillEvent,
    fields={
        "killer": PLAYER_ALIASES,
        "victim": ('VITIMA', 'Vitima', 'Vítima', 'VÍTIMA'),
        "weapon": ('ARMA', 'Arma'),
        "safe": ('SAFE', 'Safe'),
        "map": MAP_ALIASES,
        "round": ROUND_ALIASES,
        "confrontation": CONFRONTATION_ALIASES,
        "time": ('Tempo', 'TEMPO'),
    },
    required=("killer", "victim"),
)

PLAYERS_SCHEMA = EntitySchema(
    record_type=PlayerStat,
    fields={
        "player": PLAYER_ALIASES,
        "team": TEAM_ALIASES,
        "matches": MATCHES_ALIASES,
        "kills": ('Abates', 'ABATES', 'ABTS'),
        "map": MAP_ALIASES,
        "round": ROUND_ALIASES,
    },
    required=("player",),
    numeric=frozenset({"matches", "kills"}),
)

CHARACTERS_SCHEMA = EntitySchema(
    record_type=Loadout,
    fields={
        "player": ('Player', 'Jogador', 'PLAYER'),
        "team": ('Time', 'Equipe', 'TIME'),
        "hab1": variants('Hab1'),
        "hab2": variants('Hab2'),
        "hab3": variants('Hab3'),
        "hab4": variants('Hab4'),
        "pet": ('Pet', 'PET'),
        "item": ('Item', 'ITEM'),
        "round": ('Rd', 'RD', 'Rodada'),
        "map": ('Mapa', 'MAPA'),
        "confrontation": ('Confronto', 'CONFRONTO'),
        "matches": MATCHES_ALIASES,
    },
    required=("player",),
    numeric=frozenset({"matches"}),
)


def dimension_schema(*key_columns: str) -> EntitySchema:
    """
    Schema for a (name, image) reference table.

    The dataset's own key column is tried first, in all its spellings, then
    the shared name aliases.
    """
    name_aliases = variants(*key_columns) + tuple(
        alias for alias in NAME_ALIASES if alias not in variants(*key_columns)
    )
    return EntitySchema(
        record_type=Dimension,
        fields={"name": name_aliases, "image": IMAGE_ALIASES},
        required=("name",),
        optional=frozenset({"image"}),
    )


# Source key -> (bundle table, schema)
SOURCE_TABLES = {
    "fPlayersDados": ("players", PLAYERS_SCHEMA),
    "fKillFeed": ("kill_feed", KILL_FEED_SCHEMA),
    "fDetalhes": ("details", DETAILS_SCHEMA),
    "fPersonagens": ("characters", CHARACTERS_SCHEMA),
    "dTime": ("teams_reference", dimension_schema(*TEAM_ALIASES)),
    "dArma": ("weapons", dimension_schema('Arma')),
    "dSafe": ("safes", dimension_schema('Safe')),
    "dHab1": ("hab1", dimension_schema('Hab1')),
    "dHab2": ("hab2", dimension_schema('Hab2')),
    "dHab3": ("hab3", dimension_schema('Hab3')),
    "dHab4": ("hab4", dimension_schema('Hab4')),
    "dPets": ("pets", dimension_schema('Pet')),
    "dItem": ("items", dimension_schema('Item')),
}


def resolve_field(row: dict, aliases: tuple[str, ...]) -> str:
    """Return the first non-empty trimmed value among aliases, or ""."""
    for alias in aliases:
        value = row.get(alias)
        if value is None:
            continue
        value = str(value).strip()
        if value:
            return value
    return ""


def normalize(rows: list[dict], schema: EntitySchema) -> tuple:
    """
    Project row dicts into canonical records.

    Args:
        rows: Parsed rows (column name -> raw string); never mutated
        schema: Target entity description

    Returns:
        Tuple of schema.record_type instances, source order preserved
    """
    records = []
    dropped = 0

    for row in rows:
        values = {name: resolve_field(row, aliases) for name, aliases in schema.fields.items()}

        if not any(values[name] for name in schema.required):
            dropped += 1
            continue

        for name in schema.numeric:
            values[name] = parse_or_zero(values[name])
        for name in schema.optional:
            values[name] = values[name] or None

        records.append(schema.record_type(**values))

    if dropped:
        logger.debug(
            f"Dropped {dropped} {schema.record_type.__name__} rows with no "
            f"{'/'.join(schema.required)}"
        )

    return tuple(records)

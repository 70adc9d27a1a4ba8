"""
Aggregations over a DataBundle

Modules:
- filters: FilterSpec and the predicate builder shared by every view
- teams: Team standings, podiums, map performance and rosters
- players: Player ranking, usage frequency, loadouts and profiles
- killfeed: Weapon / safe / player frequency over the kill feed
- rounds: Per-round evolution series
"""


def __getattr__(name):
    """Lazy imports to avoid RuntimeWarning when running modules directly."""
    if name == "FilterSpec":
        from mundial_stats.stats.filters import FilterSpec
        return FilterSpec
    if name == "build_predicate":
        from mundial_stats.stats.filters import build_predicate
        return build_predicate
    if name == "calculate_team_stats":
        from mundial_stats.stats.teams import calculate_team_stats
        return calculate_team_stats
    if name == "player_ranking":
        from mundial_stats.stats.players import player_ranking
        return player_ranking
    if name == "usage_frequency":
        from mundial_stats.stats.players import usage_frequency
        return usage_frequency
    if name == "kill_feed_stats":
        from mundial_stats.stats.killfeed import kill_feed_stats
        return kill_feed_stats
    if name == "round_evolution":
        from mundial_stats.stats.rounds import round_evolution
        return round_evolution
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

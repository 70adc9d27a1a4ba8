"""
Data Ingestion

Modules:
- csv_parser: Quote-tolerant delimited text parsing
- normalizer: Header alias reconciliation into canonical records
- assembler: Concurrent retrieval and DataBundle assembly
"""


def __getattr__(name):
    """Lazy imports to avoid RuntimeWarning when running modules directly."""
    if name == "parse_csv":
        from mundial_stats.ingestion.csv_parser import parse_csv
        return parse_csv
    if name == "normalize":
        from mundial_stats.ingestion.normalizer import normalize
        return normalize
    if name == "refresh":
        from mundial_stats.ingestion.assembler import refresh
        return refresh
    if name == "DashboardState":
        from mundial_stats.ingestion.assembler import DashboardState
        return DashboardState
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

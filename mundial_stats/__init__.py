"""
Mundial Stats Engine - Core Package

This package contains the core modules for:
- Data ingestion: parsing, normalization, bundle assembly (mundial_stats.ingestion)
- Aggregations and filters over a DataBundle (mundial_stats.stats)
- Shared configuration, settings loading and utilities
"""

__version__ = "1.0.0"

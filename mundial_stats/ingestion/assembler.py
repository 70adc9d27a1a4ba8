"""
Data Bundle Assembler

Fetches every configured CSV source concurrently, parses and normalizes each
one, and assembles a single immutable DataBundle.

Normalization starts only after every fetch has settled, so a bundle is
always drawn from one retrieval round. Any fetch or parse failure collapses
the refresh to an empty, non-loading bundle with no timestamp; the failure
is logged and never raised to the caller.

Usage:
    python -m mundial_stats.ingestion.assembler

    Programmatic usage:
        from mundial_stats.ingestion.assembler import refresh
        bundle = asyncio.run(refresh(settings))
"""

import asyncio
import dataclasses
from datetime import datetime, timezone
from typing import Awaitable, Callable, Mapping

from aiohttp import ClientSession

from mundial_stats.ingestion.csv_parser import parse_csv_report
from mundial_stats.ingestion.normalizer import SOURCE_TABLES, normalize
from mundial_stats.models import DataBundle
from mundial_stats.settings import DashboardSettings, load_settings
from mundial_stats.utils import setup_logging

# --- Module Logger ---
logger = setup_logging(__name__)

# url -> response body
Fetcher = Callable[[str], Awaitable[str]]


class IngestionError(Exception):
    """Base exception for refresh failures"""
    pass


class SourceFetchError(IngestionError):
    """A source could not be retrieved or answered with an error status"""
    pass


class MissingSourceError(IngestionError):
    """The settings do not name a location for a required dataset"""
    pass


async def fetch_text(session: ClientSession, url: str) -> str:
    """
    Download one source as text.

    Raises:
        SourceFetchError: On a non-2xx response
    """
    async with session.get(url) as response:
        if response.status >= 400:
            raise SourceFetchError(f"{url} answered HTTP {response.status}")
        return await response.text()


async def _gather_settled(keys: list[str], urls: list[str], fetch: Fetcher) -> dict[str, str]:
    """Run every fetch to completion, then raise the first failure if any."""
    results = await asyncio.gather(*(fetch(url) for url in urls), return_exceptions=True)

    texts = {}
    failures = []
    for key, result in zip(keys, results):
        if isinstance(result, BaseException):
            failures.append((key, result))
        else:
            texts[key] = result

    if failures:
        for key, error in failures:
            logger.warning(f"  {key}: {type(error).__name__}: {error}")
        key, error = failures[0]
        raise SourceFetchError(f"{len(failures)} of {len(keys)} sources failed (first: {key})") from error

    return texts


async def fetch_sources(sources: Mapping[str, str], fetch: Fetcher | None = None) -> dict[str, str]:
    """
    Fetch every dataset concurrently.

    Args:
        sources: Source key -> URL; must cover every key in SOURCE_TABLES
        fetch: Optional coroutine function url -> text (default: aiohttp GET)

    Returns:
        Source key -> raw text

    Raises:
        MissingSourceError: If a dataset has no configured location
        SourceFetchError: If any fetch failed
    """
    keys = list(SOURCE_TABLES)
    missing = [k for k in keys if not sources.get(k)]
    if missing:
        raise MissingSourceError(f"No location configured for: {', '.join(missing)}")

    urls = [sources[k] for k in keys]
    logger.info(f"Fetching {len(keys)} sources...")

    if fetch is not None:
        return await _gather_settled(keys, urls, fetch)

    async with ClientSession() as session:
        async def session_fetch(url: str) -> str:
            return await fetch_text(session, url)

        return await _gather_settled(keys, urls, session_fetch)


def assemble_bundle(texts: Mapping[str, str], completed_at: datetime | None = None) -> DataBundle:
    """
    Parse and normalize every fetched document into one bundle.

    Args:
        texts: Source key -> raw text
        completed_at: Timestamp to stamp (default: now, UTC)

    Returns:
        Loaded DataBundle
    """
    tables = {}
    for key, (table, schema) in SOURCE_TABLES.items():
        report = parse_csv_report(texts[key])
        tables[table] = normalize(report.rows, schema)
        logger.debug(f"  {key} -> {table}: {len(report.rows)} rows, {len(tables[table])} kept")

    return DataBundle(
        **tables,
        loading=False,
        last_updated=completed_at or datetime.now(timezone.utc),
    )


async def refresh(settings: DashboardSettings | None = None, fetch: Fetcher | None = None) -> DataBundle:
    """
    Build a fresh DataBundle from the configured sources.

    Never raises for fetch or parse failures: those yield
    ``DataBundle.empty()`` (loading=False, last_updated=None).

    Args:
        settings: Source locations and labels (default: compiled-in defaults)
        fetch: Optional coroutine function url -> text

    Returns:
        New DataBundle
    """
    settings = settings or DashboardSettings()

    try:
        texts = await fetch_sources(settings.sources, fetch)
        bundle = assemble_bundle(texts)
    except Exception as e:
        logger.error(f"Refresh failed, serving empty bundle: {e}")
        return DataBundle.empty(loading=False)

    counts = ", ".join(f"{name}={count}" for name, count in bundle.row_counts().items())
    logger.info(f"Refresh complete at {bundle.last_updated:%Y-%m-%d %H:%M:%S}: {counts}")
    return bundle


class DashboardState:
    """
    Holds the live DataBundle and swaps it whole on refresh.

    While a refresh is running the previous tables stay visible with
    ``loading=True``. A refresh requested while another is in flight joins
    the running one instead of starting a second retrieval round.
    """

    def __init__(self, settings: DashboardSettings | None = None, fetch: Fetcher | None = None):
        self.settings = settings or DashboardSettings()
        self._fetch = fetch
        self._bundle = DataBundle.empty(loading=True)
        self._pending: asyncio.Task | None = None

    @property
    def bundle(self) -> DataBundle:
        return self._bundle

    @property
    def refreshing(self) -> bool:
        return self._pending is not None and not self._pending.done()

    def _install(self, task: asyncio.Task) -> None:
        if task.cancelled():
            self._bundle = dataclasses.replace(self._bundle, loading=False)
            return
        self._bundle = task.result()

    async def refresh(self, settings: DashboardSettings | None = None) -> DataBundle:
        """
        Refresh the live bundle and return it.

        Args:
            settings: Replacement settings for this and later refreshes;
                ignored when joining a refresh already in flight
        """
        if self.refreshing:
            logger.info("Refresh already in flight, joining it")
            return await asyncio.shield(self._pending)

        if settings is not None:
            self.settings = settings

        self._bundle = dataclasses.replace(self._bundle, loading=True)
        self._pending = asyncio.ensure_future(refresh(self.settings, self._fetch))
        self._pending.add_done_callback(self._install)
        return await asyncio.shield(self._pending)


def main() -> DataBundle:
    """
    Main entry point: one refresh with the stored settings.

    Returns:
        The assembled DataBundle
    """
    logger.info("=" * 60)
    logger.info("Mundial Data Refresh")
    logger.info("=" * 60)

    settings = load_settings()
    bundle = asyncio.run(refresh(settings))

    if bundle.is_empty:
        logger.warning("No data loaded")
    for name, count in bundle.row_counts().items():
        logger.info(f"  {name}: {count}")

    logger.info("=" * 60)
    return bundle


if __name__ == "__main__":
    main()

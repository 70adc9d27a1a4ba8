"""
Tests for concurrent bundle assembly and the live dashboard state.

Fetches are served from memory through an injected fetch coroutine.
"""

import asyncio
from datetime import datetime, timezone
from types import MappingProxyType

import pytest

from mundial_stats.config import CSV_URLS
from mundial_stats.ingestion.assembler import (
    DashboardState,
    MissingSourceError,
    SourceFetchError,
    assemble_bundle,
    fetch_sources,
    refresh,
)
from mundial_stats.models import DataBundle
from mundial_stats.settings import DashboardSettings

DOCUMENTS = {
    "fDetalhes": "TIME,MAPA,RD,PTS,ABTS,S\nAlpha,Bermuda,RD1,10,2,1\nBeta,Bermuda,RD1,5,1,1\n",
    "fPersonagens": "Player,Time,Hab1,Hab2,Hab3,Hab4,Pet,Item\nFoo,Alpha,Heal,Dash,Armor,Gloo,Falco,Medkit\n",
    "fPlayersDados": "PLAYER,TIME,ABTS,S\nFoo,Alpha,3,1\nBar,Beta,1,1\n",
    "fKillFeed": "PLAYER,VITIMA,ARMA,SAFE,MAPA,RD\nFoo,Bar,M4,Zone 1,Bermuda,RD1\n",
    "dTime": "TIME,IMG\nAlpha,alpha.png\nBeta,beta.png\n",
    "dArma": "Arma,IMG\nM4,m4.png\n",
    "dSafe": "Safe,IMG\nZone 1,z1.png\n",
    "dHab1": "Hab1,IMG\nHeal,heal.png\n",
    "dHab2": "Hab2,IMG\nDash,dash.png\n",
    "dHab3": "Hab3,IMG\nArmor,armor.png\n",
    "dHab4": "Hab4,IMG\nGloo,gloo.png\n",
    "dPets": "Pet,IMG\nFalco,falco.png\n",
    "dItem": "Item,IMG\nMedkit,medkit.png\n",
}

SETTINGS = DashboardSettings(sources=MappingProxyType({key: f"mem://{key}" for key in CSV_URLS}))


def memory_fetcher(documents=DOCUMENTS, fail=(), calls=None):
    """Build a fetch coroutine that serves documents by source key."""

    async def fetch(url: str) -> str:
        key = url.split("://", 1)[1]
        if calls is not None:
            calls.append(key)
        await asyncio.sleep(0)
        if key in fail:
            raise SourceFetchError(f"{url} answered HTTP 500")
        return documents[key]

    return fetch


class TestFetchSources:
    """Tests for fetch_sources."""

    def test_fetches_every_source(self):
        calls = []
        texts = asyncio.run(fetch_sources(SETTINGS.sources, memory_fetcher(calls=calls)))
        assert set(texts) == set(CSV_URLS)
        assert sorted(calls) == sorted(CSV_URLS)

    def test_missing_location_raises(self):
        sources = {key: url for key, url in SETTINGS.sources.items() if key != "dItem"}
        with pytest.raises(MissingSourceError, match="dItem"):
            asyncio.run(fetch_sources(sources, memory_fetcher()))

    def test_failure_raised_after_all_settle(self):
        calls = []
        fetch = memory_fetcher(fail={"dArma"}, calls=calls)
        with pytest.raises(SourceFetchError):
            asyncio.run(fetch_sources(SETTINGS.sources, fetch))
        assert len(calls) == len(CSV_URLS)


class TestAssembleBundle:
    """Tests for assemble_bundle."""

    def test_tables_populated(self):
        bundle = assemble_bundle(DOCUMENTS)
        assert [d.team for d in bundle.details] == ["Alpha", "Beta"]
        assert bundle.players[0].kills == 3
        assert bundle.kill_feed[0].weapon == "M4"
        assert bundle.characters[0].pet == "Falco"
        assert bundle.items[0].image == "medkit.png"

    def test_loaded_bundle_flags(self):
        stamp = datetime(2025, 11, 30, 18, 0, tzinfo=timezone.utc)
        bundle = assemble_bundle(DOCUMENTS, completed_at=stamp)
        assert bundle.loading is False
        assert bundle.last_updated == stamp

    def test_default_timestamp(self):
        bundle = assemble_bundle(DOCUMENTS)
        assert bundle.last_updated is not None

    def test_header_only_documents(self):
        documents = {key: text.split("\n", 1)[0] for key, text in DOCUMENTS.items()}
        bundle = assemble_bundle(documents)
        assert bundle.is_empty
        assert bundle.last_updated is not None


class TestRefresh:
    """Tests for the never-raising refresh."""

    def test_success(self):
        bundle = asyncio.run(refresh(SETTINGS, memory_fetcher()))
        assert not bundle.loading
        assert bundle.last_updated is not None
        assert bundle.row_counts()["details"] == 2

    def test_single_failure_gives_empty_bundle(self):
        bundle = asyncio.run(refresh(SETTINGS, memory_fetcher(fail={"fKillFeed"})))
        assert bundle.is_empty
        assert bundle.loading is False
        assert bundle.last_updated is None

    def test_missing_location_gives_empty_bundle(self):
        settings = DashboardSettings(sources=MappingProxyType({"fDetalhes": "mem://fDetalhes"}))
        bundle = asyncio.run(refresh(settings, memory_fetcher()))
        assert bundle == DataBundle.empty()

    def test_failure_is_logged(self, caplog):
        asyncio.run(refresh(SETTINGS, memory_fetcher(fail={"dTime"})))
        assert any("Refresh failed" in r.getMessage() for r in caplog.records)


class TestDashboardState:
    """Tests for the live bundle holder."""

    def test_initial_state_is_loading(self):
        state = DashboardState(SETTINGS, memory_fetcher())
        assert state.bundle.loading is True
        assert state.bundle.is_empty

    def test_refresh_installs_bundle(self):
        state = DashboardState(SETTINGS, memory_fetcher())
        bundle = asyncio.run(state.refresh())
        assert state.bundle is bundle
        assert not state.bundle.loading
        assert not state.refreshing

    def test_previous_tables_visible_while_loading(self):
        async def scenario():
            state = DashboardState(SETTINGS, memory_fetcher())
            first = await state.refresh()
            task = asyncio.ensure_future(state.refresh())
            await asyncio.sleep(0)
            during = state.bundle
            await task
            return first, during

        first, during = asyncio.run(scenario())
        assert during.loading is True
        assert during.details == first.details

    def test_overlapping_refreshes_share_one_round(self):
        calls = []

        async def scenario():
            state = DashboardState(SETTINGS, memory_fetcher(calls=calls))
            return await asyncio.gather(state.refresh(), state.refresh())

        first, second = asyncio.run(scenario())
        assert first is second
        assert len(calls) == len(CSV_URLS)

    def test_failed_refresh_replaces_bundle(self):
        async def scenario():
            state = DashboardState(SETTINGS, memory_fetcher())
            await state.refresh()
            state._fetch = memory_fetcher(fail={"dPets"})
            return await state.refresh()

        bundle = asyncio.run(scenario())
        assert bundle.is_empty
        assert bundle.last_updated is None

    def test_new_settings_apply(self):
        async def scenario():
            state = DashboardState(fetch=memory_fetcher())
            return await state.refresh(SETTINGS), state

        bundle, state = asyncio.run(scenario())
        assert state.settings is SETTINGS
        assert bundle.row_counts()["kill_feed"] == 1

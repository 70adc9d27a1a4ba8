"""
Tests for canonical records and the data bundle.
"""

import dataclasses

import pandas as pd
import pytest

from mundial_stats.models import BUNDLE_TABLES, DataBundle, Dimension, Loadout, MatchDetail, keep_none


class TestDataBundle:
    """Tests for DataBundle."""

    def test_empty(self):
        bundle = DataBundle.empty()
        assert bundle.is_empty
        assert bundle.loading is False
        assert bundle.last_updated is None
        assert set(bundle.row_counts().values()) == {0}

    def test_empty_loading(self):
        assert DataBundle.empty(loading=True).loading is True

    def test_frozen(self):
        bundle = DataBundle.empty()
        with pytest.raises(dataclasses.FrozenInstanceError):
            bundle.loading = True

    def test_row_counts_cover_tables(self):
        bundle = DataBundle(details=(MatchDetail(team="Alpha"),))
        counts = bundle.row_counts()
        assert set(counts) == set(BUNDLE_TABLES)
        assert counts["details"] == 1
        assert not bundle.is_empty

    def test_frame_columns(self):
        bundle = DataBundle(weapons=(Dimension("M4", "m4.png"), Dimension("AK")))
        df = bundle.frame("weapons")
        assert df.columns.tolist() == ["name", "image"]
        assert df["name"].tolist() == ["M4", "AK"]

    def test_frame_missing_image_is_none(self):
        bundle = DataBundle(weapons=(Dimension("M4", "m4.png"), Dimension("AK")))
        images = bundle.frame("weapons")["image"].tolist()
        assert images[0] == "m4.png"
        assert images[1] is None

    def test_frame_of_empty_table(self):
        df = DataBundle.empty().frame("details")
        assert df.empty
        assert "placement_points" in df.columns

    def test_frame_unknown_table(self):
        with pytest.raises(ValueError, match="Unknown table"):
            DataBundle.empty().frame("standings")


class TestLoadout:
    """Tests for Loadout slot accessors."""

    def test_active_and_passives(self):
        loadout = Loadout(player="Foo", hab1="Heal", hab2="Dash", hab3="Armor", hab4="Gloo")
        assert loadout.active == "Heal"
        assert loadout.passives == ("Dash", "Armor", "Gloo")


class TestKeepNone:
    """Tests for keep_none."""

    def test_nan_becomes_none(self):
        df = pd.DataFrame({"name": ["M4", "AK"], "image": ["m4.png", float("nan")]})
        result = keep_none(df, ["image"])
        assert result["image"].tolist() == ["m4.png", None]
        assert result["image"].dtype == object

    def test_other_columns_untouched(self):
        df = pd.DataFrame({"name": ["M4"], "count": [3], "image": [None]})
        result = keep_none(df, ["image"])
        assert result["count"].tolist() == [3]
        assert result.loc[0, "image"] is None

"""
Tests for shared parsing, rounding and validation helpers.
"""

import json

import pytest

from mundial_stats.utils import (
    atomic_write_json,
    clean_key,
    format_average,
    parse_or_zero,
    round_half_up,
    round_sort_key,
    validate_mode,
    validate_source_keys,
)


class TestParseOrZero:
    """Tests for the never-raising integer parser."""

    @pytest.mark.parametrize("raw,expected", [
        ("12", 12),
        (" 7 ", 7),
        ("-3", -3),
        ("12.7", 12),
        ("4pts", 4),
        ("", 0),
        ("   ", 0),
        ("abc", 0),
        ("pts4", 0),
        (None, 0),
        (9, 9),
    ])
    def test_values(self, raw, expected):
        assert parse_or_zero(raw) == expected


class TestRoundHalfUp:
    """Tests for half-up rounding."""

    def test_half_rounds_up(self):
        assert round_half_up(2.5) == 3.0
        assert round_half_up(12.5) == 13.0

    def test_decimals(self):
        assert round_half_up(35 / 3, 2) == 11.67
        assert round_half_up(0.125, 2) == 0.13

    def test_one_decimal(self):
        assert round_half_up(100 / 3, 1) == 33.3


class TestFormatAverage:
    """Tests for fixed-decimal averages."""

    def test_two_decimals(self):
        assert format_average(5, 1) == "5.00"
        assert format_average(7, 3) == "2.33"

    def test_zero_count(self):
        assert format_average(5, 0) == "0.00"

    def test_custom_digits(self):
        assert format_average(1, 3, 1) == "0.3"


class TestKeys:
    """Tests for lookup and sort keys."""

    def test_clean_key(self):
        assert clean_key("  M4A1 ") == "m4a1"
        assert clean_key(None) == ""

    def test_round_sort_key_numeric(self):
        labels = ["RD10", "RD2", "RD1"]
        assert sorted(labels, key=round_sort_key) == ["RD1", "RD2", "RD10"]

    def test_round_sort_key_without_digits(self):
        assert round_sort_key("Final") == (0, "Final")


class TestValidation:
    """Tests for ValueError validators."""

    def test_valid_modes(self):
        validate_mode("kills")
        validate_mode("deaths")

    def test_invalid_mode(self):
        with pytest.raises(ValueError, match="Invalid mode"):
            validate_mode("assists")

    def test_unknown_source_key(self):
        with pytest.raises(ValueError, match="fBogus"):
            validate_source_keys({"fDetalhes": "x", "fBogus": "y"})


class TestAtomicWriteJson:
    """Tests for atomic_write_json."""

    def test_writes_document(self, tmp_path):
        path = tmp_path / "nested" / "settings.json"
        atomic_write_json({"a": "ção"}, path)
        assert json.loads(path.read_text(encoding="utf-8")) == {"a": "ção"}

    def test_leaves_no_temp_files(self, tmp_path):
        path = tmp_path / "settings.json"
        atomic_write_json({"a": 1}, path)
        atomic_write_json({"a": 2}, path)
        assert [p.name for p in tmp_path.iterdir()] == ["settings.json"]

"""
Tests for the delimited text parser.
"""

import logging

import pytest

from mundial_stats.ingestion.csv_parser import (
    parse_csv,
    parse_csv_report,
    parse_header,
    split_naive,
    split_quoted,
)


class TestParseHeader:
    """Tests for parse_header."""

    def test_trims_names(self):
        assert parse_header(" TIME , MAPA,RD ") == ["TIME", "MAPA", "RD"]

    def test_strips_surrounding_quotes(self):
        assert parse_header('"TIME","MAPA"') == ["TIME", "MAPA"]

    def test_strips_byte_order_mark(self):
        assert parse_header("\ufeffTIME,PTS") == ["TIME", "PTS"]


class TestSplitQuoted:
    """Tests for quote-aware field splitting."""

    def test_plain_fields(self):
        assert split_quoted("a,b,c") == ["a", "b", "c"]

    def test_quoted_field_keeps_delimiter(self):
        assert split_quoted('Alpha,"Purgatório, Norte",3') == ["Alpha", "Purgatório, Norte", "3"]

    def test_doubled_quote_decodes_to_quote(self):
        assert split_quoted('"He said ""gg""",x') == ['He said "gg"', "x"]

    def test_trailing_empty_field(self):
        assert split_quoted("a,b,") == ["a", "b", ""]

    def test_whitespace_around_quoted_field(self):
        assert split_quoted('a,  "b,c"  ,d') == ["a", "b,c", "d"]

    def test_values_are_trimmed(self):
        assert split_quoted("  a ,b  ") == ["a", "b"]

    def test_unterminated_quote_swallows_rest(self):
        assert split_quoted('a,"b,c') == ["a", "b,c"]

    def test_other_delimiter(self):
        assert split_quoted('a;"b;c";d', delimiter=";") == ["a", "b;c", "d"]


class TestSplitNaive:
    """Tests for the degraded-mode split."""

    def test_splits_on_every_delimiter(self):
        assert split_naive('"a,b", c') == ['"a', 'b"', "c"]


class TestParseCsv:
    """Tests for parse_csv."""

    def test_basic_table(self):
        rows = parse_csv("TIME,PTS\nAlpha,10\nBeta,5")
        assert rows == [{"TIME": "Alpha", "PTS": "10"}, {"TIME": "Beta", "PTS": "5"}]

    def test_preserves_column_order(self):
        rows = parse_csv("B,A,C\n1,2,3")
        assert list(rows[0].keys()) == ["B", "A", "C"]

    def test_crlf_line_endings(self):
        rows = parse_csv("TIME,PTS\r\nAlpha,10\r\nBeta,5\r\n")
        assert [r["TIME"] for r in rows] == ["Alpha", "Beta"]

    def test_skips_blank_and_whitespace_lines(self):
        rows = parse_csv("TIME,PTS\n\nAlpha,10\n   \nBeta,5\n")
        assert len(rows) == 2

    def test_short_row_padded_with_empty_strings(self):
        rows = parse_csv("TIME,PTS,ABTS\nAlpha,10")
        assert rows == [{"TIME": "Alpha", "PTS": "10", "ABTS": ""}]

    def test_extra_fields_ignored(self):
        rows = parse_csv("TIME,PTS\nAlpha,10,extra,more")
        assert rows == [{"TIME": "Alpha", "PTS": "10"}]

    def test_quoting_correctness(self):
        text = 'PLAYER,ARMA\n"Foo, Jr.","M4 ""Custom"""'
        rows = parse_csv(text)
        assert rows[0]["PLAYER"] == "Foo, Jr."
        assert rows[0]["ARMA"] == 'M4 "Custom"'

    def test_values_trimmed(self):
        rows = parse_csv("TIME , PTS\n  Alpha  ,  10 ")
        assert rows == [{"TIME": "Alpha", "PTS": "10"}]

    def test_empty_text(self):
        assert parse_csv("") == []

    def test_header_only(self):
        assert parse_csv("TIME,PTS\n") == []

    def test_malformed_rows_never_raise(self):
        text = 'A,B,C\n"""\n,,,,,\n"x\n'
        rows = parse_csv(text)
        assert all(set(r.keys()) == {"A", "B", "C"} for r in rows)


class TestParserRoundTrip:
    """Parsing then re-serializing alphanumeric tables reproduces the rows."""

    @pytest.mark.parametrize("table", [
        [["TIME", "PTS", "RD"], ["Alpha", "10", "RD1"], ["Beta", "5", "RD2"]],
        [["Player", "Hab1"], ["Foo", "Heal"], ["Bar", "Dash"], ["Baz", "Heal"]],
    ])
    def test_round_trip(self, table):
        text = "\n".join(",".join(line) for line in table)
        header = table[0]

        rows = parse_csv(text)
        rebuilt = [[row[h] for h in header] for row in rows]

        assert rebuilt == table[1:]
        assert "\n".join(",".join(line) for line in [header] + rebuilt) == text


class TestFallbackReporting:
    """The naive-split fallback is counted and logged."""

    def test_no_fallback_for_well_formed_rows(self):
        report = parse_csv_report('A,B\n1,"2,3"\n4,5')
        assert report.fallback_count == 0

    def test_short_row_counts_as_fallback(self):
        report = parse_csv_report("A,B,C\n1,2,3\n4,5")
        assert report.fallback_lines == [3]
        assert report.rows[1] == {"A": "4", "B": "5", "C": ""}

    def test_fallback_uses_naive_split(self):
        # Quote-aware split swallows the rest of the line, naive split does not
        report = parse_csv_report('A,B,C\n"x,y,z')
        assert report.fallback_count == 1
        assert report.rows[0] == {"A": '"x', "B": "y", "C": "z"}

    def test_fallback_logs_warning(self, caplog):
        with caplog.at_level(logging.WARNING, logger="mundial_stats.ingestion.csv_parser"):
            parse_csv("A,B,C\n1,2")
        assert any("fell back" in r.getMessage() for r in caplog.records)

    def test_headers_reported(self):
        report = parse_csv_report("A,B\n1,2")
        assert report.headers == ["A", "B"]

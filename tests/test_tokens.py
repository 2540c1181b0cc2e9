"""Tests for GRDECL tokenization."""

import pytest

from cornerpoint.errors import DimensionMismatchError, FormatError
from cornerpoint.grdecl.tokens import (
    expand_tokens,
    match_keyword,
    parse_float,
    parse_int,
    read_sections,
    strip_comment,
)


# ---------------------------------------------------------------------------
# Comments and keywords
# ---------------------------------------------------------------------------


class TestStripComment:
    def test_whole_line_comment(self):
        assert strip_comment("-- a comment").strip() == ""

    def test_trailing_comment(self):
        assert strip_comment("1 2 3 -- depths").strip() == "1 2 3"

    def test_line_without_comment_unchanged(self):
        assert strip_comment("  0 0 0 0 0 1") == "  0 0 0 0 0 1"


class TestMatchKeyword:
    @pytest.mark.parametrize("keyword", ["SPECGRID", "COORD", "ZCORN", "ACTNUM"])
    def test_known_keywords(self, keyword):
        assert match_keyword(keyword) == keyword

    def test_keyword_followed_by_whitespace(self):
        assert match_keyword("COORD   ") == "COORD"

    def test_longer_keyword_sharing_prefix_is_not_matched(self):
        assert match_keyword("COORDSYS") is None

    def test_lower_case_is_not_matched(self):
        assert match_keyword("coord") is None

    def test_data_line_is_not_a_keyword(self):
        assert match_keyword("0 0 0 1 1 1") is None


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------


class TestReadSections:
    def test_sections_and_tokens(self, unit_cube_text):
        sections = read_sections(unit_cube_text)
        assert list(sections) == ["SPECGRID", "COORD", "ZCORN", "ACTNUM"]
        assert sections["SPECGRID"] == ["1", "1", "1", "1", "F"]
        assert len(sections["COORD"]) == 24
        assert sections["ZCORN"] == ["0", "0", "0", "0", "1", "1", "1", "1"]
        assert sections["ACTNUM"] == ["1"]

    def test_data_before_closing_slash_is_kept(self):
        sections = read_sections("ZCORN\n  1 2\n  3 4 /\n")
        assert sections["ZCORN"] == ["1", "2", "3", "4"]

    def test_tokens_containing_slash_are_dropped(self):
        sections = read_sections("ZCORN\n  1 2/3 4\n  5 /\n")
        assert sections["ZCORN"] == ["1", "4", "5"]

    def test_indented_keyword_is_recognised(self):
        sections = read_sections("   ACTNUM\n  2*1 /\n")
        assert sections["ACTNUM"] == ["2*1"]

    def test_unknown_keywords_are_ignored(self):
        text = "MAPUNITS\n  METRES /\nGRIDUNIT\n  METRES /\nACTNUM\n  1 /\n"
        assert read_sections(text) == {"ACTNUM": ["1"]}

    def test_comments_are_ignored(self):
        text = "-- header\nACTNUM -- flags\n  1 0 -- first two\n  1 /\n"
        assert read_sections(text) == {"ACTNUM": ["1", "0", "1"]}

    def test_crlf_line_endings(self):
        sections = read_sections("ACTNUM\r\n  1 1\r\n/\r\n")
        assert sections["ACTNUM"] == ["1", "1"]

    def test_empty_text_has_no_sections(self):
        assert read_sections("") == {}

    def test_unterminated_section_at_end_raises(self):
        with pytest.raises(FormatError) as exc_info:
            read_sections("ZCORN\n  0 0 0 0\n")
        assert exc_info.value.section == "ZCORN"

    def test_unterminated_section_before_next_keyword_raises(self):
        with pytest.raises(FormatError) as exc_info:
            read_sections("COORD\n  0 0 0 0 0 1\nZCORN\n  0 /\n")
        assert exc_info.value.section == "COORD"

    def test_duplicate_section_warns_and_last_wins(self):
        with pytest.warns(UserWarning, match="ACTNUM"):
            sections = read_sections("ACTNUM\n  1 /\nACTNUM\n  0 /\n")
        assert sections["ACTNUM"] == ["0"]


# ---------------------------------------------------------------------------
# Values
# ---------------------------------------------------------------------------


class TestParseValues:
    def test_parse_int(self):
        assert parse_int("42") == 42

    def test_parse_int_rejects_float(self):
        with pytest.raises(FormatError, match="integer"):
            parse_int("4.5", section="ACTNUM", position=3)

    def test_parse_float(self):
        assert parse_float("2500.25") == 2500.25
        assert parse_float("-1e3") == -1000.0

    def test_parse_float_fortran_exponent(self):
        assert parse_float("1.5D+03") == 1500.0
        assert parse_float("2d-1") == pytest.approx(0.2)

    @pytest.mark.parametrize("token", ["abc", "1.2.3", ""])
    def test_parse_float_rejects_malformed(self, token):
        with pytest.raises(FormatError):
            parse_float(token)

    @pytest.mark.parametrize("token", ["nan", "inf", "-inf", "1e400"])
    def test_parse_float_rejects_non_finite(self, token):
        with pytest.raises(FormatError, match="finite"):
            parse_float(token)

    def test_error_names_section_and_position(self):
        with pytest.raises(FormatError) as exc_info:
            parse_float("x", section="ZCORN", position=7)
        assert exc_info.value.section == "ZCORN"
        assert exc_info.value.position == 7
        assert str(exc_info.value).startswith("ZCORN (token 7):")


class TestExpandTokens:
    def test_plain_values(self):
        assert expand_tokens(["1", "0", "1"], parse_int) == [1, 0, 1]

    def test_single_repeat(self):
        assert expand_tokens(["48*1"], parse_int) == [1] * 48

    def test_mixed_repeats(self):
        assert expand_tokens(["2*0", "3*1"], parse_int) == [0, 0, 1, 1, 1]

    def test_float_repeats(self):
        assert expand_tokens(["2*1.5", "3"], parse_float) == [1.5, 1.5, 3.0]

    def test_repeat_without_value_raises(self):
        with pytest.raises(FormatError, match="no value"):
            expand_tokens(["3*"], parse_int, section="ACTNUM")

    @pytest.mark.parametrize("token", ["0*1", "-2*1"])
    def test_non_positive_count_raises(self, token):
        with pytest.raises(FormatError, match="positive"):
            expand_tokens([token], parse_int)

    def test_malformed_count_raises(self):
        with pytest.raises(FormatError):
            expand_tokens(["x*1"], parse_int)

    def test_expected_size_allows_exact_fit(self):
        assert expand_tokens(["2*0", "3*1"], parse_int, expected=5) == [0, 0, 1, 1, 1]

    def test_repeat_count_beyond_expected_size_raises(self):
        with pytest.raises(DimensionMismatchError) as exc_info:
            expand_tokens(["1", "1000000000*0"], parse_int, section="ZCORN", expected=8)
        assert exc_info.value.section == "ZCORN"
        assert exc_info.value.actual == 1_000_000_001

    def test_plain_value_beyond_expected_size_raises(self):
        with pytest.raises(DimensionMismatchError):
            expand_tokens(["1", "2", "3"], parse_float, expected=2)

    def test_malformed_value_reports_position(self):
        with pytest.raises(FormatError) as exc_info:
            expand_tokens(["1", "2", "2*y"], parse_float, section="ZCORN")
        assert exc_info.value.position == 3

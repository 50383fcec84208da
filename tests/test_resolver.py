"""Tests for position and pattern query resolution."""

import re

import pytest

from typepick.errors import InvalidQueryError
from typepick.models import PatternQuery, PositionQuery
from typepick.resolver import compile_pattern, iter_matches, resolve

SOURCE = """const first = 1;
const second = first + 1;\r
export function third(value: number): number {
  return value * second;
}
"""


@pytest.fixture
def sf(parse):
    return parse(SOURCE)


class TestPositionQueries:
    """1-based line/column to offset."""

    @pytest.mark.parametrize("line,column", [(1, 1), (1, 7), (2, 16), (3, 17), (4, 10), (5, 1)])
    def test_round_trip(self, sf, line, column):
        location = resolve(sf, PositionQuery(file="memory.ts", line=line, column=column))
        assert sf.line_and_character_of_position(location.offset) == (line - 1, column - 1)
        assert (location.line, location.column) == (line, column)
        assert location.matched_text == ""

    def test_offset_value(self, sf):
        location = resolve(sf, PositionQuery(file="memory.ts", line=2, column=7))
        assert location.offset == SOURCE.index("second")

    @pytest.mark.parametrize("line,column", [(0, 1), (1, 0), (-2, 3)])
    def test_non_positive_rejected(self, sf, line, column):
        with pytest.raises(InvalidQueryError) as excinfo:
            resolve(sf, PositionQuery(file="memory.ts", line=line, column=column))
        assert f"line={line}" in str(excinfo.value)

    def test_outside_file_rejected(self, sf):
        with pytest.raises(InvalidQueryError):
            resolve(sf, PositionQuery(file="memory.ts", line=50, column=1))
        with pytest.raises(InvalidQueryError):
            resolve(sf, PositionQuery(file="memory.ts", line=1, column=200))


class TestPatternQueries:
    """Pattern search over the full text."""

    def test_first_match_by_default(self, sf):
        location = resolve(sf, PatternQuery(file="memory.ts", pattern="second"))
        assert location.offset == SOURCE.index("second")
        assert location.line == 2
        assert location.column == 7
        assert location.matched_text == "second"

    @pytest.mark.parametrize("index", [0, 1, 2])
    def test_kth_match(self, sf, index):
        starts = [m.start() for m in re.finditer(r"first|second", SOURCE)]
        location = resolve(sf, PatternQuery(file="memory.ts", pattern=r"first|second", index=index))
        assert location.offset == starts[index]

    def test_line_and_column_after_crlf(self, sf):
        location = resolve(sf, PatternQuery(file="memory.ts", pattern=r"function\s+(\w+)"))
        assert (location.line, location.column) == (3, 8)
        assert location.matched_text == "function third"

    def test_index_past_last_match(self, sf):
        with pytest.raises(InvalidQueryError) as excinfo:
            resolve(sf, PatternQuery(file="memory.ts", pattern="third", index=1))
        assert "did not match index 1" in str(excinfo.value)

    def test_literal_appearing_three_times_index_five(self, parse):
        sf = parse("let needle = 1; needle++; console.log(needle);\n")
        with pytest.raises(InvalidQueryError):
            resolve(sf, PatternQuery(file="memory.ts", pattern="needle", index=5))
        assert resolve(sf, PatternQuery(file="memory.ts", pattern="needle", index=2)).offset == 38

    def test_negative_index_rejected(self, sf):
        with pytest.raises(InvalidQueryError):
            resolve(sf, PatternQuery(file="memory.ts", pattern="first", index=-1))

    def test_case_insensitive_flag(self, sf):
        location = resolve(sf, PatternQuery(file="memory.ts", pattern="EXPORT", flags="i"))
        assert location.matched_text == "export"

    def test_explicit_global_flag_is_accepted(self, sf):
        location = resolve(sf, PatternQuery(file="memory.ts", pattern="first", flags="g", index=1))
        assert location.offset == SOURCE.index("first", SOURCE.index("first") + 1)

    @pytest.mark.parametrize("flags", ["x", "ii", "gq"])
    def test_bad_flags_rejected(self, sf, flags):
        with pytest.raises(InvalidQueryError):
            resolve(sf, PatternQuery(file="memory.ts", pattern="first", flags=flags))

    def test_invalid_pattern_rejected(self, sf):
        with pytest.raises(InvalidQueryError):
            resolve(sf, PatternQuery(file="memory.ts", pattern="(unclosed"))

    def test_unicode_line_separator(self, parse):
        sf = parse("let a = 1;\u2028let b = 2;")
        location = resolve(sf, PatternQuery(file="memory.ts", pattern="b"))
        assert (location.line, location.column) == (2, 5)


class TestMatchScanning:
    """Low-level match iteration."""

    def test_empty_matches_terminate(self):
        regex, sticky = compile_pattern("")
        assert [m.start() for m in iter_matches(regex, "abc", sticky)] == [0, 1, 2, 3]

    def test_sticky_requires_contiguous_matches(self):
        regex, sticky = compile_pattern("a", "y")
        assert sticky
        assert [m.start() for m in iter_matches(regex, "aaba", sticky)] == [0, 1]

    def test_sticky_stops_on_empty_match(self):
        regex, sticky = compile_pattern("a*", "y")
        assert [m.group(0) for m in iter_matches(regex, "aab", sticky)] == ["aa", ""]

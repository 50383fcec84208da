"""Query resolution: position or pattern query -> exact offset in a file."""

from __future__ import annotations

import logging
import re
from typing import Iterator, Optional, Pattern, Tuple

from .errors import InvalidQueryError
from .models import PatternQuery, PositionQuery, ResolvedLocation, TypeQuery
from .oracle import SourceFile

logger = logging.getLogger(__name__)

# JavaScript-style pattern flag letters. ``g`` is always implied, ``y`` is
# handled by the scanner, ``u`` and ``d`` do not change matching here.
PATTERN_FLAGS = {
    "g": 0,
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    "u": 0,
    "d": 0,
    "y": 0,
}


def resolve(source_file: SourceFile, query: TypeQuery) -> ResolvedLocation:
    if isinstance(query, PatternQuery):
        return resolve_pattern(source_file, query)
    return resolve_position(source_file, query)


def resolve_position(source_file: SourceFile, query: PositionQuery) -> ResolvedLocation:
    line, column = query.line, query.column
    if line <= 0 or column <= 0:
        raise InvalidQueryError(
            f"Line and column must be 1-based and positive (line={line}, column={column})"
        )
    try:
        offset = source_file.position_of_line_and_character(line - 1, column - 1)
    except ValueError as exc:
        raise InvalidQueryError(
            f"Position line={line}, column={column} is outside {source_file.file_name}: {exc}"
        ) from exc
    logger.debug("Resolved %d:%d to offset %d", line, column, offset)
    return ResolvedLocation(offset=offset, line=line, column=column, matched_text="")


def resolve_pattern(source_file: SourceFile, query: PatternQuery) -> ResolvedLocation:
    if query.index < 0:
        raise InvalidQueryError(f"Pattern match index must not be negative, got {query.index}")

    regex, sticky = compile_pattern(query.pattern, query.flags)
    for count, match in enumerate(iter_matches(regex, source_file.text, sticky)):
        if count == query.index:
            offset = match.start()
            line, character = source_file.line_and_character_of_position(offset)
            logger.debug(
                "Pattern %r match %d at offset %d (%d:%d)",
                query.pattern, count, offset, line + 1, character + 1,
            )
            return ResolvedLocation(
                offset=offset,
                line=line + 1,
                column=character + 1,
                matched_text=match.group(0),
            )

    raise InvalidQueryError(
        f'Pattern "{query.pattern}" did not match index {query.index} in {source_file.file_name}'
    )


def compile_pattern(pattern: str, flags: Optional[str] = None) -> Tuple[Pattern[str], bool]:
    """Compile *pattern*; returns the regex and whether sticky matching applies."""
    letters = flags or ""
    re_flags = 0
    for letter in letters:
        if letter not in PATTERN_FLAGS:
            raise InvalidQueryError(f"Invalid pattern flag {letter!r} in {letters!r}")
        if letters.count(letter) > 1:
            raise InvalidQueryError(f"Duplicate pattern flag {letter!r} in {letters!r}")
        re_flags |= PATTERN_FLAGS[letter]
    try:
        regex = re.compile(pattern, re_flags)
    except re.error as exc:
        raise InvalidQueryError(f'Invalid pattern "{pattern}": {exc}') from exc
    return regex, "y" in letters


def iter_matches(regex: Pattern[str], text: str, sticky: bool = False) -> Iterator["re.Match[str]"]:
    """Successive matches left to right, starting at offset 0.

    Sticky scanning requires each match to begin exactly where the previous
    one ended and stops at the first gap.
    """
    if not sticky:
        yield from regex.finditer(text)
        return

    pos = 0
    while pos <= len(text):
        match = regex.match(text, pos)
        if match is None:
            return
        yield match
        if match.end() == pos:
            return
        pos = match.end()

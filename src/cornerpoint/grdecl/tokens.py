"""
Tokenization of GRDECL text.

GRDECL files are free-form: a section starts at a keyword line and runs until a
line that is, or ends with, a slash. Values may be spread over any number of
lines and use Eclipse repeat syntax (`count*value`).
"""

import logging
import math
import typing
import warnings

from cornerpoint.errors import DimensionMismatchError, FormatError
from cornerpoint.types import SECTIONS, Section

__all__ = [
    "strip_comment",
    "match_keyword",
    "read_sections",
    "parse_int",
    "parse_float",
    "expand_tokens",
]

logger = logging.getLogger(__name__)

COMMENT_MARKER = "--"
END_OF_RECORD = "/"

T = typing.TypeVar("T", int, float)


def strip_comment(line: str) -> str:
    """Remove an Eclipse `--` comment (whole-line or trailing) from a line."""
    index = line.find(COMMENT_MARKER)
    if index == -1:
        return line
    return line[:index]


def match_keyword(line: str) -> typing.Optional[Section]:
    """
    Return the section keyword a (stripped) line opens, if any.

    Keywords are case-sensitive and must start the line. The keyword must be
    followed by the end of the line, whitespace or a slash, so longer keywords
    sharing a prefix (e.g. `COORDSYS`) do not open the `COORD` section.
    """
    for keyword in SECTIONS:
        if not line.startswith(keyword):
            continue
        rest = line[len(keyword) :]
        if not rest or rest[0].isspace() or rest[0] == END_OF_RECORD:
            return keyword
    return None


def read_sections(text: str) -> typing.Dict[Section, typing.List[str]]:
    """
    Split GRDECL text into the raw tokens of each recognised section.

    Lines of an open section are space-joined and split on whitespace. Tokens
    containing a slash are discarded. Lines outside any section (including
    those of unknown keywords) are ignored.

    :param text: Full file content.
    :return: Mapping of section keyword to its tokens, in file order.
    :raises FormatError: If a section is still open at the end of the text.
    """
    sections: typing.Dict[Section, typing.List[str]] = {}
    current: typing.Optional[Section] = None
    lines: typing.List[str] = []

    def close_section(keyword: Section) -> None:
        tokens = [
            token for token in " ".join(lines).split() if END_OF_RECORD not in token
        ]
        if keyword in sections:
            warnings.warn(
                f"Section {keyword} appears more than once; the last occurrence is used.",
                UserWarning,
                stacklevel=3,
            )
        sections[keyword] = tokens
        logger.debug(f"Read section {keyword} with {len(tokens)} token(s)")

    for line_number, raw_line in enumerate(text.split("\n"), start=1):
        line = strip_comment(raw_line).strip()

        keyword = match_keyword(line)
        if keyword is not None:
            if current is not None:
                raise FormatError(
                    f"Section not terminated by '{END_OF_RECORD}' before "
                    f"{keyword} on line {line_number}",
                    section=current,
                )
            current = keyword
            lines = []
            continue

        if line == END_OF_RECORD or line.endswith(END_OF_RECORD):
            if current is not None:
                before = line[: line.rfind(END_OF_RECORD)].strip()
                if before:
                    lines.append(before)
                close_section(current)
            current = None
            lines = []
        elif current is not None and line:
            lines.append(line)

    if current is not None:
        raise FormatError(
            f"Section not terminated by '{END_OF_RECORD}' at end of input",
            section=current,
        )
    return sections


def parse_int(
    token: str,
    section: typing.Optional[str] = None,
    position: typing.Optional[int] = None,
) -> int:
    """
    Parse an integer token.

    :raises FormatError: If the token is not an integer.
    """
    try:
        return int(token)
    except ValueError:
        raise FormatError(
            f"Expected an integer, got {token!r}", section=section, position=position
        ) from None


def parse_float(
    token: str,
    section: typing.Optional[str] = None,
    position: typing.Optional[int] = None,
) -> float:
    """
    Parse a floating point token.

    Fortran double precision exponents (`1.5D+03`) are accepted.

    :raises FormatError: If the token is not a finite number.
    """
    try:
        value = float(token.replace("D", "E").replace("d", "e"))
    except ValueError:
        raise FormatError(
            f"Expected a number, got {token!r}", section=section, position=position
        ) from None
    if not math.isfinite(value):
        raise FormatError(
            f"Expected a finite number, got {token!r}",
            section=section,
            position=position,
        )
    return value


def _check_room(
    total: int, expected: typing.Optional[int], section: typing.Optional[str]
) -> None:
    if expected is not None and total > expected:
        raise DimensionMismatchError(
            f"{section or 'Section'} holds at least {total} values but the grid needs {expected}",
            section=section,
            expected=expected,
            actual=total,
        )


def expand_tokens(
    tokens: typing.Iterable[str],
    cast: typing.Callable[[str, typing.Optional[str], typing.Optional[int]], T],
    section: typing.Optional[str] = None,
    expected: typing.Optional[int] = None,
) -> typing.List[T]:
    """
    Parse tokens, expanding Eclipse repeat tokens.

    `count*value` stands for `value` repeated `count` times, so `["2*0", "3*1"]`
    expands to `[0, 0, 1, 1, 1]`.

    :param tokens: Raw tokens of one section.
    :param cast: Parser for a single value (`parse_int` or `parse_float`).
    :param section: Section keyword, used in error messages.
    :param expected: Number of values the section must hold. Expansion stops
        with an error as soon as the values would exceed it, so oversized
        repeat counts are never materialized.
    :return: The expanded values.
    :raises FormatError: If a value or repeat count is malformed.
    :raises DimensionMismatchError: If the values exceed `expected`.
    """
    values: typing.List[T] = []
    for position, token in enumerate(tokens, start=1):
        if "*" not in token:
            _check_room(len(values) + 1, expected, section)
            values.append(cast(token, section, position))
            continue

        count_token, value_token = token.split("*", 1)
        count = parse_int(count_token, section=section, position=position)
        if count < 1:
            raise FormatError(
                f"Repeat count must be positive, got {token!r}",
                section=section,
                position=position,
            )
        if not value_token:
            # `n*` means n defaulted values in Eclipse; there is no default for these arrays
            raise FormatError(
                f"Repeat token {token!r} has no value", section=section, position=position
            )
        _check_room(len(values) + count, expected, section)
        values.extend([cast(value_token, section, position)] * count)
    return values

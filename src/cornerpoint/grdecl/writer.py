"""Writer for GRDECL corner-point grid files."""

from os import PathLike
import itertools
import logging
import typing

import numpy as np

from cornerpoint.models import CornerPointData

__all__ = ["format_grdecl", "write_grdecl", "compress_runs"]

logger = logging.getLogger(__name__)


def compress_runs(values: typing.Iterable[int]) -> typing.List[str]:
    """
    Encode integer values as Eclipse repeat tokens.

    Runs longer than one value become `count*value`, so `[0, 0, 1, 1, 1, 0]`
    encodes to `["2*0", "3*1", "0"]`.
    """
    tokens = []
    for value, run in itertools.groupby(values):
        count = sum(1 for _ in run)
        tokens.append(f"{count}*{value}" if count > 1 else f"{value}")
    return tokens


def _format_float(value: float) -> str:
    return repr(float(value))


def _wrap(tokens: typing.Sequence[str], per_line: int) -> typing.List[str]:
    return [
        "  " + " ".join(tokens[start : start + per_line])
        for start in range(0, len(tokens), per_line)
    ]


def format_grdecl(
    data: CornerPointData,
    compress: bool = True,
    values_per_line: int = 8,
    header: typing.Optional[str] = None,
) -> str:
    """
    Render corner-point arrays as GRDECL text.

    Floats are written with `repr`, so the text parses back to identical arrays.

    :param data: Grid arrays to write.
    :param compress: Whether to write ACTNUM runs as `count*value` tokens.
    :param values_per_line: Number of ZCORN/ACTNUM values per line.
    :param header: Optional comment written at the top of the file.
    :return: GRDECL text.
    """
    data.validate()
    dims = data.dimensions
    lines: typing.List[str] = []
    if header:
        lines.extend(f"-- {line}" for line in header.splitlines())
        lines.append("")

    lines.extend(["SPECGRID", f"  {dims.nx} {dims.ny} {dims.nz} 1 F /", ""])

    lines.append("COORD")
    for pillar in data.coord:
        lines.append("  " + " ".join(_format_float(v) for v in pillar))
    lines.extend(["/", ""])

    lines.append("ZCORN")
    lines.extend(_wrap([_format_float(v) for v in data.zcorn], values_per_line))
    lines.extend(["/", ""])

    actnum = [int(v) for v in np.asarray(data.actnum)]
    tokens = compress_runs(actnum) if compress else [str(v) for v in actnum]
    lines.append("ACTNUM")
    lines.extend(_wrap(tokens, values_per_line))
    lines.extend(["/", ""])
    return "\n".join(lines)


def write_grdecl(
    data: CornerPointData,
    filepath: typing.Union[str, PathLike],
    **kwargs: typing.Any,
) -> None:
    """
    Write corner-point arrays to a GRDECL file.

    :param data: Grid arrays to write.
    :param filepath: Destination path.
    :param kwargs: Passed on to `format_grdecl`.
    """
    text = format_grdecl(data, **kwargs)
    with open(filepath, "w", encoding="utf-8") as f:
        f.write(text)
    logger.debug(f"Wrote {data.dimensions} grid to {filepath}")

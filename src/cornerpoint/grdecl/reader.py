"""
Reader for Eclipse GRDECL corner-point grid files.

Only the geometry keywords are handled:

- `SPECGRID`: grid dimensions nx, ny, nz
- `COORD`: (nx+1)*(ny+1) pillars, six values each (x1 y1 z1 x2 y2 z2)
- `ZCORN`: 8*nx*ny*nz corner depths
- `ACTNUM`: nx*ny*nz active flags (defaults to all active)

Example:
```
SPECGRID
  2 2 1 1 F /
COORD
  0 0 0  0 0 1
  ...
/
ZCORN
  16*0 16*1 /
ACTNUM
  4*1 /
```
"""

from os import PathLike
import logging
import typing

import numpy as np

from cornerpoint._precision import get_dtype
from cornerpoint.config import DEFAULT_CONFIG, Config
from cornerpoint.errors import DimensionMismatchError, FormatError
from cornerpoint.grdecl.tokens import (
    expand_tokens,
    parse_float,
    parse_int,
    read_sections,
)
from cornerpoint.models import CornerPointData, GridDimensions

__all__ = ["parse_grdecl", "read_grdecl"]

logger = logging.getLogger(__name__)


def _parse_specgrid(tokens: typing.Sequence[str]) -> GridDimensions:
    """
    Parse SPECGRID tokens into grid dimensions.

    The first three tokens are nx, ny and nz. Trailing tokens (number of
    reservoirs, the `F`/`T` coordinate flag) are ignored.
    """
    if len(tokens) < 3:
        raise FormatError(
            f"Expected nx, ny and nz, got {len(tokens)} value(s): {' '.join(tokens)!r}",
            section="SPECGRID",
        )

    nx, ny, nz = (
        parse_int(token, section="SPECGRID", position=position)
        for position, token in enumerate(tokens[:3], start=1)
    )
    for name, value in (("nx", nx), ("ny", ny), ("nz", nz)):
        if value < 1:
            raise FormatError(
                f"Grid dimension {name} must be positive, got {value}",
                section="SPECGRID",
            )
    return GridDimensions(nx=nx, ny=ny, nz=nz)


def _parse_coord(
    tokens: typing.Sequence[str], dimensions: GridDimensions
) -> np.ndarray:
    values = [
        parse_float(token, section="COORD", position=position)
        for position, token in enumerate(tokens, start=1)
    ]
    if len(values) % 6 != 0:
        raise DimensionMismatchError(
            f"COORD holds {len(values)} values, which is not a multiple of 6 "
            "(x1 y1 z1 x2 y2 z2 per pillar)",
            section="COORD",
            actual=len(values),
        )
    pillars = len(values) // 6
    if pillars != dimensions.pillar_count:
        raise DimensionMismatchError(
            f"COORD has {pillars} pillars but grid {dimensions} needs "
            f"(nx+1)*(ny+1) = {dimensions.pillar_count}",
            section="COORD",
            expected=dimensions.pillar_count,
            actual=pillars,
        )
    return np.array(values, dtype=get_dtype()).reshape(-1, 6)


def _parse_zcorn(
    tokens: typing.Sequence[str], dimensions: GridDimensions
) -> np.ndarray:
    values = expand_tokens(
        tokens, parse_float, section="ZCORN", expected=dimensions.zcorn_size
    )
    if len(values) != dimensions.zcorn_size:
        raise DimensionMismatchError(
            f"ZCORN has {len(values)} values but grid {dimensions} needs "
            f"8*nx*ny*nz = {dimensions.zcorn_size}",
            section="ZCORN",
            expected=dimensions.zcorn_size,
            actual=len(values),
        )
    return np.array(values, dtype=get_dtype())


def _parse_actnum(
    tokens: typing.Sequence[str], dimensions: GridDimensions
) -> np.ndarray:
    values = expand_tokens(
        tokens, parse_int, section="ACTNUM", expected=dimensions.cell_count
    )
    return np.array(values, dtype=np.int64)


def parse_grdecl(text: str, config: typing.Optional[Config] = None) -> CornerPointData:
    """
    Parse GRDECL text into structured corner-point arrays.

    Sections may appear in any order. A missing ACTNUM section means every
    cell is active.

    :param text: Full file content.
    :param config: Reader configuration. Defaults to `DEFAULT_CONFIG`.
    :return: Validated `CornerPointData`.
    :raises FormatError: If a required section is missing or a token is malformed.
    :raises DimensionMismatchError: If COORD, ZCORN or ACTNUM sizes disagree with SPECGRID.
    """
    config = config or DEFAULT_CONFIG
    sections = read_sections(text)
    if not sections:
        raise FormatError("No SPECGRID, COORD, ZCORN or ACTNUM section found")
    if "SPECGRID" not in sections:
        raise FormatError(
            "SPECGRID section is required to size the grid "
            f"(found {', '.join(sections)})"
        )

    dimensions = _parse_specgrid(sections["SPECGRID"])
    for keyword in ("COORD", "ZCORN"):
        if keyword not in sections:
            raise FormatError(f"{keyword} section is required to build geometry")

    # COORD and ZCORN are checked against SPECGRID before any cell-sized array exists
    coord = _parse_coord(sections["COORD"], dimensions)
    zcorn = _parse_zcorn(sections["ZCORN"], dimensions)
    if "ACTNUM" in sections:
        actnum = _parse_actnum(sections["ACTNUM"], dimensions)
        unusual = np.setdiff1d(np.unique(actnum), [0, 1])
        if unusual.size:
            logger.debug(
                f"ACTNUM contains values other than 0/1 ({unusual.tolist()}); "
                "nonzero values are treated as active"
            )
    else:
        logger.debug(f"No ACTNUM section, marking all {dimensions.cell_count} cells active")
        actnum = np.ones(dimensions.cell_count, dtype=np.int64)

    data = CornerPointData(
        dimensions=dimensions, coord=coord, zcorn=zcorn, actnum=actnum
    ).validate()
    if config.log_summary:
        logger.info(
            f"Parsed GRDECL grid {dimensions}: {data.coord.shape[0]} pillars, "
            f"{data.zcorn.size} ZCORN values, {data.actnum.size} ACTNUM values, "
            f"{data.active_count} active cells"
        )
    return data


def read_grdecl(
    filepath: typing.Union[str, PathLike], config: typing.Optional[Config] = None
) -> CornerPointData:
    """
    Read and parse a GRDECL file.

    :param filepath: Path to the GRDECL file.
    :param config: Reader configuration. Defaults to `DEFAULT_CONFIG`.
    :return: Validated `CornerPointData`.
    """
    logger.debug(f"Reading GRDECL file {filepath}")
    with open(filepath, "r", encoding="utf-8", errors="replace") as f:
        text = f.read()
    return parse_grdecl(text, config=config)

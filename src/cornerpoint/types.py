import typing

import numpy as np
import numpy.typing as npt
from typing_extensions import TypeAlias


__all__ = [
    "ThreeDimensions",
    "Point3D",
    "Spacing",
    "FloatArray",
    "IntArray",
    "PillarArray",
    "CornerArray",
    "FileType",
    "Section",
    "SECTIONS",
]

ThreeDimensions: TypeAlias = typing.Tuple[int, int, int]
"""3D indices or extents (i, j, k) / (nx, ny, nz)"""

Point3D: TypeAlias = typing.Tuple[float, float, float]
"""A point in 3-space (x, y, z)"""
Spacing: TypeAlias = typing.Tuple[float, float, float]
"""Per-cell spacing along x, y and z (dx, dy, dz)"""

FloatArray = npt.NDArray[np.floating]
IntArray = npt.NDArray[np.integer]

PillarArray = FloatArray
"""Pillar records of shape (pillar_count, 6): x1, y1, z1, x2, y2, z2 per pillar"""
CornerArray = FloatArray
"""Cell corner points of shape (cell_count, 8, 3)"""

FileType = typing.Literal["grdecl", "json", "yaml", "unknown"]
"""Kinds of grid files understood by the loaders"""

Section = typing.Literal["SPECGRID", "COORD", "ZCORN", "ACTNUM"]
"""GRDECL section keywords handled by the reader"""

SECTIONS: typing.Tuple[Section, ...] = ("SPECGRID", "COORD", "ZCORN", "ACTNUM")

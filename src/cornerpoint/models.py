"""Data models for corner-point grids and their reconstructed geometry."""

import functools
import typing

import attrs
import numpy as np
from typing_extensions import Self

from cornerpoint._precision import get_dtype
from cornerpoint.errors import DimensionMismatchError, ValidationError
from cornerpoint.serialization import Serializable
from cornerpoint.stores import StoreSerializable
from cornerpoint.types import (
    CornerArray,
    FloatArray,
    IntArray,
    PillarArray,
    ThreeDimensions,
)


__all__ = [
    "GridDimensions",
    "CornerPointData",
    "GridGeometry",
    "GEOMETRY_SCHEMA_VERSION",
]

GEOMETRY_SCHEMA_VERSION = 1
"""Version of the serialized `GridGeometry` payload."""


def _positive_int(
    instance: typing.Any, attribute: "attrs.Attribute[int]", value: typing.Any
) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise ValidationError(
            f"Grid dimension `{attribute.name}` must be an integer, got {value!r}"
        )
    if value < 1:
        raise ValidationError(
            f"Grid dimension `{attribute.name}` must be positive, got {value}"
        )


@attrs.frozen(slots=True)
class GridDimensions(Serializable):
    """
    Logical extents of a structured (i, j, k) cell index space.

    Cells are numbered with i varying fastest, then j, then k.
    """

    nx: int = attrs.field(validator=_positive_int)
    """Number of cells along i (x)."""
    ny: int = attrs.field(validator=_positive_int)
    """Number of cells along j (y)."""
    nz: int = attrs.field(validator=_positive_int)
    """Number of cells along k (layers)."""

    @property
    def shape(self) -> ThreeDimensions:
        return (self.nx, self.ny, self.nz)

    @property
    def cell_count(self) -> int:
        return self.nx * self.ny * self.nz

    @property
    def pillar_count(self) -> int:
        return (self.nx + 1) * (self.ny + 1)

    @property
    def coord_size(self) -> int:
        """Number of COORD values (6 per pillar)."""
        return 6 * self.pillar_count

    @property
    def zcorn_size(self) -> int:
        """Number of ZCORN values (8 per cell)."""
        return 8 * self.cell_count

    def cell_index(self, i: int, j: int, k: int) -> int:
        """
        Linear index of cell (i, j, k).

        :raises IndexError: If the cell lies outside the grid.
        """
        if not (0 <= i < self.nx and 0 <= j < self.ny and 0 <= k < self.nz):
            raise IndexError(f"Cell ({i}, {j}, {k}) is outside grid {self}")
        return i + j * self.nx + k * self.nx * self.ny

    def cell_ijk(self, index: int) -> ThreeDimensions:
        """
        Inverse of `cell_index`.

        :raises IndexError: If the index lies outside the grid.
        """
        if not 0 <= index < self.cell_count:
            raise IndexError(f"Cell index {index} is outside grid {self}")
        k, remainder = divmod(index, self.nx * self.ny)
        j, i = divmod(remainder, self.nx)
        return (i, j, k)

    def pillar_index(self, i: int, j: int) -> int:
        """Index of the pillar at node (i, j), with i in [0, nx] and j in [0, ny]."""
        if not (0 <= i <= self.nx and 0 <= j <= self.ny):
            raise IndexError(f"Pillar ({i}, {j}) is outside grid {self}")
        return j * (self.nx + 1) + i

    def __str__(self) -> str:
        return f"{self.nx}x{self.ny}x{self.nz}"


def _as_pillars(value: typing.Any) -> PillarArray:
    array = np.asarray(value, dtype=get_dtype())
    if array.ndim == 1:
        if array.size % 6 != 0:
            raise DimensionMismatchError(
                f"COORD holds {array.size} values, which is not a multiple of 6 "
                "(x1 y1 z1 x2 y2 z2 per pillar)",
                section="COORD",
                actual=int(array.size),
            )
        array = array.reshape(-1, 6)
    return array


def _as_floats(value: typing.Any) -> FloatArray:
    return np.asarray(value, dtype=get_dtype()).reshape(-1)


def _as_flags(value: typing.Any) -> IntArray:
    return np.asarray(value, dtype=np.int64).reshape(-1)


# Geometry arrays are frozen after construction, so they always get their own copy.
def _copy_flags(value: typing.Any) -> IntArray:
    return np.array(value, dtype=np.int64).reshape(-1)


def _as_vertices(value: typing.Any) -> FloatArray:
    return np.array(value, dtype=get_dtype()).reshape(-1, 3)


def _as_index_table(value: typing.Any) -> IntArray:
    return np.array(value, dtype=np.int64)


def _as_corner_table(value: typing.Any) -> CornerArray:
    return np.array(value, dtype=get_dtype())


_array_eq = attrs.cmp_using(eq=np.array_equal)
_nan_array_eq = attrs.cmp_using(eq=functools.partial(np.array_equal, equal_nan=True))


@attrs.frozen(slots=True)
class CornerPointData(StoreSerializable):
    """
    Structured arrays of a corner-point grid, as read from GRDECL text
    or produced by a grid generator.
    """

    dimensions: GridDimensions
    """Grid extents from SPECGRID."""
    coord: PillarArray = attrs.field(converter=_as_pillars, eq=_array_eq)
    """Pillar records, shape (pillar_count, 6), ordered by `j*(nx+1) + i`."""
    zcorn: FloatArray = attrs.field(converter=_as_floats, eq=_array_eq)
    """Corner depths, flat, 8 per cell in the standard GRDECL block layout."""
    actnum: IntArray = attrs.field(converter=_as_flags, eq=_array_eq)
    """Active flags, one per cell in linear index order. Nonzero is active."""

    @property
    def active_count(self) -> int:
        return int(np.count_nonzero(self.actnum))

    @property
    def active_mask(self) -> np.ndarray:
        return self.actnum != 0

    def validate(self) -> Self:
        """
        Check that array sizes agree with the declared dimensions.

        :return: The instance itself, for chaining.
        :raises DimensionMismatchError: If COORD, ZCORN or ACTNUM is inconsistent with the dimensions.
        """
        dims = self.dimensions
        if self.coord.ndim != 2 or self.coord.shape[1] != 6:
            raise DimensionMismatchError(
                f"COORD must have shape (n, 6), got {self.coord.shape}",
                section="COORD",
            )
        if self.coord.shape[0] != dims.pillar_count:
            raise DimensionMismatchError(
                f"COORD has {self.coord.shape[0]} pillars but grid {dims} needs "
                f"(nx+1)*(ny+1) = {dims.pillar_count}",
                section="COORD",
                expected=dims.pillar_count,
                actual=int(self.coord.shape[0]),
            )
        if self.zcorn.size != dims.zcorn_size:
            raise DimensionMismatchError(
                f"ZCORN has {self.zcorn.size} values but grid {dims} needs "
                f"8*nx*ny*nz = {dims.zcorn_size}",
                section="ZCORN",
                expected=dims.zcorn_size,
                actual=int(self.zcorn.size),
            )
        if self.actnum.size != dims.cell_count:
            raise DimensionMismatchError(
                f"ACTNUM has {self.actnum.size} values but grid {dims} has "
                f"{dims.cell_count} cells",
                section="ACTNUM",
                expected=dims.cell_count,
                actual=int(self.actnum.size),
            )
        return self


@attrs.frozen(slots=True)
class GridGeometry(StoreSerializable):
    """
    Reconstructed cell geometry of a grid.

    Produced once per parse or generate call and never modified afterwards.
    Arrays are made read-only on construction.
    """

    dimensions: GridDimensions
    """Grid extents."""
    active_cell_count: int
    """Number of active cells (nonzero ACTNUM entries)."""
    vertices: FloatArray = attrs.field(converter=_as_vertices, eq=_array_eq)
    """Deduplicated vertex pool, shape (vertex_count, 3), in registration order."""
    cell_vertex_indices: IntArray = attrs.field(
        converter=_as_index_table, eq=_array_eq
    )
    """
    Pool index of each cell corner, shape (cell_count, 8).

    Rows of inactive cells are filled with -1.
    """
    cell_corners: CornerArray = attrs.field(
        converter=_as_corner_table, eq=_nan_array_eq
    )
    """
    Literal corner points of each cell, shape (cell_count, 8, 3).

    Rows of inactive cells are filled with NaN.
    """
    actnum: IntArray = attrs.field(converter=_copy_flags, eq=_array_eq)
    """Active flags the geometry was built with."""

    def __attrs_post_init__(self) -> None:
        cell_count = self.dimensions.cell_count
        if self.vertices.ndim != 2 or self.vertices.shape[1] != 3:
            raise ValidationError(
                f"`vertices` must have shape (n, 3), got {self.vertices.shape}"
            )
        if self.cell_vertex_indices.shape != (cell_count, 8):
            raise ValidationError(
                f"`cell_vertex_indices` must have shape ({cell_count}, 8), "
                f"got {self.cell_vertex_indices.shape}"
            )
        if self.cell_corners.shape != (cell_count, 8, 3):
            raise ValidationError(
                f"`cell_corners` must have shape ({cell_count}, 8, 3), "
                f"got {self.cell_corners.shape}"
            )
        if self.actnum.shape != (cell_count,):
            raise ValidationError(
                f"`actnum` must have shape ({cell_count},), got {self.actnum.shape}"
            )
        for array in (
            self.vertices,
            self.cell_vertex_indices,
            self.cell_corners,
            self.actnum,
        ):
            array.flags.writeable = False

    @property
    def vertex_count(self) -> int:
        return int(self.vertices.shape[0])

    @property
    def cell_count(self) -> int:
        return self.dimensions.cell_count

    @property
    def active_mask(self) -> np.ndarray:
        return self.actnum != 0

    def is_active(self, i: int, j: int, k: int) -> bool:
        return bool(self.actnum[self.dimensions.cell_index(i, j, k)] != 0)

    def corners(self, i: int, j: int, k: int) -> typing.Optional[CornerArray]:
        """
        Corner points of cell (i, j, k).

        :return: Array of shape (8, 3) in hexahedron corner order, or None if the cell is inactive.
        """
        index = self.dimensions.cell_index(i, j, k)
        if self.actnum[index] == 0:
            return None
        return self.cell_corners[index]

    def corner_indices(self, i: int, j: int, k: int) -> typing.Optional[IntArray]:
        """
        Vertex pool indices of the corners of cell (i, j, k).

        :return: Array of 8 pool indices, or None if the cell is inactive.
        """
        index = self.dimensions.cell_index(i, j, k)
        if self.actnum[index] == 0:
            return None
        return self.cell_vertex_indices[index]

    def iter_active_cells(
        self,
    ) -> typing.Iterator[typing.Tuple[ThreeDimensions, CornerArray]]:
        """Yield `((i, j, k), corners)` for every active cell, in linear index order."""
        for index in np.flatnonzero(self.actnum):
            yield self.dimensions.cell_ijk(int(index)), self.cell_corners[index]

    def bounds(self) -> typing.Tuple[FloatArray, FloatArray]:
        """
        Axis-aligned bounding box of the vertex pool.

        :return: `(minimum, maximum)` xyz arrays.
        :raises ValidationError: If the grid has no active cells.
        """
        if self.vertex_count == 0:
            raise ValidationError("Grid has no active cells, bounds are undefined")
        return self.vertices.min(axis=0), self.vertices.max(axis=0)

    def summary(self) -> str:
        """Short human-readable description of the grid."""
        return (
            f"Grid: {self.dimensions}\n"
            f"Active cells: {self.active_cell_count}/{self.cell_count}\n"
            f"Unique vertices: {self.vertex_count}"
        )

    def __dump__(self, recurse: bool = True) -> typing.Dict[str, typing.Any]:
        return {
            "schema_version": GEOMETRY_SCHEMA_VERSION,
            "dimensions": self.dimensions.dump(recurse)
            if recurse
            else self.dimensions,
            "active_cell_count": int(self.active_cell_count),
            "vertices": self.vertices.tolist(),
            "cell_vertex_indices": self.cell_vertex_indices.tolist(),
            "actnum": self.actnum.tolist(),
        }

    @classmethod
    def __load__(cls, data: typing.Mapping[str, typing.Any]) -> Self:
        version = data.get("schema_version")
        if version != GEOMETRY_SCHEMA_VERSION:
            raise ValidationError(
                f"Unsupported grid geometry schema version {version!r}, "
                f"expected {GEOMETRY_SCHEMA_VERSION}"
            )

        dimensions = GridDimensions.load(data["dimensions"])
        vertices = np.asarray(data["vertices"], dtype=get_dtype()).reshape(-1, 3)
        indices = np.asarray(data["cell_vertex_indices"], dtype=np.int64)
        indices = indices.reshape(dimensions.cell_count, 8)
        actnum = np.asarray(data["actnum"], dtype=np.int64).reshape(-1)
        if indices.size and indices.max() >= vertices.shape[0]:
            raise ValidationError(
                "`cell_vertex_indices` references vertices outside the vertex pool"
            )

        active = actnum != 0
        if np.any(indices[active] < 0):
            raise ValidationError("Active cells must reference 8 pool vertices each")

        corners = np.full((dimensions.cell_count, 8, 3), np.nan, dtype=get_dtype())
        corners[active] = vertices[indices[active]]
        active_cell_count = int(data["active_cell_count"])
        if active_cell_count != int(np.count_nonzero(active)):
            raise ValidationError(
                f"`active_cell_count` is {active_cell_count} but ACTNUM has "
                f"{int(np.count_nonzero(active))} active cells"
            )
        return cls(
            dimensions=dimensions,
            active_cell_count=active_cell_count,
            vertices=vertices,
            cell_vertex_indices=indices,
            cell_corners=corners,
            actnum=actnum,
        )

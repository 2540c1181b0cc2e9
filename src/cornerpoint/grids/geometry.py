"""
Reconstruction of hexahedral cell geometry from corner-point arrays.

Each cell (i, j, k) is bounded by four pillars, `(i, j)`, `(i+1, j)`,
`(i+1, j+1)` and `(i, j+1)`. ZCORN gives the depth of each of the cell's eight
corners along those pillars, and a corner's x and y follow by linear
interpolation along its pillar at that depth.

Corner order of every cell:

```
    7----6
   /|   /|
  4----5 |
  | 3--|-2
  |/   |/
  0----1
```

0-3 lie on the face at the cell's first ZCORN depths (front-left, front-right,
back-right, back-left), 4-7 on the opposite face at its second depths, each
sharing a pillar with corner `n - 4`. With z drawn upwards the first face is
the bottom one, as above.
"""

import logging
import typing

import numba
import numpy as np

from cornerpoint._precision import get_dtype
from cornerpoint.config import DEFAULT_CONFIG, Config
from cornerpoint.errors import DegeneratePillarError
from cornerpoint.grdecl.reader import parse_grdecl
from cornerpoint.grids.vertices import VertexPool
from cornerpoint.models import CornerPointData, GridDimensions, GridGeometry
from cornerpoint.types import CornerArray, FloatArray, IntArray, Point3D

__all__ = [
    "build_geometry",
    "load_geometry",
    "interpolate_on_pillar",
    "cell_zcorn_indices",
    "cell_pillar_indices",
]

logger = logging.getLogger(__name__)


def cell_zcorn_indices(i: int, j: int, k: int, dimensions: GridDimensions) -> IntArray:
    """
    ZCORN positions of the eight corner depths of cell (i, j, k), in corner order.

    :param i: Cell index along x.
    :param j: Cell index along y.
    :param k: Cell layer index.
    :param dimensions: Grid dimensions.
    :return: Array of 8 indices into the flat ZCORN array.
    """
    dimensions.cell_index(i, j, k)
    nx, ny = dimensions.nx, dimensions.ny
    offset = 2 * (i + j * (2 * nx) + k * (2 * nx * 2 * ny))
    face = np.array([0, 1, 2 * nx + 1, 2 * nx], dtype=np.int64)
    return np.concatenate([offset + face, offset + 4 * nx * ny + face])


def cell_pillar_indices(i: int, j: int, dimensions: GridDimensions) -> IntArray:
    """
    Indices of the four pillars bounding column (i, j), in corner order 0-3.

    :return: Pillar indices of `(i, j)`, `(i+1, j)`, `(i+1, j+1)` and `(i, j+1)`.
    """
    return np.array(
        [
            dimensions.pillar_index(i, j),
            dimensions.pillar_index(i + 1, j),
            dimensions.pillar_index(i + 1, j + 1),
            dimensions.pillar_index(i, j + 1),
        ],
        dtype=np.int64,
    )


def interpolate_on_pillar(pillar: typing.Sequence[float], z: float) -> Point3D:
    """
    Point on a pillar at depth `z`.

    :param pillar: Pillar record (x1, y1, z1, x2, y2, z2).
    :param z: Target depth.
    :return: (x, y, z) by linear interpolation between the pillar's end points.
    :raises DegeneratePillarError: If both end points share the same depth.
    """
    x1, y1, z1, x2, y2, z2 = (float(v) for v in pillar)
    if z2 == z1:
        raise DegeneratePillarError(depth=z1)
    t = (z - z1) / (z2 - z1)
    return (x1 + t * (x2 - x1), y1 + t * (y2 - y1), float(z))


@numba.njit(cache=True)
def _set_corner(
    coord: FloatArray,
    pillar: int,
    z: float,
    corners: CornerArray,
    cell: int,
    corner: int,
) -> None:
    """Interpolate the point at depth `z` on `pillar` into `corners[cell, corner]`."""
    x1 = coord[pillar, 0]
    y1 = coord[pillar, 1]
    z1 = coord[pillar, 2]
    x2 = coord[pillar, 3]
    y2 = coord[pillar, 4]
    z2 = coord[pillar, 5]
    t = (z - z1) / (z2 - z1)
    corners[cell, corner, 0] = x1 + t * (x2 - x1)
    corners[cell, corner, 1] = y1 + t * (y2 - y1)
    corners[cell, corner, 2] = z


@numba.njit(cache=True)
def _compute_cell_corners(
    coord: FloatArray,
    zcorn: FloatArray,
    actnum: IntArray,
    nx: int,
    ny: int,
    nz: int,
    corners: CornerArray,
) -> None:
    """
    Fill `corners` (cell_count, 8, 3) with the corner points of every active cell.

    Rows of inactive cells are left untouched.

    :param coord: Pillar records, shape (pillar_count, 6)
    :param zcorn: Flat corner depths, length 8*nx*ny*nz
    :param actnum: Active flags, length nx*ny*nz
    :param corners: Output array
    """
    row = 2 * nx
    layer = 4 * nx * ny
    for k in range(nz):
        for j in range(ny):
            for i in range(nx):
                cell = i + j * nx + k * nx * ny
                if actnum[cell] == 0:
                    continue

                offset = 2 * (i + j * row + k * row * 2 * ny)
                p00 = j * (nx + 1) + i
                p10 = p00 + 1
                p11 = p00 + nx + 2
                p01 = p00 + nx + 1

                _set_corner(coord, p00, zcorn[offset], corners, cell, 0)
                _set_corner(coord, p10, zcorn[offset + 1], corners, cell, 1)
                _set_corner(coord, p11, zcorn[offset + row + 1], corners, cell, 2)
                _set_corner(coord, p01, zcorn[offset + row], corners, cell, 3)
                _set_corner(coord, p00, zcorn[offset + layer], corners, cell, 4)
                _set_corner(coord, p10, zcorn[offset + layer + 1], corners, cell, 5)
                _set_corner(
                    coord, p11, zcorn[offset + layer + row + 1], corners, cell, 6
                )
                _set_corner(coord, p01, zcorn[offset + layer + row], corners, cell, 7)


def _check_pillars(
    coord: FloatArray, actnum: IntArray, dimensions: GridDimensions
) -> None:
    """
    Reject degenerate pillars that active cells interpolate along.

    :raises DegeneratePillarError: For the lowest-indexed offending pillar.
    """
    nx, ny = dimensions.nx, dimensions.ny
    cells = np.flatnonzero(actnum)
    if cells.size == 0:
        return

    i = cells % nx
    j = (cells // nx) % ny
    p00 = j * (nx + 1) + i
    pillars = np.unique(np.concatenate([p00, p00 + 1, p00 + nx + 2, p00 + nx + 1]))
    degenerate = pillars[coord[pillars, 2] == coord[pillars, 5]]
    if degenerate.size:
        pillar = int(degenerate[0])
        pj, pi = divmod(pillar, nx + 1)
        raise DegeneratePillarError(
            depth=float(coord[pillar, 2]), pillar_index=pillar, i=pi, j=pj
        )


def build_geometry(
    data: CornerPointData, config: typing.Optional[Config] = None
) -> GridGeometry:
    """
    Reconstruct the corner points of every active cell and pool shared vertices.

    Cells are visited in linear index order (i fastest, then j, then k) and each
    cell's corners are registered in the vertex pool in corner order, so pool
    indices are deterministic for a given input.

    :param data: Corner-point arrays.
    :param config: Reconstruction configuration. Defaults to `DEFAULT_CONFIG`.
    :return: The grid geometry.
    :raises DimensionMismatchError: If array sizes disagree with the grid dimensions.
    :raises DegeneratePillarError: If an active cell lies on a pillar with equal end depths.
    """
    config = config or DEFAULT_CONFIG
    data.validate()
    dimensions = data.dimensions
    dtype = get_dtype()

    coord = np.ascontiguousarray(data.coord, dtype=dtype)
    zcorn = np.ascontiguousarray(data.zcorn, dtype=dtype)
    actnum = np.ascontiguousarray(data.actnum, dtype=np.int64)
    _check_pillars(coord, actnum, dimensions)

    cell_count = dimensions.cell_count
    corners = np.full((cell_count, 8, 3), np.nan, dtype=dtype)
    _compute_cell_corners(
        coord, zcorn, actnum, dimensions.nx, dimensions.ny, dimensions.nz, corners
    )

    active_cells = np.flatnonzero(actnum)
    pool = VertexPool(decimals=config.vertex_decimals)
    indices = np.full((cell_count, 8), -1, dtype=np.int64)
    if active_cells.size:
        pooled = pool.add_many(corners[active_cells].reshape(-1, 3))
        indices[active_cells] = pooled.reshape(-1, 8)

    logger.debug(
        f"Reconstructed {active_cells.size}/{cell_count} active cells of grid "
        f"{dimensions} with {len(pool)} unique vertices"
    )
    return GridGeometry(
        dimensions=dimensions,
        active_cell_count=int(active_cells.size),
        vertices=pool.to_array(),
        cell_vertex_indices=indices,
        cell_corners=corners,
        actnum=actnum,
    )


def load_geometry(text: str, config: typing.Optional[Config] = None) -> GridGeometry:
    """
    Parse GRDECL text and reconstruct its geometry.

    :param text: Full GRDECL file content.
    :param config: Configuration. Defaults to `DEFAULT_CONFIG`.
    :return: The grid geometry.
    """
    return build_geometry(parse_grdecl(text, config=config), config=config)

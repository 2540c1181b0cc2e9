"""Synthetic regular Cartesian grids in corner-point form."""

import logging
import typing

import numpy as np

from cornerpoint._precision import get_dtype
from cornerpoint.config import DEFAULT_CONFIG, Config
from cornerpoint.errors import ValidationError
from cornerpoint.grids.geometry import build_geometry
from cornerpoint.models import CornerPointData, GridDimensions, GridGeometry
from cornerpoint.types import Point3D, Spacing

__all__ = [
    "build_cartesian_grid",
    "cartesian_geometry",
    "validate_grid_size",
]

logger = logging.getLogger(__name__)


def validate_grid_size(
    nx: int, ny: int, nz: int, config: typing.Optional[Config] = None
) -> GridDimensions:
    """
    Check requested grid extents against the configured limits.

    :return: The validated `GridDimensions`.
    :raises ValidationError: If an extent is not a positive integer, exceeds
        `max_cells_per_axis`, or the total cell count exceeds `max_cell_count`.
    """
    config = config or DEFAULT_CONFIG
    dimensions = GridDimensions(nx=nx, ny=ny, nz=nz)
    for name, value in zip(("nx", "ny", "nz"), dimensions.shape):
        if value > config.max_cells_per_axis:
            raise ValidationError(
                f"Grid dimension `{name}` must not exceed {config.max_cells_per_axis}, got {value}"
            )
    if dimensions.cell_count > config.max_cell_count:
        raise ValidationError(
            f"Grid {dimensions} has {dimensions.cell_count} cells, "
            f"more than the allowed {config.max_cell_count}"
        )
    return dimensions


def build_cartesian_grid(
    nx: int,
    ny: int,
    nz: int,
    spacing: typing.Optional[Spacing] = None,
    origin: Point3D = (0.0, 0.0, 0.0),
    config: typing.Optional[Config] = None,
) -> CornerPointData:
    """
    Build corner-point arrays for a regular, fully active Cartesian grid.

    Pillars are vertical, at `origin + (i*dx, j*dy)` for i in 0..nx and j in 0..ny,
    running from `z0` to `z0 + nz*dz`. Every cell of layer k spans depths
    `z0 + k*dz` to `z0 + (k+1)*dz`.

    :param nx: Number of cells along x.
    :param ny: Number of cells along y.
    :param nz: Number of layers.
    :param spacing: Cell size (dx, dy, dz). Defaults to `config.cell_spacing`.
    :param origin: Position (x0, y0, z0) of the top front-left grid corner.
    :param config: Configuration providing size limits and default spacing.
    :return: Validated `CornerPointData`.
    """
    config = config or DEFAULT_CONFIG
    dimensions = validate_grid_size(nx, ny, nz, config=config)
    dx, dy, dz = spacing if spacing is not None else config.cell_spacing
    if dx <= 0 or dy <= 0 or dz <= 0:
        raise ValidationError(f"Cell spacing must be positive, got {(dx, dy, dz)}")

    dtype = get_dtype()
    x0, y0, z0 = origin
    bottom = z0 + nz * dz

    # Pillars ordered with i varying fastest
    xs = x0 + np.arange(nx + 1, dtype=dtype) * dx
    ys = y0 + np.arange(ny + 1, dtype=dtype) * dy
    px, py = np.meshgrid(xs, ys, indexing="xy")
    px, py = px.ravel(), py.ravel()
    coord = np.column_stack(
        [
            px,
            py,
            np.full_like(px, z0),
            px,
            py,
            np.full_like(px, bottom),
        ]
    ).astype(dtype, copy=False)

    # Each layer holds a top face then a bottom face of 4*nx*ny depths each
    layer_tops = z0 + np.arange(nz, dtype=dtype) * dz
    face_depths = np.column_stack([layer_tops, layer_tops + dz]).ravel()
    zcorn = np.repeat(face_depths, 4 * nx * ny).astype(dtype, copy=False)

    actnum = np.ones(dimensions.cell_count, dtype=np.int64)
    logger.debug(
        f"Generated Cartesian grid {dimensions} with spacing {(dx, dy, dz)} at origin {tuple(origin)}"
    )
    return CornerPointData(
        dimensions=dimensions, coord=coord, zcorn=zcorn, actnum=actnum
    ).validate()


def cartesian_geometry(
    nx: int,
    ny: int,
    nz: int,
    spacing: typing.Optional[Spacing] = None,
    origin: Point3D = (0.0, 0.0, 0.0),
    config: typing.Optional[Config] = None,
) -> GridGeometry:
    """
    Build the reconstructed geometry of a regular Cartesian grid.

    Equivalent to `build_geometry(build_cartesian_grid(...))`, so corner
    ordering and vertex pooling match grids read from GRDECL files.
    """
    data = build_cartesian_grid(
        nx, ny, nz, spacing=spacing, origin=origin, config=config
    )
    return build_geometry(data, config=config)

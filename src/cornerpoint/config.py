import typing

import attrs

from cornerpoint.types import Spacing

__all__ = ["Config", "DEFAULT_CONFIG"]


def _validate_spacing(
    instance: typing.Any, attribute: "attrs.Attribute[Spacing]", value: Spacing
) -> None:
    if len(value) != 3:
        raise ValueError(f"`{attribute.name}` must have exactly 3 values (dx, dy, dz)")
    if any(v <= 0 for v in value):
        raise ValueError(f"`{attribute.name}` values must be positive, got {value}")


@attrs.frozen
class Config:
    """Grid reading and reconstruction configuration."""

    vertex_decimals: int = attrs.field(
        default=6,
        validator=attrs.validators.and_(
            attrs.validators.ge(0), attrs.validators.le(12)
        ),
    )
    """
    Number of fractional digits vertex coordinates are rounded to before
    deduplication in the vertex pool.

    Corners shared between adjacent cells are merged when their coordinates agree
    to this many decimal places.
    """
    cell_spacing: Spacing = attrs.field(
        default=(10.0, 10.0, 1.0),
        converter=tuple,
        validator=_validate_spacing,
    )
    """Default cell spacing (dx, dy, dz) for synthetic Cartesian grids."""
    max_cells_per_axis: int = attrs.field(default=1000, validator=attrs.validators.ge(1))
    """Largest extent accepted along any single axis when generating grids."""
    max_cell_count: int = attrs.field(
        default=1_000_000, validator=attrs.validators.ge(1)
    )
    """
    Largest total cell count accepted when generating grids.

    Corner-point reconstruction materializes 8 corners per cell, so very large
    grids should be read in pieces instead.
    """
    log_summary: bool = True
    """Whether to log a summary (dimensions, array sizes, active cells) after parsing."""


DEFAULT_CONFIG = Config()
"""Configuration used when none is passed explicitly."""

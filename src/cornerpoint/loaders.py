"""Loading grids from files of any supported type."""

from os import PathLike
from pathlib import Path
import logging
import typing

from cornerpoint.config import Config
from cornerpoint.errors import ValidationError
from cornerpoint.grdecl.reader import read_grdecl
from cornerpoint.grids.geometry import build_geometry
from cornerpoint.models import GridGeometry
from cornerpoint.types import FileType

__all__ = ["get_file_type", "validate_file_path", "load_grid", "FILE_TYPES"]

logger = logging.getLogger(__name__)

FILE_TYPES: typing.Dict[str, FileType] = {
    ".grdecl": "grdecl",
    ".grd": "grdecl",
    ".inc": "grdecl",
    ".json": "json",
    ".yaml": "yaml",
    ".yml": "yaml",
}
"""File extension (lower case) to file type."""


def get_file_type(filepath: typing.Union[str, PathLike]) -> FileType:
    """
    Determine the type of a grid file from its extension.

    :param filepath: Path or file name.
    :return: "grdecl", "json", "yaml" or "unknown".
    """
    return FILE_TYPES.get(Path(filepath).suffix.lower(), "unknown")


def validate_file_path(filepath: typing.Union[str, PathLike]) -> Path:
    """
    Reject empty paths and paths that traverse to a parent directory.

    :return: The path as a `Path`.
    :raises ValidationError: If the path is empty or contains a `..` segment.
    """
    if not str(filepath).strip():
        raise ValidationError("File path cannot be empty")

    path = Path(filepath)
    if ".." in path.parts:
        raise ValidationError(f"File path must not contain '..' segments: {filepath}")
    return path


def load_grid(
    filepath: typing.Union[str, PathLike], config: typing.Optional[Config] = None
) -> GridGeometry:
    """
    Load a grid's geometry from a file.

    GRDECL files are parsed and reconstructed. JSON and YAML files must hold a
    serialized `GridGeometry`.

    :param filepath: Path to the grid file.
    :param config: Configuration for GRDECL reading and reconstruction.
    :return: The grid geometry.
    :raises ValidationError: If the path is invalid, the file type is unsupported
        or the file holds no grid.
    """
    path = validate_file_path(filepath)
    file_type = get_file_type(path)
    logger.debug(f"Loading {file_type} grid from {path}")

    if file_type == "grdecl":
        return build_geometry(read_grdecl(path, config=config), config=config)

    if file_type in ("json", "yaml"):
        geometry = GridGeometry.from_file(path)
        if geometry is None:
            raise ValidationError(f"No grid geometry found in {path}")
        return geometry

    raise ValidationError(
        f"Unsupported grid file type '{path.suffix}'. "
        f"Expected one of {', '.join(FILE_TYPES)}"
    )

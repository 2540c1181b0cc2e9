"""Named collection of loaded and generated grids."""

from datetime import datetime
from os import PathLike
from pathlib import Path
import logging
import typing

import attrs

from cornerpoint.config import DEFAULT_CONFIG, Config
from cornerpoint.grids.cartesian import cartesian_geometry
from cornerpoint.loaders import get_file_type, load_grid
from cornerpoint.models import GridGeometry
from cornerpoint.types import FileType, Point3D, Spacing

__all__ = ["Workspace", "FileMetadata"]

logger = logging.getLogger(__name__)


@attrs.frozen(slots=True)
class FileMetadata:
    """Record of a grid file loaded into a workspace."""

    name: str
    """Name the grid was stored under."""
    path: str
    """Path the grid was read from."""
    file_type: FileType
    """Detected file type."""
    loaded_at: datetime = attrs.field(factory=datetime.now)
    """Time the file was loaded."""


@attrs.define
class Workspace:
    """
    Holds grids by name, with one of them selected as the active grid.

    The first grid added becomes active. Loading a file under an existing
    name replaces that grid only once the new one has been read successfully.

    Example:
    ```python
    workspace = Workspace()
    workspace.load("model.grdecl", name="model")
    workspace.generate(10, 10, 3, name="box")
    print(workspace.active_grid.summary())
    ```
    """

    config: Config = attrs.field(default=DEFAULT_CONFIG)
    """Configuration used for loading and generating grids."""
    grids: typing.Dict[str, GridGeometry] = attrs.field(factory=dict)
    """Grids by name, in insertion order."""
    active_name: typing.Optional[str] = None
    """Name of the active grid, if any."""
    loaded_files: typing.Dict[str, FileMetadata] = attrs.field(factory=dict)
    """Metadata of loaded files by grid name."""

    def __len__(self) -> int:
        return len(self.grids)

    def __contains__(self, name: object) -> bool:
        return name in self.grids

    @property
    def active_grid(self) -> typing.Optional[GridGeometry]:
        """The active grid, or None if no grid is selected."""
        if self.active_name is None:
            return None
        return self.grids.get(self.active_name)

    def add_grid(self, name: str, geometry: GridGeometry) -> None:
        """
        Store a grid under `name`, replacing any grid of the same name.

        The grid becomes active if no grid is active yet.
        """
        if name in self.grids:
            logger.debug(f"Replacing grid {name!r} in workspace")
        self.grids[name] = geometry
        if self.active_name is None:
            self.active_name = name

    def get_grid(self, name: str) -> GridGeometry:
        """
        Get a grid by name.

        :raises KeyError: If no grid is stored under `name`.
        """
        try:
            return self.grids[name]
        except KeyError:
            raise KeyError(f"Grid {name!r} not found in workspace") from None

    def remove_grid(self, name: str) -> None:
        """Remove a grid, clearing the active selection if it was active. Unknown names are ignored."""
        self.grids.pop(name, None)
        self.loaded_files.pop(name, None)
        if self.active_name == name:
            self.active_name = None

    def set_active_grid(self, name: str) -> None:
        """
        Select the active grid.

        :raises KeyError: If no grid is stored under `name`.
        """
        if name not in self.grids:
            raise KeyError(f"Grid {name!r} not found in workspace")
        self.active_name = name

    def list_grids(self) -> typing.List[str]:
        """Names of stored grids, in insertion order."""
        return list(self.grids)

    def clear(self) -> None:
        """Remove all grids and file records."""
        self.grids.clear()
        self.loaded_files.clear()
        self.active_name = None

    def load(
        self,
        filepath: typing.Union[str, PathLike],
        name: typing.Optional[str] = None,
    ) -> GridGeometry:
        """
        Load a grid file into the workspace.

        If reading fails the error propagates and the workspace is left as it was.

        :param filepath: Path to a GRDECL, JSON or YAML grid file.
        :param name: Name to store the grid under. Defaults to the file's stem.
        :return: The loaded grid geometry.
        """
        path = Path(filepath)
        name = name or path.stem
        geometry = load_grid(path, config=self.config)

        self.add_grid(name, geometry)
        self.loaded_files[name] = FileMetadata(
            name=name, path=str(path), file_type=get_file_type(path)
        )
        logger.info(f"Loaded grid {name!r} from {path}\n{geometry.summary()}")
        return geometry

    def generate(
        self,
        nx: int,
        ny: int,
        nz: int,
        name: str = "cartesian",
        spacing: typing.Optional[Spacing] = None,
        origin: Point3D = (0.0, 0.0, 0.0),
    ) -> GridGeometry:
        """
        Generate a regular Cartesian grid and store it under `name`.

        :return: The generated grid geometry.
        """
        geometry = cartesian_geometry(
            nx, ny, nz, spacing=spacing, origin=origin, config=self.config
        )
        self.add_grid(name, geometry)
        self.loaded_files.pop(name, None)
        logger.info(f"Generated grid {name!r}\n{geometry.summary()}")
        return geometry

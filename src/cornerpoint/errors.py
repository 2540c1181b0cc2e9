import typing

__all__ = [
    "CornerPointError",
    "ValidationError",
    "FormatError",
    "DimensionMismatchError",
    "GeometryError",
    "DegeneratePillarError",
    "SerializationError",
    "DeserializationError",
    "StorageError",
]


class CornerPointError(Exception):
    """Base class for all cornerpoint-related errors."""

    pass


class ValidationError(CornerPointError, ValueError):
    """Raised when input data fails validation checks."""

    pass


class FormatError(ValidationError):
    """
    Raised when GRDECL text cannot be read into structured arrays.

    Covers malformed numeric tokens, malformed repeat counts and
    missing sections that later stages depend on.
    """

    def __init__(
        self,
        message: str,
        section: typing.Optional[str] = None,
        position: typing.Optional[int] = None,
    ) -> None:
        self.section = section
        """Keyword of the section being read when the error occurred, if known."""
        self.position = position
        """1-based position of the offending token within its section, if known."""
        if section is not None and position is not None:
            message = f"{section} (token {position}): {message}"
        elif section is not None:
            message = f"{section}: {message}"
        super().__init__(message)


class DimensionMismatchError(ValidationError):
    """Raised when COORD, ZCORN or ACTNUM sizes disagree with the declared grid dimensions."""

    def __init__(
        self,
        message: str,
        section: typing.Optional[str] = None,
        expected: typing.Optional[int] = None,
        actual: typing.Optional[int] = None,
    ) -> None:
        self.section = section
        self.expected = expected
        self.actual = actual
        super().__init__(message)


class GeometryError(CornerPointError):
    """Raised when cell geometry cannot be reconstructed."""

    pass


class DegeneratePillarError(GeometryError):
    """Raised when a pillar's top and bottom points share the same depth."""

    def __init__(
        self,
        depth: float,
        pillar_index: typing.Optional[int] = None,
        i: typing.Optional[int] = None,
        j: typing.Optional[int] = None,
    ) -> None:
        self.depth = depth
        self.pillar_index = pillar_index
        self.i = i
        self.j = j
        where = "Pillar"
        if pillar_index is not None:
            where = f"Pillar {pillar_index}"
        if i is not None and j is not None:
            where = f"{where} at (i={i}, j={j})"
        super().__init__(
            f"{where} is degenerate: top and bottom share depth z={depth}, "
            "cannot interpolate along it."
        )


class SerializationError(CornerPointError):
    """Raised when an object cannot be serialized."""

    pass


class DeserializationError(CornerPointError):
    """Raised when an object cannot be deserialized."""

    pass


class StorageError(CornerPointError):
    """Raised when reading from or writing to a data store fails."""

    pass

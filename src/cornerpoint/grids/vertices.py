import typing

import numpy as np

from cornerpoint._precision import get_dtype
from cornerpoint.types import FloatArray, IntArray, Point3D

__all__ = ["VertexPool", "vertex_key"]

VertexKey = typing.Tuple[float, float, float]


def vertex_key(point: typing.Sequence[float], decimals: int = 6) -> VertexKey:
    """
    Deduplication key of a point: its coordinates rounded to `decimals` places.

    Adding 0.0 folds -0.0 into 0.0, so points on either side of zero that round
    to it share a key.
    """
    x, y, z = point
    return (
        round(float(x), decimals) + 0.0,
        round(float(y), decimals) + 0.0,
        round(float(z), decimals) + 0.0,
    )


class VertexPool:
    """
    Append-only pool of unique 3D points.

    Points whose coordinates agree to `decimals` places share one pool index.
    The first point registered under a key is the one stored. Indices are
    assigned in registration order and never change.
    """

    __slots__ = ("decimals", "_index", "_points")

    def __init__(self, decimals: int = 6) -> None:
        self.decimals = decimals
        self._index: typing.Dict[VertexKey, int] = {}
        self._points: typing.List[Point3D] = []

    def __len__(self) -> int:
        return len(self._points)

    def __contains__(self, point: typing.Sequence[float]) -> bool:
        return vertex_key(point, self.decimals) in self._index

    def __repr__(self) -> str:
        return f"{type(self).__name__}(vertices={len(self)}, decimals={self.decimals})"

    def add(self, point: typing.Sequence[float]) -> int:
        """
        Register a point.

        :return: Pool index of the point (existing index if an equal point was registered before).
        """
        key = vertex_key(point, self.decimals)
        index = self._index.get(key)
        if index is None:
            index = len(self._points)
            self._index[key] = index
            x, y, z = point
            self._points.append((float(x), float(y), float(z)))
        return index

    def add_many(self, points: typing.Union[FloatArray, typing.Sequence[Point3D]]) -> IntArray:
        """
        Register points in order.

        :param points: Points of shape (n, 3).
        :return: Pool index of each point, shape (n,).
        """
        array = np.asarray(points, dtype=np.float64).reshape(-1, 3)
        return np.fromiter(
            (self.add(point) for point in array.tolist()),
            dtype=np.int64,
            count=array.shape[0],
        )

    def index_of(self, point: typing.Sequence[float]) -> typing.Optional[int]:
        """Pool index of a point, or None if no equal point was registered."""
        return self._index.get(vertex_key(point, self.decimals))

    def to_array(self) -> FloatArray:
        """Registered points as an array of shape (n, 3)."""
        if not self._points:
            return np.empty((0, 3), dtype=get_dtype())
        return np.array(self._points, dtype=get_dtype())

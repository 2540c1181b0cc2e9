from contextlib import contextmanager
from contextvars import ContextVar

import numpy as np
import numpy.typing as npt


__all__ = [
    "get_dtype",
    "set_dtype",
    "with_precision",
    "get_floating_point_info",
]

_cornerpoint_dtype: ContextVar[npt.DTypeLike] = ContextVar(
    "_cornerpoint_dtype", default=np.float64
)


def get_dtype() -> npt.DTypeLike:
    """Floating point dtype that coordinate, depth and vertex arrays are built with."""
    return _cornerpoint_dtype.get()


def set_dtype(dtype: npt.DTypeLike) -> None:
    """
    Change the coordinate dtype for the current context.

    Vertex deduplication rounds to `Config.vertex_decimals` places, which float32
    cannot represent for coordinates in the tens of thousands.

    :param dtype: New floating point dtype, e.g. `np.float32`.
    """
    _cornerpoint_dtype.set(dtype)


@contextmanager
def with_precision(dtype: npt.DTypeLike):
    """
    Build arrays with `dtype` inside the `with` block only.

    ```python
    with with_precision(np.float32):
        geometry = load_geometry(text)
    ```
    """
    token = _cornerpoint_dtype.set(dtype)
    try:
        yield
    finally:
        _cornerpoint_dtype.reset(token)


def get_floating_point_info() -> np.finfo:
    """`np.finfo` of the current coordinate dtype."""
    return np.finfo(get_dtype())  # type: ignore

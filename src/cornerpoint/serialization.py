import typing

import attrs
import cattrs
import numpy as np
from typing_extensions import Self

from cornerpoint._precision import get_dtype
from cornerpoint.errors import DeserializationError, SerializationError


__all__ = ["Serializable", "dump", "load", "converter"]


converter = cattrs.Converter()


def _is_ndarray_type(typ: typing.Any) -> bool:
    """Check if a type is `np.ndarray` or a parametrized alias of it (e.g. `npt.NDArray[np.floating]`)."""
    return typ is np.ndarray or typing.get_origin(typ) is np.ndarray


def _get_scalar_type(typ: typing.Any) -> typing.Optional[type]:
    """
    Extract the scalar type from an ndarray alias.

    Examples:
        npt.NDArray[np.floating] -> np.floating
        npt.NDArray[np.integer] -> np.integer
        np.ndarray -> None
    """
    args = typing.get_args(typ)
    if len(args) < 2:
        return None
    dtype_args = typing.get_args(args[1])
    if not dtype_args or not isinstance(dtype_args[0], type):
        return None
    return dtype_args[0]


def unstructure_ndarray(value: np.ndarray) -> typing.List[typing.Any]:
    return np.asarray(value).tolist()


def structure_ndarray(value: typing.Any, typ: typing.Any) -> np.ndarray:
    scalar_type = _get_scalar_type(typ)
    if scalar_type is not None and issubclass(scalar_type, (np.integer, np.bool_)):
        return np.asarray(value, dtype=np.int64)
    if scalar_type is not None and issubclass(scalar_type, np.floating):
        return np.asarray(value, dtype=get_dtype())
    return np.asarray(value)


converter.register_unstructure_hook_func(_is_ndarray_type, unstructure_ndarray)
converter.register_structure_hook_func(_is_ndarray_type, structure_ndarray)


def _init_fields(cls: type) -> typing.Tuple["attrs.Attribute", ...]:
    return tuple(field for field in attrs.fields(cls) if field.init)


class Serializable:
    """
    Mixin giving `attrs` classes a plain-data form.

    By default every init field is converted through the module `converter`
    using its declared type, so numpy arrays become nested lists and nested
    `Serializable` values become nested dictionaries. Classes with a versioned
    or derived payload override `__dump__` and `__load__`.
    """

    def __dump__(self, recurse: bool = True) -> typing.Dict[str, typing.Any]:
        payload = {}
        for field in _init_fields(type(self)):
            value = getattr(self, field.name)
            if isinstance(value, Serializable) and not recurse:
                payload[field.name] = value
            else:
                payload[field.name] = converter.unstructure(
                    value, unstructure_as=field.type
                )
        return payload

    @classmethod
    def __load__(cls, data: typing.Mapping[str, typing.Any]) -> Self:
        kwargs = {
            field.name: converter.structure(data[field.name], field.type)
            for field in _init_fields(cls)
            if field.name in data
        }
        return cls(**kwargs)

    def dump(self, recurse: bool = True) -> typing.Dict[str, typing.Any]:
        """
        Convert to plain data.

        :param recurse: Whether nested `Serializable` values are converted too.
        :raises SerializationError: If any field cannot be converted.
        """
        try:
            return self.__dump__(recurse)
        except Exception as exc:
            raise SerializationError(
                f"Could not serialize {type(self).__name__}: {exc}"
            ) from exc

    @classmethod
    def load(cls, data: typing.Mapping[str, typing.Any]) -> Self:
        """
        Build an instance from plain data.

        :raises DeserializationError: If the data is malformed or fails validation.
        """
        try:
            return cls.__load__(data)
        except Exception as exc:
            raise DeserializationError(
                f"Could not deserialize {cls.__name__}: {exc}"
            ) from exc


converter.register_structure_hook(
    Serializable, lambda data, cls: cls.load(data)
)
converter.register_unstructure_hook(
    Serializable, lambda obj: obj.dump(recurse=True)
)

SerializableT = typing.TypeVar("SerializableT", bound=Serializable)


def dump(obj: Serializable, recurse: bool = True) -> typing.Dict[str, typing.Any]:
    """Plain-data form of `obj`."""
    return obj.dump(recurse)


def load(
    cls: typing.Type[SerializableT], data: typing.Mapping[str, typing.Any]
) -> SerializableT:
    """Instance of `cls` built from plain data."""
    return cls.load(data)

"""
File stores for serialized grids.

A store maps a file to a list of `Serializable` payloads. Backends register
themselves under the file extensions they handle, so `GridGeometry.to_file("grid.yaml")`
and `GridGeometry.from_file("grid.json")` pick the right one.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
import functools
import logging
from os import PathLike
from pathlib import Path
import typing

import orjson
from typing_extensions import ParamSpec, Self
import yaml

from cornerpoint.errors import StorageError, ValidationError
from cornerpoint.serialization import Serializable, SerializableT


__all__ = [
    "new_store",
    "storage_backend",
    "DataStore",
    "FileStore",
    "JSONStore",
    "YAMLStore",
    "StoreSerializable",
]

logger = logging.getLogger(__name__)

Payload = typing.Dict[str, typing.Any]


class DataStore(typing.Generic[SerializableT], ABC):
    """Where serialized items are kept."""

    @abstractmethod
    def load(
        self, typ: typing.Type[SerializableT], **kwargs: typing.Any
    ) -> typing.List[SerializableT]:
        """Load all stored items as instances of `typ`."""
        ...

    @abstractmethod
    def dump(self, items: typing.Iterable[SerializableT], **kwargs: typing.Any) -> None:
        """Replace the stored items with `items`."""
        ...


StoreT = typing.TypeVar("StoreT", bound=DataStore)

_BACKENDS: typing.Dict[str, typing.Type[DataStore]] = {}


def storage_backend(
    *names: str,
) -> typing.Callable[[typing.Type[StoreT]], typing.Type[StoreT]]:
    """
    Register a store class under one or more backend names.

    Backend names double as file extensions (without the dot) for
    `StoreSerializable.from_file` and `to_file`.

    :param names: Names to register the class under.
    """

    def _register(store_cls: typing.Type[StoreT]) -> typing.Type[StoreT]:
        for name in names:
            _BACKENDS[name.lower()] = store_cls
        return store_cls

    return _register


P = ParamSpec("P")
R = typing.TypeVar("R")


def _storage_errors(func: typing.Callable[P, R]) -> typing.Callable[P, R]:
    """Re-raise any failure inside `func` as a `StorageError`."""

    @functools.wraps(func)
    def _wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        try:
            return func(*args, **kwargs)
        except StorageError:
            raise
        except Exception as exc:
            raise StorageError(f"{func.__qualname__} failed: {exc}") from exc

    return _wrapper


class FileStore(DataStore[SerializableT]):
    """
    Store backed by a single file.

    Subclasses set `extensions` (the first is the default) and implement
    `encode` / `decode` for their format. Items are written as a list of
    payloads. A file holding a single payload mapping is read as one item.
    """

    extensions: typing.ClassVar[typing.Tuple[str, ...]] = ()
    binary: typing.ClassVar[bool] = False

    def __init__(self, filepath: typing.Union[PathLike, str]) -> None:
        """
        :param filepath: Path to the store file. The default extension is
            appended when the path has none.
        :raises StorageError: If the path is empty or has a foreign extension.
        """
        self.filepath = self._check_path(filepath)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self.filepath)!r})"

    @classmethod
    def _check_path(cls, filepath: typing.Union[PathLike, str]) -> Path:
        text = str(filepath)
        if not text.strip():
            raise StorageError("Store path cannot be empty")
        if "\x00" in text:
            raise StorageError("Store path contains null characters")

        path = Path(filepath)
        if not path.suffix:
            path = path.with_suffix(cls.extensions[0])
            logger.debug(f"No extension given, using {path}")
        elif path.suffix.lower() not in cls.extensions:
            raise StorageError(
                f"{cls.__name__} expects a {' or '.join(cls.extensions)} file, "
                f"got {path.name!r}"
            )
        return path

    @abstractmethod
    def encode(self, payloads: typing.List[Payload], **kwargs: typing.Any) -> typing.Any:
        """Render payloads as file content (bytes if `binary`, else str)."""
        ...

    @abstractmethod
    def decode(self, content: typing.Any) -> typing.Any:
        """Parse file content back into plain data."""
        ...

    @_storage_errors
    def dump(
        self,
        items: typing.Iterable[SerializableT],
        **kwargs: typing.Any,
    ) -> None:
        """
        Write items to the file, replacing its content.

        :param items: Items to write.
        :param kwargs: Format options passed on to `encode`.
        """
        payloads = [item.dump(recurse=True) for item in items]
        content = self.encode(payloads, **kwargs)

        self.filepath.parent.mkdir(parents=True, exist_ok=True)
        if self.binary:
            self.filepath.write_bytes(content)
        else:
            self.filepath.write_text(content, encoding="utf-8")
        logger.debug(f"Stored {len(payloads)} item(s) in {self.filepath}")

    @_storage_errors
    def load(
        self,
        typ: typing.Type[SerializableT],
        **kwargs: typing.Any,
    ) -> typing.List[SerializableT]:
        """
        Read all items from the file.

        :param typ: Type to load each payload as.
        :return: Loaded items, in file order.
        """
        if self.binary:
            content = self.filepath.read_bytes()
        else:
            content = self.filepath.read_text(encoding="utf-8")

        raw = self.decode(content)
        if isinstance(raw, Mapping):
            raw = [raw]
        elif raw is None:
            raw = []
        elif not isinstance(raw, list):
            raise StorageError(
                f"{self.filepath} holds a {type(raw).__name__}, "
                f"expected a list of {typ.__name__} payloads"
            )

        items = [typ.load(payload) for payload in raw]
        logger.debug(f"Loaded {len(items)} {typ.__name__} item(s) from {self.filepath}")
        return items


@storage_backend("json")
class JSONStore(FileStore[SerializableT]):
    """JSON file store, written with `orjson`. The usual exchange format for geometry."""

    extensions = (".json",)
    binary = True

    def encode(
        self, payloads: typing.List[Payload], indent: bool = False, **kwargs: typing.Any
    ) -> bytes:
        option = orjson.OPT_SERIALIZE_NUMPY
        if indent:
            option |= orjson.OPT_INDENT_2
        return orjson.dumps(payloads, option=option)

    def decode(self, content: bytes) -> typing.Any:
        return orjson.loads(content)


@storage_backend("yaml", "yml")
class YAMLStore(FileStore[SerializableT]):
    """YAML file store. Readable by hand, best kept to small grids."""

    extensions = (".yaml", ".yml")

    def encode(self, payloads: typing.List[Payload], **kwargs: typing.Any) -> str:
        return yaml.safe_dump(payloads, sort_keys=False)

    def decode(self, content: str) -> typing.Any:
        return yaml.safe_load(content)


def new_store(backend: str, *args: typing.Any, **kwargs: typing.Any) -> DataStore:
    """
    Create a store for a registered backend.

    :param backend: Backend name, e.g. "json" or "yaml".
    :param args: Positional arguments for the store constructor (usually the file path).
    :param kwargs: Keyword arguments for the store constructor.
    :return: The new store.
    :raises ValidationError: If no backend is registered under `backend`.

    Example:
    ```python
    store = new_store("json", "grid.json")
    store.dump([geometry])
    geometry = store.load(GridGeometry)[0]
    ```
    """
    store_cls = _BACKENDS.get(backend.lower())
    if store_cls is None:
        raise ValidationError(
            f"Unknown storage backend {backend!r}. Available: {', '.join(sorted(_BACKENDS))}"
        )
    return store_cls(*args, **kwargs)


def _store_for(filepath: typing.Union[str, PathLike]) -> DataStore:
    path = Path(filepath)
    return new_store(path.suffix.lstrip("."), path)


class StoreSerializable(Serializable):
    """`Serializable` that can be written to and read from stores and files."""

    @classmethod
    def from_store(
        cls, store: DataStore[Self], **load_kwargs: typing.Any
    ) -> typing.Optional[Self]:
        """
        Load the first item of a store.

        :return: The first stored item, or None if the store is empty.
        """
        items = store.load(cls, **load_kwargs)
        return items[0] if items else None

    def to_store(self, store: DataStore[Self], **dump_kwargs: typing.Any) -> None:
        """Write this instance to a store as its only item."""
        store.dump([self], **dump_kwargs)

    @classmethod
    def from_file(
        cls, filepath: typing.Union[str, PathLike], **load_kwargs: typing.Any
    ) -> typing.Optional[Self]:
        """
        Load an instance from a file, choosing the backend by extension.

        :return: The first item in the file, or None if it holds none.
        """
        return cls.from_store(_store_for(filepath), **load_kwargs)

    def to_file(
        self, filepath: typing.Union[str, PathLike], **dump_kwargs: typing.Any
    ) -> None:
        """Write this instance to a file, choosing the backend by extension."""
        self.to_store(_store_for(filepath), **dump_kwargs)

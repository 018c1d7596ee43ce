import dataclasses
import json
import threading
from typing import Any, Dict, Optional, Protocol, Type, runtime_checkable

from .errors import SerializationError

"""
serializer.py: turns cookie values into bytes and back.

Two paths:
1) Coder override: a value with `to_bytes()` / `from_bytes(data)` owns its
   own byte format. We just call those.
2) Default: compact JSON (dicts, lists, str, int, float, bool, None) plus
   dataclass records. Dataclasses that were register()ed travel with a type
   tag and come back as the same class; unregistered ones go out as plain
   dicts and can be rebuilt by passing the class to deserialize().
   Only values that come back equal are accepted: dict keys must be str,
   tuples and sets are refused, and "__type__" is reserved for the tag.

Each Serializer owns its encoder/decoder pair and type registry. A lock makes
serialize/deserialize on one instance mutually exclusive, so a codec shared
between threads can't interleave them.
"""

TYPE_TAG = "__type__"
FIELDS_TAG = "__fields__"


@runtime_checkable
class Coder(Protocol):
    """Values that bring their own byte representation."""

    def to_bytes(self) -> bytes:
        ...

    def from_bytes(self, data: bytes) -> None:
        ...


def is_coder(value: Any) -> bool:
    """
    True for Coder *instances*. Classes don't count, and neither do ints
    (int.to_bytes/int.from_bytes match the protocol by accident).
    """
    if isinstance(value, (type, int)):
        return False
    return isinstance(value, Coder)


def _type_key(cls: type) -> str:
    return f"{cls.__module__}.{cls.__qualname__}"


def _field_names(cls: type) -> tuple:
    return tuple(f.name for f in dataclasses.fields(cls))


def _check_plain(value: Any) -> None:
    """
    Refuse values JSON would hand back in a different shape: dict keys that
    aren't str, tuples and sets (they'd come back as lists), and mappings
    that use the reserved TYPE_TAG key.
    """
    if isinstance(value, dict):
        for key, item in value.items():
            if not isinstance(key, str):
                raise SerializationError(
                    f"securecookie: dict keys must be str, got {type(key).__name__}"
                )
            if key == TYPE_TAG:
                raise SerializationError(f"securecookie: {TYPE_TAG!r} is a reserved key")
            _check_plain(item)
    elif isinstance(value, (tuple, set, frozenset)):
        raise SerializationError(
            f"securecookie: {type(value).__name__} does not round-trip, use a list"
        )
    elif isinstance(value, list):
        for item in value:
            _check_plain(item)
    elif dataclasses.is_dataclass(value) and not isinstance(value, type):
        for name in _field_names(type(value)):
            _check_plain(getattr(value, name))


class Serializer:
    """Default JSON transcoder with a per-instance dataclass registry."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._registry: Dict[str, type] = {}
        self._encoder = json.JSONEncoder(
            separators=(",", ":"),
            ensure_ascii=False,
            default=self._encode_record,
        )
        self._decoder = json.JSONDecoder(object_hook=self._decode_record)

    # -----------------------------
    # Registry
    # -----------------------------

    def register(self, value: Any) -> None:
        """
        Prime the serializer with a sample value (or a dataclass type).

        Dataclass types are remembered so they round-trip as themselves.
        Calling this again with the same type, or a structurally identical
        one, is fine. A *different* shape under the same name is an error.
        Sample instances are also pushed through serialize/deserialize so
        anything unencodable shows up now rather than on first use.
        """
        cls = value if isinstance(value, type) else type(value)
        if dataclasses.is_dataclass(cls):
            key = _type_key(cls)
            with self._lock:
                known = self._registry.get(key)
                if known is not None and _field_names(known) != _field_names(cls):
                    raise SerializationError(
                        f"securecookie: conflicting registration for type {key}"
                    )
                self._registry[key] = cls
        if not isinstance(value, type):
            self.deserialize(self.serialize(value))

    # -----------------------------
    # Encode / decode
    # -----------------------------

    def serialize(self, value: Any) -> bytes:
        """Encode `value` as compact UTF-8 JSON."""
        _check_plain(value)
        with self._lock:
            try:
                return self._encoder.encode(value).encode("utf-8")
            except (TypeError, ValueError) as exc:
                raise SerializationError(f"securecookie: cannot serialize value: {exc}") from exc

    def deserialize(self, data: bytes, into: Optional[Type[Any]] = None) -> Any:
        """
        Decode JSON bytes. If `into` is a dataclass type and the payload is a
        plain mapping, build an instance of it.
        """
        with self._lock:
            try:
                value = self._decoder.decode(data.decode("utf-8"))
            except (UnicodeDecodeError, ValueError) as exc:
                raise SerializationError(f"securecookie: cannot deserialize value: {exc}") from exc
        if into is not None and dataclasses.is_dataclass(into) and isinstance(value, dict):
            try:
                value = into(**value)
            except TypeError as exc:
                raise SerializationError(
                    f"securecookie: value does not fit {into.__qualname__}: {exc}"
                ) from exc
        return value

    # JSONEncoder.default hook: only called for things json can't do natively.
    def _encode_record(self, obj: Any) -> Any:
        if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
            fields = {name: getattr(obj, name) for name in _field_names(type(obj))}
            key = _type_key(type(obj))
            if key in self._registry:
                return {TYPE_TAG: key, FIELDS_TAG: fields}
            return fields
        raise TypeError(f"Object of type {type(obj).__name__} is not serializable")

    def _decode_record(self, obj: Dict[str, Any]) -> Any:
        if set(obj) != {TYPE_TAG, FIELDS_TAG}:
            return obj
        cls = self._registry.get(obj[TYPE_TAG])
        if cls is None:
            raise ValueError(f"type {obj[TYPE_TAG]!r} is not registered")
        try:
            return cls(**obj[FIELDS_TAG])
        except TypeError as exc:
            raise ValueError(f"bad fields for {obj[TYPE_TAG]!r}: {exc}") from exc

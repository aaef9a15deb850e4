"""Fixed-width wire encoding for integers and records.

Integers are big-endian and exactly `bits` wide. Records are encoded field by
field in declaration order; sequences carry a one-byte length prefix.
"""

import dataclasses
import typing
from typing import Any, Dict, Tuple, Type, TypeVar

from .errors import StructuralError

T = TypeVar("T")


def encode_int(value: int, bits: int) -> bytes:
    if not isinstance(value, int) or value < 0:
        raise StructuralError(f"cannot encode {value!r} as an unsigned integer")
    try:
        return value.to_bytes(bits // 8, "big")
    except OverflowError:
        raise StructuralError(f"value does not fit in {bits} bits") from None


def decode_int(data: bytes, bits: int) -> int:
    if len(data) != bits // 8:
        raise StructuralError(f"expected {bits // 8} bytes, got {len(data)}")
    return int.from_bytes(data, "big")


def _hints(cls) -> Dict[str, Any]:
    return typing.get_type_hints(cls)


def _encode_value(value: Any, bits: int) -> bytes:
    if dataclasses.is_dataclass(value):
        return b"".join(_encode_value(getattr(value, f.name), bits) for f in dataclasses.fields(value))
    if isinstance(value, (tuple, list)):
        if len(value) > 255:
            raise StructuralError("sequences longer than 255 items are not encodable")
        return bytes([len(value)]) + b"".join(_encode_value(v, bits) for v in value)
    return encode_int(value, bits)


def serialize(record: Any, elem_bits: int) -> bytes:
    """Encode a record with every integer `elem_bits` wide."""

    if not dataclasses.is_dataclass(record):
        raise StructuralError(f"{type(record).__name__} is not a record")
    return _encode_value(record, elem_bits)


def _decode_value(tp: Any, data: bytes, pos: int, bits: int) -> Tuple[Any, int]:
    if dataclasses.is_dataclass(tp):
        hints = _hints(tp)
        kwargs = {}
        for f in dataclasses.fields(tp):
            kwargs[f.name], pos = _decode_value(hints[f.name], data, pos, bits)
        return tp(**kwargs), pos
    if typing.get_origin(tp) is tuple:
        item_tp = typing.get_args(tp)[0]
        if pos >= len(data):
            raise StructuralError("truncated sequence length")
        count = data[pos]
        pos += 1
        items = []
        for _ in range(count):
            item, pos = _decode_value(item_tp, data, pos, bits)
            items.append(item)
        return tuple(items), pos
    width = bits // 8
    chunk = data[pos:pos + width]
    return decode_int(chunk, bits), pos + width


def deserialize(cls: Type[T], data: bytes, elem_bits: int) -> T:
    record, pos = _decode_value(cls, bytes(data), 0, elem_bits)
    if pos != len(data):
        raise StructuralError(f"{len(data) - pos} trailing bytes after {cls.__name__}")
    return record


## --- JSON-friendly form ---------------------------------------------------


def to_dict(record: Any) -> Dict[str, Any]:
    return dataclasses.asdict(record)


def _build(tp: Any, value: Any) -> Any:
    if dataclasses.is_dataclass(tp):
        if not isinstance(value, dict):
            raise StructuralError(f"{tp.__name__} must be an object")
        hints = _hints(tp)
        kwargs = {}
        for f in dataclasses.fields(tp):
            if f.name not in value:
                raise StructuralError(f"{tp.__name__} is missing field '{f.name}'")
            kwargs[f.name] = _build(hints[f.name], value[f.name])
        return tp(**kwargs)
    if typing.get_origin(tp) is tuple:
        if not isinstance(value, (list, tuple)):
            raise StructuralError("expected a list")
        item_tp = typing.get_args(tp)[0]
        return tuple(_build(item_tp, v) for v in value)
    if isinstance(value, bool) or not isinstance(value, int):
        raise StructuralError(f"expected an integer, got {value!r}")
    return value


def from_dict(cls: Type[T], data: Dict[str, Any]) -> T:
    return _build(cls, data)

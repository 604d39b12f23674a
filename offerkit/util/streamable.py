from __future__ import annotations

import dataclasses
import functools
import io
import traceback
from enum import Enum
from typing import Any, BinaryIO, Callable, ClassVar, Optional, TypeVar, Union, get_type_hints

from chia_rs.sized_bytes import bytes32
from typing_extensions import get_args, get_origin

from offerkit.util.byte_types import hexstr_to_bytes
from offerkit.util.hash import std_hash


class StreamableError(Exception):
    pass


class UnsupportedType(StreamableError):
    pass


class DefinitionError(StreamableError):
    def __init__(self, message: str, cls: type[object]):
        super().__init__(
            f"{message} Correct usage is:\n\n"
            f"@streamable\n@dataclass(frozen=True)\nclass {cls.__name__}(Streamable):\n    ..."
        )


class ParameterMissingError(StreamableError):
    def __init__(self, cls: type, missing: list[str]):
        plural = "s" if len(missing) != 1 else ""
        super().__init__(f"{len(missing)} field{plural} missing for {cls.__name__}: {', '.join(missing)}")


class InvalidTypeError(StreamableError):
    def __init__(self, expected: type, actual: type):
        super().__init__(f"Invalid type: Expected {expected.__name__}, Actual: {actual.__name__}")


class ConversionError(StreamableError):
    def __init__(self, value: object, to_type: type, exception: Exception):
        reason = "".join(traceback.format_exception_only(type(exception), value=exception)).strip()
        super().__init__(f"Failed to convert {value!r} from {type(value).__name__} to {to_type.__name__}: {reason}")


class TruncatedStreamError(StreamableError):
    def __init__(self, expected: int, actual: int):
        super().__init__(f"Unexpected end of stream: wanted {expected} bytes, got {actual}")


class TrailingBytesError(StreamableError):
    def __init__(self, count: int):
        super().__init__(f"{count} unexpected trailing bytes after object")


# BLS elements carry no length prefix on the wire
BLS_SIZES = {
    "PrivateKey": 32,
    "G1Element": 48,
    "G2Element": 96,
}

_T_Streamable = TypeVar("_T_Streamable", bound="Streamable")


@dataclasses.dataclass(frozen=True)
class TypeCodec:
    """
    How one field type goes to and from the wire, and how loose values (json items, plain ints,
    raw bytes) are turned into it.
    """

    parse: Callable[[BinaryIO], Any]
    stream: Callable[[Any, BinaryIO], None]
    from_json: Callable[[Any], Any]
    coerce: Callable[[Any], Any]


@dataclasses.dataclass(frozen=True)
class Field:
    name: str
    type: type[object]
    has_default: bool
    codec: TypeCodec


StreamableFields = tuple[Field, ...]


def read_exactly(f: BinaryIO, size: int) -> bytes:
    blob = f.read(size)
    if blob is None or len(blob) != size:
        raise TruncatedStreamError(size, 0 if blob is None else len(blob))
    return blob


def read_prefix_byte(f: BinaryIO, what: str) -> bool:
    flag = read_exactly(f, 1)[0]
    if flag > 1:
        raise ValueError(f"{what} byte must be 0 or 1")
    return flag == 1


def read_length(f: BinaryIO) -> int:
    return int.from_bytes(read_exactly(f, 4), "big")


def write_length(f: BinaryIO, length: int) -> None:
    f.write(length.to_bytes(4, "big"))


def converting(f_type: type[Any], convert: Callable[[Any], Any]) -> Callable[[Any], Any]:
    def wrapped(item: Any) -> Any:
        if isinstance(item, f_type):
            return item
        try:
            return convert(item)
        except StreamableError:
            raise
        except Exception as e:
            raise ConversionError(item, f_type, e) from e

    return wrapped


def bytes_from_json(item: Any) -> bytes:
    if isinstance(item, bytes):
        return item
    if not isinstance(item, str):
        raise InvalidTypeError(str, type(item))
    return hexstr_to_bytes(item)


def optional_codec(inner: TypeCodec) -> TypeCodec:
    def parse(f: BinaryIO) -> Any:
        return inner.parse(f) if read_prefix_byte(f, "Optional") else None

    def stream(item: Any, f: BinaryIO) -> None:
        if item is None:
            f.write(b"\x00")
        else:
            f.write(b"\x01")
            inner.stream(item, f)

    return TypeCodec(
        parse=parse,
        stream=stream,
        from_json=lambda item: None if item is None else inner.from_json(item),
        coerce=lambda item: None if item is None else inner.coerce(item),
    )


def list_codec(inner: TypeCodec) -> TypeCodec:
    def parse(f: BinaryIO) -> list[Any]:
        return [inner.parse(f) for _ in range(read_length(f))]

    def stream(items: Any, f: BinaryIO) -> None:
        write_length(f, len(items))
        for item in items:
            inner.stream(item, f)

    def each(convert: Callable[[Any], Any]) -> Callable[[Any], list[Any]]:
        def convert_items(items: Any) -> list[Any]:
            if not isinstance(items, (list, tuple)):
                raise InvalidTypeError(list, type(items))
            return [convert(item) for item in items]

        return convert_items

    return TypeCodec(parse=parse, stream=stream, from_json=each(inner.from_json), coerce=each(inner.coerce))


def parse_bool(f: BinaryIO) -> bool:
    return read_prefix_byte(f, "Bool")


def stream_bool(item: Any, f: BinaryIO) -> None:
    f.write(b"\x01" if item else b"\x00")


def parse_bytes(f: BinaryIO) -> bytes:
    return read_exactly(f, read_length(f))


def stream_bytes(item: Any, f: BinaryIO) -> None:
    write_length(f, len(item))
    f.write(item)


def stream_as_bytes(item: Any, f: BinaryIO) -> None:
    f.write(bytes(item))


def stream_streamable(item: Any, f: BinaryIO) -> None:
    item.stream(f)


def fixed_width(f_type: type[Any]) -> Optional[int]:
    if issubclass(f_type, int):
        return len(bytes(f_type(0)))
    if issubclass(f_type, bytes):
        size: Optional[int] = getattr(f_type, "_size", None)
        return size
    return None


@functools.lru_cache(maxsize=None)
def codec_for_type(f_type: Any) -> TypeCodec:
    origin = get_origin(f_type)
    if origin is Union:
        args = get_args(f_type)
        if len(args) != 2 or args[1] is not type(None):
            raise UnsupportedType(f"only Optional[T] unions are streamable, got {f_type}")
        return optional_codec(codec_for_type(args[0]))
    if origin is list:
        return list_codec(codec_for_type(get_args(f_type)[0]))
    if f_type is bool:
        return TypeCodec(parse_bool, stream_bool, converting(bool, bool), converting(bool, bool))
    if f_type is bytes:
        return TypeCodec(parse_bytes, stream_bytes, bytes_from_json, converting(bytes, bytes))

    name = f_type.__name__
    if name in BLS_SIZES:
        size = BLS_SIZES[name]
        from_bytes = converting(f_type, lambda item: f_type.from_bytes(bytes_from_json(item)))
        return TypeCodec(
            parse=lambda f: f_type.from_bytes(read_exactly(f, size)),
            stream=stream_as_bytes,
            from_json=from_bytes,
            coerce=from_bytes,
        )
    if not hasattr(f_type, "parse"):
        raise UnsupportedType(f"Type {f_type} does not have parse")
    if not hasattr(f_type, "stream"):
        raise UnsupportedType(f"can't stream {f_type}")

    # sized ints and sized bytes have a fixed width, everything else parses itself
    width = fixed_width(f_type)

    def parse_fixed(f: BinaryIO) -> Any:
        return f_type.from_bytes(read_exactly(f, width))

    parse = f_type.parse if width is None else parse_fixed

    if hasattr(f_type, "from_json_dict"):
        from_json = converting(f_type, f_type.from_json_dict)
    elif issubclass(f_type, bytes):
        from_json = converting(f_type, lambda item: f_type(bytes_from_json(item)))
    else:
        from_json = converting(f_type, f_type)
    if issubclass(f_type, bytes) or not hasattr(f_type, "from_bytes"):
        coerce = converting(f_type, f_type)
    else:

        def from_bytes_or_value(item: Any) -> Any:
            return f_type.from_bytes(bytes(item)) if isinstance(item, (bytes, bytearray)) else f_type(item)

        coerce = converting(f_type, from_bytes_or_value)
    return TypeCodec(
        parse=parse,
        stream=stream_streamable,
        from_json=from_json,
        coerce=coerce,
    )


def create_fields(cls: type[object]) -> StreamableFields:
    hints = get_type_hints(cls)
    return tuple(
        Field(
            name=field.name,
            type=hints[field.name],
            has_default=field.default is not dataclasses.MISSING or field.default_factory is not dataclasses.MISSING,
            codec=codec_for_type(hints[field.name]),
        )
        for field in dataclasses.fields(cls)  # type: ignore[arg-type]
    )


def recurse_jsonify(d: Any) -> Any:
    """
    Makes bytes objects and BLS elements into strings with 0x, and dataclasses into dicts.
    """
    if dataclasses.is_dataclass(d) and not isinstance(d, type):
        return {field.name: recurse_jsonify(getattr(d, field.name)) for field in dataclasses.fields(d)}
    if isinstance(d, (list, tuple)):
        return [recurse_jsonify(item) for item in d]
    if isinstance(d, dict):
        return {name: recurse_jsonify(val) for name, val in d.items()}
    if isinstance(d, bytes) or type(d).__name__ in BLS_SIZES:
        return f"0x{bytes(d).hex()}"
    if isinstance(d, Enum):
        return d.name
    if isinstance(d, bool) or d is None or type(d) is str:
        return d
    if isinstance(d, int):
        return int(d)
    if hasattr(d, "to_json_dict"):
        return d.to_json_dict()
    raise UnsupportedType(f"failed to jsonify {d} (type: {type(d)})")


def streamable(cls: type[_T_Streamable]) -> type[_T_Streamable]:
    """
    Checks that the class is a frozen dataclass deriving from `Streamable` and builds the codecs
    for its fields. Usage:

    @streamable
    @dataclass(frozen=True)
    class Example(Streamable):
        ...
    """
    if not dataclasses.is_dataclass(cls):
        raise DefinitionError("@dataclass(frozen=True) required first.", cls)
    if not getattr(cls, "__dataclass_params__").frozen:
        raise DefinitionError("dataclass needs to be frozen.", cls)
    if not issubclass(cls, Streamable):
        raise DefinitionError("Streamable inheritance required.", cls)

    cls._streamable_fields = create_fields(cls)
    return cls


class Streamable:
    """
    A frozen dataclass with a compact binary form and a json form.

    Fields are written in declaration order:
    * sized ints and sized bytes big endian, with no prefix
    * BLS keys and signatures in their fixed size compressed form
    * clvm programs in their self-delimiting serialization
    * bool as a single 0x00 or 0x01 byte
    * bytes as a 4 byte length followed by the bytes
    * list[T] as a 4 byte item count followed by each item
    * Optional[T] as a 0x00 or 0x01 byte followed by the item when present
    * nested streamables inline

    Every field is checked and coerced to its declared type at construction. `get_hash()` is the
    sha256 of the binary form.
    """

    _streamable_fields: ClassVar[StreamableFields]

    def __post_init__(self) -> None:
        data = self.__dict__
        for field in self._streamable_fields:
            object.__setattr__(self, field.name, field.codec.coerce(data[field.name]))

    @classmethod
    def parse(cls: type[_T_Streamable], f: BinaryIO) -> _T_Streamable:
        # parsed values already have their field types, so skip __post_init__
        obj: _T_Streamable = object.__new__(cls)
        for field in cls._streamable_fields:
            object.__setattr__(obj, field.name, field.codec.parse(f))
        return obj

    def stream(self, f: BinaryIO) -> None:
        for field in self._streamable_fields:
            field.codec.stream(getattr(self, field.name), f)

    def get_hash(self) -> bytes32:
        return std_hash(bytes(self), skip_bytes_conversion=True)

    @classmethod
    def from_bytes(cls: type[_T_Streamable], blob: bytes) -> _T_Streamable:
        f = io.BytesIO(blob)
        parsed = cls.parse(f)
        leftover = f.read()
        if leftover != b"":
            raise TrailingBytesError(len(leftover))
        return parsed

    def __bytes__(self) -> bytes:
        f = io.BytesIO()
        self.stream(f)
        return f.getvalue()

    def to_json_dict(self) -> dict[str, Any]:
        ret: dict[str, Any] = recurse_jsonify(self)
        return ret

    @classmethod
    def from_json_dict(cls: type[_T_Streamable], json_dict: Any) -> _T_Streamable:
        if isinstance(json_dict, cls):
            return json_dict
        if not isinstance(json_dict, dict):
            raise InvalidTypeError(dict, type(json_dict))
        missing = [
            field.name for field in cls._streamable_fields if field.name not in json_dict and not field.has_default
        ]
        if missing:
            raise ParameterMissingError(cls, missing)
        return cls(
            **{
                field.name: field.codec.from_json(json_dict[field.name])
                for field in cls._streamable_fields
                if field.name in json_dict
            }
        )

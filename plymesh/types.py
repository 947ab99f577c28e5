"""Scalar data types and file formats used by PLY polygon files."""

from __future__ import annotations

import enum
import math
import re
import struct
import sys
from typing import BinaryIO, Union

Number = Union[int, float]

_INT_RE = re.compile(r"\s*([+-]?\d+)")
_FLOAT_RE = re.compile(
    r"\s*([+-]?(?:\d+\.?\d*(?:[eE][+-]?\d+)?|\.\d+(?:[eE][+-]?\d+)?"
    r"|inf(?:inity)?|nan))",
    re.IGNORECASE,
)

_ALIASES = {"float32": "float", "int32": "int", "uint8": "uchar"}


class PlyError(Exception):
    """Raised when PLY data cannot be read, written or interpreted."""


class FileFormat(enum.Enum):
    """Encoding of the element data that follows a PLY header."""

    ASCII = 1
    BINARY_BE = 2
    BINARY_LE = 3

    @property
    def keyword(self) -> str:
        """The word naming this format on the header's ``format`` line."""
        return _FORMAT_KEYWORDS[self]

    @property
    def is_binary(self) -> bool:
        return self is not FileFormat.ASCII

    @property
    def byte_order(self) -> str:
        """The struct byte-order prefix for a binary format."""
        if self is FileFormat.BINARY_BE:
            return ">"
        if self is FileFormat.BINARY_LE:
            return "<"
        raise PlyError(f"format {self.keyword} has no byte order")

    @classmethod
    def from_name(cls, name: str) -> "FileFormat":
        """Return the format named by a header ``format`` keyword."""
        for fmt, keyword in _FORMAT_KEYWORDS.items():
            if keyword == name:
                return fmt
        raise PlyError(f"unknown file format '{name}'")

    @classmethod
    def native(cls) -> "FileFormat":
        """Return the binary format matching this machine's byte order."""
        return cls.BINARY_LE if sys.byteorder == "little" else cls.BINARY_BE


_FORMAT_KEYWORDS = {
    FileFormat.ASCII: "ascii",
    FileFormat.BINARY_BE: "binary_big_endian",
    FileFormat.BINARY_LE: "binary_little_endian",
}


class PlyType(enum.Enum):
    """A scalar type that a PLY property may hold."""

    CHAR = 1
    SHORT = 2
    INT = 3
    UCHAR = 4
    USHORT = 5
    UINT = 6
    FLOAT = 7
    DOUBLE = 8

    @property
    def keyword(self) -> str:
        """The name of the type as written in a PLY header."""
        return _TYPE_INFO[self][0]

    @property
    def size(self) -> int:
        """Size of the type in bytes in binary files."""
        return _TYPE_INFO[self][1]

    @property
    def struct_code(self) -> str:
        return _TYPE_INFO[self][2]

    @property
    def is_float(self) -> bool:
        return self in (PlyType.FLOAT, PlyType.DOUBLE)

    @property
    def is_unsigned(self) -> bool:
        return self in (PlyType.UCHAR, PlyType.USHORT, PlyType.UINT)

    @classmethod
    def from_name(cls, name: str) -> "PlyType":
        """Return the type named in a header, accepting float32, int32 and uint8."""
        canonical = _ALIASES.get(name, name)
        for ply_type, info in _TYPE_INFO.items():
            if info[0] == canonical:
                return ply_type
        raise PlyError(f"unknown property type '{name}'")

    def parse_ascii(self, word: str) -> Number:
        """Read a value of this type from a word of an ASCII file.

        Integer types give a 32-bit signed int (a 32-bit unsigned int for
        ``uint``); floating types give a float. Text that does not start
        with a number reads as zero, and trailing text is ignored.
        """
        if self.is_float:
            match = _FLOAT_RE.match(word)
            return float(match.group(1)) if match else 0.0
        match = _INT_RE.match(word)
        value = int(match.group(1)) if match else 0
        if self is PlyType.UINT:
            return value % (1 << 32)
        return _wrap(value, 32, signed=True)

    def convert(self, value: Number) -> Number:
        """Cast a value to what this type can hold, as a C assignment would."""
        if self is PlyType.DOUBLE:
            return float(value)
        if self is PlyType.FLOAT:
            return _to_float32(float(value))
        if isinstance(value, float):
            if math.isnan(value) or math.isinf(value):
                raise PlyError(f"cannot store {value} as {self.keyword}")
            value = int(value)
        return _wrap(int(value), self.size * 8, signed=not self.is_unsigned)

    def format_ascii(self, value: Number) -> str:
        """Write a value of this type as a word of an ASCII file."""
        converted = self.convert(value)
        if self.is_float:
            return "%g" % converted
        return "%d" % converted

    def pack(self, value: Number, file_format: FileFormat) -> bytes:
        """Encode a value of this type for a binary file."""
        if not file_format.is_binary:
            raise PlyError("cannot pack binary data for an ASCII file")
        return struct.pack(file_format.byte_order + self.struct_code,
                           self.convert(value))

    def unpack(self, data: bytes, file_format: FileFormat) -> Number:
        """Decode a value of this type from exactly ``size`` bytes."""
        if not file_format.is_binary:
            raise PlyError("cannot unpack binary data from an ASCII file")
        if len(data) != self.size:
            raise PlyError(
                f"{self.keyword} needs {self.size} bytes, got {len(data)}")
        return struct.unpack(file_format.byte_order + self.struct_code, data)[0]

    def read(self, stream: BinaryIO, file_format: FileFormat) -> Number:
        """Read one value of this type from a binary stream."""
        data = stream.read(self.size)
        if len(data) != self.size:
            raise PlyError("unexpected end of binary data")
        return self.unpack(data, file_format)


_TYPE_INFO = {
    PlyType.CHAR: ("char", 1, "b"),
    PlyType.SHORT: ("short", 2, "h"),
    PlyType.INT: ("int", 4, "i"),
    PlyType.UCHAR: ("uchar", 1, "B"),
    PlyType.USHORT: ("ushort", 2, "H"),
    PlyType.UINT: ("uint", 4, "I"),
    PlyType.FLOAT: ("float", 4, "f"),
    PlyType.DOUBLE: ("double", 8, "d"),
}


def _wrap(value: int, bits: int, signed: bool) -> int:
    value %= 1 << bits
    if signed and value >= 1 << (bits - 1):
        value -= 1 << bits
    return value


def _to_float32(value: float) -> float:
    try:
        return struct.unpack("f", struct.pack("f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)
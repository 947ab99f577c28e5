"""Writing PLY polygon files: describe the header, then put elements."""

from __future__ import annotations

import io
import os
from dataclasses import replace
from typing import IO, Iterable, List, Mapping, Optional, Sequence, Union

from plymesh.header import PlyElement, PlyHeader, PlyProperty, with_ply_extension
from plymesh.reader import OtherElement
from plymesh.types import FileFormat, Number, PlyError

Value = Union[Number, Sequence[Number]]
FormatSpec = Union[FileFormat, str]

_NATIVE_NAMES = ("native", "binary_native")


def _resolve_format(file_format: FormatSpec) -> FileFormat:
    if isinstance(file_format, FileFormat):
        return file_format
    if isinstance(file_format, str):
        if file_format in _NATIVE_NAMES:
            return FileFormat.native()
        return FileFormat.from_name(file_format)
    raise PlyError(f"bad file format {file_format!r}")


class PlyWriter:
    """Writes a PLY file: elements are described, the header is completed,
    and then element instances are put in header order.

    ``file_format`` is a :class:`FileFormat`, a header format keyword, or
    ``"native"`` for the binary format matching this machine.
    """

    def __init__(self, stream: IO, element_names: Iterable[str],
                 file_format: FormatSpec = FileFormat.ASCII) -> None:
        fmt = _resolve_format(file_format)
        self._stream = stream
        self._text = isinstance(stream, io.TextIOBase)
        if fmt.is_binary and self._text:
            raise PlyError("binary PLY data needs a binary stream")
        self.header = PlyHeader(
            file_format=fmt,
            elements=[PlyElement(name=name) for name in element_names])
        self.other_elements: List[OtherElement] = []
        self._current: Optional[PlyElement] = None
        self._header_written = False

    @classmethod
    def open(cls, filename: Union[str, os.PathLike], element_names: Iterable[str],
             file_format: FormatSpec = FileFormat.ASCII) -> "PlyWriter":
        """Open a file for writing, adding ``.ply`` to its name if missing."""
        stream = open(with_ply_extension(filename), "wb")
        try:
            return cls(stream, element_names, file_format)
        except BaseException:
            stream.close()
            raise

    def close(self) -> None:
        self._stream.close()

    def __enter__(self) -> "PlyWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def describe_element(self, name: str, count: int,
                         properties: Iterable[PlyProperty]) -> None:
        """Set how many of an element will be written and all its properties."""
        elem = self._require(name)
        elem.count = count
        elem.properties = [replace(prop) for prop in properties]

    def describe_property(self, element_name: str, prop: PlyProperty) -> None:
        """Add one property to an element."""
        self._require(element_name).properties.append(replace(prop))

    def describe_other_elements(self, others: Optional[Iterable[OtherElement]]) -> None:
        """Add elements read whole from another file, to be written unchanged."""
        if others is None:
            return
        others = list(others)
        for other in others:
            elem = self.header.find_element(other.name)
            if elem is None:
                elem = PlyElement(name=other.name)
                self.header.elements.append(elem)
            elem.count = other.count
            elem.properties.extend(replace(prop) for prop in other.properties)
        self.other_elements = others

    def element_count(self, name: str, count: int) -> None:
        """State how many of an element will be written."""
        self._require(name).count = count

    def put_comment(self, comment: str) -> None:
        self._check_header_open()
        self.header.comments.append(comment)

    def put_obj_info(self, info: str) -> None:
        self._check_header_open()
        self.header.obj_info.append(info)

    def header_complete(self) -> None:
        """Write the header; elements may be put after this."""
        self._check_header_open()
        self._emit(self.header.to_text())
        self._header_written = True

    def put_element_setup(self, name: str) -> None:
        """Choose which element the following calls to put_element write."""
        self._current = self._require(name)

    def put_element(self, values: Mapping[str, Value]) -> None:
        """Write one instance of the current element from a name-to-value map."""
        if not self._header_written:
            raise PlyError("header must be completed before elements are written")
        elem = self._current
        if elem is None:
            raise PlyError("no element chosen with put_element_setup")
        fmt = self.header.file_format
        items = []
        for prop in elem.properties:
            if prop.name not in values:
                raise PlyError(
                    f"no value for property '{prop.name}' of element '{elem.name}'")
            value = values[prop.name]
            if prop.count_type is None:
                items.append((prop.type, value))
                continue
            try:
                entries = list(value)
            except TypeError:
                raise PlyError(f"list property '{prop.name}' needs a sequence") from None
            items.append((prop.count_type, len(entries)))
            items.extend((prop.type, entry) for entry in entries)

        if fmt.is_binary:
            self._emit(b"".join(ptype.pack(v, fmt) for ptype, v in items))
        else:
            words = "".join(ptype.format_ascii(v) + " " for ptype, v in items)
            self._emit(words + "\n")

    def put_other_elements(self) -> None:
        """Write every instance of the elements given to describe_other_elements."""
        for other in self.other_elements:
            self.put_element_setup(other.name)
            for instance in other.instances:
                self.put_element(instance)

    def _require(self, name: str) -> PlyElement:
        elem = self.header.find_element(name)
        if elem is None:
            raise PlyError(f"can't find element '{name}'")
        return elem

    def _check_header_open(self) -> None:
        if self._header_written:
            raise PlyError("header has already been written")

    def _emit(self, data: Union[str, bytes]) -> None:
        if self._text:
            self._stream.write(data if isinstance(data, str) else data.decode("latin-1"))
        else:
            self._stream.write(data.encode("latin-1") if isinstance(data, str) else data)
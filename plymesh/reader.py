"""Reading the elements of a PLY polygon file."""

from __future__ import annotations

import io
from dataclasses import dataclass, field, replace
from typing import IO, Callable, Dict, Iterable, Iterator, List, Optional, Union
import os

from plymesh.header import PlyElement, PlyProperty, parse_header, split_words, with_ply_extension
from plymesh.types import Number, PlyError, PlyType

Value = Union[Number, List[Number]]
Row = Dict[str, Value]


@dataclass
class OtherElement:
    """Every instance of an element read whole, to be carried along unchanged."""

    name: str
    properties: List[PlyProperty] = field(default_factory=list)
    instances: List[Row] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.instances)


class PlyReader:
    """Reads a PLY file's header on creation and its elements on request.

    Elements come from the stream in the order the header lists them; each
    read must name the element that is next in the file.
    """

    def __init__(self, stream: IO) -> None:
        self._stream = stream
        self.header = parse_header(stream)
        if self.header.file_format.is_binary and isinstance(stream, io.TextIOBase):
            raise PlyError("binary PLY data needs a binary stream")
        self.other_elements: List[OtherElement] = []
        self._index = 0
        self._done = 0

    @classmethod
    def open(cls, filename: Union[str, os.PathLike]) -> "PlyReader":
        """Open a file for reading, adding ``.ply`` to its name if missing."""
        stream = open(with_ply_extension(filename), "rb")
        try:
            return cls(stream)
        except BaseException:
            stream.close()
            raise

    def close(self) -> None:
        self._stream.close()

    def __enter__(self) -> "PlyReader":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def element_names(self) -> List[str]:
        return self.header.element_names()

    def get_element_description(self, name: str) -> PlyElement:
        """Return a copy of the named element's count and properties."""
        elem = self._require(name)
        return PlyElement(name=elem.name, count=elem.count,
                          properties=[replace(prop) for prop in elem.properties])

    def read_element(self, name: str, properties: Optional[Iterable[str]] = None) -> Row:
        """Read the next instance of the named element.

        Returns a mapping from property name to value, list properties giving
        lists. With ``properties`` given, only those properties are returned.
        """
        elem = self._seek(name)
        wanted = self._select(elem, properties)
        if self._done >= elem.count:
            raise PlyError(f"all {elem.count} of element '{name}' already read")
        if self.header.file_format.is_binary:
            values = self._read_binary(elem)
        else:
            values = self._read_ascii(elem)
        self._done += 1
        if wanted is None:
            return values
        return {key: value for key, value in values.items() if key in wanted}

    def iter_elements(self, name: str,
                      properties: Optional[Iterable[str]] = None) -> Iterator[Row]:
        """Yield every remaining instance of the named element."""
        elem = self._seek(name)
        selected = None if properties is None else list(properties)
        self._select(elem, selected)
        index = self._index
        while self._index == index and self._done < elem.count:
            yield self.read_element(name, selected)

    def get_other_element(self, name: str) -> OtherElement:
        """Read all remaining instances of an element with all its properties."""
        elem = self._require(name)
        other = OtherElement(name=elem.name,
                             properties=[replace(prop) for prop in elem.properties],
                             instances=list(self.iter_elements(name)))
        self.other_elements.append(other)
        return other

    def _require(self, name: str) -> PlyElement:
        elem = self.header.find_element(name)
        if elem is None:
            raise PlyError(f"can't find element '{name}'")
        return elem

    def _seek(self, name: str) -> PlyElement:
        self._require(name)
        elements = self.header.elements
        while (self._index < len(elements)
               and elements[self._index].name != name
               and self._done >= elements[self._index].count):
            self._index += 1
            self._done = 0
        if self._index >= len(elements):
            raise PlyError(f"no more elements to read; '{name}' requested")
        current = elements[self._index]
        if current.name != name:
            raise PlyError(f"element '{current.name}' comes next, not '{name}'")
        return current

    @staticmethod
    def _select(elem: PlyElement, properties: Optional[Iterable[str]]) -> Optional[set]:
        if properties is None:
            return None
        wanted = set(properties)
        missing = [prop for prop in wanted if elem.find_property(prop) is None]
        if missing:
            raise PlyError(
                f"can't find property '{sorted(missing)[0]}' in element '{elem.name}'")
        return wanted

    def _read_ascii(self, elem: PlyElement) -> Row:
        line = self._stream.readline()
        if not line:
            raise PlyError("unexpected end of file")
        if isinstance(line, bytes):
            line = line.decode("latin-1")
        words = iter(split_words(line))

        def take(ptype: PlyType) -> Number:
            word = next(words, None)
            if word is None:
                raise PlyError(f"too few values on a line of element '{elem.name}'")
            return ptype.convert(ptype.parse_ascii(word))

        return self._collect(elem, take)

    def _read_binary(self, elem: PlyElement) -> Row:
        file_format = self.header.file_format
        return self._collect(elem, lambda ptype: ptype.read(self._stream, file_format))

    @staticmethod
    def _collect(elem: PlyElement, take: Callable[[PlyType], Number]) -> Row:
        values: Row = {}
        for prop in elem.properties:
            if prop.count_type is None:
                values[prop.name] = take(prop.type)
                continue
            raw_count = take(prop.count_type)
            try:
                count = int(raw_count)
            except (ValueError, OverflowError):
                raise PlyError(f"bad list count {raw_count} for '{prop.name}'") from None
            if count < 0:
                raise PlyError(f"negative list count {count} for '{prop.name}'")
            values[prop.name] = [take(prop.type) for _ in range(count)]
        return values
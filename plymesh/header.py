"""The header of a PLY file: its elements, properties, comments and format."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import IO, List, Optional, Union

from plymesh.types import FileFormat, PlyError, PlyType


@dataclass
class PlyProperty:
    """A named property of an element: a scalar, or a list with a count type."""

    name: str
    type: PlyType
    count_type: Optional[PlyType] = None

    @property
    def is_list(self) -> bool:
        return self.count_type is not None


@dataclass
class PlyElement:
    """A kind of element, how many of it the file holds, and its properties."""

    name: str
    count: int = 0
    properties: List[PlyProperty] = field(default_factory=list)

    def find_property(self, name: str) -> Optional[PlyProperty]:
        """Return the property with this name, or None if there is none."""
        return next((prop for prop in self.properties if prop.name == name), None)

    def property_names(self) -> List[str]:
        return [prop.name for prop in self.properties]


@dataclass
class PlyHeader:
    """Everything a PLY header describes."""

    file_format: FileFormat = FileFormat.ASCII
    version: float = 1.0
    elements: List[PlyElement] = field(default_factory=list)
    comments: List[str] = field(default_factory=list)
    obj_info: List[str] = field(default_factory=list)

    def find_element(self, name: str) -> Optional[PlyElement]:
        """Return the element with this name, or None if there is none."""
        return next((elem for elem in self.elements if elem.name == name), None)

    def element_names(self) -> List[str]:
        return [elem.name for elem in self.elements]

    def to_text(self) -> str:
        """Render the header as it is written at the start of a file."""
        lines = ["ply", f"format {self.file_format.keyword} {float(self.version)}"]
        lines.extend(f"comment {comment}" for comment in self.comments)
        lines.extend(f"obj_info {info}" for info in self.obj_info)
        for elem in self.elements:
            lines.append(f"element {elem.name} {elem.count}")
            lines.extend(_property_line(prop) for prop in elem.properties)
        lines.append("end_header")
        return "\n".join(lines) + "\n"


def _property_line(prop: PlyProperty) -> str:
    if prop.count_type is not None:
        return (f"property list {prop.count_type.keyword} "
                f"{prop.type.keyword} {prop.name}")
    return f"property {prop.type.keyword} {prop.name}"


def _clean_line(line: str) -> str:
    """Cut a line at its first newline and turn tabs into spaces."""
    return line.split("\n", 1)[0].replace("\t", " ")


def split_words(line: str) -> List[str]:
    """Break a header or ASCII data line into words.

    Only spaces and tabs separate words; the line ends at its first newline.
    """
    return [word for word in _clean_line(line).split(" ") if word]


def _parse_property(words: List[str]) -> PlyProperty:
    if words[1:2] == ["list"]:
        if len(words) < 5:
            raise PlyError("list property line needs count type, item type and name")
        return PlyProperty(name=words[4],
                           type=PlyType.from_name(words[3]),
                           count_type=PlyType.from_name(words[2]))
    if len(words) < 3:
        raise PlyError("property line needs a type and a name")
    return PlyProperty(name=words[2], type=PlyType.from_name(words[1]))


def parse_header(stream: IO) -> PlyHeader:
    """Read a PLY header from a stream, leaving it at the first data byte.

    Reading stops at ``end_header`` or at the end of the stream. Lines with
    unknown keywords are ignored.
    """
    header = PlyHeader()
    format_seen = False
    first = True

    while True:
        raw = stream.readline()
        if not raw:
            if first:
                raise PlyError("empty stream: no PLY header")
            break
        text = raw.decode("latin-1") if isinstance(raw, bytes) else raw
        words = split_words(text)

        if first:
            if not words or words[0] != "ply":
                raise PlyError("not a PLY file: first line is not 'ply'")
            first = False
            continue
        if not words:
            continue

        keyword = words[0]
        if keyword == "format":
            if len(words) != 3:
                raise PlyError("format line must have exactly three words")
            header.file_format = FileFormat.from_name(words[1])
            header.version = float(PlyType.DOUBLE.parse_ascii(words[2]))
            format_seen = True
        elif keyword == "element":
            if len(words) < 3:
                raise PlyError("element line needs a name and a count")
            header.elements.append(
                PlyElement(name=words[1], count=int(PlyType.INT.parse_ascii(words[2]))))
        elif keyword == "property":
            if not header.elements:
                raise PlyError("property line before any element")
            header.elements[-1].properties.append(_parse_property(words))
        elif keyword == "comment":
            header.comments.append(_clean_line(text)[7:].lstrip(" \t"))
        elif keyword == "obj_info":
            header.obj_info.append(_clean_line(text)[8:].lstrip(" \t"))
        elif keyword == "end_header":
            break

    if not format_seen:
        raise PlyError("PLY header has no format line")
    return header


def with_ply_extension(filename: Union[str, os.PathLike]) -> str:
    """Return the file name with ``.ply`` appended unless it already ends so."""
    name = os.fspath(filename)
    return name if name.endswith(".ply") else name + ".ply"
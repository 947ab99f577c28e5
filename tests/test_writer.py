import io

import pytest

from plymesh.header import PlyProperty
from plymesh.reader import PlyReader
from plymesh.types import FileFormat, PlyError, PlyType
from plymesh.writer import PlyWriter


def _xyz():
    return [PlyProperty("x", PlyType.FLOAT), PlyProperty("y", PlyType.FLOAT),
            PlyProperty("z", PlyType.FLOAT)]


def _face_props():
    return [PlyProperty("vertex_indices", PlyType.INT, PlyType.UCHAR),
            PlyProperty("red", PlyType.UCHAR)]


def _write_mesh(stream, file_format):
    writer = PlyWriter(stream, ["vertex", "face"], file_format)
    writer.describe_element("vertex", 3, _xyz())
    writer.describe_element("face", 1, _face_props())
    writer.put_comment("a triangle")
    writer.put_obj_info("num_cols 1")
    writer.header_complete()
    writer.put_element_setup("vertex")
    for v in ([0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.5, -2.25]):
        writer.put_element(dict(zip("xyz", v)))
    writer.put_element_setup("face")
    writer.put_element({"vertex_indices": [0, 1, 2], "red": 200})
    return writer


def test_ascii_output_exact():
    out = io.StringIO()
    writer = PlyWriter(out, ["vertex"])
    writer.describe_element("vertex", 1, _xyz())
    writer.put_comment("made here")
    writer.header_complete()
    writer.put_element_setup("vertex")
    writer.put_element({"x": 1.5, "y": 2, "z": -3})
    assert out.getvalue() == (
        "ply\n"
        "format ascii 1.0\n"
        "comment made here\n"
        "element vertex 1\n"
        "property float x\n"
        "property float y\n"
        "property float z\n"
        "end_header\n"
        "1.5 2 -3 \n"
    )


def test_ascii_round_trip():
    out = io.StringIO()
    _write_mesh(out, FileFormat.ASCII)
    reader = PlyReader(io.StringIO(out.getvalue()))
    assert reader.header.comments == ["a triangle"]
    assert reader.header.obj_info == ["num_cols 1"]
    vertices = list(reader.iter_elements("vertex"))
    assert vertices[2] == {"x": 0.0, "y": 1.5, "z": -2.25}
    face = reader.read_element("face")
    assert face == {"vertex_indices": [0, 1, 2], "red": 200}


@pytest.mark.parametrize("fmt", [FileFormat.BINARY_LE, FileFormat.BINARY_BE])
def test_binary_round_trip(fmt):
    out = io.BytesIO()
    _write_mesh(out, fmt)
    reader = PlyReader(io.BytesIO(out.getvalue()))
    assert reader.header.file_format is fmt
    vertices = list(reader.iter_elements("vertex"))
    assert [v["x"] for v in vertices] == [0.0, 1.0, 0.0]
    assert reader.read_element("face")["vertex_indices"] == [0, 1, 2]


def test_binary_little_endian_bytes():
    out = io.BytesIO()
    writer = PlyWriter(out, ["face"], "binary_little_endian")
    writer.describe_element("face", 1, [_face_props()[0]])
    writer.header_complete()
    writer.put_element_setup("face")
    writer.put_element({"vertex_indices": [0, 1, 2]})
    data = out.getvalue()
    header_end = data.index(b"end_header\n") + len(b"end_header\n")
    assert data[header_end:] == (
        b"\x03\x00\x00\x00\x00\x01\x00\x00\x00\x02\x00\x00\x00")


def test_native_format():
    out = io.BytesIO()
    writer = PlyWriter(out, ["vertex"], "native")
    assert writer.header.file_format is FileFormat.native()
    writer.header_complete()
    assert f"format {FileFormat.native().keyword} 1.0".encode() in out.getvalue()


def test_values_are_converted_to_type():
    out = io.StringIO()
    writer = PlyWriter(out, ["v"])
    writer.describe_element("v", 1, [PlyProperty("c", PlyType.UCHAR)])
    writer.header_complete()
    writer.put_element_setup("v")
    writer.put_element({"c": 300})
    reader = PlyReader(io.StringIO(out.getvalue()))
    assert reader.read_element("v")["c"] == PlyType.UCHAR.convert(300)


def test_describe_property_and_element_count():
    writer = PlyWriter(io.StringIO(), ["vertex"])
    writer.describe_property("vertex", PlyProperty("x", PlyType.DOUBLE))
    writer.describe_property("vertex", PlyProperty("y", PlyType.DOUBLE))
    writer.element_count("vertex", 7)
    elem = writer.header.find_element("vertex")
    assert elem.property_names() == ["x", "y"]
    assert elem.count == 7


def test_other_elements_round_trip():
    source = io.StringIO()
    _write_mesh(source, FileFormat.ASCII)
    reader = PlyReader(io.StringIO(source.getvalue()))
    vertices = list(reader.iter_elements("vertex"))
    other = reader.get_other_element("face")

    out = io.BytesIO()
    writer = PlyWriter(out, ["vertex"], FileFormat.BINARY_BE)
    writer.describe_element("vertex", len(vertices), _xyz())
    writer.describe_other_elements([other])
    writer.header_complete()
    writer.put_element_setup("vertex")
    for vertex in vertices:
        writer.put_element(vertex)
    writer.put_other_elements()

    again = PlyReader(io.BytesIO(out.getvalue()))
    assert again.element_names() == ["vertex", "face"]
    assert list(again.iter_elements("vertex")) == vertices
    assert list(again.iter_elements("face")) == other.instances


def test_describe_other_elements_none_is_ignored():
    writer = PlyWriter(io.StringIO(), ["vertex"])
    writer.describe_other_elements(None)
    assert writer.header.element_names() == ["vertex"]


def test_open_adds_extension(tmp_path):
    with PlyWriter.open(tmp_path / "mesh", ["vertex"], FileFormat.BINARY_LE) as writer:
        writer.describe_element("vertex", 1, _xyz())
        writer.header_complete()
        writer.put_element_setup("vertex")
        writer.put_element({"x": 1.0, "y": 2.0, "z": 3.0})
    assert (tmp_path / "mesh.ply").exists()
    with PlyReader.open(tmp_path / "mesh") as reader:
        assert reader.read_element("vertex") == {"x": 1.0, "y": 2.0, "z": 3.0}


def test_unknown_element_raises():
    writer = PlyWriter(io.StringIO(), ["vertex"])
    with pytest.raises(PlyError):
        writer.describe_element("edge", 1, [])
    with pytest.raises(PlyError):
        writer.put_element_setup("edge")


def test_put_element_before_header_raises():
    writer = PlyWriter(io.StringIO(), ["vertex"])
    writer.describe_element("vertex", 1, _xyz())
    writer.put_element_setup("vertex")
    with pytest.raises(PlyError):
        writer.put_element({"x": 1, "y": 2, "z": 3})


def test_put_element_without_setup_raises():
    writer = PlyWriter(io.StringIO(), ["vertex"])
    writer.header_complete()
    with pytest.raises(PlyError):
        writer.put_element({})


def test_missing_value_raises():
    writer = PlyWriter(io.StringIO(), ["vertex"])
    writer.describe_element("vertex", 1, _xyz())
    writer.header_complete()
    writer.put_element_setup("vertex")
    with pytest.raises(PlyError, match="'z'"):
        writer.put_element({"x": 1, "y": 2})


def test_binary_to_text_stream_raises():
    with pytest.raises(PlyError):
        PlyWriter(io.StringIO(), ["vertex"], FileFormat.BINARY_LE)


def test_unknown_format_name_raises():
    with pytest.raises(PlyError):
        PlyWriter(io.BytesIO(), ["vertex"], "binary_middle_endian")


def test_comment_after_header_raises():
    writer = PlyWriter(io.StringIO(), ["vertex"])
    writer.header_complete()
    with pytest.raises(PlyError):
        writer.put_comment("late")
    with pytest.raises(PlyError):
        writer.header_complete()
# plymesh

`plymesh` reads and writes PLY polygon files. A PLY file describes one polygonal
object. The object is made of lists of *elements*, such as vertices and faces. Each
element type has *properties*. A property is either a scalar, like `x`, `y` or `z`,
or a list, like a face's `vertex_indices`. The package handles ASCII, binary
big-endian and binary little-endian files.

The package also has a small console logger that can hold messages back inside
sections.

It has no dependencies outside the standard library.

## Installing

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Modules

- `plymesh.types`: `PlyType` (the scalar types `char`, `short`, `int`, `uchar`,
  `ushort`, `uint`, `float`, `double`), `FileFormat` (`ASCII`, `BINARY_BE`,
  `BINARY_LE`), and `PlyError`.
- `plymesh.header`: `PlyProperty`, `PlyElement`, `PlyHeader`, `parse_header`,
  `split_words` and `with_ply_extension`.
- `plymesh.reader`: `PlyReader` and `OtherElement`.
- `plymesh.writer`: `PlyWriter`.
- `plymesh.consolelog`: `ConsoleLog` and `LogLevel`.

## Reading

```python
from plymesh.reader import PlyReader

with PlyReader.open("bunny") as reader:        # ".ply" is appended when missing
    print(reader.element_names())
    vertex = reader.get_element_description("vertex")
    print(vertex.count, vertex.property_names())
    points = list(reader.iter_elements("vertex", ["x", "y", "z"]))
    faces = reader.get_other_element("face")   # every face, all properties
```

`PlyReader` parses the header as soon as it is created. It accepts any stream,
for example an `io.BytesIO`. Binary data needs a binary stream. The parsed header
is available as `reader.header`.

An element instance comes back as a dict that maps property names to values.
List properties come back as Python lists. If you pass a list of property names
to `read_element` or `iter_elements`, only those properties are returned. The
others are still read, so the position in the file stays correct. Naming a
property that the element lacks raises `PlyError`.

Elements must be read in the order the header lists them. If you skip an element
before all of its instances are read, you get an error. If you read past an
element's count, you also get an error.

`get_other_element` reads all remaining instances of an element. It returns them
as an `OtherElement` and also adds that object to `reader.other_elements`.

In headers, the type names `float32`, `int32` and `uint8` are accepted as aliases
for `float`, `int` and `uchar`.

## Writing

```python
from plymesh.header import PlyProperty
from plymesh.types import FileFormat, PlyType
from plymesh.writer import PlyWriter

vertex_props = [PlyProperty("x", PlyType.FLOAT),
                PlyProperty("y", PlyType.FLOAT),
                PlyProperty("z", PlyType.FLOAT)]
face_props = [PlyProperty("vertex_indices", PlyType.INT, count_type=PlyType.UCHAR)]

with PlyWriter.open("triangle", ["vertex", "face"], FileFormat.ASCII) as writer:
    writer.describe_element("vertex", 3, vertex_props)
    writer.describe_element("face", 1, face_props)
    writer.put_comment("a single triangle")
    writer.header_complete()

    writer.put_element_setup("vertex")
    for x, y in ((0, 0), (1, 0), (0, 1)):
        writer.put_element({"x": x, "y": y, "z": 0})

    writer.put_element_setup("face")
    writer.put_element({"vertex_indices": [0, 1, 2]})
```

The `file_format` argument takes one of three things:

- a `FileFormat` value;
- a format keyword from a header (`"ascii"`, `"binary_big_endian"`, `"binary_little_endian"`);
- `"native"` (or `"binary_native"`), which picks the binary format that matches this machine.

Values are cast to the property's type the way a C assignment would cast them.
Integers wrap around, and `float` values are rounded to 32 bits.

Comments and `obj_info` lines must be added before `header_complete`.
`describe_property` adds a single property to an element. `element_count` changes
how many instances of an element will be written.

To copy elements you read with `PlyReader.get_other_element` into a new file:

1. Pass them to `describe_other_elements` before the header is completed.
2. After the header is written, call `put_other_elements`.

All errors are raised as `plymesh.types.PlyError`. This includes:

- a file that is not a PLY file;
- a malformed header line;
- an unknown format or type;
- an unknown element or property;
- a missing value when writing;
- data that ends too early.

## Console logging

```python
from plymesh.consolelog import ConsoleLog, LogLevel

with ConsoleLog(LogLevel.INFO, verbose=False) as log:
    log.info("starting")
    log.open_section("Loading mesh... ")
    log.debug("parsed header")
    log.close_section("done")
```

The levels are `ERR`, `WARNING`, `INFO`, `DEBUG` and `CRIT`, in that numeric order.

Outside a section, a message is written at once if its level is at or below the
log's level. Messages are prefixed with `[ERROR]`, `[WARN]`, `[INFO]` or `[DEBUG]`.
`CRIT` messages have no prefix.

`open_section` writes its title without ending the line. Inside a section, every
message is buffered. `close_section` finishes the title line and then deals with
the buffer:

- If the log is verbose, or `error` was called during the section, the buffered
  messages are written indented.
- Otherwise the buffer is dropped.

If you open a new section, or call `close` (also called on leaving the `with`
block), while a section is still open, the log closes that section with `?` and
writes a warning.

The output goes to `sys.stdout` unless you pass another text stream as `stream`.

## What it does not do

`plymesh` is a library only. It has no command-line tool. It reads and writes the
values stored in a PLY file and nothing more. It does not compute normals, check
that face indices are valid, or render meshes.
# e57meta

`e57meta` reads and writes the XML metadata section of ASTM E57 3D imaging
files. It works on the XML text only and uses nothing but the Python
standard library.

It covers:

- the file-level root structure (`e57meta.root.Root`): format name, GUID,
  major and minor version, library version and coordinate metadata,
- point cloud descriptors (`e57meta.pointcloud.PointCloud`): GUID, original
  GUIDs, name, description, sensor vendor, model, serial number and
  hardware/software/firmware versions, temperature, relative humidity,
  atmospheric pressure, pose, binary file offset, record count and the point
  prototype,
- prototype records (`e57meta.record`): standard record names
  (`RecordName`), extension names (`UnknownRecordName`), the data types
  `SingleType`, `DoubleType`, `ScaledIntegerType` and `IntegerType` with
  their bit sizes and limits, and raw values (`RecordValue`),
- rigid transforms (`e57meta.transform`): `Quaternion`, `Translation` and
  `Transform`.

## Installation

```
pip install e57meta
```

To run the test suite:

```
pip install "e57meta[test]"
pytest
```

## Reading metadata

```python
from e57meta.root import root_from_xml
from e57meta.pointcloud import pointclouds_from_xml

with open("metadata.xml", encoding="utf-8") as handle:
    xml_text = handle.read()

root = root_from_xml(xml_text)
print(root.format, root.guid, root.major_version)

for cloud in pointclouds_from_xml(xml_text):
    print(cloud.guid, cloud.name, cloud.records, cloud.file_offset)
    if cloud.has_cartesian():
        print("  has X/Y/Z coordinates")
    if cloud.has_color():
        print("  has RGB colors")
    for record in cloud.prototype:
        print("  ", record.name, record.data_type.bit_size(), "bits")
```

`root_from_xml` fills `minor_version` from the `versionMajor` element, so
both version fields hold the major version after reading.

`pointclouds_from_xml` collects every `vectorChild` of type `Structure`
inside the `data3D` element and returns an empty list if there is none.
Prototype elements in an extension namespace become `UnknownRecordName`
values carrying the prefix declared for that namespace (an empty string
when it has none). `PointCloud.from_element` reads a single descriptor from
an element you already hold, with an optional mapping of namespace URIs to
prefixes.

`PointCloud` also offers `has_spherical()`, `has_intensity()`,
`has_row_column()`, `has_return()` and `has_timestamp()`.

Malformed or inconsistent metadata raises `e57meta.errors.InvalidError`.
Record types other than `Float`, `Integer` and `ScaledInteger` raise
`e57meta.errors.UnsupportedError`. Misusing a value conversion raises
`e57meta.errors.InternalError`. All of them derive from
`e57meta.errors.E57Error`.

## Record types and values

`integer_bits(min_value, max_value)` gives the number of bits an integer
range needs; a range with equal limits needs zero bits.
`data_type_from_element` reads a data type from a prototype element.

`RecordValue` holds a raw value of one point attribute together with its
`ValueKind`. Scaled integers need their data type to compute the real value:

```python
from e57meta.record import RecordValue, ScaledIntegerType, ValueKind

data_type = ScaledIntegerType(min=0, max=1000, scale=0.001, offset=10.0)
value = RecordValue(ValueKind.SCALED_INTEGER, 500)
print(value.to_f64(data_type))  # 10.5
```

`to_u8` accepts only integer values whose type lies within 0 to 255, and
`to_i64` only integer values of an `IntegerType`.

Ready-made records are available as class attributes of `Record`, such as
`Record.CARTESIAN_X_F32`, `Record.CARTESIAN_X_F64`, `Record.COLOR_RED_U8`,
`Record.INTENSITY_U16` and `Record.COLOR_RED_UNIT_F32`.

## Writing metadata

```python
from e57meta.root import Root, serialize_root
from e57meta.pointcloud import PointCloud
from e57meta.record import Record

cloud = PointCloud(
    guid="pointcloud-guid",
    file_offset=48,
    records=3,
    prototype=[
        Record.CARTESIAN_X_F32,
        Record.CARTESIAN_Y_F32,
        Record.CARTESIAN_Z_F32,
    ],
)
xml_text = serialize_root(Root(guid="file-guid"), [cloud], [])
```

The third argument of `serialize_root` is a sequence of
`(prefix, url)` pairs declared as namespaces on the root element. An empty
file GUID is rejected with `InvalidError`. The written `images2D` element is
always empty.

The helpers in `e57meta.xmlutil` (`opt_string`, `req_float`, `gen_string`,
`gen_float`, `format_float` and others) read and generate the typed XML
elements used throughout.

## What this package does not do

- It does not open E57 files or read their binary sections: no file header,
  no CRC checks, no point data, no image blobs. It starts from the XML text.
- Point cloud bounds, intensity and color limits, and acquisition or
  creation date-times are neither read nor written.
- Image descriptors are not supported.
- It has no command-line tools.
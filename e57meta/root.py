"""The root structure of an E57 XML section."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Union

from .errors import InvalidError
from .pointcloud import PointCloud
from .xmlutil import opt_string, parse_document, req_int, req_string

FORMAT_NAME = "ASTM E57 3D Imaging Data File"
E57_NAMESPACE = "http://www.astm.org/COMMIT/E57/2010-e57-v1.0"


@dataclass
class Root:
    """File-level information shared by all elements of an E57 file."""

    format: str = FORMAT_NAME
    guid: str = ""
    major_version: int = 1
    minor_version: int = 0
    library_version: Optional[str] = None
    coordinate_metadata: Optional[str] = None


def root_from_xml(xml_text: Union[str, bytes]) -> Root:
    """Read the root structure from an E57 XML document."""
    document = parse_document(xml_text)
    element = next(
        (
            node
            for node in document.iter()
            if isinstance(node.tag, str) and node.tag.rpartition("}")[2] == "e57Root"
        ),
        None,
    )
    if element is None:
        raise InvalidError("Unable to find e57Root tag in XML document")

    major_version = req_int(element, "versionMajor")
    return Root(
        format=req_string(element, "formatName"),
        guid=req_string(element, "guid"),
        major_version=major_version,
        minor_version=req_int(element, "versionMajor"),
        coordinate_metadata=opt_string(element, "coordinateMetadata"),
        library_version=opt_string(element, "e57LibraryVersion"),
    )


def serialize_root(
    root: Root,
    pointclouds: Sequence[PointCloud],
    extensions: Iterable[tuple[str, str]],
) -> str:
    """Generate the complete XML section.

    ``extensions`` holds (namespace prefix, URL) pairs to declare.
    """
    if not root.guid:
        raise InvalidError("Empty file GUID is not allowed")
    namespaces = "".join(f'xmlns:{prefix}="{url}" ' for prefix, url in extensions)
    parts = [
        '<?xml version="1.0" encoding="UTF-8"?>\n',
        f'<e57Root type="Structure" {namespaces}xmlns="{E57_NAMESPACE}">\n',
        f'<formatName type="String"><![CDATA[{FORMAT_NAME}]]></formatName>\n',
        f'<guid type="String"><![CDATA[{root.guid}]]></guid>\n',
        f'<versionMajor type="Integer">{root.major_version}</versionMajor>\n',
        f'<versionMinor type="Integer">{root.minor_version}</versionMinor>\n',
    ]
    if root.coordinate_metadata is not None:
        parts.append(
            '<coordinateMetadata type="String">'
            f"<![CDATA[{root.coordinate_metadata}]]></coordinateMetadata>\n"
        )
    if root.library_version is not None:
        parts.append(
            '<e57LibraryVersion type="String">'
            f"<![CDATA[{root.library_version}]]></e57LibraryVersion>\n"
        )
    parts.append('<data3D type="Vector" allowHeterogeneousChildren="1">\n')
    parts.extend(pc.xml_string() for pc in pointclouds)
    parts.append("</data3D>\n")
    parts.append('<images2D type="Vector" allowHeterogeneousChildren="1">\n')
    parts.append("</images2D>\n")
    parts.append("</e57Root>\n")
    return "".join(parts)
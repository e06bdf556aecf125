"""Descriptors of the point clouds stored in an E57 file."""

from __future__ import annotations

import io
import re
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional, Union
from xml.etree import ElementTree
from xml.etree.ElementTree import Element

from .errors import InvalidError
from .record import AnyRecordName, Record, RecordName, data_type_from_element, record_name_from_tag
from .transform import Transform, opt_transform
from .xmlutil import find_child, gen_float, gen_string, opt_float, opt_string

_U64_MAX = 2**64 - 1
_U64_PATTERN = re.compile(r"\+?[0-9]+")


def _parse_u64(text: str) -> int:
    if not _U64_PATTERN.fullmatch(text):
        raise ValueError(text)
    number = int(text)
    if number > _U64_MAX:
        raise ValueError(text)
    return number


def _split_tag(tag: object) -> tuple[Optional[str], str]:
    if not isinstance(tag, str):
        return None, ""
    if tag.startswith("{"):
        uri, _, local = tag[1:].partition("}")
        return uri, local
    return None, tag


def _required_attribute_u64(element: Element, attribute: str) -> int:
    text = element.get(attribute)
    if text is None:
        raise InvalidError(f"Cannot find '{attribute}' attribute in 'points' tag")
    try:
        return _parse_u64(text)
    except ValueError:
        raise InvalidError(
            f"Cannot parse '{attribute}' attribute value as u64"
        ) from None


def _find_typed_child(parent: Element, tag_name: str, type_name: str) -> Optional[Element]:
    return next(
        (
            child
            for child in parent
            if _split_tag(child.tag)[1] == tag_name and child.get("type") == type_name
        ),
        None,
    )


@dataclass
class PointCloud:
    """Metadata of a single point cloud, without any point data."""

    guid: Optional[str] = None
    file_offset: int = 0
    records: int = 0
    prototype: list[Record] = field(default_factory=list)
    original_guids: Optional[list[str]] = None
    name: Optional[str] = None
    description: Optional[str] = None
    transform: Optional[Transform] = None
    sensor_vendor: Optional[str] = None
    sensor_model: Optional[str] = None
    sensor_serial: Optional[str] = None
    sensor_hw_version: Optional[str] = None
    sensor_sw_version: Optional[str] = None
    sensor_fw_version: Optional[str] = None
    temperature: Optional[float] = None
    humidity: Optional[float] = None
    atmospheric_pressure: Optional[float] = None

    @classmethod
    def from_element(
        cls, element: Element, prefixes: Optional[Mapping[str, str]] = None
    ) -> PointCloud:
        """Read a point cloud from a data3D child element.

        ``prefixes`` maps namespace URIs to the prefixes declared for them,
        which name the namespaces of extension attributes.
        """
        prefixes = prefixes or {}

        original_guids: Optional[list[str]] = None
        guids_element = find_child(element, "originalGuids")
        if guids_element is not None:
            original_guids = [
                child.text or ""
                for child in guids_element
                if _split_tag(child.tag)[1] == "vectorChild" and child.get("type") == "String"
            ]

        points = _find_typed_child(element, "points", "CompressedVector")
        if points is None:
            raise InvalidError("Cannot find 'points' tag inside 'data3D' child")
        file_offset = _required_attribute_u64(points, "fileOffset")
        records = _required_attribute_u64(points, "recordCount")
        prototype_element = _find_typed_child(points, "prototype", "Structure")
        if prototype_element is None:
            raise InvalidError("Cannot find 'prototype' child in 'points' tag")

        prototype = []
        for child in prototype_element:
            uri, tag = _split_tag(child.tag)
            if not tag:
                continue
            namespace = None if uri is None else prefixes.get(uri)
            name = record_name_from_tag(namespace, tag)
            prototype.append(Record(name, data_type_from_element(child)))

        return cls(
            guid=opt_string(element, "guid"),
            file_offset=file_offset,
            records=records,
            prototype=prototype,
            original_guids=original_guids,
            name=opt_string(element, "name"),
            description=opt_string(element, "description"),
            transform=opt_transform(element, "pose"),
            sensor_vendor=opt_string(element, "sensorVendor"),
            sensor_model=opt_string(element, "sensorModel"),
            sensor_serial=opt_string(element, "sensorSerialNumber"),
            sensor_hw_version=opt_string(element, "sensorHardwareVersion"),
            sensor_sw_version=opt_string(element, "sensorSoftwareVersion"),
            sensor_fw_version=opt_string(element, "sensorFirmwareVersion"),
            temperature=opt_float(element, "temperature"),
            humidity=opt_float(element, "relativeHumidity"),
            atmospheric_pressure=opt_float(element, "atmosphericPressure"),
        )

    def xml_string(self) -> str:
        """Serialize the point cloud as a data3D child element."""
        parts = ['<vectorChild type="Structure">\n']
        if self.guid is not None:
            parts.append(gen_string("guid", self.guid))
        if self.original_guids is not None:
            parts.append('<originalGuids type="Vector" allowHeterogeneousChildren="0">\n')
            parts.extend(gen_string("vectorChild", guid) for guid in self.original_guids)
            parts.append("</originalGuids>\n")

        strings = (
            ("name", self.name),
            ("description", self.description),
            ("sensorVendor", self.sensor_vendor),
            ("sensorModel", self.sensor_model),
            ("sensorSerialNumber", self.sensor_serial),
            ("sensorSoftwareVersion", self.sensor_sw_version),
            ("sensorFirmwareVersion", self.sensor_fw_version),
            ("sensorHardwareVersion", self.sensor_hw_version),
        )
        parts.extend(gen_string(tag, value) for tag, value in strings if value is not None)

        if self.transform is not None:
            parts.append(self.transform.xml_string("pose"))

        floats = (
            ("temperature", self.temperature),
            ("relativeHumidity", self.humidity),
            ("atmosphericPressure", self.atmospheric_pressure),
        )
        parts.extend(gen_float(tag, float(value)) for tag, value in floats if value is not None)

        parts.append(
            f'<points type="CompressedVector" fileOffset="{self.file_offset}" '
            f'recordCount="{self.records}">\n'
        )
        parts.append('<prototype type="Structure">\n')
        parts.extend(record.xml_string() for record in self.prototype)
        parts.append("</prototype>\n")
        parts.append("</points>\n")
        parts.append("</vectorChild>\n")
        return "".join(parts)

    def _contains(self, names: Iterable[AnyRecordName]) -> bool:
        present = {record.name for record in self.prototype}
        return all(name in present for name in names)

    def has_cartesian(self) -> bool:
        """True if X, Y and Z records for Cartesian coordinates exist."""
        return self._contains(
            (RecordName.CARTESIAN_X, RecordName.CARTESIAN_Y, RecordName.CARTESIAN_Z)
        )

    def has_spherical(self) -> bool:
        """True if range, azimuth and elevation records exist."""
        return self._contains(
            (
                RecordName.SPHERICAL_RANGE,
                RecordName.SPHERICAL_AZIMUTH,
                RecordName.SPHERICAL_ELEVATION,
            )
        )

    def has_color(self) -> bool:
        """True if red, green and blue records exist."""
        return self._contains((RecordName.COLOR_RED, RecordName.COLOR_GREEN, RecordName.COLOR_BLUE))

    def has_intensity(self) -> bool:
        """True if an intensity record exists."""
        return self._contains((RecordName.INTENSITY,))

    def has_row_column(self) -> bool:
        """True if row and column index records exist."""
        return self._contains((RecordName.ROW_INDEX, RecordName.COLUMN_INDEX))

    def has_return(self) -> bool:
        """True if return count and return index records exist."""
        return self._contains((RecordName.RETURN_COUNT, RecordName.RETURN_INDEX))

    def has_timestamp(self) -> bool:
        """True if a time stamp record exists."""
        return self._contains((RecordName.TIME_STAMP,))


def _parse_with_prefixes(xml_text: Union[str, bytes]) -> tuple[Element, dict[str, str]]:
    data = xml_text.encode("utf-8") if isinstance(xml_text, str) else xml_text
    prefixes: dict[str, str] = {}
    root: Optional[Element] = None
    try:
        for event, item in ElementTree.iterparse(io.BytesIO(data), events=("start-ns", "end")):
            if event == "start-ns":
                prefix, uri = item
                prefixes.setdefault(uri, prefix)
            else:
                root = item
    except ElementTree.ParseError as error:
        raise InvalidError(f"Failed to parse XML data: {error}") from None
    if root is None:
        raise InvalidError("XML document has no root element")
    return root, prefixes


def pointclouds_from_xml(xml_text: Union[str, bytes]) -> list[PointCloud]:
    """Read all point cloud descriptors from an E57 XML document."""
    root, prefixes = _parse_with_prefixes(xml_text)
    data3d = next((node for node in root.iter() if _split_tag(node.tag)[1] == "data3D"), None)
    if data3d is None:
        return []
    return [
        PointCloud.from_element(child, prefixes)
        for child in data3d
        if _split_tag(child.tag)[1] == "vectorChild" and child.get("type") == "Structure"
    ]
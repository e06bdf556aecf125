"""Helpers for reading and generating the typed XML elements of E57 metadata."""

from __future__ import annotations

from typing import Callable, Optional, TypeVar, Union
from xml.etree import ElementTree
from xml.etree.ElementTree import Element

from .errors import InvalidError
from .record import _format_f64, _parse_float, _parse_int

_T = TypeVar("_T")


def parse_document(xml_text: Union[str, bytes]) -> Element:
    """Parse an XML document and return its root element."""
    try:
        return ElementTree.fromstring(xml_text)
    except ElementTree.ParseError as error:
        raise InvalidError(f"Failed to parse XML data: {error}") from None


def _local_name(tag: object) -> str:
    if not isinstance(tag, str):
        return ""
    return tag.rpartition("}")[2]


def find_child(parent: Element, tag_name: str) -> Optional[Element]:
    """Return the first child element with the given local tag name."""
    return next((child for child in parent if _local_name(child.tag) == tag_name), None)


def _typed_child(parent: Element, tag_name: str, expected_type: str) -> Optional[Element]:
    tag = find_child(parent, tag_name)
    if tag is None:
        return None
    found_type = tag.get("type")
    if found_type is None:
        raise InvalidError(f"XML tag '{tag_name}' has no 'type' attribute")
    if found_type != expected_type:
        raise InvalidError(
            f"Found XML tag '{tag_name}' with type '{found_type}' "
            f"instead of '{expected_type}'"
        )
    return tag


def _require(value: Optional[_T], tag_name: str) -> _T:
    if value is None:
        raise InvalidError(f"XML tag '{tag_name}' was not found")
    return value


def opt_string(parent: Element, tag_name: str) -> Optional[str]:
    """Text of an optional child of type String."""
    tag = _typed_child(parent, tag_name, "String")
    if tag is None:
        return None
    return tag.text or ""


def req_string(parent: Element, tag_name: str) -> str:
    """Text of a required child of type String."""
    return _require(opt_string(parent, tag_name), tag_name)


def _opt_num(
    parent: Element, tag_name: str, expected_type: str, parse: Callable[[str], _T]
) -> Optional[_T]:
    tag = _typed_child(parent, tag_name, expected_type)
    if tag is None:
        return None
    text = "0" if tag.text is None else tag.text
    try:
        return parse(text)
    except ValueError:
        raise InvalidError(
            f"Cannot parse value '{text}' of XML tag '{tag_name}' as '{expected_type}'"
        ) from None


def opt_float(parent: Element, tag_name: str) -> Optional[float]:
    """Value of an optional child of type Float."""
    return _opt_num(parent, tag_name, "Float", _parse_float)


def req_float(parent: Element, tag_name: str) -> float:
    """Value of a required child of type Float."""
    return _require(opt_float(parent, tag_name), tag_name)


def opt_int(parent: Element, tag_name: str) -> Optional[int]:
    """Value of an optional child of type Integer."""
    return _opt_num(parent, tag_name, "Integer", _parse_int)


def req_int(parent: Element, tag_name: str) -> int:
    """Value of a required child of type Integer."""
    return _require(opt_int(parent, tag_name), tag_name)


def format_float(value: float) -> str:
    """Shortest plain decimal text that reads back as the same float."""
    return _format_f64(value)


def gen_string(tag_name: str, value: object) -> str:
    """Element of type String with the value wrapped in CDATA."""
    return f'<{tag_name} type="String"><![CDATA[{value}]]></{tag_name}>\n'


def gen_float(tag_name: str, value: Union[float, int]) -> str:
    """Element of type Float."""
    text = format_float(value) if isinstance(value, float) else str(value)
    return f'<{tag_name} type="Float">{text}</{tag_name}>\n'


def gen_int(tag_name: str, value: int) -> str:
    """Element of type Integer."""
    return f'<{tag_name} type="Integer">{value}</{tag_name}>\n'
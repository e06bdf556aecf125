"""Rigid body transformations of point clouds."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional
from xml.etree.ElementTree import Element

from .xmlutil import find_child, gen_float, req_float


@dataclass
class Quaternion:
    """Rotation of a point cloud as a unit quaternion."""

    w: float = 1.0
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    @classmethod
    def from_element(cls, element: Element) -> Quaternion:
        """Read a quaternion from a structure element with w, x, y and z."""
        return cls(
            w=req_float(element, "w"),
            x=req_float(element, "x"),
            y=req_float(element, "y"),
            z=req_float(element, "z"),
        )


@dataclass
class Translation:
    """Translation of a point cloud in meters."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    @classmethod
    def from_element(cls, element: Element) -> Translation:
        """Read a translation from a structure element with x, y and z."""
        return cls(
            x=req_float(element, "x"),
            y=req_float(element, "y"),
            z=req_float(element, "z"),
        )


@dataclass
class Transform:
    """Rotation followed by a translation."""

    rotation: Quaternion = field(default_factory=Quaternion)
    translation: Translation = field(default_factory=Translation)

    @classmethod
    def from_element(cls, element: Element) -> Transform:
        """Read a transform; missing parts fall back to identity."""
        translation_element = find_child(element, "translation")
        rotation_element = find_child(element, "rotation")
        translation = (
            Translation()
            if translation_element is None
            else Translation.from_element(translation_element)
        )
        rotation = (
            Quaternion()
            if rotation_element is None
            else Quaternion.from_element(rotation_element)
        )
        return cls(rotation=rotation, translation=translation)

    def xml_string(self, tag_name: str) -> str:
        """Serialize the transform as a structure element with the given tag."""
        rot = self.rotation
        quat = (
            '<rotation type="Structure">\n'
            + gen_float("w", float(rot.w))
            + gen_float("x", float(rot.x))
            + gen_float("y", float(rot.y))
            + gen_float("z", float(rot.z))
            + "</rotation>\n"
        )
        tr = self.translation
        trans = (
            '<translation type="Structure">\n'
            + gen_float("x", float(tr.x))
            + gen_float("y", float(tr.y))
            + gen_float("z", float(tr.z))
            + "</translation>\n"
        )
        return f'<{tag_name} type="Structure">\n{quat}{trans}</{tag_name}>\n'


def opt_transform(parent: Element, tag_name: str) -> Optional[Transform]:
    """Read an optional transform child of the given element."""
    element = find_child(parent, tag_name)
    return None if element is None else Transform.from_element(element)
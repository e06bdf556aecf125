"""Point attribute records: names, data types and raw values."""

from __future__ import annotations

import enum
import math
import re
import struct
from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, Optional, TypeVar, Union
from xml.etree.ElementTree import Element

from .errors import InternalError, InvalidError, UnsupportedError

I64_MIN = -(2**63)
I64_MAX = 2**63 - 1

_INT_PATTERN = re.compile(r"[+-]?[0-9]+")
_FLOAT_PATTERN = re.compile(
    r"[+-]?(?:inf|infinity|nan|(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?)",
    re.IGNORECASE,
)

_T = TypeVar("_T")


class RecordName(enum.Enum):
    """Point attributes defined by the E57 standard, valued by their XML tag."""

    CARTESIAN_X = "cartesianX"
    CARTESIAN_Y = "cartesianY"
    CARTESIAN_Z = "cartesianZ"
    CARTESIAN_INVALID_STATE = "cartesianInvalidState"
    SPHERICAL_RANGE = "sphericalRange"
    SPHERICAL_AZIMUTH = "sphericalAzimuth"
    SPHERICAL_ELEVATION = "sphericalElevation"
    SPHERICAL_INVALID_STATE = "sphericalInvalidState"
    INTENSITY = "intensity"
    IS_INTENSITY_INVALID = "isIntensityInvalid"
    COLOR_RED = "colorRed"
    COLOR_GREEN = "colorGreen"
    COLOR_BLUE = "colorBlue"
    IS_COLOR_INVALID = "isColorInvalid"
    ROW_INDEX = "rowIndex"
    COLUMN_INDEX = "columnIndex"
    RETURN_COUNT = "returnCount"
    RETURN_INDEX = "returnIndex"
    TIME_STAMP = "timeStamp"
    IS_TIME_STAMP_INVALID = "isTimeStampInvalid"

    @property
    def tag_name(self) -> str:
        return self.value

    @property
    def namespace(self) -> Optional[str]:
        return None


@dataclass(frozen=True)
class UnknownRecordName:
    """A point attribute from an extension outside the E57 standard.

    A missing namespace is kept as an empty string.
    """

    namespace: str
    name: str

    @property
    def tag_name(self) -> str:
        return self.name


AnyRecordName = Union[RecordName, UnknownRecordName]

_STANDARD_NAMES = {member.value: member for member in RecordName}


def record_name_from_tag(namespace: Optional[str], tag_name: str) -> AnyRecordName:
    """Map an XML tag (and its namespace prefix) to a record name."""
    standard = _STANDARD_NAMES.get(tag_name)
    if standard is not None:
        return standard
    return UnknownRecordName(namespace or "", tag_name)


def integer_bits(min_value: int, max_value: int) -> int:
    """Number of bits needed to store integers between the two limits."""
    span = max_value - min_value
    return span.bit_length() if span > 0 else 0


def _to_f32(value: float) -> float:
    try:
        return struct.unpack("<f", struct.pack("<f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def _plain(literal: str) -> str:
    text = format(Decimal(literal), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def _non_finite(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    return "inf" if value > 0 else "-inf"


def _format_f64(value: float) -> str:
    value = float(value)
    if not math.isfinite(value):
        return _non_finite(value)
    return _plain(repr(value))


def _format_f32(value: float) -> str:
    value = _to_f32(float(value))
    if not math.isfinite(value):
        return _non_finite(value)
    literal = repr(value)
    for digits in range(1, 10):
        candidate = f"{value:.{digits}g}"
        if _to_f32(float(candidate)) == value:
            literal = candidate
            break
    return _plain(literal)


def _parse_int(text: str) -> int:
    if not _INT_PATTERN.fullmatch(text):
        raise ValueError(text)
    number = int(text)
    if not I64_MIN <= number <= I64_MAX:
        raise ValueError(text)
    return number


def _parse_float(text: str) -> float:
    if not _FLOAT_PATTERN.fullmatch(text):
        raise ValueError(text)
    return float(text)


def _parse_single(text: str) -> float:
    return _to_f32(_parse_float(text))


@dataclass(frozen=True)
class SingleType:
    """32-bit IEEE 754 floating point values."""

    min: Optional[float] = None
    max: Optional[float] = None

    def __post_init__(self) -> None:
        for field_name in ("min", "max"):
            limit = getattr(self, field_name)
            if limit is not None:
                object.__setattr__(self, field_name, _to_f32(float(limit)))

    def bit_size(self) -> int:
        return 32

    def limits(self) -> tuple[Optional[RecordValue], Optional[RecordValue]]:
        return (
            None if self.min is None else RecordValue(ValueKind.SINGLE, self.min),
            None if self.max is None else RecordValue(ValueKind.SINGLE, self.max),
        )


@dataclass(frozen=True)
class DoubleType:
    """64-bit IEEE 754 floating point values."""

    min: Optional[float] = None
    max: Optional[float] = None

    def bit_size(self) -> int:
        return 64

    def limits(self) -> tuple[Optional[RecordValue], Optional[RecordValue]]:
        return (
            None if self.min is None else RecordValue(ValueKind.DOUBLE, self.min),
            None if self.max is None else RecordValue(ValueKind.DOUBLE, self.max),
        )


@dataclass(frozen=True)
class ScaledIntegerType:
    """Signed 64-bit integers turned into floats by a scale and an offset."""

    min: int = I64_MIN
    max: int = I64_MAX
    scale: float = 1.0
    offset: float = 0.0

    def bit_size(self) -> int:
        return integer_bits(self.min, self.max)

    def limits(self) -> tuple[Optional[RecordValue], Optional[RecordValue]]:
        return (
            RecordValue(ValueKind.SCALED_INTEGER, self.min),
            RecordValue(ValueKind.SCALED_INTEGER, self.max),
        )


@dataclass(frozen=True)
class IntegerType:
    """Signed 64-bit integer values."""

    min: int = I64_MIN
    max: int = I64_MAX

    def bit_size(self) -> int:
        return integer_bits(self.min, self.max)

    def limits(self) -> tuple[Optional[RecordValue], Optional[RecordValue]]:
        return (
            RecordValue(ValueKind.INTEGER, self.min),
            RecordValue(ValueKind.INTEGER, self.max),
        )


DataType = Union[SingleType, DoubleType, ScaledIntegerType, IntegerType]

F32 = SingleType()
UNIT_F32 = SingleType(0.0, 1.0)
F64 = DoubleType()
U8 = IntegerType(0, 255)
U16 = IntegerType(0, 65535)


def _local_name(tag: str) -> str:
    return tag.rpartition("}")[2]


def _optional_attribute(
    element: Element,
    attribute: str,
    tag_name: str,
    type_name: str,
    parse: Callable[[str], _T],
) -> Optional[_T]:
    text = element.get(attribute)
    if text is None:
        return None
    try:
        return parse(text)
    except ValueError:
        raise InvalidError(
            f"Failed to parse attribute '{attribute}' for type '{type_name}' "
            f"in XML tag '{tag_name}'"
        ) from None


def _integer_limits(element: Element, tag_name: str, type_name: str) -> tuple[int, int]:
    low = _optional_attribute(element, "minimum", tag_name, type_name, _parse_int)
    high = _optional_attribute(element, "maximum", tag_name, type_name, _parse_int)
    low = I64_MIN if low is None else low
    high = I64_MAX if high is None else high
    if high < low:
        raise InvalidError(
            f"Maximum value '{high}' and minimum value '{low}' of type '{type_name}' "
            f"in XML tag '{tag_name}' are invalid"
        )
    return low, high


def data_type_from_element(element: Element) -> DataType:
    """Read the data type of a prototype child element."""
    tag_name = _local_name(element.tag)
    type_name = element.get("type")
    if type_name is None:
        raise InvalidError(f"Missing type attribute for XML tag '{tag_name}'")

    if type_name == "Float":
        precision = element.get("precision", "double")
        if precision == "double":
            parse = _parse_float
            factory = DoubleType
        elif precision == "single":
            parse = _parse_single
            factory = SingleType
        else:
            raise InvalidError(
                f"Float 'precision' attribute value '{precision}' for 'Float' type is unknown"
            )
        low = _optional_attribute(element, "minimum", tag_name, type_name, parse)
        high = _optional_attribute(element, "maximum", tag_name, type_name, parse)
        return factory(low, high)

    if type_name == "Integer":
        low, high = _integer_limits(element, tag_name, type_name)
        return IntegerType(low, high)

    if type_name == "ScaledInteger":
        low, high = _integer_limits(element, tag_name, type_name)
        scale = _optional_attribute(element, "scale", tag_name, type_name, _parse_float)
        offset = _optional_attribute(element, "offset", tag_name, type_name, _parse_float)
        return ScaledIntegerType(
            low,
            high,
            1.0 if scale is None else scale,
            0.0 if offset is None else offset,
        )

    raise UnsupportedError(
        f"Unsupported type '{type_name}' in XML tag '{tag_name}' detected"
    )


class ValueKind(enum.Enum):
    """The primitive kind of a raw record value."""

    SINGLE = "single"
    DOUBLE = "double"
    SCALED_INTEGER = "scaled_integer"
    INTEGER = "integer"


@dataclass(frozen=True)
class RecordValue:
    """A raw attribute value of a point.

    Scaled integers need their data type to become an actual float.
    """

    kind: ValueKind
    value: Union[float, int]

    def __post_init__(self) -> None:
        if self.kind is ValueKind.SINGLE:
            object.__setattr__(self, "value", _to_f32(float(self.value)))
        elif self.kind is ValueKind.DOUBLE:
            object.__setattr__(self, "value", float(self.value))
        else:
            object.__setattr__(self, "value", int(self.value))

    def to_f64(self, data_type: DataType) -> float:
        """Return the value as a float, applying scale and offset if needed."""
        if self.kind is ValueKind.SCALED_INTEGER:
            if not isinstance(data_type, ScaledIntegerType):
                raise InternalError(
                    "Tried to convert scaled integer value with wrong data type"
                )
            return float(self.value) * data_type.scale + data_type.offset
        return float(self.value)

    def to_u8(self, data_type: DataType) -> int:
        """Return an integer value whose data type fits into one byte."""
        if self.kind is ValueKind.INTEGER and isinstance(data_type, IntegerType):
            if data_type.min >= 0 and data_type.max <= 255:
                return int(self.value) & 0xFF
            raise InternalError("Integer range is too big for u8")
        raise InternalError(
            "Tried to convert value to u8 with unsupported value or data type"
        )

    def to_i64(self, data_type: DataType) -> int:
        """Return the value of a plain integer record."""
        if self.kind is ValueKind.INTEGER and isinstance(data_type, IntegerType):
            return int(self.value)
        raise InternalError("Tried to convert value to i64 with unsupported data type")

    def __str__(self) -> str:
        if self.kind is ValueKind.SINGLE:
            return _format_f32(self.value)
        if self.kind is ValueKind.DOUBLE:
            return _format_f64(self.value)
        return str(self.value)


def _serialize_data_type(data_type: DataType) -> tuple[str, str]:
    if isinstance(data_type, (SingleType, DoubleType)):
        if isinstance(data_type, SingleType):
            attrs = 'type="Float" precision="single"'
            fmt = _format_f32
        else:
            attrs = 'type="Float"'
            fmt = _format_f64
        if data_type.min is not None:
            attrs += f' minimum="{fmt(data_type.min)}"'
        if data_type.max is not None:
            attrs += f' maximum="{fmt(data_type.max)}"'
        value = fmt(0.0 if data_type.min is None else data_type.min)
        return attrs, value
    if isinstance(data_type, ScaledIntegerType):
        return (
            f'type="ScaledInteger" minimum="{data_type.min}" maximum="{data_type.max}" '
            f'scale="{_format_f64(data_type.scale)}" offset="{_format_f64(data_type.offset)}"',
            str(data_type.min),
        )
    return (
        f'type="Integer" minimum="{data_type.min}" maximum="{data_type.max}"',
        str(data_type.min),
    )


@dataclass(frozen=True)
class Record:
    """A point attribute described by its name and data type."""

    name: AnyRecordName
    data_type: DataType

    def xml_string(self) -> str:
        """Serialize the record as a prototype child element."""
        namespace = self.name.namespace
        prefix = "" if namespace is None else f"{namespace}:"
        tag = f"{prefix}{self.name.tag_name}"
        attrs, value = _serialize_data_type(self.data_type)
        return f"<{tag} {attrs}>{value}</{tag}>\n"


Record.CARTESIAN_X_F32 = Record(RecordName.CARTESIAN_X, F32)
Record.CARTESIAN_Y_F32 = Record(RecordName.CARTESIAN_Y, F32)
Record.CARTESIAN_Z_F32 = Record(RecordName.CARTESIAN_Z, F32)
Record.CARTESIAN_X_F64 = Record(RecordName.CARTESIAN_X, F64)
Record.CARTESIAN_Y_F64 = Record(RecordName.CARTESIAN_Y, F64)
Record.CARTESIAN_Z_F64 = Record(RecordName.CARTESIAN_Z, F64)
Record.COLOR_RED_U8 = Record(RecordName.COLOR_RED, U8)
Record.COLOR_GREEN_U8 = Record(RecordName.COLOR_GREEN, U8)
Record.COLOR_BLUE_U8 = Record(RecordName.COLOR_BLUE, U8)
Record.INTENSITY_U16 = Record(RecordName.INTENSITY, U16)
Record.COLOR_RED_UNIT_F32 = Record(RecordName.COLOR_RED, UNIT_F32)
Record.COLOR_GREEN_UNIT_F32 = Record(RecordName.COLOR_GREEN, UNIT_F32)
Record.COLOR_BLUE_UNIT_F32 = Record(RecordName.COLOR_BLUE, UNIT_F32)
Record.INTENSITY_UNIT_F32 = Record(RecordName.INTENSITY, UNIT_F32)
import math
import xml.etree.ElementTree as ET

import pytest

from e57meta.errors import InternalError, InvalidError, UnsupportedError
from e57meta.record import (
    DoubleType,
    IntegerType,
    Record,
    RecordName,
    RecordValue,
    ScaledIntegerType,
    SingleType,
    UnknownRecordName,
    ValueKind,
    data_type_from_element,
    integer_bits,
    record_name_from_tag,
)

I64_MIN = -9223372036854775808
I64_MAX = 9223372036854775807


def _element(text):
    return ET.fromstring(text)


def _parse_record_xml(xml):
    wrapped = f'<root xmlns:ext="http://example.com/ext">{xml}</root>'
    return ET.fromstring(wrapped)[0]


def test_standard_tag_maps_to_record_name():
    assert record_name_from_tag(None, "cartesianX") is RecordName.CARTESIAN_X


@pytest.mark.parametrize("name", list(RecordName))
def test_record_name_tag_round_trip(name):
    assert record_name_from_tag("ignored", name.tag_name) is name
    assert name.namespace is None


def test_unknown_tag_keeps_namespace():
    name = record_name_from_tag("nor", "normalX")
    assert name == UnknownRecordName("nor", "normalX")
    assert name.tag_name == "normalX"
    assert name.namespace == "nor"


def test_unknown_tag_without_namespace_gets_empty_namespace():
    assert record_name_from_tag(None, "custom").namespace == ""


@pytest.mark.parametrize(
    "low, high",
    [(0, 1), (0, 255), (-5, 5), (0, 65535), (0, 65536), (I64_MIN, I64_MAX)],
)
def test_integer_bits_covers_range(low, high):
    bits = integer_bits(low, high)
    span = high - low
    assert 2 ** (bits - 1) <= span < 2**bits


def test_integer_bits_zero_for_constant():
    assert integer_bits(42, 42) == integer_bits(-3, -3)
    assert integer_bits(42, 42) < integer_bits(42, 43)


def test_float_sizes():
    assert SingleType().bit_size() == 32
    assert DoubleType().bit_size() == 64


def test_integer_type_bit_size_matches_integer_bits():
    assert IntegerType(10, 1000).bit_size() == integer_bits(10, 1000)
    assert ScaledIntegerType(-7, 7).bit_size() == integer_bits(-7, 7)


def test_float_defaults_to_double():
    dt = data_type_from_element(_element('<x type="Float" minimum="-2.5" maximum="7.25"/>'))
    assert dt == DoubleType(-2.5, 7.25)


def test_single_precision_float():
    dt = data_type_from_element(
        _element('<x type="Float" precision="single" minimum="0.1"/>')
    )
    assert isinstance(dt, SingleType)
    assert dt.min == RecordValue(ValueKind.SINGLE, 0.1).value
    assert dt.max is None


def test_unknown_precision_is_invalid():
    with pytest.raises(InvalidError):
        data_type_from_element(_element('<x type="Float" precision="half"/>'))


def test_integer_defaults_to_full_range():
    dt = data_type_from_element(_element('<x type="Integer"/>'))
    assert dt == IntegerType(I64_MIN, I64_MAX)


def test_integer_max_below_min_is_invalid():
    with pytest.raises(InvalidError):
        data_type_from_element(_element('<x type="Integer" minimum="10" maximum="5"/>'))


def test_scaled_integer_defaults():
    dt = data_type_from_element(
        _element('<x type="ScaledInteger" minimum="-100" maximum="100"/>')
    )
    assert dt == ScaledIntegerType(-100, 100, 1.0, 0.0)


@pytest.mark.parametrize(
    "xml",
    [
        '<x type="Integer" minimum="abc"/>',
        '<x type="Integer" minimum=" 1"/>',
        '<x type="Integer" maximum="9223372036854775808"/>',
        '<x type="Float" minimum="1_0"/>',
        '<x type="ScaledInteger" scale="huge"/>',
    ],
)
def test_unparsable_attribute_is_invalid(xml):
    with pytest.raises(InvalidError):
        data_type_from_element(_element(xml))


def test_missing_type_is_invalid():
    with pytest.raises(InvalidError):
        data_type_from_element(_element("<cartesianX/>"))


def test_unsupported_type():
    with pytest.raises(UnsupportedError):
        data_type_from_element(_element('<x type="String"/>'))


def test_limits_of_types():
    assert IntegerType(3, 9).limits() == (
        RecordValue(ValueKind.INTEGER, 3),
        RecordValue(ValueKind.INTEGER, 9),
    )
    assert DoubleType(None, 2.0).limits() == (None, RecordValue(ValueKind.DOUBLE, 2.0))
    assert ScaledIntegerType(-1, 1).limits()[0] == RecordValue(ValueKind.SCALED_INTEGER, -1)


def test_to_f64_for_scaled_integer():
    value = RecordValue(ValueKind.SCALED_INTEGER, 3)
    assert value.to_f64(ScaledIntegerType(0, 10, 2.0, 1.0)) == 7.0
    assert RecordValue(ValueKind.SCALED_INTEGER, 7).to_f64(ScaledIntegerType(0, 10)) == 7.0


def test_to_f64_scaled_with_wrong_type():
    with pytest.raises(InternalError):
        RecordValue(ValueKind.SCALED_INTEGER, 3).to_f64(IntegerType(0, 10))


def test_to_f64_for_plain_values():
    assert RecordValue(ValueKind.DOUBLE, 1.5).to_f64(DoubleType()) == 1.5
    assert RecordValue(ValueKind.INTEGER, 12).to_f64(IntegerType()) == 12.0


def test_to_u8():
    assert RecordValue(ValueKind.INTEGER, 200).to_u8(IntegerType(0, 255)) == 200


@pytest.mark.parametrize(
    "value, data_type",
    [
        (RecordValue(ValueKind.INTEGER, 200), IntegerType(0, 65535)),
        (RecordValue(ValueKind.INTEGER, 1), IntegerType(-1, 255)),
        (RecordValue(ValueKind.SINGLE, 0.5), SingleType(0.0, 1.0)),
    ],
)
def test_to_u8_rejects(value, data_type):
    with pytest.raises(InternalError):
        value.to_u8(data_type)


def test_to_i64():
    assert RecordValue(ValueKind.INTEGER, -42).to_i64(IntegerType()) == -42
    with pytest.raises(InternalError):
        RecordValue(ValueKind.SCALED_INTEGER, 1).to_i64(ScaledIntegerType())


def test_value_display():
    assert str(RecordValue(ValueKind.DOUBLE, 1.5)) == "1.5"
    assert str(RecordValue(ValueKind.SINGLE, 0.1)) == "0.1"
    assert str(RecordValue(ValueKind.INTEGER, -17)) == "-17"


def test_large_double_display_has_no_exponent():
    text = str(RecordValue(ValueKind.DOUBLE, 1e20))
    assert "e" not in text.lower()
    assert float(text) == 1e20


def test_single_value_is_rounded():
    value = RecordValue(ValueKind.SINGLE, 0.1)
    assert value.value != 0.1
    assert math.isclose(value.value, 0.1, rel_tol=1e-7)


@pytest.mark.parametrize(
    "record",
    [
        Record.CARTESIAN_X_F32,
        Record.CARTESIAN_Y_F64,
        Record.COLOR_RED_U8,
        Record.INTENSITY_U16,
        Record.COLOR_BLUE_UNIT_F32,
        Record(RecordName.TIME_STAMP, DoubleType(-2.5, 1e20)),
        Record(RecordName.SPHERICAL_RANGE, SingleType(0.1, 100.5)),
        Record(RecordName.CARTESIAN_Z, ScaledIntegerType(-1000, 1000, 0.001, 5.0)),
        Record(UnknownRecordName("ext", "normalX"), IntegerType(1, 3)),
    ],
)
def test_record_xml_round_trip(record):
    xml = record.xml_string()
    assert xml.endswith("\n")
    element = _parse_record_xml(xml)
    assert data_type_from_element(element) == record.data_type
    assert element.tag.rpartition("}")[2] == record.name.tag_name


def test_record_xml_uses_namespace_prefix():
    xml = Record(UnknownRecordName("ext", "normalX"), IntegerType(1, 3)).xml_string()
    assert xml.startswith("<ext:normalX ")
    assert "</ext:normalX>" in xml


def test_integer_record_xml_text_is_minimum():
    element = _parse_record_xml(Record(RecordName.ROW_INDEX, IntegerType(4, 9)).xml_string())
    assert element.text == "4"
    assert element.get("type") == "Integer"
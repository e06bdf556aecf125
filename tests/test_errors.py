import pytest

from e57meta.errors import E57Error, InternalError, InvalidError, UnsupportedError


@pytest.mark.parametrize("error_class", [InvalidError, UnsupportedError, InternalError])
def test_specific_errors_are_caught_as_base_error(error_class):
    err = error_class("something went wrong")
    assert isinstance(err, E57Error)
    assert str(err) == "something went wrong"
    with pytest.raises(E57Error) as info:
        raise err
    assert info.value is err
    assert isinstance(info.value, error_class)


def test_invalid_error_is_a_value_error():
    err = InvalidError("bad value")
    assert isinstance(err, ValueError)
    assert isinstance(err, E57Error)
    assert str(err) == "bad value"


def test_unsupported_error_is_not_implemented_error():
    err = UnsupportedError("unknown type")
    assert isinstance(err, NotImplementedError)
    assert isinstance(err, E57Error)
    assert str(err) == "unknown type"


def test_internal_error_is_runtime_error():
    err = InternalError("misuse")
    assert isinstance(err, RuntimeError)
    assert isinstance(err, E57Error)
    assert str(err) == "misuse"


@pytest.mark.parametrize(
    "first, second",
    [
        (InvalidError, InternalError),
        (InvalidError, UnsupportedError),
        (InternalError, InvalidError),
        (InternalError, UnsupportedError),
        (UnsupportedError, InvalidError),
        (UnsupportedError, InternalError),
    ],
)
def test_errors_are_distinct(first, second):
    err = first("first")
    assert not isinstance(err, second)
    assert str(err) == "first"
"""Exceptions raised while reading or describing E57 metadata."""


class E57Error(Exception):
    """Base class for every error raised by this package."""


class InvalidError(E57Error, ValueError):
    """The data is malformed or breaks a rule of the E57 format."""


class UnsupportedError(E57Error, NotImplementedError):
    """The data uses a feature of the E57 format that is not supported."""


class InternalError(E57Error, RuntimeError):
    """An operation was used in a way its inputs do not allow."""
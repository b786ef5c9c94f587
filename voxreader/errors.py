"""Exceptions raised by VoxReader.

Every problem found while decoding a .vox file is a ValueError subclass, so
callers that only care about "bad file" can catch ValueError.
"""


class VoxError(ValueError):
    """Base class of all VoxReader errors."""


class FormatError(VoxError):
    """The .vox data does not follow the file format."""


class MagicMismatch(FormatError):
    pass


class UnsupportedVersion(FormatError):
    pass


class TruncatedInput(FormatError):
    """A declared size reaches past the end of the available bytes."""


class MalformedPairing(FormatError):
    """A SIZE chunk is not immediately followed by an XYZI chunk."""


class UnknownNodeTag(FormatError):
    pass


class DuplicateNodeId(FormatError):
    pass


class ReservedFieldViolation(FormatError):
    pass


class InvalidProjectionAxis(VoxError):
    pass


class ModelIndexOutOfRange(VoxError):
    pass

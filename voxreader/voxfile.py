"""VoxFile byte reading and the generic chunk tree.

The goal of this module is to turn the raw bytes of a MagicaVoxel .vox file
into a tree of untyped chunks. Interpreting what the chunks mean is left to
`voxreader.vox`; nothing here knows about models, palettes or scene nodes.
"""

import logging
from typing import Optional, Union

from voxreader.errors import FormatError, MagicMismatch, TruncatedInput, UnsupportedVersion

logger = logging.getLogger(__name__)

MAGIC = b"VOX "
SUPPORTED_VERSION = 150
CHUNK_HEADER_SIZE = 12

Dictionary = list[tuple[str, str]]


class ByteCursor:
    """Sequential reader over a byte buffer.

    Every read is checked against the bytes left in the buffer, so a bogus
    size field fails with TruncatedInput instead of reading garbage.
    """

    def __init__(self, data: Union[bytes, bytearray, memoryview], position: int = 0):
        self.data = bytes(data)
        self.position = position

    @property
    def remaining(self) -> int:
        return len(self.data) - self.position

    @property
    def at_end(self) -> bool:
        return self.position >= len(self.data)

    def _require(self, n: int):
        if n < 0:
            raise FormatError(f"Negative length {n} at offset {self.position:#x}")
        if n > self.remaining:
            raise TruncatedInput(
                f"Need {n} bytes at offset {self.position:#x}, only {self.remaining} left"
            )

    def seek(self, position: int):
        """Move to an absolute offset."""
        if position < 0 or position > len(self.data):
            raise TruncatedInput(
                f"Offset {position:#x} outside of {len(self.data)} byte buffer"
            )
        self.position = position

    def skip(self, n: int):
        self._require(n)
        self.position += n

    def peek_bytes(self, n: int) -> bytes:
        """Return the next n bytes without consuming them."""
        self._require(n)
        return self.data[self.position : self.position + n]

    def read_bytes(self, n: int) -> bytes:
        """Read n bytes."""
        bytes_ = self.peek_bytes(n)
        self.position += n
        return bytes_

    def read_uint8(self) -> int:
        return self.read_bytes(1)[0]

    def read_int32(self) -> int:
        """Read a signed little-endian 32-bit integer."""
        return int.from_bytes(self.read_bytes(4), "little", signed=True)

    def read_uint32(self) -> int:
        """Read an unsigned little-endian 32-bit integer."""
        return int.from_bytes(self.read_bytes(4), "little", signed=False)

    def read_count(self, what: str) -> int:
        """Read an int32 element count, rejecting negative values."""
        offset = self.position
        count = self.read_int32()
        if count < 0:
            raise FormatError(f"Negative {what} count {count} at offset {offset:#x}")
        return count

    def read_string(self) -> str:
        """Read a length-prefixed string.

        The bytes are not validated; undecodable bytes survive as surrogate
        escapes and can be recovered with `str.encode("utf-8", "surrogateescape")`.
        """
        length = self.read_int32()
        return self.read_bytes(length).decode("utf-8", "surrogateescape")

    def read_dict(self) -> Dictionary:
        """Read a dictionary.

        -------------------------------------------------------------------------------
        # Bytes  | Type       | Value
        -------------------------------------------------------------------------------
        4        | int        | num of key-value pairs
        // for each key-value pair
        {
        STRING   | key
        STRING   | value
        }xN
        -------------------------------------------------------------------------------

        Entries are kept as an ordered list of pairs since keys are neither
        sorted nor guaranteed to be unique.
        """
        entries = self.read_count("dictionary entry")
        return [(self.read_string(), self.read_string()) for _ in range(entries)]


def read_dictionary(buffer: bytes, offset: int = 0) -> tuple[Dictionary, int]:
    """Read a dictionary from buffer at offset, returning it with the new offset."""
    cursor = ByteCursor(buffer, offset)
    dict_ = cursor.read_dict()
    return dict_, cursor.position


def dict_get(dict_: Dictionary, key: str, default: Optional[str] = None) -> Optional[str]:
    """Return the first value stored under key."""
    for k, v in dict_:
        if k == key:
            return v
    return default


class Chunk:
    """Chunk class.

    -------------------------------------------------------------------------------
    # Bytes  | Type       | Value
    -------------------------------------------------------------------------------
    1x4      | char       | chunk id
    4        | int        | num bytes of chunk content (N)
    4        | int        | num bytes of children chunks (M)

    N        |            | chunk content

    M        |            | children chunks
    -------------------------------------------------------------------------------
    """

    def __init__(self, id: bytes, content: bytes, children: list["Chunk"], children_size: int):
        """Chunk constructor."""
        self.id = id
        self.content = content
        self.children = children
        self.children_size = children_size

    @property
    def tag(self) -> str:
        return self.id.decode("latin-1")

    @property
    def size(self) -> int:
        """Number of bytes the chunk occupies in the file, header included."""
        return CHUNK_HEADER_SIZE + len(self.content) + self.children_size

    def find(self, id: bytes) -> list["Chunk"]:
        """Return the direct children with the given id."""
        return [child for child in self.children if child.id == id]

    @classmethod
    def read(cls, cursor: ByteCursor) -> "Chunk":
        """Read a chunk and, recursively, its children from the cursor."""
        id = cursor.read_bytes(4)
        content_size = cursor.read_uint32()
        children_size = cursor.read_uint32()

        content = cursor.read_bytes(content_size)

        if children_size > cursor.remaining:
            raise TruncatedInput(
                f"Chunk {id!r} declares {children_size} bytes of children, "
                f"only {cursor.remaining} left"
            )

        children_start = cursor.position
        children = []
        while cursor.position - children_start < children_size:
            children.append(cls.read(cursor))

        # the declared children size wins over what the children used up
        consumed = cursor.position - children_start
        if consumed != children_size:
            logger.warning(
                "Chunk %r declares %d bytes of children but they used %d; "
                "continuing at the declared end",
                id,
                children_size,
                consumed,
            )
        cursor.seek(children_start + children_size)

        logger.debug(
            "Read chunk %r: %d content bytes, %d children",
            id,
            content_size,
            len(children),
        )
        return Chunk(id, content, children, children_size)


def read_header(cursor: ByteCursor) -> int:
    """Check the file magic and return the format version."""
    if cursor.data[cursor.position : cursor.position + 4] != MAGIC:
        raise MagicMismatch("Invalid .vox file header.")
    cursor.skip(4)

    version = cursor.read_int32()
    if version != SUPPORTED_VERSION:
        raise UnsupportedVersion(
            f"Unsupported .vox version {version}; expected {SUPPORTED_VERSION}"
        )
    return version


def decode_bytes(data: bytes) -> tuple[int, Chunk]:
    """Decode a whole .vox file into its version and root chunk."""
    cursor = ByteCursor(data)
    version = read_header(cursor)
    root = Chunk.read(cursor)
    if not cursor.at_end:
        logger.debug("Ignoring %d bytes after the root chunk", cursor.remaining)
    return version, root

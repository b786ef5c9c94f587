"""Volume data for VoxReader.

The goal of this module is to provide the decoded, Pythonic view of the voxel
data in a .vox file: colors, the palette they come from, and models made of
voxels.
"""

import logging
from typing import Iterator, NamedTuple, Sequence

from voxreader.errors import TruncatedInput
from voxreader.voxfile import ByteCursor

logger = logging.getLogger(__name__)

PALETTE_SIZE = 256


class Color(NamedTuple):
    """Color class.

    Packs to a 32-bit integer laid out as 0xAARRGGBB.
    """

    r: int
    g: int
    b: int
    a: int = 255

    def pack(self) -> int:
        return (self.a << 24) | (self.r << 16) | (self.g << 8) | self.b

    @classmethod
    def unpack(cls, packed: int) -> "Color":
        return cls(
            (packed >> 16) & 0xFF,
            (packed >> 8) & 0xFF,
            packed & 0xFF,
            (packed >> 24) & 0xFF,
        )

    @classmethod
    def from_bytes(cls, bytes_: bytes) -> "Color":
        """Read a color stored in file order: r, g, b, a."""
        r, g, b, a = bytes_
        return cls(r, g, b, a)

    def __str__(self):
        return f"{self.pack():08x}"


class Palette:
    """Palette class.

    Either the shared DEFAULT_PALETTE, which can not be modified, or a table
    owned by a single decoded scene.
    """

    def __init__(self, colors: Sequence[Color], default: bool = False):
        if len(colors) != PALETTE_SIZE:
            raise ValueError(f"Palette needs {PALETTE_SIZE} colors, got {len(colors)}")
        self.default = default
        self._colors = tuple(colors) if default else list(colors)

    @staticmethod
    def read(cursor: ByteCursor) -> "Palette":
        """Read a palette.

        -------------------------------------------------------------------------------
        # Bytes  | Type     | Value
        -------------------------------------------------------------------------------
        4 x 256  | int      | (R, G, B, A) : 1 byte for each component
        -------------------------------------------------------------------------------

        Entry i of the chunk becomes palette entry i, so a voxel's color index
        looks up the chunk entry of the same number.
        """
        if cursor.remaining < 4 * PALETTE_SIZE:
            raise TruncatedInput(
                f"RGBA chunk holds {cursor.remaining} bytes; expected {4 * PALETTE_SIZE}"
            )
        if cursor.remaining > 4 * PALETTE_SIZE:
            logger.warning(
                "Ignoring %d trailing bytes in RGBA chunk",
                cursor.remaining - 4 * PALETTE_SIZE,
            )
        return Palette(
            [Color.from_bytes(cursor.read_bytes(4)) for _ in range(PALETTE_SIZE)]
        )

    @property
    def is_default(self) -> bool:
        return self.default

    def copy(self) -> "Palette":
        """Return an owned, modifiable copy."""
        return Palette(self._colors)

    def color_of(self, voxel: "Voxel") -> Color:
        return self._colors[voxel.color_index]

    def __getitem__(self, index: int) -> Color:
        return self._colors[index]

    def __setitem__(self, index: int, color: Color):
        if self.default:
            raise TypeError("The default palette can not be modified; copy() it first.")
        self._colors[index] = color

    def __len__(self):
        return len(self._colors)

    def __iter__(self) -> Iterator[Color]:
        return iter(self._colors)

    def __eq__(self, other):
        if not isinstance(other, Palette):
            return False
        return list(self._colors) == list(other._colors)


# MagicaVoxel's default palette as packed 0xAARRGGBB values
_DEFAULT_PALETTE_VALUES = [
    0x00000000, 0xffffffff, 0xffccffff, 0xff99ffff, 0xff66ffff, 0xff33ffff, 0xff00ffff, 0xffffccff,
    0xffccccff, 0xff99ccff, 0xff66ccff, 0xff33ccff, 0xff00ccff, 0xffff99ff, 0xffcc99ff, 0xff9999ff,
    0xff6699ff, 0xff3399ff, 0xff0099ff, 0xffff66ff, 0xffcc66ff, 0xff9966ff, 0xff6666ff, 0xff3366ff,
    0xff0066ff, 0xffff33ff, 0xffcc33ff, 0xff9933ff, 0xff6633ff, 0xff3333ff, 0xff0033ff, 0xffff00ff,
    0xffcc00ff, 0xff9900ff, 0xff6600ff, 0xff3300ff, 0xff0000ff, 0xffffffcc, 0xffccffcc, 0xff99ffcc,
    0xff66ffcc, 0xff33ffcc, 0xff00ffcc, 0xffffcccc, 0xffcccccc, 0xff99cccc, 0xff66cccc, 0xff33cccc,
    0xff00cccc, 0xffff99cc, 0xffcc99cc, 0xff9999cc, 0xff6699cc, 0xff3399cc, 0xff0099cc, 0xffff66cc,
    0xffcc66cc, 0xff9966cc, 0xff6666cc, 0xff3366cc, 0xff0066cc, 0xffff33cc, 0xffcc33cc, 0xff9933cc,
    0xff6633cc, 0xff3333cc, 0xff0033cc, 0xffff00cc, 0xffcc00cc, 0xff9900cc, 0xff6600cc, 0xff3300cc,
    0xff0000cc, 0xffffff99, 0xffccff99, 0xff99ff99, 0xff66ff99, 0xff33ff99, 0xff00ff99, 0xffffcc99,
    0xffcccc99, 0xff99cc99, 0xff66cc99, 0xff33cc99, 0xff00cc99, 0xffff9999, 0xffcc9999, 0xff999999,
    0xff669999, 0xff339999, 0xff009999, 0xffff6699, 0xffcc6699, 0xff996699, 0xff666699, 0xff336699,
    0xff006699, 0xffff3399, 0xffcc3399, 0xff993399, 0xff663399, 0xff333399, 0xff003399, 0xffff0099,
    0xffcc0099, 0xff990099, 0xff660099, 0xff330099, 0xff000099, 0xffffff66, 0xffccff66, 0xff99ff66,
    0xff66ff66, 0xff33ff66, 0xff00ff66, 0xffffcc66, 0xffcccc66, 0xff99cc66, 0xff66cc66, 0xff33cc66,
    0xff00cc66, 0xffff9966, 0xffcc9966, 0xff999966, 0xff669966, 0xff339966, 0xff009966, 0xffff6666,
    0xffcc6666, 0xff996666, 0xff666666, 0xff336666, 0xff006666, 0xffff3366, 0xffcc3366, 0xff993366,
    0xff663366, 0xff333366, 0xff003366, 0xffff0066, 0xffcc0066, 0xff990066, 0xff660066, 0xff330066,
    0xff000066, 0xffffff33, 0xffccff33, 0xff99ff33, 0xff66ff33, 0xff33ff33, 0xff00ff33, 0xffffcc33,
    0xffcccc33, 0xff99cc33, 0xff66cc33, 0xff33cc33, 0xff00cc33, 0xffff9933, 0xffcc9933, 0xff999933,
    0xff669933, 0xff339933, 0xff009933, 0xffff6633, 0xffcc6633, 0xff996633, 0xff666633, 0xff336633,
    0xff006633, 0xffff3333, 0xffcc3333, 0xff993333, 0xff663333, 0xff333333, 0xff003333, 0xffff0033,
    0xffcc0033, 0xff990033, 0xff660033, 0xff330033, 0xff000033, 0xffffff00, 0xffccff00, 0xff99ff00,
    0xff66ff00, 0xff33ff00, 0xff00ff00, 0xffffcc00, 0xffcccc00, 0xff99cc00, 0xff66cc00, 0xff33cc00,
    0xff00cc00, 0xffff9900, 0xffcc9900, 0xff999900, 0xff669900, 0xff339900, 0xff009900, 0xffff6600,
    0xffcc6600, 0xff996600, 0xff666600, 0xff336600, 0xff006600, 0xffff3300, 0xffcc3300, 0xff993300,
    0xff663300, 0xff333300, 0xff003300, 0xffff0000, 0xffcc0000, 0xff990000, 0xff660000, 0xff330000,
    0xff0000ee, 0xff0000dd, 0xff0000bb, 0xff0000aa, 0xff000088, 0xff000077, 0xff000055, 0xff000044,
    0xff000022, 0xff000011, 0xff00ee00, 0xff00dd00, 0xff00bb00, 0xff00aa00, 0xff008800, 0xff007700,
    0xff005500, 0xff004400, 0xff002200, 0xff001100, 0xffee0000, 0xffdd0000, 0xffbb0000, 0xffaa0000,
    0xff880000, 0xff770000, 0xff550000, 0xff440000, 0xff220000, 0xff110000, 0xffeeeeee, 0xffdddddd,
    0xffbbbbbb, 0xffaaaaaa, 0xff888888, 0xff777777, 0xff555555, 0xff444444, 0xff222222, 0xff111111,
]

DEFAULT_PALETTE = Palette(
    [Color.unpack(value) for value in _DEFAULT_PALETTE_VALUES],
    default=True,
)


class Voxel(NamedTuple):
    """A single voxel; color_index indexes the palette as stored in the file."""

    x: int
    y: int
    z: int
    color_index: int


class Model:
    """Model class.

    A bounding box of size (x, y, z) and the sparse list of voxels inside it.
    """

    def __init__(self, size: tuple[int, int, int], voxels: list[Voxel]):
        self.size = size
        self.voxels = voxels

    @property
    def size_x(self) -> int:
        return self.size[0]

    @property
    def size_y(self) -> int:
        return self.size[1]

    @property
    def size_z(self) -> int:
        return self.size[2]

    def in_bounds(self, voxel: Voxel) -> bool:
        return all(0 <= voxel[i] < self.size[i] for i in range(3))

    @staticmethod
    def read(size_cursor: ByteCursor, xyzi_cursor: ByteCursor) -> "Model":
        """Read a model from the contents of a SIZE chunk and its XYZI chunk.

        SIZE
        -------------------------------------------------------------------------------
        # Bytes  | Type       | Value
        -------------------------------------------------------------------------------
        4        | int        | size x
        4        | int        | size y
        4        | int        | size z : gravity direction
        -------------------------------------------------------------------------------

        XYZI
        -------------------------------------------------------------------------------
        # Bytes  | Type       | Value
        -------------------------------------------------------------------------------
        4        | int        | numVoxels (N)
        4 x N    | int        | (x, y, z, colorIndex) : 1 byte for each component
        -------------------------------------------------------------------------------
        """
        size = (
            size_cursor.read_count("size x"),
            size_cursor.read_count("size y"),
            size_cursor.read_count("size z"),
        )

        num_voxels = xyzi_cursor.read_count("voxel")
        data = xyzi_cursor.read_bytes(4 * num_voxels)

        voxels = [Voxel(*data[i : i + 4]) for i in range(0, len(data), 4)]

        model = Model(size, voxels)
        outside = sum(1 for voxel in voxels if not model.in_bounds(voxel))
        if outside:
            logger.warning("%d voxels lie outside the model bounds %s", outside, size)

        return model

    def __repr__(self):
        return f"Model(size={self.size}, voxels={len(self.voxels)})"

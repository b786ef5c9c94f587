"""2D views of a model.

`project` flattens a model along one axis and keeps, for every cell of the
resulting grid, the voxel nearest to a viewer looking along that axis.
"""

import enum
import logging
from typing import Optional, Union

from voxreader.errors import InvalidProjectionAxis
from voxreader.volume import Model, Voxel

logger = logging.getLogger(__name__)


class Viewport(enum.Enum):
    """Model side to be looked at: (column axis, row axis)."""

    XZ = "XZ"
    XY = "XY"
    YZ = "YZ"


class ViewFlags(enum.IntFlag):
    NONE = 0
    INVERT_UP = 0x1  # the lowest voxel is drawn as the highest
    FROM_BEHIND = 0x2  # look at the model from its back side
    SWAP_AXIS = 0x4  # exchange columns and rows


# column axis, row axis, depth axis
_AXES = {
    Viewport.XZ: (0, 2, 1),
    Viewport.XY: (0, 1, 2),
    Viewport.YZ: (1, 2, 0),
}

View = list[list[Optional[Voxel]]]


def _viewport(viewport: Union[Viewport, str]) -> Viewport:
    try:
        return Viewport(viewport)
    except ValueError:
        raise InvalidProjectionAxis(f"Unknown 2D viewport: {viewport!r}") from None


def view_shape(model: Model, viewport: Union[Viewport, str], flags: int = 0) -> tuple[int, int]:
    """Return the (columns, rows) of the view of model."""
    column_axis, row_axis, _ = _AXES[_viewport(viewport)]
    columns, rows = model.size[column_axis], model.size[row_axis]
    if flags & ViewFlags.SWAP_AXIS:
        columns, rows = rows, columns
    return columns, rows


def project(model: Model, viewport: Union[Viewport, str], flags: int = 0) -> View:
    """Create the 2D view of model seen from viewport.

    The result is indexed as view[column][row] and holds None where no
    voxel is seen. When several voxels land in one cell the one with the
    lowest depth wins, or the highest with FROM_BEHIND; on equal depth the
    voxel listed first stays.
    """
    viewport = _viewport(viewport)
    flags = ViewFlags(flags)
    column_axis, row_axis, depth_axis = _AXES[viewport]
    invert_up = bool(flags & ViewFlags.INVERT_UP)
    from_behind = bool(flags & ViewFlags.FROM_BEHIND)

    columns, rows = view_shape(model, viewport, flags)
    view: View = [[None] * rows for _ in range(columns)]

    for voxel in model.voxels:
        if not model.in_bounds(voxel):
            logger.debug("Skipping voxel %r outside of model bounds %s", voxel, model.size)
            continue

        column = voxel[column_axis]
        if from_behind:
            column = model.size[column_axis] - column - 1
        row = voxel[row_axis]
        if invert_up:
            row = model.size[row_axis] - row - 1
        if flags & ViewFlags.SWAP_AXIS:
            column, row = row, column

        other = view[column][row]
        if other is None:
            view[column][row] = voxel
            continue

        depth, other_depth = voxel[depth_axis], other[depth_axis]
        nearer = depth > other_depth if from_behind else depth < other_depth
        if nearer:
            view[column][row] = voxel

    return view

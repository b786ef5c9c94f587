from voxreader import errors, projection, scene, volume, vox, voxfile
from voxreader.errors import (
    DuplicateNodeId,
    FormatError,
    InvalidProjectionAxis,
    MagicMismatch,
    MalformedPairing,
    ModelIndexOutOfRange,
    ReservedFieldViolation,
    TruncatedInput,
    UnknownNodeTag,
    UnsupportedVersion,
    VoxError,
)
from voxreader.projection import ViewFlags, Viewport, project
from voxreader.scene import GroupNode, Layer, Material, SceneGraph, ShapeNode, TransformNode
from voxreader.volume import DEFAULT_PALETTE, Color, Model, Palette, Voxel
from voxreader.vox import DecodedScene, VoxReader, format_scene, interpret, read

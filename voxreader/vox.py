"""Vox reader for VoxReader.

The goal of this module is to turn the chunk tree of a MagicaVoxel .vox file
into a DecodedScene: the models, the palette, the scene graph, layers and
materials, in a more Pythonic shape than the raw chunks.
"""

import logging
import os
from typing import BinaryIO, Optional, Union

from voxreader import voxfile
from voxreader.errors import MalformedPairing, ModelIndexOutOfRange, UnknownNodeTag
from voxreader.projection import View, Viewport, project
from voxreader.scene import NODE_CLASSES, Layer, Material, Node, SceneGraph, get_by_id, store_by_id
from voxreader.volume import DEFAULT_PALETTE, Model, Palette
from voxreader.voxfile import ByteCursor, Chunk

logger = logging.getLogger(__name__)


class DecodedScene:
    """Everything decoded from one .vox file.

    Chunk 'MAIN'
    {
        // pack of models
        Chunk 'PACK'    : optional

        // models
        Chunk 'SIZE'
        Chunk 'XYZI'

        ...

        // palette
        Chunk 'RGBA'    : optional

        // scene graph, layers, materials
        Chunk 'nTRN' / 'nGRP' / 'nSHP' / 'LAYR' / 'MATL'    : optional
    }
    """

    def __init__(self, max_id: Optional[int] = None):
        self.models: list[Model] = []
        self.palette: Palette = DEFAULT_PALETTE
        self.scene_graph = SceneGraph(max_id)
        self.max_id = max_id
        self.layers: list[Optional[Layer]] = []
        self.materials: list[Optional[Material]] = []
        self.model_count_declared: Optional[int] = None

    def get_model(self, model_index: int) -> Model:
        if model_index < 0 or model_index >= len(self.models):
            raise ModelIndexOutOfRange(
                f"Model index {model_index} out of range; {len(self.models)} models loaded"
            )
        return self.models[model_index]

    def get_node(self, node_id: int) -> Optional[Node]:
        return self.scene_graph.get_node(node_id)

    @property
    def root(self) -> Optional[Node]:
        return self.scene_graph.root

    def get_layer(self, layer_id: int) -> Optional[Layer]:
        return get_by_id(self.layers, layer_id)

    def get_material(self, material_id: int) -> Optional[Material]:
        return get_by_id(self.materials, material_id)

    def view2d(
        self, viewport: Union[Viewport, str], flags: int = 0, model_index: int = 0
    ) -> View:
        """Create the 2D view of a model; see `voxreader.projection.project`."""
        return project(self.get_model(model_index), viewport, flags)


def interpret(main: Chunk) -> DecodedScene:
    """Build a DecodedScene from the children of the root chunk."""
    # a file can not hold more nodes, layers or materials than it has bytes
    scene = DecodedScene(max_id=main.size)
    children = main.children

    i = 0
    if children and children[0].id == b"PACK":
        scene.model_count_declared = ByteCursor(children[0].content).read_int32()
        i += 1

    while i < len(children):
        chunk = children[i]
        i += 1

        if chunk.id == b"SIZE":
            if i >= len(children) or children[i].id != b"XYZI":
                following = children[i].id if i < len(children) else None
                raise MalformedPairing(
                    f"Invalid chunk ID: {following!r}; expected b'XYZI' following b'SIZE'"
                )
            xyzi = children[i]
            i += 1
            model = Model.read(ByteCursor(chunk.content), ByteCursor(xyzi.content))
            scene.models += [model]
            logger.debug("Read model %d: %r", len(scene.models) - 1, model)
        elif chunk.id == b"RGBA":
            scene.palette = Palette.read(ByteCursor(chunk.content))
            logger.debug("Read palette")
        elif chunk.id[:1] == b"n":
            if chunk.id not in NODE_CLASSES:
                raise UnknownNodeTag(f"Unknown scene graph node chunk {chunk.id!r}")
            scene.scene_graph.read_node(chunk.id, ByteCursor(chunk.content))
        elif chunk.id == b"LAYR":
            layer = Layer.read(ByteCursor(chunk.content))
            store_by_id(scene.layers, layer.layer_id, layer, scene.max_id)
            logger.debug("Read %r", layer)
        elif chunk.id == b"MATL":
            material = Material.read(ByteCursor(chunk.content))
            store_by_id(scene.materials, material.material_id, material, scene.max_id)
            logger.debug("Read %r", material)
        else:
            logger.debug("Skipping chunk %r", chunk.id)

    if (
        scene.model_count_declared is not None
        and scene.model_count_declared != len(scene.models)
    ):
        logger.warning(
            "PACK chunk declares %d models but %d were read",
            scene.model_count_declared,
            len(scene.models),
        )

    return scene


class VoxReader:
    """VoxReader class.

    Holds the scene of the most recently loaded .vox file. Every load starts
    from an empty scene; a load that fails leaves it empty.
    """

    def __init__(self):
        self.version: Optional[int] = None
        self.scene = DecodedScene()

    def load(self, data: Union[bytes, bytearray, memoryview, BinaryIO]) -> DecodedScene:
        """Read .vox data from bytes or a binary stream, discarding the current scene."""
        self.version = None
        self.scene = DecodedScene()

        if not isinstance(data, (bytes, bytearray, memoryview)):
            data = data.read()

        version, main = voxfile.decode_bytes(data)
        scene = interpret(main)

        self.version = version
        self.scene = scene
        return scene

    def load_file(self, path: Union[str, os.PathLike]) -> DecodedScene:
        """Read a .vox file from the given path."""
        with open(path, "rb") as f:
            return self.load(f.read())

    @property
    def models(self) -> list[Model]:
        return self.scene.models

    @property
    def palette(self) -> Palette:
        return self.scene.palette

    @property
    def scene_graph(self) -> SceneGraph:
        return self.scene.scene_graph

    @property
    def layers(self) -> list[Optional[Layer]]:
        return self.scene.layers

    @property
    def materials(self) -> list[Optional[Material]]:
        return self.scene.materials

    def view2d(
        self, viewport: Union[Viewport, str], flags: int = 0, model_index: int = 0
    ) -> View:
        return self.scene.view2d(viewport, flags, model_index)


def read(path: Union[str, os.PathLike]) -> DecodedScene:
    """Read a .vox file from the given path."""
    return VoxReader().load_file(path)


def format_dictionary(dict_: voxfile.Dictionary) -> str:
    return "{" + ", ".join(f"{k}: {v}" for k, v in dict_) + "}"


def format_scene(scene: DecodedScene) -> str:
    """Return a human readable dump of scene."""
    lines = ["VOXEL-OBJECT:", f"Num models: {len(scene.models)}"]
    for model in scene.models:
        x, y, z = model.size
        lines.append(f"Model:  size({x},{y},{z})")
        for voxel in model.voxels:
            lines.append(
                f"   Voxel: {voxel.x:02},{voxel.y:02},{voxel.z:02},"
                f"   color={voxel.color_index:02}"
            )

    lines.append("Palette: " + ("(DEFAULT)" if scene.palette.is_default else ""))
    colors = [str(color) for color in scene.palette]
    for i in range(0, len(colors), 16):
        lines.append("   " + "  ".join(colors[i : i + 16]))

    if len(scene.scene_graph):
        lines.append("Scene graph:")
        for node_id, node in scene.scene_graph:
            lines.append(f"   {node_id}: {node!r} {format_dictionary(node.attributes)}")

    for layer in scene.layers:
        if layer is not None:
            lines.append(f"Layer {layer.layer_id}: {format_dictionary(layer.attributes)}")

    for material in scene.materials:
        if material is not None:
            lines.append(
                f"Material {material.material_id}: {format_dictionary(material.properties)}"
            )

    return "\n".join(lines)


def format_view(view: View) -> str:
    """Draw a view as text, one line per view column."""
    return "\n".join(
        "".join(" " if voxel is None else "X" for voxel in column) for column in view
    )

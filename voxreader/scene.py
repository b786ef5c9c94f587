"""Scene graph, layers and materials for VoxReader.

A MagicaVoxel scene graph is a forest of nodes addressed by id:

         T         T : TransformNode
         |         G : GroupNode
         G         S : ShapeNode
        / \\
       T   T
       |   |
       G   S
      / \\
     T   T
     |   |
     S   S

Node 0 is the root. Child and model ids are stored as read; whether they
point at anything is for the caller to find out.
"""

import enum
import logging
from typing import Iterator, Optional, Union

from voxreader.errors import DuplicateNodeId, FormatError, ReservedFieldViolation
from voxreader.voxfile import ByteCursor, Dictionary

logger = logging.getLogger(__name__)

NodeId = int


class NodeType(enum.Enum):
    TRANSFORM = "nTRN"
    GROUP = "nGRP"
    SHAPE = "nSHP"


class TransformNode:
    """Transform node class.

    int32	: node id
    DICT	: node attributes
        (_name : string)
        (_hidden : 0/1)
    int32 	: child node id
    int32 	: reserved id (must be -1)
    int32	: layer id
    int32	: num of frames (must be greater than 0)

    // for each frame
    {
    DICT	: frame attributes
        (_r : int8)    ROTATION
        (_t : int32x3) translation
        (_f : int32)   frame index, start from 0
    }xN
    """

    type = NodeType.TRANSFORM

    def __init__(
        self,
        node_id: NodeId,
        attributes: Dictionary,
        child_node_id: NodeId,
        layer_id: int,
        frames: list[Dictionary],
    ):
        """TransformNode constructor."""
        self.node_id = node_id
        self.attributes = attributes
        self.child_node_id = child_node_id
        self.layer_id = layer_id
        self.frames = frames

    @classmethod
    def read(cls, cursor: ByteCursor) -> "TransformNode":
        node_id = cursor.read_int32()
        attributes = cursor.read_dict()
        child_node_id = cursor.read_int32()
        reserved_id = cursor.read_int32()
        if reserved_id != -1:
            raise ReservedFieldViolation(
                f"Invalid reserved id {reserved_id} in transform node {node_id}; expected -1"
            )
        layer_id = cursor.read_int32()
        num_frames = cursor.read_count("frame")

        frames = [cursor.read_dict() for _ in range(num_frames)]

        return TransformNode(node_id, attributes, child_node_id, layer_id, frames)

    def __repr__(self):
        return f"TransformNode({self.node_id} -> {self.child_node_id}, layer={self.layer_id})"


class GroupNode:
    """Group node class.

    int32	: node id
    DICT	: node attributes
    int32 	: num of children nodes

    // for each child
    {
    int32	: child node id
    }xN
    """

    type = NodeType.GROUP

    def __init__(self, node_id: NodeId, attributes: Dictionary, child_node_ids: list[NodeId]):
        """GroupNode constructor."""
        self.node_id = node_id
        self.attributes = attributes
        self.child_node_ids = child_node_ids

    @classmethod
    def read(cls, cursor: ByteCursor) -> "GroupNode":
        node_id = cursor.read_int32()
        attributes = cursor.read_dict()
        num_children = cursor.read_count("child node")

        child_node_ids = [cursor.read_int32() for _ in range(num_children)]

        return GroupNode(node_id, attributes, child_node_ids)

    def __repr__(self):
        return f"GroupNode({self.node_id} -> {self.child_node_ids})"


class ShapeModel:
    """A model referenced by a shape node, with the attributes to display it."""

    def __init__(self, model_id: int, attributes: Dictionary):
        self.model_id = model_id
        self.attributes = attributes

    def __repr__(self):
        return f"ShapeModel({self.model_id}, {self.attributes})"


class ShapeNode:
    """Shape node class.

    int32	: node id
    DICT	: node attributes
    int32 	: num of models (must be greater than 0)

    // for each model
    {
    int32	: model id
    DICT	: model attributes : reserved
        (_f : int32)   frame index, start from 0
    }xN
    """

    type = NodeType.SHAPE

    def __init__(self, node_id: NodeId, attributes: Dictionary, models: list[ShapeModel]):
        """ShapeNode constructor."""
        self.node_id = node_id
        self.attributes = attributes
        self.models = models

    @classmethod
    def read(cls, cursor: ByteCursor) -> "ShapeNode":
        node_id = cursor.read_int32()
        attributes = cursor.read_dict()
        num_models = cursor.read_count("model")

        models = []
        for _ in range(num_models):
            model_id = cursor.read_int32()
            model_attributes = cursor.read_dict()
            models += [ShapeModel(model_id, model_attributes)]

        return ShapeNode(node_id, attributes, models)

    def __repr__(self):
        return f"ShapeNode({self.node_id}, models={[m.model_id for m in self.models]})"


Node = Union[TransformNode, GroupNode, ShapeNode]

NODE_CLASSES = {
    b"nTRN": TransformNode,
    b"nGRP": GroupNode,
    b"nSHP": ShapeNode,
}


class SceneGraph:
    """Scene graph class.

    Nodes are stored in a list indexed by node id; ids that were never
    assigned hold None. Ids above max_id are rejected.
    """

    def __init__(self, max_id: Optional[int] = None):
        self.nodes: list[Optional[Node]] = []
        self.max_id = max_id

    def add_node(self, node: Node) -> Node:
        """Store node under its id."""
        if self.get_node(node.node_id) is not None:
            raise DuplicateNodeId(f"Scene graph node {node.node_id} defined twice")
        store_by_id(self.nodes, node.node_id, node, self.max_id)
        logger.debug("Added scene graph node %r", node)
        return node

    def read_node(self, id: bytes, cursor: ByteCursor) -> Node:
        """Read a node of the kind named by the chunk id and store it."""
        return self.add_node(NODE_CLASSES[id].read(cursor))

    def get_node(self, node_id: NodeId) -> Optional[Node]:
        """Return the node with the given id, or None when there is none."""
        if node_id < 0 or node_id >= len(self.nodes):
            return None
        return self.nodes[node_id]

    @property
    def root(self) -> Optional[Node]:
        return self.get_node(0)

    def __len__(self):
        return sum(1 for node in self.nodes if node is not None)

    def __iter__(self) -> Iterator[tuple[NodeId, Node]]:
        for node_id, node in enumerate(self.nodes):
            if node is not None:
                yield node_id, node


class Layer:
    """Layer class.

    int32	: layer id
    DICT	: layer attribute
        (_name : string)
        (_hidden : 0/1)
    int32	: reserved id, must be -1
    """

    def __init__(self, layer_id: int, attributes: Dictionary):
        self.layer_id = layer_id
        self.attributes = attributes

    @classmethod
    def read(cls, cursor: ByteCursor) -> "Layer":
        # the trailing reserved id is not checked, older files leave it out
        layer_id = cursor.read_int32()
        attributes = cursor.read_dict()
        return Layer(layer_id, attributes)

    def __repr__(self):
        return f"Layer({self.layer_id}, {self.attributes})"


class Material:
    """Material class.

    int32	: material id
    DICT	: material properties
          (_type : str) _diffuse, _metal, _glass, _emit
          (_weight : float) range 0 ~ 1
          (_rough : float)
          (_spec : float)
          (_ior : float)
          (_att : float)
          (_flux : float)
          (_plastic)
    """

    def __init__(self, material_id: int, properties: Dictionary):
        self.material_id = material_id
        self.properties = properties

    @classmethod
    def read(cls, cursor: ByteCursor) -> "Material":
        material_id = cursor.read_int32()
        properties = cursor.read_dict()
        return Material(material_id, properties)

    def __repr__(self):
        return f"Material({self.material_id}, {self.properties})"


def store_by_id(items: list, item_id: int, item, max_id: Optional[int] = None):
    """Store item at item_id, growing the list with None as needed.

    max_id bounds the growth, so a corrupt id can not allocate a huge list.
    """
    if item_id < 0 or (max_id is not None and item_id > max_id):
        raise FormatError(f"Invalid id {item_id} for {type(item).__name__}")
    if item_id >= len(items):
        items.extend([None] * (item_id + 1 - len(items)))
    items[item_id] = item


def get_by_id(items: list, item_id: int):
    if item_id < 0 or item_id >= len(items):
        return None
    return items[item_id]

import io
import logging

import pytest

import voxreader

from voxbuilder import chunk, group, int32, layer, material, model, pack, rgba, shape, transform, vox


def test_load_single_model():
    reader = voxreader.VoxReader()
    scene = reader.load(vox(pack(1), model((2, 2, 2), [(0, 0, 0, 5)])))

    assert reader.version == 150
    assert scene is reader.scene
    assert len(reader.models) == 1
    assert reader.models[0].size == (2, 2, 2)
    assert reader.models[0].voxels == [voxreader.Voxel(0, 0, 0, 5)]
    assert reader.palette is voxreader.DEFAULT_PALETTE
    assert scene.model_count_declared == 1


def test_load_custom_palette():
    colors = [(0, 0, 0, 0)] * 256
    colors[5] = (10, 20, 30, 255)

    reader = voxreader.VoxReader()
    reader.load(vox(pack(1), model((2, 2, 2), [(0, 0, 0, 5)]), rgba(colors)))

    assert reader.palette[5] == voxreader.Color(r=10, g=20, b=30, a=255)
    assert reader.palette.color_of(reader.models[0].voxels[0]) == reader.palette[5]
    assert reader.palette is not voxreader.DEFAULT_PALETTE
    assert not reader.palette.is_default

    reader.palette[5] = voxreader.Color(1, 1, 1)
    assert voxreader.DEFAULT_PALETTE[5] != voxreader.Color(1, 1, 1)


def test_load_without_pack():
    scene = voxreader.VoxReader().load(
        vox(model((1, 1, 1), [(0, 0, 0, 1)]), model((3, 2, 1), []))
    )

    assert [m.size for m in scene.models] == [(1, 1, 1), (3, 2, 1)]
    assert scene.models[1].voxels == []
    assert scene.model_count_declared is None


def test_load_empty_main():
    scene = voxreader.VoxReader().load(vox())
    assert scene.models == []
    assert scene.root is None


def test_load_from_stream_and_file(tmp_path):
    data = vox(model((2, 2, 2), [(1, 1, 1, 3)]))

    from_stream = voxreader.VoxReader().load(io.BytesIO(data))

    path = tmp_path / "one.vox"
    path.write_bytes(data)
    from_file = voxreader.read(path)

    assert from_stream.models[0].voxels == from_file.models[0].voxels == [
        voxreader.Voxel(1, 1, 1, 3)
    ]


def test_load_skips_unknown_chunks():
    scene = voxreader.VoxReader().load(
        vox(
            pack(1),
            chunk(b"NOTE", int32(0)),
            model((2, 2, 2), [(1, 0, 1, 9)]),
            chunk(b"rOBJ", int32(0)),
            chunk(b"IMAP", bytes(256)),
        )
    )
    assert len(scene.models) == 1


def test_load_pack_count_mismatch_warns(caplog):
    with caplog.at_level(logging.WARNING):
        scene = voxreader.VoxReader().load(vox(pack(3), model((1, 1, 1), [])))
    assert len(scene.models) == 1
    assert "PACK chunk declares 3 models" in caplog.text


def test_load_layers_and_materials():
    scene = voxreader.VoxReader().load(
        vox(
            layer(0, {"_name": "ground"}),
            layer(3, [("_name", "top"), ("_hidden", "1")]),
            material(1, {"_type": "_metal", "_weight": "0.5"}),
        )
    )

    assert len(scene.layers) == 4
    assert scene.get_layer(0).attributes == [("_name", "ground")]
    assert scene.get_layer(3).attributes == [("_name", "top"), ("_hidden", "1")]
    assert scene.get_layer(1) is None
    assert scene.get_layer(4) is None
    assert scene.get_layer(-1) is None
    assert scene.get_material(1).properties == [("_type", "_metal"), ("_weight", "0.5")]
    assert scene.get_material(0) is None


def test_load_later_layer_replaces_earlier():
    scene = voxreader.VoxReader().load(vox(layer(2, {"_name": "a"}), layer(2, {"_name": "b"})))
    assert scene.get_layer(2).attributes == [("_name", "b")]


def test_load_scene_graph():
    scene = voxreader.VoxReader().load(
        vox(
            model((1, 1, 1), [(0, 0, 0, 1)]),
            transform(0, 1),
            group(1, [2]),
            transform(2, 3, layer_id=1, frames=[{"_t": "1 2 3"}]),
            shape(3, [(0, {})]),
        )
    )

    assert len(scene.scene_graph) == 4
    assert isinstance(scene.root, voxreader.TransformNode)
    assert isinstance(scene.get_node(1), voxreader.GroupNode)
    assert scene.get_node(2).frames == [[("_t", "1 2 3")]]
    assert scene.get_node(3).models[0].model_id == 0


def test_load_replaces_previous_state():
    colors = [(1, 2, 3, 4)] * 256
    reader = voxreader.VoxReader()
    reader.load(vox(model((1, 1, 1), []), rgba(colors), transform(0, 1), layer(0)))

    reader.load(vox(model((2, 2, 2), [])))

    assert [m.size for m in reader.models] == [(2, 2, 2)]
    assert reader.palette is voxreader.DEFAULT_PALETTE
    assert reader.scene_graph.root is None
    assert reader.layers == []


@pytest.mark.parametrize("cut", [10, 20, 26, 40])
def test_load_truncated(cut):
    data = vox(pack(1), model((2, 2, 2), [(0, 0, 0, 5)]))
    reader = voxreader.VoxReader()
    reader.load(data)

    with pytest.raises(voxreader.TruncatedInput):
        reader.load(data[:cut])

    assert reader.models == []
    assert reader.version is None


def test_load_size_without_xyzi():
    reader = voxreader.VoxReader()
    with pytest.raises(voxreader.MalformedPairing):
        reader.load(vox(chunk(b"SIZE", int32(1) + int32(1) + int32(1)), rgba([(0, 0, 0, 0)] * 256)))
    assert reader.models == []


def test_load_size_at_end():
    with pytest.raises(voxreader.MalformedPairing):
        voxreader.VoxReader().load(vox(chunk(b"SIZE", int32(1) + int32(1) + int32(1))))


def test_load_unknown_node():
    with pytest.raises(voxreader.UnknownNodeTag):
        voxreader.VoxReader().load(vox(chunk(b"nXYZ", int32(0))))


def test_load_duplicate_node():
    with pytest.raises(voxreader.DuplicateNodeId):
        voxreader.VoxReader().load(vox(transform(0, 1), group(0, [])))


def test_load_reserved_field():
    with pytest.raises(voxreader.ReservedFieldViolation):
        voxreader.VoxReader().load(vox(transform(0, 1, reserved=0)))


def test_load_bad_header():
    reader = voxreader.VoxReader()
    with pytest.raises(voxreader.MagicMismatch):
        reader.load(vox(magic=b"XOV "))
    with pytest.raises(voxreader.UnsupportedVersion):
        reader.load(vox(version=151))


def test_load_errors_are_value_errors():
    with pytest.raises(ValueError):
        voxreader.VoxReader().load(b"not a vox file")


def test_voxels_inside_bounds():
    voxels = [(x, y, z, 1 + x + y + z) for x in range(3) for y in range(2) for z in range(4)]
    scene = voxreader.VoxReader().load(vox(model((3, 2, 4), voxels)))

    decoded = scene.models[0]
    assert len(decoded.voxels) == 24
    assert len(set((v.x, v.y, v.z) for v in decoded.voxels)) == 24
    for voxel in decoded.voxels:
        assert 0 <= voxel.x < decoded.size_x
        assert 0 <= voxel.y < decoded.size_y
        assert 0 <= voxel.z < decoded.size_z


def test_format_scene():
    scene = voxreader.VoxReader().load(
        vox(model((2, 2, 2), [(0, 1, 0, 5)]), transform(0, 1, attributes={"_name": "root"}), layer(0, {"_name": "L"}))
    )

    text = voxreader.format_scene(scene)

    assert "Num models: 1" in text
    assert "Model:  size(2,2,2)" in text
    assert "Voxel: 00,01,00,   color=05" in text
    assert "Palette: (DEFAULT)" in text
    assert "_name: root" in text
    assert "Layer 0: {_name: L}" in text


@pytest.mark.parametrize(
    "chunk_bytes",
    [
        transform(2**31 - 1, 0),
        group(2**31 - 1, []),
        shape(2**31 - 1, [(0, {})]),
        layer(2**31 - 1),
        material(2**31 - 1),
    ],
)
def test_load_rejects_huge_ids(chunk_bytes):
    reader = voxreader.VoxReader()
    with pytest.raises(voxreader.FormatError):
        reader.load(vox(chunk_bytes))
    assert reader.layers == []
    assert reader.scene_graph.root is None

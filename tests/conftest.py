"""Shared fixtures: a small skinned character written to a GLB file"""

import pytest
import numpy as np
import pygltflib


def write_character(path):
    """Write a two-bone skinned character with one animation to a GLB file."""
    arrays = [
        (np.array([[0, 0, 0], [0, 1, 0]], dtype=np.float32), pygltflib.FLOAT, "VEC3"),
        (np.array([[0, 1, 0, 0], [1, 0, 0, 0]], dtype=np.uint16), pygltflib.UNSIGNED_SHORT, "VEC4"),
        (np.array([[0.7, 0.3, 0, 0], [0.5, 0.25, 0.25, 0]], dtype=np.float32), pygltflib.FLOAT, "VEC4"),
        (np.array([0.0, 1.0], dtype=np.float32), pygltflib.FLOAT, "SCALAR"),
        (np.array([[0, 0, 0, 1], [0, 0.7071068, 0, 0.7071068]], dtype=np.float32), pygltflib.FLOAT, "VEC4"),
        (np.array([[0, 0, 0], [0, 0.5, 0]], dtype=np.float32), pygltflib.FLOAT, "VEC3"),
    ]

    blob = b""
    buffer_views = []
    accessors = []
    for index, (array, component_type, accessor_type) in enumerate(arrays):
        data = array.tobytes()
        buffer_views.append(pygltflib.BufferView(buffer=0, byteOffset=len(blob), byteLength=len(data)))
        accessors.append(pygltflib.Accessor(
            bufferView=index,
            componentType=component_type,
            count=array.shape[0],
            type=accessor_type,
        ))
        blob += data

    gltf = pygltflib.GLTF2(
        scene=0,
        scenes=[pygltflib.Scene(nodes=[0])],
        nodes=[
            pygltflib.Node(name="Armature", children=[1, 3]),
            pygltflib.Node(name="mixamorigHips", children=[2], translation=[0.0, 1.0, 0.0]),
            pygltflib.Node(name="mixamorigSpine"),
            pygltflib.Node(name="Body", mesh=0, skin=0),
        ],
        meshes=[pygltflib.Mesh(primitives=[
            pygltflib.Primitive(attributes=pygltflib.Attributes(POSITION=0, JOINTS_0=1, WEIGHTS_0=2)),
        ])],
        skins=[pygltflib.Skin(joints=[1, 2])],
        animations=[pygltflib.Animation(
            name="Walk",
            samplers=[
                pygltflib.AnimationSampler(input=3, output=4),
                pygltflib.AnimationSampler(input=3, output=5, interpolation="STEP"),
            ],
            channels=[
                pygltflib.AnimationChannel(
                    sampler=0, target=pygltflib.AnimationChannelTarget(node=1, path="rotation")),
                pygltflib.AnimationChannel(
                    sampler=1, target=pygltflib.AnimationChannelTarget(node=2, path="translation")),
            ],
        )],
        accessors=accessors,
        bufferViews=buffer_views,
        buffers=[pygltflib.Buffer(byteLength=len(blob))],
    )
    gltf.set_binary_blob(blob)
    gltf.save_binary(str(path))
    return path


@pytest.fixture
def character_path(tmp_path):
    return write_character(tmp_path / "character.glb")


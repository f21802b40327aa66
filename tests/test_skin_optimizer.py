"""Tests for skin influence reduction"""

import pytest
import numpy as np

from animlib.core.buffer_attribute import BufferAttribute
from animlib.core.scene_graph import Bone, SceneNode, Skeleton, SkinnedMesh
from animlib.optimize.skin_optimizer import optimize_model, reduce_skin_influences


def make_mesh(indices, weights, name="Body"):
    return SkinnedMesh(
        name,
        Skeleton([Bone(f"Bone{i}") for i in range(4)]),
        BufferAttribute(indices, 4),
        BufferAttribute(weights, 4),
    )


def expected_influences(indices, weights, k):
    """Top-k positive (index, weight) pairs, highest first, ties in slot order."""
    pairs = [(i, w) for i, w in zip(indices, weights) if w > 0]
    return sorted(pairs, key=lambda pair: -pair[1])[:k]


def test_reduce_keeps_strongest_influences():
    """The strongest weights move to the front and are renormalized"""
    mesh = make_mesh([1, 2, 3, 4], [0.1, 0.6, 0.3, 0.0])
    reduce_skin_influences(mesh, 2)

    assert np.array_equal(mesh.skin_index.array, [2, 3, 0, 0])
    assert np.allclose(mesh.skin_weight.array, [0.6 / 0.9, 0.3 / 0.9, 0.0, 0.0])


def test_reduce_breaks_ties_by_slot_order():
    """Equal weights keep their original slot order"""
    mesh = make_mesh([4, 3, 2, 1], [0.25, 0.25, 0.25, 0.25])
    reduce_skin_influences(mesh, 2)

    assert np.array_equal(mesh.skin_index.array, [4, 3, 0, 0])
    assert np.allclose(mesh.skin_weight.array, [0.5, 0.5, 0.0, 0.0])


def test_reduce_compacts_when_under_limit():
    """Vertices under the limit are compacted and normalized"""
    mesh = make_mesh([5, 6, 7, 8], [0.0, 0.2, 0.0, 0.2])
    reduce_skin_influences(mesh, 4)

    assert np.array_equal(mesh.skin_index.array, [6, 8, 0, 0])
    assert np.allclose(mesh.skin_weight.array, [0.5, 0.5, 0.0, 0.0])


def test_reduce_leaves_degenerate_vertex_zeroed():
    """A vertex without positive weights stays all zero"""
    mesh = make_mesh([1, 2, 3, 4, 1, 2, 3, 4], [0, 0, 0, 0, 0.5, 0.5, 0, 0])
    reduce_skin_influences(mesh, 1)

    assert np.array_equal(mesh.skin_index.as_items()[0], [0, 0, 0, 0])
    assert np.array_equal(mesh.skin_weight.as_items()[0], [0, 0, 0, 0])
    assert np.array_equal(mesh.skin_index.as_items()[1], [1, 0, 0, 0])
    assert np.allclose(mesh.skin_weight.as_items()[1], [1.0, 0, 0, 0])


def test_reduce_weight_conservation():
    """Kept weights sum to one and at most k slots are used"""
    rng = np.random.default_rng(7)
    weights = rng.random((200, 4)).astype('f4')
    weights[rng.random((200, 4)) < 0.3] = 0.0
    weights[0] = 0.0
    had_influence = (weights > 0).any(axis=1)
    indices = np.arange(800).reshape(200, 4) % 60

    for k in (1, 2, 3, 4):
        mesh = make_mesh(indices, weights)
        reduce_skin_influences(mesh, k)
        result = mesh.skin_weight.as_items()

        sums = result.sum(axis=1)
        assert np.all(np.abs(sums[had_influence] - 1.0) < 1e-5)
        assert np.all(sums[~had_influence] == 0.0)
        assert np.all((result != 0).sum(axis=1) <= k)


def test_reduce_monotone_selection():
    """Kept influences are exactly the k largest, ties in original order"""
    rng = np.random.default_rng(11)
    weights = rng.choice([0.0, 0.1, 0.2, 0.4], size=(100, 4)).astype('f4')
    indices = np.arange(400).reshape(100, 4) % 50
    k = 2

    mesh = make_mesh(indices, weights)
    reduce_skin_influences(mesh, k)

    for vertex in range(100):
        expected = expected_influences(indices[vertex], weights[vertex], k)
        kept = len(expected)
        got_indices = mesh.skin_index.as_items()[vertex]
        got_weights = mesh.skin_weight.as_items()[vertex]

        assert list(got_indices[:kept]) == [i for i, _ in expected]
        assert np.all(got_weights[kept:] == 0.0)
        if kept:
            total = sum(w for _, w in expected)
            assert np.allclose(got_weights[:kept], [w / total for _, w in expected], atol=1e-6)


def test_reduce_marks_buffers_dirty():
    """Both buffers are flagged for re-upload"""
    mesh = make_mesh([0, 1, 2, 3], [0.4, 0.3, 0.2, 0.1])
    reduce_skin_influences(mesh, 2)

    assert mesh.skin_index.needs_update
    assert mesh.skin_weight.needs_update
    assert mesh.skin_weight.version == 1


def test_reduce_without_skin_buffers_is_noop():
    """Meshes missing a skin buffer are skipped"""
    indices = BufferAttribute([0, 1, 2, 3], 4)
    mesh = SkinnedMesh("Body", Skeleton(), skin_index=indices, skin_weight=None)
    reduce_skin_influences(mesh, 1)

    assert np.array_equal(indices.array, [0, 1, 2, 3])
    assert not indices.needs_update

    reduce_skin_influences(SkinnedMesh("Empty"), 1)


def test_reduce_rejects_invalid_limit():
    """A limit below one is a programming error"""
    with pytest.raises(ValueError):
        reduce_skin_influences(make_mesh([0, 1, 2, 3], [1, 0, 0, 0]), 0)


def test_optimize_model_visits_every_skinned_mesh():
    """All skinned meshes in the subtree are reduced"""
    root = SceneNode("Character")
    group = SceneNode("Group")
    body = make_mesh([0, 1, 2, 3], [0.4, 0.3, 0.2, 0.1], name="Body")
    head = make_mesh([3, 2, 1, 0], [0.1, 0.2, 0.3, 0.4], name="Head")
    group.add(head)
    root.add(body, group, SceneNode("Prop"))

    assert optimize_model(root, 1) == 2
    assert np.array_equal(body.skin_index.array, [0, 0, 0, 0])
    assert np.allclose(body.skin_weight.array, [1.0, 0, 0, 0])
    assert np.array_equal(head.skin_index.array, [0, 0, 0, 0])
    assert np.allclose(head.skin_weight.array, [1.0, 0, 0, 0])

"""
Skin Optimizer

Caps the number of bone influences per vertex for cheaper skinning.
"""

import logging
import numpy as np

from ..config import settings
from ..core.scene_graph import SceneNode, SkinnedMesh

logger = logging.getLogger(__name__)


def reduce_skin_influences(mesh: SkinnedMesh, max_influences: int = settings.DEFAULT_MAX_SKIN_INFLUENCES):
    """
    Keep only the strongest bone influences of every vertex.

    Positive weights are sorted highest first (ties keep their slot order),
    the top max_influences are renormalized to sum to 1 and written to the
    leading slots. Remaining slots are zeroed. Vertices without positive
    weights stay all zero. Both buffers are marked dirty.

    Args:
        mesh: Skinned mesh whose skin buffers are modified in place
        max_influences: Maximum non-zero weights per vertex

    Raises:
        ValueError: If max_influences is less than 1
    """
    if max_influences < 1:
        raise ValueError(f"max_influences must be at least 1, got {max_influences}")

    if mesh.skin_index is None or mesh.skin_weight is None:
        return

    slots = settings.SKIN_INFLUENCE_SLOTS
    keep = min(int(max_influences), slots)

    indices = mesh.skin_index.array.reshape(-1, slots)
    weights = mesh.skin_weight.array.reshape(-1, slots)

    # Stable sort on negated weights: highest first, ties in slot order
    order = np.argsort(-weights, axis=1, kind='stable')
    sorted_weights = np.take_along_axis(weights, order, axis=1)[:, :keep]
    sorted_indices = np.take_along_axis(indices, order, axis=1)[:, :keep]

    positive = sorted_weights > 0
    kept_weights = np.where(positive, sorted_weights, 0).astype(np.float64)
    totals = kept_weights.sum(axis=1, keepdims=True)
    normalized = np.divide(kept_weights, totals, out=np.zeros_like(kept_weights), where=totals > 0)

    indices[:] = 0
    weights[:] = 0
    indices[:, :keep] = np.where(positive, sorted_indices, 0)
    weights[:, :keep] = normalized

    mesh.skin_index.mark_dirty()
    mesh.skin_weight.mark_dirty()

    logger.debug("Reduced skin influences on '%s' to %d for %d vertices",
                 mesh.name, keep, weights.shape[0])


def optimize_model(model: SceneNode, max_influences: int = settings.DEFAULT_MAX_SKIN_INFLUENCES) -> int:
    """
    Reduce skin influences on every skinned mesh in a model.

    Args:
        model: Root node of the model
        max_influences: Maximum non-zero weights per vertex

    Returns:
        Number of skinned meshes processed
    """
    meshes = [node for node in model.iter_subtree() if node.is_skinned_mesh]
    for mesh in meshes:
        reduce_skin_influences(mesh, max_influences)

    logger.info("Optimized %d skinned mesh(es) in '%s' to %d influences",
                len(meshes), model.name, max_influences)
    return len(meshes)

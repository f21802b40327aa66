"""Loaders for animation assets."""

from .gltf_loader import GltfLoader, GltfImport

__all__ = ['GltfLoader', 'GltfImport']

from .indexed_mesh_context import IndexedMeshContext

__all__ = ['IndexedMeshContext']


import numpy as np

from .mesh_base import HomogeneousMesh
from .geometry import Quadrilateral2D


class QuadrangleMesh(HomogeneousMesh):
    geometry = Quadrilateral2D

    def __init__(self, node, cell, cellregion=None) -> None:
        super().__init__(node, cell, cellregion=cellregion)
        self.meshtype = 'quad'

    @classmethod
    def from_box(cls, box=[0, 1, 0, 1], nx=10, ny=10, *, threshold=None):
        """Generate a counterclockwise quadrilateral mesh for a box domain."""
        node, idx = cls._box_nodes(box, (nx, ny))
        cell = np.stack([
            idx[:-1, :-1].reshape(-1),
            idx[1:, :-1].reshape(-1),
            idx[1:, 1:].reshape(-1),
            idx[:-1, 1:].reshape(-1)], axis=-1)
        node, cell = cls._remove_cells(node, cell, threshold)
        return cls(node, cell)


import numpy as np

from .mesh_base import HomogeneousMesh
from .geometry import Triangle2D


class TriangleMesh(HomogeneousMesh):
    geometry = Triangle2D

    def __init__(self, node, cell, cellregion=None) -> None:
        super().__init__(node, cell, cellregion=cellregion)
        self.meshtype = 'tri'

    @classmethod
    def from_one_triangle(cls, meshtype='iso'):
        if meshtype == 'equ':
            node = np.array([
                [0.0, 0.0],
                [1.0, 0.0],
                [0.5, np.sqrt(3) / 2]], dtype=np.float64)
        elif meshtype == 'iso':
            node = np.array([
                [0.0, 0.0],
                [1.0, 0.0],
                [0.0, 1.0]], dtype=np.float64)
        else:
            raise ValueError(f"Unknown meshtype '{meshtype}', use 'iso' or 'equ'.")
        cell = np.array([[0, 1, 2]], dtype=np.int_)
        return cls(node, cell)

    @classmethod
    def from_box(cls, box=[0, 1, 0, 1], nx=10, ny=10, *, threshold=None):
        """Generate a triangle mesh for a box domain.

        Every rectangle of the `nx` by `ny` grid is split into two
        counterclockwise oriented triangles.
        """
        node, idx = cls._box_nodes(box, (nx, ny))
        cell0 = np.concatenate((
            idx[1:, 0:-1].T.reshape(-1, 1),
            idx[1:, 1:].T.reshape(-1, 1),
            idx[0:-1, 0:-1].T.reshape(-1, 1),
            ), axis=1)
        cell1 = np.concatenate((
            idx[0:-1, 1:].T.reshape(-1, 1),
            idx[0:-1, 0:-1].T.reshape(-1, 1),
            idx[1:, 1:].T.reshape(-1, 1)
            ), axis=1)
        cell = np.concatenate((cell0, cell1), axis=0)
        node, cell = cls._remove_cells(node, cell, threshold)
        return cls(node, cell)

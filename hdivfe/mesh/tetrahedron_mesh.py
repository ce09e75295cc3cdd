
import numpy as np

from .mesh_base import HomogeneousMesh
from .geometry import Tetrahedron3D


class TetrahedronMesh(HomogeneousMesh):
    geometry = Tetrahedron3D

    def __init__(self, node, cell, cellregion=None) -> None:
        super().__init__(node, cell, cellregion=cellregion)
        self.meshtype = 'tet'

    @classmethod
    def from_one_tetrahedron(cls, meshtype='iso'):
        if meshtype == 'iso':
            node = np.array([
                [0.0, 0.0, 0.0],
                [1.0, 0.0, 0.0],
                [0.0, 1.0, 0.0],
                [0.0, 0.0, 1.0]], dtype=np.float64)
        else:
            raise ValueError(f"Unknown meshtype '{meshtype}'.")
        cell = np.array([[0, 1, 2, 3]], dtype=np.int_)
        return cls(node, cell)

    @classmethod
    def from_box(cls, box=[0, 1, 0, 1, 0, 1], nx=10, ny=10, nz=10, *, threshold=None):
        """
        Generate a tetrahedral mesh for a box domain, six tetrahedra per cube.
        """
        node, idx = cls._box_nodes(box, (nx, ny, nz))
        nyz = (ny + 1)*(nz + 1)
        cell0 = idx[:-1, :-1, :-1]
        cell1 = cell0 + nyz
        cell2 = cell1 + nz + 1
        cell3 = cell0 + nz + 1
        cell4 = cell0 + 1
        cell5 = cell4 + nyz
        cell6 = cell5 + nz + 1
        cell7 = cell4 + nz + 1
        cell = np.concatenate((cell0.reshape(-1, 1), cell1.reshape(-1, 1),
            cell2.reshape(-1, 1), cell3.reshape(-1, 1), cell4.reshape(-1, 1),
            cell5.reshape(-1, 1), cell6.reshape(-1, 1), cell7.reshape(-1, 1)),
            axis=1)

        localCell = np.array([
            [0, 1, 2, 6],
            [0, 5, 1, 6],
            [0, 4, 5, 6],
            [0, 7, 4, 6],
            [0, 3, 7, 6],
            [0, 2, 3, 6]], dtype=np.int_)
        cell = cell[:, localCell].reshape(-1, 4)
        node, cell = cls._remove_cells(node, cell, threshold)
        return cls(node, cell)

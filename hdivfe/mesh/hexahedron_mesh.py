
import numpy as np

from .mesh_base import HomogeneousMesh
from .geometry import Hexahedron3D


class HexahedronMesh(HomogeneousMesh):
    geometry = Hexahedron3D

    def __init__(self, node, cell, cellregion=None) -> None:
        super().__init__(node, cell, cellregion=cellregion)
        self.meshtype = 'hex'

    @classmethod
    def from_box(cls, box=[0, 1, 0, 1, 0, 1], nx=10, ny=10, nz=10, *, threshold=None):
        """Generate a hexahedral mesh for a box domain."""
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
        node, cell = cls._remove_cells(node, cell, threshold)
        return cls(node, cell)

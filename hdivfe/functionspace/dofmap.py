
import re
from typing import Dict

import numpy as np

from ..typing import TensorLike, Index, _S
from .fe_type import FiniteElement, ON_CELLS, ON_FACES


class DofMap():
    """Global numbering of the dofs of a finite element type on a mesh.

    The layout is read from the dof-map pattern of the element, a sequence of
    entity letters each followed by a count, e.g. "f3i3": three dofs on every
    face and three on the cell interior. Moment `k` of face `f` is the global
    dof `k*NF + f`; the interior dof `k` of cell `c` is `fdof*NF + k*NC + c`.
    """
    _LETTERS = {'f': 'face', 'i': 'cell'}

    def __init__(self, mesh, fetype: FiniteElement) -> None:
        self.mesh = mesh
        self.fetype = fetype
        geo = mesh.geometry
        self.pattern = fetype.dofmap_pattern(ON_CELLS, geo)
        counts = self.parse_pattern(self.pattern)
        self.fdof = counts['face']
        self.idof = counts['cell']

        fcounts = self.parse_pattern(fetype.dofmap_pattern(ON_FACES, geo))
        if fcounts['cell'] != self.fdof:
            raise ValueError(f"face pattern of {fetype} does not match its cell "
                             f"pattern '{self.pattern}'.")
        if self.idof != fetype.number_of_interior_dofs(geo):
            raise ValueError(f"pattern '{self.pattern}' does not cover the "
                             f"{fetype.ndofs(ON_CELLS, geo)} local dofs of {fetype}.")

    @classmethod
    def parse_pattern(cls, pattern: str) -> Dict[str, int]:
        counts = {'face': 0, 'cell': 0}
        if re.fullmatch(r'([a-zA-Z]\d+)+', pattern) is None:
            raise ValueError(f"malformed dof-map pattern '{pattern}'.")
        for letter, n in re.findall(r'([a-zA-Z])(\d+)', pattern):
            key = cls._LETTERS.get(letter.lower())
            if key is None:
                raise ValueError(f"unsupported entity '{letter}' in dof-map "
                                 f"pattern '{pattern}'.")
            counts[key] += int(n)
        return counts

    def number_of_local_dofs(self, doftype: str='all') -> int:
        if doftype == 'all':
            NFC = self.mesh.number_of_faces_of_cells()
            return NFC*self.fdof + self.idof
        elif doftype in {'cell', 2, 3}:
            return self.idof
        elif doftype in {'face', 'edge', 1}:
            return self.fdof
        elif doftype in {'node', 0}:
            return 0
        raise ValueError(f"unknown doftype {doftype}.")

    def number_of_global_dofs(self) -> int:
        NF = self.mesh.number_of_faces()
        NC = self.mesh.number_of_cells()
        return NF*self.fdof + NC*self.idof

    def face_to_dof(self, index: Index=_S) -> TensorLike:
        NF = self.mesh.number_of_faces()
        f2d = np.arange(NF)[:, None] + NF*np.arange(self.fdof)[None, :]
        return f2d[index]

    edge_to_dof = face_to_dof

    def bface_to_dof(self) -> TensorLike:
        return self.face_to_dof(index=self.mesh.boundary_face_index())

    def cell_to_dof(self, index: Index=_S) -> TensorLike:
        mesh = self.mesh
        NF = mesh.number_of_faces()
        NC = mesh.number_of_cells()
        c2f = mesh.cell_to_face()
        f2d = self.face_to_dof()[c2f].reshape(NC, -1)
        i2d = NF*self.fdof + np.arange(NC)[:, None] + NC*np.arange(self.idof)[None, :]
        c2d = np.concatenate([f2d, i2d], axis=-1)
        return c2d[index]

    @property
    def cell2dof(self):
        return self.cell_to_dof()

    def boundary_dof(self) -> TensorLike:
        return self.bface_to_dof().reshape(-1)

    def is_boundary_dof(self) -> TensorLike:
        gdof = self.number_of_global_dofs()
        flag = np.zeros(gdof, dtype=np.bool_)
        flag[self.boundary_dof()] = True
        return flag

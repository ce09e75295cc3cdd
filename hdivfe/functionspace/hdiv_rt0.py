
import numpy as np

from ..typing import TensorLike
from ..mesh.geometry import ReferenceGeometry
from .fe_type import FiniteElement, ON_CELLS, ON_FACES, ON_BFACES


class HDivRT0(FiniteElement):
    """Lowest order Raviart-Thomas element.

    One dof per face: the normal flux through the face. The reference basis
    function `j` is the Whitney function with unit outward flux through local
    face `j` and zero flux through all other faces.

    Parameters:
        edim (int): space dimension, 2 or 3.
    """
    _GEOMETRIES = {
        2: ('Triangle2D', 'Quadrilateral2D'),
        3: ('Tetrahedron3D', 'Hexahedron3D'),
    }

    def ndofs(self, kind: str, geometry: ReferenceGeometry) -> int:
        self.check_defined(geometry, kind)
        if kind == ON_CELLS:
            return geometry.number_of_faces()
        return 1

    def order(self, geometry: ReferenceGeometry) -> int:
        if geometry.dim == self.edim - 1:
            return 0
        self.check_defined(geometry)
        return 1

    def dofmap_pattern(self, kind: str, geometry: ReferenceGeometry) -> str:
        self.check_defined(geometry, kind)
        return "f1" if kind == ON_CELLS else "i1"

    def face_quadorder(self, geometry: ReferenceGeometry) -> int:
        return 0

    def face_moments(self, t: TensorLike) -> TensorLike:
        t = np.asarray(t)
        return np.ones(t.shape[:-1] + (1, ), dtype=np.float64)

    def _basis(self, kind: str, geometry: ReferenceGeometry):
        if kind in (ON_FACES, ON_BFACES):
            return lambda t: self.face_moments(t)[..., None]
        return getattr(self, '_basis_' + geometry.name.lower())

    @staticmethod
    def _basis_triangle2d(xref: TensorLike) -> TensorLike:
        x = xref[..., 0]
        y = xref[..., 1]
        phi = np.zeros(xref.shape[:-1] + (3, 2), dtype=np.float64)
        phi[..., 0, 0] = x
        phi[..., 0, 1] = y - 1
        phi[..., 1, 0] = x
        phi[..., 1, 1] = y
        phi[..., 2, 0] = x - 1
        phi[..., 2, 1] = y
        return phi

    @staticmethod
    def _basis_quadrilateral2d(xref: TensorLike) -> TensorLike:
        x = xref[..., 0]
        y = xref[..., 1]
        phi = np.zeros(xref.shape[:-1] + (4, 2), dtype=np.float64)
        phi[..., 0, 1] = y - 1
        phi[..., 1, 0] = x
        phi[..., 2, 1] = y
        phi[..., 3, 0] = x - 1
        return phi

    @staticmethod
    def _basis_tetrahedron3d(xref: TensorLike) -> TensorLike:
        phi = np.broadcast_to(2*xref[..., None, :], xref.shape[:-1] + (4, 3)).copy()
        # 2*(x - v), v the vertex opposite to face j
        phi[..., 0, 2] -= 2
        phi[..., 1, 1] -= 2
        phi[..., 3, 0] -= 2
        return phi

    @staticmethod
    def _basis_hexahedron3d(xref: TensorLike) -> TensorLike:
        x = xref[..., 0]
        y = xref[..., 1]
        z = xref[..., 2]
        phi = np.zeros(xref.shape[:-1] + (6, 3), dtype=np.float64)
        phi[..., 0, 2] = z - 1
        phi[..., 1, 1] = y - 1
        phi[..., 2, 0] = x
        phi[..., 3, 1] = y
        phi[..., 4, 0] = x - 1
        phi[..., 5, 2] = z
        return phi

    def _div_basis(self, geometry: ReferenceGeometry):
        NFC = geometry.number_of_faces()
        # unit total flux, constant divergence
        val = 1.0/geometry.volume()

        def div_basis(xref: TensorLike) -> TensorLike:
            xref = np.asarray(xref)
            return np.full(xref.shape[:-1] + (NFC, ), val, dtype=np.float64)
        return div_basis

    def coefficients(self, geometry: ReferenceGeometry):
        self.check_defined(geometry)
        edim = self.edim

        def coefficients(signs: TensorLike, flips: TensorLike) -> TensorLike:
            signs, _ = self._signs_and_shape(signs, flips)
            coef = np.broadcast_to(signs[..., None], signs.shape + (edim, ))
            return coef.astype(np.float64)
        return coefficients

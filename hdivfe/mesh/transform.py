
import numpy as np

from ..typing import TensorLike
from .geometry import ReferenceGeometry


class L2GTransformer():
    """Local-to-global map of the cells of one geometry.

    `update(cell)` binds the transformer to a cell; afterwards `eval` and
    `jacobian` can be called for any number of reference points without
    rebuilding anything.
    """
    def __init__(self, geometry: ReferenceGeometry, mesh) -> None:
        if geometry is not mesh.geometry:
            raise ValueError(f"mesh has no cells of geometry {geometry}.")
        self.geometry = geometry
        self.mesh = mesh
        self.citem = -1
        self.cnode = None
        self.affine = geometry.is_simplex
        self.A = None

    def update(self, cell: int) -> None:
        if cell == self.citem:
            return
        mesh = self.mesh
        self.citem = cell
        self.cnode = mesh.node[mesh.cell[cell]] # (NV, GD)
        if self.affine:
            # constant Jacobian: columns are the edge vectors from node 0
            self.A = (self.cnode[1:] - self.cnode[0]).T

    def eval(self, xref: TensorLike) -> TensorLike:
        """Physical coordinates of the reference points `xref` (..., TD)."""
        if self.affine:
            return self.cnode[0] + np.asarray(xref) @ self.A.T
        phi = self.geometry.shape_function(xref)
        return phi @ self.cnode

    def jacobian(self, xref: TensorLike) -> TensorLike:
        """Jacobian matrix (..., GD, TD) at the reference points."""
        xref = np.asarray(xref, dtype=np.float64)
        if self.affine:
            return np.broadcast_to(self.A, xref.shape[:-1] + self.A.shape)
        gphi = self.geometry.grad_shape_function(xref)
        return np.einsum('...vt, vd->...dt', gphi, self.cnode)

    def inverse(self, x: TensorLike, maxit: int=20, tol: float=1e-13) -> TensorLike:
        """Reference coordinates of one physical point `x` (GD, ).

        Multilinear maps are inverted with Newton's method.
        """
        x = np.asarray(x, dtype=np.float64)
        if self.affine:
            return np.linalg.solve(self.A, x - self.cnode[0])
        xref = self.geometry.barycenter().copy()
        for _ in range(maxit):
            r = self.eval(xref) - x
            dx = np.linalg.solve(self.jacobian(xref), r)
            xref -= dx
            if np.max(np.abs(dx)) < tol:
                break
        return xref

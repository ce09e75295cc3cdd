
from typing import Optional, Tuple

import numpy as np
from scipy.spatial import KDTree

from ..typing import TensorLike
from .. import logger
from .transform import L2GTransformer


class PointNotFoundError(RuntimeError):
    """Raised when no cell of the mesh contains a point."""


class CellFinder():
    """Locate the cell containing a physical point.

    The search walks from a start cell to the neighbour behind the face whose
    reference constraint is violated most, as in the classical visibility
    walk. If the walk leaves the mesh (non-convex domains) or cycles, every
    cell is tested, nearest barycenters first.

    Parameters:
        mesh (HomogeneousMesh): the mesh to search.
        tol (float): tolerance for a point to count as inside a cell.
    """
    def __init__(self, mesh, tol: float=1e-12) -> None:
        self.mesh = mesh
        self.tol = tol
        self.geometry = mesh.geometry
        self.cell2cell = mesh.cell_to_cell()
        self.trafo = L2GTransformer(mesh.geometry, mesh)
        self.tree = KDTree(mesh.entity_barycenter('cell'))
        self.exit_face = self._exit_faces()

    def _exit_faces(self) -> TensorLike:
        """Local face to leave through for each reference constraint.

        For simplices the constraints are the barycentric coordinates
        `lambda_i >= 0`; the face to cross is the one opposite node i. For
        tensor cells the constraints are `x_d >= 0` followed by `x_d <= 1`.
        """
        geo = self.geometry
        localFace = geo.localFace
        if geo.is_simplex:
            NV = geo.number_of_nodes()
            exit_face = np.zeros(NV, dtype=np.int_)
            for i in range(NV):
                exit_face[i] = np.nonzero(~np.any(localFace == i, axis=1))[0][0]
            return exit_face
        TD = geo.dim
        fnode = geo.node[localFace] # (NFC, NVF, TD)
        exit_face = np.zeros(2*TD, dtype=np.int_)
        for d in range(TD):
            exit_face[d] = np.nonzero(np.all(fnode[..., d] == 0.0, axis=1))[0][0]
            exit_face[TD+d] = np.nonzero(np.all(fnode[..., d] == 1.0, axis=1))[0][0]
        return exit_face

    def _test(self, cell: int, x: TensorLike) -> Tuple[TensorLike, TensorLike]:
        self.trafo.update(cell)
        xref = self.trafo.inverse(x)
        return xref, self.geometry.violations(xref)

    def locate(self, x: TensorLike, start: Optional[int]=None,
               maxit: Optional[int]=None) -> Tuple[int, TensorLike]:
        """Find the cell containing `x` and the reference coordinates of `x`.

        Parameters:
            x (Tensor): physical point (GD, ).
            start (int, optional): cell to start the walk from; by default the
                cell with the nearest barycenter.
            maxit (int, optional): maximal number of walk steps, defaults to
                the number of cells.

        Returns:
            (int, Tensor): the cell index and the reference coordinates.

        Raises:
            PointNotFoundError: if no cell contains `x`.
        """
        x = np.asarray(x, dtype=np.float64)
        NC = self.mesh.number_of_cells()
        if start is None or not (0 <= start < NC):
            _, start = self.tree.query(x)
        maxit = NC if maxit is None else maxit

        cell = int(start)
        visited = set()
        for _ in range(maxit):
            xref, v = self._test(cell, x)
            k = np.argmax(v)
            if v[k] <= self.tol:
                return cell, xref
            visited.add(cell)
            nxt = int(self.cell2cell[cell, self.exit_face[k]])
            if nxt == cell or nxt in visited:
                break
            cell = nxt

        logger.debug(f"walk search failed for point {x}, testing all cells.")
        _, order = self.tree.query(x, k=NC)
        for cell in np.atleast_1d(order):
            xref, v = self._test(int(cell), x)
            if np.max(v) <= self.tol:
                return int(cell), xref
        raise PointNotFoundError(f"no cell contains the point {x}.")


import numpy as np

from ..typing import TensorLike
from ..mesh.geometry import ReferenceGeometry
from .. import logger
from .fe_type import FiniteElement, ON_CELLS, ON_FACES, ON_BFACES


class HDivBDM2(FiniteElement):
    """Second order Brezzi-Douglas-Marini element on triangles.

    Every edge carries three dofs, the moments of the normal flux against
    `1`, `t - 1/2` and `t^2 - t + 1/6` where `t` runs along the edge.
    Three interior dofs complete the local space of full quadratic vector
    fields; they are the moments against the gradients of two barycentric
    coordinates and the curl of the cubic bubble.

    Local dofs are numbered edge by edge, `3*j + k` being moment `k` of
    local edge `j`, followed by the interior dofs 9, 10, 11.
    """
    _GEOMETRIES = {
        2: ('Triangle2D', ),
    }

    # weights of the edge moments, reversed by t -> 1 - t with these signs
    _PARITY = np.array([1.0, -1.0, 1.0])

    def __init__(self, edim: int=2) -> None:
        super().__init__(edim)

    def ndofs(self, kind: str, geometry: ReferenceGeometry) -> int:
        self.check_defined(geometry, kind)
        if kind == ON_CELLS:
            return 3*geometry.number_of_faces() + 3
        return 3

    def order(self, geometry: ReferenceGeometry) -> int:
        if geometry.dim != self.edim - 1:
            self.check_defined(geometry)
        return 2

    def dofmap_pattern(self, kind: str, geometry: ReferenceGeometry) -> str:
        self.check_defined(geometry, kind)
        return "f3i3" if kind == ON_CELLS else "i3"

    def face_moments(self, t: TensorLike) -> TensorLike:
        t = np.asarray(t)[..., 0]
        return np.stack([np.ones_like(t), t - 0.5, t**2 - t + 1.0/6.0], axis=-1)

    @staticmethod
    def _face_basis(t: TensorLike) -> TensorLike:
        """Normal flux basis of an edge, dual to the edge moments."""
        t = np.asarray(t)[..., 0]
        val = np.stack([np.ones_like(t), 12*(t - 0.5), 180*(t**2 - t + 1.0/6.0)], axis=-1)
        return val[..., None]

    def _basis(self, kind: str, geometry: ReferenceGeometry):
        if kind in (ON_FACES, ON_BFACES):
            return self._face_basis
        return self._basis_triangle2d

    @staticmethod
    def _basis_triangle2d(xref: TensorLike) -> TensorLike:
        x = xref[..., 0]
        y = xref[..., 1]
        lam = 1 - x - y
        phi = np.zeros(xref.shape[:-1] + (12, 2), dtype=np.float64)
        # RT0
        phi[..., 0, 0] = x
        phi[..., 0, 1] = y - 1
        phi[..., 3, 0] = x
        phi[..., 3, 1] = y
        phi[..., 6, 0] = x - 1
        phi[..., 6, 1] = y
        # BDM1, divergence free
        phi[..., 1, 0] = 6*x
        phi[..., 1, 1] = 6 - 12*x - 6*y
        phi[..., 4, 0] = -6*x
        phi[..., 4, 1] = 6*y
        phi[..., 7, 0] = 6*(x - 1) + 12*y
        phi[..., 7, 1] = -6*y
        # quadratic edge functions
        phi[..., 2, :] = -15*((lam - 0.5)[..., None]*phi[..., 1, :] + phi[..., 0, :])
        phi[..., 5, :] = -15*((x - 0.5)[..., None]*phi[..., 4, :] + phi[..., 3, :])
        phi[..., 8, :] = -15*((y - 0.5)[..., None]*phi[..., 7, :] + phi[..., 6, :])
        # interior functions, vanishing normal flux on all edges
        phi[..., 9, :] = y[..., None]*phi[..., 1, :]
        phi[..., 10, :] = lam[..., None]*phi[..., 4, :]
        phi[..., 11, :] = x[..., None]*phi[..., 7, :]
        return phi

    def _div_basis(self, geometry: ReferenceGeometry):
        def div_basis(xref: TensorLike) -> TensorLike:
            xref = np.asarray(xref, dtype=np.float64)
            x = xref[..., 0]
            y = xref[..., 1]
            val = np.zeros(xref.shape[:-1] + (12, ), dtype=np.float64)
            val[..., [0, 3, 6]] = 2.0
            val[..., 2] = -15*(6*x + 6*y - 4)
            val[..., 5] = -15*(-6*x + 2)
            val[..., 8] = -15*(-6*y + 2)
            val[..., 9] = 6 - 12*x - 6*y
            val[..., 10] = 6*x - 6*y
            val[..., 11] = 6*(x - 1) + 12*y
            return val
        return div_basis

    def coefficients(self, geometry: ReferenceGeometry):
        """Orientation correction of the local basis.

        The edge dofs are measured against the global normal of the edge and
        along the global direction of the edge. Column `3*j + k` therefore
        takes the sign of edge `j`, and, if the cell runs through edge `j`
        against its global direction, the parity of moment `k`.
        """
        self.check_defined(geometry)
        NFC = geometry.number_of_faces()
        edim = self.edim
        parity = self._PARITY

        def coefficients(signs: TensorLike, flips: TensorLike) -> TensorLike:
            signs, flips = self._signs_and_shape(signs, flips)
            fcoef = np.where(flips[..., None], parity, 1.0)*signs[..., None]
            fcoef = fcoef.reshape(signs.shape[:-1] + (3*NFC, ))
            icoef = np.ones(signs.shape[:-1] + (3, ), dtype=np.float64)
            coef = np.concatenate([fcoef, icoef], axis=-1)
            return np.broadcast_to(coef[..., None], coef.shape + (edim, )).astype(np.float64)
        return coefficients

    def interpolate_interior(self, target: TensorLike, space, data, items: TensorLike,
                             options: dict) -> None:
        """Solve the local problems for the interior dofs.

        For each cell the interpolant `u_h` satisfies

            (u_h, q)_T = (u, q)_T  for q in {grad(lambda_0), grad(lambda_1), curl(b)}

        with the cubic bubble `b = lambda_0*lambda_1*lambda_2`. The part of
        `u_h` spanned by the edge functions is already known, so it is moved
        to the right hand side and the remaining 3x3 system is solved.

        Parameters:
            target (Tensor): the global dof vector, edge dofs already set.
            space (FESpace): the BDM2 space.
            data: a callable evaluating the source on physical points, see
                `hdivfe.functionspace.interpolation`.
            items (Tensor): the cells to treat.
            options (dict): the interpolation options.
        """
        mesh = space.mesh
        geo = mesh.geometry
        offset = self.interior_offset(geo)
        q = max(4, 2 + options['bonus_quadorder'])
        qf = mesh.quadrature_formula(q, 'cell')
        bcs, ws = qf.get_quadrature_points_and_weights()

        phi = space.basis(bcs, index=items) # (NI, NQ, 12, 2)
        test = self._test_functions(mesh, bcs, items) # (NI, NQ, 3, 2)
        cm = mesh.entity_measure('cell', index=items)

        val = data(bcs, items) # (NI, NQ, 2)
        lb = np.einsum('q, c, cqd, cqjd->cj', ws, cm, val, test)
        IMM = np.einsum('q, c, cqjd, cqkd->cjk', ws, cm, test, phi[..., offset:, :])
        IMM_face = np.einsum('q, c, cqjd, cqkd->cjk', ws, cm, test, phi[..., :offset, :])

        cell2dof = space.cell_to_dof(index=items)
        lb -= np.einsum('cjk, ck->cj', IMM_face, target[cell2dof[:, :offset]])
        x = np.linalg.solve(IMM, lb[..., None])[..., 0]
        target[cell2dof[:, offset:]] = x
        logger.debug(f"interior dofs of {len(cell2dof)} cells set by local solves.")

    @staticmethod
    def _test_functions(mesh, bcs: TensorLike, items: TensorLike) -> TensorLike:
        geo = mesh.geometry
        J = mesh.jacobian_matrix(bcs[:1], index=items)[:, 0] # (NI, GD, TD)
        Jinv = np.linalg.inv(J)
        gref = geo.grad_shape_function(bcs[:1])[0] # (3, TD)
        glam = np.einsum('ctd, vt->cvd', Jinv, gref) # (NI, 3, GD)
        lam = geo.shape_function(bcs) # (NQ, 3)

        # gradient of the bubble, then rotated to its curl
        w = np.stack([lam[:, 1]*lam[:, 2], lam[:, 0]*lam[:, 2], lam[:, 0]*lam[:, 1]], axis=-1)
        gb = np.einsum('qv, cvd->cqd', w, glam)
        curl = np.stack([gb[..., 1], -gb[..., 0]], axis=-1)

        NQ = bcs.shape[0]
        grad = np.broadcast_to(glam[:, None, :2, :], (glam.shape[0], NQ, 2, glam.shape[-1]))
        return np.concatenate([grad, curl[:, :, None, :]], axis=-2)

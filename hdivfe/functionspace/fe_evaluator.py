
from typing import Optional

import numpy as np

from ..typing import TensorLike
from ..mesh.transform import L2GTransformer
from .operators import Operator


class FEEvaluator():
    """Operator values of the basis of a space on one cell at a time.

    The reference values at `xref` are computed once; `update(cell)` pushes
    them to the cell and stores the result in `cvals`, shaped
    (NQ, ldof, ncomponents). `relocate_xref` moves the evaluator to other
    reference points without building a new one.

    Parameters:
        space (FESpace): the space.
        operator (Operator): the operator applied to the basis.
        xref (Tensor, optional): reference points (NQ, TD); by default the
            points of the order-0 cell quadrature.
    """
    def __init__(self, space, operator: Operator, xref: Optional[TensorLike]=None) -> None:
        self.space = space
        self.operator = operator
        mesh = space.mesh
        self.geometry = mesh.geometry
        self.trafo = L2GTransformer(mesh.geometry, mesh)
        self.coef = space.cell_coefficients()
        if xref is None:
            qf = mesh.quadrature_formula(0, 'cell')
            xref, _ = qf.get_quadrature_points_and_weights()
        self.relocate_xref(xref)

    @property
    def ncomponents(self) -> int:
        return self.operator.ncomponents(self.space)

    def relocate_xref(self, xref: TensorLike) -> None:
        self.xref = np.atleast_2d(np.asarray(xref, dtype=np.float64))
        self.rvals = self.operator.reference(self.space.fetype, self.geometry, self.xref)
        self.cvals = None
        self.citem = -1

    def update(self, cell: int) -> None:
        if cell == self.citem:
            return
        self.citem = cell
        self.trafo.update(cell)
        J = self.trafo.jacobian(self.xref)
        self.cvals = self.operator.transform(self.rvals, J, self.coef[cell])


"""
Function operators applied to the basis of an H(div) space.

An operator knows how to get its values on the reference cell and how to
push them to a physical cell with the contravariant Piola map

    phi(x) = J phi_ref(xref) / |det J|,    div phi(x) = div_ref phi_ref(xref) / |det J|,

which keeps normal fluxes through faces, followed by the orientation
coefficients of the cell.
"""
import numpy as np

from ..typing import TensorLike
from .fe_type import ON_CELLS


class Operator():
    name = 'Operator'

    def __repr__(self) -> str:
        return self.name

    def __eq__(self, other) -> bool:
        return type(self) is type(other)

    def __hash__(self) -> int:
        return hash(self.name)

    def ncomponents(self, space) -> int:
        raise NotImplementedError

    def reference(self, fetype, geometry, xref: TensorLike) -> TensorLike:
        """Values (NQ, ldof, ncomponents) on the reference cell."""
        raise NotImplementedError

    def transform(self, rval: TensorLike, J: TensorLike, coef: TensorLike) -> TensorLike:
        """Physical values (..., NQ, ldof, ncomponents).

        Parameters:
            rval (Tensor): reference values (NQ, ldof, ncomponents).
            J (Tensor): Jacobian matrices (..., NQ, GD, TD).
            coef (Tensor): orientation coefficients (..., ldof, edim).
        """
        raise NotImplementedError


class Identity(Operator):
    name = 'Identity'

    def ncomponents(self, space) -> int:
        return space.ncomponents

    def reference(self, fetype, geometry, xref: TensorLike) -> TensorLike:
        return fetype.basis(ON_CELLS, geometry)(xref)

    def transform(self, rval, J, coef):
        detJ = np.abs(np.linalg.det(J))
        val = np.einsum('...qdt, qlt->...qld', J, rval)
        val /= detJ[..., None, None]
        return val*coef[..., None, :, :]


class Divergence(Operator):
    name = 'Divergence'

    def ncomponents(self, space) -> int:
        return 1

    def reference(self, fetype, geometry, xref: TensorLike) -> TensorLike:
        return fetype.div_basis(geometry)(xref)[..., None]

    def transform(self, rval, J, coef):
        detJ = np.abs(np.linalg.det(J))
        val = rval/detJ[..., None, None]
        return val*coef[..., None, :, :1]

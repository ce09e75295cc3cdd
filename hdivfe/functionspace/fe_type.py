
from typing import Callable, Tuple

import numpy as np

from ..typing import TensorLike
from ..mesh.geometry import ReferenceGeometry

# assembly entity kinds
ON_CELLS = 'cell'
ON_FACES = 'face'
ON_BFACES = 'bface'

_KINDS = (ON_CELLS, ON_FACES, ON_BFACES)


def _check_kind(kind: str) -> None:
    if kind not in _KINDS:
        raise ValueError(f"unknown assembly kind '{kind}', expected one of {_KINDS}.")


class FiniteElement():
    """Base class of the finite element types.

    A finite element type is an immutable descriptor parameterized by the
    number of vector components `edim`. It answers the per-geometry questions
    of the finite element spaces: how many dofs live on which entity, how the
    dofs are laid out (the dof-map pattern), which reference basis functions
    belong to them and how these are corrected for the orientation of the
    mesh faces.

    Subclasses list the supported geometries in `_GEOMETRIES` (mapping the
    edim to geometry names) and implement the `_basis`, `_div_basis` and
    `coefficients` hooks.
    """
    _GEOMETRIES = {}

    def __init__(self, edim: int) -> None:
        if edim not in self._GEOMETRIES:
            raise ValueError(f"{type(self).__name__} is not defined for "
                             f"edim = {edim}.")
        self._edim = int(edim)

    @property
    def edim(self) -> int:
        return self._edim

    @property
    def ncomponents(self) -> int:
        return self._edim

    def __repr__(self) -> str:
        return f"{type(self).__name__}{{{self.edim}}}"

    def __eq__(self, other) -> bool:
        return type(self) is type(other) and self.edim == other.edim

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.edim))

    ### applicability
    def is_defined(self, geometry: ReferenceGeometry) -> bool:
        return geometry.name in self._GEOMETRIES[self.edim]

    def check_defined(self, geometry: ReferenceGeometry, kind: str=ON_CELLS) -> None:
        _check_kind(kind)
        if not self.is_defined(geometry):
            raise ValueError(f"{self} is not defined for {geometry} ({kind}).")

    ### counters
    def ndofs(self, kind: str, geometry: ReferenceGeometry) -> int:
        """Number of dofs on one entity of the given kind."""
        raise NotImplementedError

    def order(self, geometry: ReferenceGeometry) -> int:
        raise NotImplementedError

    def dofmap_pattern(self, kind: str, geometry: ReferenceGeometry) -> str:
        raise NotImplementedError

    def interior_offset(self, geometry: ReferenceGeometry) -> int:
        """Number of local cell dofs that belong to faces."""
        return self.ndofs(ON_FACES, geometry)*geometry.number_of_faces()

    def number_of_interior_dofs(self, geometry: ReferenceGeometry) -> int:
        return self.ndofs(ON_CELLS, geometry) - self.interior_offset(geometry)

    ### reference basis
    def basis(self, kind: str, geometry: ReferenceGeometry) -> Callable[[TensorLike], TensorLike]:
        """Return the reference basis of the given entity kind.

        Parameters:
            kind (str): ON_CELLS for the vector valued cell basis, ON_FACES or
                ON_BFACES for the scalar normal-flux basis of a face.
            geometry (ReferenceGeometry): the cell geometry.

        Returns:
            Callable: a pure function mapping reference coordinates (..., TD)
            of the entity to values shaped (..., ldof, ncomponents), with
            ncomponents = 1 for the face kinds.
        """
        self.check_defined(geometry, kind)
        ldof = self.ndofs(kind, geometry)
        nc = self.ncomponents if kind == ON_CELLS else 1
        func = self._basis(kind, geometry)
        name = f"{self}-{geometry}-{kind}"

        def evaluate(xref: TensorLike) -> TensorLike:
            val = func(np.asarray(xref, dtype=np.float64))
            if val.shape[-2:] != (ldof, nc):
                raise ValueError(f"basis {name} returned values of shape "
                                 f"{val.shape[-2:]}, expected {(ldof, nc)}.")
            return val
        return evaluate

    def div_basis(self, geometry: ReferenceGeometry) -> Callable[[TensorLike], TensorLike]:
        """Reference divergence of the cell basis, values shaped (..., ldof)."""
        self.check_defined(geometry)
        return self._div_basis(geometry)

    def _basis(self, kind: str, geometry: ReferenceGeometry):
        raise NotImplementedError

    def _div_basis(self, geometry: ReferenceGeometry):
        raise NotImplementedError

    def coefficients(self, geometry: ReferenceGeometry) -> Callable[..., TensorLike]:
        """Return the orientation correction of the cell basis.

        The returned function maps the face signs (..., NFC) and face flips
        (..., NFC) of cells to a coefficient array (..., ldof, ncomponents)
        that multiplies the reference basis.
        """
        raise NotImplementedError

    ### interpolation hooks
    def face_quadorder(self, geometry: ReferenceGeometry) -> int:
        """Quadrature order used for the face moments."""
        return 2*self.order(geometry.face)

    def face_moments(self, t: TensorLike) -> TensorLike:
        """Weights of the face moments at reference face points (NQ, TD-1).

        Returns:
            Tensor: shaped (NQ, fdof); moment k of face dof k.
        """
        raise NotImplementedError

    def interpolate_interior(self, target: TensorLike, space, data, items: TensorLike,
                             options: dict) -> None:
        """Set the interior dofs of the cells in `items`, the face dofs being
        already set. Elements without interior dofs do nothing."""
        return None

    def _signs_and_shape(self, signs, flips) -> Tuple[TensorLike, TensorLike]:
        signs = np.asarray(signs)
        flips = np.asarray(flips, dtype=np.bool_)
        if signs.shape != flips.shape:
            raise ValueError(f"signs {signs.shape} and flips {flips.shape} "
                             "must have the same shape.")
        return signs, flips

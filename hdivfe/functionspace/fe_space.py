
from typing import Optional, Union

import numpy as np

from ..typing import TensorLike, Index, _S, Size
from .. import logger
from ..decorator import barycentric
from .fe_type import FiniteElement, ON_CELLS
from .dofmap import DofMap
from .operators import Identity, Divergence
from .function import Function


class FESpace():
    """A finite element space: an element type on a mesh.

    Parameters:
        mesh (HomogeneousMesh): the mesh.
        fetype (FiniteElement): the element type; it must be defined on every
            cell geometry of the mesh.
        name (str, optional): name of the space, the element name by default.

    Raises:
        ValueError: if the element is not defined on a cell geometry.
    """
    def __init__(self, mesh, fetype: FiniteElement, name: Optional[str]=None) -> None:
        for geo in mesh.unique_cell_geometries():
            fetype.check_defined(geo)
        if fetype.edim != mesh.geo_dimension():
            raise ValueError(f"{fetype} does not match the {mesh.geo_dimension()}D "
                             "mesh.")
        self.mesh = mesh
        self.fetype = fetype
        self.name = repr(fetype) if name is None else name
        self.dof = DofMap(mesh, fetype)
        self.ftype = mesh.ftype
        self.itype = mesh.itype
        self._coef = None
        logger.info(f"{self.name} space on {mesh.number_of_cells()} cells "
                    f"with {self.ndofs} dofs.")

    def __repr__(self) -> str:
        return f"FESpace({self.name}, ndofs={self.ndofs})"

    ### counters
    @property
    def ndofs(self) -> int:
        return self.dof.number_of_global_dofs()

    @property
    def ncomponents(self) -> int:
        return self.fetype.ncomponents

    def number_of_global_dofs(self) -> int:
        return self.dof.number_of_global_dofs()

    def number_of_local_dofs(self, doftype: str='all') -> int:
        return self.dof.number_of_local_dofs(doftype)

    ### relationships
    def cell_to_dof(self, index: Index=_S) -> TensorLike:
        return self.dof.cell_to_dof(index=index)

    def face_to_dof(self, index: Index=_S) -> TensorLike:
        return self.dof.face_to_dof(index=index)

    def bface_to_dof(self) -> TensorLike:
        return self.dof.bface_to_dof()

    def is_boundary_dof(self) -> TensorLike:
        return self.dof.is_boundary_dof()

    def cell_coefficients(self, index: Index=_S) -> TensorLike:
        """Orientation coefficients of the local basis, shaped (NC, ldof, edim)."""
        if self._coef is None:
            mesh = self.mesh
            coef = self.fetype.coefficients(mesh.geometry)
            self._coef = coef(mesh.cell_to_face_sign(), mesh.cell_to_face_flip())
        return self._coef[index]

    ### basis
    def _apply(self, op, bc: TensorLike, index: Index) -> TensorLike:
        mesh = self.mesh
        bc = np.asarray(bc, dtype=np.float64)
        rval = op.reference(self.fetype, mesh.geometry, bc)
        J = mesh.jacobian_matrix(bc, index=index)
        return op.transform(rval, J, self.cell_coefficients(index))

    @barycentric
    def basis(self, bc: TensorLike, index: Index=_S) -> TensorLike:
        """Physical basis at reference points.

        Parameters:
            bc (Tensor): reference coordinates (NQ, TD).
            index (Index): the cells.

        Returns:
            Tensor: (NC, NQ, ldof, GD)
        """
        return self._apply(Identity(), bc, index)

    @barycentric
    def div_basis(self, bc: TensorLike, index: Index=_S) -> TensorLike:
        """Physical divergence of the basis, shaped (NC, NQ, ldof)."""
        return self._apply(Divergence(), bc, index)[..., 0]

    @barycentric
    def value(self, uh: TensorLike, bc: TensorLike, index: Index=_S) -> TensorLike:
        phi = self.basis(bc, index=index)
        cell2dof = self.cell_to_dof(index=index)
        return np.einsum('cl, cqld->cqd', uh[cell2dof], phi)

    @barycentric
    def div_value(self, uh: TensorLike, bc: TensorLike, index: Index=_S) -> TensorLike:
        dphi = self.div_basis(bc, index=index)
        cell2dof = self.cell_to_dof(index=index)
        return np.einsum('cl, cql->cq', uh[cell2dof], dphi)

    ### interpolation
    def interpolate(self, source, kind: str=ON_CELLS, items: Optional[TensorLike]=None,
                    uh: Optional[TensorLike]=None, **options) -> TensorLike:
        """Interpolate `source` into the space, see `hdivfe.functionspace.interpolate`."""
        from .interpolation import interpolate
        if uh is None:
            uh = self.function()
        interpolate(uh, self, kind, source, items=items, **options)
        return uh

    def array(self, batch: Union[int, Size, None]=None, *, dtype=None) -> TensorLike:
        """Initialize a Tensor filled with zeros as values of DoFs.

        Parameters:
            batch (int | Size | None, optional): shape of the batch.

        Returns:
            Tensor: Values of DoFs shaped (batch, GDOF).
        """
        GDOF = self.number_of_global_dofs()
        if (batch is None) or (batch == 0):
            batch = tuple()
        elif isinstance(batch, int):
            batch = (batch, )
        shape = batch + (GDOF, )
        if dtype is None:
            dtype = self.ftype
        return np.zeros(shape, dtype=dtype)

    def function(self, array: Optional[TensorLike]=None) -> Function:
        """Initialize a Function in the space."""
        return Function(self, array)


"""
Interpolation of functions into H(div) spaces.

The dofs on the faces are the moments

    dof_{k, f} = int_f (u . n_f) q_k(t) ds

of the normal flux against the moment weights `q_k` of the element, `t`
being the parameter along the global direction of the face. Elements with
interior dofs complete the interpolant by local solves on the cells, see
`FiniteElement.interpolate_interior`.
"""
from typing import Any, Optional

import numpy as np

from ..typing import TensorLike
from .. import logger
from .fe_type import ON_CELLS, ON_FACES, ON_BFACES, _check_kind
from .qpinfo import QPInfo


def interpolation_options(
        time: float=0.0,
        quadorder: Optional[int]=None,
        bonus_quadorder: int=0,
        params: Optional[Any]=None
        ) -> dict:
    """Default options of `interpolate`.

    Parameters:
        time (float): passed to kernels through `qpinfo.time`.
        quadorder (int, optional): minimal quadrature order on the faces.
        bonus_quadorder (int): added to all quadrature orders, useful for
            sources that are not polynomials.
        params (Any): passed to kernels through `qpinfo.params`.
    """
    return {
        'time': time,
        'quadorder': quadorder,
        'bonus_quadorder': bonus_quadorder,
        'params': params,
    }


class SourceEvaluator():
    """Evaluate an interpolation source on the quadrature points of entities.

    The source is one of
      * a function decorated with `@cartesian`, called once with all points
        shaped (NE, NQ, GD) and returning (NE, NQ, ncomponents),
      * a kernel `data(result, qpinfo)` called point by point, which writes
        the `ncomponents` values into `result` (or returns them),
      * a constant number or vector.
    """
    def __init__(self, data, mesh, ncomponents: int, time: float=0.0,
                 params: Optional[Any]=None) -> None:
        self.data = data
        self.mesh = mesh
        self.ncomponents = ncomponents
        self.time = time
        self.params = params
        if callable(data):
            self.coordtype = getattr(data, 'coordtype', 'kernel')
            if self.coordtype not in ('cartesian', 'kernel'):
                raise ValueError(f"interpolation sources must be cartesian "
                                 f"functions or kernels, but got a "
                                 f"{self.coordtype} function.")
        else:
            self.coordtype = 'constant'
            val = np.asarray(data, dtype=np.float64).reshape(-1)
            if val.shape[0] not in (1, ncomponents):
                raise ValueError(f"constant source has {val.shape[0]} values, "
                                 f"expected {ncomponents}.")
            self.constant = np.broadcast_to(val, (ncomponents, ))

    def on_cells(self, bcs: TensorLike, items: TensorLike) -> TensorLike:
        mesh = self.mesh
        ps = mesh.ref_to_point(bcs, 'cell', index=items)
        return self(ps, bcs, items, items, mesh.cellregion[items],
                    mesh.entity_measure('cell', index=items))

    def on_faces(self, bcs: TensorLike, items: TensorLike) -> TensorLike:
        mesh = self.mesh
        ps = mesh.ref_to_point(bcs, 'face', index=items)
        return self(ps, bcs, items, mesh.face2cell[items, 0], mesh.faceregion[items],
                    mesh.entity_measure('face', index=items))

    def __call__(self, ps: TensorLike, bcs: TensorLike, items: TensorLike,
                 cells: TensorLike, regions: TensorLike, volumes: TensorLike) -> TensorLike:
        """Values of the source, shaped (NE, NQ, ncomponents)."""
        nc = self.ncomponents
        shape = ps.shape[:-1] + (nc, )
        if self.coordtype == 'constant':
            return np.broadcast_to(self.constant, shape)
        if self.coordtype == 'cartesian':
            val = np.asarray(self.data(ps), dtype=np.float64)
            if nc == 1 and val.shape == ps.shape[:-1]:
                val = val[..., None]
            if val.shape != shape:
                raise ValueError(f"source returned values of shape {val.shape}, "
                                 f"expected {shape}.")
            return val

        qpinfo = QPInfo(ps.shape[-1], time=self.time, params=self.params)
        result = np.zeros(nc, dtype=np.float64)
        val = np.zeros(shape, dtype=np.float64)
        for e in range(ps.shape[0]):
            for q in range(ps.shape[1]):
                qpinfo.set(ps[e, q], bcs[q], items[e], cells[e], regions[e], volumes[e])
                result.fill(0.0)
                val[e, q] = self._call_kernel(result, qpinfo)
        return val

    def _call_kernel(self, result: TensorLike, qpinfo: QPInfo) -> TensorLike:
        try:
            ret = self.data(result, qpinfo)
        except IndexError as e:
            raise ValueError(f"kernel wrote outside its result of length "
                             f"{self.ncomponents}.") from e
        if ret is None:
            return result
        ret = np.asarray(ret, dtype=np.float64).reshape(-1)
        if ret.shape[0] != self.ncomponents:
            raise ValueError(f"kernel returned {ret.shape[0]} values, "
                             f"expected {self.ncomponents}.")
        return ret


def _target_array(target, space) -> TensorLike:
    from .fe_vector import FEVectorBlock
    if isinstance(target, FEVectorBlock):
        arr = target.view()
    elif isinstance(target, np.ndarray):
        arr = target
    else:
        raise TypeError(f"interpolation target must be an array or an "
                        f"FEVectorBlock, but got {type(target).__name__}.")
    if arr.ndim != 1 or arr.shape[0] != space.ndofs:
        raise ValueError(f"interpolation target of shape {arr.shape} does not "
                         f"match the {space.ndofs} dofs of {space.name}.")
    return arr


def interpolate(target, space, kind: str, data, items: Optional[TensorLike]=None,
                **kwargs) -> None:
    """Interpolate `data` into the dofs of `space` stored in `target`.

    Parameters:
        target (Tensor | FEVectorBlock): dof storage of length `space.ndofs`,
            written in place.
        space (FESpace): the space.
        kind (str): ON_CELLS sets all dofs of the cells in `items`, ON_FACES
            the dofs of the faces in `items` and ON_BFACES the dofs of the
            boundary faces in `items`.
        data: the source, see `SourceEvaluator`.
        items (Tensor, optional): entity indices, all entities of the kind by
            default.
        **kwargs: options, see `interpolation_options`.

    Raises:
        ValueError: on unknown options, size mismatches or wrong source values.
    """
    _check_kind(kind)
    options = interpolation_options()
    for key in kwargs:
        if key not in options:
            raise ValueError(f"unknown interpolation option '{key}', valid "
                             f"options are {list(options)}.")
    options.update(kwargs)

    arr = _target_array(target, space)
    mesh = space.mesh
    source = SourceEvaluator(data, mesh, space.ncomponents,
                             time=options['time'], params=options['params'])

    if kind == ON_CELLS:
        NC = mesh.number_of_cells()
        items = np.arange(NC) if items is None else np.asarray(items, dtype=mesh.itype).reshape(-1)
        if items.size == 0:
            return
        faces = np.unique(mesh.cell_to_face()[items])
        interpolate_face_moments(arr, space, source, faces, options)
        space.fetype.interpolate_interior(arr, space, source.on_cells, items, options)
        return

    bdindex = mesh.boundary_face_index()
    if items is None:
        items = np.arange(mesh.number_of_faces()) if kind == ON_FACES else bdindex
    else:
        items = np.asarray(items, dtype=mesh.itype).reshape(-1)
        if kind == ON_BFACES and not np.all(np.isin(items, bdindex)):
            raise ValueError("ON_BFACES interpolation got faces that are not "
                             "on the boundary.")
    if items.size == 0:
        return
    interpolate_face_moments(arr, space, source, items, options)


def interpolate_face_moments(target: TensorLike, space, source: SourceEvaluator,
                             items: TensorLike, options: dict) -> None:
    """Write the normal flux moments of `source` on the faces `items`."""
    mesh = space.mesh
    fetype = space.fetype
    q = fetype.face_quadorder(mesh.geometry)
    if options['quadorder'] is not None:
        q = max(q, options['quadorder'])
    q += options['bonus_quadorder']
    qf = mesh.quadrature_formula(q, 'face')
    bcs, ws = qf.get_quadrature_points_and_weights()

    val = source.on_faces(bcs, items) # (NF, NQ, GD)
    n = mesh.face_normal(index=items)
    fm = mesh.entity_measure('face', index=items)
    flux = np.einsum('fqd, fd->fq', val, n)
    moments = fetype.face_moments(bcs) # (NQ, fdof)
    target[space.face_to_dof(index=items)] = np.einsum('q, fq, qk, f->fk', ws, flux, moments, fm)
    logger.debug(f"face moments of {len(items)} faces interpolated with "
                 f"quadrature order {q}.")

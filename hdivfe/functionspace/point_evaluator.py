
from typing import Any, Callable, Optional, Sequence, Tuple

import numpy as np

from ..typing import TensorLike
from .. import logger
from ..mesh.transform import L2GTransformer
from ..mesh.cell_finder import CellFinder
from .operators import Operator
from .fe_evaluator import FEEvaluator
from .fe_vector import FEVector, FEVectorBlock
from .qpinfo import QPInfo


def evaluator_options(
        name: str='PointEvaluator',
        resultdim: int=0,
        params: Optional[Any]=None,
        verbosity: int=0
        ) -> dict:
    """Default options of `PointEvaluator`.

    Parameters:
        name (str): name used in log messages.
        resultdim (int): expected length of the result vectors, 0 for the
            length of the operator values (standard kernel) or no check.
        params (Any): passed to the kernel through `qpinfo.params`.
        verbosity (int): log the setup at info level if positive.
    """
    return {
        'name': name,
        'resultdim': resultdim,
        'params': params,
        'verbosity': verbosity,
    }


def standard_kernel(result: TensorLike, input: TensorLike, qpinfo: QPInfo) -> None:
    result[:] = input


class PointEvaluatorData():
    """The fields of a point evaluator, resolved once per solution.

    The object is not modified after construction and can be shared by
    several evaluators.

    Attributes:
        blocks (list[FEVectorBlock]): the blocks read by the operators.
        operators (list[Operator]): one operator per block.
        offsets (Tensor): start of the values of operator `j` in the kernel
            input; `offsets[-1]` is the input length.
        cell2dof (list[Tensor]): cell-to-dof maps of the spaces.
        mesh (HomogeneousMesh): the common mesh of the spaces.
    """
    def __init__(self, blocks: Sequence[FEVectorBlock], operators: Sequence[Operator],
                 time: float=0.0, params: Optional[Any]=None) -> None:
        spaces = [block.space for block in blocks]
        mesh = spaces[0].mesh
        for space in spaces[1:]:
            if space.mesh is not mesh:
                raise ValueError("all fields of a point evaluator must live on "
                                 "the same mesh.")
        self.blocks = tuple(blocks)
        self.operators = tuple(operators)
        self.spaces = tuple(spaces)
        self.mesh = mesh
        self.geometries = mesh.unique_cell_geometries()
        self.cell2dof = tuple(space.cell_to_dof() for space in spaces)
        ncomps = [op.ncomponents(space) for op, space in zip(operators, spaces)]
        self.offsets = np.concatenate([[0], np.cumsum(ncomps)]).astype(np.int_)
        self.time = time
        self.params = params

    @property
    def ninput(self) -> int:
        return int(self.offsets[-1])


class PointEvaluator():
    """Evaluate a kernel of operator values of FE fields at points.

    For every point the operators are applied to their fields, their values
    are concatenated into one input vector and the kernel is called as
    `kernel(result, input, qpinfo)`. Without kernel the input is copied to
    the result.

    An evaluator keeps the last cell it found a point in and starts the next
    search there, so a single evaluator must not be used from several
    threads. `spawn` gives further evaluators sharing the resolved fields.

    Parameters:
        kernel (Callable | None): the kernel.
        oa_args (Sequence): pairs `(tag_or_index, operator)` selecting the
            blocks of the solution and the operators applied to them.
        sol (FEVector | Sequence[FEVectorBlock], optional): initialize with
            this solution right away.
        **kwargs: options, see `evaluator_options`.

    Example:
        >>> PE = PointEvaluator(None, [(0, Identity), (0, Divergence)], sol)
        >>> result = np.zeros(3)
        >>> PE.evaluate(result, np.array([0.25, 0.25]))
    """
    def __init__(self, kernel: Optional[Callable], oa_args: Sequence[Tuple[Any, Operator]],
                 sol=None, **kwargs) -> None:
        self.kernel = standard_kernel if kernel is None else kernel
        if len(oa_args) == 0:
            raise ValueError("a point evaluator needs at least one (field, operator) pair.")
        self.u_args = [arg[0] for arg in oa_args]
        self.ops_args = [self._operator(arg[1]) for arg in oa_args]
        self.options = evaluator_options()
        self._update_options(kwargs)

        self.data: Optional[PointEvaluatorData] = None
        self.lastitem = 0
        if sol is not None:
            self.initialize(sol)

    @staticmethod
    def _operator(op) -> Operator:
        if isinstance(op, type) and issubclass(op, Operator):
            op = op()
        if not isinstance(op, Operator):
            raise TypeError(f"expected an Operator, but got {op!r}.")
        return op

    def _update_options(self, kwargs: dict) -> None:
        for key in kwargs:
            if key not in self.options:
                raise ValueError(f"unknown point evaluator option '{key}', valid "
                                 f"options are {list(self.options)}.")
        self.options.update(kwargs)

    def __repr__(self) -> str:
        ops = ", ".join(f"({u}, {op})" for u, op in zip(self.u_args, self.ops_args))
        return f"{self.options['name']}[{ops}]"

    def _resolve(self, sol):
        if isinstance(sol, FEVector):
            return [sol[u] for u in self.u_args]
        if isinstance(sol, (list, tuple)) and all(isinstance(b, FEVectorBlock) for b in sol):
            for u in self.u_args:
                if not isinstance(u, (int, np.integer)):
                    raise TypeError("blocks given as a sequence are selected by "
                                    f"position, but got {u!r}.")
            return [sol[u] for u in self.u_args]
        raise TypeError(f"expected an FEVector or a sequence of FEVectorBlocks, "
                        f"but got {type(sol).__name__}.")

    def initialize(self, sol, time: float=0.0, **kwargs) -> None:
        """Resolve the fields in `sol` and build the evaluation workspace.

        Raises:
            KeyError: if a tag is not found in `sol`.
            ValueError: if the fields live on different meshes.
        """
        self._update_options(kwargs)
        blocks = self._resolve(sol)
        data = PointEvaluatorData(blocks, self.ops_args, time=time,
                                  params=self.options['params'])
        self._bind(data)
        if self.options['verbosity'] > 0:
            logger.info(f"{self} initialized on {data.mesh.number_of_cells()} "
                        f"cells with {data.ninput} operator values.")

    def _bind(self, data: PointEvaluatorData) -> None:
        self.data = data
        mesh = data.mesh
        self.evaluators = {
            geo: [FEEvaluator(space, op) for space, op in zip(data.spaces, data.operators)]
            for geo in data.geometries
        }
        self.trafos = {geo: L2GTransformer(geo, mesh) for geo in data.geometries}
        self.finder = CellFinder(mesh)
        self.input = np.zeros(data.ninput, dtype=np.float64)
        self.qpinfo = QPInfo(mesh.geo_dimension(), time=data.time, params=data.params)
        self.lastitem = 0

    def spawn(self) -> 'PointEvaluator':
        """A new evaluator sharing the resolved fields, with its own workspace."""
        self._check_initialized()
        pe = PointEvaluator(self.kernel, list(zip(self.u_args, self.ops_args)),
                            **self.options)
        pe._bind(self.data)
        return pe

    def _check_initialized(self) -> None:
        if self.data is None:
            raise RuntimeError(f"{self} is not initialized, call initialize(sol) first.")

    def _check_result(self, result: TensorLike) -> None:
        resultdim = self.options['resultdim']
        if resultdim == 0 and self.kernel is standard_kernel:
            resultdim = self.data.ninput
        if resultdim > 0 and result.shape[0] != resultdim:
            raise ValueError(f"result of length {result.shape[0]} does not match "
                             f"the result dimension {resultdim}.")

    def evaluate_bary(self, result: TensorLike, xref: TensorLike, cell: int) -> TensorLike:
        """Evaluate at the reference point `xref` of `cell`.

        Returns:
            Tensor: `result`, written in place.
        """
        self._check_initialized()
        self._check_result(result)
        data = self.data
        mesh = data.mesh
        cell = int(cell)
        geo = mesh.cell_geometry(cell)
        xref = np.asarray(xref, dtype=np.float64)

        trafo = self.trafos[geo]
        trafo.update(cell)
        self.qpinfo.set(trafo.eval(xref), xref, cell, cell, mesh.cellregion[cell])

        inp = self.input
        for j, fe in enumerate(self.evaluators[geo]):
            fe.relocate_xref(xref)
            fe.update(cell)
            uh = data.blocks[j].view()[data.cell2dof[j][cell]]
            start, stop = data.offsets[j], data.offsets[j+1]
            inp[start:stop] = np.einsum('l, ld->d', uh, fe.cvals[0])

        self.kernel(result, inp, self.qpinfo)
        return result

    def evaluate(self, result: TensorLike, x: TensorLike) -> TensorLike:
        """Evaluate at the physical point `x`.

        Raises:
            PointNotFoundError: if no cell contains `x`.
        """
        self._check_initialized()
        cell, xref = self.finder.locate(x, start=self.lastitem)
        self.lastitem = cell
        return self.evaluate_bary(result, xref, cell)

    def eval_func(self) -> Callable[[TensorLike, TensorLike], TensorLike]:
        """A function `f(result, x)` evaluating at physical points."""
        self._check_initialized()
        return self.evaluate

    def eval_func_bary(self) -> Callable[[TensorLike, TensorLike, int], TensorLike]:
        """A function `f(result, xref, cell)` evaluating at reference points."""
        self._check_initialized()
        return self.evaluate_bary

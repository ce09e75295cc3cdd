
import numpy as np

from .quadrature import Quadrature
from .gauss_legendre import GaussLegendreQuadrature


class TensorProductQuadrature(Quadrature):
    """Tensor product of Gauss-Legendre rules on the unit square or cube."""
    def __init__(self, dim: int, index: int, *, dtype=None) -> None:
        self.dim = dim
        super().__init__(index, dtype=dtype)

    def make(self, index: int):
        qf = GaussLegendreQuadrature(index, dtype=self.dtype)
        bcs, ws = qf.get_quadrature_points_and_weights()
        n = self.dim

        # einsum string for the product of n weight vectors, e.g. 'a, b->ab'
        s0 = 'abcdef'
        s = ', '.join(s0[:n]) + '->' + s0[:n]
        weights = np.einsum(s, *(n*(ws, ))).reshape(-1)

        grids = np.meshgrid(*(n*(bcs[:, 0], )), indexing='ij')
        quadpts = np.stack([g.reshape(-1) for g in grids], axis=-1)
        return quadpts, weights


import numpy as np
from scipy.special import roots_jacobi

from .quadrature import Quadrature


class StroudQuadrature(Quadrature):
    """Conical product (collapsed Gauss-Jacobi) rule on the reference simplex.

    Notes
    -----
    The reference simplex of dimension `dim` has the vertices 0, e_1, ...,
    e_dim. With `q//2 + 1` points per direction the rule is exact for
    polynomials of degree `q`.
    """
    def __init__(self, dim: int, index: int, *, dtype=None) -> None:
        self.dim = dim
        super().__init__(index, dtype=dtype)

    def _to_simplex(self, points):
        d = self.dim
        shape = points.shape[:-1]
        bcs = np.zeros(shape+(d+1, ), dtype=self.dtype)
        bcs[:, 0] = points[:, 0]
        for i in range(1, d):
            bcs[:, i] = points[:, i] * (1-bcs[:, :i].sum(axis=-1))
        bcs[:, d] = 1-bcs[:, :d].sum(axis=-1)
        return bcs

    def make(self, index: int):
        d = self.dim
        n = index//2 + 1

        points = []
        weights = []
        for i in range(1, d+1):
            p, w, s = roots_jacobi(n, d-i, 0, mu=True)
            points.append((p+1)/2)
            weights.append(w/s)
        points = np.meshgrid(*points)
        weights = np.meshgrid(*weights)

        points = np.array([p.flatten() for p in points]).T
        weights = np.prod([w.flatten() for w in weights], axis=0)
        bcs = self._to_simplex(points)
        # reference coordinates are the barycentric coordinates of e_1, ..., e_dim
        return bcs[:, 1:], weights.astype(self.dtype)

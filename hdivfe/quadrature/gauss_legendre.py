
import numpy as np
from scipy.special import roots_legendre

from .quadrature import Quadrature


class GaussLegendreQuadrature(Quadrature):
    """Gauss-Legendre rule on the reference interval [0, 1].

    The rule with index `q` has `q//2 + 1` points and integrates polynomials
    of degree `q` exactly.
    """
    def make(self, index: int):
        NQ = index//2 + 1
        x, w = roots_legendre(NQ)
        quadpts = ((x + 1)/2).reshape(-1, 1).astype(self.dtype)
        weights = (w/2).astype(self.dtype)
        return quadpts, weights

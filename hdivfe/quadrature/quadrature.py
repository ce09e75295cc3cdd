
from typing import Tuple, Optional

import numpy as np

from ..typing import TensorLike


class Quadrature():
    r"""Base class for quadrature generators.

    Quadrature points are given in reference coordinates of the entity and the
    weights are normalised to sum up to one, so that an integral over a mesh
    entity is `measure * sum(ws * f(ps))`.
    """
    def __init__(self, index: Optional[int]=None, *, dtype=None) -> None:
        self.dtype = dtype if dtype else np.float64
        self.quadpts, self.weights = self.make(index)

    def __len__(self) -> int:
        return self.number_of_quadrature_points()

    def make(self, index: int) -> Tuple[TensorLike, TensorLike]:
        raise NotImplementedError

    def number_of_quadrature_points(self) -> int:
        return self.weights.shape[0]

    def get_quadrature_points_and_weights(self) -> Tuple[TensorLike, TensorLike]:
        """Get all quadrature points and weights in the formula.

        Returns:
            (Tensor, Tensor): Quadrature points shaped (NQ, TD) and weights (NQ, ).
        """
        return self.quadpts, self.weights


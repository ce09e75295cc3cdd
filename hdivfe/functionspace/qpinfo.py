
from typing import Any, Optional

import numpy as np

from ..typing import TensorLike


class QPInfo():
    """Information about the current quadrature point handed to kernels.

    Attributes:
        x (Tensor): physical coordinates (GD, ).
        xref (Tensor): reference coordinates of the current entity.
        item (int): index of the current entity (cell or face).
        cell (int): index of the cell the entity belongs to.
        region (int): region number of the entity.
        volume (float): measure of the entity.
        time (float): the time passed by the caller.
        params (Any): user parameters passed by the caller.
    """
    __slots__ = ('x', 'xref', 'item', 'cell', 'region', 'volume', 'time', 'params')

    def __init__(self, GD: int, time: float=0.0, params: Optional[Any]=None) -> None:
        self.x = np.zeros(GD, dtype=np.float64)
        self.xref = None
        self.item = 0
        self.cell = 0
        self.region = 0
        self.volume = 0.0
        self.time = time
        self.params = params

    def __repr__(self) -> str:
        return (f"QPInfo(x={self.x}, xref={self.xref}, item={self.item}, "
                f"cell={self.cell}, region={self.region}, time={self.time})")

    def set(self, x: TensorLike, xref: TensorLike, item: int, cell: int,
            region: int, volume: float=0.0) -> None:
        self.x[:] = x
        self.xref = xref
        self.item = item
        self.cell = cell
        self.region = region
        self.volume = volume

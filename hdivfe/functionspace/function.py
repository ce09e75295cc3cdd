
import numpy as np

from ..typing import _S


class Function(np.ndarray):
    """Dof values of a finite element function, bound to its space."""
    def __new__(cls, space, array=None):
        if array is None:
            self = space.array().view(cls)
        else:
            self = np.asarray(array).view(cls)
        self.space = space
        return self

    def __array_finalize__(self, obj):
        if obj is None:
            return
        self.space = getattr(obj, 'space', None)

    def __call__(self, bc, index=_S):
        return self.space.value(self, bc, index=index)

    def value(self, bc, index=_S):
        return self.space.value(self, bc, index=index)

    def div_value(self, bc, index=_S):
        return self.space.div_value(self, bc, index=index)

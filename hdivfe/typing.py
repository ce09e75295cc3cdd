
from typing import Tuple, Union

import numpy as np


### Types

TensorLike = np.ndarray
Index = Union[int, slice, Tuple[int, ...], TensorLike]


### Constants

_S = slice(None)
Size = Tuple[int, ...]

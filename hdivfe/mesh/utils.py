
import numpy as np

from ..typing import TensorLike


def flocc(array: TensorLike, /):
    """Find the first and last occurrence of each unique row in a 2D array.

    Returns:
        out (TensorLike, TensorLike, TensorLike):
        - The first occurrence index of each unique row.
        - The last occurrence index of each unique row.
        - The indices of `array` that result in the unique rows.
    """
    if array.ndim != 2:
        raise ValueError("total_face must be a 2D array.")

    indices = np.lexsort(tuple(reversed(array.T)), axis=0)
    sorted_array = array[indices]
    diff_flag = np.any(sorted_array[1:] != sorted_array[:-1], axis=1)
    TRUE = np.ones((1,), dtype=np.bool_)
    diff_flag = np.concatenate([TRUE, diff_flag, TRUE])
    group_index = np.cumsum(diff_flag[:-1], axis=0) - 1

    i0 = indices[diff_flag[:-1]] # first occurrence index: unique -> original
    i1 = indices[diff_flag[1:]] # last occurrence index: unique -> original
    j = np.empty_like(indices)
    j[indices] = group_index # original -> unique
    return i0, i1, j

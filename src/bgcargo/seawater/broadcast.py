# src/bgcargo/seawater/broadcast.py
from typing import Tuple

import numpy as np

from ..exceptions import ShapeMismatchError


def data_shape(SA, CT, func_name: str) -> Tuple[np.ndarray, np.ndarray, Tuple[int, int]]:
    """Validate the primary data arrays and return them as 2-D arrays.

    A scalar or 1-D input is viewed as a single row.
    """
    SA = np.asarray(SA, dtype=float)
    CT = np.asarray(CT, dtype=float)
    if SA.shape != CT.shape:
        raise ShapeMismatchError(f"{func_name}: SA and CT must have same dimensions")
    if SA.ndim > 2:
        raise ShapeMismatchError(f"{func_name}: inputs must be scalars, vectors or matrices")

    SA2 = np.atleast_2d(SA)
    return SA2, np.atleast_2d(CT), SA2.shape


def broadcast_to_data(arr, shape: Tuple[int, int], func_name: str, name: str = 'input') -> np.ndarray:
    """Expand a secondary input (pressure, latitude, ...) to the data shape.

    Accepted for data of shape (M, N): a scalar, a row (1, N), a column
    (M, 1), a transposed row (N, 1) or the full (M, N) array. A 1-D input is
    matched as a row first, then as a column.
    """
    ms, ns = shape
    arr = np.asarray(arr, dtype=float)
    if arr.ndim == 1:
        if arr.size == ns:
            arr = arr.reshape(1, ns)
        elif arr.size == ms:
            arr = arr.reshape(ms, 1)
    elif arr.ndim == 0:
        arr = arr.reshape(1, 1)
    if arr.ndim != 2:
        raise ShapeMismatchError(
            f"{func_name}: {name} array dimensions {arr.shape} do not agree with data {shape}")

    mp, np_ = arr.shape
    if mp == 1 and np_ == 1:
        return np.full(shape, arr[0, 0])
    if mp == 1 and np_ == ns:
        return np.repeat(arr, ms, axis=0)
    if np_ == 1 and mp == ms:
        return np.repeat(arr, ns, axis=1)
    if np_ == 1 and mp == ns:
        return np.repeat(arr.T, ms, axis=0)
    if (mp, np_) == (ms, ns):
        return arr.copy()
    raise ShapeMismatchError(
        f"{func_name}: {name} array dimensions {arr.shape} do not agree with data {shape}")


def restore_shape(result: np.ndarray, original) -> np.ndarray:
    """Give the result the shape of the original SA input"""
    shape = np.shape(original)
    if shape == ():
        return result.reshape(())[()]
    return result.reshape(shape)

from __future__ import annotations

import numpy as np

from .matrix import AugmentedMatrix, unknown_count


def inconsistent_rows(matrix: AugmentedMatrix) -> tuple[int, ...]:
    """Rows that read ``0 = c`` with ``c != 0``."""
    coefficients = matrix[:, :-1]
    zero_rows = ~np.any(coefficients != 0.0, axis=1)
    contradicted = zero_rows & (matrix[:, -1] != 0.0)
    return tuple(int(index) for index in np.flatnonzero(contradicted))


def check_consistency(matrix: AugmentedMatrix) -> bool:
    return not inconsistent_rows(matrix)


def pivot_product(matrix: AugmentedMatrix) -> float:
    """Anti-diagonal product; row ``N - 1 - p`` holds the pivot of column ``p``."""
    size = unknown_count(matrix)
    product = 1.0
    for column in range(size):
        product *= float(matrix[size - 1 - column, column])
    return product


def has_full_pivots(matrix: AugmentedMatrix) -> bool:
    # the float pivot product can underflow while every pivot is nonzero
    size = unknown_count(matrix)
    return all(matrix[size - 1 - column, column] != 0.0 for column in range(size))

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from .matrix import AugmentedMatrix, SolverInvariantError, unknown_count


def back_substitute(matrix: AugmentedMatrix) -> NDArray[np.float64]:
    """Solve a fully pivoted bottom-up echelon matrix, last unknown first.

    Unknown ``k`` is read from row ``N - 1 - k``, whose only nonzero
    coefficients sit in columns ``k`` and above.
    """
    size = unknown_count(matrix)
    x = np.zeros(size, dtype=np.float64)
    for unknown in range(size - 1, -1, -1):
        row = size - 1 - unknown
        pivot = float(matrix[row, unknown])
        if pivot == 0.0:
            raise SolverInvariantError(
                f"zero pivot at row {row}, column {unknown} during back substitution"
            )
        known = float(np.dot(x[unknown + 1 :], matrix[row, unknown + 1 : size]))
        x[unknown] = (float(matrix[row, size]) - known) / pivot
    return x

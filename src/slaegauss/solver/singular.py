from __future__ import annotations

import logging

import numpy as np
from numpy.typing import NDArray

from .matrix import AugmentedMatrix, SolverInvariantError, unknown_count

logger = logging.getLogger(__name__)

type BasisMap = dict[int, tuple[int, int]]


def find_similar_row(matrix: AugmentedMatrix, row: int) -> int | None:
    """Index of another row equal to ``row`` element by element, if any."""
    for other in range(int(matrix.shape[0])):
        if other != row and np.array_equal(matrix[other], matrix[row]):
            return other
    return None


def check_basis(matrix: AugmentedMatrix) -> BasisMap:
    size = unknown_count(matrix)
    basis: BasisMap = {}
    for row in range(int(matrix.shape[0])):
        similar = find_similar_row(matrix, row)
        if similar is not None and similar < row:
            logger.debug("row %d duplicates row %d, skipped for basis", row, similar)
            continue
        nonzero = np.flatnonzero(matrix[row, :size] != 0.0)
        if nonzero.size == 0:
            continue
        column = int(nonzero[0])
        if column not in basis:
            basis[column] = (row, column)
    return basis


def solve_multiple_solutions(matrix: AugmentedMatrix, basis: BasisMap) -> NDArray[np.float64]:
    """Particular solution with every free variable fixed at zero."""
    size = unknown_count(matrix)
    rows = int(matrix.shape[0])
    x = np.zeros(size, dtype=np.float64)
    for column in sorted(basis, reverse=True):
        row, pivot_column = basis[column]
        if pivot_column != column or not 0 <= column < size or not 0 <= row < rows:
            raise SolverInvariantError(f"malformed basis entry {column} -> {(row, pivot_column)}")
        pivot = float(matrix[row, column])
        if pivot == 0.0:
            raise SolverInvariantError(f"basis pivot at row {row}, column {column} is zero")
        value = float(matrix[row, size])
        for other in range(column + 1, size):
            if other in basis:
                value -= x[other] * float(matrix[row, other])
        x[column] = value / pivot
    return x


def free_columns(matrix: AugmentedMatrix, basis: BasisMap) -> tuple[int, ...]:
    return tuple(column for column in range(unknown_count(matrix)) if column not in basis)

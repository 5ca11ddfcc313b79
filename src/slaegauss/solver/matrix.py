from __future__ import annotations

from collections.abc import Sequence
from enum import StrEnum

import numpy as np
from numpy.typing import ArrayLike, NDArray

type AugmentedMatrix = NDArray[np.float64]


class MatrixErrorCode(StrEnum):
    E_INPUT_SHAPE_INVALID = "E_INPUT_SHAPE_INVALID"
    E_INPUT_NONFINITE = "E_INPUT_NONFINITE"
    E_INPUT_SIZE_MISMATCH = "E_INPUT_SIZE_MISMATCH"


class MatrixShapeError(ValueError):
    def __init__(self, code: MatrixErrorCode, message: str, shape: tuple[int, ...] = ()) -> None:
        super().__init__(f"{code.value}: {message}")
        self.code = code.value
        self.message = message
        self.shape = shape


class SolverInvariantError(RuntimeError):
    """Internal contract violation; the numeric output would be wrong."""

    def __init__(self, message: str) -> None:
        super().__init__(f"E_SOLVER_INVARIANT: {message}")
        self.code = "E_SOLVER_INVARIANT"
        self.message = message


class SolverStateError(RuntimeError):
    def __init__(self, message: str) -> None:
        super().__init__(f"E_SOLVER_STATE: {message}")
        self.code = "E_SOLVER_STATE"
        self.message = message


def as_augmented_matrix(
    data: ArrayLike | Sequence[Sequence[float]],
    *,
    expected_unknowns: int | None = None,
) -> AugmentedMatrix:
    """Validate ``data`` as an ``N x (N + 1)`` real grid and return a float copy.

    The copy is always fresh, so the caller's object is never mutated by a solve.
    """
    try:
        matrix = np.array(data, dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise MatrixShapeError(
            MatrixErrorCode.E_INPUT_SHAPE_INVALID,
            f"matrix must be a rectangular grid of real numbers: {exc}",
        ) from exc

    if matrix.ndim != 2:
        raise MatrixShapeError(
            MatrixErrorCode.E_INPUT_SHAPE_INVALID,
            f"matrix must be two-dimensional, got {matrix.ndim} dimension(s)",
            tuple(int(dim) for dim in matrix.shape),
        )
    rows, cols = (int(dim) for dim in matrix.shape)
    if rows < 1 or cols != rows + 1:
        raise MatrixShapeError(
            MatrixErrorCode.E_INPUT_SHAPE_INVALID,
            f"augmented matrix must have shape (N, N + 1) with N >= 1, got ({rows}, {cols})",
            (rows, cols),
        )
    if expected_unknowns is not None and rows != expected_unknowns:
        raise MatrixShapeError(
            MatrixErrorCode.E_INPUT_SIZE_MISMATCH,
            f"expected {expected_unknowns} equations in {expected_unknowns} unknowns, got {rows}",
            (rows, cols),
        )
    if not np.isfinite(matrix).all():
        raise MatrixShapeError(
            MatrixErrorCode.E_INPUT_NONFINITE,
            "matrix entries must be finite",
            (rows, cols),
        )
    return matrix


def snapshot(matrix: AugmentedMatrix) -> AugmentedMatrix:
    frozen = matrix.copy()
    frozen.flags.writeable = False
    return frozen


def swap_rows(matrix: AugmentedMatrix, first: int, second: int) -> None:
    matrix[[first, second]] = matrix[[second, first]]


def unknown_count(matrix: AugmentedMatrix) -> int:
    return int(matrix.shape[1]) - 1

from __future__ import annotations

import warnings
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

import numpy as np
from numpy.typing import NDArray
from scipy.linalg import LinAlgError, LinAlgWarning, lu_factor  # type: ignore[import-untyped]


@runtime_checkable
class ConditionEstimator(Protocol):
    def estimate(self, A: NDArray[np.float64]) -> float | None: ...


@dataclass(frozen=True, slots=True)
class LuRcondProxyEstimator:
    """``min|U_ii| / max|U_ii|`` of a partial-pivoting LU of the coefficient block."""

    def estimate(self, A: NDArray[np.float64]) -> float | None:
        matrix = np.asarray(A, dtype=np.float64)
        if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
            return None
        if matrix.size == 0:
            return 1.0
        try:
            with warnings.catch_warnings():
                warnings.simplefilter("ignore", LinAlgWarning)
                lu, _ = lu_factor(matrix, check_finite=True)
        except (LinAlgError, ValueError):
            return None
        magnitudes = np.abs(np.diagonal(lu))
        if not np.isfinite(magnitudes).all():
            return None
        max_mag = float(np.max(magnitudes))
        min_mag = float(np.min(magnitudes))
        if max_mag <= 0.0:
            return 0.0
        return min_mag / max_mag

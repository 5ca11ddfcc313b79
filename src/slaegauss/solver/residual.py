from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Literal

import numpy as np
from numpy.typing import NDArray

from .config import ResidualThresholds, SolverConfigError, load_solver_threshold_config
from .matrix import AugmentedMatrix

_DEFAULT_THRESHOLDS = load_solver_threshold_config()
EPSILON = _DEFAULT_THRESHOLDS.residual.epsilon
PASS_MAX = _DEFAULT_THRESHOLDS.residual.pass_max
DEGRADED_MAX = _DEFAULT_THRESHOLDS.residual.degraded_max

type ResidualStatus = Literal["pass", "degraded", "fail"]


@dataclass(frozen=True, slots=True)
class ResidualMetrics:
    res_l2: float
    res_linf: float
    res_rel: float


def compute_residual_vector(
    original: AugmentedMatrix,
    x: NDArray[np.float64],
) -> NDArray[np.float64]:
    """``E[i] = b[i] - sum_j x[j] * A[i, j]`` on the untouched input."""
    coefficients = original[:, :-1]
    if coefficients.shape[1] != x.shape[0]:
        raise ValueError("solution length does not match the number of unknowns")
    residual = np.array(original[:, -1], dtype=np.float64)
    for column in range(int(x.shape[0])):
        residual -= x[column] * coefficients[:, column]
    return residual


def compute_residual_metrics(
    original: AugmentedMatrix,
    x: NDArray[np.float64],
    *,
    epsilon: float = EPSILON,
) -> ResidualMetrics:
    residual = compute_residual_vector(original, x)
    res_l2 = _vector_l2_norm(residual)
    res_linf = _vector_inf_norm(residual)
    a_linf = _matrix_inf_norm(original[:, :-1])
    x_linf = _vector_inf_norm(x)
    b_linf = _vector_inf_norm(original[:, -1])
    denominator = (a_linf * x_linf) + b_linf + epsilon
    if denominator == 0.0:
        res_rel = 0.0 if res_linf == 0.0 else math.inf
    else:
        res_rel = res_linf / denominator
    return ResidualMetrics(res_l2=res_l2, res_linf=res_linf, res_rel=res_rel)


def classify_status(
    res_rel: float,
    thresholds: ResidualThresholds | None = None,
) -> ResidualStatus:
    bands = thresholds if thresholds is not None else _DEFAULT_THRESHOLDS.residual
    if not math.isfinite(res_rel):
        return "fail"
    if res_rel <= bands.pass_max:
        return "pass"
    if res_rel <= bands.degraded_max:
        return "degraded"
    if res_rel > bands.fail_min_exclusive:
        return "fail"
    raise SolverConfigError(
        "E_SOLVER_CONFIG_INVALID",
        "residual status bands leave an undefined interval between degraded_max and fail_min_exclusive",
    )


def _vector_l2_norm(vector: NDArray[np.float64]) -> float:
    if vector.size == 0:
        return 0.0
    return float(np.linalg.norm(vector, ord=2))


def _vector_inf_norm(vector: NDArray[np.float64]) -> float:
    if vector.size == 0:
        return 0.0
    return float(np.max(np.abs(vector)))


def _matrix_inf_norm(matrix: NDArray[np.float64]) -> float:
    row_abs_sums = np.sum(np.abs(matrix), axis=1)
    if row_abs_sums.size == 0:
        return 0.0
    return float(np.max(row_abs_sums))

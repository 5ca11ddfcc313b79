from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType
from typing import Literal

import numpy as np
from numpy.typing import ArrayLike, NDArray

from .classify import check_consistency, has_full_pivots, pivot_product
from .conditioning import ConditionEstimator, LuRcondProxyEstimator
from .config import (
    EXPECTED_COND_ESTIMATOR_ID,
    SolverConfigError,
    SolverThresholdConfig,
    load_solver_threshold_config,
)
from .eliminate import EliminationSummary, eliminate
from .events import (
    BackSubstitutionComplete,
    EventSink,
    GridSnapshot,
    MatrixInitialized,
    SolveComplete,
    SolveEvent,
    SolveObserver,
)
from .matrix import AugmentedMatrix, SolverStateError, as_augmented_matrix, snapshot
from .normalize import normalize_rows
from .residual import (
    ResidualMetrics,
    ResidualStatus,
    classify_status,
    compute_residual_metrics,
    compute_residual_vector,
)
from .singular import BasisMap, check_basis, solve_multiple_solutions
from .substitute import back_substitute

logger = logging.getLogger(__name__)

type SolutionKind = Literal["unique", "singular", "inconsistent"]


@dataclass(frozen=True, slots=True)
class SolveWarning:
    code: str
    message: str


@dataclass(frozen=True, slots=True)
class SolveResult:
    kind: SolutionKind
    x: NDArray[np.float64] | None
    residual: NDArray[np.float64] | None
    residual_metrics: ResidualMetrics | None
    residual_status: ResidualStatus | None
    pivot_product: float
    consistent: bool
    basis: Mapping[int, tuple[int, int]] | None
    matrix: AugmentedMatrix
    original: AugmentedMatrix
    swap_count: int
    elimination: EliminationSummary
    cond_ind: float
    warnings: tuple[SolveWarning, ...]
    trace: tuple[SolveEvent, ...]

    @property
    def singular(self) -> bool:
        return not has_full_pivots(self.matrix)


class GaussSolver:
    """Owns one augmented matrix ``[A | b]`` and solves it once.

    The input is copied at construction; ``original`` keeps a read-only
    snapshot for residuals while ``matrix`` is reduced in place.
    """

    def __init__(
        self,
        matrix: ArrayLike | Sequence[Sequence[float]],
        *,
        thresholds: SolverThresholdConfig | None = None,
        expected_unknowns: int | None = None,
        condition_estimator: ConditionEstimator | None = None,
    ) -> None:
        self.thresholds = thresholds if thresholds is not None else load_solver_threshold_config()
        size_contract = (
            expected_unknowns
            if expected_unknowns is not None
            else self.thresholds.expected_unknowns
        )
        self.matrix = as_augmented_matrix(matrix, expected_unknowns=size_contract)
        self.original = snapshot(self.matrix)
        self.x = np.zeros(self.unknowns, dtype=np.float64)
        self.residual = np.zeros(self.equations, dtype=np.float64)
        self._estimator = _resolve_condition_estimator(self.thresholds, condition_estimator)
        self._solved = False

    @property
    def equations(self) -> int:
        return int(self.matrix.shape[0])

    @property
    def unknowns(self) -> int:
        return int(self.matrix.shape[1]) - 1

    def solve(self, *, observer: SolveObserver | None = None) -> SolveResult:
        if self._solved:
            raise SolverStateError("solver instance already consumed; build a new GaussSolver")
        self._solved = True

        sink = EventSink(observer)
        elimination_config = self.thresholds.elimination
        sink.emit(MatrixInitialized(matrix=snapshot(self.matrix)))
        sink.emit(GridSnapshot(matrix=snapshot(self.matrix), stage="pre_elimination"))

        swap_count = normalize_rows(self.matrix, emit=sink.emit)
        summary = eliminate(
            self.matrix,
            emit=sink.emit,
            zero_snap=elimination_config.zero_snap_relative,
            integer_ratio=elimination_config.integer_ratio_enabled,
            pairwise_pivoting=elimination_config.pairwise_pivoting_enabled,
        )
        sink.emit(GridSnapshot(matrix=snapshot(self.matrix), stage="post_elimination"))

        product = pivot_product(self.matrix)
        consistent = check_consistency(self.matrix)
        sink.emit(SolveComplete(pivot_product=product, consistent=consistent))
        logger.debug(
            "classified %dx%d system: pivot_product=%r consistent=%s",
            self.equations,
            self.unknowns,
            product,
            consistent,
        )

        cond_ind, warnings = self._condition_warnings()
        if not consistent:
            logger.info("system is inconsistent, no solution produced")
            return SolveResult(
                kind="inconsistent",
                x=None,
                residual=None,
                residual_metrics=None,
                residual_status=None,
                pivot_product=product,
                consistent=False,
                basis=None,
                matrix=snapshot(self.matrix),
                original=self.original,
                swap_count=swap_count,
                elimination=summary,
                cond_ind=cond_ind,
                warnings=warnings,
                trace=sink.trace,
            )

        basis: BasisMap | None = None
        full_pivots = has_full_pivots(self.matrix)
        if full_pivots:
            self.x = back_substitute(self.matrix)
            kind: SolutionKind = "unique"
        else:
            logger.info("column without pivot, resolving a particular solution")
            basis = check_basis(self.matrix)
            self.x = solve_multiple_solutions(self.matrix, basis)
            kind = "singular"

        self.residual = compute_residual_vector(self.original, self.x)
        metrics = compute_residual_metrics(
            self.original, self.x, epsilon=self.thresholds.residual.epsilon
        )
        if not np.all(np.isfinite(self.x)):
            logger.warning("elimination produced a non-finite solution for a %s system", kind)
        status = classify_status(metrics.res_rel, self.thresholds.residual)
        x_view = _readonly(self.x)
        residual_view = _readonly(self.residual)
        sink.emit(
            BackSubstitutionComplete(
                matrix=snapshot(self.matrix),
                x=x_view,
                residual=residual_view,
                singular=not full_pivots,
            )
        )
        return SolveResult(
            kind=kind,
            x=x_view,
            residual=residual_view,
            residual_metrics=metrics,
            residual_status=status,
            pivot_product=product,
            consistent=True,
            basis=None if basis is None else MappingProxyType(dict(basis)),
            matrix=snapshot(self.matrix),
            original=self.original,
            swap_count=swap_count,
            elimination=summary,
            cond_ind=cond_ind,
            warnings=warnings,
            trace=sink.trace,
        )

    def _condition_warnings(self) -> tuple[float, tuple[SolveWarning, ...]]:
        conditioning = self.thresholds.conditioning
        cond_raw = self._estimator.estimate(np.array(self.original[:, :-1]))
        if cond_raw is None or not np.isfinite(cond_raw):
            return (
                float("nan"),
                (
                    SolveWarning(
                        code=conditioning.unavailable_warning_code,
                        message="condition indicator unavailable",
                    ),
                ),
            )
        cond_ind = float(cond_raw)
        if cond_ind <= conditioning.warn_max:
            return (
                cond_ind,
                (
                    SolveWarning(
                        code=conditioning.ill_conditioned_warning_code,
                        message=f"condition indicator {cond_ind:.3e} is <= warn_max {conditioning.warn_max:.1e}",
                    ),
                ),
            )
        return cond_ind, ()


def solve_augmented_system(
    matrix: ArrayLike | Sequence[Sequence[float]],
    *,
    observer: SolveObserver | None = None,
    thresholds: SolverThresholdConfig | None = None,
    expected_unknowns: int | None = None,
    condition_estimator: ConditionEstimator | None = None,
) -> SolveResult:
    solver = GaussSolver(
        matrix,
        thresholds=thresholds,
        expected_unknowns=expected_unknowns,
        condition_estimator=condition_estimator,
    )
    return solver.solve(observer=observer)


def _readonly(vector: NDArray[np.float64]) -> NDArray[np.float64]:
    frozen = vector.copy()
    frozen.flags.writeable = False
    return frozen


def _resolve_condition_estimator(
    thresholds: SolverThresholdConfig,
    condition_estimator: ConditionEstimator | None,
) -> ConditionEstimator:
    if condition_estimator is not None:
        return condition_estimator
    if thresholds.conditioning.estimator_id != EXPECTED_COND_ESTIMATOR_ID:
        raise SolverConfigError(
            "E_SOLVER_CONFIG_INVALID",
            f"unsupported condition estimator id '{thresholds.conditioning.estimator_id}'",
        )
    return LuRcondProxyEstimator()

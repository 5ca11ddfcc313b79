from .classify import check_consistency, has_full_pivots, inconsistent_rows, pivot_product
from .conditioning import ConditionEstimator, LuRcondProxyEstimator
from .config import (
    DEFAULT_THRESHOLDS_PATH,
    ConditioningThresholds,
    EliminationThresholds,
    ResidualThresholds,
    SolverConfigError,
    SolverThresholdConfig,
    load_solver_threshold_config,
)
from .eliminate import (
    EXACT_INTEGER_LIMIT,
    EliminationSummary,
    RowMultipliers,
    combine_rows,
    eliminate,
    gcd,
    rescale_row,
    row_multipliers,
)
from .events import (
    BackSubstitutionComplete,
    EliminationStep,
    GridSnapshot,
    MatrixInitialized,
    RecordingObserver,
    RowSwapPerformed,
    SolveComplete,
    SolveEvent,
    SolveObserver,
)
from .matrix import (
    MatrixErrorCode,
    MatrixShapeError,
    SolverInvariantError,
    SolverStateError,
    as_augmented_matrix,
    snapshot,
)
from .normalize import normalize_rows
from .residual import (
    DEGRADED_MAX,
    EPSILON,
    PASS_MAX,
    ResidualMetrics,
    classify_status,
    compute_residual_metrics,
    compute_residual_vector,
)
from .singular import BasisMap, check_basis, find_similar_row, solve_multiple_solutions
from .solve import GaussSolver, SolveResult, SolveWarning, solve_augmented_system
from .substitute import back_substitute

__all__ = [
    "BackSubstitutionComplete",
    "BasisMap",
    "ConditionEstimator",
    "ConditioningThresholds",
    "DEFAULT_THRESHOLDS_PATH",
    "DEGRADED_MAX",
    "EPSILON",
    "EXACT_INTEGER_LIMIT",
    "EliminationStep",
    "EliminationSummary",
    "EliminationThresholds",
    "GaussSolver",
    "GridSnapshot",
    "LuRcondProxyEstimator",
    "MatrixErrorCode",
    "MatrixInitialized",
    "MatrixShapeError",
    "PASS_MAX",
    "RecordingObserver",
    "ResidualMetrics",
    "ResidualThresholds",
    "RowMultipliers",
    "RowSwapPerformed",
    "SolveComplete",
    "SolveEvent",
    "SolveObserver",
    "SolveResult",
    "SolveWarning",
    "SolverConfigError",
    "SolverInvariantError",
    "SolverStateError",
    "SolverThresholdConfig",
    "as_augmented_matrix",
    "back_substitute",
    "check_basis",
    "check_consistency",
    "classify_status",
    "combine_rows",
    "compute_residual_metrics",
    "compute_residual_vector",
    "eliminate",
    "find_similar_row",
    "gcd",
    "has_full_pivots",
    "inconsistent_rows",
    "load_solver_threshold_config",
    "normalize_rows",
    "pivot_product",
    "rescale_row",
    "row_multipliers",
    "snapshot",
    "solve_augmented_system",
    "solve_multiple_solutions",
]

from __future__ import annotations

from collections.abc import Mapping, Sequence

from .config import SolverThresholdConfig, load_solver_threshold_config
from .solve import SolveResult

_SCHEMA_ID = "solver_repro_snapshot_v1"
_KIND_ORDER: tuple[str, ...] = ("unique", "singular", "inconsistent")
_STATUS_ORDER: tuple[str, ...] = ("pass", "degraded", "fail")


def build_solver_config_snapshot(
    *,
    thresholds: SolverThresholdConfig | None = None,
    results: Sequence[SolveResult] = (),
) -> Mapping[str, object]:
    threshold_config = thresholds if thresholds is not None else load_solver_threshold_config()

    kind_counts = {kind: 0 for kind in _KIND_ORDER}
    status_counts = {status: 0 for status in _STATUS_ORDER}
    total_row_swaps = 0
    total_elimination_steps = 0
    total_combines = 0
    total_pivot_swaps = 0
    total_pairwise_swaps = 0
    aborted_eliminations = 0
    warning_code_counts: dict[str, int] = {}

    for result in results:
        kind_counts[result.kind] = kind_counts[result.kind] + 1
        if result.residual_status is not None:
            status_counts[result.residual_status] = status_counts[result.residual_status] + 1
        total_row_swaps += result.swap_count
        total_elimination_steps += result.elimination.steps
        total_combines += result.elimination.combines
        total_pivot_swaps += result.elimination.swaps
        total_pairwise_swaps += result.elimination.pivot_swaps
        if result.elimination.aborted:
            aborted_eliminations += 1
        for warning in result.warnings:
            warning_code_counts[warning.code] = warning_code_counts.get(warning.code, 0) + 1

    return {
        "schema": _SCHEMA_ID,
        "numeric_controls": {
            "zero_snap_relative": threshold_config.elimination.zero_snap_relative,
            "integer_ratio_enabled": threshold_config.elimination.integer_ratio_enabled,
            "pairwise_pivoting_enabled": threshold_config.elimination.pairwise_pivoting_enabled,
            "residual_epsilon": threshold_config.residual.epsilon,
            "residual_pass_max": threshold_config.residual.pass_max,
            "residual_degraded_max": threshold_config.residual.degraded_max,
            "condition_estimator": threshold_config.conditioning.estimator_id,
            "condition_warn_max": threshold_config.conditioning.warn_max,
            "expected_unknowns": threshold_config.expected_unknowns,
        },
        "solve_summary": {
            "total_solve_calls": len(results),
            "kind_counts": kind_counts,
            "residual_status_counts": status_counts,
            "total_normalizer_swaps": total_row_swaps,
            "total_elimination_steps": total_elimination_steps,
            "total_row_combines": total_combines,
            "total_pivot_swaps": total_pivot_swaps,
            "total_pairwise_swaps": total_pairwise_swaps,
            "aborted_eliminations": aborted_eliminations,
            "warning_code_counts": {
                key: warning_code_counts[key] for key in sorted(warning_code_counts)
            },
        },
    }

from __future__ import annotations

import math

from slaegauss.solver import MatrixShapeError, SolveResult
from slaegauss.solver.classify import inconsistent_rows
from slaegauss.solver.singular import free_columns

from .catalog import CANONICAL_DIAGNOSTIC_CATALOG
from .models import DiagnosticEvent, MatrixPosition, Severity, SolverStage
from .sort import sort_diagnostics

_SOLVER_SOURCE = "solver"


def build_diagnostic_event(  # noqa: PLR0913
    *,
    code: str,
    message: str,
    source: str | None = None,
    row_index: int | None = None,
    column_index: int | None = None,
    witness: object | None = None,
    severity: Severity | None = None,
    solver_stage: SolverStage | None = None,
    suggested_action: str | None = None,
) -> DiagnosticEvent:
    if not code:
        raise ValueError("diagnostic code must be non-empty")
    if not message:
        raise ValueError("diagnostic message must be non-empty")
    if source is not None and not source:
        raise ValueError("diagnostic source must be non-empty when provided")

    catalog_entry = CANONICAL_DIAGNOSTIC_CATALOG.get(code)
    resolved_severity = (
        severity
        if severity is not None
        else _require_catalog_field(
            code=code,
            field_name="severity",
            value=(None if catalog_entry is None else catalog_entry.severity),
        )
    )
    resolved_stage = (
        solver_stage
        if solver_stage is not None
        else _require_catalog_field(
            code=code,
            field_name="solver_stage",
            value=(None if catalog_entry is None else catalog_entry.solver_stage),
        )
    )
    resolved_action = (
        suggested_action
        if suggested_action is not None
        else _require_catalog_field(
            code=code,
            field_name="suggested_action",
            value=(None if catalog_entry is None else catalog_entry.suggested_action),
        )
    )
    if not resolved_action:
        raise ValueError("diagnostic suggested_action must be non-empty")

    return DiagnosticEvent(
        code=code,
        severity=resolved_severity,
        message=message,
        suggested_action=resolved_action,
        solver_stage=resolved_stage,
        source=source,
        position=(
            None
            if row_index is None and column_index is None
            else MatrixPosition(row=row_index, column=column_index)
        ),
        witness=witness,
    )


def diagnostic_from_matrix_error(exc: MatrixShapeError, *, source: str) -> DiagnosticEvent:
    return build_diagnostic_event(
        code=exc.code,
        message=exc.message,
        source=source,
        witness={"shape": list(exc.shape)},
    )


def diagnostics_from_result(result: SolveResult) -> tuple[DiagnosticEvent, ...]:
    events: list[DiagnosticEvent] = []
    if not result.consistent:
        for row in inconsistent_rows(result.matrix):
            events.append(
                build_diagnostic_event(
                    code="E_SYS_INCONSISTENT",
                    message=f"reduced row {row} reads 0 = {float(result.matrix[row, -1]):.12g}",
                    source=_SOLVER_SOURCE,
                    row_index=row,
                    witness={"pivot_product": result.pivot_product},
                )
            )
    elif result.singular:
        basis = dict(result.basis or {})
        basis_columns = sorted(basis)
        free = list(free_columns(result.matrix, basis))
        events.append(
            build_diagnostic_event(
                code="W_SYS_SINGULAR",
                message="a column has no pivot; system has no unique solution",
                source=_SOLVER_SOURCE,
                witness={"basis_columns": basis_columns, "free_columns": free},
            )
        )
        if result.residual_status != "pass":
            events.append(
                build_diagnostic_event(
                    code="W_SYS_BASIS_INCOMPLETE",
                    message="particular solution does not reproduce every original equation",
                    source=_SOLVER_SOURCE,
                    witness={"basis_columns": basis_columns},
                )
            )

    if result.residual_metrics is not None:
        res_rel = result.residual_metrics.res_rel
        if result.residual_status == "degraded":
            events.append(
                build_diagnostic_event(
                    code="W_NUM_RESIDUAL_DEGRADED",
                    message=f"relative residual {res_rel:.3e} is in the degraded band",
                    source=_SOLVER_SOURCE,
                    witness={"res_rel": res_rel},
                )
            )
        elif result.residual_status == "fail":
            events.append(
                build_diagnostic_event(
                    code="E_NUM_RESIDUAL_FAILED",
                    message=f"relative residual {res_rel:.3e} exceeded the degraded band",
                    source=_SOLVER_SOURCE,
                    witness={"res_rel": res_rel if math.isfinite(res_rel) else None},
                )
            )

    for warning in result.warnings:
        cond_witness = None if math.isnan(result.cond_ind) else result.cond_ind
        events.append(
            build_diagnostic_event(
                code=warning.code,
                message=warning.message,
                source=_SOLVER_SOURCE,
                witness={"cond_ind": cond_witness},
            )
        )
    return tuple(sort_diagnostics(events))


def _require_catalog_field[T](*, code: str, field_name: str, value: T | None) -> T:
    if value is None:
        raise ValueError(
            f"diagnostic code '{code}' is not in canonical catalog; explicit {field_name} is required"
        )
    return value

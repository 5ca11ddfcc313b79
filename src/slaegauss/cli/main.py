from __future__ import annotations

import json
import logging
import sys
from collections.abc import Sequence
from enum import StrEnum
from pathlib import Path
from typing import Final

import numpy as np
import typer
import yaml  # type: ignore[import-untyped]

from slaegauss.diagnostics import (
    DiagnosticEvent,
    Severity,
    build_diagnostic_event,
    diagnostic_from_matrix_error,
    diagnostics_from_result,
    sort_diagnostics,
)
from slaegauss.solver import (
    EliminationStep,
    GaussSolver,
    MatrixShapeError,
    SolveEvent,
    SolveResult,
    SolverConfigError,
    SolverThresholdConfig,
    as_augmented_matrix,
    load_solver_threshold_config,
)
from slaegauss.solver.repro_snapshot import build_solver_config_snapshot

app = typer.Typer(help="Gaussian elimination solver for augmented linear systems")

logger = logging.getLogger(__name__)

_CLI_MATRIX_LOAD_FAILED = "E_CLI_MATRIX_LOAD_FAILED"
_SOLVE_OUTPUT_SCHEMA_ID: Final[str] = "slaegauss_solve_output_v1"
_CHECK_OUTPUT_SCHEMA_ID: Final[str] = "slaegauss_check_output_v1"
_OUTPUT_SCHEMA_VERSION: Final[int] = 1


class OutputFormat(StrEnum):
    TEXT = "text"
    JSON = "json"


_FORMAT_OPTION = typer.Option(
    OutputFormat.TEXT,
    "--format",
    help="Output format: text|json",
    show_default=True,
)
_THRESHOLDS_OPTION = typer.Option(
    None,
    "--thresholds",
    help="Path to an alternative solver thresholds YAML artifact",
)
_LOG_LEVEL_OPTION = typer.Option(
    "WARNING",
    "--log-level",
    help="Logging level for solver diagnostics on stderr",
)


class MatrixLoadError(ValueError):
    pass


def _load_matrix(path: Path) -> object:
    """Read a list of rows, or a mapping with a ``matrix`` key, from JSON or YAML."""
    try:
        raw_text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise MatrixLoadError(f"unable to read matrix file '{path}': {exc}") from exc
    try:
        if path.suffix.lower() == ".json":
            payload = json.loads(raw_text)
        else:
            payload = yaml.safe_load(raw_text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise MatrixLoadError(f"invalid matrix document '{path}': {exc}") from exc
    if isinstance(payload, dict):
        if "matrix" not in payload:
            raise MatrixLoadError("matrix document mapping must contain a 'matrix' key")
        payload = payload["matrix"]
    if not isinstance(payload, list):
        raise MatrixLoadError("matrix document must hold a list of rows")
    return payload


def _load_thresholds(path: Path | None) -> SolverThresholdConfig:
    return load_solver_threshold_config(path)


def _configure_logging(level_name: str) -> None:
    level = logging.getLevelName(level_name.upper())
    if not isinstance(level, int):
        raise typer.BadParameter(f"unknown log level '{level_name}'")
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger("slaegauss").setLevel(level)


@app.command()
def solve(
    matrix_file: Path,
    format: OutputFormat = _FORMAT_OPTION,
    trace: bool = typer.Option(False, "--trace", help="Print every elimination step"),
    thresholds: Path | None = _THRESHOLDS_OPTION,
    log_level: str = _LOG_LEVEL_OPTION,
) -> None:
    """Solve the augmented system stored in MATRIX_FILE."""
    _configure_logging(log_level)
    try:
        threshold_config = _load_thresholds(thresholds)
        raw_matrix = _load_matrix(matrix_file)
        result = GaussSolver(raw_matrix, thresholds=threshold_config).solve()
    except SolverConfigError as exc:
        typer.echo(f"config error: {exc}")
        raise typer.Exit(code=2) from exc
    except MatrixLoadError as exc:
        diagnostics = (_load_failure_diagnostic(matrix_file=matrix_file, exc=exc),)
        _emit_diagnostics_only(diagnostics, output_format=format, schema=_SOLVE_OUTPUT_SCHEMA_ID)
        raise typer.Exit(code=2) from exc
    except MatrixShapeError as exc:
        diagnostics = (diagnostic_from_matrix_error(exc, source="cli.solve"),)
        _emit_diagnostics_only(diagnostics, output_format=format, schema=_SOLVE_OUTPUT_SCHEMA_ID)
        raise typer.Exit(code=2) from exc

    diagnostics = diagnostics_from_result(result)
    logger.debug("solve finished with kind=%s", result.kind)
    if format is OutputFormat.JSON:
        typer.echo(
            _build_solve_json_output(
                matrix_file=matrix_file,
                result=result,
                diagnostics=diagnostics,
                thresholds=threshold_config,
                include_trace=trace,
            )
        )
    else:
        _print_system_summary(result)
        _print_solution_lines(result)
        _print_diagnostics(diagnostics)
        if trace:
            _print_trace_lines(result.trace)
    raise typer.Exit(code=_derive_solve_exit_code(result))


@app.command()
def check(
    matrix_file: Path,
    format: OutputFormat = _FORMAT_OPTION,
    thresholds: Path | None = _THRESHOLDS_OPTION,
) -> None:
    """Validate the shape and values of MATRIX_FILE without solving."""
    diagnostics: tuple[DiagnosticEvent, ...]
    try:
        threshold_config = _load_thresholds(thresholds)
        raw_matrix = _load_matrix(matrix_file)
        as_augmented_matrix(raw_matrix, expected_unknowns=threshold_config.expected_unknowns)
    except SolverConfigError as exc:
        typer.echo(f"config error: {exc}")
        raise typer.Exit(code=2) from exc
    except MatrixLoadError as exc:
        diagnostics = (_load_failure_diagnostic(matrix_file=matrix_file, exc=exc),)
    except MatrixShapeError as exc:
        diagnostics = (diagnostic_from_matrix_error(exc, source="cli.check"),)
    else:
        diagnostics = ()

    ordered = tuple(sort_diagnostics(diagnostics))
    if format is OutputFormat.JSON:
        typer.echo(_build_check_json_output(matrix_file=matrix_file, diagnostics=ordered))
    else:
        _print_diagnostics(ordered)
        if not ordered:
            typer.echo(f"OK matrix={matrix_file}")
    raise typer.Exit(code=_derive_check_exit_code(ordered))


def _load_failure_diagnostic(*, matrix_file: Path, exc: Exception) -> DiagnosticEvent:
    return build_diagnostic_event(
        code=_CLI_MATRIX_LOAD_FAILED,
        message=f"matrix loader failed: {_exception_message(exc)}",
        source="cli.loader",
        witness={
            "matrix_file": str(matrix_file),
            "error_type": type(exc).__name__,
        },
    )


def _exception_message(exc: Exception) -> str:
    message = str(exc).strip()
    if message:
        return message
    return type(exc).__name__


def _has_error_diagnostics(diagnostics: Sequence[DiagnosticEvent]) -> bool:
    return any(event.severity is Severity.ERROR for event in diagnostics)


def _derive_solve_exit_code(result: SolveResult) -> int:
    if result.kind == "inconsistent" or result.residual_status == "fail":
        return 2
    if result.kind == "singular" or result.residual_status == "degraded":
        return 1
    return 0


def _derive_check_exit_code(diagnostics: Sequence[DiagnosticEvent]) -> int:
    if _has_error_diagnostics(diagnostics):
        return 2
    return 0


def _emit_diagnostics_only(
    diagnostics: Sequence[DiagnosticEvent],
    *,
    output_format: OutputFormat,
    schema: str,
) -> None:
    if output_format is OutputFormat.JSON:
        payload: dict[str, object] = {
            "schema": schema,
            "schema_version": _OUTPUT_SCHEMA_VERSION,
            "status": "fail",
            "diagnostics": [
                event.model_dump(mode="json", exclude_none=True) for event in diagnostics
            ],
        }
        typer.echo(json.dumps(payload, ensure_ascii=True, separators=(",", ":")))
        return
    _print_diagnostics(diagnostics)


def _build_check_json_output(
    *, matrix_file: Path, diagnostics: Sequence[DiagnosticEvent]
) -> str:
    payload: dict[str, object] = {
        "schema": _CHECK_OUTPUT_SCHEMA_ID,
        "schema_version": _OUTPUT_SCHEMA_VERSION,
        "matrix_file": str(matrix_file),
        "status": "fail" if _has_error_diagnostics(diagnostics) else "pass",
        "exit_code": _derive_check_exit_code(diagnostics),
        "diagnostics": [event.model_dump(mode="json", exclude_none=True) for event in diagnostics],
    }
    return json.dumps(payload, ensure_ascii=True, separators=(",", ":"))


def _build_solve_json_output(
    *,
    matrix_file: Path,
    result: SolveResult,
    diagnostics: Sequence[DiagnosticEvent],
    thresholds: SolverThresholdConfig,
    include_trace: bool,
) -> str:
    metrics = result.residual_metrics
    payload: dict[str, object] = {
        "schema": _SOLVE_OUTPUT_SCHEMA_ID,
        "schema_version": _OUTPUT_SCHEMA_VERSION,
        "matrix_file": str(matrix_file),
        "kind": result.kind,
        "consistent": result.consistent,
        "pivot_product": _json_float(result.pivot_product),
        "x": None if result.x is None else [_json_float(value) for value in result.x.tolist()],
        "residual": (
            None
            if result.residual is None
            else [_json_float(value) for value in result.residual.tolist()]
        ),
        "residual_metrics": (
            None
            if metrics is None
            else {
                "res_l2": _json_float(metrics.res_l2),
                "res_linf": _json_float(metrics.res_linf),
                "res_rel": _json_float(metrics.res_rel),
            }
        ),
        "residual_status": result.residual_status,
        "basis": (
            None
            if result.basis is None
            else {str(column): list(pair) for column, pair in sorted(result.basis.items())}
        ),
        "reduced_matrix": _matrix_rows(result.matrix),
        "cond_ind": _json_float(result.cond_ind),
        "exit_code": _derive_solve_exit_code(result),
        "diagnostics": [event.model_dump(mode="json", exclude_none=True) for event in diagnostics],
        "repro": build_solver_config_snapshot(thresholds=thresholds, results=(result,)),
    }
    if include_trace:
        payload["trace"] = [_event_payload(event) for event in result.trace]
    return json.dumps(payload, ensure_ascii=True, separators=(",", ":"))


def _event_payload(event: SolveEvent) -> dict[str, object]:
    payload: dict[str, object] = {"event": event.name}
    if isinstance(event, EliminationStep):
        payload.update(
            {
                "pass_index": event.pass_index,
                "column": event.column,
                "target_row": event.target_row,
                "source_row": event.source_row,
                "target_multiplier": _json_float(event.target_multiplier),
                "copy_multiplier": _json_float(event.copy_multiplier),
                "sign": event.sign,
                "action": event.action,
                "divisor": _json_float(event.divisor),
            }
        )
    for key in ("stage", "moved_row", "final_row", "consistent", "singular"):
        if hasattr(event, key):
            payload[key] = getattr(event, key)
    if hasattr(event, "pivot_product"):
        payload["pivot_product"] = _json_float(getattr(event, "pivot_product"))
    for key in ("x", "residual"):
        if hasattr(event, key):
            payload[key] = [_json_float(value) for value in getattr(event, key).tolist()]
    if hasattr(event, "matrix"):
        payload["matrix"] = _matrix_rows(getattr(event, "matrix"))
    return payload


def _matrix_rows(matrix: np.ndarray) -> list[list[float | None]]:
    return [[_json_float(value) for value in row] for row in matrix.tolist()]


def _json_float(value: float) -> float | None:
    numeric = float(value)
    if not np.isfinite(numeric):
        return None
    return numeric


def _print_system_summary(result: SolveResult) -> None:
    typer.echo(
        "SYSTEM"
        f" kind={result.kind}"
        f" consistent={str(result.consistent).lower()}"
        f" pivot_product={_format_float(result.pivot_product)}"
        f" normalizer_swaps={result.swap_count}"
        f" elimination_steps={result.elimination.steps}"
        f" cond_ind={_format_float(result.cond_ind)}"
    )


def _print_solution_lines(result: SolveResult) -> None:
    if result.x is None or result.residual is None or result.residual_metrics is None:
        return
    for index, value in enumerate(result.x.tolist()):
        typer.echo(f"X index={index} value={_format_float(value)}")
    for index, value in enumerate(result.residual.tolist()):
        typer.echo(f"RESIDUAL index={index} value={_format_float(value)}")
    metrics = result.residual_metrics
    typer.echo(
        "METRICS"
        f" res_l2={_format_float(metrics.res_l2)}"
        f" res_linf={_format_float(metrics.res_linf)}"
        f" res_rel={_format_float(metrics.res_rel)}"
        f" status={result.residual_status}"
    )


def _print_diagnostics(diagnostics: Sequence[DiagnosticEvent]) -> None:
    for event in diagnostics:
        typer.echo(
            "DIAG"
            f" severity={event.severity}"
            f" stage={event.solver_stage}"
            f" code={event.code}"
            f" message={event.message}"
        )


def _print_trace_lines(trace: Sequence[SolveEvent]) -> None:
    for event in trace:
        if isinstance(event, EliminationStep):
            typer.echo(
                "STEP"
                f" pass={event.pass_index}"
                f" column={event.column}"
                f" target_row={event.target_row}"
                f" source_row={event.source_row}"
                f" action={event.action}"
                f" target_multiplier={_format_float(event.target_multiplier)}"
                f" copy_multiplier={_format_float(event.copy_multiplier)}"
                f" sign={event.sign}"
                f" divisor={_format_float(event.divisor)}"
            )
            continue
        typer.echo(f"EVENT name={event.name}")


def _format_float(value: float) -> str:
    return f"{float(value):.12g}"


def main() -> None:
    app()

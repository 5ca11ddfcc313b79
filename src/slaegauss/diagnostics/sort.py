from __future__ import annotations

import json
from collections.abc import Iterable

from .models import DiagnosticEvent, MatrixPosition, Severity, SolverStage

_SEVERITY_RANK: dict[Severity, int] = {
    Severity.ERROR: 0,
    Severity.WARNING: 1,
}

# pipeline order: input problems first, residual verdicts last
_STAGE_RANK: dict[SolverStage, int] = {stage: rank for rank, stage in enumerate(SolverStage)}

type PositionKey = tuple[int, int, int, int]
type DiagnosticSortKey = tuple[int, int, PositionKey, str, str, str, str]


def canonical_witness_json(witness: object | None) -> str:
    if witness is None:
        return ""
    return json.dumps(witness, sort_keys=True, separators=(",", ":"), ensure_ascii=True)


def _position_key(position: MatrixPosition | None) -> PositionKey:
    """Row-major; a whole-row finding precedes the cells of its row, unplaced findings go last."""
    if position is None:
        return (1, 0, 0, 0)
    column = -1 if position.column is None else position.column
    if position.row is None:
        return (0, 1, 0, column)
    return (0, 0, position.row, column)


def diagnostic_sort_key(event: DiagnosticEvent) -> DiagnosticSortKey:
    return (
        _SEVERITY_RANK[event.severity],
        _STAGE_RANK[event.solver_stage],
        _position_key(event.position),
        event.code,
        event.source or "",
        event.message,
        canonical_witness_json(event.witness),
    )


def sort_diagnostics(events: Iterable[DiagnosticEvent]) -> list[DiagnosticEvent]:
    return sorted(events, key=diagnostic_sort_key)

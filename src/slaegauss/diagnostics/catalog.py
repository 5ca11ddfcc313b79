from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

from .models import Severity, SolverStage


@dataclass(frozen=True, slots=True)
class DiagnosticCatalogEntry:
    code: str
    severity: Severity
    solver_stage: SolverStage
    suggested_action: str

    def __post_init__(self) -> None:
        if not self.code:
            raise ValueError("diagnostic catalog code must be non-empty")
        if not self.suggested_action:
            raise ValueError(
                f"diagnostic catalog entry '{self.code}' suggested_action must be non-empty"
            )


def _entry(
    code: str,
    severity: Severity,
    solver_stage: SolverStage,
    suggested_action: str,
) -> DiagnosticCatalogEntry:
    return DiagnosticCatalogEntry(
        code=code,
        severity=severity,
        solver_stage=solver_stage,
        suggested_action=suggested_action,
    )


def _build_catalog(
    entries: tuple[DiagnosticCatalogEntry, ...],
) -> Mapping[str, DiagnosticCatalogEntry]:
    catalog: dict[str, DiagnosticCatalogEntry] = {}
    for entry in entries:
        if entry.code in catalog:
            raise ValueError(f"duplicate diagnostic catalog code: {entry.code}")
        catalog[entry.code] = entry
    return MappingProxyType(catalog)


_CATALOG_ENTRIES: tuple[DiagnosticCatalogEntry, ...] = (
    _entry(
        "E_INPUT_SHAPE_INVALID",
        Severity.ERROR,
        SolverStage.PARSE,
        "provide N rows of N + 1 real numbers (coefficients then constant)",
    ),
    _entry(
        "E_INPUT_NONFINITE",
        Severity.ERROR,
        SolverStage.PARSE,
        "replace NaN/inf entries with finite values",
    ),
    _entry(
        "E_INPUT_SIZE_MISMATCH",
        Severity.ERROR,
        SolverStage.PARSE,
        "match the configured expected_unknowns or clear the size contract",
    ),
    _entry(
        "E_CLI_MATRIX_LOAD_FAILED",
        Severity.ERROR,
        SolverStage.PARSE,
        "pass a readable JSON/YAML file holding a list of rows or a 'matrix' key",
    ),
    _entry(
        "E_SYS_INCONSISTENT",
        Severity.ERROR,
        SolverStage.CLASSIFY,
        "remove or correct the contradictory equation (0 = nonzero constant)",
    ),
    _entry(
        "W_SYS_SINGULAR",
        Severity.WARNING,
        SolverStage.CLASSIFY,
        "the reported vector is one particular solution with free variables at zero",
    ),
    _entry(
        "W_SYS_BASIS_INCOMPLETE",
        Severity.WARNING,
        SolverStage.SUBSTITUTE,
        "inspect dependent rows; the basis map does not reproduce every equation",
    ),
    _entry(
        "W_NUM_RESIDUAL_DEGRADED",
        Severity.WARNING,
        SolverStage.RESIDUAL,
        "inspect coefficient scaling and conditioning of the system",
    ),
    _entry(
        "E_NUM_RESIDUAL_FAILED",
        Severity.ERROR,
        SolverStage.RESIDUAL,
        "the solution does not satisfy the original equations; inspect conditioning",
    ),
    _entry(
        "W_NUM_ILL_CONDITIONED",
        Severity.WARNING,
        SolverStage.CLASSIFY,
        "inspect conditioning; small pivots amplify rounding",
    ),
    _entry(
        "W_NUM_COND_UNAVAILABLE",
        Severity.WARNING,
        SolverStage.CLASSIFY,
        "review condition-estimator support for this input",
    ),
)


CANONICAL_DIAGNOSTIC_CATALOG: Mapping[str, DiagnosticCatalogEntry] = _build_catalog(
    _CATALOG_ENTRIES
)

REQUIRED_CATALOG_FIELDS: tuple[str, ...] = ("code", "severity", "solver_stage", "suggested_action")

from .adapters import build_diagnostic_event, diagnostic_from_matrix_error, diagnostics_from_result
from .catalog import CANONICAL_DIAGNOSTIC_CATALOG, REQUIRED_CATALOG_FIELDS
from .models import DiagnosticEvent, MatrixPosition, Severity, SolverStage
from .sort import canonical_witness_json, diagnostic_sort_key, sort_diagnostics

__all__ = [
    "CANONICAL_DIAGNOSTIC_CATALOG",
    "DiagnosticEvent",
    "MatrixPosition",
    "REQUIRED_CATALOG_FIELDS",
    "Severity",
    "SolverStage",
    "build_diagnostic_event",
    "canonical_witness_json",
    "diagnostic_from_matrix_error",
    "diagnostic_sort_key",
    "diagnostics_from_result",
    "sort_diagnostics",
]

import logging

from .solver import (
    GaussSolver,
    MatrixShapeError,
    RecordingObserver,
    SolveResult,
    SolverInvariantError,
    solve_augmented_system,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "GaussSolver",
    "MatrixShapeError",
    "RecordingObserver",
    "SolveResult",
    "SolverInvariantError",
    "solve_augmented_system",
]

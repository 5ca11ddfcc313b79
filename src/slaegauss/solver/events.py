from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Literal, Protocol, runtime_checkable

import numpy as np
from numpy.typing import NDArray

from .matrix import AugmentedMatrix

type GridStage = Literal["pre_elimination", "post_elimination"]
type StepAction = Literal["combine", "swap_combine", "swap", "skip"]


@dataclass(frozen=True, slots=True)
class MatrixInitialized:
    matrix: AugmentedMatrix
    name: str = field(default="matrix_initialized", init=False)


@dataclass(frozen=True, slots=True)
class GridSnapshot:
    matrix: AugmentedMatrix
    stage: GridStage
    name: str = field(default="grid_snapshot", init=False)


@dataclass(frozen=True, slots=True)
class RowSwapPerformed:
    matrix: AugmentedMatrix
    moved_row: int
    final_row: int
    name: str = field(default="row_swap_performed", init=False)


@dataclass(frozen=True, slots=True)
class EliminationStep:
    matrix: AugmentedMatrix
    pass_index: int
    column: int
    target_row: int
    source_row: int
    target_multiplier: float
    copy_multiplier: float
    sign: Literal["+", "-"]
    action: StepAction
    divisor: float
    name: str = field(default="elimination_step", init=False)


@dataclass(frozen=True, slots=True)
class SolveComplete:
    pivot_product: float
    consistent: bool
    name: str = field(default="solve_complete", init=False)


@dataclass(frozen=True, slots=True)
class BackSubstitutionComplete:
    matrix: AugmentedMatrix
    x: NDArray[np.float64]
    residual: NDArray[np.float64]
    singular: bool
    name: str = field(default="back_substitution_complete", init=False)


type SolveEvent = (
    MatrixInitialized
    | GridSnapshot
    | RowSwapPerformed
    | EliminationStep
    | SolveComplete
    | BackSubstitutionComplete
)
type EmitFn = Callable[[SolveEvent], None]


@runtime_checkable
class SolveObserver(Protocol):
    def notify(self, event: SolveEvent) -> None: ...


class RecordingObserver:
    def __init__(self) -> None:
        self.events: list[SolveEvent] = []

    def notify(self, event: SolveEvent) -> None:
        self.events.append(event)

    def names(self) -> tuple[str, ...]:
        return tuple(event.name for event in self.events)


class EventSink:
    """Keeps the ordered trace of one solve and forwards each event inline."""

    def __init__(self, observer: SolveObserver | None = None) -> None:
        self._observer = observer
        self._trace: list[SolveEvent] = []

    def emit(self, event: SolveEvent) -> None:
        self._trace.append(event)
        if self._observer is not None:
            self._observer.notify(event)

    @property
    def trace(self) -> tuple[SolveEvent, ...]:
        return tuple(self._trace)

from __future__ import annotations

import numpy as np
import pytest

from slaegauss.solver import RowSwapPerformed, as_augmented_matrix, normalize_rows
from slaegauss.solver.events import SolveEvent

pytestmark = pytest.mark.unit

_ROW_A = [1.0, 1.0, 1.0, 1.0, 1.0]
_ROW_B = [0.0, 1.0, 2.0, 3.0, 4.0]
_ROW_C = [2.0, 0.0, 0.0, 0.0, 2.0]
_ROW_D = [0.0, 0.0, 1.0, 0.0, 1.0]
_EXPECTED_SWAPS = 3


def test_zero_first_rows_bubble_to_the_top_in_order() -> None:
    matrix = as_augmented_matrix([_ROW_A, _ROW_B, _ROW_C, _ROW_D])
    events: list[SolveEvent] = []

    swaps = normalize_rows(matrix, emit=events.append)

    assert swaps == _EXPECTED_SWAPS
    np.testing.assert_array_equal(matrix, np.array([_ROW_B, _ROW_D, _ROW_A, _ROW_C]))
    moves = [
        (event.moved_row, event.final_row)
        for event in events
        if isinstance(event, RowSwapPerformed)
    ]
    assert moves == [(1, 0), (3, 1)]
    assert len(events) == len(moves)


def test_normalizer_is_idempotent_and_silent_on_second_run() -> None:
    matrix = as_augmented_matrix([_ROW_A, _ROW_B, _ROW_C, _ROW_D])
    normalize_rows(matrix)
    first = matrix.copy()
    events: list[SolveEvent] = []

    swaps = normalize_rows(matrix, emit=events.append)

    assert swaps == 0
    assert events == []
    np.testing.assert_array_equal(matrix, first)


def test_rows_already_ordered_are_left_alone() -> None:
    matrix = as_augmented_matrix([[0.0, 1.0, 3.0], [2.0, 1.0, 1.0]])

    assert normalize_rows(matrix) == 0
    np.testing.assert_array_equal(matrix, np.array([[0.0, 1.0, 3.0], [2.0, 1.0, 1.0]]))


def test_normalizer_keeps_relative_order_of_nonzero_rows() -> None:
    matrix = as_augmented_matrix([[3.0, 1.0, 1.0], [0.0, 2.0, 2.0]])

    normalize_rows(matrix)

    np.testing.assert_array_equal(matrix, np.array([[0.0, 2.0, 2.0], [3.0, 1.0, 1.0]]))


def test_event_snapshot_is_read_only() -> None:
    matrix = as_augmented_matrix([[3.0, 1.0, 1.0], [0.0, 2.0, 2.0]])
    events: list[SolveEvent] = []

    normalize_rows(matrix, emit=events.append)

    (event,) = events
    assert isinstance(event, RowSwapPerformed)
    assert event.matrix.flags.writeable is False
    with pytest.raises(ValueError):
        event.matrix[0, 0] = 9.0
    matrix[0, 0] = 5.0
    assert event.matrix[0, 0] == 0.0

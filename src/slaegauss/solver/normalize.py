from __future__ import annotations

import logging

from .events import EmitFn, RowSwapPerformed
from .matrix import AugmentedMatrix, snapshot, swap_rows

logger = logging.getLogger(__name__)

PIVOT_COLUMN = 0


def normalize_rows(matrix: AugmentedMatrix, *, emit: EmitFn | None = None) -> int:
    """Bubble rows with a zero first coefficient above the rows without one.

    Each such row walks upward through adjacent swaps until the row above it
    also starts with zero or it reaches the top, so the bottom row, which is
    the first pivot row of the sweep, starts with a nonzero entry whenever the
    column has one. Returns the number of swaps; emits one ``RowSwapPerformed``
    per row that moved.
    """
    swaps = 0
    for row_to_check in range(1, int(matrix.shape[0])):
        if matrix[row_to_check, PIVOT_COLUMN] != 0.0:
            continue
        current = row_to_check
        while current > 0 and matrix[current - 1, PIVOT_COLUMN] != 0.0:
            swap_rows(matrix, current, current - 1)
            current -= 1
            swaps += 1
        if current != row_to_check:
            logger.debug("row %d moved up to %d", row_to_check, current)
            if emit is not None:
                emit(
                    RowSwapPerformed(
                        matrix=snapshot(matrix),
                        moved_row=row_to_check,
                        final_row=current,
                    )
                )
    return swaps

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from functools import reduce
from typing import Literal

import numpy as np

from .classify import check_consistency
from .events import EliminationStep, EmitFn, StepAction
from .matrix import AugmentedMatrix, snapshot, swap_rows, unknown_count

logger = logging.getLogger(__name__)

# float64 represents every integer up to this bound exactly
EXACT_INTEGER_LIMIT = float(2**53)


@dataclass(frozen=True, slots=True)
class RowMultipliers:
    target: float
    copy: float
    sign: Literal[1, -1]
    gcd: int
    integer_ratio: bool


@dataclass(frozen=True, slots=True)
class EliminationSummary:
    passes_run: int
    steps: int
    combines: int
    swaps: int
    pivot_swaps: int
    pivot_columns: tuple[int, ...]
    free_columns: tuple[int, ...]
    aborted: bool


def gcd(x: int, y: int) -> int:
    """Euclid on non-negative integers; ``gcd(x, 0) == x`` and ``gcd(0, 0) == 0``."""
    if x < 0 or y < 0:
        raise ValueError("gcd operands must be non-negative")
    return x if y == 0 else gcd(y, x % y)


def _is_exact_integer(value: float) -> bool:
    return abs(value) <= EXACT_INTEGER_LIMIT and float(value).is_integer()


def row_multipliers(
    pivot_value: float,
    lower_value: float,
    *,
    integer_ratio: bool = True,
) -> RowMultipliers:
    # exact integer pairs are gcd-reduced, anything else is scaled so the larger is 1.0
    if pivot_value == 0.0 or lower_value == 0.0:
        raise ValueError("row multipliers need two nonzero pivot-column entries")
    x = abs(pivot_value)
    y = abs(lower_value)
    sign: Literal[1, -1] = -1 if (pivot_value > 0.0) == (lower_value > 0.0) else 1
    if integer_ratio and _is_exact_integer(pivot_value) and _is_exact_integer(lower_value):
        divisor = gcd(int(x), int(y))
        return RowMultipliers(
            target=float(int(y) // divisor),
            copy=float(int(x) // divisor),
            sign=sign,
            gcd=divisor,
            integer_ratio=True,
        )
    largest = max(x, y)
    return RowMultipliers(
        target=y / largest, copy=x / largest, sign=sign, gcd=1, integer_ratio=False
    )


def combine_rows(
    matrix: AugmentedMatrix,
    target_row: int,
    source_row: int,
    multipliers: RowMultipliers,
    *,
    zero_snap: float = 0.0,
) -> None:
    """``row[target] = row[target] * target + sign * row[source] * copy`` in place."""
    scaled_target = matrix[target_row] * multipliers.target
    scaled_copy = matrix[source_row] * (multipliers.sign * multipliers.copy)
    combined = scaled_target + scaled_copy
    if zero_snap > 0.0:
        bound = zero_snap * np.maximum(np.abs(scaled_target), np.abs(scaled_copy))
        combined[np.abs(combined) <= bound] = 0.0
    matrix[target_row] = combined


def rescale_row(matrix: AugmentedMatrix, row: int) -> float:
    """Divide ``row`` by its integer content or by a power of two; returns the divisor."""
    values = matrix[row]
    peak = float(np.max(np.abs(values)))
    if peak == 0.0 or not math.isfinite(peak):
        return 1.0
    if peak <= EXACT_INTEGER_LIMIT and bool(np.all(values == np.trunc(values))):
        content = reduce(gcd, (int(abs(value)) for value in values if value != 0.0), 0)
        if content > 1:
            matrix[row] = values / content
        return float(content)
    exponent = math.frexp(peak)[1]
    matrix[row] = np.ldexp(values, -exponent)
    return math.ldexp(1.0, exponent)


def eliminate(
    matrix: AugmentedMatrix,
    *,
    emit: EmitFn | None = None,
    zero_snap: float = 0.0,
    integer_ratio: bool = True,
    pairwise_pivoting: bool = True,
) -> EliminationSummary:
    """Adjacent-row sweep into bottom-up echelon form; pivot ``k`` ends in row ``N - 1 - k``."""
    size = unknown_count(matrix)
    bottom = size - 1
    steps = combines = swaps = pivot_swaps = passes_run = 0
    pivot_columns: list[int] = []
    free_columns: list[int] = []

    for column in range(size):
        passes_run += 1
        for row in range(bottom):
            upper = float(matrix[row, column])
            lower = float(matrix[row + 1, column])
            action: StepAction
            target_multiplier = copy_multiplier = 0.0
            divisor = 1.0
            sign: Literal["+", "-"] = "+"
            if upper == 0.0:
                action = "skip"
            elif lower == 0.0:
                swap_rows(matrix, row, row + 1)
                action = "swap"
                swaps += 1
            else:
                multipliers = row_multipliers(upper, lower, integer_ratio=integer_ratio)
                if multipliers.integer_ratio and not _stays_exact(matrix, row, multipliers):
                    multipliers = row_multipliers(upper, lower, integer_ratio=False)
                action = "combine"
                if pairwise_pivoting and not multipliers.integer_ratio and abs(upper) > abs(lower):
                    swap_rows(matrix, row, row + 1)
                    multipliers = row_multipliers(lower, upper, integer_ratio=False)
                    action = "swap_combine"
                    pivot_swaps += 1
                combine_rows(
                    matrix,
                    row,
                    row + 1,
                    multipliers,
                    zero_snap=0.0 if multipliers.integer_ratio else zero_snap,
                )
                divisor = rescale_row(matrix, row)
                combines += 1
                target_multiplier = multipliers.target
                copy_multiplier = multipliers.copy
                sign = "-" if multipliers.sign < 0 else "+"
            steps += 1
            if emit is not None:
                emit(
                    EliminationStep(
                        matrix=snapshot(matrix),
                        pass_index=column,
                        column=column,
                        target_row=row,
                        source_row=row + 1,
                        target_multiplier=target_multiplier,
                        copy_multiplier=copy_multiplier,
                        sign=sign,
                        action=action,
                        divisor=divisor,
                    )
                )
            if not check_consistency(matrix):
                logger.info("contradictory row found in pass %d, elimination aborted", column)
                return EliminationSummary(
                    passes_run=passes_run,
                    steps=steps,
                    combines=combines,
                    swaps=swaps,
                    pivot_swaps=pivot_swaps,
                    pivot_columns=tuple(pivot_columns),
                    free_columns=tuple(free_columns),
                    aborted=True,
                )

        if bottom >= 0 and matrix[bottom, column] != 0.0:
            pivot_columns.append(column)
            bottom -= 1
        else:
            free_columns.append(column)
        logger.debug("pass %d done, next pivot row %d", column, bottom)

    return EliminationSummary(
        passes_run=passes_run,
        steps=steps,
        combines=combines,
        swaps=swaps,
        pivot_swaps=pivot_swaps,
        pivot_columns=tuple(pivot_columns),
        free_columns=tuple(free_columns),
        aborted=False,
    )


def _stays_exact(matrix: AugmentedMatrix, row: int, multipliers: RowMultipliers) -> bool:
    peaks = np.max(np.abs(matrix[row : row + 2]), axis=1)
    bound = multipliers.target * float(peaks[0]) + multipliers.copy * float(peaks[1])
    return bound <= EXACT_INTEGER_LIMIT

from __future__ import annotations

import pytest

from slaegauss.solver import (
    as_augmented_matrix,
    check_consistency,
    has_full_pivots,
    inconsistent_rows,
    pivot_product,
)

pytestmark = pytest.mark.unit

_ANTI_DIAGONAL_PRODUCT = 30.0


def test_zero_row_with_nonzero_constant_is_inconsistent() -> None:
    matrix = as_augmented_matrix([[0.0, 0.0, 0.0, 5.0], [1.0, 2.0, 3.0, 4.0], [1.0, 0.0, 0.0, 1.0]])

    assert check_consistency(matrix) is False
    assert inconsistent_rows(matrix) == (0,)


def test_all_zero_row_is_consistent() -> None:
    matrix = as_augmented_matrix([[0.0, 0.0, 0.0], [1.0, 2.0, 3.0]])

    assert check_consistency(matrix) is True
    assert inconsistent_rows(matrix) == ()


def test_coefficients_summing_to_zero_do_not_flag_a_row() -> None:
    matrix = as_augmented_matrix([[1.0, -1.0, 5.0], [1.0, 1.0, 1.0]])

    assert check_consistency(matrix) is True


def test_pivot_product_reads_the_anti_diagonal() -> None:
    matrix = as_augmented_matrix([[0.0, 0.0, 2.0, 4.0], [0.0, 3.0, 1.0, 1.0], [5.0, 1.0, 1.0, 1.0]])

    assert pivot_product(matrix) == _ANTI_DIAGONAL_PRODUCT


def test_pivot_product_is_zero_when_a_pivot_is_missing() -> None:
    matrix = as_augmented_matrix(
        [[0.0, 0.0, 0.0, 0.0], [0.0, 0.0, -1.0, -1.0], [3.0, 6.0, 2.0, 11.0]]
    )

    assert pivot_product(matrix) == 0.0


def test_full_pivots_survive_an_underflowing_product() -> None:
    matrix = as_augmented_matrix(
        [
            [0.0, 0.0, 1e-200, 1.0],
            [0.0, 1e-200, 0.0, 1.0],
            [1e-200, 0.0, 0.0, 1.0],
        ]
    )

    assert pivot_product(matrix) == 0.0
    assert has_full_pivots(matrix) is True


def test_missing_anti_diagonal_pivot_is_not_full() -> None:
    matrix = as_augmented_matrix([[0.0, 0.0, 0.0], [1.0, 2.0, 3.0]])

    assert has_full_pivots(matrix) is False

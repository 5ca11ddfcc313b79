from __future__ import annotations

import numpy as np
import pytest

from slaegauss.solver import RecordingObserver, RowSwapPerformed, solve_augmented_system

pytestmark = pytest.mark.conformance

_REFERENCE = [
    [2.0, 1.0, 1.0, 1.0, 5.0],
    [1.0, 3.0, 2.0, 1.0, 10.0],
    [1.0, 1.0, 4.0, 1.0, 9.0],
    [1.0, 1.0, 1.0, 5.0, 12.0],
]
_REFERENCE_X = np.array([2.0, 129.0, 94.0, 123.0]) / 70.0
_REFERENCE_PIVOT_PRODUCT = -420.0
_DUPLICATE_ROW = [
    [1.0, 2.0, 3.0, 4.0, 10.0],
    [2.0, 1.0, 1.0, 1.0, 5.0],
    [1.0, 2.0, 3.0, 4.0, 10.0],
    [3.0, 1.0, 2.0, 1.0, 7.0],
]
_INCONSISTENT = [
    [1.0, 1.0, 1.0, 1.0, 4.0],
    [0.0, 0.0, 0.0, 0.0, 5.0],
    [1.0, 2.0, 3.0, 4.0, 10.0],
    [2.0, 1.0, 1.0, 1.0, 5.0],
]


def test_reference_system_has_unique_solution() -> None:
    result = solve_augmented_system(_REFERENCE)

    assert result.kind == "unique"
    assert result.consistent is True
    assert result.pivot_product == _REFERENCE_PIVOT_PRODUCT
    assert result.x is not None
    np.testing.assert_allclose(result.x, _REFERENCE_X, rtol=1e-14)
    coefficients = np.array(_REFERENCE)[:, :-1]
    np.testing.assert_allclose(
        result.x, np.linalg.solve(coefficients, np.array(_REFERENCE)[:, -1]), rtol=1e-12
    )
    assert result.residual_status == "pass"
    assert result.residual is not None
    assert float(np.max(np.abs(result.residual))) < 1e-12
    assert result.warnings == ()


def test_reference_system_original_is_untouched() -> None:
    result = solve_augmented_system(_REFERENCE)

    np.testing.assert_array_equal(result.original, np.array(_REFERENCE))
    assert result.original.flags.writeable is False


def test_row_order_does_not_change_reference_solution() -> None:
    reversed_rows = list(reversed(_REFERENCE))
    rotated_rows = _REFERENCE[1:] + _REFERENCE[:1]

    for rows in (reversed_rows, rotated_rows):
        result = solve_augmented_system(rows)
        assert result.kind == "unique"
        assert result.x is not None
        np.testing.assert_allclose(result.x, _REFERENCE_X, rtol=1e-12)


def test_duplicate_row_system_is_singular_with_particular_solution() -> None:
    result = solve_augmented_system(_DUPLICATE_ROW)

    assert result.kind == "singular"
    assert result.singular is True
    assert result.pivot_product == 0.0
    assert result.basis == {0: (3, 0), 1: (2, 1), 2: (1, 2)}
    assert result.elimination.free_columns == (3,)
    assert result.x is not None
    np.testing.assert_allclose(result.x, [0.5, 2.5, 1.5, 0.0], rtol=0.0, atol=1e-15)
    coefficients = np.array(_DUPLICATE_ROW)[:, :-1]
    np.testing.assert_allclose(coefficients @ result.x, np.array(_DUPLICATE_ROW)[:, -1])
    assert result.residual_status == "pass"
    assert [warning.code for warning in result.warnings] == ["W_NUM_ILL_CONDITIONED"]


def test_contradictory_system_is_inconsistent() -> None:
    observer = RecordingObserver()

    result = solve_augmented_system(_INCONSISTENT, observer=observer)

    assert result.kind == "inconsistent"
    assert result.consistent is False
    assert result.x is None
    assert result.residual is None
    assert result.residual_status is None
    assert result.basis is None
    assert result.swap_count == 1
    swaps = [event for event in observer.events if isinstance(event, RowSwapPerformed)]
    assert len(swaps) == 1
    np.testing.assert_array_equal(result.matrix[0], [0.0, 0.0, 0.0, 0.0, 5.0])
    assert "back_substitution_complete" not in observer.names()


def test_single_unknown_system() -> None:
    result = solve_augmented_system([[4.0, 10.0]])

    assert result.kind == "unique"
    assert result.pivot_product == 4.0  # noqa: PLR2004
    assert result.x is not None
    np.testing.assert_array_equal(result.x, [2.5])


@pytest.mark.parametrize("scale", [1e-80, 1e-40, 1e40, 1e80])
def test_scaled_reference_system_keeps_its_solution(scale: float) -> None:
    result = solve_augmented_system(np.array(_REFERENCE) * scale)

    assert result.kind == "unique"
    assert result.singular is False
    assert result.x is not None
    np.testing.assert_allclose(result.x, _REFERENCE_X, rtol=1e-12)
    assert result.residual_status == "pass"


def test_underflowing_pivot_product_still_routes_unique() -> None:
    tiny = 1e-100
    system = np.zeros((4, 5))
    for index in range(4):
        system[index, index] = tiny
        system[index, -1] = tiny * (index + 1)

    result = solve_augmented_system(system)

    assert result.pivot_product == 0.0
    assert result.kind == "unique"
    assert result.singular is False
    assert result.x is not None
    np.testing.assert_allclose(result.x, [1.0, 2.0, 3.0, 4.0], rtol=1e-14)


@pytest.mark.parametrize(("seed", "size"), [(3, 10), (7, 12), (11, 16), (19, 20)])
def test_random_real_systems_match_dense_solve(seed: int, size: int) -> None:
    rng = np.random.default_rng(seed)
    system = rng.uniform(-1.0, 1.0, size=(size, size + 1))

    result = solve_augmented_system(system)

    expected = np.linalg.solve(system[:, :-1], system[:, -1])
    assert result.kind == "unique"
    assert result.x is not None
    np.testing.assert_allclose(
        result.x, expected, rtol=1e-7, atol=1e-9 * float(np.max(np.abs(expected)))
    )
    assert result.residual_status == "pass"


def test_thirty_unknown_integer_system_matches_dense_solve() -> None:
    rng = np.random.default_rng(20240611)
    size = 30
    system = rng.integers(-10, 11, size=(size, size + 1)).astype(np.float64)

    result = solve_augmented_system(system)

    expected = np.linalg.solve(system[:, :-1], system[:, -1])
    assert result.kind == "unique"
    assert result.x is not None
    np.testing.assert_allclose(
        result.x, expected, rtol=1e-7, atol=1e-9 * float(np.max(np.abs(expected)))
    )
    assert result.residual_status == "pass"

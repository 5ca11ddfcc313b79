from __future__ import annotations

import numpy as np
import pytest
from pydantic import ValidationError

from slaegauss.diagnostics.models import (
    DiagnosticEvent,
    MatrixPosition,
    Severity,
    SolverStage,
)

pytestmark = pytest.mark.unit


def _base_event(**overrides: object) -> DiagnosticEvent:
    payload: dict[str, object] = {
        "code": "E_SYS_INCONSISTENT",
        "severity": Severity.ERROR,
        "message": "reduced row 0 reads 0 = 5",
        "suggested_action": "check the constants column",
        "solver_stage": SolverStage.CLASSIFY,
        "source": "solver",
    }
    payload.update(overrides)
    return DiagnosticEvent(**payload)


def test_location_is_a_source_or_a_matrix_position() -> None:
    by_source = _base_event()
    by_row = _base_event(source=None, position=MatrixPosition(row=2))
    by_column = _base_event(source=None, position=MatrixPosition(column=1))

    assert by_source.source == "solver"
    assert by_row.position == MatrixPosition(row=2)
    assert by_column.position == MatrixPosition(column=1)


def test_event_without_location_is_rejected() -> None:
    with pytest.raises(ValidationError):
        _base_event(source=None, position=None)


def test_position_needs_an_index() -> None:
    with pytest.raises(ValidationError):
        MatrixPosition()


@pytest.mark.parametrize("fields", [{"row": -1}, {"column": -1}, {"row": 0, "column": -2}])
def test_negative_indices_are_rejected(fields: dict[str, int]) -> None:
    with pytest.raises(ValidationError):
        MatrixPosition(**fields)


def test_unknown_fields_are_rejected() -> None:
    with pytest.raises(ValidationError):
        _base_event(row_context={"row_index": 0})


def test_witness_is_sorted_and_plain() -> None:
    event = _base_event(witness={"z": 1, "a": {"y": 2, "x": 3}, "cols": (3, 1)})
    assert event.witness == {"a": {"x": 3, "y": 2}, "cols": [3, 1], "z": 1}

    with pytest.raises(ValidationError):
        _base_event(witness={"bad": object()})
    with pytest.raises(ValidationError):
        _base_event(witness={1: "non-string key"})


def test_numpy_witness_values_become_plain_json() -> None:
    event = _base_event(
        witness={"pivot_product": np.float64(-420.0), "free": np.array([3], dtype=np.int64)}
    )

    assert event.witness == {"free": [3], "pivot_product": -420.0}
    assert type(event.witness["free"][0]) is int  # type: ignore[index]


def test_models_are_immutable() -> None:
    event = _base_event(position=MatrixPosition(row=0))

    with pytest.raises(ValidationError):
        event.message = "changed"  # type: ignore[misc]

    with pytest.raises(ValidationError):
        event.position = MatrixPosition(row=1)  # type: ignore[misc]


def test_model_dump_json_is_reproducible_for_equal_inputs() -> None:
    left = _base_event(
        witness={"outer": {"b": 2, "a": 1}, "z": [2, 1]},
        position=MatrixPosition(row=3, column=1),
    )
    right = _base_event(
        witness={"z": [2, 1], "outer": {"a": 1, "b": 2}},
        position=MatrixPosition(row=3, column=1),
    )

    assert left.model_dump_json() == right.model_dump_json()

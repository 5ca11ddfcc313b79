from __future__ import annotations

import numpy as np
import pytest

from slaegauss.solver import ConditionEstimator, LuRcondProxyEstimator

pytestmark = pytest.mark.unit

_WARN_MAX = 1e-8


def test_identity_is_perfectly_conditioned() -> None:
    assert LuRcondProxyEstimator().estimate(np.eye(3)) == 1.0


def test_diagonal_ratio_is_reported() -> None:
    assert LuRcondProxyEstimator().estimate(np.diag([4.0, 1.0])) == pytest.approx(0.25)


def test_singular_block_falls_below_warning_band() -> None:
    value = LuRcondProxyEstimator().estimate(np.array([[1.0, 2.0], [2.0, 4.0]]))

    assert value is not None
    assert value <= _WARN_MAX


def test_non_square_input_is_unavailable() -> None:
    assert LuRcondProxyEstimator().estimate(np.ones((2, 3))) is None


def test_nonfinite_input_is_unavailable() -> None:
    assert LuRcondProxyEstimator().estimate(np.array([[np.nan, 1.0], [1.0, 1.0]])) is None


def test_estimator_satisfies_protocol() -> None:
    assert isinstance(LuRcondProxyEstimator(), ConditionEstimator)

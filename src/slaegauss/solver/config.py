from __future__ import annotations

from dataclasses import dataclass
from functools import cache
from pathlib import Path
from typing import cast

import numpy as np
import yaml  # type: ignore[import-untyped]

DEFAULT_THRESHOLDS_PATH = Path(__file__).resolve().parent / "thresholds_v1.yaml"
EXPECTED_COND_ESTIMATOR_ID = "lu_rcond_proxy_v1"


class SolverConfigError(ValueError):
    def __init__(self, code: str, message: str) -> None:
        super().__init__(f"{code}: {message}")
        self.code = code
        self.message = message


@dataclass(frozen=True, slots=True)
class EliminationThresholds:
    zero_snap_relative: float
    integer_ratio_enabled: bool
    pairwise_pivoting_enabled: bool


@dataclass(frozen=True, slots=True)
class ResidualThresholds:
    epsilon: float
    pass_max: float
    degraded_max: float
    fail_min_exclusive: float


@dataclass(frozen=True, slots=True)
class ConditioningThresholds:
    estimator_id: str
    unavailable_warning_code: str
    ill_conditioned_warning_code: str
    warn_max: float


@dataclass(frozen=True, slots=True)
class SolverThresholdConfig:
    elimination: EliminationThresholds
    residual: ResidualThresholds
    conditioning: ConditioningThresholds
    expected_unknowns: int | None
    artifact_path: str


def load_solver_threshold_config(path: str | Path | None = None) -> SolverThresholdConfig:
    selected_path = Path(path) if path is not None else DEFAULT_THRESHOLDS_PATH
    return _load_solver_threshold_config_cached(str(selected_path.resolve()))


@cache
def _load_solver_threshold_config_cached(path: str) -> SolverThresholdConfig:
    target = Path(path)
    raw = _read_yaml_file(target)
    numeric_contract = _require_mapping(raw, "numeric_contract")

    elimination_block = _require_mapping(numeric_contract, "elimination")
    elimination = EliminationThresholds(
        zero_snap_relative=_require_float(elimination_block, "zero_snap_relative"),
        integer_ratio_enabled=_require_bool(elimination_block, "integer_ratio_enabled"),
        pairwise_pivoting_enabled=_require_bool(elimination_block, "pairwise_pivoting_enabled"),
    )
    if elimination.zero_snap_relative < 0.0 or elimination.zero_snap_relative >= 1.0:
        raise SolverConfigError(
            "E_SOLVER_CONFIG_INVALID",
            "elimination zero_snap_relative must be within [0, 1)",
        )

    residual_block = _require_mapping(numeric_contract, "residual")
    residual_bands = _require_mapping(residual_block, "status_bands")
    residual = ResidualThresholds(
        epsilon=_require_float(residual_block, "relative_epsilon"),
        pass_max=_require_float(residual_bands, "pass_max"),
        degraded_max=_require_float(residual_bands, "degraded_max"),
        fail_min_exclusive=_require_float(residual_bands, "fail_min_exclusive"),
    )
    _validate_residual_thresholds(residual)

    condition_block = _require_mapping(numeric_contract, "condition_indicator")
    estimator_block = _require_mapping(condition_block, "estimator")
    unavailable_policy = _require_mapping(estimator_block, "unavailable_policy")
    condition_bands = _require_mapping(condition_block, "bands")
    conditioning = ConditioningThresholds(
        estimator_id=_require_string(estimator_block, "id"),
        unavailable_warning_code=_require_string(unavailable_policy, "warning_code"),
        ill_conditioned_warning_code=_require_string(condition_bands, "warning_code"),
        warn_max=_require_float(condition_bands, "warn_max"),
    )

    solver_defaults = _require_mapping(raw, "solver_defaults")
    return SolverThresholdConfig(
        elimination=elimination,
        residual=residual,
        conditioning=conditioning,
        expected_unknowns=_require_optional_positive_int(solver_defaults, "expected_unknowns"),
        artifact_path=str(target),
    )


def _validate_residual_thresholds(residual: ResidualThresholds) -> None:
    if residual.epsilon < 0.0:
        raise SolverConfigError(
            "E_SOLVER_CONFIG_INVALID",
            "residual relative_epsilon must be >= 0",
        )
    if residual.pass_max > residual.degraded_max:
        raise SolverConfigError(
            "E_SOLVER_CONFIG_INVALID",
            "residual pass_max must be <= degraded_max",
        )
    if residual.fail_min_exclusive != residual.degraded_max:
        raise SolverConfigError(
            "E_SOLVER_CONFIG_INVALID",
            "residual fail_min_exclusive must equal degraded_max",
        )


def _read_yaml_file(path: Path) -> dict[str, object]:
    try:
        raw_text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SolverConfigError(
            "E_SOLVER_CONFIG_READ_FAILED",
            f"unable to read solver thresholds artifact '{path}': {exc}",
        ) from exc
    try:
        payload = yaml.safe_load(raw_text)
    except yaml.YAMLError as exc:
        raise SolverConfigError(
            "E_SOLVER_CONFIG_PARSE_FAILED",
            f"invalid solver thresholds yaml in '{path}': {exc}",
        ) from exc
    if not isinstance(payload, dict):
        raise SolverConfigError(
            "E_SOLVER_CONFIG_INVALID",
            "solver thresholds artifact root must be a mapping",
        )
    return cast(dict[str, object], payload)


def _require_mapping(data: dict[str, object], key: str) -> dict[str, object]:
    value = data.get(key)
    if isinstance(value, dict):
        return cast(dict[str, object], value)
    raise SolverConfigError(
        "E_SOLVER_CONFIG_INVALID", f"missing or invalid mapping for key '{key}'"
    )


def _require_string(data: dict[str, object], key: str) -> str:
    value = data.get(key)
    if isinstance(value, str) and value:
        return value
    raise SolverConfigError("E_SOLVER_CONFIG_INVALID", f"missing or invalid string for key '{key}'")


def _require_bool(data: dict[str, object], key: str) -> bool:
    value = data.get(key)
    if isinstance(value, bool):
        return value
    raise SolverConfigError("E_SOLVER_CONFIG_INVALID", f"missing or invalid bool for key '{key}'")


def _require_float(data: dict[str, object], key: str) -> float:
    value = data.get(key)
    if isinstance(value, bool):
        raise SolverConfigError("E_SOLVER_CONFIG_INVALID", f"invalid numeric value for key '{key}'")
    if isinstance(value, int | float):
        numeric = float(value)
        if np.isfinite(numeric):
            return numeric
    raise SolverConfigError("E_SOLVER_CONFIG_INVALID", f"missing or invalid float for key '{key}'")


def _require_optional_positive_int(data: dict[str, object], key: str) -> int | None:
    if key not in data:
        raise SolverConfigError("E_SOLVER_CONFIG_INVALID", f"missing key '{key}'")
    value = data[key]
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise SolverConfigError(
            "E_SOLVER_CONFIG_INVALID", f"key '{key}' must be null or an integer >= 1"
        )
    return value

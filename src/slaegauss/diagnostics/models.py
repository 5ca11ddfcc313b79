from __future__ import annotations

from enum import StrEnum
from typing import cast

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class Severity(StrEnum):
    ERROR = "error"
    WARNING = "warning"


class SolverStage(StrEnum):
    PARSE = "parse"
    NORMALIZE = "normalize"
    ELIMINATE = "eliminate"
    CLASSIFY = "classify"
    SUBSTITUTE = "substitute"
    RESIDUAL = "residual"


class MatrixPosition(BaseModel):
    """Row and/or column of the augmented matrix a diagnostic points at."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    row: int | None = Field(default=None, ge=0)
    column: int | None = Field(default=None, ge=0)

    @model_validator(mode="after")
    def _require_an_index(self) -> MatrixPosition:
        if self.row is None and self.column is None:
            raise ValueError("matrix position needs a row or a column index")
        return self


def _plain_witness(value: object) -> object:
    # numpy scalars arrive from solver results; witnesses store plain JSON values
    if isinstance(value, np.generic):
        return _plain_witness(value.item())
    if value is None or isinstance(value, bool | int | float | str):
        return value
    if isinstance(value, list | tuple | np.ndarray):
        return [_plain_witness(item) for item in value]
    if isinstance(value, dict):
        entries = cast(dict[object, object], value)
        if not all(isinstance(key, str) for key in entries):
            raise ValueError("witness object keys must be strings")
        return {str(key): _plain_witness(entries[key]) for key in sorted(entries, key=str)}
    raise ValueError("witness must be JSON-serializable")


class DiagnosticEvent(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    code: str = Field(min_length=1)
    severity: Severity
    message: str = Field(min_length=1)
    suggested_action: str = Field(min_length=1)
    solver_stage: SolverStage

    source: str | None = None
    position: MatrixPosition | None = None

    witness: object | None = None

    @field_validator("witness", mode="before")
    @classmethod
    def _normalize_witness(cls, witness: object) -> object:
        return None if witness is None else _plain_witness(witness)

    @model_validator(mode="after")
    def _require_location(self) -> DiagnosticEvent:
        if self.source is None and self.position is None:
            raise ValueError("a diagnostic needs a source or a matrix position")
        return self

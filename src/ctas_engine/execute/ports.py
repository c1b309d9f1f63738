"""
Execution ports and result types.

- InsertEngine: protocol for anything that can write a plan into a table (Spark SQL, fakes, etc.)
- ApplyStatus / InsertOutcome: the insert step's result as a value, so the caller can
  inspect a failure and compensate before forwarding the original error
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol

from src.ctas_engine.catalog.ports import CatalogTableHandle
from src.ctas_engine.query import ReconciledPlan


class ApplyStatus(StrEnum):
    OK = "ok"
    FAILED = "failed"


@dataclass(frozen=True)
class InsertOutcome:
    """Outcome of submitting one insert."""

    status: ApplyStatus
    message: str  # one line
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.status == ApplyStatus.OK

    @classmethod
    def succeeded(cls, message: str) -> InsertOutcome:
        return cls(status=ApplyStatus.OK, message=message)

    @classmethod
    def failed(cls, error: Exception, message: str) -> InsertOutcome:
        return cls(status=ApplyStatus.FAILED, message=message, error=error)


class InsertEngine(Protocol):
    """Engine capable of writing a reconciled plan into a resolved table."""

    def execute_insert(
        self,
        target: CatalogTableHandle,
        partition_spec: Mapping[str, str | None],
        plan: ReconciledPlan,
        *,
        overwrite: bool,
        if_not_exists: bool,
    ) -> None: ...

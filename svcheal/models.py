from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


EXIT_OK = 0
EXIT_INVALID_NAME = 2
EXIT_ACTION_FAILED = 11


class ServiceState(str, Enum):
    RUNNING = "running"
    NOT_RUNNING = "not_running"  # stopped, paused, starting, failed, ...
    NOT_FOUND = "not_found"


class ReconciliationResult(str, Enum):
    STARTED = "started"
    RESTARTED = "restarted"
    SKIPPED_NOT_RUNNING = "skipped_not_running"
    NOT_FOUND = "not_found"
    ACTION_FAILED = "action_failed"
    ACCESS_ERROR = "access_error"


def parse_service_names(raw: str | Sequence[str]) -> tuple[str, ...]:
    """Split a comma-separated list (or a list of such strings) into trimmed names.

    Entries that are blank after trimming are dropped.
    """
    items = [raw] if isinstance(raw, str) else list(raw)
    names: list[str] = []
    for item in items:
        for part in str(item).split(","):
            part = part.strip()
            if part:
                names.append(part)
    return tuple(names)


class RunConfig(BaseModel):
    """Everything one reconciliation pass needs, fixed at process start."""

    model_config = ConfigDict(frozen=True)

    services: tuple[str, ...] = Field(..., min_length=1, description="Service names, in processing order")
    delay_s: float = Field(60.0, ge=0, description="Seconds to wait before the pass starts")
    force_start: bool = Field(False, description="Start services that are not running")

    @field_validator("services", mode="before")
    @classmethod
    def _split_services(cls, v: Any) -> Any:
        if isinstance(v, (str, list, tuple)):
            return parse_service_names(v)
        return v


@dataclass(frozen=True)
class ServiceDescriptor:
    name: str
    state: ServiceState
    detail: str = ""


@dataclass(frozen=True)
class ServiceOutcome:
    name: str
    result: ReconciliationResult
    message: str = ""


@dataclass(frozen=True)
class AggregateOutcome:
    results: tuple[ServiceOutcome, ...]
    invalid_name: bool
    action_failed: bool

    @property
    def ok(self) -> bool:
        return not (self.invalid_name or self.action_failed)

    @property
    def exit_code(self) -> int:
        # A failed action is the more severe condition, so it wins when both are set.
        if self.action_failed:
            return EXIT_ACTION_FAILED
        if self.invalid_name:
            return EXIT_INVALID_NAME
        return EXIT_OK

    def to_dict(self) -> dict[str, Any]:
        return {
            "results": [
                {"name": r.name, "result": r.result.value, "message": r.message} for r in self.results
            ],
            "invalid_name": self.invalid_name,
            "action_failed": self.action_failed,
            "exit_code": self.exit_code,
        }

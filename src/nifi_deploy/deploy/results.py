"""Result models for a deployment run.

A ``DeploymentResult`` records every workflow step in order (volumes,
reconcile, destination, certificates, collect, launch) with its outcome,
so that ``--json`` output and logs show exactly how far a run got before it
aborted.

Key Concepts:
    OverallStatus: PASSED, FAILED, SKIPPED, RUNNING, PENDING.
    StepResult: One workflow step with its name, status, detail and error.
    DeploymentResult: Run id, destination, container, image, steps.
        ``mark_complete()`` sets timestamps, duration and status.

Tags:
    results, models, pydantic, deployment, status, reporting
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class OverallStatus(str, Enum):
    """Overall status of a run or of a single step."""

    PASSED = "PASSED"
    FAILED = "FAILED"
    SKIPPED = "SKIPPED"
    RUNNING = "RUNNING"
    PENDING = "PENDING"


class StepResult(BaseModel):
    """Outcome of one workflow step."""

    name: str
    status: OverallStatus = OverallStatus.PENDING
    detail: dict[str, Any] = Field(default_factory=dict)
    error: str | None = None
    duration_seconds: float = 0.0


class DeploymentResult(BaseModel):
    """Result of one ``nifi-deploy deploy`` run."""

    run_id: str
    destination: str | None = None
    container_name: str | None = None
    container_id: str | None = None
    image: str | None = None
    dry_run: bool = False
    started_at: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())
    completed_at: str | None = None
    duration_seconds: float = 0.0
    steps: list[StepResult] = Field(default_factory=list)
    overall_status: OverallStatus = OverallStatus.PENDING
    error: str | None = None
    error_type: str | None = None
    summary: str = ""

    def step(self, name: str) -> StepResult | None:
        return next((s for s in self.steps if s.name == name), None)

    def mark_complete(self, status: OverallStatus | None = None) -> None:
        """Mark the run as complete, compute duration and status."""
        self.completed_at = datetime.now(UTC).isoformat()
        start = datetime.fromisoformat(self.started_at)
        end = datetime.fromisoformat(self.completed_at)
        self.duration_seconds = (end - start).total_seconds()

        if status:
            self.overall_status = status
        elif self.error or any(s.status == OverallStatus.FAILED for s in self.steps):
            self.overall_status = OverallStatus.FAILED
        else:
            self.overall_status = OverallStatus.PASSED

        passed = sum(1 for s in self.steps if s.status == OverallStatus.PASSED)
        self.summary = f"{passed}/{len(self.steps)} steps passed"

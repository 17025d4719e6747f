# Kavach — Task Verification Gate
# Copyright (C) 2026 Kavach Project Contributors
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.

"""Pydantic models for the Aegis two-stage verification verdict."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Stage(str, Enum):
    """Furthest stage the verifier reached."""

    TESTING = "TESTING"
    VERIFIED = "VERIFIED"


class Status(str, Enum):
    """Terminal verdict of a verification run.

    INCONCLUSIVE is only produced under the strict exec-error policy,
    when checks found nothing but at least one tool could not run.
    """

    PASSED = "passed"
    FAILED = "failed"
    INCONCLUSIVE = "inconclusive"


class VerificationResult(BaseModel):
    """Outcome of one Aegis run. Immutable once returned."""

    model_config = ConfigDict(frozen=True)

    stage: Stage = Stage.TESTING
    status: Status = Status.PASSED

    # Stage 1 (TESTING)
    lint_issues: int = Field(default=0, ge=0)
    warnings: int = Field(default=0, ge=0)
    core_bugs: int = Field(default=0, ge=0)

    # Stage 2 (VERIFIED)
    dead_code: bool = False
    suppressed: bool = False
    algorithm_ok: bool = False

    fail_reasons: tuple[str, ...] = ()
    exec_errors: tuple[str, ...] = ()

    @model_validator(mode="after")
    def _check_consistency(self) -> "VerificationResult":
        failed = self.status == Status.FAILED
        if failed != bool(self.fail_reasons):
            raise ValueError("status must be 'failed' exactly when fail_reasons is non-empty")
        if self.status == Status.INCONCLUSIVE and not self.exec_errors:
            raise ValueError("an inconclusive result requires exec_errors")
        if self.stage == Stage.TESTING and (self.dead_code or self.suppressed or self.algorithm_ok):
            raise ValueError("stage 2 fields are only set once stage VERIFIED is reached")
        return self

    @property
    def passed(self) -> bool:
        return self.status == Status.PASSED

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

"""Aegis — two-stage verification gate.

Stage 1 (TESTING) always runs three independent counts: lint issues,
compiler warnings and bug markers. Any non-zero count is a fail reason
and ends the run at TESTING. Only a clean Stage 1 advances to Stage 2
(VERIFIED): dead code, suppressed diagnostics and the algorithm gate.

Tool failures are collected in ``exec_errors`` and never become fail
reasons. Under the strict policy a run that is otherwise clean but has
exec errors ends INCONCLUSIVE.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from kavach.config import ExecErrorPolicy
from kavach.models.verification import Stage, Status, VerificationResult
from kavach.verify.external_checks import CheckOutcome, ExternalCheckRunner

logger = logging.getLogger(__name__)


class AegisVerifier:
    """Sequences the two stages and aggregates the verdict."""

    def __init__(
        self,
        checks: ExternalCheckRunner,
        *,
        policy: ExecErrorPolicy = ExecErrorPolicy.LENIENT,
        on_pass: Optional[Callable[[VerificationResult], None]] = None,
    ) -> None:
        self.checks = checks
        self.policy = policy
        self._on_pass = on_pass

    def verify(self) -> VerificationResult:
        fail_reasons: list[str] = []
        exec_errors: list[str] = []

        def collect(outcome: CheckOutcome) -> CheckOutcome:
            if outcome.error:
                exec_errors.append(outcome.error)
            return outcome

        # Stage 1: TESTING
        lint_issues = int(collect(self.checks.count_lint_issues()).value)
        warnings = int(collect(self.checks.count_warnings()).value)
        core_bugs = int(collect(self.checks.count_core_bugs()).value)

        for name, count in (
            ("lint_issues", lint_issues),
            ("warnings", warnings),
            ("core_bugs", core_bugs),
        ):
            if count > 0:
                fail_reasons.append(f"{name}:{count}")

        if fail_reasons:
            logger.info("Aegis stage TESTING failed: %s", ",".join(fail_reasons))
            return VerificationResult(
                stage=Stage.TESTING,
                status=Status.FAILED,
                lint_issues=lint_issues,
                warnings=warnings,
                core_bugs=core_bugs,
                fail_reasons=tuple(fail_reasons),
                exec_errors=tuple(exec_errors),
            )

        # Stage 2: VERIFIED
        dead_code = bool(collect(self.checks.has_dead_code()).value)
        suppressed = bool(collect(self.checks.has_suppressed_elements()).value)
        # No automated soundness check exists yet
        algorithm_ok = True

        if dead_code:
            fail_reasons.append("dead_code:found")
        if suppressed:
            fail_reasons.append("suppressed_elements:found")

        if fail_reasons:
            status = Status.FAILED
        elif exec_errors and self.policy is ExecErrorPolicy.STRICT:
            status = Status.INCONCLUSIVE
        else:
            status = Status.PASSED

        result = VerificationResult(
            stage=Stage.VERIFIED,
            status=status,
            lint_issues=lint_issues,
            warnings=warnings,
            core_bugs=core_bugs,
            dead_code=dead_code,
            suppressed=suppressed,
            algorithm_ok=algorithm_ok,
            fail_reasons=tuple(fail_reasons),
            exec_errors=tuple(exec_errors),
        )
        logger.info("Aegis stage VERIFIED: %s", status.value)

        if result.passed and self._on_pass is not None:
            self._on_pass(result)

        return result

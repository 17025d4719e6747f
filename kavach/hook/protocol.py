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

"""Hook protocol adapter for the orchestrator (PostToolUse hook mode).

Contract:
- stdin carries one JSON payload (``HookInput``).
- A payload without tool-response content is a no-op: nothing is written
  and the hook exits 0 with no decision.
- Otherwise Aegis runs and exactly one JSON decision line goes to stdout:
  approve with reason ``aegis:verified``, or block with the fail reasons
  joined by commas.
- The human-readable TOON report always goes to stderr, never stdout.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import TYPE_CHECKING, TextIO

from pydantic import ValidationError

from kavach.errors import HookInputError
from kavach.models.hook import Decision, HookInput, HookResponse
from kavach.models.verification import Status, VerificationResult
from kavach.reporter.toon_out import ToonSection, render_sections, render_verification

if TYPE_CHECKING:
    from kavach.context import RunContext

logger = logging.getLogger(__name__)

APPROVE_REASON = "aegis:verified"
INCONCLUSIVE_REASON = "aegis:inconclusive"
BLOCK_GATE = "AEGIS_FAIL"


def read_hook_input(stream: TextIO) -> HookInput:
    """Parse the hook payload.

    Raises:
        HookInputError: stdin could not be read or is not a JSON object.
    """
    try:
        data = stream.read()
    except OSError as e:
        raise HookInputError(f"failed to read hook input: {e}") from e

    try:
        return HookInput.model_validate_json(data or "{}")
    except ValidationError as e:
        raise HookInputError(f"failed to read hook input: {e.errors()[0]['msg']}") from e


def approve(reason: str) -> HookResponse:
    return HookResponse(decision=Decision.APPROVE, reason=reason)


def block(gate: str, reason: str) -> HookResponse:
    """Block decision carrying a ``[BLOCK]`` TOON context for the orchestrator."""
    context = render_sections(
        [
            ToonSection("BLOCK")
            .add("gate", gate)
            .add("reason", reason)
            .add("date", date.today().isoformat())
        ]
    )
    return HookResponse(decision=Decision.BLOCK, reason=reason, additional_context=context)


def error_response(message: str) -> HookResponse:
    return HookResponse(decision=Decision.BLOCK, reason=f"error: {message}")


def decide(result: VerificationResult) -> HookResponse:
    """Map a verdict to the single hook decision."""
    if result.status == Status.PASSED:
        return approve(APPROVE_REASON)
    if result.status == Status.INCONCLUSIVE:
        return block(BLOCK_GATE, INCONCLUSIVE_REASON)
    return block(BLOCK_GATE, ",".join(result.fail_reasons))


def write_response(response: HookResponse, stream: TextIO) -> None:
    stream.write(response.to_json() + "\n")
    stream.flush()


def run_hook(ctx: "RunContext", stdin: TextIO, stdout: TextIO, stderr: TextIO) -> int:
    """Run one hook invocation. Returns the process exit code."""
    try:
        payload = read_hook_input(stdin)
    except HookInputError as e:
        logger.error("%s", e)
        write_response(error_response(str(e)), stdout)
        return 1

    if not payload.has_tool_response:
        logger.debug("Hook payload has no tool response; nothing to verify")
        return 0

    result = ctx.build_verifier().verify()

    stderr.write(render_verification(result, ctx.project, ctx.today))
    stderr.flush()

    write_response(decide(result), stdout)
    return 0

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

"""External toolchain checks used by the Aegis gate.

Each check shells out once (native vet/build tools, ripgrep) and reduces
the output to a count or a flag. Nothing here raises: a tool that is
missing, times out, or fails without output produces a zero/false value
plus an error string for the caller to report.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, Union

logger = logging.getLogger(__name__)

DEFAULT_TOOL_TIMEOUT = 120.0

# ripgrep file types searched for bug markers
BUG_MARKER_TYPES = ("go", "rust", "ts")


class Toolchain(str, Enum):
    """Native toolchain detected from the project manifest."""

    GO = "go"
    RUST = "rust"
    NONE = "none"


_MANIFESTS: dict[Toolchain, str] = {
    Toolchain.GO: "go.mod",
    Toolchain.RUST: "Cargo.toml",
}


def detect_toolchain(work_dir: Path) -> Toolchain:
    for toolchain, manifest in _MANIFESTS.items():
        if (work_dir / manifest).is_file():
            return toolchain
    return Toolchain.NONE


@dataclass(frozen=True)
class CommandOutput:
    """Combined stdout/stderr and exit code of a finished process."""

    output: str
    returncode: int


class ToolExecError(Exception):
    """A tool could not be run to completion."""


CommandRunner = Callable[[list[str], Path, float], CommandOutput]


def run_command(cmd: list[str], cwd: Path, timeout: float) -> CommandOutput:
    """Run a command, capturing stdout and stderr together.

    Raises:
        ToolExecError: the executable is missing or the timeout expired.
    """
    logger.debug("Running %s in %s", " ".join(cmd), cwd)
    try:
        result = subprocess.run(
            cmd,
            cwd=str(cwd),
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            errors="replace",
            timeout=timeout,
        )
    except FileNotFoundError as e:
        raise ToolExecError(f"{cmd[0]} not found: {e}") from e
    except subprocess.TimeoutExpired as e:
        raise ToolExecError(f"{cmd[0]} timed out after {timeout:g}s") from e
    except OSError as e:
        raise ToolExecError(f"{cmd[0]} could not start: {e}") from e
    return CommandOutput(output=result.stdout or "", returncode=result.returncode)


@dataclass(frozen=True)
class CheckOutcome:
    """Result of one check; ``error`` is set when the tool could not run."""

    value: Union[int, bool]
    error: Optional[str] = None


class ExternalCheckRunner:
    """Runs the project-level checks against ``work_dir``."""

    def __init__(
        self,
        work_dir: Path,
        *,
        timeout: float = DEFAULT_TOOL_TIMEOUT,
        bug_marker_pattern: str = "TODO|FIXME|BUG|XXX",
        suppression_pattern: str = r"@Suppress|#pragma|nolint|#\[allow",
        runner: CommandRunner = run_command,
        which: Callable[[str], Optional[str]] = shutil.which,
    ) -> None:
        self.work_dir = work_dir
        self.timeout = timeout
        self.bug_marker_pattern = bug_marker_pattern
        self.suppression_pattern = suppression_pattern
        self._runner = runner
        self._which = which
        self.toolchain = detect_toolchain(work_dir)

    def _run(self, cmd: list[str], label: str) -> str:
        """Run a toolchain command and return its output.

        Raises:
            ToolExecError: the command could not run, or failed silently.
        """
        result = self._runner(cmd, self.work_dir, self.timeout)
        if result.returncode != 0 and not result.output:
            raise ToolExecError(f"{label} failed: exit status {result.returncode}")
        return result.output

    def _search(self, cmd: list[str]) -> str:
        """Run ripgrep; exit 1 with no output means no matches."""
        try:
            result = self._runner(cmd, self.work_dir, self.timeout)
        except ToolExecError:
            if self._which("rg") is None:
                raise ToolExecError("rg (ripgrep) not found") from None
            raise
        if result.returncode != 0 and not result.output:
            return ""
        return result.output

    def _count(self, label: str, fn: Callable[[], int]) -> CheckOutcome:
        try:
            return CheckOutcome(value=fn())
        except ToolExecError as e:
            logger.warning("%s: %s", label, e)
            return CheckOutcome(value=0, error=str(e))

    def _flag(self, label: str, fn: Callable[[], bool]) -> CheckOutcome:
        try:
            return CheckOutcome(value=fn())
        except ToolExecError as e:
            logger.warning("%s: %s", label, e)
            return CheckOutcome(value=False, error=str(e))

    # ── Stage 1 ──

    def count_lint_issues(self) -> CheckOutcome:
        """Vet/clippy diagnostics; 0 for projects without a known toolchain."""

        def _lint() -> int:
            if self.toolchain is Toolchain.GO:
                output = self._run(["go", "vet", "./..."], "go vet")
                return sum(1 for line in output.split("\n") if line.strip())
            if self.toolchain is Toolchain.RUST:
                output = self._run(["cargo", "clippy", "--message-format=short"], "cargo clippy")
                return output.count("warning:")
            return 0

        return self._count("lint_issues", _lint)

    def count_warnings(self) -> CheckOutcome:
        def _warnings() -> int:
            if self.toolchain is Toolchain.GO:
                return self._run(["go", "build", "-v", "./..."], "go build").count("warning")
            if self.toolchain is Toolchain.RUST:
                output = self._run(["cargo", "check", "--message-format=short"], "cargo check")
                return output.count("warning:")
            return 0

        return self._count("warnings", _warnings)

    def count_core_bugs(self) -> CheckOutcome:
        """Sum of bug-marker occurrences reported by ``rg -c``."""

        def _bugs() -> int:
            cmd = ["rg", "-c", self.bug_marker_pattern, str(self.work_dir)]
            for file_type in BUG_MARKER_TYPES:
                cmd.extend(["--type", file_type])
            return _sum_match_counts(self._search(cmd))

        return self._count("core_bugs", _bugs)

    # ── Stage 2 ──

    def has_dead_code(self) -> CheckOutcome:
        def _dead_code() -> bool:
            if self.toolchain is Toolchain.GO:
                return "unused" in self._run(["go", "vet", "-unusedresult", "./..."], "go vet")
            if self.toolchain is Toolchain.RUST:
                return "dead_code" in self._run(["cargo", "check"], "cargo check")
            return False

        return self._flag("dead_code", _dead_code)

    def has_suppressed_elements(self) -> CheckOutcome:
        def _suppressed() -> bool:
            output = self._search(["rg", "-l", self.suppression_pattern, str(self.work_dir)])
            return bool(output.strip())

        return self._flag("suppressed", _suppressed)


def _sum_match_counts(output: str) -> int:
    """Sum the trailing ``:N`` of each ``path:N`` line; other lines are skipped."""
    total = 0
    for line in output.split("\n"):
        if ":" not in line:
            continue
        tail = line.rsplit(":", 1)[1].strip()
        if tail.isdigit():
            total += int(tail)
    return total

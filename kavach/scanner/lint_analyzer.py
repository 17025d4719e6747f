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

"""Line-oriented lint rules for a single file.

Rules run in a fixed order, each contributing at most one issue per line:

- W001 trailing whitespace
- W002 line too long
- W003 indentation that does not match the language convention
- E001/E002 unbalanced delimiters (Go / JSON)
- D001 file exceeds the DACE line limit

An unreadable file yields a single E000 issue. ``--fix`` only ever strips
trailing whitespace.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from kavach.config import KavachConfig
from kavach.models.lint import LintIssue, LintResult
from kavach.scanner.languages import Indent, LanguageRules, rules_for

logger = logging.getLogger(__name__)

_TRAILING_WS = " \t"
_FOUR_SPACES = "    "


def _read_lines(path: Path) -> list[str]:
    """Read a file as '\\n'-separated segments, keeping any '\\r' intact.

    Undecodable bytes survive as surrogates so ``autofix`` writes them back
    unchanged.
    """
    with open(path, encoding="utf-8", errors="surrogateescape", newline="") as f:
        return f.read().split("\n")


def _check_trailing_whitespace(lines: list[str]) -> list[LintIssue]:
    return [
        LintIssue(line=i, code="W001", message="trailing whitespace")
        for i, line in enumerate(lines, start=1)
        if line.endswith((" ", "\t"))
    ]


def _check_line_length(lines: list[str], limit: int) -> list[LintIssue]:
    return [
        LintIssue(
            line=i,
            column=limit + 1,
            code="W002",
            message=f"line too long ({len(line)} > {limit})",
        )
        for i, line in enumerate(lines, start=1)
        if len(line) > limit
    ]


def _check_indentation(lines: list[str], rules: Optional[LanguageRules]) -> list[LintIssue]:
    if rules is None or rules.preferred_indent is not Indent.TABS:
        return []
    label = rules.syntax_label or rules.language.value
    return [
        LintIssue(
            line=i,
            code="W003",
            message=f"use tabs instead of spaces for {label} indentation",
        )
        for i, line in enumerate(lines, start=1)
        if line.startswith(_FOUR_SPACES)
    ]


def _check_syntax(content: str, rules: Optional[LanguageRules]) -> list[LintIssue]:
    if rules is None or not rules.has_syntax_check:
        return []
    defect = rules.check_syntax(content)
    if not defect:
        return []
    return [
        LintIssue(
            line=1,
            code=rules.syntax_code,
            message=f"{rules.syntax_label} syntax error: {defect}",
        )
    ]


def _check_file_size(lines: list[str], limit: int) -> list[LintIssue]:
    if len(lines) <= limit:
        return []
    return [
        LintIssue(
            line=1,
            code="D001",
            message=f"DACE: file exceeds {limit} lines ({len(lines)} lines)",
        )
    ]


def analyze_file(
    path: Path | str,
    *,
    fix: bool = False,
    config: Optional[KavachConfig] = None,
) -> LintResult:
    """Lint one file.

    Args:
        path: File to lint.
        fix: Strip trailing whitespace in place when any issue was found.
        config: Thresholds; defaults when omitted.

    Returns:
        LintResult with issues in rule order and the auto-fixed line count.
    """
    config = config or KavachConfig()
    file_path = Path(path)
    result = LintResult(file=str(path))

    try:
        lines = _read_lines(file_path)
    except OSError as e:
        logger.debug("Could not read %s: %s", file_path, e)
        result.issues.append(
            LintIssue(line=0, code="E000", message=f"cannot read file: {e}")
        )
        return result

    rules = rules_for(file_path)
    content = "\n".join(lines)

    result.issues.extend(_check_trailing_whitespace(lines))
    result.issues.extend(_check_line_length(lines, config.max_line_length))
    result.issues.extend(_check_indentation(lines, rules))
    result.issues.extend(_check_syntax(content, rules))
    result.issues.extend(_check_file_size(lines, config.max_file_lines))

    if fix and result.issues:
        try:
            result.fixed = autofix(file_path, lines)
        except OSError as e:
            logger.warning("Could not auto-fix %s: %s", file_path, e)
            result.issues.append(
                LintIssue(line=0, code="E000", message=f"cannot write file: {e}")
            )

    return result


def autofix(path: Path | str, lines: list[str]) -> int:
    """Strip trailing spaces/tabs and rewrite the file if anything changed.

    Returns the number of lines changed. Running it again on the fixed
    content returns 0 and leaves the file untouched.
    """
    fixed = 0
    new_lines: list[str] = []

    for line in lines:
        trimmed = line.rstrip(_TRAILING_WS)
        if trimmed != line:
            fixed += 1
        new_lines.append(trimmed)

    if fixed:
        with open(path, "w", encoding="utf-8", errors="surrogateescape", newline="") as f:
            f.write("\n".join(new_lines))
        logger.info("Fixed trailing whitespace on %d line(s) in %s", fixed, path)

    return fixed

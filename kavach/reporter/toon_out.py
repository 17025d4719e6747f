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

"""TOON text output — the line-oriented report format.

A document is a sequence of sections::

    [SECTION_NAME]
    key: value
      - list item

Each section ends with a blank line. There is no nesting; consumers read
line by line. ``parse_toon`` is the matching reader for flat sections;
``split_sections`` keeps raw section bodies for lossless rewrites.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from kavach.models.lint import LintResult
from kavach.models.quality import QualityMetrics
from kavach.models.verification import Status, VerificationResult
from kavach.scanner.quality_scorer import summarize


@dataclass
class ToonSection:
    """One ``[NAME]`` block and its body lines, in insertion order."""

    name: str
    lines: list[str] = field(default_factory=list)

    def add(self, key: str, value: object) -> "ToonSection":
        self.lines.append(f"{key}: {value}")
        return self

    def add_item(self, text: str) -> "ToonSection":
        self.lines.append(f"  - {text}")
        return self

    def add_line(self, text: str) -> "ToonSection":
        self.lines.append(text)
        return self

    def render(self) -> str:
        return "\n".join([f"[{self.name}]", *self.lines]) + "\n"


def render_sections(sections: Iterable[ToonSection]) -> str:
    """Render sections, each followed by a blank line."""
    return "".join(section.render() + "\n" for section in sections)


def split_sections(text: str) -> dict[str, list[str]]:
    """Raw body lines of each ``[NAME]`` section, in file order.

    Blank lines and anything before the first section (the file header)
    are dropped. Indentation and list items are kept as written.
    """
    sections: dict[str, list[str]] = {}
    current: list[str] | None = None

    for raw in text.splitlines():
        line = raw.rstrip()
        stripped = line.strip()
        if not stripped:
            continue
        if stripped.startswith("[") and stripped.endswith("]"):
            current = sections.setdefault(stripped[1:-1], [])
            continue
        if current is not None:
            current.append(line)

    return sections


def field_name(line: str) -> str | None:
    """Key of a ``key: value`` body line; None for comments and list items."""
    stripped = line.strip()
    if stripped.startswith("#") or stripped.startswith("- "):
        return None
    key, sep, _ = stripped.partition(":")
    return key.strip() if sep and key.strip() else None


def parse_fields(lines: Iterable[str]) -> dict[str, str]:
    fields: dict[str, str] = {}
    for line in lines:
        key = field_name(line)
        if key is not None:
            fields[key] = line.strip().partition(":")[2].strip()
    return fields


def parse_toon(text: str) -> dict[str, dict[str, str]]:
    """Parse flat TOON sections into ``{section: {key: value}}``.

    Comment lines (``#``) and list items are skipped; keys outside any
    section are ignored.
    """
    return {name: parse_fields(lines) for name, lines in split_sections(text).items()}


# ── Report renderers ──


def render_lint_results(results: list[LintResult]) -> str:
    total = sum(len(r.issues) for r in results)
    sections = [ToonSection("LINT_RESULTS").add("files", len(results)).add("issues", total)]

    for r in results:
        if not r.issues:
            continue
        section = ToonSection(f"FILE:{r.file}")
        for issue in r.issues:
            section.add_line(f"  {issue.line}: [{issue.code}] {issue.message}")
        if r.fixed:
            section.add_line(f"  fixed: {r.fixed}")
        sections.append(section)

    return render_sections(sections)


def render_quality_results(results: list[QualityMetrics], *, verbose: bool = False) -> str:
    summary = ToonSection("QUALITY_SUMMARY")
    for key, value in summarize(results).items():
        summary.add(key, value)
    sections = [summary]

    if verbose:
        for r in results:
            section = ToonSection(f"FILE:{r.file}")
            section.add_line(f"  lines: {r.lines}")
            section.add_line(f"  functions: {r.functions}")
            section.add_line(f"  imports: {r.imports}")
            section.add_line(f"  dace_score: {r.dace_score}")
            section.add_line(f"  complexity: {r.complexity.value}")
            if not r.ast_valid:
                section.add_line(f"  ast_error: {r.ast_error}")
            sections.append(section)

    return render_sections(sections)


def _found_or_clean(flag: bool) -> str:
    return "FOUND" if flag else "CLEAN"


def _verified_or_not(flag: bool) -> str:
    return "VERIFIED" if flag else "UNVERIFIED"


def render_verification(result: VerificationResult, project: str, today: str) -> str:
    """Full Aegis report: header, both stages, exec errors, outcome."""
    sections = [
        ToonSection("AEGIS:VERIFICATION")
        .add("project", project)
        .add("date", today)
        .add("stage", result.stage.value)
        .add("status", result.status.value),
        ToonSection("TESTING_STAGE")
        .add("lint_issues", result.lint_issues)
        .add("warnings", result.warnings)
        .add("core_bugs", result.core_bugs),
        ToonSection("VERIFIED_STAGE")
        .add("dead_code", _found_or_clean(result.dead_code))
        .add("suppressed", _found_or_clean(result.suppressed))
        .add("algorithm", _verified_or_not(result.algorithm_ok)),
    ]

    if result.exec_errors:
        errors = ToonSection("EXEC_ERRORS").add("note", "Some verification commands failed")
        for err in result.exec_errors:
            errors.add_item(err)
        sections.append(errors)

    if result.status == Status.PASSED:
        sections.append(
            ToonSection("PROMISE")
            .add("status", "PRODUCTION_READY")
            .add("signal", "<promise>PRODUCTION_READY</promise>")
        )
    elif result.status == Status.INCONCLUSIVE:
        sections.append(
            ToonSection("AEGIS_INCONCLUSIVE")
            .add("action", "FIX_TOOLCHAIN")
            .add("result", "LOOP_CONTINUES")
        )
    else:
        failures = (
            ToonSection("AEGIS_FAILURES")
            .add("action", "REPORT_TO_CEO")
            .add("result", "LOOP_CONTINUES")
        )
        for reason in result.fail_reasons:
            failures.add_item(reason)
        sections.append(failures)

    return render_sections(sections)


def render_verify_header(project: str, today: str, task_id: str | None = None) -> str:
    header = ToonSection("VERIFY:PIPELINE").add("project", project).add("date", today)
    if task_id:
        header.add("task", task_id)
    return render_sections([header])


def render_verify_action(result: VerificationResult) -> str:
    action = ToonSection("ACTION")
    if result.passed:
        action.add("kanban", "Task can move to DONE")
        action.add("promise", "<promise>PRODUCTION_READY</promise>")
    else:
        action.add("kanban", "Task stays in current column")
        action.add("report", "CEO notified of failures")
        action.add("loop", "CONTINUES until verification passes")
    return render_sections([action])

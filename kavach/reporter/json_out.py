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

"""JSON output for the lint and quality commands.

Output is a flat array of small objects (summary counts, not the full
issue detail), one per file, in the order the files were analyzed.
"""

from __future__ import annotations

import json
from typing import Any

from kavach.models.lint import LintResult
from kavach.models.quality import QualityMetrics


def to_json(data: Any) -> str:
    """Serialize with 2-space indent, LF line endings and a trailing newline."""
    result = json.dumps(data, indent=2, ensure_ascii=False)
    result = result.replace("\r\n", "\n").replace("\r", "\n")
    if not result.endswith("\n"):
        result += "\n"
    return result


def lint_results_to_json(results: list[LintResult]) -> str:
    return to_json([{"file": r.file, "issues": len(r.issues)} for r in results])


def quality_results_to_json(results: list[QualityMetrics]) -> str:
    return to_json(
        [
            {
                "file": r.file,
                "lines": r.lines,
                "dace_score": r.dace_score,
                "ast_valid": r.ast_valid,
            }
            for r in results
        ]
    )

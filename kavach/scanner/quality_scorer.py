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

"""Per-file quality metrics: size, declarations, imports and DACE score.

Counting is heuristic (see ``kavach.scanner.languages``). Syntax validity
comes from the balance checkers for languages that have one; every other
language is assumed valid.
"""

from __future__ import annotations

import logging
from pathlib import Path

from kavach.models.quality import QualityMetrics
from kavach.scanner.languages import check_syntax, rules_for

logger = logging.getLogger(__name__)


def analyze_quality(path: Path | str) -> QualityMetrics:
    """Compute quality metrics for one file.

    An unreadable file produces zero counts with ``ast_valid`` False and
    the read error in ``ast_error``.
    """
    file_path = Path(path)

    try:
        with open(file_path, encoding="utf-8", errors="replace", newline="") as f:
            content = f.read()
    except OSError as e:
        logger.debug("Could not read %s: %s", file_path, e)
        return QualityMetrics(file=str(path), ast_valid=False, ast_error=str(e))

    rules = rules_for(file_path)
    if rules is None:
        return QualityMetrics(file=str(path), lines=len(content.split("\n")))

    ast_error = check_syntax(content, rules.language)

    return QualityMetrics(
        file=str(path),
        lines=len(content.split("\n")),
        functions=rules.count_declarations(content),
        imports=rules.count_imports(content),
        ast_valid=not ast_error,
        ast_error=ast_error,
    )


def summarize(results: list[QualityMetrics]) -> dict[str, int]:
    """Aggregate totals across files; the DACE average is an integer mean."""
    total_lines = sum(r.lines for r in results)
    total_functions = sum(r.functions for r in results)
    avg_dace = sum(r.dace_score for r in results) // len(results) if results else 0
    return {
        "files": len(results),
        "total_lines": total_lines,
        "total_functions": total_functions,
        "avg_dace_score": avg_dace,
    }

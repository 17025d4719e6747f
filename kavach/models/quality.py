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

"""Pydantic model for per-file quality metrics.

``dace_score`` and ``complexity`` are derived from the counted fields and
are exposed as computed fields, so they serialize with the model but can
never be assigned directly.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, computed_field

# DACE micro-modular thresholds
DACE_LINE_LIMIT = 100
DACE_FUNCTION_LIMIT = 10
MAX_LINE_DEDUCTION = 50
MAX_FUNCTION_DEDUCTION = 20
INVALID_SYNTAX_DEDUCTION = 30


class Complexity(str, Enum):
    """Coarse size/complexity tier of a file."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


def compute_dace_score(lines: int, functions: int, ast_valid: bool) -> int:
    """Score DACE compliance from 0 to 100.

    Deducts one point per 10 lines over the limit (max 50), two points
    per function over the limit (max 20), and 30 for a syntax defect.
    """
    score = 100

    if lines > DACE_LINE_LIMIT:
        score -= min(MAX_LINE_DEDUCTION, (lines - DACE_LINE_LIMIT) // 10)

    if functions > DACE_FUNCTION_LIMIT:
        score -= min(MAX_FUNCTION_DEDUCTION, (functions - DACE_FUNCTION_LIMIT) * 2)

    if not ast_valid:
        score -= INVALID_SYNTAX_DEDUCTION

    return max(score, 0)


def compute_complexity(lines: int, functions: int) -> Complexity:
    if lines <= 50 and functions <= 5:
        return Complexity.LOW
    if lines <= 100 and functions <= 10:
        return Complexity.MEDIUM
    return Complexity.HIGH


class QualityMetrics(BaseModel):
    """Size, structure and syntax metrics for a single file."""

    file: str
    lines: int = 0
    functions: int = 0
    imports: int = 0
    ast_valid: bool = True
    ast_error: str = ""

    @computed_field  # type: ignore[prop-decorator]
    @property
    def dace_score(self) -> int:
        return compute_dace_score(self.lines, self.functions, self.ast_valid)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def complexity(self) -> Complexity:
        return compute_complexity(self.lines, self.functions)

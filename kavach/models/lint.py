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

"""Pydantic models for per-file lint issues and results."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class LintIssue(BaseModel):
    """A single rule violation at a file position.

    ``column`` is 0 when the rule does not point at a column.
    """

    model_config = ConfigDict(frozen=True)

    line: int = Field(ge=0)
    column: int = Field(default=0, ge=0)
    code: str  # e.g., "W001", "E000"
    message: str


class LintResult(BaseModel):
    """All issues found in one file, in rule-application order."""

    file: str
    issues: list[LintIssue] = Field(default_factory=list)
    fixed: int = 0

    @property
    def codes(self) -> list[str]:
        return [issue.code for issue in self.issues]

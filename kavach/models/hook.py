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

"""Pydantic models for the orchestrator hook protocol (stdin payload, stdout decision)."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Decision(str, Enum):
    APPROVE = "approve"
    BLOCK = "block"


class HookInput(BaseModel):
    """JSON payload passed to a hook on stdin.

    PostToolUse payloads carry ``tool_response`` as an object; older
    callers send ``tool_result`` instead, as a string or an object.
    """

    model_config = ConfigDict(extra="ignore")

    tool_name: str = ""
    tool_input: dict[str, Any] = Field(default_factory=dict)
    tool_response: Any = None
    tool_result: Any = None
    prompt: str = ""

    @property
    def has_tool_response(self) -> bool:
        return bool(self.tool_response) or bool(self.tool_result)


class HookResponse(BaseModel):
    """The single decision a hook writes to stdout."""

    decision: Decision
    reason: str = ""
    additional_context: str = Field(default="", serialization_alias="additionalContext")

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_defaults=True)

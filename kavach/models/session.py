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

"""Pydantic model for the persisted session record shared with other hooks."""

from __future__ import annotations

import hashlib
from datetime import date

from pydantic import BaseModel, Field


def generate_session_id(work_dir: str, day: date) -> str:
    """Deterministic id from the work dir and the calendar day."""
    h = hashlib.sha256()
    h.update(work_dir.encode("utf-8"))
    h.update(day.strftime("%Y%m%d").encode("ascii"))
    return "sess_" + h.hexdigest()[:32]


class SessionState(BaseModel):
    """Session identity plus the Aegis flag.

    ``extra`` holds the raw body lines written by other tools, keyed by
    section (including unknown ``SESSION`` and ``STATE`` lines), so a
    read-modify-write round trip re-emits them unchanged.
    """

    id: str
    today: str
    project: str = ""
    workdir: str = ""
    aegis_verified: bool = False
    extra: dict[str, list[str]] = Field(default_factory=dict)

    @classmethod
    def new(cls, project: str, work_dir: str, day: date | None = None) -> "SessionState":
        day = day or date.today()
        return cls(
            id=generate_session_id(work_dir, day),
            today=day.isoformat(),
            project=project,
            workdir=work_dir,
        )

    def mark_aegis_verified(self) -> None:
        self.aegis_verified = True

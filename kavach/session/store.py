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

"""Session state persistence (``STM/session-state.toon``).

The state file is shared with other hook processes. Every
read-modify-write runs under an exclusive ``flock`` on a sidecar lock
file, and writes go to a temp file that is renamed into place.
"""

from __future__ import annotations

import fcntl
import logging
import os
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date
from pathlib import Path
from typing import Optional

from kavach.errors import SessionError
from kavach.models.session import SessionState
from kavach.reporter.toon_out import (
    ToonSection,
    field_name,
    parse_fields,
    render_sections,
    split_sections,
)

logger = logging.getLogger(__name__)

STATE_FILE_NAME = "session-state.toon"
_HEADER = "# Session State - SP/1.0\n# Auto-generated, do not edit\n\n"

_SESSION_KEYS = ("id", "today", "project", "workdir")


def _bool_str(value: bool) -> str:
    return "true" if value else "false"


class SessionStore:
    """Loads and saves the session record under ``<memory_dir>/STM``."""

    def __init__(self, memory_dir: Path) -> None:
        self.state_path = memory_dir / "STM" / STATE_FILE_NAME
        self.lock_path = self.state_path.with_name(STATE_FILE_NAME + ".lock")

    @contextmanager
    def locked(self) -> Iterator[None]:
        """Hold the exclusive session lock for the duration of the block."""
        try:
            self.lock_path.parent.mkdir(parents=True, exist_ok=True)
            lock_file = open(self.lock_path, "a+", encoding="utf-8")
        except OSError as e:
            raise SessionError(f"cannot open session lock {self.lock_path}: {e}") from e
        with lock_file:
            fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX)
            try:
                yield
            finally:
                fcntl.flock(lock_file.fileno(), fcntl.LOCK_UN)

    def load(self, today: Optional[date] = None) -> Optional[SessionState]:
        """Return today's session, or None when missing or from another day."""
        if not self.state_path.is_file():
            return None
        try:
            text = self.state_path.read_text(encoding="utf-8")
        except OSError as e:
            raise SessionError(f"cannot read {self.state_path}: {e}") from e

        sections = split_sections(text)
        session_lines = sections.pop("SESSION", [])
        state_lines = sections.pop("STATE", [])
        session_fields = parse_fields(session_lines)

        day = (today or date.today()).isoformat()
        if session_fields.get("today") != day:
            logger.debug("Ignoring stale session from %s", session_fields.get("today"))
            return None

        aegis = parse_fields(state_lines).get("aegis", "false") == "true"

        # Lines other tools wrote are carried through verbatim
        extra: dict[str, list[str]] = {}
        foreign_session = [line for line in session_lines if field_name(line) not in _SESSION_KEYS]
        foreign_state = [line for line in state_lines if field_name(line) != "aegis"]
        if foreign_session:
            extra["SESSION"] = foreign_session
        if foreign_state:
            extra["STATE"] = foreign_state
        extra.update(sections)

        return SessionState(
            id=session_fields.get("id", ""),
            today=session_fields["today"],
            project=session_fields.get("project", ""),
            workdir=session_fields.get("workdir", ""),
            aegis_verified=aegis,
            extra=extra,
        )

    def save(self, state: SessionState) -> None:
        session = ToonSection("SESSION")
        for key in _SESSION_KEYS:
            session.add(key, getattr(state, key))
        session.lines.extend(state.extra.get("SESSION", []))

        stored_state = ToonSection("STATE").add("aegis", _bool_str(state.aegis_verified))
        stored_state.lines.extend(state.extra.get("STATE", []))

        others = [
            ToonSection(name, list(lines))
            for name, lines in state.extra.items()
            if name not in ("SESSION", "STATE")
        ]
        content = _HEADER + render_sections([session, stored_state, *others])

        tmp_path = self.state_path.with_name(STATE_FILE_NAME + ".tmp")
        try:
            self.state_path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(content, encoding="utf-8")
            os.replace(tmp_path, self.state_path)
        except OSError as e:
            raise SessionError(f"cannot write {self.state_path}: {e}") from e

    def _load_or_new(self, project: str, work_dir: Path) -> SessionState:
        state = self.load()
        if state is None:
            return SessionState.new(project, str(work_dir))
        # The session may have been created from another directory
        state.project = project
        state.workdir = str(work_dir)
        return state

    def mark_aegis_verified(self, project: str, work_dir: Path) -> SessionState:
        """Set the Aegis flag. Idempotent; safe against concurrent writers."""
        with self.locked():
            state = self._load_or_new(project, work_dir)
            state.mark_aegis_verified()
            self.save(state)
        logger.info("Session %s marked Aegis-verified", state.id)
        return state

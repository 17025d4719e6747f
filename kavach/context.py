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

"""Explicit run context built once at the CLI boundary.

Holds everything a command needs (configuration, project identity, work
dir, session store) so no component reaches for global state. ``open``
wires the optional log file; ``close`` detaches it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Optional

from kavach.config import KavachConfig, load_config
from kavach.errors import SessionError
from kavach.models.verification import VerificationResult
from kavach.project import detect_project
from kavach.session.store import SessionStore
from kavach.verify.aegis import AegisVerifier
from kavach.verify.external_checks import CommandRunner, ExternalCheckRunner, run_command

logger = logging.getLogger(__name__)


@dataclass
class RunContext:
    config: KavachConfig
    work_dir: Path
    project: str
    session_store: SessionStore
    today: str = field(default_factory=lambda: date.today().isoformat())
    runner: CommandRunner = run_command
    _log_handler: Optional[logging.Handler] = field(default=None, repr=False)

    @classmethod
    def open(
        cls,
        *,
        config_path: Optional[Path] = None,
        work_dir: Optional[Path] = None,
    ) -> "RunContext":
        work_dir = (work_dir or Path.cwd()).resolve()
        config = load_config(config_path, work_dir)
        ctx = cls(
            config=config,
            work_dir=work_dir,
            project=detect_project(work_dir),
            session_store=SessionStore(config.memory_dir),
        )
        if config.log_file is not None:
            ctx._attach_log_file(config.log_file)
        return ctx

    def _attach_log_file(self, log_file: Path) -> None:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            handler = logging.FileHandler(log_file, encoding="utf-8")
        except OSError as e:
            logger.warning("Could not open log file %s: %s", log_file, e)
            return
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
        )
        logging.getLogger("kavach").addHandler(handler)
        self._log_handler = handler

    def close(self) -> None:
        if self._log_handler is not None:
            logging.getLogger("kavach").removeHandler(self._log_handler)
            self._log_handler.close()
            self._log_handler = None

    def build_verifier(self) -> AegisVerifier:
        """Aegis verifier for the work dir; marks the session on a pass."""
        checks = ExternalCheckRunner(
            self.work_dir,
            timeout=self.config.tool_timeout,
            bug_marker_pattern=self.config.bug_marker_pattern,
            suppression_pattern=self.config.suppression_pattern,
            runner=self.runner,
        )
        return AegisVerifier(
            checks,
            policy=self.config.exec_error_policy,
            on_pass=self._mark_session,
        )

    def _mark_session(self, result: VerificationResult) -> None:
        try:
            self.session_store.mark_aegis_verified(self.project, self.work_dir)
        except SessionError as e:
            logger.error("Could not record Aegis verification: %s", e)

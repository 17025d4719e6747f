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

"""Project identity detection for reports and the session record.

Priority:
1. ``$KAVACH_PROJECT``
2. Nearest ``.claude/project.json`` (``name`` or ``project`` key) or
   ``.claude-project`` marker (file content)
3. Nearest directory containing ``.git``
4. The work dir's own name
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

GLOBAL_PROJECT = "global"


def _read_project_json(path: Path) -> Optional[str]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.debug("Could not read %s: %s", path, e)
        return None
    if isinstance(data, dict):
        for key in ("name", "project"):
            value = data.get(key)
            if isinstance(value, str) and value:
                return value
    return None


def _detect_marker(work_dir: Path) -> Optional[str]:
    for directory in (work_dir, *work_dir.parents):
        project_json = directory / ".claude" / "project.json"
        if project_json.is_file():
            return _read_project_json(project_json) or directory.name

        marker = directory / ".claude-project"
        if marker.is_file():
            try:
                name = marker.read_text(encoding="utf-8").strip()
            except OSError:
                name = ""
            return name or directory.name
    return None


def _detect_git(work_dir: Path) -> Optional[str]:
    for directory in (work_dir, *work_dir.parents):
        if (directory / ".git").exists():
            return directory.name
    return None


def detect_project(work_dir: Optional[Path] = None) -> str:
    env_project = os.environ.get("KAVACH_PROJECT")
    if env_project:
        return env_project

    work_dir = (work_dir or Path.cwd()).resolve()
    return (
        _detect_marker(work_dir)
        or _detect_git(work_dir)
        or work_dir.name
        or GLOBAL_PROJECT
    )

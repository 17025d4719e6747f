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

"""File walker — expands CLI path arguments into the files to analyze.

Explicit file arguments are always kept. Directories are walked
recursively (sorted), skipping VCS, cache and vendor directories plus any
patterns listed in a ``.kavachignore`` at the directory root, and keeping
only files with a matching extension.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_IGNORE_PATTERNS = {
    "__pycache__",
    ".git",
    ".hg",
    ".svn",
    "node_modules",
    "vendor",
    "target",
    ".venv",
    "venv",
    ".tox",
    ".mypy_cache",
    ".pytest_cache",
    ".ruff_cache",
    "dist",
    "build",
    "*.egg-info",
    "*.min.js",
}

IGNORE_FILE_NAME = ".kavachignore"


def _load_ignore_patterns(target_dir: Path) -> set[str]:
    """Default patterns plus those from ``.kavachignore``."""
    ignore_file = target_dir / IGNORE_FILE_NAME
    patterns = set(DEFAULT_IGNORE_PATTERNS)

    if ignore_file.is_file():
        try:
            content = ignore_file.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Could not read %s, using default ignores: %s", ignore_file, e)
            return patterns
        for line in content.splitlines():
            line = line.strip()
            if line and not line.startswith("#"):
                patterns.add(line)

    return patterns


def _should_ignore(rel_path: Path, ignore_patterns: set[str]) -> bool:
    for pattern in ignore_patterns:
        if pattern.startswith("*"):
            suffix = pattern.lstrip("*")
            if any(part.endswith(suffix) for part in rel_path.parts):
                return True
        elif pattern in rel_path.parts:
            return True
    return False


def walk_directory(target_dir: Path, extensions: frozenset[str]) -> list[Path]:
    """All non-ignored files under ``target_dir`` with a wanted extension."""
    ignore_patterns = _load_ignore_patterns(target_dir)
    files = []

    for item in sorted(target_dir.rglob("*")):
        if not item.is_file() or item.suffix.lower() not in extensions:
            continue
        if _should_ignore(item.relative_to(target_dir), ignore_patterns):
            continue
        files.append(item)

    return files


def collect_files(
    paths: Iterable[str | Path],
    extensions: frozenset[str],
) -> tuple[list[tuple[Path, bool]], list[str]]:
    """Expand path arguments.

    Returns:
        (files, missing) where ``files`` holds ``(path, from_directory)``
        pairs in argument order and ``missing`` the arguments that do not
        exist.
    """
    files: list[tuple[Path, bool]] = []
    missing: list[str] = []

    for raw in paths:
        path = Path(raw)
        if path.is_dir():
            found = walk_directory(path, extensions)
            logger.debug("Found %d file(s) under %s", len(found), path)
            files.extend((f, True) for f in found)
        elif path.exists():
            files.append((path, False))
        else:
            missing.append(str(raw))

    return files, missing

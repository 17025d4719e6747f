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

"""Kavach configuration — thresholds, tool timeouts and storage paths.

Loaded from the first YAML file found, in priority order:
1. An explicit path (``--config``)
2. ``$KAVACH_CONFIG``
3. ``<workdir>/.kavach.yaml``
4. ``~/.kavach/config.yaml``

A missing or unreadable file yields the defaults. ``KAVACH_TOOL_TIMEOUT``
and ``KAVACH_EXEC_POLICY`` override the corresponding keys.
"""

from __future__ import annotations

import logging
import os
from enum import Enum
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".kavach"
CONFIG_FILE = CONFIG_DIR / "config.yaml"
PROJECT_CONFIG_NAME = ".kavach.yaml"

DEFAULT_MEMORY_DIR = Path.home() / ".local" / "shared" / "shared-ai" / "memory"


class ExecErrorPolicy(str, Enum):
    """How verification treats external tools that could not run.

    LENIENT: a tool that cannot run counts as "no issues found".
    STRICT: a clean run with exec errors ends INCONCLUSIVE instead of PASSED.
    """

    LENIENT = "lenient"
    STRICT = "strict"


def _default_memory_dir() -> Path:
    env_dir = os.environ.get("KAVACH_MEMORY_DIR")
    return Path(env_dir).expanduser() if env_dir else DEFAULT_MEMORY_DIR


class KavachConfig(BaseModel):
    """Tunable settings for lint, quality and the Aegis gate."""

    max_line_length: int = Field(default=120, gt=0)
    max_file_lines: int = Field(default=100, gt=0)
    tool_timeout: float = Field(default=120.0, gt=0)
    exec_error_policy: ExecErrorPolicy = ExecErrorPolicy.LENIENT
    bug_marker_pattern: str = "TODO|FIXME|BUG|XXX"
    suppression_pattern: str = r"@Suppress|#pragma|nolint|#\[allow"
    memory_dir: Path = Field(default_factory=_default_memory_dir)
    log_file: Optional[Path] = None


def _candidate_paths(explicit: Optional[Path], workdir: Path) -> list[Path]:
    candidates: list[Path] = []
    if explicit is not None:
        candidates.append(explicit)
    env_path = os.environ.get("KAVACH_CONFIG")
    if env_path:
        candidates.append(Path(env_path).expanduser())
    candidates.append(workdir / PROJECT_CONFIG_NAME)
    candidates.append(CONFIG_FILE)
    return candidates


def _apply_env_overrides(data: dict) -> dict:
    timeout = os.environ.get("KAVACH_TOOL_TIMEOUT")
    if timeout:
        data["tool_timeout"] = timeout
    policy = os.environ.get("KAVACH_EXEC_POLICY")
    if policy:
        data["exec_error_policy"] = policy.lower()
    return data


def load_config(path: Optional[Path] = None, workdir: Optional[Path] = None) -> KavachConfig:
    """Load configuration, falling back to defaults on any problem."""
    workdir = workdir or Path.cwd()
    data: dict = {}

    for candidate in _candidate_paths(path, workdir):
        if not candidate.is_file():
            continue
        try:
            with open(candidate, encoding="utf-8") as f:
                loaded = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning("Could not load config from %s: %s", candidate, e)
            continue
        if not isinstance(loaded, dict):
            logger.warning("Ignoring config %s: top level must be a mapping", candidate)
            continue
        logger.debug("Loaded config from %s", candidate)
        data = loaded
        break

    data = _apply_env_overrides(data)

    try:
        return KavachConfig(**data)
    except ValidationError as e:
        logger.warning("Invalid configuration, using defaults: %s", e)
        return KavachConfig()


def save_config(config: KavachConfig, path: Path = CONFIG_FILE) -> Path:
    """Write configuration as YAML. Returns the path written."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(config.model_dump(mode="json"), f, default_flow_style=False, sort_keys=False)
    return path

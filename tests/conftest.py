"""Shared fixtures: isolated config/session paths and a fake command runner."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

import pytest

from kavach.config import KavachConfig
from kavach.context import RunContext
from kavach.session.store import SessionStore
from kavach.verify.external_checks import CommandOutput, ToolExecError


class FakeRunner:
    """Stands in for ``run_command``.

    ``responses`` maps a command prefix (space-joined) to the output to
    return or an exception to raise; the longest matching prefix wins.
    Unmatched commands succeed with no output.
    """

    def __init__(
        self,
        responses: Optional[dict[str, Union[CommandOutput, Exception]]] = None,
    ) -> None:
        self.responses = responses or {}
        self.calls: list[list[str]] = []

    def __call__(self, cmd: list[str], cwd: Path, timeout: float) -> CommandOutput:
        self.calls.append(list(cmd))
        joined = " ".join(cmd)
        matches = [key for key in self.responses if joined.startswith(key)]
        if not matches:
            return CommandOutput(output="", returncode=0)
        response = self.responses[max(matches, key=len)]
        if isinstance(response, Exception):
            raise response
        return response

    def ran(self, prefix: str) -> bool:
        return any(" ".join(call).startswith(prefix) for call in self.calls)


NO_MATCHES = CommandOutput(output="", returncode=1)


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep tests away from the real home config and memory bank."""
    monkeypatch.setattr("kavach.config.CONFIG_FILE", tmp_path / "home-config.yaml")
    monkeypatch.setenv("KAVACH_MEMORY_DIR", str(tmp_path / "memory"))
    for var in ("KAVACH_CONFIG", "KAVACH_PROJECT", "KAVACH_TOOL_TIMEOUT", "KAVACH_EXEC_POLICY"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def clean_rg() -> FakeRunner:
    """ripgrep finds nothing; no toolchain commands are expected."""
    return FakeRunner({"rg -c": NO_MATCHES, "rg -l": NO_MATCHES})


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    work = tmp_path / "project"
    work.mkdir()
    return work


def make_context(work_dir: Path, memory_dir: Path, runner: FakeRunner, **config) -> RunContext:
    return RunContext(
        config=KavachConfig(memory_dir=memory_dir, **config),
        work_dir=work_dir,
        project="demo",
        session_store=SessionStore(memory_dir),
        today="2026-10-19",
        runner=runner,
    )


__all__ = ["FakeRunner", "NO_MATCHES", "ToolExecError", "make_context"]

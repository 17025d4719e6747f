"""Tests for the session-state file and its locking read-modify-write."""

from datetime import date, timedelta

import pytest

from kavach.errors import SessionError
from kavach.models.session import SessionState, generate_session_id
from kavach.reporter.toon_out import parse_toon
from kavach.session.store import SessionStore


@pytest.fixture
def store(tmp_path):
    return SessionStore(tmp_path / "memory")


class TestSessionId:
    def test_deterministic_per_dir_and_day(self):
        day = date(2026, 10, 19)
        first = generate_session_id("/work/a", day)
        assert first == generate_session_id("/work/a", day)
        assert first != generate_session_id("/work/b", day)
        assert first != generate_session_id("/work/a", day + timedelta(days=1))
        assert first.startswith("sess_")
        assert len(first) == len("sess_") + 32


class TestSessionStore:
    def test_load_missing(self, store):
        assert store.load() is None

    def test_mark_creates_session(self, store, tmp_path):
        state = store.mark_aegis_verified("demo", tmp_path)

        loaded = store.load()
        assert loaded is not None
        assert loaded.aegis_verified
        assert loaded.id == state.id == generate_session_id(str(tmp_path), date.today())
        assert loaded.project == "demo"

    def test_mark_is_idempotent(self, store, tmp_path):
        store.mark_aegis_verified("demo", tmp_path)
        first = store.state_path.read_text(encoding="utf-8")
        store.mark_aegis_verified("demo", tmp_path)
        assert store.state_path.read_text(encoding="utf-8") == first

    def test_file_format(self, store, tmp_path):
        store.mark_aegis_verified("demo", tmp_path)
        text = store.state_path.read_text(encoding="utf-8")

        assert text.startswith("# Session State - SP/1.0\n# Auto-generated, do not edit\n\n[SESSION]\n")
        sections = parse_toon(text)
        assert sections["STATE"] == {"aegis": "true"}
        assert sections["SESSION"]["today"] == date.today().isoformat()
        assert not store.state_path.with_name("session-state.toon.tmp").exists()

    def test_stale_session_ignored(self, store, tmp_path):
        yesterday = date.today() - timedelta(days=1)
        store.save(SessionState.new("demo", str(tmp_path), day=yesterday))
        assert store.load() is None

    def test_stale_session_replaced_on_mark(self, store, tmp_path):
        yesterday = date.today() - timedelta(days=1)
        old = SessionState.new("demo", str(tmp_path), day=yesterday)
        store.save(old)

        state = store.mark_aegis_verified("demo", tmp_path)

        assert state.id != old.id
        assert state.today == date.today().isoformat()

    def test_preserves_foreign_sections_and_keys(self, store, tmp_path):
        store.state_path.parent.mkdir(parents=True)
        today = date.today().isoformat()
        store.state_path.write_text(
            f"[SESSION]\nid: sess_abc\ntoday: {today}\nproject: old\nworkdir: /old\ncutoff: 2025-01\n\n"
            "[STATE]\naegis: false\nphase: build\n\n"
            "[TASK]\nid: T-12\nfiles[]:\n  - a.go\n  - b.go\n\n",
            encoding="utf-8",
        )

        store.mark_aegis_verified("demo", tmp_path)

        text = store.state_path.read_text(encoding="utf-8")
        sections = parse_toon(text)
        assert sections["SESSION"]["id"] == "sess_abc"
        assert sections["SESSION"]["project"] == "demo"
        assert sections["SESSION"]["workdir"] == str(tmp_path)
        assert sections["SESSION"]["cutoff"] == "2025-01"
        assert sections["STATE"] == {"aegis": "true", "phase": "build"}
        assert "[TASK]\nid: T-12\nfiles[]:\n  - a.go\n  - b.go\n" in text

    def test_foreign_lines_survive_repeated_writes(self, store, tmp_path):
        store.state_path.parent.mkdir(parents=True)
        today = date.today().isoformat()
        store.state_path.write_text(
            f"[SESSION]\nid: sess_abc\ntoday: {today}\n\n[NOTES]\n# keep me\n  - one\n\n",
            encoding="utf-8",
        )

        store.mark_aegis_verified("demo", tmp_path)
        first = store.state_path.read_text(encoding="utf-8")
        store.mark_aegis_verified("demo", tmp_path)

        assert store.state_path.read_text(encoding="utf-8") == first
        assert "[NOTES]\n# keep me\n  - one\n" in first

    def test_lock_failure_raises_session_error(self, tmp_path):
        blocker = tmp_path / "memory"
        blocker.write_text("not a directory", encoding="utf-8")
        store = SessionStore(blocker)
        with pytest.raises(SessionError):
            store.mark_aegis_verified("demo", tmp_path)

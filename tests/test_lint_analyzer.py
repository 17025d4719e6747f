"""Tests for the per-file lint rules and trailing-whitespace auto-fix."""

from pathlib import Path

from kavach.config import KavachConfig
from kavach.scanner.lint_analyzer import analyze_file, autofix


def _write(tmp_path: Path, name: str, content: str) -> Path:
    path = tmp_path / name
    path.write_text(content, encoding="utf-8")
    return path


class TestRules:
    """Each rule in isolation."""

    def test_clean_file(self, tmp_path):
        path = _write(tmp_path, "main.go", "package main\n\nfunc main() {\n}\n")
        result = analyze_file(path)
        assert result.issues == []
        assert result.file == str(path)

    def test_trailing_whitespace(self, tmp_path):
        path = _write(tmp_path, "notes.md", "ok\nspace \ntab\t\n")
        result = analyze_file(path)
        assert [(i.code, i.line) for i in result.issues] == [("W001", 2), ("W001", 3)]
        assert result.issues[0].message == "trailing whitespace"

    def test_line_length(self, tmp_path):
        path = _write(tmp_path, "notes.md", "x" * 120 + "\n" + "y" * 130 + "\n")
        result = analyze_file(path)
        assert len(result.issues) == 1
        issue = result.issues[0]
        assert (issue.code, issue.line, issue.column) == ("W002", 2, 121)
        assert "130 > 120" in issue.message

    def test_configurable_line_length(self, tmp_path):
        path = _write(tmp_path, "notes.md", "x" * 90 + "\n")
        result = analyze_file(path, config=KavachConfig(max_line_length=80))
        assert result.codes == ["W002"]
        assert result.issues[0].column == 81

    def test_go_space_indentation(self, tmp_path):
        path = _write(tmp_path, "main.go", "package main\n\nfunc main() {\n    x := 1\n\ty := 2\n}\n")
        result = analyze_file(path)
        assert [(i.code, i.line) for i in result.issues] == [("W003", 4)]
        assert "tabs" in result.issues[0].message

    def test_space_indentation_fine_outside_go(self, tmp_path):
        path = _write(tmp_path, "tool.py", "def f():\n    return 1\n")
        assert analyze_file(path).issues == []

    def test_go_syntax_error(self, tmp_path):
        path = _write(tmp_path, "main.go", "package main\n\nfunc main() {\n")
        result = analyze_file(path)
        assert result.codes == ["E001"]
        assert result.issues[0].line == 1
        assert result.issues[0].message == "Go syntax error: unbalanced braces"

    def test_json_syntax_error(self, tmp_path):
        path = _write(tmp_path, "data.json", '"hello"')
        result = analyze_file(path)
        assert result.codes == ["E002"]
        assert result.issues[0].message == "JSON syntax error: must start with { or ["

    def test_file_size(self, tmp_path):
        path = _write(tmp_path, "notes.md", "\n".join(["line"] * 101))
        result = analyze_file(path)
        assert result.codes == ["D001"]
        assert result.issues[0].line == 1
        assert "(101 lines)" in result.issues[0].message

    def test_exactly_at_size_limit(self, tmp_path):
        path = _write(tmp_path, "notes.md", "\n".join(["line"] * 100))
        assert analyze_file(path).issues == []

    def test_trailing_newline_counts_as_segment(self, tmp_path):
        path = _write(tmp_path, "notes.md", "\n".join(["line"] * 100) + "\n")
        assert analyze_file(path).codes == ["D001"]

    def test_unreadable_file(self, tmp_path):
        result = analyze_file(tmp_path / "missing.go")
        assert len(result.issues) == 1
        issue = result.issues[0]
        assert (issue.code, issue.line) == ("E000", 0)
        assert issue.message.startswith("cannot read file:")

    def test_non_utf8_file_is_linted(self, tmp_path):
        path = tmp_path / "latin1.go"
        path.write_bytes(b"package main\n// caf\xe9\nfunc main() {\n")
        result = analyze_file(path)
        assert result.codes == ["E001"]

    def test_fix_keeps_undecodable_bytes(self, tmp_path):
        path = tmp_path / "latin1.md"
        path.write_bytes(b"caf\xe9 \nx")
        result = analyze_file(path, fix=True)
        assert result.codes == ["W001"]
        assert result.fixed == 1
        assert path.read_bytes() == b"caf\xe9\nx"


class TestRuleOrder:
    def test_large_go_file_scenario(self, tmp_path):
        """150 lines, trailing space on line 3, one unclosed brace."""
        lines = ["package main", "", "func main() { "] + ["// filler"] * 147
        path = _write(tmp_path, "big.go", "\n".join(lines))

        result = analyze_file(path)

        assert [(i.code, i.line) for i in result.issues] == [
            ("W001", 3),
            ("E001", 1),
            ("D001", 1),
        ]

    def test_all_rules_in_order(self, tmp_path):
        lines = ["package main ", "    " + "x" * 130] + ["{"] + ["//"] * 100
        path = _write(tmp_path, "all.go", "\n".join(lines))
        assert analyze_file(path).codes == ["W001", "W002", "W003", "E001", "D001"]


class TestAutofix:
    def test_fix_strips_trailing_whitespace_only(self, tmp_path):
        path = _write(tmp_path, "main.go", "package main \n\nfunc main() {\t\n    x := 1  \n")
        result = analyze_file(path, fix=True)

        assert result.fixed == 3
        assert path.read_text(encoding="utf-8") == "package main\n\nfunc main() {\n    x := 1\n"
        # Other rule violations remain
        assert analyze_file(path).codes == ["W003", "E001"]

    def test_no_fix_without_flag(self, tmp_path):
        path = _write(tmp_path, "notes.md", "a \n")
        result = analyze_file(path)
        assert result.fixed == 0
        assert path.read_text(encoding="utf-8") == "a \n"

    def test_idempotent(self, tmp_path):
        path = _write(tmp_path, "notes.md", "a  \nb\t\nc")
        first = analyze_file(path, fix=True)
        content_after_first = path.read_text(encoding="utf-8")

        second = analyze_file(path, fix=True)

        assert first.fixed == 2
        assert second.fixed == 0
        assert path.read_text(encoding="utf-8") == content_after_first == "a\nb\nc"

    def test_autofix_direct_second_run_returns_zero(self, tmp_path):
        path = _write(tmp_path, "notes.md", "x \ny")
        assert autofix(path, path.read_text(encoding="utf-8").split("\n")) == 1
        mtime = path.stat().st_mtime_ns
        assert autofix(path, path.read_text(encoding="utf-8").split("\n")) == 0
        assert path.stat().st_mtime_ns == mtime

    def test_fix_with_only_size_issue_changes_nothing(self, tmp_path):
        content = "\n".join(["line"] * 120)
        path = _write(tmp_path, "notes.md", content)
        result = analyze_file(path, fix=True)
        assert result.fixed == 0
        assert result.codes == ["D001"]
        assert path.read_text(encoding="utf-8") == content

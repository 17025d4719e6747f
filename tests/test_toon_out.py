"""Tests for TOON and JSON report rendering."""

import json

from kavach.models.lint import LintIssue, LintResult
from kavach.models.quality import QualityMetrics
from kavach.models.verification import Stage, Status, VerificationResult
from kavach.reporter.json_out import lint_results_to_json, quality_results_to_json, to_json
from kavach.reporter.toon_out import (
    ToonSection,
    parse_toon,
    render_lint_results,
    render_quality_results,
    render_sections,
    render_verification,
    render_verify_action,
    render_verify_header,
    split_sections,
)

PASSED = VerificationResult(stage=Stage.VERIFIED, status=Status.PASSED, algorithm_ok=True)
FAILED = VerificationResult(
    stage=Stage.TESTING,
    status=Status.FAILED,
    core_bugs=2,
    fail_reasons=("core_bugs:2",),
)


class TestSections:
    def test_render(self):
        text = render_sections([ToonSection("A").add("k", 1).add_item("x"), ToonSection("B")])
        assert text == "[A]\nk: 1\n  - x\n\n[B]\n\n"

    def test_parse_skips_comments_and_items(self):
        text = "# header\nstray: 1\n[A]\nk: v:w\n  - item\n\n[B]\nempty:\n"
        assert parse_toon(text) == {"A": {"k": "v:w"}, "B": {"empty": ""}}

    def test_split_sections_keeps_raw_body(self):
        text = "# header\n[TASK]\nid: T-1\nfiles[]:\n  - a.go\n\n[B]\n"
        assert split_sections(text) == {"TASK": ["id: T-1", "files[]:", "  - a.go"], "B": []}


class TestLintReport:
    def test_lists_only_files_with_issues(self):
        results = [
            LintResult(
                file="a.go",
                issues=[LintIssue(line=3, code="W001", message="trailing whitespace")],
                fixed=1,
            ),
            LintResult(file="b.go"),
        ]
        assert render_lint_results(results) == (
            "[LINT_RESULTS]\nfiles: 2\nissues: 1\n\n"
            "[FILE:a.go]\n  3: [W001] trailing whitespace\n  fixed: 1\n\n"
        )

    def test_json(self):
        results = [LintResult(file="a.go", issues=[LintIssue(line=1, code="D001", message="m")])]
        assert json.loads(lint_results_to_json(results)) == [{"file": "a.go", "issues": 1}]


class TestQualityReport:
    def test_summary_only_by_default(self):
        text = render_quality_results([QualityMetrics(file="a.py", lines=10, functions=2)])
        assert parse_toon(text) == {
            "QUALITY_SUMMARY": {
                "files": "1",
                "total_lines": "10",
                "total_functions": "2",
                "avg_dace_score": "100",
            }
        }

    def test_verbose_shows_files(self):
        metrics = QualityMetrics(file="a.go", lines=5, ast_valid=False, ast_error="unbalanced braces")
        sections = parse_toon(render_quality_results([metrics], verbose=True))
        assert sections["FILE:a.go"]["dace_score"] == "70"
        assert sections["FILE:a.go"]["complexity"] == "low"
        assert sections["FILE:a.go"]["ast_error"] == "unbalanced braces"

    def test_json(self):
        out = quality_results_to_json([QualityMetrics(file="a.go", lines=250)])
        assert json.loads(out) == [{"file": "a.go", "lines": 250, "dace_score": 85, "ast_valid": True}]


class TestVerificationReport:
    def test_passed(self):
        sections = parse_toon(render_verification(PASSED, "demo", "2026-10-19"))
        assert sections["AEGIS:VERIFICATION"] == {
            "project": "demo",
            "date": "2026-10-19",
            "stage": "VERIFIED",
            "status": "passed",
        }
        assert sections["VERIFIED_STAGE"] == {
            "dead_code": "CLEAN",
            "suppressed": "CLEAN",
            "algorithm": "VERIFIED",
        }
        assert sections["PROMISE"]["status"] == "PRODUCTION_READY"
        assert "AEGIS_FAILURES" not in sections

    def test_failed_lists_reasons(self):
        text = render_verification(FAILED, "demo", "2026-10-19")
        assert "[AEGIS_FAILURES]\naction: REPORT_TO_CEO\nresult: LOOP_CONTINUES\n  - core_bugs:2\n" in text
        assert "algorithm: UNVERIFIED" in text
        assert "[PROMISE]" not in text

    def test_exec_errors_listed(self):
        result = VerificationResult(
            stage=Stage.VERIFIED,
            status=Status.INCONCLUSIVE,
            algorithm_ok=True,
            exec_errors=("rg (ripgrep) not found",),
        )
        text = render_verification(result, "demo", "2026-10-19")
        assert "[EXEC_ERRORS]\nnote: Some verification commands failed\n  - rg (ripgrep) not found\n" in text
        assert "[AEGIS_INCONCLUSIVE]" in text

    def test_verify_header_and_action(self):
        assert render_verify_header("demo", "2026-10-19", "T-7") == (
            "[VERIFY:PIPELINE]\nproject: demo\ndate: 2026-10-19\ntask: T-7\n\n"
        )
        assert "Task can move to DONE" in render_verify_action(PASSED)
        assert "CONTINUES until verification passes" in render_verify_action(FAILED)


class TestToJson:
    def test_trailing_newline_and_indent(self):
        assert to_json({"a": [1]}) == '{\n  "a": [\n    1\n  ]\n}\n'

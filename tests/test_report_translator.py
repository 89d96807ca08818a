"""
Unit Tests — Report Translator
==============================
Tests using synthetic project fixtures and hand-written report.json files.
Validates message composition, severity, record-level and trace-level
failure isolation, and report-level parse errors.
"""
import json
import textwrap

import pytest

from infer_bridge.core.errors import PositionResolutionError, ReportParseError
from infer_bridge.models.diagnostic import DiagnosticSeverity
from infer_bridge.services.position_resolver import SourcePositionFinder
from infer_bridge.services.report_translator import load_report, translate_report


# ===================================================================
# Fixtures
# ===================================================================
@pytest.fixture
def project(tmp_path):
    """A tiny Java project with two source files."""
    src = tmp_path / "src"
    src.mkdir()
    (src / "A.java").write_text(textwrap.dedent("""\
        public class A {
            void run() {
                Object o = null;
                o.toString();
            }
            int x = 1;
            int y = 2;
            int z = 3;
            int w = 4;
            String s = o.toString();
        }
    """), encoding="utf-8")
    (src / "B.java").write_text(textwrap.dedent("""\
        public class B {
            static Object make() {
                return null;
            }
        }
    """), encoding="utf-8")
    return tmp_path


def _write_report(project, entries) -> str:
    out = project / "infer-out"
    out.mkdir(exist_ok=True)
    report = out / "report.json"
    report.write_text(json.dumps(entries), encoding="utf-8")
    return str(report)


def _bug(file="src/A.java", line=4, bug_type="NULL_DEREFERENCE",
         qualifier="object `o` last assigned on line 3 could be null", trace=None):
    return {
        "bug_type": bug_type,
        "qualifier": qualifier,
        "file": file,
        "line": line,
        "bug_trace": trace or [],
    }


def _step(filename, line_number, description):
    return {"filename": filename, "line_number": line_number, "description": description}


resolve = SourcePositionFinder().resolve


# ===================================================================
# Translation
# ===================================================================
class TestTranslateReport:

    def test_single_record_example(self, project):
        (project / "src" / "A.java").write_text("\n" * 9 + "    o.toString();\n")
        report = _write_report(project, [{
            "bug_type": "NULL_DEREFERENCE",
            "qualifier": "object may be null",
            "file": "src/A.java",
            "line": 10,
            "bug_trace": [],
        }])

        findings = translate_report(report, str(project), resolve, include_trace=False)

        assert len(findings) == 1
        finding = findings[0]
        assert finding.severity == DiagnosticSeverity.ERROR
        assert finding.message == "NULL_DEREFERENCE: object may be null"
        assert finding.trace == []
        assert finding.position.line == 10
        assert finding.source == "infer"

    def test_n_records_yield_n_findings(self, project):
        entries = [
            _bug(line=4, bug_type="NULL_DEREFERENCE", qualifier="q1"),
            _bug(line=10, bug_type="NULL_DEREFERENCE", qualifier="q2"),
            _bug(file="src/B.java", line=3, bug_type="RESOURCE_LEAK", qualifier="q3"),
        ]
        findings = translate_report(_write_report(project, entries), str(project), resolve)

        assert len(findings) == 3
        assert [f.message for f in findings] == [
            "NULL_DEREFERENCE: q1", "NULL_DEREFERENCE: q2", "RESOURCE_LEAK: q3",
        ]
        assert all(f.severity == DiagnosticSeverity.ERROR for f in findings)

    def test_position_resolved_against_project_root(self, project):
        findings = translate_report(_write_report(project, [_bug(line=4)]), str(project), resolve)
        position = findings[0].position
        assert position.file == str(project / "src" / "A.java")
        assert position.column == 8
        assert position.end_column == 8 + len("o.toString();")

    def test_empty_report(self, project):
        assert translate_report(_write_report(project, []), str(project), resolve) == []

    def test_extra_fields_ignored(self, project):
        entry = _bug()
        entry.update({"hash": "abc", "severity": "ERROR", "procedure": "A.run()"})
        assert len(translate_report(_write_report(project, [entry]), str(project), resolve)) == 1

    def test_missing_bug_trace_treated_as_empty(self, project):
        entry = _bug()
        del entry["bug_trace"]
        findings = translate_report(_write_report(project, [entry]), str(project), resolve, True)
        assert findings[0].trace == []


# ===================================================================
# Record-level isolation
# ===================================================================
class TestRecordIsolation:

    def test_missing_primary_file_dropped(self, project):
        entries = [_bug(qualifier="kept-1"), _bug(file="src/Gone.java", qualifier="dropped"),
                   _bug(line=10, qualifier="kept-2")]
        findings = translate_report(_write_report(project, entries), str(project), resolve)
        assert [f.message for f in findings] == [
            "NULL_DEREFERENCE: kept-1", "NULL_DEREFERENCE: kept-2",
        ]

    def test_line_out_of_range_dropped(self, project):
        entries = [_bug(line=999), _bug(line=4)]
        findings = translate_report(_write_report(project, entries), str(project), resolve)
        assert len(findings) == 1
        assert findings[0].position.line == 4

    def test_custom_resolver_errors_isolated(self, project):
        calls = []

        def flaky(file, line):
            calls.append(line)
            if line == 4:
                raise ValueError("boom")
            return resolve(file, line)

        entries = [_bug(line=4), _bug(line=10)]
        findings = translate_report(_write_report(project, entries), str(project), flaky)
        assert calls == [4, 10]
        assert len(findings) == 1


# ===================================================================
# Trace expansion
# ===================================================================
class TestTraceExpansion:

    def test_trace_disabled_ignores_steps(self, project):
        entry = _bug(trace=[_step("src/A.java", 3, "assigned null")])
        findings = translate_report(_write_report(project, [entry]), str(project), resolve, False)
        assert findings[0].trace == []

    def test_missing_trace_file_skipped_order_kept(self, project):
        entry = _bug(trace=[
            _step("src/A.java", 3, "assigned null"),
            _step("src/Missing.java", 7, "call into missing file"),
            _step("src/B.java", 3, "returns null"),
            _step("src/A.java", 4, "dereferenced"),
        ])
        findings = translate_report(_write_report(project, [entry]), str(project), resolve, True)

        trace = findings[0].trace
        assert [t.description for t in trace] == ["assigned null", "returns null", "dereferenced"]
        assert [t.position.line for t in trace] == [3, 3, 4]
        assert trace[1].position.file == str(project / "src" / "B.java")

    def test_unresolvable_trace_line_skipped(self, project):
        entry = _bug(trace=[_step("src/B.java", 500, "bad line"), _step("src/B.java", 3, "ok")])
        findings = translate_report(_write_report(project, [entry]), str(project), resolve, True)
        assert [t.description for t in findings[0].trace] == ["ok"]

    def test_trace_step_without_file_does_not_drop_record(self, project):
        entry = _bug(trace=[_step("gen/Generated.java", 1, "generated code")])
        findings = translate_report(_write_report(project, [entry]), str(project), resolve, True)
        assert len(findings) == 1
        assert findings[0].trace == []


# ===================================================================
# Report-level parse errors
# ===================================================================
class TestParseErrors:

    def test_missing_report_file(self, tmp_path):
        with pytest.raises(ReportParseError, match="not found"):
            translate_report(str(tmp_path / "none.json"), str(tmp_path), resolve)

    def test_malformed_json(self, project):
        out = project / "infer-out"
        out.mkdir()
        (out / "report.json").write_text("[{not json", encoding="utf-8")
        with pytest.raises(ReportParseError, match="Malformed"):
            translate_report(str(out / "report.json"), str(project), resolve)

    def test_top_level_object_rejected(self, project):
        report = _write_report(project, {"bugs": []})
        with pytest.raises(ReportParseError):
            load_report(report)

    def test_missing_required_field_aborts_whole_report(self, project):
        bad = _bug()
        del bad["qualifier"]
        report = _write_report(project, [_bug(), bad])
        with pytest.raises(ReportParseError, match="schema"):
            translate_report(report, str(project), resolve)

    def test_wrong_type_aborts(self, project):
        report = _write_report(project, [_bug(line="not-a-number")])
        with pytest.raises(ReportParseError):
            load_report(report)

    def test_numeric_string_line_not_coerced(self, project):
        report = _write_report(project, [_bug(line="10")])
        with pytest.raises(ReportParseError, match="schema"):
            load_report(report)

    def test_trace_step_without_description_aborts(self, project):
        step = {"filename": "src/A.java", "line_number": 3}
        report = _write_report(project, [_bug(trace=[step])])
        with pytest.raises(ReportParseError, match="schema"):
            load_report(report)


# ===================================================================
# Position finder
# ===================================================================
class TestSourcePositionFinder:

    def test_span_excludes_indentation(self, tmp_path):
        source = tmp_path / "C.java"
        source.write_text("class C {\n    int a = 1;   \n}\n")
        position = SourcePositionFinder().resolve(str(source), 2)
        assert (position.line, position.column, position.end_line, position.end_column) == (2, 4, 2, 14)

    def test_blank_line_empty_span(self, tmp_path):
        source = tmp_path / "C.java"
        source.write_text("class C {\n\n}\n")
        position = SourcePositionFinder().resolve(str(source), 2)
        assert position.column == position.end_column == 0

    def test_line_zero_rejected(self, tmp_path):
        source = tmp_path / "C.java"
        source.write_text("class C {}\n")
        with pytest.raises(PositionResolutionError):
            SourcePositionFinder().resolve(str(source), 0)

    def test_unreadable_file(self, tmp_path):
        with pytest.raises(PositionResolutionError):
            SourcePositionFinder().resolve(str(tmp_path / "missing.java"), 1)

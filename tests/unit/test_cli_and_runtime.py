# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import importlib
import json

import pytest
from conftest import BASE_URL, SEMGREP_PAYLOAD, SHIFTLEFT_PAYLOAD, stub_scanners

from sastmerge.aggregate import combine_results
from sastmerge.cli.main import _pretty_print, _truncate, build_parser
from sastmerge.config import HttpSettings, PipelineSettings
from sastmerge.http import HttpResponse
from sastmerge.models import Phase, ScannerOutput
from sastmerge.runtime import SastMerge

cli_main = importlib.import_module("sastmerge.cli.main")


@pytest.fixture
def stub(monkeypatch):
    client = stub_scanners()
    monkeypatch.setattr(cli_main, "create_default_http_client", lambda settings: client)
    monkeypatch.setenv("SASTMERGE_HTTP_RETRIES", "1")
    return client


@pytest.fixture
def source_file(tmp_path):
    path = tmp_path / "app.py"
    path.write_text("query = 'SELECT * FROM users WHERE id=%s' % uid\n")
    return path


def test_build_parser_scan_options():
    args = build_parser().parse_args(["--json", "scan", "app.zip", "--rule-id", "p/python", "--no-store", "--settle", "0"])
    assert args.command == "scan"
    assert args.file == "app.zip"
    assert args.rule_id == "p/python"
    assert args.custom_rule is None
    assert args.no_store is True
    assert args.settle == 0
    assert args.json is True


def test_build_parser_rejects_both_rule_options():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["scan", "a.py", "--rule-id", "x", "--custom-rule", "r.json"])


def test_pretty_print_lists_findings_by_severity(capsys):
    report = combine_results(
        "app.py",
        semgrep=ScannerOutput.from_payload(SEMGREP_PAYLOAD),
        shiftleft=ScannerOutput.from_payload(SHIFTLEFT_PAYLOAD),
    )
    _pretty_print(report)
    output = capsys.readouterr().out
    assert "Combined SAST report for app.py" in output
    assert "Security score: 7.0" in output
    assert "ERROR=1, WARNING=1, INFO=0" in output
    assert output.index("ERROR app.py:10") < output.index("WARNING settings.py:3")
    assert "CWE-89" in output


def test_truncate_nested_values():
    long_text = "x" * 5000
    truncated = _truncate({"a": [long_text]})
    assert truncated["a"][0].endswith("...[truncated]")


def test_main_scan_prints_json_and_progress(stub, source_file, capsys):
    code = cli_main.main(["--base-url", BASE_URL + "/", "--json", "scan", str(source_file), "--settle", "0"])

    assert code == 0
    captured = capsys.readouterr()
    payload = json.loads(captured.out)
    assert payload["file_name"] == "app.py"
    assert payload["total_vulnerabilities"] == 2
    assert "Uploading (Semgrep)" in captured.err
    assert "Aggregating" in captured.err
    assert len(stub.calls_to(f"{BASE_URL}/combined-results")) == 1
    assert stub.closed is True


def test_main_scan_custom_rule_file(stub, source_file, tmp_path):
    rule_file = tmp_path / "rule.json"
    rule_file.write_text('{"rules": [{"id": "raw-sql"}]}')

    code = cli_main.main(
        ["--base-url", BASE_URL, "scan", str(source_file), "--custom-rule", str(rule_file), "--no-store", "--settle", "0"]
    )

    assert code == 0
    assert stub.calls_to(f"{BASE_URL}/upload")[0].data == {"custom_rule": '{"rules": [{"id": "raw-sql"}]}'}
    assert stub.calls_to(f"{BASE_URL}/combined-results") == []


def test_main_scan_failure_exit_code(stub, source_file, capsys):
    stub.add("POST", f"{BASE_URL}/upload", HttpResponse.from_json({"detail": "semgrep exploded"}, status_code=500))

    code = cli_main.main(["--base-url", BASE_URL, "scan", str(source_file), "--settle", "0"])

    assert code == 1
    assert "Failed: semgrep exploded" in capsys.readouterr().err


def test_main_missing_file(stub, tmp_path, capsys):
    code = cli_main.main(["--base-url", BASE_URL, "scan", str(tmp_path / "missing.py")])
    assert code == 1
    assert "Error:" in capsys.readouterr().err


def test_main_history_json(stub, capsys):
    stub.add(
        "GET",
        f"{BASE_URL}/history",
        HttpResponse.from_json({"items": [{"id": "s1", "file_name": "app.py", "total_vulnerabilities": 2}], "total": 1}),
    )

    code = cli_main.main(["--base-url", BASE_URL, "--json", "history", "--limit", "1"])

    assert code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["total"] == 1
    assert payload["items"][0]["id"] == "s1"
    assert stub.requests[-1].params == {"limit": 1, "offset": 0}


def test_main_show_and_errors(stub, capsys):
    stored = combine_results("app.py", semgrep=ScannerOutput.from_payload(SEMGREP_PAYLOAD)).to_dict()
    stub.add("GET", f"{BASE_URL}/scan/s1", HttpResponse.from_json(stored))
    stub.add("GET", f"{BASE_URL}/scan/gone", HttpResponse.from_json({"detail": "Scan not found"}, status_code=404))

    assert cli_main.main(["--base-url", BASE_URL, "show", "s1"]) == 0
    assert "report for app.py" in capsys.readouterr().out

    assert cli_main.main(["--base-url", BASE_URL, "show", "gone"]) == 1
    assert "Scan not found" in capsys.readouterr().err


def test_sastmerge_runtime_wires_clients(source_file):
    client = stub_scanners()
    settings = PipelineSettings(api_base_url=BASE_URL, settle_interval=0)
    progress = []

    with SastMerge(client, http_settings=HttpSettings(max_retries=1), pipeline_settings=settings) as merger:
        merger.on_progress(lambda state: progress.append(state.phase))
        state = merger.scan_file(source_file, rule_id="p/python")
        assert merger.state is state

    assert state.phase is Phase.DONE
    assert progress[-1] is Phase.DONE
    assert client.calls_to(f"{BASE_URL}/upload")[0].data == {"custom_rule": "p/python"}
    assert client.closed is True


def test_main_delete(stub, capsys):
    stub.add("DELETE", f"{BASE_URL}/scan/s1", HttpResponse.from_json({"message": "deleted"}))
    stub.add("DELETE", f"{BASE_URL}/scan/gone", HttpResponse.from_json({"detail": "Scan not found"}, status_code=404))

    assert cli_main.main(["--base-url", BASE_URL, "delete", "s1"]) == 0
    assert "Deleted scan s1" in capsys.readouterr().out

    assert cli_main.main(["--base-url", BASE_URL, "delete", "gone"]) == 1
    assert "Scan not found" in capsys.readouterr().err


def test_main_rules_lists_and_shows(stub, capsys):
    stub.add(
        "GET",
        f"{BASE_URL}/semgrep-rules",
        HttpResponse.from_json(
            {
                "rules": [{"id": "python.eval", "name": "eval use", "severity": "ERROR", "languages": ["python"]}],
                "total": 9,
                "has_more": True,
            }
        ),
    )
    stub.add(
        "GET",
        f"{BASE_URL}/semgrep-rule/python.eval",
        HttpResponse.from_json({"id": "python.eval", "rule_type": "security", "definition": {"rules": [{"id": "eval"}]}}),
    )

    assert cli_main.main(["--base-url", BASE_URL, "rules", "--query", "eval", "--severity", "ERROR", "--limit", "1"]) == 0
    out = capsys.readouterr().out
    assert "1 of 9 Semgrep rules, more available" in out
    assert "- python.eval [ERROR] (python) eval use" in out
    assert stub.requests[-1].params == {"limit": 1, "offset": 0, "query": "eval", "severity": "ERROR"}

    assert cli_main.main(["--base-url", BASE_URL, "--json", "rules", "python.eval"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["id"] == "python.eval"
    assert payload["rule_type"] == "security"
    assert payload["definition"] == {"rules": [{"id": "eval"}]}


def test_sastmerge_runtime_catalog_and_delete():
    client = stub_scanners()
    client.add("GET", f"{BASE_URL}/semgrep-rules", HttpResponse.from_json({"rules": [{"id": "a"}, {"id": "b"}]}))
    client.add("DELETE", f"{BASE_URL}/scan/s1", HttpResponse.from_json({}))
    settings = PipelineSettings(api_base_url=BASE_URL, settle_interval=0)

    with SastMerge(client, http_settings=HttpSettings(max_retries=1), pipeline_settings=settings) as merger:
        page = merger.rules(rule_type="audit")
        merger.delete_scan("s1")

    assert [rule.id for rule in page.rules] == ["a", "b"]
    assert client.requests[0].params == {"limit": 50, "offset": 0, "rule_type": "audit"}
    assert client.requests[-1].method == "DELETE"

# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""SASTMerge CLI."""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any

from ..config import load_http_settings, load_pipeline_settings
from ..errors import SastMergeError
from ..http import create_default_http_client
from ..log import setup_logging
from ..models import CombinedReport, HistoryPage, Phase, PipelineState, RulePage, SemgrepRule
from ..runtime import SastMerge

CLI_TEXT_TRUNCATION_CHARS = 4096
_SEVERITY_ORDER = ("ERROR", "WARNING", "INFO")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="SASTMerge: run Semgrep, ShiftLeft and CodeQL and combine their findings")
    parser.add_argument("--base-url", help="Scan API base URL (default: $SASTMERGE_API_BASE_URL)")
    parser.add_argument("--ignore-ssl-errors", action="store_true", help="Skip TLS verification")
    parser.add_argument("--log-level", help="Logging level (default: $SASTMERGE_LOG_LEVEL or WARNING)")
    parser.add_argument("--json", action="store_true", help="Output JSON instead of human-friendly summary")
    sub = parser.add_subparsers(dest="command", required=True)

    scan = sub.add_parser("scan", help="Scan a file with all three scanners and combine the results")
    scan.add_argument("file", help="Source file or archive to scan")
    rule_source = scan.add_mutually_exclusive_group()
    rule_source.add_argument("--custom-rule", metavar="PATH", help="JSON Semgrep rule document to use instead of the defaults")
    rule_source.add_argument("--rule-id", help="Semgrep registry rule id to use instead of the defaults")
    scan.add_argument("--no-store", action="store_true", help="Do not persist the combined report")
    scan.add_argument("--settle", type=float, help="Pause between scanners in seconds")

    history = sub.add_parser("history", help="List stored scans")
    history.add_argument("--limit", type=int, default=10)
    history.add_argument("--offset", type=int, default=0)

    show = sub.add_parser("show", help="Show a stored scan report")
    show.add_argument("scan_id")

    delete = sub.add_parser("delete", help="Delete a stored scan report")
    delete.add_argument("scan_id")

    rules = sub.add_parser("rules", help="Browse Semgrep registry rules usable with 'scan --rule-id'")
    rules.add_argument("rule_id", nargs="?", help="Show one rule in full instead of listing")
    rules.add_argument("--query", help="Search text")
    rules.add_argument("--type", dest="rule_type", help="Only rules of this type (e.g. security, audit)")
    rules.add_argument("--severity", help="Only rules of this severity")
    rules.add_argument("--limit", type=int, default=50)
    rules.add_argument("--offset", type=int, default=0)
    return parser


def _truncate(value: Any) -> Any:
    if isinstance(value, str) and len(value) > CLI_TEXT_TRUNCATION_CHARS:
        return value[:CLI_TEXT_TRUNCATION_CHARS] + "...[truncated]"
    if isinstance(value, dict):
        return {k: _truncate(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_truncate(v) for v in value]
    return value


def _print_json(data: Any) -> None:
    payload = data.to_dict() if hasattr(data, "to_dict") else data
    json.dump(_truncate(payload), sys.stdout, indent=2, sort_keys=True)
    sys.stdout.write("\n")


def _print_progress(state: PipelineState) -> None:
    if state.phase is Phase.IDLE:
        return
    if state.phase is Phase.FAILED:
        print(f"[SASTMerge] Failed: {state.error}", file=sys.stderr)
        return
    print(f"[SASTMerge] {state.describe()}", file=sys.stderr)


def _pretty_print(report: CombinedReport) -> None:
    metadata = report.scan_metadata
    counts = report.severity_count.to_dict()
    print(f"[SASTMerge] {metadata.scan_type or 'Scan'} report for {report.file_name or '-'}")
    print(f"Security score: {report.security_score:.1f}")
    scores = metadata.individual_scores.to_dict()
    if any(scores.values()):
        print("Scanner scores: " + ", ".join(f"{name}={score:g}" for name, score in scores.items()))
    print(f"Findings: {report.total_vulnerabilities} ({', '.join(f'{k}={counts[k]}' for k in _SEVERITY_ORDER)})")
    ranked = sorted(report.findings, key=lambda f: -f.severity.rank)
    for finding in ranked:
        taxonomy = ", ".join(t for t in (finding.owasp_category, finding.cwe_id) if t)
        suffix = f" [{taxonomy}]" if taxonomy else ""
        print(f"- {finding.severity.value} {finding.path}:{finding.start.line} {finding.check_id} ({finding.source}){suffix}")
        print(f"    {finding.message}")
        print(f"    Fix: {finding.remediation}")


def _print_history(page: HistoryPage) -> None:
    print(f"[SASTMerge] {page.total} stored scans")
    for entry in page.items:
        counts = entry.severity_count
        print(
            f"- {entry.id} {entry.scan_timestamp} {entry.file_name} [{entry.scan_type or '-'}] "
            f"score={entry.security_score:g} findings={entry.total_vulnerabilities} "
            f"(ERROR={counts.ERROR}, WARNING={counts.WARNING}, INFO={counts.INFO})"
        )


def _history_json(page: HistoryPage) -> dict[str, Any]:
    return {
        "total": page.total,
        "items": [
            {
                "id": entry.id,
                "file_name": entry.file_name,
                "scan_timestamp": entry.scan_timestamp,
                "security_score": entry.security_score,
                "total_vulnerabilities": entry.total_vulnerabilities,
                "severity_count": entry.severity_count.to_dict(),
                "scan_type": entry.scan_type,
            }
            for entry in page.items
        ],
    }


def _print_rules(page: RulePage) -> None:
    more = ", more available" if page.has_more else ""
    print(f"[SASTMerge] {len(page.rules)} of {page.total} Semgrep rules{more}")
    for rule in page.rules:
        languages = ",".join(rule.languages) or "-"
        print(f"- {rule.id} [{rule.severity or '-'}] ({languages}) {rule.name or rule.path}")


def _print_rule(rule: SemgrepRule) -> None:
    print(f"[SASTMerge] Semgrep rule {rule.id}")
    for label, value in (
        ("Name", rule.name),
        ("Path", rule.path),
        ("Severity", rule.severity),
        ("Type", rule.rule_type),
        ("Languages", ", ".join(rule.languages)),
        ("Description", rule.description),
    ):
        if value:
            print(f"{label}: {value}")
    if rule.definition:
        print(json.dumps(rule.definition, indent=2, sort_keys=True))


def _run_rules(merger: SastMerge, args: argparse.Namespace) -> int:
    if args.rule_id:
        rule = merger.rule(args.rule_id)
        if args.json:
            _print_json(asdict(rule))
        else:
            _print_rule(rule)
        return 0
    page = merger.rules(
        query=args.query,
        limit=args.limit,
        offset=args.offset,
        rule_type=args.rule_type,
        severity=args.severity,
    )
    if args.json:
        _print_json(asdict(page))
    else:
        _print_rules(page)
    return 0


def _run_scan(merger: SastMerge, args: argparse.Namespace) -> int:
    custom_rule = Path(args.custom_rule).read_text(encoding="utf-8") if args.custom_rule else None
    merger.on_progress(_print_progress)
    state = merger.scan_file(args.file, custom_rule=custom_rule, rule_id=args.rule_id)
    if state.phase is not Phase.DONE or state.report is None:
        return 1
    if args.json:
        _print_json(state.report)
    else:
        _pretty_print(state.report)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    http_settings = load_http_settings()
    if args.ignore_ssl_errors:
        http_settings.verify_ssl = False
    pipeline_settings = load_pipeline_settings()
    if args.base_url:
        pipeline_settings.api_base_url = args.base_url.rstrip("/")
    if args.command == "scan":
        if args.no_store:
            pipeline_settings.persist_results = False
        if args.settle is not None:
            pipeline_settings.settle_interval = max(0.0, args.settle)

    http_client = create_default_http_client(http_settings)
    with SastMerge(http_client, http_settings=http_settings, pipeline_settings=pipeline_settings) as merger:
        try:
            if args.command == "scan":
                return _run_scan(merger, args)
            if args.command == "history":
                page = merger.history(limit=args.limit, offset=args.offset)
                if args.json:
                    _print_json(_history_json(page))
                else:
                    _print_history(page)
                return 0
            if args.command == "rules":
                return _run_rules(merger, args)
            if args.command == "delete":
                merger.delete_scan(args.scan_id)
                print(f"[SASTMerge] Deleted scan {args.scan_id}")
                return 0
            report = merger.get_report(args.scan_id)
            if args.json:
                _print_json(report)
            else:
                _pretty_print(report)
            return 0
        except (SastMergeError, OSError) as exc:
            print(f"[SASTMerge] Error: {exc}", file=sys.stderr)
            return 1


if __name__ == "__main__":
    raise SystemExit(main())

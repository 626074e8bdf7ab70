# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import pytest

from sastmerge.config import PipelineSettings
from sastmerge.http import HttpResponse, RetryConfig, StubHttpClient

BASE_URL = "http://scan.test/api/v1/scan"

SEMGREP_PAYLOAD = {
    "vulnerabilities": [
        {
            "check_id": "python.sql-injection",
            "path": "app.py",
            "start": {"line": 10, "col": 5},
            "end": {"line": 10, "col": 40},
            "extra": {"message": "SQL injection via format string", "severity": "WARNING"},
        }
    ],
    "security_score": 6,
}

SHIFTLEFT_PAYLOAD = {
    "vulnerabilities": [
        {
            "check_id": "python.sql-injection",
            "path": "app.py",
            "start": {"line": 10},
            "message": "Tainted data reaches SQL query",
            "severity": "ERROR",
        },
        {
            "check_id": "hardcoded-secret",
            "path": "settings.py",
            "start": {"line": 3},
            "message": "Hard-coded credential",
            "severity": "WARNING",
        },
    ],
    "security_score": 8,
}

CODEQL_PAYLOAD = {"vulnerabilities": [], "security_score": 0}


def stub_scanners(semgrep=None, shiftleft=None, codeql=None, store=None) -> StubHttpClient:
    """Stub client answering all three scanner endpoints and the result store."""
    stub = StubHttpClient()
    stub.add("POST", f"{BASE_URL}/upload", semgrep or HttpResponse.from_json(SEMGREP_PAYLOAD))
    stub.add("POST", f"{BASE_URL}/shiftleft", shiftleft or HttpResponse.from_json(SHIFTLEFT_PAYLOAD))
    stub.add("POST", f"{BASE_URL}/codeql", codeql or HttpResponse.from_json(CODEQL_PAYLOAD))
    stub.add("POST", f"{BASE_URL}/combined-results", store or HttpResponse.from_json({"id": "stored-1"}))
    return stub


@pytest.fixture
def no_retry():
    return RetryConfig(max_attempts=1)


@pytest.fixture
def pipeline_settings():
    return PipelineSettings(api_base_url=BASE_URL, settle_interval=0)

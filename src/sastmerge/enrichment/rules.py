# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Ordered keyword tables used to enrich findings.

Every table is evaluated top to bottom and the first matching rule wins, so the
order of entries is part of the behavior (e.g. a message mentioning both
"sql" and "auth" maps to Injection, not Broken Authentication).
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class KeywordRule(Generic[T]):
    """Matches when any keyword occurs in the lowercased message or check id."""

    value: T
    message_keywords: tuple[str, ...] = ()
    check_id_keywords: tuple[str, ...] = ()

    def matches(self, check_id: str, message: str) -> bool:
        lower_message = (message or "").lower()
        lower_check_id = (check_id or "").lower()
        return any(k in lower_message for k in self.message_keywords) or any(
            k in lower_check_id for k in self.check_id_keywords
        )


def first_match(rules: Iterable[KeywordRule[T]], check_id: str, message: str) -> T | None:
    for rule in rules:
        if rule.matches(check_id, message):
            return rule.value
    return None


DESCRIPTION_RULES: Sequence[KeywordRule[str]] = (
    KeywordRule(
        " SQL injection vulnerabilities allow attackers to modify database queries, potentially leading to "
        "unauthorized data access, data manipulation, or system compromise. This could affect business "
        "operations and expose sensitive customer or company data.",
        message_keywords=("sql injection",),
        check_id_keywords=("sql-injection",),
    ),
    KeywordRule(
        " Cross-site scripting (XSS) allows attackers to inject malicious scripts into web pages viewed by "
        "users. This could lead to session hijacking, credential theft, or malicious actions performed on "
        "behalf of the user.",
        message_keywords=("xss",),
        check_id_keywords=("xss",),
    ),
    KeywordRule(
        " Command injection vulnerabilities can allow attackers to execute arbitrary system commands on the "
        "host operating system, potentially leading to complete system compromise, data theft, or service "
        "disruption.",
        message_keywords=("command injection",),
        check_id_keywords=("command-injection",),
    ),
    KeywordRule(
        " Path traversal vulnerabilities allow attackers to access files and directories outside of the "
        "intended directory, potentially exposing sensitive configuration files, credentials, or system files.",
        message_keywords=("path traversal",),
        check_id_keywords=("path-traversal",),
    ),
    KeywordRule(
        " Server-Side Request Forgery (SSRF) allows attackers to induce the server to make requests to "
        "internal resources, potentially bypassing network controls and accessing internal services.",
        message_keywords=("ssrf",),
        check_id_keywords=("ssrf",),
    ),
)

# Detection technique sentence per scanner.
SOURCE_TECHNIQUES: dict[str, str] = {
    "Semgrep": " This vulnerability was detected by static pattern matching in your code.",
    "CodeQL": " This vulnerability was identified through semantic code analysis.",
    "ShiftLeft": " This vulnerability was detected through program flow analysis.",
}

OWASP_RULES: Sequence[KeywordRule[str]] = (
    KeywordRule("A1:2021-Injection", ("injection", "sql"), ("injection", "sql")),
    KeywordRule("A2:2021-Broken Authentication", ("auth", "password"), ("auth", "password")),
    KeywordRule("A3:2021-Cross-Site Scripting", ("xss",), ("xss",)),
    KeywordRule("A5:2021-Broken Access Control", ("access control",), ("access-control",)),
    KeywordRule("A8:2021-Insecure Deserialization", ("serialize",), ("serialize",)),
    KeywordRule("A9:2021-Insufficient Logging & Monitoring", ("log",), ("log",)),
)

CWE_RULES: Sequence[KeywordRule[str]] = (
    KeywordRule("CWE-89", ("sql injection",), ("sql-injection",)),
    KeywordRule("CWE-79", ("xss",), ("xss",)),
    KeywordRule("CWE-78", ("command injection",), ("command-injection",)),
    KeywordRule("CWE-22", ("path traversal",), ("path-traversal",)),
    KeywordRule("CWE-918", ("ssrf",), ("ssrf",)),
    KeywordRule("CWE-798", ("hard-coded",), ("hardcoded",)),
)

REMEDIATION_RULES: Sequence[KeywordRule[str]] = (
    KeywordRule(
        "Use parameterized queries or prepared statements instead of string concatenation for SQL queries. "
        "If using an ORM, ensure you're not using raw query methods with user input. Always validate and "
        "sanitize user input before using it in database operations.",
        ("sql injection",),
        ("sql-injection",),
    ),
    KeywordRule(
        "Sanitize and validate all user input before displaying it in HTML context. Use context-appropriate "
        "encoding (HTML, JavaScript, CSS, URL) when displaying user-controlled data. Consider using a Content "
        "Security Policy (CSP) as an additional layer of defense.",
        ("xss",),
        ("xss",),
    ),
    KeywordRule(
        "Avoid using shell commands with user input whenever possible. If necessary, use allowlists for "
        "permitted commands and arguments, and properly escape all user-provided inputs. Consider using "
        "language-specific APIs for the functionality instead of shell commands.",
        ("command injection",),
        ("command-injection",),
    ),
    KeywordRule(
        "Validate and sanitize file paths provided by users. Use absolute paths with an allowlist of permitted "
        'directories. Normalize paths to remove ".." sequences before validation. Consider using a library '
        "designed for safe file operations.",
        ("path traversal",),
        ("path-traversal",),
    ),
    KeywordRule(
        "Remove hardcoded credentials from the code. Use a secure configuration management system or "
        "environment variables to store sensitive values. Consider using a secrets management service for "
        "production deployments.",
        ("hardcoded",),
        ("hardcoded",),
    ),
    KeywordRule(
        "Implement strict URL validation using an allowlist of permitted domains, protocols, and ports. Avoid "
        "using user-controlled input in URL-fetching functions. Consider using a dedicated SSRF prevention "
        "library.",
        ("ssrf",),
        ("ssrf",),
    ),
    KeywordRule(
        "Never deserialize untrusted data. If deserialization is necessary, use safer alternatives like JSON "
        "or implement integrity checks. Run deserialization code with minimal privileges and in a sandbox if "
        "possible.",
        ("deserialization",),
        ("deserial",),
    ),
    KeywordRule(
        "Use established cryptographic libraries and avoid implementing custom cryptographic algorithms. "
        "Ensure you are using strong encryption algorithms with proper key sizes and secure modes of "
        "operation.",
        ("crypto", "encrypt", "cipher"),
    ),
    KeywordRule(
        "Implement anti-CSRF tokens in all forms and require them for all state-changing operations. Verify "
        "the origin of requests using strict same-origin policies. Use SameSite cookie attributes.",
        ("csrf",),
        ("csrf",),
    ),
    KeywordRule(
        "Implement strong password policies, multi-factor authentication, and rate limiting for "
        "authentication attempts. Use secure, standard authentication frameworks instead of custom "
        "implementations.",
        ("auth", "password"),
        ("auth",),
    ),
    KeywordRule(
        "Restrict cross-origin resource sharing (CORS) to trusted domains only. Avoid using wildcard origins "
        "in production. Be careful with Access-Control-Allow-Credentials and ensure it's only used with "
        "specific origins.",
        ("cors",),
        ("cors",),
    ),
)

# (source, message keyword) -> guidance, consulted when no category rule matched.
SOURCE_REMEDIATIONS: Sequence[tuple[str, str, str]] = (
    (
        "Semgrep",
        "pattern",
        "This pattern match indicates a potential security issue. Review the code to ensure it follows secure "
        "coding patterns and implement proper validation and sanitization of all inputs.",
    ),
    (
        "CodeQL",
        "taint",
        "This taint flow analysis indicates that untrusted data may reach a sensitive sink. Implement proper "
        "validation, sanitization, or encoding at the appropriate points in the data flow path.",
    ),
    (
        "ShiftLeft",
        "leak",
        "This analysis indicates a potential information leak. Ensure sensitive data is properly encrypted "
        "during transmission and storage, and implement appropriate access controls.",
    ),
)

ERROR_REMEDIATION = (
    "This is a high-severity issue that requires immediate attention. Review the code for security issues "
    "related to the reported vulnerability and implement proper input validation, output encoding, and strong "
    "access controls."
)
WARNING_REMEDIATION = (
    "This is a medium-severity issue that should be addressed. Implement appropriate security controls "
    "including data validation and proper error handling to mitigate this risk."
)
GENERIC_REMEDIATION = (
    "Review the code for security issues related to the reported vulnerability. Implement proper input "
    "validation, output encoding, and access controls appropriate for this specific type of vulnerability."
)


__all__ = [
    "CWE_RULES",
    "DESCRIPTION_RULES",
    "ERROR_REMEDIATION",
    "GENERIC_REMEDIATION",
    "KeywordRule",
    "OWASP_RULES",
    "REMEDIATION_RULES",
    "SOURCE_REMEDIATIONS",
    "SOURCE_TECHNIQUES",
    "WARNING_REMEDIATION",
    "first_match",
]

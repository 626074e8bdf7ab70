# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy and exception helpers."""

from __future__ import annotations

import socket
import ssl
from enum import Enum

import httpx


class ErrorCategory(str, Enum):
    TIMEOUT = "TIMEOUT"
    SSL_ERROR = "SSL_ERROR"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    DNS_ERROR = "DNS_ERROR"
    HTTP_ERROR = "HTTP_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    NONE = "NONE"


class SastMergeError(Exception):
    """Base class for errors raised by the pipeline and its clients."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class TransportFailure(SastMergeError):
    """A scanner call returned a non-success response or never got one."""

    def __init__(
        self,
        message: str,
        *,
        stage: str | None = None,
        status_code: int | None = None,
        category: ErrorCategory = ErrorCategory.UNKNOWN_ERROR,
    ):
        super().__init__(message)
        self.stage = stage
        self.status_code = status_code
        self.category = category


class ValidationFailure(SastMergeError):
    """User input (artifact or custom rule) rejected before any network call."""


class PersistenceFailure(SastMergeError):
    """The result store rejected or failed to accept a combined report."""

    def __init__(self, message: str, *, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class AggregationFailure(SastMergeError):
    """Merging the scanner outputs raised; fatal for the run."""


def categorize_exception(exc: BaseException) -> ErrorCategory:
    """
    Map Python/httpx exceptions to ErrorCategory.
    """
    if isinstance(exc, httpx.TimeoutException):
        return ErrorCategory.TIMEOUT

    if isinstance(exc, httpx.HTTPStatusError):
        return ErrorCategory.HTTP_ERROR

    if isinstance(exc, (ssl.SSLError, ssl.CertificateError)):
        return ErrorCategory.SSL_ERROR

    # httpx wraps the underlying socket error; look at the cause before the wrapper.
    cause = exc.__cause__ or exc.__context__
    if isinstance(cause, (socket.gaierror, socket.herror)) or isinstance(exc, (socket.gaierror, socket.herror)):
        return ErrorCategory.DNS_ERROR
    if isinstance(cause, (ssl.SSLError, ssl.CertificateError)):
        return ErrorCategory.SSL_ERROR

    if isinstance(exc, (httpx.ConnectError, httpx.RemoteProtocolError, httpx.NetworkError, httpx.ProxyError)):
        return ErrorCategory.CONNECTION_ERROR

    if isinstance(exc, (ConnectionError, ConnectionRefusedError, ConnectionResetError)):
        return ErrorCategory.CONNECTION_ERROR

    return ErrorCategory.UNKNOWN_ERROR


def error_category_to_reason(category: ErrorCategory | str | None) -> str:
    """User-facing reason string."""
    if isinstance(category, str) and not isinstance(category, ErrorCategory):
        try:
            category = ErrorCategory(category)
        except ValueError:
            category = ErrorCategory.UNKNOWN_ERROR
    mapping = {
        ErrorCategory.TIMEOUT: "scanner did not respond in time",
        ErrorCategory.SSL_ERROR: "TLS/certificate issue",
        ErrorCategory.CONNECTION_ERROR: "could not reach the scan service",
        ErrorCategory.DNS_ERROR: "DNS resolution failure",
        ErrorCategory.HTTP_ERROR: "scan service returned an error",
        ErrorCategory.UNKNOWN_ERROR: "network error",
        ErrorCategory.NONE: "",
        None: "",
    }
    return mapping.get(category, "network error")


__all__ = [
    "AggregationFailure",
    "ErrorCategory",
    "PersistenceFailure",
    "SastMergeError",
    "TransportFailure",
    "ValidationFailure",
    "categorize_exception",
    "error_category_to_reason",
]

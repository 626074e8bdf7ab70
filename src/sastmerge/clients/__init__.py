# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Thin clients for the scanner and result-store endpoints."""

from .scanner import ScannerClient, error_detail, fetch_json
from .store import ResultStoreClient

__all__ = ["ResultStoreClient", "ScannerClient", "error_detail", "fetch_json"]

"""Structured errors for notelink.

Every error raised across a public boundary (store, orchestration, CLI)
carries an ErrorCode so callers and `nl --json-errors` can react to it
without parsing messages.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Machine-readable error codes."""

    NOTE_NOT_FOUND = "NOTE_NOT_FOUND"
    INVALID_NOTE_ID = "INVALID_NOTE_ID"
    INVALID_NOTE_FILE = "INVALID_NOTE_FILE"
    INVALID_TITLE = "INVALID_TITLE"
    OWNER_REQUIRED = "OWNER_REQUIRED"
    STORE_NOT_CONFIGURED = "STORE_NOT_CONFIGURED"
    STORE_WRITE_FAILED = "STORE_WRITE_FAILED"


class NotelinkError(Exception):
    """Base error with a code, a human message and optional details."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        error: dict[str, Any] = {"code": self.code.value, "message": self.message}
        if self.details:
            error["details"] = self.details
        return {"error": error}

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str)


def format_error_json(code: str, message: str, details: dict | None = None) -> str:
    """Format an error as JSON for --json-errors output."""
    error: dict[str, dict[str, object]] = {"error": {"code": code, "message": message}}
    if details:
        error["error"]["details"] = details
    return json.dumps(error)

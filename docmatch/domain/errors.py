"""
Error definitions for docmatch.

Rules:
- Parse-time problems (documents, matcher expressions, config) raise and
  abort the assertion. No partial results.
- Comparison mismatches are never exceptions: they are returned as
  Difference records.
"""

from typing import Any


class DocmatchError(Exception):
    """
    Base error for everything docmatch raises on purpose.

    Carries a stable code plus free-form context so callers can log or
    serialise the failure without parsing the message.

    Usage:
        raise DocumentParseError("expected JSON is invalid", source="expected", cause=e)
    """

    code = "DOCMATCH_ERROR"

    def __init__(self, message: str = "", **context: Any) -> None:
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        ctx_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
        head = f"[{self.code}] {self.message}" if self.message else f"[{self.code}]"
        return f"{head} ({ctx_str})" if ctx_str else head

    def to_dict(self) -> dict[str, Any]:
        """For logs and JSON output."""
        return {
            "code": self.code,
            "message": self.message,
            **{k: str(v) for k, v in self.context.items()},
        }


# =============================================================================
# Error Codes
# =============================================================================

class ErrorCodes:
    """Error code constants."""

    # === Documents ===
    DOCUMENT_PARSE_ERROR = "DOCUMENT_PARSE_ERROR"

    # === Matchers ===
    UNKNOWN_MATCHER = "UNKNOWN_MATCHER"
    INVALID_PATTERN = "INVALID_PATTERN"
    INVALID_MATCHER_SYNTAX = "INVALID_MATCHER_SYNTAX"
    UNKNOWN_PLACEHOLDER = "UNKNOWN_PLACEHOLDER"

    # === Config ===
    INVALID_CONFIG = "INVALID_CONFIG"

    # === Assertion I/O ===
    EXPECTED_FILE_MISSING = "EXPECTED_FILE_MISSING"
    UNSUPPORTED_INPUT = "UNSUPPORTED_INPUT"
    UPDATE_BLOCKED_IN_CI = "UPDATE_BLOCKED_IN_CI"


# =============================================================================
# Parse-time errors
# =============================================================================

class DocumentParseError(DocmatchError):
    """Expected or actual text is not valid JSON/HTML."""
    code = ErrorCodes.DOCUMENT_PARSE_ERROR


class MatcherError(DocmatchError):
    """A {{...}} expression could not be turned into a matcher."""


class UnknownMatcherError(MatcherError):
    code = ErrorCodes.UNKNOWN_MATCHER


class InvalidPatternError(MatcherError):
    """regex matcher pattern does not compile."""
    code = ErrorCodes.INVALID_PATTERN


class InvalidMatcherSyntaxError(MatcherError):
    """Known matcher keyword with malformed arguments."""
    code = ErrorCodes.INVALID_MATCHER_SYNTAX


class UnknownPlaceholderError(MatcherError):
    """Sentinel string found in a document with no recorded expression."""
    code = ErrorCodes.UNKNOWN_PLACEHOLDER


class ConfigurationError(DocmatchError):
    code = ErrorCodes.INVALID_CONFIG


# =============================================================================
# Assertion I/O errors
# =============================================================================

class ExpectedFileNotFoundError(DocmatchError):
    """Expected file is absent and update mode is off."""
    code = ErrorCodes.EXPECTED_FILE_MISSING


class UnsupportedInputError(DocmatchError):
    """Actual value cannot be converted to document bytes."""
    code = ErrorCodes.UNSUPPORTED_INPUT


class UpdateBlockedError(DocmatchError):
    """Update mode requested while running in CI."""
    code = ErrorCodes.UPDATE_BLOCKED_IN_CI

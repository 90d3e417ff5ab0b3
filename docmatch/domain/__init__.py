"""Domain layer: errors, constants and schemas."""

from .errors import (
    ConfigurationError,
    DocmatchError,
    DocumentParseError,
    ExpectedFileNotFoundError,
    InvalidMatcherSyntaxError,
    InvalidPatternError,
    MatcherError,
    UnknownMatcherError,
    UnknownPlaceholderError,
    UnsupportedInputError,
    UpdateBlockedError,
)
from .schemas import Difference, DiffKind, HtmlNode, HtmlNodeType

__all__ = [
    # errors
    "DocmatchError",
    "DocumentParseError",
    "MatcherError",
    "UnknownMatcherError",
    "InvalidPatternError",
    "InvalidMatcherSyntaxError",
    "UnknownPlaceholderError",
    "ConfigurationError",
    "ExpectedFileNotFoundError",
    "UnsupportedInputError",
    "UpdateBlockedError",
    # schemas
    "Difference",
    "DiffKind",
    "HtmlNode",
    "HtmlNodeType",
]

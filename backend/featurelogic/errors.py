"""
Parse errors raised while building expressions.

Every error carries the position of the offending node as a dotted path,
e.g. ``all_of[2].any_of[0]``; the root is the empty path.
"""

from __future__ import annotations

from typing import Any, Dict


class ParseError(ValueError):
    """Base class for all expression parsing failures."""

    kind = "parse_error"

    def __init__(self, message: str, path: str = ""):
        self.message = message
        self.path = path
        super().__init__(self._format())

    def _format(self) -> str:
        if self.path:
            return f"{self.path}: {self.message}"
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "kind": self.kind,
            "message": self.message,
            "path": self.path,
        }


class DecodeError(ParseError):
    """The input text is not a decodable YAML mapping."""

    kind = "decode_error"


class WrongArityError(ParseError):
    """An expression mapping does not have exactly one key."""

    kind = "wrong_arity"

    def __init__(self, count: int, path: str = ""):
        self.count = count
        super().__init__(f"expect 1 verb, got {count}", path)


class UnknownVerbError(ParseError):
    """The operator name is not a known verb nor a valid ``<n>_of``."""

    kind = "unknown_verb"

    def __init__(self, verb: Any, path: str = ""):
        self.verb = verb
        super().__init__(f"invalid verb: {verb!r}", path)


class ExpectedSequenceError(ParseError):
    kind = "expected_sequence"

    def __init__(self, verb: str, value: Any, path: str = ""):
        self.verb = verb
        self.value = value
        super().__init__(
            f"operands of {verb!r} must be a sequence, got {type(value).__name__}",
            path,
        )


class ExpectedMappingError(ParseError):
    kind = "expected_mapping"

    def __init__(self, value: Any, path: str = ""):
        self.value = value
        super().__init__(
            f"expression must be a mapping, got {type(value).__name__}", path
        )


class InvalidOperandError(ParseError):
    """An operand is neither a string nor a nested expression."""

    kind = "invalid_operand"

    def __init__(self, value: Any, path: str = ""):
        self.value = value
        super().__init__(
            f"invalid operand {value!r} ({type(value).__name__})", path
        )


class TooDeepError(ParseError):
    kind = "too_deep"

    def __init__(self, max_depth: int, path: str = ""):
        self.max_depth = max_depth
        super().__init__(f"expression nesting exceeds {max_depth} levels", path)


class InvalidRegexError(ParseError):
    """A ``~`` feature token does not compile."""

    kind = "invalid_regex"

    def __init__(self, token: str, reason: str, path: str = ""):
        self.token = token
        self.reason = reason
        super().__init__(f"invalid regex {token!r}: {reason}", path)

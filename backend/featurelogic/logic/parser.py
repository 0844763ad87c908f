"""
Expression Parser for feature logic documents.

Builds typed expression trees from decoded YAML like:

    and:
    - item1
    - or: [item2, item3]
    - not: [~extra]
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, Optional, TextIO, Tuple, Union

from ..config import DEFAULT_CONFIG, EngineConfig
from ..document import decode
from ..errors import (
    ExpectedMappingError,
    ExpectedSequenceError,
    InvalidOperandError,
    InvalidRegexError,
    ParseError,
    TooDeepError,
    UnknownVerbError,
    WrongArityError,
)
from ..models import ALL, Expression, Feature, Operand, Verb

logger = logging.getLogger(__name__)

# "<n>_of" where n is a non-negative decimal integer; "-0" also reads as zero
N_OF_PATTERN = re.compile(r"(?:\+?([0-9]+)|-0+)_of")


class ExpressionParser:
    """
    Parser for feature logic documents.

    Accepted operator spellings and their normalized form:
        not, none_of  -> none_of (threshold 0)
        and, all_of   -> all_of  (threshold -1, i.e. every operand)
        or, any_of    -> any_of  (threshold 1)
        <n>_of        -> n_of    (threshold n; 0_of is none_of)
    """

    VERBS = {
        "not": (Verb.NONE_OF, 0),
        "none_of": (Verb.NONE_OF, 0),
        "and": (Verb.ALL_OF, ALL),
        "all_of": (Verb.ALL_OF, ALL),
        "or": (Verb.ANY_OF, 1),
        "any_of": (Verb.ANY_OF, 1),
    }

    def __init__(self, config: Optional[EngineConfig] = None):
        """
        Initialize the parser.

        Args:
            config: Engine settings; defaults are used when omitted.
        """
        self.config = config if config is not None else DEFAULT_CONFIG

    def parse(self, text: str) -> Expression:
        """
        Parse YAML text into an expression.

        Args:
            text: The YAML document.

        Returns:
            The expression tree.

        Raises:
            ParseError: On the first structural problem found.
        """
        return self.build(decode(text))

    def load(self, stream: TextIO) -> Expression:
        """Parse a YAML document read from a stream."""
        return self.build(decode(stream))

    def build(self, node: Any) -> Expression:
        """
        Build an expression from an already decoded document.

        Args:
            node: A single-entry mapping of verb to operand list.

        Returns:
            The expression tree.
        """
        expr = self._parse_expression(node, path="", depth=1)
        logger.debug("Built %s expression with %d operands", expr.key, len(expr.operands))
        return expr

    def parse_verb(self, name: Any, path: str = "") -> Tuple[Verb, int]:
        """
        Normalize an operator spelling.

        Returns:
            Tuple of (verb, threshold).

        Raises:
            UnknownVerbError: If the spelling is not recognized.
        """
        if not isinstance(name, str):
            raise UnknownVerbError(name, path)

        if name in self.VERBS:
            return self.VERBS[name]

        match = N_OF_PATTERN.fullmatch(name)
        if match:
            n = int(match.group(1) or 0)
            if n == 0:
                return Verb.NONE_OF, 0
            return Verb.N_OF, n

        raise UnknownVerbError(name, path)

    def _parse_expression(self, node: Any, path: str, depth: int) -> Expression:
        """Parse one single-entry mapping."""
        if depth > self.config.max_depth:
            raise TooDeepError(self.config.max_depth, path)

        if not isinstance(node, dict):
            raise ExpectedMappingError(node, path)

        if len(node) != 1:
            raise WrongArityError(len(node), path)

        name, value = next(iter(node.items()))
        verb, threshold = self.parse_verb(name, path)

        if not isinstance(value, list):
            raise ExpectedSequenceError(str(name), value, path)

        prefix = f"{path}.{name}" if path else str(name)
        operands = [
            self._parse_operand(item, f"{prefix}[{idx}]", depth)
            for idx, item in enumerate(value)
        ]
        return Expression(verb, threshold, tuple(operands))

    def _parse_operand(self, item: Any, path: str, depth: int) -> Operand:
        """Parse a sequence element into a feature or sub-expression."""
        if isinstance(item, str):
            feature = Feature(item)
            if feature.is_regex and self.config.validate_regex:
                self._check_pattern(feature, path)
            return feature

        if isinstance(item, dict):
            return self._parse_expression(item, path, depth + 1)

        raise InvalidOperandError(item, path)

    def _check_pattern(self, feature: Feature, path: str) -> None:
        try:
            re.compile(feature.pattern)
        except re.error as e:
            raise InvalidRegexError(feature.token, str(e), path) from e

    def validate(self, text: str) -> Tuple[bool, Optional[str]]:
        """
        Validate a document without keeping the result.

        Returns:
            Tuple of (is_valid, error_message).
        """
        try:
            self.parse(text)
            return True, None
        except ParseError as e:
            return False, str(e)


def parse(text: str, config: Optional[EngineConfig] = None) -> Expression:
    """Convenience function to parse YAML text."""
    return ExpressionParser(config).parse(text)


def load(stream: TextIO, config: Optional[EngineConfig] = None) -> Expression:
    """Convenience function to parse YAML from a stream."""
    return ExpressionParser(config).load(stream)


def build(node: Any, config: Optional[EngineConfig] = None) -> Expression:
    """Convenience function to build from a decoded document."""
    return ExpressionParser(config).build(node)


def load_file(path: Union[str, Path], config: Optional[EngineConfig] = None) -> Expression:
    """Parse an expression stored in a YAML file."""
    with open(path, "r", encoding="utf-8") as f:
        return load(f, config)

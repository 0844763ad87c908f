"""
Feature Logic: boolean expressions over feature sets.

Parses YAML documents such as

    and:
    - item1
    - or: [item2, item3]
    - not: [~extra]

into immutable expression trees that can be evaluated against a list of
feature strings and exported back to canonical YAML.
"""

from .config import EngineConfig
from .errors import (
    DecodeError,
    ExpectedMappingError,
    ExpectedSequenceError,
    InvalidOperandError,
    InvalidRegexError,
    ParseError,
    TooDeepError,
    UnknownVerbError,
    WrongArityError,
)
from .logic import (
    ExpressionEvaluator,
    ExpressionParser,
    build,
    evaluate,
    export,
    load,
    load_file,
    parse,
)
from .models import Expression, Feature, Operand, Verb

__version__ = "1.0.0"
__all__ = [
    "EngineConfig",
    "Expression",
    "Feature",
    "Operand",
    "Verb",
    "ExpressionParser",
    "ExpressionEvaluator",
    "parse",
    "load",
    "load_file",
    "build",
    "evaluate",
    "export",
    "ParseError",
    "DecodeError",
    "WrongArityError",
    "UnknownVerbError",
    "ExpectedSequenceError",
    "ExpectedMappingError",
    "InvalidOperandError",
    "TooDeepError",
    "InvalidRegexError",
]

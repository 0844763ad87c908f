"""
Expression data model.

An expression is a single logic operation (verb plus threshold) over an
ordered tuple of operands. Each operand is either a feature token or a
nested expression, so a parsed document becomes a strict tree.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, TextIO, Tuple, Union

# Marks a feature token whose remainder is a regular expression
REGEX_PREFIX = "~"

# Threshold sentinel resolved to the operand count at evaluation time
ALL = -1


class Verb(str, Enum):
    """Normalized logic operators."""

    ALL_OF = "all_of"
    ANY_OF = "any_of"
    NONE_OF = "none_of"
    N_OF = "n_of"


# Thresholds implied by the named verbs; n_of carries its own
FIXED_THRESHOLDS = {
    Verb.ALL_OF: ALL,
    Verb.ANY_OF: 1,
    Verb.NONE_OF: 0,
}


@dataclass(frozen=True)
class Feature:
    """A literal feature token, or a regex when prefixed with ``~``."""

    token: str

    @property
    def is_regex(self) -> bool:
        return self.token.startswith(REGEX_PREFIX)

    @property
    def pattern(self) -> Optional[str]:
        """The regex source, or None for a literal token."""
        if self.is_regex:
            return self.token[len(REGEX_PREFIX):]
        return None

    def __str__(self) -> str:
        return self.token


@dataclass(frozen=True)
class Expression:
    """
    A logic operation over features and nested expressions.

    ``threshold`` is -1 for all_of (every operand must match), 0 for
    none_of, 1 for any_of and n for n_of. Instances are immutable and
    compare by value, so two documents that differ only in operator
    spelling produce equal trees.
    """

    verb: Verb
    threshold: int
    operands: Tuple["Operand", ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        """Reject verb/threshold pairs and operands a document cannot express."""
        verb = Verb(self.verb)
        if verb is not self.verb:
            object.__setattr__(self, "verb", verb)

        if verb is Verb.N_OF:
            if isinstance(self.threshold, bool) or not isinstance(self.threshold, int) \
                    or self.threshold < 1:
                raise ValueError(
                    f"n_of threshold must be a positive integer, got {self.threshold!r}"
                )
        elif self.threshold != FIXED_THRESHOLDS[verb]:
            raise ValueError(
                f"{verb.value} threshold must be {FIXED_THRESHOLDS[verb]}, "
                f"got {self.threshold!r}"
            )

        # Accept any sequence of operands but always store a tuple
        if not isinstance(self.operands, tuple):
            object.__setattr__(self, "operands", tuple(self.operands))
        for operand in self.operands:
            if not isinstance(operand, (Feature, Expression)):
                raise TypeError(
                    f"operand must be a Feature or Expression, got {type(operand).__name__}"
                )

    @classmethod
    def all_of(cls, *operands: "Operand") -> "Expression":
        return cls(Verb.ALL_OF, ALL, operands)

    @classmethod
    def any_of(cls, *operands: "Operand") -> "Expression":
        return cls(Verb.ANY_OF, 1, operands)

    @classmethod
    def none_of(cls, *operands: "Operand") -> "Expression":
        return cls(Verb.NONE_OF, 0, operands)

    @classmethod
    def n_of(cls, n: int, *operands: "Operand") -> "Expression":
        """Build an n-of expression; n=0 collapses to none_of."""
        if n < 0:
            raise ValueError(f"n_of threshold must be non-negative, got {n}")
        if n == 0:
            return cls.none_of(*operands)
        return cls(Verb.N_OF, n, operands)

    @property
    def key(self) -> str:
        """Canonical operator spelling used when exporting."""
        if self.verb is Verb.N_OF:
            return f"{self.threshold}_of"
        return self.verb.value

    def features(self) -> Tuple[str, ...]:
        """Every feature token referenced in the tree, first occurrence order."""
        seen: Dict[str, None] = {}
        for token in _walk_tokens(self):
            seen.setdefault(token, None)
        return tuple(seen)

    def eval(self, features: Iterable[str], evaluator: Any = None) -> bool:
        """
        Evaluate this expression against a feature set.

        Args:
            features: Feature strings known to be present.
            evaluator: ExpressionEvaluator to use; the shared default
                evaluator (default EngineConfig) when omitted.
        """
        if evaluator is None:
            from .logic.evaluator import evaluate
            return evaluate(self, features)
        return evaluator.evaluate(self, features)

    def to_dict(self) -> Dict[str, List[Any]]:
        """Convert to canonical document form."""
        from .logic.exporter import export
        return export(self)

    def to_yaml(self) -> str:
        """Canonical YAML text."""
        from .logic.exporter import to_yaml
        return to_yaml(self)

    def save(self, stream: TextIO) -> None:
        """Write canonical YAML text to a stream."""
        from .logic.exporter import save
        save(self, stream)

    @classmethod
    def from_dict(cls, node: Any, config: Any = None) -> "Expression":
        from .logic.parser import ExpressionParser
        return ExpressionParser(config).build(node)

    @classmethod
    def from_yaml(cls, text: str, config: Any = None) -> "Expression":
        from .logic.parser import ExpressionParser
        return ExpressionParser(config).parse(text)

    def __str__(self) -> str:
        return self.to_yaml()


Operand = Union[Feature, Expression]


def _walk_tokens(expr: Expression) -> Iterable[str]:
    for operand in expr.operands:
        if isinstance(operand, Feature):
            yield operand.token
        else:
            yield from _walk_tokens(operand)

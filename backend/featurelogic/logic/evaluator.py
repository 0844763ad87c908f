"""
Expression Evaluator for feature logic.

Decides whether an expression holds for a given set of feature strings.
"""

from __future__ import annotations

import functools
import logging
import re
from typing import Iterable, Optional, Pattern, Sequence

from ..config import DEFAULT_CONFIG, EngineConfig
from ..models import ALL, Expression, Feature, Operand, Verb

logger = logging.getLogger(__name__)


class ExpressionEvaluator:
    """
    Evaluator for feature logic expressions.

    none_of fails on the first matching operand. all_of, any_of and n_of
    share one counting path: the threshold is resolved (-1 becomes the
    operand count) and evaluation stops as soon as enough operands match.

    Evaluation never mutates the tree, so one evaluator may be shared
    across threads; the compiled pattern cache is an lru_cache.
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        """
        Initialize the evaluator.

        Args:
            config: Engine settings; defaults are used when omitted.
        """
        self.config = config if config is not None else DEFAULT_CONFIG
        if self.config.regex_cache_size > 0:
            self._compile = functools.lru_cache(maxsize=self.config.regex_cache_size)(
                _compile_pattern
            )
        else:
            self._compile = _compile_pattern

    def evaluate(self, expr: Expression, features: Iterable[str]) -> bool:
        """
        Evaluate an expression against a feature set.

        Args:
            expr: The expression tree.
            features: Feature strings known to be present.

        Returns:
            True if the expression holds.
        """
        if isinstance(features, str):
            features = [features]
        return self._eval(expr, tuple(features))

    def _eval(self, expr: Expression, features: Sequence[str]) -> bool:
        if expr.verb is Verb.NONE_OF:
            return self._eval_none(expr, features)
        return self._eval_count(expr, features)

    def _eval_none(self, expr: Expression, features: Sequence[str]) -> bool:
        """True when no operand matches."""
        for operand in expr.operands:
            if self._eval_operand(operand, features):
                return False
        return True

    def _eval_count(self, expr: Expression, features: Sequence[str]) -> bool:
        """True once at least threshold operands match."""
        needed = len(expr.operands) if expr.threshold == ALL else expr.threshold
        if needed <= 0:
            return True

        hits = 0
        for operand in expr.operands:
            if self._eval_operand(operand, features):
                hits += 1
                if hits >= needed:
                    return True
        return False

    def _eval_operand(self, operand: Operand, features: Sequence[str]) -> bool:
        if isinstance(operand, Feature):
            return self.match_feature(operand, features)
        return self._eval(operand, features)

    def match_feature(self, feature: Feature, features: Sequence[str]) -> bool:
        """
        Match one feature token against the feature set.

        Literal tokens need an exact, case-sensitive equal. Regex tokens
        match when the pattern is found anywhere in any feature.
        """
        if not feature.is_regex:
            return feature.token in features

        rx = self._compile(feature.pattern)
        if rx is None:
            return False
        return any(rx.search(f) for f in features)


def _compile_pattern(pattern: str) -> Optional[Pattern[str]]:
    try:
        return re.compile(pattern)
    except re.error as e:
        logger.warning("Ignoring invalid feature pattern %r: %s", pattern, e)
        return None


_default_evaluator = ExpressionEvaluator()


def evaluate(expr: Expression, features: Iterable[str]) -> bool:
    """Convenience function using a shared default evaluator."""
    return _default_evaluator.evaluate(expr, features)

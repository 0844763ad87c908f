"""
Tests for the expression evaluator.
"""

import itertools

import pytest

from backend.featurelogic import (
    EngineConfig,
    Expression,
    ExpressionEvaluator,
    Feature,
    evaluate,
    parse,
)


SCENARIO_A = """
and:
- item1
- or: [item2, item3]
- not: [~extra]
"""

SCENARIO_B = """
all_of:
- item1
- 2_of:
  - item2
  - item3
  - item4
"""

UNIVERSE = ["A", "B", "C"]


def feature_sets():
    """Every subset of the test universe."""
    for size in range(len(UNIVERSE) + 1):
        for combo in itertools.combinations(UNIVERSE, size):
            yield list(combo)


class CountingEvaluator(ExpressionEvaluator):
    """Evaluator that records which feature tokens were looked at."""

    def __init__(self, config=None):
        super().__init__(config)
        self.seen = []

    def match_feature(self, feature, features):
        self.seen.append(feature.token)
        return super().match_feature(feature, features)


class TestScenarios:
    """Tests for the documented example expressions."""

    def test_scenario_a_true(self):
        """Test item1 plus one of item2/item3 holds."""
        assert parse(SCENARIO_A).eval(["item1", "item3"]) is True

    def test_scenario_a_missing_item1(self):
        """Test the expression fails without item1."""
        assert parse(SCENARIO_A).eval(["item2"]) is False

    def test_scenario_a_negated_regex(self):
        """Test ~extra matching extra_item triggers the negation."""
        assert parse(SCENARIO_A).eval(["item1", "item2", "extra_item"]) is False

    def test_scenario_a_unmarshal_style(self):
        """Test item1 and item2 holds."""
        assert parse(SCENARIO_A).eval(["item1", "item2"]) is True

    def test_scenario_a_all_present_with_extra(self):
        """Test extra_item still vetoes when everything else matches."""
        assert parse(SCENARIO_A).eval(["item2", "item3", "extra_item"]) is False

    def test_scenario_b_true(self):
        """Test two of three sub-operands meet the threshold."""
        assert parse(SCENARIO_B).eval(["item1", "item2", "item4"]) is True

    def test_scenario_b_threshold_not_met(self):
        """Test one of three sub-operands is not enough."""
        assert parse(SCENARIO_B).eval(["item1", "item2"]) is False


class TestFeatureMatching:
    """Tests for literal and regex tokens."""

    def test_regex_is_search(self):
        """Test regex tokens match anywhere in a feature."""
        assert parse("or: ['~ab+c']").eval(["xxabbbc yyy"]) is True

    def test_anchored_regex(self):
        """Test anchors in the pattern are honored."""
        assert parse("or: ['~^ab+c$']").eval(["xabc"]) is False
        assert parse("or: ['~^ab+c$']").eval(["abbc"]) is True

    def test_regex_any_feature(self):
        """Test a regex matches if any feature matches."""
        assert parse("or: ['~^os:']").eval(["arch:x86", "os:linux"]) is True

    def test_literal_is_exact(self):
        """Test literal tokens need an exact match."""
        expr = parse("or: [item]")
        assert expr.eval(["item"]) is True
        assert expr.eval(["item1"]) is False
        assert expr.eval(["Item"]) is False

    def test_literal_not_pattern(self):
        """Test regex metacharacters in literals are literal."""
        expr = parse("or: ['a.c']")
        assert expr.eval(["abc"]) is False
        assert expr.eval(["a.c"]) is True

    def test_empty_feature_set(self):
        """Test evaluation over no features."""
        assert parse("or: [a, '~.*']").eval([]) is False
        assert parse("not: [a, '~.*']").eval([]) is True

    def test_features_from_generator(self):
        """Test any iterable of strings is accepted."""
        expr = parse("and: [a, b]")
        assert expr.eval(f for f in ["b", "a"]) is True

    def test_single_string_is_one_feature(self):
        """Test a bare string is treated as a single feature."""
        assert parse("or: [abc]").eval("abc") is True
        assert parse("or: [a]").eval("abc") is False


class TestVerbEquivalence:
    """Tests that the named verbs are special cases of n_of."""

    @pytest.mark.parametrize("features", list(feature_sets()))
    def test_all_of_is_n_of_count(self, features):
        """Test all_of [A, B] equals 2_of [A, B]."""
        assert parse("all_of: [A, B]").eval(features) == parse("2_of: [A, B]").eval(features)

    @pytest.mark.parametrize("features", list(feature_sets()))
    def test_any_of_is_1_of(self, features):
        """Test any_of [A, B] equals 1_of [A, B]."""
        assert parse("any_of: [A, B]").eval(features) == parse("1_of: [A, B]").eval(features)

    @pytest.mark.parametrize("features", list(feature_sets()))
    def test_none_of_is_0_of(self, features):
        """Test none_of and 0_of both mean no operand matches."""
        expected = not any(f in features for f in ["A", "B"])
        assert parse("none_of: [A, B]").eval(features) is expected
        assert parse("0_of: [A, B]").eval(features) is expected

    @pytest.mark.parametrize("features", list(feature_sets()))
    def test_spellings_agree(self, features):
        """Test and/or/not agree with their canonical spellings."""
        for short, long in [("and", "all_of"), ("or", "any_of"), ("not", "none_of")]:
            assert (
                parse(f"{short}: [A, B, C]").eval(features)
                == parse(f"{long}: [A, B, C]").eval(features)
            )


class TestThresholds:
    """Tests for counting semantics."""

    def test_threshold_above_operand_count(self):
        """Test n larger than the operand count never holds."""
        assert parse("3_of: [a, b]").eval(["a", "b"]) is False

    def test_threshold_counts_sub_expressions(self):
        """Test nested expressions count as single operands."""
        expr = parse("2_of: [a, {or: [b, c]}, {not: [d]}]")
        assert expr.eval(["c", "d"]) is False
        assert expr.eval(["c"]) is True
        assert expr.eval(["a"]) is True

    def test_duplicate_operands_count_twice(self):
        """Test repeated operands each contribute to the count."""
        assert parse("2_of: [a, a]").eval(["a"]) is True


class TestEmptyOperands:
    """Regression tests for empty operand lists."""

    @pytest.mark.parametrize("features", [[], ["a"], ["a", "b"]])
    def test_none_of_empty(self, features):
        """Test none_of [] holds for any feature set."""
        assert parse("none_of: []").eval(features) is True

    @pytest.mark.parametrize("features", [[], ["a"], ["a", "b"]])
    def test_all_of_empty(self, features):
        """Test all_of [] holds: zero operands are needed."""
        assert parse("all_of: []").eval(features) is True

    @pytest.mark.parametrize("features", [[], ["a"]])
    def test_any_of_empty(self, features):
        """Test any_of [] never holds."""
        assert parse("any_of: []").eval(features) is False

    def test_n_of_empty(self):
        """Test 2_of [] never holds."""
        assert parse("2_of: []").eval(["a"]) is False


class TestShortCircuit:
    """Tests for lazy left-to-right evaluation."""

    def test_none_of_stops_at_first_match(self):
        """Test none_of stops once an operand matches."""
        evaluator = CountingEvaluator()
        assert evaluator.evaluate(parse("not: [a, b, c]"), ["a"]) is False
        assert evaluator.seen == ["a"]

    def test_any_of_stops_at_first_match(self):
        """Test any_of stops once one operand matches."""
        evaluator = CountingEvaluator()
        assert evaluator.evaluate(parse("or: [x, a, b]"), ["a", "b"]) is True
        assert evaluator.seen == ["x", "a"]

    def test_n_of_stops_at_threshold(self):
        """Test n_of stops once the threshold is reached."""
        evaluator = CountingEvaluator()
        assert evaluator.evaluate(parse("2_of: [a, b, c, d]"), ["a", "b", "c"]) is True
        assert evaluator.seen == ["a", "b"]

    def test_zero_threshold_evaluates_nothing(self):
        """Test all_of [] returns without touching operands."""
        evaluator = CountingEvaluator()
        assert evaluator.evaluate(Expression.all_of(), ["a"]) is True
        assert evaluator.seen == []

    def test_all_of_checks_every_operand(self):
        """Test all_of must see every operand to succeed."""
        evaluator = CountingEvaluator()
        assert evaluator.evaluate(parse("and: [a, b, c]"), ["a", "b", "c"]) is True
        assert evaluator.seen == ["a", "b", "c"]


class TestLazyRegex:
    """Tests for patterns compiled at evaluation time."""

    def test_invalid_pattern_never_matches(self, caplog):
        """Test a broken pattern is ignored with a warning."""
        config = EngineConfig(validate_regex=False)
        expr = parse("or: ['~(bad', good]", config)
        evaluator = ExpressionEvaluator(config)
        with caplog.at_level("WARNING", logger="backend.featurelogic.logic.evaluator"):
            assert evaluator.evaluate(expr, ["(bad"]) is False
        assert "Ignoring invalid feature pattern" in caplog.text
        assert evaluator.evaluate(expr, ["good"]) is True

    def test_invalid_pattern_in_none_of(self):
        """Test a broken pattern inside none_of does not veto."""
        config = EngineConfig(validate_regex=False)
        expr = parse("not: ['~[z-a]']", config)
        assert ExpressionEvaluator(config).evaluate(expr, ["anything"]) is True

    @pytest.mark.parametrize("cache_size", [0, 1, 256])
    def test_cache_size_does_not_change_results(self, cache_size):
        """Test pattern memoization is transparent."""
        evaluator = ExpressionEvaluator(EngineConfig(regex_cache_size=cache_size))
        expr = parse("and: ['~^a', '~b$', {not: ['~^z']}]")
        for _ in range(3):
            assert evaluator.evaluate(expr, ["ax", "xb"]) is True
            assert evaluator.evaluate(expr, ["ax", "xb", "zz"]) is False


class TestConvenience:
    """Tests for module-level helpers."""

    def test_evaluate_function(self):
        """Test the shared evaluator helper."""
        expr = Expression.any_of(Feature("a"), Feature("~^b"))
        assert evaluate(expr, ["bee"]) is True
        assert evaluate(expr, ["c"]) is False

    def test_eval_with_custom_evaluator(self):
        """Test Expression.eval uses a supplied evaluator and its config."""
        config = EngineConfig(validate_regex=False, regex_cache_size=0)
        expr = parse("or: [a, '~^b']", config)
        evaluator = CountingEvaluator(config)
        assert expr.eval(["bee"], evaluator=evaluator) is True
        assert evaluator.seen == ["a", "~^b"]
        assert evaluator.config.regex_cache_size == 0

    def test_eval_without_evaluator_uses_default(self):
        """Test Expression.eval falls back to the shared evaluator."""
        expr = parse("or: [a, '~^b']")
        assert expr.eval(["bee"]) == evaluate(expr, ["bee"]) is True

    def test_built_expression(self):
        """Test expressions built in code evaluate like parsed ones."""
        expr = Expression.n_of(2, Feature("a"), Feature("b"), Expression.none_of(Feature("c")))
        assert expr.eval(["a"]) is True
        assert expr.eval(["a", "c"]) is False

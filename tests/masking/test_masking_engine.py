"""Tests for the masking engine."""

import copy
import re
from unittest.mock import patch

import pytest

from scopelog.errors import MaskingFieldFailure
from scopelog.masking.engine import MaskingEngine
from scopelog.masking.rules import DEFAULT_RULES, ExactKey, KeyPattern, MaskingRule
from scopelog.models.enums import MaskingStrategy


def _engine(*rules: MaskingRule, **kwargs: object) -> MaskingEngine:
    return MaskingEngine(rules, enable_default_rules=False, **kwargs)


class TestRules:
    """Tests for rule construction and matching."""

    def test_string_pattern_becomes_exact_key(self) -> None:
        """Test that a plain string is matched by equality."""
        rule = MaskingRule("password")
        assert rule.pattern == ExactKey("password")
        assert rule.matches("password")
        assert not rule.matches("old_password")

    def test_compiled_pattern_becomes_key_pattern(self) -> None:
        """Test that a compiled regex is matched with search."""
        rule = MaskingRule(re.compile("token", re.IGNORECASE))
        assert isinstance(rule.pattern, KeyPattern)
        assert rule.matches("refreshToken")

    def test_strategy_accepts_value_string(self) -> None:
        """Test that strategy names are coerced to the enum."""
        rule = MaskingRule("ssn", "ssn")
        assert rule.strategy is MaskingStrategy.SSN

    def test_custom_strategy_requires_function(self) -> None:
        """Test that CUSTOM without a function is rejected."""
        with pytest.raises(ValueError, match="custom function"):
            MaskingRule("field", MaskingStrategy.CUSTOM)

    def test_unsupported_pattern_type(self) -> None:
        """Test that other pattern types are rejected."""
        with pytest.raises(TypeError):
            MaskingRule(42)  # type: ignore[arg-type]


class TestScenarios:
    """End-to-end masking scenarios."""

    def test_exact_key_full_mask_with_rule_token(self) -> None:
        """Test FULL with a rule-level replacement token."""
        engine = MaskingEngine([MaskingRule("password", MaskingStrategy.FULL, mask_char="***")])
        assert engine.process({"user": "al", "password": "hunter2"}) == {
            "user": "al",
            "password": "***",
        }

    def test_regex_full_mask_uses_engine_token(self) -> None:
        """Test FULL without a rule token falls back to the engine's full mask."""
        engine = MaskingEngine([MaskingRule(KeyPattern.compile("token"), MaskingStrategy.FULL)])
        assert engine.process({"accessToken": "abc", "refreshToken": "def", "id": 1}) == {
            "accessToken": "******",
            "refreshToken": "******",
            "id": 1,
        }

    def test_first_matching_rule_wins(self) -> None:
        """Test that rules are evaluated in registration order."""
        engine = _engine(
            MaskingRule(KeyPattern.compile("secret"), MaskingStrategy.FULL, mask_char="[first]"),
            MaskingRule("secret", MaskingStrategy.FULL, mask_char="[second]"),
        )
        assert engine.process({"secret": "x"}) == {"secret": "[first]"}

    def test_added_rules_precede_default_rules(self) -> None:
        """Test that custom rules added later still win over the defaults."""
        engine = MaskingEngine()
        engine.add_rule(MaskingRule("password", MaskingStrategy.FULL))
        assert engine.process({"password": "secret123"}) == {"password": "******"}


class TestStrategies:
    """Tests for each built-in strategy."""

    @pytest.mark.parametrize(
        ("strategy", "value", "expected"),
        [
            (MaskingStrategy.PRESERVE_LENGTH, "hello", "*****"),
            (MaskingStrategy.PASSWORD, "secret123", "*********"),
            (MaskingStrategy.CREDIT_CARD, "4111-1111-1111-1111", "****-****-****-1111"),
            (MaskingStrategy.CREDIT_CARD, "4111111111111111", "************1111"),
            (MaskingStrategy.SSN, "123-45-6789", "***-**-6789"),
            (MaskingStrategy.PHONE, "555-123-4567", "***-***-4567"),
            (MaskingStrategy.PHONE, "+1 (555) 123-4567", "+* (***) ***-4567"),
            (MaskingStrategy.EMAIL, "john.doe@example.com", "j*******@example.com"),
            (MaskingStrategy.EMAIL, "test@example.com", "t***@example.com"),
            (MaskingStrategy.EMAIL, "not-an-email", "************"),
            (MaskingStrategy.TOKEN, "sk_test_1234567890abcdef", "sk_t***************bcdef"),
            (MaskingStrategy.TOKEN, "short", "*****"),
        ],
    )
    def test_strategy_output(self, strategy: MaskingStrategy, value: str, expected: str) -> None:
        """Test the masked output of each strategy."""
        engine = _engine(MaskingRule("field", strategy))
        assert engine.process({"field": value}) == {"field": expected}

    def test_short_card_number_fully_masked(self) -> None:
        """Test that values with at most four alphanumerics reveal nothing."""
        engine = _engine(MaskingRule("pin", MaskingStrategy.CREDIT_CARD))
        assert engine.process({"pin": "1234"}) == {"pin": "****"}

    def test_rule_mask_char_is_glyph(self) -> None:
        """Test that a rule's mask_char replaces the glyph for partial strategies."""
        engine = _engine(MaskingRule("ssn", MaskingStrategy.SSN, mask_char="#"))
        assert engine.process({"ssn": "123-45-6789"}) == {"ssn": "###-##-6789"}

    def test_engine_mask_char(self) -> None:
        """Test that the engine-wide glyph is used when the rule has none."""
        engine = _engine(MaskingRule("pwd", MaskingStrategy.PASSWORD), mask_char="x")
        assert engine.process({"pwd": "abc"}) == {"pwd": "xxx"}

    def test_non_string_values_are_stringified(self) -> None:
        """Test that numbers and bytes are stringified before masking."""
        engine = _engine(
            MaskingRule("card", MaskingStrategy.CREDIT_CARD),
            MaskingRule("blob", MaskingStrategy.PRESERVE_LENGTH),
        )
        assert engine.process({"card": 4111111111111111, "blob": b"abc"}) == {
            "card": "************1111",
            "blob": "***",
        }

    def test_custom_strategy(self) -> None:
        """Test that CUSTOM receives the stringified value."""
        engine = _engine(
            MaskingRule(
                KeyPattern.compile("custom_field"),
                MaskingStrategy.CUSTOM,
                custom=lambda value: f"CUSTOM_{len(value)}_MASK",
            )
        )
        assert engine.process({"custom_field": "hello world", "normal_field": "unchanged"}) == {
            "custom_field": "CUSTOM_11_MASK",
            "normal_field": "unchanged",
        }


class TestCustomFailure:
    """A raising custom strategy keeps the original value of that field only."""

    def _failing_rule(self) -> MaskingRule:
        def fail(value: str) -> str:
            raise RuntimeError("masking failed")

        return MaskingRule("test", MaskingStrategy.CUSTOM, custom=fail)

    def test_original_value_kept(self) -> None:
        """Test that the failing field keeps its value and others are masked."""
        engine = _engine(self._failing_rule(), MaskingRule("pin", MaskingStrategy.FULL))
        assert engine.process({"test": "value", "pin": "1234", "normal": "data"}) == {
            "test": "value",
            "pin": "******",
            "normal": "data",
        }

    def test_failure_logged(self) -> None:
        """Test that the failure is reported through the diagnostic logger."""
        engine = _engine(self._failing_rule())
        with patch("scopelog.masking.engine.logger") as mock_logger:
            engine.process({"test": "value"})
        mock_logger.warning.assert_called_once()
        assert mock_logger.warning.call_args.kwargs["field"] == "test"

    def test_outcome_records_failure(self) -> None:
        """Test that mask_field returns a fallback outcome."""
        engine = _engine()
        outcome = engine.mask_field("test", "value", self._failing_rule())
        assert not outcome.ok
        assert outcome.value == "value"
        assert isinstance(outcome.error, MaskingFieldFailure)
        assert outcome.error.field == "test"


class TestBuiltinFailure:
    """A built-in strategy that cannot stringify its value hides it entirely."""

    def test_cyclic_password_fully_masked(self) -> None:
        """Test that a self-containing list under a password key is replaced by the full mask."""
        leaked: list[object] = ["hunter2"]
        leaked.append(leaked)
        with patch("scopelog.masking.engine.logger") as mock_logger:
            masked = MaskingEngine().process({"password": leaked, "user": "al"})
        assert masked == {"password": "******", "user": "al"}
        assert "hunter2" not in repr(masked)
        mock_logger.warning.assert_called_once()
        assert mock_logger.warning.call_args.kwargs["strategy"] == "password"

    def test_unprintable_token_fully_masked(self) -> None:
        """Test that a value whose str() raises is not passed through."""

        class Unprintable:
            def __str__(self) -> str:
                raise RuntimeError("no str")

        engine = _engine(MaskingRule("token", MaskingStrategy.TOKEN))
        outcome = engine.mask_field("token", Unprintable(), engine.rules[0])
        assert outcome.value == "******"
        assert isinstance(outcome.error, MaskingFieldFailure)

    def test_full_rule_uses_its_own_token(self) -> None:
        """Test that a FULL rule falls back to its own replacement token."""
        leaked: dict[str, object] = {"pin": "1234"}
        leaked["self"] = leaked
        engine = _engine(MaskingRule("pin", MaskingStrategy.FULL, mask_char="[hidden]"))
        assert engine.process({"pin": leaked}) == {"pin": "[hidden]"}


class TestDefaultRuleKeys:
    """Which keys the built-in rules recognize."""

    @pytest.mark.parametrize(
        "key",
        [
            "ssn",
            "SSN",
            "user_ssn",
            "userSsn",
            "ssnLast4",
            "social_security_number",
            "email",
            "user_email",
            "userEmail",
            "email_address",
            "Authorization",
            "Cookie",
            "Set-Cookie",
            "credentials",
            "private_key",
            "session_id",
            "x-auth",
            "x-api-key",
        ],
    )
    def test_sensitive_keys_matched(self, key: str) -> None:
        """Test that credential and identity keys have a default rule."""
        assert MaskingEngine().find_rule(key) is not None

    @pytest.mark.parametrize(
        "key", ["classname", "className", "email_verified", "author", "oauth_state", "tenant"]
    )
    def test_lookalike_keys_not_matched(self, key: str) -> None:
        """Test that keys merely containing a sensitive substring are left alone."""
        assert MaskingEngine().find_rule(key) is None

    def test_lookalike_values_kept(self) -> None:
        """Test that look-alike keys keep their values through process."""
        data = {"classname": "Widget", "email_verified": True, "ssn": "123-45-6789"}
        assert MaskingEngine().process(data) == {
            "classname": "Widget",
            "email_verified": True,
            "ssn": "***-**-6789",
        }


class TestTraversal:
    """Recursion, cycles and depth."""

    def test_nested_structures(self) -> None:
        """Test masking inside nested mappings and lists."""
        engine = MaskingEngine()
        data = {
            "user": {
                "profile": {"personal": {"ssn": "123-45-6789", "email": "john@example.com"}},
                "orders": [
                    {"payment": {"card_number": "5555-5555-5555-5555"}},
                    {"payment": {"card_number": "6666-6666-6666-6666"}},
                ],
            }
        }
        result = engine.process(data)
        assert result["user"]["profile"]["personal"] == {
            "ssn": "***-**-6789",
            "email": "j***@example.com",
        }
        assert result["user"]["orders"][0]["payment"]["card_number"] == "****-****-****-5555"
        assert result["user"]["orders"][1]["payment"]["card_number"] == "****-****-****-6666"

    def test_non_string_scalars_untouched(self) -> None:
        """Test that unmatched scalars are returned as-is."""
        engine = MaskingEngine()
        data = {"user_id": 12345, "is_active": True, "score": 95.5, "tags": ["a"], "metadata": None}
        assert engine.process(data) == data

    def test_input_not_mutated(self) -> None:
        """Test that process returns a new tree and leaves the input intact."""
        engine = MaskingEngine()
        data = {"password": "secret", "nested": {"email": "a@b.com", "items": [{"ssn": "123456789"}]}}
        original = copy.deepcopy(data)
        result = engine.process(data)
        assert data == original
        assert result is not data
        assert result["nested"] is not data["nested"]

    def test_self_reference_replaced(self) -> None:
        """Test that a cycle is cut with the circular marker."""
        engine = MaskingEngine()
        circular: dict = {"name": "test"}
        circular["self"] = circular
        assert engine.process(circular) == {"name": "test", "self": "[Circular]"}

    def test_list_cycle_replaced(self) -> None:
        """Test that cyclic lists terminate."""
        engine = MaskingEngine()
        items: list = [1]
        items.append(items)
        assert engine.process_value(items) == [1, "[Circular]"]

    def test_shared_reference_is_not_a_cycle(self) -> None:
        """Test that the same object reached twice (without a cycle) is walked twice."""
        engine = MaskingEngine()
        shared = {"email": "ann@example.com"}
        assert engine.process({"a": shared, "b": shared}) == {
            "a": {"email": "a**@example.com"},
            "b": {"email": "a**@example.com"},
        }

    def test_max_depth(self) -> None:
        """Test that containers beyond max_depth are replaced."""
        engine = _engine(max_depth=2)
        assert engine.process({"a": {"b": {"c": 1}}}) == {"a": {"b": "[MAX_DEPTH_REACHED]"}}

    def test_tuples_become_lists(self) -> None:
        """Test that tuples are returned as lists."""
        engine = MaskingEngine()
        assert engine.process({"pair": ("a", "b")}) == {"pair": ["a", "b"]}


class TestUrlMasking:
    """Query parameters of URL-looking strings."""

    def test_matching_query_parameter_masked(self) -> None:
        """Test that only matching parameters are masked."""
        engine = _engine(MaskingRule("api_key", MaskingStrategy.FULL))
        result = engine.process({"callback": "https://x.io/p?api_key=s3cr3t&q=1"})
        assert result == {"callback": "https://x.io/p?api_key=******&q=1"}

    def test_url_in_list(self) -> None:
        """Test that URL leaves inside sequences are handled."""
        engine = _engine(MaskingRule(KeyPattern.compile("token"), MaskingStrategy.FULL))
        assert engine.process_value(["ftp://files.example.com/f?token=abc"]) == [
            "ftp://files.example.com/f?token=******"
        ]

    def test_url_without_match_unchanged(self) -> None:
        """Test that URLs without matching parameters are returned unchanged."""
        engine = _engine(MaskingRule("api_key", MaskingStrategy.FULL))
        url = "https://x.io/search?q=hello%20world&page=2"
        assert engine.process_value(url) == url

    def test_non_url_string_unchanged(self) -> None:
        """Test that strings that are not URLs are not parsed."""
        engine = _engine(MaskingRule("api_key", MaskingStrategy.FULL))
        assert engine.process_value("see ?api_key=abc") == "see ?api_key=abc"


class TestStats:
    """Tests for get_stats."""

    def test_default_stats(self) -> None:
        """Test statistics of an engine with only the default rules."""
        stats = MaskingEngine().get_stats()
        assert stats["total_rules"] == len(DEFAULT_RULES)
        assert stats["default_rules"] == len(DEFAULT_RULES)
        assert stats["custom_rules"] == 0
        assert MaskingStrategy.PASSWORD in stats["strategies"]
        assert MaskingStrategy.EMAIL in stats["strategies"]

    def test_disabled_defaults(self) -> None:
        """Test that disabling default rules leaves only custom rules."""
        engine = _engine(MaskingRule("a"))
        stats = engine.get_stats()
        assert stats["total_rules"] == 1
        assert stats["strategies"] == [MaskingStrategy.FULL]
        assert engine.process({"password": "secret123"}) == {"password": "secret123"}

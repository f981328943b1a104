"""Tests for the error hierarchy."""

from keyrules.errors import (
    ConfigError,
    KeyrulesError,
    MissingRuleError,
    RuleParseError,
    UnknownSubjectError,
)


class TestErrorHierarchy:
    def test_parse_error_is_keyrules_error(self) -> None:
        assert issubclass(RuleParseError, KeyrulesError)

    def test_missing_rule_is_parse_error(self) -> None:
        assert issubclass(MissingRuleError, RuleParseError)

    def test_config_error_is_keyrules_error(self) -> None:
        assert issubclass(ConfigError, KeyrulesError)

    def test_unknown_subject_is_keyrules_error(self) -> None:
        assert issubclass(UnknownSubjectError, KeyrulesError)


class TestRuleParseError:
    def test_without_path(self) -> None:
        err = RuleParseError("bad value")
        assert err.detail == "bad value"
        assert err.path is None
        assert str(err) == "bad value"

    def test_with_path(self) -> None:
        err = RuleParseError("bad value").with_path("/etc/x.keyrules")
        assert err.path == "/etc/x.keyrules"
        assert str(err) == "/etc/x.keyrules: bad value"


class TestMissingRuleError:
    def test_attributes(self) -> None:
        err = MissingRuleError("Ghost")
        assert err.section == "Ghost"
        assert "Missing rule: 'Ghost'" in str(err)

    def test_with_path_keeps_type(self) -> None:
        err = MissingRuleError("Ghost").with_path("f.keyrules")
        assert isinstance(err, MissingRuleError)
        assert err.section == "Ghost"
        assert err.path == "f.keyrules"

"""Smoke test to verify the project scaffolding works."""

from __future__ import annotations


def test_import() -> None:
    import keyrules

    assert keyrules.__version__ == "0.1.0"


def test_cli_entrypoint() -> None:
    from keyrules.cli import main

    assert callable(main)


def test_policy_imports() -> None:
    from keyrules.policy import (
        PolicyChain,
        Rule,
        RuleEvaluator,
        RuleSet,
        SubjectContext,
        Verdict,
        load_chain,
        parse_rule_file,
    )

    assert PolicyChain is not None
    assert Rule is not None
    assert RuleSet is not None
    assert RuleEvaluator is not None
    assert SubjectContext is not None
    assert Verdict is not None
    assert callable(load_chain)
    assert callable(parse_rule_file)


def test_lazy_import_from_keyrules() -> None:
    import keyrules

    assert keyrules.KeyfileAuthority is not None
    assert keyrules.AuthorityConfig is not None

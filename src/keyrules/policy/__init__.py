"""Policy subsystem: rule file compilation and evaluation."""

from keyrules.policy.chain import (
    Diagnostic,
    LoadReport,
    discover_rule_files,
    load_chain,
    rules_file_sort_key,
)
from keyrules.policy.evaluator import RuleEvaluator, rule_matches
from keyrules.policy.models import (
    Constraint,
    Identity,
    PolicyChain,
    Rule,
    RuleSet,
    SubjectContext,
    UnixGroup,
    UnixNetgroup,
    UnixUser,
    Verdict,
    parse_identity,
)
from keyrules.policy.parser import parse_rule_file, parse_rules

__all__ = [
    "Constraint",
    "Diagnostic",
    "Identity",
    "LoadReport",
    "PolicyChain",
    "Rule",
    "RuleEvaluator",
    "RuleSet",
    "SubjectContext",
    "UnixGroup",
    "UnixNetgroup",
    "UnixUser",
    "Verdict",
    "discover_rule_files",
    "load_chain",
    "parse_identity",
    "parse_rule_file",
    "parse_rules",
    "rule_matches",
    "rules_file_sort_key",
]

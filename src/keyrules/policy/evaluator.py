"""RuleEvaluator: walk a :class:`PolicyChain` against a subject.

Pure logic, no I/O.  Verdicts are first-match-wins over the ``normal`` lists
in chain order; administrator identities are collected additively from every
applicable rule in the ``admin`` lists.
"""

from __future__ import annotations

import logging

from keyrules.policy.models import (
    ACTION_MATCH_ALL,
    Constraint,
    Identity,
    PolicyChain,
    Rule,
    SubjectContext,
    UnixGroup,
    UnixNetgroup,
    UnixUser,
    Verdict,
)

logger = logging.getLogger(__name__)

_ACTION_CONSTRAINTS = Constraint.ACTIONS | Constraint.ACTION_CONTAINS
# In admin rules these fields name the administrators, not the subject.
_IDENTITY_CONSTRAINTS = Constraint.UNIX_GROUPS | Constraint.UNIX_NAMES | Constraint.NET_GROUPS


def _action_matches(rule: Rule, action_id: str) -> bool:
    if rule.has(Constraint.ACTIONS):
        if ACTION_MATCH_ALL in rule.actions or action_id in rule.actions:
            return True
    if rule.has(Constraint.ACTION_CONTAINS):
        if any(part in action_id for part in rule.action_contains):
            return True
    return False


def rule_matches(
    rule: Rule,
    context: SubjectContext,
    action_id: str,
    *,
    ignore: Constraint = Constraint.NONE,
) -> bool:
    """Return whether every constraint present on *rule* holds.

    Absent constraints (and those in *ignore*) do not take part, so a rule
    with no constraints matches everything.
    """
    present = rule.constraints & ~ignore

    if present & _ACTION_CONSTRAINTS and not _action_matches(rule, action_id):
        return False
    if present & Constraint.UNIX_GROUPS and context.groups.isdisjoint(rule.unix_groups):
        return False
    if present & Constraint.NET_GROUPS and context.net_groups.isdisjoint(rule.net_groups):
        return False
    if present & Constraint.UNIX_NAMES and context.user_name not in rule.unix_names:
        return False
    if present & Constraint.SUBJECT_ACTIVE and context.is_active != rule.require_active:
        return False
    if present & Constraint.SUBJECT_LOCAL and context.is_local != rule.require_local:
        return False
    return True


class RuleEvaluator:
    """Evaluate subjects against a compiled chain."""

    def __init__(self, *, dedupe_admins: bool = True) -> None:
        self._dedupe_admins = dedupe_admins

    def evaluate(
        self,
        chain: PolicyChain,
        context: SubjectContext,
        action_id: str,
        implicit: Verdict,
    ) -> Verdict:
        """Return the verdict for *action_id*.

        Resolution order:
        1. Rule sets in chain order, rules in declaration order.
        2. A satisfied rule with ``Result`` decides; an unsatisfied rule with
           ``ResultInverse`` decides.
        3. *implicit*: nothing decided.
        """
        for rule_set in chain:
            for rule in rule_set.normal:
                if rule.is_inert:
                    continue
                satisfied = rule_matches(rule, context, action_id)
                if satisfied and rule.result is not None:
                    logger.debug("%s [%s]: %s", rule_set.path, rule.id, rule.result.value)
                    return rule.result
                if not satisfied and rule.result_inverse is not None:
                    logger.debug(
                        "%s [%s]: inverse %s", rule_set.path, rule.id, rule.result_inverse.value
                    )
                    return rule.result_inverse
        return implicit

    def resolve_admins(
        self,
        chain: PolicyChain,
        context: SubjectContext,
        action_id: str,
    ) -> list[Identity]:
        """Collect administrator identities from every applicable admin rule.

        An empty list means no rule named an administrator; the caller picks
        the fallback.
        """
        identities: list[Identity] = []
        for rule_set in chain:
            for rule in rule_set.admin:
                if not rule_matches(rule, context, action_id, ignore=_IDENTITY_CONSTRAINTS):
                    continue
                identities.extend(UnixUser(name=name) for name in rule.unix_names)
                identities.extend(UnixGroup(name=name) for name in rule.unix_groups)
                identities.extend(UnixNetgroup(name=name) for name in rule.net_groups)

        if self._dedupe_admins:
            identities = list(dict.fromkeys(identities))
        return identities

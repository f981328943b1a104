"""Shared CLI output formatters."""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.table import Table

if TYPE_CHECKING:
    from keyrules.policy.chain import LoadReport
    from keyrules.policy.models import Identity, PolicyChain, Rule, Verdict

console = Console()


def print_verdict(action_id: str, verdict: Verdict, *, as_json: bool = False) -> None:
    if as_json:
        console.print_json(json.dumps({"action_id": action_id, "verdict": verdict.value}))
        return
    console.print(f"{escape(action_id)}: [bold]{verdict.value}[/bold]")


def print_admins(identities: list[Identity], *, as_json: bool = False) -> None:
    if as_json:
        console.print_json(json.dumps([str(i) for i in identities]))
        return
    for identity in identities:
        console.print(escape(str(identity)))


def print_report(report: LoadReport) -> None:
    """Print which files were compiled and which were rejected."""
    failed = {d.path for d in report.diagnostics}
    for path in report.loaded:
        console.print(f"[green]ok[/green]     {escape(path)}", soft_wrap=True)
    for diag in report.diagnostics:
        console.print(f"[red]error[/red]  {escape(str(diag))}", soft_wrap=True)
    console.print(
        f"\n{len(report.loaded)} rule file(s) compiled, {len(failed)} problem(s)."
    )


def print_chain_table(chain: PolicyChain) -> None:
    """Pretty-print every rule in chain order."""
    table = Table(title="Policy Chain")
    table.add_column("File", style="cyan")
    table.add_column("List")
    table.add_column("Rule", no_wrap=True)
    table.add_column("Match")
    table.add_column("Result")

    for rule_set in chain:
        for kind, rules in (("normal", rule_set.normal), ("admin", rule_set.admin)):
            for rule in rules:
                table.add_row(
                    Path(rule_set.path).name,
                    kind,
                    rule.id,
                    _truncate(_describe_match(rule)),
                    _describe_result(rule),
                )

    console.print(table)


def _describe_match(rule: Rule) -> str:
    parts: list[str] = []
    if rule.actions:
        parts.append("actions=" + ",".join(rule.actions))
    if rule.action_contains:
        parts.append("contains=" + ",".join(rule.action_contains))
    if rule.unix_groups:
        parts.append("groups=" + ",".join(rule.unix_groups))
    if rule.net_groups:
        parts.append("netgroups=" + ",".join(rule.net_groups))
    if rule.unix_names:
        parts.append("users=" + ",".join(rule.unix_names))
    if rule.require_active is not None:
        parts.append(f"active={str(rule.require_active).lower()}")
    if rule.require_local is not None:
        parts.append(f"local={str(rule.require_local).lower()}")
    return " ".join(parts) or "*"


def _describe_result(rule: Rule) -> str:
    parts: list[str] = []
    if rule.result is not None:
        parts.append(rule.result.value)
    if rule.result_inverse is not None:
        parts.append(f"else {rule.result_inverse.value}")
    return " ".join(parts) or "-"


def _truncate(text: str, max_len: int = 80) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."

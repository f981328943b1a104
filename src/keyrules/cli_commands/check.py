"""``keyrules check`` / ``keyrules admins``: query the compiled rules."""

from __future__ import annotations

import logging
from typing import Any, Callable

import click

from keyrules.cli_commands._common import build_config, rules_options
from keyrules.cli_commands._output import print_admins, print_verdict
from keyrules.policy.models import SubjectContext, Verdict

logger = logging.getLogger(__name__)

_VERDICTS = [v.value for v in Verdict]


def subject_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the options describing the subject being authorized."""
    func = click.option(
        "--active/--inactive", "is_active", default=True, help="Session is active."
    )(func)
    func = click.option(
        "--local/--remote", "is_local", default=True, help="Session is local."
    )(func)
    func = click.option(
        "--netgroup", "netgroups", multiple=True, help="Netgroup membership. Repeatable."
    )(func)
    func = click.option(
        "--group",
        "groups",
        multiple=True,
        help="Unix group membership. Repeatable; looked up from the host when omitted.",
    )(func)
    func = click.option("--uid", type=int, default=None, help="Subject uid.")(func)
    func = click.option("--user", "-u", required=True, help="Subject user name.")(func)
    return func


def build_subject(
    user: str,
    uid: int | None,
    groups: tuple[str, ...],
    netgroups: tuple[str, ...],
    is_local: bool,
    is_active: bool,
) -> SubjectContext:
    """Build the subject from options, filling gaps from the host databases."""
    if not groups or uid is None:
        from keyrules.authority.host import subject_for_user
        from keyrules.errors import UnknownSubjectError

        try:
            host = subject_for_user(user)
        except UnknownSubjectError:
            logger.info("User %s not found on this host; using options only", user)
        else:
            groups = groups or tuple(host.groups)
            uid = host.uid if uid is None else uid

    return SubjectContext(
        uid=-1 if uid is None else uid,
        user_name=user,
        groups=frozenset(groups),
        net_groups=frozenset(netgroups),
        is_local=is_local,
        is_active=is_active,
    )


@click.command()
@click.argument("action_id")
@subject_options
@click.option(
    "--implicit",
    type=click.Choice(_VERDICTS),
    default=Verdict.NO.value,
    show_default=True,
    help="Verdict returned when no rule decides.",
)
@rules_options
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
def check(
    action_id: str,
    user: str,
    uid: int | None,
    groups: tuple[str, ...],
    netgroups: tuple[str, ...],
    is_local: bool,
    is_active: bool,
    implicit: str,
    config_file: str | None,
    rules_dirs: tuple[str, ...],
    suffix: str | None,
    as_json: bool,
) -> None:
    """Print the verdict for a subject performing ACTION_ID."""
    from keyrules.authority.authority import KeyfileAuthority

    authority = KeyfileAuthority(build_config(config_file, rules_dirs, suffix))
    subject = build_subject(user, uid, groups, netgroups, is_local, is_active)
    verdict = authority.evaluate(subject, action_id, Verdict(implicit))
    print_verdict(action_id, verdict, as_json=as_json)


@click.command()
@click.argument("action_id", required=False, default="")
@subject_options
@rules_options
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
def admins(
    action_id: str,
    user: str,
    uid: int | None,
    groups: tuple[str, ...],
    netgroups: tuple[str, ...],
    is_local: bool,
    is_active: bool,
    config_file: str | None,
    rules_dirs: tuple[str, ...],
    suffix: str | None,
    as_json: bool,
) -> None:
    """List the administrators who may authenticate for ACTION_ID."""
    from keyrules.authority.authority import KeyfileAuthority

    authority = KeyfileAuthority(build_config(config_file, rules_dirs, suffix))
    subject = build_subject(user, uid, groups, netgroups, is_local, is_active)
    print_admins(authority.resolve_admins(subject, action_id), as_json=as_json)

"""KeyfileAuthority: owns the compiled chain and answers requests.

The authority is the only owner of the current :class:`PolicyChain`.  A
reload compiles a complete new chain off to the side and then swaps one
reference, so a concurrent request sees either the old chain or the new one.
Reloads themselves are serialized with a lock.

Typical usage::

    authority = KeyfileAuthority(AuthorityConfig(rules_dirs=["/etc/rules.d"]))
    authority.add_changed_listener(lambda report: notify_clients())
    with authority:
        verdict = authority.evaluate(context, "org.example.reboot", Verdict.AUTH_ADMIN)
"""

from __future__ import annotations

import logging
import threading
from typing import Callable

from keyrules import __version__
from keyrules.authority.watcher import DirectoryWatcher
from keyrules.config import AuthorityConfig
from keyrules.policy.chain import LoadReport, load_chain
from keyrules.policy.evaluator import RuleEvaluator
from keyrules.policy.models import Identity, PolicyChain, SubjectContext, Verdict
from keyrules.utils.telemetry import (
    ATTR_ACTION_ID,
    ATTR_ADMIN_COUNT,
    ATTR_IMPLICIT,
    ATTR_RULE_FILES,
    ATTR_RULE_FILES_FAILED,
    ATTR_SUBJECT_ACTIVE,
    ATTR_SUBJECT_LOCAL,
    ATTR_USER_NAME,
    ATTR_VERDICT,
    get_tracer,
)

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

ChangedListener = Callable[[LoadReport], None]


class KeyfileAuthority:
    """Rule-file backed authority.

    Loads the chain on construction.  Call :meth:`start` (or use the
    authority as a context manager) to reload automatically when the rule
    directories change.
    """

    name = "keyfile"
    features = ("temporary_authorization",)

    def __init__(
        self,
        config: AuthorityConfig | None = None,
        *,
        evaluator: RuleEvaluator | None = None,
    ) -> None:
        self._config = config or AuthorityConfig()
        self._evaluator = evaluator or RuleEvaluator(dedupe_admins=self._config.dedupe_admins)
        self._reload_lock = threading.Lock()
        self._listeners: list[ChangedListener] = []
        self._watcher: DirectoryWatcher | None = None
        self._chain = PolicyChain.empty()
        self._last_report = self._load()

    @property
    def config(self) -> AuthorityConfig:
        return self._config

    @property
    def version(self) -> str:
        return __version__

    @property
    def chain(self) -> PolicyChain:
        """The current chain.  Hold on to the returned value for a stable view."""
        return self._chain

    @property
    def last_report(self) -> LoadReport:
        return self._last_report

    @property
    def watcher(self) -> DirectoryWatcher | None:
        return self._watcher

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def _load(self) -> LoadReport:
        with self._reload_lock, _tracer.start_as_current_span("keyrules.reload") as span:
            report = load_chain(
                self._config.rules_dirs,
                suffix=self._config.rules_suffix,
                admin_group=self._config.admin_group,
            )
            self._chain = report.chain
            self._last_report = report
            span.set_attribute(ATTR_RULE_FILES, len(report.loaded))
            span.set_attribute(ATTR_RULE_FILES_FAILED, len(report.diagnostics))
        return report

    def reload(self) -> LoadReport:
        """Recompile every rule file, swap the chain in, notify listeners."""
        report = self._load()
        self._emit_changed(report)
        return report

    def add_changed_listener(self, listener: ChangedListener) -> None:
        """Register *listener* to be called after every reload."""
        self._listeners.append(listener)

    def remove_changed_listener(self, listener: ChangedListener) -> None:
        self._listeners.remove(listener)

    def _emit_changed(self, report: LoadReport) -> None:
        for listener in list(self._listeners):
            try:
                listener(report)
            except Exception:
                logger.exception("Policy-changed listener %r failed", listener)

    def _on_rules_changed(self, path: str) -> None:
        self.reload()

    # ------------------------------------------------------------------
    # Watching
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Begin watching the rule directories (no-op if ``watch`` is off)."""
        if not self._config.watch or self._watcher is not None:
            return
        self._watcher = DirectoryWatcher(
            self._config.rules_dirs,
            self._on_rules_changed,
            suffix=self._config.rules_suffix,
        )
        self._watcher.start()

    def stop(self) -> None:
        watcher, self._watcher = self._watcher, None
        if watcher is not None:
            watcher.stop()

    def __enter__(self) -> KeyfileAuthority:
        self.start()
        return self

    def __exit__(self, *exc: object) -> None:
        self.stop()

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    def evaluate(
        self,
        context: SubjectContext,
        action_id: str,
        implicit: Verdict,
    ) -> Verdict:
        """Return the verdict for *context* performing *action_id*.

        *implicit* is returned when no rule decides.
        """
        chain = self._chain
        with _tracer.start_as_current_span("keyrules.evaluate") as span:
            span.set_attribute(ATTR_ACTION_ID, action_id)
            span.set_attribute(ATTR_USER_NAME, context.user_name)
            span.set_attribute(ATTR_SUBJECT_LOCAL, context.is_local)
            span.set_attribute(ATTR_SUBJECT_ACTIVE, context.is_active)
            span.set_attribute(ATTR_IMPLICIT, implicit.value)
            verdict = self._evaluator.evaluate(chain, context, action_id, implicit)
            span.set_attribute(ATTR_VERDICT, verdict.value)
        return verdict

    def resolve_admins(self, context: SubjectContext, action_id: str = "") -> list[Identity]:
        """Return the administrators who may authenticate for *action_id*.

        Falls back to ``config.default_admins`` when no admin rule applies.
        """
        chain = self._chain
        with _tracer.start_as_current_span("keyrules.resolve_admins") as span:
            span.set_attribute(ATTR_ACTION_ID, action_id)
            span.set_attribute(ATTR_USER_NAME, context.user_name)
            identities = self._evaluator.resolve_admins(chain, context, action_id)
            if not identities:
                identities = self._config.default_admin_identities()
            span.set_attribute(ATTR_ADMIN_COUNT, len(identities))
        return identities

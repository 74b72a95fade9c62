"""Failover decision and effect application."""

import structlog

from .config import Settings
from .dns_probe import DnsProber
from .forwarder import ForwarderConfigWriter
from .models import HealthState, ProbeResult, RunOutcome, Transition, TransitionKind
from .notifier import NtfyNotifier
from .reloader import ResolverReloader
from .run_lock import run_lock
from .state_store import StateStore

logger = structlog.get_logger()


def decide_transition(prior: HealthState | None, healthy: bool) -> Transition:
    """Decide what to do given the persisted state and the probe outcome.

    A healthy primary targets PRIMARY, otherwise BACKUP. If the target
    matches the persisted state nothing is done.
    """
    target = HealthState.PRIMARY if healthy else HealthState.BACKUP
    if prior == target:
        return Transition(kind=TransitionKind.NO_CHANGE, target=target, prior=prior)
    if target == HealthState.PRIMARY:
        return Transition(kind=TransitionKind.SWITCH_TO_PRIMARY, target=target, prior=prior)
    return Transition(kind=TransitionKind.SWITCH_TO_BACKUP, target=target, prior=prior)


class FailoverController:
    """Runs one failover check: lock, probe, decide, apply."""

    def __init__(
        self,
        settings: Settings,
        prober: DnsProber,
        writer: ForwarderConfigWriter,
        store: StateStore,
        reloader: ResolverReloader,
        notifier: NtfyNotifier,
    ) -> None:
        """Initialize controller with its collaborators."""
        self.settings = settings
        self.prober = prober
        self.writer = writer
        self.store = store
        self.reloader = reloader
        self.notifier = notifier

    @classmethod
    def from_settings(cls, settings: Settings) -> "FailoverController":
        """Build a controller wired to the real probe, files, reload and ntfy."""
        return cls(
            settings,
            prober=DnsProber(settings),
            writer=ForwarderConfigWriter(settings),
            store=StateStore(settings),
            reloader=ResolverReloader(settings),
            notifier=NtfyNotifier(settings),
        )

    def run(self) -> RunOutcome:
        """Run a single check under the run lock."""
        with run_lock(self.settings.lock_file_path) as acquired:
            if not acquired:
                return RunOutcome(skipped=True)
            return self._run_locked()

    def _run_locked(self) -> RunOutcome:
        prior = self.store.load()
        probe = self.prober.check_health()
        transition = decide_transition(prior, probe.healthy)

        outcome = RunOutcome(
            prior_state=prior,
            target_state=transition.target,
            transition=transition,
        )
        logger.info(
            "Failover decision",
            prior=prior.value if prior else None,
            target=transition.target.value,
            transition=transition.kind.value,
            responding_domain=probe.responding_domain,
        )

        if not transition.changed:
            self.resync(transition.target, outcome)
            return outcome

        self.apply(transition, probe, outcome)
        return outcome

    def resync(self, state: HealthState, outcome: RunOutcome) -> None:
        """Rewrite and reload the forwarder file if it no longer matches ``state``.

        A switch whose reload failed leaves the new file on disk under the
        old marker; if health then returns to the persisted state the file
        must be put back.
        """
        if self.writer.matches(state):
            return

        logger.warning("Forwarder config does not match persisted state, rewriting", state=state.value)
        self.writer.write(state)
        outcome.config_written = True
        outcome.reloaded = self.reloader.reload()
        if not outcome.reloaded:
            logger.error("Reload failed after rewrite; will retry next run", state=state.value)

    def apply(self, transition: Transition, probe: ProbeResult, outcome: RunOutcome) -> None:
        """Write config, reload, persist, then notify.

        A write failure propagates before anything else changes. State is
        persisted only after a successful reload so a failed reload is
        retried on the next run; the previous file is put back so the file
        on disk keeps matching the persisted state.
        """
        previous = self.writer.read_current()
        self.writer.write(transition.target)
        outcome.config_written = True

        if not self.reloader.reload():
            logger.error(
                "Reload failed, state not persisted; will retry next run",
                target=transition.target.value,
            )
            if previous is not None:
                self.writer.restore(previous)
            return
        outcome.reloaded = True

        self.store.save(transition.target)
        outcome.state_persisted = True

        if transition.is_initial:
            logger.info("Initial state established, no notification", state=transition.target.value)
            return

        event = self.notifier.build_event(transition, probe)
        outcome.notified = self.notifier.send(event)
        logger.info(
            "Switched DNS forwarding",
            direction=transition.kind.value,
            notified=outcome.notified,
        )

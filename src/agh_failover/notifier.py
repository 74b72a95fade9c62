"""ntfy notification for DNS failover events."""

from datetime import datetime

import requests
import structlog

from .config import Settings
from .models import HealthState, NotificationEvent, ProbeResult, Transition, TransitionKind

logger = structlog.get_logger()


class NtfyNotifier:
    """Sends push notifications to an ntfy topic."""

    def __init__(self, settings: Settings, session: requests.Session | None = None) -> None:
        """Initialize ntfy notifier."""
        self.settings = settings
        self.session = session or requests.Session()

    def build_event(self, transition: Transition, probe: ProbeResult) -> NotificationEvent:
        """Build the message describing a switch."""
        if transition.kind == TransitionKind.SWITCH_TO_BACKUP:
            return NotificationEvent(
                title="DNS Failover: AdGuard Home DOWN",
                body=self._build_backup_body(probe.checked_at),
                priority="high",
                tags=("warning", "dns"),
            )
        if transition.kind == TransitionKind.SWITCH_TO_PRIMARY:
            return NotificationEvent(
                title="DNS Restored: AdGuard Home UP",
                body=self._build_recovery_body(probe),
                priority="default",
                tags=("white_check_mark", "dns"),
            )
        raise ValueError(f"No notification for transition {transition.kind.value}")

    def _build_backup_body(self, when: datetime) -> str:
        resolvers = ", ".join(
            f"{r.address} ({r.tls_hostname})" for r in self.settings.backup_resolvers
        )
        return (
            f"{self.settings.hostname_label}: AdGuard Home at {self.settings.primary_address} "
            f"is not answering DNS queries.\n"
            f"Switched Unbound to DNS over TLS: {resolvers}.\n"
            f"Content filtering is temporarily DISABLED until AdGuard Home recovers.\n"
            f"Time: {when.isoformat()}"
        )

    def _build_recovery_body(self, probe: ProbeResult) -> str:
        return (
            f"{self.settings.hostname_label}: AdGuard Home at {self.settings.primary_address} "
            f"is answering again (probe: {probe.responding_domain or 'n/a'}).\n"
            f"Switched Unbound back to {HealthState.PRIMARY.value} forwarding. "
            f"Content filtering is active.\n"
            f"Time: {probe.checked_at.isoformat()}"
        )

    def send(self, event: NotificationEvent) -> bool:
        """Post ``event`` to ntfy. Failures are logged, never raised."""
        if not self.settings.ntfy_enabled:
            logger.info("ntfy token not configured, skipping notification", title=event.title)
            return False

        headers = {
            "Authorization": f"Bearer {self.settings.ntfy_token}",
            "Title": event.title,
            "Priority": event.priority,
        }
        if event.tags:
            headers["Tags"] = ",".join(event.tags)

        try:
            response = self.session.post(
                self.settings.ntfy_endpoint,
                data=event.body.encode("utf-8"),
                headers=headers,
                timeout=self.settings.notify_timeout_seconds,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(
                "Failed to send ntfy notification",
                endpoint=self.settings.ntfy_endpoint,
                error=str(e),
            )
            return False

        logger.info("ntfy notification sent", title=event.title, status=response.status_code)
        return True

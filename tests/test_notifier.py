"""Tests for ntfy notifier."""

from datetime import UTC, datetime
from unittest.mock import MagicMock

import pytest
import requests

from agh_failover.config import Settings
from agh_failover.models import (
    HealthState,
    NotificationEvent,
    ProbeResult,
    Transition,
    TransitionKind,
)
from agh_failover.notifier import NtfyNotifier


class TestNtfyNotifier:
    """Tests for NtfyNotifier class."""

    @pytest.fixture
    def probe_time(self) -> datetime:
        return datetime(2024, 1, 15, 10, 0, 0, tzinfo=UTC)

    @pytest.fixture
    def event(self) -> NotificationEvent:
        return NotificationEvent(
            title="DNS Failover: AdGuard Home DOWN",
            body="body text",
            priority="high",
            tags=("warning", "dns"),
        )

    def test_build_backup_event(self, settings: Settings, probe_time: datetime) -> None:
        """Test the backup message carries the filtering caveat."""
        notifier = NtfyNotifier(settings, session=MagicMock())
        transition = Transition(
            kind=TransitionKind.SWITCH_TO_BACKUP,
            target=HealthState.BACKUP,
            prior=HealthState.PRIMARY,
        )
        probe = ProbeResult(healthy=False, checked_at=probe_time)

        event = notifier.build_event(transition, probe)

        assert event.title == "DNS Failover: AdGuard Home DOWN"
        assert event.priority == "high"
        assert event.tags == ("warning", "dns")
        assert "10.0.0.5" in event.body
        assert "1.1.1.1 (cloudflare-dns.com)" in event.body
        assert "filtering is temporarily DISABLED" in event.body
        assert "2024-01-15T10:00:00+00:00" in event.body

    def test_build_recovery_event(self, settings: Settings, probe_time: datetime) -> None:
        """Test the recovery message names the answering domain."""
        notifier = NtfyNotifier(settings, session=MagicMock())
        transition = Transition(
            kind=TransitionKind.SWITCH_TO_PRIMARY,
            target=HealthState.PRIMARY,
            prior=HealthState.BACKUP,
        )
        probe = ProbeResult(healthy=True, responding_domain="a.test", checked_at=probe_time)

        event = notifier.build_event(transition, probe)

        assert event.title == "DNS Restored: AdGuard Home UP"
        assert event.priority == "default"
        assert "10.0.0.5" in event.body
        assert "a.test" in event.body
        assert "DISABLED" not in event.body

    def test_build_event_no_change_rejected(self, settings: Settings) -> None:
        """Test NO_CHANGE has no notification."""
        notifier = NtfyNotifier(settings, session=MagicMock())
        transition = Transition(
            kind=TransitionKind.NO_CHANGE,
            target=HealthState.PRIMARY,
            prior=HealthState.PRIMARY,
        )

        with pytest.raises(ValueError):
            notifier.build_event(transition, ProbeResult(healthy=True))

    def test_send_success(self, settings: Settings, event: NotificationEvent) -> None:
        """Test a successful post with bearer auth and ntfy headers."""
        session = MagicMock()
        session.post.return_value.status_code = 200
        notifier = NtfyNotifier(settings, session=session)

        assert notifier.send(event) is True

        session.post.assert_called_once()
        args, kwargs = session.post.call_args
        assert args[0] == "https://ntfy.example.test/opnsense-alerts"
        assert kwargs["data"] == b"body text"
        assert kwargs["headers"] == {
            "Authorization": "Bearer tk_test123",
            "Title": "DNS Failover: AdGuard Home DOWN",
            "Priority": "high",
            "Tags": "warning,dns",
        }
        assert kwargs["timeout"] == settings.notify_timeout_seconds

    def test_send_skipped_without_token(self, settings: Settings, event: NotificationEvent) -> None:
        """Test nothing is posted when ntfy is not configured."""
        settings.ntfy_token = None
        session = MagicMock()
        notifier = NtfyNotifier(settings, session=session)

        assert notifier.send(event) is False
        session.post.assert_not_called()

    def test_send_connection_error(self, settings: Settings, event: NotificationEvent) -> None:
        """Test connection errors are logged, not raised."""
        session = MagicMock()
        session.post.side_effect = requests.ConnectionError("unreachable")
        notifier = NtfyNotifier(settings, session=session)

        assert notifier.send(event) is False

    def test_send_http_error(self, settings: Settings, event: NotificationEvent) -> None:
        """Test HTTP error statuses are treated as delivery failures."""
        session = MagicMock()
        session.post.return_value.raise_for_status.side_effect = requests.HTTPError("403")
        notifier = NtfyNotifier(settings, session=session)

        assert notifier.send(event) is False

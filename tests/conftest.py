"""Pytest fixtures for DNS failover tests."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from agh_failover.config import Settings
from agh_failover.dns_probe import DnsProber
from agh_failover.models import ProbeResult
from agh_failover.notifier import NtfyNotifier
from agh_failover.reloader import ResolverReloader


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Create test settings with all files under tmp_path."""
    return Settings(
        primary_address="10.0.0.5",
        primary_port=53,
        probe_domains=["a.test", "b.test", "c.test"],
        probe_timeout_seconds=1.0,
        backup_resolvers=[
            "1.1.1.1@853#cloudflare-dns.com",
            "1.0.0.1@853#cloudflare-dns.com",
        ],
        tls_cert_bundle="/etc/ssl/cert.pem",
        forwarder_config_path=tmp_path / "unbound" / "agh_failover.conf",
        state_file_path=tmp_path / "db" / "agh_failover.state",
        lock_file_path=tmp_path / "run" / "agh_failover.lock",
        reload_command=["configctl", "unbound", "restart"],
        ntfy_url="https://ntfy.example.test",
        ntfy_topic="opnsense-alerts",
        ntfy_token="tk_test123",
    )


@pytest.fixture
def healthy_probe() -> ProbeResult:
    """Probe where the first domain answered."""
    return ProbeResult(healthy=True, responding_domain="a.test", attempted=["a.test"])


@pytest.fixture
def unhealthy_probe() -> ProbeResult:
    """Probe where every domain failed."""
    return ProbeResult(healthy=False, attempted=["a.test", "b.test", "c.test"])


@pytest.fixture
def mock_prober() -> MagicMock:
    """Create a mock DNS prober."""
    return MagicMock(spec=DnsProber)


@pytest.fixture
def mock_reloader() -> MagicMock:
    """Create a mock reloader that succeeds."""
    reloader = MagicMock(spec=ResolverReloader)
    reloader.reload.return_value = True
    return reloader


@pytest.fixture
def mock_notifier(settings: Settings) -> MagicMock:
    """Create a mock notifier that builds real events and reports sends as delivered."""
    real = NtfyNotifier(settings, session=MagicMock())
    notifier = MagicMock(spec=NtfyNotifier)
    notifier.build_event.side_effect = real.build_event
    notifier.send.return_value = True
    return notifier

"""Data models for AdGuard Home DNS failover."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum


class HealthState(Enum):
    """Which upstream the resolver currently forwards to."""

    PRIMARY = "primary"
    BACKUP = "backup"

    @classmethod
    def from_marker(cls, text: str) -> "HealthState | None":
        """Parse a persisted state marker, None if empty or unrecognised."""
        value = text.strip().lower()
        for state in cls:
            if state.value == value:
                return state
        return None


class TransitionKind(Enum):
    """Outcome of comparing the target state with the persisted one."""

    NO_CHANGE = "no_change"
    SWITCH_TO_PRIMARY = "switch_to_primary"
    SWITCH_TO_BACKUP = "switch_to_backup"


@dataclass(frozen=True)
class Transition:
    """Decision produced from a prior state and a probe outcome."""

    kind: TransitionKind
    target: HealthState
    prior: HealthState | None = None

    @property
    def changed(self) -> bool:
        """Check if the forwarder needs to be switched."""
        return self.kind != TransitionKind.NO_CHANGE

    @property
    def is_initial(self) -> bool:
        """Check if there was no known prior state."""
        return self.prior is None


@dataclass(frozen=True)
class BackupResolver:
    """A DNS-over-TLS upstream used while the primary is down."""

    address: str
    tls_hostname: str
    port: int = 853

    @classmethod
    def parse(cls, spec: str) -> "BackupResolver":
        """Parse Unbound's ``address@port#hostname`` notation."""
        spec = spec.strip()
        if "#" not in spec:
            raise ValueError(f"Backup resolver {spec!r} is missing a #tls-hostname")
        host_part, tls_hostname = spec.split("#", 1)
        if not tls_hostname:
            raise ValueError(f"Backup resolver {spec!r} has an empty tls-hostname")

        port = 853
        address = host_part
        if "@" in host_part:
            address, port_str = host_part.rsplit("@", 1)
            if not port_str.isdigit():
                raise ValueError(f"Backup resolver {spec!r} has an invalid port")
            port = int(port_str)
        if not address:
            raise ValueError(f"Backup resolver {spec!r} has no address")
        if not 1 <= port <= 65535:
            raise ValueError(f"Backup resolver {spec!r} port out of range")
        return cls(address=address, tls_hostname=tls_hostname, port=port)

    def to_forward_addr(self) -> str:
        """Render as an Unbound forward-addr value."""
        return f"{self.address}@{self.port}#{self.tls_hostname}"


@dataclass
class ProbeResult:
    """Result of probing the primary resolver."""

    healthy: bool
    responding_domain: str | None = None
    attempted: list[str] = field(default_factory=list)
    checked_at: datetime = field(default_factory=lambda: datetime.now(UTC))


@dataclass(frozen=True)
class NotificationEvent:
    """Message sent to ntfy on a state transition."""

    title: str
    body: str
    priority: str = "default"
    tags: tuple[str, ...] = ()


@dataclass
class RunOutcome:
    """What a single controller invocation did."""

    skipped: bool = False
    prior_state: HealthState | None = None
    target_state: HealthState | None = None
    transition: Transition | None = None
    config_written: bool = False
    reloaded: bool = False
    state_persisted: bool = False
    notified: bool = False

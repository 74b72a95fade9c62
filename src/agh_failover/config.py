"""Configuration management for AdGuard Home DNS failover."""

import json
from pathlib import Path
from typing import Annotated, Any

import dns.inet
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from .models import BackupResolver

PLACEHOLDER_TOKEN = "PLACEHOLDER_TOKEN"


def _split_csv(value: Any) -> Any:
    if isinstance(value, str):
        stripped = value.strip()
        if stripped.startswith("["):
            return json.loads(stripped)
        return [item.strip() for item in stripped.split(",") if item.strip()]
    return value


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="AGH_FAILOVER_",
        case_sensitive=False,
    )

    # Primary (filtering) resolver
    primary_address: str = Field(default="192.168.1.20", description="AdGuard Home address")
    primary_port: int = Field(default=53, ge=1, le=65535, description="AdGuard Home DNS port")

    # Health probe
    probe_domains: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: ["google.com", "cloudflare.com", "quad9.net"],
        min_length=1,
        description="Domains resolved against the primary, in order",
    )
    probe_timeout_seconds: float = Field(default=2.0, gt=0, description="Per-probe timeout")

    # Backup (DNS-over-TLS) resolvers
    backup_resolvers: Annotated[list[BackupResolver], NoDecode] = Field(
        default_factory=lambda: [
            BackupResolver.parse("1.1.1.1@853#cloudflare-dns.com"),
            BackupResolver.parse("1.0.0.1@853#cloudflare-dns.com"),
        ],
        min_length=1,
        description="DoT upstreams in address@port#hostname form",
    )
    tls_cert_bundle: str | None = Field(
        default="/etc/ssl/cert.pem", description="CA bundle for DoT certificate validation"
    )

    # Files owned by the controller
    forwarder_config_path: Path = Field(
        default=Path("/var/unbound/etc/agh_failover.conf"),
        description="Unbound forward-zone include file",
    )
    state_file_path: Path = Field(
        default=Path("/var/db/agh_failover.state"), description="Last applied state marker"
    )
    lock_file_path: Path = Field(
        default=Path("/var/run/agh_failover.lock"), description="Run lock file"
    )

    # Downstream resolver reload
    reload_command: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: ["configctl", "unbound", "restart"],
        min_length=1,
        description="Command restarting Unbound",
    )
    reload_timeout_seconds: int = Field(default=30, gt=0, description="Reload command timeout")

    # ntfy notifications
    ntfy_url: str = Field(default="https://ntfy.radiowaves.app", description="ntfy server URL")
    ntfy_topic: str = Field(default="opnsense-alerts", description="ntfy topic")
    ntfy_token: str | None = Field(default=None, description="ntfy access token")
    notify_timeout_seconds: int = Field(default=10, gt=0, description="ntfy request timeout")
    hostname_label: str = Field(default="OPNsense", description="Host name used in messages")

    @field_validator("primary_address")
    @classmethod
    def _check_primary_address(cls, value: str) -> str:
        value = value.strip()
        if not dns.inet.is_address(value):
            raise ValueError(f"primary_address must be an IP address, got {value!r}")
        return value

    @field_validator("probe_domains", mode="before")
    @classmethod
    def _parse_probe_domains(cls, value: Any) -> Any:
        return _split_csv(value)

    @field_validator("reload_command", mode="before")
    @classmethod
    def _parse_reload_command(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip().startswith("["):
            return value.split()
        return _split_csv(value)

    @field_validator("backup_resolvers", mode="before")
    @classmethod
    def _parse_backup_resolvers(cls, value: Any) -> Any:
        value = _split_csv(value)
        if isinstance(value, list):
            return [BackupResolver.parse(v) if isinstance(v, str) else v for v in value]
        return value

    @property
    def ntfy_enabled(self) -> bool:
        """Check if ntfy notifications are configured."""
        return bool(self.ntfy_token and self.ntfy_token != PLACEHOLDER_TOKEN)

    @property
    def ntfy_endpoint(self) -> str:
        """Full URL notifications are posted to."""
        return f"{self.ntfy_url.rstrip('/')}/{self.ntfy_topic}"


def get_settings() -> Settings:
    """Get application settings."""
    return Settings()

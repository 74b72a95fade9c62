"""Unbound forward-zone rendering and writing."""

import os
import tempfile
from pathlib import Path

import structlog

from .config import Settings
from .exceptions import ForwarderWriteError
from .models import HealthState

logger = structlog.get_logger()

HEADER = "# Managed by agh-failover. Overwritten on every switch, do not edit.\n"


def render_forwarder_config(state: HealthState, settings: Settings) -> str:
    """Render the forward-zone stanza for the given state.

    PRIMARY forwards everything exclusively to AdGuard Home so filtering
    stays in effect. BACKUP forwards to the DoT resolvers with the TLS
    hostname asserted on each upstream.
    """
    lines = [HEADER.rstrip("\n"), f"# mode: {state.value}"]

    if state == HealthState.PRIMARY:
        lines += [
            "forward-zone:",
            '    name: "."',
            f"    forward-addr: {settings.primary_address}@{settings.primary_port}",
        ]
    else:
        if settings.tls_cert_bundle:
            lines += [
                "server:",
                f'    tls-cert-bundle: "{settings.tls_cert_bundle}"',
            ]
        lines += [
            "forward-zone:",
            '    name: "."',
            "    forward-tls-upstream: yes",
        ]
        lines += [
            f"    forward-addr: {resolver.to_forward_addr()}"
            for resolver in settings.backup_resolvers
        ]

    return "\n".join(lines) + "\n"


class ForwarderConfigWriter:
    """Atomically replaces the forwarder include file."""

    def __init__(self, settings: Settings) -> None:
        """Initialize writer."""
        self.settings = settings

    @property
    def path(self) -> Path:
        return self.settings.forwarder_config_path

    def read_current(self) -> str | None:
        """Return the file's current contents, None if missing or unreadable."""
        try:
            return self.path.read_text()
        except OSError:
            return None

    def matches(self, state: HealthState) -> bool:
        """Check if the file on disk is exactly the rendering for ``state``."""
        return self.read_current() == render_forwarder_config(state, self.settings)

    def write(self, state: HealthState) -> str:
        """Write the config for ``state`` and return the rendered text.

        Raises:
            ForwarderWriteError: If the file cannot be written
        """
        content = render_forwarder_config(state, self.settings)
        self._replace(content)
        logger.info("Wrote forwarder config", path=str(self.path), mode=state.value)
        return content

    def restore(self, content: str) -> None:
        """Put back previously read contents.

        Raises:
            ForwarderWriteError: If the file cannot be written
        """
        self._replace(content)
        logger.info("Restored previous forwarder config", path=str(self.path))

    def _replace(self, content: str) -> None:
        tmp_name: str | None = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            os.chmod(tmp_name, 0o644)
            os.replace(tmp_name, self.path)
        except OSError as e:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise ForwarderWriteError(f"Failed to write {self.path}: {e}") from e

"""Restart of the downstream Unbound resolver."""

import subprocess

import structlog

from .config import Settings

logger = structlog.get_logger()


class ResolverReloader:
    """Runs the configured reload command."""

    def __init__(self, settings: Settings) -> None:
        """Initialize reloader."""
        self.settings = settings

    def reload(self) -> bool:
        """Reload the resolver so the new forwarder file takes effect."""
        command = self.settings.reload_command
        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=self.settings.reload_timeout_seconds,
                check=False,
            )
        except subprocess.TimeoutExpired:
            logger.error(
                "Resolver reload timed out",
                command=command,
                timeout=self.settings.reload_timeout_seconds,
            )
            return False
        except OSError as e:
            logger.error("Failed to run reload command", command=command, error=str(e))
            return False

        if result.returncode != 0:
            logger.error(
                "Resolver reload failed",
                command=command,
                returncode=result.returncode,
                stderr=result.stderr.strip(),
            )
            return False

        logger.info("Resolver reloaded", command=command, output=result.stdout.strip())
        return True

"""Health probing of the primary DNS resolver."""

import dns.exception
import dns.resolver
import structlog

from .config import Settings
from .models import ProbeResult

logger = structlog.get_logger()


class DnsProber:
    """Resolves well-known domains against the primary resolver."""

    def __init__(self, settings: Settings) -> None:
        """Initialize prober."""
        self.settings = settings
        self.resolver = self._build_resolver()

    def _build_resolver(self) -> dns.resolver.Resolver:
        """Build a resolver pinned to the primary, ignoring the host's resolv.conf."""
        resolver = dns.resolver.Resolver(configure=False)
        resolver.nameservers = [self.settings.primary_address]
        resolver.port = self.settings.primary_port
        resolver.timeout = self.settings.probe_timeout_seconds
        resolver.lifetime = self.settings.probe_timeout_seconds
        return resolver

    def check_health(self) -> ProbeResult:
        """Probe the primary resolver.

        Domains are tried in order and the first one that resolves
        short-circuits the rest. The primary is unhealthy only if every
        probe fails.
        """
        attempted: list[str] = []
        for domain in self.settings.probe_domains:
            attempted.append(domain)
            if self.resolve(domain):
                logger.debug("Probe succeeded", domain=domain)
                return ProbeResult(healthy=True, responding_domain=domain, attempted=attempted)

        logger.warning(
            "All probes failed",
            primary=self.settings.primary_address,
            domains=attempted,
        )
        return ProbeResult(healthy=False, attempted=attempted)

    def resolve(self, domain: str) -> bool:
        """Resolve an A record against the primary, True if an answer came back."""
        try:
            answer = self.resolver.resolve(domain, "A", search=False)
        except dns.exception.DNSException as e:
            # NXDOMAIN, NoAnswer, NoNameservers and timeouts all land here
            logger.info(
                "Probe failed",
                domain=domain,
                primary=self.settings.primary_address,
                error_type=type(e).__name__,
                error=str(e),
            )
            return False
        return len(answer) > 0

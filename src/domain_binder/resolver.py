"""
IPv4 resolution of the hosting provider's default hostname.

Apex domains cannot carry a CNAME at most providers, so in A_RECORD mode the
default hostname is resolved and its first IPv4 address is published instead.
"""

from typing import Optional

import dns.asyncresolver
import dns.exception
import dns.rdatatype
import dns.resolver

from .audit_logger import AuditLogger


# TEST-NET-1 address returned in simulation mode
SIMULATED_ADDRESS = "192.0.2.1"


class HostnameResolver:
    """Resolves hostnames to IPv4 addresses with dnspython."""

    COMPONENT = "Resolver"

    def __init__(
        self,
        resolver: Optional[dns.asyncresolver.Resolver] = None,
        lifetime: float = 5.0,
        logger: Optional[AuditLogger] = None,
        simulation_mode: bool = False,
    ) -> None:
        self._resolver = resolver
        self._lifetime = lifetime
        self._logger = logger
        self._simulation_mode = simulation_mode

    def _get_resolver(self) -> dns.asyncresolver.Resolver:
        if self._resolver is None:
            self._resolver = dns.asyncresolver.Resolver()
            self._resolver.lifetime = self._lifetime
        return self._resolver

    async def resolve_ipv4(self, hostname: str) -> Optional[str]:
        """
        Return the first IPv4 address of a hostname.

        Returns:
            The address, or None if the name has no A record or the lookup fails
        """
        if self._simulation_mode:
            return SIMULATED_ADDRESS

        try:
            answer = await self._get_resolver().resolve(hostname, dns.rdatatype.A)
        except dns.resolver.NXDOMAIN:
            self._log(f"{hostname} does not exist", {"hostname": hostname, "rcode": "NXDOMAIN"})
            return None
        except dns.resolver.NoAnswer:
            self._log(f"{hostname} has no A record", {"hostname": hostname, "rcode": "NODATA"})
            return None
        except dns.exception.Timeout:
            self._log(f"Lookup of {hostname} timed out", {"hostname": hostname, "rcode": "TIMEOUT"})
            return None
        except dns.exception.DNSException as e:
            self._log(f"Lookup of {hostname} failed: {e}", {"hostname": hostname, "rcode": "ERROR"})
            return None

        addresses = [str(rdata.address) for rdata in answer]
        if not addresses:
            return None

        self._log(
            f"Resolved {hostname} to {addresses[0]}",
            {"hostname": hostname, "address": addresses[0]},
        )
        return addresses[0]

    def _log(self, message: str, data: dict) -> None:
        if self._logger:
            self._logger.debug(self.COMPONENT, message, data)

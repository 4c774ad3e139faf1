"""
Data models for the domain binder.

This module defines the values threaded through the validation workflow:
the analyzed domain, the hosting target, the validation token, the DNS
record requests and the workflow result.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Optional

from .enums import RecordType, WorkflowState
from .exceptions import ProviderError


# Value some provider APIs return in place of a missing token
NULL_SENTINEL = "null"


def is_absent(value: Optional[str]) -> bool:
    """Return True for None, empty/blank strings and the "null" sentinel."""
    return value is None or not value.strip() or value.strip() == NULL_SENTINEL


@dataclass(frozen=True)
class DomainSpec:
    """A custom domain and the root domain it belongs to."""

    full_domain: str
    root: str

    @property
    def is_apex(self) -> bool:
        return self.full_domain == self.root


@dataclass(frozen=True)
class HostingTarget:
    """A hosting resource identified by name and scope (resource group)."""

    name: str
    scope: str
    default_hostname: str = ""

    def with_default_hostname(self, hostname: str) -> "HostingTarget":
        """Return a copy with the default hostname set; it can be set once."""
        if self.default_hostname:
            raise ProviderError(
                code="hostname_already_set",
                message=f"Default hostname of {self.name} is already {self.default_hostname}",
                details={"current": self.default_hostname, "new": hostname},
            )
        return replace(self, default_hostname=hostname)


@dataclass(frozen=True)
class SourceRepository:
    """Source code location used to build the hosting resource."""

    url: str
    branch: str = "main"


@dataclass(frozen=True)
class ValidationInfo:
    """Raw validation values as reported by the hosting provider."""

    validation_token: Optional[str] = None
    domain_verification: Optional[str] = None


@dataclass(frozen=True)
class ValidationToken:
    """A domain ownership token obtained from the hosting provider."""

    value: str
    obtained_at: str
    domain_verification: Optional[str] = None

    @classmethod
    def now(cls, value: str, domain_verification: Optional[str] = None) -> "ValidationToken":
        domain_verification = None if is_absent(domain_verification) else domain_verification.strip()
        return cls(
            value=value.strip(),
            obtained_at=datetime.now(timezone.utc).isoformat(),
            domain_verification=domain_verification,
        )


@dataclass(frozen=True)
class DnsRecordRequest:
    """A single DNS record to be written."""

    type: RecordType
    name: str
    content: str
    ttl: int = 600
    proxied: bool = False

    def to_cloudflare_body(self, send_proxied: bool = True) -> dict:
        """Request body for the Cloudflare dns_records endpoint."""
        body = {
            "type": self.type.value,
            "name": self.name,
            "content": self.content,
            "ttl": self.ttl,
        }
        if send_proxied:
            body["proxied"] = self.proxied
        return body

    def to_godaddy_body(self) -> list[dict]:
        """Request body for the GoDaddy records endpoint."""
        return [{"data": self.content, "ttl": self.ttl}]


@dataclass(frozen=True)
class ZoneHandle:
    """Provider handle for the DNS zone of a root domain."""

    zone_id: str
    name: str


@dataclass
class ValidationAttempt:
    """Counter state owned by the token poller."""

    attempt_number: int
    max_attempts: int
    interval_seconds: float

    @property
    def exhausted(self) -> bool:
        return self.attempt_number >= self.max_attempts


@dataclass
class StateTransition:
    """A single recorded state change."""

    from_state: WorkflowState
    to_state: WorkflowState
    timestamp: str


@dataclass
class WorkflowResult:
    """Outcome of a domain validation run."""

    state: WorkflowState
    domain: Optional[DomainSpec]
    target: HostingTarget
    token: Optional[ValidationToken] = None
    records: list[DnsRecordRequest] = field(default_factory=list)
    transitions: list[StateTransition] = field(default_factory=list)
    failed_step: Optional[WorkflowState] = None
    error: Optional[dict] = None
    remediation: Optional[str] = None
    total_duration_ms: float = 0.0

    @property
    def success(self) -> bool:
        return self.state == WorkflowState.ATTACHED

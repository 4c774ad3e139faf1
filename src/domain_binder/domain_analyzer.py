"""
Domain name analysis for custom domain validation.

Classifies a custom domain as apex or subdomain relative to its root and
derives the DNS records the hosting provider expects:

- a TXT record under ``_dnsauth`` carrying the validation token
- a routing record (A or CNAME) pointing the domain at the hosting resource

The input is used literally. There is no lowercasing, IDN encoding or
trailing-dot handling, so ``WWW.example.com`` is treated as an apex domain.
"""

from typing import Optional

from .enums import ApexMode, RecordType
from .exceptions import DnsWriteError, PrerequisiteError
from .models import DomainSpec, DnsRecordRequest


WWW_PREFIX = "www."
VALIDATION_LABEL = "_dnsauth"
APEX_NAME = "@"


def classify(full_domain: str) -> DomainSpec:
    """
    Split a custom domain into itself and its root.

    Args:
        full_domain: Custom domain, e.g. "www.example.com" or "example.com"

    Returns:
        DomainSpec whose root has one leading "www." removed

    Raises:
        PrerequisiteError: If the domain is empty
    """
    if not full_domain:
        raise PrerequisiteError(
            code="empty_domain",
            message="Custom domain is empty",
            details={"domain": full_domain},
        )

    if full_domain.startswith(WWW_PREFIX):
        root = full_domain[len(WWW_PREFIX):]
    else:
        root = full_domain
    return DomainSpec(full_domain=full_domain, root=root)


def is_apex(spec: DomainSpec) -> bool:
    return spec.full_domain == spec.root


def subdomain_label(spec: DomainSpec) -> str:
    """Return the part of the domain left of ".{root}" ("" for apex domains)."""
    if is_apex(spec):
        return ""
    suffix = f".{spec.root}"
    if spec.full_domain.endswith(suffix):
        return spec.full_domain[: -len(suffix)]
    return spec.full_domain


def validation_record_name(spec: DomainSpec) -> str:
    """Name of the TXT record that proves domain ownership."""
    if is_apex(spec):
        return VALIDATION_LABEL
    return f"{VALIDATION_LABEL}.{subdomain_label(spec)}"


def validation_record(spec: DomainSpec, token: str, ttl: int = 600) -> DnsRecordRequest:
    """Build the TXT record request carrying the validation token."""
    return DnsRecordRequest(
        type=RecordType.TXT,
        name=validation_record_name(spec),
        content=token,
        ttl=ttl,
        proxied=False,
    )


def routing_record(
    spec: DomainSpec,
    default_hostname: str,
    resolved_ip: Optional[str] = None,
    apex_mode: ApexMode = ApexMode.A_RECORD,
    ttl: int = 600,
    proxied: bool = False,
) -> DnsRecordRequest:
    """
    Build the record that routes the custom domain to the hosting resource.

    Args:
        spec: Analyzed domain
        default_hostname: Hostname assigned by the hosting provider
        resolved_ip: IPv4 address of default_hostname (apex A records only)
        apex_mode: How an apex domain is routed
        ttl: Record TTL in seconds
        proxied: Provider-side proxy flag

    Returns:
        A record at "@" for apex domains in A_RECORD mode, otherwise a CNAME
        to the default hostname

    Raises:
        DnsWriteError: If an apex A record is requested without an address
    """
    if is_apex(spec):
        if apex_mode == ApexMode.CNAME_FLATTEN:
            return DnsRecordRequest(
                type=RecordType.CNAME,
                name=APEX_NAME,
                content=default_hostname,
                ttl=ttl,
                proxied=proxied,
            )
        if not resolved_ip:
            raise DnsWriteError(
                code="no_apex_address",
                message=f"No IP address resolved for {default_hostname}",
                details={"domain": spec.full_domain, "hostname": default_hostname},
            )
        return DnsRecordRequest(
            type=RecordType.A,
            name=APEX_NAME,
            content=resolved_ip,
            ttl=ttl,
            proxied=proxied,
        )

    return DnsRecordRequest(
        type=RecordType.CNAME,
        name=subdomain_label(spec),
        content=default_hostname,
        ttl=ttl,
        proxied=proxied,
    )

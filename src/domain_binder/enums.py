"""
Enumeration types for the domain binder.
"""

from enum import Enum


class RecordType(Enum):
    """DNS record types written by the workflow."""

    TXT = "TXT"
    A = "A"
    CNAME = "CNAME"


class DnsBackend(Enum):
    """Supported DNS providers."""

    CLOUDFLARE = "cloudflare"
    GODADDY = "godaddy"


class ApexMode(Enum):
    """How the routing record of an apex domain is published."""

    A_RECORD = "a_record"  # resolve the default hostname, publish its IP
    CNAME_FLATTEN = "cname_flatten"  # CNAME at "@", provider flattens it


class OnExisting(Enum):
    """Policy when the hosting resource already exists."""

    REPLACE = "replace"
    REUSE = "reuse"


class TokenField(Enum):
    """Which hosting provider value is published in the TXT record."""

    VALIDATION_TOKEN = "validation_token"
    DOMAIN_VERIFICATION = "domain_verification"


class WorkflowState(Enum):
    """States of the domain validation workflow, in order."""

    CREATED = "created"
    RESOURCE_PROVISIONED = "resource_provisioned"
    VALIDATION_REQUESTED = "validation_requested"
    TOKEN_OBTAINED = "token_obtained"
    TXT_RECORD_WRITTEN = "txt_record_written"
    ROUTING_RECORD_WRITTEN = "routing_record_written"
    AWAITING_PROPAGATION = "awaiting_propagation"
    ATTACHED = "attached"
    FAILED = "failed"


class LogLevel(Enum):
    """Logging severity levels."""

    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"

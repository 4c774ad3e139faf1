"""
Domain Binder - custom domain validation for Azure Static Web Apps.

This package provisions a Static Web App from a source repository and binds
a custom domain to it, publishing the validation TXT record and the routing
record at Cloudflare or GoDaddy.
"""

__version__ = "0.1.0"
__author__ = "Domain Binder Team"

from domain_binder.exceptions import (
    DomainBinderError,
    PrerequisiteError,
    ProviderError,
    DnsLookupError,
    DnsWriteError,
    ValidationTimeoutError,
    WorkflowStateError,
    WorkflowCancelledError,
)
from domain_binder.enums import (
    RecordType,
    DnsBackend,
    ApexMode,
    OnExisting,
    TokenField,
    WorkflowState,
    LogLevel,
)
from domain_binder.config import (
    HostingConfig,
    PollerConfig,
    CloudflareConfig,
    GoDaddyConfig,
    DnsConfig,
    WorkflowConfig,
    LoggingConfig,
    SystemConfig,
    create_default_config,
    load_config_from_env,
    load_config_from_file,
    save_config_to_file,
)
from domain_binder.models import (
    DomainSpec,
    HostingTarget,
    SourceRepository,
    ValidationInfo,
    ValidationToken,
    DnsRecordRequest,
    ZoneHandle,
    ValidationAttempt,
    StateTransition,
    WorkflowResult,
)
from domain_binder.domain_analyzer import (
    classify,
    is_apex,
    subdomain_label,
    validation_record_name,
    validation_record,
    routing_record,
)
from domain_binder.sleeper import (
    Sleeper,
    RecordingSleeper,
)
from domain_binder.token_poller import (
    ValidationTokenPoller,
)
from domain_binder.command_runner import (
    CommandResult,
    CommandRunner,
    SubprocessRunner,
)
from domain_binder.dns_providers import (
    DnsProvider,
    CloudflareProvider,
    GoDaddyProvider,
    create_dns_provider,
)
from domain_binder.hosting_provider import (
    HostingProvider,
    AzureStaticWebAppProvider,
)
from domain_binder.resolver import (
    HostnameResolver,
)
from domain_binder.audit_logger import (
    AuditLogger,
    LogEntry,
)
from domain_binder.i18n import (
    get_message,
    SUPPORTED_LANGUAGES,
    DEFAULT_LANGUAGE,
)
from domain_binder.prerequisites import (
    PrerequisiteResult,
    check_prerequisites,
)
from domain_binder.orchestrator import (
    DomainValidationOrchestrator,
    WorkflowStateMachine,
    create_orchestrator,
)
from domain_binder.cli import (
    main,
    create_parser,
)

__all__ = [
    # Version
    "__version__",
    # Exceptions
    "DomainBinderError",
    "PrerequisiteError",
    "ProviderError",
    "DnsLookupError",
    "DnsWriteError",
    "ValidationTimeoutError",
    "WorkflowStateError",
    "WorkflowCancelledError",
    # Enums
    "RecordType",
    "DnsBackend",
    "ApexMode",
    "OnExisting",
    "TokenField",
    "WorkflowState",
    "LogLevel",
    # Config
    "HostingConfig",
    "PollerConfig",
    "CloudflareConfig",
    "GoDaddyConfig",
    "DnsConfig",
    "WorkflowConfig",
    "LoggingConfig",
    "SystemConfig",
    "create_default_config",
    "load_config_from_env",
    "load_config_from_file",
    "save_config_to_file",
    # Models
    "DomainSpec",
    "HostingTarget",
    "SourceRepository",
    "ValidationInfo",
    "ValidationToken",
    "DnsRecordRequest",
    "ZoneHandle",
    "ValidationAttempt",
    "StateTransition",
    "WorkflowResult",
    # Domain analyzer
    "classify",
    "is_apex",
    "subdomain_label",
    "validation_record_name",
    "validation_record",
    "routing_record",
    # Waiting and polling
    "Sleeper",
    "RecordingSleeper",
    "ValidationTokenPoller",
    # Providers
    "CommandResult",
    "CommandRunner",
    "SubprocessRunner",
    "DnsProvider",
    "CloudflareProvider",
    "GoDaddyProvider",
    "create_dns_provider",
    "HostingProvider",
    "AzureStaticWebAppProvider",
    "HostnameResolver",
    # Audit logger
    "AuditLogger",
    "LogEntry",
    # i18n
    "get_message",
    "SUPPORTED_LANGUAGES",
    "DEFAULT_LANGUAGE",
    # Prerequisites
    "PrerequisiteResult",
    "check_prerequisites",
    # Orchestrator
    "DomainValidationOrchestrator",
    "WorkflowStateMachine",
    "create_orchestrator",
    # CLI
    "main",
    "create_parser",
]

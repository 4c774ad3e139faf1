"""
Configuration dataclasses for the domain binder.

All configuration is immutable and passed to the orchestrator at construction
time. Credentials come from the process environment (optionally a .env file)
and are never written back to disk.
"""

import json
import os
import sys
from dataclasses import asdict, dataclass, field, replace
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

from .enums import ApexMode, DnsBackend, LogLevel, OnExisting, TokenField
from .exceptions import PrerequisiteError


DEFAULT_CLOUDFLARE_API_URL = "https://api.cloudflare.com/client/v4"
DEFAULT_GODADDY_API_URL = "https://api.godaddy.com/v1"


@dataclass(frozen=True)
class HostingConfig:
    """Static Web App settings shared by every run."""

    location: str = "eastus2"
    branch: str = "main"
    app_location: str = "/"
    output_location: str = "."
    api_location: str = ""
    sku: str = "Standard"  # Free, Standard or Dedicated
    on_existing: OnExisting = OnExisting.REPLACE
    settle_delay_seconds: float = 30.0
    validation_method: str = "dns-txt-token"
    txt_token_field: TokenField = TokenField.VALIDATION_TOKEN
    az_command: str = "az"
    command_timeout_seconds: float = 900.0


@dataclass(frozen=True)
class PollerConfig:
    """Constant-interval polling for the validation token."""

    max_attempts: int = 12
    interval_seconds: float = 10.0
    initial_delay_seconds: float = 10.0


@dataclass(frozen=True)
class CloudflareConfig:
    """Cloudflare API credentials and record options."""

    api_token: str
    api_url: str = DEFAULT_CLOUDFLARE_API_URL
    proxied: bool = True
    apex_mode: ApexMode = ApexMode.A_RECORD


@dataclass(frozen=True)
class GoDaddyConfig:
    """GoDaddy API credentials."""

    api_key: str
    api_secret: str
    api_url: str = DEFAULT_GODADDY_API_URL
    apex_mode: ApexMode = ApexMode.A_RECORD


@dataclass(frozen=True)
class DnsConfig:
    """DNS provider selection."""

    backend: DnsBackend = DnsBackend.CLOUDFLARE
    cloudflare: Optional[CloudflareConfig] = None
    godaddy: Optional[GoDaddyConfig] = None
    ttl: int = 600
    timeout_seconds: float = 30.0


@dataclass(frozen=True)
class WorkflowConfig:
    """Decisions taken before the run starts."""

    wait_for_propagation: bool = False
    propagation_delay_seconds: float = 600.0


@dataclass(frozen=True)
class LoggingConfig:
    """Logging configuration."""

    level: str = "info"
    output_format: str = "text"  # 'json', 'text', 'both'


@dataclass(frozen=True)
class SystemConfig:
    """Main configuration combining all sub-configurations."""

    hosting: HostingConfig = field(default_factory=HostingConfig)
    poller: PollerConfig = field(default_factory=PollerConfig)
    dns: DnsConfig = field(default_factory=DnsConfig)
    workflow: WorkflowConfig = field(default_factory=WorkflowConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    source_token: str = ""
    language: str = "en"  # 'de' or 'en'
    simulation_mode: bool = False


def _float_env(environ: Mapping[str, str], name: str, default: float) -> float:
    try:
        return float(environ.get(name, str(default)))
    except ValueError:
        return default


def _int_env(environ: Mapping[str, str], name: str, default: int) -> int:
    try:
        return int(environ.get(name, str(default)))
    except ValueError:
        return default


def create_default_config(
    backend: DnsBackend = DnsBackend.CLOUDFLARE,
    simulation_mode: bool = False,
    language: str = "en",
) -> SystemConfig:
    """
    Create a configuration with default settings and empty credentials.

    Args:
        backend: DNS provider to use
        simulation_mode: Enable simulation mode (no external calls)
        language: Output language ('de' or 'en')

    Returns:
        SystemConfig with default settings
    """
    if backend == DnsBackend.CLOUDFLARE:
        dns = DnsConfig(backend=backend, cloudflare=CloudflareConfig(api_token=""))
    else:
        dns = DnsConfig(backend=backend, godaddy=GoDaddyConfig(api_key="", api_secret=""))

    return SystemConfig(dns=dns, language=language, simulation_mode=simulation_mode)


def load_config_from_env(
    environ: Optional[Mapping[str, str]] = None,
    backend: Optional[DnsBackend] = None,
) -> SystemConfig:
    """
    Build a configuration from environment variables.

    When no mapping is given, a .env file in the working directory is loaded
    first and os.environ is used.

    Args:
        environ: Mapping to read variables from
        backend: DNS provider; defaults to DNS_BACKEND or cloudflare

    Returns:
        SystemConfig with credentials filled in (possibly empty)

    Raises:
        PrerequisiteError: If DNS_BACKEND names an unknown provider
    """
    if environ is None:
        load_dotenv()
        environ = os.environ

    if backend is None:
        name = environ.get("DNS_BACKEND", DnsBackend.CLOUDFLARE.value)
        choices = ", ".join(b.value for b in DnsBackend)
        try:
            backend = DnsBackend(name.strip().lower())
        except ValueError as e:
            raise PrerequisiteError(
                code="invalid_dns_backend",
                message=f"Invalid DNS_BACKEND: {name!r} (expected one of: {choices})",
                details={"value": name},
            ) from e

    hosting = HostingConfig(
        location=environ.get("AZURE_LOCATION", HostingConfig.location),
        branch=environ.get("GITHUB_BRANCH", HostingConfig.branch),
        sku=environ.get("AZURE_SWA_SKU", HostingConfig.sku),
    )
    poller = PollerConfig(
        max_attempts=_int_env(environ, "TOKEN_MAX_ATTEMPTS", PollerConfig.max_attempts),
        interval_seconds=_float_env(
            environ, "TOKEN_POLL_INTERVAL", PollerConfig.interval_seconds
        ),
    )
    dns = DnsConfig(
        backend=backend,
        cloudflare=CloudflareConfig(
            api_token=environ.get("CLOUDFLARE_API_TOKEN", "").strip(),
            api_url=environ.get("CLOUDFLARE_API_URL", DEFAULT_CLOUDFLARE_API_URL),
        ),
        godaddy=GoDaddyConfig(
            api_key=environ.get("GODADDY_API_KEY", "").strip(),
            api_secret=environ.get("GODADDY_API_SECRET", "").strip(),
            api_url=environ.get("GODADDY_API_URL", DEFAULT_GODADDY_API_URL),
        ),
    )

    return SystemConfig(
        hosting=hosting,
        poller=poller,
        dns=dns,
        source_token=environ.get("GITHUBPAT", "").strip(),
        language=environ.get("DOMAIN_BINDER_LANG", "en").lower(),
    )


def load_config_from_file(
    config_path: Path,
    base: Optional[SystemConfig] = None,
) -> Optional[SystemConfig]:
    """
    Load non-secret settings from a JSON file on top of a base configuration.

    Args:
        config_path: Path to the configuration file
        base: Configuration to start from (credentials are taken from it)

    Returns:
        SystemConfig if successful, None otherwise
    """
    base = base or create_default_config()
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)

        hosting_data = data.get("hosting", {})
        hosting = replace(
            base.hosting,
            **{k: v for k, v in hosting_data.items() if k not in ("on_existing", "txt_token_field")},
        )
        if "on_existing" in hosting_data:
            hosting = replace(hosting, on_existing=OnExisting(hosting_data["on_existing"]))
        if "txt_token_field" in hosting_data:
            hosting = replace(
                hosting, txt_token_field=TokenField(hosting_data["txt_token_field"])
            )

        poller = replace(base.poller, **data.get("poller", {}))
        workflow = replace(base.workflow, **data.get("workflow", {}))
        logging_config = replace(base.logging, **data.get("logging", {}))
        LogLevel(str(logging_config.level).lower())
        if logging_config.output_format not in ("json", "text", "both"):
            raise ValueError(f"Invalid output_format: {logging_config.output_format}")

        dns_data = data.get("dns", {})
        dns = base.dns
        if "backend" in dns_data:
            dns = replace(dns, backend=DnsBackend(dns_data["backend"]))
        if "ttl" in dns_data:
            dns = replace(dns, ttl=int(dns_data["ttl"]))
        cloudflare_data = dns_data.get("cloudflare", {})
        if cloudflare_data and dns.cloudflare:
            cloudflare = replace(
                dns.cloudflare,
                proxied=cloudflare_data.get("proxied", dns.cloudflare.proxied),
                api_url=cloudflare_data.get("api_url", dns.cloudflare.api_url),
            )
            if "apex_mode" in cloudflare_data:
                cloudflare = replace(cloudflare, apex_mode=ApexMode(cloudflare_data["apex_mode"]))
            dns = replace(dns, cloudflare=cloudflare)
        godaddy_data = dns_data.get("godaddy", {})
        if godaddy_data and dns.godaddy:
            godaddy = replace(
                dns.godaddy,
                api_url=godaddy_data.get("api_url", dns.godaddy.api_url),
            )
            if "apex_mode" in godaddy_data:
                godaddy = replace(godaddy, apex_mode=ApexMode(godaddy_data["apex_mode"]))
            dns = replace(dns, godaddy=godaddy)

        return replace(
            base,
            hosting=hosting,
            poller=poller,
            dns=dns,
            workflow=workflow,
            logging=logging_config,
            language=data.get("language", base.language),
            simulation_mode=data.get("simulation_mode", base.simulation_mode),
        )

    except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return None
    except FileNotFoundError:
        return None


def save_config_to_file(config: SystemConfig, config_path: Path) -> bool:
    """
    Save non-secret settings to a JSON file.

    Args:
        config: SystemConfig to save
        config_path: Path to save the configuration

    Returns:
        True if successful, False otherwise
    """
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)

        hosting = asdict(config.hosting)
        hosting["on_existing"] = config.hosting.on_existing.value
        hosting["txt_token_field"] = config.hosting.txt_token_field.value

        dns: dict = {"backend": config.dns.backend.value, "ttl": config.dns.ttl}
        if config.dns.cloudflare:
            dns["cloudflare"] = {
                "api_url": config.dns.cloudflare.api_url,
                "proxied": config.dns.cloudflare.proxied,
                "apex_mode": config.dns.cloudflare.apex_mode.value,
            }
        if config.dns.godaddy:
            dns["godaddy"] = {
                "api_url": config.dns.godaddy.api_url,
                "apex_mode": config.dns.godaddy.apex_mode.value,
            }

        data = {
            "hosting": hosting,
            "poller": asdict(config.poller),
            "dns": dns,
            "workflow": asdict(config.workflow),
            "logging": asdict(config.logging),
            "language": config.language,
            "simulation_mode": config.simulation_mode,
        }

        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

        return True

    except (OSError, TypeError) as e:
        print(f"Error saving config: {e}", file=sys.stderr)
        return False

"""
Prerequisite checks for the domain binder.

Runs before any external call: the Azure CLI must be installed, the
credentials of the selected DNS backend and the source-control token must be
set, and no positional argument may be empty. In simulation mode missing
tools and credentials are reported as warnings only.
"""

from dataclasses import dataclass, field
from typing import Callable, Optional

from .command_runner import tool_available
from .config import SystemConfig
from .domain_analyzer import WWW_PREFIX
from .enums import DnsBackend
from .exceptions import PrerequisiteError
from .i18n import get_message


@dataclass
class PrerequisiteResult:
    """Result of the prerequisite checks."""

    valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def raise_for_errors(self) -> None:
        """
        Raises:
            PrerequisiteError: If any check failed
        """
        if not self.valid:
            raise PrerequisiteError(
                code="prerequisites_failed",
                message="; ".join(self.errors),
                details={"errors": self.errors},
            )


def _missing_credentials(config: SystemConfig) -> list[str]:
    missing = []
    if not config.source_token:
        missing.append("GITHUBPAT")

    dns = config.dns
    if dns.backend == DnsBackend.CLOUDFLARE:
        if dns.cloudflare is None or not dns.cloudflare.api_token:
            missing.append("CLOUDFLARE_API_TOKEN")
    else:
        if dns.godaddy is None or not dns.godaddy.api_key:
            missing.append("GODADDY_API_KEY")
        if dns.godaddy is None or not dns.godaddy.api_secret:
            missing.append("GODADDY_API_SECRET")
    return missing


def check_prerequisites(
    config: SystemConfig,
    webapp_name: str,
    resource_group: str,
    repo_url: str,
    custom_domain: str,
    tool_lookup: Optional[Callable[[str], bool]] = None,
) -> PrerequisiteResult:
    """
    Check tools, credentials and arguments.

    Args:
        config: System configuration (credentials already loaded)
        webapp_name: Static Web App name
        resource_group: Azure resource group
        repo_url: Source repository URL
        custom_domain: Custom domain to bind
        tool_lookup: Returns True if an executable exists (defaults to PATH lookup)

    Returns:
        PrerequisiteResult listing every problem found
    """
    tool_lookup = tool_lookup or tool_available
    language = config.language
    errors: list[str] = []
    warnings: list[str] = []

    arguments = {
        "webapp_name": webapp_name,
        "resource_group": resource_group,
        "github_repo_url": repo_url,
        "custom_domain": custom_domain,
    }
    for name, value in arguments.items():
        if not value or not value.strip():
            errors.append(get_message("prereq.empty_argument", language, name=name))

    # Missing tools and credentials only matter when commands really run
    environment_problems = errors if not config.simulation_mode else warnings

    if not tool_lookup(config.hosting.az_command):
        environment_problems.append(get_message("prereq.az_missing", language))

    for name in _missing_credentials(config):
        environment_problems.append(get_message("prereq.missing_credential", language, name=name))

    if repo_url and not repo_url.startswith("https://"):
        warnings.append(get_message("prereq.not_https", language, url=repo_url))

    if custom_domain and not custom_domain.startswith(WWW_PREFIX) and custom_domain.count(".") > 1:
        warnings.append(get_message("prereq.apex_ambiguous", language, domain=custom_domain))

    return PrerequisiteResult(
        valid=len(errors) == 0,
        errors=errors,
        warnings=warnings,
    )

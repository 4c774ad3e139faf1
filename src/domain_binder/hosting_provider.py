"""
Hosting provider for custom domain binding.

Defines the HostingProvider interface used by the orchestrator and its Azure
Static Web Apps implementation, which drives the Azure CLI (``az``):

- ``az account show`` / ``az login`` and ``az group show`` / ``az group create``
  to prepare the session and resource group
- ``az staticwebapp show|create|delete`` to provision the hosting resource
- ``az staticwebapp hostname set|show|add`` to validate and attach the domain
"""

from typing import Optional, Protocol, Sequence, runtime_checkable

from .audit_logger import AuditLogger
from .command_runner import CommandResult, CommandRunner, SubprocessRunner
from .config import HostingConfig
from .enums import OnExisting
from .exceptions import ProviderError
from .models import HostingTarget, SourceRepository, ValidationInfo, is_absent
from .sleeper import Sleeper


@runtime_checkable
class HostingProvider(Protocol):
    """Interface of the hosting provider management API."""

    async def prepare(self, target: HostingTarget) -> None:
        ...

    async def create_or_replace(
        self, target: HostingTarget, source: SourceRepository
    ) -> HostingTarget:
        ...

    async def request_hostname_validation(
        self, target: HostingTarget, domain: str, method: str = "dns-txt-token"
    ) -> None:
        ...

    async def fetch_validation_token(
        self, target: HostingTarget, domain: str
    ) -> Optional[ValidationInfo]:
        ...

    async def attach_hostname(
        self, target: HostingTarget, domain: str, method: str = "dns-txt-token"
    ) -> None:
        ...


class AzureStaticWebAppProvider:
    """
    Azure Static Web Apps through the Azure CLI.

    The source-control token is passed to ``az staticwebapp create`` as an
    argument and masked in every recorded command line.
    """

    COMPONENT = "AzureStaticWebApp"
    SIMULATED_HOST_SUFFIX = "simulated.azurestaticapps.net"
    SIMULATED_TOKEN = "simulated-validation-token"

    def __init__(
        self,
        config: HostingConfig,
        source_token: str,
        runner: Optional[CommandRunner] = None,
        sleeper: Optional[Sleeper] = None,
        logger: Optional[AuditLogger] = None,
        simulation_mode: bool = False,
    ) -> None:
        """
        Args:
            config: Hosting settings (location, SKU, existing-resource policy, ...)
            source_token: Source-control access token for the build pipeline
            runner: Command runner (defaults to asyncio subprocesses)
            sleeper: Wait used for the post-deletion settling delay
            logger: Optional audit logger
            simulation_mode: If True, no commands are run
        """
        self._config = config
        self._source_token = source_token
        self._runner = runner or SubprocessRunner(config.command_timeout_seconds)
        self._sleeper = sleeper or Sleeper()
        self._logger = logger
        self._simulation_mode = simulation_mode

    @property
    def config(self) -> HostingConfig:
        return self._config

    async def _az(
        self,
        *args: str,
        secrets: Sequence[str] = (),
        interactive: bool = False,
    ) -> CommandResult:
        return await self._runner.run(
            [self._config.az_command, *args],
            secrets=secrets,
            timeout=self._config.command_timeout_seconds,
            interactive=interactive,
        )

    @staticmethod
    def _fail(code: str, message: str, result: CommandResult) -> ProviderError:
        return ProviderError(
            code=code,
            message=message,
            details={
                "command": result.args,
                "returncode": result.returncode,
                "response": (result.stderr or result.stdout).strip(),
            },
        )

    @staticmethod
    def _scope_args(target: HostingTarget) -> list[str]:
        return ["--name", target.name, "--resource-group", target.scope]

    async def prepare(self, target: HostingTarget) -> None:
        """
        Make sure an Azure session and the resource group exist.

        Raises:
            ProviderError: If login or resource group creation fails
        """
        if self._simulation_mode:
            return

        self._log("Logging in to Azure")
        account = await self._az("account", "show", "-o", "none")
        if account.ok:
            self._log("Already logged in to Azure")
        else:
            login = await self._az("login", interactive=True)
            if not login.ok:
                raise self._fail("login_failed", "Azure login failed", login)

        group = await self._az("group", "show", "--name", target.scope, "-o", "none")
        if group.ok:
            self._log(f"Resource group {target.scope} already exists")
            return

        self._log(
            f"Creating resource group {target.scope} in {self._config.location}",
            {"resource_group": target.scope, "location": self._config.location},
        )
        created = await self._az(
            "group", "create",
            "--name", target.scope,
            "--location", self._config.location,
            "-o", "none",
        )
        if not created.ok:
            raise self._fail(
                "resource_group_failed",
                f"Failed to create resource group {target.scope}",
                created,
            )

    async def exists(self, target: HostingTarget) -> bool:
        if self._simulation_mode:
            return False
        result = await self._az("staticwebapp", "show", *self._scope_args(target), "-o", "none")
        return result.ok

    async def create_or_replace(
        self, target: HostingTarget, source: SourceRepository
    ) -> HostingTarget:
        """
        Provision the Static Web App and read its default hostname.

        With OnExisting.REPLACE an existing app is deleted first and the
        settling delay is awaited. With OnExisting.REUSE an existing app is
        kept as is.

        Raises:
            ProviderError: If deletion, creation or the hostname lookup fails
        """
        if self._simulation_mode:
            return target.with_default_hostname(f"{target.name}.{self.SIMULATED_HOST_SUFFIX}")

        existing = await self.exists(target)
        create = True

        if existing and self._config.on_existing == OnExisting.REPLACE:
            self._log(f"Static Web App {target.name} already exists, deleting it first")
            deleted = await self._az(
                "staticwebapp", "delete", *self._scope_args(target), "--yes"
            )
            if not deleted.ok:
                raise self._fail(
                    "delete_failed", f"Failed to delete Static Web App {target.name}", deleted
                )
            self._log(
                "Waiting for deletion to complete",
                {"seconds": self._config.settle_delay_seconds},
            )
            await self._sleeper.sleep(self._config.settle_delay_seconds)
        elif existing:
            self._log(f"Static Web App {target.name} already exists, reusing it")
            create = False

        if create:
            self._log(
                f"Creating Static Web App {target.name}",
                {"source": source.url, "branch": source.branch, "sku": self._config.sku},
            )
            created = await self._az(
                "staticwebapp", "create",
                *self._scope_args(target),
                "--source", source.url,
                "--branch", source.branch,
                "--app-location", self._config.app_location,
                "--output-location", self._config.output_location,
                "--api-location", self._config.api_location,
                "--sku", self._config.sku,
                "--token", self._source_token,
                "-o", "none",
                secrets=[self._source_token],
            )
            if not created.ok:
                raise self._fail(
                    "create_failed", f"Failed to create Static Web App {target.name}", created
                )

        shown = await self._az(
            "staticwebapp", "show", *self._scope_args(target),
            "--query", "defaultHostname", "-o", "tsv",
        )
        hostname = shown.stdout.strip()
        if not shown.ok or is_absent(hostname):
            raise self._fail(
                "no_default_hostname",
                f"Could not read the default hostname of {target.name}",
                shown,
            )

        self._log(
            f"Static Web App ready with default hostname: {hostname}",
            {"default_hostname": hostname},
        )
        return target.with_default_hostname(hostname)

    async def request_hostname_validation(
        self, target: HostingTarget, domain: str, method: str = "dns-txt-token"
    ) -> None:
        """
        Ask Azure to start TXT validation for a custom domain.

        The call returns before the token exists; poll fetch_validation_token.

        Raises:
            ProviderError: If the request is rejected
        """
        if self._simulation_mode:
            return

        self._log(
            "Setting up custom domain with TXT validation",
            {"domain": domain, "method": method},
        )
        result = await self._az(
            "staticwebapp", "hostname", "set",
            *self._scope_args(target),
            "--hostname", domain,
            "--validation-method", method,
            "--no-wait",
        )
        if not result.ok:
            raise self._fail(
                "validation_request_failed",
                f"Failed to request validation for {domain}",
                result,
            )

    async def fetch_validation_token(
        self, target: HostingTarget, domain: str
    ) -> Optional[ValidationInfo]:
        """
        Read the validation values of a custom domain.

        Returns:
            ValidationInfo, or None while the hostname is not visible yet
        """
        if self._simulation_mode:
            return ValidationInfo(validation_token=self.SIMULATED_TOKEN)

        result = await self._az(
            "staticwebapp", "hostname", "show",
            *self._scope_args(target),
            "--hostname", domain,
            "-o", "json",
        )
        if not result.ok:
            return None

        data = result.json()
        if not isinstance(data, dict):
            return None
        properties = data.get("properties") if isinstance(data.get("properties"), dict) else {}

        def _value(key: str) -> Optional[str]:
            value = data.get(key, properties.get(key))
            return value if isinstance(value, str) else None

        return ValidationInfo(
            validation_token=_value("validationToken"),
            domain_verification=_value("domainVerificationToken"),
        )

    async def attach_hostname(
        self, target: HostingTarget, domain: str, method: str = "dns-txt-token"
    ) -> None:
        """
        Bind the custom domain to the Static Web App.

        Raises:
            ProviderError: If Azure cannot validate the domain yet
        """
        if self._simulation_mode:
            return

        self._log("Adding custom domain to Azure Static Web App", {"domain": domain})
        result = await self._az(
            "staticwebapp", "hostname", "add",
            "--hostname", domain,
            *self._scope_args(target),
            "--validation-method", method,
        )
        if not result.ok:
            raise self._fail(
                "attach_failed",
                f"Failed to add custom domain {domain} to Static Web App {target.name}",
                result,
            )

    def _log(self, message: str, data: Optional[dict] = None) -> None:
        if self._logger:
            self._logger.info(self.COMPONENT, message, data)

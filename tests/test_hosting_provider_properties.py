"""
Property-based tests for the Azure Static Web Apps hosting provider.

Commands go to a ScriptedRunner that answers by longest matching argument
prefix and records every (masked) command line, so the exact ``az``
invocations can be asserted.
"""

import asyncio
import json
from typing import Optional, Sequence

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from domain_binder.command_runner import MASK_VALUE, CommandResult, mask_args
from domain_binder.config import HostingConfig
from domain_binder.enums import OnExisting
from domain_binder.exceptions import ProviderError
from domain_binder.hosting_provider import AzureStaticWebAppProvider, HostingProvider
from domain_binder.models import HostingTarget, SourceRepository, ValidationInfo
from domain_binder.sleeper import RecordingSleeper


class ScriptedRunner:
    """Command runner double answering from a prefix table."""

    def __init__(self) -> None:
        self._script: list[tuple[tuple[str, ...], CommandResult]] = []
        self.calls: list[list[str]] = []

    def add(
        self,
        prefix: Sequence[str],
        returncode: int = 0,
        stdout: str = "",
        stderr: str = "",
    ) -> "ScriptedRunner":
        self._script.append(
            (tuple(prefix), CommandResult(list(prefix), returncode, stdout, stderr))
        )
        return self

    async def run(
        self,
        args: Sequence[str],
        secrets: Sequence[str] = (),
        timeout: Optional[float] = None,
        interactive: bool = False,
    ) -> CommandResult:
        masked = mask_args(args, secrets)
        self.calls.append(masked)
        best: Optional[CommandResult] = None
        best_len = -1
        for prefix, result in self._script:
            if tuple(args[: len(prefix)]) == prefix and len(prefix) > best_len:
                best, best_len = result, len(prefix)
        if best is None:
            return CommandResult(masked, 0)
        return CommandResult(masked, best.returncode, best.stdout, best.stderr)

    def commands(self) -> list[tuple[str, ...]]:
        """The first three words of every call (az, group, verb)."""
        return [tuple(call[:3]) for call in self.calls]


TARGET = HostingTarget(name="mystaticsite", scope="myresourcegroup")
SOURCE = SourceRepository(url="https://github.com/username/repo", branch="main")
SOURCE_TOKEN = "ghp_secretsourcetoken"
HOSTNAME = "nice-sea-0123.azurestaticapps.net"


def make_provider(runner: ScriptedRunner, on_existing: OnExisting = OnExisting.REPLACE):
    sleeper = RecordingSleeper()
    provider = AzureStaticWebAppProvider(
        HostingConfig(on_existing=on_existing, settle_delay_seconds=30.0),
        source_token=SOURCE_TOKEN,
        runner=runner,
        sleeper=sleeper,
    )
    return provider, sleeper


def existing_app_runner() -> ScriptedRunner:
    return (
        ScriptedRunner()
        .add(["az", "staticwebapp", "show"], stdout="")
        .add(
            ["az", "staticwebapp", "show", "--name", TARGET.name, "--resource-group",
             TARGET.scope, "--query", "defaultHostname"],
            stdout=HOSTNAME + "\n",
        )
    )


class TestCreateOrReplace:
    """Existing-resource policies."""

    def test_replace_deletes_waits_then_creates(self) -> None:
        runner = existing_app_runner()
        provider, sleeper = make_provider(runner, OnExisting.REPLACE)

        target = asyncio.run(provider.create_or_replace(TARGET, SOURCE))

        assert target.default_hostname == HOSTNAME
        verbs = [c[2] for c in runner.commands()]
        assert verbs == ["show", "delete", "create", "show"]
        assert sleeper.calls == [30.0]
        assert "--yes" in runner.calls[1]

    def test_reuse_skips_delete_and_create(self) -> None:
        runner = existing_app_runner()
        provider, sleeper = make_provider(runner, OnExisting.REUSE)

        target = asyncio.run(provider.create_or_replace(TARGET, SOURCE))

        assert target.default_hostname == HOSTNAME
        verbs = [c[2] for c in runner.commands()]
        assert verbs == ["show", "show"]
        assert sleeper.calls == []

    @pytest.mark.parametrize("on_existing", list(OnExisting))
    def test_new_app_is_created_without_delay(self, on_existing: OnExisting) -> None:
        runner = existing_app_runner().add(
            ["az", "staticwebapp", "show", "--name", TARGET.name, "--resource-group",
             TARGET.scope, "-o", "none"],
            returncode=3,
            stderr="ResourceNotFound",
        )
        provider, sleeper = make_provider(runner, on_existing)

        asyncio.run(provider.create_or_replace(TARGET, SOURCE))

        verbs = [c[2] for c in runner.commands()]
        assert verbs == ["show", "create", "show"]
        assert sleeper.calls == []

    def test_create_arguments_and_token_masking(self) -> None:
        runner = existing_app_runner().add(
            ["az", "staticwebapp", "show", "--name", TARGET.name, "--resource-group",
             TARGET.scope, "-o", "none"],
            returncode=3,
        )
        provider, _ = make_provider(runner)

        asyncio.run(provider.create_or_replace(TARGET, SOURCE))

        create = next(c for c in runner.calls if c[2] == "create")
        assert create[create.index("--source") + 1] == SOURCE.url
        assert create[create.index("--branch") + 1] == "main"
        assert create[create.index("--app-location") + 1] == "/"
        assert create[create.index("--output-location") + 1] == "."
        assert create[create.index("--sku") + 1] == "Standard"
        assert create[create.index("--token") + 1] == MASK_VALUE
        assert all(SOURCE_TOKEN not in arg for call in runner.calls for arg in call)

    def test_create_failure_raises_with_stderr(self) -> None:
        runner = (
            existing_app_runner()
            .add(["az", "staticwebapp", "show", "--name", TARGET.name, "--resource-group",
                  TARGET.scope, "-o", "none"], returncode=3)
            .add(["az", "staticwebapp", "create"], returncode=1, stderr="BadRequest: invalid token")
        )
        provider, _ = make_provider(runner)

        with pytest.raises(ProviderError) as exc_info:
            asyncio.run(provider.create_or_replace(TARGET, SOURCE))

        assert exc_info.value.code == "create_failed"
        assert exc_info.value.details["response"] == "BadRequest: invalid token"
        assert MASK_VALUE in exc_info.value.details["command"]

    @pytest.mark.parametrize("stdout", ["", "null", "\n"])
    def test_missing_default_hostname_raises(self, stdout: str) -> None:
        runner = (
            ScriptedRunner()
            .add(["az", "staticwebapp", "show", "--name", TARGET.name, "--resource-group",
                  TARGET.scope, "--query", "defaultHostname"], stdout=stdout)
        )
        provider, _ = make_provider(runner, OnExisting.REUSE)

        with pytest.raises(ProviderError) as exc_info:
            asyncio.run(provider.create_or_replace(TARGET, SOURCE))

        assert exc_info.value.code == "no_default_hostname"


class TestPrepare:
    """Login and resource group handling."""

    def test_logged_in_with_existing_group(self) -> None:
        runner = ScriptedRunner()
        provider, _ = make_provider(runner)

        asyncio.run(provider.prepare(TARGET))

        assert runner.commands() == [("az", "account", "show"), ("az", "group", "show")]

    def test_login_and_group_creation(self) -> None:
        runner = (
            ScriptedRunner()
            .add(["az", "account", "show"], returncode=1)
            .add(["az", "group", "show"], returncode=3)
        )
        provider, _ = make_provider(runner)

        asyncio.run(provider.prepare(TARGET))

        assert [c[1] for c in runner.calls] == ["account", "login", "group", "group"]
        create = runner.calls[-1]
        assert create[:3] == ["az", "group", "create"]
        assert create[create.index("--location") + 1] == "eastus2"

    def test_failed_login_raises(self) -> None:
        runner = (
            ScriptedRunner()
            .add(["az", "account", "show"], returncode=1)
            .add(["az", "login"], returncode=1, stderr="login cancelled")
        )
        provider, _ = make_provider(runner)

        with pytest.raises(ProviderError) as exc_info:
            asyncio.run(provider.prepare(TARGET))

        assert exc_info.value.code == "login_failed"


class TestHostnameValidation:
    """Validation request, token fetch and attach."""

    def test_request_uses_txt_token_method_without_waiting(self) -> None:
        runner = ScriptedRunner()
        provider, _ = make_provider(runner)

        asyncio.run(provider.request_hostname_validation(TARGET, "www.example.com"))

        call = runner.calls[0]
        assert call[:4] == ["az", "staticwebapp", "hostname", "set"]
        assert call[call.index("--hostname") + 1] == "www.example.com"
        assert call[call.index("--validation-method") + 1] == "dns-txt-token"
        assert "--no-wait" in call

    @given(
        token=st.text(alphabet="abcdefghijklmnopqrstuvwxyz0123456789", min_size=1, max_size=40),
        nested=st.booleans(),
    )
    @settings(max_examples=100)
    def test_token_is_read_from_top_level_or_properties(self, token: str, nested: bool) -> None:
        """
        *For any* token, fetch_validation_token SHALL read validationToken
        from the top level or from "properties".
        """
        payload = {"validationToken": token, "domainVerificationToken": "dv-" + token}
        document = {"properties": payload} if nested else payload
        runner = ScriptedRunner().add(
            ["az", "staticwebapp", "hostname", "show"], stdout=json.dumps(document)
        )
        provider, _ = make_provider(runner)

        info = asyncio.run(provider.fetch_validation_token(TARGET, "www.example.com"))

        assert info == ValidationInfo(validation_token=token, domain_verification="dv-" + token)

    @pytest.mark.parametrize("returncode,stdout", [
        (3, ""),
        (0, ""),
        (0, "[]"),
        (0, json.dumps({"status": "Validating"})),
    ])
    def test_token_not_ready(self, returncode: int, stdout: str) -> None:
        runner = ScriptedRunner().add(
            ["az", "staticwebapp", "hostname", "show"], returncode=returncode, stdout=stdout
        )
        provider, _ = make_provider(runner)

        info = asyncio.run(provider.fetch_validation_token(TARGET, "www.example.com"))

        assert info is None or info.validation_token is None

    def test_attach_failure_raises(self) -> None:
        runner = ScriptedRunner().add(
            ["az", "staticwebapp", "hostname", "add"],
            returncode=1,
            stderr="CNAME record is invalid",
        )
        provider, _ = make_provider(runner)

        with pytest.raises(ProviderError) as exc_info:
            asyncio.run(provider.attach_hostname(TARGET, "www.example.com"))

        assert exc_info.value.code == "attach_failed"
        assert exc_info.value.details["response"] == "CNAME record is invalid"


class TestSimulationMode:
    """No commands run in simulation mode."""

    def test_full_sequence_runs_no_commands(self) -> None:
        runner = ScriptedRunner()
        provider = AzureStaticWebAppProvider(
            HostingConfig(),
            source_token=SOURCE_TOKEN,
            runner=runner,
            sleeper=RecordingSleeper(),
            simulation_mode=True,
        )

        async def run():
            await provider.prepare(TARGET)
            target = await provider.create_or_replace(TARGET, SOURCE)
            await provider.request_hostname_validation(target, "www.example.com")
            info = await provider.fetch_validation_token(target, "www.example.com")
            await provider.attach_hostname(target, "www.example.com")
            return target, info

        target, info = asyncio.run(run())

        assert isinstance(provider, HostingProvider)
        assert target.default_hostname.endswith(AzureStaticWebAppProvider.SIMULATED_HOST_SUFFIX)
        assert info.validation_token == AzureStaticWebAppProvider.SIMULATED_TOKEN
        assert runner.calls == []

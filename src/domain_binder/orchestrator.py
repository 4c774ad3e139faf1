"""
Domain Validation Orchestrator for the domain binder.

Drives one custom domain through the validation workflow:

- provision the hosting resource and read its default hostname
- request TXT validation and poll for the validation token
- publish the TXT record, then the routing record (A or CNAME)
- optionally wait for DNS propagation
- attach the custom domain to the hosting resource

The workflow is a forward-only state machine. Any DomainBinderError moves it
to FAILED; nothing already written is rolled back.
"""

import time
from datetime import datetime, timezone
from typing import Optional

from .audit_logger import AuditLogger
from .command_runner import CommandRunner
from .config import SystemConfig
from .dns_providers import DnsProvider, create_dns_provider
from .domain_analyzer import classify, is_apex, routing_record, validation_record
from .enums import ApexMode, LogLevel, TokenField, WorkflowState
from .exceptions import DomainBinderError, WorkflowCancelledError, WorkflowStateError
from .hosting_provider import AzureStaticWebAppProvider, HostingProvider
from .i18n import get_message, remediation_for
from .models import (
    DnsRecordRequest,
    DomainSpec,
    HostingTarget,
    SourceRepository,
    StateTransition,
    ValidationToken,
    WorkflowResult,
    ZoneHandle,
)
from .resolver import HostnameResolver
from .sleeper import RecordingSleeper, Sleeper
from .token_poller import ValidationTokenPoller


# Successful path, in order
WORKFLOW_ORDER = (
    WorkflowState.CREATED,
    WorkflowState.RESOURCE_PROVISIONED,
    WorkflowState.VALIDATION_REQUESTED,
    WorkflowState.TOKEN_OBTAINED,
    WorkflowState.TXT_RECORD_WRITTEN,
    WorkflowState.ROUTING_RECORD_WRITTEN,
    WorkflowState.AWAITING_PROPAGATION,
    WorkflowState.ATTACHED,
)

TERMINAL_STATES = frozenset({WorkflowState.ATTACHED, WorkflowState.FAILED})


class WorkflowStateMachine:
    """
    Forward-only workflow state.

    From each non-terminal state the only legal moves are to the next state
    in WORKFLOW_ORDER or to FAILED.
    """

    def __init__(self) -> None:
        self._state = WorkflowState.CREATED
        self._transitions: list[StateTransition] = []

    @property
    def state(self) -> WorkflowState:
        return self._state

    @property
    def transitions(self) -> list[StateTransition]:
        return self._transitions.copy()

    def allowed_targets(self) -> frozenset[WorkflowState]:
        if self._state in TERMINAL_STATES:
            return frozenset()
        following = WORKFLOW_ORDER[WORKFLOW_ORDER.index(self._state) + 1]
        return frozenset({following, WorkflowState.FAILED})

    def transition(self, to_state: WorkflowState) -> StateTransition:
        """
        Move to a new state and record the transition.

        Raises:
            WorkflowStateError: If the move is not allowed from the current state
        """
        if to_state not in self.allowed_targets():
            raise WorkflowStateError(
                code="illegal_transition",
                message=f"Cannot move from {self._state.value} to {to_state.value}",
                details={"from": self._state.value, "to": to_state.value},
            )
        record = StateTransition(
            from_state=self._state,
            to_state=to_state,
            timestamp=datetime.now(timezone.utc).isoformat(),
        )
        self._transitions.append(record)
        self._state = to_state
        return record


class DomainValidationOrchestrator:
    """
    Runs the custom domain validation workflow for one hosting target.

    The same orchestrator serves every DNS backend; backend differences
    live in the DnsProvider passed in.
    """

    COMPONENT = "Orchestrator"

    def __init__(
        self,
        config: SystemConfig,
        hosting_provider: HostingProvider,
        dns_provider: DnsProvider,
        sleeper: Optional[Sleeper] = None,
        logger: Optional[AuditLogger] = None,
        resolver: Optional[HostnameResolver] = None,
    ) -> None:
        """
        Initialize the orchestrator.

        Args:
            config: System configuration
            hosting_provider: Hosting provider management API
            dns_provider: DNS provider that receives the records
            sleeper: Wait used by the poller and the propagation delay
            logger: Optional audit logger
            resolver: Resolver for the apex address (A_RECORD mode)
        """
        self._config = config
        self._hosting = hosting_provider
        self._dns_provider = dns_provider
        self._sleeper = sleeper or Sleeper()
        self._logger = logger
        self._resolver = resolver or HostnameResolver(
            logger=logger, simulation_mode=config.simulation_mode
        )
        self._poller = ValidationTokenPoller(config.poller, self._sleeper, logger)
        self._zone: Optional[ZoneHandle] = None

    @property
    def config(self) -> SystemConfig:
        return self._config

    @property
    def sleeper(self) -> Sleeper:
        return self._sleeper

    def cancel(self) -> None:
        """Interrupt the pending wait; the run ends in FAILED."""
        self._sleeper.cancel()

    async def __aenter__(self) -> "DomainValidationOrchestrator":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self._dns_provider.close()

    async def run(
        self,
        raw_domain: str,
        target: HostingTarget,
        source: SourceRepository,
    ) -> WorkflowResult:
        """
        Bind a custom domain to a hosting target.

        Args:
            raw_domain: Custom domain, used literally
            target: Hosting resource (name and resource group)
            source: Repository the hosting resource is built from

        Returns:
            WorkflowResult in state ATTACHED or FAILED. Domain binder errors
            are reported in the result, never raised.
        """
        start_time = time.perf_counter()
        machine = WorkflowStateMachine()
        records: list[DnsRecordRequest] = []
        domain: Optional[DomainSpec] = None
        token: Optional[ValidationToken] = None
        language = self._config.language
        hosting = self._config.hosting

        try:
            domain = classify(raw_domain)
            self._log_info(
                f"Starting custom domain setup for {domain.full_domain}",
                {
                    "domain": domain.full_domain,
                    "root": domain.root,
                    "apex": is_apex(domain),
                    "webapp": target.name,
                    "resource_group": target.scope,
                    "dns_provider": self._dns_provider.get_name(),
                },
            )

            await self._hosting.prepare(target)
            target = await self._hosting.create_or_replace(target, source)
            self._advance(
                machine,
                WorkflowState.RESOURCE_PROVISIONED,
                get_message("step.resource_provisioned", language, hostname=target.default_hostname),
            )

            await self._hosting.request_hostname_validation(
                target, domain.full_domain, hosting.validation_method
            )
            self._advance(
                machine,
                WorkflowState.VALIDATION_REQUESTED,
                get_message("step.validation_requested", language),
            )

            full_domain = domain.full_domain
            bound_target = target
            token = await self._poller.poll(
                lambda: self._hosting.fetch_validation_token(bound_target, full_domain)
            )
            self._advance(
                machine,
                WorkflowState.TOKEN_OBTAINED,
                get_message("step.token_obtained", language),
            )

            txt = validation_record(domain, self._txt_content(token), self._config.dns.ttl)
            await self._write(domain, txt)
            records.append(txt)
            self._advance(
                machine,
                WorkflowState.TXT_RECORD_WRITTEN,
                get_message("step.txt_record_written", language, name=txt.name),
            )

            routing = await self._routing_record(domain, target)
            await self._write(domain, routing)
            records.append(routing)
            self._advance(
                machine,
                WorkflowState.ROUTING_RECORD_WRITTEN,
                get_message(
                    "step.routing_record_written", language,
                    type=routing.type.value, name=routing.name,
                ),
            )

            delay = self._config.workflow.propagation_delay_seconds
            wait = self._config.workflow.wait_for_propagation
            self._advance(
                machine,
                WorkflowState.AWAITING_PROPAGATION,
                get_message("step.awaiting_propagation", language, minutes=round(delay / 60))
                if wait else get_message("step.skip_propagation", language),
            )
            if wait:
                await self._sleeper.sleep(delay)

            await self._hosting.attach_hostname(
                target, domain.full_domain, hosting.validation_method
            )
            self._advance(
                machine,
                WorkflowState.ATTACHED,
                get_message("step.attached", language),
            )

        except DomainBinderError as e:
            return self._create_failed_result(
                machine, e, domain, target, token, records, start_time
            )

        return WorkflowResult(
            state=machine.state,
            domain=domain,
            target=target,
            token=token,
            records=records,
            transitions=machine.transitions,
            total_duration_ms=(time.perf_counter() - start_time) * 1000,
        )

    def _advance(self, machine: WorkflowStateMachine, state: WorkflowState, message: str) -> None:
        transition = machine.transition(state)
        self._log_info(
            message,
            {"from": transition.from_state.value, "to": transition.to_state.value},
        )

    def _txt_content(self, token: ValidationToken) -> str:
        """Value published in the TXT record."""
        if self._config.hosting.txt_token_field == TokenField.DOMAIN_VERIFICATION:
            return token.domain_verification or token.value
        return token.value

    async def _get_zone(self, domain: DomainSpec) -> ZoneHandle:
        if self._zone is None or self._zone.name != domain.root:
            self._zone = await self._dns_provider.resolve_zone(domain.root)
        return self._zone

    async def _write(self, domain: DomainSpec, record: DnsRecordRequest) -> None:
        zone = await self._get_zone(domain)
        await self._dns_provider.upsert_record(zone, record)

    async def _routing_record(self, domain: DomainSpec, target: HostingTarget) -> DnsRecordRequest:
        resolved_ip = None
        if is_apex(domain) and self._dns_provider.apex_mode == ApexMode.A_RECORD:
            resolved_ip = await self._resolver.resolve_ipv4(target.default_hostname)

        return routing_record(
            domain,
            target.default_hostname,
            resolved_ip=resolved_ip,
            apex_mode=self._dns_provider.apex_mode,
            ttl=self._config.dns.ttl,
            proxied=self._dns_provider.proxied,
        )

    def _create_failed_result(
        self,
        machine: WorkflowStateMachine,
        error: DomainBinderError,
        domain: Optional[DomainSpec],
        target: HostingTarget,
        token: Optional[ValidationToken],
        records: list[DnsRecordRequest],
        start_time: float,
    ) -> WorkflowResult:
        """Move to FAILED and attach the error and a remediation hint."""
        failed_step = machine.state
        if failed_step not in TERMINAL_STATES:
            machine.transition(WorkflowState.FAILED)

        if isinstance(error, WorkflowCancelledError):
            remediation = get_message("remediation.cancelled", self._config.language)
        else:
            remediation = remediation_for(failed_step, self._config.language)

        self._log_error(
            f"Custom domain setup failed after {failed_step.value}: {error.message}",
            error,
            {"failed_step": failed_step.value, "code": error.code},
        )

        return WorkflowResult(
            state=machine.state,
            domain=domain,
            target=target,
            token=token,
            records=records,
            transitions=machine.transitions,
            failed_step=failed_step,
            error=error.to_dict(),
            remediation=remediation,
            total_duration_ms=(time.perf_counter() - start_time) * 1000,
        )

    def _log_info(self, message: str, data: dict) -> None:
        """Log an info message if logger is available."""
        if self._logger:
            self._logger.log(LogLevel.INFO, self.COMPONENT, message, data)

    def _log_error(self, message: str, error: Exception, data: dict) -> None:
        """Log an error message if logger is available."""
        if self._logger:
            self._logger.log_error(self.COMPONENT, message, error, data)


def create_orchestrator(
    config: SystemConfig,
    logger: Optional[AuditLogger] = None,
    sleeper: Optional[Sleeper] = None,
    runner: Optional[CommandRunner] = None,
) -> DomainValidationOrchestrator:
    """
    Wire the Azure hosting provider and the configured DNS provider.

    In simulation mode a RecordingSleeper is used unless a sleeper is given,
    so no delay blocks.
    """
    if sleeper is None:
        sleeper = RecordingSleeper() if config.simulation_mode else Sleeper()

    hosting_provider = AzureStaticWebAppProvider(
        config.hosting,
        source_token=config.source_token,
        runner=runner,
        sleeper=sleeper,
        logger=logger,
        simulation_mode=config.simulation_mode,
    )
    dns_provider = create_dns_provider(
        config.dns,
        logger=logger,
        simulation_mode=config.simulation_mode,
    )
    resolver = HostnameResolver(logger=logger, simulation_mode=config.simulation_mode)

    return DomainValidationOrchestrator(
        config,
        hosting_provider=hosting_provider,
        dns_provider=dns_provider,
        sleeper=sleeper,
        logger=logger,
        resolver=resolver,
    )

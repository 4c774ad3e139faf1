"""
DNS providers for custom domain validation records.

Two interchangeable backends implement the DnsProvider interface:

- CloudflareProvider: zone-scoped. The zone id is looked up by root domain
  before any write, records are created with POST and the JSON ``success``
  flag of every response is checked.
- GoDaddyProvider: domain-scoped. Records are upserted with PUT addressed by
  domain, type and name, so repeating a write is harmless.

Neither backend retries; every failure is reported to the caller.
"""

from abc import abstractmethod
from typing import Any, Optional, Protocol, runtime_checkable

import httpx

from .audit_logger import AuditLogger
from .config import CloudflareConfig, DnsConfig, GoDaddyConfig
from .enums import ApexMode, DnsBackend, RecordType
from .exceptions import DnsLookupError, DnsWriteError, PrerequisiteError
from .models import DnsRecordRequest, ZoneHandle, is_absent


@runtime_checkable
class DnsProvider(Protocol):
    """Protocol defining the interface for DNS providers."""

    apex_mode: ApexMode
    proxied: bool

    @abstractmethod
    async def resolve_zone(self, root: str) -> ZoneHandle:
        """
        Find the zone that holds records for a root domain.

        Raises:
            DnsLookupError: If the zone does not exist or the lookup fails
        """
        ...

    @abstractmethod
    async def upsert_record(self, zone: ZoneHandle, record: DnsRecordRequest) -> None:
        """
        Write a record into a zone.

        Raises:
            DnsWriteError: If the provider rejects the record
        """
        ...

    @abstractmethod
    def get_name(self) -> str:
        ...

    @abstractmethod
    async def close(self) -> None:
        ...


def _response_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


class _HttpProvider:
    """Shared httpx client handling for the REST backends."""

    def __init__(
        self,
        base_url: str,
        headers: dict[str, str],
        timeout: float,
        transport: Optional[httpx.AsyncBaseTransport],
        logger: Optional[AuditLogger],
        simulation_mode: bool,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._headers = headers
        self._timeout = timeout
        self._transport = transport
        self._logger = logger
        self._simulation_mode = simulation_mode
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        self._get_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                headers=self._headers,
                timeout=httpx.Timeout(self._timeout),
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    def _log(self, message: str, data: Optional[dict] = None) -> None:
        if self._logger:
            self._logger.info(self.get_name(), message, data)

    def get_name(self) -> str:
        raise NotImplementedError


class CloudflareProvider(_HttpProvider):
    """Cloudflare API v4, authenticated with a bearer token."""

    SIMULATED_ZONE_ID = "simulated-zone"

    def __init__(
        self,
        config: CloudflareConfig,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        logger: Optional[AuditLogger] = None,
        simulation_mode: bool = False,
    ) -> None:
        super().__init__(
            base_url=config.api_url,
            headers={
                "Authorization": f"Bearer {config.api_token}",
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
            logger=logger,
            simulation_mode=simulation_mode,
        )
        self.apex_mode = config.apex_mode
        self.proxied = config.proxied

    def get_name(self) -> str:
        return "cloudflare"

    async def resolve_zone(self, root: str) -> ZoneHandle:
        """Look up the zone id of a root domain (GET /zones?name=root)."""
        self._log(f"Getting Cloudflare zone id for domain: {root}", {"root": root})
        if self._simulation_mode:
            return ZoneHandle(zone_id=self.SIMULATED_ZONE_ID, name=root)

        try:
            response = await self._get_client().get("/zones", params={"name": root})
        except httpx.HTTPError as e:
            raise DnsLookupError(
                code="zone_lookup_failed",
                message=f"Zone lookup for {root} failed: {e}",
                details={"root": root},
            ) from e

        body = _response_body(response)
        zone_id = None
        if isinstance(body, dict):
            results = body.get("result") or []
            if isinstance(results, list) and results and isinstance(results[0], dict):
                zone_id = results[0].get("id")

        if not response.is_success or not isinstance(zone_id, str) or is_absent(zone_id):
            raise DnsLookupError(
                code="zone_not_found",
                message=f"Failed to get zone id for domain {root}",
                details={"root": root, "status_code": response.status_code, "response": body},
            )

        self._log(f"Cloudflare zone id: {zone_id}", {"zone_id": zone_id})
        return ZoneHandle(zone_id=zone_id, name=root)

    async def upsert_record(self, zone: ZoneHandle, record: DnsRecordRequest) -> None:
        """Create a record (POST /zones/{id}/dns_records) and check ``success``."""
        send_proxied = record.type != RecordType.TXT
        body = record.to_cloudflare_body(send_proxied=send_proxied)
        self._log(
            f"Adding {record.type.value} record to Cloudflare DNS: {record.name}",
            {"zone_id": zone.zone_id, "record": body},
        )
        if self._simulation_mode:
            return

        try:
            response = await self._get_client().post(
                f"/zones/{zone.zone_id}/dns_records", json=body
            )
        except httpx.HTTPError as e:
            raise DnsWriteError(
                code="record_write_failed",
                message=f"Failed to add {record.type.value} record to Cloudflare DNS: {e}",
                details={"record": body},
            ) from e

        result = _response_body(response)
        success = isinstance(result, dict) and result.get("success") is True
        if not response.is_success or not success:
            raise DnsWriteError(
                code="record_rejected",
                message=f"Failed to add {record.type.value} record to Cloudflare DNS",
                details={
                    "record": body,
                    "status_code": response.status_code,
                    "response": result,
                },
            )


class GoDaddyProvider(_HttpProvider):
    """GoDaddy domains API v1, authenticated with an sso-key pair."""

    def __init__(
        self,
        config: GoDaddyConfig,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        logger: Optional[AuditLogger] = None,
        simulation_mode: bool = False,
    ) -> None:
        super().__init__(
            base_url=config.api_url,
            headers={
                "Authorization": f"sso-key {config.api_key}:{config.api_secret}",
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
            logger=logger,
            simulation_mode=simulation_mode,
        )
        self.apex_mode = config.apex_mode
        self.proxied = False

    def get_name(self) -> str:
        return "godaddy"

    async def resolve_zone(self, root: str) -> ZoneHandle:
        """The root domain itself addresses the records; no lookup is needed."""
        return ZoneHandle(zone_id=root, name=root)

    async def upsert_record(self, zone: ZoneHandle, record: DnsRecordRequest) -> None:
        """Replace the records of a type and name (PUT /domains/{root}/records/{type}/{name})."""
        path = f"/domains/{zone.zone_id}/records/{record.type.value}/{record.name}"
        body = record.to_godaddy_body()
        self._log(
            f"Adding {record.type.value} record to GoDaddy DNS: {record.name}",
            {"domain": zone.zone_id, "record": body},
        )
        if self._simulation_mode:
            return

        try:
            response = await self._get_client().put(path, json=body)
        except httpx.HTTPError as e:
            raise DnsWriteError(
                code="record_write_failed",
                message=f"Failed to add {record.type.value} record to GoDaddy DNS: {e}",
                details={"path": path, "record": body},
            ) from e

        if not response.is_success:
            raise DnsWriteError(
                code="record_rejected",
                message=f"Failed to add {record.type.value} record to GoDaddy DNS",
                details={
                    "path": path,
                    "record": body,
                    "status_code": response.status_code,
                    "response": _response_body(response),
                },
            )


def create_dns_provider(
    config: DnsConfig,
    logger: Optional[AuditLogger] = None,
    simulation_mode: bool = False,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> DnsProvider:
    """
    Create the DNS provider selected by the configuration.

    Raises:
        PrerequisiteError: If the selected backend has no configuration
    """
    if config.backend == DnsBackend.CLOUDFLARE:
        if config.cloudflare is None:
            raise PrerequisiteError(
                code="missing_dns_config",
                message="Cloudflare is selected but not configured",
            )
        return CloudflareProvider(
            config.cloudflare,
            timeout=config.timeout_seconds,
            transport=transport,
            logger=logger,
            simulation_mode=simulation_mode,
        )

    if config.godaddy is None:
        raise PrerequisiteError(
            code="missing_dns_config",
            message="GoDaddy is selected but not configured",
        )
    return GoDaddyProvider(
        config.godaddy,
        timeout=config.timeout_seconds,
        transport=transport,
        logger=logger,
        simulation_mode=simulation_mode,
    )

"""
LogicMonitor Client
===================
Public operations of the LogicMonitor RPC API.
"""

import json
from collections.abc import Mapping
from datetime import datetime
from typing import Any, Optional, Union

import httpx
import structlog

from logicmonitor_rpc.config import Credentials, Settings, get_settings
from logicmonitor_rpc.errors import NotFoundError, ValidationError
from logicmonitor_rpc.models import (
    SDT,
    Account,
    Alert,
    DataSourceInstance,
    EscalationChain,
    Host,
    HostGroup,
    HostsResult,
    decode,
    decode_many,
)
from logicmonitor_rpc.request import RequestBuilder, encode_value, indexed_params
from logicmonitor_rpc.sdt import EntityKind, RecurrenceType, SDTPlan, SDTWindowPlanner, TimeLike
from logicmonitor_rpc.timeseries import TimeSeriesData, TimeSeriesNormalizer
from logicmonitor_rpc.transport import Transport

logger = structlog.get_logger()

ALL_HOSTS_GROUP_ID = 1


class LogicMonitorClient:
    """
    Client for the LogicMonitor RPC API.

    Each operation performs exactly one synchronous request. Errors are raised
    to the caller as-is.

    Usage:
        from logicmonitor_rpc import LogicMonitorClient, Credentials

        with LogicMonitorClient(Credentials("acme", "bob", "s3cret")) as lm:
            host = lm.get_host("web01")
            lm.set_quick_sdt("Host", "web01", hours=2, comment="patching")
    """

    def __init__(
        self,
        credentials: Optional[Credentials] = None,
        settings: Optional[Settings] = None,
        http_client: Optional[httpx.Client] = None,
    ):
        """
        Initialize the client.

        Args:
            credentials: Authentication triple (read from settings if not provided)
            settings: Configuration object (uses LM_* environment if not provided)
            http_client: Preconfigured httpx client
        """
        self.settings = settings or get_settings()
        self.credentials = credentials or Credentials.from_settings(self.settings)

        self.builder = RequestBuilder(
            self.credentials,
            service_domain=self.settings.service_domain,
            rpc_path=self.settings.rpc_path,
        )
        self.transport = Transport(
            self.builder,
            timeout=self.settings.timeout,
            user_agent=self.settings.user_agent,
            log_secrets=self.settings.log_secrets,
            http_client=http_client,
        )
        self.normalizer = TimeSeriesNormalizer()
        self.planner = SDTWindowPlanner()

    # -- escalation chains -------------------------------------------------

    def get_escalation_chains(self) -> list[EscalationChain]:
        return decode_many(EscalationChain, self.transport.fetch("getEscalationChains"))

    def get_escalation_chain_by_name(self, name: str) -> Optional[EscalationChain]:
        """Return the chain called ``name``, or None."""
        return next(
            (chain for chain in self.get_escalation_chains() if chain.name == name),
            None,
        )

    def update_escalation_chain(self, chain: Union[EscalationChain, Mapping[str, Any]]) -> Any:
        """
        Update an escalation chain.

        ``id`` and ``name`` are the minimum, but anything not sent is reset to
        its default by the API. ``destination`` is sent JSON-encoded.
        """
        if isinstance(chain, EscalationChain):
            chain = chain.model_dump(by_alias=True, exclude_none=True)
        if not chain.get("id") or not chain.get("name"):
            raise ValidationError("Escalation chain needs at least 'id' and 'name'")

        params = {key: encode_value(value) for key, value in chain.items()}
        if chain.get("destination") is not None:
            params["destination"] = json.dumps(chain["destination"], separators=(",", ":"))
        return self.transport.fetch("updateEscalatingChain", params)

    # -- accounts ----------------------------------------------------------

    def get_accounts(self) -> list[Account]:
        return decode_many(Account, self.transport.fetch("getAccounts"))

    def get_account_by_email(self, email: str) -> Account:
        """Find an account by email, case-insensitively."""
        if not email:
            raise ValidationError("'email' is required")

        for account in self.get_accounts():
            if account.email and email.lower() in account.email.lower():
                return account
        raise NotFoundError(f"Failed to find account with email <{email}>")

    # -- time series -------------------------------------------------------

    def get_data(
        self,
        host: str,
        datasource: Optional[str] = None,
        datasource_instance: Optional[str] = None,
        start: Optional[Union[int, datetime]] = None,
        end: Optional[Union[int, datetime]] = None,
        aggregate: Optional[str] = None,
        period: Optional[str] = None,
        datapoints: Optional[Union[list[str], tuple[str, ...]]] = None,
    ) -> TimeSeriesData:
        """
        Fetch time-series data for a host.

        Args:
            host: Display name of the host
            datasource: DataSource name (exclusive with ``datasource_instance``)
            datasource_instance: Unique DataSource instance name
            start: Epoch seconds or datetime
            end: Epoch seconds or datetime
            aggregate: AVERAGE, MAX, MIN or LAST
            period: e.g. ``2hours``; ignored by the API when start and end are set
            datapoints: Datapoint names to restrict the result to

        Returns:
            Points per instance, plus the datapoint names and tz offset
        """
        if not host:
            raise ValidationError("'host' is required")
        if bool(datasource) == bool(datasource_instance):
            raise ValidationError(
                "Exactly one of 'datasource' or 'datasource_instance' is required"
            )
        if datapoints is not None and not isinstance(datapoints, (list, tuple)):
            raise ValidationError("'datapoints' must be a list")

        params: dict[str, Any] = {"host": host}
        if datasource:
            params["dataSource"] = datasource
        else:
            params["dataSourceInstance"] = datasource_instance
        params.update(
            start=_epoch(start),
            end=_epoch(end),
            aggregate=aggregate or None,
            period=period or None,
        )
        params.update(indexed_params("dataPoint", datapoints or []))

        data = self.transport.fetch("getData", params)
        return self.normalizer.normalize_payload(data)

    def get_instance_data(self, instance: DataSourceInstance, **kwargs: Any) -> TimeSeriesData:
        """``get_data`` for a DataSource instance record."""
        return self.get_data(
            host=instance.host_name,
            datasource_instance=instance.name,
            **kwargs,
        )

    # -- alerts ------------------------------------------------------------

    def get_alerts(self, **filters: Any) -> list[Alert]:
        """
        Return alerts matching ``filters`` (passed through as query parameters).

        See http://help.logicmonitor.com/developers-guide/manage-alerts/ for
        the available filters.
        """
        data = self.transport.fetch("getAlerts", filters) or {}
        if not data.get("total"):
            return []
        return decode_many(Alert, data.get("alerts"))

    # -- hosts -------------------------------------------------------------

    def get_host(self, display_name: str) -> Host:
        if not display_name:
            raise ValidationError("Missing display name")
        return decode(Host, self.transport.fetch("getHost", {"displayName": display_name}))

    def get_hosts(self, hostgroup_id: int) -> HostsResult:
        """Return the hosts in a group along with the group."""
        if not hostgroup_id:
            raise ValidationError("Missing hostgroup id")

        data = self.transport.fetch("getHosts", {"hostGroupId": hostgroup_id}) or {}
        hostgroup = data.get("hostgroup")
        return HostsResult(
            hosts=decode_many(Host, data.get("hosts")),
            hostgroup=decode(HostGroup, hostgroup) if hostgroup else None,
        )

    def get_all_hosts(self) -> HostsResult:
        """All hosts in the portal. This will probably take a while."""
        return self.get_hosts(ALL_HOSTS_GROUP_ID)

    # -- scheduled down time -----------------------------------------------

    def set_sdt(
        self,
        entity_kind: Union[EntityKind, str],
        entity_id: Union[str, int],
        start: TimeLike,
        end: TimeLike,
        comment: Optional[str] = None,
        recurrence: Union[RecurrenceType, int] = RecurrenceType.ONE_TIME,
    ) -> SDT:
        """
        Schedule a one-time down time window.

        Args:
            entity_kind: Host, HostGroup, HostDataSource, DataSourceInstance,
                HostDataSourceInstanceGroup or Agent
            entity_id: Numeric id; hosts may also be given by display name
            start: datetime or ISO-8601 string
            end: datetime or ISO-8601 string
            comment: Optional note
            recurrence: Only 1 (one-time) is supported
        """
        plan = self.planner.plan(entity_kind, entity_id, start, end, comment, recurrence)
        return self._send_sdt(plan)

    def set_quick_sdt(
        self,
        entity_kind: Union[EntityKind, str],
        entity_id: Union[str, int],
        comment: Optional[str] = None,
        **duration: Optional[float],
    ) -> SDT:
        """Schedule down time from now for exactly one of minutes/hours/days/weeks."""
        plan = self.planner.plan_duration(entity_kind, entity_id, comment=comment, **duration)
        return self._send_sdt(plan)

    def _send_sdt(self, plan: SDTPlan) -> SDT:
        url = self.builder.build(plan.method, plan.params)
        data = self.transport.send(url)
        logger.info("Scheduled down time", method=plan.method)
        return decode(SDT, data or {})

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self.transport.close()

    def __enter__(self) -> "LogicMonitorClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()


def _epoch(value: Optional[Union[int, datetime]]) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return int(value.timestamp())
    return int(value)

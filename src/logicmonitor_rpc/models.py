"""
Record Models
=============
Pydantic models for entities returned by the RPC API.

Field names are mapped from the API's camelCase keys by an alias generator;
keys that don't follow the convention carry an explicit alias. Unknown keys
are kept as extra attributes.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, Optional, TypeVar

import pydantic
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from logicmonitor_rpc.errors import SchemaMismatchError

RecordT = TypeVar("RecordT", bound="Record")


class Record(BaseModel):
    """Base for all API records."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )


class Host(Record):
    """A monitored device."""

    id: int
    name: Optional[str] = None
    display_name: Optional[str] = Field(default=None, alias="displayedAs")
    description: Optional[str] = None
    host_group_ids: Optional[str] = None
    agent_id: Optional[int] = None
    alert_enable: Optional[bool] = None


class HostGroup(Record):
    """A group of hosts."""

    id: int
    name: Optional[str] = None
    full_path: Optional[str] = None
    description: Optional[str] = None
    parent_id: Optional[int] = None
    alert_enable: Optional[bool] = None


@dataclass
class HostsResult:
    """Hosts of a group together with the group itself."""

    hosts: list[Host] = field(default_factory=list)
    hostgroup: Optional[HostGroup] = None


class Account(Record):
    """A portal user account."""

    id: int
    username: Optional[str] = None
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    status: Optional[str] = None


class Alert(Record):
    """An active or historical alert."""

    id: Any
    type: Optional[str] = None
    level: Optional[str] = None
    host: Optional[str] = None
    data_source: Optional[str] = Field(default=None, alias="dataSource")
    data_source_instance: Optional[str] = Field(default=None, alias="dataSourceInstance")
    data_point: Optional[str] = Field(default=None, alias="dataPoint")
    value: Optional[str] = None
    start_on: Optional[int] = None
    acked: Optional[bool] = None


class EscalationChain(Record):
    """An alert escalation chain."""

    id: int
    name: str
    description: Optional[str] = None
    enable_throttling: Optional[bool] = None
    destination: list[Any] = Field(default_factory=list)


class DataSourceInstance(Record):
    """An instance of a DataSource applied to a host."""

    id: int
    name: Optional[str] = None
    host_name: Optional[str] = None
    description: Optional[str] = None
    enabled: Optional[bool] = None
    datasource_displayed_as: Optional[str] = Field(default=None, alias="dataSourceDisplayedAs")
    datasource_id: Optional[int] = Field(default=None, alias="dataSourceId")
    host_datasource_id: Optional[int] = Field(default=None, alias="hostDataSourceId")
    discovery_instance_id: Optional[int] = None
    host_id: Optional[int] = None
    alert_enable: Optional[bool] = None
    has_alert: Optional[bool] = None
    has_graph: Optional[bool] = None
    has_unconfirmed_alert: Optional[bool] = Field(default=None, alias="hasUnConfirmedAlert")
    wildalias: Optional[str] = None
    wildvalue: Optional[str] = None
    wildvalue2: Optional[str] = None

    @field_validator("description", "wildalias", "wildvalue", "wildvalue2", mode="before")
    @classmethod
    def empty_to_none(cls, v: Any) -> Any:
        if v == "":
            return None
        return v


class SDT(Record):
    """A scheduled down time window as stored by the API."""

    id: Optional[int] = None
    type: Optional[int] = None
    comment: Optional[str] = None
    admin: Optional[str] = None
    is_effective: Optional[bool] = None


def decode(model: type[RecordT], payload: Any) -> RecordT:
    """Build a record from a decoded JSON object."""
    try:
        return model.model_validate(payload)
    except pydantic.ValidationError as e:
        raise SchemaMismatchError(f"Cannot decode {model.__name__}: {e}") from e


def decode_many(model: type[RecordT], payloads: Optional[Iterable[Any]]) -> list[RecordT]:
    """Build records from a decoded JSON array; ``None`` yields an empty list."""
    return [decode(model, payload) for payload in payloads or []]

"""
Scheduled Down Time
===================
Translate a maintenance window on an entity into ``set*SDT`` wire parameters.

Months are sent zero-based (January is 0); all arithmetic on the window is
done with ordinary datetimes before the conversion.
"""

import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum, IntEnum
from typing import Optional, Union

import structlog

from logicmonitor_rpc.errors import (
    UnsupportedEntityError,
    UnsupportedRecurrenceError,
    ValidationError,
)
from logicmonitor_rpc.request import ParamValue

logger = structlog.get_logger()

NUMERIC_ID = re.compile(r"[0-9]+")
DURATION_UNITS = ("minutes", "hours", "days", "weeks")

TimeLike = Union[datetime, str]


class EntityKind(str, Enum):
    """Entities an SDT window can be attached to."""

    HOST = "Host"
    HOST_GROUP = "HostGroup"
    HOST_DATASOURCE = "HostDataSource"
    DATASOURCE_INSTANCE = "DataSourceInstance"
    HOST_DATASOURCE_INSTANCE_GROUP = "HostDataSourceInstanceGroup"
    AGENT = "Agent"


class RecurrenceType(IntEnum):
    """SDT recurrence. Only one-time windows are supported."""

    ONE_TIME = 1


@dataclass(frozen=True)
class EntityRule:
    """Wire conventions for one entity kind."""

    method: str
    id_key: str
    name_key: Optional[str] = None


ENTITY_RULES: dict[EntityKind, EntityRule] = {
    EntityKind.HOST: EntityRule("setHostSDT", "hostId", name_key="host"),
    EntityKind.HOST_GROUP: EntityRule("setHostGroupSDT", "hostGroupId"),
    EntityKind.HOST_DATASOURCE: EntityRule("setHostDataSourceSDT", "hostDataSourceId"),
    EntityKind.DATASOURCE_INSTANCE: EntityRule(
        "setDataSourceInstanceSDT", "dataSourceInstanceId"
    ),
    EntityKind.HOST_DATASOURCE_INSTANCE_GROUP: EntityRule(
        "setHostDataSourceInstanceGroupSDT", "hostDataSourceInstanceGroupId"
    ),
    EntityKind.AGENT: EntityRule("setAgentSDT", "agentId"),
}


@dataclass(frozen=True)
class SDTWindow:
    """A validated one-time maintenance window."""

    entity_kind: EntityKind
    entity_id: str
    start: datetime
    end: datetime
    comment: Optional[str] = None
    recurrence: RecurrenceType = RecurrenceType.ONE_TIME


@dataclass(frozen=True)
class SDTPlan:
    """RPC method and query parameters for setting an SDT window."""

    method: str
    params: dict[str, ParamValue]


def coerce_entity_kind(value: Union[EntityKind, str]) -> EntityKind:
    """Accept an ``EntityKind`` or its wire name, case-insensitively."""
    if isinstance(value, EntityKind):
        return value
    for kind in EntityKind:
        if str(value).lower() == kind.value.lower():
            return kind
    raise UnsupportedEntityError(f"Unknown entity kind {value!r}")


def parse_time(value: TimeLike, name: str = "time") -> datetime:
    """Accept a datetime or an ISO-8601 string."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError as e:
            raise ValidationError(f"'{name}' is not an ISO-8601 time: {value!r}") from e
    raise ValidationError(f"'{name}' must be a datetime or ISO-8601 string")


def _calendar_fields(moment: datetime, prefix: str = "") -> dict[str, ParamValue]:
    def key(name: str) -> str:
        return f"{prefix}{name.capitalize()}" if prefix else name

    return {
        key("year"): moment.year,
        key("month"): moment.month - 1,
        key("day"): moment.day,
        key("hour"): moment.hour,
        key("minute"): moment.minute,
    }


class SDTWindowPlanner:
    """Builds ``set{Kind}SDT`` requests."""

    def window(
        self,
        entity_kind: Union[EntityKind, str],
        entity_id: Union[str, int],
        start: TimeLike,
        end: TimeLike,
        comment: Optional[str] = None,
        recurrence: Union[RecurrenceType, int] = RecurrenceType.ONE_TIME,
    ) -> SDTWindow:
        """Validate arguments into an ``SDTWindow``."""
        kind = coerce_entity_kind(entity_kind)

        if isinstance(recurrence, bool) or not isinstance(recurrence, int) or recurrence != 1:
            raise UnsupportedRecurrenceError(
                f"Unsupported SDT type {recurrence!r}, only one-time (1) is supported"
            )
        recurrence = RecurrenceType(recurrence)

        if entity_id is None or str(entity_id) == "":
            raise ValidationError("'entity_id' is required")

        start_dt = parse_time(start, "start")
        end_dt = parse_time(end, "end")
        comparable = (start_dt.tzinfo is None) == (end_dt.tzinfo is None)
        if comparable and end_dt < start_dt:
            logger.warning(
                "SDT window ends before it starts",
                entity_kind=kind.value,
                start=start_dt.isoformat(),
                end=end_dt.isoformat(),
            )

        return SDTWindow(
            entity_kind=kind,
            entity_id=str(entity_id),
            start=start_dt,
            end=end_dt,
            comment=comment,
            recurrence=recurrence,
        )

    def plan_window(self, window: SDTWindow) -> SDTPlan:
        """Encode a window as wire parameters."""
        rule = ENTITY_RULES[window.entity_kind]

        if NUMERIC_ID.fullmatch(window.entity_id):
            params: dict[str, ParamValue] = {rule.id_key: window.entity_id}
        elif rule.name_key:
            params = {rule.name_key: window.entity_id}
        else:
            raise UnsupportedEntityError(
                f"{window.entity_kind.value} SDT needs a numeric id, got {window.entity_id!r}"
            )

        params["type"] = int(window.recurrence)
        if window.comment:
            params["comment"] = window.comment
        params.update(_calendar_fields(window.start))
        params.update(_calendar_fields(window.end, prefix="end"))

        return SDTPlan(method=rule.method, params=params)

    def plan(
        self,
        entity_kind: Union[EntityKind, str],
        entity_id: Union[str, int],
        start: TimeLike,
        end: TimeLike,
        comment: Optional[str] = None,
        recurrence: Union[RecurrenceType, int] = RecurrenceType.ONE_TIME,
    ) -> SDTPlan:
        """
        Plan an SDT window between ``start`` and ``end``.

        Args:
            entity_kind: Entity the window applies to
            entity_id: Numeric id, or a display name for hosts
            start: Window start, datetime or ISO-8601 string
            end: Window end; not required to be after ``start``
            comment: Optional note, omitted from the request when empty
            recurrence: Must be one-time

        Returns:
            Method name and parameters for the request
        """
        return self.plan_window(
            self.window(entity_kind, entity_id, start, end, comment, recurrence)
        )

    def plan_duration(
        self,
        entity_kind: Union[EntityKind, str],
        entity_id: Union[str, int],
        comment: Optional[str] = None,
        now: Optional[datetime] = None,
        **duration: Optional[float],
    ) -> SDTPlan:
        """
        Plan a window starting now (UTC) and lasting one duration unit.

        Exactly one of ``minutes``, ``hours``, ``days`` or ``weeks`` must be given.
        """
        unknown = set(duration) - set(DURATION_UNITS)
        if unknown:
            raise ValidationError(f"Unknown duration unit(s): {', '.join(sorted(unknown))}")

        units = {unit: value for unit, value in duration.items() if value is not None}
        if len(units) != 1:
            raise ValidationError(
                f"Exactly one of {', '.join(DURATION_UNITS)} is required, got {len(units)}"
            )
        ((unit, magnitude),) = units.items()
        if magnitude <= 0:
            raise ValidationError(f"'{unit}' must be positive")

        start = now or datetime.now(timezone.utc)
        end = start + timedelta(**{unit: magnitude})

        return self.plan(entity_kind, entity_id, start, end, comment=comment)

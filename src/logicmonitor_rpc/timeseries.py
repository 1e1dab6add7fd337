"""
Time Series
===========
Normalize ``getData`` payloads into per-instance, per-timestamp records.

A raw payload looks like::

    {
        "dataPoints": ["cpu", "mem"],
        "values": {"instance": [[1000, "t1", 10, 20], ...]},
        "tzoffset": 0,
    }

Each sample row starts with the epoch and a formatted timestamp, followed by
one value per datapoint in declaration order.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

import structlog

from logicmonitor_rpc.errors import SchemaMismatchError

logger = structlog.get_logger()

TIMESTAMP_FIELDS = 2


@dataclass(frozen=True)
class TimeSeriesPoint:
    """One sample of every datapoint at a single timestamp."""

    epoch: int
    formatted_time: str
    values: dict[str, Any]

    @property
    def timestamp(self) -> datetime:
        return datetime.fromtimestamp(self.epoch, tz=timezone.utc)


@dataclass
class TimeSeriesData:
    """Normalized ``getData`` result."""

    datapoints: list[str]
    instances: dict[str, list[TimeSeriesPoint]] = field(default_factory=dict)
    tzoffset: Optional[int] = None

    def points(self, instance: str) -> list[TimeSeriesPoint]:
        """Points for ``instance``, empty if the instance returned nothing."""
        return self.instances.get(instance, [])

    def __len__(self) -> int:
        return sum(len(points) for points in self.instances.values())


class TimeSeriesNormalizer:
    """Turns parallel arrays of timestamps, datapoints and instances into records."""

    def normalize(
        self,
        datapoints: Sequence[str],
        raw_values: Mapping[str, Sequence[Sequence[Any]]],
    ) -> dict[str, list[TimeSeriesPoint]]:
        """
        Zip every sample row against the datapoint names.

        Row order within an instance is kept as returned by the API. A row
        whose value count differs from the number of datapoints is an error;
        rows are never truncated or padded.

        Args:
            datapoints: Datapoint names in declaration order
            raw_values: Sample rows keyed by instance

        Returns:
            Points keyed by instance
        """
        names = list(datapoints)
        result: dict[str, list[TimeSeriesPoint]] = {}

        for instance, rows in raw_values.items():
            points = []
            for row in rows:
                if isinstance(row, (str, bytes)) or not isinstance(row, Sequence):
                    raise SchemaMismatchError(
                        f"Sample row for instance {instance!r} is not a list",
                        instance=instance,
                    )
                values = row[TIMESTAMP_FIELDS:]
                if len(row) < TIMESTAMP_FIELDS or len(values) != len(names):
                    raise SchemaMismatchError(
                        f"Number of datapoints ({len(names)}) doesn't match number "
                        f"of values ({len(values)}) for instance {instance!r}",
                        instance=instance,
                        expected=len(names),
                        actual=len(values),
                    )
                points.append(
                    TimeSeriesPoint(
                        epoch=int(row[0]),
                        formatted_time=str(row[1]),
                        values=dict(zip(names, values)),
                    )
                )
            result[instance] = points

        return result

    def normalize_payload(self, data: Any) -> TimeSeriesData:
        """Validate the shape of a ``getData`` payload and normalize it."""
        if not isinstance(data, Mapping):
            raise SchemaMismatchError("getData payload is not an object")

        datapoints = data.get("dataPoints")
        raw_values = data.get("values") or {}
        if not isinstance(datapoints, list):
            raise SchemaMismatchError("getData payload has no 'dataPoints' list")
        if not isinstance(raw_values, Mapping):
            raise SchemaMismatchError("getData payload 'values' is not an object")

        instances = self.normalize(datapoints, raw_values)
        logger.debug(
            "Normalized time series",
            instances=len(instances),
            points=sum(len(points) for points in instances.values()),
        )

        return TimeSeriesData(
            datapoints=list(datapoints),
            instances=instances,
            tzoffset=data.get("tzoffset"),
        )

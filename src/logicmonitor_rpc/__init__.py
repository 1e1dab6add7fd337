"""
LogicMonitor RPC Client
=======================
Python client for the LogicMonitor legacy RPC API: hosts, alerts,
time-series data and scheduled down time.
"""

from logicmonitor_rpc.client import LogicMonitorClient
from logicmonitor_rpc.config import Credentials, Settings, get_settings
from logicmonitor_rpc.errors import (
    ApiError,
    LogicMonitorError,
    NotFoundError,
    SchemaMismatchError,
    TransportError,
    UnsupportedEntityError,
    UnsupportedRecurrenceError,
    ValidationError,
)
from logicmonitor_rpc.logs import configure_logging
from logicmonitor_rpc.sdt import EntityKind, RecurrenceType
from logicmonitor_rpc.timeseries import TimeSeriesData, TimeSeriesPoint

__version__ = "0.1.0"

__all__ = [
    "LogicMonitorClient",
    "Credentials",
    "Settings",
    "get_settings",
    "configure_logging",
    "EntityKind",
    "RecurrenceType",
    "TimeSeriesData",
    "TimeSeriesPoint",
    "LogicMonitorError",
    "ValidationError",
    "UnsupportedEntityError",
    "UnsupportedRecurrenceError",
    "TransportError",
    "ApiError",
    "SchemaMismatchError",
    "NotFoundError",
]

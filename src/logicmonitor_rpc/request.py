"""
Request Builder
===============
Compose signed RPC URIs: ``https://{company}.{domain}/{rpc_path}/{method}?c=..&u=..&p=..``
"""

import json
from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Optional, Union

import httpx
import structlog

from logicmonitor_rpc.config import Credentials
from logicmonitor_rpc.errors import ValidationError

logger = structlog.get_logger()

AUTH_KEYS = ("c", "u", "p")

Scalar = Union[str, int, float, bool]
ParamValue = Union[Scalar, Sequence[Scalar], None]


def indexed_params(prefix: str, values: Iterable[Scalar]) -> dict[str, Scalar]:
    """Expand ``values`` into ``{prefix}0``, ``{prefix}1``, ... keys."""
    return {f"{prefix}{index}": value for index, value in enumerate(values)}


def _to_str(value: Scalar) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class RequestBuilder:
    """
    Builds request URIs for RPC methods.

    The base endpoint and the authentication parameters are computed once,
    from immutable credentials, and reused for every request.
    """

    def __init__(
        self,
        credentials: Credentials,
        service_domain: str = "logicmonitor.com",
        rpc_path: str = "santaba/rpc",
    ):
        self.credentials = credentials
        self.endpoint = httpx.URL(
            f"https://{credentials.tenant}.{service_domain}/{rpc_path.strip('/')}"
        )
        self.auth_params: tuple[tuple[str, str], ...] = (
            ("c", credentials.tenant),
            ("u", credentials.username),
            ("p", credentials.secret),
        )

    def build(
        self,
        method: str,
        params: Optional[Mapping[str, ParamValue]] = None,
    ) -> httpx.URL:
        """
        Build the URI for ``method``.

        Authentication is authoritative: caller parameters named ``c``, ``u``
        or ``p`` are dropped. The auth triple comes first in the query string,
        followed by caller parameters in insertion order. Sequence values are
        sent as repeated keys and ``None`` values are omitted.

        Args:
            method: RPC method name, appended as the last path segment
            params: Caller parameters

        Returns:
            The fully composed URI, secret included
        """
        if not method:
            raise ValidationError("'method' is required")

        query: list[tuple[str, str]] = list(self.auth_params)
        for key, value in (params or {}).items():
            if key in AUTH_KEYS:
                logger.warning(
                    "Dropping parameter that collides with authentication",
                    method=method,
                    param=key,
                )
                continue
            if value is None:
                continue
            if isinstance(value, (list, tuple)):
                query.extend((key, _to_str(item)) for item in value)
            else:
                query.append((key, _to_str(value)))

        return self.endpoint.copy_with(
            path=f"{self.endpoint.path}/{method}",
            params=query,
        )

    def __repr__(self) -> str:
        return f"RequestBuilder(endpoint={str(self.endpoint)!r})"


def encode_value(value: Any) -> ParamValue:
    """Flatten a decoded JSON value for use as a query parameter."""
    if isinstance(value, (dict, list)) and not _is_flat_list(value):
        return json.dumps(value, separators=(",", ":"))
    return value


def _is_flat_list(value: Any) -> bool:
    return isinstance(value, list) and all(
        isinstance(item, (str, int, float, bool)) for item in value
    )

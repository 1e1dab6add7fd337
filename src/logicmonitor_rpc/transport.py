"""
Transport
=========
Single-shot HTTP GET against the RPC API and decoding of the response envelope.
"""

from collections.abc import Mapping
from typing import Any, Optional

import httpx
import pydantic
import structlog
from pydantic import BaseModel, ConfigDict

from logicmonitor_rpc.errors import ApiError, TransportError
from logicmonitor_rpc.logs import redact_url
from logicmonitor_rpc.request import ParamValue, RequestBuilder

logger = structlog.get_logger()

SUCCESS_STATUS = 200
DEFAULT_TIMEOUT = 10.0


class Envelope(BaseModel):
    """Wrapper every RPC response uses: ``{status, errmsg, data}``."""

    model_config = ConfigDict(extra="ignore")

    status: int
    errmsg: Optional[str] = None
    data: Any = None

    @property
    def ok(self) -> bool:
        return self.status == SUCCESS_STATUS


class Transport:
    """
    Executes RPC calls.

    Every call is one blocking GET with a fixed timeout. Failures surface
    immediately as ``TransportError`` (HTTP layer, undecodable body) or
    ``ApiError`` (envelope status other than 200); nothing is retried.
    """

    def __init__(
        self,
        builder: RequestBuilder,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = "logicmonitor-rpc-python/0.1.0",
        log_secrets: bool = False,
        http_client: Optional[httpx.Client] = None,
    ):
        """
        Initialize the transport.

        Args:
            builder: Request builder holding endpoint and credentials
            timeout: Connect/read timeout in seconds
            user_agent: User-Agent header value
            log_secrets: Log composed URIs without masking the password
            http_client: Preconfigured client (tests inject a mock transport)
        """
        self.builder = builder
        self.log_secrets = log_secrets
        self._client = http_client or httpx.Client(
            timeout=timeout,
            headers={"User-Agent": user_agent, "Accept": "application/json"},
        )

    def fetch(
        self,
        method: str,
        params: Optional[Mapping[str, ParamValue]] = None,
    ) -> Any:
        """Build the URI for ``method`` and return the envelope ``data``."""
        return self.send(self.builder.build(method, params))

    def send(self, url: httpx.URL) -> Any:
        """
        GET a composed URI and decode the envelope.

        Returns:
            The ``data`` field, untouched
        """
        logger.debug(
            "Dispatching RPC request",
            url=str(url) if self.log_secrets else redact_url(url),
        )

        try:
            response = self._client.get(url)
            response.raise_for_status()
        # httpx messages embed the full URL; keep the password out of ours
        except httpx.HTTPStatusError as e:
            raise TransportError(
                f"{url.path} returned HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise TransportError(f"Request to {url.path} failed: {type(e).__name__}") from e

        try:
            payload = response.json()
        except ValueError as e:
            raise TransportError(f"Undecodable response from {url.path}: {e}") from e

        envelope = decode_envelope(payload)
        if not envelope.ok:
            logger.warning(
                "RPC call failed",
                path=url.path,
                status=envelope.status,
                errmsg=envelope.errmsg,
            )
            raise ApiError(envelope.status, envelope.errmsg)

        return envelope.data

    def close(self) -> None:
        self._client.close()


def decode_envelope(payload: Any) -> Envelope:
    """Validate an already-decoded response body."""
    try:
        return Envelope.model_validate(payload)
    except pydantic.ValidationError as e:
        raise TransportError(f"Malformed response envelope: {e}") from e

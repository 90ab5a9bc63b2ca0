import logging
from typing import Optional

import httpx

from stock_gateway.config import (
    UPSTREAM_URL,
    UPSTREAM_SOAP_ACTION,
    UPSTREAM_COOKIE,
    UPSTREAM_TIMEOUT_MS,
    RELAY_URL,
    RELAY_TIMEOUT_MS,
)
from stock_gateway.errors import TransportError
from stock_gateway.models import UpstreamResponse

logger = logging.getLogger("stock_gateway.client")


async def send_envelope(
    envelope: str,
    credential: str,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> UpstreamResponse:
    headers = {
        "Content-Type": "text/xml; charset=utf-8",
        "SOAPAction": UPSTREAM_SOAP_ACTION,
        "Authorization": credential,
        "Cookie": UPSTREAM_COOKIE,
    }
    # Convert ms to seconds
    timeout_sec = UPSTREAM_TIMEOUT_MS / 1000.0

    # The ERP endpoint serves a non-standard certificate. Verification is off
    # for this client only.
    try:
        async with httpx.AsyncClient(verify=False, transport=transport) as client:
            response = await client.post(
                UPSTREAM_URL,
                content=envelope.encode("utf-8"),
                headers=headers,
                timeout=timeout_sec,
            )
    except httpx.TimeoutException as e:
        raise TransportError(f"SOAP request timed out after {timeout_sec}s", timed_out=True) from e
    except httpx.RequestError as e:
        raise TransportError(f"SOAP request could not be delivered: {e}") from e

    logger.info(f"Received upstream response with status {response.status_code}")
    return UpstreamResponse(status_code=response.status_code, raw_body=response.text)


async def forward_relay(transport: Optional[httpx.AsyncBaseTransport] = None) -> httpx.Response:
    headers = {
        "Content-Type": "text/html",
        "Accept": "text/html",
    }
    async with httpx.AsyncClient(transport=transport) as client:
        timeout_sec = RELAY_TIMEOUT_MS / 1000.0
        response = await client.get(RELAY_URL, headers=headers, timeout=timeout_sec)
        return response

import enum
import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional

from stock_gateway import client
from stock_gateway.envelope import build_envelope
from stock_gateway.errors import (
    GatewayError,
    TransportError,
    UnwrapError,
    UpstreamRejection,
    ValidationError,
)
from stock_gateway.models import (
    ErrorResponse,
    ReceivedFields,
    RequestEcho,
    ResponseMetadata,
    StockLookupRequest,
    StockLookupResponse,
    TranslationResult,
    UpstreamResponse,
)
from stock_gateway.unwrap import unwrap

logger = logging.getLogger("stock_gateway.translator")

SendFn = Callable[[str, str], Awaitable[UpstreamResponse]]


class Stage(enum.Enum):
    VALIDATING = "validating"
    BUILDING = "building"
    DISPATCHING = "dispatching"
    UNWRAPPING = "unwrapping"


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def error_response(exc: GatewayError, lookup: StockLookupRequest) -> ErrorResponse:
    if isinstance(exc, ValidationError):
        return ErrorResponse(
            message=exc.message,
            missing=exc.missing,
            received=ReceivedFields(
                STOFCY=lookup.facility_code,
                ITMREF=lookup.item_reference,
                Authorization=bool(lookup.credential),
            ),
        )
    if isinstance(exc, UpstreamRejection):
        return ErrorResponse(
            message=exc.message,
            status=exc.upstream_status,
            response=exc.raw_body,
        )
    if isinstance(exc, UnwrapError):
        return ErrorResponse(
            message="Failed to parse SOAP response",
            error=exc.message,
            response=exc.raw_body,
        )
    if isinstance(exc, TransportError):
        return ErrorResponse(
            message="SOAP request timed out" if exc.timed_out else "SOAP request could not be delivered",
            error=exc.message,
        )
    return ErrorResponse(message=exc.message)


async def translate(
    lookup: StockLookupRequest,
    send: Optional[SendFn] = None,
    correlation_id: Optional[str] = None,
) -> TranslationResult:
    send = send or client.send_envelope
    stage = Stage.VALIDATING
    try:
        missing = lookup.missing_fields()
        if missing:
            raise ValidationError(missing)

        stage = Stage.BUILDING
        envelope = build_envelope(lookup.facility_code, lookup.item_reference)

        stage = Stage.DISPATCHING
        logger.info(f"Sending SOAP request for {lookup.facility_code}/{lookup.item_reference}, correlation {correlation_id}")
        upstream = await send(envelope, lookup.credential)
        if not upstream.ok:
            raise UpstreamRejection(upstream.status_code, upstream.raw_body)

        stage = Stage.UNWRAPPING
        details = unwrap(upstream.raw_body)
    except (ValidationError, UpstreamRejection) as exc:
        logger.warning(f"Lookup failed while {stage.value}: {exc.message}, correlation {correlation_id}")
        return TranslationResult(status_code=exc.status_code, body=error_response(exc, lookup))
    except GatewayError as exc:
        logger.error(f"Lookup failed while {stage.value}: {exc.message}, correlation {correlation_id}")
        return TranslationResult(status_code=exc.status_code, body=error_response(exc, lookup))

    logger.info(f"Lookup succeeded with {len(details)} records, correlation {correlation_id}")
    return TranslationResult(
        status_code=200,
        body=StockLookupResponse(
            count=len(details),
            data=details,
            metadata=ResponseMetadata(
                request=RequestEcho(STOFCY=lookup.facility_code, ITMREF=lookup.item_reference),
                timestamp=utc_timestamp(),
            ),
        ),
    )

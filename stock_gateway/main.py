import logging
import traceback

import httpx
from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import ValidationError

from stock_gateway import client, ids
from stock_gateway.config import DIAGNOSTIC_MODE, LOG_LEVEL
from stock_gateway.models import ErrorResponse, StockLookupRequest
from stock_gateway.translator import translate

# Configure logging
logging.basicConfig(level=LOG_LEVEL, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger("stock_gateway")

app = FastAPI()

@app.middleware("http")
async def add_correlation_id(request: Request, call_next):
    correlation_id = request.headers.get("X-Correlation-Id")
    if not correlation_id:
        correlation_id = ids.generate_correlation_id()

    # Store in request state for access in endpoints
    request.state.correlation_id = correlation_id

    # Any failure stays inside this request's response
    try:
        response = await call_next(request)
    except Exception as e:
        logger.exception(f"Unexpected error for {request.method} {request.url.path}, correlation {correlation_id}")
        body = ErrorResponse(
            message=str(e) or e.__class__.__name__,
            stack=traceback.format_exc() if DIAGNOSTIC_MODE else None,
        )
        response = JSONResponse(status_code=500, content=body.model_dump(exclude_none=True))

    response.headers["X-Correlation-Id"] = correlation_id
    return response

async def read_body(request: Request) -> dict:
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/x-www-form-urlencoded"):
        form = await request.form()
        return dict(form)
    try:
        body = await request.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}

@app.get("/", response_class=PlainTextResponse)
def index():
    return "✅ Proxy Server Running"

@app.get("/health")
def health():
    return {"status": "ok", "service": "stock-gateway"}

@app.post("/api")
async def stock_lookup(request: Request):
    correlation_id = request.state.correlation_id
    try:
        lookup = StockLookupRequest.model_validate(await read_body(request))
    except ValidationError as e:
        # field names only, never the submitted values
        fields = ", ".join(str(err["loc"][0]) for err in e.errors())
        logger.warning(f"Rejected request with invalid fields {fields}, correlation {correlation_id}")
        return JSONResponse(
            status_code=400,
            content=ErrorResponse(message=f"Invalid value for fields: {fields}").model_dump(exclude_none=True)
        )

    logger.info(
        f"Incoming request STOFCY={lookup.facility_code} ITMREF={lookup.item_reference} "
        f"Authorization={'present' if lookup.credential else 'missing'}, correlation {correlation_id}"
    )

    result = await translate(lookup, correlation_id=correlation_id)
    return JSONResponse(status_code=result.status_code, content=result.content())

@app.get("/phprequest")
async def relay():
    logger.info("Forwarding request to relay backend")
    try:
        relay_response = await client.forward_relay()
    except httpx.RequestError as e:
        logger.error(f"Relay backend unreachable: {e}")
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(
                message="Failed to forward request to PHP server",
                error=str(e),
            ).model_dump(exclude_none=True)
        )

    return Response(
        content=relay_response.content,
        status_code=relay_response.status_code,
        media_type=relay_response.headers.get("content-type", "text/html"),
    )

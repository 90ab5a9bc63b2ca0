import httpx
import pytest

from stock_gateway import client, translator
from stock_gateway.errors import TransportError, UnwrapError
from stock_gateway.models import StockLookupRequest, UpstreamResponse
from stock_gateway.translator import translate


class StubSender:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    async def __call__(self, envelope, credential):
        self.calls.append((envelope, credential))
        if self.error is not None:
            raise self.error
        return self.response


def lookup(**fields):
    return StockLookupRequest.model_validate(fields)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "fields, missing",
    [
        ({"ITMREF": "PRD-100", "Authorization": "Basic abc"}, ["STOFCY"]),
        ({"STOFCY": "BR01", "ITMREF": "PRD-100"}, ["Authorization"]),
        ({"ITMREF": "PRD-100"}, ["STOFCY", "Authorization"]),
        ({"STOFCY": "", "Authorization": ""}, ["STOFCY", "Authorization"]),
    ],
)
async def test_validation_short_circuits_before_dispatch(fields, missing):
    send = StubSender()
    result = await translate(lookup(**fields), send=send)

    assert send.calls == []
    assert result.status_code == 400
    content = result.content()
    assert content["success"] is False
    assert content["missing"] == missing
    assert content["received"]["Authorization"] is bool(fields.get("Authorization"))


@pytest.mark.asyncio
async def test_validation_never_echoes_credential():
    result = await translate(lookup(ITMREF="PRD-100", Authorization="Basic s3cr3t"), send=StubSender())
    assert "s3cr3t" not in str(result.content())
    assert result.content()["received"]["Authorization"] is True


@pytest.mark.asyncio
async def test_success(soapenv_body, stock_result):
    send = StubSender(UpstreamResponse(200, soapenv_body(stock_result)))
    result = await translate(lookup(STOFCY="BR01", ITMREF="PRD-100", Authorization="Basic abc"), send=send)

    assert result.status_code == 200
    content = result.content()
    assert content["success"] is True
    assert content["count"] == 2
    assert content["data"][0]["QTYSTU"] == 42
    assert content["metadata"]["request"] == {"STOFCY": "BR01", "ITMREF": "PRD-100"}
    assert content["metadata"]["timestamp"].endswith("Z")

    envelope, credential = send.calls[0]
    assert credential == "Basic abc"
    assert '"STOFCY":"BR01"' in envelope


@pytest.mark.asyncio
async def test_empty_details_is_success(soap_body):
    send = StubSender(UpstreamResponse(200, soap_body('{"DETAILS":[]}')))
    result = await translate(lookup(STOFCY="BR01", Authorization="Basic abc"), send=send)

    content = result.content()
    assert result.status_code == 200
    assert content["success"] is True
    assert content["count"] == 0
    assert content["data"] == []


@pytest.mark.asyncio
async def test_invalid_embedded_json(soapenv_body):
    raw = soapenv_body("not-json")
    send = StubSender(UpstreamResponse(200, raw))
    result = await translate(lookup(STOFCY="BR01", Authorization="Basic abc"), send=send)

    content = result.content()
    assert result.status_code == 500
    assert content["success"] is False
    assert content["error"] == UnwrapError.INVALID_JSON
    assert content["response"] == raw


@pytest.mark.asyncio
async def test_missing_result_node_differs_from_invalid_json():
    raw = '<soap:Envelope xmlns:soap="http://schemas.xmlsoap.org/soap/envelope/"><soap:Body/></soap:Envelope>'
    result = await translate(lookup(STOFCY="BR01", Authorization="x"), send=StubSender(UpstreamResponse(200, raw)))

    assert result.status_code == 500
    assert result.content()["error"] == UnwrapError.RESULT_NOT_FOUND
    assert result.content()["response"] == raw


@pytest.mark.asyncio
async def test_upstream_503_is_not_parsed(monkeypatch):
    def fail_unwrap(raw_body):
        raise AssertionError("rejected responses must not be unwrapped")

    monkeypatch.setattr(translator, "unwrap", fail_unwrap)
    raw = "<html><body>Service Unavailable</body></html>"
    send = StubSender(UpstreamResponse(503, raw))
    result = await translate(lookup(STOFCY="BR01", Authorization="x"), send=send)

    content = result.content()
    assert result.status_code == 503
    assert content["success"] is False
    assert content["status"] == 503
    assert content["response"] == raw


@pytest.mark.asyncio
async def test_upstream_4xx_surfaces_as_bad_gateway():
    send = StubSender(UpstreamResponse(401, "Unauthorized"))
    result = await translate(lookup(STOFCY="BR01", Authorization="bad"), send=send)

    assert result.status_code == 502
    assert result.content()["status"] == 401
    assert result.content()["response"] == "Unauthorized"


@pytest.mark.asyncio
@pytest.mark.parametrize("timed_out, status_code", [(True, 504), (False, 503)])
async def test_transport_errors(timed_out, status_code):
    send = StubSender(error=TransportError("upstream gone", timed_out=timed_out))
    result = await translate(lookup(STOFCY="BR01", Authorization="x"), send=send)

    content = result.content()
    assert result.status_code == status_code
    assert content["success"] is False
    assert content["error"] == "upstream gone"
    assert len(send.calls) == 1


@pytest.mark.asyncio
async def test_default_sender_is_resolved_at_call_time(monkeypatch, soap_body):
    send = StubSender(UpstreamResponse(200, soap_body('{"DETAILS":[{"STOFCY":"BR01"}]}')))
    monkeypatch.setattr(client, "send_envelope", send)

    result = await translate(lookup(STOFCY="BR01", Authorization="x"))
    assert result.content()["count"] == 1
    assert len(send.calls) == 1


@pytest.mark.asyncio
async def test_unexpected_errors_propagate():
    send = StubSender(error=httpx.InvalidURL("bad url"))
    with pytest.raises(httpx.InvalidURL):
        await translate(lookup(STOFCY="BR01", Authorization="x"), send=send)


def test_numeric_fields_are_coerced():
    req = lookup(STOFCY=101, ITMREF=5, Authorization="x")
    assert req.facility_code == "101"
    assert req.item_reference == "5"

import pytest


def soapenv_response(result: str) -> str:
    """Upstream answer as seen in production: soapenv/wss prefixes, typed nodes."""
    return f"""<?xml version="1.0" encoding="UTF-8"?>
<soapenv:Envelope xmlns:soapenv="http://schemas.xmlsoap.org/soap/envelope/"
    xmlns:xsd="http://www.w3.org/2001/XMLSchema"
    xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance"
    xmlns:wss="http://www.adonix.com/WSS">
  <soapenv:Body>
    <wss:runResponse soapenv:encodingStyle="http://schemas.xmlsoap.org/soap/encoding/">
      <runReturn xsi:type="wss:CAdxResultXml">
        <resultXml xsi:type="xsd:string"><![CDATA[{result}]]></resultXml>
        <status xsi:type="xsd:int">1</status>
      </runReturn>
    </wss:runResponse>
  </soapenv:Body>
</soapenv:Envelope>"""


def soap_response(result: str) -> str:
    """Same answer with soap prefix, default-namespaced runResponse, untyped nodes."""
    return f"""<?xml version="1.0" encoding="UTF-8"?>
<soap:Envelope xmlns:soap="http://schemas.xmlsoap.org/soap/envelope/">
  <soap:Body>
    <runResponse xmlns="http://www.adonix.com/WSS">
      <runReturn>
        <resultXml><![CDATA[{result}]]></resultXml>
        <status>1</status>
      </runReturn>
    </runResponse>
  </soap:Body>
</soap:Envelope>"""


STOCK_RESULT = (
    '{"HEADER":{"XOK":1,"XMESS":""},'
    '"DETAILS":[{"STOFCY":"BR01","ITMREF":"PRD-100","QTYSTU":42},'
    '{"STOFCY":"BR01","ITMREF":"PRD-100","QTYSTU":3}]}'
)


@pytest.fixture
def stock_result():
    return STOCK_RESULT


@pytest.fixture
def soapenv_body():
    return soapenv_response


@pytest.fixture
def soap_body():
    return soap_response

import json
from typing import Optional

PUBLIC_NAME = "XGETSTOCK"

ENVELOPE_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<soap:Envelope xmlns:soap="http://schemas.xmlsoap.org/soap/envelope/"
  xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance"
  xmlns:ns2="http://www.adonix.com/WSS">
  <soap:Header/>
  <soap:Body>
    <ns2:run soap:encodingStyle="http://schemas.xmlsoap.org/soap/encoding/">
      <callContext>
        <codeLang>FRA</codeLang>
        <poolAlias>XWSBR</poolAlias>
        <poolId xsi:nil="true"/>
        <requestConfig>adxwss.optreturn=JSON</requestConfig>
      </callContext>
      <publicName>{public_name}</publicName>
      <inputXml><![CDATA[{payload}]]></inputXml>
    </ns2:run>
  </soap:Body>
</soap:Envelope>"""


def build_payload(facility_code: str, item_reference: Optional[str] = None) -> str:
    detail = {"STOFCY": facility_code}
    if item_reference is not None:
        detail["ITMREF"] = item_reference
    payload = {
        "HEADER": {"XOK": 0, "XMESS": ""},
        "DETAILS": [detail],
    }
    # "]]>" would end the CDATA section early; \u003e decodes to the same ">"
    return json.dumps(payload, separators=(",", ":")).replace("]]>", "]]\\u003e")


def build_envelope(facility_code: str, item_reference: Optional[str] = None) -> str:
    """Render the XGETSTOCK SOAP request for one facility/item pair."""
    return ENVELOPE_TEMPLATE.format(
        public_name=PUBLIC_NAME,
        payload=build_payload(facility_code, item_reference),
    )

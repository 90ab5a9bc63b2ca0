import enum
import json
import logging
from typing import Any, Dict, List, Optional, Sequence

from lxml import etree

from stock_gateway.errors import UnwrapError

logger = logging.getLogger("stock_gateway.unwrap")

TEXT_KEY = "_"
TYPE_KEY = "xsi:type"
STRING_TYPE = "xsd:string"

CDATA_OPEN = "<![CDATA["
CDATA_CLOSE = "]]>"

# Tried in order, first present wins
BODY_ALIASES = ("soapenv:Body", "soap:Body", "Body")
RUN_RESPONSE_ALIASES = ("wss:runResponse", "runResponse")
RESULT_PATH = ("runReturn", "resultXml")

# raw_body is already decoded text, so the bytes handed to lxml are always
# utf-8 whatever the XML declaration says
_parser = etree.XMLParser(encoding="utf-8", resolve_entities=False, no_network=True)


def _prefixed(qualified: str, prefix: Optional[str]) -> str:
    local = etree.QName(qualified).localname
    return f"{prefix}:{local}" if prefix else local


def _attribute_name(name: str, nsmap: Dict[Optional[str], str]) -> str:
    qname = etree.QName(name)
    if qname.namespace is None:
        return qname.localname
    for prefix, uri in nsmap.items():
        if prefix and uri == qname.namespace:
            return f"{prefix}:{qname.localname}"
    return qname.localname


def element_to_tree(element) -> Any:
    """Turn an element into plain dicts, lists and strings.

    Keys are tag names as written, prefix included (``soapenv:Body``), and
    attributes are merged in under their prefixed names (``xsi:type``). An
    element with no attributes and no children becomes its trimmed text;
    otherwise that text is stored under ``_``. A repeated tag becomes a list.
    """
    node: Dict[str, Any] = {}
    for name, value in element.attrib.items():
        node[_attribute_name(name, element.nsmap)] = value

    for child in element:
        # comments and processing instructions
        if not isinstance(child.tag, str):
            continue
        key = _prefixed(child.tag, child.prefix)
        value = element_to_tree(child)
        if key not in node:
            node[key] = value
        elif isinstance(node[key], list):
            node[key].append(value)
        else:
            node[key] = [node[key], value]

    text = (element.text or "").strip()
    if not node:
        return text
    if text:
        node[TEXT_KEY] = text
    return node


def parse_envelope(raw_body: str) -> Any:
    """Parse an upstream body; the root element itself is not wrapped."""
    try:
        root = etree.fromstring(raw_body.encode("utf-8"), parser=_parser)
    except (etree.XMLSyntaxError, ValueError) as e:
        logger.error(f"Upstream body is not well-formed XML: {e}")
        raise UnwrapError(UnwrapError.MALFORMED_XML, raw_body) from e
    return element_to_tree(root)


def first_present(node: Any, aliases: Sequence[str]) -> Any:
    if not isinstance(node, dict):
        return None
    for alias in aliases:
        value = node.get(alias)
        # an empty node under one alias falls through to the next
        if value:
            return value
    return None


def descend(node: Any, path: Sequence[str]) -> Any:
    for key in path:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    return node


def locate_result_node(tree: Any) -> Any:
    body = first_present(tree, BODY_ALIASES)
    run_response = first_present(body, RUN_RESPONSE_ALIASES)
    return descend(run_response, RESULT_PATH)


class ResultShape(enum.Enum):
    BARE_STRING = "bare_string"
    TEXT_WRAPPED = "text_wrapped"
    TYPE_TAGGED = "type_tagged"
    UNKNOWN = "unknown"


def classify_result_node(node: Any) -> ResultShape:
    if isinstance(node, str):
        return ResultShape.BARE_STRING
    if isinstance(node, dict) and isinstance(node.get(TEXT_KEY), str):
        if node.get(TYPE_KEY) == STRING_TYPE:
            return ResultShape.TYPE_TAGGED
        return ResultShape.TEXT_WRAPPED
    return ResultShape.UNKNOWN


def normalize_result_node(node: Any) -> Optional[str]:
    """Collapse every accepted ``resultXml`` shape into its string content.

    Returns None for shapes that carry no string.
    """
    shape = classify_result_node(node)
    if shape is ResultShape.BARE_STRING:
        return node
    if shape in (ResultShape.TEXT_WRAPPED, ResultShape.TYPE_TAGGED):
        return node[TEXT_KEY]
    return None


def strip_cdata(text: str) -> str:
    if text.startswith(CDATA_OPEN):
        text = text[len(CDATA_OPEN):]
    if text.endswith(CDATA_CLOSE):
        text = text[: -len(CDATA_CLOSE)]
    return text


def extract_result_text(tree: Any, raw_body: str) -> str:
    text = normalize_result_node(locate_result_node(tree))
    if not text:
        logger.error("Could not find resultXml in SOAP response")
        raise UnwrapError(UnwrapError.RESULT_NOT_FOUND, raw_body)
    return strip_cdata(text)


def decode_payload(text: str, raw_body: str) -> Any:
    try:
        return json.loads(text)
    except ValueError as e:
        logger.error(f"resultXml does not hold valid JSON: {e}")
        raise UnwrapError(UnwrapError.INVALID_JSON, raw_body) from e


def read_details(payload: Any) -> List[Any]:
    if not isinstance(payload, dict):
        return []
    details = payload.get("DETAILS")
    if details is None:
        return []
    if not isinstance(details, list):
        return [details]
    return details


def unwrap_payload(raw_body: str) -> Any:
    """Return the decoded JSON carried by an upstream SOAP response.

    Raises UnwrapError, carrying ``raw_body``, when the XML is malformed,
    the result node is missing, or the embedded JSON does not parse.
    """
    tree = parse_envelope(raw_body)
    text = extract_result_text(tree, raw_body)
    return decode_payload(text, raw_body)


def unwrap(raw_body: str) -> List[Any]:
    """Return the DETAILS records of an upstream SOAP response."""
    return read_details(unwrap_payload(raw_body))

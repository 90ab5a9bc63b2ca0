from typing import List


class GatewayError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(GatewayError):
    """Required inbound fields are missing. Raised before any network I/O."""

    status_code = 400

    def __init__(self, missing: List[str]):
        super().__init__(f"Missing required fields: {', '.join(missing)}")
        self.missing = missing


class TransportError(GatewayError):
    """The upstream could not be reached (connection, DNS, timeout)."""

    def __init__(self, message: str, timed_out: bool = False):
        super().__init__(message)
        self.timed_out = timed_out
        self.status_code = 504 if timed_out else 503


class UpstreamRejection(GatewayError):
    """The upstream answered with a non-2xx status."""

    def __init__(self, upstream_status: int, raw_body: str):
        super().__init__(f"SOAP request failed with status {upstream_status}")
        self.upstream_status = upstream_status
        self.raw_body = raw_body
        # 4xx from the upstream is still our gateway failing, not the caller
        self.status_code = upstream_status if upstream_status >= 500 else 502


class UnwrapError(GatewayError):
    """The upstream body did not contain a usable result payload."""

    RESULT_NOT_FOUND = "result node not found"
    INVALID_JSON = "invalid embedded json"
    MALFORMED_XML = "malformed xml"

    def __init__(self, message: str, raw_body: str):
        super().__init__(message)
        self.raw_body = raw_body

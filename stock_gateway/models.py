from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class StockLookupRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    facility_code: Optional[str] = Field(default=None, alias="STOFCY")
    item_reference: Optional[str] = Field(default=None, alias="ITMREF")
    credential: Optional[str] = Field(default=None, alias="Authorization", repr=False)

    @field_validator("facility_code", "item_reference", "credential", mode="before")
    @classmethod
    def coerce_scalar(cls, value: Any) -> Any:
        if value is None or isinstance(value, str):
            return value
        if isinstance(value, (int, float)):
            return str(value)
        return value

    def missing_fields(self) -> List[str]:
        missing = []
        if not self.facility_code:
            missing.append("STOFCY")
        if not self.credential:
            missing.append("Authorization")
        return missing


@dataclass(frozen=True)
class UpstreamResponse:
    status_code: int
    raw_body: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class RequestEcho(BaseModel):
    STOFCY: Optional[str] = None
    ITMREF: Optional[str] = None


class ResponseMetadata(BaseModel):
    request: RequestEcho
    timestamp: str


class StockLookupResponse(BaseModel):
    success: bool = True
    count: int
    data: List[Any]
    metadata: ResponseMetadata


class ReceivedFields(BaseModel):
    STOFCY: Optional[str] = None
    ITMREF: Optional[str] = None
    Authorization: bool


class ErrorResponse(BaseModel):
    success: bool = False
    message: str
    error: Optional[str] = None
    status: Optional[int] = None
    response: Optional[str] = None
    missing: Optional[List[str]] = None
    received: Optional[ReceivedFields] = None
    stack: Optional[str] = None


@dataclass(frozen=True)
class TranslationResult:
    status_code: int
    body: BaseModel

    def content(self) -> Dict[str, Any]:
        if isinstance(self.body, ErrorResponse):
            return self.body.model_dump(exclude_none=True)
        return self.body.model_dump()

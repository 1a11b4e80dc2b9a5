"""Response envelopes returned to the webhook sender."""

from pydantic import BaseModel, ConfigDict


class AckResponse(BaseModel):
    """Successful handling of a webhook delivery."""

    model_config = ConfigDict(extra="forbid")

    ok: bool = True
    message: str


class ErrorDetail(BaseModel):
    model_config = ConfigDict(extra="forbid")

    code: str
    message: str
    trace_id: str


class ErrorResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    ok: bool = False
    error: ErrorDetail

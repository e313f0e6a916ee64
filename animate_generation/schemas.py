"""Request and response shapes for the webhook and the WaveSpeed API."""

from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator


# ==================== WAVESPEED ====================

class SubmitData(BaseModel):
    id: Optional[str] = None


class SubmitResponse(BaseModel):
    """Body of POST {submit_url}: ``{code, message, data: {id}}``."""
    code: Optional[int] = None
    message: Optional[str] = None
    data: Optional[SubmitData] = None


class ResultData(BaseModel):
    status: str
    outputs: list[str] = Field(default_factory=list)
    error: Optional[str] = None

    @field_validator("outputs", mode="before")
    @classmethod
    def _null_outputs(cls, value: Any) -> Any:
        # In-progress jobs report "outputs": null
        if value is None:
            return []
        if isinstance(value, list):
            return [v for v in value if v is not None]
        return value

    @field_validator("error", mode="before")
    @classmethod
    def _flatten_error(cls, value: Any) -> Optional[str]:
        if value is None or isinstance(value, str):
            return value
        if isinstance(value, dict):
            message = value.get("message") or value.get("error")
            if isinstance(message, str) and message:
                return message
        return str(value)


class ResultResponse(BaseModel):
    """Body of GET {result_url}: ``{data: {status, outputs, error}}``."""
    data: ResultData


# ==================== WEBHOOK ====================

class GenerateRequest(BaseModel):
    recordId: Optional[str] = None

    @field_validator("recordId", mode="before")
    @classmethod
    def _stringify_record_id(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


class GenerateAccepted(BaseModel):
    success: bool = True
    message: str = "Animation generation started"
    recordId: str

"""Shared response schemas."""

from __future__ import annotations

from pydantic import BaseModel, Field


class SuccessResponse(BaseModel):
    """Acknowledgement for writes that return no resource."""

    success: bool = Field(True, description="Always true; failures use the error envelope.")


class ErrorBody(BaseModel):
    code: str = Field(..., description="Stable, machine-readable error code.")
    message: str = Field(..., description="Human-readable error message.")
    request_id: str | None = Field(None, description="Correlation id of the failed request.")
    details: dict | None = Field(None, description="Structured error context, when available.")


class ErrorResponse(BaseModel):
    """Envelope returned for every handled error."""

    error: ErrorBody

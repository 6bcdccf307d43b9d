"""
Response envelope shared by every endpoint.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field


class ApiResponseDTO(BaseModel):
    """Discriminated result: clients branch on ``success``."""

    success: bool = Field(..., description="Operation success status")
    status_code: int = Field(..., alias="statusCode", description="HTTP status code")
    message: str = Field(..., description="Response message")
    data: Optional[Any] = Field(None, description="Payload")
    error_code: Optional[str] = Field(None, alias="errorCode", description="Error code on failure")

    class Config:
        populate_by_name = True


def envelope(message: str, data: Any = None, status_code: int = 200) -> dict:
    """Build a success envelope, dumping models by alias."""
    if isinstance(data, BaseModel):
        data = data.model_dump(by_alias=True, mode="json")
    elif isinstance(data, list):
        data = [
            item.model_dump(by_alias=True, mode="json") if isinstance(item, BaseModel) else item
            for item in data
        ]
    return ApiResponseDTO(
        success=True, status_code=status_code, message=message, data=data
    ).model_dump(by_alias=True)


def error_envelope(
    message: str, status_code: int, error_code: str, details: Optional[dict] = None
) -> dict:
    """Build a failure envelope."""
    return ApiResponseDTO(
        success=False,
        status_code=status_code,
        message=message,
        data=details or None,
        error_code=error_code,
    ).model_dump(by_alias=True)

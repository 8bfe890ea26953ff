"""
API request models.

Pydantic models for incoming validator API requests. Fields are optional
so that missing values can be answered with the API's own error bodies.
"""

from pydantic import BaseModel, Field
from typing import Any, Optional


class ValidateRequest(BaseModel):
    """
    Single value validation request.
    """

    value: Optional[Any] = Field(default=None, description="Value to validate")

    class Config:
        json_schema_extra = {
            "example": {"value": "978-3-16-148410-0"}
        }


class BatchValidateRequest(BaseModel):
    """
    Batch validation request.
    """

    values: Optional[Any] = Field(default=None, description="List of values to validate")

    class Config:
        json_schema_extra = {
            "example": {"values": ["#fff", "#ggg"]}
        }


class ExtractRequest(BaseModel):
    """
    Token extraction request.
    """

    text: Optional[Any] = Field(default=None, description="Free text to scan")

    class Config:
        json_schema_extra = {
            "example": {"text": "Order ISBN 978-3-16-148410-0, see https://example.com #books"}
        }

"""
API response models.

Pydantic models for validator API responses.
"""

from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any


class ErrorResponse(BaseModel):
    """
    Standard error response.
    """

    error: str = Field(..., description="Human-readable error message")

    class Config:
        json_schema_extra = {
            "example": {"error": "Validator not found"}
        }


class ValidationResponse(BaseModel):
    """
    Outcome of validating one value.
    """

    valid: bool = Field(..., description="Whether the value satisfies the rule")
    errors: List[str] = Field(default_factory=list, description="Error messages, empty when valid")
    jsonld: Optional[Dict[str, Any]] = Field(default=None, description="schema.org JSON-LD for valid values")

    class Config:
        json_schema_extra = {
            "example": {
                "valid": True,
                "errors": [],
                "jsonld": {"@context": "https://schema.org", "@type": "Book", "isbn": "978-3-16-148410-0"}
            }
        }


class ValidatorSummary(BaseModel):
    """
    Metadata describing one validator.
    """

    symbol: str
    schema_type: Optional[str] = None
    schema_property: Optional[str] = None
    description: Optional[str] = None
    regex: Optional[str] = Field(default=None, description="Regex source, null for checksum validators")
    valid: List[str] = Field(default_factory=list, description="Documented valid examples")
    invalid: List[str] = Field(default_factory=list, description="Documented invalid examples")


class ExamplesResponse(BaseModel):
    valid: List[str]
    invalid: List[str]


class RegexResponse(BaseModel):
    regex: Optional[str] = None


class FieldsResponse(BaseModel):
    fields: List[str]


class HealthResponse(BaseModel):
    """
    Service health.
    """

    status: str
    version: str
    environment: str
    cache_backend: str
    cache_healthy: bool

"""
Service dependencies.

The validation service is built once at application startup and kept on
the application state; endpoints receive it through these dependencies.
"""

from fastapi import Request

from modules.validation.engine import ValidationService
from modules.validation.extraction import TokenExtractor


def get_validation_service(request: Request) -> ValidationService:
    return request.app.state.validation_service


def get_token_extractor(request: Request) -> TokenExtractor:
    return TokenExtractor(request.app.state.validation_service)

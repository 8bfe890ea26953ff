"""
Validation module.

Validates identifiers, handles, colors and addresses against a declarative
table of regex and checksum rules.

Main components:
- ValidationService: orchestrator with result caching and loop protection
- ValidatorRegistry: resolves rule symbols to executable units
- TokenExtractor: finds and validates tokens in free text

Usage:
    from modules.validation import build_validation_service

    service = build_validation_service()
    result = service.validate("iban", "GB82WEST12345698765432")

    if result.valid:
        print("Valid!")
    else:
        for error in result.errors:
            print(f"Error: {error}")
"""

from modules.validation.engine import ValidationService, build_validation_service
from modules.validation.extraction import TokenExtractor
from modules.validation.core.base import ValidationResult, BatchValidationResult, ValidatorSpec, ValidatorUnit
from modules.validation.core.registry import ValidatorRegistry

__all__ = [
    'ValidationService',
    'build_validation_service',
    'TokenExtractor',
    'ValidationResult',
    'BatchValidationResult',
    'ValidatorSpec',
    'ValidatorUnit',
    'ValidatorRegistry',
]

"""
Validation core module.

Contains the data model, exceptions, spec table loader and registry.
"""

from modules.validation.core.base import (
    RuleKind,
    ResultCode,
    ValidatorSpec,
    ValidatorUnit,
    ValidationResult,
    BatchValidationResult,
)
from modules.validation.core.exceptions import (
    ValidatorEngineException,
    SpecConfigurationError,
    SpecIncomplete,
    ValidatorNotFound,
    LoopDetected,
    RateLimitExceeded,
    BackingStoreUnavailable,
)
from modules.validation.core.config_loader import ValidatorSpecLoader, load_validator_specs
from modules.validation.core.registry import ValidatorRegistry

__all__ = [
    'RuleKind',
    'ResultCode',
    'ValidatorSpec',
    'ValidatorUnit',
    'ValidationResult',
    'BatchValidationResult',
    'ValidatorEngineException',
    'SpecConfigurationError',
    'SpecIncomplete',
    'ValidatorNotFound',
    'LoopDetected',
    'RateLimitExceeded',
    'BackingStoreUnavailable',
    'ValidatorSpecLoader',
    'load_validator_specs',
    'ValidatorRegistry',
]

"""
Validator API endpoints.

Discovery (metadata, examples, regex, JSON-LD) and validation of single
values and batches.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import Any, Dict, List, Optional

from modules.validation.core.base import ResultCode
from modules.validation.core.exceptions import LoopDetected
from modules.validation.core.registry import normalize_symbol
from modules.validation.engine import ValidationService
from src.api.v1.dependencies.services import get_validation_service
from src.api.v1.models.requests import BatchValidateRequest, ValidateRequest
from src.api.v1.models.responses import (
    ErrorResponse,
    ExamplesResponse,
    FieldsResponse,
    RegexResponse,
    ValidationResponse,
    ValidatorSummary,
)
from shared.utils.logger import setup_logger

logger = setup_logger(__name__)

router = APIRouter()

NOT_FOUND = {404: {"model": ErrorResponse, "description": "Validator not found"}}


def _require_validator(service: ValidationService, validator_id: str) -> None:
    if not service.has(validator_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Validator not found"
        )


@router.get("", response_model=List[ValidatorSummary])
def list_validators(
    fields: Optional[str] = Query(None, description="Comma-separated validator symbols to include"),
    service: ValidationService = Depends(get_validation_service),
):
    """
    List validators with their metadata.

    ``?fields=isbn,vin`` restricts the listing to those validators;
    unknown symbols are ignored.
    """
    metadata = service.metadata()
    wanted = [normalize_symbol(s) for s in (fields or "").split(",") if s.strip()]
    if wanted:
        return [entry for symbol, entry in metadata.items() if symbol in wanted]
    return list(metadata.values())


@router.get("/fields", response_model=FieldsResponse)
def list_fields(service: ValidationService = Depends(get_validation_service)):
    """Validator symbols (alias for the validator listing)."""
    return {"fields": service.fields()}


@router.get("/{validator_id}", response_model=ValidatorSummary, responses=NOT_FOUND)
def get_validator(validator_id: str, service: ValidationService = Depends(get_validation_service)):
    entry = service.metadata(validator_id)
    if entry is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Validator not found")
    return entry


@router.get("/{validator_id}/examples", response_model=ExamplesResponse, responses=NOT_FOUND)
def get_examples(validator_id: str, service: ValidationService = Depends(get_validation_service)):
    examples = service.examples(validator_id)
    if examples is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Validator not found")
    return examples


@router.get("/{validator_id}/regex", response_model=RegexResponse, responses=NOT_FOUND)
def get_regex(validator_id: str, service: ValidationService = Depends(get_validation_service)):
    """Regex source of a validator; null for checksum validators."""
    _require_validator(service, validator_id)
    return {"regex": service.regex(validator_id)}


@router.get("/{validator_id}/jsonld", response_model=Optional[Dict[str, Any]], responses=NOT_FOUND)
def get_jsonld(
    validator_id: str,
    value: Optional[str] = Query(None, description="Value to describe"),
    service: ValidationService = Depends(get_validation_service),
):
    """
    schema.org JSON-LD for a value.

    The value is not validated; use the validate endpoint for that.
    """
    _require_validator(service, validator_id)
    if value is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Value is required")
    return service.jsonld(validator_id, value)


@router.post(
    "/{validator_id}/validate",
    response_model=ValidationResponse,
    responses={
        **NOT_FOUND,
        400: {"model": ErrorResponse, "description": "Value is required"},
        429: {"model": ErrorResponse, "description": "Validation loop detected or rate limit exceeded"},
    },
)
def validate_value(
    validator_id: str,
    payload: Optional[ValidateRequest] = None,
    service: ValidationService = Depends(get_validation_service),
):
    """
    Validate a single value.

    Results are cached; repeated requests for the same value are served
    from the cache.
    """
    _require_validator(service, validator_id)

    if payload is None or payload.value is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Value is required")

    result = service.validate(validator_id, payload.value)

    if result.code == ResultCode.LOOP_DETECTED:
        raise LoopDetected(validator_id, retry_after=service.loop_ttl)
    if result.code == ResultCode.NOT_FOUND:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Validator not found")

    return result.to_dict()


@router.post(
    "/{validator_id}/batch_validate",
    response_model=List[ValidationResponse],
    responses={
        **NOT_FOUND,
        400: {"model": ErrorResponse, "description": "values must be a list"},
    },
)
def batch_validate(
    validator_id: str,
    payload: Optional[BatchValidateRequest] = None,
    service: ValidationService = Depends(get_validation_service),
):
    """Validate several values, preserving order."""
    _require_validator(service, validator_id)

    values = payload.values if payload is not None else None
    batch = service.batch_validate(validator_id, values)
    if batch.errors:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=batch.errors[0])

    logger.debug(f"Batch validated {len(batch)} values with '{validator_id}'")
    return [r.to_dict() for r in batch.results]

"""
Token extraction endpoint.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from typing import Any, Dict, List, Optional

from modules.validation.extraction import TokenExtractor
from src.api.v1.dependencies.services import get_token_extractor
from src.api.v1.models.requests import ExtractRequest
from src.api.v1.models.responses import ErrorResponse

router = APIRouter()


@router.post(
    "/extract",
    response_model=Dict[str, List[Any]],
    responses={400: {"model": ErrorResponse, "description": "Text is required"}},
)
def extract_tokens(
    payload: Optional[ExtractRequest] = None,
    extractor: TokenExtractor = Depends(get_token_extractor),
):
    """
    Extract links, social tokens and identifiers from text.

    Identifiers with a check digit (ISBN, ISSN, VIN, IBAN, card numbers,
    EAN-13, UPC-A) are only returned when the check digit is correct.
    """
    if payload is None or payload.text is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Text is required")
    return extractor.extract(payload.text)

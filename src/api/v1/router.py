"""
API v1 router.

Combines all v1 endpoint routers.
"""

from fastapi import APIRouter, Depends

from src.api.v1.dependencies.rate_limit import check_rate_limit
from src.api.v1.endpoints import extraction, validators

# Create main v1 router; every route counts against the client's budget
api_router = APIRouter(dependencies=[Depends(check_rate_limit)])

# Include endpoint routers
api_router.include_router(validators.router, prefix="/validators", tags=["validators"])
api_router.include_router(extraction.router, tags=["extraction"])

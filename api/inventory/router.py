"""
Inventory search endpoint.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from core.db import ConnectionProvider, ConnectionTarget, InfrastructureFailure, describe_failure, get_provider

from . import schemas, service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/api/search", response_model=schemas.SearchResponse, response_model_exclude_none=True)
async def search(
    request: schemas.SearchRequest,
    provider: ConnectionProvider = Depends(get_provider),
) -> dict | JSONResponse:
    logger.info("search_request keyword=%r", request.keyword)
    target = None
    if request.db_config is not None:
        target = ConnectionTarget(
            host=request.db_config.host or None,
            database=request.db_config.database or None,
        )

    try:
        rows = await service.search(request.keyword, provider=provider, target=target)
    except InfrastructureFailure as exc:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"status": "error", "message": f"Search failed: {describe_failure(exc)}"},
        )

    response = schemas.SearchResponse(data=rows, count=len(rows))
    return response.model_dump(exclude_none=True)

"""
Store login check endpoint.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from core.db import ConnectionProvider, ConnectionTarget, describe_failure, get_provider

from . import dependencies, schemas, security, service

logger = logging.getLogger(__name__)

router = APIRouter()


def _status_response(status_code: int, state: str, message: str) -> JSONResponse:
    body = schemas.StatusResponse(status=state, message=message)
    return JSONResponse(status_code=status_code, content=body.model_dump())


@router.post("/api/test-connection", response_model=schemas.StatusResponse)
async def test_connection(
    request: schemas.ConnectionCheckRequest,
    provider: ConnectionProvider = Depends(get_provider),
    policy: security.CredentialPolicy = Depends(dependencies.get_credential_policy),
) -> JSONResponse:
    logger.info("test_connection host=%s database=%s store_code=%s", request.host, request.database, request.user)
    target = ConnectionTarget(host=request.host or None, database=request.database or None)

    outcome = await service.validate(
        request.user,
        request.password,
        provider=provider,
        policy=policy,
        target=target,
    )

    if isinstance(outcome, service.Accepted):
        return _status_response(
            status.HTTP_200_OK,
            "success",
            f"Connection successful! Store: {outcome.store_code}",
        )
    if isinstance(outcome, service.Rejected):
        return _status_response(status.HTTP_401_UNAUTHORIZED, "error", outcome.reason.capitalize())

    logger.error("test_connection_failed error=%s", outcome.cause)
    return _status_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "error",
        describe_failure(outcome.cause),
    )

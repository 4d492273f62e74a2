"""
Store credential validation.

Outcomes are values, not exceptions: a wrong password (`Rejected`) and a
broken database (`Failed`) must reach the caller as different things.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Union

from core.db import ConnectionProvider, ConnectionTarget, InfrastructureFailure

from . import repository, security

logger = logging.getLogger(__name__)

REASON_EMPTY_STORE_CODE = "empty store code"
REASON_UNSAFE_STORE_CODE = "unsafe store code"
REASON_FORMAT_MISMATCH = "format mismatch"
REASON_INCORRECT = "store code or password incorrect"


@dataclass(frozen=True)
class Accepted:
    store_code: str


@dataclass(frozen=True)
class Rejected:
    reason: str


@dataclass(frozen=True)
class Failed:
    cause: InfrastructureFailure


ValidationOutcome = Union[Accepted, Rejected, Failed]


async def validate(
    store_code: str,
    claimed_password: str,
    *,
    provider: ConnectionProvider,
    policy: security.CredentialPolicy,
    target: ConnectionTarget | None = None,
) -> ValidationOutcome:
    store_code = (store_code or "").strip()
    if not store_code:
        return Rejected(REASON_EMPTY_STORE_CODE)

    if not security.store_code_is_safe(store_code, policy):
        logger.warning("store_code_rejected_by_guard store_code=%r", store_code)
        return Rejected(REASON_UNSAFE_STORE_CODE)

    try:
        password = security.comparison_password(store_code, claimed_password, policy)
    except security.PasswordFormatError:
        logger.info("credential_rejected store_code=%s reason=format", store_code)
        return Rejected(REASON_FORMAT_MISMATCH)

    try:
        found = await repository.find_store_code(
            provider,
            store_code=store_code,
            password=password,
            target=target,
        )
    except InfrastructureFailure as exc:
        return Failed(exc)

    if found is None:
        logger.info("credential_rejected store_code=%s scheme=%s", store_code, policy.scheme.value)
        return Rejected(REASON_INCORRECT)

    logger.info("credential_accepted store_code=%s scheme=%s", store_code, policy.scheme.value)
    return Accepted(found)

"""
Auth dependencies for FastAPI routes.
"""

from __future__ import annotations

from fastapi import Request

from . import security


def get_credential_policy(request: Request) -> security.CredentialPolicy:
    # Resolved once at startup (see `api/main.py`) so a bad scheme fails early.
    policy = getattr(request.app.state, "credential_policy", None)
    if policy is None:
        policy = security.credential_policy()
        request.app.state.credential_policy = policy
    return policy

"""Inbound API key check for the connector.

Empty key = development mode (no auth required).
Non-empty key = must match X-API-Key header.
Outbound calls to ACE carry Keycloak tokens instead; see acelink.tokens.
"""

from __future__ import annotations

import secrets

from fastapi import HTTPException, Security
from fastapi.security import APIKeyHeader

_api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


def make_api_key_checker(expected_key: str):
    """Return a FastAPI dependency that checks the caller's API key."""

    async def check_api_key(
        api_key: str | None = Security(_api_key_header),
    ) -> str | None:
        if not expected_key:
            return None
        if api_key is None or not secrets.compare_digest(
            api_key.encode(), expected_key.encode()
        ):
            raise HTTPException(
                status_code=401,
                detail="Invalid or missing API key",
            )
        return api_key

    return check_api_key

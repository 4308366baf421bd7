from __future__ import annotations

import hashlib

from fastapi import Header, HTTPException, Request, status

IDENTITY_HEADER = "X-Reflect-User-Id"


def _hash_identifier(value: str) -> str:
    return hashlib.sha256(value.encode("utf-8")).hexdigest()[:12]


async def resolve_identity(
    request: Request,
    external_id: str | None = Header(default=None, alias=IDENTITY_HEADER),
) -> str:
    """Return the caller's external identity as asserted by the upstream identity provider.

    Requests without an identity never reach the data layer.
    """

    identity = (external_id or "").strip()
    if not identity:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="authentication required",
        )
    request.state.telemetry_user = _hash_identifier(identity)
    request.state.external_id = identity
    return identity

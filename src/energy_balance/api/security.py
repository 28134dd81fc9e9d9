"""API key dependency for the summary endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import Header, HTTPException, Request, status

from energy_balance.config import requires_api_key

if TYPE_CHECKING:
    from energy_balance.containers import AppContainer

_BEARER_PREFIX = "bearer "


def pick_api_key(x_api_key: str | None, authorization: str | None) -> str:
    """Return the key from ``x-api-key`` or an ``Authorization: Bearer`` header."""
    if x_api_key:
        return x_api_key.strip()
    if authorization and authorization.lower().startswith(_BEARER_PREFIX):
        return authorization[len(_BEARER_PREFIX) :].strip()
    return ""


async def require_api_key(
    request: Request,
    x_api_key: str | None = Header(default=None),
    authorization: str | None = Header(default=None),
) -> None:
    """Reject requests without the configured API key."""
    container: AppContainer = request.app.state.container
    if not requires_api_key(container.settings):
        return
    if pick_api_key(x_api_key, authorization) != container.settings.api_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized. Provide x-api-key or Authorization: Bearer <key>.",
        )

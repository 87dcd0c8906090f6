from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from remote_auth.security.dependencies import get_session_claims

router = APIRouter(tags=["session"])


@router.get("/session")
def current_session(claims: dict[str, Any] = Depends(get_session_claims)) -> dict[str, Any]:
    return claims

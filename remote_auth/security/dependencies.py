from __future__ import annotations

import logging
from typing import Any

from fastapi import Depends, HTTPException, Request, status

from remote_auth.provider import RemoteAuthError, RemoteProvider, get_provider
from remote_auth.settings import get_settings

logger = logging.getLogger(__name__)


def get_remote_provider() -> RemoteProvider:
    return get_provider()


def get_session_token(request: Request) -> str:
    """Read the opaque session token from its cookie."""

    cookie_name = get_settings().token_cookie_name
    token = request.cookies.get(cookie_name)
    if not token:
        logger.info("Missing session cookie path=%s method=%s", request.url.path, request.method)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")
    return token


def get_session_claims(
    token: str = Depends(get_session_token),
    provider: RemoteProvider = Depends(get_remote_provider),
) -> dict[str, Any]:
    """
    Verified claims of the caller's session.

    Any verification failure (bad cookie, unknown key, expired token, backend
    unreachable) is reported as 401; the error kind is only logged.
    """

    try:
        return provider.verify_token(token)
    except RemoteAuthError as exc:
        logger.warning("Session token rejected: %s", type(exc).__name__)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid session") from exc

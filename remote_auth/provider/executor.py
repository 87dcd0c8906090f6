"""Send backend requests with the session's bearer token, refreshing once on 401/403."""

from __future__ import annotations

import logging

import requests

from .errors import FetchError
from .refresh_cache import RefreshCache
from .token_codec import decode_token

logger = logging.getLogger(__name__)

RETRY_STATUSES = frozenset({401, 403})


class AuthenticatedRequestExecutor:
    """
    Issues ``requests.Request`` objects on behalf of a user session.

    The request is left unprepared by the caller so it can be prepared again
    with a different ``Authorization`` header for the single retry.
    """

    def __init__(
        self,
        refresh_cache: RefreshCache,
        session: requests.Session | None = None,
        timeout_seconds: float = 10.0,
    ) -> None:
        self._refresh_cache = refresh_cache
        self._session = session or requests.Session()
        self._timeout = timeout_seconds

    def _send(self, request: requests.Request, opaque: str) -> requests.Response:
        envelope = decode_token(opaque)
        request.headers["Authorization"] = envelope.authorization_header
        prepared = self._session.prepare_request(request)
        try:
            return self._session.send(prepared, timeout=self._timeout)
        except requests.RequestException as e:
            logger.error("Error performing the request method=%s url=%s: %s", request.method, request.url, type(e).__name__)
            raise FetchError("request to the backend failed") from e

    def execute(self, request: requests.Request, opaque: str) -> requests.Response:
        """
        Send ``request`` authorized by ``opaque`` and return the response.

        On 401/403 the token is refreshed and the request sent once more; the
        second response is returned whatever its status. DecodeError,
        FetchError and RefreshError propagate to the caller.
        """
        resp = self._send(request, opaque)
        if resp.status_code not in RETRY_STATUSES:
            return resp

        logger.info("Got status=%s; retrying after token refresh", resp.status_code)
        resp.close()
        new_token = self._refresh_cache.refresh(opaque)
        return self._send(request, new_token)

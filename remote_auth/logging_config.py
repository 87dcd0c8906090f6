from __future__ import annotations

import logging

# requests logs every backend connection through this logger at DEBUG.
_CONNECTION_LOGGER = "urllib3.connectionpool"


def configure_app_logging(level: str = "INFO", provider_level: str | None = None) -> None:
    """
    Set levels for the remote_auth logger tree.

    ``provider_level`` overrides the level of ``remote_auth.provider`` (refreshes,
    key rotation, executor retries) so it can be turned up without making the
    web layer noisy. Connection-pool chatter stays at WARNING unless the
    provider runs at DEBUG. Handlers come from the server (e.g. uvicorn); token
    values are never logged at any level.
    """

    app_level = level.upper()
    effective_provider_level = (provider_level or level).upper()

    logging.getLogger("remote_auth").setLevel(app_level)
    logging.getLogger("remote_auth.provider").setLevel(effective_provider_level)
    logging.getLogger(_CONNECTION_LOGGER).setLevel(
        logging.DEBUG if effective_provider_level == "DEBUG" else logging.WARNING
    )

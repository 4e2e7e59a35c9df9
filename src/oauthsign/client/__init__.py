"""HTTP client module for oauthsign.

:class:`SyncClient` wraps :class:`httpx.Client` with endpoint building,
per-request OAuth 1.0a signing, typed error mapping, streaming and dry-run
mode.

Example::

    from oauthsign.client import SyncClient

    with SyncClient(profile, auth_plugin=plugin) as client:
        data = client.get("account/verify_credentials")
"""

from oauthsign.client.sync_client import SyncClient

__all__ = ["SyncClient"]

"""Bearer tokens from Keycloak.

Uses the OAuth2 resource owner password grant with a confidential
client. The token is cached until shortly before it expires; ACE may
still reject it earlier, in which case the session calls refresh().
"""

from __future__ import annotations

import logging
import threading
import time
from urllib.parse import quote

import httpx

from acelink.errors import TokenError

logger = logging.getLogger("acelink.tokens")

# Seconds before expires_in at which a cached token is no longer handed out.
EXPIRY_SKEW = 30.0


class KeycloakTokenProvider:
    def __init__(
        self,
        client: httpx.Client,
        *,
        keycloak_url: str,
        realm: str,
        client_id: str,
        client_secret: str,
        username: str,
        password: str,
    ):
        self._client = client
        self.token_url = (
            f"{keycloak_url.rstrip('/')}/realms/{quote(realm, safe='')}"
            "/protocol/openid-connect/token"
        )
        self._form = {
            "grant_type": "password",
            "client_id": client_id,
            "client_secret": client_secret,
            "username": username,
            "password": password,
        }
        self._lock = threading.Lock()
        self._token: str | None = None
        self._expires_at: float | None = None

    def token(self) -> str:
        """Return a usable access token, fetching one if needed."""
        with self._lock:
            if self._token is None or self._expired():
                self._fetch()
            return self._token

    def refresh(self, rejected: str | None = None) -> str:
        """Replace a token ACE rejected.

        When rejected is given and another caller already replaced it,
        the newer token is returned without asking Keycloak again.
        """
        with self._lock:
            if rejected is None or self._token == rejected:
                self._fetch()
            return self._token

    def _expired(self) -> bool:
        if self._expires_at is None:
            return False
        return time.monotonic() >= self._expires_at - EXPIRY_SKEW

    def _fetch(self) -> None:
        logger.info("Requesting access token from %s", self.token_url)
        try:
            response = self._client.post(
                self.token_url,
                data=self._form,
                headers={"Accept": "application/json"},
            )
        except httpx.HTTPError as exc:
            raise TokenError(f"Identity provider unreachable: {exc}") from exc

        if response.status_code != 200:
            raise TokenError(
                f"Identity provider refused token request: {response.status_code}"
            )
        try:
            payload = response.json()
        except ValueError as exc:
            raise TokenError("Identity provider returned no access_token") from exc
        if not isinstance(payload, dict) or not isinstance(
            payload.get("access_token"), str
        ):
            raise TokenError("Identity provider returned no access_token")

        expires_in = payload.get("expires_in")
        try:
            lifetime = float(expires_in) if expires_in is not None else None
        except (TypeError, ValueError) as exc:
            raise TokenError(
                f"Identity provider returned invalid expires_in: {expires_in!r}"
            ) from exc

        self._token = payload["access_token"]
        self._expires_at = time.monotonic() + lifetime if lifetime is not None else None
        logger.info("Access token acquired (expires in %ss)", expires_in)

"""Access token holder for the Strava club sync.

The refresh token, client id and client secret are fixed for the life of
the process. The access token starts from configuration and is replaced
whenever Strava reports it as expired.
"""

from __future__ import annotations

import threading

import httpx
from loguru import logger

from app.core.logger import mask_token


class CredentialManager:
    """Thread-safe holder for the current Strava access token.

    Concurrent refreshes are allowed; the last successful one wins. Every
    refresh yields a valid token, so readers only need to tolerate the
    token changing between two requests.
    """

    def __init__(
        self,
        *,
        access_token: str,
        refresh_token: str,
        client_id: str,
        client_secret: str,
        token_url: str = "https://www.strava.com/oauth/token",
        timeout: float = 10.0,
    ) -> None:
        self._lock = threading.Lock()
        self._access_token = access_token
        self._refresh_token = refresh_token
        self._client_id = client_id
        self._client_secret = client_secret
        self._token_url = token_url
        self._timeout = timeout

    @property
    def access_token(self) -> str:
        with self._lock:
            return self._access_token

    def refresh(self) -> str | None:
        """Exchange the refresh token for a new access token.

        Returns:
            The new access token, or None if the exchange failed. Failures
            are logged, never raised, and never retried here.
        """
        logger.info("[TOKEN_REFRESH] Requesting new access token")
        try:
            resp = httpx.post(
                self._token_url,
                data={
                    "client_id": self._client_id,
                    "client_secret": self._client_secret,
                    "refresh_token": self._refresh_token,
                    "grant_type": "refresh_token",
                },
                timeout=self._timeout,
            )
            resp.raise_for_status()
            token_data = resp.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"[TOKEN_REFRESH] Token refresh failed: {e.response.status_code} - {e.response.text}")
            return None
        except httpx.HTTPError as e:
            logger.error(f"[TOKEN_REFRESH] Token refresh request error: {e}")
            return None
        except ValueError as e:
            logger.error(f"[TOKEN_REFRESH] Token endpoint returned invalid JSON: {e}")
            return None

        new_access_token = token_data.get("access_token") if isinstance(token_data, dict) else None
        if not isinstance(new_access_token, str) or not new_access_token:
            logger.error(f"[TOKEN_REFRESH] Token response has no usable access_token: {type(new_access_token)}")
            return None

        with self._lock:
            self._access_token = new_access_token

        logger.info(f"[TOKEN_REFRESH] Access token refreshed: {mask_token(new_access_token)}")
        return new_access_token

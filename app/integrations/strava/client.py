from __future__ import annotations

import httpx
from loguru import logger
from pydantic import ValidationError

from app.integrations.strava.credentials import CredentialManager
from app.integrations.strava.errors import StravaAuthError
from app.integrations.strava.schemas import StravaClubActivity

STRAVA_BASE_URL = "https://www.strava.com/api/v3"

# Refresh-and-retry cycles allowed per fetch after a 401.
MAX_AUTH_RETRIES = 1


class StravaClubClient:
    """Thin client for the club activities endpoint.

    - Single page only (page 1)
    - One token refresh + one retry on 401
    - Non-auth failures degrade to an empty page
    """

    def __init__(
        self,
        *,
        credentials: CredentialManager,
        club_id: str,
        base_url: str = STRAVA_BASE_URL,
        per_page: int = 200,
        timeout: float = 15.0,
    ) -> None:
        self._credentials = credentials
        self._club_id = club_id
        self._base_url = base_url.rstrip("/")
        self._per_page = per_page
        self._timeout = timeout

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._credentials.access_token}"}

    def fetch_club_activities(self) -> list[StravaClubActivity]:
        """Fetch the first page of recent club activities.

        Returns:
            Parsed activities; empty when the club has none or the request
            failed for a non-auth reason.

        Raises:
            StravaAuthError: If the token could not be refreshed, or the
                request is still unauthorized after one refresh.
        """
        url = f"{self._base_url}/clubs/{self._club_id}/activities"
        auth_retries = 0

        while True:
            try:
                resp = httpx.get(
                    url,
                    headers=self._headers(),
                    params={"page": 1, "per_page": self._per_page},
                    timeout=self._timeout,
                )
            except httpx.HTTPError as e:
                logger.error(f"[STRAVA_CLIENT] Error fetching club activities: {e}")
                return []

            if resp.status_code != httpx.codes.UNAUTHORIZED:
                break

            if auth_retries >= MAX_AUTH_RETRIES:
                logger.error("[STRAVA_CLIENT] Still unauthorized after token refresh, giving up")
                raise StravaAuthError("Unauthorized after access token refresh")

            auth_retries += 1
            logger.info("[STRAVA_CLIENT] Access token expired, refreshing token...")
            if self._credentials.refresh() is None:
                raise StravaAuthError("Unable to refresh access token")

        try:
            resp.raise_for_status()
            payload = resp.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"[STRAVA_CLIENT] Club activities request failed: {e.response.status_code} - {e.response.text}")
            return []
        except ValueError as e:
            logger.error(f"[STRAVA_CLIENT] Club activities response is not valid JSON: {e}")
            return []

        if not payload:
            return []
        if not isinstance(payload, list):
            logger.error(f"[STRAVA_CLIENT] Unexpected club activities payload type: {type(payload).__name__}")
            return []

        activities: list[StravaClubActivity] = []
        for raw in payload:
            try:
                activities.append(StravaClubActivity(**raw, raw=raw))
            except (TypeError, ValidationError) as e:
                logger.warning(f"[STRAVA_CLIENT] Dropping unparseable club activity: {e}")

        logger.info(f"[STRAVA_CLIENT] Fetched {len(activities)} club activities")
        return activities

"""Google OAuth code exchange."""

from __future__ import annotations

import logging
from urllib.parse import urlencode

import requests

from .config import Settings
from .errors import AuthError
from .schemas import GoogleProfile

logger = logging.getLogger(__name__)

AUTH_URL = "https://accounts.google.com/o/oauth2/auth"
TOKEN_URL = "https://oauth2.googleapis.com/token"
USERINFO_URL = "https://www.googleapis.com/oauth2/v2/userinfo"
SCOPES = ("https://www.googleapis.com/auth/userinfo.email", "https://www.googleapis.com/auth/userinfo.profile")


class GoogleOAuth:
    def __init__(self, settings: Settings, timeout: float | None = None) -> None:
        self.settings = settings
        self.timeout = timeout if timeout is not None else settings.db_timeout_seconds

    def redirect_url(self, state: str) -> str:
        query = {
            "client_id": self.settings.google_client_id,
            "redirect_uri": self.settings.google_redirect_url,
            "response_type": "code",
            "scope": " ".join(SCOPES),
            "access_type": "offline",
            "state": state,
        }
        return f"{AUTH_URL}?{urlencode(query)}"

    def exchange(self, code: str) -> GoogleProfile:
        try:
            token_resp = requests.post(
                TOKEN_URL,
                data={
                    "code": code,
                    "client_id": self.settings.google_client_id,
                    "client_secret": self.settings.google_client_secret,
                    "redirect_uri": self.settings.google_redirect_url,
                    "grant_type": "authorization_code",
                },
                timeout=self.timeout,
            )
            token_resp.raise_for_status()
            access_token = token_resp.json()["access_token"]
        except (requests.RequestException, KeyError, ValueError) as exc:
            logger.warning("code exchange failed: %s", exc)
            raise AuthError("code exchange failed") from exc

        try:
            info = requests.get(
                USERINFO_URL,
                headers={"Authorization": f"Bearer {access_token}"},
                timeout=self.timeout,
            )
            info.raise_for_status()
            return GoogleProfile.model_validate(info.json())
        except (requests.RequestException, ValueError) as exc:
            logger.warning("failed to get user info: %s", exc)
            raise AuthError("failed to get user info") from exc

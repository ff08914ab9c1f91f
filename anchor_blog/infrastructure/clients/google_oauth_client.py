from __future__ import annotations

from dataclasses import dataclass
import logging
from urllib.parse import urlencode

import httpx
from google.auth.transport import requests
from google.oauth2 import id_token

from anchor_blog.application.dto.auth import GoogleIdentityInfo
from anchor_blog.application.ports.google_oauth_port import GoogleOauthPort
from anchor_blog.domain.exceptions import GoogleTokenValidationError


logger = logging.getLogger(__name__)

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_SCOPES = (
    "openid",
    "https://www.googleapis.com/auth/userinfo.email",
    "https://www.googleapis.com/auth/userinfo.profile",
)


@dataclass(frozen=True)
class GoogleOauthClientSettings:
    client_id: str
    client_secret: str
    redirect_uri: str
    timeout_seconds: float = 10.0


class GoogleOauthClient(GoogleOauthPort):
    def __init__(
        self,
        settings: GoogleOauthClientSettings,
        *,
        http_client: httpx.Client | None = None,
        id_token_verifier=None,
    ):
        self._settings = settings
        self._http_client = http_client
        self._id_token_verifier = id_token_verifier or id_token_verify

    def build_authorization_url(self, *, state: str) -> str:
        query = urlencode(
            {
                "client_id": self._settings.client_id,
                "redirect_uri": self._settings.redirect_uri,
                "response_type": "code",
                "scope": " ".join(GOOGLE_SCOPES),
                "state": state,
                "access_type": "online",
                "prompt": "select_account",
            }
        )
        return f"{GOOGLE_AUTH_URL}?{query}"

    def fetch_identity(self, *, code: str) -> GoogleIdentityInfo:
        if not code:
            raise GoogleTokenValidationError("Missing authorization code.")

        raw_id_token = self._exchange_code(code)
        try:
            payload = self._id_token_verifier(token=raw_id_token, audience=self._settings.client_id)
        except Exception as exc:  # noqa: BLE001
            raise GoogleTokenValidationError("Invalid Google id_token.") from exc

        email = payload.get("email")
        subject = payload.get("sub")
        if not email or not subject:
            raise GoogleTokenValidationError("Google id_token missing required claims.")

        email_verified_raw = payload.get("email_verified", False)
        email_verified = bool(email_verified_raw)
        if isinstance(email_verified_raw, str):
            email_verified = email_verified_raw.lower() == "true"

        picture = payload.get("picture") if isinstance(payload.get("picture"), str) else None
        return GoogleIdentityInfo(
            subject=str(subject),
            email=str(email),
            email_verified=email_verified,
            first_name=str(payload.get("given_name") or ""),
            last_name=str(payload.get("family_name") or ""),
            picture_url=picture,
        )

    def _exchange_code(self, code: str) -> str:
        form = {
            "code": code,
            "client_id": self._settings.client_id,
            "client_secret": self._settings.client_secret,
            "redirect_uri": self._settings.redirect_uri,
            "grant_type": "authorization_code",
        }
        try:
            if self._http_client is not None:
                response = self._http_client.post(GOOGLE_TOKEN_URL, data=form)
            else:
                with httpx.Client(timeout=self._settings.timeout_seconds) as client:
                    response = client.post(GOOGLE_TOKEN_URL, data=form)
        except httpx.HTTPError as exc:
            logger.warning("google_oauth_client: token_exchange_failed error=%s", exc)
            raise GoogleTokenValidationError("Failed to exchange authorization code.") from exc

        if response.status_code != 200:
            logger.warning(
                "google_oauth_client: token_exchange_rejected status=%s",
                response.status_code,
            )
            raise GoogleTokenValidationError("Failed to exchange authorization code.")

        try:
            raw_id_token = response.json().get("id_token")
        except ValueError as exc:
            raise GoogleTokenValidationError("Google token response is not JSON.") from exc
        if not raw_id_token:
            raise GoogleTokenValidationError("Google token response has no id_token.")
        return raw_id_token


def id_token_verify(*, token: str, audience: str) -> dict:
    request = requests.Request()
    return id_token.verify_oauth2_token(token, request, audience)
